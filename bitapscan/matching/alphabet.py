############################################################################
# Copyright (c) 2023-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

DNA = "ACGT"
DNA_N = "ACGTN"


class Alphabet:
    """
    Frozen copy of a caller-supplied symbol collection.

    The end-of-haystack sentinel is not a member: it is handled by the mask
    table, so the caller's collection is neither mutated nor extended.
    """

    def __init__(self, symbols):
        if isinstance(symbols, Alphabet):
            self.symbols = symbols.symbols
        else:
            self.symbols = frozenset(symbols)

    def __contains__(self, symbol):
        return symbol in self.symbols

    def __iter__(self):
        return iter(self.symbols)

    def __len__(self):
        return len(self.symbols)

    def __eq__(self, other):
        if not isinstance(other, Alphabet):
            return NotImplemented
        return self.symbols == other.symbols

    def __hash__(self):
        return hash(self.symbols)

    def __repr__(self):
        return "Alphabet(%s)" % "".join(sorted(map(str, self.symbols)))
