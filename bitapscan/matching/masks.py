############################################################################
# Copyright (c) 2023-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

"""
Fixed-width bit words and per-symbol alphabet masks.

All bit vectors are numpy.uint64 values, so bits shifted past the high end
are dropped rather than growing the integer.
"""

import numpy as np

WORD_TYPE = np.uint64
WORD_BITS = 64
# one bit per needle position plus the always-set low bit
MAX_NEEDLE_LENGTH = WORD_BITS - 1

ZERO = WORD_TYPE(0)
ONE = WORD_TYPE(1)
ALL_ONES = ~ZERO
# every bit set except bit 0: the empty prefix always matches
INITIAL_STATE = ~ONE


def shift_left(word):
    return word << ONE


def match_bit(needle_len):
    return ONE << WORD_TYPE(needle_len)


class AlphabetMaskTable:
    """
    Masks of every alphabet symbol against a mirrored needle.

    For symbol c, bit p is cleared when needle[len - 1 - p] == c, then the
    whole mask is shifted by one, leaving bit 0 clear for the
    empty prefix. Lowest four bits of the masks for the needle "ACG":

        A : 0 1 1 0
        C : 1 0 1 0
        G : 1 1 0 0
        T : 1 1 1 0

    The hidden sentinel symbol never occurs in the needle, so its mask is all
    ones shifted by one.
    """

    def __init__(self, needle, alphabet):
        self.needle_len = len(needle)
        self.masks = {}
        for symbol in alphabet:
            self.masks[symbol] = self._symbol_mask(needle, symbol)
        self.sentinel_mask = shift_left(ALL_ONES)

    @staticmethod
    def _symbol_mask(needle, symbol):
        mask = ALL_ONES
        needle_len = len(needle)
        for pos in range(needle_len):
            if needle[needle_len - 1 - pos] == symbol:
                mask &= ~(ONE << WORD_TYPE(pos))
        return shift_left(mask)

    def __getitem__(self, symbol):
        return self.masks[symbol]

    def __contains__(self, symbol):
        return symbol in self.masks

    def __len__(self):
        return len(self.masks)
