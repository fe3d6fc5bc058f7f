############################################################################
# Copyright (c) 2023-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

"""Input validation errors raised by the matching engine."""


class BitapError(ValueError):
    """Base class for all matching engine errors."""
    pass


class NeedleTooLong(BitapError):
    def __init__(self, needle_len: int, max_len: int):
        self.needle_len = needle_len
        self.max_len = max_len
        super().__init__("Needle of length %d exceeds maximum supported length %d" % (needle_len, max_len))

    def __reduce__(self):
        return self.__class__, (self.needle_len, self.max_len)


class UndefinedSymbol(BitapError):
    def __init__(self, symbol, position: int):
        self.symbol = symbol
        self.position = position
        super().__init__("Symbol %r at position %d is not in the alphabet" % (symbol, position))

    def __reduce__(self):
        return self.__class__, (self.symbol, self.position)


class InvalidDistance(BitapError):
    def __init__(self, distance, max_distance: int):
        self.distance = distance
        self.max_distance = max_distance
        super().__init__("Edit distance must be an integer between 0 and %d, got %r" % (max_distance, distance))

    def __reduce__(self):
        return self.__class__, (self.distance, self.max_distance)
