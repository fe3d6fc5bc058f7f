############################################################################
# Copyright (c) 2023-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

"""
Bit-parallel string matching.

Exact (Baeza-Yates-Gonnet) and approximate (Wu-Manber) search of a needle of
at most MAX_NEEDLE_LENGTH symbols in a haystack over a fixed alphabet.
"""

from .alphabet import Alphabet, DNA, DNA_N
from .bitap import Bitap, find_positions, check_distance, MAX_DISTANCE
from .errors import BitapError, NeedleTooLong, UndefinedSymbol, InvalidDistance
from .masks import AlphabetMaskTable, WORD_BITS, MAX_NEEDLE_LENGTH

__all__ = [
    'Alphabet',
    'DNA',
    'DNA_N',
    'AlphabetMaskTable',
    'Bitap',
    'find_positions',
    'check_distance',
    'BitapError',
    'NeedleTooLong',
    'UndefinedSymbol',
    'InvalidDistance',
    'WORD_BITS',
    'MAX_NEEDLE_LENGTH',
    'MAX_DISTANCE',
]
