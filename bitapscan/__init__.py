############################################################################
# Copyright (c) 2023-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

"""
Barcode search in sequencing reads with bit-parallel approximate matching.

Subpackages:
    matching: Baeza-Yates-Gonnet and Wu-Manber matching engine
"""

from .matching import (
    Alphabet,
    Bitap,
    find_positions,
    BitapError,
    NeedleTooLong,
    UndefinedSymbol,
    InvalidDistance,
)
from .barcode_table import load_barcodes
from .find_barcodes import BarcodeSearcher, BarcodeMatch, MatchStats

__version__ = "1.0.0"

__all__ = [
    # Matching engine
    'Alphabet',
    'Bitap',
    'find_positions',
    # Errors
    'BitapError',
    'NeedleTooLong',
    'UndefinedSymbol',
    'InvalidDistance',
    # Barcode search
    'load_barcodes',
    'BarcodeSearcher',
    'BarcodeMatch',
    'MatchStats',
]
