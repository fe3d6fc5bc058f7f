############################################################################
# Copyright (c) 2024-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

import logging
import sys
from enum import IntEnum


class BitapScanExitCode(IntEnum):
    """Exit codes for BitapScan."""

    # Success
    SUCCESS = 0

    # Input/Output Errors (1-19)
    INPUT_FILE_NOT_FOUND = 1
    NO_INPUT_DATA = 6
    INVALID_FILE_FORMAT = 9

    # Configuration Errors (20-39)
    INVALID_PARAMETER = 20

    # Barcode Search Errors (80-89)
    BARCODE_TOO_LONG = 80
    UNDEFINED_SYMBOL = 81

    # Runtime Errors (90-99)
    UNCAUGHT_EXCEPTION = 99


def exit_with_code(code: BitapScanExitCode, message: str = None):
    """
    Exit with a specific error code and optional message.

    Parameters
    ----------
    code : BitapScanExitCode
        The exit code to use
    message : str, optional
        Additional error message to log
    """
    if message:
        logger = logging.getLogger('BitapScan')
        if code == BitapScanExitCode.SUCCESS:
            logger.info(message)
        else:
            logger.critical(message)
    sys.exit(code)
