############################################################################
# Copyright (c) 2023-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

import logging
from typing import Dict

logger = logging.getLogger('BitapScan')


def load_barcodes(in_file) -> Dict[str, str]:
    """
    Load named barcodes from a tab-separated file.

    Format:
    BC01    ACTGACTGACTG

    Lines starting with # and empty lines are ignored, as are lines without
    a barcode sequence. When a name occurs more than once, the last sequence wins.

    Returns:
        Dict mapping barcode name to upper-case barcode sequence, in file order
    """
    barcodes = {}
    logger.info("Loading barcodes from " + in_file)
    with open(in_file) as barcode_handle:
        for line_num, l in enumerate(barcode_handle, start=1):
            if l.startswith("#") or not l.strip():
                continue
            v = l.rstrip("\r\n").split("\t")
            if len(v) < 2 or not v[1].strip():
                logger.warning("Line %d of %s has no barcode sequence, skipping" % (line_num, in_file))
                continue
            name, seq = v[0].strip(), v[1].strip().upper()
            if name in barcodes:
                logger.warning("Barcode %s is defined more than once in %s, using the last sequence" % (name, in_file))
            barcodes[name] = seq

    logger.debug("Loaded %d barcodes" % len(barcodes))
    return barcodes
