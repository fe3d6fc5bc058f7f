#!/usr/bin/env python3
#
############################################################################
# Copyright (c) 2023-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

"""
Search sequencing reads for known barcodes allowing a bounded number of edits.

This is a CLI wrapper around bitapscan.find_barcodes.
"""

import argparse
import logging
import os
import sys
import time
from traceback import print_exc

from bitapscan.common import set_logger
from bitapscan.error_codes import BitapScanExitCode, exit_with_code
from bitapscan.matching import InvalidDistance, UndefinedSymbol, check_distance
from bitapscan.find_barcodes import (
    process_single_thread,
    process_in_parallel,
    DEFAULT_ALPHABET,
)

logger = logging.getLogger('BitapScan')


def parse_args(sys_argv):
    def add_hidden_option(*args, **kwargs):  # not listed in --help
        kwargs['help'] = argparse.SUPPRESS
        parser.add_argument(*args, **kwargs)

    parser = argparse.ArgumentParser(formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--output", "-o", type=str, help="output prefix name", required=True)
    parser.add_argument("--barcodes", "-b", type=str, help="tab-separated file with barcode names and sequences",
                        required=True)
    parser.add_argument("--input", "-i", nargs='+', type=str, help="input reads in [gzipped] FASTA, FASTQ, BAM, SAM",
                        required=True)
    parser.add_argument("--distance", "-d", type=int, help="maximum edit (Levenshtein) distance", required=True)
    parser.add_argument("--alphabet", type=str, help="symbols allowed in reads (%s)" % DEFAULT_ALPHABET,
                        default=DEFAULT_ALPHABET)
    parser.add_argument("--skip_undefined", action='store_true', default=False,
                        help="skip reads with symbols outside the alphabet instead of stopping")
    parser.add_argument("--threads", "-t", type=int, help="threads to use (8)", default=8)
    parser.add_argument("--tmp_dir", type=str, help="folder for temporary files")
    add_hidden_option('--debug', action='store_true', default=False, help='Debug log output.')

    args = parser.parse_args(sys_argv)
    args.alphabet = args.alphabet.upper()
    args.output_tsv = None
    args.no_matches = None
    return args


def check_args(args):
    """Validate parameters and set up output file lists based on input files."""
    try:
        check_distance(args.distance)
    except InvalidDistance as e:
        exit_with_code(BitapScanExitCode.INVALID_PARAMETER, str(e))
    if args.threads < 1:
        exit_with_code(BitapScanExitCode.INVALID_PARAMETER, "Number of threads must be positive")

    for input_file in args.input:
        if not os.path.isfile(input_file):
            exit_with_code(BitapScanExitCode.INPUT_FILE_NOT_FOUND, "Input file %s does not exist" % input_file)

    num_files = len(args.input)
    if args.output_tsv is None:
        if num_files == 1:
            args.output_tsv = [args.output + ".barcode_matches.tsv"]
        else:
            args.output_tsv = [args.output + "_%d.barcode_matches.tsv" % i for i in range(num_files)]

    if args.no_matches is None:
        if num_files == 1:
            args.no_matches = [args.output + ".no_matches.fasta"]
        else:
            args.no_matches = [args.output + "_%d.no_matches.fasta" % i for i in range(num_files)]


def main(sys_argv):
    start_time = time.time()
    args = parse_args(sys_argv)
    set_logger(logger, args.debug)
    check_args(args)

    out_dir = os.path.dirname(args.output)
    if out_dir and not os.path.exists(out_dir):
        os.makedirs(out_dir, exist_ok=True)

    try:
        if args.threads == 1:
            process_single_thread(args)
        else:
            process_in_parallel(args)
    except UndefinedSymbol as e:
        exit_with_code(BitapScanExitCode.UNDEFINED_SYMBOL,
                       "%s; use --alphabet to extend the alphabet or --skip_undefined to skip such reads" % str(e))

    logger.info("Barcode search finished in %.1f seconds" % (time.time() - start_time))


if __name__ == "__main__":
    # stuff only to run when not called via 'import' here
    try:
        main(sys.argv[1:])
    except SystemExit:
        raise
    except Exception:
        print_exc()
        sys.exit(BitapScanExitCode.UNCAUGHT_EXCEPTION)
