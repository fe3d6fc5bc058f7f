############################################################################
# Copyright (c) 2023-2026 University of Helsinki
# # All Rights Reserved
# See file LICENSE for details.
############################################################################

"""
Barcode search in sequencing reads.

Every read is searched for every barcode from a barcode table within a given
edit distance. Reads with at least one barcode occurrence are reported in a
TSV file, one line per read and barcode; reads without any occurrence are
written to a separate FASTA file.
"""

import concurrent.futures
import gc
import gzip
import logging
import multiprocessing
import os
import random
import shutil
import sys
from collections import defaultdict
from typing import Dict, List

import pysam
from Bio import SeqIO, Seq, SeqRecord

from .barcode_table import load_barcodes
from .common import setup_worker_logging, _get_log_params, list_to_str
from .error_codes import BitapScanExitCode, exit_with_code
from .matching import Bitap, Alphabet, DNA_N, NeedleTooLong, UndefinedSymbol, check_distance

logger = logging.getLogger('BitapScan')

READ_CHUNK_SIZE = 100000
DEFAULT_ALPHABET = DNA_N


def stats_file_name(file_name):
    return file_name + ".stats"


class BarcodeMatch:
    """All occurrences of a single barcode in a single read."""

    def __init__(self, read_id: str, read_sequence: str, barcode_name: str, barcode_sequence: str,
                 positions: List[int]):
        self.read_id = read_id
        self.read_sequence = read_sequence
        self.barcode_name = barcode_name
        self.barcode_sequence = barcode_sequence
        self.positions = positions

    @staticmethod
    def header():
        return "#read_id\tread_sequence\tbarcode_name\tbarcode_sequence\tpositions"

    def __str__(self):
        return "%s\t%s\t%s\t%s\t%s" % (self.read_id, self.read_sequence, self.barcode_name,
                                       self.barcode_sequence, list_to_str(self.positions))


class MatchStats:
    def __init__(self, barcode_names=()):
        self.read_count = 0
        self.matched_count = 0
        self.unmatched_count = 0
        self.skipped_count = 0
        self.barcode_counts = {name: 0 for name in barcode_names}

    def add_read(self, matches: List[BarcodeMatch]):
        self.read_count += 1
        if matches:
            self.matched_count += 1
        else:
            self.unmatched_count += 1
        for m in matches:
            self.barcode_counts[m.barcode_name] = self.barcode_counts.get(m.barcode_name, 0) + 1

    def add_skipped(self):
        self.read_count += 1
        self.skipped_count += 1

    def __str__(self):
        human_readable_str = ("Total reads\t%d\nReads with barcodes\t%d\nReads without barcodes\t%d\n"
                              "Skipped reads\t%d\n" %
                              (self.read_count, self.matched_count, self.unmatched_count, self.skipped_count))
        for name, count in self.barcode_counts.items():
            human_readable_str += "Barcode %s\t%d\n" % (name, count)
        return human_readable_str

    def __iter__(self):
        yield "Total reads: %d" % self.read_count
        yield "Reads with barcodes: %d" % self.matched_count
        yield "Reads without barcodes: %d" % self.unmatched_count
        yield "Skipped reads: %d" % self.skipped_count
        for name, count in self.barcode_counts.items():
            yield "Barcode %s: %d" % (name, count)


class BarcodeSearcher:
    """
    Searches reads for a fixed set of barcodes.

    One matcher is built per barcode and reused for every read by rebinding
    the read sequence, so alphabet masks are computed only once per barcode.
    """

    def __init__(self, barcodes: Dict[str, str], max_distance: int = 0, alphabet=DEFAULT_ALPHABET):
        self.max_distance = check_distance(max_distance)
        self.alphabet = Alphabet(alphabet)
        self.barcodes = dict(barcodes)
        self.matchers = {}
        for name, seq in self.barcodes.items():
            self.matchers[name] = Bitap(seq, self.alphabet)

    def barcode_names(self):
        return list(self.barcodes.keys())

    def find_barcodes(self, read_id: str, read_sequence: str) -> List[BarcodeMatch]:
        matches = []
        for name, matcher in self.matchers.items():
            matcher.rebind(read_sequence)
            if self.max_distance == 0:
                positions = matcher.exact_match()
            else:
                positions = matcher.approximate_match(self.max_distance)
            if positions:
                matches.append(BarcodeMatch(read_id, read_sequence, name, self.barcodes[name], positions))
        return matches


class SimpleReadStorage:
    def __init__(self):
        self.read_ids = []
        self.sequences = []

    def add(self, read_id, seq):
        self.read_ids.append(read_id)
        self.sequences.append(seq)

    def clear(self):
        self.read_ids.clear()
        self.sequences.clear()

    def __len__(self):
        return len(self.read_ids)

    def __iter__(self):
        for i in range(len(self.read_ids)):
            yield self.read_ids[i], self.sequences[i]

    def __getstate__(self):
        return self.read_ids, self.sequences

    def __setstate__(self, state):
        self.read_ids = state[0]
        self.sequences = state[1]


class BarcodeFinder:
    def __init__(self, output_file_name, no_matches_file_name, barcode_searcher, header=False,
                 skip_undefined=False):
        self.barcode_searcher = barcode_searcher
        self.output_file_name = output_file_name
        self.output_file = open(self.output_file_name, "w")
        self.no_matches_file_name = no_matches_file_name
        self.no_matches_file = open(self.no_matches_file_name, "w")
        self.skip_undefined = skip_undefined
        if header:
            self.output_file.write(BarcodeMatch.header() + "\n")
        self.match_stat = MatchStats(barcode_searcher.barcode_names())

    def get_stats(self):
        return self.match_stat

    def dump_stats(self, file_name=None):
        if not file_name:
            file_name = stats_file_name(self.output_file_name)
        with open(file_name, "w") as stat_out:
            stat_out.write(str(self.match_stat))

    def close(self):
        self.output_file.close()
        self.no_matches_file.close()

    def __del__(self):
        if not self.output_file.closed:
            self.output_file.close()
        if not self.no_matches_file.closed:
            self.no_matches_file.close()

    def process(self, input_file):
        logger.info("Processing " + input_file)
        counter = 0
        for read_id, seq in read_iterator(input_file):
            if counter % 100 == 0:
                sys.stdout.write("Processed %d reads\r" % counter)
            counter += 1
            self.process_read(read_id, seq)
        logger.info("Finished " + input_file)
        return counter

    def process_read(self, read_id, read_sequence):
        logger.debug("==== %s ====" % read_id)
        if read_sequence is None:
            logger.warning("Skipping read %s without sequence" % read_id)
            self.match_stat.add_skipped()
            return
        read_sequence = read_sequence.upper()
        try:
            matches = self.barcode_searcher.find_barcodes(read_id, read_sequence)
        except UndefinedSymbol as e:
            if not self.skip_undefined:
                raise
            logger.warning("Skipping read %s: %s" % (read_id, str(e)))
            self.match_stat.add_skipped()
            return

        self.match_stat.add_read(matches)
        if not matches:
            record = SeqRecord.SeqRecord(seq=Seq.Seq(read_sequence), id=read_id, description="")
            SeqIO.write([record], self.no_matches_file, "fasta")
            return
        for m in matches:
            self.output_file.write("%s\n" % str(m))

    def process_chunk(self, read_chunk):
        counter = 0
        for read_id, seq in read_chunk:
            self.process_read(read_id, seq)
            counter += 1
        return counter


def _fastx_reads(input_file, file_format, gzipped=False):
    with (gzip.open(input_file, "rt") if gzipped else open(input_file, "r")) as handle:
        for r in SeqIO.parse(handle, file_format):
            yield r.id, str(r.seq)


def _bam_reads(input_file):
    with pysam.AlignmentFile(input_file, "r", check_sq=False) as bam_handle:
        # unaligned files have no @SQ lines and cannot be iterated directly
        for r in bam_handle.fetch(until_eof=True):
            if r.is_secondary or r.is_supplementary:
                continue
            yield r.query_name, r.query_sequence


def read_iterator(input_file):
    """
    Iterate over (read_id, sequence) pairs of a [gzipped] FASTA/FASTQ or a SAM/BAM file.
    """
    fname, outer_ext = os.path.splitext(os.path.basename(input_file))
    low_ext = outer_ext.lower()

    gzipped = False
    if low_ext in ['.gz', '.gzip']:
        gzipped = True
        fname, outer_ext = os.path.splitext(fname)
        low_ext = outer_ext.lower()

    if low_ext in ['.fq', '.fastq']:
        return _fastx_reads(input_file, "fastq", gzipped)
    elif low_ext in ['.fa', '.fasta', '.fna']:
        return _fastx_reads(input_file, "fasta", gzipped)
    elif low_ext in ['.bam', '.sam']:
        return _bam_reads(input_file)

    exit_with_code(BitapScanExitCode.INVALID_FILE_FORMAT, "Unknown file format " + input_file)


def read_chunk_reader(reads):
    current_chunk = SimpleReadStorage()
    for read_id, seq in reads:
        current_chunk.add(read_id, seq)
        if len(current_chunk) >= READ_CHUNK_SIZE:
            yield current_chunk
            current_chunk = SimpleReadStorage()
    yield current_chunk


def process_chunk(barcode_searcher, read_chunk, output_file, no_matches_file, num, skip_undefined=False):
    output_file += "_" + str(num)
    no_matches_file += "_" + str(num)

    barcode_finder = BarcodeFinder(output_file, no_matches_file, barcode_searcher, skip_undefined=skip_undefined)
    counter = barcode_finder.process_chunk(read_chunk)
    read_chunk.clear()
    barcode_finder.dump_stats()
    barcode_finder.close()

    return output_file, no_matches_file, counter


def create_barcode_searcher(args):
    if not os.path.isfile(args.barcodes):
        exit_with_code(BitapScanExitCode.INPUT_FILE_NOT_FOUND, "Barcode file %s does not exist" % args.barcodes)

    barcodes = load_barcodes(args.barcodes)
    if not barcodes:
        exit_with_code(BitapScanExitCode.NO_INPUT_DATA, "No barcodes were found in %s" % args.barcodes)
    logger.info("Loaded %d barcodes" % len(barcodes))

    try:
        barcode_searcher = BarcodeSearcher(barcodes, args.distance, args.alphabet)
    except NeedleTooLong as e:
        exit_with_code(BitapScanExitCode.BARCODE_TOO_LONG, str(e))

    logger.info("Searching for barcodes with at most %d edit(s) using alphabet %s" %
                (barcode_searcher.max_distance, "".join(sorted(barcode_searcher.alphabet))))
    return barcode_searcher


def process_single_thread(args):
    barcode_searcher = create_barcode_searcher(args)

    for idx, (input_file, output_tsv, no_matches) in enumerate(zip(args.input, args.output_tsv, args.no_matches)):
        if len(args.input) > 1:
            logger.info("Processing file %d/%d: %s" % (idx + 1, len(args.input), input_file))
        barcode_finder = BarcodeFinder(output_tsv, no_matches, barcode_searcher, header=True,
                                       skip_undefined=args.skip_undefined)
        try:
            barcode_finder.process(input_file)
        finally:
            barcode_finder.close()
        barcode_finder.dump_stats()
        for stat_line in barcode_finder.get_stats():
            logger.info("  " + stat_line)
    logger.info("Finished barcode search")


def _process_single_file_in_parallel(input_file, output_tsv, no_matches, args, barcode_searcher):
    """Process a single file in parallel (internal helper function)."""
    logger.info("Processing " + input_file)
    read_chunk_gen = read_chunk_reader(read_iterator(input_file))

    tmp_dir = "barcode_search_%x" % random.randint(0, 1 << 32)
    while os.path.exists(tmp_dir):
        tmp_dir = "barcode_search_%x" % random.randint(0, 1 << 32)
    if args.tmp_dir:
        tmp_dir = os.path.join(args.tmp_dir, tmp_dir)
    else:
        tmp_dir = os.path.join(os.path.dirname(args.output), tmp_dir)
    os.makedirs(tmp_dir)

    tmp_barcode_file = os.path.join(tmp_dir, "bc")
    tmp_no_matches_file = os.path.join(tmp_dir, "no_matches")
    chunk_counter = 0
    future_results = []
    output_files = []

    gc.collect()
    mp_context = multiprocessing.get_context('spawn')
    log_file, log_level = _get_log_params()
    executor_kwargs = {
        'max_workers': args.threads,
        'mp_context': mp_context,
        'initializer': setup_worker_logging,
        'initargs': (log_file, log_level),
    }
    if sys.version_info >= (3, 11):
        executor_kwargs['max_tasks_per_child'] = 20
    try:
        with concurrent.futures.ProcessPoolExecutor(**executor_kwargs) as proc:
            for chunk in read_chunk_gen:
                future_results.append(proc.submit(process_chunk,
                                                  barcode_searcher,
                                                  chunk,
                                                  tmp_barcode_file,
                                                  tmp_no_matches_file,
                                                  chunk_counter,
                                                  args.skip_undefined))
                chunk_counter += 1
                if chunk_counter >= args.threads:
                    break

            reads_left = True
            read_counter = 0
            while future_results:
                completed_features, _ = concurrent.futures.wait(future_results,
                                                                return_when=concurrent.futures.FIRST_COMPLETED)
                for c in completed_features:
                    if c.exception() is not None:
                        raise c.exception()
                    tmp_out_file, tmp_no_matches, read_count = c.result()
                    read_counter += read_count
                    sys.stdout.write("Processed %d reads\r" % read_counter)
                    output_files.append((tmp_out_file, tmp_no_matches))
                    future_results.remove(c)
                    if reads_left:
                        try:
                            chunk = next(read_chunk_gen)
                            future_results.append(proc.submit(process_chunk,
                                                              barcode_searcher,
                                                              chunk,
                                                              tmp_barcode_file,
                                                              tmp_no_matches_file,
                                                              chunk_counter,
                                                              args.skip_undefined))
                            chunk_counter += 1
                        except StopIteration:
                            reads_left = False
    except Exception:
        shutil.rmtree(tmp_dir, ignore_errors=True)
        raise

    stat_dict = defaultdict(int)
    with open(output_tsv, "w") as final_output_tsv, open(no_matches, "w") as final_no_matches:
        final_output_tsv.write(BarcodeMatch.header() + "\n")
        for tmp_file, tmp_no_matches in output_files:
            with open(tmp_file, "r") as tmp_handle:
                shutil.copyfileobj(tmp_handle, final_output_tsv)
            with open(tmp_no_matches, "r") as tmp_handle:
                shutil.copyfileobj(tmp_handle, final_no_matches)
            for l in open(stats_file_name(tmp_file), "r"):
                v = l.strip().split("\t")
                if len(v) != 2:
                    continue
                stat_dict[v[0]] += int(v[1])

    with open(stats_file_name(output_tsv), "w") as out_stats:
        for k, v in stat_dict.items():
            logger.info("  %s: %d" % (k, v))
            out_stats.write("%s\t%d\n" % (k, v))
    shutil.rmtree(tmp_dir)
    logger.info("Finished " + input_file)


def process_in_parallel(args):
    """Process input files in parallel."""
    barcode_searcher = create_barcode_searcher(args)

    for idx, (input_file, output_tsv, no_matches) in enumerate(zip(args.input, args.output_tsv, args.no_matches)):
        if len(args.input) > 1:
            logger.info("Processing file %d/%d: %s" % (idx + 1, len(args.input), input_file))
        _process_single_file_in_parallel(input_file, output_tsv, no_matches, args, barcode_searcher)

    logger.info("Finished barcode search")
