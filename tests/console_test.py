import os
import subprocess
import sys

import pytest

SOURCE_DIR = os.path.dirname(os.path.dirname(os.path.realpath(__file__)))
SCRIPT = os.path.join(SOURCE_DIR, "bitapscan_find_barcodes.py")


def run_script(*options):
    return subprocess.run([sys.executable, SCRIPT] + list(options), capture_output=True, cwd=SOURCE_DIR)


@pytest.fixture
def input_files(tmp_path):
    barcodes = tmp_path / "barcodes.tsv"
    barcodes.write_text("BC1\tATGCATTAT\nBC2\tGGGCCC\n")
    reads = tmp_path / "reads.fastq"
    reads.write_text("@read1\nTGATGATTATTAGTAGATGC\n+\nIIIIIIIIIIIIIIIIIIII\n"
                     "@read2\nAAAAAAAAAA\n+\nIIIIIIIIII\n")
    return str(barcodes), str(reads)


def test_run_without_parameters():
    result = run_script()
    assert result.returncode == 2
    assert b"usage" in result.stderr


@pytest.mark.parametrize("option", ["-h", "--help"])
def test_help(option):
    result = run_script(option)
    assert result.returncode == 0
    assert b"usage" in result.stdout
    assert b"--distance" in result.stdout
    assert b"--debug" not in result.stdout


@pytest.mark.parametrize("threads", ["1", "2"])
def test_clean_run(tmp_path, input_files, threads):
    barcodes, reads = input_files
    out_prefix = str(tmp_path / "out" / "sample")
    result = run_script("-b", barcodes, "-i", reads, "-o", out_prefix, "-d", "1", "-t", threads)

    assert result.returncode == 0
    with open(out_prefix + ".barcode_matches.tsv") as f:
        lines = f.read().splitlines()
    assert lines[1:] == ["read1\tTGATGATTATTAGTAGATGC\tBC1\tATGCATTAT\t2"]
    with open(out_prefix + ".no_matches.fasta") as f:
        assert f.read().startswith(">read2\n")
    assert os.path.exists(out_prefix + ".barcode_matches.tsv.stats")


def test_invalid_distance(tmp_path, input_files):
    barcodes, reads = input_files
    result = run_script("-b", barcodes, "-i", reads, "-o", str(tmp_path / "out"), "-d", "-1")
    assert result.returncode == 20


def test_missing_input(tmp_path, input_files):
    barcodes, _ = input_files
    result = run_script("-b", barcodes, "-i", str(tmp_path / "missing.fastq"), "-o", str(tmp_path / "out"), "-d", "0")
    assert result.returncode == 1


def test_undefined_symbol(tmp_path, input_files):
    barcodes, _ = input_files
    reads = tmp_path / "ambiguous.fasta"
    reads.write_text(">read1\nACGTRYACGT\n")
    result = run_script("-b", barcodes, "-i", str(reads), "-o", str(tmp_path / "out"), "-d", "0", "-t", "1")
    assert result.returncode == 81
    assert b"--skip_undefined" in result.stdout

    result = run_script("-b", barcodes, "-i", str(reads), "-o", str(tmp_path / "out"), "-d", "0", "-t", "1",
                        "--skip_undefined")
    assert result.returncode == 0
