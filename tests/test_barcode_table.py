############################################################################
# Copyright (c) 2025 University of Helsinki
# All Rights Reserved
# See file LICENSE for details.
############################################################################

import pytest
from bitapscan.barcode_table import load_barcodes


@pytest.fixture
def barcode_file(tmp_path):
    def write(content):
        path = tmp_path / "barcodes.tsv"
        path.write_text(content)
        return str(path)
    return write


class TestLoadBarcodes:
    """Test barcode table parsing."""

    def test_simple(self, barcode_file):
        barcodes = load_barcodes(barcode_file("BC01\tACTGACTG\nBC02\tTTGGCCAA\n"))
        assert barcodes == {"BC01": "ACTGACTG", "BC02": "TTGGCCAA"}

    def test_file_order_kept(self, barcode_file):
        barcodes = load_barcodes(barcode_file("z\tAAAA\na\tCCCC\nm\tGGGG\n"))
        assert list(barcodes.keys()) == ["z", "a", "m"]

    def test_comments_and_empty_lines(self, barcode_file):
        barcodes = load_barcodes(barcode_file("#name\tsequence\n\nBC01\tACTG\n\n"))
        assert barcodes == {"BC01": "ACTG"}

    def test_uppercase(self, barcode_file):
        barcodes = load_barcodes(barcode_file("BC01\tactg\n"))
        assert barcodes["BC01"] == "ACTG"

    def test_extra_columns_ignored(self, barcode_file):
        barcodes = load_barcodes(barcode_file("BC01\tACTG\twell A1\n"))
        assert barcodes == {"BC01": "ACTG"}

    def test_missing_sequence_skipped(self, barcode_file):
        barcodes = load_barcodes(barcode_file("BC01\nBC02\t\nBC03\tGGCC\n"))
        assert barcodes == {"BC03": "GGCC"}

    def test_windows_line_endings(self, barcode_file):
        barcodes = load_barcodes(barcode_file("BC01\tACTG\r\nBC02\tGGCC\r\n"))
        assert barcodes == {"BC01": "ACTG", "BC02": "GGCC"}

    def test_duplicate_name_last_wins(self, barcode_file):
        barcodes = load_barcodes(barcode_file("BC01\tACTG\nBC01\tGGCC\n"))
        assert barcodes == {"BC01": "GGCC"}

    def test_empty_file(self, barcode_file):
        assert load_barcodes(barcode_file("")) == {}
