"""Tests for input file checks."""

import pytest

from hybsearch.errors import FilesystemError
from hybsearch.validation import detect_sequence_format, read_sequence_file, validate_sequence_file


class TestValidateSequenceFile:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FilesystemError, match="not found"):
            validate_sequence_file(tmp_path / "missing.gb")

    def test_directory(self, tmp_path):
        with pytest.raises(FilesystemError, match="not a file"):
            validate_sequence_file(tmp_path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.fasta"
        path.write_text("")

        with pytest.raises(FilesystemError, match="empty"):
            validate_sequence_file(path)


class TestReadSequenceFile:
    def test_reads_whole_file(self, tmp_path):
        path = tmp_path / "seq.fasta"
        path.write_text(">a\nACGT\n>b\nTTGA\n", encoding="utf-8")

        assert read_sequence_file(path) == ">a\nACGT\n>b\nTTGA\n"

    def test_rejects_non_utf8(self, tmp_path):
        path = tmp_path / "seq.fasta"
        path.write_bytes(b">a\n\xff\xfe\n")

        with pytest.raises(FilesystemError, match="UTF-8"):
            read_sequence_file(path)


@pytest.mark.parametrize("text, expected", [
    ("LOCUS       AB000001\n", "genbank"),
    ("\n\n>seq1 description\nACGT\n", "fasta"),
    ("ACGTACGT\n", None),
    ("", None),
])
def test_detect_sequence_format(text, expected):
    assert detect_sequence_format(text) == expected
