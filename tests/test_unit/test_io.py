"""Tests for reading reference sequences."""

import pytest

from varevo.exceptions import InvalidInputError
from varevo.io.fasta import read_fasta
from varevo.sequences.reference import ReferenceSequence


class TestFastaReader:
    """Test FASTA format parsing."""

    def test_parse_wrapped(self, fasta_file):
        refs = read_fasta(fasta_file)

        assert [r.name for r in refs] == ["chr1", "chr2"]
        assert refs[0].sequence == "TCAGTCAGTCAGTCAGTCAG"
        assert refs[1].sequence == "GGCCAATTGGCCAATT"
        assert len(refs[1]) == 16

    def test_accepts_str_path(self, fasta_file):
        assert len(read_fasta(str(fasta_file))) == 2

    def test_blank_lines(self, tmp_path):
        path = tmp_path / "blank.fasta"
        path.write_text(">a\n\nTCAG\n\n>b\nGG\n")
        refs = read_fasta(path)
        assert [r.sequence for r in refs] == ["TCAG", "GG"]

    def test_no_sequences(self, tmp_path):
        path = tmp_path / "empty.fasta"
        path.write_text("\n")
        with pytest.raises(InvalidInputError, match="No sequences"):
            read_fasta(path)

    def test_data_before_header(self, tmp_path):
        path = tmp_path / "bad.fasta"
        path.write_text("TCAG\n>a\nTCAG\n")
        with pytest.raises(InvalidInputError, match="before first header"):
            read_fasta(path)

    def test_invalid_nucleotide(self, tmp_path):
        path = tmp_path / "ambiguous.fasta"
        path.write_text(">a\nTCNAG\n")
        with pytest.raises(InvalidInputError, match="invalid nucleotide 'N'"):
            read_fasta(path)

    def test_empty_record(self, tmp_path):
        path = tmp_path / "empty_record.fasta"
        path.write_text(">a\n>b\nTCAG\n")
        with pytest.raises(InvalidInputError, match="must not be empty"):
            read_fasta(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_fasta(tmp_path / "missing.fasta")


class TestReferenceSequence:
    """Reference sequence validation."""

    def test_upper_cased(self):
        ref = ReferenceSequence("tcag", name="x")
        assert ref.sequence == "TCAG"
        assert ref.size() == 4
        assert ref[1] == "C"
        assert str(ref) == "TCAG"

    def test_frozen(self):
        ref = ReferenceSequence("TCAG")
        with pytest.raises(AttributeError):
            ref.sequence = "GGGG"
