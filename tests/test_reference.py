"""Tests for reference loading."""

import dataclasses
import logging

import pytest

from lknet import ChromosomeSequence, MalformedInputFileError, ReferenceStore, load_reference

from .conftest import CHR1, CHR2


class TestChromosomeSequence:
    def test_length_cached_and_uppercased(self):
        chrom = ChromosomeSequence("chrA", "acgtN")
        assert chrom.sequence == "ACGTN"
        assert chrom.length == 5

    def test_immutable(self):
        chrom = ChromosomeSequence("chrA", "ACGT")
        with pytest.raises(dataclasses.FrozenInstanceError):
            chrom.sequence = "TTTT"


class TestLoadReference:
    def test_keys_by_file_stem(self, fasta_dir):
        chroms = load_reference(fasta_dir)
        assert sorted(chroms) == ["chr1", "chr2"]
        assert chroms["chr1"].sequence == CHR1
        assert chroms["chr1"].length == len(CHR1)

    def test_only_first_record_used(self, fasta_dir, caplog):
        with caplog.at_level(logging.INFO, logger="lknet.reference"):
            chroms = load_reference(fasta_dir)
        assert chroms["chr2"].sequence == CHR2
        assert "more than one record" in caplog.text

    def test_empty_file_skipped(self, fasta_dir, caplog):
        (fasta_dir / "chr3.fasta").write_text("")
        with caplog.at_level(logging.WARNING, logger="lknet.reference"):
            chroms = load_reference(fasta_dir)
        assert "chr3" not in chroms
        assert "chr3.fasta" in caplog.text

    def test_custom_suffixes(self, fasta_dir):
        (fasta_dir / "chr9.fa").write_text(">chr9\nACGT\n")
        assert "chr9" not in load_reference(fasta_dir)
        assert "chr9" in load_reference(fasta_dir, suffixes=(".fa", ".fasta"))

    def test_malformed_file_is_fatal(self, fasta_dir):
        (fasta_dir / "chr1.fasta").write_text("this is not fasta\nACGT\n")
        with pytest.raises(MalformedInputFileError, match="chr1.fasta"):
            load_reference(fasta_dir)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(MalformedInputFileError):
            load_reference(tmp_path / "nope")


class TestReferenceStore:
    def test_load(self, fasta_dir):
        store = ReferenceStore.load(fasta_dir)
        assert len(store) == 2
        assert "chr1" in store
        assert "chrX" not in store
        assert store["chr2"].length == len(CHR2)
        assert sorted(store.names) == ["chr1", "chr2"]

    def test_from_sequences(self):
        store = ReferenceStore.from_sequences({"c": "acg"})
        assert store["c"].sequence == "ACG"
        assert list(store) == ["c"]
