"""Shared fixtures: a small two-chromosome reference and interval records."""

import pytest

from lknet import IntervalRecord, ReferenceStore

CHR1 = "ACGTACGTACGTACGTACGTACGTACGTACGTACGTACGT"  # 40 bp
CHR2 = "GGGGCCCCAAAATTTTGGGGCCCCAAAATTTT"  # 32 bp


@pytest.fixture
def fasta_dir(tmp_path):
    d = tmp_path / "genome"
    d.mkdir()
    (d / "chr1.fasta").write_text(">chr1 test\n" + CHR1[:20] + "\n" + CHR1[20:].lower() + "\n")
    (d / "chr2.fasta").write_text(">chr2\n" + CHR2 + "\n>extra\nAAAA\n")
    (d / "notes.txt").write_text("not a sequence file\n")
    return d


@pytest.fixture
def store():
    return ReferenceStore.from_sequences({"chr1": CHR1, "chr2": CHR2})


@pytest.fixture
def records():
    return [
        IntervalRecord("chr1", 1, 12, 0.5),
        IntervalRecord("chr2", 5, 20, -1.25),
        IntervalRecord("chrX", 1, 10, 2.0),
        IntervalRecord("chr1", 35, 45, 3.0),
        IntervalRecord("chr2", 1, 32, 0.75),
    ]
