"""Resolve genomic intervals to nucleotide sequences.

Coordinates are 1-based and inclusive on both ends. A record that cannot be
resolved keeps ``sequence=None`` (NOT_FOUND) and is dropped later by the
dataset builder; resolution problems are logged, never raised.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

import pandas as pd

from .exceptions import MalformedInputFileError
from .reference import ChromosomeSequence

logger = logging.getLogger(__name__)

NOT_FOUND = None

DEFAULT_COLUMNS: Mapping[str, str] = {
    "chrom": "CHRM",
    "start": "START",
    "end": "END",
    "label": "DELTALK",
}


@dataclass(frozen=True)
class IntervalRecord:
    chrom: str
    start: int
    end: int
    label: float
    sequence: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.sequence is not NOT_FOUND

    def with_sequence(self, sequence: Optional[str]) -> "IntervalRecord":
        return replace(self, sequence=sequence)


class IntervalResolver:
    """Look up interval sequences in a chromosome mapping."""

    def __init__(self, store: Mapping[str, ChromosomeSequence]):
        self.store = store
        self.n_unknown_chrom = 0
        self.n_out_of_bounds = 0

    def resolve(self, chrom: str, start: int, end: int) -> Optional[str]:
        if chrom not in self.store:
            self.n_unknown_chrom += 1
            logger.warning("Unknown chromosome '%s', dropping interval %d-%d", chrom, start, end)
            return NOT_FOUND

        length = self.store[chrom].length
        if not (start >= 1 and end <= length and start <= end):
            self.n_out_of_bounds += 1
            logger.warning(
                "Interval %s:%d-%d out of bounds (chromosome length %d), dropping",
                chrom,
                start,
                end,
                length,
            )
            return NOT_FOUND

        return self.store[chrom].sequence[start - 1 : end].upper()

    def resolve_records(self, records: Iterable[IntervalRecord]) -> List[IntervalRecord]:
        """Return copies of ``records`` with their sequences filled in, in input order."""
        out = [r.with_sequence(self.resolve(r.chrom, r.start, r.end)) for r in records]
        n_ok = sum(r.resolved for r in out)
        logger.info(
            "Resolved %d/%d intervals (unknown chromosome: %d, out of bounds: %d)",
            n_ok,
            len(out),
            self.n_unknown_chrom,
            self.n_out_of_bounds,
        )
        return out


def read_interval_table(
    path: str | Path,
    *,
    sep: Optional[str] = None,
    columns: Mapping[str, str] = DEFAULT_COLUMNS,
) -> List[IntervalRecord]:
    """Read the interval table (CHRM, START, END, DELTALK) into IntervalRecords.

    ``sep=None`` sniffs the delimiter, which handles the semicolon-separated
    exports. Labels written with a decimal comma are accepted.
    """
    path = Path(path)
    try:
        if sep is None:
            df = pd.read_csv(path, sep=None, engine="python")
        else:
            df = pd.read_csv(path, sep=sep)
    except (OSError, ValueError, csv.Error, pd.errors.ParserError) as e:
        raise MalformedInputFileError(f"Could not read interval table {path}: {e}") from e

    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in columns.values() if c not in df.columns]
    if missing:
        raise MalformedInputFileError(f"Missing column(s) {missing} in {path}; found: {list(df.columns)}")

    labels = df[columns["label"]]
    if not pd.api.types.is_numeric_dtype(labels):
        labels = labels.astype(str).str.strip().str.replace(",", ".", regex=False)

    try:
        chroms = df[columns["chrom"]].astype(str).str.strip().tolist()
        starts = pd.to_numeric(df[columns["start"]], errors="raise")
        ends = pd.to_numeric(df[columns["end"]], errors="raise")
        values = pd.to_numeric(labels, errors="raise").astype(float)
    except (TypeError, ValueError) as e:
        raise MalformedInputFileError(f"Non-numeric coordinates or labels in {path}: {e}") from e

    # Line numbers count the header as line 1.
    missing_rows = starts.isna() | ends.isna() | values.isna()
    if missing_rows.any():
        lines = (df.index[missing_rows] + 2).tolist()
        raise MalformedInputFileError(f"Empty coordinate or label cell(s) in {path} at line(s) {lines}")

    fractional = (starts % 1 != 0) | (ends % 1 != 0)
    if fractional.any():
        lines = (df.index[fractional] + 2).tolist()
        raise MalformedInputFileError(f"Non-integer coordinates in {path} at line(s) {lines}")

    starts = starts.astype(int).tolist()
    ends = ends.astype(int).tolist()
    values = values.tolist()

    return [
        IntervalRecord(chrom=c, start=s, end=e, label=v)
        for c, s, e, v in zip(chroms, starts, ends, values)
    ]
