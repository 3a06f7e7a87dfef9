"""Reference chromosome sequences.

Each reference file holds one chromosome in FASTA format and is keyed by its
file stem, so ``chr17.fasta`` answers lookups for ``chr17``. Only the first
record of a file is used.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Mapping, Sequence

from Bio import SeqIO

from .exceptions import MalformedInputFileError

logger = logging.getLogger(__name__)

DEFAULT_SUFFIXES = (".fasta",)


@dataclass(frozen=True)
class ChromosomeSequence:
    name: str
    sequence: str
    length: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sequence", self.sequence.upper())
        object.__setattr__(self, "length", len(self.sequence))


def _read_first_record(path: Path) -> ChromosomeSequence | None:
    if path.stat().st_size == 0:
        logger.warning("Empty sequence file %s, skipping", path)
        return None

    try:
        with path.open("r") as handle:
            records = SeqIO.parse(handle, format="fasta")
            first = next(records, None)
            extra = next(records, None)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedInputFileError(f"Could not parse FASTA file {path}: {e}") from e

    if first is None:
        logger.warning("No sequence records in %s, skipping", path)
        return None
    if extra is not None:
        logger.info("%s holds more than one record; using only '%s'", path, first.id)

    return ChromosomeSequence(name=path.stem, sequence=str(first.seq))


def load_reference(
    directory: str | Path,
    *,
    suffixes: Sequence[str] = DEFAULT_SUFFIXES,
) -> Dict[str, ChromosomeSequence]:
    """Load every sequence file in ``directory`` into a name -> sequence map.

    Files are matched by extension (case-insensitive) and visited in name
    order. Empty files are skipped with a warning; unparseable files raise
    MalformedInputFileError.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise MalformedInputFileError(f"Reference directory not found: {directory}")

    wanted = {s.lower() for s in suffixes}
    paths = sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in wanted)
    if not paths:
        logger.warning("No %s files found in %s", "/".join(sorted(wanted)), directory)

    chroms: Dict[str, ChromosomeSequence] = {}
    for path in paths:
        chrom = _read_first_record(path)
        if chrom is None:
            continue
        chroms[chrom.name] = chrom
        logger.info("Loaded %s (%d bp) from %s", chrom.name, chrom.length, path.name)

    return chroms


class ReferenceStore(Mapping[str, ChromosomeSequence]):
    """Read-only mapping of chromosome name to ChromosomeSequence."""

    def __init__(self, chroms: Mapping[str, ChromosomeSequence]):
        self._chroms = dict(chroms)

    @classmethod
    def load(cls, directory: str | Path, *, suffixes: Sequence[str] = DEFAULT_SUFFIXES) -> "ReferenceStore":
        return cls(load_reference(directory, suffixes=suffixes))

    @classmethod
    def from_sequences(cls, seqs: Mapping[str, str]) -> "ReferenceStore":
        """Build a store from in-memory strings."""
        return cls({name: ChromosomeSequence(name=name, sequence=s) for name, s in seqs.items()})

    @property
    def names(self) -> list[str]:
        return list(self._chroms)

    def __getitem__(self, name: str) -> ChromosomeSequence:
        return self._chroms[name]

    def __contains__(self, name: object) -> bool:
        return name in self._chroms

    def __iter__(self) -> Iterator[str]:
        return iter(self._chroms)

    def __len__(self) -> int:
        return len(self._chroms)

    def __repr__(self) -> str:
        return f"ReferenceStore({', '.join(self._chroms)})"
