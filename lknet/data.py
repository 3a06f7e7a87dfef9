"""Dataset building and splitting."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import torch
from torch.utils.data import Dataset

from .encoding import count_unmapped, encode_many
from .exceptions import EmptyDatasetError
from .resolver import IntervalRecord

logger = logging.getLogger(__name__)

DEFAULT_SEED = 42
DEFAULT_TRAIN_FRAC = 0.8


@dataclass
class EncodedDataset:
    """Encoded sequences X [n, L] and labels y [n], row-aligned.

    ``records`` holds the resolved interval records the rows came from.
    """

    X: torch.Tensor
    y: torch.Tensor
    records: List[IntervalRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.X.shape[0] != self.y.shape[0]:
            raise ValueError(f"X and y length mismatch: {self.X.shape[0]} vs {self.y.shape[0]}")

    def __len__(self) -> int:
        return int(self.X.shape[0])

    @property
    def max_length(self) -> int:
        return int(self.X.shape[1])

    def subset(self, indices: Sequence[int]) -> "EncodedDataset":
        idx = torch.as_tensor(list(indices), dtype=torch.long)
        records = [self.records[i] for i in idx.tolist()] if self.records else []
        return EncodedDataset(X=self.X[idx], y=self.y[idx], records=records)


def build_dataset(records: Sequence[IntervalRecord]) -> EncodedDataset:
    """Drop unresolved records, then encode and pad the rest to a common length.

    Raises EmptyDatasetError if no record has a sequence.
    """
    kept = [r for r in records if r.sequence is not None]
    n_dropped = len(records) - len(kept)
    if n_dropped:
        logger.info("Dropped %d unresolved interval(s)", n_dropped)
    if not kept:
        raise EmptyDatasetError(f"None of the {len(records)} interval(s) resolved to a sequence")

    seqs = [r.sequence for r in kept]
    max_length = max(len(s) for s in seqs)

    n_unmapped = sum(count_unmapped(s) for s in seqs)
    if n_unmapped:
        logger.warning("%d non-ACGT position(s) encoded as padding", n_unmapped)

    X = encode_many(seqs, max_length)
    y = torch.tensor([r.label for r in kept], dtype=torch.float32)
    logger.info("Built dataset: n=%d, max_length=%d", len(kept), max_length)
    return EncodedDataset(X=X, y=y, records=kept)


def split_indices(
    n: int,
    *,
    train_frac: float = DEFAULT_TRAIN_FRAC,
    seed: int = DEFAULT_SEED,
) -> Tuple[List[int], List[int]]:
    """Random train/test split of ``range(n)``.

    The first ``floor(train_frac * n)`` entries of a seeded permutation are
    the train indices; the rest are the test indices.
    """
    if n <= 0:
        raise ValueError("n must be > 0")
    if not 0.0 < train_frac <= 1.0:
        raise ValueError(f"train_frac must be in (0, 1]. Got: {train_frac}")

    g = torch.Generator()
    g.manual_seed(seed)
    perm = torch.randperm(n, generator=g).tolist()

    # Round away float noise (0.29 * 100 == 28.999...) before flooring.
    n_train = math.floor(round(train_frac * n, 9))
    return perm[:n_train], perm[n_train:]


def train_test_split(
    dataset: EncodedDataset,
    *,
    train_frac: float = DEFAULT_TRAIN_FRAC,
    seed: int = DEFAULT_SEED,
) -> Tuple[EncodedDataset, EncodedDataset]:
    train_idx, test_idx = split_indices(len(dataset), train_frac=train_frac, seed=seed)
    return dataset.subset(train_idx), dataset.subset(test_idx)


class TensorRegressionDataset(Dataset):
    """(codes -> continuous target) pairs for a DataLoader."""

    def __init__(self, X: torch.Tensor, y: torch.Tensor):
        if len(X) != len(y):
            raise ValueError(f"X and y length mismatch: {len(X)} vs {len(y)}")
        self.X = X.long()
        self.y = y.float()

    def __len__(self) -> int:
        return len(self.X)

    def __getitem__(self, idx: int) -> Tuple[torch.Tensor, torch.Tensor]:
        return self.X[idx], self.y[idx]
