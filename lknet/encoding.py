"""Sequence encoding utilities.

Sequences are encoded as integer codes A/C/G/T -> 1/2/3/4 and right-padded
with 0 to a common length. Any other character (N, IUPAC ambiguity codes)
also becomes 0, so ambiguous positions look exactly like padding to the
model. The model expands codes to a channel-first one-hot with an all-zero
column for code 0.
"""

from __future__ import annotations

from typing import Dict, Sequence

import torch
import torch.nn.functional as F


PAD_ID = 0

_BASE_TO_ID: Dict[str, int] = {
    "A": 1,
    "C": 2,
    "G": 3,
    "T": 4,
}

N_BASES = len(_BASE_TO_ID)


def n2id(base: str) -> int:
    """Map a nucleotide to its integer code; anything outside ACGT is PAD_ID."""
    return _BASE_TO_ID.get(base.upper(), PAD_ID)


def count_unmapped(seq: str) -> int:
    """Number of positions in ``seq`` that encode to PAD_ID."""
    return sum(1 for ch in seq.upper() if ch not in _BASE_TO_ID)


def encode_seq(seq: str, max_length: int) -> torch.Tensor:
    """Encode one sequence as a long tensor of shape [max_length].

    Raises ValueError if the sequence is longer than ``max_length``.
    """
    seq = seq.strip().upper()
    if len(seq) > max_length:
        raise ValueError(f"Sequence of length {len(seq)} exceeds max_length={max_length}")

    ids = [n2id(ch) for ch in seq]
    ids += [PAD_ID] * (max_length - len(ids))
    return torch.tensor(ids, dtype=torch.long)


def encode_many(seqs: Sequence[str], max_length: int) -> torch.Tensor:
    """Encode a batch of sequences into a tensor [B, max_length]."""
    if not seqs:
        return torch.zeros((0, max_length), dtype=torch.long)
    return torch.stack([encode_seq(s, max_length) for s in seqs], dim=0)


def to_one_hot(codes: torch.Tensor) -> torch.Tensor:
    """Expand integer codes [B, L] to a float one-hot tensor [B, 4, L].

    Code 0 (padding or unmapped base) gives an all-zero column.
    """
    one_hot = F.one_hot(codes.long(), num_classes=N_BASES + 1).float()  # [B, L, 5]
    return one_hot[..., 1:].transpose(1, 2).contiguous()
