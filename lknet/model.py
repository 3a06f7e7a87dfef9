"""CNN regressor for ΔLK prediction.

Input:  integer-coded DNA, shape [B, L] (codes 0..4, 0 = padding/unknown)
Output: scalar per sequence, shape [B]

The model one-hot expands the codes itself, so callers only ever handle the
integer matrix produced by the dataset builder.
"""

from __future__ import annotations

import math
from typing import Callable, List

import torch
import torch.nn as nn
import torch.nn.functional as F

from .encoding import N_BASES, to_one_hot


def initialize_weights(m: nn.Module) -> None:
    if isinstance(m, nn.Conv1d):
        n = m.kernel_size[0] * m.out_channels
        m.weight.data.normal_(0, math.sqrt(2 / n))
        if m.bias is not None:
            nn.init.constant_(m.bias.data, 0)
    elif isinstance(m, nn.BatchNorm1d):
        nn.init.constant_(m.weight.data, 1)
        nn.init.constant_(m.bias.data, 0)
    elif isinstance(m, nn.Linear):
        nn.init.xavier_uniform_(m.weight.data)
        if m.bias is not None:
            nn.init.constant_(m.bias.data, 0)


class ConvBlock(nn.Module):
    """Conv1d + BatchNorm + activation, then max-pooling.

    Pooling is skipped when the input is already shorter than the pool
    window, so short sequences pass through deep stacks.
    """

    def __init__(
        self,
        in_ch: int,
        out_ch: int,
        ks: int,
        pool_size: int,
        activation: Callable[[], nn.Module],
    ):
        super().__init__()
        self.pool_size = pool_size
        self.block = nn.Sequential(
            nn.Conv1d(
                in_channels=in_ch,
                out_channels=out_ch,
                kernel_size=ks,
                padding="same",
                bias=False,
            ),
            nn.BatchNorm1d(out_ch),
            activation(),
        )

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        x = self.block(x)
        if self.pool_size > 1 and x.shape[-1] >= self.pool_size:
            x = F.max_pool1d(x, self.pool_size)
        return x


class LKNet(nn.Module):
    def __init__(
        self,
        conv_channels: List[int],
        kernel_sizes: List[int],
        pool_sizes: List[int],
        dense_units: List[int],
        dropout: float = 0.0,
        activation: Callable[[], nn.Module] = nn.ReLU,
    ):
        super().__init__()
        if not (len(conv_channels) == len(kernel_sizes) == len(pool_sizes)):
            raise ValueError("conv_channels, kernel_sizes and pool_sizes must have the same length")
        if not conv_channels:
            raise ValueError("at least one conv block is required")

        blocks: List[nn.Module] = []
        in_ch = N_BASES
        for out_ch, ks, pool_sz in zip(conv_channels, kernel_sizes, pool_sizes):
            blocks.append(ConvBlock(in_ch, out_ch, ks, pool_sz, activation))
            in_ch = out_ch
        self.main = nn.Sequential(*blocks)

        # Global average + max pooling, concatenated
        head: List[nn.Module] = []
        in_features = in_ch * 2
        for units in dense_units:
            head += [nn.Linear(in_features, units), activation(), nn.Dropout(dropout)]
            in_features = units
        head.append(nn.Linear(in_features, 1))
        self.head = nn.Sequential(*head)

        self.apply(initialize_weights)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        x = to_one_hot(x)
        x = self.main(x)
        x = torch.cat([F.adaptive_avg_pool1d(x, 1), F.adaptive_max_pool1d(x, 1)], dim=1)
        x = x.squeeze(-1)
        x = self.head(x)
        x = x.squeeze(-1)
        return x
