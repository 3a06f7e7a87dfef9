"""Configuration helpers.

The network architecture, the training loop settings and the pipeline inputs
are plain dataclasses, so a run can be described by one JSON file:

    {
      "table": "LK_data.csv",
      "fasta_dir": ".",
      "seed": 42,
      "model": {"conv_channels": [64, 128, 128], "dropout": 0.2},
      "train": {"epochs": 100, "early_stopping": {"patience": 10}}
    }

``from_dict`` ignores unknown keys and turns lists back into tuples.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .model import LKNet


def _pick(cls, dt: Mapping[str, Any]) -> Dict[str, Any]:
    # Pull only the keys the dataclass declares.
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in dt.items() if k in names}


@dataclass
class ModelConfig:
    # Convolutional stack: one entry per conv block
    conv_channels: Tuple[int, ...] = (64, 128, 128)
    kernel_sizes: Tuple[int, ...] = (9, 7, 5)
    pool_sizes: Tuple[int, ...] = (2, 2, 2)

    # Dense head
    dense_units: Tuple[int, ...] = (64,)
    dropout: float = 0.2

    def build_model(self) -> LKNet:
        return LKNet(
            conv_channels=list(self.conv_channels),
            kernel_sizes=list(self.kernel_sizes),
            pool_sizes=list(self.pool_sizes),
            dense_units=list(self.dense_units),
            dropout=self.dropout,
        )

    def to_dict(self) -> Dict[str, Any]:
        dt = asdict(self)
        for k in ("conv_channels", "kernel_sizes", "pool_sizes", "dense_units"):
            dt[k] = list(dt[k])
        return dt

    @classmethod
    def from_dict(cls, dt: Mapping[str, Any]) -> "ModelConfig":
        keep = _pick(cls, dt)
        for k in ("conv_channels", "kernel_sizes", "pool_sizes", "dense_units"):
            if k in keep:
                keep[k] = tuple(int(x) for x in keep[k])
        return cls(**keep)


@dataclass
class EarlyStoppingConfig:
    monitor: str = "val_loss"
    patience: int = 10
    restore_best_weights: bool = True
    # Smallest decrease of the monitored value that counts as an improvement
    min_delta: float = 0.0

    @classmethod
    def from_dict(cls, dt: Mapping[str, Any]) -> "EarlyStoppingConfig":
        return cls(**_pick(cls, dt))


@dataclass
class TrainConfig:
    epochs: int = 100
    batch_size: int = 32
    validation_split: float = 0.2
    optimizer: str = "adam"
    learning_rate: float = 1e-3
    weight_decay: float = 0.0
    grad_clip: Optional[float] = None
    seed: int = 42
    # None disables early stopping
    early_stopping: Optional[EarlyStoppingConfig] = field(default_factory=EarlyStoppingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, dt: Mapping[str, Any]) -> "TrainConfig":
        keep = _pick(cls, dt)
        es = keep.get("early_stopping")
        if isinstance(es, Mapping):
            keep["early_stopping"] = EarlyStoppingConfig.from_dict(es)
        return cls(**keep)


@dataclass
class PipelineConfig:
    table: str = "LK_data.csv"
    fasta_dir: str = "."
    sep: Optional[str] = None
    train_frac: float = 0.8
    seed: int = 42
    model: ModelConfig = field(default_factory=ModelConfig)
    train: TrainConfig = field(default_factory=TrainConfig)

    def to_dict(self) -> Dict[str, Any]:
        dt = asdict(self)
        dt["model"] = self.model.to_dict()
        dt["train"] = self.train.to_dict()
        return dt

    def to_json(self, path: str | Path) -> None:
        path = Path(path)
        with path.open("w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, dt: Mapping[str, Any]) -> "PipelineConfig":
        keep = _pick(cls, dt)
        if isinstance(keep.get("model"), Mapping):
            keep["model"] = ModelConfig.from_dict(keep["model"])
        train = dict(keep.get("train") or {})
        # The training shuffle seed follows the pipeline seed unless set explicitly.
        train.setdefault("seed", keep.get("seed", cls.seed))
        keep["train"] = TrainConfig.from_dict(train)
        return cls(**keep)

    @classmethod
    def from_json(cls, path: str | Path) -> "PipelineConfig":
        path = Path(path)
        with path.open("r") as f:
            dt = json.load(f)
        return cls.from_dict(dt)
