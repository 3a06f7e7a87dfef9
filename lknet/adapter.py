"""Model adapter: fit / evaluate / predict over encoded sequence matrices.

The adapter hides the torch model behind the same three calls a Keras model
offers, taking the integer matrix X [n, L] and labels y [n] from the dataset
builder. Weight initialisation and training draw from their own seeded RNG
streams (``torch.random.fork_rng``), so the global torch RNG is left alone.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np
import torch
from torch.utils.data import DataLoader
from tqdm import tqdm

from .config import ModelConfig, TrainConfig
from .data import TensorRegressionDataset
from .train_utils import eval_regression, predict_loader, run_epoch_train

logger = logging.getLogger(__name__)

ArrayLike = Union[np.ndarray, torch.Tensor, List]


@dataclass
class History:
    """Per-epoch metrics, keyed like Keras' ``History.history``."""

    history: Dict[str, List[float]] = field(default_factory=dict)
    epoch: List[int] = field(default_factory=list)
    best_epoch: Optional[int] = None
    stopped_epoch: Optional[int] = None

    def append(self, epoch: int, **metrics: float) -> None:
        self.epoch.append(epoch)
        for k, v in metrics.items():
            self.history.setdefault(k, []).append(float(v))


def build_optimizer(
    name: str,
    params,
    *,
    lr: float,
    weight_decay: float,
    momentum: float = 0.9,
) -> torch.optim.Optimizer:
    name = name.lower()
    if name == "sgd":
        return torch.optim.SGD(params, lr=lr, momentum=momentum, weight_decay=weight_decay, nesterov=True)
    if name == "adam":
        return torch.optim.Adam(params, lr=lr, weight_decay=weight_decay)
    if name == "adamw":
        return torch.optim.AdamW(params, lr=lr, weight_decay=weight_decay)
    raise ValueError(f"Unknown optimizer: {name}")


def _fork_rng():
    # torch.manual_seed also reseeds every CUDA device, so fork all of them.
    return torch.random.fork_rng(devices=list(range(torch.cuda.device_count())))


def _as_x(X: ArrayLike) -> torch.Tensor:
    x = torch.as_tensor(np.asarray(X) if isinstance(X, list) else X)
    if x.ndim != 2:
        raise ValueError(f"X must be 2D [n, L], got shape {tuple(x.shape)}")
    return x.long()


def _as_y(y: ArrayLike) -> torch.Tensor:
    return torch.as_tensor(np.asarray(y) if isinstance(y, list) else y).reshape(-1).float()


class ModelAdapter:
    """Trainable regression model over integer-coded sequences."""

    def __init__(
        self,
        model_config: Optional[ModelConfig] = None,
        *,
        device: str | torch.device = "cpu",
        seed: int = 42,
        verbose: bool = True,
    ):
        self.model_config = model_config or ModelConfig()
        self.device = torch.device(device)
        self.seed = seed
        self.verbose = verbose

        with _fork_rng():
            torch.manual_seed(seed)
            self.model = self.model_config.build_model().to(self.device)

    def _loader(self, X: torch.Tensor, y: torch.Tensor, batch_size: int, *, shuffle: bool = False, generator=None):
        return DataLoader(
            TensorRegressionDataset(X, y),
            batch_size=batch_size,
            shuffle=shuffle,
            generator=generator,
            pin_memory=(self.device.type == "cuda"),
        )

    def fit(
        self,
        X: ArrayLike,
        y: ArrayLike,
        config: Optional[Union[TrainConfig, Mapping[str, Any]]] = None,
    ) -> History:
        if config is None:
            config = TrainConfig()
        elif isinstance(config, Mapping):
            config = TrainConfig.from_dict(config)

        X, y = _as_x(X), _as_y(y)
        if len(X) != len(y):
            raise ValueError(f"X and y length mismatch: {len(X)} vs {len(y)}")
        if len(X) == 0:
            raise ValueError("Cannot fit on an empty dataset")

        # Validation rows are the tail of the inputs, taken before any shuffling.
        n_val = int(len(X) * config.validation_split)
        n_train = len(X) - n_val
        if n_train <= 0:
            raise ValueError(f"validation_split={config.validation_split} leaves no training rows")

        g = torch.Generator()
        g.manual_seed(config.seed)
        train_loader = self._loader(X[:n_train], y[:n_train], config.batch_size, shuffle=True, generator=g)
        val_loader = self._loader(X[n_train:], y[n_train:], config.batch_size) if n_val else None

        optimizer = build_optimizer(
            config.optimizer,
            self.model.parameters(),
            lr=config.learning_rate,
            weight_decay=config.weight_decay,
        )

        es = config.early_stopping
        monitor = es.monitor if es is not None else None
        if monitor is not None and monitor.startswith("val_") and val_loader is None:
            logger.warning("No validation rows; early stopping monitors '%s' instead of '%s'", monitor[4:], monitor)
            monitor = monitor[4:]

        history = History()
        best_value: Optional[float] = None
        best_state = None
        wait = 0

        with _fork_rng():
            torch.manual_seed(config.seed)

            epochs = tqdm(range(1, config.epochs + 1), desc="Epochs", disable=not self.verbose)
            for epoch in epochs:
                tr = run_epoch_train(self.model, train_loader, optimizer, self.device, grad_clip=config.grad_clip)
                metrics = {"loss": tr.loss, "mae": tr.mae}
                if val_loader is not None:
                    va = eval_regression(self.model, val_loader, self.device)
                    metrics.update(val_loss=va.loss, val_mae=va.mae)
                history.append(epoch, **metrics)
                if self.verbose:
                    epochs.set_postfix({k: f"{v:.4f}" for k, v in metrics.items()})

                if monitor is None:
                    continue
                if monitor not in metrics:
                    raise ValueError(f"Unknown early stopping monitor '{monitor}'. Available: {sorted(metrics)}")

                current = metrics[monitor]
                if best_value is None or current < best_value - es.min_delta:
                    best_value = current
                    history.best_epoch = epoch
                    wait = 0
                    if es.restore_best_weights:
                        best_state = copy.deepcopy(self.model.state_dict())
                else:
                    wait += 1
                    if wait >= es.patience:
                        history.stopped_epoch = epoch
                        logger.info("Early stopping at epoch %d (best epoch %d)", epoch, history.best_epoch)
                        break

        if best_state is not None:
            self.model.load_state_dict(best_state)

        return history

    def evaluate(self, X: ArrayLike, y: ArrayLike, *, batch_size: int = 256) -> Dict[str, float]:
        X, y = _as_x(X), _as_y(y)
        if len(X) == 0:
            raise ValueError("Cannot evaluate on an empty dataset")
        stats = eval_regression(self.model, self._loader(X, y, batch_size), self.device)
        return {"loss": stats.loss, "mae": stats.mae, "mse": stats.loss}

    def predict(self, X: ArrayLike, *, batch_size: int = 256) -> np.ndarray:
        X = _as_x(X)
        if len(X) == 0:
            return np.zeros(0, dtype=np.float32)
        preds, _ = predict_loader(self.model, self._loader(X, torch.zeros(len(X)), batch_size), self.device)
        return preds.numpy().astype(np.float32)
