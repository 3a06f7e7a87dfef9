"""Epoch-level training and evaluation loops used by the model adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import torch
from torch.utils.data import DataLoader

from .metrics import mae, mse


@dataclass
class EpochStats:
    loss: float
    mae: float
    n: int


def _move_to_device(x: torch.Tensor, y: torch.Tensor, device: torch.device) -> Tuple[torch.Tensor, torch.Tensor]:
    return x.to(device, non_blocking=True), y.to(device, non_blocking=True)


def run_epoch_train(
    model: torch.nn.Module,
    loader: DataLoader,
    optimizer: torch.optim.Optimizer,
    device: torch.device,
    *,
    grad_clip: Optional[float] = None,
) -> EpochStats:
    model.train()

    total_loss = 0.0
    total_abs = 0.0
    n = 0

    for x, y in loader:
        x, y = _move_to_device(x, y, device)

        optimizer.zero_grad(set_to_none=True)
        pred = model(x)
        loss = torch.nn.functional.mse_loss(pred, y)
        loss.backward()

        if grad_clip is not None:
            torch.nn.utils.clip_grad_norm_(model.parameters(), grad_clip)

        optimizer.step()

        bs = x.shape[0]
        total_loss += float(loss.detach().item()) * bs
        total_abs += float(torch.abs(pred.detach() - y).sum().item())
        n += bs

    return EpochStats(loss=total_loss / max(1, n), mae=total_abs / max(1, n), n=n)


def predict_loader(
    model: torch.nn.Module,
    loader: DataLoader,
    device: torch.device,
) -> Tuple[torch.Tensor, torch.Tensor]:
    """Return (preds, targets) as CPU tensors."""
    model.eval()
    preds = []
    targets = []
    with torch.no_grad():
        for x, y in loader:
            x, y = _move_to_device(x, y, device)
            p = model(x)
            preds.append(p.detach().float().cpu())
            targets.append(y.detach().float().cpu())

    return torch.cat(preds, dim=0), torch.cat(targets, dim=0)


def eval_regression(
    model: torch.nn.Module,
    loader: DataLoader,
    device: torch.device,
) -> EpochStats:
    preds, targets = predict_loader(model, loader, device)
    return EpochStats(
        loss=float(mse(preds, targets).item()),
        mae=float(mae(preds, targets).item()),
        n=int(targets.numel()),
    )
