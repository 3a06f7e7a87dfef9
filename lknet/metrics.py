"""Small regression metric helpers on torch tensors."""

from __future__ import annotations

import torch


def _flat(pred: torch.Tensor, target: torch.Tensor):
    return pred.reshape(-1).float(), target.reshape(-1).float()


def mse(pred: torch.Tensor, target: torch.Tensor) -> torch.Tensor:
    pred, target = _flat(pred, target)
    return torch.mean((pred - target) ** 2)


def mae(pred: torch.Tensor, target: torch.Tensor) -> torch.Tensor:
    pred, target = _flat(pred, target)
    return torch.mean(torch.abs(pred - target))


def r2_score(pred: torch.Tensor, target: torch.Tensor, eps: float = 1e-12) -> torch.Tensor:
    """Coefficient of determination, 1 - SS_res / SS_tot."""
    pred, target = _flat(pred, target)
    ss_res = ((target - pred) ** 2).sum()
    ss_tot = ((target - target.mean()) ** 2).sum()
    return 1 - ss_res / (ss_tot + eps)


def pearsonr(pred: torch.Tensor, target: torch.Tensor, eps: float = 1e-8) -> torch.Tensor:
    """Pearson correlation (vectorized, returns a scalar tensor).

    Parameters
    ----------
    pred, target:
        1D tensors of same length.
    """
    pred, target = _flat(pred, target)

    pred = pred - pred.mean()
    target = target - target.mean()

    num = (pred * target).sum()
    den = torch.sqrt((pred * pred).sum() + eps) * torch.sqrt((target * target).sum() + eps)
    return num / den
