"""
Tables and plots of training history and test-set predictions.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import torch

from .metrics import mae, mse, pearsonr, r2_score
from .resolver import IntervalRecord

FIG_SIZE = (8, 6)


def metrics_table(y_true, y_pred) -> pd.DataFrame:
    """One-row table of MSE, MAE, RMSE, R^2 and Pearson r."""
    t = torch.as_tensor(np.asarray(y_true, dtype=np.float32))
    p = torch.as_tensor(np.asarray(y_pred, dtype=np.float32))
    m = float(mse(p, t))
    return pd.DataFrame(
        [
            {
                "n": int(t.numel()),
                "mse": m,
                "mae": float(mae(p, t)),
                "rmse": float(np.sqrt(m)),
                "r2": float(r2_score(p, t)),
                "pearson": float(pearsonr(p, t)),
            }
        ]
    )


def predictions_frame(records: Sequence[IntervalRecord], y_pred) -> pd.DataFrame:
    """Actual vs predicted ΔLK per interval."""
    y_pred = np.asarray(y_pred, dtype=np.float32).reshape(-1)
    if len(records) != len(y_pred):
        raise ValueError(f"records and predictions length mismatch: {len(records)} vs {len(y_pred)}")
    return pd.DataFrame(
        {
            "CHRM": [r.chrom for r in records],
            "START": [r.start for r in records],
            "END": [r.end for r in records],
            "DELTALK": [r.label for r in records],
            "PREDICTED": y_pred,
        }
    )


def history_frame(history: Mapping[str, Sequence[float]]) -> pd.DataFrame:
    df = pd.DataFrame(dict(history))
    df.index = pd.RangeIndex(1, len(df) + 1, name="epoch")
    return df


def _save(fig, path: Optional[str | Path]):
    # Saved figures are released from pyplot; unsaved ones stay open for display.
    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, bbox_inches="tight")
        plt.close(fig)
    return fig


def plot_history(history: Mapping[str, Sequence[float]], path: Optional[str | Path] = None, fig_size=FIG_SIZE):
    """Loss and MAE curves, train vs validation."""
    fig, (ax0, ax1) = plt.subplots(2, 1, figsize=fig_size, sharex=True)
    for ax, metric in ((ax0, "loss"), (ax1, "mae")):
        for key, style in ((metric, "-"), (f"val_{metric}", "--")):
            if key in history:
                ax.plot(range(1, len(history[key]) + 1), history[key], style, label=key)
        ax.set_ylabel(metric.upper() if metric == "mae" else "MSE loss")
        ax.legend()
    ax1.set_xlabel("epoch")
    fig.suptitle("Training history")
    return _save(fig, path)


def plot_predictions(y_true, y_pred, path: Optional[str | Path] = None, fig_size=FIG_SIZE):
    """Scatter of actual vs predicted ΔLK with the identity line."""
    y_true = np.asarray(y_true, dtype=np.float32).reshape(-1)
    y_pred = np.asarray(y_pred, dtype=np.float32).reshape(-1)

    fig, ax = plt.subplots(figsize=fig_size)
    ax.scatter(y_true, y_pred, s=12, alpha=0.6)
    if y_true.size:
        lo = float(min(y_true.min(), y_pred.min()))
        hi = float(max(y_true.max(), y_pred.max()))
        ax.plot([lo, hi], [lo, hi], "k--", linewidth=1)

    stats = metrics_table(y_true, y_pred).iloc[0]
    ax.set_title(f"Actual vs predicted ΔLK (r={stats['pearson']:.3f}, MAE={stats['mae']:.3f})")
    ax.set_xlabel("actual ΔLK")
    ax.set_ylabel("predicted ΔLK")
    return _save(fig, path)
