#!/usr/bin/env python
"""Train a CNN to predict ΔLK from interval sequences.

This script:
- loads every *.fasta chromosome file from a directory
- reads the interval table (CHRM, START, END, DELTALK)
- resolves intervals to sequences, dropping unknown/out-of-bounds ones
- encodes and pads sequences, then splits 80/20 into train/test
- trains with early stopping on a validation tail of the training rows
- evaluates on the test rows and writes metrics, predictions and plots

Example:
    python scripts/train_lk.py \
        --table LK_data.csv --fasta_dir genome/ \
        --out_dir out_lk --epochs 100 --patience 10
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
# Ensure repo root on sys.path so `import lknet` works without installation.
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

import torch

from lknet import (
    EmptyDatasetError,
    IntervalResolver,
    MalformedInputFileError,
    ModelAdapter,
    PipelineConfig,
    ReferenceStore,
    build_dataset,
    read_interval_table,
    train_test_split,
)
from lknet.report import history_frame, metrics_table, plot_history, plot_predictions, predictions_frame


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Start from --config (if given) and override with explicit flags."""
    config = PipelineConfig.from_json(args.config) if args.config else PipelineConfig()

    overrides = {
        "table": args.table,
        "fasta_dir": args.fasta_dir,
        "sep": args.sep,
        "train_frac": args.train_frac,
        "seed": args.seed,
    }
    for k, v in overrides.items():
        if v is not None:
            setattr(config, k, v)
    if args.seed is not None:
        config.train.seed = args.seed

    train_overrides = {
        "epochs": args.epochs,
        "batch_size": args.batch_size,
        "validation_split": args.validation_split,
        "optimizer": args.optimizer,
        "learning_rate": args.lr,
        "weight_decay": args.weight_decay,
    }
    for k, v in train_overrides.items():
        if v is not None:
            setattr(config.train, k, v)
    if args.patience is not None:
        if args.patience <= 0:
            config.train.early_stopping = None
        elif config.train.early_stopping is not None:
            config.train.early_stopping.patience = args.patience

    return config


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", type=str, default=None, help="Pipeline config JSON")

    data = parser.add_argument_group("data")
    data.add_argument("--table", type=str, default=None, help="Interval table (default: LK_data.csv)")
    data.add_argument("--fasta_dir", type=str, default=None, help="Directory with one .fasta per chromosome")
    data.add_argument("--sep", type=str, default=None, help="Table delimiter (default: sniffed)")

    split = parser.add_argument_group("split")
    split.add_argument("--train_frac", type=float, default=None)
    split.add_argument("--seed", type=int, default=None)

    train = parser.add_argument_group("train")
    train.add_argument("--out_dir", type=str, required=True)
    train.add_argument("--epochs", type=int, default=None)
    train.add_argument("--batch_size", type=int, default=None)
    train.add_argument("--validation_split", type=float, default=None)
    train.add_argument("--optimizer", type=str, default=None, choices=["sgd", "adam", "adamw"])
    train.add_argument("--lr", type=float, default=None)
    train.add_argument("--weight_decay", type=float, default=None)
    train.add_argument("--patience", type=int, default=None, help="Early stopping patience (0 disables)")
    train.add_argument("--device", type=str, default="cuda:0" if torch.cuda.is_available() else "cpu")
    train.add_argument("--quiet", action="store_true", help="No per-epoch progress bar")

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    config = build_config(args)
    config.to_json(out_dir / "config.json")

    try:
        store = ReferenceStore.load(config.fasta_dir)
        records = read_interval_table(config.table, sep=config.sep)
        resolver = IntervalResolver(store)
        resolved = resolver.resolve_records(records)
        dataset = build_dataset(resolved)
    except (MalformedInputFileError, EmptyDatasetError) as e:
        raise SystemExit(f"Error: {e}")

    train_ds, test_ds = train_test_split(dataset, train_frac=config.train_frac, seed=config.seed)

    print("Chromosomes:", ", ".join(store.names))
    print(
        f"Intervals: n={len(records)} | resolved={len(dataset)} "
        f"(unknown chromosome={resolver.n_unknown_chrom}, out of bounds={resolver.n_out_of_bounds})"
    )
    print(f"Data: max_length={dataset.max_length} | train={len(train_ds)} test={len(test_ds)}")
    print("Training with:", config.train.optimizer, "lr=", config.train.learning_rate, "epochs=", config.train.epochs)

    adapter = ModelAdapter(config.model, device=args.device, seed=config.seed, verbose=not args.quiet)
    history = adapter.fit(train_ds.X, train_ds.y, config.train)
    if history.stopped_epoch is not None:
        print(f"Early stopping at epoch {history.stopped_epoch} (best epoch {history.best_epoch})")

    history_frame(history.history).to_csv(out_dir / "history.tsv", sep="\t")
    plot_history(history.history, out_dir / "history.png")

    if len(test_ds) == 0:
        print("No test rows; skipping evaluation.")
        return

    te = adapter.evaluate(test_ds.X, test_ds.y)
    y_pred = adapter.predict(test_ds.X)

    print(f"Test: mse={te['mse']:.6f} | mae={te['mae']:.6f} | n={len(test_ds)}")
    print(metrics_table(test_ds.y.numpy(), y_pred).to_string(index=False))

    predictions_frame(test_ds.records, y_pred).to_csv(out_dir / "predictions.tsv", sep="\t", index=False)
    plot_predictions(test_ds.y.numpy(), y_pred, out_dir / "predictions.png")

    with (out_dir / "metrics.json").open("w") as f:
        json.dump(
            {
                "test": te,
                "best_epoch": history.best_epoch,
                "stopped_epoch": history.stopped_epoch,
                "n_train": len(train_ds),
                "n_test": len(test_ds),
                "max_length": dataset.max_length,
            },
            f,
            indent=2,
        )

    print("Saved metrics:", out_dir / "metrics.json")
    print("Saved predictions:", out_dir / "predictions.tsv")


if __name__ == "__main__":
    main()
