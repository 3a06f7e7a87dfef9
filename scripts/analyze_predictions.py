import argparse
import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

import pandas as pd

from lknet.report import metrics_table, plot_predictions


def parse_arguments():
    parser = argparse.ArgumentParser(description="Analyze prediction results.")
    parser.add_argument('--predictions_file', type=str, required=True,
                        help='Path to the predictions table written by train_lk.py.')
    parser.add_argument('--actual_column', type=str, default='DELTALK',
                        help='Name of the column containing measured ΔLK values.')
    parser.add_argument('--pred_column', type=str, default='PREDICTED',
                        help='Name of the column containing predicted ΔLK values.')
    parser.add_argument('--separator', type=str, default='tab',
                        help='Separator used in the predictions file (default: tab).')
    parser.add_argument('--plot', type=str, default=None,
                        help='Optional path for an actual-vs-predicted scatter plot.')
    return parser.parse_args()


def analyze_predictions(predictions_file, actual_column, pred_column, separator, plot=None):
    if separator == 'tab':
        separator = '\t'
    df = pd.read_csv(predictions_file, sep=separator)

    if actual_column not in df.columns or pred_column not in df.columns:
        raise ValueError("Specified columns not found in the predictions file.")

    table = metrics_table(df[actual_column].to_numpy(), df[pred_column].to_numpy())
    print(table.to_string(index=False))

    if plot:
        plot_predictions(df[actual_column].to_numpy(), df[pred_column].to_numpy(), plot)
        print("Saved plot:", plot)
    return table


if __name__ == "__main__":
    args = parse_arguments()
    analyze_predictions(args.predictions_file, args.actual_column, args.pred_column, args.separator, args.plot)
