"""Tests for result tables and plots."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from lknet import IntervalRecord
from lknet.report import history_frame, metrics_table, plot_history, plot_predictions, predictions_frame


class TestTables:
    def test_metrics_table_perfect_fit(self):
        y = np.array([0.1, 0.5, -0.2, 1.0])
        row = metrics_table(y, y).iloc[0]
        assert row["n"] == 4
        assert row["mse"] == pytest.approx(0.0)
        assert row["mae"] == pytest.approx(0.0)
        assert row["r2"] == pytest.approx(1.0)
        assert row["pearson"] == pytest.approx(1.0, abs=1e-4)

    def test_metrics_table_values(self):
        row = metrics_table([0.0, 0.0], [1.0, -1.0]).iloc[0]
        assert row["mse"] == pytest.approx(1.0)
        assert row["rmse"] == pytest.approx(1.0)
        assert row["mae"] == pytest.approx(1.0)

    def test_predictions_frame(self):
        recs = [IntervalRecord("chr1", 1, 5, 0.5, "ACGTA"), IntervalRecord("chr2", 3, 4, -1.0, "GG")]
        df = predictions_frame(recs, [0.4, -0.9])
        assert list(df.columns) == ["CHRM", "START", "END", "DELTALK", "PREDICTED"]
        assert df["CHRM"].tolist() == ["chr1", "chr2"]
        assert df["PREDICTED"].tolist() == pytest.approx([0.4, -0.9])

    def test_predictions_frame_mismatch(self):
        with pytest.raises(ValueError):
            predictions_frame([IntervalRecord("c", 1, 1, 0.0, "A")], [0.1, 0.2])

    def test_history_frame(self):
        df = history_frame({"loss": [3.0, 2.0], "val_loss": [3.5, 2.5]})
        assert df.index.tolist() == [1, 2]
        assert df.index.name == "epoch"


class TestPlots:
    def test_plot_history_saves(self, tmp_path):
        path = tmp_path / "plots" / "history.png"
        fig = plot_history({"loss": [3.0, 2.0], "mae": [1.0, 0.9], "val_loss": [3.5, 2.5]}, path)
        assert path.exists()
        assert len(fig.axes) == 2
        assert not plt.fignum_exists(fig.number)

    def test_plot_predictions_saves(self, tmp_path):
        path = tmp_path / "pred.png"
        fig = plot_predictions([0.0, 1.0, 2.0], [0.1, 0.9, 2.2], path)
        assert path.exists()
        assert not plt.fignum_exists(fig.number)

    def test_unsaved_figure_stays_open(self):
        fig = plot_predictions([0.0, 1.0], [0.5, 0.5])
        assert plt.fignum_exists(fig.number)
        plt.close(fig)
