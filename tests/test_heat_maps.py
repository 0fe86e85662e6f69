"""Tests for strategy heat maps (cfr_solver/analysis/heat_maps.py).

Data-builder tests need no display. Figure tests use the Agg backend and
save to tmp_path.
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from cfr_solver.analysis.heat_maps import (
    build_strategy_heatmap_data,
    heatmap_action,
    plot_convergence,
    plot_strategy_heatmaps,
    player_strategy_grid,
)
from cfr_solver.games.dudo import Dudo
from cfr_solver.games.kuhn import BET, KuhnPoker
from cfr_solver.solvers.cfr import CfrResult, solve


@pytest.fixture(scope="module")
def dudo_result() -> CfrResult:
    return solve(Dudo(num_sides=3), n_iterations=18)


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


# ─── TestHeatmapAction ────────────────────────────────────────────────────────


class TestHeatmapAction:
    def test_kuhn_plots_bet(self) -> None:
        assert heatmap_action(KuhnPoker()) == BET

    def test_dudo_plots_dudo(self) -> None:
        game = Dudo(num_sides=3)
        assert heatmap_action(game) == game.dudo == 6


# ─── TestBuildStrategyHeatmapData ─────────────────────────────────────────────


class TestBuildStrategyHeatmapData:
    def test_kuhn_player1_shape(self, trained_kuhn: CfrResult) -> None:
        matrix, rows, cols = build_strategy_heatmap_data(KuhnPoker(), trained_kuhn, 0, BET)
        assert matrix.shape == (3, 2)
        assert rows == ["J", "Q", "K"]
        assert cols == ["--", "pb"]

    def test_kuhn_player2_columns(self, trained_kuhn: CfrResult) -> None:
        _, _, cols = build_strategy_heatmap_data(KuhnPoker(), trained_kuhn, 1, BET)
        assert cols == ["b", "p"]

    def test_values_are_probabilities(self, trained_kuhn: CfrResult) -> None:
        matrix, _, _ = build_strategy_heatmap_data(KuhnPoker(), trained_kuhn, 1, BET)
        assert not np.isnan(matrix).any()
        assert np.all((matrix >= 0.0) & (matrix <= 1.0))

    def test_king_calls_a_bet(self, trained_kuhn: CfrResult) -> None:
        matrix, rows, cols = build_strategy_heatmap_data(KuhnPoker(), trained_kuhn, 1, BET)
        assert matrix[rows.index("K"), cols.index("b")] > 0.99

    def test_unknown_action_is_all_nan(self, trained_kuhn: CfrResult) -> None:
        matrix, _, _ = build_strategy_heatmap_data(KuhnPoker(), trained_kuhn, 0, "x")
        assert np.isnan(matrix).all()

    def test_invalid_player(self, trained_kuhn: CfrResult) -> None:
        with pytest.raises(ValueError):
            build_strategy_heatmap_data(KuhnPoker(), trained_kuhn, 2, BET)

    def test_dudo_max_history_len(self, dudo_result: CfrResult) -> None:
        game = Dudo(num_sides=3)
        m0, rows0, cols0 = build_strategy_heatmap_data(game, dudo_result, 0, game.dudo, max_history_len=1)
        m1, rows1, cols1 = build_strategy_heatmap_data(game, dudo_result, 1, game.dudo, max_history_len=1)
        assert rows0 == rows1 == ["1*", "2", "3"]
        assert cols0 == ["--"]
        assert len(cols1) == 6
        # DUDO is never legal at the opening.
        assert np.isnan(m0).all()
        assert not np.isnan(m1).any()

    def test_grid_sorted(self, dudo_result: CfrResult) -> None:
        _, privates, histories = player_strategy_grid(dudo_result, 1)
        assert privates == [1, 2, 3]
        lengths = [len(h) for h in histories]
        assert lengths == sorted(lengths)


# ─── TestPlots ────────────────────────────────────────────────────────────────


class TestPlots:
    def test_strategy_heatmaps_axes(self, trained_kuhn: CfrResult) -> None:
        fig = plot_strategy_heatmaps(KuhnPoker(), trained_kuhn, show=False)
        # Two panels plus one colorbar each.
        assert len(fig.axes) == 4
        assert fig.axes[0].get_title() == "Player 1"

    def test_strategy_heatmaps_saved(self, trained_kuhn: CfrResult, tmp_path) -> None:
        path = tmp_path / "kuhn.png"
        plot_strategy_heatmaps(KuhnPoker(), trained_kuhn, show=False, save_path=str(path))
        assert path.exists()
        assert path.stat().st_size > 0

    def test_large_dudo_grid_renders(self, dudo_result: CfrResult) -> None:
        fig = plot_strategy_heatmaps(Dudo(num_sides=3), dudo_result, show=False)
        assert len(fig.axes) == 4

    def test_convergence_plot(self, trained_kuhn: CfrResult, tmp_path) -> None:
        path = tmp_path / "conv.png"
        fig = plot_convergence(trained_kuhn, show=False, save_path=str(path))
        assert len(fig.axes[0].lines) == 1
        assert path.exists()

    def test_convergence_requires_history(self) -> None:
        result = solve(KuhnPoker(), n_iterations=6)
        with pytest.raises(ValueError):
            plot_convergence(result, show=False)
