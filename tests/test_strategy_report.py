"""Tests for the strategy report (cfr_solver/analysis/strategy_report.py).

Tests check that each print function writes the expected headers and rows.
The trained Kuhn result is the session-wide fixture from conftest.
"""

from __future__ import annotations

import numpy as np
import pytest

from cfr_solver.analysis.strategy_report import (
    print_game_value,
    print_matrix_solution,
    print_strategy_table,
)
from cfr_solver.games.dudo import Dudo
from cfr_solver.games.kuhn import KuhnPoker
from cfr_solver.games.matrix_games import rock_paper_scissors
from cfr_solver.solvers.cfr import CfrResult, solve
from cfr_solver.solvers.regret_matching import MatrixSolution, RegretMatchingSolver

# ─── print_game_value ─────────────────────────────────────────────────────────


class TestPrintGameValue:
    def test_header_and_fields(self, trained_kuhn: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_game_value(KuhnPoker(), trained_kuhn)
        out = capsys.readouterr().out
        assert "Nash Equilibrium Value Summary (kuhn)" in out
        assert "Exploitability:" in out
        assert "Iterations:           60,000" in out
        assert "Information sets:     12" in out

    def test_known_value_for_kuhn(self, trained_kuhn: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_game_value(KuhnPoker(), trained_kuhn)
        out = capsys.readouterr().out
        assert "Known equilibrium value: -0.05556" in out
        assert "Difference:" in out

    def test_no_known_value_for_dudo(self, capsys: pytest.CaptureFixture) -> None:
        dudo = Dudo(num_sides=3)
        print_game_value(dudo, solve(dudo, n_iterations=9))
        out = capsys.readouterr().out
        assert "(dudo)" in out
        assert "Known equilibrium value" not in out

    def test_no_known_value_for_larger_deck(self, capsys: pytest.CaptureFixture) -> None:
        game = KuhnPoker(deck_size=4)
        print_game_value(game, solve(game, n_iterations=9))
        out = capsys.readouterr().out
        assert "(kuhn)" in out
        assert "Known equilibrium value" not in out


# ─── print_strategy_table ─────────────────────────────────────────────────────


class TestPrintStrategyTable:
    def test_both_players(self, trained_kuhn: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_strategy_table(KuhnPoker(), trained_kuhn)
        out = capsys.readouterr().out
        assert "Player 1 Average Strategy (kuhn)" in out
        assert "Player 2 Average Strategy (kuhn)" in out
        assert "pb" in out
        assert "pass" in out and "bet" in out

    def test_single_player(self, trained_kuhn: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_strategy_table(KuhnPoker(), trained_kuhn, player=1)
        out = capsys.readouterr().out
        assert "Player 1 Average Strategy" not in out
        assert "Player 2 Average Strategy" in out

    def test_row_has_every_action(self, trained_kuhn: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_strategy_table(KuhnPoker(), trained_kuhn, player=0)
        rows = [line for line in capsys.readouterr().out.splitlines() if "%" in line]
        assert len(rows) == 6
        assert all(line.count(" | ") == 1 for line in rows)

    def test_truncation(self, trained_kuhn: CfrResult, capsys: pytest.CaptureFixture) -> None:
        print_strategy_table(KuhnPoker(), trained_kuhn, player=0, max_rows=2)
        out = capsys.readouterr().out
        assert "... 4 more information sets" in out

    def test_empty_result(self, capsys: pytest.CaptureFixture) -> None:
        empty = CfrResult("kuhn", {}, 0, 0.0, 0.0, 0.0, False)
        print_strategy_table(KuhnPoker(), empty, player=0)
        assert "(no information sets visited)" in capsys.readouterr().out


# ─── print_matrix_solution ────────────────────────────────────────────────────


class TestPrintMatrixSolution:
    def test_rps_table(self, capsys: pytest.CaptureFixture) -> None:
        game = rock_paper_scissors()
        print_matrix_solution(game, RegretMatchingSolver(game).train(100))
        out = capsys.readouterr().out
        assert "Regret Matching Solution (rps)" in out
        assert "Iterations:      100" in out
        for label in game.actions:
            assert label in out

    def test_min_prob_hides_rows(self, capsys: pytest.CaptureFixture) -> None:
        game = rock_paper_scissors()
        pure = np.array([0.0, 1.0, 0.0])
        solution = MatrixSolution("rps", (pure, pure), 0.0, 2.0, 1)
        print_matrix_solution(game, solution, min_prob=0.01)
        out = capsys.readouterr().out
        assert "paper" in out
        assert "rock" not in out
        assert "scissors" not in out
