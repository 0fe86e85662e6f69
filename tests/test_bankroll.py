"""Tests for variance and bankroll analysis (cfr_solver/analysis/bankroll.py).

Module-scoped fixture runs simulate_games(n_games=20_000, return_payouts=True)
once to keep the suite fast.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from cfr_solver.analysis.bankroll import (
    HorizonProjection,
    StackMatchResult,
    VarianceStats,
    compute_horizon_projections,
    compute_variance_stats,
    print_variance_report,
    risk_of_ruin,
    simulate_stack_matches,
)
from cfr_solver.analysis.simulator import simulate_games
from cfr_solver.games.kuhn import KuhnPoker

# ─── Module-scoped fixtures ───────────────────────────────────────────────────


@pytest.fixture(scope="module")
def payouts() -> np.ndarray:
    result = simulate_games(KuhnPoker(), (None, None), n_games=20_000, seed=42, return_payouts=True)
    assert result.payouts is not None
    return result.payouts


@pytest.fixture(scope="module")
def vstats(payouts: np.ndarray) -> VarianceStats:
    return compute_variance_stats(payouts)


# ─── TestComputeVarianceStats ─────────────────────────────────────────────────


class TestComputeVarianceStats:
    def test_known_values(self) -> None:
        stats = compute_variance_stats(np.array([1.0, -1.0, 1.0, -1.0]))
        assert stats.mean == 0.0
        assert stats.std == pytest.approx(math.sqrt(4 / 3))
        assert stats.variance == pytest.approx(4 / 3)
        assert stats.skewness == pytest.approx(0.0)
        assert stats.n_games == 4

    def test_percentile_keys(self, vstats: VarianceStats) -> None:
        assert list(vstats.percentiles) == ["p1", "p5", "p25", "p50", "p75", "p95", "p99"]
        values = list(vstats.percentiles.values())
        assert values == sorted(values)

    def test_kuhn_payout_bounds(self, vstats: VarianceStats) -> None:
        assert -2.0 <= vstats.percentiles["p1"] <= vstats.percentiles["p99"] <= 2.0
        assert 1.0 <= vstats.std <= 2.0

    def test_too_few_payouts(self) -> None:
        with pytest.raises(ValueError):
            compute_variance_stats(np.array([1.0]))


# ─── TestRiskOfRuin ───────────────────────────────────────────────────────────


class TestRiskOfRuin:
    def test_formula(self) -> None:
        assert risk_of_ruin(10, 0.1, 1.0) == pytest.approx(math.exp(-2.0))

    def test_negative_edge_is_certain_ruin(self) -> None:
        assert risk_of_ruin(100, -0.05, 1.3) == 1.0
        assert risk_of_ruin(100, 0.0, 1.3) == 1.0

    def test_zero_variance_positive_edge(self) -> None:
        assert risk_of_ruin(5, 0.1, 0.0) == 0.0

    def test_larger_bankroll_safer(self) -> None:
        assert risk_of_ruin(50, 0.05, 1.3) < risk_of_ruin(10, 0.05, 1.3)

    def test_invalid_bankroll(self) -> None:
        with pytest.raises(ValueError):
            risk_of_ruin(0, 0.1, 1.0)


# ─── TestHorizonProjections ───────────────────────────────────────────────────


class TestHorizonProjections:
    def test_zero_edge(self) -> None:
        (p,) = compute_horizon_projections(0.0, 1.0, horizons=[100])
        assert isinstance(p, HorizonProjection)
        assert p.expected_profit == 0.0
        assert p.prob_positive == pytest.approx(0.5)
        assert p.ci_high == pytest.approx(1.959964 * 10, rel=1e-5)
        assert p.ci_low == pytest.approx(-p.ci_high)

    def test_default_horizons(self) -> None:
        projections = compute_horizon_projections(0.05, 1.3)
        assert [p.n_games for p in projections] == [100, 500, 1000, 5000, 10_000]
        probs = [p.prob_positive for p in projections]
        assert probs == sorted(probs)

    def test_zero_std(self) -> None:
        (p,) = compute_horizon_projections(0.1, 0.0, horizons=[10])
        assert p.prob_positive == 1.0
        assert p.ci_low == p.ci_high == pytest.approx(1.0)


# ─── TestStackMatches ─────────────────────────────────────────────────────────


class TestStackMatches:
    def test_counts_add_up(self, kuhn_eq) -> None:
        match = simulate_stack_matches(KuhnPoker(), (kuhn_eq, None), n_matches=50, seed=3)
        assert isinstance(match, StackMatchResult)
        assert match.p1_wins + match.p2_wins + match.unfinished == 50
        assert match.mean_hands > 0.0
        assert 0.0 <= match.p1_win_rate <= 1.0

    def test_max_hands_caps_matches(self) -> None:
        match = simulate_stack_matches(
            KuhnPoker(), (None, None), starting_stack=1_000, n_matches=5, max_hands=10, seed=0
        )
        assert match.unfinished == 5
        assert match.mean_hands == 10.0

    def test_zero_sum_final_stacks(self) -> None:
        match = simulate_stack_matches(
            KuhnPoker(), (None, None), starting_stack=1_000, n_matches=3, max_hands=20, seed=1
        )
        assert 1_000 - 40 <= match.mean_final_stack <= 1_000 + 40

    @pytest.mark.parametrize(
        "kwargs",
        [{"starting_stack": 0}, {"n_matches": 0}, {"max_hands": -1}],
    )
    def test_invalid_arguments(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            simulate_stack_matches(KuhnPoker(), (None, None), **kwargs)


# ─── TestPrintVarianceReport ──────────────────────────────────────────────────


class TestPrintVarianceReport:
    def test_report_sections(self, vstats: VarianceStats, capsys: pytest.CaptureFixture) -> None:
        projections = compute_horizon_projections(vstats.mean, vstats.std)
        match = simulate_stack_matches(KuhnPoker(), (None, None), n_matches=5, seed=0)
        report = print_variance_report(vstats, projections, match=match, label="random vs random")
        out = capsys.readouterr().out
        assert report in out
        assert "Variance & Bankroll Report (random vs random)" in report
        assert "Risk of Ruin" in report
        assert "Horizon Projections" in report
        assert "Stack Matches" in report

    def test_custom_bankrolls(self, vstats: VarianceStats) -> None:
        report = print_variance_report(vstats, [], bankrolls=[7])
        assert "Bankroll     7 chips" in report
        assert "Stack Matches" not in report
