"""Variance and bankroll analysis for simulated play.

Provides:
- Distribution statistics (mean, std, skewness, kurtosis, percentiles)
- Risk of ruin (classic gambler's ruin formula)
- Horizon projections via CLT (expected profit + confidence intervals)
- Stack matches: both seats start with a fixed chip stack and play hands
  until one of them is broke

Usage:
    payouts = simulate_games(game, profiles, return_payouts=True).payouts
    print_variance_report(compute_variance_stats(payouts), ...)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy import stats

from cfr_solver.analysis.simulator import Profile, play_game
from cfr_solver.games.base import GameDefinition

# ─── Dataclasses ──────────────────────────────────────────────────────────────


@dataclass
class VarianceStats:
    """Descriptive statistics for a per-game payout distribution.

    Attributes:
        mean:        Mean payout per game (chips).
        std:         Sample standard deviation.
        variance:    Sample variance (std**2).
        skewness:    Fisher skewness of the payout distribution.
        kurtosis:    Excess kurtosis (Fisher, normal = 0).
        percentiles: Dict mapping percentile label to value.
                     Keys: 'p1', 'p5', 'p25', 'p50', 'p75', 'p95', 'p99'.
        n_games:     Number of games in the sample.
    """

    mean: float
    std: float
    variance: float
    skewness: float
    kurtosis: float
    percentiles: dict[str, float]
    n_games: int


@dataclass
class HorizonProjection:
    """Expected profit and uncertainty after a given number of games.

    Attributes:
        n_games:         Number of games in this horizon.
        expected_profit: n_games * edge (chips).
        ci_low:          Lower bound of confidence interval (chips).
        ci_high:         Upper bound of confidence interval (chips).
        prob_positive:   Probability that cumulative profit > 0 (CLT).
    """

    n_games: int
    expected_profit: float
    ci_low: float
    ci_high: float
    prob_positive: float


@dataclass
class StackMatchResult:
    """Outcome of repeated fixed-stack matches between two seats.

    Attributes:
        n_matches:        Matches played.
        starting_stack:   Chips each seat starts with.
        p1_wins:          Matches in which player 2 went broke.
        p2_wins:          Matches in which player 1 went broke.
        unfinished:       Matches stopped at max_hands with both seats solvent.
        mean_hands:       Mean number of hands per match.
        mean_final_stack: Mean final stack of player 1.
    """

    n_matches: int
    starting_stack: int
    p1_wins: int
    p2_wins: int
    unfinished: int
    mean_hands: float
    mean_final_stack: float

    @property
    def p1_win_rate(self) -> float:
        return self.p1_wins / self.n_matches


# ─── Computation functions ────────────────────────────────────────────────────


def compute_variance_stats(payouts: np.ndarray) -> VarianceStats:
    """Compute descriptive statistics for a per-game payout distribution.

    Args:
        payouts: 1-D float64 array of per-game payouts (at least 2 entries).

    Returns:
        VarianceStats with mean, std, variance, skewness, kurtosis,
        percentiles (p1/p5/p25/p50/p75/p95/p99), and n_games.

    Raises:
        ValueError: If fewer than 2 payouts are given.
    """
    n = len(payouts)
    if n < 2:
        raise ValueError(f"Need at least 2 payouts for variance statistics, got {n}")
    mean = float(np.mean(payouts))
    std = float(np.std(payouts, ddof=1))
    variance = std**2
    skewness = float(stats.skew(payouts))
    kurt = float(stats.kurtosis(payouts))  # excess (Fisher), normal=0
    labels = ["p1", "p5", "p25", "p50", "p75", "p95", "p99"]
    pct_values = np.percentile(payouts, [1, 5, 25, 50, 75, 95, 99])
    percentiles = {label: float(v) for label, v in zip(labels, pct_values)}
    return VarianceStats(
        mean=mean,
        std=std,
        variance=variance,
        skewness=skewness,
        kurtosis=kurt,
        percentiles=percentiles,
        n_games=n,
    )


def risk_of_ruin(bankroll: float, edge: float, std: float) -> float:
    """Probability of ruin given a fixed bankroll, edge, and per-game std.

    Uses the classic gambler's ruin approximation for a random walk:
        RoR = exp(-2 * edge * bankroll / variance)

    Returns 1.0 when edge <= 0 (certain ruin eventually).

    Args:
        bankroll: Starting capital in chips (must be > 0).
        edge:     Mean payout per game.
        std:      Per-game standard deviation.

    Returns:
        Probability of ruin in [0, 1].

    Raises:
        ValueError: If bankroll <= 0.
    """
    if bankroll <= 0:
        raise ValueError(f"bankroll must be positive, got {bankroll}")
    if edge <= 0:
        return 1.0
    if std <= 0:
        return 0.0
    return float(math.exp(-2.0 * edge * bankroll / std**2))


def compute_horizon_projections(
    edge: float,
    std: float,
    horizons: list[int] | None = None,
    confidence: float = 0.95,
) -> list[HorizonProjection]:
    """CLT-based profit projections at multiple game-count horizons.

    By CLT, cumulative profit after N games ~ N(N*edge, N*variance).

    Args:
        edge:       Mean payout per game.
        std:        Per-game standard deviation.
        horizons:   Game counts to project. Defaults to [100, 500, 1000, 5000, 10000].
        confidence: Confidence level for the interval (default 0.95).

    Returns:
        List of HorizonProjection, one per horizon, in input order.
    """
    if horizons is None:
        horizons = [100, 500, 1000, 5000, 10_000]

    z = stats.norm.ppf((1.0 + confidence) / 2.0)
    projections = []
    for n in horizons:
        expected = n * edge
        margin = z * std * math.sqrt(n)
        if std > 0:
            prob_pos = float(stats.norm.cdf(math.sqrt(n) * edge / std))
        else:
            prob_pos = 1.0 if edge > 0 else 0.0
        projections.append(
            HorizonProjection(
                n_games=n,
                expected_profit=expected,
                ci_low=expected - margin,
                ci_high=expected + margin,
                prob_positive=prob_pos,
            )
        )
    return projections


def simulate_stack_matches(
    game: GameDefinition,
    profiles: tuple[Profile | None, Profile | None],
    starting_stack: int = 10,
    n_matches: int = 200,
    max_hands: int = 1_000,
    seed: int | None = 0,
) -> StackMatchResult:
    """Play fixed-stack matches: each hand moves its payout between the seats.

    A match ends when either stack drops to zero or below, or after
    max_hands hands.

    Raises:
        ValueError: If starting_stack, n_matches, or max_hands is not positive.
    """
    for name, value in (
        ("starting_stack", starting_stack),
        ("n_matches", n_matches),
        ("max_hands", max_hands),
    ):
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")

    rng = np.random.default_rng(seed)
    p1_wins = p2_wins = unfinished = 0
    hands = np.empty(n_matches, dtype=np.int64)
    final_stacks = np.empty(n_matches, dtype=np.float64)

    for m in range(n_matches):
        stack_p1 = float(starting_stack)
        stack_p2 = float(starting_stack)
        played = 0
        while played < max_hands and stack_p1 > 0 and stack_p2 > 0:
            _, _, payout = play_game(game, profiles, rng)
            stack_p1 += payout
            stack_p2 -= payout
            played += 1

        if stack_p2 <= 0:
            p1_wins += 1
        elif stack_p1 <= 0:
            p2_wins += 1
        else:
            unfinished += 1
        hands[m] = played
        final_stacks[m] = stack_p1

    return StackMatchResult(
        n_matches=n_matches,
        starting_stack=starting_stack,
        p1_wins=p1_wins,
        p2_wins=p2_wins,
        unfinished=unfinished,
        mean_hands=float(np.mean(hands)),
        mean_final_stack=float(np.mean(final_stacks)),
    )


# ─── Output functions ─────────────────────────────────────────────────────────


def print_variance_report(
    variance_stats: VarianceStats,
    projections: list[HorizonProjection],
    *,
    bankrolls: list[int] | None = None,
    match: StackMatchResult | None = None,
    label: str = "",
) -> str:
    """Format and print a variance and bankroll report.

    Args:
        variance_stats: VarianceStats from compute_variance_stats().
        projections:    List of HorizonProjection.
        bankrolls:      Bankroll sizes for the risk-of-ruin table
                        (default [10, 20, 50, 100]).
        match:          Optional StackMatchResult to summarise.
        label:          Optional label for the header.

    Returns:
        The formatted report string (also printed to stdout).
    """
    if bankrolls is None:
        bankrolls = [10, 20, 50, 100]
    s = variance_stats
    header = f"Variance & Bankroll Report{' (' + label + ')' if label else ''}"
    lines = [
        "=" * 70,
        header,
        "=" * 70,
        "",
        "── Distribution Statistics ─────────────────────────────────────────",
        f"  Games simulated : {s.n_games:>10,}",
        f"  Mean EV / game  : {s.mean:>+10.4f} chips",
        f"  Std deviation   : {s.std:>10.4f} chips",
        f"  Variance        : {s.variance:>10.4f}",
        f"  Skewness        : {s.skewness:>10.4f}",
        f"  Excess kurtosis : {s.kurtosis:>10.4f}",
        "",
        "  Percentiles (chips):",
        "    " + "  ".join(f"{k}={v:.2f}" for k, v in s.percentiles.items()),
        "",
        "── Risk of Ruin ────────────────────────────────────────────────────",
    ]
    for bankroll in bankrolls:
        ror = risk_of_ruin(bankroll, s.mean, s.std)
        lines.append(f"  Bankroll {bankroll:>5} chips : P(ruin) = {ror:.4f}")
    lines += [
        "",
        "── Horizon Projections (CLT) ───────────────────────────────────────",
        f"  {'Games':>8}  {'E[profit]':>10}  {'CI low':>10}  {'CI high':>10}  {'P(+)':>6}",
        f"  {'-' * 8}  {'-' * 10}  {'-' * 10}  {'-' * 10}  {'-' * 6}",
    ]
    for p in projections:
        lines.append(
            f"  {p.n_games:>8,}  {p.expected_profit:>+10.2f}  "
            f"{p.ci_low:>+10.2f}  {p.ci_high:>+10.2f}  {p.prob_positive:>5.1%}"
        )
    if match is not None:
        lines += [
            "",
            "── Stack Matches ───────────────────────────────────────────────────",
            f"  Matches         : {match.n_matches:,} (start {match.starting_stack} chips each)",
            f"  Player 1 wins   : {match.p1_wins:,} ({match.p1_win_rate:.1%})",
            f"  Player 2 wins   : {match.p2_wins:,}",
            f"  Unfinished      : {match.unfinished:,}",
            f"  Mean hands      : {match.mean_hands:.1f}",
        ]
    lines.append("")
    report = "\n".join(lines)
    print(report)
    return report
