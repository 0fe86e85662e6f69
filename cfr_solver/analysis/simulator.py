"""
Monte Carlo play-out of trained strategies.

Each simulated game draws a chance outcome, then lets both seats sample
their moves from their strategy profile until the game ends. A seat whose
profile is ``None`` plays uniformly at random; a profile missing an infoset
also plays uniformly there.

    choose_action(game, profile, outcome, history, rng) — one bot move
    play_game(game, profiles, rng)                       — one full game
    simulate_games(game, profiles, n_games, seed)        — aggregate stats

Payouts are always from player 1's perspective.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np

from cfr_solver.games.base import Action, ChanceOutcome, GameDefinition, History, InfoSetKey
from cfr_solver.games.chance import sample_index
from cfr_solver.solvers.best_response import strategy_at

Profile = Mapping[InfoSetKey, Mapping[Action, float]]


# ─── Result type ───────────────────────────────────────────────────────────────


@dataclass
class SimulationResult:
    """Aggregate statistics from a Monte Carlo simulation run.

    Attributes:
        n_games:    Number of games simulated.
        mean_ev:    Mean payout per game for player 1.
        std_ev:     Standard deviation of player 1's payout.
        ci_95_low:  Lower bound of the 95% CI for mean_ev.
        ci_95_high: Upper bound of the 95% CI for mean_ev.
        n_wins:     Games with positive payout for player 1.
        n_losses:   Games with negative payout for player 1.
        n_pushes:   Games with zero payout.
        payouts:    Per-game payouts (float64), when requested.
    """

    n_games: int
    mean_ev: float
    std_ev: float
    ci_95_low: float
    ci_95_high: float
    n_wins: int
    n_losses: int
    n_pushes: int
    payouts: np.ndarray | None = None

    @property
    def win_rate(self) -> float:
        return self.n_wins / self.n_games

    def __str__(self) -> str:
        return (
            f"SimulationResult(n={self.n_games:,}, "
            f"EV={self.mean_ev:+.4f} [{self.ci_95_low:+.4f}, {self.ci_95_high:+.4f}], "
            f"W/L/P={self.n_wins}/{self.n_losses}/{self.n_pushes})"
        )


# ─── Play ──────────────────────────────────────────────────────────────────────


def choose_action(
    game: GameDefinition,
    profile: Profile | None,
    chance_outcome: ChanceOutcome,
    history: History,
    rng: np.random.Generator,
) -> Action:
    """Sample the acting player's move from *profile* (uniform when absent)."""
    actions = game.legal_actions(history)
    player = game.acting_player(history)
    key = game.infoset_key(player, chance_outcome, history)
    probs = strategy_at(profile or {}, key, actions)
    return actions[sample_index(rng, probs)]


def play_game(
    game: GameDefinition,
    profiles: tuple[Profile | None, Profile | None],
    rng: np.random.Generator,
    chance_outcome: ChanceOutcome | None = None,
) -> tuple[ChanceOutcome, History, float]:
    """Play one game to the end.

    Returns:
        (chance outcome, terminal history, payout to player 1).
    """
    if chance_outcome is None:
        chance_outcome = game.sample_chance_outcome(rng)
    history: History = ()
    while not game.is_terminal(history):
        seat = game.acting_player(history)
        action = choose_action(game, profiles[seat], chance_outcome, history, rng)
        history = history + (action,)
    return chance_outcome, history, game.utility_for(0, chance_outcome, history)


# ─── Core simulation loop ──────────────────────────────────────────────────────


def simulate_games(
    game: GameDefinition,
    profiles: tuple[Profile | None, Profile | None],
    n_games: int = 100_000,
    seed: int | None = 42,
    return_payouts: bool = False,
) -> SimulationResult:
    """Simulate n_games and return aggregate statistics for player 1.

    Args:
        game:           Game to play.
        profiles:       (player 1 profile, player 2 profile); None = uniform random.
        n_games:        Number of games to simulate (>= 2).
        seed:           Generator seed; None for a non-deterministic run.
        return_payouts: If True, attach the raw per-game payout array.

    Returns:
        SimulationResult with EV statistics for the run.

    Raises:
        ValueError: If n_games < 2.
    """
    if n_games < 2:
        raise ValueError(f"n_games must be at least 2, got {n_games}")
    rng = np.random.default_rng(seed)

    payouts = np.empty(n_games, dtype=np.float64)
    for i in range(n_games):
        _, _, payouts[i] = play_game(game, profiles, rng)

    mean = float(np.mean(payouts))
    std = float(np.std(payouts, ddof=1))
    ci_margin = 1.96 * std / math.sqrt(n_games)

    return SimulationResult(
        n_games=n_games,
        mean_ev=mean,
        std_ev=std,
        ci_95_low=mean - ci_margin,
        ci_95_high=mean + ci_margin,
        n_wins=int(np.sum(payouts > 0)),
        n_losses=int(np.sum(payouts < 0)),
        n_pushes=int(np.sum(payouts == 0)),
        payouts=payouts if return_payouts else None,
    )
