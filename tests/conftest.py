"""
Shared pytest fixtures for CFR solver tests.

Provides a degenerate one-action game, the closed-form Kuhn poker
equilibrium, and a session-wide trained Kuhn result.
"""

from __future__ import annotations

import logging

import pytest

from cfr_solver.errors import InvalidStateError
from cfr_solver.games.base import ChanceOutcome, GameDefinition, History, InfoSetKey
from cfr_solver.games.dudo import Dudo
from cfr_solver.games.kuhn import BET, PASS, KuhnPoker
from cfr_solver.solvers.best_response import StrategyProfile
from cfr_solver.solvers.cfr import CfrResult, solve

J, Q, K = 1, 2, 3


class SingleActionGame(GameDefinition):
    """Player 1 has exactly one move, which ends the game; player 2 wins 1."""

    name = "single"

    def legal_actions(self, history: History) -> tuple:
        if self.is_terminal(history):
            raise InvalidStateError(f"No legal actions at terminal history {history!r}")
        return ("go",)

    def is_terminal(self, history: History) -> bool:
        if history not in ((), ("go",)):
            raise InvalidStateError(f"Not a history of this game: {history!r}")
        return history == ("go",)

    def terminal_utility(self, chance_outcome: ChanceOutcome, history: History) -> float:
        if not self.is_terminal(history):
            raise InvalidStateError("not terminal")
        return 1.0

    def private_info(self, player: int, chance_outcome: ChanceOutcome) -> int:
        return chance_outcome[player]

    def chance_outcomes(self) -> list[tuple[ChanceOutcome, float]]:
        return [((0, 0), 1.0)]

    def realize_chance_outcome(self, iteration_index: int, prior_outcome: ChanceOutcome | None) -> ChanceOutcome:
        return (0, 0)


def kuhn_profile(bet_probs: dict[tuple[int, int, History], float]) -> StrategyProfile:
    """Build a Kuhn profile from {(player, card, history): P(BET)}."""
    return {
        InfoSetKey(player, card, history): {PASS: 1.0 - p, BET: p}
        for (player, card, history), p in bet_probs.items()
    }


def kuhn_equilibrium() -> StrategyProfile:
    """The alpha = 0 member of the Kuhn poker equilibrium family."""
    return kuhn_profile(
        {
            # player 1 opening
            (0, J, ()): 0.0,
            (0, Q, ()): 0.0,
            (0, K, ()): 0.0,
            # player 1 facing a bet after checking
            (0, J, (PASS, BET)): 0.0,
            (0, Q, (PASS, BET)): 1.0 / 3.0,
            (0, K, (PASS, BET)): 1.0,
            # player 2 after a check
            (1, J, (PASS,)): 1.0 / 3.0,
            (1, Q, (PASS,)): 0.0,
            (1, K, (PASS,)): 1.0,
            # player 2 facing a bet
            (1, J, (BET,)): 0.0,
            (1, Q, (BET,)): 1.0 / 3.0,
            (1, K, (BET,)): 1.0,
        }
    )


@pytest.fixture
def kuhn() -> KuhnPoker:
    return KuhnPoker()


@pytest.fixture
def small_dudo() -> Dudo:
    """Three-sided Dudo: 6 claims, 64 decision histories."""
    return Dudo(num_sides=3)


@pytest.fixture
def single_action_game() -> SingleActionGame:
    return SingleActionGame()


@pytest.fixture(scope="session")
def kuhn_eq() -> StrategyProfile:
    return kuhn_equilibrium()


@pytest.fixture(scope="session")
def trained_kuhn() -> CfrResult:
    """60k-iteration Kuhn run shared across modules (run once per session)."""
    return solve(KuhnPoker(), n_iterations=60_000, convergence_check_every=20_000)


@pytest.fixture(autouse=True)
def _isolate_root_logger():
    """Undo configure_logging() side effects on the root logger after each test."""
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    yield
    root.setLevel(level)
    for handler in root.handlers[:]:
        if handler not in handlers and type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
