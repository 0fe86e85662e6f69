"""Vanilla CFR solver for two-player zero-sum imperfect-information games.

Finds approximate Nash equilibrium strategies for any GameDefinition
(Kuhn poker, Dudo) using Counterfactual Regret Minimization.

Algorithm
---------
One training iteration is one full depth-first traversal of the game tree
for a realized chance outcome. At every decision history:

  1. The acting player's infoset node is fetched (created on first visit).
  2. Its current strategy is regret-matched from ``regret_sum``; the
     strategy is also added into ``strategy_sum`` weighted by the reach
     probability of the player NOT about to act.
  3. Each action is recursed into, multiplying the actor's own reach by the
     action probability. Child utilities are negated when the child's
     acting player differs (utility is always from the perspective of the
     player about to act).
  4. Regret for action a is updated by
        reach_opponent × (util[a] − node_util)
     which is the counterfactual regret of not having always played a.

The average strategy (normalised ``strategy_sum``) converges to a Nash
equilibrium; the per-iteration strategy does not.

Chance handling
~~~~~~~~~~~~~~~
  "cycle"     — realize_chance_outcome() enumerates deterministically
                (permutation cycling for Kuhn), one outcome per iteration.
  "sample"    — one outcome per iteration drawn from a seeded Generator.
  "enumerate" — every outcome every iteration, roots seeded with their
                chance probability.

Strategy extraction
~~~~~~~~~~~~~~~~~~~
  expected_value() makes a second, non-mutating pass with the average
  strategy over every chance outcome exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from dataclasses import dataclass, field

import numpy as np

from cfr_solver.errors import UnknownInformationSetError
from cfr_solver.games.base import Action, ChanceOutcome, GameDefinition, History, InfoSetKey
from cfr_solver.solvers.best_response import StrategyProfile, compute_exploitability
from cfr_solver.solvers.information_sets import InfoSetStore

logger = logging.getLogger(__name__)

CHANCE_CYCLE: str = "cycle"
CHANCE_SAMPLE: str = "sample"
CHANCE_ENUMERATE: str = "enumerate"
CHANCE_MODES: tuple[str, ...] = (CHANCE_CYCLE, CHANCE_SAMPLE, CHANCE_ENUMERATE)

# Exploitability below which a run without an explicit threshold is reported converged.
_DEFAULT_CONVERGED_EPS: float = 0.01


# ─── Result type ───────────────────────────────────────────────────────────────


@dataclass
class CfrResult:
    """Output of the CFR solver.

    Attributes:
        game_name:              Name of the solved game.
        average_strategy:       Average strategy per visited infoset.
                                Maps InfoSetKey → {action: prob}.
        n_iterations:           Number of CFR iterations completed.
        average_game_value:     Mean root utility for player 1 over training.
        expected_value:         Player 1's exact expected value under the
                                average strategy profile.
        exploitability:         Total exploitability in payoff units per game.
        converged:              True if exploitability reached the threshold.
        exploitability_history: (iteration, exploitability) at each check.
    """

    game_name: str
    average_strategy: StrategyProfile
    n_iterations: int
    average_game_value: float
    expected_value: float
    exploitability: float
    converged: bool
    exploitability_history: list[tuple[int, float]] = field(default_factory=list)


# ─── Solver ────────────────────────────────────────────────────────────────────


class CfrSolver:
    """Tabular CFR over a GameDefinition.

    Args:
        game:            The game to solve.
        chance_sampling: One of ``"cycle"``, ``"sample"``, ``"enumerate"``.
        seed:            Seed for the ``"sample"`` mode Generator.

    Raises:
        ValueError: If chance_sampling is not a known mode.

    Example:
        >>> from cfr_solver.games.kuhn import KuhnPoker
        >>> solver = CfrSolver(KuhnPoker())
        >>> value = solver.train(600)
        >>> -1.0 < solver.expected_value() < 1.0
        True
    """

    def __init__(
        self,
        game: GameDefinition,
        chance_sampling: str = CHANCE_CYCLE,
        seed: int | None = None,
    ) -> None:
        if chance_sampling not in CHANCE_MODES:
            raise ValueError(
                f"Unknown chance sampling mode: {chance_sampling!r}. Expected one of {CHANCE_MODES}"
            )
        self.game = game
        self.chance_sampling = chance_sampling
        self.store = InfoSetStore()
        self.iterations = 0
        self._rng = np.random.default_rng(seed)
        self._outcome: ChanceOutcome | None = None

    # ── Training ──────────────────────────────────────────────────────────────

    def train(self, iterations: int) -> float:
        """Run *iterations* CFR iterations and return player 1's average root value.

        Raises:
            ValueError: If iterations is negative.
        """
        if iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {iterations}")
        total = 0.0
        for _ in range(iterations):
            total += self._run_iteration()
        return total / iterations if iterations else 0.0

    def _run_iteration(self) -> float:
        game = self.game
        if self.chance_sampling == CHANCE_ENUMERATE:
            value = 0.0
            for outcome, prob in game.chance_outcomes():
                value += prob * self.cfr(outcome, (), prob, prob)
        else:
            if self.chance_sampling == CHANCE_CYCLE:
                self._outcome = game.realize_chance_outcome(self.iterations, self._outcome)
            else:
                self._outcome = game.sample_chance_outcome(self._rng)
            value = self.cfr(self._outcome, (), 1.0, 1.0)
        self.iterations += 1
        return value

    def cfr(
        self,
        chance_outcome: ChanceOutcome,
        history: History,
        reach_p1: float,
        reach_p2: float,
    ) -> float:
        """Counterfactual utility of *history* for the player about to act there."""
        game = self.game
        if game.is_terminal(history):
            return game.terminal_utility(chance_outcome, history)

        player = game.acting_player(history)
        actions = game.legal_actions(history)
        key = game.infoset_key(player, chance_outcome, history)
        node = self.store.get_or_create(key, len(actions))

        reach_opponent = reach_p2 if player == 0 else reach_p1
        strategy = node.current_strategy(reach_opponent)

        util = np.zeros(len(actions))
        for a, action in enumerate(actions):
            child = history + (action,)
            if player == 0:
                child_util = self.cfr(chance_outcome, child, reach_p1 * strategy[a], reach_p2)
            else:
                child_util = self.cfr(chance_outcome, child, reach_p1, reach_p2 * strategy[a])
            util[a] = child_util if game.acting_player(child) == player else -child_util

        node_util = float(strategy @ util)
        for a in range(len(actions)):
            node.update_regret(a, reach_opponent * (util[a] - node_util))
        return node_util

    # ── Strategy extraction ───────────────────────────────────────────────────

    def average_strategy_for(self, key: Hashable) -> dict[Action, float]:
        """Average strategy at *key* as {action: probability}.

        Raises:
            UnknownInformationSetError: If *key* was never visited.
        """
        node = self.store.lookup(key)
        actions = self.game.legal_actions(key.history)
        return dict(zip(actions, node.average_strategy().tolist()))

    def average_strategy_profile(self) -> StrategyProfile:
        """Average strategy for every visited infoset, in sorted key order."""
        return {key: self.average_strategy_for(key) for key in self.store}

    def expected_value(self) -> float:
        """Player 1's expected value under the average strategy, over every chance outcome.

        Raises:
            UnknownInformationSetError: If a reachable infoset was never visited.
        """
        return float(
            sum(prob * self._average_value(outcome, ()) for outcome, prob in self.game.chance_outcomes())
        )

    def _average_value(self, chance_outcome: ChanceOutcome, history: History) -> float:
        game = self.game
        if game.is_terminal(history):
            return game.terminal_utility(chance_outcome, history)

        player = game.acting_player(history)
        actions = game.legal_actions(history)
        key = game.infoset_key(player, chance_outcome, history)
        strategy = self.store.lookup(key).average_strategy()

        value = 0.0
        for a, action in enumerate(actions):
            child = history + (action,)
            child_value = self._average_value(chance_outcome, child)
            if game.acting_player(child) != player:
                child_value = -child_value
            value += strategy[a] * child_value
        return value

    def exploitability(self) -> float:
        return compute_exploitability(self.game, self.average_strategy_profile())


# ─── Convenience driver ────────────────────────────────────────────────────────


def solve(
    game: GameDefinition,
    n_iterations: int = 10_000,
    *,
    chance_sampling: str = CHANCE_CYCLE,
    seed: int | None = None,
    convergence_check_every: int | None = None,
    exploitability_threshold: float | None = None,
    log_every: int | None = None,
) -> CfrResult:
    """Run CFR and return the average strategy with its value and exploitability.

    Args:
        game:                     Game to solve.
        n_iterations:             Maximum number of CFR iterations.
        chance_sampling:          Chance mode (see CfrSolver).
        seed:                     Generator seed for ``"sample"`` mode.
        convergence_check_every:  Compute exploitability every N iterations.
        exploitability_threshold: Stop early once exploitability drops below
                                  this value (requires convergence_check_every).
        log_every:                Log the running game value every N iterations.

    Returns:
        CfrResult for the run.

    Raises:
        ValueError: On a non-positive iteration count or check interval.

    Examples:
        >>> from cfr_solver.games.kuhn import KuhnPoker
        >>> result = solve(KuhnPoker(), n_iterations=600)
        >>> result.n_iterations
        600
    """
    if n_iterations <= 0:
        raise ValueError(f"n_iterations must be positive, got {n_iterations}")
    if convergence_check_every is not None and convergence_check_every <= 0:
        raise ValueError(f"convergence_check_every must be positive, got {convergence_check_every}")
    if log_every is not None and log_every <= 0:
        raise ValueError(f"log_every must be positive, got {log_every}")

    solver = CfrSolver(game, chance_sampling=chance_sampling, seed=seed)
    logger.info(
        "Training %s for %d iterations (chance=%s)", game.name, n_iterations, chance_sampling
    )

    step_points = {n_iterations}
    for every in (convergence_check_every, log_every):
        if every is not None:
            step_points.update(range(every, n_iterations + 1, every))

    value_total = 0.0
    history: list[tuple[int, float]] = []
    converged = False
    for stop in sorted(step_points):
        chunk = stop - solver.iterations
        value_total += solver.train(chunk) * chunk

        if log_every is not None and stop % log_every == 0:
            logger.info(
                "iteration %d: average game value %+.5f", stop, value_total / solver.iterations
            )
        if convergence_check_every is not None and stop % convergence_check_every == 0:
            eps = solver.exploitability()
            history.append((stop, eps))
            logger.info("iteration %d: exploitability %.5f", stop, eps)
            if exploitability_threshold is not None and eps < exploitability_threshold:
                converged = True
                logger.info("Converged below %.5f after %d iterations", exploitability_threshold, stop)
                break

    profile = solver.average_strategy_profile()
    exploitability = compute_exploitability(game, profile)
    if exploitability_threshold is None:
        converged = exploitability < _DEFAULT_CONVERGED_EPS
    expected_value = solver.expected_value()
    logger.info(
        "Finished %s: %d iterations, %d infosets, EV %+.5f, exploitability %.5f",
        game.name,
        solver.iterations,
        len(solver.store),
        expected_value,
        exploitability,
    )

    return CfrResult(
        game_name=game.name,
        average_strategy=profile,
        n_iterations=solver.iterations,
        average_game_value=value_total / solver.iterations,
        expected_value=expected_value,
        exploitability=exploitability,
        converged=converged,
        exploitability_history=history,
    )


# ─── Public strategy helpers ───────────────────────────────────────────────────


def get_action_probabilities(result: CfrResult, key: InfoSetKey) -> dict[Action, float]:
    """Look up the average strategy at *key* in a finished run.

    Raises:
        UnknownInformationSetError: If *key* is not in the result.
    """
    try:
        return result.average_strategy[key]
    except KeyError:
        raise UnknownInformationSetError(key) from None


def get_greedy_action(result: CfrResult, key: InfoSetKey) -> Action:
    """Return the most probable action at *key* (first one on ties)."""
    strategy = get_action_probabilities(result, key)
    return max(strategy, key=strategy.__getitem__)
