"""
Regret matching for one-shot normal-form games (rock-paper-scissors, Blotto).

Both players keep one RegretNode each in an InfoSetStore, keyed by
InfoSetKey(player, None, ()). Every iteration:

  1. each player's current strategy is regret-matched (and accumulated into
     its strategy sum with weight 1);
  2. each player's regret for action a grows by
        u(a, opponent) − u(played, opponent)

     expected mode (default): "opponent" is the opponent's full mixed
         strategy and "played" is the player's own mixed strategy;
     sampled mode: both actions are drawn from the current strategies.

The average strategies converge to a Nash equilibrium of the game.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from cfr_solver.games.base import InfoSetKey
from cfr_solver.games.chance import sample_index
from cfr_solver.games.matrix_games import MatrixGame
from cfr_solver.solvers.information_sets import InfoSetStore, RegretNode


@dataclass
class MatrixSolution:
    """Output of normal-form regret matching.

    Attributes:
        game_name:          Name of the solved game.
        average_strategies: (row strategy, column strategy) average strategies.
        game_value:         Row player's expected payoff under the averages.
        exploitability:     Best-response gap of the average profile:
                            max_i (P·σ₂)_i − min_j (σ₁·P)_j, zero at equilibrium.
        n_iterations:       Iterations completed.
    """

    game_name: str
    average_strategies: tuple[np.ndarray, np.ndarray]
    game_value: float
    exploitability: float
    n_iterations: int


def profile_exploitability(payoff: np.ndarray, row: np.ndarray, col: np.ndarray) -> float:
    """Best-response gap of (row, col) for a zero-sum payoff matrix.

    Example:
        >>> from cfr_solver.games.matrix_games import rock_paper_scissors
        >>> u = np.full(3, 1 / 3)
        >>> round(profile_exploitability(rock_paper_scissors().payoff, u, u), 12)
        0.0
    """
    return max(0.0, float(np.max(payoff @ col) - np.min(row @ payoff)))


class RegretMatchingSolver:
    """Self-play regret matching over a MatrixGame.

    Args:
        game:    Normal-form game to solve.
        sampled: If True, sample actions each iteration instead of using
                 expected utilities against the opponent's mixed strategy.
        seed:    Seed for the sampling Generator.
    """

    def __init__(self, game: MatrixGame, *, sampled: bool = False, seed: int | None = None) -> None:
        self.game = game
        self.sampled = sampled
        self.store = InfoSetStore()
        self.iterations = 0
        self._rng = np.random.default_rng(seed)
        self._payoffs = (game.payoff_for(0), game.payoff_for(1))

    def node(self, player: int) -> RegretNode:
        return self.store.get_or_create(InfoSetKey(player, None, ()), self.game.num_actions)

    def _regrets(self, player: int, strategies: list[np.ndarray], picks: list[int] | None) -> np.ndarray:
        payoff = self._payoffs[player]
        if picks is None:
            action_utils = payoff @ strategies[1 - player]
            realized = float(strategies[player] @ action_utils)
        else:
            action_utils = payoff[:, picks[1 - player]]
            realized = float(action_utils[picks[player]])
        return action_utils - realized

    def _update(self, player: int, regrets: np.ndarray) -> None:
        node = self.node(player)
        for a, value in enumerate(regrets):
            node.update_regret(a, float(value))

    def train(self, iterations: int) -> MatrixSolution:
        """Run *iterations* rounds of self-play and return the average profile.

        Raises:
            ValueError: If iterations is negative.
        """
        if iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {iterations}")
        for _ in range(iterations):
            strategies = [self.node(p).current_strategy(1.0) for p in (0, 1)]
            picks = None
            if self.sampled:
                picks = [sample_index(self._rng, s) for s in strategies]
            regrets = [self._regrets(p, strategies, picks) for p in (0, 1)]
            for p in (0, 1):
                self._update(p, regrets[p])
            self.iterations += 1
        return self.solution()

    def train_against(self, opponent_strategy: np.ndarray, iterations: int) -> np.ndarray:
        """Train the row player alone against a fixed column strategy.

        Returns:
            The row player's average strategy, which approaches a best
            response to *opponent_strategy*.

        Raises:
            ValueError: If opponent_strategy is not a distribution over the
                        game's actions.
        """
        opponent = np.asarray(opponent_strategy, dtype=np.float64)
        if opponent.shape != (self.game.num_actions,) or np.any(opponent < 0.0):
            raise ValueError(f"Invalid opponent strategy: {opponent_strategy!r}")
        if not np.isclose(opponent.sum(), 1.0):
            raise ValueError(f"Opponent strategy must sum to 1, got {opponent.sum():.6f}")

        for _ in range(iterations):
            own = self.node(0).current_strategy(1.0)
            picks = None
            if self.sampled:
                picks = [sample_index(self._rng, own), sample_index(self._rng, opponent)]
            self._update(0, self._regrets(0, [own, opponent], picks))
            self.iterations += 1
        return self.node(0).average_strategy()

    def solution(self) -> MatrixSolution:
        row = self.node(0).average_strategy()
        col = self.node(1).average_strategy()
        payoff = self.game.payoff
        return MatrixSolution(
            game_name=self.game.name,
            average_strategies=(row, col),
            game_value=float(row @ payoff @ col),
            exploitability=profile_exploitability(payoff, row, col),
            n_iterations=self.iterations,
        )
