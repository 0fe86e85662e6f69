"""
One-shot, symmetric, zero-sum normal-form games solved by regret matching.

    rock_paper_scissors()              — 3×3, the classic cycle
    colonel_blotto(soldiers, fields)   — every allocation of soldiers to fields

The payoff matrix is from the row player's perspective; the column player
receives ``-payoff.T`` (symmetric zero-sum).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class MatrixGame:
    """A symmetric two-player zero-sum normal-form game.

    Attributes:
        name:    Short identifier (e.g. ``"rps"``).
        actions: Human-readable label per pure strategy.
        payoff:  float64 array of shape (n, n); ``payoff[i, j]`` is the row
                 player's utility when row plays i and column plays j.
    """

    name: str
    actions: tuple[str, ...]
    payoff: np.ndarray

    def __post_init__(self) -> None:
        n = len(self.actions)
        if self.payoff.shape != (n, n):
            raise ValueError(
                f"Payoff matrix shape {self.payoff.shape} does not match {n} actions"
            )

    @property
    def num_actions(self) -> int:
        return len(self.actions)

    def payoff_for(self, player: int) -> np.ndarray:
        """Payoff matrix indexed [own action, opponent action] for *player*."""
        if player == 0:
            return self.payoff
        if player == 1:
            return -self.payoff.T
        raise ValueError(f"player must be 0 or 1, got {player}")


# ─── Rock-paper-scissors ───────────────────────────────────────────────────────


def rock_paper_scissors() -> MatrixGame:
    """Rock, paper, scissors with +1 / 0 / -1 payoffs.

    Example:
        >>> rock_paper_scissors().payoff[1, 0]   # paper beats rock
        1.0
    """
    payoff = np.array(
        [
            [0.0, -1.0, 1.0],
            [1.0, 0.0, -1.0],
            [-1.0, 1.0, 0.0],
        ]
    )
    return MatrixGame(name="rps", actions=("rock", "paper", "scissors"), payoff=payoff)


# ─── Colonel Blotto ────────────────────────────────────────────────────────────


def blotto_allocations(soldiers: int, battlefields: int) -> list[tuple[int, ...]]:
    """Every way to split *soldiers* across *battlefields*, in lexicographic order.

    Examples:
        >>> blotto_allocations(2, 2)
        [(0, 2), (1, 1), (2, 0)]
        >>> len(blotto_allocations(5, 3))
        21
    """
    if soldiers < 0 or battlefields < 1:
        raise ValueError(
            f"Need soldiers >= 0 and battlefields >= 1, got {soldiers}, {battlefields}"
        )
    if battlefields == 1:
        return [(soldiers,)]
    allocations = []
    for first in range(0, soldiers + 1):
        for rest in blotto_allocations(soldiers - first, battlefields - 1):
            allocations.append((first, *rest))
    return allocations


def _blotto_payoff(a: tuple[int, ...], b: tuple[int, ...]) -> float:
    won = sum(1 for x, y in zip(a, b) if x > y)
    lost = sum(1 for x, y in zip(a, b) if x < y)
    return float(won - lost)


def colonel_blotto(soldiers: int = 5, battlefields: int = 3) -> MatrixGame:
    """Colonel Blotto: payoff = battlefields won minus battlefields lost.

    Example:
        >>> game = colonel_blotto()
        >>> game.num_actions
        21
        >>> game.actions[0]
        '005'
    """
    allocations = blotto_allocations(soldiers, battlefields)
    payoff = np.array([[_blotto_payoff(a, b) for b in allocations] for a in allocations])
    labels = tuple("".join(str(x) for x in alloc) for alloc in allocations)
    return MatrixGame(name="blotto", actions=labels, payoff=payoff)
