"""
Regret nodes and the information-set store for the CFR solvers.

An information set (infoset) is the equivalence class of game states the
acting player cannot tell apart. Each infoset visited during training owns
one RegretNode holding three float64 arrays of length ``num_actions``:

    regret_sum    — cumulative counterfactual regret (signed, unbounded)
    strategy      — current regret-matched strategy (a distribution)
    strategy_sum  — cumulative reach-weighted strategy (drives averaging)

The InfoSetStore creates nodes lazily on first visit and returns the same
node instance for the same key for the store's whole lifetime. Nodes are
never deleted and never reset mid-run.

The same nodes back the normal-form regret-matching solver, keyed by
InfoSetKey(player, None, ()).
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator

import numpy as np

from cfr_solver.errors import InvalidStateError, UnknownInformationSetError


# ─── Regret matching ───────────────────────────────────────────────────────────


def regret_matching(regrets: np.ndarray) -> np.ndarray:
    """Return the strategy proportional to positive regrets.

    Falls back to uniform if no action has positive regret (including the
    initial all-zero state).

    Args:
        regrets: 1-D array of cumulative regrets.

    Returns:
        New float64 array, non-negative and summing to 1.

    Examples:
        >>> regret_matching(np.array([2.0, -1.0, 2.0])).tolist()
        [0.5, 0.0, 0.5]
        >>> regret_matching(np.array([-3.0, 0.0])).tolist()
        [0.5, 0.5]
    """
    positive = np.maximum(regrets, 0.0)
    total = positive.sum()
    if total <= 0.0:
        return np.full(len(regrets), 1.0 / len(regrets))
    return positive / total


def _normalise_or_uniform(weights: np.ndarray) -> np.ndarray:
    total = weights.sum()
    if total <= 0.0:
        return np.full(len(weights), 1.0 / len(weights))
    return weights / total


# ─── Regret node ───────────────────────────────────────────────────────────────


class RegretNode:
    """Per-infoset regret and strategy accumulators.

    Attributes:
        key:          The information-set key this node belongs to.
        num_actions:  Number of legal actions; fixed at creation.
        regret_sum:   Cumulative counterfactual regret per action.
        strategy:     Strategy computed on the most recent visit.
        strategy_sum: Reach-weighted sum of every strategy played.

    Raises:
        ValueError: If num_actions < 1.
    """

    __slots__ = ("key", "num_actions", "regret_sum", "strategy", "strategy_sum")

    def __init__(self, key: Hashable, num_actions: int) -> None:
        if num_actions < 1:
            raise ValueError(f"A regret node needs at least one action, got {num_actions}")
        self.key = key
        self.num_actions = num_actions
        self.regret_sum = np.zeros(num_actions)
        self.strategy = np.full(num_actions, 1.0 / num_actions)
        self.strategy_sum = np.zeros(num_actions)

    @property
    def action_count(self) -> int:
        return self.num_actions

    def current_strategy(self, reach_probability: float) -> np.ndarray:
        """Regret-match a fresh strategy and fold it into the strategy sum.

        Args:
            reach_probability: Probability that the opponent (and chance)
                               play to this infoset on the current iteration.

        Returns:
            The new current strategy (also stored on the node).
        """
        self.strategy = regret_matching(self.regret_sum)
        self.strategy_sum += reach_probability * self.strategy
        return self.strategy

    def update_regret(self, action: int, value: float) -> None:
        """Add *value* to the regret of *action*; no clamping."""
        self.regret_sum[action] += value

    def average_strategy(self) -> np.ndarray:
        """Return the normalised strategy sum, uniform if it has no mass.

        Does not mutate the node: repeated calls return equal arrays.
        """
        return _normalise_or_uniform(self.strategy_sum)

    def __repr__(self) -> str:
        avg = ", ".join(f"{p:.3f}" for p in self.average_strategy())
        return f"RegretNode(key={self.key!r}, average=[{avg}])"


# ─── Information-set store ─────────────────────────────────────────────────────


class InfoSetStore:
    """Lazily populated mapping from infoset key to RegretNode.

    Example:
        >>> store = InfoSetStore()
        >>> node = store.get_or_create("K", 2)
        >>> store.get_or_create("K", 2) is node
        True
        >>> len(store)
        1
    """

    def __init__(self) -> None:
        self._nodes: dict[Hashable, RegretNode] = {}

    def get_or_create(self, key: Hashable, num_actions: int) -> RegretNode:
        """Return the node for *key*, creating it on first visit.

        Raises:
            InvalidStateError: If *key* already exists with a different
                               action count (the key function is not injective).
        """
        node = self._nodes.get(key)
        if node is None:
            node = RegretNode(key, num_actions)
            self._nodes[key] = node
        elif node.num_actions != num_actions:
            raise InvalidStateError(
                f"Information set {key!r} has {node.num_actions} actions, "
                f"but {num_actions} were requested"
            )
        return node

    def lookup(self, key: Hashable) -> RegretNode:
        """Return the existing node for *key*.

        Raises:
            UnknownInformationSetError: If *key* was never created.
        """
        try:
            return self._nodes[key]
        except KeyError:
            raise UnknownInformationSetError(key) from None

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(sorted(self._nodes))

    def items(self) -> Iterator[tuple[Hashable, RegretNode]]:
        """Yield (key, node) pairs in sorted key order."""
        for key in sorted(self._nodes):
            yield key, self._nodes[key]
