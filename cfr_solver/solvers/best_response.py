"""
Exact best response and exploitability for sequential games.

Exploitability of a strategy profile σ = (σ₁, σ₂):

    ε(σ) = BR₁(σ₂) + BR₂(σ₁)

where BRᵢ(σ₋ᵢ) is player i's expected value when best-responding to the
opponent's fixed strategy. In a zero-sum game this equals
best_p1_ev − worst_p1_ev, which is 0 exactly at a Nash equilibrium.

A best response must be chosen per information set, not per state: the
responder cannot see the opponent's private information. The computation
therefore

    1. walks every chance outcome, grouping the responder's decision states
       by infoset key and recording each state's opponent-and-chance reach;
    2. resolves infosets from the longest history to the shortest, picking
       the action with the highest reach-weighted value across members;
    3. memoises state values, which only depend on decisions deeper in the
       tree and so never go stale.

Profiles map InfoSetKey → {action: probability}. Infosets missing from a
profile are played uniformly.
"""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np

from cfr_solver.games.base import Action, ChanceOutcome, GameDefinition, History, InfoSetKey

StrategyProfile = dict[InfoSetKey, dict[Action, float]]

_Member = tuple[ChanceOutcome, History, float]


def strategy_at(
    profile: Mapping[InfoSetKey, Mapping[Action, float]],
    key: InfoSetKey,
    actions: tuple,
) -> np.ndarray:
    """Return the profile's probabilities over *actions*, uniform if *key* is absent."""
    dist = profile.get(key)
    if dist is None:
        return np.full(len(actions), 1.0 / len(actions))
    return np.array([dist.get(a, 0.0) for a in actions])


def _collect_decisions(
    game: GameDefinition,
    profile: Mapping[InfoSetKey, Mapping[Action, float]],
    player: int,
) -> dict[InfoSetKey, list[_Member]]:
    groups: dict[InfoSetKey, list[_Member]] = {}

    def walk(outcome: ChanceOutcome, history: History, reach: float) -> None:
        if game.is_terminal(history):
            return
        actor = game.acting_player(history)
        actions = game.legal_actions(history)
        key = game.infoset_key(actor, outcome, history)
        if actor == player:
            groups.setdefault(key, []).append((outcome, history, reach))
            for action in actions:
                walk(outcome, history + (action,), reach)
        else:
            probs = strategy_at(profile, key, actions)
            for action, p in zip(actions, probs):
                if p > 0.0:
                    walk(outcome, history + (action,), reach * p)

    for outcome, prob in game.chance_outcomes():
        walk(outcome, (), prob)
    return groups


def best_response_value(
    game: GameDefinition,
    profile: Mapping[InfoSetKey, Mapping[Action, float]],
    player: int,
) -> float:
    """Expected value to *player* when best-responding to *profile*.

    Args:
        game:    The game definition.
        profile: Strategy profile; only the opponent's infosets are read.
        player:  The best-responding player (0 or 1).

    Returns:
        Expected value per game from *player*'s perspective.

    Examples:
        >>> from cfr_solver.games.kuhn import KuhnPoker
        >>> best_response_value(KuhnPoker(), {}, 0) > 0   # vs. uniform random
        True
    """
    if player not in (0, 1):
        raise ValueError(f"player must be 0 or 1, got {player}")

    groups = _collect_decisions(game, profile, player)
    decisions: dict[InfoSetKey, Action] = {}
    memo: dict[tuple[ChanceOutcome, History], float] = {}

    def value(outcome: ChanceOutcome, history: History) -> float:
        memo_key = (outcome, history)
        cached = memo.get(memo_key)
        if cached is not None:
            return cached
        if game.is_terminal(history):
            v = game.utility_for(player, outcome, history)
        else:
            actor = game.acting_player(history)
            key = game.infoset_key(actor, outcome, history)
            if actor == player:
                v = value(outcome, history + (decisions[key],))
            else:
                actions = game.legal_actions(history)
                probs = strategy_at(profile, key, actions)
                v = 0.0
                for action, p in zip(actions, probs):
                    if p > 0.0:
                        v += p * value(outcome, history + (action,))
        memo[memo_key] = v
        return v

    for key in sorted(groups, key=lambda k: len(k.history), reverse=True):
        actions = game.legal_actions(key.history)
        totals = np.zeros(len(actions))
        for outcome, history, reach in groups[key]:
            for i, action in enumerate(actions):
                totals[i] += reach * value(outcome, history + (action,))
        decisions[key] = actions[int(np.argmax(totals))]

    return float(sum(prob * value(outcome, ()) for outcome, prob in game.chance_outcomes()))


def compute_exploitability(
    game: GameDefinition,
    profile: Mapping[InfoSetKey, Mapping[Action, float]],
) -> float:
    """Total exploitability of *profile* in payoff units per game (non-negative).

    Examples:
        >>> from cfr_solver.games.kuhn import KuhnPoker
        >>> compute_exploitability(KuhnPoker(), {}) > 0
        True
    """
    best_p1 = best_response_value(game, profile, 0)
    best_p2 = best_response_value(game, profile, 1)
    return max(0.0, best_p1 + best_p2)
