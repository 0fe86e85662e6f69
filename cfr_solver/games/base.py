"""
Game definition interface shared by every sequential game the CFR engine solves.

A GameDefinition is a pure, stateless description of one two-player zero-sum
game with imperfect information:

    chance outcomes  → who holds which private card / die
    history          → immutable tuple of action labels played so far
    legal actions    → ordered tuple, may depend on the history
    terminal payoff  → from the perspective of the player to act at that history

Information-set keys are InfoSetKey NamedTuples: hashable, totally ordered,
and carrying the full public history so the key alone is enough to recover
legal actions and terminality.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable, Sequence
from typing import Any, NamedTuple

import numpy as np

from cfr_solver.games.chance import sample_index

# ─── Type aliases ──────────────────────────────────────────────────────────────

Action = Any
History = tuple
ChanceOutcome = tuple


# ─── Information-set key ───────────────────────────────────────────────────────


class InfoSetKey(NamedTuple):
    """Everything the acting player knows at a decision point.

    Attributes:
        player:  Index of the acting player (0 or 1).
        private: The acting player's private information (card, die face).
                 ``None`` for games without private information.
        history: Public action history leading to the decision.

    Example:
        >>> InfoSetKey(player=1, private=3, history=("p",))
        InfoSetKey(player=1, private=3, history=('p',))
    """

    player: int
    private: Hashable
    history: History


# ─── Game definition ───────────────────────────────────────────────────────────


class GameDefinition(ABC):
    """Abstract two-player zero-sum extensive-form game.

    Subclasses implement the rules; the CFR engine never inspects a history
    itself. Every query validates the history and raises InvalidStateError
    when its precondition does not hold.
    """

    name: str = "game"
    num_players: int = 2
    # Closed-form equilibrium value for player 1, when one is known.
    known_game_value: float | None = None

    # ── Rules ─────────────────────────────────────────────────────────────────

    @abstractmethod
    def legal_actions(self, history: History) -> tuple:
        """Return the ordered legal actions at a non-terminal history."""

    @abstractmethod
    def is_terminal(self, history: History) -> bool:
        """Return True if no further action can be taken."""

    @abstractmethod
    def terminal_utility(self, chance_outcome: ChanceOutcome, history: History) -> float:
        """Return the payoff to the player to act at a terminal history."""

    @abstractmethod
    def private_info(self, player: int, chance_outcome: ChanceOutcome) -> Hashable:
        """Return what *player* privately observes of the chance outcome."""

    def acting_player(self, history: History) -> int:
        """Return the player to act; strict alternation by default."""
        return len(history) % 2

    def infoset_key(
        self,
        player: int,
        chance_outcome: ChanceOutcome,
        history: History,
    ) -> InfoSetKey:
        return InfoSetKey(player, self.private_info(player, chance_outcome), tuple(history))

    def utility_for(self, player: int, chance_outcome: ChanceOutcome, history: History) -> float:
        """Return the terminal payoff from *player*'s perspective.

        Zero-sum: the payoff to the other player is the negation.
        """
        utility = self.terminal_utility(chance_outcome, history)
        return utility if self.acting_player(history) == player else -utility

    # ── Chance ────────────────────────────────────────────────────────────────

    @abstractmethod
    def chance_outcomes(self) -> list[tuple[ChanceOutcome, float]]:
        """Return every chance outcome paired with its probability."""

    @abstractmethod
    def realize_chance_outcome(
        self,
        iteration_index: int,
        prior_outcome: ChanceOutcome | None,
    ) -> ChanceOutcome:
        """Return the chance outcome for a training iteration.

        Deterministic cycling: over one full cycle every outcome of
        chance_outcomes() is dealt equally often. A cycled outcome may carry
        detail no player observes, such as the undealt cards.
        """

    def sample_chance_outcome(self, rng: np.random.Generator) -> ChanceOutcome:
        """Draw one chance outcome according to its probability."""
        outcomes = self.chance_outcomes()
        idx = sample_index(rng, [p for _, p in outcomes])
        return outcomes[idx][0]

    # ── Labels ────────────────────────────────────────────────────────────────

    def action_label(self, action: Action) -> str:
        return str(action)

    def private_label(self, private: Hashable) -> str:
        return str(private)

    def history_label(self, history: Sequence) -> str:
        """Compact human-readable history; ``--`` for the empty history."""
        if not history:
            return "--"
        return " ".join(self.action_label(a) for a in history)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
