"""
Dudo (Perudo) with one die per player.

Each player rolls one private die. Players alternate making strictly
stronger claims about the number of dice of a given rank across both dice,
until one player calls DUDO (challenges the previous claim). Faces showing 1
are wild and count towards every rank.

Claim ordering (num_sides=6), weakest first:

    1×2, 1×3, 1×4, 1×5, 1×6, 1×1, 2×2, 2×3, 2×4, 2×5, 2×6, 2×1

Claims are encoded as integers 0..2*num_sides-1 in that order, so "stronger"
is simply "larger index". DUDO is encoded as 2*num_sides.

Payoff to the claimant (the player to act once DUDO ends the game),
with diff = actual count - claimed count:

    diff > 0  → +diff (challenger loses the surplus)
    diff == 0 → +1    (exact claim)
    diff < 0  → diff  (claimant loses the shortfall)
"""

from __future__ import annotations

from typing import NamedTuple

from cfr_solver.errors import InvalidStateError
from cfr_solver.games.base import ChanceOutcome, GameDefinition, History
from cfr_solver.games.cards import DIE_WILD, die_to_str
from cfr_solver.games.chance import die_pairs

_DICE_PER_PLAYER: int = 1
_TOTAL_DICE: int = 2 * _DICE_PER_PLAYER


class Claim(NamedTuple):
    """A claim that at least ``count`` dice show ``rank`` (ones wild).

    Example:
        >>> Claim(count=2, rank=5)
        Claim(count=2, rank=5)
    """

    count: int
    rank: int


class Dudo(GameDefinition):
    """Two-player, one-die-each Dudo.

    Args:
        num_sides: Faces per die (default 6). Claim ranks run 2..num_sides
                   followed by the wild rank 1.

    Raises:
        ValueError: If num_sides < 2.
    """

    name = "dudo"

    def __init__(self, num_sides: int = 6) -> None:
        if num_sides < 2:
            raise ValueError(f"Dudo needs dice with at least 2 sides, got num_sides={num_sides}")
        self.num_sides = num_sides
        self.num_claims = _TOTAL_DICE * num_sides
        self.dudo = self.num_claims
        self._ranks: tuple[int, ...] = tuple(range(2, num_sides + 1)) + (DIE_WILD,)
        self._pairs = die_pairs(num_sides)
        p = 1.0 / len(self._pairs)
        self._outcomes: list[tuple[ChanceOutcome, float]] = [(pair, p) for pair in self._pairs]
        # Histories already checked by _validate. Legal histories are increasing
        # claim sequences with an optional trailing DUDO.
        self._valid_histories: set[History] = {()}

    def claim_of(self, action: int) -> Claim:
        """Decode a claim index.

        Raises:
            InvalidStateError: If *action* is not a claim index.
        """
        if not 0 <= action < self.num_claims:
            raise InvalidStateError(f"Not a claim index: {action!r}")
        return Claim(count=action // self.num_sides + 1, rank=self._ranks[action % self.num_sides])

    def count_matching(self, dice: ChanceOutcome, rank: int) -> int:
        """Count dice that satisfy *rank*, with wild ones counting for every rank."""
        return sum(1 for d in dice if d == rank or d == DIE_WILD)

    # ── Rules ─────────────────────────────────────────────────────────────────

    def _validate(self, history: History) -> None:
        history = tuple(history)
        if history in self._valid_histories:
            return
        self._validate(history[:-1])
        action = history[-1]
        previous = history[-2] if len(history) > 1 else None
        if previous == self.dudo:
            raise InvalidStateError(f"Action after DUDO in history {history!r}")
        if action == self.dudo:
            if previous is None:
                raise InvalidStateError("DUDO cannot open the game")
        elif isinstance(action, int) and 0 <= action < self.num_claims:
            if previous is not None and action <= previous:
                raise InvalidStateError(
                    f"Claims must strictly increase: {previous} then {action} in {history!r}"
                )
        else:
            raise InvalidStateError(f"Unknown Dudo action {action!r} in {history!r}")
        self._valid_histories.add(history)

    def is_terminal(self, history: History) -> bool:
        self._validate(history)
        return len(history) > 0 and history[-1] == self.dudo

    def legal_actions(self, history: History) -> tuple[int, ...]:
        if self.is_terminal(history):
            raise InvalidStateError(f"No legal actions at terminal history {history!r}")
        if not history:
            return tuple(range(self.num_claims))
        return tuple(range(history[-1] + 1, self.num_claims)) + (self.dudo,)

    def terminal_utility(self, chance_outcome: ChanceOutcome, history: History) -> float:
        if not self.is_terminal(history):
            raise InvalidStateError(f"Terminal utility requested for non-terminal history {history!r}")
        claim = self.claim_of(history[-2])
        diff = self.count_matching(chance_outcome, claim.rank) - claim.count
        return float(diff) if diff != 0 else 1.0

    def private_info(self, player: int, chance_outcome: ChanceOutcome) -> int:
        return chance_outcome[player]

    # ── Chance ────────────────────────────────────────────────────────────────

    def chance_outcomes(self) -> list[tuple[ChanceOutcome, float]]:
        return self._outcomes

    def realize_chance_outcome(
        self,
        iteration_index: int,
        prior_outcome: ChanceOutcome | None,
    ) -> ChanceOutcome:
        return self._pairs[iteration_index % len(self._pairs)]

    # ── Labels ────────────────────────────────────────────────────────────────

    def action_label(self, action: int) -> str:
        if action == self.dudo:
            return "DUDO"
        claim = self.claim_of(action)
        return f"{claim.count}x{claim.rank}"

    def private_label(self, private: int) -> str:
        return die_to_str(private)

    def __repr__(self) -> str:
        return f"Dudo(num_sides={self.num_sides})"
