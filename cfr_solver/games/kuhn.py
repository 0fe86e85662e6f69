"""
Kuhn poker rules.

Each player antes 1 chip and receives one private card from a deck of
``deck_size`` unique cards (J, Q, K for the standard game). Player 1 acts
first; each player may PASS (check / fold) or BET (bet / call 1 chip).

Terminal histories and payoff to the player to act at that history:

    p p    — showdown for the antes          ±1
    b p    — player 2 folds to a bet         +1 (bettor)
    b b    — called bet, showdown            ±2
    p b p  — player 1 folds to a bet         +1 (bettor)
    p b b  — called bet, showdown            ±2

The game value for player 1 at equilibrium of the 3-card game is -1/18.
"""

from __future__ import annotations

from cfr_solver.errors import InvalidStateError
from cfr_solver.games.base import ChanceOutcome, GameDefinition, History
from cfr_solver.games.cards import card_to_str
from cfr_solver.games.chance import next_permutation, ordered_pairs

PASS: str = "p"
BET: str = "b"
ACTIONS: tuple[str, str] = (PASS, BET)

KUHN_GAME_VALUE: float = -1.0 / 18.0

_DECISION_HISTORIES: frozenset[History] = frozenset({(), (PASS,), (BET,), (PASS, BET)})
_TERMINAL_HISTORIES: frozenset[History] = frozenset(
    {
        (PASS, PASS),
        (BET, PASS),
        (BET, BET),
        (PASS, BET, PASS),
        (PASS, BET, BET),
    }
)

_ACTION_NAMES: dict[str, str] = {PASS: "pass", BET: "bet"}


class KuhnPoker(GameDefinition):
    """Two-player Kuhn poker over a deck of ``deck_size`` unique cards.

    A chance outcome is a sequence of cards: player 1 holds ``outcome[0]``,
    player 2 holds ``outcome[1]``. Exact passes enumerate the N*(N-1) dealt
    pairs; training cycles through full deck permutations, whose unused tail
    cards only spread the pairs evenly over a cycle.

    Args:
        deck_size: Number of unique cards, valued 1..deck_size (default 3).

    Raises:
        ValueError: If deck_size < 2.
    """

    name = "kuhn"

    def __init__(self, deck_size: int = 3) -> None:
        if deck_size < 2:
            raise ValueError(f"Kuhn poker needs at least 2 cards, got deck_size={deck_size}")
        self.deck_size = deck_size
        if deck_size == 3:
            self.known_game_value = KUHN_GAME_VALUE
        self._deck: tuple[int, ...] = tuple(range(1, deck_size + 1))
        self._outcomes: list[tuple[ChanceOutcome, float]] | None = None

    # ── Rules ─────────────────────────────────────────────────────────────────

    def _validate(self, history: History) -> None:
        if history not in _DECISION_HISTORIES and history not in _TERMINAL_HISTORIES:
            raise InvalidStateError(f"Not a Kuhn poker history: {history!r}")

    def is_terminal(self, history: History) -> bool:
        history = tuple(history)
        self._validate(history)
        return history in _TERMINAL_HISTORIES

    def legal_actions(self, history: History) -> tuple[str, ...]:
        if self.is_terminal(history):
            raise InvalidStateError(f"No legal actions at terminal history {history!r}")
        return ACTIONS

    def terminal_utility(self, chance_outcome: ChanceOutcome, history: History) -> float:
        history = tuple(history)
        if not self.is_terminal(history):
            raise InvalidStateError(f"Terminal utility requested for non-terminal history {history!r}")
        player = self.acting_player(history)
        if history[-2:] == (BET, PASS):
            return 1.0
        stake = 1.0 if history[-1] == PASS else 2.0
        own, other = chance_outcome[player], chance_outcome[1 - player]
        return stake if own > other else -stake

    def private_info(self, player: int, chance_outcome: ChanceOutcome) -> int:
        return chance_outcome[player]

    # ── Chance ────────────────────────────────────────────────────────────────

    def chance_outcomes(self) -> list[tuple[ChanceOutcome, float]]:
        if self._outcomes is None:
            pairs = ordered_pairs(self._deck)
            p = 1.0 / len(pairs)
            self._outcomes = [(pair, p) for pair in pairs]
        return self._outcomes

    def realize_chance_outcome(
        self,
        iteration_index: int,
        prior_outcome: ChanceOutcome | None,
    ) -> ChanceOutcome:
        if prior_outcome is None:
            return self._deck
        return next_permutation(prior_outcome)

    # ── Labels ────────────────────────────────────────────────────────────────

    def action_label(self, action: str) -> str:
        return _ACTION_NAMES[action]

    def private_label(self, private: int) -> str:
        return card_to_str(private)

    def history_label(self, history: History) -> str:
        return "".join(history) if history else "--"

    def __repr__(self) -> str:
        return f"KuhnPoker(deck_size={self.deck_size})"
