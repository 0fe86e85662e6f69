"""
Card and die labels, and human-readable I/O helpers.

Kuhn card encoding: integers 1..N in ascending strength.
    1=J, 2=Q, 3=K for the standard 3-card deck; decks larger than the
    face-card names fall back to the integer itself ("4", "5", ...).

Dudo die encoding: integers 1..num_sides; face 1 is wild.

String representations are used exclusively at I/O boundaries.
"""

from __future__ import annotations

CARD_NAMES: list[str] = ["J", "Q", "K"]
CARD_JACK: int = 1
CARD_QUEEN: int = 2
CARD_KING: int = 3

DIE_WILD: int = 1


def card_to_str(card: int) -> str:
    """Convert a Kuhn card integer to its label.

    Examples:
        >>> card_to_str(1)
        'J'
        >>> card_to_str(3)
        'K'
        >>> card_to_str(5)
        '5'
    """
    if card < 1:
        raise ValueError(f"Card values start at 1, got {card}")
    if card <= len(CARD_NAMES):
        return CARD_NAMES[card - 1]
    return str(card)


def str_to_card(s: str) -> int:
    """Convert a card label back to its integer value (case-insensitive).

    Examples:
        >>> str_to_card('q')
        2
        >>> str_to_card('4')
        4

    Raises:
        ValueError: If the label is not a card name or positive integer.
    """
    label = s.strip().upper()
    if label in CARD_NAMES:
        return CARD_NAMES.index(label) + 1
    if label.isdigit() and int(label) > len(CARD_NAMES):
        return int(label)
    raise ValueError(f"Invalid card string: {s!r}")


def hand_to_str(cards: tuple[int, ...]) -> str:
    """Space-separated labels for a deal.

    Examples:
        >>> hand_to_str((3, 1, 2))
        'K J Q'
    """
    return " ".join(card_to_str(c) for c in cards)


def die_to_str(face: int) -> str:
    """Label a die face; the wild face is marked with an asterisk.

    Examples:
        >>> die_to_str(4)
        '4'
        >>> die_to_str(1)
        '1*'
    """
    if face < 1:
        raise ValueError(f"Die faces start at 1, got {face}")
    return f"{face}*" if face == DIE_WILD else str(face)
