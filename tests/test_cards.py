"""
Tests for cfr_solver/games/cards.py

Covers card and die labels at the I/O boundary.
"""

from __future__ import annotations

import pytest

from cfr_solver.games.cards import (
    CARD_JACK,
    CARD_KING,
    CARD_QUEEN,
    card_to_str,
    die_to_str,
    hand_to_str,
    str_to_card,
)


class TestCardToStr:
    def test_face_cards(self) -> None:
        assert card_to_str(CARD_JACK) == "J"
        assert card_to_str(CARD_QUEEN) == "Q"
        assert card_to_str(CARD_KING) == "K"

    def test_larger_decks_fall_back_to_numbers(self) -> None:
        assert card_to_str(7) == "7"

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            card_to_str(0)


class TestStrToCard:
    @pytest.mark.parametrize("label, card", [("J", 1), ("q", 2), (" K ", 3), ("5", 5)])
    def test_parses(self, label: str, card: int) -> None:
        assert str_to_card(label) == card

    @pytest.mark.parametrize("label", ["A", "", "2", "-4"])
    def test_invalid(self, label: str) -> None:
        with pytest.raises(ValueError):
            str_to_card(label)


class TestLabels:
    def test_hand_to_str(self) -> None:
        assert hand_to_str((3, 1, 2)) == "K J Q"

    def test_die_to_str(self) -> None:
        assert die_to_str(1) == "1*"
        assert die_to_str(6) == "6"

    def test_die_to_str_invalid(self) -> None:
        with pytest.raises(ValueError):
            die_to_str(0)
