"""
Name-based construction of games, used by the CLI, config files, and dashboard.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from cfr_solver.games.base import GameDefinition
from cfr_solver.games.dudo import Dudo
from cfr_solver.games.kuhn import KuhnPoker
from cfr_solver.games.matrix_games import MatrixGame, colonel_blotto, rock_paper_scissors

_GAMES: dict[str, Callable[..., GameDefinition]] = {
    "kuhn": KuhnPoker,
    "dudo": Dudo,
}

_MATRIX_GAMES: dict[str, Callable[..., MatrixGame]] = {
    "rps": rock_paper_scissors,
    "blotto": colonel_blotto,
}


def available_games() -> list[str]:
    return sorted(_GAMES)


def available_matrix_games() -> list[str]:
    return sorted(_MATRIX_GAMES)


def _construct(name: str, builder: Callable[..., Any], options: dict[str, Any]) -> Any:
    try:
        return builder(**options)
    except TypeError as err:
        raise ValueError(f"Invalid options for {name!r}: {options}") from err


def make_game(name: str, **options: Any) -> GameDefinition:
    """Build a sequential game by name.

    Args:
        name:    ``"kuhn"`` or ``"dudo"``.
        options: Forwarded to the game constructor (``deck_size``, ``num_sides``).

    Raises:
        ValueError: If the name is unknown or the options do not fit the game.

    Example:
        >>> make_game("kuhn", deck_size=3)
        KuhnPoker(deck_size=3)
    """
    if name not in _GAMES:
        raise ValueError(f"Unknown game: {name!r}. Available games: {available_games()}")
    return _construct(name, _GAMES[name], options)


def make_matrix_game(name: str, **options: Any) -> MatrixGame:
    """Build a normal-form game by name (``"rps"`` or ``"blotto"``).

    Raises:
        ValueError: If the name is unknown or the options do not fit the game.
    """
    if name not in _MATRIX_GAMES:
        raise ValueError(
            f"Unknown matrix game: {name!r}. Available games: {available_matrix_games()}"
        )
    return _construct(name, _MATRIX_GAMES[name], options)
