"""
Error types raised by the CFR engine and the game definitions.

Both are contract violations rather than recoverable runtime conditions:
callers are expected to let them propagate.
"""

from __future__ import annotations


class CfrError(Exception):
    """Base class for solver errors."""


class InvalidStateError(CfrError, ValueError):
    """A game-state query was made on a history that does not satisfy its precondition.

    Raised when terminal utility is requested for a non-terminal history,
    legal actions are requested for a terminal history, a history is
    malformed (unknown action, move after the game ended, illegal claim),
    or an information-set key is reused with a different action count.
    """


class UnknownInformationSetError(CfrError, KeyError):
    """A strategy was requested for an information set that was never visited."""

    def __init__(self, key: object) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Information set was never visited during training: {self.key!r}"
