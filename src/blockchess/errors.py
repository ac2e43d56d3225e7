"""Exception hierarchy shared by the game, engine and multiplayer layers."""

from __future__ import annotations


class BlockChessError(Exception):
    """Base class for all BlockChess errors."""


class IllegalMoveError(BlockChessError, ValueError):
    """The rules oracle rejected a move (illegal or malformed)."""


class InvalidPositionError(BlockChessError, ValueError):
    """A serialized position (FEN) could not be parsed."""


# ── Multiplayer ─────────────────────────────────────────────────────────────


class MultiplayerError(BlockChessError):
    """Base class for remote-session failures.

    ``user_message`` is the short text shown to the player.
    """

    user_message = "Something went wrong with the online game."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class MultiplayerUnavailableError(MultiplayerError):
    """The session backend is not configured."""

    user_message = "Multiplayer is unavailable: no backend configured."


class SessionStoreError(MultiplayerError):
    """Transport-level failure talking to the session store."""

    user_message = "Could not reach the game server. Please try again."


class SessionNotFoundError(MultiplayerError):
    """No session matches the given id or invite code."""

    user_message = "Game not found. Check your invite code."


class SessionJoinError(MultiplayerError):
    """The session exists but cannot be joined."""

    user_message = "This game is no longer available."
