"""Remote game session model and the session-store interface."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any

from blockchess.core.enums import Color
from blockchess.errors import MultiplayerError

# No 0/O or 1/I: codes get read aloud and typed by hand.
INVITE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_LENGTH = 6


class SessionStatus(StrEnum):
    """Lifecycle of a remote game."""

    WAITING = "waiting"
    ACTIVE = "active"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"
    ABANDONED = "abandoned"

    @property
    def is_finished(self) -> bool:
        return self not in (SessionStatus.WAITING, SessionStatus.ACTIVE)


@dataclass(frozen=True, slots=True)
class GameSession:
    """One row of the ``game_sessions`` table."""

    id: str
    invite_code: str
    white_player_id: str
    fen: str
    status: SessionStatus
    black_player_id: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def side_to_move(self) -> Color:
        fields = self.fen.split()
        return Color.BLACK if len(fields) > 1 and fields[1] == "b" else Color.WHITE

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> GameSession:
        try:
            return cls(
                id=str(row["id"]),
                invite_code=str(row["invite_code"]),
                white_player_id=str(row["white_player_id"]),
                fen=str(row["fen"]),
                status=SessionStatus(row["status"]),
                black_player_id=row.get("black_player_id"),
                created_at=str(row.get("created_at") or ""),
                updated_at=str(row.get("updated_at") or ""),
            )
        except (KeyError, ValueError) as exc:
            raise MultiplayerError(f"Malformed session row: {exc}") from exc

    def to_row(self) -> dict[str, Any]:
        row = asdict(self)
        row["status"] = self.status.value
        return row


def generate_invite_code(rng: random.Random | None = None) -> str:
    """Random ``INVITE_LENGTH``-character code from ``INVITE_ALPHABET``."""
    rng = rng or random.SystemRandom()
    return "".join(rng.choice(INVITE_ALPHABET) for _ in range(INVITE_LENGTH))


def normalize_invite_code(code: str) -> str:
    return code.strip().upper()


# ── Store interface ──────────────────────────────────────────────────────────

SessionCallback = Callable[[GameSession], None]


class Subscription(ABC):
    """Handle returned by :meth:`SessionStore.subscribe`."""

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivering updates.  Safe to call repeatedly."""


class SessionStore(ABC):
    """Key-value store of game sessions.

    All methods raise :class:`~blockchess.errors.MultiplayerError`
    subclasses on failure.  Stores that cannot push changes leave
    ``supports_push`` False; callers then poll :meth:`fetch_session`.
    """

    supports_push: bool = False

    @abstractmethod
    def create_session(
        self,
        *,
        invite_code: str,
        white_player_id: str,
        fen: str,
    ) -> GameSession:
        """Insert a new session in the ``waiting`` state."""

    @abstractmethod
    def fetch_session(self, session_id: str) -> GameSession:
        """Fetch by primary key; raises ``SessionNotFoundError``."""

    @abstractmethod
    def fetch_by_invite_code(self, invite_code: str) -> GameSession:
        """Fetch by invite code; raises ``SessionNotFoundError``."""

    @abstractmethod
    def update_session(self, session_id: str, **fields: Any) -> GameSession:
        """Update *fields* and return the stored row."""

    def subscribe(self, session_id: str, callback: SessionCallback) -> Subscription:
        """Deliver every later update of *session_id* to *callback*."""
        raise NotImplementedError(f"{type(self).__name__} cannot push updates")


def encode_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Column values ready for storage (enums flattened to strings)."""
    allowed = {"fen", "status", "black_player_id", "white_player_id"}
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown session fields: {sorted(unknown)}")
    return {
        key: value.value if isinstance(value, SessionStatus) else value
        for key, value in fields.items()
    }
