"""Online play: session stores and the multiplayer synchroniser."""

from blockchess.multiplayer.memory_store import InMemorySessionStore
from blockchess.multiplayer.session import (
    INVITE_ALPHABET,
    INVITE_LENGTH,
    GameSession,
    SessionStatus,
    SessionStore,
    Subscription,
    generate_invite_code,
    normalize_invite_code,
)
from blockchess.multiplayer.synchronizer import (
    MultiplayerMode,
    MultiplayerSession,
    MultiplayerState,
    session_status_for,
)

__all__ = [
    "INVITE_ALPHABET",
    "INVITE_LENGTH",
    "GameSession",
    "InMemorySessionStore",
    "MultiplayerMode",
    "MultiplayerSession",
    "MultiplayerState",
    "SessionStatus",
    "SessionStore",
    "Subscription",
    "generate_invite_code",
    "normalize_invite_code",
    "session_status_for",
]
