"""Process-local session store with push notifications.

Useful for hot-seat play across two controllers in one process and as the
store used by the test-suite.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any

from blockchess.errors import SessionNotFoundError
from blockchess.multiplayer.session import (
    GameSession,
    SessionCallback,
    SessionStatus,
    SessionStore,
    Subscription,
    encode_fields,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class _MemorySubscription(Subscription):
    __slots__ = ("_store", "_session_id", "_callback")

    def __init__(
        self,
        store: InMemorySessionStore,
        session_id: str,
        callback: SessionCallback,
    ) -> None:
        self._store = store
        self._session_id = session_id
        self._callback = callback

    def unsubscribe(self) -> None:
        self._store._remove_listener(self._session_id, self._callback)


class InMemorySessionStore(SessionStore):
    """Dictionary-backed :class:`SessionStore`.

    Sessions are kept as plain table rows, the way the REST backend stores
    them, and decoded on every read.  Subscribers are notified
    synchronously inside :meth:`update_session`.
    """

    supports_push = True

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, Any]] = {}
        self._listeners: defaultdict[str, list[SessionCallback]] = defaultdict(list)

    def create_session(
        self,
        *,
        invite_code: str,
        white_player_id: str,
        fen: str,
    ) -> GameSession:
        stamp = _now()
        session = GameSession(
            id=uuid.uuid4().hex,
            invite_code=invite_code,
            white_player_id=white_player_id,
            fen=fen,
            status=SessionStatus.WAITING,
            created_at=stamp,
            updated_at=stamp,
        )
        self._rows[session.id] = session.to_row()
        return session

    def fetch_session(self, session_id: str) -> GameSession:
        return GameSession.from_row(self._row(session_id))

    def fetch_by_invite_code(self, invite_code: str) -> GameSession:
        for row in self._rows.values():
            if row["invite_code"] == invite_code:
                return GameSession.from_row(row)
        raise SessionNotFoundError()

    def update_session(self, session_id: str, **fields: Any) -> GameSession:
        row = {**self._row(session_id), **encode_fields(fields)}
        row["updated_at"] = _now()
        updated = GameSession.from_row(row)
        self._rows[session_id] = row
        for callback in list(self._listeners.get(session_id, ())):
            callback(updated)
        return updated

    def subscribe(self, session_id: str, callback: SessionCallback) -> Subscription:
        self._listeners[session_id].append(callback)
        return _MemorySubscription(self, session_id, callback)

    def _row(self, session_id: str) -> dict[str, Any]:
        try:
            return self._rows[session_id]
        except KeyError:
            raise SessionNotFoundError() from None

    def _remove_listener(self, session_id: str, callback: SessionCallback) -> None:
        listeners = self._listeners.get(session_id)
        if listeners and callback in listeners:
            listeners.remove(callback)
