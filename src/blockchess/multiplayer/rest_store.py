"""PostgREST-backed session store (e.g. a Supabase project).

Talks to ``<base_url>/rest/v1/<table>`` with the project's anon key.  The
REST API cannot push changes, so ``supports_push`` is False and the
multiplayer session polls instead.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from blockchess.config import AppSettings
from blockchess.errors import (
    MultiplayerUnavailableError,
    SessionNotFoundError,
    SessionStoreError,
)
from blockchess.multiplayer.session import (
    GameSession,
    SessionStatus,
    SessionStore,
    encode_fields,
)

_LOGGER = logging.getLogger(__name__)


class RestSessionStore(SessionStore):
    """:class:`SessionStore` over the PostgREST HTTP API.

    Args:
        base_url: Project URL, e.g. ``https://xyz.supabase.co``.
        api_key: Anon/public API key.
        table: Sessions table name.
        timeout: Per-request timeout in seconds.
        http: Optional ``requests.Session`` (injected by tests).
    """

    supports_push = False

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "game_sessions",
        timeout: float = 10.0,
        http: requests.Session | None = None,
    ) -> None:
        if not base_url or not api_key:
            raise MultiplayerUnavailableError()
        self._endpoint = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._timeout = timeout
        self._http = http if http is not None else requests.Session()
        self._http.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            }
        )

    @classmethod
    def from_settings(cls, settings: AppSettings) -> RestSessionStore:
        if not settings.multiplayer_available:
            raise MultiplayerUnavailableError()
        return cls(
            settings.backend_url,
            settings.backend_key,
            table=settings.backend_table,
            timeout=settings.request_timeout_s,
        )

    # ── SessionStore impl ────────────────────────────────────────────────

    def create_session(
        self,
        *,
        invite_code: str,
        white_player_id: str,
        fen: str,
    ) -> GameSession:
        rows = self._request(
            "POST",
            json={
                "invite_code": invite_code,
                "white_player_id": white_player_id,
                "fen": fen,
                "status": SessionStatus.WAITING.value,
            },
        )
        return self._single(rows)

    def fetch_session(self, session_id: str) -> GameSession:
        rows = self._request("GET", params={"id": f"eq.{session_id}", "select": "*"})
        return self._single(rows)

    def fetch_by_invite_code(self, invite_code: str) -> GameSession:
        rows = self._request(
            "GET", params={"invite_code": f"eq.{invite_code}", "select": "*"}
        )
        return self._single(rows)

    def update_session(self, session_id: str, **fields: Any) -> GameSession:
        rows = self._request(
            "PATCH",
            params={"id": f"eq.{session_id}"},
            json=encode_fields(fields),
        )
        return self._single(rows)

    # ── Internal helpers ─────────────────────────────────────────────────

    def _request(
        self,
        method: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        try:
            response = self._http.request(
                method,
                self._endpoint,
                params=params,
                json=json,
                timeout=self._timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            _LOGGER.warning("%s %s failed: %s", method, self._endpoint, exc)
            raise SessionStoreError() from exc
        except ValueError as exc:
            _LOGGER.warning("%s %s returned invalid JSON", method, self._endpoint)
            raise SessionStoreError() from exc

        if isinstance(payload, dict):
            return [payload]
        if not isinstance(payload, list):
            raise SessionStoreError(f"Unexpected response: {payload!r}")
        return payload

    @staticmethod
    def _single(rows: list[dict[str, Any]]) -> GameSession:
        if not rows:
            raise SessionNotFoundError()
        return GameSession.from_row(rows[0])
