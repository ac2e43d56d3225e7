"""Tests for the PostgREST session store (HTTP is faked)."""

from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from blockchess.config import AppSettings
from blockchess.core.rules import STARTING_FEN
from blockchess.errors import (
    MultiplayerUnavailableError,
    SessionNotFoundError,
    SessionStoreError,
)
from blockchess.multiplayer.rest_store import RestSessionStore
from blockchess.multiplayer.session import SessionStatus

ROW = {
    "id": "abc",
    "invite_code": "ABCDEF",
    "white_player_id": "player_host",
    "black_player_id": None,
    "fen": STARTING_FEN,
    "status": "waiting",
    "created_at": "2024-01-01T00:00:00+00:00",
    "updated_at": "2024-01-01T00:00:00+00:00",
}


def _response(
    status: int, payload: Any = None, raw: bytes | None = None
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = raw if raw is not None else json.dumps(payload).encode()
    response.url = "https://example.test/rest/v1/game_sessions"
    return response


class _FakeHttp:
    """Stands in for ``requests.Session``; replays canned responses."""

    def __init__(self, *responses: requests.Response | Exception) -> None:
        self.headers: dict[str, str] = {}
        self.requests: list[dict[str, Any]] = []
        self._responses = list(responses)

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.requests.append({"method": method, "url": url, **kwargs})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _store(http: _FakeHttp) -> RestSessionStore:
    return RestSessionStore(
        "https://example.test/", "anon-key", timeout=3.0, http=http
    )


class TestRestSessionStore:
    def test_headers(self) -> None:
        http = _FakeHttp()
        _store(http)
        assert http.headers["apikey"] == "anon-key"
        assert http.headers["Authorization"] == "Bearer anon-key"
        assert http.headers["Prefer"] == "return=representation"

    def test_create(self) -> None:
        http = _FakeHttp(_response(201, [ROW]))
        session = _store(http).create_session(
            invite_code="ABCDEF", white_player_id="player_host", fen=STARTING_FEN
        )
        assert session.id == "abc"
        sent = http.requests[0]
        assert sent["method"] == "POST"
        assert sent["url"] == "https://example.test/rest/v1/game_sessions"
        assert sent["json"]["status"] == "waiting"
        assert sent["timeout"] == 3.0

    def test_fetch_by_invite_code(self) -> None:
        http = _FakeHttp(_response(200, [ROW]))
        session = _store(http).fetch_by_invite_code("ABCDEF")
        assert session.invite_code == "ABCDEF"
        assert http.requests[0]["params"]["invite_code"] == "eq.ABCDEF"

    def test_empty_result_is_not_found(self) -> None:
        http = _FakeHttp(_response(200, []))
        with pytest.raises(SessionNotFoundError):
            _store(http).fetch_session("missing")

    def test_update(self) -> None:
        updated = dict(ROW, status="active", black_player_id="player_guest")
        http = _FakeHttp(_response(200, [updated]))
        session = _store(http).update_session(
            "abc", black_player_id="player_guest", status=SessionStatus.ACTIVE
        )
        assert session.status == SessionStatus.ACTIVE
        sent = http.requests[0]
        assert sent["method"] == "PATCH"
        assert sent["params"] == {"id": "eq.abc"}
        assert sent["json"] == {"black_player_id": "player_guest", "status": "active"}

    @pytest.mark.parametrize(
        "failure",
        [
            requests.ConnectionError("offline"),
            requests.Timeout("slow"),
            _response(500, {"message": "boom"}),
            _response(200, raw=b"<html>"),
        ],
    )
    def test_transport_errors(self, failure: Any) -> None:
        with pytest.raises(SessionStoreError):
            _store(_FakeHttp(failure)).fetch_session("abc")

    def test_requires_configuration(self) -> None:
        with pytest.raises(MultiplayerUnavailableError):
            RestSessionStore.from_settings(AppSettings())
        with pytest.raises(MultiplayerUnavailableError):
            RestSessionStore("", "key")

    def test_from_settings(self) -> None:
        settings = AppSettings(
            backend_url="https://example.test", backend_key="anon-key"
        )
        store = RestSessionStore.from_settings(settings)
        assert not store.supports_push
