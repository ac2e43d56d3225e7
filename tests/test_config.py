"""Tests for AppSettings environment overrides."""

import logging

import pytest

from blockchess.config import AppSettings
from blockchess.core.enums import Color
from blockchess.engine.difficulty import Difficulty


class TestAppSettings:
    def test_defaults(self) -> None:
        settings = AppSettings.from_env({})
        assert settings.ai_enabled
        assert settings.ai_difficulty == Difficulty.EASY
        assert settings.ai_color == Color.BLACK
        assert settings.ai_delay_ms == 600
        assert settings.poll_interval_ms == 2000
        assert not settings.multiplayer_available

    def test_overrides(self) -> None:
        settings = AppSettings.from_env(
            {
                "BLOCKCHESS_AI_ENABLED": "off",
                "BLOCKCHESS_AI_DIFFICULTY": "Hard",
                "BLOCKCHESS_AI_COLOR": "white",
                "BLOCKCHESS_AI_DELAY_MS": "0",
                "BLOCKCHESS_REQUEST_TIMEOUT_S": "2.5",
                "BLOCKCHESS_BACKEND_URL": "https://example.test",
                "BLOCKCHESS_BACKEND_KEY": "anon-key",
            }
        )
        assert not settings.ai_enabled
        assert settings.ai_difficulty == Difficulty.HARD
        assert settings.ai_color == Color.WHITE
        assert settings.ai_delay_ms == 0
        assert settings.request_timeout_s == 2.5
        assert settings.multiplayer_available

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("BLOCKCHESS_AI_ENABLED", "maybe"),
            ("BLOCKCHESS_AI_DIFFICULTY", "insane"),
            ("BLOCKCHESS_AI_COLOR", "green"),
            ("BLOCKCHESS_AI_DELAY_MS", "-5"),
            ("BLOCKCHESS_POLL_INTERVAL_MS", "soon"),
        ],
    )
    def test_bad_values_keep_default(
        self, key: str, value: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="blockchess.config"):
            settings = AppSettings.from_env({key: value})
        assert settings == AppSettings()
        assert key in caplog.text

    def test_key_hidden_from_repr(self) -> None:
        settings = AppSettings(backend_key="secret")
        assert "secret" not in repr(settings)
