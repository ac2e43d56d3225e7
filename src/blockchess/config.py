"""Application settings.

Defaults live on the dataclass; :meth:`AppSettings.from_env` overlays
``BLOCKCHESS_*`` environment variables so deployments can point the game at
a session backend without code changes.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields

from blockchess.core.enums import Color
from blockchess.engine.difficulty import Difficulty

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "BLOCKCHESS_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


@dataclass
class AppSettings:
    """All user-configurable settings."""

    # Opponent
    ai_enabled: bool = True
    ai_difficulty: Difficulty = Difficulty.EASY
    ai_color: Color = Color.BLACK
    ai_delay_ms: int = 600

    # Multiplayer backend (PostgREST-compatible, e.g. Supabase)
    backend_url: str = ""
    backend_key: str = field(default="", repr=False)
    backend_table: str = "game_sessions"
    poll_interval_ms: int = 2000
    request_timeout_s: float = 10.0

    # Diagnostics
    log_level: str = "INFO"

    @property
    def multiplayer_available(self) -> bool:
        """Capability check: is a session backend configured?"""
        return bool(self.backend_url and self.backend_key)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppSettings:
        """Build settings from ``BLOCKCHESS_<FIELD>`` variables.

        Unknown or malformed values are logged and the default is kept.
        """
        env = os.environ if environ is None else environ
        settings = cls()
        for f in fields(cls):
            key = ENV_PREFIX + f.name.upper()
            raw = env.get(key)
            if raw is None:
                continue
            try:
                value = _coerce(f.name, getattr(settings, f.name), raw)
            except ValueError as exc:
                _LOGGER.warning("Ignoring %s: %s", key, exc)
                continue
            setattr(settings, f.name, value)
        return settings


def _coerce(name: str, current: object, raw: str) -> object:
    text = raw.strip()
    if isinstance(current, bool):
        lowered = text.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"expected a boolean, got {raw!r}")
    if isinstance(current, Difficulty):
        return Difficulty.parse(text)
    if isinstance(current, Color):
        try:
            return Color[text.upper()]
        except KeyError:
            raise ValueError(f"expected white or black, got {raw!r}") from None
    if isinstance(current, int):
        value = int(text)
        if value < 0:
            raise ValueError(f"{name} must be >= 0")
        return value
    if isinstance(current, float):
        return float(text)
    return text
