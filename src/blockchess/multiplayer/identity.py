"""Stable anonymous player id, persisted with ``QSettings``."""

from __future__ import annotations

import logging
import random
import string

from PyQt6.QtCore import QSettings

_LOGGER = logging.getLogger(__name__)

ORGANIZATION = "BlockChess"
APPLICATION = "BlockChess"
PLAYER_ID_KEY = "multiplayer/player_id"

_BASE36 = string.digits + string.ascii_lowercase


def generate_player_id(rng: random.Random | None = None) -> str:
    """``player_`` followed by 13 random base-36 characters."""
    rng = rng or random.SystemRandom()
    return "player_" + "".join(rng.choice(_BASE36) for _ in range(13))


def load_player_id(settings: QSettings | None = None) -> str:
    """Return the stored player id, minting and saving one on first use."""
    store = settings if settings is not None else QSettings(ORGANIZATION, APPLICATION)
    value = store.value(PLAYER_ID_KEY, "", type=str)
    if value:
        return value

    value = generate_player_id()
    store.setValue(PLAYER_ID_KEY, value)
    store.sync()
    _LOGGER.info("Generated new player id %s", value)
    return value
