"""Difficulty tiers: search depth plus deliberate randomness.

Each tier wraps the search engine with two independent layers, applied in
order: a chance to play a uniformly random legal move, and a chance to
overlook every capture before searching.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from blockchess.core.move import MoveIntent, MoveRecord
from blockchess.core.rules import Position
from blockchess.engine.minimax import MinimaxEngine
from blockchess.engine.search import IEngine

_LOGGER = logging.getLogger(__name__)


class Difficulty(StrEnum):
    """User-selectable AI strength."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, text: str | Difficulty) -> Difficulty:
        try:
            return cls(str(text).strip().lower())
        except ValueError:
            choices = ", ".join(d.value for d in cls)
            raise ValueError(
                f"Unknown difficulty {text!r} (expected {choices})"
            ) from None


@dataclass(slots=True, frozen=True)
class DifficultyConfig:
    """Search depth and randomisation probabilities for one tier."""

    depth: int
    random_chance: float
    blunder_chance: float


DIFFICULTY_CONFIG: Mapping[Difficulty, DifficultyConfig] = MappingProxyType(
    {
        Difficulty.EASY: DifficultyConfig(
            depth=1, random_chance=0.40, blunder_chance=0.30
        ),
        Difficulty.MEDIUM: DifficultyConfig(
            depth=2, random_chance=0.15, blunder_chance=0.0
        ),
        Difficulty.HARD: DifficultyConfig(
            depth=3, random_chance=0.0, blunder_chance=0.0
        ),
    }
)


class DifficultyPolicy:
    """Chooses the AI move for a given tier.

    Args:
        engine: Search engine; defaults to :class:`MinimaxEngine`.
        rng: Random source.  Unseeded by default — the weaker tiers are
            meant to play differently every game.
    """

    __slots__ = ("_engine", "_rng")

    def __init__(
        self,
        engine: IEngine | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._engine = engine if engine is not None else MinimaxEngine()
        self._rng = rng if rng is not None else random.Random()

    @staticmethod
    def config(difficulty: Difficulty) -> DifficultyConfig:
        return DIFFICULTY_CONFIG[Difficulty.parse(difficulty)]

    def choose_move(
        self,
        position: Position,
        difficulty: Difficulty,
    ) -> MoveIntent | MoveRecord | None:
        """Pick a move for the side to move, or ``None`` if there is none."""
        moves = position.legal_intents()
        if not moves:
            return None

        cfg = self.config(difficulty)

        if self._rng.random() < cfg.random_chance:
            move = self._rng.choice(moves)
            _LOGGER.debug("%s: random move %s", difficulty, move)
            return move

        candidates = moves
        if cfg.blunder_chance > 0 and self._rng.random() < cfg.blunder_chance:
            quiet = [m for m in moves if not position.is_capture(m)]
            if quiet:
                _LOGGER.debug("%s: ignoring captures this turn", difficulty)
                candidates = quiet

        result = self._engine.best_move(position, cfg.depth, candidates)
        _LOGGER.debug(
            "%s: searched depth %d, %d nodes, best %s (score %d)",
            difficulty,
            result.depth,
            result.nodes,
            result.best_move,
            result.score,
        )
        return result.best_move
