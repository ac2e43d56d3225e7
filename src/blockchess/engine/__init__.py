"""Chess AI: evaluator, minimax search and difficulty tiers."""

from blockchess.engine.difficulty import (
    DIFFICULTY_CONFIG,
    Difficulty,
    DifficultyConfig,
    DifficultyPolicy,
)
from blockchess.engine.evaluate import MATE_SCORE, PIECE_VALUES, evaluate, material
from blockchess.engine.minimax import MinimaxEngine
from blockchess.engine.search import IEngine, SearchResult

__all__ = [
    "DIFFICULTY_CONFIG",
    "Difficulty",
    "DifficultyConfig",
    "DifficultyPolicy",
    "IEngine",
    "MATE_SCORE",
    "MinimaxEngine",
    "PIECE_VALUES",
    "SearchResult",
    "evaluate",
    "material",
]
