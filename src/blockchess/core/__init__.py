"""Core domain layer — value objects and the rules-oracle adapter.

Quick start::

    from blockchess.core import Position, parse_square

    pos = Position.initial()
    for move in pos.legal_moves(parse_square("e2")):
        print(move.san)
"""

from blockchess.core.enums import (
    PROMOTION_TYPES,
    Color,
    GameResult,
    MoveFlag,
    PieceType,
)
from blockchess.core.move import AnyMove, MoveIntent, MoveRecord
from blockchess.core.piece import Piece
from blockchess.core.rules import STARTING_FEN, BoardSnapshot, Position, replay
from blockchess.core.types import (
    Square,
    file_of,
    make_square,
    parse_square,
    rank_of,
    square_name,
)

__all__ = [
    # Enums
    "Color",
    "GameResult",
    "MoveFlag",
    "PROMOTION_TYPES",
    "PieceType",
    # Types / helpers
    "Square",
    "file_of",
    "make_square",
    "parse_square",
    "rank_of",
    "square_name",
    # Domain objects
    "AnyMove",
    "BoardSnapshot",
    "MoveIntent",
    "MoveRecord",
    "Piece",
    "Position",
    # Rules
    "STARTING_FEN",
    "replay",
]
