"""Static position evaluation: material balance plus a mate bonus.

Scores are white-centric: positive favours white, negative favours black.
"""

from __future__ import annotations

from blockchess.core.enums import Color, PieceType
from blockchess.core.rules import Position

# The king value only keeps king captures from ever looking free.
PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 10,
    PieceType.KNIGHT: 30,
    PieceType.BISHOP: 30,
    PieceType.ROOK: 50,
    PieceType.QUEEN: 90,
    PieceType.KING: 900,
}

MATE_SCORE = 10_000


def material(position: Position) -> int:
    """White material minus black material."""
    score = 0
    for ptype, value in PIECE_VALUES.items():
        score += value * (
            position.count(Color.WHITE, ptype) - position.count(Color.BLACK, ptype)
        )
    return score


def evaluate(position: Position) -> int:
    """Material balance; a mated side to move loses ``MATE_SCORE``."""
    score = material(position)
    if position.is_checkmate():
        score += -MATE_SCORE if position.side_to_move == Color.WHITE else MATE_SCORE
    return score
