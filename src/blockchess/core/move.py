"""Move value objects.

Two shapes travel through the system:

* :class:`MoveIntent` — *from/to/promotion* only.  Produced by the UI, the
  AI or a remote peer; not yet validated.
* :class:`MoveRecord` — the verbose result of applying a move through the
  rules oracle.  Only records are stored in the move history.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

from blockchess.core.enums import Color, MoveFlag, PieceType
from blockchess.core.piece import Piece
from blockchess.core.types import Square, parse_square, square_name


@dataclass(frozen=True, slots=True)
class MoveIntent:
    """Unvalidated move request (UCI-style)."""

    from_sq: Square
    to_sq: Square
    promotion: PieceType | None = None

    def __str__(self) -> str:
        base = f"{square_name(self.from_sq)}{square_name(self.to_sq)}"
        if self.promotion is not None:
            base += self.promotion.letter
        return base

    @property
    def uci(self) -> str:
        """UCI long-algebraic notation."""
        return str(self)

    @classmethod
    def from_uci(cls, text: str) -> MoveIntent:
        """Parse ``"e2e4"`` / ``"e7e8q"``; raises ``ValueError`` on bad input."""
        text = text.strip()
        if len(text) not in (4, 5):
            raise ValueError(f"Invalid UCI move: {text!r}")
        promotion = PieceType.parse(text[4]) if len(text) == 5 else None
        if promotion in (PieceType.PAWN, PieceType.KING):
            raise ValueError(f"Invalid promotion piece in {text!r}")
        return cls(parse_square(text[:2]), parse_square(text[2:4]), promotion)


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """Verbose, immutable description of a legal move.

    ``fen_after`` is only filled once the move has actually been applied.
    """

    from_sq: Square
    to_sq: Square
    piece: Piece
    flag: MoveFlag = MoveFlag.NORMAL
    captured: Piece | None = None
    promotion: PieceType | None = None
    san: str = ""
    fen_after: str | None = None

    def __str__(self) -> str:
        return self.san or self.uci

    @property
    def uci(self) -> str:
        return str(self.to_intent())

    @property
    def color(self) -> Color:
        return self.piece.color

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def is_castle(self) -> bool:
        return self.flag in (MoveFlag.CASTLE_KINGSIDE, MoveFlag.CASTLE_QUEENSIDE)

    @property
    def is_promotion(self) -> bool:
        return self.flag == MoveFlag.PROMOTION

    @property
    def is_en_passant(self) -> bool:
        return self.flag == MoveFlag.EN_PASSANT

    def to_intent(self) -> MoveIntent:
        return MoveIntent(self.from_sq, self.to_sq, self.promotion)


AnyMove: TypeAlias = MoveIntent | MoveRecord | str
