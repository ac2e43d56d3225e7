"""Persistent piece identities for animated front-ends.

The rules oracle only knows what stands on each square.  A renderer that
animates pieces needs to know *which* piece moved, so the tracker keeps one
:class:`PieceInstance` per live piece and carries its id across moves.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace

from blockchess.core.enums import Color, MoveFlag, PieceType
from blockchess.core.move import MoveRecord
from blockchess.core.piece import Piece
from blockchess.core.rules import Position
from blockchess.core.types import Square, file_of, make_square, rank_of, square_name
from blockchess.errors import BlockChessError

# Rook (from-file, to-file) for each castling side.
_ROOK_FILES: dict[MoveFlag, tuple[int, int]] = {
    MoveFlag.CASTLE_KINGSIDE: (7, 5),  # h → f
    MoveFlag.CASTLE_QUEENSIDE: (0, 3),  # a → d
}


class PieceTrackingError(BlockChessError):
    """The tracked pieces no longer match the board."""


@dataclass(frozen=True, slots=True)
class PieceInstance:
    """A piece with a stable identity."""

    id: str
    piece_type: PieceType
    color: Color
    square: Square

    def __str__(self) -> str:
        kind = self.piece_type.name.lower()
        return f"{self.id}:{self.color} {kind}@{square_name(self.square)}"


def capture_square(record: MoveRecord) -> Square:
    """Square of the captured piece (differs from ``to_sq`` for en passant)."""
    if record.flag == MoveFlag.EN_PASSANT:
        return make_square(file_of(record.to_sq), rank_of(record.from_sq))
    return record.to_sq


def rook_castle_squares(record: MoveRecord) -> tuple[Square, Square] | None:
    """``(from, to)`` of the rook for a castling move, else ``None``."""
    files = _ROOK_FILES.get(record.flag)
    if files is None:
        return None
    rank = record.color.home_rank
    return make_square(files[0], rank), make_square(files[1], rank)


class PieceTracker:
    """Keeps piece identities in step with the authoritative position."""

    __slots__ = ("_pieces", "_next_id")

    def __init__(self, position: Position | None = None) -> None:
        self._pieces: list[PieceInstance] = []
        self._next_id = 0
        self.reset(position if position is not None else Position.initial())

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def pieces(self) -> tuple[PieceInstance, ...]:
        return tuple(self._pieces)

    def __len__(self) -> int:
        return len(self._pieces)

    def at(self, square: Square) -> PieceInstance | None:
        for piece in self._pieces:
            if piece.square == square:
                return piece
        return None

    def by_id(self, piece_id: str) -> PieceInstance | None:
        for piece in self._pieces:
            if piece.id == piece_id:
                return piece
        return None

    def matches(self, position: Position) -> bool:
        """True if every square holds the same (color, type) as *position*."""
        tracked = {(p.square, p.color, p.piece_type) for p in self._pieces}
        board = {(sq, pc.color, pc.piece_type) for sq, pc in position.pieces()}
        return len(tracked) == len(self._pieces) and tracked == board

    # ── Mutation ─────────────────────────────────────────────────────────

    def reset(self, position: Position) -> None:
        """Mint fresh sequential ids (``piece-0`` …) for *position*."""
        self._next_id = 0
        self._pieces = [
            self._mint(piece.piece_type, piece.color, square)
            for square, piece in _board_order(position)
        ]

    def apply_move(self, record: MoveRecord) -> None:
        """Update identities after *record* has been applied on the board.

        Raises :class:`PieceTrackingError` when a piece that the move needs
        is not tracked; the tracker is left unchanged in that case.
        """
        mover = self.at(record.from_sq)
        if mover is None:
            raise PieceTrackingError(
                f"No tracked piece on {square_name(record.from_sq)} for {record}"
            )

        rook_move = rook_castle_squares(record)
        rook = self.at(rook_move[0]) if rook_move is not None else None
        if rook_move is not None and rook is None:
            raise PieceTrackingError(
                f"No tracked rook on {square_name(rook_move[0])} for {record}"
            )

        pieces = self._pieces
        if record.captured is not None:
            target = capture_square(record)
            pieces = [p for p in pieces if p.square != target]

        moved = replace(
            mover,
            square=record.to_sq,
            piece_type=record.promotion or mover.piece_type,
        )
        updated: list[PieceInstance] = []
        for piece in pieces:
            if piece.id == mover.id:
                updated.append(moved)
            elif rook is not None and piece.id == rook.id:
                updated.append(replace(rook, square=rook_move[1]))
            else:
                updated.append(piece)
        self._pieces = updated

    def sync(self, position: Position) -> None:
        """Rebuild the piece list from *position*, keeping ids where possible.

        A tracked piece already standing on the right square keeps its id;
        remaining cells take any unused piece of the same color and type;
        cells left over get new ids.  With duplicate pieces (two knights,
        promoted queens) the pairing is best effort.
        """
        cells = list(_board_order(position))
        unused = list(self._pieces)
        assigned: dict[Square, PieceInstance] = {}

        for square, piece in cells:
            exact = self._take(unused, piece.color, piece.piece_type, square)
            if exact is not None:
                assigned[square] = exact

        result: list[PieceInstance] = []
        for square, piece in cells:
            existing = assigned.get(square)
            if existing is None:
                existing = self._take(unused, piece.color, piece.piece_type, None)
            if existing is None:
                result.append(self._mint(piece.piece_type, piece.color, square))
            else:
                result.append(replace(existing, square=square))
        self._pieces = result

    # ── Internal helpers ─────────────────────────────────────────────────

    def _mint(
        self, piece_type: PieceType, color: Color, square: Square
    ) -> PieceInstance:
        piece = PieceInstance(f"piece-{self._next_id}", piece_type, color, square)
        self._next_id += 1
        return piece

    @staticmethod
    def _take(
        pool: list[PieceInstance],
        color: Color,
        piece_type: PieceType,
        square: Square | None,
    ) -> PieceInstance | None:
        for index, piece in enumerate(pool):
            if piece.color != color or piece.piece_type != piece_type:
                continue
            if square is not None and piece.square != square:
                continue
            return pool.pop(index)
        return None


def _board_order(position: Position) -> Iterator[tuple[Square, Piece]]:
    """Occupied cells from a8 across to h1 (display order)."""
    for row, cells in enumerate(position.board_snapshot()):
        for col, piece in enumerate(cells):
            if piece is not None:
                yield make_square(col, 7 - row), piece
