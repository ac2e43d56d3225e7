"""Rules oracle — a thin adapter over :mod:`chess`.

Move legality, check/mate/draw detection and FEN serialisation are delegated
to python-chess.  This module converts between its objects and the
project's value objects and normalises every accepted move shape into a
:class:`~blockchess.core.move.MoveRecord`.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import replace

import chess

from blockchess.core.enums import Color, GameResult, MoveFlag, PieceType
from blockchess.core.move import AnyMove, MoveIntent, MoveRecord
from blockchess.core.piece import Piece
from blockchess.core.types import Square, rank_of
from blockchess.errors import IllegalMoveError, InvalidPositionError

STARTING_FEN = chess.STARTING_FEN

BoardSnapshot = list[list[Piece | None]]


def _color(value: chess.Color) -> Color:
    return Color.WHITE if value == chess.WHITE else Color.BLACK


def _chess_color(color: Color) -> chess.Color:
    return chess.WHITE if color == Color.WHITE else chess.BLACK


def _piece(value: chess.Piece) -> Piece:
    return Piece.from_char(value.symbol())


class Position:
    """Full game position (placement, side to move, castling, ep, clocks).

    The game controller treats a ``Position`` as immutable: it copies before
    applying a move.  ``push``/``pop`` exist for the search engine, which
    works on its own private copy.
    """

    __slots__ = ("_board",)

    def __init__(self, board: chess.Board | None = None) -> None:
        self._board = board if board is not None else chess.Board()

    # ── Construction ─────────────────────────────────────────────────────

    @classmethod
    def initial(cls) -> Position:
        return cls(chess.Board())

    @classmethod
    def from_fen(cls, fen: str) -> Position:
        try:
            board = chess.Board(fen)
        except ValueError as exc:
            raise InvalidPositionError(f"Invalid FEN {fen!r}: {exc}") from exc
        return cls(board)

    def copy(self) -> Position:
        return Position(self._board.copy())

    # ── Serialisation ────────────────────────────────────────────────────

    def fen(self) -> str:
        return self._board.fen()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self.fen() == other.fen()

    def __hash__(self) -> int:
        return hash(self.fen())

    def __repr__(self) -> str:
        return f"Position({self.fen()!r})"

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def side_to_move(self) -> Color:
        return _color(self._board.turn)

    def piece_at(self, square: Square) -> Piece | None:
        value = self._board.piece_at(square)
        return _piece(value) if value is not None else None

    def pieces(self) -> Iterator[tuple[Square, Piece]]:
        """Occupied squares in ascending square order."""
        for square, value in sorted(self._board.piece_map().items()):
            yield square, _piece(value)

    def count(self, color: Color, piece_type: PieceType) -> int:
        return len(self._board.pieces(piece_type, _chess_color(color)))

    def board_snapshot(self) -> BoardSnapshot:
        """8×8 grid; row 0 is rank 8, column 0 is the a-file."""
        return [
            [self.piece_at(chess.square(file, rank)) for file in range(8)]
            for rank in range(7, -1, -1)
        ]

    def in_check(self) -> bool:
        return self._board.is_check()

    def is_checkmate(self) -> bool:
        return self._board.is_checkmate()

    def is_stalemate(self) -> bool:
        return self._board.is_stalemate()

    def is_draw(self) -> bool:
        """Stalemate, bare material, the fifty-move rule or threefold repetition.

        The last two end the game outright; nobody has to claim them.
        Repetitions are only seen within this position's own move stack.
        """
        b = self._board
        return (
            b.is_stalemate()
            or b.is_insufficient_material()
            or b.is_fifty_moves()
            or b.is_repetition(3)
        )

    def is_game_over(self) -> bool:
        return self._board.is_checkmate() or self.is_draw()

    def result(self) -> GameResult:
        if self._board.is_checkmate():
            if self.side_to_move.opposite == Color.WHITE:
                return GameResult.WHITE_WINS
            return GameResult.BLACK_WINS
        if self.is_draw():
            return GameResult.DRAW
        return GameResult.IN_PROGRESS

    # ── Move generation ──────────────────────────────────────────────────

    def legal_moves(self, square: Square | None = None) -> list[MoveRecord]:
        """Verbose legal moves, optionally only those starting on *square*.

        Promotions are listed once per promotion piece.
        """
        board = self._board
        if square is None:
            moves = board.legal_moves
        else:
            moves = board.generate_legal_moves(from_mask=chess.BB_SQUARES[square])
        return [self._describe(move) for move in moves]

    def legal_intents(self) -> list[MoveIntent]:
        """Legal moves without SAN/captured details (cheap, for search)."""
        return [_intent(move) for move in self._board.legal_moves]

    def is_capture(self, move: MoveIntent | MoveRecord) -> bool:
        return self._board.is_capture(self._to_chess(move))

    # ── Move application ─────────────────────────────────────────────────

    def apply_move(self, move: AnyMove) -> MoveRecord:
        """Validate and apply *move* in place; return the verbose record.

        Accepts a :class:`MoveIntent`, a :class:`MoveRecord`, or UCI / SAN
        text.  Raises :class:`IllegalMoveError` and leaves the position
        unchanged when the move is malformed or illegal.
        """
        chess_move = self._normalise(move)
        record = self._describe(chess_move)
        self._board.push(chess_move)
        return _with_fen(record, self._board.fen())

    def push(self, move: MoveIntent | MoveRecord) -> None:
        """Apply a move known to be legal (no validation)."""
        self._board.push(self._to_chess(move))

    def pop(self) -> None:
        """Retract the last pushed move."""
        self._board.pop()

    # ── Internal helpers ─────────────────────────────────────────────────

    def _normalise(self, move: AnyMove) -> chess.Move:
        board = self._board
        if isinstance(move, str):
            text = move.strip()
            if not _looks_like_uci(text):
                return self._parse_san(text)
            try:
                move = MoveIntent.from_uci(text.lower())
            except ValueError as exc:
                raise IllegalMoveError(f"Illegal move {text!r}: {exc}") from exc

        if not isinstance(move, (MoveIntent, MoveRecord)):
            raise IllegalMoveError(f"Unsupported move object: {move!r}")
        chess_move = self._to_chess(move)
        if not board.is_legal(chess_move):
            raise IllegalMoveError(f"Illegal move {chess_move.uci()} in {board.fen()}")
        return chess_move

    def _parse_san(self, text: str) -> chess.Move:
        try:
            chess_move = self._board.parse_san(text)
        except ValueError as exc:
            raise IllegalMoveError(f"Illegal move {text!r}: {exc}") from exc
        # parse_san also accepts null-move tokens such as "--".
        if not chess_move:
            raise IllegalMoveError(f"Not a move: {text!r}")
        return chess_move

    @staticmethod
    def _to_chess(move: MoveIntent | MoveRecord) -> chess.Move:
        promotion = int(move.promotion) if move.promotion is not None else None
        return chess.Move(move.from_sq, move.to_sq, promotion=promotion)

    def _describe(self, move: chess.Move) -> MoveRecord:
        board = self._board
        moving = board.piece_at(move.from_square)
        if moving is None:
            raise IllegalMoveError(f"No piece on {chess.square_name(move.from_square)}")

        captured: Piece | None = None
        if board.is_en_passant(move):
            flag = MoveFlag.EN_PASSANT
            captured = Piece(_color(not moving.color), PieceType.PAWN)
        else:
            target = board.piece_at(move.to_square)
            if target is not None and not board.is_castling(move):
                captured = _piece(target)
            if board.is_kingside_castling(move):
                flag = MoveFlag.CASTLE_KINGSIDE
            elif board.is_queenside_castling(move):
                flag = MoveFlag.CASTLE_QUEENSIDE
            elif move.promotion is not None:
                flag = MoveFlag.PROMOTION
            elif (
                moving.piece_type == chess.PAWN
                and abs(rank_of(move.to_square) - rank_of(move.from_square)) == 2
            ):
                flag = MoveFlag.DOUBLE_PAWN
            else:
                flag = MoveFlag.NORMAL

        return MoveRecord(
            from_sq=move.from_square,
            to_sq=move.to_square,
            piece=_piece(moving),
            flag=flag,
            captured=captured,
            promotion=PieceType(move.promotion) if move.promotion else None,
            san=board.san(move),
        )


def _intent(move: chess.Move) -> MoveIntent:
    promotion = PieceType(move.promotion) if move.promotion else None
    return MoveIntent(move.from_square, move.to_square, promotion)


def _with_fen(record: MoveRecord, fen: str) -> MoveRecord:
    return replace(record, fen_after=fen)


def _looks_like_uci(text: str) -> bool:
    return (
        len(text) in (4, 5)
        and text[0].lower() in "abcdefgh"
        and text[1] in "12345678"
        and text[2].lower() in "abcdefgh"
        and text[3] in "12345678"
    )


def replay(moves: list[MoveRecord], start_fen: str = STARTING_FEN) -> Position:
    """Rebuild a position by re-applying *moves* from *start_fen*."""
    position = Position.from_fen(start_fen)
    for move in moves:
        position.apply_move(move)
    return position
