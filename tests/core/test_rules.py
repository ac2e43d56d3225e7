"""Tests for the Position adapter over the rules oracle."""

import pytest

from blockchess.core.enums import Color, GameResult, MoveFlag, PieceType
from blockchess.core.move import MoveIntent
from blockchess.core.piece import Piece
from blockchess.core.rules import STARTING_FEN, Position, replay
from blockchess.core.types import parse_square
from blockchess.errors import IllegalMoveError, InvalidPositionError

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
STALEMATE = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"


def _play(*moves: str) -> Position:
    pos = Position.initial()
    for move in moves:
        pos.apply_move(move)
    return pos


class TestConstruction:
    def test_initial_fen(self) -> None:
        assert Position.initial().fen() == STARTING_FEN

    def test_from_fen_round_trip(self) -> None:
        assert Position.from_fen(FOOLS_MATE).fen() == FOOLS_MATE

    def test_invalid_fen_raises(self) -> None:
        with pytest.raises(InvalidPositionError):
            Position.from_fen("not a fen")

    def test_copy_is_independent(self) -> None:
        pos = Position.initial()
        clone = pos.copy()
        clone.apply_move("e2e4")
        assert pos.fen() == STARTING_FEN
        assert clone != pos

    def test_board_snapshot_orientation(self) -> None:
        grid = Position.initial().board_snapshot()
        assert grid[0][0] == Piece(Color.BLACK, PieceType.ROOK)  # a8
        assert grid[7][4] == Piece(Color.WHITE, PieceType.KING)  # e1
        assert grid[4] == [None] * 8


class TestCheckAndEnd:
    def test_starting_not_in_check(self) -> None:
        assert not Position.initial().in_check()

    def test_fools_mate(self) -> None:
        pos = Position.from_fen(FOOLS_MATE)
        assert pos.in_check()
        assert pos.is_checkmate()
        assert pos.is_game_over()
        assert pos.result() == GameResult.BLACK_WINS

    def test_stalemate_is_draw(self) -> None:
        pos = Position.from_fen(STALEMATE)
        assert pos.is_stalemate()
        assert pos.is_draw()
        assert not pos.is_checkmate()
        assert pos.result() == GameResult.DRAW

    def test_insufficient_material_is_draw(self) -> None:
        pos = Position.from_fen("8/8/4k3/8/8/3K4/8/8 w - - 0 1")
        assert pos.is_draw()
        assert pos.is_game_over()

    def test_in_progress(self) -> None:
        assert Position.initial().result() == GameResult.IN_PROGRESS

    def test_fifty_move_rule_ends_game(self) -> None:
        pos = Position.from_fen("8/8/4k3/8/8/3K4/8/R7 w - - 100 80")
        assert pos.is_draw()
        assert pos.is_game_over()
        assert pos.result() == GameResult.DRAW
        assert not Position.from_fen("8/8/4k3/8/8/3K4/8/R7 w - - 99 80").is_draw()

    def test_threefold_repetition_ends_game(self) -> None:
        shuffle = ("Nf3", "Nf6", "Ng1", "Ng8")
        pos = _play(*shuffle)
        assert not pos.is_draw()
        for move in shuffle:
            pos.apply_move(move)
        assert pos.is_draw()
        assert pos.result() == GameResult.DRAW

    def test_white_wins_by_mate(self) -> None:
        pos = _play("e4", "e5", "Bc4", "Nc6", "Qh5", "Nf6", "Qxf7#")
        assert pos.result() == GameResult.WHITE_WINS


class TestLegalMoves:
    def test_twenty_moves_from_start(self) -> None:
        pos = Position.initial()
        assert len(pos.legal_moves()) == 20
        assert len(pos.legal_intents()) == 20

    def test_moves_from_square(self) -> None:
        moves = Position.initial().legal_moves(parse_square("g1"))
        assert sorted(m.san for m in moves) == ["Nf3", "Nh3"]

    def test_double_pawn_flag(self) -> None:
        moves = Position.initial().legal_moves(parse_square("e2"))
        flags = {m.san: m.flag for m in moves}
        assert flags == {"e3": MoveFlag.NORMAL, "e4": MoveFlag.DOUBLE_PAWN}

    def test_promotion_listed_per_piece(self) -> None:
        pos = Position.from_fen("8/P6k/8/8/8/8/8/K7 w - - 0 1")
        moves = pos.legal_moves(parse_square("a7"))
        assert {m.promotion for m in moves} == {
            PieceType.QUEEN,
            PieceType.ROOK,
            PieceType.BISHOP,
            PieceType.KNIGHT,
        }
        assert all(m.is_promotion for m in moves)

    def test_castling_is_not_capture(self) -> None:
        pos = Position.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        king_moves = pos.legal_moves(parse_square("e1"))
        castles = [m for m in king_moves if m.is_castle]
        assert {m.flag for m in castles} == {
            MoveFlag.CASTLE_KINGSIDE,
            MoveFlag.CASTLE_QUEENSIDE,
        }
        assert not any(m.is_capture for m in castles)


class TestApplyMove:
    def test_accepts_uci_san_and_intent(self) -> None:
        pos = Position.initial()
        pos.apply_move("e2e4")
        pos.apply_move("e5")
        record = pos.apply_move(MoveIntent(parse_square("g1"), parse_square("f3")))
        assert record.san == "Nf3"
        assert record.fen_after == pos.fen()
        assert pos.side_to_move == Color.BLACK

    def test_illegal_move_leaves_position(self) -> None:
        pos = Position.initial()
        with pytest.raises(IllegalMoveError):
            pos.apply_move("e2e5")
        with pytest.raises(IllegalMoveError):
            pos.apply_move("Qxh7")
        with pytest.raises(IllegalMoveError):
            pos.apply_move("--")
        with pytest.raises(IllegalMoveError):
            pos.apply_move("e7e8x")
        assert pos.fen() == STARTING_FEN

    def test_capture_record(self) -> None:
        pos = _play("e4", "d5")
        record = pos.apply_move("exd5")
        assert record.captured == Piece(Color.BLACK, PieceType.PAWN)
        assert record.is_capture
        assert record.color == Color.WHITE

    def test_en_passant_record(self) -> None:
        pos = _play("e4", "a6", "e5", "d5")
        assert pos.is_capture(MoveIntent(parse_square("e5"), parse_square("d6")))
        record = pos.apply_move("e5d6")
        assert record.is_en_passant
        assert record.captured == Piece(Color.BLACK, PieceType.PAWN)
        assert pos.piece_at(parse_square("d5")) is None

    def test_push_pop(self) -> None:
        pos = Position.initial()
        pos.push(MoveIntent(parse_square("e2"), parse_square("e4")))
        pos.pop()
        assert pos.fen() == STARTING_FEN

    def test_count(self) -> None:
        pos = Position.initial()
        assert pos.count(Color.WHITE, PieceType.PAWN) == 8
        assert pos.count(Color.BLACK, PieceType.QUEEN) == 1


class TestReplay:
    def test_replay_reproduces_position(self) -> None:
        pos = Position.initial()
        history = [pos.apply_move(m) for m in ("e4", "e5", "Nf3", "Nc6", "Bb5")]
        assert replay(history) == pos

    def test_replay_from_custom_start(self) -> None:
        start = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
        pos = Position.from_fen(start)
        history = [pos.apply_move("O-O"), pos.apply_move("O-O-O")]
        assert replay(history, start).fen() == pos.fen()
