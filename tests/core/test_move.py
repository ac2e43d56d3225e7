"""Tests for move value objects and small core helpers."""

import pytest

from blockchess.core.enums import Color, MoveFlag, PieceType
from blockchess.core.move import MoveIntent, MoveRecord
from blockchess.core.piece import Piece
from blockchess.core.types import parse_square, square_name


class TestMoveIntent:
    def test_from_uci(self) -> None:
        move = MoveIntent.from_uci("e7e8q")
        assert move == MoveIntent(
            parse_square("e7"), parse_square("e8"), PieceType.QUEEN
        )
        assert move.uci == "e7e8q"

    @pytest.mark.parametrize("text", ["e2", "e2e9", "z2e4", "e7e8k", "e7e8p"])
    def test_from_uci_rejects(self, text: str) -> None:
        with pytest.raises(ValueError):
            MoveIntent.from_uci(text)


class TestMoveRecord:
    def test_properties(self) -> None:
        record = MoveRecord(
            parse_square("e1"),
            parse_square("g1"),
            Piece(Color.WHITE, PieceType.KING),
            MoveFlag.CASTLE_KINGSIDE,
            san="O-O",
        )
        assert record.is_castle
        assert not record.is_capture
        assert record.color == Color.WHITE
        assert record.uci == "e1g1"
        assert str(record) == "O-O"
        assert record.to_intent() == MoveIntent(parse_square("e1"), parse_square("g1"))


class TestHelpers:
    def test_parse_square(self) -> None:
        assert parse_square("a1") == 0
        assert parse_square(" H8 ") == 63
        assert square_name(28) == "e4"

    def test_parse_square_rejects(self) -> None:
        with pytest.raises(ValueError):
            parse_square("i9")

    def test_piece_type_parse(self) -> None:
        assert PieceType.parse("q") == PieceType.QUEEN
        assert PieceType.parse("Knight") == PieceType.KNIGHT
        with pytest.raises(ValueError):
            PieceType.parse("dragon")

    def test_piece_char(self) -> None:
        assert str(Piece.from_char("N")) == "N"
        assert Piece.from_char("k") == Piece(Color.BLACK, PieceType.KING)
        assert Color.BLACK.opposite == Color.WHITE
