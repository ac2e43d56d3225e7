"""Square type alias and coordinate helpers.

Squares use the :mod:`chess` layout (Little-Endian Rank-File mapping):
    a1=0, b1=1, ..., h1=7
    ...
    a8=56, b8=57, ..., h8=63
"""

from __future__ import annotations

from typing import TypeAlias

import chess

Square: TypeAlias = int  # 0–63


def file_of(sq: Square) -> int:
    """File index 0–7 (a–h)."""
    return chess.square_file(sq)


def rank_of(sq: Square) -> int:
    """Rank index 0–7 (1–8)."""
    return chess.square_rank(sq)


def make_square(file: int, rank: int) -> Square:
    """Create square from file (0–7) and rank (0–7)."""
    return chess.square(file, rank)


def square_name(sq: Square) -> str:
    """Human-readable name, e.g. 0 → 'a1', 63 → 'h8'."""
    return chess.square_name(sq)


def parse_square(name: str) -> Square:
    """Parse square name, e.g. 'e4' → 28."""
    key = name.strip().lower()
    if key not in chess.SQUARE_NAMES:
        raise ValueError(f"Invalid square name: {name!r}")
    return chess.parse_square(key)
