"""Shared engine search models and protocol."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from blockchess.core.move import MoveIntent, MoveRecord
    from blockchess.core.rules import Position


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search.

    ``score`` is white-centric, in evaluator units.
    """

    best_move: MoveIntent | MoveRecord | None
    score: int
    depth: int
    nodes: int


class IEngine(Protocol):
    """Protocol for search engines used by the difficulty policy."""

    def best_move(
        self,
        position: Position,
        depth: int,
        candidates: Sequence[MoveIntent | MoveRecord] | None = None,
    ) -> SearchResult: ...
