"""Pure-Python minimax search with alpha-beta pruning."""

from __future__ import annotations

from collections.abc import Sequence

from blockchess.core.enums import Color
from blockchess.core.move import MoveIntent, MoveRecord
from blockchess.core.rules import Position
from blockchess.engine.evaluate import evaluate
from blockchess.engine.search import IEngine, SearchResult

_INF_SCORE = 1_000_000


class MinimaxEngine(IEngine):
    """Fixed-depth minimax over the rules oracle.

    White maximises the evaluator score, black minimises it.  Ties keep the
    first enumerated move.  The search runs on a private copy of the
    position, so the caller's position is never touched.

    Args:
        prune: Enable alpha-beta cut-offs.  Disabling it gives the plain
            minimax reference used to check that pruning never changes the
            chosen value.
    """

    __slots__ = ("_prune", "_nodes")

    def __init__(self, *, prune: bool = True) -> None:
        self._prune = prune
        self._nodes = 0

    @property
    def nodes(self) -> int:
        """Nodes visited by the last search."""
        return self._nodes

    def best_move(
        self,
        position: Position,
        depth: int,
        candidates: Sequence[MoveIntent | MoveRecord] | None = None,
    ) -> SearchResult:
        if depth <= 0:
            raise ValueError("Search depth must be >= 1")

        self._nodes = 0
        board = position.copy()
        moves = list(candidates) if candidates is not None else board.legal_intents()
        if not moves:
            return SearchResult(None, evaluate(board), 0, self._nodes)

        maximizing = board.side_to_move == Color.WHITE
        best_move: MoveIntent | MoveRecord | None = None
        best_score = -_INF_SCORE if maximizing else _INF_SCORE

        for move in moves:
            board.push(move)
            score = self._minimax(
                board, depth - 1, -_INF_SCORE, _INF_SCORE, not maximizing
            )
            board.pop()

            if maximizing and score > best_score:
                best_score, best_move = score, move
            elif not maximizing and score < best_score:
                best_score, best_move = score, move

        return SearchResult(best_move, best_score, depth, self._nodes)

    def _minimax(
        self,
        position: Position,
        depth: int,
        alpha: int,
        beta: int,
        maximizing: bool,
    ) -> int:
        self._nodes += 1
        if depth == 0 or position.is_game_over():
            return evaluate(position)

        if maximizing:
            value = -_INF_SCORE
            for move in position.legal_intents():
                position.push(move)
                score = self._minimax(position, depth - 1, alpha, beta, False)
                position.pop()
                value = max(value, score)
                alpha = max(alpha, score)
                if self._prune and alpha >= beta:
                    break
            return value

        value = _INF_SCORE
        for move in position.legal_intents():
            position.push(move)
            score = self._minimax(position, depth - 1, alpha, beta, True)
            position.pop()
            value = min(value, score)
            beta = min(beta, score)
            if self._prune and alpha >= beta:
                break
        return value
