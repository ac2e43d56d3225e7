"""Abstract interfaces for the game layer.

Follows Dependency Inversion: the high-level GameController depends on
these ABCs, not on Qt timers or concrete engines.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import IntEnum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blockchess.core.enums import PieceType
    from blockchess.core.move import AnyMove
    from blockchess.core.types import Square
    from blockchess.engine.difficulty import Difficulty


# ── Game phase FSM states ────────────────────────────────────────────────────


class GamePhase(IntEnum):
    """Finite-state-machine states of the game controller."""

    IDLE = auto()
    SQUARE_SELECTED = auto()
    AWAITING_PROMOTION = auto()
    AWAITING_AI_MOVE = auto()
    GAME_OVER = auto()

    @property
    def accepts_input(self) -> bool:
        """Whether board clicks are processed in this phase."""
        return self in (GamePhase.IDLE, GamePhase.SQUARE_SELECTED)


# ── Scheduling ───────────────────────────────────────────────────────────────


class ScheduledCall(ABC):
    """Handle to a delayed callback."""

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """True until the callback has fired or been cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from firing.  Safe to call repeatedly."""


class IScheduler(ABC):
    """Source of cancellable single-shot timers."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        """Run *callback* once after *delay_ms* on the owning thread."""


# ── Game controller ──────────────────────────────────────────────────────────


class IGameController(ABC):
    """Interface for the game orchestrator."""

    @abstractmethod
    def select_square(self, square: Square | str) -> bool:
        """Handle a click on *square*.  Returns False if the click was ignored."""

    @abstractmethod
    def promote_piece(self, piece_type: PieceType | str) -> bool:
        """Complete a pending promotion.  Returns True if the move was applied."""

    @abstractmethod
    def submit_move(self, move: AnyMove) -> bool:
        """Play a move from local input, gated like a click."""

    @abstractmethod
    def make_move(self, move: AnyMove) -> bool:
        """Apply a move.  Returns True if legal and applied."""

    @abstractmethod
    def undo_move(self) -> bool:
        """Retract the last ply (or ply pair against the AI)."""

    @abstractmethod
    def reset_game(self) -> bool:
        """Start over from the initial position.  False while session-locked."""

    @abstractmethod
    def set_ai_enabled(self, enabled: bool) -> bool:
        """Turn the computer opponent on or off without touching the game."""

    @abstractmethod
    def set_ai_difficulty(self, difficulty: Difficulty | str) -> None:
        """Select the AI tier used for subsequent moves."""

    @abstractmethod
    def load_fen(self, fen: str) -> bool:
        """Replace the position with a trusted serialized one."""
