"""GameController: the central orchestrator of a chess game.

Owns the authoritative position, move history, selection and promotion
state, and the tracked piece identities.  Schedules the computer
opponent's replies.  Emits events via simple callbacks so the UI, the
multiplayer synchroniser and tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from blockchess.config import AppSettings
from blockchess.core.enums import PROMOTION_TYPES, Color, GameResult, PieceType
from blockchess.core.move import AnyMove, MoveIntent, MoveRecord
from blockchess.core.rules import STARTING_FEN, Position, replay
from blockchess.core.types import Square, parse_square
from blockchess.engine.difficulty import Difficulty, DifficultyPolicy
from blockchess.errors import IllegalMoveError, InvalidPositionError
from blockchess.game.interfaces import (
    GamePhase,
    IGameController,
    IScheduler,
    ScheduledCall,
)
from blockchess.game.pieces import PieceInstance, PieceTracker, PieceTrackingError
from blockchess.game.sounds import MoveSound, move_sound

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveRecord, "GameController"], None]
SoundCallback = Callable[[MoveSound], None]
GameOverCallback = Callable[[GameResult], None]
PhaseCallback = Callable[[GamePhase], None]
ResetCallback = Callable[[], None]


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event.

    ``on_state_reset`` fires whenever the position is replaced wholesale
    (undo, reset, FEN load) rather than advanced by a move.
    """

    on_move: list[MoveCallback] = field(default_factory=list)
    on_sound: list[SoundCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_state_reset: list[ResetCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController(IGameController):
    """Orchestrates a local chess game against a human or the computer.

    The current :class:`Position` is never mutated: every move, undo, reset
    or load swaps in a new one.  The AI reply is computed after
    ``settings.ai_delay_ms`` through *scheduler*; anything that replaces
    the position first cancels that pending call, so a reply is never
    applied to a position it was not computed for.

    Thread-safety: single-threaded.  All methods, including the scheduled
    AI callback, run on the thread that owns the scheduler.
    """

    __slots__ = (
        "_settings",
        "_scheduler",
        "_policy",
        "_position",
        "_start_fen",
        "_history",
        "_selected",
        "_valid_moves",
        "_pending",
        "_tracker",
        "_ai_enabled",
        "_ai_difficulty",
        "_ai_call",
        "_ai_request_fen",
        "_ai_searching",
        "_input_guard",
        "_session_locked",
        "_phase",
        "events",
    )

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        scheduler: IScheduler | None = None,
        policy: DifficultyPolicy | None = None,
    ) -> None:
        if scheduler is None:
            from blockchess.engine.qt_bridge import QtScheduler

            scheduler = QtScheduler()

        self._settings = settings if settings is not None else AppSettings()
        self._scheduler = scheduler
        self._policy = policy if policy is not None else DifficultyPolicy()

        self._position = Position.initial()
        self._start_fen = STARTING_FEN
        self._history: list[MoveRecord] = []
        self._selected: Square | None = None
        self._valid_moves: list[MoveRecord] = []
        self._pending: MoveRecord | None = None
        self._tracker = PieceTracker(self._position)

        self._ai_enabled = self._settings.ai_enabled
        self._ai_difficulty = Difficulty.parse(self._settings.ai_difficulty)
        self._ai_call: ScheduledCall | None = None
        self._ai_request_fen: str | None = None
        self._ai_searching = False
        self._input_guard: Callable[[], bool] | None = None
        self._session_locked = False

        self._phase = GamePhase.IDLE
        self.events = GameEvents()
        self._maybe_schedule_ai()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def position(self) -> Position:
        return self._position

    @property
    def fen(self) -> str:
        return self._position.fen()

    @property
    def start_fen(self) -> str:
        return self._start_fen

    @property
    def turn(self) -> Color:
        return self._position.side_to_move

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def selected_square(self) -> Square | None:
        return self._selected

    @property
    def valid_moves(self) -> tuple[MoveRecord, ...]:
        return tuple(self._valid_moves)

    @property
    def move_history(self) -> tuple[MoveRecord, ...]:
        return tuple(self._history)

    @property
    def pending_move(self) -> MoveRecord | None:
        return self._pending

    @property
    def pieces(self) -> tuple[PieceInstance, ...]:
        return self._tracker.pieces

    @property
    def is_check(self) -> bool:
        return self._position.in_check()

    @property
    def is_checkmate(self) -> bool:
        return self._position.is_checkmate()

    @property
    def is_draw(self) -> bool:
        return self._position.is_draw()

    @property
    def is_game_over(self) -> bool:
        return self._position.is_game_over()

    @property
    def result(self) -> GameResult:
        return self._position.result()

    @property
    def is_ai_enabled(self) -> bool:
        return self._ai_enabled

    @property
    def is_ai_thinking(self) -> bool:
        """True from the moment an AI reply is scheduled until it lands."""
        return self._ai_call is not None or self._ai_searching

    @property
    def ai_difficulty(self) -> Difficulty:
        return self._ai_difficulty

    @property
    def ai_color(self) -> Color:
        return self._settings.ai_color

    @property
    def is_session_locked(self) -> bool:
        return self._session_locked

    def set_input_guard(self, guard: Callable[[], bool] | None) -> None:
        """Install a predicate that must hold for local moves to count.

        Used by the multiplayer session to block input on the opponent's turn.
        """
        self._input_guard = guard

    def set_session_lock(self, locked: bool) -> None:
        """Refuse undo, reset and enabling the AI while *locked*.

        An online game shares its position with the opponent, so only moves
        and trusted ``load_fen`` syncs may change it.
        """
        self._session_locked = locked

    def _accepts_input(self) -> bool:
        if not self._phase.accepts_input:
            return False
        return self._input_guard is None or self._input_guard()

    # ── Board input ──────────────────────────────────────────────────────

    def select_square(self, square: Square | str) -> bool:
        try:
            sq = parse_square(square) if isinstance(square, str) else square
        except ValueError:
            _LOGGER.debug("Ignoring click on unknown square %r", square)
            return False
        if not self._accepts_input():
            return False

        if self._selected == sq:
            self._clear_selection()
            self._refresh_phase()
            return True

        target = next((m for m in self._valid_moves if m.to_sq == sq), None)
        if target is not None:
            if target.is_promotion:
                self._pending = target
                self._refresh_phase()
                return True
            return self.make_move(target)

        piece = self._position.piece_at(sq)
        if piece is not None and piece.color == self._position.side_to_move:
            self._selected = sq
            self._valid_moves = self._position.legal_moves(sq)
        else:
            self._clear_selection()
        self._refresh_phase()
        return True

    def promote_piece(self, piece_type: PieceType | str) -> bool:
        pending = self._pending
        if pending is None:
            return False
        try:
            ptype = (
                piece_type
                if isinstance(piece_type, PieceType)
                else PieceType.parse(piece_type)
            )
        except ValueError:
            _LOGGER.warning("Unknown promotion piece %r", piece_type)
            return False
        if ptype not in PROMOTION_TYPES:
            _LOGGER.warning("Cannot promote to %s", ptype.name.lower())
            return False
        return self.make_move(MoveIntent(pending.from_sq, pending.to_sq, ptype))

    def cancel_promotion(self) -> None:
        """Abandon the pending promotion move."""
        if self._pending is None:
            return
        self._pending = None
        self._clear_selection()
        self._refresh_phase()
        self._maybe_schedule_ai()

    # ── Move application ─────────────────────────────────────────────────

    def submit_move(self, move: AnyMove) -> bool:
        """Play a move typed by the local player.

        Gated like a board click.  ``make_move`` stays the unguarded path
        for the AI and for replays.
        """
        if not self._accepts_input():
            return False
        return self.make_move(move)

    def make_move(self, move: AnyMove) -> bool:
        if self._position.is_game_over():
            return False

        next_position = self._position.copy()
        try:
            record = next_position.apply_move(move)
        except IllegalMoveError as exc:
            _LOGGER.debug("Rejected move %s: %s", move, exc)
            return False

        self._cancel_ai()
        self._position = next_position
        self._history.append(record)
        self._pending = None
        self._clear_selection()
        self._track_move(record)

        self._emit_sound(move_sound(record, next_position.in_check()))
        self._emit_move(record)

        if next_position.is_game_over():
            self._cancel_ai()
            self._refresh_phase()
            self._emit_game_over(next_position.result())
            return True

        self._refresh_phase()
        self._maybe_schedule_ai()
        return True

    def undo_move(self) -> bool:
        """Retract one ply, or the human+AI pair when the AI is enabled.

        Ignored while the AI search is running.  A reply that is only
        scheduled is cancelled.
        """
        if self._session_locked or self._ai_searching or not self._history:
            return False

        plies = 2 if self._ai_enabled and len(self._history) >= 2 else 1
        history = self._history[:-plies]
        position = replay(history, self._start_fen)

        self._cancel_ai()
        self._history = history
        self._replace_position(position)
        _LOGGER.debug("Undid %d ply, %d remain", plies, len(history))
        return True

    def reset_game(self) -> bool:
        if self._session_locked:
            _LOGGER.debug("Reset refused during an online game")
            return False
        self._cancel_ai()
        self._start_fen = STARTING_FEN
        self._history = []
        self._position = Position.initial()
        self._pending = None
        self._clear_selection()
        self._tracker.reset(self._position)
        self._refresh_phase()
        self._emit_state_reset()
        self._maybe_schedule_ai()
        return True

    def load_fen(self, fen: str) -> bool:
        """Trusted sync entry point: adopt *fen* without move validation.

        The loaded position becomes the new history origin.
        """
        try:
            position = Position.from_fen(fen)
        except InvalidPositionError as exc:
            _LOGGER.warning("Refusing to load position: %s", exc)
            return False

        self._cancel_ai()
        self._start_fen = position.fen()
        self._history = []
        self._replace_position(position)
        return True

    # ── AI configuration ─────────────────────────────────────────────────

    def set_ai_enabled(self, enabled: bool) -> bool:
        if enabled and self._session_locked:
            _LOGGER.debug("Computer opponent stays off during an online game")
            return False
        self._ai_enabled = enabled
        if enabled:
            self._maybe_schedule_ai()
        else:
            self._cancel_ai()
            self._refresh_phase()
        return True

    def set_ai_difficulty(self, difficulty: Difficulty | str) -> None:
        self._ai_difficulty = Difficulty.parse(difficulty)

    # ── Internal helpers ─────────────────────────────────────────────────

    def _replace_position(self, position: Position) -> None:
        self._position = position
        self._pending = None
        self._clear_selection()
        self._tracker.sync(position)
        self._refresh_phase()
        self._emit_state_reset()
        self._maybe_schedule_ai()

    def _clear_selection(self) -> None:
        self._selected = None
        self._valid_moves = []

    def _track_move(self, record: MoveRecord) -> None:
        try:
            self._tracker.apply_move(record)
        except PieceTrackingError as exc:
            _LOGGER.error(
                "Piece tracking diverged from the board (%s); resyncing", exc
            )
            self._tracker.sync(self._position)

    def _ai_to_move(self) -> bool:
        return (
            self._ai_enabled
            and self._pending is None
            and self._position.side_to_move == self._settings.ai_color
            and not self._position.is_game_over()
        )

    def _maybe_schedule_ai(self) -> None:
        if self._ai_call is not None or not self._ai_to_move():
            return
        request_fen = self._position.fen()
        self._ai_request_fen = request_fen
        self._ai_call = self._scheduler.schedule(
            self._settings.ai_delay_ms, lambda: self._run_ai_turn(request_fen)
        )
        self._refresh_phase()

    def _cancel_ai(self) -> None:
        call = self._ai_call
        self._ai_call = None
        self._ai_request_fen = None
        if call is not None:
            call.cancel()

    def _run_ai_turn(self, request_fen: str) -> None:
        # A superseded request must not clear the bookkeeping of the live one.
        if request_fen != self._ai_request_fen or request_fen != self._position.fen():
            _LOGGER.debug("Dropping stale AI request for %s", request_fen)
            return

        self._ai_call = None
        self._ai_request_fen = None
        if not self._ai_to_move():
            self._refresh_phase()
            return

        self._ai_searching = True
        try:
            move = self._policy.choose_move(
                self._position.copy(), self._ai_difficulty
            )
        except Exception:
            _LOGGER.exception("AI move search failed")
            move = None
        finally:
            self._ai_searching = False

        if move is None:
            self._refresh_phase()
            return
        if not self.make_move(move):
            _LOGGER.error("AI produced an illegal move: %s", move)
            self._refresh_phase()

    def _refresh_phase(self) -> None:
        if self._position.is_game_over():
            phase = GamePhase.GAME_OVER
        elif self._pending is not None:
            phase = GamePhase.AWAITING_PROMOTION
        elif self.is_ai_thinking:
            phase = GamePhase.AWAITING_AI_MOVE
        elif self._selected is not None:
            phase = GamePhase.SQUARE_SELECTED
        else:
            phase = GamePhase.IDLE
        if phase != self._phase:
            self._phase = phase
            self._emit_phase(phase)

    def _emit_move(self, record: MoveRecord) -> None:
        for cb in self.events.on_move:
            cb(record, self)

    def _emit_sound(self, sound: MoveSound) -> None:
        for cb in self.events.on_sound:
            cb(sound)

    def _emit_game_over(self, result: GameResult) -> None:
        for cb in self.events.on_game_over:
            cb(result)

    def _emit_phase(self, phase: GamePhase) -> None:
        for cb in self.events.on_phase_changed:
            cb(phase)

    def _emit_state_reset(self) -> None:
        for cb in self.events.on_state_reset:
            cb()
