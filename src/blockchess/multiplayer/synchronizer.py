"""MultiplayerSession: keeps a local GameController in step with a remote
game stored in a :class:`SessionStore`.

Lifecycle::

    IDLE ──create_game──▶ CREATING ──▶ WAITING ──opponent joins──▶ PLAYING
      │                                                              ▲
      └──join_game──▶ JOINING ─────────────────────────────────────┘
    (any failure) ──▶ ERROR ──dismiss_error──▶ IDLE

Positions travel as FEN.  ``_last_fen`` remembers the FEN most recently
exchanged with the store so our own pushes echoing back are ignored.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum

from blockchess.config import AppSettings
from blockchess.core.enums import Color
from blockchess.core.move import MoveRecord
from blockchess.core.rules import STARTING_FEN, Position
from blockchess.errors import (
    InvalidPositionError,
    MultiplayerError,
    MultiplayerUnavailableError,
    SessionJoinError,
    SessionNotFoundError,
)
from blockchess.game.controller import GameController
from blockchess.game.interfaces import IScheduler, ScheduledCall
from blockchess.multiplayer.session import (
    GameSession,
    SessionStatus,
    SessionStore,
    Subscription,
    generate_invite_code,
    normalize_invite_code,
)

_LOGGER = logging.getLogger(__name__)

CREATE_FAILED = "Failed to create game. Please try again."
JOIN_FAILED = "Failed to join game. Please try again."
OWN_GAME = "You can't join your own game!"
SYNC_FAILED = "Could not send your move. Retrying..."
OPPONENT_LEFT = "Your opponent left the game."


class MultiplayerMode(StrEnum):
    IDLE = "idle"
    CREATING = "creating"
    JOINING = "joining"
    WAITING = "waiting"
    PLAYING = "playing"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class MultiplayerState:
    """Snapshot of the multiplayer session, handed to listeners."""

    mode: MultiplayerMode = MultiplayerMode.IDLE
    session: GameSession | None = None
    player_color: Color | None = None
    message: str = ""

    @property
    def invite_code(self) -> str | None:
        return self.session.invite_code if self.session is not None else None


StateCallback = Callable[[MultiplayerState], None]


def _normalize_fen(fen: str) -> str | None:
    """*fen* as the local rules adapter would print it, or ``None``."""
    try:
        return Position.from_fen(fen).fen()
    except InvalidPositionError as exc:
        _LOGGER.warning("Ignoring remote position: %s", exc)
        return None


def session_status_for(controller: GameController) -> SessionStatus:
    """Status column value describing the controller's current position."""
    position = controller.position
    if position.is_checkmate():
        return SessionStatus.CHECKMATE
    if position.is_stalemate():
        return SessionStatus.STALEMATE
    if position.is_draw():
        return SessionStatus.DRAW
    return SessionStatus.ACTIVE


class MultiplayerSession:
    """Online play for one local player.

    Args:
        store: Session backend, or ``None`` when none is configured.
        controller: The local game; its AI is disabled while playing.
        player_id: Stable id of the local player.
        scheduler: Drives polling for stores without push support.
            Defaults to a Qt timer scheduler.
        settings: Supplies ``poll_interval_ms``.
        rng: Random source for invite codes.
    """

    __slots__ = (
        "_store",
        "_controller",
        "_player_id",
        "_scheduler",
        "_settings",
        "_rng",
        "_state",
        "_last_fen",
        "_subscription",
        "_poll_call",
        "on_state_changed",
    )

    def __init__(
        self,
        store: SessionStore | None,
        controller: GameController,
        player_id: str,
        *,
        scheduler: IScheduler | None = None,
        settings: AppSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if scheduler is None:
            from blockchess.engine.qt_bridge import QtScheduler

            scheduler = QtScheduler()

        self._store = store
        self._controller = controller
        self._player_id = player_id
        self._scheduler = scheduler
        self._settings = settings if settings is not None else AppSettings()
        self._rng = rng
        self._state = MultiplayerState()
        self._last_fen: str | None = None
        self._subscription: Subscription | None = None
        self._poll_call: ScheduledCall | None = None
        self.on_state_changed: list[StateCallback] = []

        controller.events.on_move.append(self._on_local_move)

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def state(self) -> MultiplayerState:
        return self._state

    @property
    def mode(self) -> MultiplayerMode:
        return self._state.mode

    @property
    def player_id(self) -> str:
        return self._player_id

    @property
    def player_color(self) -> Color | None:
        return self._state.player_color

    @property
    def invite_code(self) -> str | None:
        return self._state.invite_code

    @property
    def is_available(self) -> bool:
        return self._store is not None

    @property
    def is_multiplayer(self) -> bool:
        return self._state.mode == MultiplayerMode.PLAYING

    def is_my_turn(self) -> bool:
        return (
            self.is_multiplayer
            and self._controller.turn == self._state.player_color
        )

    def can_move(self) -> bool:
        """Input guard for the controller: outside online play anything goes."""
        return not self.is_multiplayer or self.is_my_turn()

    # ── Commands ─────────────────────────────────────────────────────────

    def create_game(self) -> bool:
        store = self._require_store()
        if store is None:
            return False

        self._set_state(MultiplayerState(MultiplayerMode.CREATING))
        try:
            session = store.create_session(
                invite_code=generate_invite_code(self._rng),
                white_player_id=self._player_id,
                fen=STARTING_FEN,
            )
        except MultiplayerError as exc:
            _LOGGER.warning("Creating a game failed: %s", exc)
            self._fail(CREATE_FAILED)
            return False

        _LOGGER.info("Created game %s, invite code %s", session.id, session.invite_code)
        self._set_state(MultiplayerState(MultiplayerMode.WAITING, session=session))
        self._watch(session.id)
        return True

    def join_game(self, invite_code: str) -> bool:
        store = self._require_store()
        if store is None:
            return False

        code = normalize_invite_code(invite_code)
        self._set_state(MultiplayerState(MultiplayerMode.JOINING))
        try:
            session = store.fetch_by_invite_code(code)
        except SessionNotFoundError as exc:
            self._fail(exc.user_message)
            return False
        except MultiplayerError as exc:
            _LOGGER.warning("Looking up invite code %s failed: %s", code, exc)
            self._fail(JOIN_FAILED)
            return False

        if session.status != SessionStatus.WAITING:
            self._fail(SessionJoinError.user_message)
            return False
        if session.white_player_id == self._player_id:
            self._fail(OWN_GAME)
            return False

        try:
            session = store.update_session(
                session.id,
                black_player_id=self._player_id,
                status=SessionStatus.ACTIVE,
            )
        except MultiplayerError as exc:
            _LOGGER.warning("Joining game %s failed: %s", session.id, exc)
            self._fail(JOIN_FAILED)
            return False

        self._start_playing(session, Color.BLACK)
        self._watch(session.id)
        return True

    def leave_game(self) -> None:
        session = self._state.session
        if (
            self._store is not None
            and session is not None
            and not session.status.is_finished
            and self._state.mode in (MultiplayerMode.WAITING, MultiplayerMode.PLAYING)
        ):
            try:
                self._store.update_session(session.id, status=SessionStatus.ABANDONED)
            except MultiplayerError as exc:
                _LOGGER.warning("Could not mark game %s abandoned: %s", session.id, exc)
        self.reset()

    def reset(self) -> None:
        self._unwatch()
        self._last_fen = None
        self._release_controller()
        self._set_state(MultiplayerState())

    def dismiss_error(self) -> None:
        if self._state.mode == MultiplayerMode.ERROR:
            self.reset()
        elif self._state.message:
            self._set_state(replace(self._state, message=""))

    def retry_sync(self) -> bool:
        """Push the local position again if the last push did not land."""
        if not self.is_multiplayer:
            return False
        if self._controller.fen == self._last_fen:
            return True
        return self._push_local()

    # ── Remote → local ───────────────────────────────────────────────────

    def handle_remote_update(self, session: GameSession) -> None:
        """Apply a session row received from the store."""
        mode = self._state.mode
        if mode == MultiplayerMode.WAITING:
            if session.status == SessionStatus.ACTIVE:
                _LOGGER.info("Opponent joined game %s", session.id)
                self._start_playing(session, Color.WHITE)
            return
        if mode != MultiplayerMode.PLAYING:
            return

        message = self._state.message
        if session.status == SessionStatus.ABANDONED:
            message = OPPONENT_LEFT
        self._set_state(replace(self._state, session=session, message=message))

        incoming = _normalize_fen(session.fen)
        if incoming is None:
            return
        if incoming != self._last_fen and incoming != self._controller.fen:
            _LOGGER.debug("Loading remote position %s", incoming)
            self._last_fen = incoming
            self._controller.load_fen(incoming)

    # ── Local → remote ───────────────────────────────────────────────────

    def _on_local_move(self, record: MoveRecord, controller: GameController) -> None:
        if not self.is_multiplayer or controller.fen == self._last_fen:
            return
        self._push_local()

    def _push_local(self) -> bool:
        session = self._state.session
        if self._store is None or session is None:
            return False

        fen = self._controller.fen
        try:
            updated = self._store.update_session(
                session.id,
                fen=fen,
                status=session_status_for(self._controller),
            )
        except MultiplayerError as exc:
            _LOGGER.warning("Pushing move to game %s failed: %s", session.id, exc)
            self._set_state(replace(self._state, message=SYNC_FAILED))
            return False

        self._last_fen = fen
        message = "" if self._state.message == SYNC_FAILED else self._state.message
        self._set_state(replace(self._state, session=updated, message=message))
        return True

    # ── Internal helpers ─────────────────────────────────────────────────

    def _require_store(self) -> SessionStore | None:
        if self._store is None:
            self._fail(MultiplayerUnavailableError.user_message)
        return self._store

    def _start_playing(self, session: GameSession, color: Color) -> None:
        self._controller.set_ai_enabled(False)
        self._controller.set_input_guard(self.can_move)
        self._set_state(
            MultiplayerState(
                MultiplayerMode.PLAYING, session=session, player_color=color
            )
        )
        if not self._controller.load_fen(session.fen):
            self._controller.reset_game()
        self._controller.set_session_lock(True)
        self._last_fen = self._controller.fen

    def _release_controller(self) -> None:
        self._controller.set_session_lock(False)
        self._controller.set_input_guard(None)

    def _watch(self, session_id: str) -> None:
        if self._store is None:
            return
        if self._store.supports_push:
            if self._subscription is None:
                self._subscription = self._store.subscribe(
                    session_id, self.handle_remote_update
                )
        else:
            self._schedule_poll()

    def _unwatch(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if self._poll_call is not None:
            self._poll_call.cancel()
            self._poll_call = None

    def _schedule_poll(self) -> None:
        if self._poll_call is None:
            self._poll_call = self._scheduler.schedule(
                self._settings.poll_interval_ms, self._poll
            )

    def _poll(self) -> None:
        self._poll_call = None
        session = self._state.session
        if self._store is None or session is None:
            return
        if self._state.mode not in (MultiplayerMode.WAITING, MultiplayerMode.PLAYING):
            return

        try:
            latest = self._store.fetch_session(session.id)
        except MultiplayerError as exc:
            _LOGGER.warning("Polling game %s failed: %s", session.id, exc)
        else:
            self.handle_remote_update(latest)
            if self.is_multiplayer and self._controller.fen != self._last_fen:
                self._push_local()

        if self._state.mode in (MultiplayerMode.WAITING, MultiplayerMode.PLAYING):
            self._schedule_poll()

    def _fail(self, message: str) -> None:
        _LOGGER.info("Multiplayer error: %s", message)
        self._unwatch()
        self._release_controller()
        self._set_state(MultiplayerState(MultiplayerMode.ERROR, message=message))

    def _set_state(self, state: MultiplayerState) -> None:
        self._state = state
        for cb in self.on_state_changed:
            cb(state)
