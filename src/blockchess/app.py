"""Application entry point: a text front-end over the game controller."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from typing import TextIO

from blockchess.config import AppSettings
from blockchess.core.enums import GameResult
from blockchess.core.types import parse_square
from blockchess.engine.difficulty import Difficulty
from blockchess.game.controller import GameController
from blockchess.game.interfaces import GamePhase
from blockchess.multiplayer.synchronizer import (
    MultiplayerMode,
    MultiplayerSession,
    MultiplayerState,
)

_LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

HELP_TEXT = """\
Commands:
  e2            select a square (select again to deselect, then a target)
  e2e4          play a move in coordinate notation (SAN like Nf3 works too)
  promote q     choose the promotion piece (q, r, b, n)
  undo          take back a move (your move and the reply against the AI)
  reset         start a new game
  fen <FEN>     load a position
  ai on|off     toggle the computer opponent
  level <tier>  easy, medium or hard
  host          create an online game and print its invite code
  join <code>   join an online game
  wait          wait for the opponent
  leave         leave the online game
  (undo, reset, fen and ai on are refused during an online game)
  board         print the board
  quit          exit
"""

_RESULT_TEXT = {
    GameResult.WHITE_WINS: "Checkmate. White wins.",
    GameResult.BLACK_WINS: "Checkmate. Black wins.",
    GameResult.DRAW: "Draw.",
}


def configure_logging(level: str = "INFO") -> None:
    """Root logger setup for the command-line front-end."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def render_board(controller: GameController) -> str:
    """Board diagram, rank 8 at the top, selection and targets marked."""
    selected = controller.selected_square
    targets = {m.to_sq for m in controller.valid_moves}
    lines = []
    for row, rank in enumerate(controller.position.board_snapshot()):
        cells = []
        for col, piece in enumerate(rank):
            sq = (7 - row) * 8 + col
            char = str(piece) if piece is not None else "."
            if sq == selected:
                cells.append(f"[{char}]")
            elif sq in targets:
                cells.append(f"({char})" if piece is not None else " * ")
            else:
                cells.append(f" {char} ")
        lines.append(f"{8 - row} " + "".join(cells))
    lines.append("   " + "".join(f" {f} " for f in "abcdefgh"))
    return "\n".join(lines)


class TextFrontend:
    """Line-oriented command interpreter.

    ``wait`` is called whenever the program has to block until scheduled
    work (the AI reply, a multiplayer poll) has run.
    """

    __slots__ = ("controller", "multiplayer", "_out", "_wait", "_shown", "_commands")

    def __init__(
        self,
        controller: GameController,
        multiplayer: MultiplayerSession | None = None,
        *,
        out: TextIO | None = None,
        wait: Callable[[Callable[[], bool]], None] | None = None,
    ) -> None:
        self.controller = controller
        self.multiplayer = multiplayer
        self._out = out if out is not None else sys.stdout
        self._wait = wait
        self._shown: tuple[MultiplayerMode, str] = (MultiplayerMode.IDLE, "")
        self._commands: dict[str, Callable[[list[str]], bool]] = {
            "help": self._cmd_help,
            "board": self._cmd_board,
            "undo": self._cmd_undo,
            "reset": self._cmd_reset,
            "fen": self._cmd_fen,
            "ai": self._cmd_ai,
            "level": self._cmd_level,
            "promote": self._cmd_promote,
            "host": self._cmd_host,
            "join": self._cmd_join,
            "wait": self._cmd_wait,
            "leave": self._cmd_leave,
        }
        controller.events.on_game_over.append(self._on_game_over)
        if multiplayer is not None:
            multiplayer.on_state_changed.append(self._on_multiplayer_state)

    def print(self, text: str) -> None:
        self._out.write(text + "\n")

    def handle(self, line: str) -> bool:
        """Run one command line.  Returns False when the user quits."""
        words = line.split()
        if not words:
            return True
        command, args = words[0].lower(), words[1:]
        if command in ("quit", "exit", "q"):
            return False

        handler = self._commands.get(command)
        if handler is not None:
            ok = handler(args)
        else:
            ok = self._cmd_move(words[0])
        if not ok:
            self.print(f"Cannot do that: {line.strip()}")
        self._wait_for_ai()
        return True

    def run(self, stdin: TextIO | None = None) -> None:
        stream = stdin if stdin is not None else sys.stdin
        self.print(render_board(self.controller))
        self._wait_for_ai()
        while True:
            self._out.write(f"{self.controller.turn}> ")
            self._out.flush()
            line = stream.readline()
            if not line or not self.handle(line):
                break

    # ── Commands ─────────────────────────────────────────────────────────

    def _cmd_move(self, token: str) -> bool:
        try:
            square = parse_square(token)
        except ValueError:
            ok = self.controller.submit_move(token)
        else:
            ok = self.controller.select_square(square)
            if self.controller.phase == GamePhase.AWAITING_PROMOTION:
                self.print("Promote to? (promote q|r|b|n)")
        if ok:
            self._cmd_board([])
        return ok

    def _cmd_help(self, args: list[str]) -> bool:
        self._out.write(HELP_TEXT)
        return True

    def _cmd_board(self, args: list[str]) -> bool:
        self.print(render_board(self.controller))
        if self.controller.is_check and not self.controller.is_game_over:
            self.print("Check!")
        return True

    def _cmd_undo(self, args: list[str]) -> bool:
        return self.controller.undo_move() and self._cmd_board(args)

    def _cmd_reset(self, args: list[str]) -> bool:
        return self.controller.reset_game() and self._cmd_board(args)

    def _cmd_fen(self, args: list[str]) -> bool:
        if self.controller.is_session_locked:
            return False
        if not args or not self.controller.load_fen(" ".join(args)):
            return False
        return self._cmd_board(args)

    def _cmd_ai(self, args: list[str]) -> bool:
        if args not in (["on"], ["off"]):
            return False
        if not self.controller.set_ai_enabled(args[0] == "on"):
            return False
        self.print(f"Computer opponent {args[0]}")
        return True

    def _cmd_level(self, args: list[str]) -> bool:
        if len(args) != 1:
            return False
        try:
            self.controller.set_ai_difficulty(args[0])
        except ValueError as exc:
            self.print(str(exc))
            return False
        self.print(f"Difficulty: {self.controller.ai_difficulty}")
        return True

    def _cmd_promote(self, args: list[str]) -> bool:
        ok = len(args) == 1 and self.controller.promote_piece(args[0])
        if ok:
            self._cmd_board(args)
        return ok

    def _cmd_host(self, args: list[str]) -> bool:
        return self.multiplayer is not None and self.multiplayer.create_game()

    def _cmd_join(self, args: list[str]) -> bool:
        return (
            self.multiplayer is not None
            and len(args) == 1
            and self.multiplayer.join_game(args[0])
        )

    def _cmd_wait(self, args: list[str]) -> bool:
        mp = self.multiplayer
        if mp is None or self._wait is None:
            return False
        before = (mp.state, self.controller.fen)
        self._wait(lambda: (mp.state, self.controller.fen) != before)
        return True

    def _cmd_leave(self, args: list[str]) -> bool:
        if self.multiplayer is None:
            return False
        self.multiplayer.leave_game()
        return True

    # ── Event handlers ───────────────────────────────────────────────────

    def _wait_for_ai(self) -> None:
        if self._wait is not None and self.controller.is_ai_thinking:
            self._wait(lambda: not self.controller.is_ai_thinking)
            self._cmd_board([])

    def _on_game_over(self, result: GameResult) -> None:
        self.print(_RESULT_TEXT.get(result, "Game over."))

    def _on_multiplayer_state(self, state: MultiplayerState) -> None:
        shown = (state.mode, state.message)
        if shown == self._shown:
            return
        self._shown = shown
        if state.message:
            self.print(state.message)
        elif state.mode == MultiplayerMode.WAITING:
            self.print(f"Invite code: {state.invite_code} (waiting for opponent)")
        elif state.mode == MultiplayerMode.PLAYING:
            self.print(f"Playing online as {state.player_color}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockchess", description="Play chess against the computer or online."
    )
    parser.add_argument("--no-ai", action="store_true", help="two humans, one board")
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        help="computer opponent strength",
    )
    parser.add_argument("--fen", help="start from this position")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Launch the BlockChess command-line game."""
    from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer

    from blockchess.multiplayer.identity import load_player_id
    from blockchess.multiplayer.rest_store import RestSessionStore

    args = build_parser().parse_args(argv)
    settings = AppSettings.from_env()
    if args.no_ai:
        settings.ai_enabled = False
    if args.difficulty:
        settings.ai_difficulty = Difficulty.parse(args.difficulty)
    if args.log_level:
        settings.log_level = args.log_level
    configure_logging(settings.log_level)

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName("BlockChess")
    app.setOrganizationName("BlockChess")

    def wait(done: Callable[[], bool]) -> None:
        loop = QEventLoop()
        ticker = QTimer()
        ticker.setInterval(50)
        ticker.timeout.connect(lambda: done() and loop.quit())
        ticker.start()
        if not done():
            loop.exec()
        ticker.stop()

    controller = GameController(settings)
    if args.fen and not controller.load_fen(args.fen):
        sys.exit(f"Invalid FEN: {args.fen}")

    store = None
    if settings.multiplayer_available:
        store = RestSessionStore.from_settings(settings)
    else:
        _LOGGER.info("No multiplayer backend configured")
    multiplayer = MultiplayerSession(
        store, controller, load_player_id(), settings=settings
    )

    frontend = TextFrontend(controller, multiplayer, wait=wait)
    frontend.print("BlockChess. Type 'help' for commands.")
    frontend.run()
    if multiplayer.is_multiplayer:
        multiplayer.leave_game()


if __name__ == "__main__":
    main()
