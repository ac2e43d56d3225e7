"""Move sound cues.

Only one cue fires per move.  Priority (lowest → highest):
move < castle < capture < promotion < check.
"""

from __future__ import annotations

from enum import IntEnum

from blockchess.core.move import MoveRecord


class MoveSound(IntEnum):
    """Sound cue for a move; higher value wins."""

    MOVE = 0
    CASTLE = 1
    CAPTURE = 2
    PROMOTE = 3
    CHECK = 4


def move_sound(record: MoveRecord, gives_check: bool) -> MoveSound:
    """Choose the cue for the move just made."""
    if gives_check:
        return MoveSound.CHECK
    if record.is_promotion:
        return MoveSound.PROMOTE
    if record.is_capture:
        return MoveSound.CAPTURE
    if record.is_castle:
        return MoveSound.CASTLE
    return MoveSound.MOVE
