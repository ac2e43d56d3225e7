"""Game management layer — controller, phases, piece identities.

Quick start::

    from blockchess.game import GameController

    ctrl = GameController()
    ctrl.select_square("e2")
    ctrl.select_square("e4")
"""

from blockchess.game.controller import GameController, GameEvents
from blockchess.game.interfaces import (
    GamePhase,
    IGameController,
    IScheduler,
    ScheduledCall,
)
from blockchess.game.pieces import PieceInstance, PieceTracker, PieceTrackingError
from blockchess.game.sounds import MoveSound, move_sound

__all__ = [
    # Interfaces
    "GamePhase",
    "IGameController",
    "IScheduler",
    "ScheduledCall",
    # Concrete
    "GameController",
    "GameEvents",
    "MoveSound",
    "PieceInstance",
    "PieceTracker",
    "PieceTrackingError",
    "move_sound",
]
