"""
Pydantic schemas for the island player and the mediator protocol.
"""

from .game_state import (
    BANANA, EMPTY, WALL, Cell, CellKind, GameMap, GameState, OutOfRangeError, Player
)
from .move import CARDINAL_DIRECTIONS, Direction, MoveCallbackResponse, MoveRequest, MoveResult
from .player import ErrorResponse, PlayerIdentity, RegisterRequest, RegisterResult

__all__ = [
    "BANANA",
    "EMPTY",
    "WALL",
    "Cell",
    "CellKind",
    "GameMap",
    "GameState",
    "OutOfRangeError",
    "Player",
    "CARDINAL_DIRECTIONS",
    "Direction",
    "MoveCallbackResponse",
    "MoveRequest",
    "MoveResult",
    "ErrorResponse",
    "PlayerIdentity",
    "RegisterRequest",
    "RegisterResult",
]
