"""
Move-decision contract used by the player agent.
"""

from __future__ import annotations

from typing import Callable, Protocol

from schemas.game_state import Cell, GameState
from schemas.move import Direction


IsMe = Callable[[Cell], bool]


class MoveDecisionError(Exception):
    """Raised by a strategy that cannot come up with a move."""


class MoveStrategy(Protocol):
    """
    Minimal decision contract: pick a direction for the current state.

    ``is_me`` tells whether a player cell belongs to this agent. Any exception
    raised is treated by the caller as "no move" (``Direction.NONE``).
    """

    def decide(self, state: GameState, is_me: IsMe) -> Direction:
        ...
