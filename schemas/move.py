"""
Pydantic schemas for move requests exchanged with the mediator.
"""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Direction(str, Enum):
    """Move intent sent to the mediator. ``NONE`` means staying put."""
    NORTH = "N"
    EAST = "E"
    SOUTH = "S"
    WEST = "W"
    NONE = "O"

    @property
    def offset(self) -> Tuple[int, int]:
        """(dx, dy) on the map; rows grow southwards."""
        return _OFFSETS[self]


_OFFSETS = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
    Direction.NONE: (0, 0),
}

CARDINAL_DIRECTIONS = (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST)


class MoveRequest(BaseModel):
    """Body of POST /map on the mediator. The move id travels in the ``uuid`` header."""
    model_config = ConfigDict(json_schema_extra={"example": {"move": "N"}})

    move: Direction


class MoveResult(BaseModel):
    """Outcome of a move submission."""
    accepted: bool = False


class MoveCallbackResponse(BaseModel):
    """What the player answers to a mediator move callback."""
    move_id: str
    direction: Optional[Direction] = Field(default=None, description="Direction submitted, if any")
    submitted: bool = False
    accepted: bool = False
