"""
Game state schemas as served by the mediator.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


EMPTY = 0
BANANA = 1
WALL = 2


class OutOfRangeError(IndexError):
    """Raised when a coordinate falls outside the map."""


class CellKind(str, Enum):
    """Classification of a single map cell."""
    EMPTY = "empty"
    BANANA = "banana"
    WALL = "wall"
    PLAYER = "player"


class Cell(int):
    """
    A single grid square.

    Values above ``WALL`` identify the player standing on the square. Negative
    values never come from the mediator and are treated as walls, so every
    integer maps to exactly one ``CellKind``.
    """

    def is_empty(self) -> bool:
        return self == EMPTY

    def is_banana(self) -> bool:
        return self == BANANA

    def is_wall(self) -> bool:
        return self == WALL or self < 0

    def is_player(self) -> bool:
        return self > WALL

    @property
    def kind(self) -> CellKind:
        if self.is_player():
            return CellKind.PLAYER
        if self.is_wall():
            return CellKind.WALL
        if self.is_banana():
            return CellKind.BANANA
        return CellKind.EMPTY

    def __repr__(self) -> str:
        return f"Cell({int(self)})"


class GameMap:
    """Read-only view over the mediator grid, indexed as ``cell(x, y)``."""

    def __init__(self, rows: List[List[int]]):
        self.rows = rows

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def width(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    def cell(self, x: int, y: int) -> Cell:
        if x < 0 or y < 0 or y >= len(self.rows):
            raise OutOfRangeError(f"({x}, {y}) is out of range")
        row = self.rows[y]
        if x >= len(row):
            raise OutOfRangeError(f"({x}, {y}) is out of range")
        return Cell(row[x])

    def iter_rows(self) -> Iterator[List[Cell]]:
        for row in self.rows:
            yield [Cell(value) for value in row]

    def cells(self) -> Iterator[Tuple[int, int, Cell]]:
        for y, row in enumerate(self.rows):
            for x, value in enumerate(row):
                yield x, y, Cell(value)

    def as_array(self) -> np.ndarray:
        """Rectangular numpy copy of the grid; short rows are padded with walls."""
        grid = np.full((self.height, self.width), WALL, dtype=int)
        for y, row in enumerate(self.rows):
            grid[y, :len(row)] = row
        return grid


class Player(BaseModel):
    """A gamer as reported by the mediator. Unknown fields are kept."""
    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    name: Optional[str] = None


class GameState(BaseModel):
    """Snapshot of the board and the players, owned by the mediator."""
    model_config = ConfigDict(populate_by_name=True)

    map: List[List[int]] = Field(default_factory=list, description="Rows of cells, indexed [y][x]")
    players: List[Player] = Field(default_factory=list, alias="gamers")

    def game_map(self) -> GameMap:
        return GameMap(self.map)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
