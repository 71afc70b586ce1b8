"""
Random walker for the island map.
"""

from typing import List, Optional, Tuple

import numpy as np

from agents.gameplay_protocol import IsMe, MoveDecisionError
from schemas.game_state import WALL, Cell, GameMap, GameState, OutOfRangeError
from schemas.move import CARDINAL_DIRECTIONS, Direction


class RandomMoveStrategy:
    """
    Strategy that steps uniformly at random onto any open neighbouring cell.

    It is the baseline wired in when no other strategy is configured; it
    knows nothing about bananas or opponents.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize random strategy.

        Args:
            seed: Random seed for reproducible behavior
        """
        self.rng = np.random.RandomState(seed)

    def decide(self, state: GameState, is_me: IsMe) -> Direction:
        game_map = state.game_map()
        x, y = self.locate_me(game_map, is_me)

        options = self.open_directions(game_map, x, y)
        if not options:
            raise MoveDecisionError(f"no open cell around ({x}, {y})")
        return options[self.rng.randint(0, len(options))]

    @staticmethod
    def locate_me(game_map: GameMap, is_me: IsMe) -> Tuple[int, int]:
        grid = game_map.as_array()
        for y, x in np.argwhere(grid > WALL):
            if is_me(Cell(int(grid[y, x]))):
                return int(x), int(y)
        raise MoveDecisionError("could not find myself on the map")

    @staticmethod
    def open_directions(game_map: GameMap, x: int, y: int) -> List[Direction]:
        options = []
        for direction in CARDINAL_DIRECTIONS:
            dx, dy = direction.offset
            try:
                cell = game_map.cell(x + dx, y + dy)
            except OutOfRangeError:
                continue
            if cell.is_wall() or cell.is_player():
                continue
            options.append(direction)
        return options
