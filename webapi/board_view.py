"""
HTML board view rendered for humans watching the player.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import jinja2

from schemas.game_state import Cell, GameState
from schemas.player import PlayerIdentity

TEMPLATES = jinja2.Environment(
    loader=jinja2.PackageLoader("webapi", "templates"),
    autoescape=jinja2.select_autoescape(["html"]),
)
MAP_TEMPLATE = TEMPLATES.get_template("map.html")


def _cell_view(cell: Cell, identity: Optional[PlayerIdentity]) -> Dict[str, Any]:
    return {
        "value": int(cell),
        "kind": cell.kind.value,
        "mine": identity is not None and identity.is_me(cell),
    }


def render_board(state: GameState, identity: Optional[PlayerIdentity] = None) -> str:
    rows = [[_cell_view(cell, identity) for cell in row] for row in state.game_map().iter_rows()]
    return MAP_TEMPLATE.render(rows=rows, players=state.players, identity=identity)
