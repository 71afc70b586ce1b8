"""
Route registration for the endpoints the mediator (and humans) call on the player.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from schemas.move import MoveCallbackResponse


AsyncHandler = Callable[..., Awaitable[Any]]
SyncHandler = Callable[..., Any]

MOVE_CALLBACK_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def register_player_routes(
    app: FastAPI,
    *,
    root: AsyncHandler,
    ui: SyncHandler,
    move_request: SyncHandler,
    get_game_state: SyncHandler,
    game_start: SyncHandler,
    game_end: SyncHandler,
) -> None:
    app.add_api_route("/", root, methods=["GET"])
    app.add_api_route("/ui", ui, methods=["GET"], response_class=HTMLResponse)
    app.add_api_route("/map/{move_id}", move_request, methods=MOVE_CALLBACK_METHODS, response_model=MoveCallbackResponse)
    app.add_api_route("/map", get_game_state, methods=["GET"])
    app.add_api_route("/map", game_start, methods=["POST"])
    app.add_api_route("/map", game_end, methods=["DELETE"])
