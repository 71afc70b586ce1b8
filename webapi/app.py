"""
FastAPI application served by the player to the mediator.

Framework: FastAPI (Python async web framework). Handlers that talk to the
mediator are plain functions, so FastAPI runs each of them in its thread
pool and one slow mediator call never blocks the other callbacks.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from schemas.move import MoveCallbackResponse
from schemas.player import ErrorResponse
from webapi.board_view import render_board
from webapi.routes_player import register_player_routes

if TYPE_CHECKING:
    from webapi.player_agent import PlayerAgent

logger = logging.getLogger(__name__)


def create_app(agent: "PlayerAgent") -> FastAPI:
    """Build the player web application around ``agent``."""
    app = FastAPI(
        title="Island Player",
        description="Player endpoints called by the game mediator",
        version="1.0.0",
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"new request received: method={request.method}, uri={request.url.path}")
        return await call_next(request)

    async def root():
        return RedirectResponse("/ui", status_code=301)

    def ui():
        """Human-readable board view."""
        try:
            state = agent.fetch_game_state()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return render_board(state, agent.identity)

    def move_request(move_id: str) -> MoveCallbackResponse:
        """Mediator asks for our next move; ``move_id`` is echoed back on submission."""
        return agent.handle_move_request(move_id)

    def get_game_state():
        try:
            state = agent.fetch_game_state()
        except Exception as e:
            logger.warning(f"failed to get game state: error={e}")
            return JSONResponse(status_code=500, content={"error": str(e)})
        return JSONResponse(status_code=200, content=state.to_wire())

    def game_start():
        agent.handle_game_start()
        return {"status": "acknowledged"}

    def game_end():
        shutting_down = agent.handle_game_end()
        return {"status": "acknowledged", "shutting_down": shutting_down}

    register_player_routes(
        app,
        root=root,
        ui=ui,
        move_request=move_request,
        get_game_state=get_game_state,
        game_start=game_start,
        game_end=game_end,
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error="HTTP Error",
                message=str(exc.detail)
            ).model_dump()
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        """Handle general exceptions."""
        logger.error(f"unhandled error: method={request.method}, uri={request.url.path}, error={exc}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal Server Error",
                message="An unexpected error occurred"
            ).model_dump()
        )

    return app
