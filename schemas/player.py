"""
Player registration schemas and the player's own network identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from schemas.game_state import Cell


class RegisterRequest(BaseModel):
    """Body of POST /player on the mediator."""
    name: str = Field(..., description="Team name shown by the mediator")
    endpoint: str = Field(..., description="host:port the mediator calls back")


class RegisterResult(BaseModel):
    """Registration response; ``id`` is the value marking our cells on the map."""
    id: int


class ErrorResponse(BaseModel):
    """Error payload returned by the player web server."""
    error: str
    message: Optional[str] = None


@dataclass
class PlayerIdentity:
    """
    Where the player listens and who it is.

    ``local_ip``, ``port`` and ``team_name`` are resolved once at startup;
    ``player_id`` is assigned by the mediator on registration and cannot be
    changed afterwards.
    """
    local_ip: str
    port: int
    team_name: str
    player_id: Optional[int] = None

    @property
    def endpoint(self) -> str:
        return f"{self.local_ip}:{self.port}"

    @property
    def registered(self) -> bool:
        return self.player_id is not None

    def assign_player_id(self, player_id: int) -> None:
        if self.player_id is not None:
            raise RuntimeError(f"player id already set to {self.player_id}")
        self.player_id = player_id

    def is_me(self, cell: int) -> bool:
        return self.registered and int(cell) == self.player_id
