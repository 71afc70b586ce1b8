"""
Mediator protocol client.

Three calls, all synchronous JSON over HTTP against ``base_url``:

- ``POST /player``  register the player, answers ``{"id": ...}`` or 423 when the game is full
- ``GET /map``      current game state
- ``POST /map``     submit a move, ``uuid`` header carries the move id; 400 means refused

Failures are split so callers can tell "could not reach the mediator"
(``MediatorUnreachableError``) from "the mediator said no"
(``UnexpectedStatusError`` and its ``GameFullError`` subclass) from "the
mediator answered garbage" (``MalformedResponseError``).
"""

from __future__ import annotations

import http.client
import json
import logging
import socket
import urllib.error
import urllib.request
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from schemas.game_state import GameState
from schemas.move import Direction, MoveRequest, MoveResult
from schemas.player import RegisterRequest, RegisterResult

logger = logging.getLogger(__name__)

HTTP_BAD_REQUEST = 400
HTTP_LOCKED = 423


class MediatorError(Exception):
    """Base error for every mediator call."""

    def __init__(self, message: str, *, operation: str, method: str, url: str):
        super().__init__(f"{operation}: {message} (method = {method}, url = {url})")
        self.operation = operation
        self.method = method
        self.url = url


class MediatorUnreachableError(MediatorError):
    """DNS, connection, timeout or other transport failure."""


class UnexpectedStatusError(MediatorError):
    """The mediator answered with a non-2xx status."""

    def __init__(self, status_code: int, *, operation: str, method: str, url: str, detail: str = ""):
        message = f"got status code {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, operation=operation, method=method, url=url)
        self.status_code = status_code


class GameFullError(UnexpectedStatusError):
    """Registration refused because the game already has all its players."""


class MalformedResponseError(MediatorError):
    """The response body could not be decoded or validated."""


class MediatorClient:
    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def game_state(self) -> GameState:
        _, payload = self._json_request("game state", "GET", "/map")
        return self._validate("game state", "GET", "/map", GameState, payload)

    def move(self, move_id: str, direction: Direction) -> MoveResult:
        body = MoveRequest(move=direction).model_dump(mode="json")
        try:
            self._json_request("move", "POST", "/map", body=body, headers={"uuid": move_id}, decode=False)
        except UnexpectedStatusError as exc:
            if exc.status_code == HTTP_BAD_REQUEST:
                return MoveResult(accepted=False)
            raise
        return MoveResult(accepted=True)

    def register(self, name: str, endpoint: str) -> RegisterResult:
        body = RegisterRequest(name=name, endpoint=endpoint).model_dump()
        try:
            _, payload = self._json_request("register", "POST", "/player", body=body)
        except UnexpectedStatusError as exc:
            if exc.status_code == HTTP_LOCKED:
                raise GameFullError(
                    exc.status_code, operation="register", method=exc.method, url=exc.url,
                    detail="game is full",
                ) from exc
            raise
        return self._validate("register", "POST", "/player", RegisterResult, payload)

    # --------------------------------------------------------------------- HTTP
    def _json_request(
        self,
        operation: str,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        decode: bool = True,
    ) -> Tuple[int, Any]:
        url = self.base_url + path
        req_headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if headers:
            req_headers.update(headers)
        data = json.dumps(body).encode("utf-8") if body is not None else None
        request = urllib.request.Request(url, data=data, headers=req_headers, method=method)

        logger.debug(f"mediator request: operation={operation}, method={method}, url={url}")
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                status = response.status
                raw = response.read()
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore").strip() if exc.fp else ""
            raise UnexpectedStatusError(
                exc.code, operation=operation, method=method, url=url, detail=detail
            ) from exc
        except urllib.error.URLError as exc:
            raise MediatorUnreachableError(
                f"transport error: {exc.reason}", operation=operation, method=method, url=url
            ) from exc
        except (socket.timeout, TimeoutError, ConnectionError) as exc:
            raise MediatorUnreachableError(
                f"transport error: {exc}", operation=operation, method=method, url=url
            ) from exc
        except http.client.BadStatusLine as exc:
            raise MalformedResponseError(
                f"not an http response: {exc}", operation=operation, method=method, url=url
            ) from exc
        except http.client.HTTPException as exc:
            # IncompleteRead and friends, raised by getresponse() or read()
            raise MediatorUnreachableError(
                f"transport error: {exc!r}", operation=operation, method=method, url=url
            ) from exc

        if status < 200 or status >= 300:
            raise UnexpectedStatusError(status, operation=operation, method=method, url=url)

        if not decode:
            return status, None
        try:
            return status, json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedResponseError(
                f"failed to decode json response: {exc}", operation=operation, method=method, url=url
            ) from exc

    def _validate(self, operation: str, method: str, path: str, model, payload: Any):
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"unexpected response payload: {exc.error_count()} validation error(s)",
                operation=operation, method=method, url=self.base_url + path,
            ) from exc
