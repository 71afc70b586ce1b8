"""
Player agent: owns the player's network identity, runs the player web server,
registers with the mediator and answers mediator callbacks.

Lifecycle::

    INITIALIZING -> SERVER_STARTING -> AWAITING_REGISTRATION_WINDOW
        -> REGISTERED | REGISTRATION_FAILED_NON_FATAL -> RUNNING
        -> SHUTTING_DOWN -> STOPPED

``run()`` is a single asyncio loop waiting on whichever fires first of: the
stop event, the web server task ending, and the one-shot registration timer.
The timer is only armed once uvicorn reports it is listening, so the mediator
never learns our endpoint before we can answer it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Callable, Optional

import uvicorn

from agents.gameplay_protocol import MoveStrategy
from mediator.client import GameFullError, MediatorClient, MediatorError
from schemas.game_state import Cell, GameState
from schemas.move import Direction, MoveCallbackResponse
from schemas.player import PlayerIdentity
from utils.config import AppConfig
from utils.names import generate_team_name
from utils.network import DEFAULT_PORT, find_free_port, get_local_network_ip
from webapi.app import create_app

logger = logging.getLogger(__name__)

REGISTRATION_DELAY = 2.0
SERVER_START_POLL = 0.05
# Extra time on top of uvicorn's own graceful timeout before the server task is cancelled.
SHUTDOWN_GRACE = 1.0


class AgentState(str, Enum):
    """Lifecycle states of the player agent."""
    INITIALIZING = "initializing"
    SERVER_STARTING = "server_starting"
    AWAITING_REGISTRATION_WINDOW = "awaiting_registration_window"
    REGISTERED = "registered"
    REGISTRATION_FAILED_NON_FATAL = "registration_failed_non_fatal"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class ServerError(RuntimeError):
    """The player web server failed to start or stopped on its own."""


class RegistrationError(RuntimeError):
    """Registration failed for a reason other than the game being full."""


class PlayerServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the player process."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class PlayerAgent:
    """
    Orchestrates one player for the duration of a game.

    Collaborators are passed in explicitly: the mediator client, the move
    strategy and the configuration. ``stop_callback`` is invoked when the
    mediator signals the end of the game (unless ``config.manual_exit``).
    """

    def __init__(
        self,
        config: AppConfig,
        mediator_client: MediatorClient,
        strategy: MoveStrategy,
        *,
        ip_resolver: Callable[[], str] = get_local_network_ip,
        port_finder: Callable[[], int] = find_free_port,
        name_generator: Callable[[], str] = generate_team_name,
        stop_callback: Optional[Callable[[], None]] = None,
        registration_delay: float = REGISTRATION_DELAY,
    ):
        self.config = config
        self.mediator_client = mediator_client
        self.strategy = strategy
        self.ip_resolver = ip_resolver
        self.port_finder = port_finder
        self.name_generator = name_generator
        self.stop_callback = stop_callback
        self.registration_delay = registration_delay

        self.state = AgentState.INITIALIZING
        self.identity: Optional[PlayerIdentity] = None
        self.server: Optional[PlayerServer] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._stop_requested = False

    # ------------------------------------------------------------- Identity
    def resolve_identity(self) -> PlayerIdentity:
        """Resolve local ip, port and team name. Raises NoLocalAddressError."""
        local_ip = self.ip_resolver()
        logger.info(f"found my local ip: ip={local_ip}")
        identity = PlayerIdentity(
            local_ip=local_ip,
            port=self._resolve_port(),
            team_name=self._resolve_team_name(),
        )
        self.identity = identity
        return identity

    def _resolve_port(self) -> int:
        if self.config.port > 0:
            return self.config.port
        try:
            return self.port_finder()
        except OSError as e:
            logger.warning(f"could not get a free port, falling back to {DEFAULT_PORT}: error={e}")
            return DEFAULT_PORT

    def _resolve_team_name(self) -> str:
        if self.config.team_name:
            return self.config.team_name
        return self.name_generator()

    def is_me(self, cell: Cell) -> bool:
        return self.identity is not None and self.identity.is_me(cell)

    # ------------------------------------------------------------ Lifecycle
    def _transition(self, state: AgentState) -> None:
        logger.debug(f"agent state: {self.state.value} -> {state.value}")
        self.state = state

    def stop(self) -> None:
        """Request a graceful shutdown. Safe to call from any thread."""
        self._stop_requested = True
        loop, event = self._loop, self._stop_event
        if loop is None or event is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(event.set)

    async def run(self) -> None:
        """
        Run the player until stopped.

        Returns normally on a requested shutdown. Raises NoLocalAddressError,
        ServerError or RegistrationError on fatal failures, after the web
        server has been drained.
        """
        logger.info("starting game")
        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()

        identity = self.resolve_identity()

        self._transition(AgentState.SERVER_STARTING)
        server = PlayerServer(uvicorn.Config(
            create_app(self),
            host=self.config.host,
            port=identity.port,
            log_config=None,
            log_level="debug" if self.config.verbose else "warning",
            timeout_graceful_shutdown=max(int(self.config.shutdown_timeout), 1),
        ))
        self.server = server

        logger.info(f"starting player web server: host={self.config.host}, port={identity.port}")
        server_task = asyncio.create_task(self._serve(server))
        stop_task = asyncio.create_task(self._stop_event.wait())
        registration: Optional[asyncio.Task] = None
        try:
            if await self._wait_until_listening(server, server_task, stop_task):
                self._transition(AgentState.AWAITING_REGISTRATION_WINDOW)
                logger.info(f"will register to the mediator in {self.registration_delay:g} seconds")
                registration = asyncio.create_task(asyncio.sleep(self.registration_delay))
            await self._event_loop(server_task, stop_task, registration)
        except BaseException:
            await self._shutdown(server, server_task, raise_errors=False)
            raise
        else:
            await self._shutdown(server, server_task, raise_errors=True)
        finally:
            stop_task.cancel()
            if registration is not None:
                registration.cancel()
            self._transition(AgentState.STOPPED)

    async def _serve(self, server: PlayerServer) -> None:
        try:
            await server.serve()
        except SystemExit as exc:
            # uvicorn exits the process when it cannot bind
            raise ServerError(f"player web server stopped: exit code {exc.code}") from exc

    async def _wait_until_listening(
        self,
        server: PlayerServer,
        server_task: asyncio.Task,
        stop_task: asyncio.Task,
    ) -> bool:
        while not server.started:
            if server_task.done() or stop_task.done():
                return False
            await asyncio.sleep(SERVER_START_POLL)
        return True

    async def _event_loop(
        self,
        server_task: asyncio.Task,
        stop_task: asyncio.Task,
        registration: Optional[asyncio.Task],
    ) -> None:
        waiters = {server_task, stop_task}
        if registration is not None:
            waiters.add(registration)

        while True:
            done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
            if stop_task in done:
                logger.info("shutting down player web server")
                return
            if server_task in done:
                self._raise_server_stopped(server_task)
            if registration is not None and registration in done:
                waiters.discard(registration)
                await self._register()

    def _raise_server_stopped(self, server_task: asyncio.Task) -> None:
        exc = server_task.exception()
        if isinstance(exc, ServerError):
            raise exc
        if exc is not None:
            raise ServerError(f"player web server stopped: {exc}") from exc
        if self.server is not None and not self.server.started:
            raise ServerError("player web server failed to start")
        raise ServerError("player web server stopped unexpectedly")

    async def _register(self) -> None:
        identity = self.identity
        logger.info(f"about to register to the mediator: team={identity.team_name}, endpoint={identity.endpoint}")
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(
                None, self.mediator_client.register, identity.team_name, identity.endpoint
            )
        except GameFullError:
            self._transition(AgentState.REGISTRATION_FAILED_NON_FATAL)
            logger.warning("could not register to the mediator, the game is full")
            self._transition(AgentState.RUNNING)
            return
        except MediatorError as e:
            raise RegistrationError(f"failed to register to the mediator: {e}") from e

        identity.assign_player_id(result.id)
        self._transition(AgentState.REGISTERED)
        logger.info(f"registration done: player_id={result.id}")
        self._transition(AgentState.RUNNING)

    async def _shutdown(self, server: PlayerServer, server_task: asyncio.Task, raise_errors: bool) -> None:
        self._transition(AgentState.SHUTTING_DOWN)
        if server_task.done():
            # Already closed: nothing to drain.
            if not server_task.cancelled():
                server_task.exception()
            return

        server.should_exit = True
        try:
            await asyncio.wait_for(server_task, timeout=self.config.shutdown_timeout + SHUTDOWN_GRACE)
        except asyncio.TimeoutError:
            logger.warning("player web server did not stop in time, connections were dropped")
        except Exception as e:
            if raise_errors:
                raise
            logger.error(f"player web server failed while shutting down: {e}")

    # ------------------------------------------------------ Mediator callbacks
    def fetch_game_state(self) -> GameState:
        return self.mediator_client.game_state()

    def decide(self, state: GameState) -> Direction:
        """Ask the strategy for a direction; any failure means Direction.NONE."""
        try:
            direction = Direction(self.strategy.decide(state, self.is_me))
        except Exception as e:
            logger.warning(f"could not decide where to go: error={e}")
            return Direction.NONE
        return direction

    def handle_move_request(self, move_id: str) -> MoveCallbackResponse:
        """
        Answer a mediator move callback.

        Never raises: the mediator does not look at the answer, so every
        failure is logged and the callback still completes.
        """
        response = MoveCallbackResponse(move_id=move_id)

        # TODO: reuse the board sent with the game-start signal plus the last moves instead of fetching it every turn
        try:
            state = self.fetch_game_state()
        except Exception as e:
            logger.warning(f"failed to get game state, no move sent: move_id={move_id}, error={e}")
            return response

        direction = self.decide(state)
        response.direction = direction
        logger.info(f"about to send move request to the mediator: move_id={move_id}, direction={direction.value}")

        try:
            result = self.mediator_client.move(move_id, direction)
        except Exception as e:
            logger.warning(f"failed to send direction to the mediator: move_id={move_id}, error={e}")
            return response

        response.submitted = True
        response.accepted = result.accepted
        if result.accepted:
            logger.info(f"move was accepted by the mediator: direction={direction.value}")
        else:
            logger.warning(f"move was refused by the mediator: direction={direction.value}")
        return response

    def handle_game_start(self) -> None:
        logger.info("received board information, game is about to start, fasten seat belts!")

    def handle_game_end(self) -> bool:
        """Apply the end-of-game policy. Returns True when a shutdown was requested."""
        logger.info("received game end signal from mediator")
        if self.config.manual_exit:
            logger.debug("client started with the manual exit option, will not automatically shutdown")
            return False
        if self.stop_callback is not None:
            self.stop_callback()
            return True
        logger.warning("no stop callback configured, player web server won't automatically shutdown")
        return False
