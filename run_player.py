#!/usr/bin/env python3
"""
Run the island player.

Builds the mediator client, the move strategy and the player agent, then runs
the agent until the game ends or the process is interrupted. Exits with 0 on a
graceful shutdown and 1 on any fatal error.
"""

import asyncio
import logging
import signal
import sys
from typing import List, Optional

from agents.registry import build_strategy
from mediator.client import MediatorClient
from utils.config import AppConfig, parse_args
from utils.logging_setup import level_from_verbosity, setup_logging
from utils.network import NoLocalAddressError
from webapi.player_agent import PlayerAgent, RegistrationError, ServerError

logger = logging.getLogger("run_player")


def build_agent(config: AppConfig) -> PlayerAgent:
    """Compose the player from its configuration."""
    mediator_client = MediatorClient(config.base_mediator_url, timeout=config.mediator_timeout)
    strategy = build_strategy(config.strategy, seed=config.seed)
    agent = PlayerAgent(config, mediator_client, strategy)
    agent.stop_callback = agent.stop
    return agent


async def _run(agent: PlayerAgent) -> None:
    loop = asyncio.get_running_loop()

    def on_signal(signame: str) -> None:
        logger.info(f"received {signame} signal")
        agent.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, on_signal, sig.name)
        except NotImplementedError:
            # Windows event loops: fall back to the default KeyboardInterrupt
            pass

    await agent.run()


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = parse_args(argv)
    except ValueError as e:
        setup_logging()
        logger.critical(f"invalid configuration: {e}")
        return 1

    setup_logging(level_from_verbosity(config.verbose), config.log_file)

    try:
        agent = build_agent(config)
    except ValueError as e:
        logger.critical(str(e))
        return 1

    try:
        asyncio.run(_run(agent))
    except NoLocalAddressError as e:
        logger.critical(f"failed to get local network ip: {e}")
        return 1
    except (ServerError, RegistrationError) as e:
        logger.critical(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted")

    logger.info("bye")
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
