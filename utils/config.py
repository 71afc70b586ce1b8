"""
Player configuration.

Options come from the command line; each one falls back to an environment
variable (a ``.env`` file in the working directory is loaded first) and then
to a built-in default.
"""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


DEFAULT_MEDIATOR_URL = "http://localhost:8080"


@dataclass
class AppConfig:
    """
    Structured player configuration.

    Attributes:
        port: Port to listen on; 0 picks a free port
        verbose: Number of ``-v`` flags; any value above 0 enables debug logs
        team_name: Team name sent on registration; generated when empty
        base_mediator_url: Mediator contact point
        manual_exit: Keep running after the mediator signals the end of the game
        host: Interface the player web server binds to
        strategy: Name of the move strategy to use
        mediator_timeout: Timeout in seconds of each mediator request
        shutdown_timeout: Seconds given to in-flight requests on shutdown
        log_file: Optional log file in addition to the console
        seed: Optional random seed for the move strategy
    """
    port: int = 0
    verbose: int = 0
    team_name: str = ""
    base_mediator_url: str = DEFAULT_MEDIATOR_URL
    manual_exit: bool = False
    host: str = "0.0.0.0"
    strategy: str = "random"
    mediator_timeout: float = 10.0
    shutdown_timeout: float = 5.0
    log_file: Optional[Path] = None
    seed: Optional[int] = None


def _env_flag(name: str) -> bool:
    raw = os.getenv(name, "").strip().lower()
    return raw in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Island game player")
    parser.add_argument("-p", "--port", type=int, default=_env_int("PLAYER_PORT", 0),
                        help="the port to bind with, chose a random free port if not provided")
    parser.add_argument("-v", "--verbose", action="count", default=_env_int("PLAYER_VERBOSE", 0),
                        help="show verbose debug information")
    parser.add_argument("-t", "--team-name", default=os.getenv("PLAYER_TEAM_NAME", ""),
                        help="my team name, generated randomly if not provided")
    parser.add_argument("-m", "--base-mediator-url", default=os.getenv("MEDIATOR_URL", DEFAULT_MEDIATOR_URL),
                        help="the game mediator contact point")
    parser.add_argument("--manual-exit", action="store_true", default=_env_flag("PLAYER_MANUAL_EXIT"),
                        help="if set, do not automatically exit on mediator game end signal")
    parser.add_argument("--host", default=os.getenv("PLAYER_HOST", "0.0.0.0"),
                        help="interface the player web server binds to")
    parser.add_argument("--strategy", default=os.getenv("PLAYER_STRATEGY", "random"),
                        help="move strategy to play with")
    parser.add_argument("--mediator-timeout", type=float, default=_env_float("MEDIATOR_TIMEOUT", 10.0),
                        help="timeout in seconds of each mediator request")
    parser.add_argument("--shutdown-timeout", type=float, default=_env_float("PLAYER_SHUTDOWN_TIMEOUT", 5.0),
                        help="seconds given to in-flight requests when shutting down")
    parser.add_argument("--log-file", type=Path, default=os.getenv("PLAYER_LOG_FILE") or None,
                        help="also write logs to this file")
    parser.add_argument("--seed", type=int, default=None,
                        help="random seed for the move strategy")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> AppConfig:
    """Load ``.env``, parse ``argv`` and return the resulting config."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    if args.port < 0 or args.port > 65535:
        raise ValueError(f"invalid port: {args.port}")
    return AppConfig(
        port=args.port,
        verbose=args.verbose,
        team_name=args.team_name.strip(),
        base_mediator_url=args.base_mediator_url,
        manual_exit=args.manual_exit,
        host=args.host,
        strategy=args.strategy,
        mediator_timeout=args.mediator_timeout,
        shutdown_timeout=args.shutdown_timeout,
        log_file=args.log_file,
        seed=args.seed,
    )
