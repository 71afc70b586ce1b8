"""
HTTP client for the game mediator.
"""

from .client import (
    GameFullError,
    MalformedResponseError,
    MediatorClient,
    MediatorError,
    MediatorUnreachableError,
    UnexpectedStatusError,
)

__all__ = [
    "GameFullError",
    "MalformedResponseError",
    "MediatorClient",
    "MediatorError",
    "MediatorUnreachableError",
    "UnexpectedStatusError",
]
