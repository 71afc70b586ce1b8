"""
Strategy registry: maps configured strategy names to implementations.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from agents.gameplay_protocol import MoveStrategy
from agents.random_agent import RandomMoveStrategy


_STRATEGIES: Dict[str, Callable[[Optional[int]], MoveStrategy]] = {
    "random": lambda seed: RandomMoveStrategy(seed=seed),
}


def available_strategies() -> List[str]:
    return sorted(_STRATEGIES)


def build_strategy(name: str, seed: Optional[int] = None) -> MoveStrategy:
    factory = _STRATEGIES.get(name.strip().lower())
    if factory is None:
        raise ValueError(f"Unknown strategy: {name}. Available: {', '.join(available_strategies())}")
    return factory(seed)
