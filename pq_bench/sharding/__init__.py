"""
Sharding package for pq-bench.

Re-exports the strategy interfaces and keeps the name -> factory registry used
by the partitioner, the orchestrator and the CLI.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from pq_bench.errors import ConfigurationError
from pq_bench.sharding.abstract import AbstractShardingStrategy, ShardingStrategy
from pq_bench.sharding.hashed import HashSharding, stable_hash
from pq_bench.sharding.round_robin import RoundRobinSharding

DEFAULT_STRATEGY = RoundRobinSharding.name


def _strategy_factories() -> Dict[str, Callable[[int], ShardingStrategy]]:
    """Registry of available sharding strategies."""
    return {
        RoundRobinSharding.name: lambda workers: RoundRobinSharding(workers),
        HashSharding.name: lambda workers: HashSharding(workers),
    }


def available_strategies() -> List[str]:
    """List available sharding strategy names."""
    return sorted(_strategy_factories().keys())


def resolve_strategy(name: str, worker_count: int) -> ShardingStrategy:
    """Build a fresh strategy instance for one partitioning pass."""
    factories = _strategy_factories()
    if name not in factories:
        raise ConfigurationError(
            f"Unknown sharding strategy '{name}'. Available: {', '.join(available_strategies())}"
        )
    return factories[name](worker_count)


__all__ = [
    # Abstracts
    "AbstractShardingStrategy",
    "ShardingStrategy",
    # Concrete strategies
    "HashSharding",
    "RoundRobinSharding",
    # Registry
    "DEFAULT_STRATEGY",
    "available_strategies",
    "resolve_strategy",
    "stable_hash",
]
