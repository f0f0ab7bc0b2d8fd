"""Team balancing strategies."""

from .engine import BalanceOutput, BalanceResult, balance_teams
from .strategies import (
    STRATEGY_KINDS,
    AbilityStrategy,
    PerformanceStrategy,
    RandomStrategy,
    Strategy,
    parse_strategy,
)

__all__ = [
    "STRATEGY_KINDS",
    "AbilityStrategy",
    "BalanceOutput",
    "BalanceResult",
    "PerformanceStrategy",
    "RandomStrategy",
    "Strategy",
    "balance_teams",
    "parse_strategy",
]
