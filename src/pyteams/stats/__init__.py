"""Comparative statistics for completed team assignments."""

from .comparative import (
    ComparativeStats,
    PerformanceComparison,
    balance_percentage,
    compare,
    compare_performance,
    compare_teams,
)

__all__ = [
    "ComparativeStats",
    "PerformanceComparison",
    "balance_percentage",
    "compare",
    "compare_performance",
    "compare_teams",
]
