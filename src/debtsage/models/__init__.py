"""Value types for debt payoff projections."""

from .debt import (
    DebtMonthState,
    DebtSnapshot,
    DebtType,
    DebtVsInvestResult,
    MonthlySnapshot,
    PayoffSimulationResult,
    PayoffStrategy,
    Recommendation,
    StrategyComparison,
)

__all__ = [
    "DebtMonthState",
    "DebtSnapshot",
    "DebtType",
    "DebtVsInvestResult",
    "MonthlySnapshot",
    "PayoffSimulationResult",
    "PayoffStrategy",
    "Recommendation",
    "StrategyComparison",
]
