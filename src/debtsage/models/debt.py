"""Debt snapshots and payoff simulation result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class DebtType(str, Enum):
    """Kinds of debt with distinct interest and minimum-payment rules."""

    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    INSTALLMENT = "installment"


class PayoffStrategy(str, Enum):
    """Orderings used to direct extra money at active debts."""

    SNOWBALL = "snowball"
    AVALANCHE = "avalanche"
    HIGHEST_MONTHLY_INTEREST = "highest_monthly_interest"
    CASH_FLOW_INDEX = "cash_flow_index"

    @property
    def description(self) -> str:
        return _STRATEGY_DESCRIPTIONS[self]


_STRATEGY_DESCRIPTIONS = {
    PayoffStrategy.SNOWBALL: "Smallest balance first. Fast psychological wins.",
    PayoffStrategy.AVALANCHE: "Highest interest rate first. Lowest total cost.",
    PayoffStrategy.HIGHEST_MONTHLY_INTEREST: (
        "Highest monthly interest charge first. Aggressive on expensive debt."
    ),
    PayoffStrategy.CASH_FLOW_INDEX: (
        "Lowest balance-to-payment ratio first. Frees cash flow fastest."
    ),
}


class Recommendation(str, Enum):
    """Outcome of the debt-vs-invest comparison."""

    PAY_DEBT = "pay_debt"
    INVEST = "invest"
    SPLIT = "split"


@dataclass(frozen=True, slots=True)
class DebtSnapshot:
    """Immutable description of one debt at the start of a simulation."""

    id: str
    name: str
    type: DebtType
    balance_cents: int
    apr_bps: int
    min_payment_cents: int
    remaining_installments: Optional[int] = None
    late_penalty_cents: int = 0

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "balanceCents": self.balance_cents,
            "aprBps": self.apr_bps,
            "minPaymentCents": self.min_payment_cents,
            "latePenaltyCents": self.late_penalty_cents,
        }
        if self.remaining_installments is not None:
            payload["remainingInstallments"] = self.remaining_installments
        return payload


@dataclass(frozen=True, slots=True)
class DebtMonthState:
    """One debt's movement during a single simulated month."""

    debt_id: str
    name: str
    start_balance_cents: int
    interest_cents: int
    payment_cents: int
    end_balance_cents: int
    is_paid_off: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "debtId": self.debt_id,
            "name": self.name,
            "startBalanceCents": self.start_balance_cents,
            "interestCents": self.interest_cents,
            "paymentCents": self.payment_cents,
            "endBalanceCents": self.end_balance_cents,
            "isPaidOff": self.is_paid_off,
        }


@dataclass(frozen=True, slots=True)
class MonthlySnapshot:
    """Aggregate of all active debts for one simulated month."""

    month: int
    date: str
    debt_states: tuple[DebtMonthState, ...]
    total_paid_cents: int
    total_remaining_cents: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "date": self.date,
            "debtStates": [state.to_dict() for state in self.debt_states],
            "totalPaidCents": self.total_paid_cents,
            "totalRemainingCents": self.total_remaining_cents,
        }


@dataclass(frozen=True, slots=True)
class PayoffSimulationResult:
    """Full outcome of one payoff simulation.

    ``converged`` is False when the month cap was reached with debt still
    outstanding; ``months_to_payoff`` then equals the cap.
    """

    strategy: PayoffStrategy
    strategy_description: str
    months_to_payoff: int
    total_paid_cents: int
    total_interest_cents: int
    total_penalties_cents: int
    debt_free_date: str
    schedule: tuple[MonthlySnapshot, ...] = field(default_factory=tuple)
    payoff_order: tuple[str, ...] = field(default_factory=tuple)
    converged: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "strategyDescription": self.strategy_description,
            "monthsToPayoff": self.months_to_payoff,
            "totalPaidCents": self.total_paid_cents,
            "totalInterestCents": self.total_interest_cents,
            "totalPenaltiesCents": self.total_penalties_cents,
            "debtFreeDate": self.debt_free_date,
            "schedule": [snapshot.to_dict() for snapshot in self.schedule],
            "payoffOrder": list(self.payoff_order),
            "converged": self.converged,
        }


@dataclass(frozen=True, slots=True)
class StrategyComparison:
    """Simulation results for every strategy, cheapest first."""

    strategies: tuple[PayoffSimulationResult, ...]
    recommended: PayoffStrategy
    savings_vs_worst_cents: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategies": [result.to_dict() for result in self.strategies],
            "recommended": self.recommended.value,
            "savingsVsWorstCents": self.savings_vs_worst_cents,
        }


@dataclass(frozen=True, slots=True)
class DebtVsInvestResult:
    """Projected net worth of paying debt first versus investing first."""

    debt_first_net_worth_cents: int
    invest_first_net_worth_cents: int
    recommendation: Recommendation
    break_even_return_bps: int
    explanation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "debtFirstNetWorthCents": self.debt_first_net_worth_cents,
            "investFirstNetWorthCents": self.invest_first_net_worth_cents,
            "recommendation": self.recommendation.value,
            "breakEvenReturnBps": self.break_even_return_bps,
            "explanation": self.explanation,
        }
