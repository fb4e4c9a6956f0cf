"""Month-by-month debt payoff simulation.

Each run walks the calendar one month at a time:

1. accrue interest (or an installment late penalty) on every active debt
2. charge each debt its contractual minimum, never more than it owes
3. pour the extra pool (caller extra + minimums freed by earlier payoffs)
   into debts in strategy order, filling each before moving on
4. settle balances and record the month

The run stops once every debt is at zero or after ``MAX_MONTHS`` months.
All arithmetic is on integer cents; interest is rounded half-up per month.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from fractions import Fraction
from typing import Any, Callable, Iterable

from ..logging_config import get_logger
from ..models.debt import (
    DebtMonthState,
    DebtSnapshot,
    DebtType,
    MonthlySnapshot,
    PayoffSimulationResult,
    PayoffStrategy,
)
from .money import monthly_interest_cents

logger = get_logger(__name__)

MAX_MONTHS = 600
CREDIT_CARD_MIN_FLOOR_CENTS = 2_500

_MONTH_LABEL = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(slots=True)
class _DebtState:
    """Mutable per-run view of a snapshot; never shared between runs."""

    snapshot: DebtSnapshot
    balance: int
    months_elapsed: int = 0
    is_paid_off: bool = False
    interest: int = 0
    payment: int = 0

    @property
    def original_min_payment(self) -> int:
        return self.snapshot.min_payment_cents


def parse_month(label: str) -> tuple[int, int]:
    """Return ``(year, month)`` for a ``YYYY-MM`` label."""

    match = _MONTH_LABEL.match(label or "")
    if match is None:
        raise ValueError(f"Invalid month label {label!r}; expected YYYY-MM.")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month label {label!r}; month must be 01-12.")
    return year, month


def advance_month(label: str) -> str:
    """Return the label of the month after ``label`` (2026-12 -> 2027-01)."""

    year, month = parse_month(label)
    month += 1
    year += (month - 1) // 12
    month = ((month - 1) % 12) + 1
    return f"{year:04d}-{month:02d}"


def current_month(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def _accrue_interest(state: _DebtState) -> tuple[int, int]:
    """Return ``(interest, penalty)`` charged to ``state`` this month."""

    debt = state.snapshot
    if debt.type in (DebtType.CREDIT_CARD, DebtType.LOAN):
        return monthly_interest_cents(state.balance, debt.apr_bps), 0

    # Installments are interest free until the plan runs past its term.
    if (
        debt.remaining_installments is not None
        and state.months_elapsed > debt.remaining_installments
        and state.balance > 0
    ):
        return debt.late_penalty_cents, debt.late_penalty_cents
    return 0, 0


def _minimum_payment(state: _DebtState) -> int:
    """Contractual payment for the month, capped at what is owed."""

    owed = state.balance + state.interest
    if state.snapshot.type is DebtType.CREDIT_CARD:
        minimum = max(CREDIT_CARD_MIN_FLOOR_CENTS, state.balance // 100 + state.interest)
    else:
        minimum = state.snapshot.min_payment_cents
    return min(minimum, owed)


def _cash_flow_index(state: _DebtState) -> tuple[int, Fraction]:
    minimum = state.snapshot.min_payment_cents
    if minimum <= 0:
        return (1, Fraction(0))
    return (0, Fraction(state.balance, minimum))


def _sort_key(strategy: PayoffStrategy) -> Callable[[_DebtState], Any]:
    """Return the ordering key for ``strategy``; ``sorted`` keeps input order on ties."""

    if strategy is PayoffStrategy.SNOWBALL:
        return lambda state: state.balance
    if strategy is PayoffStrategy.AVALANCHE:
        return lambda state: -state.snapshot.apr_bps
    if strategy is PayoffStrategy.HIGHEST_MONTHLY_INTEREST:
        return lambda state: -state.interest
    if strategy is PayoffStrategy.CASH_FLOW_INDEX:
        return _cash_flow_index
    raise ValueError(f"Unsupported payoff strategy: {strategy!r}")


def _allocate_extra(active: list[_DebtState], strategy: PayoffStrategy, extra: int) -> int:
    """Top up debts in strategy order; return whatever could not be placed."""

    for state in sorted(active, key=_sort_key(strategy)):
        if extra <= 0:
            break
        room = state.balance + state.interest - state.payment
        if room <= 0:
            continue
        top_up = min(extra, room)
        state.payment += top_up
        extra -= top_up
    return extra


def simulate(
    debts: Iterable[DebtSnapshot],
    strategy: PayoffStrategy | str,
    extra_monthly_cents: int = 0,
    start_month: str | None = None,
) -> PayoffSimulationResult:
    """Simulate paying off ``debts`` under ``strategy``.

    ``start_month`` is the month before the first payment; the first
    scheduled month is the one after it. Debts that start at a zero balance
    never enter the schedule. Caller snapshots are not modified.
    """

    strategy = PayoffStrategy(strategy)
    label = start_month or current_month()
    parse_month(label)

    states = [
        _DebtState(snapshot=debt, balance=debt.balance_cents, is_paid_off=debt.balance_cents <= 0)
        for debt in debts
    ]

    schedule: list[MonthlySnapshot] = []
    payoff_order: list[str] = []
    total_paid = 0
    total_interest = 0
    total_penalties = 0
    freed_minimums = 0
    month = 0

    logger.debug(
        "Starting payoff simulation",
        extra={"strategy": strategy.value, "debts": len(states), "extra_cents": extra_monthly_cents},
    )

    while month < MAX_MONTHS:
        active = [state for state in states if not state.is_paid_off]
        if not active:
            break

        month += 1
        label = advance_month(label)

        for state in active:
            state.months_elapsed += 1
            state.interest, penalty = _accrue_interest(state)
            total_interest += state.interest
            total_penalties += penalty

        for state in active:
            state.payment = _minimum_payment(state)

        _allocate_extra(active, strategy, extra_monthly_cents + freed_minimums)

        month_states: list[DebtMonthState] = []
        month_paid = 0
        for state in active:
            start_balance = state.balance
            state.balance = max(0, start_balance + state.interest - state.payment)
            month_paid += state.payment
            if state.balance == 0:
                state.is_paid_off = True
                payoff_order.append(state.snapshot.id)
                freed_minimums += state.original_min_payment
            month_states.append(
                DebtMonthState(
                    debt_id=state.snapshot.id,
                    name=state.snapshot.name,
                    start_balance_cents=start_balance,
                    interest_cents=state.interest,
                    payment_cents=state.payment,
                    end_balance_cents=state.balance,
                    is_paid_off=state.is_paid_off,
                )
            )

        total_paid += month_paid
        schedule.append(
            MonthlySnapshot(
                month=month,
                date=label,
                debt_states=tuple(month_states),
                total_paid_cents=month_paid,
                total_remaining_cents=sum(state.balance for state in states if state.balance > 0),
            )
        )

    converged = all(state.is_paid_off for state in states)
    if not converged:
        logger.warning(
            "Payoff simulation hit the month cap with debt outstanding",
            extra={
                "strategy": strategy.value,
                "months": month,
                "remaining_cents": schedule[-1].total_remaining_cents if schedule else 0,
            },
        )
    else:
        logger.debug(
            "Payoff simulation finished",
            extra={"strategy": strategy.value, "months": month, "total_paid_cents": total_paid},
        )

    return PayoffSimulationResult(
        strategy=strategy,
        strategy_description=strategy.description,
        months_to_payoff=month,
        total_paid_cents=total_paid,
        total_interest_cents=total_interest,
        total_penalties_cents=total_penalties,
        debt_free_date=label,
        schedule=tuple(schedule),
        payoff_order=tuple(payoff_order),
        converged=converged,
    )
