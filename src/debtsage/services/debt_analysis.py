"""Strategy comparison and pay-debt-versus-invest analysis."""

from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Iterable

from ..logging_config import get_logger
from ..models.debt import (
    DebtSnapshot,
    DebtVsInvestResult,
    PayoffSimulationResult,
    PayoffStrategy,
    Recommendation,
    StrategyComparison,
)
from .debts import simulate
from .money import BPS_PER_UNIT, MONTHS_PER_YEAR, format_money, percent_string, round_cents

logger = get_logger(__name__)

ALL_STRATEGIES: tuple[PayoffStrategy, ...] = (
    PayoffStrategy.SNOWBALL,
    PayoffStrategy.AVALANCHE,
    PayoffStrategy.HIGHEST_MONTHLY_INTEREST,
    PayoffStrategy.CASH_FLOW_INDEX,
)

BREAK_EVEN_MAX_BPS = 100_000  # 1000 % a year
SPLIT_THRESHOLD = Decimal("0.05")
# Schedule labels are not part of the analysis result.
ANALYSIS_START_MONTH = "2000-01"


def compare_strategies(
    debts: Iterable[DebtSnapshot],
    extra_monthly_cents: int = 0,
    start_month: str | None = None,
) -> StrategyComparison:
    """Simulate every strategy on the same debts and rank them by total paid."""

    debts = list(debts)
    results = [simulate(debts, strategy, extra_monthly_cents, start_month) for strategy in ALL_STRATEGIES]
    results.sort(key=lambda result: result.total_paid_cents)

    best, worst = results[0], results[-1]
    logger.info(
        "Compared payoff strategies",
        extra={"recommended": best.strategy.value, "debts": len(debts)},
    )
    return StrategyComparison(
        strategies=tuple(results),
        recommended=best.strategy,
        savings_vs_worst_cents=worst.total_paid_cents - best.total_paid_cents,
    )


def compound_invest(
    initial_cents: int,
    monthly_contribution_cents: int,
    return_bps: int,
    months: int,
) -> int:
    """Grow ``initial_cents`` with a contribution at the end of every month.

    Compounds monthly at ``return_bps / 12`` without intermediate rounding;
    the final balance is rounded half-up to whole cents.
    """

    with localcontext() as ctx:
        ctx.prec = 50
        growth = 1 + Decimal(return_bps) / Decimal(BPS_PER_UNIT) / Decimal(MONTHS_PER_YEAR)
        contribution = Decimal(monthly_contribution_cents)
        balance = Decimal(initial_cents)
        for _ in range(max(months, 0)):
            balance = balance * growth + contribution
        return round_cents(balance)


def _debt_first_net_worth(
    payoff: PayoffSimulationResult,
    extra_monthly_cents: int,
    debt: DebtSnapshot,
    return_bps: int,
    horizon_months: int,
) -> int:
    """Invest extra plus the freed minimum for the months left after payoff."""

    remaining_months = horizon_months - min(payoff.months_to_payoff, horizon_months)
    monthly_investment = extra_monthly_cents + debt.min_payment_cents
    return compound_invest(0, monthly_investment, return_bps, remaining_months)


def _outstanding_at_horizon(minimum_only: PayoffSimulationResult, horizon_months: int) -> int:
    if minimum_only.months_to_payoff <= horizon_months:
        return 0
    if len(minimum_only.schedule) >= horizon_months:
        return minimum_only.schedule[horizon_months - 1].total_remaining_cents
    if minimum_only.schedule:
        return minimum_only.schedule[-1].total_remaining_cents
    return 0


def _invest_first_net_worth(
    outstanding_cents: int,
    extra_monthly_cents: int,
    return_bps: int,
    horizon_months: int,
) -> int:
    investment = compound_invest(0, extra_monthly_cents, return_bps, horizon_months)
    return investment - outstanding_cents


def _recommend(debt_first: int, invest_first: int) -> Recommendation:
    if debt_first > 0 and invest_first > 0:
        ratio = Decimal(abs(debt_first - invest_first)) / Decimal(max(debt_first, invest_first))
    else:
        ratio = Decimal(1) if debt_first != invest_first else Decimal(0)

    if debt_first > invest_first and ratio > SPLIT_THRESHOLD:
        return Recommendation.PAY_DEBT
    if invest_first > debt_first and ratio > SPLIT_THRESHOLD:
        return Recommendation.INVEST
    return Recommendation.SPLIT


def _explain(
    recommendation: Recommendation,
    debt: DebtSnapshot,
    expected_return_bps: int,
    difference_cents: int,
    currency: str,
) -> str:
    apr = percent_string(debt.apr_bps)
    expected = percent_string(expected_return_bps)
    difference = format_money(difference_cents, currency)
    if recommendation is Recommendation.PAY_DEBT:
        return (
            f"Paying off the {apr}% loan first yields {difference} more than investing at {expected}%."
        )
    if recommendation is Recommendation.INVEST:
        return (
            f"Investing at {expected}% yields {difference} more than paying off the {apr}% loan first."
        )
    return f"Paying debt ({apr}%) and investing ({expected}%) yield similar results. Consider splitting."


def debt_vs_invest(
    extra_monthly_cents: int,
    debt: DebtSnapshot,
    expected_return_bps: int,
    horizon_months: int,
    *,
    currency: str = "KZT",
) -> DebtVsInvestResult:
    """Compare paying ``debt`` down first against investing the extra money.

    Debt-first puts the extra on the debt (avalanche) and, once it is gone,
    invests the extra plus the freed minimum. Invest-first pays only the
    minimum and invests the extra from month one; any balance still owed at
    the horizon is subtracted. The break-even rate is the smallest annual
    return, to the nearest basis point, at which investing first is at least
    as good.
    """

    # Neither simulation depends on the return rate, so the break-even
    # search only re-runs the compounding.
    payoff = simulate([debt], PayoffStrategy.AVALANCHE, extra_monthly_cents, ANALYSIS_START_MONTH)
    minimum_only = simulate([debt], PayoffStrategy.AVALANCHE, 0, ANALYSIS_START_MONTH)
    outstanding = _outstanding_at_horizon(minimum_only, horizon_months)

    def scenarios(return_bps: int) -> tuple[int, int]:
        return (
            _debt_first_net_worth(payoff, extra_monthly_cents, debt, return_bps, horizon_months),
            _invest_first_net_worth(outstanding, extra_monthly_cents, return_bps, horizon_months),
        )

    debt_first, invest_first = scenarios(expected_return_bps)

    lo, hi = 0, BREAK_EVEN_MAX_BPS
    while hi - lo > 1:
        mid = (lo + hi) // 2
        debt_nw, invest_nw = scenarios(mid)
        if invest_nw >= debt_nw:
            hi = mid
        else:
            lo = mid

    recommendation = _recommend(debt_first, invest_first)
    explanation = _explain(
        recommendation, debt, expected_return_bps, abs(debt_first - invest_first), currency
    )

    logger.info(
        "Debt versus invest analysis complete",
        extra={
            "debt_id": debt.id,
            "recommendation": recommendation.value,
            "break_even_bps": hi,
        },
    )
    return DebtVsInvestResult(
        debt_first_net_worth_cents=debt_first,
        invest_first_net_worth_cents=invest_first,
        recommendation=recommendation,
        break_even_return_bps=hi,
        explanation=explanation,
    )
