"""Debt simulation routes."""

from __future__ import annotations

from typing import Any

from flask import current_app, jsonify, request

from debtsage.errors import validation_error
from debtsage.logging_config import get_logger
from debtsage.models.debt import PayoffSimulationResult
from debtsage.services.debt_analysis import compare_strategies, debt_vs_invest
from debtsage.services.debts import simulate
from debtsage.services.money import format_money

from . import bp
from .forms import CompareRequestForm, DebtVsInvestRequestForm, PayoffRequestForm

logger = get_logger(__name__)


def _currency() -> str:
    config = current_app.config.get("DEBTSAGE_CONFIG")
    return getattr(config, "CURRENCY", "KZT")


def _json_body() -> Any:
    return request.get_json(silent=True)


def _ensure_valid(form) -> None:
    if not form.validate():
        logger.info("Rejected simulation request", extra={"errors": form.errors})
        raise validation_error(", ".join(form.error_messages))


def _format_simulation(result: PayoffSimulationResult, currency: str) -> dict[str, Any]:
    """Return the result payload with display strings beside every cents field."""

    payload = result.to_dict()
    payload["totalPaidFormatted"] = format_money(result.total_paid_cents, currency)
    payload["totalInterestFormatted"] = format_money(result.total_interest_cents, currency)
    payload["totalPenaltiesFormatted"] = format_money(result.total_penalties_cents, currency)
    for snapshot in payload["schedule"]:
        snapshot["totalPaidFormatted"] = format_money(snapshot["totalPaidCents"], currency)
        snapshot["totalRemainingFormatted"] = format_money(snapshot["totalRemainingCents"], currency)
        for state in snapshot["debtStates"]:
            state["startBalanceFormatted"] = format_money(state["startBalanceCents"], currency)
            state["interestFormatted"] = format_money(state["interestCents"], currency)
            state["paymentFormatted"] = format_money(state["paymentCents"], currency)
            state["endBalanceFormatted"] = format_money(state["endBalanceCents"], currency)
    return payload


@bp.post("/payoff")
def payoff():
    """Simulate one strategy over the submitted debts."""

    form = PayoffRequestForm(payload=_json_body())
    _ensure_valid(form)

    result = simulate(form.debts, form.strategy, form.extra_monthly_cents, form.start_month)
    return jsonify(_format_simulation(result, _currency()))


@bp.post("/compare")
def compare():
    """Simulate every strategy and recommend the cheapest."""

    form = CompareRequestForm(payload=_json_body())
    _ensure_valid(form)

    currency = _currency()
    comparison = compare_strategies(form.debts, form.extra_monthly_cents, form.start_month)
    return jsonify(
        {
            "strategies": [_format_simulation(result, currency) for result in comparison.strategies],
            "recommended": comparison.recommended.value,
            "savingsVsWorstCents": comparison.savings_vs_worst_cents,
            "savingsVsWorstFormatted": format_money(comparison.savings_vs_worst_cents, currency),
        }
    )


@bp.post("/debt-vs-invest")
def debt_vs_invest_view():
    """Weigh paying the debt down against investing the extra money."""

    form = DebtVsInvestRequestForm(payload=_json_body())
    _ensure_valid(form)

    currency = _currency()
    result = debt_vs_invest(
        form.extra_monthly_cents,
        form.debt,
        form.expected_return_bps,
        form.horizon_months,
        currency=currency,
    )
    return jsonify(
        {
            "debtFirstNetWorthCents": result.debt_first_net_worth_cents,
            "debtFirstFormatted": format_money(result.debt_first_net_worth_cents, currency),
            "investFirstNetWorthCents": result.invest_first_net_worth_cents,
            "investFirstFormatted": format_money(result.invest_first_net_worth_cents, currency),
            "recommendation": result.recommendation.value,
            "breakEvenReturnBps": result.break_even_return_bps,
            "explanation": result.explanation,
        }
    )
