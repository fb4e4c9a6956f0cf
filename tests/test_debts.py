"""Payoff simulator tests.

Covers the monthly state machine (interest, minimums, extra allocation,
payoff detection), each strategy's ordering, and the schedule invariants.
"""

from __future__ import annotations

import pytest

from debtsage.models.debt import DebtType, PayoffStrategy
from debtsage.services.debts import (
    CREDIT_CARD_MIN_FLOOR_CENTS,
    MAX_MONTHS,
    advance_month,
    current_month,
    parse_month,
    simulate,
)


def _payments(snapshot) -> dict[str, int]:
    return {state.debt_id: state.payment_cents for state in snapshot.debt_states}


def _assert_invariants(result, debts):
    """Non-negative balances, conservation and payoff-order completeness."""

    for snapshot in result.schedule:
        for state in snapshot.debt_states:
            assert state.end_balance_cents >= 0
            assert state.end_balance_cents == max(
                0, state.start_balance_cents + state.interest_cents - state.payment_cents
            )
        assert snapshot.total_paid_cents == sum(s.payment_cents for s in snapshot.debt_states)

    all_payments = sum(
        state.payment_cents for snapshot in result.schedule for state in snapshot.debt_states
    )
    assert result.total_paid_cents == all_payments

    assert len(result.payoff_order) == len(set(result.payoff_order))
    if result.converged:
        positive = [debt.id for debt in debts if debt.balance_cents > 0]
        assert sorted(result.payoff_order) == sorted(positive)
        starting = sum(debt.balance_cents for debt in debts if debt.balance_cents > 0)
        assert result.total_paid_cents == starting + result.total_interest_cents


class TestMonthLabels:
    def test_advance_within_year(self):
        assert advance_month("2026-01") == "2026-02"
        assert advance_month("2026-09") == "2026-10"

    def test_advance_rolls_december_into_next_year(self):
        assert advance_month("2026-12") == "2027-01"

    @pytest.mark.parametrize("label", ["2026-13", "2026-00", "26-01", "2026/01", ""])
    def test_invalid_labels_rejected(self, label):
        with pytest.raises(ValueError):
            parse_month(label)

    def test_current_month_format(self):
        from datetime import date

        assert current_month(date(2026, 3, 17)) == "2026-03"


class TestInstallments:
    def test_interest_free_installment_pays_off_on_schedule(self, kaspi_installment):
        result = simulate([kaspi_installment], PayoffStrategy.SNOWBALL, 0, "2026-01")

        assert result.months_to_payoff == 3
        assert result.total_paid_cents == 45_000_000
        assert result.total_interest_cents == 0
        assert result.total_penalties_cents == 0
        assert result.debt_free_date == "2026-04"
        assert result.payoff_order == ("kaspi-red",)
        assert len(result.schedule) == 3
        assert [snapshot.date for snapshot in result.schedule] == ["2026-02", "2026-03", "2026-04"]
        assert result.converged is True
        _assert_invariants(result, [kaspi_installment])

    def test_late_penalty_after_installment_term(self, debt_factory):
        debt = debt_factory(
            "kaspi-late",
            type=DebtType.INSTALLMENT,
            balance_cents=15_000_000,
            apr_bps=0,
            min_payment_cents=5_000_000,
            remaining_installments=2,
            late_penalty_cents=200_000,
        )

        result = simulate([debt], "snowball", 0, "2026-01")

        assert result.months_to_payoff == 4
        assert result.total_penalties_cents == 400_000
        assert result.total_interest_cents == 400_000
        interest = [snapshot.debt_states[0].interest_cents for snapshot in result.schedule]
        assert interest == [0, 0, 200_000, 200_000]
        payments = [snapshot.debt_states[0].payment_cents for snapshot in result.schedule]
        assert payments == [5_000_000, 5_000_000, 5_000_000, 400_000]
        _assert_invariants(result, [debt])

    def test_installment_without_term_never_charges_penalty(self, debt_factory):
        debt = debt_factory(
            type=DebtType.INSTALLMENT,
            balance_cents=1_000_000,
            apr_bps=2400,
            min_payment_cents=100_000,
            late_penalty_cents=50_000,
        )

        result = simulate([debt], "snowball", 0, "2026-01")

        assert result.months_to_payoff == 10
        assert result.total_interest_cents == 0
        assert result.total_penalties_cents == 0


class TestCreditCards:
    def test_minimum_is_one_percent_plus_interest(self, debt_factory):
        card = debt_factory(
            "card", type=DebtType.CREDIT_CARD, balance_cents=1_000_000, apr_bps=2400, min_payment_cents=0
        )

        first = simulate([card], "avalanche", 0, "2026-01").schedule[0].debt_states[0]

        assert first.interest_cents == 20_000
        assert first.payment_cents == 10_000 + 20_000

    def test_minimum_has_fixed_floor(self, debt_factory):
        card = debt_factory(
            "card", type=DebtType.CREDIT_CARD, balance_cents=100_000, apr_bps=0, min_payment_cents=0
        )

        first = simulate([card], "avalanche", 0, "2026-01").schedule[0].debt_states[0]

        assert first.payment_cents == CREDIT_CARD_MIN_FLOOR_CENTS

    def test_minimum_capped_at_amount_owed(self, debt_factory):
        card = debt_factory(
            "card", type=DebtType.CREDIT_CARD, balance_cents=1_000, apr_bps=1200, min_payment_cents=0
        )

        result = simulate([card], "avalanche", 0, "2026-01")

        assert result.months_to_payoff == 1
        assert result.schedule[0].debt_states[0].payment_cents == 1_000 + 10
        assert result.total_paid_cents == 1_010

    def test_credit_card_with_extra_pays_off_within_a_year(self, debt_factory):
        card = debt_factory(
            "cc-1",
            type=DebtType.CREDIT_CARD,
            balance_cents=50_000_000,
            apr_bps=2400,
            min_payment_cents=250_000,
        )

        result = simulate([card], "avalanche", 5_000_000, "2026-01")

        assert 7 <= result.months_to_payoff <= 11
        assert 0 < result.total_interest_cents < 6_000_000
        assert result.payoff_order == ("cc-1",)
        _assert_invariants(result, [card])


class TestLoans:
    def test_loan_interest_and_minimum(self, debt_factory):
        loan = debt_factory(balance_cents=10_000_000, apr_bps=2400, min_payment_cents=1_000_000)

        first = simulate([loan], "avalanche", 0, "2026-01").schedule[0].debt_states[0]

        assert first.start_balance_cents == 10_000_000
        assert first.interest_cents == 200_000
        assert first.payment_cents == 1_000_000
        assert first.end_balance_cents == 9_200_000

    def test_final_payment_never_overpays(self, debt_factory):
        loan = debt_factory(balance_cents=250_000, apr_bps=0, min_payment_cents=100_000)

        result = simulate([loan], "avalanche", 1_000_000, "2026-01")

        assert result.months_to_payoff == 1
        assert result.total_paid_cents == 250_000


class TestExtraAllocation:
    def test_snowball_targets_smallest_balance(self, debt_factory):
        big = debt_factory("big", balance_cents=300_000, apr_bps=2400, min_payment_cents=10_000)
        small = debt_factory("small", balance_cents=100_000, apr_bps=0, min_payment_cents=10_000)

        first = simulate([big, small], "snowball", 50_000, "2026-01").schedule[0]

        assert _payments(first) == {"big": 10_000, "small": 60_000}

    def test_avalanche_targets_highest_apr(self, debt_factory):
        big = debt_factory("big", balance_cents=300_000, apr_bps=2400, min_payment_cents=10_000)
        small = debt_factory("small", balance_cents=100_000, apr_bps=0, min_payment_cents=10_000)

        first = simulate([big, small], "avalanche", 50_000, "2026-01").schedule[0]

        assert _payments(first) == {"big": 60_000, "small": 10_000}

    def test_highest_monthly_interest_uses_charge_not_rate(self, debt_factory):
        # x: 30% on 100 000 -> 2 500 interest; y: 12% on 1 000 000 -> 10 000 interest
        x = debt_factory("x", balance_cents=100_000, apr_bps=3000, min_payment_cents=5_000)
        y = debt_factory("y", balance_cents=1_000_000, apr_bps=1200, min_payment_cents=5_000)

        by_interest = simulate([x, y], "highest_monthly_interest", 20_000, "2026-01").schedule[0]
        by_rate = simulate([x, y], "avalanche", 20_000, "2026-01").schedule[0]

        assert _payments(by_interest) == {"x": 5_000, "y": 25_000}
        assert _payments(by_rate) == {"x": 25_000, "y": 5_000}

    def test_cash_flow_index_targets_lowest_balance_to_payment_ratio(self, debt_factory):
        # quick: ratio 2; slow: ratio 30 but the smaller balance
        quick = debt_factory("quick", balance_cents=100_000, apr_bps=0, min_payment_cents=50_000)
        slow = debt_factory("slow", balance_cents=30_000, apr_bps=0, min_payment_cents=1_000)

        by_index = simulate([slow, quick], "cash_flow_index", 10_000, "2026-01").schedule[0]
        by_balance = simulate([slow, quick], "snowball", 10_000, "2026-01").schedule[0]

        assert _payments(by_index) == {"slow": 1_000, "quick": 60_000}
        assert _payments(by_balance) == {"slow": 11_000, "quick": 50_000}

    def test_cash_flow_index_sorts_zero_minimum_last(self, debt_factory):
        no_minimum = debt_factory("none", balance_cents=10_000, apr_bps=0, min_payment_cents=0)
        regular = debt_factory("regular", balance_cents=500_000, apr_bps=0, min_payment_cents=10_000)

        first = simulate([no_minimum, regular], "cash_flow_index", 5_000, "2026-01").schedule[0]

        assert _payments(first) == {"none": 0, "regular": 15_000}

    def test_ties_keep_input_order(self, debt_factory):
        first_debt = debt_factory("first", balance_cents=100_000, apr_bps=1200, min_payment_cents=10_000)
        second_debt = debt_factory("second", balance_cents=100_000, apr_bps=1200, min_payment_cents=10_000)

        month = simulate([first_debt, second_debt], "snowball", 20_000, "2026-01").schedule[0]

        assert _payments(month) == {"first": 30_000, "second": 10_000}

    def test_extra_spills_to_next_debt_when_first_is_cleared(self, debt_factory):
        tiny = debt_factory("tiny", balance_cents=15_000, apr_bps=0, min_payment_cents=10_000)
        other = debt_factory("other", balance_cents=500_000, apr_bps=0, min_payment_cents=10_000)

        month = simulate([tiny, other], "snowball", 20_000, "2026-01").schedule[0]

        # tiny only needs 5 000 more; the remaining 15 000 goes to other
        assert _payments(month) == {"tiny": 15_000, "other": 25_000}

    def test_freed_minimum_rolls_into_next_month(self, debt_factory):
        short = debt_factory("short", balance_cents=10_000, apr_bps=0, min_payment_cents=10_000)
        long = debt_factory("long", balance_cents=100_000, apr_bps=0, min_payment_cents=10_000)

        result = simulate([short, long], "snowball", 0, "2026-01")

        assert _payments(result.schedule[0]) == {"short": 10_000, "long": 10_000}
        assert _payments(result.schedule[1]) == {"long": 20_000}
        assert result.payoff_order == ("short", "long")
        _assert_invariants(result, [short, long])


class TestScheduleInvariants:
    def test_zero_balance_debts_produce_empty_schedule(self, debt_factory):
        paid = debt_factory("zero-1", balance_cents=0, apr_bps=1200, min_payment_cents=500_000)

        result = simulate([paid], "snowball", 0, "2026-01")

        assert result.months_to_payoff == 0
        assert result.schedule == ()
        assert result.total_paid_cents == 0
        assert result.total_interest_cents == 0
        assert result.payoff_order == ()
        assert result.debt_free_date == "2026-01"
        assert result.converged is True

    def test_empty_debt_list(self):
        result = simulate([], "avalanche", 1_000, "2026-01")

        assert result.months_to_payoff == 0
        assert result.schedule == ()

    def test_zero_balance_debt_excluded_from_schedule(self, debt_factory):
        paid = debt_factory("paid", balance_cents=0)
        open_loan = debt_factory("open", balance_cents=2_000_000, min_payment_cents=1_000_000)

        result = simulate([paid, open_loan], "snowball", 0, "2026-01")

        for snapshot in result.schedule:
            assert [state.debt_id for state in snapshot.debt_states] == ["open"]
        assert result.payoff_order == ("open",)

    def test_mixed_portfolio_invariants_for_every_strategy(self, debt_factory):
        debts = [
            debt_factory("loan-a", balance_cents=10_000_000, apr_bps=2400, min_payment_cents=1_000_000),
            debt_factory("loan-b", balance_cents=50_000_000, apr_bps=1200, min_payment_cents=2_500_000),
            debt_factory(
                "card",
                type=DebtType.CREDIT_CARD,
                balance_cents=3_000_000,
                apr_bps=3600,
                min_payment_cents=250_000,
            ),
            debt_factory(
                "plan",
                type=DebtType.INSTALLMENT,
                balance_cents=5_000_000,
                apr_bps=0,
                min_payment_cents=2_000_000,
                remaining_installments=2,
                late_penalty_cents=100_000,
            ),
        ]
        for strategy in PayoffStrategy:
            result = simulate(debts, strategy, 2_000_000, "2026-01")
            assert result.converged
            assert result.strategy is strategy
            assert result.strategy_description == strategy.description
            assert result.schedule[-1].total_remaining_cents == 0
            _assert_invariants(result, debts)

    def test_payoff_order_is_chronological(self, debt_factory):
        debts = [
            debt_factory("slow", balance_cents=900_000, apr_bps=0, min_payment_cents=100_000),
            debt_factory("fast", balance_cents=200_000, apr_bps=0, min_payment_cents=100_000),
        ]

        result = simulate(debts, "avalanche", 0, "2026-01")

        paid_month = {}
        for snapshot in result.schedule:
            for state in snapshot.debt_states:
                if state.is_paid_off and state.debt_id not in paid_month:
                    paid_month[state.debt_id] = snapshot.month
        assert result.payoff_order == ("fast", "slow")
        assert paid_month["fast"] < paid_month["slow"]

    def test_avalanche_interest_not_worse_than_snowball(self, debt_factory):
        debts = [
            debt_factory("debt-a", balance_cents=10_000_000, apr_bps=2400, min_payment_cents=1_000_000),
            debt_factory("debt-b", balance_cents=50_000_000, apr_bps=1200, min_payment_cents=2_500_000),
            debt_factory(
                "debt-c",
                type=DebtType.INSTALLMENT,
                balance_cents=5_000_000,
                apr_bps=0,
                min_payment_cents=2_500_000,
                remaining_installments=2,
            ),
        ]

        snowball = simulate(debts, "snowball", 2_000_000, "2026-01")
        avalanche = simulate(debts, "avalanche", 2_000_000, "2026-01")

        assert "debt-c" in snowball.payoff_order
        assert "debt-a" in avalanche.payoff_order
        assert avalanche.total_interest_cents <= snowball.total_interest_cents

    def test_repeated_runs_are_identical(self, two_loans):
        first = simulate(two_loans, "cash_flow_index", 2_000_000, "2026-01")
        second = simulate(two_loans, "cash_flow_index", 2_000_000, "2026-01")

        assert first == second
        assert two_loans[0].balance_cents == 10_000_000


class TestMonthCap:
    def test_stops_at_cap_and_reports_non_convergence(self, debt_factory):
        # minimum (1 000) never covers the 20 000 monthly interest
        stuck = debt_factory("stuck", balance_cents=1_000_000, apr_bps=2400, min_payment_cents=1_000)

        result = simulate([stuck], "avalanche", 0, "2026-01")

        assert result.months_to_payoff == MAX_MONTHS
        assert len(result.schedule) == MAX_MONTHS
        assert result.converged is False
        assert result.payoff_order == ()
        assert result.schedule[-1].total_remaining_cents > 1_000_000
        assert result.debt_free_date == "2076-01"
        _assert_invariants(result, [stuck])

    def test_unknown_strategy_rejected(self, two_loans):
        with pytest.raises(ValueError):
            simulate(two_loans, "tortoise", 0, "2026-01")

    def test_invalid_start_month_rejected(self, two_loans):
        with pytest.raises(ValueError):
            simulate(two_loans, "snowball", 0, "2026-13")
