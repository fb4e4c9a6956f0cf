"""Flask CLI commands for DebtSage."""

from __future__ import annotations

import json
from pathlib import Path

import click

from .models.debt import DebtSnapshot, PayoffStrategy
from .services.money import format_money

_STRATEGY_CHOICES = [member.value for member in PayoffStrategy]


def _load_debts(path: Path) -> list[DebtSnapshot]:
    """Read a JSON array of debts in the API wire format."""

    from .blueprints.simulate.forms import DebtListForm

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{path} is not valid JSON: {exc}") from exc

    form = DebtListForm(payload=raw)
    if not form.validate():
        raise click.BadParameter(f"{path}: {', '.join(form.error_messages)}")
    return form.debts


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    currency = app.config["DEBTSAGE_CONFIG"].CURRENCY

    @app.cli.command("debtsage-simulate")
    @click.argument("debts_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
    @click.option(
        "--strategy",
        type=click.Choice(_STRATEGY_CHOICES),
        default=PayoffStrategy.AVALANCHE.value,
        show_default=True,
    )
    @click.option("--extra", "extra_cents", type=click.IntRange(min=0), default=0, help="Extra monthly payment in cents")
    @click.option("--start", "start_month", default=None, help="Start month as YYYY-MM")
    @click.option("--csv", "csv_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
    def debtsage_simulate(
        debts_file: Path,
        strategy: str,
        extra_cents: int,
        start_month: str | None,
        csv_path: Path | None,
    ) -> None:
        """Simulate a payoff plan for the debts in DEBTS_FILE."""

        from .services.debts import simulate

        debts = _load_debts(debts_file)
        try:
            result = simulate(debts, strategy, extra_cents, start_month)
        except ValueError as exc:
            raise click.BadParameter(str(exc)) from exc

        click.echo(f"Strategy: {result.strategy.value} ({result.strategy_description})")
        click.echo(f"Months to payoff: {result.months_to_payoff}")
        click.echo(f"Debt free: {result.debt_free_date}")
        click.echo(f"Total paid: {format_money(result.total_paid_cents, currency)}")
        click.echo(f"Total interest: {format_money(result.total_interest_cents, currency)}")
        click.echo(f"Payoff order: {', '.join(result.payoff_order) or '-'}")
        if not result.converged:
            click.echo("Warning: payments never catch up with interest; stopped at the month cap.")

        if csv_path is not None:
            from .services.export_csv import export_schedule_csv

            path = export_schedule_csv(result=result, output_path=csv_path)
            click.echo(f"Schedule written: {path}")

    @app.cli.command("debtsage-compare")
    @click.argument("debts_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
    @click.option("--extra", "extra_cents", type=click.IntRange(min=0), default=0, help="Extra monthly payment in cents")
    @click.option("--start", "start_month", default=None, help="Start month as YYYY-MM")
    def debtsage_compare(debts_file: Path, extra_cents: int, start_month: str | None) -> None:
        """Rank every payoff strategy for the debts in DEBTS_FILE."""

        from .services.debt_analysis import compare_strategies

        debts = _load_debts(debts_file)
        try:
            comparison = compare_strategies(debts, extra_cents, start_month)
        except ValueError as exc:
            raise click.BadParameter(str(exc)) from exc

        for rank, result in enumerate(comparison.strategies, start=1):
            click.echo(
                f"{rank}. {result.strategy.value}: {result.months_to_payoff} months, "
                f"{format_money(result.total_paid_cents, currency)} paid"
            )
        click.echo(f"Recommended: {comparison.recommended.value}")
        click.echo(f"Savings vs worst: {format_money(comparison.savings_vs_worst_cents, currency)}")
