"""CSV export of payoff schedules."""

from __future__ import annotations

import csv
from pathlib import Path

from ..models.debt import PayoffSimulationResult

SCHEDULE_HEADERS = [
    "month",
    "date",
    "debt_id",
    "name",
    "start_balance_cents",
    "interest_cents",
    "payment_cents",
    "end_balance_cents",
    "is_paid_off",
]


def export_schedule_csv(*, result: PayoffSimulationResult, output_path: Path) -> Path:
    """Write one row per debt per simulated month to ``output_path``.

    Columns are deterministic (see ``SCHEDULE_HEADERS``). Returns the path written.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=SCHEDULE_HEADERS, quoting=csv.QUOTE_MINIMAL)
        writer.writeheader()
        for snapshot in result.schedule:
            for state in snapshot.debt_states:
                writer.writerow(
                    {
                        "month": snapshot.month,
                        "date": snapshot.date,
                        "debt_id": state.debt_id,
                        "name": state.name,
                        "start_balance_cents": state.start_balance_cents,
                        "interest_cents": state.interest_cents,
                        "payment_cents": state.payment_cents,
                        "end_balance_cents": state.end_balance_cents,
                        "is_paid_off": "true" if state.is_paid_off else "false",
                    }
                )

    return output_path
