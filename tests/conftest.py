"""Pytest configuration and shared fixtures for DebtSage tests.

Provides debt factories and a Flask test client wired to an isolated data
directory so tests never write into the working tree.
"""

from __future__ import annotations

import pytest

from debtsage import create_app
from debtsage.models.debt import DebtSnapshot, DebtType


# =============================================================================
# Debt factories
# =============================================================================


def make_debt(
    debt_id: str = "debt-1",
    *,
    name: str | None = None,
    type: DebtType | str = DebtType.LOAN,
    balance_cents: int = 10_000_000,
    apr_bps: int = 1200,
    min_payment_cents: int = 1_000_000,
    remaining_installments: int | None = None,
    late_penalty_cents: int = 0,
) -> DebtSnapshot:
    """Build a DebtSnapshot with sensible loan defaults."""

    return DebtSnapshot(
        id=debt_id,
        name=name or debt_id,
        type=DebtType(type),
        balance_cents=balance_cents,
        apr_bps=apr_bps,
        min_payment_cents=min_payment_cents,
        remaining_installments=remaining_installments,
        late_penalty_cents=late_penalty_cents,
    )


@pytest.fixture
def debt_factory():
    """Factory fixture for DebtSnapshot instances."""

    return make_debt


@pytest.fixture
def kaspi_installment() -> DebtSnapshot:
    """Three-payment interest-free installment plan."""

    return make_debt(
        "kaspi-red",
        name="Kaspi Red - iPhone",
        type=DebtType.INSTALLMENT,
        balance_cents=45_000_000,
        apr_bps=0,
        min_payment_cents=15_000_000,
        remaining_installments=3,
        late_penalty_cents=200_000,
    )


@pytest.fixture
def two_loans() -> list[DebtSnapshot]:
    """Small high-rate loan and a large medium-rate loan."""

    return [
        make_debt("debt-a", balance_cents=10_000_000, apr_bps=2400, min_payment_cents=1_000_000),
        make_debt("debt-b", balance_cents=50_000_000, apr_bps=1200, min_payment_cents=2_500_000),
    ]


# =============================================================================
# Application fixtures
# =============================================================================


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Application configured for tests with logs kept under tmp_path."""

    monkeypatch.setenv("DEBTSAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("DEBTSAGE_CURRENCY", "KZT")
    application = create_app("testing")
    application.config.update(TESTING=True)
    return application


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
