"""Request validation for the simulation endpoints."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import uuid4

from debtsage.models.debt import DebtSnapshot, DebtType, PayoffStrategy

MAX_DEBTS = 20
MAX_HORIZON_MONTHS = 600

_MONTH_LABEL = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_MISSING = object()


@dataclass(slots=True)
class _JSONForm:
    """Shared parsing helpers; each error is stored under its field path."""

    payload: Any = None
    errors: Dict[str, List[str]] = field(default_factory=dict, init=False)

    def _add_error(self, name: str, message: str) -> None:
        self.errors.setdefault(name, []).append(message)

    def _get(self, data: Mapping[str, Any], key: str) -> Any:
        return data.get(key, _MISSING) if isinstance(data, Mapping) else _MISSING

    def _parse_int(
        self,
        name: str,
        value: Any,
        *,
        minimum: int,
        maximum: int | None = None,
        default: Any = _MISSING,
    ) -> Optional[int]:
        """Return ``value`` as an int within bounds, recording errors otherwise."""

        if value is _MISSING or value is None:
            if default is _MISSING:
                self._add_error(name, f"{name} is required")
                return None
            return default

        # bool is an int subclass; reject it along with floats and strings
        if isinstance(value, bool) or not isinstance(value, int):
            self._add_error(name, f"{name} must be an integer")
            return None

        if value < minimum:
            self._add_error(name, f"{name} must be at least {minimum}")
            return None
        if maximum is not None and value > maximum:
            self._add_error(name, f"{name} must be at most {maximum}")
            return None
        return value

    def _parse_start_date(self, data: Mapping[str, Any]) -> Optional[str]:
        value = self._get(data, "startDate")
        if value is _MISSING or value is None:
            return None
        if not isinstance(value, str) or not _MONTH_LABEL.match(value):
            self._add_error("startDate", "startDate must be a YYYY-MM month")
            return None
        return value

    def _parse_debt(self, prefix: str, value: Any) -> Optional[DebtSnapshot]:
        if not isinstance(value, Mapping):
            self._add_error(prefix, f"{prefix} must be an object")
            return None

        before = len(self.errors)

        debt_id = value.get("id")
        if debt_id is not None and (not isinstance(debt_id, str) or not debt_id.strip()):
            self._add_error(f"{prefix}.id", f"{prefix}.id must be a non-empty string")

        name = value.get("name")
        if not isinstance(name, str) or not name.strip():
            self._add_error(f"{prefix}.name", f"{prefix}.name is required")

        debt_type = value.get("type")
        try:
            debt_type = DebtType(debt_type)
        except (TypeError, ValueError):
            self._add_error(
                f"{prefix}.type", f"{prefix}.type must be one of credit_card, loan, installment"
            )

        balance = self._parse_int(f"{prefix}.balanceCents", value.get("balanceCents", _MISSING), minimum=1)
        apr = self._parse_int(f"{prefix}.aprBps", value.get("aprBps", _MISSING), minimum=0)
        min_payment = self._parse_int(
            f"{prefix}.minPaymentCents", value.get("minPaymentCents", _MISSING), minimum=1
        )
        installments = self._parse_int(
            f"{prefix}.remainingInstallments",
            value.get("remainingInstallments", _MISSING),
            minimum=1,
            default=None,
        )
        penalty = self._parse_int(
            f"{prefix}.latePenaltyCents",
            value.get("latePenaltyCents", _MISSING),
            minimum=0,
            default=0,
        )

        if len(self.errors) != before:
            return None

        return DebtSnapshot(
            id=debt_id.strip() if debt_id else uuid4().hex,
            name=name,
            type=debt_type,
            balance_cents=balance,
            apr_bps=apr,
            min_payment_cents=min_payment,
            remaining_installments=installments,
            late_penalty_cents=penalty,
        )

    def _parse_debts(self, data: Mapping[str, Any]) -> List[DebtSnapshot]:
        return self._parse_debt_list("debts", self._get(data, "debts"))

    def _parse_debt_list(self, name: str, raw: Any) -> List[DebtSnapshot]:
        if not isinstance(raw, list):
            self._add_error(name, f"{name} must be a list")
            return []
        if not 1 <= len(raw) <= MAX_DEBTS:
            self._add_error(name, f"{name} must contain between 1 and {MAX_DEBTS} entries")
            return []
        debts = []
        for index, value in enumerate(raw):
            debt = self._parse_debt(f"{name}[{index}]", value)
            if debt is not None:
                debts.append(debt)
        return debts

    def _require_object(self) -> Mapping[str, Any]:
        if not isinstance(self.payload, Mapping):
            self._add_error("body", "Request body must be a JSON object")
            return {}
        return self.payload

    @property
    def error_messages(self) -> Iterable[str]:
        """Flattened iterable of error strings for summaries."""

        for messages in self.errors.values():
            yield from messages


@dataclass(slots=True)
class DebtListForm(_JSONForm):
    """A bare JSON array of debts, as read from a debts file."""

    debts: List[DebtSnapshot] = field(default_factory=list, init=False)

    def validate(self) -> bool:
        self.errors.clear()
        self.debts = self._parse_debt_list("debts", self.payload)
        return not self.errors


@dataclass(slots=True)
class CompareRequestForm(_JSONForm):
    """Debts, extra payment and optional start month."""

    debts: List[DebtSnapshot] = field(default_factory=list, init=False)
    extra_monthly_cents: int = field(default=0, init=False)
    start_month: Optional[str] = field(default=None, init=False)

    def validate(self) -> bool:
        self.errors.clear()
        data = self._require_object()
        if self.errors:
            return False

        self.debts = self._parse_debts(data)
        extra = self._parse_int(
            "extraMonthlyCents", self._get(data, "extraMonthlyCents"), minimum=0, default=0
        )
        self.extra_monthly_cents = extra if extra is not None else 0
        self.start_month = self._parse_start_date(data)
        return not self.errors


@dataclass(slots=True)
class PayoffRequestForm(CompareRequestForm):
    """Compare inputs plus the strategy to simulate."""

    strategy: Optional[PayoffStrategy] = field(default=None, init=False)

    def validate(self) -> bool:
        CompareRequestForm.validate(self)
        if "body" in self.errors:
            return False

        raw = self._get(self.payload, "strategy")
        try:
            self.strategy = PayoffStrategy(raw)
        except ValueError:
            self.strategy = None
            choices = ", ".join(member.value for member in PayoffStrategy)
            self._add_error("strategy", f"strategy must be one of {choices}")
        return not self.errors


@dataclass(slots=True)
class DebtVsInvestRequestForm(_JSONForm):
    """Single debt, extra payment, expected return and horizon."""

    debt: Optional[DebtSnapshot] = field(default=None, init=False)
    extra_monthly_cents: int = field(default=0, init=False)
    expected_return_bps: int = field(default=0, init=False)
    horizon_months: int = field(default=0, init=False)

    def validate(self) -> bool:
        self.errors.clear()
        data = self._require_object()
        if self.errors:
            return False

        self.extra_monthly_cents = self._parse_int(
            "extraMonthlyCents", self._get(data, "extraMonthlyCents"), minimum=0
        )
        self.debt = self._parse_debt("debt", self._get(data, "debt"))
        self.expected_return_bps = self._parse_int(
            "expectedReturnBps", self._get(data, "expectedReturnBps"), minimum=0
        )
        self.horizon_months = self._parse_int(
            "horizonMonths",
            self._get(data, "horizonMonths"),
            minimum=1,
            maximum=MAX_HORIZON_MONTHS,
        )
        return not self.errors
