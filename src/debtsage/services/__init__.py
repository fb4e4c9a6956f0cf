"""Service module exports."""

from . import debt_analysis, debts, export_csv, money

__all__ = [
    "debt_analysis",
    "debts",
    "export_csv",
    "money",
]
