"""Debt simulation API blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("simulate", __name__, url_prefix="/api/v1/simulate")

from . import routes  # noqa: E402,F401

__all__ = ["bp"]
