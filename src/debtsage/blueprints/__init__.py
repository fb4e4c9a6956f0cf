"""Blueprint exports."""

from . import simulate

__all__ = ["simulate"]
