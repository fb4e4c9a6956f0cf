"""Application errors surfaced through the JSON API."""

from __future__ import annotations

from typing import Any

from flask import Flask, jsonify


class AppError(Exception):
    """Error with a machine-readable code, HTTP status and a hint for the caller."""

    def __init__(self, code: str, message: str, status: int = 400, suggestion: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.suggestion = suggestion

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
            }
        }


def validation_error(message: str) -> AppError:
    return AppError("VALIDATION_ERROR", message, 400, "Check request body")


def register_error_handlers(app: Flask) -> None:
    """Render ``AppError`` as a JSON error envelope."""

    @app.errorhandler(AppError)
    def _handle_app_error(error: AppError):
        return jsonify(error.to_dict()), error.status
