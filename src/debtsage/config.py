"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "DebtSage"
    DEFAULT_CURRENCY = "KZT"

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("DEBTSAGE_SECRET_KEY", "replace-me")
        self.DEV_MODE = _env_bool("DEBTSAGE_DEV_MODE", default=True)
        self.LOG_TO_FILE = _env_bool("DEBTSAGE_LOG_TO_FILE", default=True)
        self.CURRENCY = os.getenv("DEBTSAGE_CURRENCY", self.DEFAULT_CURRENCY).strip().upper()
        self.DATA_DIR = self._resolve_data_dir()
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("DEBTSAGE_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where log files live."""

        data_root = os.getenv("DEBTSAGE_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to user-local storage.
            fallback_path = Path.home() / f".{self.APP_NAME.lower()}"
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()


class DevConfig(BaseConfig):
    """Development configuration."""

    DEBUG = True
    TESTING = False


class TestingConfig(BaseConfig):
    """Configuration for the test suite; console-only logging."""

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.LOG_TO_FILE = False
