"""
Gaming Rewards Engine Configuration

Supports development and production environments with separate defaults.

Only deployment concerns live here (logging, storage location, API binding).
Economic thresholds and ratios are engine constants, see ``constants.py``.
"""

from __future__ import annotations

import logging
import os
from enum import Enum

logger = logging.getLogger(__name__)


class EnvironmentType(Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{env_var} must be an integer, got {raw!r}") from exc


def _get_log_level(env_var: str, default: str) -> str:
    level = os.getenv(env_var, default).strip().upper() or default
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"{env_var} must be a logging level name, got {level!r}")
    return level


ENVIRONMENT = os.getenv("GAMEREWARDS_ENVIRONMENT", "development").strip().lower()

LOG_LEVEL = _get_log_level("GAMEREWARDS_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("GAMEREWARDS_LOG_FILE", "").strip()
# Empty data dir means stake books live in memory only.
DATA_DIR = os.getenv("GAMEREWARDS_DATA_DIR", "").strip()
API_HOST = os.getenv("GAMEREWARDS_API_HOST", "127.0.0.1").strip()
API_PORT = _get_int("GAMEREWARDS_API_PORT", 8600)
API_MAX_JSON_BYTES = _get_int("GAMEREWARDS_API_MAX_JSON_BYTES", 65536)
API_URL = os.getenv("GAMEREWARDS_API_URL", f"http://{API_HOST}:{API_PORT}").strip()
REQUEST_TIMEOUT = float(os.getenv("GAMEREWARDS_REQUEST_TIMEOUT", "30.0"))


class DevelopmentConfig:
    """Development configuration (local runs and tests)"""

    ENVIRONMENT_TYPE = EnvironmentType.DEVELOPMENT
    LOG_LEVEL = LOG_LEVEL if os.getenv("GAMEREWARDS_LOG_LEVEL") else "DEBUG"
    LOG_FILE = LOG_FILE
    DATA_DIR = DATA_DIR
    API_HOST = API_HOST
    API_PORT = API_PORT
    API_MAX_JSON_BYTES = API_MAX_JSON_BYTES
    API_URL = API_URL
    REQUEST_TIMEOUT = REQUEST_TIMEOUT
    JSON_LOGS = False


class ProductionConfig:
    """Production configuration (persistent stake books, JSON logs)"""

    ENVIRONMENT_TYPE = EnvironmentType.PRODUCTION
    LOG_LEVEL = LOG_LEVEL
    LOG_FILE = LOG_FILE
    DATA_DIR = DATA_DIR
    API_HOST = API_HOST
    API_PORT = API_PORT
    API_MAX_JSON_BYTES = API_MAX_JSON_BYTES
    API_URL = API_URL
    REQUEST_TIMEOUT = REQUEST_TIMEOUT
    JSON_LOGS = True


if ENVIRONMENT == EnvironmentType.PRODUCTION.value:
    if not DATA_DIR:
        raise ConfigurationError(
            "GAMEREWARDS_DATA_DIR is required in production; "
            "stake books must not live in process memory only."
        )
    Config = ProductionConfig
elif ENVIRONMENT == EnvironmentType.DEVELOPMENT.value:
    Config = DevelopmentConfig
else:
    raise ConfigurationError(
        f"GAMEREWARDS_ENVIRONMENT must be 'development' or 'production', got {ENVIRONMENT!r}"
    )

__all__ = [
    "Config",
    "ConfigurationError",
    "DevelopmentConfig",
    "EnvironmentType",
    "ProductionConfig",
]
