"""Environment-driven settings for the readings source and CLI."""
from __future__ import annotations

import logging
import os
from typing import Optional

READINGS_API_URL_ENV = "CGM_TIR_READINGS_API_URL"
READINGS_API_TOKEN_ENV = "CGM_TIR_READINGS_API_TOKEN"
LOG_LEVEL_ENV = "CGM_TIR_LOG_LEVEL"

DEFAULT_READINGS_API_URL = "http://localhost:54321/rest/v1/glucose_readings"
DEFAULT_LOG_LEVEL = "WARNING"


def readings_api_url() -> str:
    return os.getenv(READINGS_API_URL_ENV) or DEFAULT_READINGS_API_URL


def readings_api_token() -> Optional[str]:
    return os.getenv(READINGS_API_TOKEN_ENV) or None


def log_level(override: Optional[str] = None) -> int:
    """Resolve a logging level name, falling back to WARNING for unknown names."""

    name = (override or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING
