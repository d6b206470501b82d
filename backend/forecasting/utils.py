"""
utils.py — Shared Utility Functions and Logging Setup
======================================================

Common helpers used across the forecasting modules.
"""

import logging
import math
from datetime import datetime

import pandas as pd

from . import config


def setup_logging(level: str = None) -> None:
    """
    Configure structured logging for the forecasting package.

    Sets up a console handler with timestamp, logger name, level,
    and message. All forecasting.* loggers inherit this configuration.

    Args:
        level: Log level string (DEBUG/INFO/WARNING/ERROR/CRITICAL).
               Defaults to config.LOG_LEVEL.
    """
    level = level or config.LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    pkg_logger = logging.getLogger("forecasting")
    pkg_logger.setLevel(numeric_level)

    # Avoid duplicate handlers on repeated calls
    if not pkg_logger.handlers:
        pkg_logger.addHandler(handler)


def is_blank(value) -> bool:
    """True for None, NaN and empty / whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def coerce_float(value):
    """
    Convert a raw telemetry value to a finite float.

    Args:
        value: Raw field value (number, numeric string, None, ...).

    Returns:
        The float, or None if the value is blank, non-numeric or non-finite.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_timestamp(value):
    """
    Parse a raw timestamp into a timezone-aware UTC datetime.

    Accepts ISO-8601 strings (including a trailing 'Z'), datetime and
    pandas Timestamp objects, and numbers as epoch milliseconds.  Naive
    values are taken as UTC.

    Args:
        value: Raw timestamp value.

    Returns:
        datetime in UTC, or None if missing or unparsable.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if not isinstance(value, (str, datetime, int, float)):
        return None
    try:
        if isinstance(value, (int, float)):
            ts = pd.to_datetime(value, unit="ms", utc=True)
        else:
            ts = pd.to_datetime(value, utc=True)
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()
