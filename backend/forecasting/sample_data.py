"""
sample_data.py — Synthetic Station History
===========================================

Generates realistic daily station rows for demos and tests when a
station table does not yet hold enough history for predictions.

Each day's level is:
    start_level + weekly cycle + slight upward trend + noise
with a ±1.5 m jump injected on the configured anomaly days, so the
anomaly detector has something to find.
"""

import logging
from datetime import datetime, timedelta, timezone

import numpy as np

from . import config

logger = logging.getLogger("forecasting.sample_data")


def generate_history(days: int = 30, start_level: float = 4.2,
                     seasonal_factor: float = 0.5,
                     anomaly_days=(5, 12, 23),
                     end: datetime = None,
                     seed: int = None) -> list[dict]:
    """
    Generate `days + 1` daily raw rows ending at `end`.

    Args:
        days: Days of history before `end`.
        start_level: Baseline water level (m).
        seasonal_factor: Amplitude of the weekly cycle (m).
        anomaly_days: Days-before-end that receive a ±1.5 m jump.
        end: Timestamp of the newest row.  Defaults to today at noon UTC.
        seed: RNG seed.  Defaults to config.RANDOM_STATE.

    Returns:
        List of row dicts shaped like the reading source's rows
        (ISO 'timestamp', 'level', 'temperature', 'pressure',
        'battery_level'), oldest first.
    """
    rng = np.random.default_rng(config.RANDOM_STATE if seed is None else seed)
    if end is None:
        end = datetime.now(timezone.utc).replace(hour=12, minute=0, second=0,
                                                 microsecond=0)

    rows = []
    for i in range(days, -1, -1):
        date = end - timedelta(days=i)
        week_cycle = np.sin(date.weekday() * np.pi / 3.5) * seasonal_factor
        trend = -0.01 * i  # i counts back from end, so levels rise over time
        noise = (rng.random() - 0.5) * 0.3
        level = start_level + week_cycle + trend + noise
        if i in anomaly_days:
            level += 1.5 if rng.random() > 0.5 else -1.5
        level = round(float(level), 2)

        temperature = 20 + rng.random() * 10 + level * 0.5
        pressure = 3000 + rng.normal(0, 40) + level * 100
        battery = 100 - (days - i) * 0.5

        rows.append({
            "timestamp": date.isoformat(),
            "level": level,
            "temperature": round(float(temperature), 1),
            "pressure": round(float(pressure), 1),
            "battery_level": round(float(battery), 1),
        })

    logger.info(f"Generated {len(rows)} days of sample data "
                f"(start level {start_level} m)")
    return rows
