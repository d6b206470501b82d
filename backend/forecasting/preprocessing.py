"""
preprocessing.py — Data Cleaning and Validation
================================================

Responsibilities in the station forecasting pipeline:
1. Drop rows that are not records, lack a usable water level, or carry a
   missing / unparsable timestamp.
2. Enforce physical bounds: an implausible level drops the row, an
   implausible pressure or temperature is nulled so the row still
   contributes its level.
3. Normalize the 'level' / 'water_level' alias into one canonical field.
4. Sort chronologically (stable on ties) into a CleanedSeries.

Why each step matters:
- **Missing levels**: the level is the one parameter every downstream
  model needs; a row without it is useless.
- **Bounds**: sensor faults produce values like -999 or 99999 that would
  dominate a least-squares fit or a z-score.
- **Ordering**: both models use the sample index as time, so rows must be
  in chronological order.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np
import pandas as pd

from . import config
from .schemas import CleanedSeries, Parameter, Reading
from .utils import coerce_float, is_blank, parse_timestamp

logger = logging.getLogger("forecasting.preprocessing")


@dataclass(frozen=True)
class DataSufficiency:
    sufficient: bool
    record_count: int
    min_required: int
    message: str


def check_data_sufficiency(records, min_records: int = None) -> DataSufficiency:
    """
    Check whether a station returned enough rows to attempt a forecast.

    Args:
        records: Raw rows from the reading source.
        min_records: Required row count.  Defaults to
            config.MIN_SUFFICIENT_RECORDS.

    Returns:
        DataSufficiency describing the outcome.
    """
    min_records = min_records or config.MIN_SUFFICIENT_RECORDS
    count = len(records) if records else 0
    sufficient = count >= min_records
    if sufficient:
        message = f"Sufficient data: {count} records available"
    else:
        message = (f"Insufficient data: {count} records found, "
                   f"{min_records} required")
    return DataSufficiency(sufficient, count, min_records, message)


def _first_present(row: Mapping, fields) -> object:
    """Value of the first field in `fields` that is not blank."""
    for name in fields:
        value = row.get(name)
        if not is_blank(value):
            return value
    return None


class DataCleaner:
    """
    Validates and normalizes raw station rows into a CleanedSeries.

    Malformed rows are filtered, never raised; a summary of what was
    dropped is logged for diagnostics.
    """

    def clean(self, records) -> CleanedSeries:
        """
        Clean a raw batch of station rows.

        Args:
            records: List of row mappings with 'timestamp' and any of
                'level' / 'water_level', 'pressure', 'temperature',
                'battery_level'.

        Returns:
            CleanedSeries sorted ascending by timestamp.
        """
        if records is None or not isinstance(records, (list, tuple)):
            logger.warning("Invalid data format provided for cleaning "
                           f"({type(records).__name__})")
            return CleanedSeries()

        rows = [r for r in records if isinstance(r, Mapping)]
        not_records = len(records) - len(rows)
        if not rows:
            self._log_summary(len(records), CleanedSeries(), {"not_a_record": not_records})
            return CleanedSeries()

        df = self._to_frame(rows)
        drops = {"not_a_record": not_records}

        # ── Level: required, bounded ──────────────────────────────
        low, high = config.LEVEL_BOUNDS
        level_ok = df["level"].notna() & df["level"].between(low, high)
        drops["missing_or_invalid_level"] = int((~level_ok & df["level"].isna()).sum())
        drops["level_out_of_bounds"] = int((~level_ok & df["level"].notna()).sum())

        # ── Timestamp: required ───────────────────────────────────
        ts_ok = df["timestamp"].notna()
        drops["invalid_timestamp"] = int((level_ok & ~ts_ok).sum())

        df = df[level_ok & ts_ok]

        # ── Optional parameters: null when out of bounds ──────────
        for param in (Parameter.PRESSURE, Parameter.TEMPERATURE):
            low, high = param.bounds
            col = df[param.value]
            rejected = col.notna() & ~col.between(low, high)
            if rejected.any():
                logger.debug(f"Nulled {int(rejected.sum())} out-of-range "
                             f"{param.value} values")
            df = df.assign(**{param.value: col.where(~rejected)})

        df = df.sort_values("timestamp", kind="stable")
        series = CleanedSeries(self._to_readings(df))

        self._log_summary(len(records), series, drops)
        return series

    # ── Frame construction ────────────────────────────────────────

    @staticmethod
    def _to_frame(rows: list) -> pd.DataFrame:
        """
        Coerce raw rows into a typed frame.

        Every value goes through coerce_float / parse_timestamp so a
        single odd value (a list, a bool, 'n/a') only affects its own cell.
        """
        data = {
            "timestamp": [parse_timestamp(r.get("timestamp")) for r in rows],
            "level": [coerce_float(_first_present(r, config.LEVEL_FIELDS)) for r in rows],
            "pressure": [coerce_float(r.get("pressure")) for r in rows],
            "temperature": [coerce_float(r.get("temperature")) for r in rows],
            "battery_level": [coerce_float(_first_present(r, config.BATTERY_FIELDS))
                              for r in rows],
        }
        df = pd.DataFrame(data)
        for col in ("level", "pressure", "temperature", "battery_level"):
            df[col] = pd.to_numeric(df[col], errors="coerce").astype(np.float64)
        return df

    @staticmethod
    def _to_readings(df: pd.DataFrame) -> list:
        def opt(value):
            return None if pd.isna(value) else float(value)

        return [
            Reading(
                timestamp=pd.Timestamp(row.timestamp).to_pydatetime(),
                level=float(row.level),
                pressure=opt(row.pressure),
                temperature=opt(row.temperature),
                battery_level=opt(row.battery_level),
            )
            for row in df.itertuples(index=False)
        ]

    # ── Diagnostics ───────────────────────────────────────────────

    @staticmethod
    def _log_summary(raw_count: int, series: CleanedSeries, drops: dict) -> None:
        available = series.availability()
        logger.info(f"Data cleaning: {raw_count} raw records -> "
                    f"{len(series)} clean records")
        logger.info(
            "Parameter availability: "
            f"level={available[Parameter.LEVEL]}, "
            f"pressure={available[Parameter.PRESSURE]}, "
            f"temperature={available[Parameter.TEMPERATURE]}"
        )
        dropped = {k: v for k, v in drops.items() if v}
        if dropped:
            logger.debug(f"Dropped records by reason: {dropped}")
