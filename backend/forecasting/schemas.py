"""
schemas.py — Data Model for Station Readings and Results
=========================================================

Typed containers shared by every stage of the forecasting package:

    Parameter      — tracked sensor quantity, with its field accessor
    Reading        — one cleaned station reading
    CleanedSeries  — immutable, time-ordered sequence of Readings
    Forecast       — one predicted value for one parameter and day
    Failure        — reported (not raised) reason an operation had no result
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from operator import attrgetter
from typing import Iterator, Optional

import numpy as np

from . import config


class Parameter(str, Enum):
    """Sensor quantity that can be forecast or checked for anomalies."""

    LEVEL = "level"
    PRESSURE = "pressure"
    TEMPERATURE = "temperature"

    @classmethod
    def parse(cls, value) -> "Parameter":
        """
        Resolve a parameter from a member or a name.

        'water_level' is accepted as an alias of LEVEL.

        Raises:
            ValueError: If the name is not a known parameter.
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        if name == "water_level":
            return cls.LEVEL
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown sensor parameter: {value!r}") from None

    @property
    def accessor(self):
        """Callable returning this parameter's value from a Reading."""
        return attrgetter(self.value)

    @property
    def bounds(self) -> tuple:
        return {
            Parameter.LEVEL: config.LEVEL_BOUNDS,
            Parameter.PRESSURE: config.PRESSURE_BOUNDS,
            Parameter.TEMPERATURE: config.TEMPERATURE_BOUNDS,
        }[self]

    @property
    def anomaly_threshold(self) -> float:
        return config.ANOMALY_THRESHOLDS.get(
            self.value, config.DEFAULT_ANOMALY_THRESHOLD
        )

    @property
    def chart_color(self) -> str:
        return config.CHART_COLORS[self.value]

    @property
    def prediction_field(self) -> str:
        """Key used for the predicted value in dashboard dicts."""
        return f"predicted_{self.value}"


@dataclass(frozen=True)
class Reading:
    """
    One cleaned station reading.

    Attributes:
        timestamp: UTC timestamp of the reading.
        level: Water level, always present after cleaning.
        pressure: Line pressure, None when missing or rejected.
        temperature: Water temperature, None when missing or rejected.
        battery_level: Logger battery level, None when missing.
    """

    timestamp: datetime
    level: Optional[float] = None
    pressure: Optional[float] = None
    temperature: Optional[float] = None
    battery_level: Optional[float] = None

    def value(self, parameter) -> Optional[float]:
        return Parameter.parse(parameter).accessor(self)


class CleanedSeries:
    """
    Immutable sequence of Readings ordered by timestamp.

    Produced by DataCleaner; consumed by the estimators, the ensemble and
    the anomaly detector.  Nothing downstream mutates it.
    """

    __slots__ = ("_readings",)

    def __init__(self, readings=()):
        self._readings = tuple(readings)

    def __len__(self) -> int:
        return len(self._readings)

    def __iter__(self) -> Iterator[Reading]:
        return iter(self._readings)

    def __getitem__(self, index):
        return self._readings[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, CleanedSeries):
            return NotImplemented
        return self._readings == other._readings

    def __hash__(self) -> int:
        return hash(self._readings)

    def __repr__(self) -> str:
        return f"CleanedSeries({len(self._readings)} readings)"

    @property
    def readings(self) -> tuple:
        return self._readings

    @property
    def last_timestamp(self) -> Optional[datetime]:
        return self._readings[-1].timestamp if self._readings else None

    def extract(self, parameter) -> tuple:
        """
        Collect the valid values of one parameter.

        This is the single per-parameter extraction shared by every model:
        readings whose value is None or non-finite are skipped.

        Args:
            parameter: Parameter member or name.

        Returns:
            (readings, values) — the contributing Readings and a float64
            array of their values, in series order.
        """
        get = Parameter.parse(parameter).accessor
        readings = []
        values = []
        for reading in self._readings:
            value = get(reading)
            if value is None or not np.isfinite(value):
                continue
            readings.append(reading)
            values.append(float(value))
        return tuple(readings), np.asarray(values, dtype=np.float64)

    def availability(self) -> dict:
        """Number of valid values per parameter."""
        return {p: len(self.extract(p)[1]) for p in Parameter}


@dataclass(frozen=True)
class Forecast:
    """Predicted value of one parameter for one future day."""

    date: datetime
    parameter: Parameter
    predicted_value: float
    confidence: float

    def to_dict(self) -> dict:
        """Dashboard representation (predicted_level / predicted_pressure / ...)."""
        return {
            "date": self.date.isoformat(),
            self.parameter.prediction_field: self.predicted_value,
            "confidence": self.confidence,
        }


class FailureReason(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    INVALID_STATISTICS = "invalid_statistics"
    DEGENERATE_DISTRIBUTION = "degenerate_distribution"
    MODELS_FAILED = "models_failed"


@dataclass(frozen=True)
class Failure:
    """
    Expected, reported failure of a fit, forecast or detection.

    Callers distinguish it from a result with isinstance(); an empty
    forecast or anomaly list paired with a Failure means "not enough
    data", not "nothing found".
    """

    reason: FailureReason
    message: str

    def __str__(self) -> str:
        return self.message
