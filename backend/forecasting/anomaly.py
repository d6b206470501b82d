"""
anomaly.py — Z-Score Anomaly Detector
======================================

Flags readings whose value lies unusually far from the series mean:

    z = |v - mean| / std        (population statistics, ddof = 0)
    anomaly  iff  z > threshold(parameter)

Thresholds are a fixed per-parameter policy (config.ANOMALY_THRESHOLDS):
level and temperature use 2.0; pressure uses 2.5 because it drifts slowly
and a tighter band produces false positives.  The caller's base threshold
is accepted for interface compatibility but does not override the policy.
"""

import logging
from dataclasses import dataclass

import numpy as np
from sklearn.preprocessing import StandardScaler

from . import config
from .schemas import CleanedSeries, Failure, FailureReason, Parameter

logger = logging.getLogger("forecasting.anomaly")


@dataclass(frozen=True)
class AnomalyReport:
    """
    Outcome of a z-score pass over one parameter.

    Attributes:
        parameter: Parameter that was checked.
        anomalies: The original Reading objects that were flagged.
        z_scores: Absolute z-score of each flagged reading, same order.
        mean: Population mean of the valid values.
        std_dev: Population standard deviation.
        threshold_used: Z-score threshold applied.
        total_records: Readings in the series that was checked.
    """

    parameter: Parameter
    anomalies: tuple
    z_scores: tuple
    mean: float
    std_dev: float
    threshold_used: float
    total_records: int

    def stats(self) -> dict:
        """Rounded summary for display."""
        return {
            "mean": round(self.mean, 2),
            "std_dev": round(self.std_dev, 2),
            "threshold": self.threshold_used,
            "parameter": self.parameter.value,
        }


class AnomalyDetector:
    """Z-score outlier detection over one parameter of a CleanedSeries."""

    def __init__(self, min_points: int = None):
        self.min_points = min_points or config.MIN_ANOMALY_POINTS

    def detect(self, series: CleanedSeries, parameter=Parameter.LEVEL,
               base_threshold: float = config.DEFAULT_ANOMALY_THRESHOLD):
        """
        Find outlier readings for one parameter.

        Args:
            series: CleanedSeries from DataCleaner.
            parameter: Parameter member or name.
            base_threshold: Requested sensitivity.  Overridden by the
                per-parameter threshold.

        Returns:
            AnomalyReport, or Failure (INSUFFICIENT_DATA /
            DEGENERATE_DISTRIBUTION).
        """
        parameter = Parameter.parse(parameter)
        readings, values = series.extract(parameter)
        n = len(values)
        if n < self.min_points:
            return Failure(
                FailureReason.INSUFFICIENT_DATA,
                f"Insufficient valid {parameter.value} data for anomaly "
                f"detection ({n}/{self.min_points} required)",
            )

        scaler = StandardScaler()
        with np.errstate(over="ignore", invalid="ignore"):
            scaler.fit(values.reshape(-1, 1))
        mean = float(scaler.mean_[0])
        std_dev = float(np.sqrt(scaler.var_[0]))
        # spread at float rounding level of the mean counts as zero
        spread_floor = 1e3 * np.finfo(np.float64).eps * abs(mean)
        if not (np.isfinite(mean) and np.isfinite(std_dev)) or std_dev <= spread_floor:
            return Failure(
                FailureReason.DEGENERATE_DISTRIBUTION,
                f"Cannot calculate meaningful statistics for "
                f"{parameter.value} anomaly detection",
            )

        threshold = parameter.anomaly_threshold
        if base_threshold != threshold:
            logger.debug(f"Requested threshold {base_threshold} overridden by "
                         f"{parameter.value} policy threshold {threshold}")

        z = np.abs(scaler.transform(values.reshape(-1, 1)).ravel())
        flagged = np.flatnonzero(z > threshold)
        anomalies = tuple(readings[i] for i in flagged)

        logger.info(f"Anomaly detection for {parameter.value}: found "
                    f"{len(anomalies)} anomalies out of {len(series)} records")
        return AnomalyReport(
            parameter=parameter,
            anomalies=anomalies,
            z_scores=tuple(float(z[i]) for i in flagged),
            mean=mean,
            std_dev=std_dev,
            threshold_used=threshold,
            total_records=len(series),
        )
