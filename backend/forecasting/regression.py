"""
regression.py — Linear Trend Estimator
=======================================

Fits a least-squares line through one parameter's values, using the
sample index (0..n-1) as the independent variable.  Station readings are
aggregated roughly once a day, so one step ahead is one day ahead.

Fit:
    slope     = Σ (x - x̄)(y - ȳ) / Σ (x - x̄)²
    intercept = ȳ - slope · x̄
    R²        = 1 - SS_res / SS_tot   (0 for a constant series)

Why index-based time?
    Readings arrive at irregular wall-clock instants (logger jitter,
    missed uploads).  Treating them as evenly spaced keeps the
    extrapolation aligned with the "one forecast per day" output.
"""

import logging
from dataclasses import dataclass

import numpy as np
from sklearn.metrics import r2_score

from . import config
from .schemas import CleanedSeries, Failure, FailureReason, Parameter

logger = logging.getLogger("forecasting.regression")


@dataclass(frozen=True)
class TrendFit:
    """
    Fitted trend line.

    Attributes:
        slope (float): Change per sample step.
        intercept (float): Value at index 0.
        r_squared (float): Coefficient of determination (0-1).
        n_points (int): Number of values the line was fitted on.
    """

    slope: float
    intercept: float
    r_squared: float
    n_points: int

    def predict(self, steps_ahead: int = 1) -> float:
        """Extrapolate to index n-1+steps_ahead."""
        future_x = self.n_points - 1 + steps_ahead
        return self.slope * future_x + self.intercept


class TrendEstimator:
    """Least-squares linear regression over a parameter's indexed values."""

    def __init__(self, min_points: int = None):
        self.min_points = min_points or config.MIN_MODEL_POINTS

    def fit(self, series: CleanedSeries, parameter=Parameter.LEVEL):
        """
        Fit a trend line to one parameter of a cleaned series.

        Args:
            series: CleanedSeries from DataCleaner.
            parameter: Parameter member or name.

        Returns:
            TrendFit, or Failure (INSUFFICIENT_DATA / INVALID_STATISTICS).
        """
        parameter = Parameter.parse(parameter)
        _, values = series.extract(parameter)
        return self.fit_values(values, parameter)

    def fit_values(self, values, parameter=Parameter.LEVEL):
        """
        Fit a trend line to already-extracted values.

        Args:
            values: 1-D sequence of finite values in chronological order.
            parameter: Parameter the values belong to (for messages).

        Returns:
            TrendFit or Failure.
        """
        parameter = Parameter.parse(parameter)
        y = np.asarray(values, dtype=np.float64)
        n = len(y)
        if n < self.min_points:
            return Failure(
                FailureReason.INSUFFICIENT_DATA,
                f"Insufficient valid data points for {parameter.value} "
                f"({n}/{self.min_points} required)",
            )

        x = np.arange(n, dtype=np.float64)
        with np.errstate(over="ignore", invalid="ignore"):
            mean_x = x.mean()
            mean_y = y.mean()
        if not (np.isfinite(mean_x) and np.isfinite(mean_y)):
            return Failure(
                FailureReason.INVALID_STATISTICS,
                f"Invalid mean calculations for {parameter.value} - "
                "data may contain extreme values",
            )

        x_dev = x - mean_x
        numerator = float(np.sum(x_dev * (y - mean_y)))
        denominator = float(np.sum(x_dev * x_dev))
        slope = numerator / denominator if denominator != 0 else 0.0
        intercept = float(mean_y - slope * mean_x)

        fitted = slope * x + intercept
        total_ss = float(np.sum((y - mean_y) ** 2))
        r_squared = float(r2_score(y, fitted)) if total_ss != 0 else 0.0

        logger.debug(f"Trend fit for {parameter.value}: slope={slope:.4f} "
                     f"intercept={intercept:.4f} r2={r_squared:.4f} (n={n})")
        return TrendFit(slope=slope, intercept=intercept,
                        r_squared=r_squared, n_points=n)
