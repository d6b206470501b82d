"""
ema.py — Exponential Smoothing Estimator
=========================================

Smooths a parameter's values and uses the last smoothed value as the
forecast.

EMA Formula: S_0 = v_0,  S_t = alpha * v_t + (1 - alpha) * S_(t-1)

Accuracy is reported as MAPE of the one-step-ahead estimates:
    MAPE = mean_{t>=1} |v_t - S_(t-1)| / |v_t| * 100   (v_t = 0 skipped)

Known limitation:
    Single exponential smoothing has no trend term, so predict() returns
    the same value for every horizon.  Longer ensemble horizons therefore
    only move through the trend estimator.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from . import config
from .schemas import CleanedSeries, Failure, FailureReason, Parameter

logger = logging.getLogger("forecasting.ema")


class EMASmoother:
    """
    Running EMA over a stream of values.

    Attributes:
        alpha (float): Smoothing factor (0 < alpha <= 1).
        _current_ema (float | None): Current EMA value.
    """

    def __init__(self, alpha: float = None):
        """
        Args:
            alpha: Smoothing factor. Defaults to config.EMA_ALPHA (0.3).
        """
        self.alpha = alpha if alpha is not None else config.EMA_ALPHA
        self._current_ema = None

    def update(self, value: float) -> float:
        """
        Update EMA with a new value and return the smoothed result.

        Args:
            value: Next raw value.
        Returns:
            Smoothed value.
        """
        if self._current_ema is None:
            self._current_ema = value
        else:
            self._current_ema = (
                self.alpha * value + (1 - self.alpha) * self._current_ema
            )
        return self._current_ema

    def get_current(self):
        """Get current EMA value without updating."""
        return self._current_ema

    def reset(self):
        self._current_ema = None


@dataclass(frozen=True)
class SmoothingFit:
    """
    Result of exponential smoothing.

    Attributes:
        smoothed_series (tuple[float]): S_0 .. S_(n-1).
        mape (float): Mean absolute percentage error (percent).
        alpha (float): Smoothing factor actually used.
    """

    smoothed_series: tuple
    mape: float
    alpha: float

    def predict(self, steps_ahead: int = 1) -> float:
        # Flat forecast: the horizon is intentionally ignored.
        return self.smoothed_series[-1]


def resolve_alpha(alpha) -> float:
    """Return alpha as a float, or config.EMA_ALPHA if it is not in (0, 1]."""
    if alpha is None:
        return config.EMA_ALPHA
    try:
        value = float(alpha)
    except (TypeError, ValueError):
        value = math.nan
    if isinstance(alpha, bool) or not (math.isfinite(value) and 0 < value <= 1):
        logger.warning(f"Invalid smoothing alpha {alpha!r}, "
                       f"using {config.EMA_ALPHA}")
        return config.EMA_ALPHA
    return value


class SmoothingEstimator:
    """Single exponential smoothing over a parameter's values."""

    def __init__(self, alpha: float = None, min_points: int = None):
        """
        Args:
            alpha: Default smoothing factor.  Values outside (0, 1] fall
                back to config.EMA_ALPHA.
            min_points: Minimum valid values.  Defaults to
                config.MIN_MODEL_POINTS.
        """
        self.alpha = resolve_alpha(alpha)
        self.min_points = min_points or config.MIN_MODEL_POINTS

    def fit(self, series: CleanedSeries, parameter=Parameter.LEVEL,
            alpha: float = None):
        """
        Smooth one parameter of a cleaned series.

        Args:
            series: CleanedSeries from DataCleaner.
            parameter: Parameter member or name.
            alpha: Per-call smoothing factor.  Defaults to self.alpha.

        Returns:
            SmoothingFit, or Failure (INSUFFICIENT_DATA / INVALID_STATISTICS).
        """
        parameter = Parameter.parse(parameter)
        _, values = series.extract(parameter)
        return self.fit_values(values, parameter, alpha)

    def fit_values(self, values, parameter=Parameter.LEVEL,
                   alpha: float = None):
        """
        Smooth already-extracted values.

        Args:
            values: 1-D sequence of finite values in chronological order.
            parameter: Parameter the values belong to (for messages).
            alpha: Per-call smoothing factor.  Defaults to self.alpha.

        Returns:
            SmoothingFit or Failure.
        """
        parameter = Parameter.parse(parameter)
        alpha = self.alpha if alpha is None else resolve_alpha(alpha)
        v = np.asarray(values, dtype=np.float64)
        n = len(v)
        if n < self.min_points:
            return Failure(
                FailureReason.INSUFFICIENT_DATA,
                f"Insufficient valid data points for {parameter.value} "
                f"smoothing ({n}/{self.min_points} required)",
            )

        smoother = EMASmoother(alpha)
        smoothed = []
        for i, value in enumerate(v):
            s = smoother.update(float(value))
            if not math.isfinite(s):
                return Failure(
                    FailureReason.INVALID_STATISTICS,
                    f"Invalid smoothed value calculated for "
                    f"{parameter.value} at index {i}",
                )
            smoothed.append(s)

        mape = self._mape(v, smoothed)
        logger.debug(f"Smoothing fit for {parameter.value}: "
                     f"last={smoothed[-1]:.4f} mape={mape:.2f}% "
                     f"(alpha={alpha}, n={n})")
        return SmoothingFit(smoothed_series=tuple(smoothed), mape=mape,
                            alpha=alpha)

    @staticmethod
    def _mape(values: np.ndarray, smoothed: list) -> float:
        actual = values[1:]
        previous = np.asarray(smoothed[:-1], dtype=np.float64)
        mask = actual != 0
        if not mask.any():
            return 0.0
        errors = np.abs((actual[mask] - previous[mask]) / actual[mask])
        errors = errors[np.isfinite(errors)]
        if errors.size == 0:
            return 0.0
        return float(errors.mean() * 100)
