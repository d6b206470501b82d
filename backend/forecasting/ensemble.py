"""
ensemble.py — Weighted Ensemble Forecaster
===========================================

Blends the trend estimator and the smoothing estimator into one forecast
per parameter per future day.

Weighting:
    Single-parameter mode (forecast):
        linear weight = 0.7 if R² > 0.7 else 0.5, smoothing gets the rest.
    Multi-parameter mode (forecast_multiple):
        plain 0.5 / 0.5 average.  The smoothing term is the same for every
        day, so forecasts for different days differ only through the trend.
    If one model fails, the other is used alone with weight 1.0.

Confidence (0–100):
    (R² · w_linear + (100 − MAPE) / 100 · w_smoothing) · 100, clamped.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from . import config
from .ema import SmoothingEstimator, SmoothingFit
from .regression import TrendEstimator, TrendFit
from .schemas import CleanedSeries, Failure, FailureReason, Forecast, Parameter

logger = logging.getLogger("forecasting.ensemble")


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


@dataclass(frozen=True)
class ParameterForecast:
    """
    Forecast output for one parameter.

    Attributes:
        parameter: Parameter forecast.
        forecasts: One Forecast per future day (empty on failure).
        failure: Why no forecasts were produced, or None.
        accuracy: Headline accuracy percentage (0-100).
        data_points: Valid values the models were fitted on.
        r_squared: Trend R², None if the trend model failed.
        mape: Smoothing MAPE, None if the smoothing model failed.
        models: {"linear": "success"|"failed", "smoothing": ...}.
    """

    parameter: Parameter
    forecasts: tuple = ()
    failure: Optional[Failure] = None
    accuracy: float = 0.0
    data_points: int = 0
    r_squared: Optional[float] = None
    mape: Optional[float] = None
    models: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def error(self) -> Optional[str]:
        return self.failure.message if self.failure else None


class EnsembleForecaster:
    """
    Produces day-by-day ensemble forecasts from a CleanedSeries.

    Usage:
        forecaster = EnsembleForecaster()
        result = forecaster.forecast(series, Parameter.LEVEL, horizon_days=7)
        results = forecaster.forecast_multiple(series, horizon_days=14)
    """

    def __init__(self, trend: TrendEstimator = None,
                 smoothing: SmoothingEstimator = None,
                 min_readings: int = None):
        self.trend = trend or TrendEstimator()
        self.smoothing = smoothing or SmoothingEstimator()
        self.min_readings = min_readings or config.MIN_ENSEMBLE_READINGS

    # ── Public API ────────────────────────────────────────────────

    def forecast(self, series: CleanedSeries, parameter=Parameter.LEVEL,
                 horizon_days: int = None) -> ParameterForecast:
        """
        Single-parameter forecast with fit-dependent weighting.

        Args:
            series: CleanedSeries from DataCleaner.
            parameter: Parameter member or name.
            horizon_days: Number of future days.  Defaults to
                config.DEFAULT_HORIZON_DAYS.

        Returns:
            ParameterForecast (check .failure for the not-enough-data case).

        Raises:
            ValueError: If horizon_days is not a positive integer.
        """
        parameter = Parameter.parse(parameter)
        horizon_days = self._check_horizon(horizon_days)
        gate = self._gate(series)
        if gate is not None:
            return ParameterForecast(parameter, failure=gate)
        return self._forecast_parameter(series, parameter, horizon_days,
                                        adaptive=True)

    def forecast_multiple(self, series: CleanedSeries, parameters=None,
                          horizon_days: int = None) -> dict:
        """
        Forecast several parameters independently with equal weighting.

        A failing parameter never affects its siblings.

        Args:
            series: CleanedSeries from DataCleaner.
            parameters: Iterable of parameters.  Defaults to all.
            horizon_days: Number of future days.

        Returns:
            Dict mapping Parameter -> ParameterForecast.
        """
        params = [Parameter.parse(p) for p in (parameters or list(Parameter))]
        horizon_days = self._check_horizon(horizon_days)
        gate = self._gate(series)
        if gate is not None:
            return {p: ParameterForecast(p, failure=gate) for p in params}

        results = {}
        for param in params:
            logger.info(f"Generating predictions for {param.value}...")
            results[param] = self._forecast_parameter(series, param, horizon_days,
                                                      adaptive=False)
        return results

    # ── Internals ─────────────────────────────────────────────────

    @staticmethod
    def _check_horizon(horizon_days) -> int:
        if horizon_days is None:
            return config.DEFAULT_HORIZON_DAYS
        if isinstance(horizon_days, bool) or not isinstance(horizon_days, int) \
                or horizon_days < 1:
            raise ValueError(f"horizon_days must be a positive integer, "
                             f"got {horizon_days!r}")
        if horizon_days not in config.HORIZON_CHOICES:
            logger.debug(f"Non-standard horizon of {horizon_days} days")
        return horizon_days

    def _gate(self, series: CleanedSeries) -> Optional[Failure]:
        count = len(series) if series is not None else 0
        if count >= self.min_readings:
            return None
        logger.warning(f"Insufficient data for prediction "
                       f"({count}/{self.min_readings} readings)")
        return Failure(
            FailureReason.INSUFFICIENT_DATA,
            f"Insufficient data for prediction "
            f"({count}/{self.min_readings} readings required)",
        )

    @staticmethod
    def _weights(trend, smoothing, adaptive: bool) -> tuple:
        """(linear weight, smoothing weight) for the fits that succeeded."""
        trend_ok = isinstance(trend, TrendFit)
        smoothing_ok = isinstance(smoothing, SmoothingFit)
        if trend_ok and not smoothing_ok:
            return 1.0, 0.0
        if smoothing_ok and not trend_ok:
            return 0.0, 1.0
        if adaptive and trend.r_squared > config.HIGH_FIT_R_SQUARED:
            linear = config.HIGH_FIT_LINEAR_WEIGHT
        else:
            linear = config.BASE_LINEAR_WEIGHT
        return linear, 1.0 - linear

    def _forecast_parameter(self, series: CleanedSeries, parameter: Parameter,
                            horizon_days: int, adaptive: bool) -> ParameterForecast:
        _, values = series.extract(parameter)
        n = len(values)
        min_points = config.MIN_MODEL_POINTS
        if n < min_points:
            failure = Failure(
                FailureReason.INSUFFICIENT_DATA,
                f"Insufficient {parameter.value} data ({n}/{min_points} required)",
            )
            logger.warning(f"{parameter.value} predictions failed: {failure}")
            return ParameterForecast(parameter, failure=failure, data_points=n)

        trend = self.trend.fit_values(values, parameter)
        smoothing = self.smoothing.fit_values(values, parameter)
        models = {
            "linear": "failed" if isinstance(trend, Failure) else "success",
            "smoothing": "failed" if isinstance(smoothing, Failure) else "success",
        }
        r_squared = trend.r_squared if isinstance(trend, TrendFit) else None
        mape = smoothing.mape if isinstance(smoothing, SmoothingFit) else None

        if isinstance(trend, Failure) and isinstance(smoothing, Failure):
            failure = Failure(
                FailureReason.MODELS_FAILED,
                f"Both prediction methods failed for {parameter.value}: "
                f"{trend.message}; {smoothing.message}",
            )
            logger.warning(f"{parameter.value} predictions failed: {failure}")
            return ParameterForecast(parameter, failure=failure, data_points=n,
                                     models=models)

        w_linear, w_smoothing = self._weights(trend, smoothing, adaptive)
        confidence = 0.0
        if r_squared is not None:
            confidence += r_squared * w_linear
        if mape is not None:
            confidence += (100 - mape) / 100 * w_smoothing
        confidence = round(_clamp_percent(confidence * 100), config.CONFIDENCE_DECIMALS)

        last = series.last_timestamp
        forecasts = []
        for day in range(1, horizon_days + 1):
            predicted = 0.0
            if w_linear:
                # step k past the last sample in both modes, not n + k - 1
                predicted += trend.predict(day) * w_linear
            if w_smoothing:
                predicted += smoothing.predict(day) * w_smoothing
            if not math.isfinite(predicted):
                continue
            forecasts.append(Forecast(
                date=last + timedelta(days=day),
                parameter=parameter,
                predicted_value=round(float(predicted), config.PREDICTION_DECIMALS),
                confidence=confidence,
            ))

        if mape is not None:
            accuracy = _clamp_percent(100 - mape)
        else:
            accuracy = _clamp_percent(r_squared * 100)

        if not forecasts:
            failure = Failure(
                FailureReason.INVALID_STATISTICS,
                f"No valid predictions generated for {parameter.value}",
            )
            logger.warning(f"{parameter.value} predictions failed: {failure}")
            return ParameterForecast(parameter, failure=failure, data_points=n,
                                     r_squared=r_squared, mape=mape, models=models)

        logger.info(f"Generated {len(forecasts)} {parameter.value} predictions "
                    f"(accuracy: {accuracy:.1f}%, weights: "
                    f"linear={w_linear}, smoothing={w_smoothing})")
        return ParameterForecast(
            parameter=parameter,
            forecasts=tuple(forecasts),
            accuracy=round(accuracy, config.CONFIDENCE_DECIMALS),
            data_points=n,
            r_squared=r_squared,
            mape=mape,
            models=models,
        )
