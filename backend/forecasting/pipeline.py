"""
pipeline.py — Station Analysis Pipeline
========================================

Runs one station fetch through the whole package:

    raw rows -> DataCleaner -> CleanedSeries
             -> EnsembleForecaster (level, weighted)
             -> EnsembleForecaster (all parameters, equal weights)
             -> AnomalyDetector (selected parameter)
             -> chart data

The analyzer keeps no state between calls: the caller owns the fetched
rows and the returned StationAnalysis, and abandoning a stale analysis
(e.g. when the user switches station) needs no cleanup.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from . import config
from .anomaly import AnomalyDetector
from .chart import ChartData, format_forecasts, format_parameter
from .ensemble import EnsembleForecaster, ParameterForecast
from .preprocessing import DataCleaner
from .schemas import CleanedSeries, Failure, Parameter

logger = logging.getLogger("forecasting.pipeline")


@dataclass(frozen=True)
class StationAnalysis:
    """
    Everything the prediction view renders for one station.

    Attributes:
        series: Cleaned readings the analysis ran on.
        raw_count: Rows received before cleaning.
        level_forecast: Weighted level forecast, None if gated out.
        parameter_forecasts: Parameter -> equal-weight ParameterForecast.
        anomalies: AnomalyReport or Failure for anomaly_parameter.
        charts: Parameter -> ChartData of parameter_forecasts.
        level_chart: ChartData of level_forecast.
        error: Reason no models were run, or None.
    """

    series: CleanedSeries
    raw_count: int
    horizon_days: int
    anomaly_parameter: Parameter
    level_forecast: Optional[ParameterForecast] = None
    parameter_forecasts: dict = field(default_factory=dict)
    anomalies: object = None
    charts: dict = field(default_factory=dict)
    level_chart: ChartData = field(default_factory=ChartData)
    error: Optional[str] = None

    @property
    def metrics(self) -> dict:
        """Model quality figures of the level forecast."""
        if self.level_forecast is None:
            return {}
        return {
            "linear_r_squared": self.level_forecast.r_squared,
            "smoothing_mape": self.level_forecast.mape,
        }

    @property
    def anomaly_error(self) -> Optional[str]:
        return self.anomalies.message if isinstance(self.anomalies, Failure) else None


class StationAnalyzer:
    """
    End-to-end forecasting and anomaly analysis for one station.

    Usage:
        analyzer = StationAnalyzer()
        analysis = analyzer.analyze(rows, horizon_days=14)
    """

    def __init__(self, cleaner: DataCleaner = None,
                 forecaster: EnsembleForecaster = None,
                 detector: AnomalyDetector = None):
        self.cleaner = cleaner or DataCleaner()
        self.forecaster = forecaster or EnsembleForecaster()
        self.detector = detector or AnomalyDetector()

    def analyze(self, records, horizon_days: int = None,
                anomaly_parameter=Parameter.LEVEL) -> StationAnalysis:
        """
        Clean the rows, forecast every parameter and check for anomalies.

        Args:
            records: Raw rows from the reading source.
            horizon_days: Days to forecast (dashboard offers 3, 7, 14, 30).
            anomaly_parameter: Parameter to run anomaly detection on.

        Returns:
            StationAnalysis.  When fewer than config.MIN_MODEL_POINTS rows
            survive cleaning, .error is set and no models are run.
        """
        if horizon_days is None:
            horizon_days = config.DEFAULT_HORIZON_DAYS
        anomaly_parameter = Parameter.parse(anomaly_parameter)
        raw_count = len(records) if isinstance(records, (list, tuple)) else 0

        series = self.cleaner.clean(records)
        logger.info(f"Cleaned data: {len(series)} valid records "
                    f"(removed {raw_count - len(series)} invalid records)")

        if len(series) < config.MIN_MODEL_POINTS:
            error = (f"After cleaning invalid data, only {len(series)} valid "
                     f"records remain. At least {config.MIN_MODEL_POINTS} "
                     "valid records are required for predictions.")
            logger.warning(error)
            return StationAnalysis(series=series, raw_count=raw_count,
                                   horizon_days=horizon_days,
                                   anomaly_parameter=anomaly_parameter,
                                   error=error)

        logger.info(f"Generating multi-parameter predictions for "
                    f"{horizon_days} days...")
        level_forecast = self.forecaster.forecast(series, Parameter.LEVEL,
                                                  horizon_days)
        parameter_forecasts = self.forecaster.forecast_multiple(
            series, horizon_days=horizon_days)

        logger.info(f"Detecting anomalies in {anomaly_parameter.value} data...")
        anomalies = self.detector.detect(series, anomaly_parameter)
        if isinstance(anomalies, Failure):
            logger.warning(f"Anomaly detection error for "
                           f"{anomaly_parameter.value}: {anomalies}")

        return StationAnalysis(
            series=series,
            raw_count=raw_count,
            horizon_days=horizon_days,
            anomaly_parameter=anomaly_parameter,
            level_forecast=level_forecast,
            parameter_forecasts=parameter_forecasts,
            anomalies=anomalies,
            charts={p: format_parameter(parameter_forecasts, p)
                    for p in parameter_forecasts},
            level_chart=format_forecasts(level_forecast.forecasts),
        )
