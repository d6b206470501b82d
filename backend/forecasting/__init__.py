"""
backend.forecasting — Forecasting & Anomaly Detection for Station Telemetry
=============================================================================

This package implements the statistical core of the water monitoring
dashboard: it turns raw station rows into cleaned series, day-by-day
forecasts with a confidence score, and z-score anomaly flags.

Architecture:
    Remote stations → cloud database → dashboard fetch
                                            ↓
                                   Forecasting package:
                                     1. Data Cleaning
                                     2. Linear Trend Fit
                                     3. Exponential Smoothing
                                     4. Weighted Ensemble
                                     5. Z-Score Anomaly Detection
                                     6. Chart Formatting
                                            ↓
                                   Forecasts / Anomalies → dashboard views

Modules:
    config        — Bounds, thresholds, weights and system constants
    schemas       — Parameter, Reading, CleanedSeries, Forecast, Failure
    preprocessing — Data cleaning and sufficiency checks
    regression    — Linear trend estimator
    ema           — Exponential smoothing estimator
    ensemble      — Weighted ensemble forecaster
    anomaly       — Z-score anomaly detector
    chart         — Chart data formatter
    pipeline      — End-to-end station analysis
    sample_data   — Synthetic station history generator
    utils         — Logging setup and value coercion helpers
"""

from .anomaly import AnomalyDetector, AnomalyReport
from .chart import ChartData, format_forecasts, format_parameter
from .ema import SmoothingEstimator, SmoothingFit
from .ensemble import EnsembleForecaster, ParameterForecast
from .pipeline import StationAnalysis, StationAnalyzer
from .preprocessing import DataCleaner, check_data_sufficiency
from .regression import TrendEstimator, TrendFit
from .schemas import (CleanedSeries, Failure, FailureReason, Forecast,
                      Parameter, Reading)

__version__ = "1.0.0"
__author__ = "Water Monitoring IoT Team"
