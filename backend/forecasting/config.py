"""
config.py — Forecasting & Anomaly Detection Configuration Constants
====================================================================

Centralizes the bounds, minimum sample counts, smoothing factor, ensemble
weights and anomaly thresholds used by the station forecasting package.
Tuning these values changes how strict the cleaner is, how much the
ensemble trusts the linear trend, and how sensitive anomaly flagging is.

Station telemetry this package consumes:
- Water level (m), usually one aggregated reading per day
- Line pressure (Pa / kPa depending on station firmware)
- Water temperature (°C)
- Battery level (%) of the remote logger
"""

import os

# ═══════════════════════════════════════════════════════════════════
# CLEANING BOUNDS
# ═══════════════════════════════════════════════════════════════════

# Physically plausible ranges.  A level outside its range drops the whole
# reading; pressure / temperature outside their range are nulled instead.
LEVEL_BOUNDS = (0.0, 1000.0)
PRESSURE_BOUNDS = (0.0, 12000.0)
TEMPERATURE_BOUNDS = (-50.0, 70.0)

# Raw field names accepted for the water level (first non-blank wins)
LEVEL_FIELDS = ("level", "water_level")

# Raw field names accepted for the logger battery level
BATTERY_FIELDS = ("battery_level", "batteryLevel")

# ═══════════════════════════════════════════════════════════════════
# MINIMUM DATA REQUIREMENTS
# ═══════════════════════════════════════════════════════════════════

# Valid values a single model (trend / smoothing) needs for a fit.
MIN_MODEL_POINTS = 5

# Valid values required before z-scores mean anything.
MIN_ANOMALY_POINTS = 7

# Total readings the ensemble needs before any per-parameter filtering.
MIN_ENSEMBLE_READINGS = 7

# Records a station must hold before a forecast is even attempted.
MIN_SUFFICIENT_RECORDS = int(os.environ.get("FORECAST_MIN_RECORDS", "5"))

# ═══════════════════════════════════════════════════════════════════
# EXPONENTIAL SMOOTHING
# ═══════════════════════════════════════════════════════════════════

# Smoothing factor (0 < alpha <= 1).  Out-of-range values fall back here.
EMA_ALPHA = 0.3

# ═══════════════════════════════════════════════════════════════════
# ENSEMBLE WEIGHTING
# ═══════════════════════════════════════════════════════════════════

# In single-parameter mode the trend gets HIGH_FIT_LINEAR_WEIGHT when its
# R² exceeds HIGH_FIT_R_SQUARED, otherwise BASE_LINEAR_WEIGHT.
HIGH_FIT_R_SQUARED = 0.7
HIGH_FIT_LINEAR_WEIGHT = 0.7
BASE_LINEAR_WEIGHT = 0.5

# Horizons offered by the dashboard (days)
HORIZON_CHOICES = (3, 7, 14, 30)
DEFAULT_HORIZON_DAYS = 7

# Output rounding
PREDICTION_DECIMALS = 2
CONFIDENCE_DECIMALS = 1

# ═══════════════════════════════════════════════════════════════════
# ANOMALY DETECTION
# ═══════════════════════════════════════════════════════════════════

# Z-score above which a reading is flagged.  Pressure drifts slowly, so it
# gets a wider band.  These override the caller-supplied threshold.
ANOMALY_THRESHOLDS = {
    "level": 2.0,
    "pressure": 2.5,
    "temperature": 2.0,
}
DEFAULT_ANOMALY_THRESHOLD = 2.0

# ═══════════════════════════════════════════════════════════════════
# CHART OUTPUT
# ═══════════════════════════════════════════════════════════════════

CHART_COLORS = {
    "level": "rgba(86, 152, 235, 1)",
    "pressure": "rgba(255, 99, 132, 1)",
    "temperature": "rgba(255, 206, 84, 1)",
}

# ═══════════════════════════════════════════════════════════════════
# SAMPLE DATA
# ═══════════════════════════════════════════════════════════════════

# Seed for reproducible synthetic station histories
RANDOM_STATE = 42

# ═══════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════

# Log level for the forecasting package (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_LEVEL = os.environ.get("FORECAST_LOG_LEVEL", "INFO")
