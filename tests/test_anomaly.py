import math

import pytest

from backend.forecasting.anomaly import AnomalyDetector, AnomalyReport
from backend.forecasting.schemas import Failure, FailureReason, Parameter


def test_single_spike_is_flagged(make_series) -> None:
    series = make_series([5.0] * 10 + [50.0])

    report = AnomalyDetector().detect(series, Parameter.LEVEL)

    assert isinstance(report, AnomalyReport)
    assert len(report.anomalies) == 1
    assert report.anomalies[0] is series[10]
    assert report.z_scores[0] == pytest.approx(math.sqrt(10))
    assert report.mean == pytest.approx(100 / 11)
    assert report.threshold_used == 2.0
    assert report.total_records == 11


def test_pressure_uses_wider_threshold(make_series) -> None:
    values = [5.0] * 6 + [20.0]  # spike z-score is sqrt(6) ~ 2.45
    series = make_series(values, pressures=values)
    detector = AnomalyDetector()

    level = detector.detect(series, "level")
    pressure = detector.detect(series, "pressure", base_threshold=0.1)

    assert [r.level for r in level.anomalies] == [20.0]
    assert pressure.anomalies == ()
    assert pressure.threshold_used == 2.5


def test_caller_threshold_does_not_override_policy(make_series) -> None:
    series = make_series([5.0] * 10 + [50.0])

    report = AnomalyDetector().detect(series, Parameter.LEVEL, base_threshold=10)

    assert report.threshold_used == 2.0
    assert len(report.anomalies) == 1


def test_missing_values_are_skipped(make_series) -> None:
    temperatures = [20.0, None, 20.5, 19.5, None, 20.0, 20.5, 19.5, 20.0, 35.0]
    series = make_series([3.0] * len(temperatures), temperatures=temperatures)

    report = AnomalyDetector().detect(series, Parameter.TEMPERATURE)

    assert [r.temperature for r in report.anomalies] == [35.0]
    assert report.anomalies[0] is series[9]
    assert report.total_records == 10


def test_insufficient_points_returns_failure(make_series) -> None:
    result = AnomalyDetector().detect(make_series([1, 2, 3, 4, 5, 6]))

    assert isinstance(result, Failure)
    assert result.reason is FailureReason.INSUFFICIENT_DATA
    assert "(6/7 required)" in result.message


def test_constant_series_is_degenerate(make_series) -> None:
    result = AnomalyDetector().detect(make_series([7.5] * 9))

    assert isinstance(result, Failure)
    assert result.reason is FailureReason.DEGENERATE_DISTRIBUTION


def test_tiny_real_spread_is_not_degenerate(make_series) -> None:
    report = AnomalyDetector().detect(make_series([5.0] * 6 + [5.000001]))

    assert isinstance(report, AnomalyReport)
    assert len(report.anomalies) == 1
    assert report.z_scores[0] == pytest.approx(math.sqrt(6), rel=1e-4)


def test_no_outliers_gives_empty_report(make_series) -> None:
    report = AnomalyDetector().detect(make_series([1, 2, 3, 4, 5, 6, 7, 8]))

    assert report.anomalies == ()
    assert report.stats() == {
        "mean": 4.5,
        "std_dev": round(math.sqrt(5.25), 2),
        "threshold": 2.0,
        "parameter": "level",
    }
