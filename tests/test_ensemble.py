from datetime import timedelta

import pytest

from backend.forecasting.ema import SmoothingEstimator
from backend.forecasting.ensemble import EnsembleForecaster
from backend.forecasting.regression import TrendEstimator
from backend.forecasting.schemas import FailureReason, Parameter


def test_trending_levels_three_day_forecast(make_series, trending_levels) -> None:
    series = make_series(trending_levels)

    result = EnsembleForecaster().forecast(series, Parameter.LEVEL, horizon_days=3)

    assert result.ok
    assert result.models == {"linear": "success", "smoothing": "success"}
    assert result.r_squared > 0.7
    values = [f.predicted_value for f in result.forecasts]
    assert values == [10.57, 10.64, 10.70]
    assert [f.date for f in result.forecasts] == [
        series.last_timestamp + timedelta(days=day) for day in (1, 2, 3)
    ]
    for forecast in result.forecasts:
        assert forecast.parameter is Parameter.LEVEL
        assert 80 < forecast.confidence < 90


def test_weak_fit_uses_even_weights(make_series) -> None:
    series = make_series([10, 12, 10, 12, 10, 12, 10])

    result = EnsembleForecaster().forecast(series, "level", horizon_days=7)

    assert result.r_squared == pytest.approx(0.0)
    assert [f.predicted_value for f in result.forecasts] == [10.79] * 7
    expected_confidence = round((100 - result.mape) / 100 * 0.5 * 100, 1)
    assert {f.confidence for f in result.forecasts} == {expected_confidence}


def test_multi_parameter_mode_averages_evenly(make_series, trending_levels) -> None:
    series = make_series(trending_levels)

    results = EnsembleForecaster().forecast_multiple(series, horizon_days=3)

    level = results[Parameter.LEVEL]
    # 0.5 * trend(7) + 0.5 * last smoothed value
    assert level.forecasts[0].predicted_value == 10.52
    steps = [b.predicted_value - a.predicted_value
             for a, b in zip(level.forecasts, level.forecasts[1:])]
    assert steps == pytest.approx([0.5 * 2.5 / 28] * 2, abs=0.011)


def test_failing_parameter_does_not_affect_siblings(make_series) -> None:
    levels = [5.0, 5.1, 5.3, 5.2, 5.4, 5.5, 5.6]
    pressures = [1000.0, None, None, 1010.0, None, None, 1020.0]
    temperatures = [18.0, 18.5, 19.0, 18.7, 19.2, 19.1, 19.4]
    series = make_series(levels, pressures=pressures, temperatures=temperatures)

    results = EnsembleForecaster().forecast_multiple(series, horizon_days=14)

    assert set(results) == set(Parameter)
    assert results[Parameter.PRESSURE].forecasts == ()
    assert results[Parameter.PRESSURE].failure.reason is FailureReason.INSUFFICIENT_DATA
    assert "(3/5 required)" in results[Parameter.PRESSURE].error
    assert results[Parameter.PRESSURE].accuracy == 0.0
    assert len(results[Parameter.LEVEL].forecasts) == 14
    assert len(results[Parameter.TEMPERATURE].forecasts) == 14


def test_short_series_is_gated(make_series) -> None:
    series = make_series([1, 2, 3, 4, 5, 6])
    forecaster = EnsembleForecaster()

    single = forecaster.forecast(series, horizon_days=3)
    multi = forecaster.forecast_multiple(series, [Parameter.LEVEL, "pressure"])

    assert single.forecasts == ()
    assert single.failure.reason is FailureReason.INSUFFICIENT_DATA
    assert "(6/7 readings required)" in single.error
    assert set(multi) == {Parameter.LEVEL, Parameter.PRESSURE}
    assert all(not r.ok and r.forecasts == () for r in multi.values())


def test_single_surviving_model_gets_full_weight(make_series) -> None:
    series = make_series([1, 2, 3, 4, 5, 6, 7])
    forecaster = EnsembleForecaster(smoothing=SmoothingEstimator(min_points=50))

    result = forecaster.forecast(series, horizon_days=3)

    assert result.ok
    assert result.models == {"linear": "success", "smoothing": "failed"}
    assert result.mape is None
    assert [f.predicted_value for f in result.forecasts] == [8.0, 9.0, 10.0]
    assert {f.confidence for f in result.forecasts} == {100.0}
    assert result.accuracy == 100.0


def test_smoothing_alone_when_trend_fails(make_series) -> None:
    series = make_series([2, 2, 2, 2, 2, 2, 2])
    forecaster = EnsembleForecaster(trend=TrendEstimator(min_points=50))

    result = forecaster.forecast_multiple(series, ["level"], horizon_days=3)[Parameter.LEVEL]

    assert result.models == {"linear": "failed", "smoothing": "success"}
    assert [f.predicted_value for f in result.forecasts] == [2.0, 2.0, 2.0]
    assert {f.confidence for f in result.forecasts} == {100.0}


def test_both_models_failing_is_reported(make_series) -> None:
    series = make_series([1, 2, 3, 4, 5, 6, 7])
    forecaster = EnsembleForecaster(trend=TrendEstimator(min_points=50),
                                    smoothing=SmoothingEstimator(min_points=50))

    result = forecaster.forecast(series, horizon_days=3)

    assert result.forecasts == ()
    assert result.failure.reason is FailureReason.MODELS_FAILED
    assert result.error.startswith("Both prediction methods failed for level")
    assert result.data_points == 7


def test_confidence_stays_within_bounds(make_series) -> None:
    erratic = make_series([1, 100, 1, 100, 1, 100, 1, 100])
    steady = make_series([50.0 + 0.1 * i for i in range(10)])
    forecaster = EnsembleForecaster()

    results = [
        forecaster.forecast(erratic, horizon_days=30),
        forecaster.forecast(steady, horizon_days=30),
        *forecaster.forecast_multiple(erratic, ["level"], horizon_days=30).values(),
    ]

    for result in results:
        assert result.forecasts
        for forecast in result.forecasts:
            assert 0 <= forecast.confidence <= 100
    assert results[0].forecasts[0].confidence == 0.0


@pytest.mark.parametrize("horizon", [0, -3, 2.5, True])
def test_invalid_horizon_raises(make_series, trending_levels, horizon) -> None:
    with pytest.raises(ValueError):
        EnsembleForecaster().forecast(make_series(trending_levels), horizon_days=horizon)


def test_forecast_to_dict_uses_parameter_field(make_series, trending_levels) -> None:
    results = EnsembleForecaster().forecast_multiple(
        make_series(trending_levels, temperatures=trending_levels), horizon_days=3)

    level = results[Parameter.LEVEL].forecasts[0].to_dict()
    temperature = results[Parameter.TEMPERATURE].forecasts[0].to_dict()

    assert set(level) == {"date", "predicted_level", "confidence"}
    assert set(temperature) == {"date", "predicted_temperature", "confidence"}
