from datetime import datetime, timezone

from backend.forecasting.chart import ChartData, format_forecasts, format_parameter
from backend.forecasting.ensemble import EnsembleForecaster, ParameterForecast
from backend.forecasting.schemas import Forecast, Parameter


def _forecast(day: int, value: float, parameter=Parameter.LEVEL) -> Forecast:
    return Forecast(
        date=datetime(2024, 10, day, tzinfo=timezone.utc),
        parameter=parameter,
        predicted_value=value,
        confidence=80.0,
    )


def test_format_forecasts_builds_labels_and_series() -> None:
    chart = format_forecasts([_forecast(18, 4.2), _forecast(19, 4.3), _forecast(20, 4.1)])

    assert chart.labels == ["Oct 18", "Oct 19", "Oct 20"]
    assert chart.series == [4.2, 4.3, 4.1]
    assert chart.color == Parameter.LEVEL.chart_color


def test_format_forecasts_empty_input() -> None:
    assert format_forecasts([]) == ChartData()
    assert format_forecasts(None).to_dict() == {
        "labels": [],
        "series": [],
        "color": Parameter.LEVEL.chart_color,
    }


def test_format_parameter_picks_one_parameter(make_series, trending_levels) -> None:
    series = make_series(trending_levels, pressures=[1000.0 + v for v in trending_levels])
    results = EnsembleForecaster().forecast_multiple(series, horizon_days=3)

    pressure = format_parameter(results, "pressure")
    temperature = format_parameter(results, Parameter.TEMPERATURE)

    assert len(pressure.labels) == 3
    assert pressure.series == [f.predicted_value for f in results[Parameter.PRESSURE].forecasts]
    assert pressure.color == Parameter.PRESSURE.chart_color
    assert temperature.labels == []
    assert temperature.color == Parameter.TEMPERATURE.chart_color


def test_format_parameter_missing_entry() -> None:
    results = {Parameter.LEVEL: ParameterForecast(Parameter.LEVEL)}

    assert format_parameter(results, Parameter.PRESSURE).series == []
    assert format_parameter(results, Parameter.LEVEL).labels == []
    assert format_parameter({}, "level") == ChartData()
