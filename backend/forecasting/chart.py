"""
chart.py — Chart Data Formatter
================================

Reshapes forecasts into the label / series pair the dashboard's line chart
renders.  Labels are short dates such as "Oct 18".
"""

from dataclasses import dataclass, field

from .schemas import Parameter


@dataclass(frozen=True)
class ChartData:
    labels: list = field(default_factory=list)
    series: list = field(default_factory=list)
    color: str = Parameter.LEVEL.chart_color

    def to_dict(self) -> dict:
        return {"labels": list(self.labels), "series": list(self.series),
                "color": self.color}


def _label(date) -> str:
    return f"{date:%b} {date.day}"


def format_forecasts(forecasts) -> ChartData:
    """
    Build chart data from a sequence of Forecasts.

    Args:
        forecasts: Forecasts of a single parameter, in date order.

    Returns:
        ChartData; empty when there are no forecasts.
    """
    forecasts = list(forecasts or ())
    if not forecasts:
        return ChartData()
    return ChartData(
        labels=[_label(f.date) for f in forecasts],
        series=[f.predicted_value for f in forecasts],
        color=forecasts[0].parameter.chart_color,
    )


def format_parameter(results: dict, parameter) -> ChartData:
    """
    Build chart data for one parameter of a multi-parameter result.

    Args:
        results: Mapping Parameter -> ParameterForecast.
        parameter: Parameter member or name to chart.

    Returns:
        ChartData in the parameter's color; empty when the parameter has
        no forecasts.
    """
    parameter = Parameter.parse(parameter)
    result = (results or {}).get(parameter)
    if result is None or not result.forecasts:
        return ChartData(color=parameter.chart_color)
    return format_forecasts(result.forecasts)
