from datetime import datetime, timedelta, timezone

import pytest

from backend.forecasting.schemas import CleanedSeries, Reading

START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def build_series(levels, pressures=None, temperatures=None, start=START) -> CleanedSeries:
    readings = []
    for i, level in enumerate(levels):
        readings.append(
            Reading(
                timestamp=start + timedelta(days=i),
                level=level,
                pressure=pressures[i] if pressures is not None else None,
                temperature=temperatures[i] if temperatures is not None else None,
            )
        )
    return CleanedSeries(readings)


@pytest.fixture
def make_series():
    return build_series


@pytest.fixture
def trending_levels() -> list:
    return [10.0, 10.2, 10.1, 10.4, 10.3, 10.6, 10.5]
