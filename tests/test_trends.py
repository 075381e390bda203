from __future__ import annotations

from datetime import date

import pandas as pd
import pytest

from cgm_tir.models import Period
from cgm_tir.trends import calculate_time_in_range_trends, period_key, week_start


def _day(day: str, values: list[float], hour: int = 8) -> list[dict]:
    timestamps = pd.date_range(start=f"{day} {hour:02d}:00", periods=len(values), freq="5min", tz="UTC")
    return [{"timestamp": stamp, "value": value} for stamp, value in zip(timestamps, values)]


def test_empty_input_returns_empty_list():
    assert calculate_time_in_range_trends([], "daily") == []
    assert calculate_time_in_range_trends(None, "weekly") == []


def test_noise_floor_drops_periods_with_nine_readings():
    readings = _day("2024-01-01", [120.0] * 9) + _day("2024-01-02", [120.0] * 10)
    trends = calculate_time_in_range_trends(readings, "daily")

    assert [trend.period for trend in trends] == ["2024-01-02"]
    assert trends[0].reading_count == 10


def test_daily_percentages_and_average():
    values = [120.0] * 7 + [60.0] * 2 + [200.0]
    trend = calculate_time_in_range_trends(_day("2024-01-05", values), "daily")[0]

    assert trend.period == "2024-01-05"
    assert trend.in_range_percentage == 70.0
    assert trend.below_range_percentage == 20.0
    assert trend.above_range_percentage == 10.0
    assert trend.average_glucose == 116


def test_percentages_round_to_one_decimal():
    values = [60.0] * 4 + [120.0] * 4 + [200.0] * 4
    trend = calculate_time_in_range_trends(_day("2024-01-05", values), "daily")[0]

    assert trend.in_range_percentage == 33.3
    assert trend.below_range_percentage == 33.3
    assert trend.above_range_percentage == 33.3


def test_periods_are_sorted_ascending():
    readings = (
        _day("2024-01-03", [150.0] * 10)
        + _day("2024-01-01", [110.0] * 10)
        + _day("2024-01-02", [130.0] * 10)
    )
    trends = calculate_time_in_range_trends(readings)

    assert [trend.period for trend in trends] == ["2024-01-01", "2024-01-02", "2024-01-03"]
    assert [trend.average_glucose for trend in trends] == [110, 130, 150]


def test_weekly_buckets_start_on_sunday():
    readings = (
        _day("2024-01-03", [120.0] * 5)
        + _day("2024-01-06", [120.0] * 5)
        + _day("2024-01-07", [200.0] * 10)
    )
    trends = calculate_time_in_range_trends(readings, Period.WEEKLY)

    assert [trend.period for trend in trends] == ["2023-12-31", "2024-01-07"]
    assert trends[0].reading_count == 10
    assert trends[1].above_range_percentage == 100.0


def test_timezone_moves_readings_to_local_date():
    readings = _day("2024-01-02", [120.0] * 10, hour=3)

    assert calculate_time_in_range_trends(readings)[0].period == "2024-01-02"
    local = calculate_time_in_range_trends(readings, timezone="America/Los_Angeles")
    assert local[0].period == "2024-01-01"


def test_unknown_period_raises():
    with pytest.raises(ValueError):
        calculate_time_in_range_trends(_day("2024-01-01", [120.0] * 10), "hourly")
    with pytest.raises(ValueError):
        calculate_time_in_range_trends(_day("2024-01-01", [120.0] * 10), "monthly")


def test_week_start_and_period_keys():
    assert week_start(date(2024, 1, 7)) == date(2024, 1, 7)
    assert week_start(date(2024, 1, 13)) == date(2024, 1, 7)
    assert period_key(date(2024, 2, 29), Period.MONTHLY) == "2024-02"
    assert period_key(date(2024, 2, 29), Period.DAILY) == "2024-02-29"
