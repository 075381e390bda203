from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd
import pytest

from cgm_tir.a1c import (
    a1c_recommendation,
    calculate_a1c,
    calculate_a1c_trends,
    categorize_a1c,
    estimate_a1c,
    glucose_from_a1c,
)
from cgm_tir.errors import EmptyInputError, InvalidA1CError, InvalidGlucoseError, NoReadingsInRangeError
from cgm_tir.models import A1CCategory


def _readings(start: str, values: list[float], freq: str = "1h") -> list[dict]:
    timestamps = pd.date_range(start=start, periods=len(values), freq=freq, tz="UTC")
    return [{"system_time": stamp.isoformat(), "value": value} for stamp, value in zip(timestamps, values)]


def test_calculate_a1c_uses_adag_formula():
    assert calculate_a1c(154) == 7.0
    assert calculate_a1c(183) == 8.0
    assert calculate_a1c(0) == 1.6


def test_calculate_a1c_rejects_out_of_range_glucose():
    with pytest.raises(InvalidGlucoseError):
        calculate_a1c(-1)
    with pytest.raises(InvalidGlucoseError):
        calculate_a1c(601)


def test_glucose_from_a1c():
    assert glucose_from_a1c(7.0) == 154
    with pytest.raises(InvalidA1CError):
        glucose_from_a1c(3.9)
    with pytest.raises(InvalidA1CError):
        glucose_from_a1c(15.1)


@pytest.mark.parametrize(
    ("a1c", "category"),
    [
        (5.6, A1CCategory.EXCELLENT),
        (5.7, A1CCategory.GOOD),
        (6.5, A1CCategory.FAIR),
        (7.0, A1CCategory.POOR),
        (8.0, A1CCategory.VERY_POOR),
    ],
)
def test_categorize_a1c(a1c, category):
    assert categorize_a1c(a1c) is category


def test_recommendation_matches_category():
    assert a1c_recommendation(5.0).startswith("Excellent control!")
    assert a1c_recommendation(9.0).startswith("Your A1C is significantly elevated.")


def test_estimate_a1c_from_readings():
    estimate = estimate_a1c(_readings("2024-01-01", [154.0] * 12))

    assert estimate.estimated_a1c == 7.0
    assert estimate.average_glucose == 154
    assert estimate.reading_count == 12
    assert estimate.category is A1CCategory.POOR
    assert estimate.date_range.start == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert estimate.date_range.end == datetime(2024, 1, 1, 11, tzinfo=timezone.utc)


def test_estimate_a1c_filters_by_date():
    readings = _readings("2024-01-01", [100.0] * 5, freq="1min") + _readings("2024-01-02", [200.0] * 5, freq="1min")
    estimate = estimate_a1c(readings, start=datetime(2024, 1, 2, tzinfo=timezone.utc))

    assert estimate.reading_count == 5
    assert estimate.average_glucose == 200
    assert estimate.estimated_a1c == 8.6
    assert estimate.category is A1CCategory.VERY_POOR


def test_estimate_a1c_errors():
    with pytest.raises(EmptyInputError):
        estimate_a1c([])
    with pytest.raises(NoReadingsInRangeError):
        estimate_a1c(_readings("2024-01-01", [120.0] * 3), end="2023-12-31")


def test_monthly_trends_report_change():
    readings = _readings("2024-01-10", [154.0] * 10) + _readings("2024-02-10", [183.0] * 10)
    trends = calculate_a1c_trends(readings, "monthly")

    assert [trend.period for trend in trends] == ["2024-01", "2024-02"]
    assert trends[0].change is None
    assert trends[0].change_percentage is None
    assert trends[1].estimated_a1c == 8.0
    assert trends[1].change == 1.0
    assert trends[1].change_percentage == 14.3


def test_weekly_trends_skip_sparse_weeks():
    readings = _readings("2024-01-07", [154.0] * 10) + _readings("2024-01-15", [154.0] * 9)
    trends = calculate_a1c_trends(readings, "weekly")

    assert [trend.period for trend in trends] == ["2024-01-07"]
    assert calculate_a1c_trends([], "weekly") == []
    with pytest.raises(ValueError):
        calculate_a1c_trends(readings, "daily")
