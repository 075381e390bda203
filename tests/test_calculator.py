from __future__ import annotations

from datetime import datetime, timedelta, timezone

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pandas as pd
import pytest

from cgm_tir.calculator import calculate_time_in_range, summarize_glucose
from cgm_tir.errors import EmptyInputError
from cgm_tir.models import GlucoseReading, RangeBand, Rating

EXCELLENT = "Excellent glucose control! Keep up the great work."
BELOW = "Reduce time below range by adjusting insulin doses or eating more carbs before lows."
URGENT = "⚠️ Urgent: Too much time in very low range. Discuss with your healthcare provider immediately."


def _readings(values: list[float], start: str = "2024-01-01", freq: str = "5min") -> list[dict]:
    timestamps = pd.date_range(start=start, periods=len(values), freq=freq, tz="UTC")
    return [
        {"timestamp": stamp.isoformat(), "value": value}
        for stamp, value in zip(timestamps, values)
    ]


def test_uniform_in_range_readings_are_excellent():
    result = calculate_time_in_range(_readings([150.0] * 100))

    assert result.total_readings == 100
    assert result.percentage(RangeBand.IN_RANGE) == 100.0
    for band in (RangeBand.VERY_LOW, RangeBand.LOW, RangeBand.HIGH, RangeBand.VERY_HIGH):
        assert result.percentage(band) == 0.0
    assert result.average_glucose == 150
    assert result.standard_deviation == 0
    assert result.coefficient_of_variation == 0.0
    assert result.glucose_management_indicator == 6.9
    assert result.assessment.overall_rating is Rating.EXCELLENT
    assert list(result.assessment.recommendations) == [EXCELLENT]


def test_empty_input_raises():
    with pytest.raises(EmptyInputError):
        calculate_time_in_range([])
    with pytest.raises(EmptyInputError):
        calculate_time_in_range(None)


def test_band_boundaries_are_exact():
    result = calculate_time_in_range(_readings([53, 54, 69, 70, 180, 181, 250, 251]))

    assert result.count(RangeBand.VERY_LOW) == 1
    assert result.count(RangeBand.LOW) == 2
    assert result.count(RangeBand.IN_RANGE) == 2
    assert result.count(RangeBand.HIGH) == 2
    assert result.count(RangeBand.VERY_HIGH) == 1
    assert sum(stats.count for stats in result.ranges.values()) == result.total_readings
    assert result.percentage(RangeBand.VERY_LOW) == 12.5
    assert result.percentage(RangeBand.IN_RANGE) == 25.0


def test_threshold_labels():
    result = calculate_time_in_range(_readings([120]))
    labels = {band: stats.threshold for band, stats in result.ranges.items()}

    assert labels == {
        RangeBand.VERY_LOW: "< 54 mg/dL",
        RangeBand.LOW: "54-70 mg/dL",
        RangeBand.IN_RANGE: "70-180 mg/dL",
        RangeBand.HIGH: "180-250 mg/dL",
        RangeBand.VERY_HIGH: "> 250 mg/dL",
    }


def test_percentages_sum_to_one_hundred():
    values = [40] * 1 + [60] * 2 + [100] * 3 + [200] * 4 + [300] * 5
    result = calculate_time_in_range(_readings(values))

    total = sum(stats.percentage for stats in result.ranges.values())
    assert total == pytest.approx(100.0, abs=0.1)
    assert result.percentage(RangeBand.VERY_LOW) == 6.7
    assert result.percentage(RangeBand.VERY_HIGH) == 33.3


def test_gmi_for_average_154():
    result = calculate_time_in_range(_readings([154.0] * 20))

    assert result.average_glucose == 154
    assert result.glucose_management_indicator == 7.0


def test_population_standard_deviation_is_used():
    result = calculate_time_in_range(_readings([100, 100, 100, 200]))

    assert result.average_glucose == 125
    assert result.standard_deviation == 43
    assert result.coefficient_of_variation == 34.6


def test_result_is_independent_of_input_order():
    values = [45, 60, 95, 120, 150, 190, 260, 175, 88, 101, 240]
    readings = _readings(values)

    forward = calculate_time_in_range(readings)
    backward = calculate_time_in_range(list(reversed(readings)))

    assert forward == backward
    assert forward.date_range.start == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert forward.date_range.end == datetime(2024, 1, 1, 0, 50, tzinfo=timezone.utc)


def test_very_low_readings_trigger_urgent_recommendation():
    values = [45.0] * 15 + [120.0] * 85
    result = calculate_time_in_range(_readings(values))

    assert result.percentage(RangeBand.VERY_LOW) == 15.0
    assert result.assessment.tir_rating is Rating.EXCELLENT
    assert result.assessment.below_range_rating is Rating.POOR
    assert result.assessment.overall_rating is Rating.POOR
    assert list(result.assessment.recommendations) == [EXCELLENT, BELOW, URGENT]


def test_invalid_values_are_not_rejected():
    readings = [
        GlucoseReading(value=100.0, timestamp="2024-01-01T00:00:00Z"),
        GlucoseReading(value=-50.0, timestamp="2024-01-01T00:05:00Z"),
    ]
    result = calculate_time_in_range(readings)

    assert result.average_glucose == 25
    assert result.count(RangeBand.VERY_LOW) == 1


def test_accepts_system_time_records_and_frames():
    records = [{"value": 120, "system_time": "2024-01-01T00:00:00Z"}]
    frame = pd.DataFrame({"system_time": ["2024-01-01T00:00:00Z"], "value": [120]})

    assert calculate_time_in_range(records) == calculate_time_in_range(frame)


def test_summarize_glucose_uses_floor_percentiles():
    values = [190, 100, 170, 110, 160, 120, 150, 130, 180, 140]
    summary = summarize_glucose(_readings(values), now=datetime(2024, 1, 1, 1, tzinfo=timezone.utc))

    assert summary.total == 10
    assert summary.minimum == 100
    assert summary.maximum == 190
    assert summary.p25 == 120
    assert summary.median == 150
    assert summary.p75 == 170
    assert summary.average == 145
    assert summary.last_24h == 10
    assert summary.last_7d == 10


def test_summarize_glucose_counts_recent_readings():
    now = datetime(2024, 3, 10, 12, tzinfo=timezone.utc)
    readings = [
        GlucoseReading(value=110, timestamp=now - timedelta(hours=1)),
        GlucoseReading(value=120, timestamp=now - timedelta(days=2)),
        GlucoseReading(value=130, timestamp=now - timedelta(days=10)),
    ]
    summary = summarize_glucose(readings, now=now)

    assert summary.last_24h == 1
    assert summary.last_7d == 2


def test_summarize_glucose_requires_readings():
    with pytest.raises(EmptyInputError):
        summarize_glucose([])
