"""Time-in-range report and dashboard statistics for glucose readings.

Both entry points are pure: they read the supplied readings, never mutate
them, and keep no state between calls. Row order does not affect the result.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import pandas as pd

from .assessment import assess
from .errors import EmptyInputError
from .features import round_half_up, round_to_int, summarize
from .models import GlucoseSummary, RangeBand, RangeStats, TimeInRangeResult
from .ranges import BAND_ORDER, classify, threshold_label
from .readings import ReadingsInput, observed_date_range, prepare_readings
from .trends import calculate_time_in_range_trends

logger = logging.getLogger(__name__)


def _require_readings(readings: ReadingsInput) -> pd.DataFrame:
    frame = prepare_readings(readings)
    if frame.empty:
        raise EmptyInputError("No glucose readings provided")
    return frame


def calculate_time_in_range(readings: ReadingsInput) -> TimeInRangeResult:
    """Bucket readings into the five clinical bands and assess control.

    Raises :class:`EmptyInputError` when ``readings`` is empty. Values are not
    validated; negative or NaN readings are used as-is.
    """

    frame = _require_readings(readings)
    values = frame["glucose_mg_dL"].to_numpy(dtype=float)
    total = len(values)

    counts = classify(values)
    raw_percentages = {band: counts[band] / total * 100 for band in BAND_ORDER}
    stats = summarize(values)

    assessment = assess(
        raw_percentages[RangeBand.IN_RANGE],
        raw_percentages[RangeBand.VERY_LOW] + raw_percentages[RangeBand.LOW],
        raw_percentages[RangeBand.HIGH] + raw_percentages[RangeBand.VERY_HIGH],
        raw_percentages[RangeBand.VERY_LOW],
        stats.coefficient_of_variation,
    )
    logger.debug(
        "Time in range for %d readings: %.1f%% in range, overall %s",
        total,
        raw_percentages[RangeBand.IN_RANGE],
        assessment.overall_rating.value,
    )

    ranges = {
        band: RangeStats(
            count=counts[band],
            percentage=round_half_up(raw_percentages[band], 1),
            threshold=threshold_label(band),
        )
        for band in BAND_ORDER
    }
    return TimeInRangeResult(
        total_readings=total,
        date_range=observed_date_range(frame),
        ranges=ranges,
        average_glucose=round_to_int(stats.average),
        standard_deviation=round_to_int(stats.standard_deviation),
        coefficient_of_variation=round_half_up(stats.coefficient_of_variation, 1),
        glucose_management_indicator=round_half_up(stats.glucose_management_indicator, 1),
        assessment=assessment,
    )


def summarize_glucose(readings: ReadingsInput, *, now: Optional[datetime] = None) -> GlucoseSummary:
    """Descriptive statistics plus counts of readings from the last 24 hours / 7 days."""

    frame = _require_readings(readings)
    stats = summarize(frame["glucose_mg_dL"].to_numpy(dtype=float))

    reference = pd.Timestamp(now or datetime.now(timezone.utc))
    if reference.tzinfo is None:
        reference = reference.tz_localize("UTC")
    stamps = frame["timestamp"]
    last_24h = int((stamps >= reference - timedelta(hours=24)).sum())
    last_7d = int((stamps >= reference - timedelta(days=7)).sum())

    return GlucoseSummary(
        total=stats.count,
        average=round_to_int(stats.average),
        minimum=round_to_int(stats.minimum),
        maximum=round_to_int(stats.maximum),
        p25=round_to_int(stats.p25),
        median=round_to_int(stats.median),
        p75=round_to_int(stats.p75),
        standard_deviation=round_to_int(stats.standard_deviation),
        coefficient_of_variation=round_half_up(stats.coefficient_of_variation, 1),
        glucose_management_indicator=round_half_up(stats.glucose_management_indicator, 1),
        last_24h=last_24h,
        last_7d=last_7d,
    )


__all__ = [
    "calculate_time_in_range",
    "calculate_time_in_range_trends",
    "summarize_glucose",
]
