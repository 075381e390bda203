"""Estimated A1C (ADAG formula) from glucose readings."""
from __future__ import annotations

import logging
from typing import Any, Final, Mapping, Optional, Union

from .errors import EmptyInputError, InvalidA1CError, InvalidGlucoseError, NoReadingsInRangeError
from .features import mean_glucose, round_half_up, round_to_int
from .models import A1CCategory, A1CEstimate, A1CTrend, Period
from .readings import ReadingsInput, filter_by_time, observed_date_range, prepare_readings
from .trends import coerce_period, iter_period_groups

logger = logging.getLogger(__name__)

ADAG_OFFSET: Final[float] = 46.7
ADAG_SLOPE: Final[float] = 28.7

A1C_TARGETS: Final[Mapping[str, Mapping[str, Any]]] = {
    "excellent": {"max": 5.7, "label": "Non-diabetic", "color": "green"},
    "good": {"max": 6.5, "label": "Prediabetic", "color": "blue"},
    "target": {"max": 7.0, "label": "ADA Target", "color": "yellow"},
    "elevated": {"max": 8.0, "label": "Elevated", "color": "orange"},
    "high": {"min": 8.0, "label": "High Risk", "color": "red"},
}

_RECOMMENDATIONS: Final[Mapping[A1CCategory, str]] = {
    A1CCategory.EXCELLENT: (
        "Excellent control! Your A1C is in the non-diabetic range. Keep up the great work!"
    ),
    A1CCategory.GOOD: (
        "Good control. Your A1C is in the prediabetic range. Continue your current management plan."
    ),
    A1CCategory.FAIR: (
        "Fair control. Your A1C is at the ADA target for many adults with diabetes. "
        "Discuss with your healthcare provider if tighter control is appropriate."
    ),
    A1CCategory.POOR: (
        "Your A1C is above the recommended target. Work with your healthcare team to "
        "adjust your diabetes management plan."
    ),
    A1CCategory.VERY_POOR: (
        "Your A1C is significantly elevated. Please consult with your healthcare provider "
        "urgently to adjust your treatment plan."
    ),
}


def calculate_a1c(average_glucose: float) -> float:
    """eA1C (%) = (average glucose + 46.7) / 28.7, one decimal."""

    if average_glucose < 0 or average_glucose > 600:
        raise InvalidGlucoseError(f"Invalid glucose value: {average_glucose}")
    return round_half_up((average_glucose + ADAG_OFFSET) / ADAG_SLOPE, 1)


def glucose_from_a1c(a1c: float) -> int:
    """Average glucose (mg/dL) implied by an A1C percentage."""

    if a1c < 4 or a1c > 15:
        raise InvalidA1CError(f"Invalid A1C value: {a1c}")
    return round_to_int(a1c * ADAG_SLOPE - ADAG_OFFSET)


def categorize_a1c(a1c: float) -> A1CCategory:
    if a1c < 5.7:
        return A1CCategory.EXCELLENT
    if a1c < 6.5:
        return A1CCategory.GOOD
    if a1c < 7.0:
        return A1CCategory.FAIR
    if a1c < 8.0:
        return A1CCategory.POOR
    return A1CCategory.VERY_POOR


def a1c_recommendation(a1c: float) -> str:
    return _RECOMMENDATIONS[categorize_a1c(a1c)]


def estimate_a1c(
    readings: ReadingsInput,
    start: Optional[Any] = None,
    end: Optional[Any] = None,
) -> A1CEstimate:
    """Estimate A1C from readings, optionally limited to ``[start, end]``."""

    frame = prepare_readings(readings)
    if frame.empty:
        raise EmptyInputError("No glucose readings provided")

    if start is not None or end is not None:
        frame = filter_by_time(frame, start, end)
        if frame.empty:
            raise NoReadingsInRangeError("No readings in specified date range")

    values = frame["glucose_mg_dL"].to_numpy(dtype=float)
    average = mean_glucose(values)
    estimated = calculate_a1c(average)
    logger.debug("Estimated A1C %.1f from %d readings", estimated, len(values))

    return A1CEstimate(
        estimated_a1c=estimated,
        average_glucose=round_to_int(average),
        reading_count=len(values),
        date_range=observed_date_range(frame),
        category=categorize_a1c(estimated),
        recommendation=a1c_recommendation(estimated),
    )


def calculate_a1c_trends(
    readings: ReadingsInput,
    period: Union[Period, str] = Period.MONTHLY,
    *,
    timezone: Optional[str] = None,
) -> list[A1CTrend]:
    """Estimated A1C per week or month with change from the previous period."""

    resolved = coerce_period(period, (Period.WEEKLY, Period.MONTHLY))
    frame = prepare_readings(readings)
    if frame.empty:
        return []

    trends: list[A1CTrend] = []
    previous: Optional[float] = None
    for key, group in iter_period_groups(frame, resolved, timezone=timezone):
        values = group["glucose_mg_dL"].to_numpy(dtype=float)
        average = mean_glucose(values)
        estimated = calculate_a1c(average)

        change: Optional[float] = None
        change_percentage: Optional[float] = None
        if previous is not None:
            change = round_half_up(estimated - previous, 1)
            change_percentage = round_half_up((estimated - previous) / previous * 100, 1)

        trends.append(
            A1CTrend(
                period=key,
                estimated_a1c=estimated,
                average_glucose=round_to_int(average),
                reading_count=len(values),
                change=change,
                change_percentage=change_percentage,
            )
        )
        previous = estimated
    return trends


__all__ = [
    "A1C_TARGETS",
    "a1c_recommendation",
    "calculate_a1c",
    "calculate_a1c_trends",
    "categorize_a1c",
    "estimate_a1c",
    "glucose_from_a1c",
]
