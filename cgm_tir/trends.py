"""Period bucketing and time-in-range trend aggregation."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Final, Iterator, Optional, Union

import pandas as pd

from .features import mean_glucose, round_half_up, round_to_int
from .models import Period, TimeInRangeTrend
from .ranges import IN_RANGE_MAX, IN_RANGE_MIN
from .readings import ReadingsInput, local_dates, prepare_readings

logger = logging.getLogger(__name__)

MIN_READINGS_PER_PERIOD: Final[int] = 10


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""

    return day - timedelta(days=(day.weekday() + 1) % 7)


def period_key(day: date, period: Period) -> str:
    if period is Period.DAILY:
        return day.isoformat()
    if period is Period.WEEKLY:
        return week_start(day).isoformat()
    return f"{day.year:04d}-{day.month:02d}"


def coerce_period(period: Union[Period, str], allowed: tuple[Period, ...]) -> Period:
    try:
        resolved = Period(period)
    except ValueError:
        raise ValueError(f"Unknown period {period!r}") from None
    if resolved not in allowed:
        names = ", ".join(p.value for p in allowed)
        raise ValueError(f"Period {resolved.value!r} not supported here; expected one of: {names}")
    return resolved


def iter_period_groups(
    frame: pd.DataFrame,
    period: Period,
    *,
    timezone: Optional[str] = None,
    min_readings: int = MIN_READINGS_PER_PERIOD,
) -> Iterator[tuple[str, pd.DataFrame]]:
    """Yield ``(key, rows)`` in ascending key order, skipping sparse periods.

    Rows without a parseable timestamp belong to no period and are skipped.
    """

    dated = frame.dropna(subset=["timestamp"])
    if dated.empty:
        return
    keys = local_dates(dated, timezone).map(lambda day: period_key(day, period))
    for key, group in dated.groupby(keys, sort=True):
        if len(group) < min_readings:
            logger.debug("Skipping period %s with %d readings", key, len(group))
            continue
        yield str(key), group


def _percent_of(count: int, total: int) -> float:
    return round_half_up(count / total * 1000) / 10


def calculate_time_in_range_trends(
    readings: ReadingsInput,
    period: Union[Period, str] = Period.DAILY,
    *,
    timezone: Optional[str] = None,
) -> list[TimeInRangeTrend]:
    """Time-in-range percentages per day or Sunday-anchored week.

    Periods with fewer than 10 readings are omitted. An empty input yields an
    empty list.
    """

    resolved = coerce_period(period, (Period.DAILY, Period.WEEKLY))
    frame = prepare_readings(readings)
    if frame.empty:
        return []

    trends: list[TimeInRangeTrend] = []
    for key, group in iter_period_groups(frame, resolved, timezone=timezone):
        values = group["glucose_mg_dL"].to_numpy(dtype=float)
        total = len(values)
        in_range = int(((values >= IN_RANGE_MIN) & (values <= IN_RANGE_MAX)).sum())
        below = int((values < IN_RANGE_MIN).sum())
        above = int((values > IN_RANGE_MAX).sum())
        trends.append(
            TimeInRangeTrend(
                period=key,
                in_range_percentage=_percent_of(in_range, total),
                below_range_percentage=_percent_of(below, total),
                above_range_percentage=_percent_of(above, total),
                average_glucose=round_to_int(mean_glucose(values)),
                reading_count=total,
            )
        )
    return trends


__all__ = [
    "MIN_READINGS_PER_PERIOD",
    "calculate_time_in_range_trends",
    "coerce_period",
    "iter_period_groups",
    "period_key",
    "week_start",
]
