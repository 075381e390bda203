"""Normalise caller-supplied glucose readings into a dataframe."""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Union
from zoneinfo import ZoneInfo

import pandas as pd

from .models import DateRange, GlucoseReading

READING_COLUMNS = ["timestamp", "glucose_mg_dL"]
TIMESTAMP_KEYS = ("timestamp", "system_time", "systemTime")
VALUE_KEYS = ("value", "glucose_mg_dL")

ReadingsInput = Union[pd.DataFrame, Iterable[Any], None]


def _first_present(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return None


def _record_to_row(record: Any) -> tuple[Any, Any]:
    if isinstance(record, GlucoseReading):
        return record.timestamp, record.value
    if isinstance(record, Mapping):
        return _first_present(record, TIMESTAMP_KEYS), _first_present(record, VALUE_KEYS)
    if hasattr(record, "value") and hasattr(record, "timestamp"):
        return record.timestamp, record.value
    raise TypeError(f"Unsupported glucose reading type: {type(record).__name__}")


def _frame_column(frame: pd.DataFrame, keys: tuple[str, ...]) -> pd.Series:
    for key in keys:
        if key in frame.columns:
            return frame[key]
    raise ValueError(f"Readings frame needs one of the columns {keys}")


def prepare_readings(readings: ReadingsInput) -> pd.DataFrame:
    """Return a frame with UTC ``timestamp`` and float ``glucose_mg_dL`` columns.

    Rows are kept in input order and nothing is filtered: unparseable
    timestamps become ``NaT`` and non-numeric values become NaN so they flow
    through the statistics unchanged.
    """

    if readings is None:
        return pd.DataFrame(columns=READING_COLUMNS)

    if isinstance(readings, pd.DataFrame):
        if readings.empty:
            return pd.DataFrame(columns=READING_COLUMNS)
        timestamps = _frame_column(readings, TIMESTAMP_KEYS)
        values = _frame_column(readings, VALUE_KEYS)
        frame = pd.DataFrame({"timestamp": timestamps.to_numpy(), "glucose_mg_dL": values.to_numpy()})
    else:
        rows = [_record_to_row(record) for record in readings]
        if not rows:
            return pd.DataFrame(columns=READING_COLUMNS)
        frame = pd.DataFrame(rows, columns=READING_COLUMNS)

    frame["timestamp"] = pd.to_datetime(frame["timestamp"], utc=True, errors="coerce", format="mixed")
    frame["glucose_mg_dL"] = pd.to_numeric(frame["glucose_mg_dL"], errors="coerce").astype(float)
    return frame.reset_index(drop=True)


def local_dates(frame: pd.DataFrame, timezone: Optional[str] = None) -> pd.Series:
    """Calendar date of each reading, in UTC unless ``timezone`` is given."""

    stamps = frame["timestamp"]
    if timezone:
        stamps = stamps.dt.tz_convert(ZoneInfo(timezone))
    return stamps.dt.date


def observed_date_range(frame: pd.DataFrame) -> DateRange:
    """Earliest/latest parseable timestamp, independent of row order."""

    stamps = frame["timestamp"].dropna()
    if stamps.empty:
        return DateRange(start=None, end=None)
    return DateRange(start=stamps.min().to_pydatetime(), end=stamps.max().to_pydatetime())


def filter_by_time(
    frame: pd.DataFrame,
    start: Optional[Any] = None,
    end: Optional[Any] = None,
) -> pd.DataFrame:
    """Keep rows whose timestamp lies within ``[start, end]`` (both optional)."""

    mask = pd.Series(True, index=frame.index)
    if start is not None:
        mask &= frame["timestamp"] >= _as_utc(start)
    if end is not None:
        mask &= frame["timestamp"] <= _as_utc(end)
    return frame.loc[mask]


def _as_utc(value: Any) -> pd.Timestamp:
    stamp = pd.Timestamp(value)
    if stamp.tzinfo is None:
        return stamp.tz_localize("UTC")
    return stamp.tz_convert("UTC")


__all__ = [
    "READING_COLUMNS",
    "filter_by_time",
    "local_dates",
    "observed_date_range",
    "prepare_readings",
]
