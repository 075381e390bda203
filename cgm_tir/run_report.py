"""Command-line utility for computing glucose statistics reports.

Readings come from one of three places:

* ``--input FILE`` (repeatable): a JSON list of reading records or a CSV file
  with ``value`` and ``timestamp`` (or ``system_time``) columns::

      [
          {"timestamp": "2025-01-01T00:00:00Z", "value": 110},
          ...
      ]

* ``--data-dir DIR`` with ``--user`` IDs: one ``<user_id>.json`` file per user.
* ``--fetch`` with ``--user`` IDs: readings are requested from the endpoint
  configured by ``CGM_TIR_READINGS_API_URL``.

Results are written as JSON to stdout or to ``--output`` if provided, keyed
by file stem (full path when two stems collide) or user ID. ``--end`` dates
are inclusive of the whole day.
"""
from __future__ import annotations

import argparse
import json
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from importlib import import_module
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol

import httpx
import pandas as pd

from .a1c import calculate_a1c_trends, estimate_a1c
from .calculator import calculate_time_in_range, calculate_time_in_range_trends, summarize_glucose
from .config import log_level
from .payloads import (
    a1c_to_payload,
    a1c_trend_to_payload,
    json_safe,
    parse_readings,
    report_to_payload,
    summary_to_payload,
    trend_to_payload,
)
from .readings_client import fetch_readings_sync

logger = logging.getLogger(__name__)


class ReadingSource(Protocol):
    """Protocol for loading the readings of one user or file."""

    def load(self, key: str) -> Any:
        ...


def load_readings_file(path: Path) -> Any:
    """Read a JSON list of records or a CSV file of readings."""

    if path.suffix.lower() == ".csv":
        return pd.read_csv(path)
    with path.open() as handle:
        records = json.load(handle)
    if isinstance(records, dict):
        records = records.get("readings") or records.get("data") or []
    return parse_readings(records)


class FileSource:
    """Loads readings from explicit file paths, keyed by path."""

    def load(self, key: str) -> Any:
        path = Path(key)
        if not path.exists():
            raise FileNotFoundError(f"Readings file not found: {path}")
        return load_readings_file(path)


class JsonDirectorySource:
    """Reads per-user ``<user_id>.json`` reading files."""

    def __init__(self, root: Path) -> None:
        if not root.is_dir():
            raise ValueError(f"Readings directory not found: {root}")
        self._root = root

    def load(self, key: str) -> Any:
        file_path = self._root / f"{key}.json"
        if not file_path.exists():
            raise FileNotFoundError(f"Missing readings file for user {key}: {file_path}")
        return load_readings_file(file_path)


class HttpSource:
    """Fetches readings from the configured REST endpoint."""

    def __init__(self, start: datetime | None = None, end: datetime | None = None) -> None:
        self._start = start
        self._end = end

    def load(self, key: str) -> Any:
        return fetch_readings_sync(key, start=self._start, end=self._end)


class CallableSource:
    """Wraps a Python callable returning reading records for a user."""

    def __init__(self, fetcher: Callable[[str], Iterable[Any]]) -> None:
        self._fetcher = fetcher

    def load(self, key: str) -> Any:
        records = self._fetcher(key)
        if isinstance(records, pd.DataFrame):
            return records
        return list(records)


def build_report(
    readings: Any,
    *,
    period: str = "daily",
    a1c_period: str = "monthly",
    timezone_name: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Compute every statistic for one reading set as a JSON-ready dict.

    Non-finite statistics (from NaN readings) are emitted as ``None``.
    """

    result = calculate_time_in_range(readings)
    summary = summarize_glucose(readings, now=now)
    trends = calculate_time_in_range_trends(readings, period, timezone=timezone_name)
    a1c = estimate_a1c(readings)
    a1c_trends = calculate_a1c_trends(readings, a1c_period, timezone=timezone_name)
    return json_safe(
        {
            "report": report_to_payload(result).model_dump(mode="json"),
            "summary": summary_to_payload(summary).model_dump(mode="json"),
            "trends": [trend_to_payload(trend).model_dump(mode="json") for trend in trends],
            "a1c": a1c_to_payload(a1c).model_dump(mode="json"),
            "a1cTrends": [a1c_trend_to_payload(trend).model_dump(mode="json") for trend in a1c_trends],
        }
    )


def result_labels(keys: list[str], source: ReadingSource) -> dict[str, str]:
    """Output key per input key: file stems, or full paths where stems collide."""

    if not isinstance(source, FileSource):
        return {key: key for key in keys}
    stems = Counter(Path(key).stem for key in keys)
    return {key: Path(key).stem if stems[Path(key).stem] == 1 else key for key in keys}


def run(
    keys: list[str],
    source: ReadingSource,
    *,
    period: str = "daily",
    a1c_period: str = "monthly",
    timezone_name: str | None = None,
    now: datetime | None = None,
) -> dict[str, dict[str, Any]]:
    labels = result_labels(keys, source)
    results: dict[str, dict[str, Any]] = {}
    for key in keys:
        label = labels[key]
        try:
            readings = source.load(key)
            results[label] = build_report(
                readings,
                period=period,
                a1c_period=a1c_period,
                timezone_name=timezone_name,
                now=now,
            )
        except (FileNotFoundError, ValueError, RuntimeError, httpx.HTTPError) as exc:
            logger.error(f"Skipping {label}: {exc}")
            results[label] = {"error": str(exc)}
    return results


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute time-in-range reports from glucose readings")
    parser.add_argument("--input", action="append", type=Path, help="JSON or CSV readings file (may be repeated)")
    parser.add_argument("--data-dir", type=Path, help="Directory containing <user_id>.json files")
    parser.add_argument("--user", action="append", help="User ID to process (may be repeated)")
    parser.add_argument("--fetch", action="store_true", help="Fetch readings for --user IDs over HTTP")
    parser.add_argument(
        "--fetcher",
        help="Python callable (module:function) that returns reading records per user",
    )
    parser.add_argument("--start", type=str, help="Start date for --fetch (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="End date for --fetch (YYYY-MM-DD)")
    parser.add_argument("--period", choices=("daily", "weekly"), default="daily", help="Trend bucket size")
    parser.add_argument(
        "--a1c-period",
        choices=("weekly", "monthly"),
        default="monthly",
        help="A1C trend bucket size",
    )
    parser.add_argument("--timezone", help="IANA timezone used to assign readings to dates (default: UTC)")
    parser.add_argument("--output", type=Path, help="Optional output JSON file")
    parser.add_argument("--indent", type=int, default=None, help="Pretty-print JSON with the given indent")
    parser.add_argument("--log-level", help="Logging level (default: CGM_TIR_LOG_LEVEL or WARNING)")
    return parser.parse_args(argv)


def _resolve_callable(path: str) -> Callable[[str], Iterable[Any]]:
    try:
        module_name, func_name = path.rsplit(":", 1)
    except ValueError as exc:
        raise ValueError("Fetcher must be in 'module:function' format") from exc
    module = import_module(module_name)
    func = getattr(module, func_name, None)
    if not callable(func):
        raise TypeError(f"{path!r} is not callable")
    return func


def _parse_day(value: str | None, *, end_of_day: bool = False) -> datetime | None:
    """Parse ``--start``/``--end``; a bare ``--end`` date covers that whole day."""

    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if end_of_day and len(value) == 10:
        parsed += timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def _build_source(args: argparse.Namespace) -> tuple[list[str], ReadingSource]:
    if args.input:
        return [str(path) for path in args.input], FileSource()
    if not args.user:
        raise SystemExit("No readings provided. Use --input, or --user with --data-dir/--fetch/--fetcher.")
    if args.fetcher:
        return list(args.user), CallableSource(_resolve_callable(args.fetcher))
    if args.fetch:
        return list(args.user), HttpSource(start=_parse_day(args.start), end=_parse_day(args.end, end_of_day=True))
    if args.data_dir:
        return list(args.user), JsonDirectorySource(args.data_dir)
    raise SystemExit("--user requires one of --data-dir, --fetch or --fetcher")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=log_level(args.log_level), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    keys, source = _build_source(args)
    results = run(
        keys,
        source,
        period=args.period,
        a1c_period=args.a1c_period,
        timezone_name=args.timezone,
    )

    output_text = json.dumps(results, indent=args.indent, allow_nan=False)
    if args.output:
        args.output.write_text(output_text)
    else:
        print(output_text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
