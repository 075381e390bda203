"""Client helpers for fetching glucose readings from a REST endpoint."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from .config import readings_api_token, readings_api_url
from .models import GlucoseReading
from .payloads import parse_readings

logger = logging.getLogger(__name__)


def _isoformat(value: datetime | str) -> str:
    return value.isoformat() if isinstance(value, datetime) else str(value)


def build_query(
    user_id: str,
    *,
    start: Optional[datetime | str] = None,
    end: Optional[datetime | str] = None,
) -> list[tuple[str, str]]:
    """Query parameters selecting a user's readings in ``[start, end]``."""

    params = [
        ("select", "value,system_time"),
        ("user_id", f"eq.{user_id}"),
    ]
    if start is not None:
        params.append(("system_time", f"gte.{_isoformat(start)}"))
    if end is not None:
        params.append(("system_time", f"lte.{_isoformat(end)}"))
    params.append(("order", "system_time.asc"))
    return params


def build_headers(token: Optional[str], extra_headers: dict[str, str] | None = None) -> dict[str, str]:
    headers = {"Accept": "application/json"}
    if token:
        headers["apikey"] = token
        headers["Authorization"] = f"Bearer {token}"
    if extra_headers:
        headers.update(extra_headers)
    return headers


def _parse_body(body: Any, url: str) -> list[GlucoseReading]:
    records = body.get("data") if isinstance(body, dict) else body
    if not isinstance(records, list):
        logger.error(f"Unexpected readings payload from {url}: {body!r}")
        raise RuntimeError(f"Unexpected non-list readings response from {url}")
    readings = parse_readings(records)
    logger.info(f"Fetched {len(readings)} readings from {url}")
    return readings


async def fetch_readings(
    user_id: str,
    *,
    start: Optional[datetime | str] = None,
    end: Optional[datetime | str] = None,
    base_url: Optional[str] = None,
    token: Optional[str] = None,
    client: httpx.AsyncClient | None = None,
    timeout: float | httpx.Timeout = 10.0,
    extra_headers: dict[str, str] | None = None,
) -> list[GlucoseReading]:
    """Fetch a user's glucose readings.

    Parameters
    ----------
    user_id:
        Identifier of the user whose readings should be returned.
    start, end:
        Optional inclusive bounds on the reading time.
    base_url:
        Readings endpoint. Defaults to ``CGM_TIR_READINGS_API_URL``.
    token:
        API key sent as ``apikey`` and bearer token. Defaults to
        ``CGM_TIR_READINGS_API_TOKEN``; omitted when unset.
    client:
        Optional shared ``httpx.AsyncClient``. If not provided, a new client is
        created for the request and closed before returning.
    timeout:
        Timeout passed to ``httpx.AsyncClient`` when an internal client is created.
    extra_headers:
        Optional additional headers to include in the request.

    Returns
    -------
    list[GlucoseReading]
        Readings in the order the endpoint returned them. The body may be a
        bare JSON list or wrapped as ``{"data": [...]}``.
    """

    url = base_url or readings_api_url()
    params = build_query(user_id, start=start, end=end)
    headers = build_headers(token if token is not None else readings_api_token(), extra_headers)

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)
        close_client = True

    try:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return _parse_body(response.json(), url)
    except httpx.HTTPStatusError as exc:
        logger.error(f"HTTP error fetching readings for {user_id}: {exc.response.status_code}")
        raise
    finally:
        if close_client:
            await client.aclose()


def fetch_readings_sync(
    user_id: str,
    *,
    start: Optional[datetime | str] = None,
    end: Optional[datetime | str] = None,
    base_url: Optional[str] = None,
    token: Optional[str] = None,
    client: httpx.Client | None = None,
    timeout: float | httpx.Timeout = 10.0,
    extra_headers: dict[str, str] | None = None,
) -> list[GlucoseReading]:
    """Synchronous counterpart of :func:`fetch_readings`."""

    url = base_url or readings_api_url()
    params = build_query(user_id, start=start, end=end)
    headers = build_headers(token if token is not None else readings_api_token(), extra_headers)

    close_client = False
    if client is None:
        client = httpx.Client(timeout=timeout)
        close_client = True

    try:
        response = client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return _parse_body(response.json(), url)
    except httpx.HTTPStatusError as exc:
        logger.error(f"HTTP error fetching readings for {user_id}: {exc.response.status_code}")
        raise
    finally:
        if close_client:
            client.close()


__all__ = [
    "build_headers",
    "build_query",
    "fetch_readings",
    "fetch_readings_sync",
]
