"""Numeric helpers for glucose statistics."""
from __future__ import annotations

import math
from typing import Final, Sequence

import numpy as np

from .models import StatisticalSummary

GMI_INTERCEPT: Final[float] = 3.31
GMI_SLOPE: Final[float] = 0.02392


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties towards positive infinity.

    Python's ``round`` uses banker's rounding; reported figures expect
    ``floor(x * 10**n + 0.5) / 10**n`` instead. NaN and infinities pass
    through unchanged.
    """

    if not math.isfinite(value):
        return value
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_to_int(value: float) -> int | float:
    """Nearest integer (ties up); NaN and infinities are returned as floats."""

    rounded = round_half_up(value)
    return int(rounded) if math.isfinite(rounded) else rounded


def mean_glucose(values: np.ndarray) -> float:
    return float(np.sum(values) / len(values))


def population_std(values: np.ndarray) -> float:
    """Standard deviation dividing by N."""

    avg = mean_glucose(values)
    return math.sqrt(float(np.sum((values - avg) ** 2) / len(values)))


def coefficient_of_variation(std: float, mean: float) -> float:
    """CV as a percentage. Division by a zero mean follows IEEE semantics."""

    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(std) / np.float64(mean) * 100.0)


def glucose_management_indicator(mean: float) -> float:
    """Estimated A1C (%) from mean glucose in mg/dL."""

    return GMI_INTERCEPT + GMI_SLOPE * mean


def floor_percentile(sorted_values: Sequence[float] | np.ndarray, fraction: float) -> float:
    """Value at index ``floor(N * fraction)`` of an ascending sequence (no interpolation)."""

    index = math.floor(len(sorted_values) * fraction)
    return float(sorted_values[index])


def summarize(values: Sequence[float] | np.ndarray) -> StatisticalSummary:
    """Compute unrounded descriptive statistics; ``values`` must be non-empty."""

    array = np.asarray(values, dtype=float)
    average = mean_glucose(array)
    std = population_std(array)
    ordered = np.sort(array)
    return StatisticalSummary(
        count=len(array),
        average=average,
        standard_deviation=std,
        coefficient_of_variation=coefficient_of_variation(std, average),
        glucose_management_indicator=glucose_management_indicator(average),
        minimum=float(np.min(array)),
        maximum=float(np.max(array)),
        p25=floor_percentile(ordered, 0.25),
        median=floor_percentile(ordered, 0.5),
        p75=floor_percentile(ordered, 0.75),
    )


__all__ = [
    "GMI_INTERCEPT",
    "GMI_SLOPE",
    "coefficient_of_variation",
    "floor_percentile",
    "glucose_management_indicator",
    "mean_glucose",
    "population_std",
    "round_half_up",
    "round_to_int",
    "summarize",
]
