"""Clinical glucose bands and reading classification."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Iterable, Mapping

import numpy as np

from .models import RangeBand


@dataclass(frozen=True)
class GlucoseBand:
    """Display metadata for a band; ``max_mg_dl`` is the upper boundary."""

    min_mg_dl: float
    max_mg_dl: float
    label: str
    color: str


GLUCOSE_RANGES: Final[Mapping[RangeBand, GlucoseBand]] = {
    RangeBand.VERY_LOW: GlucoseBand(0, 54, "Very Low", "red"),
    RangeBand.LOW: GlucoseBand(54, 70, "Low", "orange"),
    RangeBand.IN_RANGE: GlucoseBand(70, 180, "In Range", "green"),
    RangeBand.HIGH: GlucoseBand(180, 250, "High", "yellow"),
    RangeBand.VERY_HIGH: GlucoseBand(250, 600, "Very High", "red"),
}

VERY_LOW_MAX: Final[float] = GLUCOSE_RANGES[RangeBand.VERY_LOW].max_mg_dl
LOW_MAX: Final[float] = GLUCOSE_RANGES[RangeBand.LOW].max_mg_dl
IN_RANGE_MIN: Final[float] = GLUCOSE_RANGES[RangeBand.IN_RANGE].min_mg_dl
IN_RANGE_MAX: Final[float] = GLUCOSE_RANGES[RangeBand.IN_RANGE].max_mg_dl
HIGH_MAX: Final[float] = GLUCOSE_RANGES[RangeBand.HIGH].max_mg_dl

BAND_ORDER: Final[tuple[RangeBand, ...]] = tuple(GLUCOSE_RANGES)


@dataclass(frozen=True)
class TirTarget:
    """Percentage cut-offs for one assessment category.

    ``target`` and ``good`` share the same value in every category, so the
    ``good`` tier is never reached.
    """

    target: float
    good: float
    fair: float


TIR_TARGETS: Final[Mapping[str, TirTarget]] = {
    "in_range": TirTarget(target=70, good=70, fair=50),
    "below_range": TirTarget(target=4, good=4, fair=10),
    "very_low": TirTarget(target=1, good=1, fair=5),
    "above_range": TirTarget(target=25, good=25, fair=40),
    "very_high": TirTarget(target=5, good=5, fair=15),
}

HIGH_VARIABILITY_CV: Final[float] = 36.0


def threshold_label(band: RangeBand) -> str:
    """Human-readable band boundaries, e.g. ``70-180 mg/dL``."""

    bounds = GLUCOSE_RANGES[band]
    if band is RangeBand.VERY_LOW:
        return f"< {bounds.max_mg_dl:g} mg/dL"
    if band is RangeBand.VERY_HIGH:
        return f"> {HIGH_MAX:g} mg/dL"
    return f"{bounds.min_mg_dl:g}-{bounds.max_mg_dl:g} mg/dL"


def band_for(value: float) -> RangeBand:
    """Return the band a single reading falls into.

    70 and 180 are in range, 54 is low and 250 is high. A NaN value fails
    every comparison and lands in ``VERY_HIGH``.
    """

    if value < VERY_LOW_MAX:
        return RangeBand.VERY_LOW
    if value < LOW_MAX:
        return RangeBand.LOW
    if value <= IN_RANGE_MAX:
        return RangeBand.IN_RANGE
    if value <= HIGH_MAX:
        return RangeBand.HIGH
    return RangeBand.VERY_HIGH


def band_masks(values: np.ndarray) -> dict[RangeBand, np.ndarray]:
    """Boolean membership mask per band; masks are disjoint and exhaustive."""

    very_low = values < VERY_LOW_MAX
    low = ~very_low & (values < LOW_MAX)
    in_range = ~very_low & ~low & (values <= IN_RANGE_MAX)
    high = ~very_low & ~low & ~in_range & (values <= HIGH_MAX)
    very_high = ~(very_low | low | in_range | high)
    return {
        RangeBand.VERY_LOW: very_low,
        RangeBand.LOW: low,
        RangeBand.IN_RANGE: in_range,
        RangeBand.HIGH: high,
        RangeBand.VERY_HIGH: very_high,
    }


def classify(values: Iterable[float] | np.ndarray) -> dict[RangeBand, int]:
    """Count readings per band."""

    array = np.asarray(list(values) if not isinstance(values, np.ndarray) else values, dtype=float)
    return {band: int(mask.sum()) for band, mask in band_masks(array).items()}


__all__ = [
    "BAND_ORDER",
    "GLUCOSE_RANGES",
    "GlucoseBand",
    "HIGH_VARIABILITY_CV",
    "TIR_TARGETS",
    "TirTarget",
    "band_for",
    "band_masks",
    "classify",
    "threshold_label",
]
