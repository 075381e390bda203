"""Rule-based qualitative assessment of time-in-range percentages."""
from __future__ import annotations

from typing import Final

from .models import Assessment, Rating
from .ranges import TIR_TARGETS, TirTarget
from .recommendations import ON_TRACK_MESSAGE  # registers the default rules
from .registry import RecommendationRegistry, registry
from .rule_base import AssessmentContext

# Worst first.
RATING_ORDER: Final[tuple[Rating, ...]] = (Rating.POOR, Rating.FAIR, Rating.GOOD, Rating.EXCELLENT)


def rate_at_least(percentage: float, target: TirTarget) -> Rating:
    """Rating for a category where higher is better (time in range)."""

    if percentage >= target.target:
        return Rating.EXCELLENT
    if percentage >= target.good:
        return Rating.GOOD
    if percentage >= target.fair:
        return Rating.FAIR
    return Rating.POOR


def rate_at_most(percentage: float, target: TirTarget) -> Rating:
    """Rating for a category where lower is better (time below/above range)."""

    if percentage <= target.target:
        return Rating.EXCELLENT
    if percentage <= target.good:
        return Rating.GOOD
    if percentage <= target.fair:
        return Rating.FAIR
    return Rating.POOR


def worst_rating(*ratings: Rating) -> Rating:
    for candidate in RATING_ORDER:
        if candidate in ratings:
            return candidate
    return Rating.EXCELLENT


def assess(
    in_range_percentage: float,
    below_range_percentage: float,
    above_range_percentage: float,
    very_low_percentage: float,
    coefficient_of_variation: float,
    *,
    rules: RecommendationRegistry | None = None,
) -> Assessment:
    """Rate each category, take the worst as overall and collect recommendations.

    Every registered rule is evaluated independently, so several
    recommendations can co-occur. When none fires a single on-track message
    is returned.
    """

    tir_rating = rate_at_least(in_range_percentage, TIR_TARGETS["in_range"])
    below_rating = rate_at_most(below_range_percentage, TIR_TARGETS["below_range"])
    above_rating = rate_at_most(above_range_percentage, TIR_TARGETS["above_range"])

    context = AssessmentContext(
        in_range_percentage=in_range_percentage,
        below_range_percentage=below_range_percentage,
        above_range_percentage=above_range_percentage,
        very_low_percentage=very_low_percentage,
        coefficient_of_variation=coefficient_of_variation,
        tir_rating=tir_rating,
        below_range_rating=below_rating,
        above_range_rating=above_rating,
    )
    messages = (rules if rules is not None else registry).recommend_all(context)
    if not messages:
        messages = [ON_TRACK_MESSAGE]

    return Assessment(
        tir_rating=tir_rating,
        below_range_rating=below_rating,
        above_range_rating=above_rating,
        overall_rating=worst_rating(tir_rating, below_rating, above_rating),
        recommendations=tuple(messages),
    )


def tir_color(percentage: float) -> str:
    """Display colour for a time-in-range percentage."""

    target = TIR_TARGETS["in_range"]
    if percentage >= target.target:
        return "green"
    if percentage >= target.good:
        return "blue"
    if percentage >= target.fair:
        return "yellow"
    return "red"


__all__ = [
    "RATING_ORDER",
    "assess",
    "rate_at_least",
    "rate_at_most",
    "tir_color",
    "worst_rating",
]
