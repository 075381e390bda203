"""Glucose time-in-range statistics library."""

from .a1c import calculate_a1c, calculate_a1c_trends, estimate_a1c
from .assessment import assess, tir_color
from .calculator import calculate_time_in_range, calculate_time_in_range_trends, summarize_glucose
from .errors import EmptyInputError, InvalidA1CError, InvalidGlucoseError, NoReadingsInRangeError
from .models import (
    A1CCategory,
    A1CEstimate,
    A1CTrend,
    Assessment,
    DateRange,
    GlucoseReading,
    GlucoseSummary,
    Period,
    RangeBand,
    RangeStats,
    Rating,
    TimeInRangeResult,
    TimeInRangeTrend,
)
from .registry import RecommendationRegistry, register_rule, registry
from .rule_base import AssessmentContext, RecommendationRule

__all__ = [
    "A1CCategory",
    "A1CEstimate",
    "A1CTrend",
    "Assessment",
    "AssessmentContext",
    "DateRange",
    "EmptyInputError",
    "GlucoseReading",
    "GlucoseSummary",
    "InvalidA1CError",
    "InvalidGlucoseError",
    "NoReadingsInRangeError",
    "Period",
    "RangeBand",
    "RangeStats",
    "Rating",
    "RecommendationRegistry",
    "RecommendationRule",
    "TimeInRangeResult",
    "TimeInRangeTrend",
    "assess",
    "calculate_a1c",
    "calculate_a1c_trends",
    "calculate_time_in_range",
    "calculate_time_in_range_trends",
    "estimate_a1c",
    "register_rule",
    "registry",
    "summarize_glucose",
    "tir_color",
]
