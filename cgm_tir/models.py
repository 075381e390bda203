"""Core data models for glucose time-in-range statistics."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional, Sequence, Union


class RangeBand(str, Enum):
    """Clinical glucose bands (ADA/ATTD consensus)."""

    VERY_LOW = "very_low"
    LOW = "low"
    IN_RANGE = "in_range"
    HIGH = "high"
    VERY_HIGH = "very_high"


class Rating(str, Enum):
    """Qualitative rating for a time-in-range category."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class A1CCategory(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    VERY_POOR = "very_poor"


class Period(str, Enum):
    """Bucket granularity for trend aggregation."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class GlucoseReading:
    """Single glucose reading in mg/dL."""

    value: float
    timestamp: Union[datetime, str]


@dataclass(frozen=True)
class DateRange:
    """Earliest and latest reading timestamps observed."""

    start: Optional[datetime]
    end: Optional[datetime]


@dataclass(frozen=True)
class RangeStats:
    count: int
    percentage: float
    threshold: str


@dataclass(frozen=True)
class Assessment:
    """Ratings per category plus ordered recommendation text."""

    tir_rating: Rating
    below_range_rating: Rating
    above_range_rating: Rating
    overall_rating: Rating
    recommendations: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class TimeInRangeResult:
    """Time-in-range report for a set of readings."""

    total_readings: int
    date_range: DateRange
    ranges: Mapping[RangeBand, RangeStats]
    average_glucose: int
    standard_deviation: int
    coefficient_of_variation: float
    glucose_management_indicator: float
    assessment: Assessment

    def percentage(self, band: RangeBand) -> float:
        return self.ranges[band].percentage

    def count(self, band: RangeBand) -> int:
        return self.ranges[band].count


@dataclass(frozen=True)
class TimeInRangeTrend:
    """Aggregated range percentages for one period bucket."""

    period: str
    in_range_percentage: float
    below_range_percentage: float
    above_range_percentage: float
    average_glucose: int
    reading_count: int


@dataclass(frozen=True)
class StatisticalSummary:
    """Unrounded descriptive statistics over glucose values."""

    count: int
    average: float
    standard_deviation: float
    coefficient_of_variation: float
    glucose_management_indicator: float
    minimum: float
    maximum: float
    p25: float
    median: float
    p75: float


@dataclass(frozen=True)
class GlucoseSummary:
    """Rounded statistics as displayed on a dashboard card."""

    total: int
    average: int
    minimum: int
    maximum: int
    p25: int
    median: int
    p75: int
    standard_deviation: int
    coefficient_of_variation: float
    glucose_management_indicator: float
    last_24h: int
    last_7d: int


@dataclass(frozen=True)
class A1CEstimate:
    estimated_a1c: float
    average_glucose: int
    reading_count: int
    date_range: DateRange
    category: A1CCategory
    recommendation: str


@dataclass(frozen=True)
class A1CTrend:
    period: str
    estimated_a1c: float
    average_glucose: int
    reading_count: int
    change: Optional[float] = None
    change_percentage: Optional[float] = None
