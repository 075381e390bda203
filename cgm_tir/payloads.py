"""
Wire models for glucose readings and computed statistics.
"""
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .models import (
    A1CEstimate,
    A1CTrend,
    DateRange,
    GlucoseReading,
    GlucoseSummary,
    RangeBand,
    TimeInRangeResult,
    TimeInRangeTrend,
)

# Rounded statistics are ints; NaN stays a float.
Number = Union[int, float]

# camelCase keys expected by report consumers
BAND_KEYS: Dict[RangeBand, str] = {
    RangeBand.VERY_LOW: "veryLow",
    RangeBand.LOW: "low",
    RangeBand.IN_RANGE: "inRange",
    RangeBand.HIGH: "high",
    RangeBand.VERY_HIGH: "veryHigh",
}


class GlucoseReadingPayload(BaseModel):
    """
    Inbound glucose reading record.

    Unparseable values become NaN instead of failing validation, matching how
    dataframe input is coerced.
    """
    model_config = ConfigDict(populate_by_name=True)

    value: Optional[float] = Field(default=None, description="Glucose in mg/dL")
    timestamp: Optional[Union[datetime, str]] = Field(
        default=None,
        validation_alias=AliasChoices("timestamp", "system_time", "systemTime"),
        description="Time the reading was recorded",
    )

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def to_reading(self) -> GlucoseReading:
        value = float("nan") if self.value is None else self.value
        return GlucoseReading(value=value, timestamp=self.timestamp)


class ReportModel(BaseModel):
    """
    Base for outbound payloads; non-finite numbers serialise as JSON null.
    """
    model_config = ConfigDict(ser_json_inf_nan="null")


def json_safe(data: Any) -> Any:
    """Replace NaN and infinities in dumped payload data with ``None``."""

    if isinstance(data, float):
        return data if math.isfinite(data) else None
    if isinstance(data, dict):
        return {key: json_safe(item) for key, item in data.items()}
    if isinstance(data, (list, tuple)):
        return [json_safe(item) for item in data]
    return data


class DateRangePayload(ReportModel):
    start: Optional[datetime] = Field(default=None, description="Earliest reading")
    end: Optional[datetime] = Field(default=None, description="Latest reading")


class RangeStatsPayload(ReportModel):
    count: int = Field(description="Readings in the band")
    percentage: float = Field(description="Share of readings, one decimal")
    threshold: str = Field(description="Band boundaries label")


class AssessmentPayload(ReportModel):
    tirRating: str = Field(description="Time in range rating")
    belowRangeRating: str = Field(description="Time below range rating")
    aboveRangeRating: str = Field(description="Time above range rating")
    overallRating: str = Field(description="Worst of the three ratings")
    recommendations: List[str] = Field(default_factory=list, description="Recommendation text")


class TimeInRangeReportPayload(ReportModel):
    """
    Outbound time-in-range report.
    """
    totalReadings: int = Field(description="Number of readings")
    dateRange: DateRangePayload = Field(description="Observed date range")
    ranges: Dict[str, RangeStatsPayload] = Field(description="Per-band statistics")
    averageGlucose: Optional[Number] = Field(default=None, description="Mean glucose in mg/dL")
    standardDeviation: Optional[Number] = Field(default=None, description="Population SD in mg/dL")
    coefficientOfVariation: Optional[float] = Field(default=None, description="CV in percent")
    glucoseManagementIndicator: Optional[float] = Field(default=None, description="GMI in percent")
    assessment: AssessmentPayload = Field(description="Qualitative assessment")


class TimeInRangeTrendPayload(ReportModel):
    period: str = Field(description="Period key")
    inRangePercentage: float = Field(description="Percent in range")
    belowRangePercentage: float = Field(description="Percent below range")
    aboveRangePercentage: float = Field(description="Percent above range")
    averageGlucose: Optional[Number] = Field(default=None, description="Mean glucose in mg/dL")
    readingCount: int = Field(description="Readings in the period")


class GlucoseSummaryPayload(ReportModel):
    total: int
    average: Optional[Number] = None
    min: Optional[Number] = None
    max: Optional[Number] = None
    median: Optional[Number] = None
    p25: Optional[Number] = None
    p75: Optional[Number] = None
    standardDeviation: Optional[Number] = None
    cv: Optional[float] = None
    gmi: Optional[float] = None
    last24h: int = 0
    last7d: int = 0


class A1CEstimatePayload(ReportModel):
    estimatedA1C: Optional[float] = Field(default=None, description="Estimated A1C in percent")
    averageGlucose: Optional[Number] = Field(default=None, description="Mean glucose in mg/dL")
    readingCount: int = Field(description="Readings used")
    dateRange: DateRangePayload = Field(description="Observed date range")
    category: str = Field(description="A1C category")
    recommendation: str = Field(description="Recommendation text")


class A1CTrendPayload(ReportModel):
    period: str
    estimatedA1C: Optional[float] = None
    averageGlucose: Optional[Number] = None
    readingCount: int
    change: Optional[float] = None
    changePercentage: Optional[float] = None


def parse_readings(records: Sequence[dict]) -> List[GlucoseReading]:
    """Validate raw JSON records into readings."""

    return [GlucoseReadingPayload.model_validate(record).to_reading() for record in records]


def _date_range_payload(date_range: DateRange) -> DateRangePayload:
    return DateRangePayload(start=date_range.start, end=date_range.end)


def report_to_payload(result: TimeInRangeResult) -> TimeInRangeReportPayload:
    assessment = result.assessment
    return TimeInRangeReportPayload(
        totalReadings=result.total_readings,
        dateRange=_date_range_payload(result.date_range),
        ranges={
            BAND_KEYS[band]: RangeStatsPayload(count=stats.count, percentage=stats.percentage, threshold=stats.threshold)
            for band, stats in result.ranges.items()
        },
        averageGlucose=result.average_glucose,
        standardDeviation=result.standard_deviation,
        coefficientOfVariation=result.coefficient_of_variation,
        glucoseManagementIndicator=result.glucose_management_indicator,
        assessment=AssessmentPayload(
            tirRating=assessment.tir_rating.value,
            belowRangeRating=assessment.below_range_rating.value,
            aboveRangeRating=assessment.above_range_rating.value,
            overallRating=assessment.overall_rating.value,
            recommendations=list(assessment.recommendations),
        ),
    )


def trend_to_payload(trend: TimeInRangeTrend) -> TimeInRangeTrendPayload:
    return TimeInRangeTrendPayload(
        period=trend.period,
        inRangePercentage=trend.in_range_percentage,
        belowRangePercentage=trend.below_range_percentage,
        aboveRangePercentage=trend.above_range_percentage,
        averageGlucose=trend.average_glucose,
        readingCount=trend.reading_count,
    )


def summary_to_payload(summary: GlucoseSummary) -> GlucoseSummaryPayload:
    return GlucoseSummaryPayload(
        total=summary.total,
        average=summary.average,
        min=summary.minimum,
        max=summary.maximum,
        median=summary.median,
        p25=summary.p25,
        p75=summary.p75,
        standardDeviation=summary.standard_deviation,
        cv=summary.coefficient_of_variation,
        gmi=summary.glucose_management_indicator,
        last24h=summary.last_24h,
        last7d=summary.last_7d,
    )


def a1c_to_payload(estimate: A1CEstimate) -> A1CEstimatePayload:
    return A1CEstimatePayload(
        estimatedA1C=estimate.estimated_a1c,
        averageGlucose=estimate.average_glucose,
        readingCount=estimate.reading_count,
        dateRange=_date_range_payload(estimate.date_range),
        category=estimate.category.value,
        recommendation=estimate.recommendation,
    )


def a1c_trend_to_payload(trend: A1CTrend) -> A1CTrendPayload:
    return A1CTrendPayload(
        period=trend.period,
        estimatedA1C=trend.estimated_a1c,
        averageGlucose=trend.average_glucose,
        readingCount=trend.reading_count,
        change=trend.change,
        changePercentage=trend.change_percentage,
    )
