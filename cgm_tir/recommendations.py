"""Recommendation rules, registered in the order their messages are emitted."""
from __future__ import annotations

from .models import Rating
from .ranges import HIGH_VARIABILITY_CV, TIR_TARGETS
from .registry import register_rule
from .rule_base import AssessmentContext, RecommendationRule

ON_TRACK_MESSAGE = "Your glucose control is on track. Continue your current management plan."


@register_rule
class ExcellentControlRule(RecommendationRule):
    id = "excellent_control"
    message = "Excellent glucose control! Keep up the great work."

    def applies(self, context: AssessmentContext) -> bool:
        return context.tir_rating is Rating.EXCELLENT


@register_rule
class LowTimeInRangeRule(RecommendationRule):
    id = "low_time_in_range"
    message = (
        "Time-in-range is below target. Work with your healthcare team to adjust "
        "your diabetes management plan."
    )

    def applies(self, context: AssessmentContext) -> bool:
        return context.tir_rating is Rating.POOR


@register_rule
class TimeBelowRangeRule(RecommendationRule):
    id = "time_below_range"
    message = "Reduce time below range by adjusting insulin doses or eating more carbs before lows."

    def applies(self, context: AssessmentContext) -> bool:
        return context.below_range_percentage > TIR_TARGETS["below_range"].target


@register_rule
class UrgentVeryLowRule(RecommendationRule):
    id = "urgent_very_low"
    message = (
        "⚠️ Urgent: Too much time in very low range. Discuss with your "
        "healthcare provider immediately."
    )

    def applies(self, context: AssessmentContext) -> bool:
        return context.very_low_percentage > TIR_TARGETS["very_low"].target


@register_rule
class TimeAboveRangeRule(RecommendationRule):
    id = "time_above_range"
    message = "Reduce time above range by adjusting insulin doses, meal timing, or carb intake."

    def applies(self, context: AssessmentContext) -> bool:
        return context.above_range_percentage > TIR_TARGETS["above_range"].target


@register_rule
class HighVariabilityRule(RecommendationRule):
    id = "high_variability"
    message = "High glucose variability detected. Focus on consistent meal timing and insulin dosing."

    def applies(self, context: AssessmentContext) -> bool:
        return context.coefficient_of_variation > HIGH_VARIABILITY_CV
