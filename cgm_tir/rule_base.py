"""Base class and evaluation context for recommendation rules."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from .models import Rating


@dataclass(frozen=True)
class AssessmentContext:
    """Unrounded percentages and ratings a rule may inspect."""

    in_range_percentage: float
    below_range_percentage: float
    above_range_percentage: float
    very_low_percentage: float
    coefficient_of_variation: float
    tir_rating: Rating
    below_range_rating: Rating
    above_range_rating: Rating


class RecommendationRule(ABC):
    """Independent predicate that contributes one recommendation string."""

    id: str = ""
    message: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.id:
            raise ValueError(f"Rule {cls.__name__} must define a non-empty id")
        if not cls.message:
            raise ValueError(f"Rule {cls.__name__} must define a message")

    @abstractmethod
    def applies(self, context: AssessmentContext) -> bool:
        """Return True when the rule's recommendation should be emitted."""

    def recommend(self, context: AssessmentContext) -> str | None:
        return self.message if self.applies(context) else None

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"<{self.__class__.__name__} id={self.id!r}>"
