"""Ordered registry of recommendation rules."""
from __future__ import annotations

from collections.abc import Iterable
from typing import Dict, Type

from .rule_base import AssessmentContext, RecommendationRule


class RecommendationRegistry:
    """Keeps rules by id in registration order."""

    def __init__(self) -> None:
        self._rules: Dict[str, RecommendationRule] = {}

    def register(self, rule_cls: Type[RecommendationRule]) -> Type[RecommendationRule]:
        if rule_cls.id in self._rules:
            raise ValueError(f"Rule '{rule_cls.id}' already registered")
        self._rules[rule_cls.id] = rule_cls()
        return rule_cls

    def clear(self) -> None:
        """Remove all registered rules."""

        self._rules.clear()

    def get(self, rule_id: str) -> RecommendationRule:
        return self._rules[rule_id]

    def items(self) -> Iterable[tuple[str, RecommendationRule]]:
        return self._rules.items()

    def values(self) -> Iterable[RecommendationRule]:
        return self._rules.values()

    def __len__(self) -> int:
        return len(self._rules)

    def recommend_all(self, context: AssessmentContext) -> list[str]:
        """Evaluate every rule in order, collecting the ones that fire."""

        outputs: list[str] = []
        for rule in self._rules.values():
            message = rule.recommend(context)
            if message is not None:
                outputs.append(message)
        return outputs


registry = RecommendationRegistry()


def register_rule(rule_cls: Type[RecommendationRule]) -> Type[RecommendationRule]:
    """Decorator for registering a rule at definition time."""

    return registry.register(rule_cls)
