"""Rule evaluation engine."""

from __future__ import annotations

from dataclasses import dataclass

from aws_hygiene.domain.resources import Resource
from aws_hygiene.errors import ConfigurationError
from aws_hygiene.rules.base import Rule


@dataclass(frozen=True)
class Evaluation:
    """Outcome of evaluating one resource: valid, or invalid with the rule that failed."""

    resource: Resource
    rule: Rule | None = None

    @property
    def valid(self) -> bool:
        return self.rule is None


class RuleEngine:
    """Evaluates resources against rules in registration order.

    Registration order is priority: when several rules would fail for a
    resource, only the first registered one is reported.
    """

    def __init__(self) -> None:
        self._rules: list[Rule] = []
        self._names: set[str] = set()
        self._invalidated_rule: Rule | None = None

    def add_rule(self, rule: Rule) -> None:
        if rule.name in self._names:
            raise ConfigurationError(f"Rule '{rule.name}' is already registered")
        self._rules.append(rule)
        self._names.add(rule.name)

    def get_rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def evaluate(self, resource: Resource) -> Evaluation:
        """Evaluate without touching engine state; safe for concurrent callers."""
        for rule in self._rules:
            if not rule.supports(resource):
                continue
            if not rule.is_valid(resource):
                return Evaluation(resource, rule)
        return Evaluation(resource)

    def is_valid(self, resource: Resource) -> bool:
        """Evaluate and remember the failing rule for ``get_invalidated_rule``.

        Not thread-safe; concurrent callers should use ``evaluate``.
        """
        evaluation = self.evaluate(resource)
        self._invalidated_rule = evaluation.rule
        return evaluation.valid

    def get_invalidated_rule(self) -> Rule | None:
        return self._invalidated_rule

    def __len__(self) -> int:
        return len(self._rules)
