"""Hygiene rules and the engine that evaluates them."""

from aws_hygiene.rules.base import Rule
from aws_hygiene.rules.engine import Evaluation, RuleEngine
from aws_hygiene.rules.registry import (
    RULE_FACTORIES,
    build_engine,
    engine_from_rules,
    validate_rule_flags,
)

__all__ = [
    "Evaluation",
    "RULE_FACTORIES",
    "Rule",
    "RuleEngine",
    "build_engine",
    "engine_from_rules",
    "validate_rule_flags",
]
