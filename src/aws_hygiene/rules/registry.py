"""Registry mapping rule identifiers to rule factories."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Protocol

from aws_hygiene.domain.resources import Inventory
from aws_hygiene.errors import ConfigurationError
from aws_hygiene.rules.aws import (
    DetachedVolume,
    LoadBalancerWithoutMultipleInstances,
    UnusedElasticIP,
    UnusedImage,
    UnusedSecurityGroup,
    UnusedSnapshot,
)
from aws_hygiene.rules.base import Rule
from aws_hygiene.rules.engine import RuleEngine

logger = logging.getLogger(__name__)


class RuleContextSource(Protocol):
    """Auxiliary listings some rules need, computed once per run."""

    def list_instance_image_ids(self) -> list[str]: ...

    def list_referenced_security_groups(self) -> list[str]: ...


RuleFactory = Callable[[Inventory, RuleContextSource], Rule]

# Registration order of the engine follows this table, not the config file.
RULE_FACTORIES: dict[str, RuleFactory] = {
    "DetachedEBS": lambda inventory, source: DetachedVolume(),
    "ELBWithoutMultipleInstances": lambda inventory, source: (
        LoadBalancerWithoutMultipleInstances()
    ),
    "UnusedAMI": lambda inventory, source: UnusedImage(source.list_instance_image_ids()),
    "UnusedElasticIP": lambda inventory, source: UnusedElasticIP(),
    "UnusedSecurityGroup": lambda inventory, source: UnusedSecurityGroup(
        source.list_referenced_security_groups()
    ),
    "UnusedSnapshot": lambda inventory, source: UnusedSnapshot(
        inventory.volume_ids(), inventory.image_ids()
    ),
}


def validate_rule_flags(
    flags: Mapping[str, bool],
    factories: Mapping[str, RuleFactory] | None = None,
) -> list[str]:
    """Return enabled identifiers in registry order, rejecting unknown identifiers."""
    table = RULE_FACTORIES if factories is None else factories
    unknown = sorted(identifier for identifier in flags if identifier not in table)
    if unknown:
        raise ConfigurationError(f"Unknown rule identifier(s): {', '.join(unknown)}")
    return [identifier for identifier in table if flags.get(identifier, False)]


def build_engine(
    flags: Mapping[str, bool],
    inventory: Inventory,
    source: RuleContextSource,
    factories: Mapping[str, RuleFactory] | None = None,
) -> RuleEngine:
    table = RULE_FACTORIES if factories is None else factories
    enabled = validate_rule_flags(flags, table)
    rules = [table[identifier](inventory, source) for identifier in enabled]
    return engine_from_rules(rules)


def engine_from_rules(rules: Iterable[Rule]) -> RuleEngine:
    engine = RuleEngine()
    for rule in rules:
        engine.add_rule(rule)
    logger.info(
        "Rule engine ready with %d rule(s): %s",
        len(engine),
        ", ".join(rule.name for rule in engine.get_rules()) or "none",
    )
    return engine
