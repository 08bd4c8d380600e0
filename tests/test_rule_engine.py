from unittest.mock import MagicMock

import pytest

from aws_hygiene.domain.resources import Resource, ResourceType, SecurityGroup, Volume
from aws_hygiene.errors import ConfigurationError
from aws_hygiene.rules.aws import DetachedVolume, UnusedSecurityGroup
from aws_hygiene.rules.base import Rule
from aws_hygiene.rules.engine import Evaluation, RuleEngine


class _StaticRule(Rule):
    description = "static outcome"
    resource_types = frozenset({ResourceType.VOLUME})

    def __init__(self, name: str, outcome: bool) -> None:
        self.name = name
        self.outcome = outcome
        self.calls: list[str] = []

    def _check(self, resource: Resource) -> bool:
        self.calls.append(resource.id)
        return self.outcome


@pytest.fixture
def volume():
    return Volume(id="vol-1", attachments=())


def test_add_rule_rejects_duplicate_name():
    engine = RuleEngine()
    first = _StaticRule("A", True)
    engine.add_rule(first)

    with pytest.raises(ConfigurationError, match="already registered"):
        engine.add_rule(_StaticRule("A", False))

    assert engine.get_rules() == (first,)


def test_get_rules_preserves_registration_order():
    engine = RuleEngine()
    rules = [_StaticRule("C", True), _StaticRule("A", True), _StaticRule("B", True)]
    for rule in rules:
        engine.add_rule(rule)

    assert [rule.name for rule in engine.get_rules()] == ["C", "A", "B"]
    assert len(engine) == 3


def test_empty_engine_is_vacuously_valid(volume):
    engine = RuleEngine()

    assert engine.is_valid(volume)
    assert engine.get_invalidated_rule() is None
    assert engine.evaluate(SecurityGroup(id="sg-1")).valid


def test_all_passing_rules_yield_valid(volume):
    engine = RuleEngine()
    engine.add_rule(_StaticRule("A", True))
    engine.add_rule(_StaticRule("B", True))

    assert engine.is_valid(volume)
    assert engine.get_invalidated_rule() is None


@pytest.mark.parametrize(
    ("order", "expected"),
    [(["A", "B"], "A"), (["B", "A"], "B")],
)
def test_first_failing_rule_is_attributed(volume, order, expected):
    engine = RuleEngine()
    for name in order:
        engine.add_rule(_StaticRule(name, False))

    assert not engine.is_valid(volume)
    assert engine.get_invalidated_rule().name == expected


def test_evaluation_short_circuits_after_first_failure(volume):
    engine = RuleEngine()
    failing = _StaticRule("A", False)
    later = _StaticRule("B", False)
    engine.add_rule(failing)
    engine.add_rule(later)

    evaluation = engine.evaluate(volume)

    assert evaluation == Evaluation(volume, failing)
    assert not evaluation.valid
    assert failing.calls == ["vol-1"]
    assert later.calls == []


def test_invalidated_rule_is_cleared_by_next_valid_call():
    engine = RuleEngine()
    engine.add_rule(DetachedVolume())

    assert not engine.is_valid(Volume(id="vol-detached"))
    assert engine.get_invalidated_rule().name == "DetachedEBS"

    assert engine.is_valid(Volume(id="vol-attached", attachments=("i-123",)))
    assert engine.get_invalidated_rule() is None


def test_evaluate_does_not_touch_invalidated_rule():
    engine = RuleEngine()
    engine.add_rule(DetachedVolume())
    engine.is_valid(Volume(id="vol-detached"))
    remembered = engine.get_invalidated_rule()

    engine.evaluate(Volume(id="vol-attached", attachments=("i-1",)))

    assert engine.get_invalidated_rule() is remembered


def test_detached_volume_scenario():
    engine = RuleEngine()
    engine.add_rule(DetachedVolume())
    resources = [
        Volume(id="v1", attachments=()),
        Volume(id="v2", attachments=("i-123",)),
    ]

    results = [(r.id, engine.is_valid(r), engine.get_invalidated_rule()) for r in resources]

    assert results[0][1] is False
    assert results[0][2].name == "DetachedEBS"
    assert results[1][1] is True
    assert results[1][2] is None


def test_rules_are_only_dispatched_for_supported_types():
    volume_rule = MagicMock(spec=DetachedVolume)
    volume_rule.name = "DetachedEBS"
    volume_rule.supports.return_value = False

    engine = RuleEngine()
    engine.add_rule(UnusedSecurityGroup(referenced_group_ids=[]))
    engine.add_rule(volume_rule)

    assert not engine.is_valid(SecurityGroup(id="sg1", group_name="web"))
    assert engine.get_invalidated_rule().name == "UnusedSecurityGroup"
    volume_rule.is_valid.assert_not_called()


def test_unsupported_type_skips_rule_without_calling_it():
    rule = _StaticRule("VolumeOnly", False)
    engine = RuleEngine()
    engine.add_rule(rule)

    assert engine.evaluate(SecurityGroup(id="sg-1")).valid
    assert rule.calls == []
