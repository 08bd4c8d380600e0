from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from aws_hygiene.domain.resources import Image, Inventory, SecurityGroup, Snapshot, Volume
from aws_hygiene.errors import ConfigurationError
from aws_hygiene.rules.aws import DetachedVolume
from aws_hygiene.rules.registry import (
    RULE_FACTORIES,
    build_engine,
    engine_from_rules,
    validate_rule_flags,
)


@pytest.fixture
def source():
    mock = MagicMock()
    mock.list_instance_image_ids.return_value = ["ami-used"]
    mock.list_referenced_security_groups.return_value = ["sg-used"]
    return mock


@pytest.fixture
def inventory():
    return Inventory(
        volumes=(Volume(id="vol-1", attachments=("i-1",)),),
        images=(Image(id="ami-used"),),
    )


def test_all_enabled_registers_every_rule_in_registry_order(inventory, source):
    flags = {identifier: True for identifier in reversed(list(RULE_FACTORIES))}

    engine = build_engine(flags, inventory, source)

    assert [rule.name for rule in engine.get_rules()] == list(RULE_FACTORIES)


def test_disabled_rules_are_not_registered(inventory, source):
    engine = build_engine({"DetachedEBS": True, "UnusedAMI": False}, inventory, source)

    assert [rule.name for rule in engine.get_rules()] == ["DetachedEBS"]
    source.list_instance_image_ids.assert_not_called()


def test_no_enabled_rules_yields_vacuous_engine(inventory, source):
    engine = build_engine({identifier: False for identifier in RULE_FACTORIES}, inventory, source)

    assert engine.get_rules() == ()
    assert all(engine.is_valid(resource) for resource in inventory.resources())


def test_unknown_identifier_is_configuration_error(inventory, source):
    with pytest.raises(ConfigurationError, match="UnusedLambda"):
        build_engine({"DetachedEBS": True, "UnusedLambda": True}, inventory, source)

    source.list_instance_image_ids.assert_not_called()


def test_validate_rule_flags_returns_enabled_in_registry_order():
    enabled = validate_rule_flags({"UnusedSnapshot": True, "DetachedEBS": True, "UnusedAMI": False})
    assert enabled == ["DetachedEBS", "UnusedSnapshot"]


def test_context_comes_from_source_and_inventory(inventory, source):
    engine = build_engine(
        {"UnusedSecurityGroup": True, "UnusedSnapshot": True, "UnusedAMI": True},
        inventory,
        source,
    )

    assert engine.is_valid(SecurityGroup(id="sg-used", group_name="web"))
    assert not engine.is_valid(SecurityGroup(id="sg-other", group_name="web"))
    assert engine.is_valid(Snapshot(id="snap-1", volume_id="vol-1"))
    assert not engine.is_valid(Snapshot(id="snap-2", volume_id="vol-gone"))
    assert engine.is_valid(Image(id="ami-used"))
    source.list_referenced_security_groups.assert_called_once()


def test_custom_factory_table(inventory, source):
    factories = {"Detached": lambda inv, src: DetachedVolume()}
    engine = build_engine({"Detached": True}, inventory, source, factories=factories)
    assert len(engine) == 1


def test_engine_from_rules_rejects_duplicates():
    with pytest.raises(ConfigurationError):
        engine_from_rules([DetachedVolume(), DetachedVolume()])
