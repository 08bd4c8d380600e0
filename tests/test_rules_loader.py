from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from aws_hygiene.errors import ConfigurationError
from aws_hygiene.rules.loader import load_rules_config


def test_load_rules_file_not_found(tmp_path: Path) -> None:
    missing = tmp_path / "missing-rules.yaml"
    with pytest.raises(FileNotFoundError):
        load_rules_config(str(missing))


def test_load_rules_success(tmp_path: Path) -> None:
    rules = {"rules": {"DetachedEBS": True, "UnusedAMI": False, "UnusedSnapshot": True}}
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(rules), encoding="utf-8")

    loaded = load_rules_config(str(path))
    assert loaded.rules == {"DetachedEBS": True, "UnusedAMI": False, "UnusedSnapshot": True}
    assert loaded.enabled_rules() == ["DetachedEBS", "UnusedSnapshot"]


def test_empty_rules_file_enables_nothing(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("rules:\n", encoding="utf-8")

    loaded = load_rules_config(str(path))
    assert loaded.rules == {}
    assert loaded.enabled_rules() == []


def test_invalid_rules_file_is_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text("rules:\n  DetachedEBS: [1, 2]\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid rules file"):
        load_rules_config(str(path))


def test_repository_rules_file_is_valid() -> None:
    path = Path(__file__).resolve().parents[1] / "rules.yaml"
    loaded = load_rules_config(str(path))
    assert "DetachedEBS" in loaded.enabled_rules()
