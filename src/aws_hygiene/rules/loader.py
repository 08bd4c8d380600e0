"""Rule flag loader for rules.yaml."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from aws_hygiene.errors import ConfigurationError
from aws_hygiene.rules.models import RulesConfig


def load_rules_config(path: str) -> RulesConfig:
    rules_path = Path(path)
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules file not found: {rules_path}")
    with rules_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    try:
        return RulesConfig.from_yaml(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid rules file {rules_path}: {exc}") from exc
