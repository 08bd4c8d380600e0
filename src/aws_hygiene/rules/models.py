"""Rule configuration models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class RulesConfig(BaseModel):
    version: int = Field(default=1)
    rules: dict[str, bool] = Field(default_factory=dict)

    @field_validator("rules", mode="before")
    @classmethod
    def _validate_rules(cls, v: Any) -> dict:
        if v is None:
            return {}
        return v

    def enabled_rules(self) -> list[str]:
        return [identifier for identifier, enabled in self.rules.items() if enabled]

    @classmethod
    def from_yaml(cls, data: dict[str, object]) -> "RulesConfig":
        return cls.model_validate(data)
