"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class FilteringConfig(BaseModel):
    coerce_boolean_strings: bool | None = None


class ScreeningConfig(BaseModel):
    treat_empty_string_as_missing: bool | None = None


class AppConfig(BaseModel):
    filtering: FilteringConfig = Field(default_factory=FilteringConfig)
    screening: ScreeningConfig = Field(default_factory=ScreeningConfig)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        filtering = self.filtering.model_dump(exclude_none=True)
        if filtering:
            settings["filtering"] = filtering
        screening = self.screening.model_dump(exclude_none=True)
        if screening:
            settings["screening"] = screening
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
