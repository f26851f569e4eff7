"""Overpass response models for speed-limit lookups."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OverpassElement(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("tags", mode="before")
    @classmethod
    def _missing_tags(cls, value: Any) -> Any:
        return {} if value is None else value


class OverpassResponse(BaseModel):
    """``{"elements": [{"tags": {"maxspeed": "50"}}, ...]}``"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    elements: list[OverpassElement]

    def first_maxspeed(self) -> str | None:
        """Raw ``maxspeed`` tag of the first element carrying one."""
        for element in self.elements:
            value = element.tags.get("maxspeed")
            if value is not None:
                return value
        return None
