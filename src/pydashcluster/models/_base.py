"""Base model and enum for sensor payloads and telemetry read models.

Every inbound model inherits from :class:`ClusterModel` which provides:

* ``alias_generator=to_camel`` so camelCase sensor keys
  (``accelerationX``, ``horizontalAccuracy``) map to snake_case fields.
* A ``model_validator(mode="before")`` that strips placeholder values
  (``""``, ``"--"``, NaN) so the field default is used.
* Immutability, so a snapshot handed to a consumer never changes under it.

Platform enums inherit from :class:`ClusterEnum` which resolves any value
without a mapped member to ``UNKNOWN`` instead of raising ``ValueError``.
Member names are accepted too, in camelCase or snake_case.
"""

from __future__ import annotations

import enum
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

_SENTINELS = frozenset({"", "--", "NaN", "nan"})


def _name_key(value: str) -> str:
    return value.replace("_", "").replace("-", "").replace(" ", "").lower()


class ClusterEnum(enum.IntEnum):
    """Base for platform state enums.

    Every subclass **must** define ``UNKNOWN``.
    """

    @classmethod
    def _missing_(cls, value: object) -> ClusterEnum:
        if isinstance(value, str):
            key = _name_key(value)
            for member in cls:
                if _name_key(member.name) == key:
                    return member
            if value.strip().lstrip("-").isdigit():
                return cls(int(value))
        unknown: ClusterEnum = cls.UNKNOWN  # type: ignore[attr-defined]
        return unknown


class ClusterModel(BaseModel):
    """Base for frozen pydashcluster models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _strip_placeholders(cls, values: Any) -> Any:
        """Drop placeholder values so field defaults apply."""
        if not isinstance(values, dict):
            return values
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned
