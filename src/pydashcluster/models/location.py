"""GPS fix models."""

from __future__ import annotations

import math
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pydashcluster._constants import EARTH_RADIUS_M
from pydashcluster.ingestion.normalize import normalize_timestamp_seconds, safe_float
from pydashcluster.models._base import ClusterEnum, ClusterModel


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres between two points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


class AuthorizationStatus(ClusterEnum):
    """Location permission state reported by the positioning collaborator."""

    UNKNOWN = -1
    NOT_DETERMINED = 0
    RESTRICTED = 1
    DENIED = 2
    AUTHORIZED_ALWAYS = 3
    AUTHORIZED_WHEN_IN_USE = 4

    @property
    def is_authorized(self) -> bool:
        return self in (AuthorizationStatus.AUTHORIZED_ALWAYS, AuthorizationStatus.AUTHORIZED_WHEN_IN_USE)


class Coordinate(ClusterModel):
    """WGS84 coordinate in degrees."""

    latitude: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(ge=-180.0, le=180.0, validation_alias=AliasChoices("longitude", "lon", "lng"))

    def distance_to(self, other: Coordinate) -> float:
        """Distance to *other* in metres."""
        return haversine_m(self.latitude, self.longitude, other.latitude, other.longitude)


class RawLocationFix(ClusterModel):
    """One unvalidated delivery from the positioning collaborator.

    ``speed`` is negative when the receiver has no valid speed.
    ``horizontal_accuracy`` is negative when the fix is invalid.
    """

    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lon", "lng"))
    speed: float = -1.0
    altitude: float = 0.0
    horizontal_accuracy: float = Field(
        default=-1.0,
        validation_alias=AliasChoices("horizontalAccuracy", "horizontal_accuracy", "accuracy"),
    )
    timestamp: float

    @field_validator("speed", "altitude", "horizontal_accuracy", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> Any:
        parsed = safe_float(value)
        return value if parsed is None else parsed

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        normalized = normalize_timestamp_seconds(value)
        return value if normalized is None else normalized

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class LocationFix(ClusterModel):
    """A validated fix published by the location engine."""

    coordinate: Coordinate
    speed_mps: float
    altitude_ft: float
    horizontal_accuracy: float
    timestamp: float


class LocationError(ClusterModel):
    """Transient fix-delivery failure reported by the positioning collaborator."""

    message: str = "location update failed"


class AuthorizationChange(ClusterModel):
    """Permission state change reported by the positioning collaborator."""

    status: AuthorizationStatus

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> AuthorizationStatus:
        return value if isinstance(value, AuthorizationStatus) else AuthorizationStatus(value)


class LocationState(ClusterModel):
    """Consistent snapshot of the location engine's published values."""

    speed_mps: float = 0.0
    altitude_ft: float = 0.0
    last_location: LocationFix | None = None
    authorization: AuthorizationStatus = AuthorizationStatus.NOT_DETERMINED
