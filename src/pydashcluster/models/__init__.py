"""Pydantic models for sensor samples and telemetry read models."""

from pydashcluster.models._base import ClusterEnum, ClusterModel
from pydashcluster.models.location import (
    AuthorizationChange,
    AuthorizationStatus,
    Coordinate,
    LocationError,
    LocationFix,
    LocationState,
    RawLocationFix,
    haversine_m,
)
from pydashcluster.models.motion import (
    CalibrationBias,
    DeviceOrientation,
    GVector,
    MotionSample,
    MotionState,
    Tilt,
)
from pydashcluster.models.speed_limit import OverpassElement, OverpassResponse
from pydashcluster.models.telemetry import TelemetrySnapshot

__all__ = [
    "AuthorizationChange",
    "AuthorizationStatus",
    "CalibrationBias",
    "ClusterEnum",
    "ClusterModel",
    "Coordinate",
    "DeviceOrientation",
    "GVector",
    "LocationError",
    "LocationFix",
    "LocationState",
    "MotionSample",
    "MotionState",
    "OverpassElement",
    "OverpassResponse",
    "RawLocationFix",
    "TelemetrySnapshot",
    "Tilt",
    "haversine_m",
]
