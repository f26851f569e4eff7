"""Motion sample and fused motion read models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pydashcluster.ingestion.normalize import normalize_timestamp_seconds
from pydashcluster.models._base import ClusterEnum, ClusterModel


class DeviceOrientation(ClusterEnum):
    """Physical orientation of the device in its mount.

    Values follow the platform's device-orientation codes.
    """

    UNKNOWN = 0
    PORTRAIT = 1
    PORTRAIT_UPSIDE_DOWN = 2
    LANDSCAPE_LEFT = 3
    LANDSCAPE_RIGHT = 4
    FACE_UP = 5
    FACE_DOWN = 6


class Tilt(ClusterModel):
    """Vehicle-frame roll and pitch in degrees."""

    roll: float = 0.0
    pitch: float = 0.0

    def minus(self, bias: CalibrationBias | None) -> Tilt:
        """Return this tilt with *bias* subtracted."""
        if bias is None:
            return self
        return Tilt(roll=self.roll - bias.roll, pitch=self.pitch - bias.pitch)


class CalibrationBias(ClusterModel):
    """Reference tilt captured while the vehicle stands level.

    The core reads the bias but never persists it.
    """

    roll: float = 0.0
    pitch: float = 0.0

    @classmethod
    def capture(cls, tilt: Tilt) -> CalibrationBias:
        """Use *tilt* as the new zero reference."""
        return cls(roll=tilt.roll, pitch=tilt.pitch)


class GVector(ClusterModel):
    """Smoothed lateral/longitudinal acceleration in g.

    Not clamped; display layers clamp to their own dial range.
    """

    lateral: float = 0.0
    longitudinal: float = 0.0


class MotionSample(ClusterModel):
    """One raw device-motion delivery.

    Parameters
    ----------
    acceleration_x : float
        User acceleration along the device x axis in g.  With the device
        mounted in landscape this is the vehicle's longitudinal axis.
    acceleration_y : float
        User acceleration along the device y axis in g (lateral).
    attitude_roll : float
        Attitude roll in radians.
    attitude_pitch : float
        Attitude pitch in radians.
    timestamp : float
        Sample time in seconds.  Only differences between samples matter.
    """

    acceleration_x: float = Field(validation_alias=AliasChoices("accelerationX", "acceleration_x", "ax"))
    acceleration_y: float = Field(validation_alias=AliasChoices("accelerationY", "acceleration_y", "ay"))
    attitude_roll: float = Field(default=0.0, validation_alias=AliasChoices("attitudeRoll", "attitude_roll", "roll"))
    attitude_pitch: float = Field(
        default=0.0,
        validation_alias=AliasChoices("attitudePitch", "attitude_pitch", "pitch"),
    )
    timestamp: float

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Any:
        normalized = normalize_timestamp_seconds(value)
        return value if normalized is None else normalized

    @property
    def lateral(self) -> float:
        return self.acceleration_y

    @property
    def longitudinal(self) -> float:
        return self.acceleration_x


class MotionState(ClusterModel):
    """Consistent snapshot of the motion engine's published values."""

    g_vector: GVector = Field(default_factory=GVector)
    tilt: Tilt = Field(default_factory=Tilt)
    delta_v: float = 0.0
    sample_count: int = 0
