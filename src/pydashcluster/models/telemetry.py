"""Telemetry read model consumed by presentation layers."""

from __future__ import annotations

from pydantic import Field

from pydashcluster.models._base import ClusterModel
from pydashcluster.models.location import LocationFix
from pydashcluster.models.motion import GVector, Tilt


class TelemetrySnapshot(ClusterModel):
    """Read-only merge of the latest motion, location and speed-limit values.

    Parameters
    ----------
    tilt : Tilt
        Vehicle tilt with the calibration bias already subtracted.
    g_vector : GVector
        Smoothed lateral/longitudinal acceleration.
    gps_speed_mps : float
        Median-smoothed GPS speed.
    delta_v : float
        Dead-reckoned speed correction from inertial integration.
    speed_mps : float
        ``max(0, gps_speed_mps + delta_v)``.
    speed_mph : float
        ``speed_mps`` in miles per hour.
    altitude_ft : float
        Altitude of the last accepted fix, rounded to whole feet.
    speed_limit_mph : float or None
        Posted speed limit, ``None`` when unknown.
    location : LocationFix or None
        Last published location.
    """

    tilt: Tilt = Field(default_factory=Tilt)
    g_vector: GVector = Field(default_factory=GVector)
    gps_speed_mps: float = 0.0
    delta_v: float = 0.0
    speed_mps: float = Field(default=0.0, ge=0.0)
    speed_mph: float = Field(default=0.0, ge=0.0)
    altitude_ft: float = 0.0
    speed_limit_mph: float | None = None
    location: LocationFix | None = None

    @property
    def over_speed_limit(self) -> bool | None:
        """Whether the estimate exceeds the posted limit; ``None`` without a limit."""
        if self.speed_limit_mph is None:
            return None
        return self.speed_mph > self.speed_limit_mph
