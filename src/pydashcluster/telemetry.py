"""Merge of the latest motion, location and speed-limit values."""

from __future__ import annotations

from collections.abc import Callable

from pydashcluster._constants import MPS_TO_MPH
from pydashcluster.fusion.location import LocationFusionEngine
from pydashcluster.fusion.motion import MotionFusionEngine
from pydashcluster.models.location import LocationState
from pydashcluster.models.motion import CalibrationBias, MotionState
from pydashcluster.models.telemetry import TelemetrySnapshot


def estimate_speed(gps_speed_mps: float, delta_v: float) -> float:
    """GPS speed corrected by dead-reckoned delta-v, never negative."""
    return max(0.0, gps_speed_mps + delta_v)


def compose_telemetry(
    motion: MotionState,
    location: LocationState,
    speed_limit_mph: float | None = None,
    bias: CalibrationBias | None = None,
) -> TelemetrySnapshot:
    """Build a snapshot from already-captured engine states."""
    speed_mps = estimate_speed(location.speed_mps, motion.delta_v)
    return TelemetrySnapshot(
        tilt=motion.tilt.minus(bias),
        g_vector=motion.g_vector,
        gps_speed_mps=location.speed_mps,
        delta_v=motion.delta_v,
        speed_mps=speed_mps,
        speed_mph=speed_mps * MPS_TO_MPH,
        altitude_ft=location.altitude_ft,
        speed_limit_mph=speed_limit_mph,
        location=location.last_location,
    )


class TelemetryComposer:
    """Reads each component's current snapshot and merges them.

    Holds no state of its own; :meth:`snapshot` may be called at any cadence.
    """

    def __init__(
        self,
        motion: MotionFusionEngine,
        location: LocationFusionEngine,
        speed_limit: Callable[[], float | None] = lambda: None,
    ) -> None:
        self._motion = motion
        self._location = location
        self._speed_limit = speed_limit

    def snapshot(self, bias: CalibrationBias | None = None) -> TelemetrySnapshot:
        return compose_telemetry(
            self._motion.state,
            self._location.state,
            self._speed_limit(),
            bias,
        )
