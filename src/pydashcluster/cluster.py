"""High-level async composition of the telemetry pipeline."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from pydashcluster._transport import AiohttpOverpassTransport, OverpassTransport
from pydashcluster.config import ClusterConfig
from pydashcluster.exceptions import ClusterError
from pydashcluster.fusion.location import LocationFusionEngine
from pydashcluster.fusion.motion import MotionFusionEngine
from pydashcluster.models.location import Coordinate, LocationFix
from pydashcluster.models.motion import CalibrationBias, DeviceOrientation
from pydashcluster.models.telemetry import TelemetrySnapshot
from pydashcluster.sensors import LocationSensor, MotionSensor
from pydashcluster.speed_limit import SpeedLimitResolver
from pydashcluster.telemetry import TelemetryComposer

_logger = logging.getLogger(__name__)


class InstrumentCluster:
    """Owns the fusion engines, the speed-limit resolver and their wiring.

    Usage::

        async with InstrumentCluster(config, motion_sensor=imu, location_sensor=gps) as cluster:
            await cluster.start()
            snapshot = cluster.telemetry()
    """

    def __init__(
        self,
        config: ClusterConfig | None = None,
        *,
        motion_sensor: MotionSensor,
        location_sensor: LocationSensor,
        session: aiohttp.ClientSession | None = None,
        transport: OverpassTransport | None = None,
        bias: CalibrationBias | None = None,
    ) -> None:
        self._config = config or ClusterConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._motion = MotionFusionEngine(motion_sensor, self._config)
        self._location = LocationFusionEngine(location_sensor, self._config)
        self._resolver: SpeedLimitResolver | None = None
        self._composer = TelemetryComposer(self._motion, self._location, self._current_speed_limit)
        self._speed_limit_mph: float | None = None
        self._bias = bias
        self._lookups: set[asyncio.Task[None]] = set()
        self._location.add_listener(self._on_location)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> InstrumentCluster:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = AiohttpOverpassTransport(self._config, self._http_session)
        self._resolver = SpeedLimitResolver(self._transport, self._config)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._resolver = None

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def motion(self) -> MotionFusionEngine:
        return self._motion

    @property
    def location(self) -> LocationFusionEngine:
        return self._location

    @property
    def resolver(self) -> SpeedLimitResolver:
        return self._require_resolver()

    def _require_resolver(self) -> SpeedLimitResolver:
        if self._resolver is None:
            raise ClusterError("Cluster not initialized. Use 'async with InstrumentCluster(...) as cluster:'")
        return self._resolver

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    async def start(self, sample_rate_hz: float | None = None) -> None:
        """Start both sensor pipelines."""
        self._require_resolver()
        await self._motion.start(sample_rate_hz)
        await self._location.start()

    async def stop(self) -> None:
        """Stop both pipelines and abandon outstanding speed-limit lookups."""
        await self._motion.stop()
        await self._location.stop()
        lookups = list(self._lookups)
        for task in lookups:
            task.cancel()
        if lookups:
            await asyncio.gather(*lookups, return_exceptions=True)

    def set_high_performance_mode(self, enabled: bool) -> None:
        self._motion.set_high_performance_mode(enabled)

    def set_orientation(self, orientation: DeviceOrientation | int | str) -> None:
        self._motion.set_orientation(orientation)

    @property
    def bias(self) -> CalibrationBias | None:
        return self._bias

    @bias.setter
    def bias(self, value: CalibrationBias | None) -> None:
        self._bias = value

    def calibrate(self) -> CalibrationBias:
        """Take the current tilt as the level reference."""
        self._bias = CalibrationBias.capture(self._motion.state.tilt)
        _logger.debug("Calibrated tilt bias roll=%.2f pitch=%.2f", self._bias.roll, self._bias.pitch)
        return self._bias

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def speed_limit_mph(self) -> float | None:
        return self._speed_limit_mph

    def _current_speed_limit(self) -> float | None:
        return self._speed_limit_mph

    def telemetry(self) -> TelemetrySnapshot:
        """Current read-only telemetry snapshot."""
        return self._composer.snapshot(self._bias)

    # ------------------------------------------------------------------
    # Speed-limit wiring
    # ------------------------------------------------------------------

    def _on_location(self, fix: LocationFix) -> None:
        if self._resolver is None:
            return
        task = asyncio.get_running_loop().create_task(
            self.refresh_speed_limit(fix.coordinate),
            name="pydashcluster-speed-limit-refresh",
        )
        self._lookups.add(task)
        task.add_done_callback(self._on_lookup_done)

    def _on_lookup_done(self, task: asyncio.Task[None]) -> None:
        self._lookups.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.warning("Speed limit refresh failed", exc_info=exc)

    async def refresh_speed_limit(self, coordinate: Coordinate) -> None:
        """Resolve the limit at *coordinate*; keep the last known limit when none is found."""
        speed_limit = await self._require_resolver().resolve(coordinate)
        if speed_limit is not None:
            self._speed_limit_mph = speed_limit
