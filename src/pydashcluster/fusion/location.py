"""Location fusion: throttling, accuracy gating, speed smoothing, publish gating."""

from __future__ import annotations

import asyncio
import logging
import statistics
from collections import deque
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from pydashcluster._constants import METERS_TO_FEET
from pydashcluster.config import ClusterConfig
from pydashcluster.ingestion.channel import SampleChannel
from pydashcluster.models.location import (
    AuthorizationChange,
    AuthorizationStatus,
    LocationError,
    LocationFix,
    LocationState,
    RawLocationFix,
)
from pydashcluster.sensors import LocationEvent, LocationSensor

_logger = logging.getLogger(__name__)

LocationListener = Callable[[LocationFix], None]


class LocationFusionEngine:
    """Validates raw GPS fixes and publishes smoothed speed, altitude and location.

    Every accepted fix updates speed and altitude.  The location itself is
    only republished after the vehicle has moved ``publish_distance_m``;
    listeners registered with :meth:`add_listener` see those publications.
    """

    def __init__(self, sensor: LocationSensor, config: ClusterConfig | None = None) -> None:
        self._sensor = sensor
        self._config = config or ClusterConfig()
        self._speeds: deque[float] = deque(maxlen=self._config.speed_window_size)
        self._last_accepted_ts: float | None = None
        self._state = LocationState()
        self._listeners: list[LocationListener] = []
        self._channel: SampleChannel[LocationEvent] | None = None
        self._task: asyncio.Task[None] | None = None
        self._streaming = False

    @property
    def state(self) -> LocationState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._task is not None

    @property
    def is_streaming(self) -> bool:
        """Whether the positioning collaborator is currently delivering fixes."""
        return self._streaming

    def add_listener(self, listener: LocationListener) -> Callable[[], None]:
        """Register *listener* for published fixes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Begin fix delivery, requesting permission when it is undetermined."""
        if self._task is not None:
            _logger.debug("Location engine already running")
            return

        loop = asyncio.get_running_loop()
        channel: SampleChannel[LocationEvent] = SampleChannel(loop, name="location")
        task = loop.create_task(channel.consume(self._handle), name="pydashcluster-location")
        self._channel = channel
        self._task = task

        try:
            self._begin_updates()
        except Exception:
            _logger.warning("Location sensor failed to start", exc_info=True)
            self._channel = None
            self._task = None
            channel.close()
            await task
            return

        self.handle_authorization(self._sensor.authorization)

    async def stop(self) -> None:
        """End fix delivery. Safe to call when not started or more than once."""
        task = self._task
        channel = self._channel
        self._task = None
        # detached before draining: queued authorization changes cannot restart the sensor
        self._channel = None
        if task is None or channel is None:
            return

        try:
            self._halt_updates()
        finally:
            channel.close()
            await task
        _logger.debug("Location engine stopped")

    def _begin_updates(self) -> None:
        channel = self._channel
        if channel is None or self._streaming:
            return
        self._sensor.start(channel.push)
        self._streaming = True

    def _halt_updates(self) -> None:
        if not self._streaming:
            return
        self._streaming = False
        self._sensor.stop()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def handle_authorization(self, status: AuthorizationStatus | int | str) -> None:
        """React to a permission state change."""
        status = AuthorizationStatus(status)
        previous = self._state.authorization
        if status != previous:
            self._state = self._state.model_copy(update={"authorization": status})

        if status.is_authorized:
            self._begin_updates()
        elif status == AuthorizationStatus.NOT_DETERMINED:
            _logger.debug("Location authorization not determined; requesting")
            self._sensor.request_authorization()
        elif status in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED):
            _logger.warning("Location authorization %s; halting location updates", status.name.lower())
            self._halt_updates()
        else:
            _logger.debug("Ignoring unknown location authorization state")

    def handle_error(self, error: LocationError | Exception | str) -> None:
        """Log a transient delivery failure; the stream keeps running."""
        message = error.message if isinstance(error, LocationError) else str(error)
        _logger.warning("Location update failed: %s", message)

    def _handle(self, item: Any) -> None:
        if isinstance(item, AuthorizationChange):
            self.handle_authorization(item.status)
            return
        if isinstance(item, (LocationError, Exception)):
            self.handle_error(item)
            return
        try:
            raw = item if isinstance(item, RawLocationFix) else RawLocationFix.model_validate(item)
            self.process(raw)
        except ValidationError:
            _logger.debug("Dropping malformed location fix", exc_info=True)

    # ------------------------------------------------------------------
    # Per-fix algorithm
    # ------------------------------------------------------------------

    def process(self, raw: RawLocationFix) -> LocationFix | None:
        """Apply one raw fix; return the fix when it was published as the new location."""
        config = self._config

        # 1) throttle
        if self._last_accepted_ts is not None and raw.timestamp - self._last_accepted_ts < config.location_min_interval:
            return None

        # 2) accuracy gate
        accuracy = raw.horizontal_accuracy
        if accuracy < 0 or accuracy > config.max_horizontal_accuracy_m:
            return None

        coordinate = raw.coordinate
        self._last_accepted_ts = raw.timestamp

        # 3) median speed over non-negative samples
        if raw.speed >= 0:
            self._speeds.append(raw.speed)
        speed = statistics.median(self._speeds) if self._speeds else self._state.speed_mps

        # 4) altitude in whole feet
        altitude_ft = float(round(raw.altitude * METERS_TO_FEET))

        fix = LocationFix(
            coordinate=coordinate,
            speed_mps=speed,
            altitude_ft=altitude_ft,
            horizontal_accuracy=accuracy,
            timestamp=raw.timestamp,
        )

        # 5) publish gate
        previous = self._state.last_location
        publish = previous is None or previous.coordinate.distance_to(coordinate) >= config.publish_distance_m

        self._state = LocationState(
            speed_mps=speed,
            altitude_ft=altitude_ft,
            last_location=fix if publish else previous,
            authorization=self._state.authorization,
        )

        if not publish:
            return None
        for listener in list(self._listeners):
            try:
                listener(fix)
            except Exception:
                _logger.warning("Location listener failed", exc_info=True)
        return fix
