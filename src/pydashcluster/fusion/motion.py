"""Motion fusion: dead-band, low-pass filter and decaying velocity integrator.

Each sample updates three published values:

* ``g_vector`` - exponentially smoothed lateral/longitudinal acceleration.
* ``tilt`` - attitude mapped into the vehicle frame for the current
  device orientation.
* ``delta_v`` - forward speed correction integrated from acceleration and
  continuously decayed with a 2 s half-life, so it bridges the gap between
  GPS fixes without drifting.

The filter is order dependent.  Samples are consumed from a
:class:`~pydashcluster.ingestion.channel.SampleChannel` on the engine's event
loop, one at a time, in arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from pydashcluster._constants import DEAD_BAND_G, STANDARD_GRAVITY, decay_factor, low_pass_alpha
from pydashcluster.config import ClusterConfig
from pydashcluster.ingestion.channel import SampleChannel
from pydashcluster.models.motion import DeviceOrientation, GVector, MotionSample, MotionState
from pydashcluster.orientation import map_attitude
from pydashcluster.sensors import MotionSensor

_logger = logging.getLogger(__name__)


def apply_dead_band(value: float, threshold: float = DEAD_BAND_G) -> float:
    """Zero *value* when its magnitude is below *threshold*."""
    return 0.0 if abs(value) < threshold else value


@dataclass(slots=True)
class _FilterState:
    lateral: float = 0.0
    longitudinal: float = 0.0
    delta_v: float = 0.0
    last_timestamp: float | None = None
    sample_count: int = 0


class MotionFusionEngine:
    """Fuses raw device-motion samples into smoothed g-force, tilt and delta-v.

    Usage::

        engine = MotionFusionEngine(sensor, config)
        await engine.start()
        ...
        state = engine.state
        await engine.stop()
    """

    def __init__(
        self,
        sensor: MotionSensor,
        config: ClusterConfig | None = None,
        *,
        orientation: DeviceOrientation = DeviceOrientation.UNKNOWN,
    ) -> None:
        self._sensor = sensor
        self._config = config or ClusterConfig()
        self._high_performance = self._config.high_performance_mode
        self._update_interval = 1.0 / self._config.sample_rate_hz(self._high_performance)
        self._orientation = DeviceOrientation(orientation)
        self._filter = _FilterState()
        self._state = MotionState()
        self._channel: SampleChannel[MotionSample | Mapping[str, Any]] | None = None
        self._task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> MotionState:
        """Latest published snapshot; flat/zero until the first sample."""
        return self._state

    @property
    def is_running(self) -> bool:
        return self._task is not None

    @property
    def high_performance_mode(self) -> bool:
        return self._high_performance

    @property
    def update_interval(self) -> float:
        """Sensor update interval in seconds currently requested."""
        return self._update_interval

    @property
    def orientation(self) -> DeviceOrientation:
        return self._orientation

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, sample_rate_hz: float | None = None) -> None:
        """Begin periodic sampling.

        A no-op when the motion sensor is unavailable or sampling already
        runs.  *sample_rate_hz* defaults to the rate of the current
        performance mode.
        """
        if self._task is not None:
            _logger.debug("Motion engine already running")
            return
        if not self._sensor.is_available:
            _logger.debug("Motion sensor unavailable; motion engine not started")
            return

        rate = sample_rate_hz if sample_rate_hz is not None else self._config.sample_rate_hz(self._high_performance)
        if rate <= 0:
            raise ValueError(f"sample_rate_hz must be positive, got {rate}")

        loop = asyncio.get_running_loop()
        channel: SampleChannel[MotionSample | Mapping[str, Any]] = SampleChannel(loop, name="motion")
        task = loop.create_task(channel.consume(self._handle), name="pydashcluster-motion")
        self._update_interval = 1.0 / rate

        try:
            self._sensor.start(self._update_interval, channel.push)
        except Exception:
            _logger.warning("Motion sensor failed to start", exc_info=True)
            channel.close()
            await task
            return

        self._channel = channel
        self._task = task
        _logger.debug("Motion engine started at %.1f Hz", rate)

    async def stop(self) -> None:
        """Halt sampling. Safe to call when not started or more than once."""
        task = self._task
        channel = self._channel
        self._task = None
        self._channel = None
        if task is None or channel is None:
            return

        try:
            self._sensor.stop()
        finally:
            channel.close()
            await task
        _logger.debug("Motion engine stopped after %d samples", self._filter.sample_count)

    def set_high_performance_mode(self, enabled: bool) -> None:
        """Switch sampling rate and smoothing without restarting."""
        self._high_performance = enabled
        self._update_interval = 1.0 / self._config.sample_rate_hz(enabled)
        if self._task is not None:
            self._sensor.set_update_interval(self._update_interval)
        _logger.debug("Motion high-performance mode=%s interval=%.4fs", enabled, self._update_interval)

    def set_orientation(self, orientation: DeviceOrientation | int | str) -> None:
        """Record the externally observed device orientation for later samples."""
        self._orientation = DeviceOrientation(orientation)

    def reset(self) -> None:
        """Drop all filter state and return to flat/zero defaults."""
        self._filter = _FilterState()
        self._state = MotionState()

    # ------------------------------------------------------------------
    # Per-sample algorithm
    # ------------------------------------------------------------------

    def _handle(self, item: MotionSample | Mapping[str, Any]) -> None:
        if isinstance(item, MotionSample):
            sample = item
        else:
            try:
                sample = MotionSample.model_validate(item)
            except ValidationError:
                _logger.debug("Dropping malformed motion sample", exc_info=True)
                return
        self.process(sample)

    def process(self, sample: MotionSample) -> MotionState:
        """Apply one sample and publish the resulting snapshot."""
        f = self._filter

        # 1) dead-band
        lateral = apply_dead_band(sample.lateral)
        longitudinal = apply_dead_band(sample.longitudinal)

        # 2) low-pass
        alpha = low_pass_alpha(self._high_performance)
        f.lateral = alpha * lateral + (1 - alpha) * f.lateral
        f.longitudinal = alpha * longitudinal + (1 - alpha) * f.longitudinal

        # 3) integrate forward accel, then decay
        if f.last_timestamp is None:
            dt = 0.0
            f.last_timestamp = sample.timestamp
        else:
            dt = max(0.0, sample.timestamp - f.last_timestamp)
            f.last_timestamp = max(f.last_timestamp, sample.timestamp)

        # forward axis is -longitudinal with the device in landscape
        f.delta_v += -longitudinal * STANDARD_GRAVITY * dt
        f.delta_v *= decay_factor(dt)

        # 4) orientation-aware tilt
        tilt = map_attitude(sample.attitude_roll, sample.attitude_pitch, self._orientation)

        f.sample_count += 1
        self._state = MotionState(
            g_vector=GVector(lateral=f.lateral, longitudinal=f.longitudinal),
            tilt=tilt,
            delta_v=f.delta_v,
            sample_count=f.sample_count,
        )
        return self._state
