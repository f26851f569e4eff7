from __future__ import annotations

import asyncio
import math
from typing import Any

import pytest

from pydashcluster.config import ClusterConfig
from pydashcluster.fusion.motion import MotionFusionEngine, apply_dead_band
from pydashcluster.models.motion import DeviceOrientation, GVector, MotionSample

RATE_HZ = 120.0


def _sample(t: float, *, ax: float = 0.0, ay: float = 0.0, roll: float = 0.0, pitch: float = 0.0) -> MotionSample:
    return MotionSample(
        acceleration_x=ax,
        acceleration_y=ay,
        attitude_roll=roll,
        attitude_pitch=pitch,
        timestamp=t,
    )


def _engine(sensor: Any, *, high_performance: bool = True) -> MotionFusionEngine:
    return MotionFusionEngine(sensor, ClusterConfig(high_performance_mode=high_performance))


# ------------------------------------------------------------------
# Dead-band and low-pass filter
# ------------------------------------------------------------------


def test_dead_band_zeroes_small_values() -> None:
    assert apply_dead_band(0.019) == 0.0
    assert apply_dead_band(-0.019) == 0.0
    assert apply_dead_band(0.02) == 0.02
    assert apply_dead_band(-0.5) == -0.5


def test_samples_below_dead_band_leave_g_vector_flat(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)
    for i in range(50):
        engine.process(_sample(i / RATE_HZ, ax=0.015, ay=-0.019))

    assert engine.state.g_vector == GVector()
    assert engine.state.delta_v == 0.0


def test_sub_threshold_noise_behaves_like_silence(motion_sensor: Any) -> None:
    noisy = _engine(motion_sensor)
    quiet = _engine(motion_sensor)

    noisy.process(_sample(0.0, ax=-0.6, ay=0.4))
    quiet.process(_sample(0.0, ax=-0.6, ay=0.4))
    for i in range(1, 20):
        noisy.process(_sample(i / RATE_HZ, ax=0.01, ay=-0.015))
        quiet.process(_sample(i / RATE_HZ))

    assert noisy.state.g_vector == quiet.state.g_vector
    assert noisy.state.delta_v == pytest.approx(quiet.state.delta_v)


@pytest.mark.parametrize(("high_performance", "alpha"), [(True, 0.15), (False, 0.25)])
def test_low_pass_alpha_depends_on_performance_mode(motion_sensor: Any, high_performance: bool, alpha: float) -> None:
    engine = _engine(motion_sensor, high_performance=high_performance)

    state = engine.process(_sample(0.0, ax=1.0, ay=-0.5))

    # lateral comes from the device y axis, longitudinal from x
    assert state.g_vector.lateral == pytest.approx(-0.5 * alpha)
    assert state.g_vector.longitudinal == pytest.approx(1.0 * alpha)

    state = engine.process(_sample(1 / RATE_HZ, ax=1.0, ay=-0.5))
    assert state.g_vector.longitudinal == pytest.approx(alpha + (1 - alpha) * alpha)


def test_mode_switch_changes_smoothing_without_reset(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor, high_performance=True)
    engine.process(_sample(0.0, ax=1.0))
    engine.set_high_performance_mode(False)

    state = engine.process(_sample(1 / RATE_HZ, ax=1.0))

    assert state.g_vector.longitudinal == pytest.approx(0.25 + 0.75 * 0.15)


# ------------------------------------------------------------------
# Velocity integrator
# ------------------------------------------------------------------


def test_first_sample_does_not_integrate(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)

    state = engine.process(_sample(100.0, ax=-1.0))

    assert state.delta_v == 0.0


def test_forward_acceleration_integrates_and_decays(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)
    engine.process(_sample(0.0))

    state = engine.process(_sample(0.5, ax=-1.0))

    expected = 1.0 * 9.80665 * 0.5 * 0.5 ** (0.5 / 2.0)
    assert state.delta_v == pytest.approx(expected)


def test_delta_v_decays_monotonically_toward_zero(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)
    engine.process(_sample(0.0))
    engine.process(_sample(0.25, ax=0.8))

    previous = abs(engine.state.delta_v)
    assert previous > 0
    t = 0.25
    for _ in range(30 * int(RATE_HZ)):
        t += 1 / RATE_HZ
        current = abs(engine.process(_sample(t)).delta_v)
        assert current <= previous
        previous = current

    assert previous < 1e-4


def test_acceleration_pulse_rises_then_decays() -> None:
    """1 g forward for 0.5 s, then silence."""
    engine = MotionFusionEngine(object(), ClusterConfig())  # type: ignore[arg-type]
    steps_pulse = int(0.5 * RATE_HZ)
    steps_silence = int(3.0 * RATE_HZ)

    for i in range(steps_pulse + 1):
        engine.process(_sample(i / RATE_HZ, ax=-1.0))
    peak = engine.state.delta_v

    # continuous solution g/k * (1 - exp(-k t)) with k = ln2 / 2 is ~4.50 m/s
    assert 4.3 < peak < 4.9

    for i in range(steps_pulse + 1, steps_pulse + steps_silence + 1):
        engine.process(_sample(i / RATE_HZ))
    after_three_seconds = engine.state.delta_v

    assert after_three_seconds == pytest.approx(peak * 0.5**1.5, rel=1e-6)

    # one percent of the peak is reached after log2(100) half-lives
    end = steps_pulse + int(14.0 * RATE_HZ)
    for i in range(steps_pulse + steps_silence + 1, end + 1):
        engine.process(_sample(i / RATE_HZ))
    assert 0 <= engine.state.delta_v < 0.01 * peak


def test_out_of_order_timestamp_does_not_integrate(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)
    engine.process(_sample(10.0))
    before = engine.process(_sample(10.1, ax=-1.0)).delta_v

    after = engine.process(_sample(9.0, ax=-1.0)).delta_v

    assert after == before
    # next in-order sample integrates from the newest timestamp seen
    state = engine.process(_sample(10.2))
    assert state.delta_v == pytest.approx(before * 0.5 ** (0.1 / 2.0))


def test_reset_returns_to_defaults(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)
    engine.process(_sample(0.0, ax=-1.0, roll=0.2))
    engine.process(_sample(0.1, ax=-1.0, roll=0.2))

    engine.reset()

    assert engine.state.sample_count == 0
    assert engine.state.delta_v == 0.0
    assert engine.state.tilt.roll == 0.0


# ------------------------------------------------------------------
# Tilt
# ------------------------------------------------------------------


def test_tilt_uses_current_orientation(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)
    engine.set_orientation(DeviceOrientation.LANDSCAPE_LEFT)

    state = engine.process(_sample(0.0, roll=math.radians(5.0), pitch=math.radians(2.0)))

    assert state.tilt.roll == pytest.approx(2.0)
    assert state.tilt.pitch == pytest.approx(-5.0)

    engine.set_orientation("portrait")
    state = engine.process(_sample(0.01, roll=math.radians(5.0), pitch=math.radians(2.0)))
    assert state.tilt.roll == pytest.approx(5.0)
    assert state.tilt.pitch == pytest.approx(2.0)


# ------------------------------------------------------------------
# Lifecycle
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_start_is_noop_when_sensor_unavailable(motion_sensor: Any) -> None:
    motion_sensor.available = False
    engine = _engine(motion_sensor)

    await engine.start()

    assert not engine.is_running
    assert motion_sensor.start_calls == 0
    assert engine.state.sample_count == 0
    await engine.stop()


@pytest.mark.asyncio
async def test_stop_is_idempotent(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)

    await engine.stop()
    await engine.start()
    await engine.stop()
    await engine.stop()

    assert motion_sensor.start_calls == 1
    assert motion_sensor.stop_calls == 1


@pytest.mark.asyncio
async def test_start_uses_performance_mode_rate(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor, high_performance=False)

    await engine.start()
    await engine.start()
    await engine.stop()

    assert motion_sensor.start_calls == 1
    assert motion_sensor.intervals == pytest.approx([1 / 60])


@pytest.mark.asyncio
async def test_explicit_sample_rate(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)

    await engine.start(sample_rate_hz=100.0)
    await engine.stop()

    assert motion_sensor.intervals == pytest.approx([0.01])


@pytest.mark.asyncio
async def test_performance_toggle_updates_running_sensor(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor, high_performance=True)
    await engine.start()

    engine.set_high_performance_mode(False)
    engine.set_high_performance_mode(True)
    await engine.stop()

    assert motion_sensor.start_calls == 1
    assert motion_sensor.intervals == pytest.approx([1 / 120, 1 / 60, 1 / 120])


@pytest.mark.asyncio
async def test_channel_preserves_arrival_order(motion_sensor: Any) -> None:
    samples = [_sample(i / RATE_HZ, ax=((-1) ** i) * 0.3 * (i % 7), ay=0.05 * i) for i in range(200)]
    reference = _engine(motion_sensor)
    for sample in samples:
        reference.process(sample)

    engine = _engine(motion_sensor)
    await engine.start()
    for sample in samples:
        motion_sensor.emit(sample)
    await engine.stop()

    assert engine.state == reference.state


@pytest.mark.asyncio
async def test_samples_from_sensor_thread_are_applied(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)
    await engine.start()

    def deliver() -> None:
        for i in range(100):
            motion_sensor.emit({"accelerationX": -0.5, "accelerationY": 0.0, "timestamp": i / RATE_HZ})

    await asyncio.to_thread(deliver)
    await engine.stop()

    assert engine.state.sample_count == 100
    assert engine.state.delta_v > 0


@pytest.mark.asyncio
async def test_malformed_samples_are_dropped(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)
    await engine.start()

    motion_sensor.emit({"accelerationX": "bogus", "timestamp": 0.0})
    motion_sensor.emit({"accelerationX": 0.5, "accelerationY": 0.1, "attitudeRoll": 0.0, "timestamp": 0.01})
    await engine.stop()

    assert engine.state.sample_count == 1


@pytest.mark.asyncio
async def test_samples_after_stop_are_ignored(motion_sensor: Any) -> None:
    engine = _engine(motion_sensor)
    await engine.start()
    motion_sensor.emit(_sample(0.0, ax=0.5))
    await engine.stop()

    motion_sensor.emit(_sample(0.1, ax=0.5))
    await asyncio.sleep(0)

    assert engine.state.sample_count == 1
