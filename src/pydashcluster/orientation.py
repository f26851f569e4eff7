"""Device attitude to vehicle-frame tilt mapping."""

from __future__ import annotations

from pydashcluster._constants import RAD_TO_DEG
from pydashcluster.models.motion import DeviceOrientation, Tilt


def map_attitude(roll_rad: float, pitch_rad: float, orientation: DeviceOrientation | int | str) -> Tilt:
    """Convert a raw attitude reading to vehicle-frame roll/pitch in degrees.

    Orientations without a mapping (unknown, face up/down) treat the raw
    attitude as already vehicle-aligned.
    """
    if not isinstance(orientation, DeviceOrientation):
        orientation = DeviceOrientation(orientation)

    r = roll_rad * RAD_TO_DEG
    p = pitch_rad * RAD_TO_DEG

    if orientation == DeviceOrientation.LANDSCAPE_LEFT:
        return Tilt(roll=p, pitch=-r)
    if orientation == DeviceOrientation.LANDSCAPE_RIGHT:
        return Tilt(roll=-p, pitch=r)
    if orientation == DeviceOrientation.PORTRAIT_UPSIDE_DOWN:
        return Tilt(roll=-r, pitch=-p)
    return Tilt(roll=r, pitch=p)
