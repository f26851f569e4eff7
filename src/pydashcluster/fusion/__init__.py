"""Sensor fusion engines.

Each engine exclusively owns its filter state and publishes immutable
snapshots for other components to read.
"""

from pydashcluster.fusion.location import LocationFusionEngine
from pydashcluster.fusion.motion import MotionFusionEngine

__all__ = ["LocationFusionEngine", "MotionFusionEngine"]
