"""pydashcluster - Async sensor fusion and speed-limit telemetry for vehicle dashboards."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydashcluster")
except PackageNotFoundError:
    __version__ = "0+local"
from pydashcluster.cluster import InstrumentCluster
from pydashcluster.config import ClusterConfig
from pydashcluster.exceptions import (
    ClusterConfigError,
    ClusterError,
    SpeedLimitDecodeError,
    SpeedLimitError,
    SpeedLimitTransportError,
)
from pydashcluster.fusion import LocationFusionEngine, MotionFusionEngine
from pydashcluster.models import (
    AuthorizationChange,
    AuthorizationStatus,
    CalibrationBias,
    Coordinate,
    DeviceOrientation,
    GVector,
    LocationError,
    LocationFix,
    LocationState,
    MotionSample,
    MotionState,
    RawLocationFix,
    TelemetrySnapshot,
    Tilt,
)
from pydashcluster.orientation import map_attitude
from pydashcluster.speed_limit import SpeedLimitResolver, parse_maxspeed
from pydashcluster.telemetry import TelemetryComposer, compose_telemetry

__all__ = [
    "__version__",
    "AuthorizationChange",
    "AuthorizationStatus",
    "CalibrationBias",
    "ClusterConfig",
    "ClusterConfigError",
    "ClusterError",
    "Coordinate",
    "DeviceOrientation",
    "GVector",
    "InstrumentCluster",
    "LocationError",
    "LocationFix",
    "LocationFusionEngine",
    "LocationState",
    "MotionFusionEngine",
    "MotionSample",
    "MotionState",
    "RawLocationFix",
    "SpeedLimitDecodeError",
    "SpeedLimitError",
    "SpeedLimitResolver",
    "SpeedLimitTransportError",
    "TelemetryComposer",
    "TelemetrySnapshot",
    "Tilt",
    "compose_telemetry",
    "map_attitude",
    "parse_maxspeed",
]
