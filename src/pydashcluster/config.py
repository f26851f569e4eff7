"""Runtime configuration for pydashcluster."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pydashcluster._constants import OVERPASS_URL, USER_AGENT
from pydashcluster.exceptions import ClusterConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise ClusterConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ClusterConfig:
    """Cluster configuration.

    Parameters
    ----------
    overpass_url : str
        Geodata query endpoint used for speed-limit lookups.
    speed_limit_timeout : float
        Upper bound in seconds for a single speed-limit fetch.  A fetch that
        exceeds it is treated as a failed lookup.
    speed_limit_radius_m : int
        Search radius around the vehicle for tagged road segments.
    speed_limit_cache_lifetime : float
        Seconds a cached speed limit stays valid.
    speed_limit_cache_distance_m : float
        Distance from the cached coordinate within which the cached speed
        limit is reused.
    high_performance_mode : bool
        Initial performance mode.  High performance samples motion faster and
        smooths it harder.
    high_performance_rate_hz : float
        Motion sampling rate in high-performance mode.
    standard_rate_hz : float
        Motion sampling rate in standard mode.
    location_min_interval : float
        Minimum seconds between two accepted GPS fixes.
    max_horizontal_accuracy_m : float
        Fixes with a worse (larger) horizontal accuracy are rejected.
    publish_distance_m : float
        Minimum movement before a new location is published downstream.
    speed_window_size : int
        Number of raw GPS speeds the median smoother looks at.
    user_agent : str
        ``User-Agent`` sent to the geodata service.
    """

    overpass_url: str = OVERPASS_URL
    speed_limit_timeout: float = 3.0
    speed_limit_radius_m: int = 20
    speed_limit_cache_lifetime: float = 300.0
    speed_limit_cache_distance_m: float = 50.0
    high_performance_mode: bool = True
    high_performance_rate_hz: float = 120.0
    standard_rate_hz: float = 60.0
    location_min_interval: float = 1.0 / 15.0
    max_horizontal_accuracy_m: float = 50.0
    publish_distance_m: float = 20.0
    speed_window_size: int = 2
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        for name in (
            "speed_limit_timeout",
            "high_performance_rate_hz",
            "standard_rate_hz",
        ):
            if getattr(self, name) <= 0:
                raise ClusterConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.speed_window_size < 1:
            raise ClusterConfigError(f"speed_window_size must be at least 1, got {self.speed_window_size}")
        if self.speed_limit_radius_m <= 0:
            raise ClusterConfigError(f"speed_limit_radius_m must be positive, got {self.speed_limit_radius_m}")
        if not self.overpass_url:
            raise ClusterConfigError("overpass_url must be non-empty")

    def sample_rate_hz(self, high_performance: bool) -> float:
        """Motion sampling rate for the given performance mode."""
        return self.high_performance_rate_hz if high_performance else self.standard_rate_hz

    @classmethod
    def from_env(cls, **overrides: Any) -> ClusterConfig:
        """Create configuration from environment variables.

        Reads optional ``CLUSTER_*`` variables.  Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ClusterConfig
            Populated configuration.

        Raises
        ------
        ClusterConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_FLOAT_MAP = {
            "CLUSTER_SPEED_LIMIT_TIMEOUT": "speed_limit_timeout",
            "CLUSTER_SPEED_LIMIT_CACHE_LIFETIME": "speed_limit_cache_lifetime",
            "CLUSTER_SPEED_LIMIT_CACHE_DISTANCE": "speed_limit_cache_distance_m",
            "CLUSTER_HIGH_PERFORMANCE_RATE_HZ": "high_performance_rate_hz",
            "CLUSTER_STANDARD_RATE_HZ": "standard_rate_hz",
            "CLUSTER_LOCATION_MIN_INTERVAL": "location_min_interval",
            "CLUSTER_MAX_HORIZONTAL_ACCURACY": "max_horizontal_accuracy_m",
            "CLUSTER_PUBLISH_DISTANCE": "publish_distance_m",
        }
        _ENV_INT_MAP = {
            "CLUSTER_SPEED_LIMIT_RADIUS": "speed_limit_radius_m",
            "CLUSTER_SPEED_WINDOW_SIZE": "speed_window_size",
        }

        config_kwargs: dict[str, Any] = {}

        url = env.get("CLUSTER_OVERPASS_URL")
        if url is not None:
            config_kwargs["overpass_url"] = url
        user_agent = env.get("CLUSTER_USER_AGENT")
        if user_agent is not None:
            config_kwargs["user_agent"] = user_agent

        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, float)

        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, int)

        if "high_performance_mode" not in overrides:
            config_kwargs["high_performance_mode"] = _env_bool(env.get("CLUSTER_HIGH_PERFORMANCE"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
