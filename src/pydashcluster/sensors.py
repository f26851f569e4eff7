"""Structural interfaces for the platform sensor collaborators.

Production code passes platform bindings; tests pass small fakes.  Handlers
may be invoked from any thread.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from pydashcluster.models.location import AuthorizationChange, AuthorizationStatus, LocationError, RawLocationFix
from pydashcluster.models.motion import MotionSample

MotionHandler = Callable[[MotionSample | Mapping[str, Any]], None]
LocationEvent = RawLocationFix | LocationError | AuthorizationChange | Mapping[str, Any]
LocationHandler = Callable[[LocationEvent], None]


class MotionSensor(Protocol):
    """Device-motion source (accelerometer + attitude)."""

    @property
    def is_available(self) -> bool:
        ...

    def start(self, update_interval: float, handler: MotionHandler) -> None:
        ...

    def set_update_interval(self, update_interval: float) -> None:
        ...

    def stop(self) -> None:
        ...


class LocationSensor(Protocol):
    """Satellite positioning source."""

    @property
    def authorization(self) -> AuthorizationStatus:
        ...

    def request_authorization(self) -> None:
        ...

    def start(self, handler: LocationHandler) -> None:
        ...

    def stop(self) -> None:
        ...
