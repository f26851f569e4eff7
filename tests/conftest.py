from __future__ import annotations

# pylint: disable=redefined-outer-name

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from pydashcluster.config import ClusterConfig
from pydashcluster.models.location import AuthorizationStatus


@dataclass
class FakeMotionSensor:
    available: bool = True
    handler: Callable[[Any], None] | None = None
    intervals: list[float] = field(default_factory=list)
    start_calls: int = 0
    stop_calls: int = 0

    @property
    def is_available(self) -> bool:
        return self.available

    def start(self, update_interval: float, handler: Callable[[Any], None]) -> None:
        self.start_calls += 1
        self.intervals.append(update_interval)
        self.handler = handler

    def set_update_interval(self, update_interval: float) -> None:
        self.intervals.append(update_interval)

    def stop(self) -> None:
        self.stop_calls += 1

    def emit(self, sample: Any) -> None:
        assert self.handler is not None
        self.handler(sample)


@dataclass
class FakeLocationSensor:
    status: AuthorizationStatus = AuthorizationStatus.AUTHORIZED_WHEN_IN_USE
    handler: Callable[[Any], None] | None = None
    start_calls: int = 0
    stop_calls: int = 0
    authorization_requests: int = 0
    fail_start: bool = False

    @property
    def authorization(self) -> AuthorizationStatus:
        return self.status

    def request_authorization(self) -> None:
        self.authorization_requests += 1

    def start(self, handler: Callable[[Any], None]) -> None:
        self.start_calls += 1
        if self.fail_start:
            raise RuntimeError("positioning hardware unavailable")
        self.handler = handler

    def stop(self) -> None:
        self.stop_calls += 1

    def emit(self, event: Any) -> None:
        assert self.handler is not None
        self.handler(event)


@pytest.fixture
def config() -> ClusterConfig:
    return ClusterConfig()


@pytest.fixture
def motion_sensor() -> FakeMotionSensor:
    return FakeMotionSensor()


@pytest.fixture
def location_sensor() -> FakeLocationSensor:
    return FakeLocationSensor()
