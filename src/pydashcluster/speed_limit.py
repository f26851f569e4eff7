"""Posted speed-limit lookups via the OpenStreetMap Overpass API.

A resolver keeps one cache slot and at most one in-flight lookup.  Requests
arriving while a lookup runs wait for that lookup instead of starting a
second one, whatever coordinate they ask about.  Lookup failures are logged
and resolve to ``None``; they never reach the telemetry consumer.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from pydashcluster._cache import CachedSpeedLimit
from pydashcluster._constants import KPH_TO_MPH
from pydashcluster._transport import OverpassTransport
from pydashcluster.config import ClusterConfig
from pydashcluster.exceptions import SpeedLimitDecodeError, SpeedLimitError, SpeedLimitTransportError
from pydashcluster.models.location import Coordinate
from pydashcluster.models.speed_limit import OverpassResponse

_logger = logging.getLogger(__name__)


def build_overpass_query(coordinate: Coordinate, *, radius_m: int = 20, timeout: float = 3.0) -> str:
    """Overpass QL for ways carrying a ``maxspeed`` tag within *radius_m*."""
    server_timeout = max(1, math.ceil(timeout))
    return (
        f"[out:json][timeout:{server_timeout}];\n"
        f'way(around:{radius_m},{coordinate.latitude},{coordinate.longitude})["maxspeed"];\n'
        "out tags;"
    )


def parse_maxspeed(tag: str) -> float | None:
    """Convert an OSM ``maxspeed`` tag to miles per hour.

    ``"50 mph"`` stays 50.  ``"80 km/h"``, ``"80 kph"`` and a bare ``"80"``
    are km/h and get converted.  Tags without a number (``"none"``,
    ``"signals"``) give ``None``.
    """
    lower = tag.strip().lower()
    digits = "".join(ch for ch in tag if ch.isdigit() or ch == ".")
    try:
        value = float(digits)
    except ValueError:
        return None

    if "mph" in lower:
        return value
    # kph, km/h, or no unit: OSM defaults to km/h
    return value * KPH_TO_MPH


def parse_overpass_response(payload: Any) -> float | None:
    """Speed limit of the first element carrying a ``maxspeed`` tag.

    Raises
    ------
    SpeedLimitDecodeError
        If *payload* does not follow the Overpass JSON schema.
    """
    try:
        response = OverpassResponse.model_validate(payload)
    except ValidationError as exc:
        raise SpeedLimitDecodeError(f"Unexpected Overpass payload ({exc.error_count()} errors)") from exc

    tag = response.first_maxspeed()
    if tag is None:
        return None
    return parse_maxspeed(tag)


class SpeedLimitResolver:
    """Resolves the posted speed limit around a coordinate.

    Parameters
    ----------
    transport : OverpassTransport
        Sends the Overpass query.
    config : ClusterConfig, optional
        Radius, timeout and cache bounds.
    clock : callable, optional
        Monotonic seconds used to age the cache slot.
    """

    def __init__(
        self,
        transport: OverpassTransport,
        config: ClusterConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._config = config or ClusterConfig()
        self._clock = clock
        self._cache: CachedSpeedLimit | None = None
        self._pending: asyncio.Task[float | None] | None = None

    @property
    def cached(self) -> CachedSpeedLimit | None:
        return self._cache

    @property
    def has_pending_lookup(self) -> bool:
        return self._pending is not None

    def _cache_hit(self, coordinate: Coordinate) -> CachedSpeedLimit | None:
        cached = self._cache
        if cached is None:
            return None
        if not cached.is_valid_for(
            coordinate,
            now=self._clock(),
            lifetime=self._config.speed_limit_cache_lifetime,
            max_distance_m=self._config.speed_limit_cache_distance_m,
        ):
            return None
        return cached

    async def resolve(self, coordinate: Coordinate) -> float | None:
        """Return the speed limit in mph at *coordinate*, or ``None`` if unknown."""
        cached = self._cache_hit(coordinate)
        if cached is not None:
            return cached.speed_limit_mph

        pending = self._pending
        if pending is None:
            pending = asyncio.get_running_loop().create_task(
                self._lookup(coordinate),
                name="pydashcluster-speed-limit",
            )
            self._pending = pending
        else:
            _logger.debug("Joining in-flight speed-limit lookup")

        try:
            # shield: a cancelled caller must not cancel the shared lookup
            return await asyncio.shield(pending)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if pending.cancelled() and (current is None or current.cancelling() == 0):
                return None
            raise

    def clear_cache(self) -> None:
        """Invalidate the cache slot and cancel any in-flight lookup."""
        self._cache = None
        pending = self._pending
        self._pending = None
        if pending is not None and not pending.done():
            pending.cancel()
            _logger.debug("Cancelled in-flight speed-limit lookup")

    async def _lookup(self, coordinate: Coordinate) -> float | None:
        try:
            speed_limit = await self._fetch(coordinate)
        except SpeedLimitError as exc:
            _logger.warning("Speed limit lookup failed: %s", exc)
            return None
        else:
            self._cache = CachedSpeedLimit(
                speed_limit_mph=speed_limit,
                coordinate=coordinate,
                timestamp=self._clock(),
            )
            _logger.debug("Speed limit at %s: %s", coordinate, speed_limit)
            return speed_limit
        finally:
            if self._pending is asyncio.current_task():
                self._pending = None

    async def _fetch(self, coordinate: Coordinate) -> float | None:
        query = build_overpass_query(
            coordinate,
            radius_m=self._config.speed_limit_radius_m,
            timeout=self._config.speed_limit_timeout,
        )
        try:
            async with asyncio.timeout(self._config.speed_limit_timeout):
                payload = await self._transport.query(query)
        except TimeoutError as exc:
            raise SpeedLimitTransportError(
                f"Speed limit lookup timed out after {self._config.speed_limit_timeout}s",
            ) from exc
        return parse_overpass_response(payload)
