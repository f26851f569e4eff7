"""Single-slot speed-limit cache entry."""

from __future__ import annotations

from dataclasses import dataclass

from pydashcluster.models.location import Coordinate


@dataclass(frozen=True, slots=True)
class CachedSpeedLimit:
    """Most recent successful lookup.

    ``speed_limit_mph`` is ``None`` when the lookup found no tagged road
    nearby; that answer is cached like any other.
    """

    speed_limit_mph: float | None
    coordinate: Coordinate
    timestamp: float

    def age(self, now: float) -> float:
        return now - self.timestamp

    def is_valid_for(
        self,
        coordinate: Coordinate,
        *,
        now: float,
        lifetime: float,
        max_distance_m: float,
    ) -> bool:
        """Fresh (age < *lifetime*) and near (distance < *max_distance_m*)."""
        if self.age(now) >= lifetime:
            return False
        return self.coordinate.distance_to(coordinate) < max_distance_m
