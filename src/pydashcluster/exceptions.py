"""Custom exception hierarchy for pydashcluster."""

from __future__ import annotations


class ClusterError(Exception):
    """Base exception for all pydashcluster errors."""


class ClusterConfigError(ClusterError):
    """Invalid or missing configuration."""


class SpeedLimitError(ClusterError):
    """Speed-limit lookup failed."""


class SpeedLimitTransportError(SpeedLimitError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class SpeedLimitDecodeError(SpeedLimitError):
    """Geodata service returned JSON that does not match the expected schema."""
