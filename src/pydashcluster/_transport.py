"""HTTP transport for the Overpass geodata service."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pydashcluster.config import ClusterConfig
from pydashcluster.exceptions import SpeedLimitTransportError

_logger = logging.getLogger(__name__)


class OverpassTransport(Protocol):
    """Sends an Overpass QL query and returns the decoded JSON object.

    Implementations raise :class:`SpeedLimitTransportError` on failure.
    """

    async def query(self, query: str) -> dict[str, Any]:
        ...


class AiohttpOverpassTransport:
    """Sends Overpass QL queries over a shared :class:`aiohttp.ClientSession`."""

    def __init__(self, config: ClusterConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(
            total=config.speed_limit_timeout,
            sock_read=config.speed_limit_timeout,
        )

    async def query(self, query: str) -> dict[str, Any]:
        """Run *query* and return the decoded JSON object.

        Raises
        ------
        SpeedLimitTransportError
            On network failure, timeout, non-2xx status or a non-JSON body.
        """
        url = self._config.overpass_url
        headers = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, params={"data": query}, headers=headers, timeout=self._timeout) as resp:
                raw = await resp.read()
                if not 200 <= resp.status < 300:
                    raise SpeedLimitTransportError(
                        f"HTTP {resp.status} from {url}: {raw[:200]!r}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except SpeedLimitTransportError:
            raise
        except TimeoutError as exc:
            raise SpeedLimitTransportError(
                f"Request to {url} timed out after {self._config.speed_limit_timeout}s",
                endpoint=url,
            ) from exc
        except aiohttp.ClientError as exc:
            raise SpeedLimitTransportError(
                f"Request to {url} failed: {exc}",
                endpoint=url,
            ) from exc

        try:
            body: Any = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SpeedLimitTransportError(
                f"Invalid JSON from {url}: {raw[:200]!r}",
                endpoint=url,
            ) from exc

        if not isinstance(body, dict):
            raise SpeedLimitTransportError(
                f"Expected a JSON object from {url}",
                endpoint=url,
            )
        return body
