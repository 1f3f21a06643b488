"""HTTP transport for the authoritative aggregate."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Protocol

import aiohttp
from pydantic import ValidationError

from co2tracker._constants import FETCH_TIMEOUT, USER_AGENT
from co2tracker.exceptions import TrackerTransportError
from co2tracker.models.aggregate import AuthoritativeAggregate

_logger = logging.getLogger(__name__)


class AggregateTransport(Protocol):
    """Structural interface for fetching the authoritative aggregate.

    Implementations raise :class:`TrackerTransportError` for every kind of
    failure so the tracker handles them uniformly. Having a protocol here
    makes it easy to pass test doubles.
    """

    async def fetch(self) -> AuthoritativeAggregate:
        ...


class HttpAggregateTransport:
    """GET the daemon's JSON document with a bounded total timeout."""

    def __init__(
        self,
        url: str,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = FETCH_TIMEOUT,
    ) -> None:
        self._url = url
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def url(self) -> str:
        return self._url

    async def fetch(self) -> AuthoritativeAggregate:
        # Cache-buster.
        params = {"_": str(int(time.time() * 1000))}
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s", self._url)

        try:
            async with self._http.get(self._url, params=params, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise TrackerTransportError(
                        f"HTTP {resp.status} from {self._url}: {text[:200]}",
                        status_code=resp.status,
                        url=self._url,
                    )
        except TrackerTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise TrackerTransportError(f"Request to {self._url} timed out", url=self._url) from exc
        except (aiohttp.ClientError, UnicodeDecodeError) as exc:
            raise TrackerTransportError(f"Request to {self._url} failed: {exc}", url=self._url) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise TrackerTransportError(f"Invalid JSON from {self._url}: {text[:200]}", url=self._url) from exc

        if not isinstance(body, dict):
            raise TrackerTransportError(f"Aggregate from {self._url} is not an object", url=self._url)

        try:
            return AuthoritativeAggregate.model_validate(body)
        except ValidationError as exc:
            raise TrackerTransportError(f"Malformed aggregate from {self._url}: {exc}", url=self._url) from exc
