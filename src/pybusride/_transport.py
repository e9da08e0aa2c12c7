"""HTTP transport for the PostgREST-style records backend."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pybusride._constants import RECORDS_PATH, USER_AGENT
from pybusride._redact import redact_for_log
from pybusride.config import BusRideConfig
from pybusride.exceptions import BusRideTransportError

_logger = logging.getLogger(__name__)


def build_headers(api_key: str | None, *, prefer: str = "return=representation") -> dict[str, str]:
    """Request headers for the records API.

    Keys issued with the ``ik_`` prefix are bearer tokens; anything else is
    sent as ``x-api-key``.
    """
    headers: dict[str, str] = {
        "content-type": "application/json",
        "prefer": prefer,
        "user-agent": USER_AGENT,
    }
    if api_key:
        if api_key.startswith("ik_"):
            headers["authorization"] = f"Bearer {api_key}"
        else:
            headers["x-api-key"] = api_key
    return headers


class Transport(Protocol):
    """What :class:`~pybusride.client.BusRideClient` needs from a backend.

    :class:`RecordsTransport` talks HTTP; an in-memory fake satisfies the
    same shape.
    """

    async def request(
        self,
        method: str,
        collection: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Mapping[str, Any] | None = None,
        prefer: str = "return=representation",
    ) -> Any:
        ...


class RecordsTransport:
    """JSON-over-HTTP transport for ``/api/database/records/<collection>``."""

    def __init__(self, config: BusRideConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def url_for(self, collection: str) -> str:
        return f"{self._config.base_url.rstrip('/')}{RECORDS_PATH}/{collection}"

    async def request(
        self,
        method: str,
        collection: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Mapping[str, Any] | None = None,
        prefer: str = "return=representation",
    ) -> Any:
        """Send one request and return the decoded JSON body (``None`` if empty)."""
        url = self.url_for(collection)
        headers = build_headers(self._config.api_key, prefer=prefer)
        body = json.dumps(payload, separators=(",", ":")) if payload is not None else None

        _logger.debug(
            "%s %s params=%s headers=%s payload=%s",
            method,
            url,
            dict(params or {}),
            redact_for_log(headers),
            redact_for_log(payload),
        )

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params else None,
                data=body,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise BusRideTransportError(
                        f"HTTP {resp.status} from {collection}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=url,
                    )
        except BusRideTransportError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise BusRideTransportError(
                f"Request to {collection} failed: {exc!r}",
                endpoint=url,
            ) from exc

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise BusRideTransportError(
                f"Invalid JSON from {collection}: {text[:200]}",
                endpoint=url,
            ) from exc
