"""
Transport port and its HTTP implementation.

A transport moves one request body to the node and returns the response
body.  It does not retry and does not interpret JSON-RPC semantics; any
connection, timeout or HTTP status failure becomes a ``TransportFault``.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Protocol

import httpx

from ..errors import TransportFault
from ..version import __version__
from .envelope import loads

log = logging.getLogger(__name__)


class Transport(Protocol):
    async def send(self, body: bytes) -> bytes:
        ...

    async def aclose(self) -> None:
        ...


class HttpTransport:
    """One HTTP POST per call, with optional Basic authentication."""

    def __init__(
        self,
        url: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        *,
        timeout: float = 30.0,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._auth = httpx.BasicAuth(user, password) if user and password else None
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"neoconduit/{__version__}",
        }
        if headers:
            self._headers.update(headers)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers,
            auth=self._auth,
            transport=self._transport,
        )

    async def send(self, body: bytes) -> bytes:
        try:
            async with self._client() as client:
                response = await client.post(self.url, content=body)
        except httpx.TimeoutException as exc:
            raise TransportFault(f"Timed out talking to {self.url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportFault(f"Network error talking to {self.url}: {exc}") from exc

        content = response.content
        if response.status_code >= 400 and not _is_json(content):
            raise TransportFault(
                f"HTTP {response.status_code} from {self.url}",
                status=response.status_code,
                body=response.text[:256],
            )
        log.debug("HTTP %s from %s (%d bytes)", response.status_code, self.url, len(content))
        return content

    async def aclose(self) -> None:
        return None


def _is_json(content: bytes) -> bool:
    try:
        loads(content)
    except ValueError:
        return False
    return True


__all__ = ["Transport", "HttpTransport"]
