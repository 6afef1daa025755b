"""
Request dispatcher.

Builds one envelope per call, sends it through the transport exactly once,
checks the response correlates with the request, and turns a JSON-RPC error
into a ``ProtocolFault``.  There is no retry and no caching.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from typing import Any

from ..errors import ProtocolFault, TransportFault
from .envelope import RpcFailure, RpcRequest, decode_response
from .transport import Transport

log = logging.getLogger(__name__)


def _drain(task: "asyncio.Future[bytes]") -> None:
    # Retrieve the outcome of an abandoned exchange so it is not reported as unhandled.
    if not task.cancelled():
        task.exception()


class Dispatcher:
    def __init__(self, transport: Transport) -> None:
        self.transport = transport
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    def next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    async def call(self, method: str, *params: Any) -> Any:
        """Send ``method(*params)`` and return the ``result`` payload.

        Cancelling before the exchange starts sends nothing.  Once bytes are
        in flight the exchange completes in the background and its result is
        discarded.

        Raises:
            ProtocolFault: the node returned an error object.
            TransportFault: the exchange failed or the body was malformed.
        """
        request = RpcRequest(self.next_id(), method, params)
        body = request.encode()
        log.debug("rpc -> %s id=%s", method, request.id)

        started = False

        async def exchange_once() -> bytes:
            nonlocal started
            started = True
            return await self.transport.send(body)

        exchange = asyncio.ensure_future(exchange_once())
        try:
            raw = await asyncio.shield(exchange)
        except asyncio.CancelledError:
            if started:
                exchange.add_done_callback(_drain)
            else:
                exchange.cancel()
            raise

        response = decode_response(raw)
        if response.id is not None and response.id != request.id:
            raise TransportFault(
                f"Response id {response.id!r} does not match request id {request.id!r}"
            )
        if isinstance(response, RpcFailure):
            log.debug("rpc <- %s id=%s error %s", method, request.id, response.error.code)
            raise ProtocolFault(
                response.error.code,
                response.error.message,
                data=response.error.data,
                method=method,
            )
        return response.result

    async def aclose(self) -> None:
        await self.transport.aclose()


__all__ = ["Dispatcher"]
