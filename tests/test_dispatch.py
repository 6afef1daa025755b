"""Tests for the request dispatcher."""

from __future__ import annotations

import asyncio
import json

import pytest

from conftest import StubTransport
from neoconduit.errors import ProtocolFault, TransportFault
from neoconduit.rpc.dispatch import Dispatcher
from neoconduit.rpc.envelope import RpcErrorDescriptor


class GatedTransport:
    """Holds every exchange open until the gate is set."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.entered = asyncio.Event()
        self.done = asyncio.Event()
        self.sent: list[bytes] = []

    async def send(self, body: bytes) -> bytes:
        self.sent.append(body)
        self.entered.set()
        await self.gate.wait()
        self.done.set()
        rid = json.loads(body)["id"]
        return json.dumps({"jsonrpc": "2.0", "id": rid, "result": 1}).encode()

    async def aclose(self) -> None:
        pass


class FixedIdTransport:
    async def send(self, body: bytes) -> bytes:
        return b'{"jsonrpc":"2.0","id":999,"result":1}'

    async def aclose(self) -> None:
        pass


@pytest.mark.asyncio
async def test_get_block_count_sends_exactly_once() -> None:
    stub = StubTransport({"getblockcount": 100})
    dispatcher = Dispatcher(stub)

    assert await dispatcher.call("getblockcount") == 100
    assert stub.methods() == ["getblockcount"]
    assert stub.requests[0]["jsonrpc"] == "2.0"
    assert stub.requests[0]["params"] == []


@pytest.mark.asyncio
async def test_ids_increase_per_call() -> None:
    stub = StubTransport({"getblockcount": 1})
    dispatcher = Dispatcher(stub)
    for _ in range(3):
        await dispatcher.call("getblockcount")
    assert [r["id"] for r in stub.requests] == [1, 2, 3]


@pytest.mark.asyncio
async def test_error_object_becomes_protocol_fault() -> None:
    stub = StubTransport({"getblock": RpcErrorDescriptor(-32602, "Invalid params")})
    dispatcher = Dispatcher(stub)

    with pytest.raises(ProtocolFault) as excinfo:
        await dispatcher.call("getblock", "bogus")

    fault = excinfo.value
    assert fault.code == -32602
    assert fault.message == "Invalid params"
    assert fault.method == "getblock"
    assert len(stub.requests) == 1


@pytest.mark.asyncio
async def test_error_data_is_preserved() -> None:
    stub = StubTransport({"sendrawtransaction": RpcErrorDescriptor(-500, "Verification failed", "InsufficientFunds")})
    with pytest.raises(ProtocolFault) as excinfo:
        await Dispatcher(stub).call("sendrawtransaction", "00")
    assert excinfo.value.data == "InsufficientFunds"


@pytest.mark.asyncio
async def test_mismatched_response_id() -> None:
    with pytest.raises(TransportFault):
        await Dispatcher(FixedIdTransport()).call("getblockcount")


@pytest.mark.asyncio
async def test_cancelled_before_start_sends_nothing() -> None:
    transport = GatedTransport()
    task = asyncio.create_task(Dispatcher(transport).call("getblockcount"))
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert transport.sent == []


@pytest.mark.asyncio
async def test_cancel_in_flight_lets_exchange_finish() -> None:
    transport = GatedTransport()
    task = asyncio.create_task(Dispatcher(transport).call("getblockcount"))
    await transport.entered.wait()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    transport.gate.set()
    await asyncio.wait_for(transport.done.wait(), timeout=1)
    assert len(transport.sent) == 1


@pytest.mark.asyncio
async def test_aclose_closes_transport() -> None:
    stub = StubTransport()
    await Dispatcher(stub).aclose()
    assert stub.closed
