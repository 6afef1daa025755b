from __future__ import annotations

import json
from typing import Any, Callable, Union

import pytest

from neoconduit.rpc.client import RpcClient
from neoconduit.rpc.envelope import RpcErrorDescriptor, RpcFailure, RpcSuccess, encode_response

NETWORK = 860833102

Reply = Union[Any, RpcErrorDescriptor, Callable[[list], Any]]


class StubTransport:
    """In-memory transport answering from a table of canned results per method."""

    def __init__(self, replies: dict[str, Reply] | None = None) -> None:
        self.replies: dict[str, Reply] = dict(replies or {})
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def reply(self, method: str, result: Reply) -> None:
        self.replies[method] = result

    def methods(self) -> list[str]:
        return [r["method"] for r in self.requests]

    async def send(self, body: bytes) -> bytes:
        request = json.loads(body)
        self.requests.append(request)
        entry = self.replies[request["method"]]
        if callable(entry):
            entry = entry(request["params"])
        if isinstance(entry, RpcErrorDescriptor):
            return encode_response(RpcFailure(request["id"], entry))
        return encode_response(RpcSuccess(request["id"], entry))

    async def aclose(self) -> None:
        self.closed = True


def invoke_result(*stack: dict[str, Any], state: str = "HALT", gas: str = "1007390", exception: str | None = None) -> dict[str, Any]:
    return {
        "script": "EMAeDA==",
        "state": state,
        "gasconsumed": gas,
        "exception": exception,
        "stack": list(stack),
    }


def integer(value: int) -> dict[str, Any]:
    return {"type": "Integer", "value": str(value)}


def policy_reply(fee_per_byte: int = 1000, exec_fee_factor: int = 30) -> Callable[[list], Any]:
    values = {"getFeePerByte": fee_per_byte, "getExecFeeFactor": exec_fee_factor}

    def handler(params: list) -> Any:
        return invoke_result(integer(values[params[1]]))

    return handler


def node_replies(**overrides: Reply) -> dict[str, Reply]:
    """Everything the transaction manager asks a node for."""
    replies: dict[str, Reply] = {
        "getblockcount": 1000,
        "getversion": {
            "tcpport": 10333,
            "wsport": 10334,
            "nonce": 1930156121,
            "useragent": "/Neo:3.0.0/",
            "protocol": {"network": NETWORK},
        },
        "invokefunction": policy_reply(),
        "invokescript": invoke_result(gas="1007390"),
    }
    replies.update(overrides)
    return replies


@pytest.fixture()
def stub() -> StubTransport:
    return StubTransport()


@pytest.fixture()
def rpc(stub: StubTransport) -> RpcClient:
    return RpcClient("http://stub.invalid", transport=stub)


@pytest.fixture()
def node() -> StubTransport:
    return StubTransport(node_replies())


@pytest.fixture()
def node_rpc(node: StubTransport) -> RpcClient:
    return RpcClient("http://stub.invalid", transport=node)
