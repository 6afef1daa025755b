"""
JSON-RPC 2.0 wire envelope.

A response is decoded into a tagged union, ``RpcSuccess`` or ``RpcFailure``,
so callers match on the variant instead of null-checking two fields.
Fractional numbers are parsed as ``decimal.Decimal``; no value in a response
ever passes through ``float``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Union

from ..errors import TransportFault

JSONRPC_VERSION = "2.0"


def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else str(value)
    if hasattr(value, "to_json"):
        return value.to_json()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(payload: Any) -> bytes:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=_default).encode("utf-8")


def loads(body: Union[bytes, str]) -> Any:
    return json.loads(body, parse_float=Decimal)


@dataclass(frozen=True)
class RpcRequest:
    id: Union[int, str]
    method: str
    params: tuple[Any, ...] = field(default_factory=tuple)
    jsonrpc: str = JSONRPC_VERSION

    def __post_init__(self) -> None:
        if not self.method:
            raise ValueError("RPC method name must not be empty")
        object.__setattr__(self, "params", tuple(self.params))

    def to_json(self) -> dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
            "params": list(self.params),
        }

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "RpcRequest":
        return cls(
            id=payload["id"],
            method=payload["method"],
            params=tuple(payload.get("params") or ()),
            jsonrpc=payload.get("jsonrpc", JSONRPC_VERSION),
        )

    def encode(self) -> bytes:
        return dumps(self.to_json())


@dataclass(frozen=True)
class RpcErrorDescriptor:
    code: int
    message: str
    data: Any = None

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


@dataclass(frozen=True)
class RpcSuccess:
    id: Optional[Union[int, str]]
    result: Any

    def to_json(self) -> dict[str, Any]:
        return {"jsonrpc": JSONRPC_VERSION, "id": self.id, "result": self.result}


@dataclass(frozen=True)
class RpcFailure:
    id: Optional[Union[int, str]]
    error: RpcErrorDescriptor

    def to_json(self) -> dict[str, Any]:
        return {"jsonrpc": JSONRPC_VERSION, "id": self.id, "error": self.error.to_json()}


RpcResponse = Union[RpcSuccess, RpcFailure]


def parse_response(payload: Any) -> RpcResponse:
    """Turn a decoded JSON object into the response union."""
    if not isinstance(payload, dict):
        raise TransportFault(f"JSON-RPC response must be an object, got {type(payload).__name__}")
    rid = payload.get("id")
    error = payload.get("error")
    has_result = "result" in payload
    if error is not None:
        if has_result and payload["result"] is not None:
            raise TransportFault("JSON-RPC response carries both result and error")
        if not isinstance(error, dict):
            raise TransportFault("JSON-RPC error must be an object")
        try:
            code = int(error["code"])
        except (KeyError, TypeError, ValueError):
            raise TransportFault("JSON-RPC error has no integer code") from None
        return RpcFailure(rid, RpcErrorDescriptor(code, str(error.get("message", "")), error.get("data")))
    if not has_result:
        raise TransportFault("JSON-RPC response has neither result nor error")
    return RpcSuccess(rid, payload["result"])


def decode_response(body: Union[bytes, str]) -> RpcResponse:
    try:
        payload = loads(body)
    except (ValueError, UnicodeDecodeError) as exc:
        excerpt = body[:256] if isinstance(body, str) else body[:256].decode("utf-8", "replace")
        raise TransportFault("Non-JSON response from node", body=excerpt) from exc
    return parse_response(payload)


def encode_response(response: RpcResponse) -> bytes:
    return dumps(response.to_json())


__all__ = [
    "JSONRPC_VERSION",
    "RpcRequest",
    "RpcErrorDescriptor",
    "RpcSuccess",
    "RpcFailure",
    "RpcResponse",
    "parse_response",
    "decode_response",
    "encode_response",
    "dumps",
    "loads",
]
