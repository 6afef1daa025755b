"""
RPC - JSON-RPC 2.0 access to a Neo node.

Layers, bottom-up: the wire envelope, the transport port (HTTP via httpx),
the dispatcher that correlates one request with one response, typed result
decoders, and the dual-mode ``RpcClient``.
"""

from .client import POLICY_CONTRACT, RpcClient
from .dispatch import Dispatcher
from .envelope import (
    RpcErrorDescriptor,
    RpcFailure,
    RpcRequest,
    RpcResponse,
    RpcSuccess,
    decode_response,
    encode_response,
)
from .sync import blocking, run_sync
from .transport import HttpTransport, Transport

__all__ = [
    "Dispatcher",
    "HttpTransport",
    "POLICY_CONTRACT",
    "RpcClient",
    "RpcErrorDescriptor",
    "RpcFailure",
    "RpcRequest",
    "RpcResponse",
    "RpcSuccess",
    "Transport",
    "blocking",
    "decode_response",
    "encode_response",
    "run_sync",
]
