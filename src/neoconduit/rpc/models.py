"""
Typed result decoders.

Each model is an immutable projection of one JSON-RPC result.  ``from_json``
validates as it goes and raises ``DecodeFault`` naming the dotted path of the
first missing or malformed field (``block.tx[1].hash``).

Chain quantities are Python ints decoded from JSON integers or integer
strings.  Fractional numbers are rejected rather than rounded.
"""

from __future__ import annotations

import binascii
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Optional, TypeVar

from ..errors import DecodeFault
from ..manifest.models import ContractManifest
from ..primitives import UInt160, UInt256, to_script_hash
from ..utils import b64decode, strip_hex_prefix

T = TypeVar("T")

_INT_RE = re.compile(r"^-?\d+$")


# ============ Field helpers ============


def _obj(payload: Any, path: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise DecodeFault(path, f"expected object, got {type(payload).__name__}")
    return payload


def _req(obj: dict[str, Any], name: str, path: str) -> Any:
    if name not in obj or obj[name] is None:
        raise DecodeFault(f"{path}.{name}", "missing required field")
    return obj[name]


def as_int(value: Any, path: str) -> int:
    if isinstance(value, bool):
        raise DecodeFault(path, "expected integer, got boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        raise DecodeFault(path, f"expected integer, got fractional number {value}")
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return int(value.strip())
    raise DecodeFault(path, f"expected integer, got {value!r}")


def as_str(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise DecodeFault(path, f"expected string, got {type(value).__name__}")
    return value


def as_bool(value: Any, path: str) -> bool:
    if not isinstance(value, bool):
        raise DecodeFault(path, f"expected boolean, got {type(value).__name__}")
    return value


def as_uint160(value: Any, path: str) -> UInt160:
    try:
        return UInt160.from_string(as_str(value, path))
    except ValueError as exc:
        raise DecodeFault(path, str(exc)) from None


def as_uint256(value: Any, path: str) -> UInt256:
    try:
        return UInt256.from_string(as_str(value, path))
    except ValueError as exc:
        raise DecodeFault(path, str(exc)) from None


def as_address(value: Any, path: str) -> str:
    text = as_str(value, path)
    try:
        to_script_hash(text)
    except ValueError as exc:
        raise DecodeFault(path, f"invalid address: {exc}") from None
    return text


def as_b64(value: Any, path: str) -> bytes:
    try:
        return b64decode(as_str(value, path))
    except (binascii.Error, ValueError) as exc:
        raise DecodeFault(path, f"invalid base64: {exc}") from None


def as_public_key(value: Any, path: str) -> bytes:
    text = strip_hex_prefix(as_str(value, path))
    try:
        raw = bytes.fromhex(text)
    except ValueError:
        raise DecodeFault(path, "public key is not hex") from None
    if len(raw) != 33:
        raise DecodeFault(path, f"public key must be 33 bytes, got {len(raw)}")
    return raw


def as_list(value: Any, path: str, item: Callable[[Any, str], T]) -> tuple[T, ...]:
    if not isinstance(value, list):
        raise DecodeFault(path, f"expected array, got {type(value).__name__}")
    return tuple(item(v, f"{path}[{i}]") for i, v in enumerate(value))


def _opt(obj: dict[str, Any], name: str, path: str, conv: Callable[[Any, str], T]) -> Optional[T]:
    value = obj.get(name)
    return None if value is None else conv(value, f"{path}.{name}")


# ============ Blocks & transactions ============


@dataclass(frozen=True)
class RpcWitness:
    invocation: bytes
    verification: bytes

    @classmethod
    def from_json(cls, payload: Any, path: str = "witness") -> "RpcWitness":
        obj = _obj(payload, path)
        return cls(
            as_b64(_req(obj, "invocation", path), f"{path}.invocation"),
            as_b64(_req(obj, "verification", path), f"{path}.verification"),
        )


@dataclass(frozen=True)
class RpcSigner:
    account: UInt160
    scopes: str
    allowed_contracts: tuple[UInt160, ...] = ()
    allowed_groups: tuple[bytes, ...] = ()

    @classmethod
    def from_json(cls, payload: Any, path: str = "signer") -> "RpcSigner":
        obj = _obj(payload, path)
        return cls(
            account=as_uint160(_req(obj, "account", path), f"{path}.account"),
            scopes=as_str(_req(obj, "scopes", path), f"{path}.scopes"),
            allowed_contracts=as_list(obj.get("allowedcontracts", []), f"{path}.allowedcontracts", as_uint160),
            allowed_groups=as_list(obj.get("allowedgroups", []), f"{path}.allowedgroups", as_public_key),
        )


@dataclass(frozen=True)
class RpcTransaction:
    hash: UInt256
    size: int
    version: int
    nonce: int
    sender: str
    system_fee: int
    network_fee: int
    valid_until_block: int
    signers: tuple[RpcSigner, ...]
    attributes: tuple[dict[str, Any], ...]
    script: bytes
    witnesses: tuple[RpcWitness, ...]
    block_hash: Optional[UInt256] = None
    confirmations: Optional[int] = None
    block_time: Optional[int] = None
    vm_state: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Any, path: str = "transaction") -> "RpcTransaction":
        obj = _obj(payload, path)

        def field(name: str, conv: Callable[[Any, str], T]) -> T:
            return conv(_req(obj, name, path), f"{path}.{name}")

        return cls(
            hash=field("hash", as_uint256),
            size=field("size", as_int),
            version=field("version", as_int),
            nonce=field("nonce", as_int),
            sender=field("sender", as_address),
            system_fee=field("sysfee", as_int),
            network_fee=field("netfee", as_int),
            valid_until_block=field("validuntilblock", as_int),
            signers=field("signers", lambda v, p: as_list(v, p, RpcSigner.from_json)),
            attributes=field("attributes", lambda v, p: as_list(v, p, _obj)),
            script=field("script", as_b64),
            witnesses=field("witnesses", lambda v, p: as_list(v, p, RpcWitness.from_json)),
            block_hash=_opt(obj, "blockhash", path, as_uint256),
            confirmations=_opt(obj, "confirmations", path, as_int),
            block_time=_opt(obj, "blocktime", path, as_int),
            vm_state=_opt(obj, "vmstate", path, as_str),
        )


@dataclass(frozen=True)
class RpcBlockHeader:
    hash: UInt256
    size: int
    version: int
    previous_block_hash: UInt256
    merkle_root: UInt256
    time: int
    index: int
    next_consensus: str
    witnesses: tuple[RpcWitness, ...]
    nonce: Optional[str] = None
    primary: Optional[int] = None
    confirmations: Optional[int] = None
    next_block_hash: Optional[UInt256] = None

    @classmethod
    def _fields(cls, obj: dict[str, Any], path: str) -> dict[str, Any]:
        def field(name: str, conv: Callable[[Any, str], T]) -> T:
            return conv(_req(obj, name, path), f"{path}.{name}")

        return dict(
            hash=field("hash", as_uint256),
            size=field("size", as_int),
            version=field("version", as_int),
            previous_block_hash=field("previousblockhash", as_uint256),
            merkle_root=field("merkleroot", as_uint256),
            time=field("time", as_int),
            index=field("index", as_int),
            next_consensus=field("nextconsensus", as_address),
            witnesses=field("witnesses", lambda v, p: as_list(v, p, RpcWitness.from_json)),
            nonce=_opt(obj, "nonce", path, as_str),
            primary=_opt(obj, "primary", path, as_int),
            confirmations=_opt(obj, "confirmations", path, as_int),
            next_block_hash=_opt(obj, "nextblockhash", path, as_uint256),
        )

    @classmethod
    def from_json(cls, payload: Any, path: str = "header") -> "RpcBlockHeader":
        return cls(**cls._fields(_obj(payload, path), path))


@dataclass(frozen=True)
class RpcBlock(RpcBlockHeader):
    transactions: tuple[RpcTransaction, ...] = ()

    @classmethod
    def from_json(cls, payload: Any, path: str = "block") -> "RpcBlock":
        obj = _obj(payload, path)
        fields = cls._fields(obj, path)
        fields["transactions"] = as_list(_req(obj, "tx", path), f"{path}.tx", RpcTransaction.from_json)
        return cls(**fields)


@dataclass(frozen=True)
class RpcRawMemPool:
    height: int
    verified: tuple[UInt256, ...]
    unverified: tuple[UInt256, ...]

    @classmethod
    def from_json(cls, payload: Any, path: str = "mempool") -> "RpcRawMemPool":
        obj = _obj(payload, path)
        return cls(
            height=as_int(_req(obj, "height", path), f"{path}.height"),
            verified=as_list(_req(obj, "verified", path), f"{path}.verified", as_uint256),
            unverified=as_list(_req(obj, "unverified", path), f"{path}.unverified", as_uint256),
        )


# ============ Contracts & execution ============


@dataclass(frozen=True)
class ContractState:
    id: int
    hash: UInt160
    manifest: ContractManifest
    update_counter: int = 0
    script: Optional[bytes] = None

    @classmethod
    def from_json(cls, payload: Any, path: str = "contract") -> "ContractState":
        obj = _obj(payload, path)
        manifest_raw = _obj(_req(obj, "manifest", path), f"{path}.manifest")
        try:
            manifest = ContractManifest.from_json(manifest_raw)
        except ValueError as exc:
            raise DecodeFault(f"{path}.manifest", str(exc)) from None
        script = _opt(obj, "script", path, as_b64)
        nef = obj.get("nef")
        if script is None and nef is not None:
            script = as_b64(_req(_obj(nef, f"{path}.nef"), "script", f"{path}.nef"), f"{path}.nef.script")
        return cls(
            id=as_int(_req(obj, "id", path), f"{path}.id"),
            hash=as_uint160(_req(obj, "hash", path), f"{path}.hash"),
            manifest=manifest,
            update_counter=as_int(obj.get("updatecounter", 0), f"{path}.updatecounter"),
            script=script,
        )


def _stack_bool(value: Any, path: str) -> bool:
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return as_bool(value, path)


@dataclass(frozen=True)
class StackItem:
    type: str
    value: Any = None

    @classmethod
    def from_json(cls, payload: Any, path: str = "stack") -> "StackItem":
        obj = _obj(payload, path)
        kind = as_str(_req(obj, "type", path), f"{path}.type")
        raw = obj.get("value")
        vpath = f"{path}.value"
        if kind == "Integer":
            value: Any = as_int(raw, vpath)
        elif kind == "Boolean":
            value = _stack_bool(raw, vpath)
        elif kind in ("ByteString", "Buffer", "ByteArray"):
            value = as_b64(raw, vpath) if raw is not None else b""
        elif kind in ("Array", "Struct"):
            value = as_list(raw, vpath, StackItem.from_json)
        elif kind == "Map":
            value = as_list(
                raw,
                vpath,
                lambda e, p: (
                    StackItem.from_json(_req(_obj(e, p), "key", p), f"{p}.key"),
                    StackItem.from_json(_req(_obj(e, p), "value", p), f"{p}.value"),
                ),
            )
        else:
            value = raw
        return cls(kind, value)

    def as_int(self) -> int:
        if self.type == "Integer":
            return self.value
        if self.type == "Boolean":
            return int(self.value)
        if self.type in ("ByteString", "Buffer", "ByteArray"):
            return int.from_bytes(self.value, "little", signed=True)
        raise ValueError(f"Stack item of type {self.type} is not an integer")

    def as_bytes(self) -> bytes:
        if self.type in ("ByteString", "Buffer", "ByteArray"):
            return self.value
        raise ValueError(f"Stack item of type {self.type} is not a byte string")

    def as_str(self) -> str:
        return self.as_bytes().decode("utf-8")


@dataclass(frozen=True)
class RpcInvokeResult:
    script: bytes
    state: str
    gas_consumed: int
    stack: tuple[StackItem, ...]
    exception: Optional[str] = None

    @property
    def halted(self) -> bool:
        return self.state.upper() == "HALT"

    @classmethod
    def from_json(cls, payload: Any, path: str = "invoke") -> "RpcInvokeResult":
        obj = _obj(payload, path)
        stack_raw = obj.get("stack")
        return cls(
            script=as_b64(_req(obj, "script", path), f"{path}.script"),
            state=as_str(_req(obj, "state", path), f"{path}.state"),
            gas_consumed=as_int(_req(obj, "gasconsumed", path), f"{path}.gasconsumed"),
            # A FAULT result may carry the stack as an error string
            stack=as_list(stack_raw, f"{path}.stack", StackItem.from_json) if isinstance(stack_raw, list) else (),
            exception=_opt(obj, "exception", path, as_str),
        )


@dataclass(frozen=True)
class RpcNotification:
    contract: UInt160
    event_name: str
    state: StackItem

    @classmethod
    def from_json(cls, payload: Any, path: str = "notification") -> "RpcNotification":
        obj = _obj(payload, path)
        return cls(
            contract=as_uint160(_req(obj, "contract", path), f"{path}.contract"),
            event_name=as_str(_req(obj, "eventname", path), f"{path}.eventname"),
            state=StackItem.from_json(_req(obj, "state", path), f"{path}.state"),
        )


@dataclass(frozen=True)
class RpcApplicationLog:
    tx_hash: UInt256
    trigger: str
    vm_state: str
    gas_consumed: int
    stack: tuple[StackItem, ...]
    notifications: tuple[RpcNotification, ...]

    @classmethod
    def from_json(cls, payload: Any, path: str = "applicationlog") -> "RpcApplicationLog":
        obj = _obj(payload, path)
        return cls(
            tx_hash=as_uint256(_req(obj, "txid", path), f"{path}.txid"),
            trigger=as_str(_req(obj, "trigger", path), f"{path}.trigger"),
            vm_state=as_str(_req(obj, "vmstate", path), f"{path}.vmstate"),
            gas_consumed=as_int(_req(obj, "gasconsumed", path), f"{path}.gasconsumed"),
            stack=as_list(obj.get("stack", []), f"{path}.stack", StackItem.from_json),
            notifications=as_list(obj.get("notifications", []), f"{path}.notifications", RpcNotification.from_json),
        )


# ============ Node ============


@dataclass(frozen=True)
class RpcPeer:
    address: str
    port: int

    @classmethod
    def from_json(cls, payload: Any, path: str = "peer") -> "RpcPeer":
        obj = _obj(payload, path)
        return cls(
            as_str(_req(obj, "address", path), f"{path}.address"),
            as_int(_req(obj, "port", path), f"{path}.port"),
        )


@dataclass(frozen=True)
class RpcPeers:
    unconnected: tuple[RpcPeer, ...]
    bad: tuple[RpcPeer, ...]
    connected: tuple[RpcPeer, ...]

    @classmethod
    def from_json(cls, payload: Any, path: str = "peers") -> "RpcPeers":
        obj = _obj(payload, path)
        return cls(
            *(
                as_list(_req(obj, name, path), f"{path}.{name}", RpcPeer.from_json)
                for name in ("unconnected", "bad", "connected")
            )
        )


@dataclass(frozen=True)
class RpcVersion:
    tcp_port: Optional[int]
    ws_port: Optional[int]
    nonce: int
    user_agent: str
    network: Optional[int] = None

    @classmethod
    def from_json(cls, payload: Any, path: str = "version") -> "RpcVersion":
        obj = _obj(payload, path)
        protocol = obj.get("protocol")
        network = None
        if protocol is not None:
            network = _opt(_obj(protocol, f"{path}.protocol"), "network", f"{path}.protocol", as_int)
        return cls(
            tcp_port=_opt(obj, "tcpport", path, as_int),
            ws_port=_opt(obj, "wsport", path, as_int),
            nonce=as_int(_req(obj, "nonce", path), f"{path}.nonce"),
            user_agent=as_str(_req(obj, "useragent", path), f"{path}.useragent"),
            network=network,
        )


@dataclass(frozen=True)
class RpcValidator:
    public_key: bytes
    votes: int
    active: Optional[bool] = None

    @classmethod
    def from_json(cls, payload: Any, path: str = "validator") -> "RpcValidator":
        obj = _obj(payload, path)
        return cls(
            public_key=as_public_key(_req(obj, "publickey", path), f"{path}.publickey"),
            votes=as_int(_req(obj, "votes", path), f"{path}.votes"),
            active=_opt(obj, "active", path, as_bool),
        )


@dataclass(frozen=True)
class RpcPlugin:
    name: str
    version: str
    interfaces: tuple[str, ...]

    @classmethod
    def from_json(cls, payload: Any, path: str = "plugin") -> "RpcPlugin":
        obj = _obj(payload, path)
        return cls(
            name=as_str(_req(obj, "name", path), f"{path}.name"),
            version=as_str(_req(obj, "version", path), f"{path}.version"),
            interfaces=as_list(obj.get("interfaces", []), f"{path}.interfaces", as_str),
        )


@dataclass(frozen=True)
class RpcValidateAddressResult:
    address: str
    is_valid: bool

    @classmethod
    def from_json(cls, payload: Any, path: str = "validateaddress") -> "RpcValidateAddressResult":
        obj = _obj(payload, path)
        return cls(
            as_str(_req(obj, "address", path), f"{path}.address"),
            as_bool(_req(obj, "isvalid", path), f"{path}.isvalid"),
        )


# ============ Wallet & tokens ============


@dataclass(frozen=True)
class RpcAccount:
    address: str
    has_key: bool
    label: Optional[str]
    watch_only: bool

    @classmethod
    def from_json(cls, payload: Any, path: str = "account") -> "RpcAccount":
        obj = _obj(payload, path)
        return cls(
            address=as_address(_req(obj, "address", path), f"{path}.address"),
            has_key=as_bool(_req(obj, "haskey", path), f"{path}.haskey"),
            label=_opt(obj, "label", path, as_str),
            watch_only=as_bool(_req(obj, "watchonly", path), f"{path}.watchonly"),
        )


@dataclass(frozen=True)
class RpcNep5Balance:
    asset_hash: UInt160
    amount: int
    last_updated_block: int

    @classmethod
    def from_json(cls, payload: Any, path: str = "balance") -> "RpcNep5Balance":
        obj = _obj(payload, path)
        return cls(
            asset_hash=as_uint160(_req(obj, "assethash", path), f"{path}.assethash"),
            amount=as_int(_req(obj, "amount", path), f"{path}.amount"),
            last_updated_block=as_int(_req(obj, "lastupdatedblock", path), f"{path}.lastupdatedblock"),
        )


@dataclass(frozen=True)
class RpcNep5Balances:
    address: str
    balances: tuple[RpcNep5Balance, ...]

    @classmethod
    def from_json(cls, payload: Any, path: str = "balances") -> "RpcNep5Balances":
        obj = _obj(payload, path)
        return cls(
            address=as_address(_req(obj, "address", path), f"{path}.address"),
            balances=as_list(_req(obj, "balance", path), f"{path}.balance", RpcNep5Balance.from_json),
        )


@dataclass(frozen=True)
class RpcNep5Transfer:
    timestamp: int
    asset_hash: UInt160
    transfer_address: Optional[str]
    amount: int
    block_index: int
    transfer_notify_index: int
    tx_hash: UInt256

    @classmethod
    def from_json(cls, payload: Any, path: str = "transfer") -> "RpcNep5Transfer":
        obj = _obj(payload, path)
        return cls(
            timestamp=as_int(_req(obj, "timestamp", path), f"{path}.timestamp"),
            asset_hash=as_uint160(_req(obj, "assethash", path), f"{path}.assethash"),
            transfer_address=_opt(obj, "transferaddress", path, as_address),
            amount=as_int(_req(obj, "amount", path), f"{path}.amount"),
            block_index=as_int(_req(obj, "blockindex", path), f"{path}.blockindex"),
            transfer_notify_index=as_int(_req(obj, "transfernotifyindex", path), f"{path}.transfernotifyindex"),
            tx_hash=as_uint256(_req(obj, "txhash", path), f"{path}.txhash"),
        )


@dataclass(frozen=True)
class RpcNep5Transfers:
    address: str
    sent: tuple[RpcNep5Transfer, ...]
    received: tuple[RpcNep5Transfer, ...]

    @classmethod
    def from_json(cls, payload: Any, path: str = "transfers") -> "RpcNep5Transfers":
        obj = _obj(payload, path)
        return cls(
            address=as_address(_req(obj, "address", path), f"{path}.address"),
            sent=as_list(_req(obj, "sent", path), f"{path}.sent", RpcNep5Transfer.from_json),
            received=as_list(_req(obj, "received", path), f"{path}.received", RpcNep5Transfer.from_json),
        )


@dataclass(frozen=True)
class RpcTransferOut:
    """One output of a ``sendmany`` request."""

    asset: UInt160
    value: str
    address: str

    def to_json(self) -> dict[str, Any]:
        return {"asset": str(self.asset), "value": self.value, "address": self.address}


__all__ = [
    "ContractState",
    "RpcAccount",
    "RpcApplicationLog",
    "RpcBlock",
    "RpcBlockHeader",
    "RpcInvokeResult",
    "RpcNep5Balance",
    "RpcNep5Balances",
    "RpcNep5Transfer",
    "RpcNep5Transfers",
    "RpcNotification",
    "RpcPeer",
    "RpcPeers",
    "RpcPlugin",
    "RpcRawMemPool",
    "RpcSigner",
    "RpcTransaction",
    "RpcTransferOut",
    "RpcValidateAddressResult",
    "RpcValidator",
    "RpcVersion",
    "RpcWitness",
    "StackItem",
    "as_int",
    "as_str",
    "as_uint160",
    "as_uint256",
]
