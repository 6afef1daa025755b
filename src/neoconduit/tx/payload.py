"""
Transaction payload and its binary form.

Layout (all integers little-endian):
    version u8 | nonce u32 | system_fee i64 | network_fee i64 |
    valid_until_block u32 | signers | attributes | script | witnesses

Arrays and byte strings carry a var-int length prefix.  The transaction hash
is SHA-256 over everything but the witnesses, so signing never changes it.
"""

from __future__ import annotations

import secrets
import struct
from dataclasses import dataclass, field, replace
from enum import IntEnum, IntFlag
from typing import Any, Sequence

from ..primitives import UInt160, UInt256, to_address
from ..utils import b64encode, sha256, var_bytes, var_int, var_int_size

MAX_TRANSACTION_ATTRIBUTES = 16


class WitnessScope(IntFlag):
    NONE = 0x00
    CALLED_BY_ENTRY = 0x01
    CUSTOM_CONTRACTS = 0x10
    CUSTOM_GROUPS = 0x20
    GLOBAL = 0x80

    def to_json(self) -> str:
        if self == WitnessScope.NONE:
            return "None"
        names = {
            WitnessScope.CALLED_BY_ENTRY: "CalledByEntry",
            WitnessScope.CUSTOM_CONTRACTS: "CustomContracts",
            WitnessScope.CUSTOM_GROUPS: "CustomGroups",
            WitnessScope.GLOBAL: "Global",
        }
        return ", ".join(name for flag, name in names.items() if self & flag)


@dataclass(frozen=True)
class Signer:
    account: UInt160
    scopes: WitnessScope = WitnessScope.CALLED_BY_ENTRY
    allowed_contracts: tuple[UInt160, ...] = ()
    allowed_groups: tuple[bytes, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_contracts", tuple(self.allowed_contracts))
        object.__setattr__(self, "allowed_groups", tuple(self.allowed_groups))
        if self.scopes & WitnessScope.GLOBAL and self.scopes != WitnessScope.GLOBAL:
            raise ValueError("Global scope cannot be combined with other scopes")

    def to_array(self) -> bytes:
        out = self.account.to_array() + bytes([int(self.scopes)])
        if self.scopes & WitnessScope.CUSTOM_CONTRACTS:
            out += var_int(len(self.allowed_contracts))
            out += b"".join(c.to_array() for c in self.allowed_contracts)
        if self.scopes & WitnessScope.CUSTOM_GROUPS:
            out += var_int(len(self.allowed_groups))
            out += b"".join(self.allowed_groups)
        return out

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"account": str(self.account), "scopes": self.scopes.to_json()}
        if self.scopes & WitnessScope.CUSTOM_CONTRACTS:
            out["allowedcontracts"] = [str(c) for c in self.allowed_contracts]
        if self.scopes & WitnessScope.CUSTOM_GROUPS:
            out["allowedgroups"] = [g.hex() for g in self.allowed_groups]
        return out


class TransactionAttributeType(IntEnum):
    HIGH_PRIORITY = 0x01


@dataclass(frozen=True)
class TransactionAttribute:
    type: TransactionAttributeType = TransactionAttributeType.HIGH_PRIORITY

    def to_array(self) -> bytes:
        return bytes([int(self.type)])

    def to_json(self) -> dict[str, Any]:
        return {"type": "HighPriority"}


@dataclass(frozen=True)
class Witness:
    invocation_script: bytes
    verification_script: bytes

    def to_array(self) -> bytes:
        return var_bytes(self.invocation_script) + var_bytes(self.verification_script)

    def to_json(self) -> dict[str, Any]:
        return {
            "invocation": b64encode(self.invocation_script),
            "verification": b64encode(self.verification_script),
        }


def _random_nonce() -> int:
    return secrets.randbits(32)


@dataclass(frozen=True)
class Transaction:
    script: bytes
    signers: tuple[Signer, ...]
    attributes: tuple[TransactionAttribute, ...] = ()
    version: int = 0
    nonce: int = field(default_factory=_random_nonce)
    system_fee: int = 0
    network_fee: int = 0
    valid_until_block: int = 0
    witnesses: tuple[Witness, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "signers", tuple(self.signers))
        object.__setattr__(self, "attributes", tuple(self.attributes))
        object.__setattr__(self, "witnesses", tuple(self.witnesses))
        if not self.script:
            raise ValueError("Transaction script must not be empty")
        if not self.signers:
            raise ValueError("Transaction needs at least one signer")
        accounts = [s.account for s in self.signers]
        if len(set(accounts)) != len(accounts):
            raise ValueError("Duplicate signer account")
        if len(self.signers) + len(self.attributes) > MAX_TRANSACTION_ATTRIBUTES:
            raise ValueError(f"At most {MAX_TRANSACTION_ATTRIBUTES} signers and attributes combined")
        if self.system_fee < 0 or self.network_fee < 0:
            raise ValueError("Fees must not be negative")

    @property
    def sender(self) -> UInt160:
        return self.signers[0].account

    def unsigned_array(self) -> bytes:
        return (
            struct.pack(
                "<BIqqI",
                self.version,
                self.nonce,
                self.system_fee,
                self.network_fee,
                self.valid_until_block,
            )
            + var_int(len(self.signers))
            + b"".join(s.to_array() for s in self.signers)
            + var_int(len(self.attributes))
            + b"".join(a.to_array() for a in self.attributes)
            + var_bytes(self.script)
        )

    def to_array(self) -> bytes:
        return (
            self.unsigned_array()
            + var_int(len(self.witnesses))
            + b"".join(w.to_array() for w in self.witnesses)
        )

    @property
    def size(self) -> int:
        return len(self.to_array())

    @property
    def hash(self) -> UInt256:
        return UInt256(sha256(self.unsigned_array()))

    def get_sign_data(self, network: int) -> bytes:
        """The bytes every witness signs: network magic then the hash."""
        return struct.pack("<I", network) + self.hash.to_array()

    def with_witnesses(self, witnesses: Sequence[Witness]) -> "Transaction":
        return replace(self, witnesses=tuple(witnesses))

    def to_json(self) -> dict[str, Any]:
        return {
            "hash": str(self.hash),
            "size": self.size,
            "version": self.version,
            "nonce": self.nonce,
            "sender": to_address(self.sender),
            "sysfee": str(self.system_fee),
            "netfee": str(self.network_fee),
            "validuntilblock": self.valid_until_block,
            "signers": [s.to_json() for s in self.signers],
            "attributes": [a.to_json() for a in self.attributes],
            "script": b64encode(self.script),
            "witnesses": [w.to_json() for w in self.witnesses],
        }


__all__ = [
    "Signer",
    "Transaction",
    "TransactionAttribute",
    "TransactionAttributeType",
    "Witness",
    "WitnessScope",
    "var_bytes",
    "var_int",
    "var_int_size",
]
