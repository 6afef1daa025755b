"""
Typed contract parameters.

Used both as ScriptBuilder push values and as the ``stack`` argument of the
``invokefunction`` RPC method, where each entry is ``{"type", "value"}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from ..primitives import UInt160, UInt256
from ..utils import b64encode


class ContractParameterType(IntEnum):
    Any = 0x00
    Boolean = 0x10
    Integer = 0x11
    ByteArray = 0x12
    String = 0x13
    Hash160 = 0x14
    Hash256 = 0x15
    PublicKey = 0x16
    Signature = 0x17
    Array = 0x20
    Map = 0x22
    InteropInterface = 0x30
    Void = 0xFF


@dataclass(frozen=True)
class ContractParameter:
    type: ContractParameterType
    value: Any = None

    @classmethod
    def infer(cls, value: Any) -> "ContractParameter":
        """Wrap a plain Python value, picking the parameter type from its class."""
        if isinstance(value, ContractParameter):
            return value
        if value is None:
            return cls(ContractParameterType.Any)
        if isinstance(value, bool):
            return cls(ContractParameterType.Boolean, value)
        if isinstance(value, int):
            return cls(ContractParameterType.Integer, value)
        if isinstance(value, (bytes, bytearray)):
            return cls(ContractParameterType.ByteArray, bytes(value))
        if isinstance(value, str):
            return cls(ContractParameterType.String, value)
        if isinstance(value, UInt160):
            return cls(ContractParameterType.Hash160, value)
        if isinstance(value, UInt256):
            return cls(ContractParameterType.Hash256, value)
        if isinstance(value, (list, tuple)):
            return cls(ContractParameterType.Array, [cls.infer(v) for v in value])
        if isinstance(value, dict):
            return cls(
                ContractParameterType.Map,
                [(cls.infer(k), cls.infer(v)) for k, v in value.items()],
            )
        raise TypeError(f"Unsupported contract parameter type: {type(value).__name__}")

    def to_json(self) -> dict[str, Any]:
        t = self.type
        out: dict[str, Any] = {"type": t.name}
        if self.value is None:
            return out
        if t is ContractParameterType.Boolean:
            out["value"] = bool(self.value)
        elif t is ContractParameterType.Integer:
            out["value"] = str(int(self.value))
        elif t in (ContractParameterType.ByteArray, ContractParameterType.Signature):
            out["value"] = b64encode(bytes(self.value))
        elif t is ContractParameterType.String:
            out["value"] = str(self.value)
        elif t in (ContractParameterType.Hash160, ContractParameterType.Hash256):
            out["value"] = str(self.value)
        elif t is ContractParameterType.PublicKey:
            out["value"] = bytes(self.value).hex()
        elif t is ContractParameterType.Array:
            out["value"] = [ContractParameter.infer(v).to_json() for v in self.value]
        elif t is ContractParameterType.Map:
            out["value"] = [
                {
                    "key": ContractParameter.infer(k).to_json(),
                    "value": ContractParameter.infer(v).to_json(),
                }
                for k, v in self.value
            ]
        else:
            raise TypeError(f"Cannot serialize parameter of type {t.name}")
        return out


__all__ = ["ContractParameter", "ContractParameterType"]
