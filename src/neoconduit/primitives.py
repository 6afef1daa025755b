"""
Ledger primitives: fixed-size hashes, addresses and fixed-point amounts.

Hashes are stored little-endian (wire order) and printed big-endian with a
``0x`` prefix, which is how the node renders them in JSON.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import ClassVar, Union

from .utils import b58check_decode, b58check_encode, strip_hex_prefix

ADDRESS_VERSION = 0x35


@dataclass(frozen=True)
class _UIntBase:
    data: bytes

    SIZE: ClassVar[int] = 0

    def __post_init__(self) -> None:
        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError(f"{type(self).__name__} expects bytes")
        if len(self.data) != self.SIZE:
            raise ValueError(
                f"{type(self).__name__} requires {self.SIZE} bytes, got {len(self.data)}"
            )
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def from_string(cls, value: str):
        text = strip_hex_prefix(value.strip())
        if len(text) != cls.SIZE * 2:
            raise ValueError(
                f"{cls.__name__} string must have {cls.SIZE * 2} hex digits, got {len(text)}"
            )
        try:
            raw = bytes.fromhex(text)
        except ValueError:
            raise ValueError(f"{cls.__name__} string is not hex: {value!r}") from None
        return cls(raw[::-1])

    @classmethod
    def zero(cls):
        return cls(b"\x00" * cls.SIZE)

    def to_array(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return "0x" + self.data[::-1].hex()

    def __bytes__(self) -> bytes:
        return self.data

    def __lt__(self, other: "_UIntBase") -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.data[::-1] < other.data[::-1]


@dataclass(frozen=True)
class UInt160(_UIntBase):
    SIZE: ClassVar[int] = 20


@dataclass(frozen=True)
class UInt256(_UIntBase):
    SIZE: ClassVar[int] = 32


def to_address(script_hash: UInt160, version: int = ADDRESS_VERSION) -> str:
    return b58check_encode(bytes([version]) + script_hash.data)


def to_script_hash(address: str, version: int = ADDRESS_VERSION) -> UInt160:
    payload = b58check_decode(address)
    if len(payload) != 21:
        raise ValueError(f"Address payload must be 21 bytes, got {len(payload)}")
    if payload[0] != version:
        raise ValueError(f"Address version {payload[0]:#x} does not match {version:#x}")
    return UInt160(payload[1:])


def parse_account(value: Union[str, UInt160]) -> UInt160:
    """Accept a script hash string, an address, or a ``UInt160``."""
    if isinstance(value, UInt160):
        return value
    text = value.strip()
    if text.startswith(("0x", "0X")) or len(text) == 40:
        return UInt160.from_string(text)
    return to_script_hash(text)


@functools.total_ordering
@dataclass(frozen=True)
class BigDecimal:
    """Fixed-point amount: ``value * 10 ** -decimals`` with an integer mantissa."""

    value: int
    decimals: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("BigDecimal mantissa must be an int")
        if self.decimals < 0 or self.decimals > 255:
            raise ValueError("BigDecimal decimals must be within 0..255")

    @classmethod
    def parse(cls, text: str, decimals: int) -> "BigDecimal":
        text = text.strip()
        sign = -1 if text.startswith("-") else 1
        text = text.lstrip("+-")
        whole, _, frac = text.partition(".")
        if not (whole or frac) or not (whole + frac).isdigit():
            raise ValueError(f"Invalid decimal string: {text!r}")
        frac = frac.rstrip("0")
        if len(frac) > decimals:
            raise ValueError(f"{text!r} has more than {decimals} decimal places")
        mantissa = int(whole or "0") * 10**decimals + int((frac or "0").ljust(decimals, "0") or "0")
        return cls(sign * mantissa, decimals)

    def change_decimals(self, decimals: int) -> "BigDecimal":
        if decimals == self.decimals:
            return self
        if decimals > self.decimals:
            return BigDecimal(self.value * 10 ** (decimals - self.decimals), decimals)
        factor = 10 ** (self.decimals - decimals)
        if self.value % factor:
            raise ValueError(f"Cannot reduce {self} to {decimals} decimals without loss")
        return BigDecimal(self.value // factor, decimals)

    def _aligned(self, other: "BigDecimal") -> tuple[int, int, int]:
        decimals = max(self.decimals, other.decimals)
        return (
            self.change_decimals(decimals).value,
            other.change_decimals(decimals).value,
            decimals,
        )

    def __add__(self, other: "BigDecimal") -> "BigDecimal":
        if not isinstance(other, BigDecimal):
            return NotImplemented
        a, b, decimals = self._aligned(other)
        return BigDecimal(a + b, decimals)

    def __sub__(self, other: "BigDecimal") -> "BigDecimal":
        if not isinstance(other, BigDecimal):
            return NotImplemented
        a, b, decimals = self._aligned(other)
        return BigDecimal(a - b, decimals)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BigDecimal):
            return NotImplemented
        a, b, _ = self._aligned(other)
        return a == b

    def __lt__(self, other: "BigDecimal") -> bool:
        if not isinstance(other, BigDecimal):
            return NotImplemented
        a, b, _ = self._aligned(other)
        return a < b

    def __hash__(self) -> int:
        value, decimals = self.value, self.decimals
        while decimals and value % 10 == 0:
            value //= 10
            decimals -= 1
        return hash((value, decimals))

    def __str__(self) -> str:
        sign = "-" if self.value < 0 else ""
        digits = str(abs(self.value)).rjust(self.decimals + 1, "0")
        if not self.decimals:
            return sign + digits
        whole, frac = digits[: -self.decimals], digits[-self.decimals :].rstrip("0")
        return f"{sign}{whole}.{frac}" if frac else sign + whole


__all__ = [
    "ADDRESS_VERSION",
    "UInt160",
    "UInt256",
    "BigDecimal",
    "to_address",
    "to_script_hash",
    "parse_account",
]
