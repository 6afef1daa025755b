"""
Verification scripts for ordinary and m-of-n multi-signature accounts.

An account's script hash is RIPEMD-160(SHA-256(verification script)).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from ..errors import ScriptBuildFault
from ..primitives import UInt160
from ..sigil.keys import public_key_sort_key
from ..utils import hash160
from .opcode import CHECK_SIG_PRICE, OPCODE_PRICE, Interop, OpCode, interop_hash
from .script import ScriptBuilder

MAX_MULTISIG_KEYS = 1024


def script_hash(script: bytes) -> UInt160:
    return UInt160(hash160(script))


def sort_public_keys(public_keys: Sequence[bytes]) -> list[bytes]:
    return sorted((bytes(k) for k in public_keys), key=public_key_sort_key)


def signature_redeem_script(public_key: bytes) -> bytes:
    if len(public_key) != 33:
        raise ScriptBuildFault("Public key must be a 33-byte compressed point")
    sb = ScriptBuilder()
    sb.emit_data(bytes(public_key))
    sb.emit_syscall(Interop.CHECK_SIG)
    return sb.to_bytes()


def multisig_redeem_script(m: int, public_keys: Sequence[bytes]) -> bytes:
    """Verification script requiring ``m`` of the given keys, in sorted key order."""
    n = len(public_keys)
    if not 1 <= m <= n <= MAX_MULTISIG_KEYS:
        raise ScriptBuildFault(f"Invalid multi-signature threshold {m} of {n}")
    if len({bytes(k) for k in public_keys}) != n:
        raise ScriptBuildFault("Duplicate public keys in multi-signature account")
    if any(len(k) != 33 for k in public_keys):
        raise ScriptBuildFault("Public key must be a 33-byte compressed point")
    try:
        ordered = sort_public_keys(public_keys)
    except ValueError as exc:
        raise ScriptBuildFault(str(exc)) from exc
    sb = ScriptBuilder()
    sb.emit_int(m)
    for key in ordered:
        sb.emit_data(key)
    sb.emit_int(n)
    sb.emit_syscall(Interop.CHECK_MULTISIG)
    return sb.to_bytes()


def is_signature_contract(script: bytes) -> bool:
    return (
        len(script) == 40
        and script[0] == OpCode.PUSHDATA1
        and script[1] == 33
        and script[35] == OpCode.SYSCALL
        and script[36:40] == interop_hash(Interop.CHECK_SIG)
    )


def _read_small_int(script: bytes, pos: int) -> tuple[int, int]:
    op = script[pos]
    if OpCode.PUSH1 <= op <= OpCode.PUSH16:
        return op - OpCode.PUSH0, pos + 1
    if op == OpCode.PUSHINT8:
        return script[pos + 1], pos + 2
    if op == OpCode.PUSHINT16:
        return int.from_bytes(script[pos + 1 : pos + 3], "little"), pos + 3
    raise ValueError("not a threshold push")


def parse_multisig(script: bytes) -> Optional[tuple[int, list[bytes]]]:
    """Return ``(m, public_keys)`` for a multi-signature script, else None."""
    try:
        m, pos = _read_small_int(script, 0)
        keys: list[bytes] = []
        while script[pos] == OpCode.PUSHDATA1 and script[pos + 1] == 33:
            keys.append(bytes(script[pos + 2 : pos + 35]))
            pos += 35
        n, pos = _read_small_int(script, pos)
    except (IndexError, ValueError):
        return None
    if n != len(keys) or not 1 <= m <= n:
        return None
    if script[pos:] != bytes([OpCode.SYSCALL]) + interop_hash(Interop.CHECK_MULTISIG):
        return None
    return m, keys


def _push_int_price(value: int) -> int:
    if -1 <= value <= 16:
        return OPCODE_PRICE[OpCode.PUSH0]
    return OPCODE_PRICE[OpCode.PUSHINT8] if value < 128 else OPCODE_PRICE[OpCode.PUSHINT16]


def signature_contract_cost() -> int:
    return OPCODE_PRICE[OpCode.PUSHDATA1] * 2 + OPCODE_PRICE[OpCode.SYSCALL] + CHECK_SIG_PRICE


def multisig_contract_cost(m: int, n: int) -> int:
    return (
        OPCODE_PRICE[OpCode.PUSHDATA1] * (m + n)
        + _push_int_price(m)
        + _push_int_price(n)
        + OPCODE_PRICE[OpCode.SYSCALL]
        + CHECK_SIG_PRICE * n
    )


__all__ = [
    "MAX_MULTISIG_KEYS",
    "script_hash",
    "sort_public_keys",
    "signature_redeem_script",
    "multisig_redeem_script",
    "is_signature_contract",
    "parse_multisig",
    "signature_contract_cost",
    "multisig_contract_cost",
]
