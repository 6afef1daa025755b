from __future__ import annotations

from enum import IntEnum, IntFlag

from ..utils import sha256


class OpCode(IntEnum):
    PUSHINT8 = 0x00
    PUSHINT16 = 0x01
    PUSHINT32 = 0x02
    PUSHINT64 = 0x03
    PUSHINT128 = 0x04
    PUSHINT256 = 0x05
    PUSHT = 0x08
    PUSHF = 0x09
    PUSHA = 0x0A
    PUSHNULL = 0x0B
    PUSHDATA1 = 0x0C
    PUSHDATA2 = 0x0D
    PUSHDATA4 = 0x0E
    PUSHM1 = 0x0F
    PUSH0 = 0x10
    PUSH1 = 0x11
    PUSH16 = 0x20
    NOP = 0x21
    RET = 0x40
    SYSCALL = 0x41
    PACKMAP = 0xBE
    PACKSTRUCT = 0xBF
    PACK = 0xC0
    UNPACK = 0xC1
    NEWARRAY0 = 0xC2
    NEWMAP = 0xC8


# Base prices, multiplied by the Policy contract's exec fee factor.
OPCODE_PRICE: dict[OpCode, int] = {
    OpCode.PUSHINT8: 1 << 0,
    OpCode.PUSHINT16: 1 << 0,
    OpCode.PUSHINT32: 1 << 0,
    OpCode.PUSHINT64: 1 << 0,
    OpCode.PUSHINT128: 1 << 2,
    OpCode.PUSHINT256: 1 << 2,
    OpCode.PUSHT: 1 << 0,
    OpCode.PUSHF: 1 << 0,
    OpCode.PUSHNULL: 1 << 0,
    OpCode.PUSHDATA1: 1 << 3,
    OpCode.PUSHDATA2: 1 << 9,
    OpCode.PUSHDATA4: 1 << 12,
    OpCode.PUSHM1: 1 << 0,
    OpCode.PUSH0: 1 << 0,
    OpCode.SYSCALL: 0,
}

CHECK_SIG_PRICE = 1 << 15


class CallFlags(IntFlag):
    NONE = 0
    READ_STATES = 0b0001
    WRITE_STATES = 0b0010
    ALLOW_CALL = 0b0100
    ALLOW_NOTIFY = 0b1000
    STATES = READ_STATES | WRITE_STATES
    READ_ONLY = READ_STATES | ALLOW_CALL
    ALL = STATES | ALLOW_CALL | ALLOW_NOTIFY


def interop_hash(name: str) -> bytes:
    """4-byte SYSCALL operand: the first bytes of SHA-256 over the ASCII name."""
    return sha256(name.encode("ascii"))[:4]


class Interop:
    CONTRACT_CALL = "System.Contract.Call"
    CHECK_SIG = "System.Crypto.CheckSig"
    CHECK_MULTISIG = "System.Crypto.CheckMultisig"


__all__ = ["OpCode", "OPCODE_PRICE", "CHECK_SIG_PRICE", "CallFlags", "Interop", "interop_hash"]
