"""
NEF3 executable container.

Layout:
    magic u32 | compiler 64 bytes | source var-string | reserved u8 |
    method tokens var-array | reserved u16 | script var-bytes | checksum u32

The checksum is the first four bytes of double SHA-256 over everything
before it.
"""

from __future__ import annotations

import struct

from ..utils import hash256, var_bytes, var_int

NEF_MAGIC = 0x3346454E
NEF_MAGIC_BYTES = struct.pack("<I", NEF_MAGIC)
COMPILER_FIELD_SIZE = 64
MAX_SOURCE_LENGTH = 256

DEFAULT_COMPILER = "neoconduit"


def is_nef(data: bytes) -> bool:
    return data[:4] == NEF_MAGIC_BYTES


def make_nef(script: bytes, compiler: str = DEFAULT_COMPILER, source: str = "") -> bytes:
    """Wrap a raw NeoVM script in a NEF3 file with no method tokens."""
    if not script:
        raise ValueError("NEF script must not be empty")
    compiler_bytes = compiler.encode("utf-8")
    if len(compiler_bytes) > COMPILER_FIELD_SIZE:
        raise ValueError(f"Compiler name longer than {COMPILER_FIELD_SIZE} bytes")
    source_bytes = source.encode("utf-8")
    if len(source_bytes) > MAX_SOURCE_LENGTH:
        raise ValueError(f"Source longer than {MAX_SOURCE_LENGTH} bytes")

    body = (
        NEF_MAGIC_BYTES
        + compiler_bytes.ljust(COMPILER_FIELD_SIZE, b"\x00")
        + var_bytes(source_bytes)
        + b"\x00"
        + var_int(0)
        + b"\x00\x00"
        + var_bytes(bytes(script))
    )
    return body + hash256(body)[:4]


def verify_checksum(nef: bytes) -> bool:
    return len(nef) > 4 and hash256(nef[:-4])[:4] == nef[-4:]


__all__ = ["NEF_MAGIC", "is_nef", "make_nef", "verify_checksum"]
