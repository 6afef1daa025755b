"""
Pure helpers for m-of-n witness assembly.

A multi-signature verification script checks signatures in the same order
as its (sorted) public keys, so the invocation script must list them by key
index.  Only the first ``m`` are needed; any extra are dropped.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from ..vm.contract import sort_public_keys
from ..vm.opcode import OpCode


def is_threshold_met(m: int, signatures: Mapping[bytes, bytes]) -> bool:
    return len(signatures) >= m


def order_signatures(
    m: int,
    public_keys: Sequence[bytes],
    signatures: Mapping[bytes, bytes],
) -> list[bytes]:
    """Return ``m`` signatures ordered by their key's position in the sorted key list.

    Raises:
        ValueError: fewer than ``m`` signatures, or a signature for a key
            that is not part of the account.
    """
    ordered_keys = sort_public_keys(public_keys)
    unknown = set(signatures) - set(ordered_keys)
    if unknown:
        raise ValueError(f"Signature for a key outside the account: {sorted(k.hex() for k in unknown)[0]}")
    if len(signatures) < m:
        raise ValueError(f"Need {m} signatures, have {len(signatures)}")
    return [signatures[k] for k in ordered_keys if k in signatures][:m]


def invocation_script(signatures: Sequence[bytes]) -> bytes:
    """Push each 64-byte signature, in order."""
    out = bytearray()
    for sig in signatures:
        if len(sig) != 64:
            raise ValueError(f"Signature must be 64 bytes, got {len(sig)}")
        out += bytes([OpCode.PUSHDATA1, 64]) + sig
    return bytes(out)


__all__ = ["is_threshold_met", "order_signatures", "invocation_script"]
