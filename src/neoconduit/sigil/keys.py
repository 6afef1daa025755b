"""
secp256r1 key pairs.

Signatures are the 64-byte ``r || s`` form the ledger's CheckSig expects,
computed as ECDSA/SHA-256 over the sign data (network magic + tx hash).
Public keys are 33-byte compressed points.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from ..primitives import to_address
from ..utils import b58check_decode, b58check_encode

if TYPE_CHECKING:
    from ..primitives import UInt160

_CURVE = ec.SECP256R1()
_WIF_PREFIX = 0x80
_WIF_SUFFIX = 0x01


class CryptoError(ValueError):
    pass


class InvalidKeyError(CryptoError):
    pass


def load_public_key(public_key: bytes) -> ec.EllipticCurvePublicKey:
    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(_CURVE, bytes(public_key))
    except ValueError as exc:
        raise InvalidKeyError(f"Invalid secp256r1 public key: {bytes(public_key).hex()}") from exc


def public_key_sort_key(public_key: bytes) -> tuple[int, int]:
    """Order public keys by X then Y, matching the on-chain point comparison."""
    numbers = load_public_key(public_key).public_numbers()
    return numbers.x, numbers.y


def compress_public_key(public_key: bytes) -> bytes:
    return load_public_key(public_key).public_bytes(Encoding.X962, PublicFormat.CompressedPoint)


def verify_signature(data: bytes, signature: bytes, public_key: bytes) -> bool:
    """Check a 64-byte ``r || s`` signature over ``data``."""
    if len(signature) != 64:
        return False
    der = encode_dss_signature(
        int.from_bytes(signature[:32], "big"),
        int.from_bytes(signature[32:], "big"),
    )
    try:
        load_public_key(public_key).verify(der, data, ec.ECDSA(hashes.SHA256()))
    except InvalidSignature:
        return False
    return True


@dataclass(frozen=True)
class KeyPair:
    private_key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.private_key) != 32:
            raise InvalidKeyError("Private key must be 32 bytes")
        scalar = int.from_bytes(self.private_key, "big")
        if not 0 < scalar < 0xFFFFFFFF00000000FFFFFFFFFFFFFFFFBCE6FAADA7179E84F3B9CAC2FC632551:
            raise InvalidKeyError("Private key is out of range for secp256r1")

    @classmethod
    def generate(cls) -> "KeyPair":
        while True:
            try:
                return cls(secrets.token_bytes(32))
            except InvalidKeyError:
                continue

    @classmethod
    def from_hex(cls, value: str) -> "KeyPair":
        return cls(bytes.fromhex(value.removeprefix("0x")))

    @classmethod
    def from_wif(cls, wif: str) -> "KeyPair":
        try:
            payload = b58check_decode(wif)
        except ValueError as exc:
            raise InvalidKeyError(f"Invalid WIF: {exc}") from exc
        if len(payload) != 34 or payload[0] != _WIF_PREFIX or payload[-1] != _WIF_SUFFIX:
            raise InvalidKeyError("Invalid WIF payload")
        return cls(payload[1:33])

    def to_wif(self) -> str:
        return b58check_encode(bytes([_WIF_PREFIX]) + self.private_key + bytes([_WIF_SUFFIX]))

    @property
    def _signing_key(self) -> ec.EllipticCurvePrivateKey:
        return ec.derive_private_key(int.from_bytes(self.private_key, "big"), _CURVE)

    @property
    def public_key(self) -> bytes:
        return self._signing_key.public_key().public_bytes(
            Encoding.X962, PublicFormat.CompressedPoint
        )

    @property
    def script_hash(self) -> "UInt160":
        from ..vm.contract import script_hash, signature_redeem_script

        return script_hash(signature_redeem_script(self.public_key))

    @property
    def address(self) -> str:
        return to_address(self.script_hash)

    def sign(self, data: bytes) -> bytes:
        der = self._signing_key.sign(data, ec.ECDSA(hashes.SHA256()))
        r, s = decode_dss_signature(der)
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")


__all__ = [
    "CryptoError",
    "KeyPair",
    "InvalidKeyError",
    "compress_public_key",
    "load_public_key",
    "public_key_sort_key",
    "verify_signature",
]
