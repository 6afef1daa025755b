"""
Signing providers.

The transaction manager never touches private keys directly: it hands the
sign data and the signing account to a ``SigningProvider``.  Hardware
wallets or remote signers implement the same protocol.
"""

from __future__ import annotations

from typing import Protocol

from ..primitives import UInt160
from .keys import KeyPair


class SigningProvider(Protocol):
    async def sign(self, data: bytes, account: UInt160) -> bytes:
        """Return a 64-byte signature over ``data`` for ``account``."""
        ...

    def public_key(self, account: UInt160) -> bytes:
        """Return the compressed public key that signs for ``account``."""
        ...


class UnknownAccountError(LookupError):
    pass


class KeyPairSigner:
    """In-memory provider keyed by each key's single-signature account."""

    def __init__(self, *keys: KeyPair) -> None:
        self._by_account: dict[UInt160, KeyPair] = {}
        self._by_public_key: dict[bytes, KeyPair] = {}
        for key in keys:
            self.add(key)

    def add(self, key: KeyPair) -> None:
        self._by_account[key.script_hash] = key
        self._by_public_key[key.public_key] = key

    def key_for(self, account: UInt160) -> KeyPair:
        try:
            return self._by_account[account]
        except KeyError:
            raise UnknownAccountError(f"No key for account {account}") from None

    def key_for_public_key(self, public_key: bytes) -> KeyPair:
        try:
            return self._by_public_key[bytes(public_key)]
        except KeyError:
            raise UnknownAccountError(f"No key for public key {bytes(public_key).hex()}") from None

    def public_key(self, account: UInt160) -> bytes:
        return self.key_for(account).public_key

    async def sign(self, data: bytes, account: UInt160) -> bytes:
        return self.key_for(account).sign(data)


__all__ = ["SigningProvider", "KeyPairSigner", "UnknownAccountError"]
