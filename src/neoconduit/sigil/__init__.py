"""
Sigil - keys and signing for neoconduit.

secp256r1 key pairs (via ``cryptography``), WIF encoding, local key storage
and the ``SigningProvider`` protocol the transaction manager signs through.
"""

from .keys import CryptoError, InvalidKeyError, KeyPair, verify_signature
from .signer import KeyPairSigner, SigningProvider, UnknownAccountError

__all__ = [
    "CryptoError",
    "InvalidKeyError",
    "KeyPair",
    "KeyPairSigner",
    "SigningProvider",
    "UnknownAccountError",
    "verify_signature",
]
