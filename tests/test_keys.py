"""Tests for secp256r1 keys, WIF handling and local key storage."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from neoconduit.sigil.keys import InvalidKeyError, KeyPair, compress_public_key, verify_signature
from neoconduit.sigil.signer import KeyPairSigner, UnknownAccountError
from neoconduit.sigil.store import generate_key, get_key_pair, load_wif, save_wif
from neoconduit.vm.contract import script_hash, signature_redeem_script

PRIVATE_KEY = bytes.fromhex("c7134d6fd8e73d819e82755c64c93788d8db0961929e025a53363c4cc02a6962")


@pytest.fixture()
def key() -> KeyPair:
    return KeyPair(PRIVATE_KEY)


class TestKeyPair:
    def test_public_key_is_compressed(self, key: KeyPair) -> None:
        assert len(key.public_key) == 33
        assert key.public_key[0] in (2, 3)

    def test_wif_round_trip(self, key: KeyPair) -> None:
        wif = key.to_wif()
        assert wif.startswith(("K", "L"))
        assert KeyPair.from_wif(wif) == key

    def test_bad_wif(self) -> None:
        with pytest.raises(InvalidKeyError):
            KeyPair.from_wif("not-a-wif")

    @pytest.mark.parametrize("raw", [b"\x00" * 32, b"\xff" * 32, b"\x01" * 31])
    def test_out_of_range_private_key(self, raw: bytes) -> None:
        with pytest.raises(InvalidKeyError):
            KeyPair(raw)

    def test_script_hash_matches_verification_script(self, key: KeyPair) -> None:
        assert key.script_hash == script_hash(signature_redeem_script(key.public_key))
        assert key.address.startswith("N")

    def test_private_key_not_in_repr(self, key: KeyPair) -> None:
        assert PRIVATE_KEY.hex() not in repr(key)


class TestSignatures:
    def test_sign_and_verify(self, key: KeyPair) -> None:
        data = b"\x4e\x33\x4f\x4e" + b"\x01" * 32
        signature = key.sign(data)
        assert len(signature) == 64
        assert verify_signature(data, signature, key.public_key)

    def test_wrong_data_does_not_verify(self, key: KeyPair) -> None:
        signature = key.sign(b"one")
        assert not verify_signature(b"two", signature, key.public_key)

    def test_wrong_key_does_not_verify(self, key: KeyPair) -> None:
        signature = key.sign(b"data")
        assert not verify_signature(b"data", signature, KeyPair.generate().public_key)

    def test_compress_is_idempotent(self, key: KeyPair) -> None:
        assert compress_public_key(key.public_key) == key.public_key


class TestSigner:
    @pytest.mark.asyncio
    async def test_signs_for_known_account(self, key: KeyPair) -> None:
        signer = KeyPairSigner(key)
        signature = await signer.sign(b"payload", key.script_hash)
        assert verify_signature(b"payload", signature, signer.public_key(key.script_hash))

    def test_unknown_account(self, key: KeyPair) -> None:
        with pytest.raises(UnknownAccountError):
            KeyPairSigner().public_key(key.script_hash)


class TestStore:
    def test_generate_save_load(self, tmp_path: Path) -> None:
        env_path = tmp_path / ".env"
        env_path.write_text("NEO_RPC_URL=http://node:10332\n", encoding="utf-8")
        wif, address = generate_key()

        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("NEO_WIF", None)
            save_wif(wif, env_path)
            assert load_wif(env_path) == wif
            assert KeyPair.from_wif(load_wif(env_path)).address == address

        content = env_path.read_text(encoding="utf-8")
        assert "NEO_RPC_URL=http://node:10332" in content
        if os.name != "nt":
            assert env_path.stat().st_mode & 0o777 == 0o600

    def test_missing_wif(self, tmp_path: Path) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("NEO_WIF", None)
            with pytest.raises(ValueError):
                load_wif(tmp_path / "absent.env")

    def test_get_key_pair_from_explicit_wif(self, key: KeyPair) -> None:
        assert get_key_pair(key.to_wif()) == key
