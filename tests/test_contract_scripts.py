"""Tests for single- and multi-signature verification scripts."""

from __future__ import annotations

import pytest

from neoconduit.errors import ScriptBuildFault
from neoconduit.sigil.keys import KeyPair, public_key_sort_key
from neoconduit.vm.contract import (
    is_signature_contract,
    multisig_contract_cost,
    multisig_redeem_script,
    parse_multisig,
    script_hash,
    signature_contract_cost,
    signature_redeem_script,
)
from neoconduit.vm.opcode import OpCode


@pytest.fixture(scope="module")
def keys() -> list[KeyPair]:
    return [KeyPair.generate() for _ in range(3)]


class TestSignatureScript:
    def test_layout(self, keys: list[KeyPair]) -> None:
        script = signature_redeem_script(keys[0].public_key)
        assert script.hex() == "0c21" + keys[0].public_key.hex() + "4156e7b327"
        assert is_signature_contract(script)

    def test_rejects_uncompressed_length(self) -> None:
        with pytest.raises(ScriptBuildFault):
            signature_redeem_script(b"\x04" + b"\x00" * 64)

    def test_cost(self) -> None:
        assert signature_contract_cost() == 8 * 2 + (1 << 15)


class TestMultiSigScript:
    def test_keys_sorted_regardless_of_input_order(self, keys: list[KeyPair]) -> None:
        pubs = [k.public_key for k in keys]
        assert multisig_redeem_script(2, pubs) == multisig_redeem_script(2, list(reversed(pubs)))

    def test_layout_and_parse(self, keys: list[KeyPair]) -> None:
        pubs = [k.public_key for k in keys]
        script = multisig_redeem_script(2, pubs)
        assert script[0] == OpCode.PUSH0 + 2
        assert script.endswith(bytes.fromhex("419ed0dc3a"))
        m, parsed = parse_multisig(script)
        assert m == 2
        assert parsed == sorted(pubs, key=public_key_sort_key)
        assert not is_signature_contract(script)

    def test_account_hash_is_order_independent(self, keys: list[KeyPair]) -> None:
        pubs = [k.public_key for k in keys]
        assert script_hash(multisig_redeem_script(2, pubs)) == script_hash(
            multisig_redeem_script(2, [pubs[2], pubs[0], pubs[1]])
        )

    @pytest.mark.parametrize("m", [0, 4])
    def test_threshold_bounds(self, keys: list[KeyPair], m: int) -> None:
        with pytest.raises(ScriptBuildFault):
            multisig_redeem_script(m, [k.public_key for k in keys])

    def test_duplicate_keys(self, keys: list[KeyPair]) -> None:
        pub = keys[0].public_key
        with pytest.raises(ScriptBuildFault):
            multisig_redeem_script(1, [pub, pub])

    def test_invalid_point(self) -> None:
        with pytest.raises(ScriptBuildFault):
            multisig_redeem_script(1, [b"\x02" + b"\xff" * 32, b"\x03" + b"\xff" * 32])

    def test_parse_rejects_other_scripts(self, keys: list[KeyPair]) -> None:
        assert parse_multisig(signature_redeem_script(keys[0].public_key)) is None
        assert parse_multisig(b"") is None

    def test_cost_counts_every_key(self) -> None:
        assert multisig_contract_cost(2, 3) == 8 * 5 + 1 + 1 + 3 * (1 << 15)
