"""Tests for the transaction manager lifecycle, pricing and signing."""

from __future__ import annotations

import asyncio
import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import NETWORK, StubTransport, invoke_result, node_replies
from neoconduit.errors import (
    AlreadySignedFault,
    FeeEstimationFault,
    InsufficientFundsFault,
    MissingSignaturesFault,
    SignatureMismatchFault,
    TransactionFault,
)
from neoconduit.primitives import UInt160
from neoconduit.rpc.client import RpcClient
from neoconduit.sigil.keys import KeyPair, verify_signature
from neoconduit.tx.manager import TransactionManager, TxState
from neoconduit.tx.payload import Signer, WitnessScope
from neoconduit.vm.contract import (
    multisig_redeem_script,
    script_hash,
    signature_contract_cost,
    signature_redeem_script,
)

SCRIPT = b"\x11\x40"
OTHER = UInt160(b"\x07" * 20)


@pytest.fixture()
def key() -> KeyPair:
    return KeyPair.generate()


@pytest.fixture()
def manager(node_rpc: RpcClient, key: KeyPair) -> TransactionManager:
    return TransactionManager(node_rpc, key.script_hash)


class TestPricing:
    def test_fees_and_validity(self, manager: TransactionManager, key: KeyPair) -> None:
        manager.add_signature(key)
        tx = manager.make_transaction(SCRIPT)
        signed = manager.sign()

        assert tx.system_fee == 1007390
        assert tx.valid_until_block == 1000 - 1 + 5760
        assert tx.network_fee == signed.size * 1000 + signature_contract_cost() * 30
        assert manager.network == NETWORK

    def test_simulation_runs_with_signer_accounts(
        self, manager: TransactionManager, node: StubTransport, key: KeyPair
    ) -> None:
        manager.make_transaction(SCRIPT)
        request = next(r for r in node.requests if r["method"] == "invokescript")
        assert request["params"] == [SCRIPT.hex(), str(key.script_hash)]

    def test_known_network_skips_version_query(self, node_rpc: RpcClient, node: StubTransport, key: KeyPair) -> None:
        manager = TransactionManager(node_rpc, key.script_hash, network=5195086)
        manager.make_transaction(SCRIPT)
        assert "getversion" not in node.methods()
        assert manager.network == 5195086

    def test_budget_exceeded(self, manager: TransactionManager) -> None:
        with pytest.raises(InsufficientFundsFault) as excinfo:
            manager.make_transaction(SCRIPT, budget=1)
        assert excinfo.value.budget == 1
        assert excinfo.value.required > 1007390
        assert manager.state is TxState.DRAFTING

    def test_faulted_simulation(self, manager: TransactionManager, node: StubTransport) -> None:
        node.reply("invokescript", invoke_result(state="FAULT", exception="ABORT is executed"))
        with pytest.raises(FeeEstimationFault) as excinfo:
            manager.make_transaction(SCRIPT)
        assert "ABORT" in str(excinfo.value)
        assert manager.transaction is None

    def test_sender_is_prepended(self, manager: TransactionManager, key: KeyPair) -> None:
        tx = manager.make_transaction(SCRIPT, [Signer(OTHER, WitnessScope.GLOBAL)])
        assert [s.account for s in tx.signers] == [key.script_hash, OTHER]
        assert tx.signers[0].scopes == WitnessScope.CALLED_BY_ENTRY

    def test_listed_sender_moves_to_front(self, manager: TransactionManager, key: KeyPair) -> None:
        own = Signer(key.script_hash, WitnessScope.GLOBAL)
        tx = manager.make_transaction(SCRIPT, [Signer(OTHER), own])
        assert tx.sender == key.script_hash
        assert tx.signers == (own, Signer(OTHER))


    def test_make_twice(self, manager: TransactionManager) -> None:
        manager.make_transaction(SCRIPT)
        with pytest.raises(TransactionFault):
            manager.make_transaction(SCRIPT)


class TestSigning:
    def test_single_signature_witness(self, manager: TransactionManager, key: KeyPair) -> None:
        manager.make_transaction(SCRIPT)
        manager.add_signature(key)
        assert manager.signatures_collected(key.script_hash) == 1

        signed = manager.sign()
        witness = signed.witnesses[0]
        assert witness.verification_script == signature_redeem_script(key.public_key)
        assert verify_signature(signed.get_sign_data(NETWORK), witness.invocation_script[2:], key.public_key)
        assert manager.state is TxState.SIGNED

    def test_missing_signature(self, manager: TransactionManager, key: KeyPair) -> None:
        manager.make_transaction(SCRIPT)
        with pytest.raises(MissingSignaturesFault):
            manager.sign()

    def test_unregistered_cosigner_blocks_signing(self, manager: TransactionManager, key: KeyPair) -> None:
        manager.add_signature(key)
        manager.make_transaction(SCRIPT, [Signer(OTHER)])
        with pytest.raises(MissingSignaturesFault):
            manager.sign()

    def test_nothing_changes_after_signing(self, manager: TransactionManager, key: KeyPair) -> None:
        manager.add_signature(key)
        manager.make_transaction(SCRIPT)
        manager.sign()
        with pytest.raises(AlreadySignedFault):
            manager.sign()
        with pytest.raises(AlreadySignedFault):
            manager.add_signature(key)

    def test_key_outside_signers(self, manager: TransactionManager) -> None:
        manager.make_transaction(SCRIPT)
        with pytest.raises(TransactionFault):
            manager.add_signature(KeyPair.generate())

    def test_signature_before_transaction(self, manager: TransactionManager, key: KeyPair) -> None:
        with pytest.raises(TransactionFault):
            manager.add_multi_sig_signature(key.public_key, b"\x01" * 64, 1, [key.public_key])


    @pytest.mark.asyncio
    async def test_async_forms(self, manager: TransactionManager, key: KeyPair) -> None:
        await manager.add_signature_async(key)
        await manager.make_transaction_async(SCRIPT)
        assert manager.sign().witnesses


class TestMultiSig:
    def test_two_of_three(self, node_rpc: RpcClient) -> None:
        keys = [KeyPair.generate() for _ in range(3)]
        public_keys = [k.public_key for k in keys]
        verification = multisig_redeem_script(2, public_keys)
        manager = TransactionManager(node_rpc, script_hash(verification))
        manager.register_multi_sig(2, public_keys)
        manager.make_transaction(SCRIPT)

        with pytest.raises(SignatureMismatchFault):
            manager.add_multi_sig_signature(keys[0].public_key, b"\x01" * 64, 2, public_keys)
        assert manager.signatures_collected(manager.sender) == 0

        manager.add_multi_sig(keys[2], 2, public_keys)
        with pytest.raises(MissingSignaturesFault):
            manager.sign()

        sign_data = manager.transaction.get_sign_data(NETWORK)
        manager.add_multi_sig_signature(keys[1].public_key, keys[1].sign(sign_data), 2, public_keys)
        signed = manager.sign()

        witness = signed.witnesses[0]
        assert witness.verification_script == verification
        assert len(witness.invocation_script) == 132

    def test_parallel_submissions_are_all_counted(self, node_rpc: RpcClient) -> None:
        keys = [KeyPair.generate() for _ in range(5)]
        public_keys = [k.public_key for k in keys]
        manager = TransactionManager(node_rpc, script_hash(multisig_redeem_script(3, public_keys)))
        manager.register_multi_sig(3, public_keys)
        manager.make_transaction(SCRIPT)
        sign_data = manager.transaction.get_sign_data(NETWORK)

        def submit(k: KeyPair) -> UInt160:
            return manager.add_multi_sig_signature(k.public_key, k.sign(sign_data), 3, public_keys)

        with ThreadPoolExecutor(max_workers=5) as pool:
            accounts = set(pool.map(submit, keys))

        assert accounts == {manager.sender}
        assert manager.signatures_collected(manager.sender) == 5
        assert len(manager.sign().witnesses[0].invocation_script) == 3 * 66


class GatedNode(StubTransport):
    """Holds the script simulation open until the gate is set."""

    def __init__(self) -> None:
        super().__init__(node_replies())
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()

    async def send(self, body: bytes) -> bytes:
        if json.loads(body)["method"] == "invokescript":
            self.entered.set()
            await self.gate.wait()
        return await super().send(body)


@pytest.mark.asyncio
async def test_signature_added_during_pricing_is_applied(key: KeyPair) -> None:
    node = GatedNode()
    manager = TransactionManager(RpcClient("http://stub.invalid", transport=node), key.script_hash)
    task = asyncio.create_task(manager.make_transaction_async(SCRIPT))
    await node.entered.wait()

    await manager.add_signature_async(key)
    assert manager.signatures_collected(key.script_hash) == 0
    node.gate.set()
    await task

    assert manager.signatures_collected(key.script_hash) == 1
    assert manager.sign().witnesses
