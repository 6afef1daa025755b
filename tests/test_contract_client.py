"""Tests for test invocations and deployment transactions."""

from __future__ import annotations

import pytest

from conftest import NETWORK, StubTransport, integer, invoke_result
from neoconduit.contract import ContractClient
from neoconduit.errors import FeeEstimationFault, ScriptBuildFault
from neoconduit.rpc.client import RpcClient
from neoconduit.sigil.keys import KeyPair, verify_signature
from neoconduit.vm.contract import signature_redeem_script
from neoconduit.vm.script import build_deployment, build_invocation

GAS = "0xd2a4cff31913016155e38e474a2c06d08be276cf"
PROGRAM = b"\x57\x00\x01\x40"
MANIFEST = {
    "name": "Hello",
    "groups": [],
    "features": {},
    "supportedstandards": [],
    "abi": {
        "methods": [{"name": "main", "parameters": [], "returntype": "Void", "offset": 0, "safe": False}],
        "events": [],
    },
    "permissions": [{"contract": "*", "methods": "*"}],
    "trusts": [],
    "extra": None,
}


def test_test_invoke_sends_built_script(rpc: RpcClient, stub: StubTransport) -> None:
    stub.reply("invokescript", invoke_result(integer(8)))
    result = ContractClient(rpc).test_invoke(GAS, "decimals")
    assert result.stack[0].as_int() == 8
    assert stub.requests[0]["params"] == [build_invocation(GAS, "decimals").hex()]


def test_deploy_single_signature(node_rpc: RpcClient, node: StubTransport) -> None:
    key = KeyPair.generate()
    tx = ContractClient(node_rpc).create_deploy_contract_tx(PROGRAM, MANIFEST, key)

    assert tx.script == build_deployment(PROGRAM, MANIFEST)
    assert tx.sender == key.script_hash
    assert len(tx.witnesses) == 1
    witness = tx.witnesses[0]
    assert witness.verification_script == signature_redeem_script(key.public_key)
    assert verify_signature(tx.get_sign_data(NETWORK), witness.invocation_script[2:], key.public_key)
    assert "sendrawtransaction" not in node.methods()


@pytest.mark.asyncio
async def test_deploy_async_with_known_network(node_rpc: RpcClient, node: StubTransport) -> None:
    key = KeyPair.generate()
    tx = await ContractClient(node_rpc).deploy_async(PROGRAM, MANIFEST, key, network=NETWORK)
    assert tx.system_fee == 1007390
    assert "getversion" not in node.methods()


def test_deploy_faulted_simulation(node_rpc: RpcClient, node: StubTransport) -> None:
    node.reply("invokescript", invoke_result(state="FAULT", exception="Contract already exists"))
    with pytest.raises(FeeEstimationFault):
        ContractClient(node_rpc).deploy(PROGRAM, MANIFEST, KeyPair.generate())


def test_deploy_rejects_bad_manifest(node_rpc: RpcClient, node: StubTransport) -> None:
    with pytest.raises(ScriptBuildFault):
        ContractClient(node_rpc).deploy(PROGRAM, {"name": "Hello"}, KeyPair.generate())
    assert node.requests == []
