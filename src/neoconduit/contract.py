"""
Contract operations over RPC: test invocations and deployment transactions.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .manifest.models import ContractManifest
from .primitives import UInt160
from .rpc.client import RpcClient
from .rpc.models import RpcInvokeResult
from .rpc.sync import blocking
from .sigil.keys import KeyPair
from .tx.manager import TransactionManager
from .tx.payload import Transaction
from .vm.script import build_deployment, build_invocation

log = logging.getLogger(__name__)


class ContractClient:
    def __init__(self, rpc: RpcClient) -> None:
        self.rpc = rpc

    @property
    def blocking_timeout(self) -> Optional[float]:
        return self.rpc.blocking_timeout

    async def test_invoke_async(
        self,
        script_hash: Union[UInt160, str],
        operation: str,
        *args: Any,
    ) -> RpcInvokeResult:
        """Run ``operation`` in the node's VM without touching chain state."""
        script = build_invocation(script_hash, operation, args)
        return await self.rpc.invoke_script_async(script)

    test_invoke = blocking(test_invoke_async)

    async def create_deploy_contract_tx_async(
        self,
        program: bytes,
        manifest: Union[ContractManifest, Mapping[str, Any], str],
        key: KeyPair,
        *,
        network: Optional[int] = None,
        budget: Optional[int] = None,
    ) -> Transaction:
        """Build and sign a deployment transaction sent by ``key``'s account.

        The transaction is returned signed but not broadcast.
        """
        script = build_deployment(program, manifest)
        manager = TransactionManager(self.rpc, key.script_hash, network=network)
        await manager.add_signature_async(key)
        await manager.make_transaction_async(script, budget=budget)
        tx = manager.sign()
        log.info("Built deployment transaction %s from %s", tx.hash, key.address)
        return tx

    create_deploy_contract_tx = blocking(create_deploy_contract_tx_async)

    deploy_async = create_deploy_contract_tx_async
    deploy = create_deploy_contract_tx


__all__ = ["ContractClient"]
