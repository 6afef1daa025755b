"""
JSON-RPC client for a Neo node.

Every node method is implemented once, as ``<name>_async``.  The blocking
method of the same name is generated from it by ``blocking`` and drives the
very same coroutine, so both forms send identical requests and raise
identical faults.

Usage:
    with RpcClient("http://localhost:10332") as rpc:
        height = rpc.get_block_count()

    async with RpcClient(url) as rpc:
        height = await rpc.get_block_count_async()
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence, Union

from ..config import Settings
from ..errors import DecodeFault, FeeEstimationFault
from ..primitives import BigDecimal, UInt160, UInt256, parse_account
from ..utils import now_ms
from ..vm.params import ContractParameter
from .dispatch import Dispatcher
from .models import (
    ContractState,
    RpcAccount,
    RpcApplicationLog,
    RpcBlock,
    RpcBlockHeader,
    RpcInvokeResult,
    RpcNep5Balances,
    RpcNep5Transfers,
    RpcPeers,
    RpcPlugin,
    RpcRawMemPool,
    RpcTransaction,
    RpcTransferOut,
    RpcValidateAddressResult,
    RpcValidator,
    RpcVersion,
    as_int,
    as_str,
    as_uint256,
)
from .sync import blocking
from .transport import HttpTransport, Transport

log = logging.getLogger(__name__)

POLICY_CONTRACT = UInt160.from_string("0xcc5e4edd9f5f8dba8bb65734541df7a1c081c67b")

HashOrIndex = Union[int, str, UInt256]


def _hash_or_index(value: HashOrIndex) -> Union[int, str]:
    """Integers and short all-digit strings go out as an index, anything else as a hash."""
    if isinstance(value, bool):
        raise TypeError("Expected a block hash or index, got bool")
    if isinstance(value, int):
        return value
    text = str(value)
    # a 64-digit string is an unprefixed hash that happens to have no hex letters
    if text.isdigit() and len(text) < 64:
        return int(text)
    return text


def _account_str(value: Union[str, UInt160]) -> str:
    return str(value) if isinstance(value, UInt160) else value


def _raw_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return value.to_array()


def _result_hash(result: Any, method: str) -> UInt256:
    if not isinstance(result, dict):
        raise DecodeFault(method, f"expected object, got {type(result).__name__}")
    return as_uint256(result.get("hash"), f"{method}.hash")


class RpcClient:
    """Typed access to every node method, in async and blocking form."""

    def __init__(
        self,
        url: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[Transport] = None,
        blocking_timeout: Optional[float] = None,
    ) -> None:
        self.url = url
        if transport is None:
            transport = HttpTransport(url, user, password, timeout=timeout or 30.0)
        self.dispatcher = Dispatcher(transport)
        self.blocking_timeout = blocking_timeout

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs: Any) -> "RpcClient":
        settings = settings or Settings.from_env()
        return cls(
            settings.rpc_url,
            settings.rpc_user,
            settings.rpc_password,
            timeout=settings.timeout,
            **kwargs,
        )

    async def call_async(self, method: str, *params: Any) -> Any:
        """Send a raw request and return the undecoded ``result``."""
        return await self.dispatcher.call(method, *params)

    call = blocking(call_async)

    async def aclose(self) -> None:
        await self.dispatcher.aclose()

    close = blocking(aclose)

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ============ Blockchain ============

    async def get_best_block_hash_async(self) -> UInt256:
        result = await self.call_async("getbestblockhash")
        return as_uint256(result, "getbestblockhash")

    get_best_block_hash = blocking(get_best_block_hash_async)

    async def get_block_hex_async(self, hash_or_index: HashOrIndex) -> str:
        result = await self.call_async("getblock", _hash_or_index(hash_or_index))
        return as_str(result, "getblock")

    get_block_hex = blocking(get_block_hex_async)

    async def get_block_async(self, hash_or_index: HashOrIndex) -> RpcBlock:
        result = await self.call_async("getblock", _hash_or_index(hash_or_index), True)
        return RpcBlock.from_json(result)

    get_block = blocking(get_block_async)

    async def get_block_count_async(self) -> int:
        return as_int(await self.call_async("getblockcount"), "getblockcount")

    get_block_count = blocking(get_block_count_async)

    async def get_block_hash_async(self, index: int) -> UInt256:
        return as_uint256(await self.call_async("getblockhash", index), "getblockhash")

    get_block_hash = blocking(get_block_hash_async)

    async def get_block_header_hex_async(self, hash_or_index: HashOrIndex) -> str:
        result = await self.call_async("getblockheader", _hash_or_index(hash_or_index))
        return as_str(result, "getblockheader")

    get_block_header_hex = blocking(get_block_header_hex_async)

    async def get_block_header_async(self, hash_or_index: HashOrIndex) -> RpcBlockHeader:
        result = await self.call_async("getblockheader", _hash_or_index(hash_or_index), True)
        return RpcBlockHeader.from_json(result)

    get_block_header = blocking(get_block_header_async)

    async def get_contract_state_async(self, script_hash: Union[str, UInt160]) -> ContractState:
        result = await self.call_async("getcontractstate", _account_str(script_hash))
        return ContractState.from_json(result)

    get_contract_state = blocking(get_contract_state_async)

    async def get_raw_mempool_async(self) -> list[UInt256]:
        result = await self.call_async("getrawmempool")
        if not isinstance(result, list):
            raise DecodeFault("getrawmempool", f"expected array, got {type(result).__name__}")
        return [as_uint256(h, f"getrawmempool[{i}]") for i, h in enumerate(result)]

    get_raw_mempool = blocking(get_raw_mempool_async)

    async def get_raw_mempool_both_async(self) -> RpcRawMemPool:
        return RpcRawMemPool.from_json(await self.call_async("getrawmempool", True))

    get_raw_mempool_both = blocking(get_raw_mempool_both_async)

    async def get_raw_transaction_hex_async(self, tx_hash: Union[str, UInt256]) -> str:
        result = await self.call_async("getrawtransaction", str(tx_hash))
        return as_str(result, "getrawtransaction")

    get_raw_transaction_hex = blocking(get_raw_transaction_hex_async)

    async def get_raw_transaction_async(self, tx_hash: Union[str, UInt256]) -> RpcTransaction:
        result = await self.call_async("getrawtransaction", str(tx_hash), True)
        return RpcTransaction.from_json(result)

    get_raw_transaction = blocking(get_raw_transaction_async)

    async def get_storage_async(self, script_hash_or_id: Union[int, str, UInt160], key: str) -> str:
        """Read one storage value; ``key`` and the result are as the node encodes them."""
        if isinstance(script_hash_or_id, UInt160):
            target: Union[int, str] = str(script_hash_or_id)
        else:
            target = _hash_or_index(script_hash_or_id)
        return as_str(await self.call_async("getstorage", target, key), "getstorage")

    get_storage = blocking(get_storage_async)

    async def get_transaction_height_async(self, tx_hash: Union[str, UInt256]) -> int:
        result = await self.call_async("gettransactionheight", str(tx_hash))
        return as_int(result, "gettransactionheight")

    get_transaction_height = blocking(get_transaction_height_async)

    async def get_validators_async(self) -> list[RpcValidator]:
        result = await self.call_async("getvalidators")
        if not isinstance(result, list):
            raise DecodeFault("getvalidators", f"expected array, got {type(result).__name__}")
        return [RpcValidator.from_json(v, f"getvalidators[{i}]") for i, v in enumerate(result)]

    get_validators = blocking(get_validators_async)

    # ============ Node ============

    async def get_connection_count_async(self) -> int:
        return as_int(await self.call_async("getconnectioncount"), "getconnectioncount")

    get_connection_count = blocking(get_connection_count_async)

    async def get_peers_async(self) -> RpcPeers:
        return RpcPeers.from_json(await self.call_async("getpeers"))

    get_peers = blocking(get_peers_async)

    async def get_version_async(self) -> RpcVersion:
        return RpcVersion.from_json(await self.call_async("getversion"))

    get_version = blocking(get_version_async)

    async def send_raw_transaction_async(self, tx: Any) -> UInt256:
        """Broadcast a transaction, given as raw bytes or as a ``Transaction``."""
        result = await self.call_async("sendrawtransaction", _raw_bytes(tx).hex())
        tx_hash = _result_hash(result, "sendrawtransaction")
        log.info("Broadcast transaction %s", tx_hash)
        return tx_hash

    send_raw_transaction = blocking(send_raw_transaction_async)

    async def submit_block_async(self, block: bytes) -> UInt256:
        result = await self.call_async("submitblock", bytes(block).hex())
        return _result_hash(result, "submitblock")

    submit_block = blocking(submit_block_async)

    # ============ Smart contracts ============

    async def invoke_function_async(
        self,
        script_hash: Union[str, UInt160],
        operation: str,
        stack: Sequence[Any] = (),
    ) -> RpcInvokeResult:
        """Test-run ``operation`` on a contract; the chain is not changed."""
        params = [ContractParameter.infer(p).to_json() for p in stack]
        result = await self.call_async("invokefunction", _account_str(script_hash), operation, params)
        return RpcInvokeResult.from_json(result)

    invoke_function = blocking(invoke_function_async)

    async def invoke_script_async(self, script: bytes, *verifying: Union[str, UInt160]) -> RpcInvokeResult:
        """Test-run a script, optionally with the accounts whose witnesses it checks."""
        params: list[Any] = [bytes(script).hex()]
        params.extend(str(parse_account(h)) for h in verifying)
        return RpcInvokeResult.from_json(await self.call_async("invokescript", *params))

    invoke_script = blocking(invoke_script_async)

    # ============ Utilities ============

    async def list_plugins_async(self) -> list[RpcPlugin]:
        result = await self.call_async("listplugins")
        if not isinstance(result, list):
            raise DecodeFault("listplugins", f"expected array, got {type(result).__name__}")
        return [RpcPlugin.from_json(p, f"listplugins[{i}]") for i, p in enumerate(result)]

    list_plugins = blocking(list_plugins_async)

    async def validate_address_async(self, address: str) -> RpcValidateAddressResult:
        return RpcValidateAddressResult.from_json(await self.call_async("validateaddress", address))

    validate_address = blocking(validate_address_async)

    # ============ Server-side wallet ============

    async def close_wallet_async(self) -> bool:
        return bool(await self.call_async("closewallet"))

    close_wallet = blocking(close_wallet_async)

    async def dump_priv_key_async(self, address: str) -> str:
        return as_str(await self.call_async("dumpprivkey", address), "dumpprivkey")

    dump_priv_key = blocking(dump_priv_key_async)

    async def get_balance_async(self, asset: Union[str, UInt160]) -> BigDecimal:
        """Wallet balance of a token, scaled by the token's ``decimals``."""
        asset_id = _account_str(asset)
        decimals_result = await self.invoke_function_async(asset_id, "decimals")
        if not decimals_result.halted or not decimals_result.stack:
            raise DecodeFault("decimals", f"token {asset_id} did not return its decimals")
        decimals = decimals_result.stack[0].as_int()
        result = await self.call_async("getbalance", asset_id)
        if not isinstance(result, dict):
            raise DecodeFault("getbalance", f"expected object, got {type(result).__name__}")
        return BigDecimal(as_int(result.get("balance"), "getbalance.balance"), decimals)

    get_balance = blocking(get_balance_async)

    async def get_new_address_async(self) -> str:
        return as_str(await self.call_async("getnewaddress"), "getnewaddress")

    get_new_address = blocking(get_new_address_async)

    async def get_unclaimed_gas_async(self) -> int:
        return as_int(await self.call_async("getunclaimedgas"), "getunclaimedgas")

    get_unclaimed_gas = blocking(get_unclaimed_gas_async)

    async def import_priv_key_async(self, wif: str) -> RpcAccount:
        return RpcAccount.from_json(await self.call_async("importprivkey", wif))

    import_priv_key = blocking(import_priv_key_async)

    async def list_address_async(self) -> list[RpcAccount]:
        result = await self.call_async("listaddress")
        if not isinstance(result, list):
            raise DecodeFault("listaddress", f"expected array, got {type(result).__name__}")
        return [RpcAccount.from_json(a, f"listaddress[{i}]") for i, a in enumerate(result)]

    list_address = blocking(list_address_async)

    async def open_wallet_async(self, path: str, password: str) -> bool:
        return bool(await self.call_async("openwallet", path, password))

    open_wallet = blocking(open_wallet_async)

    async def send_from_async(
        self,
        asset: Union[str, UInt160],
        from_address: str,
        to_address: str,
        amount: str,
    ) -> dict[str, Any]:
        return await self.call_async("sendfrom", _account_str(asset), from_address, to_address, str(amount))

    send_from = blocking(send_from_async)

    async def send_many_async(
        self,
        outputs: Iterable[RpcTransferOut],
        from_address: Optional[str] = None,
    ) -> dict[str, Any]:
        params: list[Any] = []
        if from_address:
            params.append(from_address)
        params.append([o.to_json() for o in outputs])
        return await self.call_async("sendmany", *params)

    send_many = blocking(send_many_async)

    async def send_to_address_async(
        self,
        asset: Union[str, UInt160],
        address: str,
        amount: str,
    ) -> dict[str, Any]:
        return await self.call_async("sendtoaddress", _account_str(asset), address, str(amount))

    send_to_address = blocking(send_to_address_async)

    # ============ Plugins ============

    async def get_application_log_async(self, tx_hash: Union[str, UInt256]) -> RpcApplicationLog:
        return RpcApplicationLog.from_json(await self.call_async("getapplicationlog", str(tx_hash)))

    get_application_log = blocking(get_application_log_async)

    async def get_nep5_transfers_async(
        self,
        address: str,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> RpcNep5Transfers:
        """Token transfers of ``address`` between two millisecond timestamps."""
        start = 0 if start is None else start
        end = now_ms() if end is None else end
        return RpcNep5Transfers.from_json(await self.call_async("getnep5transfers", address, start, end))

    get_nep5_transfers = blocking(get_nep5_transfers_async)

    async def get_nep5_balances_async(self, address: str) -> RpcNep5Balances:
        return RpcNep5Balances.from_json(await self.call_async("getnep5balances", address))

    get_nep5_balances = blocking(get_nep5_balances_async)

    # ============ Policy ============

    async def _policy_int(self, operation: str) -> int:
        result = await self.invoke_function_async(POLICY_CONTRACT, operation)
        if not result.halted or not result.stack:
            raise FeeEstimationFault(
                f"Policy query {operation} ended in {result.state}: {result.exception or 'empty stack'}"
            )
        return result.stack[0].as_int()

    async def get_fee_per_byte_async(self) -> int:
        return await self._policy_int("getFeePerByte")

    get_fee_per_byte = blocking(get_fee_per_byte_async)

    async def get_exec_fee_factor_async(self) -> int:
        return await self._policy_int("getExecFeeFactor")

    get_exec_fee_factor = blocking(get_exec_fee_factor_async)


__all__ = ["RpcClient", "POLICY_CONTRACT"]
