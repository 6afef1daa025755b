"""Tests for RpcClient: both call forms, argument shaping, and the HTTP transport."""

from __future__ import annotations

import asyncio
import base64
import json
from decimal import Decimal

import httpx
import pytest

from conftest import StubTransport, integer, invoke_result
from neoconduit.errors import DecodeFault, ProtocolFault, TransportFault
from neoconduit.primitives import BigDecimal, UInt160, UInt256, to_address
from neoconduit.rpc.client import POLICY_CONTRACT, RpcClient
from neoconduit.rpc.envelope import RpcErrorDescriptor
from neoconduit.rpc.models import RpcTransferOut
from neoconduit.rpc.transport import HttpTransport

GAS = "0xd2a4cff31913016155e38e474a2c06d08be276cf"
TX_HASH = "0x" + "ab" * 32
ADDRESS = to_address(UInt160.from_string(GAS))


class TestDualMode:
    def test_blocking_and_async_agree(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getblockcount", 100)
        assert rpc.get_block_count() == 100

    @pytest.mark.asyncio
    async def test_async_form(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getblockcount", 100)
        assert await rpc.get_block_count_async() == 100
        assert stub.methods() == ["getblockcount"]

    @pytest.mark.asyncio
    async def test_blocking_call_inside_running_loop(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getblockcount", 7)
        assert rpc.get_block_count() == 7

    def test_same_fault_type_in_both_forms(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getblock", RpcErrorDescriptor(-100, "Unknown block"))
        with pytest.raises(ProtocolFault) as blocking_exc:
            rpc.get_block(5)

        async def run() -> None:
            await rpc.get_block_async(5)

        with pytest.raises(ProtocolFault) as async_exc:
            asyncio.run(run())
        assert blocking_exc.value.code == async_exc.value.code == -100
        assert len(stub.requests) == 2

    def test_blocking_name_drops_suffix(self) -> None:
        assert RpcClient.get_block_count.__name__ == "get_block_count"

    def test_context_manager_closes_transport(self, stub: StubTransport) -> None:
        with RpcClient("http://stub.invalid", transport=stub):
            pass
        assert stub.closed


class TestArguments:
    @pytest.mark.parametrize(
        "value, sent",
        [(12, 12), ("12", 12), (TX_HASH, TX_HASH), (UInt256.from_string(TX_HASH), TX_HASH)],
    )
    def test_hash_or_index(self, rpc: RpcClient, stub: StubTransport, value: object, sent: object) -> None:
        stub.reply("getblock", "00ff")
        assert rpc.get_block_hex(value) == "00ff"
        assert stub.requests[0]["params"] == [sent]

    def test_digit_string_is_header_index(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getblockheader", "00")
        rpc.get_block_header_hex("0")
        assert stub.requests[0]["params"] == [0]

    def test_unprefixed_all_digit_hash_stays_a_hash(self, rpc: RpcClient, stub: StubTransport) -> None:
        digits = "12" * 32
        stub.reply("getblock", "00")
        rpc.get_block_hex(digits)
        assert stub.requests[0]["params"] == [digits]


    def test_storage_by_id_or_hash(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getstorage", "AQ==")
        rpc.get_storage(-6, "a2V5")
        rpc.get_storage(UInt160.from_string(GAS), "a2V5")
        assert stub.requests[0]["params"] == [-6, "a2V5"]
        assert stub.requests[1]["params"] == [GAS, "a2V5"]

    def test_invoke_function_stack_parameters(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("invokefunction", invoke_result(integer(8)))
        result = rpc.invoke_function(GAS, "balanceOf", [UInt160.from_string(GAS), 5])
        assert result.stack[0].as_int() == 8
        _, operation, stack = stub.requests[0]["params"]
        assert operation == "balanceOf"
        assert stack == [
            {"type": "Hash160", "value": GAS},
            {"type": "Integer", "value": "5"},
        ]

    def test_invoke_script_sends_hex_and_verifiers(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("invokescript", invoke_result())
        rpc.invoke_script(b"\x10\x40", GAS)
        assert stub.requests[0]["params"] == ["1040", GAS]

    def test_send_many_optional_sender(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("sendmany", {"hash": TX_HASH})
        out = RpcTransferOut(UInt160.from_string(GAS), "1.5", ADDRESS)
        rpc.send_many([out])
        rpc.send_many([out], from_address=ADDRESS)
        assert stub.requests[0]["params"] == [[{"asset": GAS, "value": "1.5", "address": ADDRESS}]]
        assert stub.requests[1]["params"][0] == ADDRESS

    def test_nep5_transfers_default_window(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getnep5transfers", {"address": ADDRESS, "sent": [], "received": []})
        transfers = rpc.get_nep5_transfers(ADDRESS)
        _, start, end = stub.requests[0]["params"]
        assert start == 0
        assert end > 1_600_000_000_000
        assert transfers.sent == ()


class TestResults:
    def test_send_raw_transaction_returns_hash(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("sendrawtransaction", {"hash": TX_HASH})
        assert rpc.send_raw_transaction(b"\x00\x01") == UInt256.from_string(TX_HASH)
        assert stub.requests[0]["params"] == ["0001"]

    def test_get_balance_scales_by_decimals(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("invokefunction", invoke_result(integer(8)))
        stub.reply("getbalance", {"balance": "150000000"})
        assert rpc.get_balance(GAS) == BigDecimal(15, 1)
        assert str(rpc.get_balance(GAS)) == "1.5"

    def test_unclaimed_gas_is_int(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getunclaimedgas", "735870007400")
        assert rpc.get_unclaimed_gas() == 735870007400

    def test_fractional_count_is_decode_fault(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getblockcount", Decimal("1.5"))
        with pytest.raises(DecodeFault):
            rpc.get_block_count()

    def test_policy_helpers(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("invokefunction", lambda params: invoke_result(integer(1000 if params[1] == "getFeePerByte" else 30)))
        assert rpc.get_fee_per_byte() == 1000
        assert rpc.get_exec_fee_factor() == 30
        assert stub.requests[0]["params"][0] == str(POLICY_CONTRACT)

    def test_raw_mempool(self, rpc: RpcClient, stub: StubTransport) -> None:
        stub.reply("getrawmempool", [TX_HASH])
        assert rpc.get_raw_mempool() == [UInt256.from_string(TX_HASH)]


class TestHttpTransport:
    def _client(self, handler, **kwargs) -> RpcClient:
        transport = HttpTransport(
            "http://node.invalid:10332",
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        return RpcClient("http://node.invalid:10332", transport=transport)

    def test_posts_json_with_basic_auth(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            body = json.loads(request.content)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": 42})

        transport = HttpTransport(
            "http://node.invalid:10332",
            "alice",
            "s3cret",
            transport=httpx.MockTransport(handler),
        )
        client = RpcClient("http://node.invalid:10332", transport=transport)

        assert client.get_block_count() == 42
        request = seen[0]
        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        expected = "Basic " + base64.b64encode(b"alice:s3cret").decode()
        assert request.headers["Authorization"] == expected

    def test_no_auth_header_without_credentials(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": 1})

        self._client(handler).get_block_count()
        assert "Authorization" not in seen[0].headers

    def test_http_error_with_text_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(TransportFault) as excinfo:
            self._client(handler).get_block_count()
        assert excinfo.value.status == 502
        assert excinfo.value.body == "Bad Gateway"

    def test_http_error_with_json_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            return httpx.Response(
                500,
                json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -400, "message": "Access denied"}},
            )

        with pytest.raises(ProtocolFault):
            self._client(handler).get_block_count()

    def test_timeout_becomes_transport_fault(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportFault):
            self._client(handler).get_block_count()
