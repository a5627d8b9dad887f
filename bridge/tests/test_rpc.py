import json

import httpx
import pytest

from bridge.errors import RpcError
from bridge.rpc import RpcClient
from bridge.tests.fake_node import RPC_URL


def test_request_returns_result(respx_mock):
    respx_mock.post(RPC_URL).mock(return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x2a"}))
    with RpcClient(RPC_URL) as rpc:
        assert rpc.chain_id() == 42


def test_request_raises_on_error_object(respx_mock):
    respx_mock.post(RPC_URL).mock(
        return_value=httpx.Response(
            200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": 3, "message": "execution reverted", "data": "0x"}}
        )
    )
    with RpcClient(RPC_URL) as rpc:
        with pytest.raises(RpcError, match="execution reverted") as exc:
            rpc.call("0x" + "00" * 20, b"\x00\x00\x00\x00")
    assert exc.value.code == 3


def test_non_json_response(respx_mock):
    respx_mock.post(RPC_URL).mock(return_value=httpx.Response(500, text="boom"))
    with RpcClient(RPC_URL) as rpc:
        with pytest.raises(RpcError, match="non-JSON"):
            rpc.gas_price()


def test_retries_transient_http(respx_mock):
    route = respx_mock.post(RPC_URL).mock(
        side_effect=[
            httpx.Response(503),
            httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x1"}),
        ]
    )
    with RpcClient(RPC_URL, backoff=0) as rpc:
        assert rpc.gas_price() == 1
    assert route.call_count == 2


def test_gives_up_after_retries(respx_mock):
    route = respx_mock.post(RPC_URL).mock(side_effect=httpx.ConnectError)
    with RpcClient(RPC_URL, max_retries=1, backoff=0) as rpc:
        with pytest.raises(RpcError, match="transport failed"):
            rpc.chain_id()
    assert route.call_count == 2


def test_bad_quantity(respx_mock):
    respx_mock.post(RPC_URL).mock(return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": 7}))
    with RpcClient(RPC_URL) as rpc:
        with pytest.raises(RpcError):
            rpc.transaction_count("0x" + "00" * 20)


def test_wait_for_receipt_polls(respx_mock):
    receipt = {"status": "0x1", "gasUsed": "0x5208"}
    respx_mock.post(RPC_URL).mock(
        side_effect=[
            httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None}),
            httpx.Response(200, json={"jsonrpc": "2.0", "id": 2, "result": receipt}),
        ]
    )
    with RpcClient(RPC_URL) as rpc:
        assert rpc.wait_for_receipt("0xabc", poll_interval=0) == receipt


def test_wait_for_receipt_times_out(respx_mock):
    respx_mock.post(RPC_URL).mock(return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None}))
    with RpcClient(RPC_URL) as rpc:
        with pytest.raises(RpcError, match="timed out"):
            rpc.wait_for_receipt("0xabc", timeout=0, poll_interval=0)


def test_protocol_errors_are_retried_then_wrapped(respx_mock):
    route = respx_mock.post(RPC_URL).mock(side_effect=httpx.RemoteProtocolError)
    with RpcClient(RPC_URL, max_retries=1, backoff=0) as rpc:
        with pytest.raises(RpcError, match="transport failed"):
            rpc.gas_price()
    assert route.call_count == 2


def test_endpoint_without_scheme_is_rpc_error():
    with RpcClient("127.0.0.1:8545", backoff=0) as rpc:
        with pytest.raises(RpcError, match="bad endpoint"):
            rpc.chain_id()


def test_transaction_count_defaults_to_latest_block(respx_mock):
    route = respx_mock.post(RPC_URL).mock(return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x7"}))
    with RpcClient(RPC_URL, max_retries=0) as rpc:
        assert rpc.transaction_count("0x" + "00" * 20) == 7
    assert json.loads(route.calls.last.request.content)["params"][1] == "latest"
