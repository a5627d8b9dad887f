import pytest
from eth_account import Account
from eth_utils import function_signature_to_4byte_selector
from typer.testing import CliRunner

from bridge.config import DERIVATION_PATH, load_bridge_config
from bridge.errors import BridgeError
from bridge.initialize import (app, initialize_bridges, l1_bridge_initialize_calldata, load_account, parse_gwei,
                               request_l2_transaction_calldata)
from bridge.rpc import RpcClient
from bridge.tests.fake_node import L2_BRIDGE_ADDR, RPC_URL, TEST_MNEMONIC

runner = CliRunner()

PRIVATE_KEY = "0x" + "11" * 32
REQUEST_L2 = function_signature_to_4byte_selector(
    "requestL2Transaction(address,uint256,bytes,uint256,uint256,bytes[],address)"
)
L1_INIT = function_signature_to_4byte_selector("initialize(bytes[],address,address)")


def test_cli_initializes_bridge(bridge_env, node):
    res = runner.invoke(app, ["--private-key", PRIVATE_KEY])
    assert res.exit_code == 0, res.output

    wallet = Account.from_key(PRIVATE_KEY).address
    assert f"Using deployer wallet: {wallet}" in res.output
    assert "Using gas price: 2" in res.output
    assert "Using nonce: 5" in res.output
    assert "ERC20 bridge initialized, gasUsed: 42000" in res.output
    assert res.output.strip().splitlines()[-1] == f"CONTRACTS_L2_ERC20_BRIDGE_ADDR={L2_BRIDGE_ADDR}"

    assert len(node.sent) == 2
    assert all(Account.recover_transaction(raw) == wallet for raw in node.sent)
    assert REQUEST_L2 in node.sent[0]
    assert L1_INIT in node.sent[1]


def test_cli_uses_explicit_gas_price_and_nonce(bridge_env, node):
    res = runner.invoke(app, ["--private-key", PRIVATE_KEY, "--gas-price", "1.5", "--nonce", "17"])
    assert res.exit_code == 0, res.output
    assert "Using gas price: 1.5 gwei" in res.output
    assert "Using nonce: 17" in res.output
    assert "eth_gasPrice" not in node.calls
    assert "eth_getTransactionCount" not in node.calls


def test_cli_defaults_to_test_config_mnemonic(bridge_env, node):
    res = runner.invoke(app, [])
    assert res.exit_code == 0, res.output
    Account.enable_unaudited_hdwallet_features()
    expected = Account.from_mnemonic(TEST_MNEMONIC, account_path=DERIVATION_PATH).address
    assert f"Using deployer wallet: {expected}" in res.output
    assert all(Account.recover_transaction(raw) == expected for raw in node.sent)


def test_cli_reports_reverted_transaction(bridge_env, node):
    node.status = "0x0"
    res = runner.invoke(app, ["--private-key", PRIVATE_KEY])
    assert res.exit_code == 1
    assert "reverted" in res.output
    assert "CONTRACTS_L2_ERC20_BRIDGE_ADDR" not in res.output


def test_cli_rejects_bad_gas_price(bridge_env):
    res = runner.invoke(app, ["--private-key", PRIVATE_KEY, "--gas-price", "cheap"])
    assert res.exit_code == 1
    assert "invalid gas price" in res.output


def test_cli_missing_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("ZKSYNC_HOME", str(tmp_path))
    monkeypatch.delenv("CONTRACTS_PRIORITY_TX_MAX_GAS_LIMIT", raising=False)
    res = runner.invoke(app, ["--private-key", PRIVATE_KEY])
    assert res.exit_code == 1
    assert "CONTRACTS_PRIORITY_TX_MAX_GAS_LIMIT" in res.output


def test_initialize_result_matches_predicted_addresses(bridge_env, node):
    cfg = load_bridge_config()
    account = load_account(PRIVATE_KEY, cfg)
    lines = []
    with RpcClient(RPC_URL) as rpc:
        result = initialize_bridges(cfg, rpc, account, gas_price=10**9, nonce=0, echo=lines.append, poll_interval=0)

    assert result.l2_bridge == L2_BRIDGE_ADDR
    assert result.gas_used == 42_000
    assert len(result.tx_hashes) == 2
    expected_init = l1_bridge_initialize_calldata(
        [b"\x01" * 160, b"\x03" * 224, b"\x04" * 32], result.addresses.l2_token_factory, result.governor
    )
    assert expected_init in node.sent[1]
    expected_request = request_l2_transaction_calldata(
        l2_gas_limit=72_000_000,
        gas_per_pubdata=800,
        factory_deps=[b"\x05" * 288, b"\x02" * 96],
        refund_recipient=account.address,
    )
    assert expected_request in node.sent[0]


def test_parse_gwei():
    assert parse_gwei("1") == 10**9
    assert parse_gwei("0.5") == 5 * 10**8
    with pytest.raises(BridgeError):
        parse_gwei("0")


def test_load_account_rejects_bad_key(bridge_env):
    with pytest.raises(BridgeError):
        load_account("0x1234", load_bridge_config())


def test_cli_bad_pubdata_price_is_reported(bridge_env, monkeypatch):
    monkeypatch.setenv("L2_GAS_PRICE_PER_PUBDATA", "0xzz")
    res = runner.invoke(app, ["--private-key", PRIVATE_KEY])
    assert res.exit_code == 1
    assert "L2_GAS_PRICE_PER_PUBDATA is not a number" in res.output
