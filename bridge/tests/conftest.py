import pytest

from bridge.artifacts import BridgeArtifacts
from bridge.tests.fake_node import DIAMOND_PROXY, L1_BRIDGE, RPC_URL, FakeNode, write_zksync_home


@pytest.fixture()
def zksync_home(tmp_path):
    write_zksync_home(tmp_path)
    return tmp_path


@pytest.fixture()
def artifacts(zksync_home):
    return BridgeArtifacts.load(zksync_home / "contracts" / "zksync" / "artifacts-zk")


@pytest.fixture()
def bridge_env(monkeypatch, zksync_home):
    monkeypatch.setenv("ZKSYNC_HOME", str(zksync_home))
    monkeypatch.setenv("ETH_CLIENT_WEB3_URL", RPC_URL)
    monkeypatch.delenv("MNEMONIC", raising=False)
    monkeypatch.delenv("L2_GAS_PRICE_PER_PUBDATA", raising=False)
    monkeypatch.setenv("CONTRACTS_PRIORITY_TX_MAX_GAS_LIMIT", "72000000")
    monkeypatch.setenv("CONTRACTS_DIAMOND_PROXY_ADDR", DIAMOND_PROXY)
    monkeypatch.setenv("CONTRACTS_L1_ERC20_BRIDGE_PROXY_ADDR", L1_BRIDGE)
    return zksync_home


@pytest.fixture()
def node(respx_mock):
    fake = FakeNode()
    respx_mock.post(RPC_URL).mock(side_effect=fake)
    return fake
