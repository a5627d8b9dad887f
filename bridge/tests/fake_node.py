"""Scripted L1 node and a fake $ZKSYNC_HOME tree for bridge tests."""
import json
from pathlib import Path

import httpx
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector

from bridge.artifacts import BEACON_DIR, BRIDGE_DIR, TRANSPARENT_PROXY_DIR

RPC_URL = "http://l1.test:8545"
DIAMOND_PROXY = "0x1000000000000000000000000000000000000001"
L1_BRIDGE = "0x2000000000000000000000000000000000000002"
GOVERNOR = "0x3000000000000000000000000000000000000003"
L2_BRIDGE_ADDR = "0x4000000000000000000000000000000000000004"
TEST_MNEMONIC = "test test test test test test test test test test test junk"

# name -> (directory, fill byte, words); word counts must be odd
ARTIFACTS = {
    "L2ERC20Bridge": (BRIDGE_DIR, 0x01, 5),
    "L2StandardERC20": (BRIDGE_DIR, 0x02, 3),
    "TransparentUpgradeableProxy": (TRANSPARENT_PROXY_DIR, 0x03, 7),
    "BeaconProxy": (BEACON_DIR, 0x04, 1),
    "UpgradeableBeacon": (BEACON_DIR, 0x05, 9),
}


def bytecode(fill: int, words: int) -> bytes:
    return bytes([fill]) * (32 * words)


def write_zksync_home(home: Path, *, mnemonic: str = TEST_MNEMONIC) -> Path:
    root = home / "contracts" / "zksync" / "artifacts-zk"
    for name, (directory, fill, words) in ARTIFACTS.items():
        d = root / directory / f"{name}.sol"
        d.mkdir(parents=True, exist_ok=True)
        (d / f"{name}.json").write_text(json.dumps({"contractName": name, "bytecode": "0x" + bytecode(fill, words).hex()}))
    cfg = home / "etc" / "test_config" / "constant"
    cfg.mkdir(parents=True, exist_ok=True)
    (cfg / "eth.json").write_text(json.dumps({"mnemonic": mnemonic}))
    return root


class FakeNode:
    """Scripted L1 node answering the JSON-RPC calls made during bring-up."""

    def __init__(self, *, gas_price=2_000_000_000, nonce=5, chain_id=9, status="0x1"):
        self.gas_price = gas_price
        self.nonce = nonce
        self.chain_id = chain_id
        self.status = status
        self.calls = []
        self.sent = []

    def _eth_call(self, params):
        to = params[0]["to"].lower()
        selector = bytes.fromhex(params[0]["data"][2:10])
        if to == DIAMOND_PROXY.lower() and selector == function_signature_to_4byte_selector("getGovernor()"):
            return "0x" + encode(["address"], [GOVERNOR]).hex()
        if to == L1_BRIDGE.lower() and selector == function_signature_to_4byte_selector("l2Bridge()"):
            return "0x" + encode(["address"], [L2_BRIDGE_ADDR]).hex()
        raise AssertionError(f"unexpected eth_call {params!r}")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method, params = body["method"], body["params"]
        self.calls.append(method)
        if method == "eth_chainId":
            result = hex(self.chain_id)
        elif method == "eth_gasPrice":
            result = hex(self.gas_price)
        elif method == "eth_getTransactionCount":
            assert params[1] == "latest"
            result = hex(self.nonce)
        elif method == "eth_call":
            result = self._eth_call(params)
        elif method == "eth_estimateGas":
            result = hex(1_000_000)
        elif method == "eth_sendRawTransaction":
            self.sent.append(bytes.fromhex(params[0][2:]))
            result = "0x" + f"{len(self.sent):064x}"
        elif method == "eth_getTransactionReceipt":
            result = {"transactionHash": params[0], "status": self.status, "gasUsed": hex(21_000 * len(self.sent))}
        else:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "method not found"}})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


