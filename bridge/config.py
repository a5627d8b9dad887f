"""Environment configuration for bridge bring-up.

    ZKSYNC_HOME                            checkout root (artifacts, test config)
    ETH_CLIENT_WEB3_URL                    L1 JSON-RPC endpoint
    MNEMONIC                               deployer mnemonic (falls back to the test config)
    CONTRACTS_PRIORITY_TX_MAX_GAS_LIMIT    L2 gas limit of the priority transaction
    CONTRACTS_DIAMOND_PROXY_ADDR           L1 rollup contract (diamond proxy)
    CONTRACTS_L1_ERC20_BRIDGE_PROXY_ADDR   L1 ERC20 bridge proxy
    L2_GAS_PRICE_PER_PUBDATA               gas per pubdata byte for L1->L2 transactions
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from eth_utils import is_address, to_checksum_address

from .errors import BridgeError

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_L2_GAS_PRICE_PER_PUBDATA = 800
DERIVATION_PATH = "m/44'/60'/0'/0/0"


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise BridgeError(f"environment variable {name} is not set")
    return value


def _address(name: str) -> str:
    value = _require(name)
    if not is_address(value):
        raise BridgeError(f"{name} is not an address: {value!r}")
    return to_checksum_address(value)


def _number(name: str, default: Optional[int] = None) -> int:
    if default is not None and not os.getenv(name):
        return default
    value = _require(name)
    try:
        return int(value, 0)
    except ValueError:
        raise BridgeError(f"{name} is not a number: {value!r}") from None


@dataclass(frozen=True)
class BridgeConfig:
    zksync_home: Path
    rpc_url: str
    mnemonic: Optional[str]
    priority_tx_max_gas_limit: int
    diamond_proxy: str
    l1_erc20_bridge: str
    l2_gas_price_per_pubdata: int = DEFAULT_L2_GAS_PRICE_PER_PUBDATA

    @property
    def artifacts_root(self) -> Path:
        return self.zksync_home / "contracts" / "zksync" / "artifacts-zk"

    @property
    def test_config_path(self) -> Path:
        return self.zksync_home / "etc" / "test_config" / "constant" / "eth.json"

    def deployer_mnemonic(self) -> str:
        """MNEMONIC from the environment, else the mnemonic of the test configuration."""
        if self.mnemonic:
            return self.mnemonic
        try:
            return json.loads(self.test_config_path.read_text(encoding="utf-8"))["mnemonic"]
        except (OSError, ValueError, KeyError) as e:
            raise BridgeError(f"no MNEMONIC set and cannot read {self.test_config_path}: {e}") from e


def load_bridge_config() -> BridgeConfig:
    return BridgeConfig(
        zksync_home=Path(_require("ZKSYNC_HOME")),
        rpc_url=os.getenv("ETH_CLIENT_WEB3_URL", DEFAULT_RPC_URL),
        mnemonic=os.getenv("MNEMONIC") or None,
        priority_tx_max_gas_limit=_number("CONTRACTS_PRIORITY_TX_MAX_GAS_LIMIT"),
        diamond_proxy=_address("CONTRACTS_DIAMOND_PROXY_ADDR"),
        l1_erc20_bridge=_address("CONTRACTS_L1_ERC20_BRIDGE_PROXY_ADDR"),
        l2_gas_price_per_pubdata=_number("L2_GAS_PRICE_PER_PUBDATA", DEFAULT_L2_GAS_PRICE_PER_PUBDATA),
    )


__all__ = [
    "BridgeConfig",
    "load_bridge_config",
    "DEFAULT_RPC_URL",
    "DEFAULT_L2_GAS_PRICE_PER_PUBDATA",
    "DERIVATION_PATH",
]
