"""Compiled contract bytecode under `<ZKSYNC_HOME>/contracts/zksync/artifacts-zk`."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from eth_utils import to_bytes

from .errors import BridgeError

log = logging.getLogger(__name__)

BRIDGE_DIR = Path("cache-zk", "solpp-generated-contracts", "bridge")
TRANSPARENT_PROXY_DIR = Path("@openzeppelin", "contracts", "proxy", "transparent")
BEACON_DIR = Path("@openzeppelin", "contracts", "proxy", "beacon")


def read_bytecode(directory: Path, name: str) -> bytes:
    """Read `<directory>/<name>.sol/<name>.json` and return its `bytecode` field."""
    path = directory / f"{name}.sol" / f"{name}.json"
    try:
        doc = json.loads(path.read_text(encoding="utf-8"))
        code = doc["bytecode"]
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise BridgeError(f"cannot read bytecode of {name} from {path}: {e}") from e
    try:
        return to_bytes(hexstr=code)
    except (ValueError, TypeError) as e:
        raise BridgeError(f"{path}: bytecode is not hex") from e


@dataclass(frozen=True)
class BridgeArtifacts:
    l2_bridge: bytes
    l2_standard_token: bytes
    transparent_proxy: bytes
    beacon_proxy: bytes
    upgradeable_beacon: bytes

    @classmethod
    def load(cls, root: Path) -> "BridgeArtifacts":
        root = Path(root)
        log.debug("loading bridge artifacts from %s", root)
        return cls(
            l2_bridge=read_bytecode(root / BRIDGE_DIR, "L2ERC20Bridge"),
            l2_standard_token=read_bytecode(root / BRIDGE_DIR, "L2StandardERC20"),
            transparent_proxy=read_bytecode(root / TRANSPARENT_PROXY_DIR, "TransparentUpgradeableProxy"),
            beacon_proxy=read_bytecode(root / BEACON_DIR, "BeaconProxy"),
            upgradeable_beacon=read_bytecode(root / BEACON_DIR, "UpgradeableBeacon"),
        )


__all__ = ["BridgeArtifacts", "read_bytecode", "BRIDGE_DIR", "TRANSPARENT_PROXY_DIR", "BEACON_DIR"]
