"""
bridge — L1/L2 ERC20 bridge bring-up tooling.

- bridge.addresses    deterministic L2 address derivation (CREATE2 rules, bytecode hashes, aliasing)
- bridge.artifacts    compiled contract bytecode lookup under $ZKSYNC_HOME
- bridge.rpc          minimal JSON-RPC client (httpx)
- bridge.initialize   `bridge-init` command submitting the two bring-up transactions
"""

from .errors import BridgeError, RpcError

__all__ = ["BridgeError", "RpcError"]
