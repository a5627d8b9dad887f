from typing import Any, Optional


class BridgeError(RuntimeError):
    """Bring-up failed: bad configuration, missing artifact or reverted transaction."""


class RpcError(BridgeError):
    """The JSON-RPC endpoint returned an error object or an unusable response."""

    def __init__(self, message: str, *, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


__all__ = ["BridgeError", "RpcError"]
