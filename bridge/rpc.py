"""
HTTP JSON-RPC client (sync) for the L1 node.

Example:
    from bridge.rpc import RpcClient
    with RpcClient("http://127.0.0.1:8545") as rpc:
        print(rpc.gas_price())
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

import httpx

from .errors import RpcError

log = logging.getLogger(__name__)


def _is_retriable_http(status: int) -> bool:
    return status in (429, 502, 503, 504)


def _quantity(value: Any, what: str) -> int:
    if not isinstance(value, str) or not value.startswith("0x"):
        raise RpcError(f"{what}: expected a hex quantity, got {value!r}")
    return int(value, 16)


@dataclass
class RpcClient:
    """Synchronous JSON-RPC 2.0 client over HTTP."""

    url: str
    timeout: float = 30.0
    max_retries: int = 2
    backoff: float = 0.25
    _ids: Iterator[int] = field(default_factory=lambda: count(1))
    _client: httpx.Client = field(init=False)

    def __post_init__(self) -> None:
        self._client = httpx.Client(
            timeout=self.timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # --- transport -------------------------------------------------------

    def request(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        """Perform one JSON-RPC call and return `result` or raise RpcError."""
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": list(params or [])}
        last: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            try:
                return self._send_once(payload)
            except (httpx.UnsupportedProtocol, httpx.InvalidURL) as e:
                raise RpcError(f"{method}: bad endpoint {self.url!r}: {e}") from e
            except (httpx.TransportError, _Retriable) as e:
                last = e
            except httpx.HTTPError as e:
                raise RpcError(f"{method}: {type(e).__name__}: {e}") from e
            if attempt < self.max_retries:
                time.sleep(self.backoff * (2**attempt))
        raise RpcError(f"{method}: transport failed: {last}")

    def _send_once(self, payload: Dict[str, Any]) -> Any:
        r = self._client.post(self.url, json=payload)
        if _is_retriable_http(r.status_code):
            raise _Retriable(f"HTTP {r.status_code}")
        try:
            body = r.json()
        except ValueError:
            raise RpcError(f"{payload['method']}: non-JSON response (HTTP {r.status_code}): {r.text[:256]}") from None
        if not isinstance(body, Mapping):
            raise RpcError(f"{payload['method']}: malformed response", data=body)
        if "error" in body and body["error"] is not None:
            err = body["error"]
            if isinstance(err, Mapping):
                raise RpcError(
                    f"{payload['method']}: {err.get('message', 'unknown error')}",
                    code=err.get("code"),
                    data=err.get("data"),
                )
            raise RpcError(f"{payload['method']}: {err}")
        log.debug("rpc %s -> %r", payload["method"], body.get("result"))
        return body.get("result")

    # --- eth_* helpers ---------------------------------------------------

    def chain_id(self) -> int:
        return _quantity(self.request("eth_chainId"), "eth_chainId")

    def gas_price(self) -> int:
        return _quantity(self.request("eth_gasPrice"), "eth_gasPrice")

    def transaction_count(self, address: str, block: str = "latest") -> int:
        return _quantity(self.request("eth_getTransactionCount", [address, block]), "eth_getTransactionCount")

    def call(self, to: str, data: bytes, block: str = "latest") -> bytes:
        result = self.request("eth_call", [{"to": to, "data": "0x" + data.hex()}, block])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise RpcError(f"eth_call: expected hex data, got {result!r}")
        return bytes.fromhex(result[2:])

    def estimate_gas(self, tx: Mapping[str, Any]) -> int:
        return _quantity(self.request("eth_estimateGas", [dict(tx)]), "eth_estimateGas")

    def send_raw_transaction(self, raw: bytes) -> str:
        result = self.request("eth_sendRawTransaction", ["0x" + bytes(raw).hex()])
        if not isinstance(result, str):
            raise RpcError(f"eth_sendRawTransaction: expected a hash, got {result!r}")
        return result

    def wait_for_receipt(self, tx_hash: str, *, timeout: float = 300.0, poll_interval: float = 1.0) -> Dict[str, Any]:
        """Poll eth_getTransactionReceipt until the transaction is mined."""
        deadline = time.monotonic() + timeout
        while True:
            receipt = self.request("eth_getTransactionReceipt", [tx_hash])
            if receipt is not None:
                return receipt
            if time.monotonic() >= deadline:
                raise RpcError(f"timed out waiting for receipt of {tx_hash}")
            time.sleep(poll_interval)


class _Retriable(Exception):
    pass


__all__ = ["RpcClient"]
