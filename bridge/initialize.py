"""
bridge.initialize — one-shot ERC20 bridge bring-up.

Predicts the L2 bridge addresses, then submits two L1 transactions with
consecutive nonces:

  1. rollup.requestL2Transaction publishing the token factory and standard
     token bytecode as factory dependencies;
  2. l1Bridge.initialize deploying the L2 bridge implementation and proxy.

On success prints `CONTRACTS_L2_ERC20_BRIDGE_ADDR=<address>` for the env file.

Examples:
  bridge-init
  bridge-init --private-key 0x... --gas-price 2.5 --nonce 7
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional, Sequence

import typer
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import ValidationError, from_wei, function_signature_to_4byte_selector, to_checksum_address, to_wei

from .addresses import BridgeAddresses, derive_bridge_addresses
from .artifacts import BridgeArtifacts
from .config import DERIVATION_PATH, BridgeConfig, load_bridge_config
from .errors import BridgeError
from .rpc import RpcClient

app = typer.Typer(help="Initialize the L1/L2 ERC20 bridge")

log = logging.getLogger("bridge.initialize")

REQUEST_L2_TRANSACTION = "requestL2Transaction(address,uint256,bytes,uint256,uint256,bytes[],address)"
L1_BRIDGE_INITIALIZE = "initialize(bytes[],address,address)"
GET_GOVERNOR = "getGovernor()"
L2_BRIDGE = "l2Bridge()"
ZERO_ADDRESS = "0x" + "00" * 20


def _selector(signature: str) -> bytes:
    return function_signature_to_4byte_selector(signature)


def request_l2_transaction_calldata(
    *,
    l2_gas_limit: int,
    gas_per_pubdata: int,
    factory_deps: Sequence[bytes],
    refund_recipient: str,
) -> bytes:
    """Empty L2 call whose only effect is publishing `factory_deps`."""
    return _selector(REQUEST_L2_TRANSACTION) + encode(
        ["address", "uint256", "bytes", "uint256", "uint256", "bytes[]", "address"],
        [ZERO_ADDRESS, 0, b"", l2_gas_limit, gas_per_pubdata, list(factory_deps), to_checksum_address(refund_recipient)],
    )


def l1_bridge_initialize_calldata(factory_deps: Sequence[bytes], token_factory: str, governor: str) -> bytes:
    return _selector(L1_BRIDGE_INITIALIZE) + encode(
        ["bytes[]", "address", "address"],
        [list(factory_deps), to_checksum_address(token_factory), to_checksum_address(governor)],
    )


def call_address(rpc: RpcClient, contract: str, signature: str) -> str:
    out = rpc.call(contract, _selector(signature))
    try:
        (value,) = decode(["address"], out)
    except DecodingError as e:
        raise BridgeError(f"{signature} on {contract} returned undecodable data: 0x{out.hex()}") from e
    return to_checksum_address(value)


def load_account(private_key: Optional[str], cfg: BridgeConfig) -> LocalAccount:
    """--private-key when given, else the deployer mnemonic at m/44'/60'/0'/0/0."""
    try:
        if private_key:
            return Account.from_key(private_key)
        Account.enable_unaudited_hdwallet_features()
        return Account.from_mnemonic(cfg.deployer_mnemonic(), account_path=DERIVATION_PATH)
    except (ValueError, TypeError, ValidationError) as e:
        raise BridgeError(f"cannot load deployer wallet: {e}") from e


def parse_gwei(value: str) -> int:
    try:
        wei = to_wei(Decimal(value), "gwei")
    except (InvalidOperation, ValueError) as e:
        raise BridgeError(f"invalid gas price {value!r}: {e}") from e
    if wei <= 0:
        raise BridgeError(f"gas price must be positive, got {value!r}")
    return int(wei)


@dataclass(frozen=True)
class InitializationResult:
    addresses: BridgeAddresses
    governor: str
    tx_hashes: Sequence[str]
    gas_used: int
    l2_bridge: str


def initialize_bridges(
    cfg: BridgeConfig,
    rpc: RpcClient,
    account: LocalAccount,
    *,
    gas_price: Optional[int] = None,
    nonce: Optional[int] = None,
    echo: Callable[[str], Any] = print,
    receipt_timeout: float = 300.0,
    poll_interval: float = 1.0,
) -> InitializationResult:
    echo(f"Using deployer wallet: {account.address}")
    if gas_price is None:
        gas_price = rpc.gas_price()
    echo(f"Using gas price: {from_wei(gas_price, 'gwei')} gwei")
    if nonce is None:
        nonce = rpc.transaction_count(account.address, "latest")
    echo(f"Using nonce: {nonce}")

    artifacts = BridgeArtifacts.load(cfg.artifacts_root)
    governor = call_address(rpc, cfg.diamond_proxy, GET_GOVERNOR)
    addrs = derive_bridge_addresses(cfg.l1_erc20_bridge, governor, artifacts)
    log.info(
        "predicted L2 addresses: implementation=%s proxy=%s standard_token=%s factory=%s",
        addrs.l2_bridge_implementation,
        addrs.l2_bridge_proxy,
        addrs.l2_standard_token,
        addrs.l2_token_factory,
    )

    calls = [
        (
            cfg.diamond_proxy,
            request_l2_transaction_calldata(
                l2_gas_limit=cfg.priority_tx_max_gas_limit,
                gas_per_pubdata=cfg.l2_gas_price_per_pubdata,
                factory_deps=[artifacts.upgradeable_beacon, artifacts.l2_standard_token],
                refund_recipient=account.address,
            ),
        ),
        (
            cfg.l1_erc20_bridge,
            l1_bridge_initialize_calldata(
                [artifacts.l2_bridge, artifacts.transparent_proxy, artifacts.beacon_proxy],
                addrs.l2_token_factory,
                governor,
            ),
        ),
    ]

    chain_id = rpc.chain_id()
    tx_hashes = []
    for offset, (to, data) in enumerate(calls):
        tx: Dict[str, Any] = {"from": account.address, "to": to, "data": "0x" + data.hex(), "value": 0}
        gas = rpc.estimate_gas(tx)
        signed = account.sign_transaction(
            {
                "to": to,
                "data": data,
                "value": 0,
                "gas": gas,
                "gasPrice": gas_price,
                "nonce": nonce + offset,
                "chainId": chain_id,
            }
        )
        tx_hash = rpc.send_raw_transaction(signed.raw_transaction)
        log.info("sent tx %s to %s (nonce=%d, gas=%d)", tx_hash, to, nonce + offset, gas)
        tx_hashes.append(tx_hash)

    receipts = [rpc.wait_for_receipt(h, timeout=receipt_timeout, poll_interval=poll_interval) for h in tx_hashes]
    for h, receipt in zip(tx_hashes, receipts):
        if int(receipt.get("status", "0x1"), 16) != 1:
            raise BridgeError(f"transaction {h} reverted")

    gas_used = int(receipts[1]["gasUsed"], 16)
    echo(f"ERC20 bridge initialized, gasUsed: {gas_used}")
    l2_bridge = call_address(rpc, cfg.l1_erc20_bridge, L2_BRIDGE)
    echo(f"CONTRACTS_L2_ERC20_BRIDGE_ADDR={l2_bridge}")
    return InitializationResult(
        addresses=addrs,
        governor=governor,
        tx_hashes=tuple(tx_hashes),
        gas_used=gas_used,
        l2_bridge=l2_bridge,
    )


@app.command()
def main(
    private_key: Optional[str] = typer.Option(None, "--private-key", help="Deployer key (hex); defaults to the mnemonic"),
    gas_price: Optional[str] = typer.Option(None, "--gas-price", help="Gas price in gwei; defaults to eth_gasPrice"),
    nonce: Optional[int] = typer.Option(None, "--nonce", help="Nonce of the first transaction; defaults to the confirmed count"),
) -> None:
    """Submit the bridge bring-up transactions and print the L2 bridge address."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        cfg = load_bridge_config()
        account = load_account(private_key, cfg)
        price = parse_gwei(gas_price) if gas_price is not None else None
        with RpcClient(cfg.rpc_url) as rpc:
            initialize_bridges(cfg, rpc, account, gas_price=price, nonce=nonce, echo=typer.echo)
    except BridgeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
