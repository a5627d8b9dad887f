"""
Deterministic L2 address derivation.

L2 contracts deployed by the bridge have addresses fixed before deployment:

    create2(sender, bytecode, input, salt)
        = keccak(keccak("zksyncCreate2") || pad32(sender) || salt
                 || hash_l2_bytecode(bytecode) || keccak(input))[12:]

An L1 contract acting on L2 appears under an aliased address (its address plus
ALIAS_OFFSET, modulo 2**160).
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Union

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, keccak, to_bytes, to_canonical_address, to_checksum_address

from .artifacts import BridgeArtifacts
from .errors import BridgeError

Address = Union[str, bytes]

ALIAS_OFFSET = 0x1111000000000000000000000000000000001111
ADDRESS_MODULUS = 1 << 160
CREATE2_PREFIX = keccak(b"zksyncCreate2")
BYTECODE_HASH_VERSION = 1
MAX_BYTECODE_WORDS = 1 << 16
ZERO_SALT = b"\x00" * 32

L2_BRIDGE_INITIALIZE = "initialize(address,bytes32,address)"


def _addr_bytes(address: Address) -> bytes:
    try:
        return to_canonical_address(address)
    except ValueError as e:
        raise BridgeError(f"invalid address {address!r}: {e}") from e


def hash_l2_bytecode(bytecode: Union[bytes, str]) -> bytes:
    """
    Versioned bytecode hash: sha256 with byte 0 set to the version, byte 1
    cleared and bytes 2..3 holding the big-endian length in 32-byte words.
    """
    code = to_bytes(hexstr=bytecode) if isinstance(bytecode, str) else bytes(bytecode)
    if len(code) % 32 != 0:
        raise BridgeError(f"bytecode length must be a multiple of 32 bytes, got {len(code)}")
    words = len(code) // 32
    if words >= MAX_BYTECODE_WORDS:
        raise BridgeError(f"bytecode too long: {words} words")
    if words % 2 == 0:
        raise BridgeError(f"bytecode length in 32-byte words must be odd, got {words}")
    digest = bytearray(hashlib.sha256(code).digest())
    digest[0] = BYTECODE_HASH_VERSION
    digest[1] = 0
    digest[2:4] = words.to_bytes(2, "big")
    return bytes(digest)


def apply_l1_to_l2_alias(address: Address) -> str:
    value = int.from_bytes(_addr_bytes(address), "big")
    return to_checksum_address(((value + ALIAS_OFFSET) % ADDRESS_MODULUS).to_bytes(20, "big"))


def undo_l1_to_l2_alias(address: Address) -> str:
    value = int.from_bytes(_addr_bytes(address), "big")
    return to_checksum_address(((value - ALIAS_OFFSET) % ADDRESS_MODULUS).to_bytes(20, "big"))


def compute_l2_create2_address(
    sender: Address,
    bytecode: Union[bytes, str],
    constructor_input: bytes = b"",
    salt: bytes = ZERO_SALT,
) -> str:
    if len(salt) != 32:
        raise BridgeError(f"salt must be 32 bytes, got {len(salt)}")
    preimage = b"".join(
        [
            CREATE2_PREFIX,
            _addr_bytes(sender).rjust(32, b"\x00"),
            salt,
            hash_l2_bytecode(bytecode),
            keccak(constructor_input),
        ]
    )
    return to_checksum_address(keccak(preimage)[12:])


def l2_bridge_initialize_calldata(l1_bridge: Address, beacon_proxy_hash: bytes, governor: Address) -> bytes:
    return function_signature_to_4byte_selector(L2_BRIDGE_INITIALIZE) + encode(
        ["address", "bytes32", "address"],
        [to_checksum_address(l1_bridge), beacon_proxy_hash, to_checksum_address(governor)],
    )


@dataclass(frozen=True)
class BridgeAddresses:
    l2_bridge_implementation: str
    l2_bridge_proxy: str
    l2_standard_token: str
    l2_token_factory: str
    proxy_init_data: bytes


def derive_bridge_addresses(l1_bridge: Address, governor: Address, artifacts: BridgeArtifacts) -> BridgeAddresses:
    """
    Predict where the bridge deployment lands on L2.

    The implementation and its transparent proxy are deployed by the aliased L1
    bridge; the standard token implementation and the token factory (an
    upgradeable beacon pointing at it) are deployed by the proxy.
    """
    deployer = apply_l1_to_l2_alias(l1_bridge)
    governor = to_checksum_address(governor)

    implementation = compute_l2_create2_address(deployer, artifacts.l2_bridge)
    init_data = l2_bridge_initialize_calldata(l1_bridge, hash_l2_bytecode(artifacts.beacon_proxy), governor)
    proxy_input = encode(["address", "address", "bytes"], [implementation, governor, init_data])
    proxy = compute_l2_create2_address(deployer, artifacts.transparent_proxy, proxy_input)

    standard_token = compute_l2_create2_address(proxy, artifacts.l2_standard_token)
    factory = compute_l2_create2_address(proxy, artifacts.upgradeable_beacon, encode(["address"], [standard_token]))
    return BridgeAddresses(
        l2_bridge_implementation=implementation,
        l2_bridge_proxy=proxy,
        l2_standard_token=standard_token,
        l2_token_factory=factory,
        proxy_init_data=init_data,
    )


__all__ = [
    "ALIAS_OFFSET",
    "BridgeAddresses",
    "apply_l1_to_l2_alias",
    "undo_l1_to_l2_alias",
    "compute_l2_create2_address",
    "derive_bridge_addresses",
    "hash_l2_bytecode",
    "l2_bridge_initialize_calldata",
]
