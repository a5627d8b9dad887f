import hashlib

import pytest
from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, is_checksum_address, keccak, to_canonical_address

from bridge.addresses import (ALIAS_OFFSET, CREATE2_PREFIX, apply_l1_to_l2_alias, compute_l2_create2_address,
                              derive_bridge_addresses, hash_l2_bytecode, undo_l1_to_l2_alias)
from bridge.errors import BridgeError

from bridge.tests.fake_node import GOVERNOR, L1_BRIDGE, bytecode

# keccak256("zksyncCreate2") as hard-coded in the L2 system contracts
ZKSYNC_CREATE2_PREFIX = bytes.fromhex("2020dba91b30cc0006188af794c2fb30dd8520db7e2c088b7fc7c103c00ca494")


def test_bytecode_hash_layout():
    code = bytecode(0xAB, 3)
    h = hash_l2_bytecode(code)
    digest = hashlib.sha256(code).digest()
    assert len(h) == 32
    assert h[0] == 1
    assert h[1] == 0
    assert h[2:4] == (3).to_bytes(2, "big")
    assert h[4:] == digest[4:]


def test_bytecode_hash_accepts_hex():
    code = bytecode(0x11, 1)
    assert hash_l2_bytecode("0x" + code.hex()) == hash_l2_bytecode(code)


@pytest.mark.parametrize(
    "code",
    [
        b"\x00" * 31,
        b"\x00" * 33,
        b"\x00" * 64,  # even word count
        b"\x00" * (32 * (1 << 16) + 32),
    ],
)
def test_bytecode_hash_rejects_bad_lengths(code):
    with pytest.raises(BridgeError):
        hash_l2_bytecode(code)


def test_alias_adds_offset():
    aliased = apply_l1_to_l2_alias(L1_BRIDGE)
    assert is_checksum_address(aliased)
    assert int.from_bytes(to_canonical_address(aliased), "big") == int(L1_BRIDGE, 16) + ALIAS_OFFSET


def test_alias_wraps_modulo_2_160():
    top = "0x" + "ff" * 20
    aliased = apply_l1_to_l2_alias(top)
    assert int.from_bytes(to_canonical_address(aliased), "big") == ALIAS_OFFSET - 1
    assert undo_l1_to_l2_alias(aliased).lower() == top


def test_alias_rejects_garbage():
    with pytest.raises(BridgeError):
        apply_l1_to_l2_alias("0x1234")


def test_create2_formula():
    code = bytecode(0x07, 1)
    sender = "0x" + "12" * 20
    data = b"\x01\x02"
    salt = b"\x09" * 32
    expected = keccak(
        ZKSYNC_CREATE2_PREFIX
        + b"\x00" * 12
        + bytes.fromhex("12" * 20)
        + salt
        + hash_l2_bytecode(code)
        + keccak(data)
    )[12:]
    got = compute_l2_create2_address(sender, code, data, salt)
    assert is_checksum_address(got)
    assert to_canonical_address(got) == expected


def test_create2_depends_on_every_input():
    code = bytecode(0x07, 1)
    base = compute_l2_create2_address(GOVERNOR, code)
    assert compute_l2_create2_address(GOVERNOR, code) == base
    assert compute_l2_create2_address(L1_BRIDGE, code) != base
    assert compute_l2_create2_address(GOVERNOR, bytecode(0x08, 1)) != base
    assert compute_l2_create2_address(GOVERNOR, code, b"\x00") != base
    assert compute_l2_create2_address(GOVERNOR, code, salt=b"\x01" * 32) != base


def test_create2_rejects_short_salt():
    with pytest.raises(BridgeError):
        compute_l2_create2_address(GOVERNOR, bytecode(0x07, 1), salt=b"\x00" * 31)


def test_derived_bridge_addresses_chain(artifacts):
    addrs = derive_bridge_addresses(L1_BRIDGE, GOVERNOR, artifacts)
    deployer = apply_l1_to_l2_alias(L1_BRIDGE)

    assert addrs.l2_bridge_implementation == compute_l2_create2_address(deployer, artifacts.l2_bridge)

    selector = function_signature_to_4byte_selector("initialize(address,bytes32,address)")
    assert addrs.proxy_init_data[:4] == selector
    l1, beacon_hash, gov = decode(["address", "bytes32", "address"], addrs.proxy_init_data[4:])
    assert l1.lower() == L1_BRIDGE.lower()
    assert beacon_hash == hash_l2_bytecode(artifacts.beacon_proxy)
    assert gov.lower() == GOVERNOR.lower()

    proxy_input = encode(["address", "address", "bytes"], [addrs.l2_bridge_implementation, GOVERNOR, addrs.proxy_init_data])
    assert addrs.l2_bridge_proxy == compute_l2_create2_address(deployer, artifacts.transparent_proxy, proxy_input)
    assert addrs.l2_standard_token == compute_l2_create2_address(addrs.l2_bridge_proxy, artifacts.l2_standard_token)
    assert addrs.l2_token_factory == compute_l2_create2_address(
        addrs.l2_bridge_proxy, artifacts.upgradeable_beacon, encode(["address"], [addrs.l2_standard_token])
    )
    assert len({addrs.l2_bridge_implementation, addrs.l2_bridge_proxy, addrs.l2_standard_token, addrs.l2_token_factory}) == 4


def test_derived_addresses_depend_on_governor(artifacts):
    a = derive_bridge_addresses(L1_BRIDGE, GOVERNOR, artifacts)
    b = derive_bridge_addresses(L1_BRIDGE, L1_BRIDGE, artifacts)
    assert a.l2_bridge_implementation == b.l2_bridge_implementation
    assert a.l2_bridge_proxy != b.l2_bridge_proxy


def test_create2_prefix_matches_system_contracts():
    assert CREATE2_PREFIX == ZKSYNC_CREATE2_PREFIX


def test_bytecode_hash_known_answer():
    # sha256 of one zero word is 66687aad f862bd77...
    expected = bytes.fromhex("01000001" "f862bd776c8fc18b8e9f8e20089714856ee233b3902a591d0d5f2925")
    assert hash_l2_bytecode(b"\x00" * 32) == expected
