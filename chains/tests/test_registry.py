# pytest: executor registry semantics, address normalization and persistence
from __future__ import annotations

import json
import threading

import pytest
from eth_utils import is_checksum_address, to_checksum_address

from chains import ChainRegistry, ChainRegistryError

ADDR_A = "0x32400084c286cf3e17e7b677ea9583e60a000324"
ADDR_B = "0x" + "ab" * 20


def test_unknown_chain_returns_none():
    assert ChainRegistry().get_executor(1) is None


def test_set_then_get_returns_checksummed_address():
    reg = ChainRegistry()
    stored = reg.set_executor(324, ADDR_A)
    assert stored == to_checksum_address(ADDR_A)
    assert is_checksum_address(stored)
    assert reg.get_executor(324) == stored
    assert reg.get_executor(324) == reg.set_executor(324, ADDR_A.upper().replace("0X", "0x"))
    assert 324 in reg and len(reg) == 1


def test_set_overwrites_without_history():
    reg = ChainRegistry()
    reg.set_executor(5, ADDR_A)
    reg.set_executor(5, ADDR_B)
    assert reg.get_executor(5).lower() == ADDR_B
    assert reg.entries() == {5: reg.get_executor(5)}


def test_chain_id_zero_is_allowed():
    reg = ChainRegistry()
    reg.set_executor(0, ADDR_B)
    assert reg.get_executor(0) is not None


@pytest.mark.parametrize("chain_id", [-1, "1", 1.0, True])
def test_invalid_chain_id_rejected(chain_id):
    with pytest.raises(ChainRegistryError):
        ChainRegistry().set_executor(chain_id, ADDR_A)


@pytest.mark.parametrize("address", ["", "0x1234", "not-an-address", "0x" + "zz" * 20])
def test_invalid_address_rejected(address):
    with pytest.raises(ChainRegistryError):
        ChainRegistry().set_executor(1, address)


def test_remove_executor():
    reg = ChainRegistry()
    reg.set_executor(1, ADDR_A)
    assert reg.remove_executor(1) is True
    assert reg.remove_executor(1) is False
    assert reg.get_executor(1) is None


def test_dump_and_load_roundtrip(tmp_path):
    reg = ChainRegistry()
    reg.set_executor(324, ADDR_A)
    reg.set_executor(270, ADDR_B)
    path = tmp_path / "executors.json"
    reg.dump(path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert [e["chainId"] for e in data["entries"]] == [270, 324]

    again = ChainRegistry.load(path)
    assert again.entries() == reg.entries()


def test_document_validation():
    with pytest.raises(ChainRegistryError):
        ChainRegistry.from_document({"entries": [{"chainId": 1, "executor": ADDR_A}, {"chainId": 1, "executor": ADDR_B}]})
    with pytest.raises(ChainRegistryError):
        ChainRegistry.from_document({"entries": [{"chainId": -2, "executor": ADDR_A}]})
    with pytest.raises(ChainRegistryError):
        ChainRegistry.from_document({"entries": [], "extra": 1})


def test_load_missing_file(tmp_path):
    with pytest.raises(ChainRegistryError):
        ChainRegistry.load(tmp_path / "nope.json")


def test_concurrent_writers_leave_one_value():
    reg = ChainRegistry()
    addrs = ["0x" + f"{i:02x}" * 20 for i in range(1, 9)]

    def writer(a):
        for _ in range(50):
            reg.set_executor(7, a)

    threads = [threading.Thread(target=writer, args=(a,)) for a in addrs]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert reg.get_executor(7).lower() in addrs
