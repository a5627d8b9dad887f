"""
chains.registry — in-memory executor registry with JSON persistence.

`set_executor` overwrites unconditionally and keeps no history; `get_executor`
returns None for unknown chains. Addresses are normalized to EIP-55 checksum
form on the way in, so lookups compare canonical strings.

Documents (validated with pydantic):

  {"entries": [{"chainId": 324, "executor": "0x..."}, ...]}
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from eth_utils import is_address, to_checksum_address
from pydantic import (BaseModel, ConfigDict, Field, ValidationError,
                      field_validator)

log = logging.getLogger(__name__)


class ChainRegistryError(ValueError):
    """Invalid chain id, address or registry document."""


def _checksum(address: str) -> str:
    if not isinstance(address, str) or not is_address(address):
        raise ValueError(f"not an address: {address!r}")
    return to_checksum_address(address)


# ----------------------------- Pydantic Models -----------------------------

class ExecutorEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)
    chain_id: int = Field(ge=0, alias="chainId")
    executor: str

    @field_validator("executor")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return _checksum(v)


class RegistryDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")
    entries: List[ExecutorEntry] = Field(default_factory=list)

    @field_validator("entries")
    @classmethod
    def _unique(cls, v: List[ExecutorEntry]) -> List[ExecutorEntry]:
        ids = [e.chain_id for e in v]
        if len(ids) != len(set(ids)):
            raise ValueError("duplicate chainId in registry document")
        return v


# ----------------------------- Registry -----------------------------

class ChainRegistry:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._executors: Dict[int, str] = {}

    def set_executor(self, chain_id: int, address: str) -> str:
        """Record `address` as the executor for `chain_id`, replacing any previous one."""
        if isinstance(chain_id, bool) or not isinstance(chain_id, int) or chain_id < 0:
            raise ChainRegistryError(f"chain id must be a non-negative int, got {chain_id!r}")
        try:
            normalized = _checksum(address)
        except ValueError as e:
            raise ChainRegistryError(str(e)) from e
        with self._lock:
            previous = self._executors.get(chain_id)
            self._executors[chain_id] = normalized
        if previous is not None and previous != normalized:
            log.info("executor for chain %d changed %s -> %s", chain_id, previous, normalized)
        return normalized

    def get_executor(self, chain_id: int) -> Optional[str]:
        with self._lock:
            return self._executors.get(chain_id)

    def remove_executor(self, chain_id: int) -> bool:
        with self._lock:
            return self._executors.pop(chain_id, None) is not None

    def entries(self) -> Dict[int, str]:
        with self._lock:
            return dict(sorted(self._executors.items()))

    def __len__(self) -> int:
        return len(self._executors)

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._executors

    # -- persistence --------------------------------------------------------

    def to_document(self) -> RegistryDocument:
        return RegistryDocument(
            entries=[ExecutorEntry(chain_id=cid, executor=addr) for cid, addr in self.entries().items()]
        )

    def dump(self, path: Union[str, Path]) -> None:
        data = self.to_document().model_dump(by_alias=True)
        Path(path).write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    @classmethod
    def from_document(cls, data: object) -> "ChainRegistry":
        try:
            doc = RegistryDocument.model_validate(data)
        except ValidationError as e:
            raise ChainRegistryError(f"invalid registry document: {e}") from e
        reg = cls()
        for entry in doc.entries:
            reg.set_executor(entry.chain_id, entry.executor)
        return reg

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ChainRegistry":
        p = Path(path)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ChainRegistryError(f"cannot read registry {p}: {e}") from e
        return cls.from_document(data)


__all__ = ["ChainRegistry", "ChainRegistryError", "ExecutorEntry", "RegistryDocument"]
