"""Environment configuration for the verifier tools.

    ZK_VK_PATH       verification key JSON used by `zk-verify` when --vk is omitted
    ZK_POLICY_PATH   JSON/YAML metering policy (optional)
    ZK_LOG_LEVEL     logging level name for the CLI (default WARNING)
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class VerifierConfig:
    vk_path: Optional[Path]
    policy_path: Optional[Path]
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.WARNING


def _path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    return Path(raw) if raw else None


def load_verifier_config() -> VerifierConfig:
    return VerifierConfig(
        vk_path=_path("ZK_VK_PATH"),
        policy_path=_path("ZK_POLICY_PATH"),
        log_level=os.getenv("ZK_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )


__all__ = ["VerifierConfig", "load_verifier_config", "DEFAULT_LOG_LEVEL"]
