"""
zk.tests helpers

Lightweight utilities and environment defaults shared by zk/* tests.

Exports:
- read_json(path) -> Any
- env_flag(name, default=False) -> bool
- configure_test_logging() -> None

Environment toggles:
- ZK_TEST_LOG=1           → enable DEBUG logging for zk.*
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union


def read_json(path: Union[str, Path]) -> Any:
    p = Path(path)
    with p.open("r", encoding="utf-8") as fh:
        return json.load(fh)


# --- Env & logging -------------------------------------------------------------


def env_flag(name: str, default: bool = False) -> bool:
    """
    Read an environment flag in a truthy/falsey way: "1", "true", "yes" → True.
    """
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def configure_test_logging(level: Optional[int] = None) -> None:
    """
    Configure basic logging for zk.* loggers when ZK_TEST_LOG is set.
    """
    if level is None:
        level = logging.DEBUG
    if env_flag("ZK_TEST_LOG", False):
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        logging.getLogger("zk").setLevel(level)


# Enable logging if requested
configure_test_logging()

__all__ = [
    "read_json",
    "env_flag",
    "configure_test_logging",
]
