"""
Chain registry — chain id → executor contract address.

Usage:
  from chains import ChainRegistry
  reg = ChainRegistry()
  reg.set_executor(324, "0x32400084c286cf3e17e7b677ea9583e60a000324")
  reg.get_executor(324)
"""

from .registry import (ChainRegistry, ChainRegistryError, ExecutorEntry,
                       RegistryDocument)

__all__ = ["ChainRegistry", "ChainRegistryError", "ExecutorEntry", "RegistryDocument"]
