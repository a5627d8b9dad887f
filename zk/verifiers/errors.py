"""
zk.verifiers.errors
===================

Error taxonomy shared by the verification-key store, the proof parser and the
PLONK verifier.

Every rejection carries a stable `code` (see `RejectCode`) so callers and tests
can assert *why* a proof was rejected, not merely that it was.

    ZKError
    ├── KeyLoadError            key document could not be turned into a key
    ├── KeyAlreadyInstalled     second install without replace=True
    └── VerificationError       terminal for one verify() call
        ├── Uninitialized
        ├── MalformedPublicInput
        ├── MalformedProof
        ├── InvalidProof
        └── ResourceExhausted

License: MIT
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class RejectCode(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    MALFORMED_PUBLIC_INPUT = "MALFORMED_PUBLIC_INPUT"
    MALFORMED_PROOF = "MALFORMED_PROOF"
    INVALID_PROOF = "INVALID_PROOF"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"


class ZKError(RuntimeError):
    """Raised for malformed inputs, bad key material or failed verification."""

    code: str = "ZK_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code
        self.message = message


class KeyLoadError(ZKError):
    code = "KEY_LOAD_ERROR"


class KeyAlreadyInstalled(ZKError):
    code = "KEY_ALREADY_INSTALLED"


class VerificationError(ZKError):
    """Base class of every reason a single verification call can be rejected."""

    reject_code: RejectCode

    def __init__(self, message: str):
        super().__init__(message, code=self.reject_code.value)


class Uninitialized(VerificationError):
    reject_code = RejectCode.UNINITIALIZED


class MalformedPublicInput(VerificationError):
    reject_code = RejectCode.MALFORMED_PUBLIC_INPUT


class MalformedProof(VerificationError):
    reject_code = RejectCode.MALFORMED_PROOF


class InvalidProof(VerificationError):
    reject_code = RejectCode.INVALID_PROOF


class ResourceExhausted(VerificationError):
    reject_code = RejectCode.RESOURCE_EXHAUSTED


__all__ = [
    "RejectCode",
    "ZKError",
    "KeyLoadError",
    "KeyAlreadyInstalled",
    "VerificationError",
    "Uninitialized",
    "MalformedPublicInput",
    "MalformedProof",
    "InvalidProof",
    "ResourceExhausted",
]
