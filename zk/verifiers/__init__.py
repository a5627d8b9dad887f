# zk/verifiers/__init__.py
"""
PLONK + lookup proof verifier — high-level facade

This package exposes a small, stable interface for verifying proofs of a fixed
circuit against a verification key:

- `VerificationKeyStore` holds the active key (installed through a loader).
- `PlonkVerifier(provider).verify(public_inputs, proof)` returns a
  `VerificationResult` (truthy on accept, carries the rejection code).
- `verify_proof(key, public_inputs, proof)` is the pure form; it raises a
  `VerificationError` subclass on reject.

Usage
-----
>>> from zk.verifiers import JsonKeyLoader, PlonkVerifier, VerificationKeyStore
>>> store = VerificationKeyStore()
>>> store.install(JsonKeyLoader("vk.json"))
>>> res = PlonkVerifier(store).verify([35], proof_words)
>>> res.ok
True

Submodules
----------
- `field`, `pairing_bn254`       Fr helpers, BN254 curve and pairing wrapper
- `kzg_bn254`                    KZG opening equations
- `keys`, `serialization`        verification key model, store, loaders, JSON documents
- `proof`                        44-word proof layout
- `transcript_fs`                keccak Fiat–Shamir transcript
- `plonk_kzg_bn254`              the verifier
- `errors`                       rejection taxonomy
"""

from __future__ import annotations

from typing import Any, Sequence

from .errors import (InvalidProof, KeyAlreadyInstalled, KeyLoadError,
                     MalformedProof, MalformedPublicInput, RejectCode,
                     ResourceExhausted, Uninitialized, VerificationError,
                     ZKError)
from .keys import (JsonKeyLoader, KeyLoader, KeyProvider, StaticKeyLoader,
                   VerificationKey, VerificationKeyStore)
from .plonk_kzg_bn254 import (PlonkVerifier, ProofInput, VerificationResult,
                              verify_proof)
from .proof import PROOF_WORDS, Proof
from .transcript_fs import ChallengeSet, derive_challenges


def verify(key: VerificationKey, public_inputs: Sequence[int], proof: ProofInput, *, meter: Any = None) -> VerificationResult:
    """
    Verify against an explicit key and return a `VerificationResult` instead of
    raising on reject.
    """
    return PlonkVerifier.for_key(key).verify(public_inputs, proof, meter=meter)


__all__ = [
    "ZKError",
    "KeyLoadError",
    "KeyAlreadyInstalled",
    "VerificationError",
    "Uninitialized",
    "MalformedPublicInput",
    "MalformedProof",
    "InvalidProof",
    "ResourceExhausted",
    "RejectCode",
    "VerificationKey",
    "VerificationKeyStore",
    "KeyLoader",
    "KeyProvider",
    "StaticKeyLoader",
    "JsonKeyLoader",
    "Proof",
    "PROOF_WORDS",
    "ChallengeSet",
    "derive_challenges",
    "PlonkVerifier",
    "VerificationResult",
    "verify_proof",
    "verify",
]
