"""
zk.verifiers.transcript_fs
==========================

Fiat–Shamir transcript for the PLONK + lookup verifier.

The transcript is a keccak-256 duplex over two 32-byte state words and a
challenge counter:

    update(v):   s0' = H(0x00000000 || s0 || s1 || v)
                 s1' = H(0x00000001 || s0 || s1 || v)      (both from the old state)
    challenge(): c   = H(0x00000002 || s0 || s1 || counter_u32) mod r ; counter += 1

Scalars are absorbed as one 32-byte big-endian word, G1 points as x then y
(the point at infinity as 0, 0).

`derive_challenges` fixes the absorb order for a whole proof:

1. key digest, public inputs, wire commitments a, b, c, d   -> eta, beta, gamma
2. copy-permutation grand product, lookup sorted poly s      -> beta', gamma'
3. lookup grand product                                       -> alpha
4. quotient parts t0..t3                                      -> zeta
5. the 18 evaluations, in proof order                         -> v
6. opening proofs W_zeta, W_zeta_omega                        -> u

Every challenge depends only on values absorbed before it, so a prover can run
the same function on a partially filled proof.

License: MIT
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from eth_utils import keccak

from .field import R, to_bytes32
from .pairing_bn254 import G1Point, g1_to_affine

if TYPE_CHECKING:  # pragma: no cover
    from .keys import VerificationKey
    from .proof import Proof

log = logging.getLogger(__name__)

DST_STATE_0 = (0).to_bytes(4, "big")
DST_STATE_1 = (1).to_bytes(4, "big")
DST_CHALLENGE = (2).to_bytes(4, "big")


class Transcript:
    """Keccak duplex transcript. Create one per verification and discard it."""

    def __init__(self) -> None:
        self._state0 = bytes(32)
        self._state1 = bytes(32)
        self._counter = 0

    def update(self, value: bytes) -> None:
        if len(value) != 32:
            raise ValueError(f"transcript words are 32 bytes, got {len(value)}")
        s0, s1 = self._state0, self._state1
        self._state0 = keccak(DST_STATE_0 + s0 + s1 + value)
        self._state1 = keccak(DST_STATE_1 + s0 + s1 + value)

    def append_scalar(self, x: int) -> None:
        self.update(to_bytes32(x))

    def append_g1(self, pt: G1Point) -> None:
        x, y = g1_to_affine(pt)
        self.update(to_bytes32(x))
        self.update(to_bytes32(y))

    def challenge(self) -> int:
        digest = keccak(DST_CHALLENGE + self._state0 + self._state1 + self._counter.to_bytes(4, "big"))
        self._counter += 1
        return int.from_bytes(digest, "big") % R


@dataclass(frozen=True)
class ChallengeSet:
    eta: int
    beta: int
    gamma: int
    beta_lookup: int
    gamma_lookup: int
    alpha: int
    z: int
    v: int
    u: int


def derive_challenges(
    key: "VerificationKey", public_inputs: Sequence[int], proof: "Proof"
) -> ChallengeSet:
    """
    Absorb key digest, public inputs and proof in protocol order and squeeze
    every verifier challenge. Pure: identical inputs give identical output.
    """
    t = Transcript()
    t.update(key.digest)
    for x in public_inputs:
        t.append_scalar(x)
    for c in proof.wire_commitments:
        t.append_g1(c)
    eta = t.challenge()
    beta = t.challenge()
    gamma = t.challenge()

    t.append_g1(proof.copy_permutation_grand_product)
    t.append_g1(proof.lookup_s_poly)
    beta_lookup = t.challenge()
    gamma_lookup = t.challenge()

    t.append_g1(proof.lookup_grand_product)
    alpha = t.challenge()

    for c in proof.quotient_commitments:
        t.append_g1(c)
    z = t.challenge()

    for e in proof.evaluations():
        t.append_scalar(e)
    v = t.challenge()

    t.append_g1(proof.opening_at_z)
    t.append_g1(proof.opening_at_z_omega)
    u = t.challenge()

    log.debug("challenges derived: zeta=%#x v=%#x u=%#x", z, v, u)
    return ChallengeSet(
        eta=eta,
        beta=beta,
        gamma=gamma,
        beta_lookup=beta_lookup,
        gamma_lookup=gamma_lookup,
        alpha=alpha,
        z=z,
        v=v,
        u=u,
    )


__all__ = ["Transcript", "ChallengeSet", "derive_challenges"]
