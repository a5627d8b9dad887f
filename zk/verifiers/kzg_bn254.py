"""
zk.verifiers.kzg_bn254
======================

KZG (Kate) polynomial commitment opening checks on BN254 (altbn128).

Verification equation (single opening of C at z to value y with proof W):

    e(C - y*G1 + z*W, [1]_2) == e(W, [x]_2)

Batched openings at several points z_i are folded with powers of a separator
challenge u:

    e(sum u^i (C_i - y_i*G1 + z_i*W_i), [1]_2) * e(-sum u^i W_i, [x]_2) == 1

Where:
- C ∈ G1 is the commitment to polynomial f (or an aggregate of commitments)
- y = f(z) is the claimed value
- W ∈ G1 is the opening proof [(f(X) - y) / (X - z)]
- [x]_2 is the SRS element from the trusted setup (toxic waste x unknown)

This module:
- Reuses the curve/pairing wrapper from `.pairing_bn254`.
- Avoids any bytes/serialization logic; callers pass parsed points.
- Charges an optional meter for every scalar multiplication and pairing.

License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .field import R, powers
from .pairing_bn254 import (G1Point, G2Point, check_pairing_product,
                            g1_generator, g1_msm, g1_neg, g2_generator, g2_mul)


@dataclass(frozen=True)
class OpeningKey:
    """
    Verifier-side SRS material for KZG openings.

    Attributes
    ----------
    g1 : G1Point
        Canonical G1 generator.
    g2 : G2Point
        [1]_2 (canonical G2 generator for the setups we accept).
    x_g2 : G2Point
        Trusted-setup element [x]_2.
    """

    g1: G1Point
    g2: G2Point
    x_g2: G2Point


@dataclass(frozen=True)
class Opening:
    """One (possibly aggregated) claim: commitment opens to `value` at `point`."""

    point: int
    commitment: G1Point
    value: int
    proof: G1Point


def make_opening_key(x: int) -> OpeningKey:
    """
    Build an opening key from toxic-waste scalar `x` (for tests/dev only).

    In production, [x]_2 comes from a real trusted setup; `x` must *not* be known.
    """
    g2 = g2_generator()
    return OpeningKey(g1=g1_generator(), g2=g2, x_g2=g2_mul(g2, x % R))


def _charge(meter: Any, op: str, count: int = 1) -> None:
    if meter is not None:
        meter.charge(op, count)


def batch_verify(
    openings: Sequence[Opening],
    separator: int,
    key: OpeningKey,
    *,
    meter: Optional[Any] = None,
) -> bool:
    """
    Verify several openings with a single pairing-product check.

    `separator` must be a verifier challenge derived after all openings were
    fixed (e.g. from a Fiat–Shamir transcript).
    """
    if not openings:
        raise ValueError("no openings to verify")
    us = powers(separator % R, len(openings))

    # sum u^i * (C_i + z_i * W_i) - (sum u^i * y_i) * G1
    terms = []
    agg_value = 0
    for u_i, op in zip(us, openings):
        terms.append((op.commitment, u_i))
        terms.append((op.proof, (u_i * op.point) % R))
        agg_value = (agg_value + u_i * op.value) % R
    terms.append((key.g1, (R - agg_value) % R))
    _charge(meter, "g1_mul", len(terms))
    lhs = g1_msm(terms)

    w_terms = [(op.proof, u_i) for u_i, op in zip(us, openings)]
    _charge(meter, "g1_mul", len(w_terms))
    w_agg = g1_msm(w_terms)

    _charge(meter, "pairing", 2)
    return check_pairing_product([(lhs, key.g2), (g1_neg(w_agg), key.x_g2)])


def kzg_verify(
    commitment: G1Point,
    z: int,
    y: int,
    proof: G1Point,
    key: OpeningKey,
    *,
    meter: Optional[Any] = None,
) -> bool:
    """Verify a single KZG opening (commitment, point z, value y, proof W)."""
    return batch_verify([Opening(z % R, commitment, y % R, proof)], 1, key, meter=meter)


def aggregate(commitments: Sequence[G1Point], values: Sequence[int], v: int, *, meter: Optional[Any] = None):
    """
    Fold same-point claims with powers of `v`: (sum v^i C_i, sum v^i y_i).
    """
    if len(commitments) != len(values):
        raise ValueError("commitments/values length mismatch")
    vs = powers(v % R, len(commitments))
    _charge(meter, "g1_mul", len(commitments))
    acc = g1_msm(zip(commitments, vs))
    val = sum(c * y for c, y in zip(vs, values)) % R
    return acc, val


__all__ = [
    "OpeningKey",
    "Opening",
    "make_opening_key",
    "batch_verify",
    "kzg_verify",
    "aggregate",
]
