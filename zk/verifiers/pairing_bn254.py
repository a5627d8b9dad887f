"""
zk.verifiers.pairing_bn254
==========================

Thin BN254 (altbn128) curve & Ate pairing wrapper over `py_ecc.optimized_bn128`.

Public API
----------
- g1_from_affine(x, y) / g2_from_affine((x0, x1), (y0, y1))   strict parsing
- g1_to_affine(P) / g2_to_affine(Q)                          ints, (0, 0) for infinity
- g1_add, g1_neg, g1_mul, g1_msm, g2_mul, g2_is_infinity
- check_pairing_product(pairs) -> bool
- g1_generator(), g2_generator(), g1_infinity()
- P (base field modulus), R (subgroup order)

Notes
-----
- Point ordering follows the common convention e(P, Q) with P in G1, Q in G2.
  The underlying `py_ecc` pairing call expects (Q, P); this wrapper handles it.
- Parsing is strict: coordinates must be canonical (< P) and the point must be
  on the curve and in the prime-order subgroup. G1 has cofactor 1, so on-curve
  implies subgroup membership; G2 points are checked with [R]Q == O.
- The affine pair (0, 0) is the EVM encoding of the point at infinity.
- `check_pairing_product` multiplies Miller loops and runs a single final
  exponentiation.

License: MIT
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence, Tuple

from py_ecc.optimized_bn128 import (FQ, FQ2, FQ12, G1, G2, Z1, add, b, b2,
                                    curve_order, double, eq, field_modulus,
                                    final_exponentiate, is_inf, is_on_curve,
                                    multiply, neg, normalize, pairing)

from .errors import ZKError

# We do not strictly type the point internals; treat them as opaque tuples
# that py_ecc understands (projective FQ / FQ2 coordinates).
G1Point = Any
G2Point = Any

P: int = int(field_modulus)
R: int = int(curve_order)

AffineG1 = Tuple[int, int]
AffineG2 = Tuple[Tuple[int, int], Tuple[int, int]]

__all__ = [
    "G1Point",
    "G2Point",
    "AffineG1",
    "AffineG2",
    "P",
    "R",
    "g1_generator",
    "g2_generator",
    "g1_infinity",
    "g1_from_affine",
    "g2_from_affine",
    "g1_to_affine",
    "g2_to_affine",
    "g1_add",
    "g1_neg",
    "g1_mul",
    "g1_msm",
    "g2_mul",
    "g2_is_infinity",
    "check_pairing_product",
]


def g1_generator() -> G1Point:
    return G1


def g2_generator() -> G2Point:
    return G2


def g1_infinity() -> G1Point:
    return Z1


def _coord(v: Any, what: str) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise ZKError(f"{what}: coordinate must be an int, got {type(v).__name__}")
    if not 0 <= v < P:
        raise ZKError(f"{what}: coordinate is not a canonical base-field element")
    return v


def _limb(c: Any) -> int:
    # optimized FQ exposes `.n`; optimized FQ2 stores plain int coefficients
    return int(c.n) if hasattr(c, "n") else int(c)


def g1_from_affine(x: int, y: int) -> G1Point:
    """Parse an affine G1 point; raises ZKError if not canonical / not on curve."""
    xi, yi = _coord(x, "G1.x"), _coord(y, "G1.y")
    if xi == 0 and yi == 0:
        return Z1
    pt = (FQ(xi), FQ(yi), FQ.one())
    if not is_on_curve(pt, b):
        raise ZKError("G1 point is not on curve")
    return pt


def g2_from_affine(xx: Sequence[int], yy: Sequence[int]) -> G2Point:
    """
    Parse an affine G2 point given as ([x_c0, x_c1], [y_c0, y_c1]), value c0 + c1*i.
    Raises ZKError unless the point is on the twist and in the order-R subgroup.
    """
    if len(xx) != 2 or len(yy) != 2:
        raise ZKError("G2 point must be [[x0, x1], [y0, y1]]")
    x0, x1 = _coord(xx[0], "G2.x0"), _coord(xx[1], "G2.x1")
    y0, y1 = _coord(yy[0], "G2.y0"), _coord(yy[1], "G2.y1")
    if x0 == x1 == y0 == y1 == 0:
        return (FQ2.one(), FQ2.one(), FQ2.zero())
    pt = (FQ2([x0, x1]), FQ2([y0, y1]), FQ2.one())
    if not is_on_curve(pt, b2):
        raise ZKError("G2 point is not on curve")
    if not is_inf(multiply(pt, R)):
        raise ZKError("G2 point is not in the prime-order subgroup")
    return pt


def g1_to_affine(pt: G1Point) -> AffineG1:
    if is_inf(pt):
        return (0, 0)
    x, y = normalize(pt)
    return (_limb(x), _limb(y))


def g2_to_affine(pt: G2Point) -> AffineG2:
    if is_inf(pt):
        return ((0, 0), (0, 0))
    x, y = normalize(pt)
    return ((_limb(x.coeffs[0]), _limb(x.coeffs[1])), (_limb(y.coeffs[0]), _limb(y.coeffs[1])))


def g1_add(p1: G1Point, p2: G1Point) -> G1Point:
    if is_inf(p1):
        return p2
    if is_inf(p2):
        return p1
    if eq(p1, p2):
        return double(p1)
    return add(p1, p2)


def g1_neg(pt: G1Point) -> G1Point:
    return pt if is_inf(pt) else neg(pt)


def g1_mul(pt: G1Point, k: int) -> G1Point:
    """Scalar multiplication by k mod R."""
    k %= R
    if k == 0 or is_inf(pt):
        return Z1
    return multiply(pt, k)


def g2_mul(pt: G2Point, k: int) -> G2Point:
    return multiply(pt, k % R)


def g1_msm(terms: Iterable[Tuple[G1Point, int]]) -> G1Point:
    """Naive multi-scalar multiplication: sum of k_i * P_i."""
    acc = Z1
    for pt, k in terms:
        acc = g1_add(acc, g1_mul(pt, k))
    return acc


def g2_is_infinity(pt: G2Point) -> bool:
    return is_inf(pt)


def check_pairing_product(pairs: Iterable[Tuple[G1Point, G2Point]]) -> bool:
    """
    Return True iff prod e(P_i, Q_i) == 1 in GT.

    Pairs with an infinity component contribute the identity and are skipped.
    """
    acc = FQ12.one()
    for g1_pt, g2_pt in pairs:
        if is_inf(g1_pt) or is_inf(g2_pt):
            continue
        if not is_on_curve(g1_pt, b):
            raise ZKError("G1 point is not on curve")
        if not is_on_curve(g2_pt, b2):
            raise ZKError("G2 point is not on curve")
        # py_ecc pairing expects (Q, P)
        acc = acc * pairing(g2_pt, g1_pt, final_exponentiate=False)
    return final_exponentiate(acc) == FQ12.one()
