# Copyright
# SPDX-License-Identifier: Apache-2.0
"""
BN254 scalar field Fr — minimal, pure-Python helpers for verifier-side math.

Elements are plain Python ints in canonical form [0, R). Values coming from the
outside world (proof words, public inputs) are checked with `is_canonical` and
rejected by the caller when out of range; nothing here silently reduces
untrusted input.

It is **not** constant-time and is intended only for verification / testing
utilities, not for secret-bearing computations.

Features:
- Scalar modulus `R`, 32-byte big-endian (de)serialization.
- Inversion via Fermat's little theorem, batch inversion.
- Two-adic roots of unity and an evaluation `Domain` (vanishing polynomial,
  Lagrange basis evaluation at a point outside the domain).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from .errors import ZKError

# BN254 / alt_bn128 scalar field (subgroup order r).
R: int = 21888242871839275222246405745257275088548364400416034343698204186575808495617
FR_BYTE_LEN = 32

# Multiplicative generator of Fr* (a quadratic non-residue) and the 2-adicity of R - 1.
GENERATOR: int = 5
TWO_ADICITY: int = 28


def is_canonical(x: int) -> bool:
    """True if `x` is an int in [0, R)."""
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x < R


def to_bytes32(x: int) -> bytes:
    return int(x).to_bytes(FR_BYTE_LEN, "big")


def from_bytes32(b: bytes) -> int:
    """Parse 32 big-endian bytes, rejecting non-canonical encodings."""
    if len(b) != FR_BYTE_LEN:
        raise ZKError(f"Fr.from_bytes: expected {FR_BYTE_LEN} bytes, got {len(b)}")
    x = int.from_bytes(b, "big")
    if x >= R:
        raise ZKError("Fr.from_bytes: value is not a canonical field element")
    return x


def inv(a: int) -> int:
    """Multiplicative inverse using Fermat's little theorem."""
    a %= R
    if a == 0:
        raise ZKError("Fr inverse of zero")
    return pow(a, R - 2, R)


def batch_inv(elems: Sequence[int]) -> List[int]:
    """
    Simultaneous inversion of many field elements (one inversion + 3 mults/elem).
    Every element must be non-zero.
    """
    n = len(elems)
    if n == 0:
        return []
    prefix = [1] * n
    acc = 1
    for i, a in enumerate(elems):
        if a % R == 0:
            raise ZKError("Fr batch inverse of zero")
        prefix[i] = acc
        acc = (acc * a) % R

    inv_acc = inv(acc)
    out = [0] * n
    for i in range(n - 1, -1, -1):
        out[i] = (prefix[i] * inv_acc) % R
        inv_acc = (inv_acc * elems[i]) % R
    return out


def powers(base: int, n: int) -> List[int]:
    """[1, base, base^2, ..., base^(n-1)] mod R."""
    out = [1]
    for _ in range(1, n):
        out.append((out[-1] * base) % R)
    return out[:n]


def root_of_unity(n: int) -> int:
    """
    Primitive n-th root of unity for a power-of-two `n` <= 2^28.

    GENERATOR is a non-residue, so g^((R-1)/n) has order exactly n.
    """
    if n < 1 or n & (n - 1):
        raise ZKError(f"domain size must be a power of two, got {n}")
    if n > (1 << TWO_ADICITY):
        raise ZKError(f"domain size {n} exceeds 2^{TWO_ADICITY}")
    w = pow(GENERATOR, (R - 1) // n, R)
    if n > 1 and pow(w, n // 2, R) == 1:
        raise ZKError("generator does not yield a primitive root of unity")
    return w


@dataclass(frozen=True)
class Domain:
    """Multiplicative subgroup H = <omega> of size n."""

    size: int
    omega: int

    def __post_init__(self) -> None:
        n = self.size
        if n < 2 or n & (n - 1):
            raise ZKError(f"domain size must be a power of two >= 2, got {n}")
        if pow(self.omega, n, R) != 1 or pow(self.omega, n // 2, R) == 1:
            raise ZKError("omega is not a primitive root of unity for the domain size")

    @staticmethod
    def of_size(n: int) -> "Domain":
        return Domain(size=n, omega=root_of_unity(n))

    def element(self, i: int) -> int:
        """omega^i"""
        return pow(self.omega, i % self.size, R)

    def elements(self) -> List[int]:
        return powers(self.omega, self.size)

    def vanishing(self, z: int) -> int:
        """Z_H(z) = z^n - 1"""
        return (pow(z, self.size, R) - 1) % R

    def lagrange_many(self, indices: Sequence[int], z: int) -> Dict[int, int]:
        """
        Evaluate L_i(z) = omega^i * (z^n - 1) / (n * (z - omega^i)) for each i.

        `z` must lie outside H (Z_H(z) != 0).
        """
        zh = self.vanishing(z)
        if zh == 0:
            raise ZKError("evaluation point lies in the domain")
        unique = sorted(set(int(i) for i in indices))
        pts = [self.element(i) for i in unique]
        dens = batch_inv([(self.size * (z - w)) % R for w in pts])
        return {i: (w * zh % R) * d % R for i, w, d in zip(unique, pts, dens)}

    def lagrange(self, i: int, z: int) -> int:
        return self.lagrange_many([i], z)[i]


__all__ = [
    "R",
    "FR_BYTE_LEN",
    "GENERATOR",
    "TWO_ADICITY",
    "is_canonical",
    "to_bytes32",
    "from_bytes32",
    "inv",
    "batch_inv",
    "powers",
    "root_of_unity",
    "Domain",
]
