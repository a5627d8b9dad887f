"""
zk.verifiers.proof
==================

Typed proof model and its fixed 44-word wire layout.

    words  0..7    wire commitments a, b, c, d           (x, y each)
    words  8..9    copy-permutation grand product z
    words 10..11   lookup sorted polynomial s
    words 12..13   lookup grand product z_lookup
    words 14..21   quotient parts t0..t3
    words 22..39   evaluations (see EVALUATION_NAMES)
    words 40..43   opening proofs W_zeta, W_zeta_omega

Decoding is strict: wrong arity, a coordinate >= p, a point off the curve or a
scalar >= r raises `MalformedProof`. (0, 0) is the point at infinity.

License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .errors import MalformedProof, ZKError
from .field import is_canonical
from .pairing_bn254 import G1Point, g1_from_affine, g1_to_affine

PROOF_WORDS = 44
NUM_COMMITMENTS = 11
NUM_EVALUATIONS = 18

EVALUATION_NAMES: Tuple[str, ...] = (
    "a_at_z",
    "b_at_z",
    "c_at_z",
    "d_at_z",
    "d_at_z_omega",
    "gate_selector_at_z",
    "sigma_0_at_z",
    "sigma_1_at_z",
    "sigma_2_at_z",
    "copy_permutation_grand_product_at_z_omega",
    "lookup_s_poly_at_z_omega",
    "lookup_grand_product_at_z_omega",
    "lookup_t_poly_at_z",
    "lookup_t_poly_at_z_omega",
    "lookup_selector_at_z",
    "lookup_table_type_at_z",
    "quotient_at_z",
    "linearization_at_z",
)


@dataclass(frozen=True)
class Proof:
    """A parsed proof: commitments are py_ecc G1 points, evaluations Fr ints."""

    wire_commitments: Tuple[G1Point, G1Point, G1Point, G1Point]
    copy_permutation_grand_product: G1Point
    lookup_s_poly: G1Point
    lookup_grand_product: G1Point
    quotient_commitments: Tuple[G1Point, G1Point, G1Point, G1Point]

    a_at_z: int
    b_at_z: int
    c_at_z: int
    d_at_z: int
    d_at_z_omega: int
    gate_selector_at_z: int
    sigma_0_at_z: int
    sigma_1_at_z: int
    sigma_2_at_z: int
    copy_permutation_grand_product_at_z_omega: int
    lookup_s_poly_at_z_omega: int
    lookup_grand_product_at_z_omega: int
    lookup_t_poly_at_z: int
    lookup_t_poly_at_z_omega: int
    lookup_selector_at_z: int
    lookup_table_type_at_z: int
    quotient_at_z: int
    linearization_at_z: int

    opening_at_z: G1Point
    opening_at_z_omega: G1Point

    def commitments(self) -> List[G1Point]:
        """The 11 commitments in wire order."""
        return [
            *self.wire_commitments,
            self.copy_permutation_grand_product,
            self.lookup_s_poly,
            self.lookup_grand_product,
            *self.quotient_commitments,
        ]

    def evaluations(self) -> Tuple[int, ...]:
        return tuple(getattr(self, name) for name in EVALUATION_NAMES)

    def wire_values_at_z(self) -> Tuple[int, int, int, int]:
        return (self.a_at_z, self.b_at_z, self.c_at_z, self.d_at_z)

    @classmethod
    def from_words(cls, words: Sequence[int]) -> "Proof":
        if len(words) != PROOF_WORDS:
            raise MalformedProof(f"proof must have {PROOF_WORDS} words, got {len(words)}")
        for i, w in enumerate(words):
            if isinstance(w, bool) or not isinstance(w, int) or not 0 <= w < 1 << 256:
                raise MalformedProof(f"proof word {i} is not a uint256")

        def point(i: int) -> G1Point:
            try:
                return g1_from_affine(words[i], words[i + 1])
            except ZKError as e:
                raise MalformedProof(f"proof words {i}..{i + 1}: {e}") from e

        pts = [point(2 * k) for k in range(NUM_COMMITMENTS)]
        evals_at = 2 * NUM_COMMITMENTS
        evals = list(words[evals_at:evals_at + NUM_EVALUATIONS])
        for k, e in enumerate(evals):
            if not is_canonical(e):
                raise MalformedProof(f"evaluation {EVALUATION_NAMES[k]} is not a canonical field element")
        openings_at = evals_at + NUM_EVALUATIONS

        return cls(
            wire_commitments=tuple(pts[0:4]),
            copy_permutation_grand_product=pts[4],
            lookup_s_poly=pts[5],
            lookup_grand_product=pts[6],
            quotient_commitments=tuple(pts[7:11]),
            **dict(zip(EVALUATION_NAMES, evals)),
            opening_at_z=point(openings_at),
            opening_at_z_omega=point(openings_at + 2),
        )

    def to_words(self) -> List[int]:
        out: List[int] = []
        for c in self.commitments():
            out.extend(g1_to_affine(c))
        out.extend(self.evaluations())
        out.extend(g1_to_affine(self.opening_at_z))
        out.extend(g1_to_affine(self.opening_at_z_omega))
        return out


__all__ = [
    "PROOF_WORDS",
    "NUM_COMMITMENTS",
    "NUM_EVALUATIONS",
    "EVALUATION_NAMES",
    "Proof",
]
