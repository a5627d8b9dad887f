"""
zk.verifiers.plonk_kzg_bn254
============================

PLONK verifier (width-4 main gate, one custom gate, copy-permutation argument,
Plookup-style lookup argument) with KZG commitments on BN254.

Flow of one call
----------------
    ParseInputs -> DeriveChallenges -> CheckCommitmentArity
      -> EvaluateLinearizationIdentity -> BuildBatchedOpeningPoint
      -> PairingCheck -> Accept | Reject

Constraint identity
-------------------
For X over the domain H the prover shows that

    g_main(X) * (q_a a + q_b b + q_c c + q_d d + q_ab ab + q_ac ac + q_const
                 + q_dnext d(wX) - PI(X))
  + g_custom(X) * (alpha (a^2 - b) + alpha^2 (b^2 - c) + alpha^3 (ac - d))
  + alpha^4 [ z(X) prod_j (w_j + beta k_j X + gamma)
              - z(wX) prod_j (w_j + beta sigma_j(X) + gamma) ]
  + alpha^5 (z(X) - 1) L_0(X)
  + alpha^6 (X - w^{n-1}) [ z_L(X) (1 + beta') (gamma' + f(X))
                              (gamma'(1 + beta') + t(X) + beta' t(wX))
                            - z_L(wX) (gamma'(1 + beta') + s(X) + beta' s(wX)) ]
  + alpha^7 (z_L(X) - 1) L_0(X)
  + alpha^8 (z_L(X) - (gamma'(1 + beta'))^{n-1}) L_{n-1}(X)

equals T(X) Z_H(X), where k_0 = 1, PI(X) = sum_j pi_j L_j(X),
f = q_lookup (a + eta b + eta^2 c + eta^3 table_type) and
t = t_0 + eta t_1 + eta^2 t_2 + eta^3 t_3.

At zeta the verifier splits the identity into the linearization r(X) (all
terms linear in a committed polynomial that is not opened at zeta) and a
constant C computed from the claimed evaluations, checks

    quotient(zeta) * Z_H(zeta) == r(zeta) + C

and then proves the claimed openings with one batched KZG check at the two
points zeta and zeta*omega.

License: MIT
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from .errors import (InvalidProof, MalformedProof, MalformedPublicInput,
                     VerificationError)
from .field import R, is_canonical, powers
from .keys import FixedKeyProvider, KeyProvider, VerificationKey
from .kzg_bn254 import Opening, aggregate, batch_verify
from .pairing_bn254 import G1Point, g1_msm
from .proof import PROOF_WORDS, NUM_COMMITMENTS, Proof
from .transcript_fs import ChallengeSet, derive_challenges

log = logging.getLogger(__name__)

ProofInput = Union[Proof, bytes, Sequence[int]]


@dataclass(slots=True, frozen=True)
class VerificationResult:
    """Result of a verification attempt."""

    ok: bool
    code: Optional[str] = None
    message: Optional[str] = None

    def __bool__(self) -> bool:  # allows: if result: ...
        return self.ok


def _charge(meter: Any, op: str, count: int = 1) -> None:
    if meter is not None:
        meter.charge(op, count)


# -----------------------------------------------------------------------------
# ParseInputs
# -----------------------------------------------------------------------------


def parse_public_inputs(key: VerificationKey, public_inputs: Sequence[int]) -> Tuple[int, ...]:
    values = tuple(public_inputs)
    if len(values) != key.num_inputs:
        raise MalformedPublicInput(
            f"expected {key.num_inputs} public inputs, got {len(values)}"
        )
    for i, x in enumerate(values):
        if not is_canonical(x):
            raise MalformedPublicInput(f"public input {i} is not a canonical field element")
    return values


def parse_proof(proof: ProofInput) -> Proof:
    if isinstance(proof, Proof):
        return proof
    if isinstance(proof, (bytes, bytearray)):
        if len(proof) != PROOF_WORDS * 32:
            raise MalformedProof(f"proof must be {PROOF_WORDS * 32} bytes, got {len(proof)}")
        words = [int.from_bytes(proof[i:i + 32], "big") for i in range(0, len(proof), 32)]
        return Proof.from_words(words)
    return Proof.from_words(list(proof))


# -----------------------------------------------------------------------------
# CheckCommitmentArity
# -----------------------------------------------------------------------------


def check_commitment_arity(key: VerificationKey, proof: Proof) -> None:
    commitments = proof.commitments()
    if len(commitments) != NUM_COMMITMENTS:
        raise MalformedProof(f"expected {NUM_COMMITMENTS} commitments, got {len(commitments)}")
    if len(proof.wire_commitments) != len(key.permutation):
        raise MalformedProof("wire commitments do not match the permutation width")
    if len(proof.quotient_commitments) != len(key.permutation):
        raise MalformedProof("quotient must be split into one part per wire")


# -----------------------------------------------------------------------------
# EvaluateLinearizationIdentity
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class _Linearization:
    """Commitment [r] and the ζ-side data the opening step needs."""

    commitment: G1Point
    quotient_commitment: G1Point
    table_commitment: G1Point


def evaluate_linearization_identity(
    key: VerificationKey,
    public_inputs: Sequence[int],
    proof: Proof,
    ch: ChallengeSet,
    *,
    meter: Any = None,
) -> _Linearization:
    n = key.domain_size
    domain = key.domain
    z = ch.z
    zh = domain.vanishing(z)
    if zh == 0:
        raise InvalidProof("evaluation point lies in the domain")

    _charge(meter, "inversion")
    lagrange = domain.lagrange_many([*range(len(public_inputs)), 0, n - 1], z)
    l0, l_last = lagrange[0], lagrange[n - 1]
    pi_at_z = sum(x * lagrange[j] for j, x in enumerate(public_inputs)) % R

    alpha = powers(ch.alpha, 9)
    beta, gamma, eta = ch.beta, ch.gamma, ch.eta
    beta_l, gamma_l = ch.beta_lookup, ch.gamma_lookup
    gamma_beta_l = gamma_l * (1 + beta_l) % R
    z_star = pow(gamma_beta_l, n - 1, R)
    z_minus_last = (z - domain.element(n - 1)) % R

    a, b, c, d = proof.wire_values_at_z()
    gm = proof.gate_selector_at_z
    sigmas = (proof.sigma_0_at_z, proof.sigma_1_at_z, proof.sigma_2_at_z)
    zp_w = proof.copy_permutation_grand_product_at_z_omega
    s_w = proof.lookup_s_poly_at_z_omega
    zl_w = proof.lookup_grand_product_at_z_omega
    t_z, t_w = proof.lookup_t_poly_at_z, proof.lookup_t_poly_at_z_omega

    perm_tail = 1
    for w, s in zip((a, b, c), sigmas):
        perm_tail = perm_tail * (w + beta * s + gamma) % R

    const = (
        -gm * pi_at_z
        - alpha[4] * zp_w * perm_tail * (d + gamma)
        - alpha[5] * l0
        - alpha[6] * z_minus_last * zl_w * (gamma_beta_l + beta_l * s_w)
        - alpha[7] * l0
        - alpha[8] * l_last * z_star
    ) % R

    lhs = proof.quotient_at_z * zh % R
    rhs = (proof.linearization_at_z + const) % R
    if lhs != rhs:
        raise InvalidProof("quotient identity does not hold at the evaluation point")

    # [r]
    ks = (1, *key.non_residues)
    q_a, q_b, q_c, q_d, q_ab, q_ac, q_const, q_dnext = key.gate_setup
    g_custom = key.gate_selectors[1]

    custom = (
        alpha[1] * (a * a - b) + alpha[2] * (b * b - c) + alpha[3] * (a * c - d)
    ) % R

    perm_num = alpha[4]
    for w, k in zip((a, b, c, d), ks):
        perm_num = perm_num * (w + beta * k * z + gamma) % R
    z_perm_coeff = (perm_num + alpha[5] * l0) % R
    sigma3_coeff = -alpha[4] * zp_w * beta * perm_tail % R

    f_z = proof.lookup_selector_at_z * (
        a + eta * b + eta * eta % R * c + pow(eta, 3, R) * proof.lookup_table_type_at_z
    ) % R
    z_lookup_coeff = (
        alpha[6] * z_minus_last * (1 + beta_l) % R * (gamma_l + f_z) % R
        * (gamma_beta_l + t_z + beta_l * t_w)
        + alpha[7] * l0
        + alpha[8] * l_last
    ) % R
    s_coeff = -alpha[6] * z_minus_last * zl_w % R

    terms = [
        (q_a, gm * a),
        (q_b, gm * b),
        (q_c, gm * c),
        (q_d, gm * d),
        (q_ab, gm * a * b),
        (q_ac, gm * a * c),
        (q_const, gm),
        (q_dnext, gm * proof.d_at_z_omega),
        (g_custom, custom),
        (proof.copy_permutation_grand_product, z_perm_coeff),
        (key.permutation[3], sigma3_coeff),
        (proof.lookup_grand_product, z_lookup_coeff),
        (proof.lookup_s_poly, s_coeff),
    ]
    _charge(meter, "g1_mul", len(terms))
    r_commitment = g1_msm((pt, k % R) for pt, k in terms)

    zn = pow(z, n, R)
    _charge(meter, "g1_mul", len(proof.quotient_commitments))
    quotient_commitment = g1_msm(zip(proof.quotient_commitments, powers(zn, 4)))
    _charge(meter, "g1_mul", len(key.lookup_table))
    table_commitment = g1_msm(zip(key.lookup_table, powers(eta, 4)))

    return _Linearization(r_commitment, quotient_commitment, table_commitment)


# -----------------------------------------------------------------------------
# BuildBatchedOpeningPoint / PairingCheck
# -----------------------------------------------------------------------------


def build_batched_openings(
    key: VerificationKey,
    proof: Proof,
    ch: ChallengeSet,
    lin: _Linearization,
    *,
    meter: Any = None,
) -> List[Opening]:
    a_c, b_c, c_c, d_c = proof.wire_commitments
    at_z = [
        (lin.quotient_commitment, proof.quotient_at_z),
        (lin.commitment, proof.linearization_at_z),
        (a_c, proof.a_at_z),
        (b_c, proof.b_at_z),
        (c_c, proof.c_at_z),
        (d_c, proof.d_at_z),
        (key.gate_selectors[0], proof.gate_selector_at_z),
        (key.permutation[0], proof.sigma_0_at_z),
        (key.permutation[1], proof.sigma_1_at_z),
        (key.permutation[2], proof.sigma_2_at_z),
        (key.lookup_selector, proof.lookup_selector_at_z),
        (key.lookup_table_type, proof.lookup_table_type_at_z),
        (lin.table_commitment, proof.lookup_t_poly_at_z),
    ]
    at_z_omega = [
        (proof.copy_permutation_grand_product, proof.copy_permutation_grand_product_at_z_omega),
        (d_c, proof.d_at_z_omega),
        (proof.lookup_s_poly, proof.lookup_s_poly_at_z_omega),
        (proof.lookup_grand_product, proof.lookup_grand_product_at_z_omega),
        (lin.table_commitment, proof.lookup_t_poly_at_z_omega),
    ]
    f_z, y_z = aggregate([c for c, _ in at_z], [y for _, y in at_z], ch.v, meter=meter)
    f_w, y_w = aggregate([c for c, _ in at_z_omega], [y for _, y in at_z_omega], ch.v, meter=meter)
    z_omega = ch.z * key.omega % R
    return [
        Opening(point=ch.z, commitment=f_z, value=y_z, proof=proof.opening_at_z),
        Opening(point=z_omega, commitment=f_w, value=y_w, proof=proof.opening_at_z_omega),
    ]


def pairing_check(key: VerificationKey, openings: Sequence[Opening], ch: ChallengeSet, *, meter: Any = None) -> None:
    if not batch_verify(openings, ch.u, key.opening_key(), meter=meter):
        raise InvalidProof("pairing check failed")


# -----------------------------------------------------------------------------
# Entry points
# -----------------------------------------------------------------------------


def verify_proof(
    key: VerificationKey,
    public_inputs: Sequence[int],
    proof: ProofInput,
    *,
    meter: Any = None,
) -> None:
    """
    Verify `proof` for `public_inputs` under `key`. Returns None on accept and
    raises a `VerificationError` subclass on reject.
    """
    # ParseInputs
    pis = parse_public_inputs(key, public_inputs)
    if meter is not None:
        meter.check_limits(num_public_inputs=len(pis), domain_size=key.domain_size)
        meter.charge("base")
        meter.charge("per_public_input", len(pis))
    parsed = parse_proof(proof)

    ch = derive_challenges(key, pis, parsed)
    check_commitment_arity(key, parsed)
    lin = evaluate_linearization_identity(key, pis, parsed, ch, meter=meter)
    openings = build_batched_openings(key, parsed, ch, lin, meter=meter)
    pairing_check(key, openings, ch, meter=meter)


class PlonkVerifier:
    """
    Verifier bound to a key provider (typically a `VerificationKeyStore`).

    The key is read once per call, so a concurrent key replacement never mixes
    two keys inside one verification.
    """

    def __init__(self, provider: KeyProvider):
        self.provider = provider

    @classmethod
    def for_key(cls, key: VerificationKey) -> "PlonkVerifier":
        return cls(FixedKeyProvider(key))

    def verify_or_raise(self, public_inputs: Sequence[int], proof: ProofInput, *, meter: Any = None) -> None:
        key = self.provider.get()
        verify_proof(key, public_inputs, proof, meter=meter)

    def verify(self, public_inputs: Sequence[int], proof: ProofInput, *, meter: Any = None) -> VerificationResult:
        try:
            self.verify_or_raise(public_inputs, proof, meter=meter)
        except VerificationError as e:
            log.debug("proof rejected: %s (%s)", e.code, e.message)
            return VerificationResult(ok=False, code=e.code, message=e.message)
        return VerificationResult(ok=True)


__all__ = [
    "VerificationResult",
    "PlonkVerifier",
    "verify_proof",
    "parse_public_inputs",
    "parse_proof",
    "check_commitment_arity",
    "evaluate_linearization_identity",
    "build_batched_openings",
    "pairing_check",
]
