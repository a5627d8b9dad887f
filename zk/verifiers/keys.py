"""
zk.verifiers.keys
=================

Verification key model, key store and key loaders.

A `VerificationKey` is immutable and has a fixed shape (see `VerificationKey`
for slot order). The store publishes a key as a whole: a loader builds the full
key first, then a single reference swap under a lock makes it visible, so a
reader observes either `Uninitialized` or the complete key.

    store = VerificationKeyStore()
    store.install(JsonKeyLoader("vk.json"))
    key = store.get()

License: MIT
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple, Union

import msgspec
from eth_utils import keccak

from .errors import KeyAlreadyInstalled, KeyLoadError, Uninitialized, ZKError
from .field import R, Domain, is_canonical, to_bytes32
from .kzg_bn254 import OpeningKey
from .pairing_bn254 import (G1Point, G2Point, g1_from_affine, g1_generator,
                            g1_to_affine, g2_from_affine, g2_generator,
                            g2_is_infinity, g2_to_affine)
from .serialization import (VkDocument, decode_vk_document, parse_word,
                            word_hex)

log = logging.getLogger(__name__)

GATE_SETUP_LEN = 8
GATE_SELECTORS_LEN = 2
PERMUTATION_LEN = 4
LOOKUP_TABLE_LEN = 4
NON_RESIDUES_LEN = 3
G2_ELEMENTS_LEN = 2

DEFAULT_NON_RESIDUES: Tuple[int, int, int] = (5, 7, 10)


@dataclass(frozen=True)
class VerificationKey:
    """
    Circuit-specific verification key.

    Slot order (also the order of `words()` and therefore of the digest):

    domain_size, num_inputs, omega,
    gate_setup[8]        q_a, q_b, q_c, q_d, q_ab, q_ac, q_const, q_dnext
    gate_selectors[2]    main gate, custom gate
    permutation[4]       sigma_0..sigma_3
    lookup_selector
    lookup_table[4]      t0, t1, t2, table-id column
    lookup_table_type
    non_residues[3]      k1, k2, k3 (k0 = 1)
    g2_elements[2]       [1]_2, [x]_2
    """

    domain_size: int
    num_inputs: int
    omega: int
    gate_setup: Tuple[G1Point, ...]
    gate_selectors: Tuple[G1Point, ...]
    permutation: Tuple[G1Point, ...]
    lookup_selector: G1Point
    lookup_table: Tuple[G1Point, ...]
    lookup_table_type: G1Point
    non_residues: Tuple[int, ...]
    g2_elements: Tuple[G2Point, ...]

    def __post_init__(self) -> None:
        for name, want in (
            ("gate_setup", GATE_SETUP_LEN),
            ("gate_selectors", GATE_SELECTORS_LEN),
            ("permutation", PERMUTATION_LEN),
            ("lookup_table", LOOKUP_TABLE_LEN),
            ("non_residues", NON_RESIDUES_LEN),
            ("g2_elements", G2_ELEMENTS_LEN),
        ):
            got = len(getattr(self, name))
            if got != want:
                raise ZKError(f"verification key slot {name} expects {want} entries, got {got}")
        # raises ZKError for a bad size / omega
        Domain(size=self.domain_size, omega=self.omega)
        if not 0 <= self.num_inputs <= self.domain_size:
            raise ZKError("num_inputs must be within [0, domain_size]")
        shifts = (1, *self.non_residues)
        if not all(is_canonical(k) and k != 0 for k in shifts) or len(set(shifts)) != len(shifts):
            raise ZKError("non_residues must be distinct non-zero field elements other than 1")
        one_g2, x_g2 = self.g2_elements
        if g2_is_infinity(one_g2) or g2_is_infinity(x_g2):
            raise ZKError("g2_elements must not contain the point at infinity")
        if g2_to_affine(one_g2) != g2_to_affine(g2_generator()):
            raise ZKError("g2_elements[0] must be the G2 generator")
        if g2_to_affine(x_g2) == g2_to_affine(one_g2):
            raise ZKError("g2_elements[1] must differ from the G2 generator")

    @property
    def domain(self) -> Domain:
        return Domain(size=self.domain_size, omega=self.omega)

    def words(self) -> List[int]:
        out = [self.domain_size, self.num_inputs, self.omega]
        g1_slots: List[G1Point] = [
            *self.gate_setup,
            *self.gate_selectors,
            *self.permutation,
            self.lookup_selector,
            *self.lookup_table,
            self.lookup_table_type,
        ]
        for pt in g1_slots:
            out.extend(g1_to_affine(pt))
        out.extend(self.non_residues)
        for q in self.g2_elements:
            (x0, x1), (y0, y1) = g2_to_affine(q)
            out.extend((x0, x1, y0, y1))
        return out

    @cached_property
    def digest(self) -> bytes:
        """keccak-256 over the 32-byte big-endian encoding of `words()`."""
        return keccak(b"".join(to_bytes32(w) for w in self.words()))

    def opening_key(self) -> OpeningKey:
        return OpeningKey(g1=g1_generator(), g2=self.g2_elements[0], x_g2=self.g2_elements[1])

    # -- documents ----------------------------------------------------------

    @classmethod
    def from_document(cls, doc: VkDocument) -> "VerificationKey":
        """Build a key from a decoded document; raises ZKError / ValueError."""

        def g1(pair: Sequence) -> G1Point:
            if len(pair) != 2:
                raise ZKError("G1 point must be [x, y]")
            return g1_from_affine(parse_word(pair[0]), parse_word(pair[1]))

        def g2(pt: Sequence) -> G2Point:
            if len(pt) != 2:
                raise ZKError("G2 point must be [[x0, x1], [y0, y1]]")
            return g2_from_affine([parse_word(c) for c in pt[0]], [parse_word(c) for c in pt[1]])

        omega = parse_word(doc.omega)
        if omega >= R:
            raise ZKError("omega is not a canonical field element")
        return cls(
            domain_size=doc.domain_size,
            num_inputs=doc.num_inputs,
            omega=omega,
            gate_setup=tuple(g1(p) for p in doc.gate_setup),
            gate_selectors=tuple(g1(p) for p in doc.gate_selectors),
            permutation=tuple(g1(p) for p in doc.permutation),
            lookup_selector=g1(doc.lookup_selector),
            lookup_table=tuple(g1(p) for p in doc.lookup_table),
            lookup_table_type=g1(doc.lookup_table_type),
            non_residues=tuple(parse_word(k) for k in doc.non_residues),
            g2_elements=tuple(g2(q) for q in doc.g2_elements),
        )

    def to_document(self) -> VkDocument:
        def g1(pt: G1Point) -> List[str]:
            return [word_hex(c) for c in g1_to_affine(pt)]

        def g2(pt: G2Point) -> List[List[str]]:
            (x0, x1), (y0, y1) = g2_to_affine(pt)
            return [[word_hex(x0), word_hex(x1)], [word_hex(y0), word_hex(y1)]]

        return VkDocument(
            domain_size=self.domain_size,
            num_inputs=self.num_inputs,
            omega=word_hex(self.omega),
            gate_setup=[g1(p) for p in self.gate_setup],
            gate_selectors=[g1(p) for p in self.gate_selectors],
            permutation=[g1(p) for p in self.permutation],
            lookup_selector=g1(self.lookup_selector),
            lookup_table=[g1(p) for p in self.lookup_table],
            lookup_table_type=g1(self.lookup_table_type),
            non_residues=[word_hex(k) for k in self.non_residues],
            g2_elements=[g2(q) for q in self.g2_elements],
        )


# -----------------------------------------------------------------------------
# Providers & loaders
# -----------------------------------------------------------------------------


class KeyProvider(Protocol):
    def get(self) -> VerificationKey: ...


class KeyLoader(Protocol):
    def load(self) -> VerificationKey: ...


class StaticKeyLoader:
    """Loader for an in-process key (fixtures, tests)."""

    def __init__(self, key: VerificationKey):
        self._key = key

    def load(self) -> VerificationKey:
        return self._key


class JsonKeyLoader:
    """Loads a key from a JSON document on disk (see zk.verifiers.serialization)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> VerificationKey:
        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise KeyLoadError(f"cannot read verification key {self.path}: {e}") from e
        try:
            doc = decode_vk_document(raw)
        except (msgspec.DecodeError, msgspec.ValidationError) as e:
            raise KeyLoadError(f"invalid verification key document {self.path}: {e}") from e
        try:
            return VerificationKey.from_document(doc)
        except (ZKError, ValueError) as e:
            raise KeyLoadError(f"invalid verification key {self.path}: {e}") from e


class VerificationKeyStore:
    """
    Holds the single active verification key.

    `get()` raises `Uninitialized` until a key has been installed. A failing
    loader leaves the store untouched.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._key: Optional[VerificationKey] = None

    @property
    def initialized(self) -> bool:
        return self._key is not None

    def get(self) -> VerificationKey:
        key = self._key
        if key is None:
            raise Uninitialized("verification key has not been loaded")
        return key

    def install(self, loader: KeyLoader, *, replace: bool = False) -> VerificationKey:
        key = loader.load()
        with self._lock:
            if self._key is not None and not replace:
                raise KeyAlreadyInstalled("a verification key is already installed")
            self._key = key
        log.info("verification key installed (digest=0x%s, n=%d)", key.digest.hex(), key.domain_size)
        return key


class FixedKeyProvider:
    """A provider bound to one key, for the pure `verify_proof` path."""

    def __init__(self, key: VerificationKey):
        self._key = key

    def get(self) -> VerificationKey:
        return self._key


__all__ = [
    "DEFAULT_NON_RESIDUES",
    "VerificationKey",
    "KeyProvider",
    "KeyLoader",
    "StaticKeyLoader",
    "JsonKeyLoader",
    "VerificationKeyStore",
    "FixedKeyProvider",
]
