"""
zk.verifiers.serialization
==========================

JSON documents for verification keys and proofs, plus the hex/word helpers used
to read them.

Documents are typed with **msgspec** Structs so that a missing or misspelled
field fails at decode time instead of surfacing later as a half-built key.

Word encoding
-------------
Every uint256 (scalar, coordinate) may be written as
- a JSON integer,
- a 0x-prefixed hex string (any case, at most 64 nibbles), or
- a decimal string.

Parsing never reduces: range checks (< p, < r) belong to the consumers.

Key document shape
------------------
{
  "domain_size": 8, "num_inputs": 1, "omega": "0x...",
  "gate_setup": [[x, y] x 8], "gate_selectors": [[x, y] x 2],
  "permutation": [[x, y] x 4], "lookup_selector": [x, y],
  "lookup_table": [[x, y] x 4], "lookup_table_type": [x, y],
  "non_residues": [k1, k2, k3],
  "g2_elements": [[[x0, x1], [y0, y1]] x 2]
}

Proof document shape
--------------------
{ "proof": [44 words], "public_inputs": [words] }   (public_inputs optional)

Public API
----------
- is_hex_str(s, require_prefix=False, even=True) -> bool
- parse_word(x) -> int
- word_hex(x) -> "0x" + 64 nibbles
- VkDocument, ProofDocument
- decode_vk_document / encode_vk_document
- decode_proof_document / encode_proof_document
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Union

import msgspec

_HEX_RE = re.compile(r"^(0x)?[0-9a-fA-F]*$")
_DEC_RE = re.compile(r"^[0-9]+$")

Word = Union[int, str]
G1Json = List[Word]
G2Json = List[List[Word]]


def is_hex_str(s: str, *, require_prefix: bool = False, even: bool = True) -> bool:
    """
    Return True if `s` looks like a (possibly 0x-prefixed) hex string.

    This performs only lexical checks; it does not parse into bytes.
    """
    if not isinstance(s, str):
        return False
    if not _HEX_RE.match(s):
        return False
    has_prefix = s.startswith(("0x", "0X"))
    if require_prefix and not has_prefix:
        return False
    hex_part = s[2:] if has_prefix else s
    if even and (len(hex_part) % 2 != 0):
        return False
    return True


def parse_word(x: Word) -> int:
    """
    Parse one uint256 word (int, 0x-hex or decimal string).

    Raises ValueError for negatives, values >= 2^256 and anything unparsable.
    """
    if isinstance(x, bool):
        raise ValueError("booleans are not words")
    if isinstance(x, int):
        v = x
    elif isinstance(x, str):
        s = x.strip()
        if s[:2] in ("0x", "0X"):
            if not s[2:] or not is_hex_str(s, even=False) or len(s) > 66:
                raise ValueError(f"invalid hex word: {x!r}")
            v = int(s[2:], 16)
        elif _DEC_RE.match(s):
            v = int(s, 10)
        else:
            raise ValueError(f"invalid word: {x!r}")
    else:
        raise ValueError(f"unsupported word type {type(x).__name__}")
    if not 0 <= v < 1 << 256:
        raise ValueError("word out of uint256 range")
    return v


def word_hex(x: int) -> str:
    return "0x" + int(x).to_bytes(32, "big").hex()


# -----------------------------------------------------------------------------
# Documents
# -----------------------------------------------------------------------------


class VkDocument(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    domain_size: int
    num_inputs: int
    omega: Word
    gate_setup: List[G1Json]
    gate_selectors: List[G1Json]
    permutation: List[G1Json]
    lookup_selector: G1Json
    lookup_table: List[G1Json]
    lookup_table_type: G1Json
    non_residues: List[Word]
    g2_elements: List[G2Json]


class ProofDocument(msgspec.Struct, frozen=True, omit_defaults=True):
    proof: List[Word]
    public_inputs: Optional[List[Word]] = None


def decode_vk_document(data: Union[bytes, str]) -> VkDocument:
    """Raises msgspec.DecodeError / msgspec.ValidationError on bad documents."""
    return msgspec.json.decode(data, type=VkDocument)


def encode_vk_document(doc: VkDocument) -> bytes:
    return msgspec.json.encode(doc)


def decode_proof_document(data: Union[bytes, str]) -> ProofDocument:
    return msgspec.json.decode(data, type=ProofDocument)


def encode_proof_document(words: Sequence[int], public_inputs: Optional[Sequence[int]] = None) -> bytes:
    doc = ProofDocument(
        proof=[word_hex(w) for w in words],
        public_inputs=None if public_inputs is None else [word_hex(x) for x in public_inputs],
    )
    return msgspec.json.encode(doc)


__all__ = [
    "Word",
    "is_hex_str",
    "parse_word",
    "word_hex",
    "VkDocument",
    "ProofDocument",
    "decode_vk_document",
    "encode_vk_document",
    "decode_proof_document",
    "encode_proof_document",
]
