"""
zk.cli — verifier command line.

Implements:
  - zk-verify verify    Verify a proof document against a verification key
  - zk-verify vk-hash   Print the key digest bound into every transcript
  - zk-verify inspect   Decode a proof document into named fields
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import msgspec
import typer
import yaml

from zk.config import load_verifier_config
from zk.integration.policy import Meter, load_policy
from zk.verifiers import (JsonKeyLoader, PlonkVerifier, Proof,
                          VerificationKeyStore, ZKError)
from zk.verifiers.pairing_bn254 import g1_to_affine
from zk.verifiers.proof import EVALUATION_NAMES
from zk.verifiers.serialization import (ProofDocument, decode_proof_document,
                                        parse_word, word_hex)

app = typer.Typer(help="PLONK + lookup proof verifier")

log = logging.getLogger("zk.cli")


@app.callback()
def main() -> None:
    cfg = load_verifier_config()
    logging.basicConfig(level=cfg.log_level_value, format="%(levelname)s %(name)s: %(message)s")


def _pretty(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


def _resolve_vk(vk: Optional[Path]) -> Path:
    if vk is not None:
        return vk
    cfg = load_verifier_config()
    if cfg.vk_path is None:
        typer.echo("Error: no verification key (use --vk or set ZK_VK_PATH)", err=True)
        raise typer.Exit(2)
    return cfg.vk_path


def _read_proof(path: Path) -> ProofDocument:
    try:
        return decode_proof_document(path.read_bytes())
    except (OSError, msgspec.DecodeError, msgspec.ValidationError) as e:
        typer.echo(f"Error: cannot read proof document {path}: {e}", err=True)
        raise typer.Exit(2)


def _words(values: List[Any], what: str) -> List[int]:
    try:
        return [parse_word(v) for v in values]
    except ValueError as e:
        typer.echo(f"Error: invalid {what}: {e}", err=True)
        raise typer.Exit(2)


def _load_meter(policy: Optional[Path]) -> Optional[Meter]:
    path = policy or load_verifier_config().policy_path
    if path is None:
        return None
    try:
        return load_policy(path, missing_ok=False).meter()
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        typer.echo(f"Error: invalid policy {path}: {e}", err=True)
        raise typer.Exit(2)


@app.command()
def verify(
    proof: Path = typer.Option(..., "--proof", help="Proof document (JSON)"),
    vk: Optional[Path] = typer.Option(None, "--vk", help="Verification key (JSON); defaults to ZK_VK_PATH"),
    public: Optional[List[str]] = typer.Option(
        None, "--public", help="Public input (hex or decimal); repeat per input. Overrides the document."
    ),
    policy: Optional[Path] = typer.Option(None, "--policy", help="Metering policy (JSON/YAML)"),
) -> None:
    """
    Verify a proof. Exit code 0 on accept, 1 with the rejection code otherwise.

    Examples:
      zk-verify verify --vk vk.json --proof proof.json --public 0x23
    """
    store = VerificationKeyStore()
    try:
        store.install(JsonKeyLoader(_resolve_vk(vk)))
    except ZKError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)

    doc = _read_proof(proof)
    if public:
        pis = _words(public, "public input")
    else:
        pis = _words(doc.public_inputs or [], "public input")
    words = _words(doc.proof, "proof word")

    meter = _load_meter(policy)

    result = PlonkVerifier(store).verify(pis, words, meter=meter)
    if result:
        typer.echo("✓ proof accepted")
        return
    typer.echo(f"✗ proof rejected: {result.code}: {result.message}", err=True)
    raise typer.Exit(1)


@app.command("vk-hash")
def vk_hash(
    vk: Optional[Path] = typer.Option(None, "--vk", help="Verification key (JSON); defaults to ZK_VK_PATH"),
) -> None:
    """Print the keccak-256 digest of the verification key."""
    try:
        key = JsonKeyLoader(_resolve_vk(vk)).load()
    except ZKError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    typer.echo("0x" + key.digest.hex())


@app.command()
def inspect(
    proof: Path = typer.Option(..., "--proof", help="Proof document (JSON)"),
) -> None:
    """Decode a proof document and print its named fields."""
    doc = _read_proof(proof)
    try:
        parsed = Proof.from_words(_words(doc.proof, "proof word"))
    except ZKError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    def point(pt) -> List[str]:
        return [word_hex(c) for c in g1_to_affine(pt)]

    out = {
        "commitments": {
            "wires": [point(c) for c in parsed.wire_commitments],
            "copy_permutation_grand_product": point(parsed.copy_permutation_grand_product),
            "lookup_s_poly": point(parsed.lookup_s_poly),
            "lookup_grand_product": point(parsed.lookup_grand_product),
            "quotient": [point(c) for c in parsed.quotient_commitments],
        },
        "evaluations": {name: word_hex(v) for name, v in zip(EVALUATION_NAMES, parsed.evaluations())},
        "openings": {
            "at_z": point(parsed.opening_at_z),
            "at_z_omega": point(parsed.opening_at_z_omega),
        },
        "public_inputs": [word_hex(x) for x in _words(doc.public_inputs or [], "public input")],
    }
    typer.echo(_pretty(out))


if __name__ == "__main__":
    app()
