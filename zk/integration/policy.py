"""
zk.integration.policy
=====================

Resource policy & metering for proof verification.

What this module provides
-------------------------
- **Unit schedule**: deterministic cost of each expensive primitive the
  verifier performs (G1 scalar multiplication, pairing, field inversion) plus a
  per-call base and a per-public-input charge.
- **Budget**: the maximum number of units one verification may spend.
- **Size limits**: ceilings on public-input count and domain size.
- **Meter**: a per-call counter charged by the verifier; exceeding the budget
  aborts the call with `ResourceExhausted`.

Typical usage
-------------
    from zk.integration.policy import load_policy

    policy = load_policy(Path("policy.yaml"))
    meter = policy.meter()
    result = verifier.verify(public_inputs, proof, meter=meter)
    print(meter.used)

You may override defaults by loading a JSON/YAML file with the same structure
as `Policy.to_dict()` (see `load_policy`). Units are chain-local abstractions,
not EVM gas.

License: MIT
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from zk.verifiers.errors import ResourceExhausted

log = logging.getLogger(__name__)

# =============================================================================
# Data structures
# =============================================================================


@dataclass(frozen=True)
class UnitSchedule:
    """
    Cost per primitive. Final cost of a verification is:
        base
      + per_public_input * num_public_inputs
      + g1_mul    * scalar multiplications
      + pairing   * pairings
      + inversion * field inversions
    """

    base: int = 20_000
    per_public_input: int = 1_000
    g1_mul: int = 6_000
    pairing: int = 45_000
    inversion: int = 800

    def cost(self, op: str, count: int = 1) -> int:
        try:
            unit = getattr(self, op)
        except AttributeError:
            raise KeyError(f"unknown metered operation {op!r}") from None
        return int(unit) * int(count)


@dataclass(frozen=True)
class SizeLimits:
    """Hard limits checked before any arithmetic."""

    max_public_inputs: int = 1 << 10
    max_domain_size: int = 1 << 26


@dataclass(frozen=True)
class Policy:
    """
    Top-level verification policy.

    Fields:
      schedule: UnitSchedule
      budget:   units one verification may spend (None = unlimited)
      limits:   SizeLimits
    """

    schedule: UnitSchedule = field(default_factory=UnitSchedule)
    budget: Optional[int] = 2_000_000
    limits: SizeLimits = field(default_factory=SizeLimits)

    def meter(self) -> "Meter":
        return Meter(schedule=self.schedule, budget=self.budget, limits=self.limits)

    # ---- helpers ----

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dict for JSON/YAML."""
        return {
            "schedule": asdict(self.schedule),
            "budget": self.budget,
            "limits": asdict(self.limits),
        }

    @staticmethod
    def from_mapping(m: Mapping[str, Any]) -> "Policy":
        """Create a Policy from a JSON/YAML-like mapping; missing keys keep defaults."""
        sched_m = m.get("schedule", {}) or {}
        limits_m = m.get("limits", {}) or {}
        unknown = set(sched_m) - set(UnitSchedule.__dataclass_fields__)
        if unknown:
            raise ValueError(f"unknown schedule entries: {sorted(unknown)}")

        schedule = UnitSchedule(**{k: int(v) for k, v in sched_m.items()})
        limits = SizeLimits(**{k: int(v) for k, v in limits_m.items() if k in SizeLimits.__dataclass_fields__})
        budget = m.get("budget", Policy.budget)
        return Policy(
            schedule=schedule,
            budget=None if budget is None else int(budget),
            limits=limits,
        )


# Default singleton
DEFAULT_POLICY = Policy()


class Meter:
    """
    Per-call unit counter. Not thread-safe; create one per verification.
    """

    def __init__(
        self,
        *,
        schedule: UnitSchedule = UnitSchedule(),
        budget: Optional[int] = None,
        limits: SizeLimits = SizeLimits(),
    ):
        self.schedule = schedule
        self.budget = budget
        self.limits = limits
        self.used = 0
        self.counts: Dict[str, int] = {}

    @property
    def remaining(self) -> Optional[int]:
        return None if self.budget is None else max(0, self.budget - self.used)

    def charge(self, op: str, count: int = 1) -> None:
        self.used += self.schedule.cost(op, count)
        self.counts[op] = self.counts.get(op, 0) + count
        if self.budget is not None and self.used > self.budget:
            log.debug("budget exceeded on %s: used=%d budget=%d", op, self.used, self.budget)
            raise ResourceExhausted(
                f"verification budget exhausted ({self.used} > {self.budget} units at {op})"
            )

    def check_limits(self, *, num_public_inputs: int, domain_size: int) -> None:
        if num_public_inputs > self.limits.max_public_inputs:
            raise ResourceExhausted(
                f"too many public inputs: {num_public_inputs} > {self.limits.max_public_inputs}"
            )
        if domain_size > self.limits.max_domain_size:
            raise ResourceExhausted(
                f"domain too large: {domain_size} > {self.limits.max_domain_size}"
            )


# =============================================================================
# Loading
# =============================================================================


def load_policy(
    path: Optional[Path] = None, *, fallback: Policy = DEFAULT_POLICY, missing_ok: bool = True
) -> Policy:
    """
    Load a Policy from a JSON or YAML file. If `path` is None, or missing and
    `missing_ok` is set, returns the provided `fallback` (DEFAULT_POLICY).

    Raises OSError, ValueError or yaml.YAMLError for unusable files.
    """
    if path is None:
        return fallback
    p = Path(path)
    if not p.exists():
        if not missing_ok:
            raise FileNotFoundError(f"policy file {p} not found")
        log.warning("policy file %s not found; using defaults", p)
        return fallback

    text = p.read_text(encoding="utf-8")
    if text.lstrip().startswith("{"):
        data = json.loads(text)
    else:
        data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"policy file {p} must hold a mapping")

    return Policy.from_mapping(data)


__all__ = [
    "UnitSchedule",
    "SizeLimits",
    "Policy",
    "DEFAULT_POLICY",
    "Meter",
    "load_policy",
]
