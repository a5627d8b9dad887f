"""
zk.integration
==============

Glue between the verifier engine and its hosts: resource policy and metering.

Typical usage
-------------
    from zk.integration import load_policy

    meter = load_policy(cfg.policy_path).meter()
    PlonkVerifier(store).verify(public_inputs, proof, meter=meter)
"""

from .policy import (DEFAULT_POLICY, Meter, Policy, SizeLimits, UnitSchedule,
                     load_policy)

__all__ = [
    "DEFAULT_POLICY",
    "Meter",
    "Policy",
    "SizeLimits",
    "UnitSchedule",
    "load_policy",
]
