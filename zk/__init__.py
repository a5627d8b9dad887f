"""
zk — PLONK + lookup proof verification for a rollup settlement layer.

Subpackages:
- zk.verifiers     verifier engine, key store, proof model
- zk.integration   resource policy & metering
"""

__version__ = "0.1.0"
