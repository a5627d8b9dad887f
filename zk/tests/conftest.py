import pytest

from zk.tests.fixture_circuit import PUBLIC_INPUT, prove, setup
from zk.verifiers import StaticKeyLoader, VerificationKeyStore


@pytest.fixture(scope="session")
def toy_circuit():
    return setup()


@pytest.fixture(scope="session")
def toy_key(toy_circuit):
    return toy_circuit.key


@pytest.fixture(scope="session")
def toy_proof(toy_circuit):
    return prove(toy_circuit)


@pytest.fixture(scope="session")
def proof_words(toy_proof):
    return toy_proof.to_words()


@pytest.fixture(scope="session")
def public_inputs():
    return [PUBLIC_INPUT]


@pytest.fixture(scope="session")
def unrelated_key():
    """A key for the same shape of circuit with a different constant in row 2."""
    return setup(q_const_row2=-4).key


@pytest.fixture()
def loaded_store(toy_key):
    store = VerificationKeyStore()
    store.install(StaticKeyLoader(toy_key))
    return store
