"""
Shared fixtures: a secp256k1 context and a fixed five member ring.
"""
import pytest

from curve_context import CurveContext
from hash_oracle import HashOracle
from proof_exporter import ProofExporter
from ring_curve_sig import RingSigner, RingVerifier

SOUL_MESSAGE = b"0xSOUL..."


@pytest.fixture(scope="session")
def ctx():
    return CurveContext()


@pytest.fixture(scope="session")
def oracle(ctx):
    return HashOracle(ctx)


@pytest.fixture(scope="session")
def signer(ctx, oracle):
    return RingSigner(ctx, oracle)


@pytest.fixture(scope="session")
def verifier(ctx, oracle):
    return RingVerifier(ctx, oracle)


@pytest.fixture(scope="session")
def exporter(verifier):
    return ProofExporter(verifier)


@pytest.fixture(scope="session")
def keypairs(ctx):
    """Six deterministic key pairs, the last one is never in ring5."""
    return [ctx.derive_keypair(b"ring-member-%d" % i) for i in range(6)]


@pytest.fixture(scope="session")
def ring5(keypairs):
    return tuple(pk for _, pk in keypairs[:5])


@pytest.fixture(scope="session")
def signer_sk(keypairs):
    # signer sits at index 2 of ring5
    return keypairs[2][0]


@pytest.fixture(scope="session")
def soul_signature(signer, signer_sk, ring5):
    return signer.sign(signer_sk, ring5, SOUL_MESSAGE)
