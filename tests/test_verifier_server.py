import dataclasses

import pytest

from conftest import SOUL_MESSAGE
from key_image_registry import MemoryKeyImageRegistry
from ring_errors import AlreadyLinkedError
from verifier_server import VerifierServer


@pytest.fixture
def server(verifier):
    return VerifierServer(verifier, MemoryKeyImageRegistry())


def test_link_registers_key_image(server, ring5, soul_signature):
    assert not server.is_linked(soul_signature.key_image)
    assert server.link_signature(ring5, SOUL_MESSAGE, soul_signature)
    assert server.is_linked(soul_signature.key_image)
    assert server.linked_at(soul_signature.key_image) is not None


def test_second_signature_same_key_is_linked(server, signer, signer_sk, keypairs, ring5, soul_signature):
    server.link_signature(ring5, SOUL_MESSAGE, soul_signature)
    other_ring = [keypairs[5][1], keypairs[2][1]]
    again = signer.sign(signer_sk, other_ring, b"second use")
    with pytest.raises(AlreadyLinkedError):
        server.link_signature(other_ring, b"second use", again)


def test_invalid_signature_not_registered(server, ring5, soul_signature):
    c = list(soul_signature.c)
    c[2] ^= 1 << 5
    forged = dataclasses.replace(soul_signature, c=tuple(c))
    assert not server.link_signature(ring5, SOUL_MESSAGE, forged)
    assert not server.is_linked(soul_signature.key_image)


def test_verify_does_not_touch_registry(server, ring5, soul_signature):
    server.link_signature(ring5, SOUL_MESSAGE, soul_signature)
    assert server.verify_signature(ring5, SOUL_MESSAGE, soul_signature)
