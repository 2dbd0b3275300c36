import dataclasses

import pytest

from conftest import SOUL_MESSAGE
from ring_errors import FormatError


def test_proof_anchor_matches_signature(exporter, ring5, soul_signature):
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, soul_signature)
    assert proof.c0 == soul_signature.c[0]
    assert proof.final_hash == proof.c0
    assert len(proof.z) == len(proof.w) == 5


def test_proof_agrees_with_verifier(ctx, exporter, verifier, ring5, soul_signature):
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, soul_signature)
    trace = verifier.recompute(ring5, SOUL_MESSAGE, soul_signature)
    assert [ctx.encode_point(p) for p in proof.z] == [ctx.encode_point(p) for p in trace.l_points]
    assert [ctx.encode_point(p) for p in proof.w] == [ctx.encode_point(p) for p in trace.r_points]


def test_commitments_are_r_g_plus_c_p(ctx, exporter, ring5, soul_signature):
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, soul_signature)
    for i, pk in enumerate(ring5):
        expected = soul_signature.r[i] * ctx.g + soul_signature.c[i] * pk
        assert ctx.same_point(proof.z[i], expected)


def test_confirm_valid_proof(exporter, ring5, soul_signature):
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, soul_signature)
    assert exporter.confirm(ring5, SOUL_MESSAGE, soul_signature, proof)


def test_confirm_rejects_swapped_commitment(ctx, exporter, ring5, soul_signature):
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, soul_signature)
    z = list(proof.z)
    z[1] = ctx.g
    assert not exporter.confirm(ring5, SOUL_MESSAGE, soul_signature, dataclasses.replace(proof, z=tuple(z)))


def test_confirm_rejects_other_message(exporter, ring5, soul_signature):
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, soul_signature)
    assert not exporter.confirm(ring5, b"other", soul_signature, proof)


def test_invalid_signature_gives_mismatched_proof(exporter, ring5, soul_signature):
    r = list(soul_signature.r)
    r[3] ^= 1
    forged = dataclasses.replace(soul_signature, r=tuple(r))
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, forged)
    assert proof.final_hash != proof.c0
    assert not exporter.confirm(ring5, SOUL_MESSAGE, forged, proof)


def test_confirm_rejects_short_proof(exporter, ring5, soul_signature):
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, soul_signature)
    with pytest.raises(FormatError):
        exporter.confirm(ring5, SOUL_MESSAGE, soul_signature, dataclasses.replace(proof, w=proof.w[:3]))
