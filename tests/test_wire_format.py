import dataclasses

import pytest

from conftest import SOUL_MESSAGE
from ring_errors import FormatError, InvalidKeyError
from wire_format import (proof_from_wire, proof_to_wire, ring_from_wire, ring_to_wire,
                         signature_from_wire, signature_to_wire)


def test_signature_wire_shape(ctx, soul_signature):
    wire = signature_to_wire(ctx, soul_signature)
    assert set(wire) == {"keyImage", "c", "r"}
    assert len(wire["keyImage"]) == 66
    assert all(len(x) == 64 for x in wire["c"] + wire["r"])
    assert wire["c"][0] == format(soul_signature.c[0], "064x")


def test_wire_signature_still_verifies(ctx, verifier, ring5, soul_signature):
    ring = ring_from_wire(ctx, ring_to_wire(ctx, ring5))
    sig = signature_from_wire(ctx, signature_to_wire(ctx, soul_signature))
    assert verifier.verify(ring, SOUL_MESSAGE, sig)


def test_accepts_0x_prefix(ctx, soul_signature):
    wire = signature_to_wire(ctx, soul_signature)
    wire["c"] = ["0x" + x for x in wire["c"]]
    assert signature_from_wire(ctx, wire).c == soul_signature.c


def test_proof_wire_shape(ctx, exporter, ring5, soul_signature):
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, soul_signature)
    wire = proof_to_wire(ctx, proof)
    assert set(wire) == {"z", "w", "finalHash", "c0"}
    assert wire["finalHash"] == wire["c0"]
    decoded = proof_from_wire(ctx, wire)
    assert exporter.confirm(ring5, SOUL_MESSAGE, soul_signature, decoded)


def test_proof_with_infinite_commitment_reads_back(ctx, exporter, keypairs, ring5, soul_signature):
    # r[0] = -c[0] * x_0 makes L_0 = r[0]*G + c[0]*P_0 the point at infinity
    r0 = (-soul_signature.c[0] * keypairs[0][0]) % ctx.order
    forged = dataclasses.replace(soul_signature, r=(r0,) + soul_signature.r[1:])
    proof = exporter.derive_proof(ring5, SOUL_MESSAGE, forged)
    assert ctx.is_infinity(proof.z[0])

    wire = proof_to_wire(ctx, proof)
    assert wire["z"][0] == "00"
    decoded = proof_from_wire(ctx, wire)
    assert ctx.is_infinity(decoded.z[0])
    assert proof_to_wire(ctx, decoded) == wire
    assert not exporter.confirm(ring5, SOUL_MESSAGE, forged, decoded)


def test_ring_member_at_infinity_rejected(ctx):
    with pytest.raises(InvalidKeyError):
        ring_from_wire(ctx, ["00", "00"])


@pytest.mark.parametrize("mutate", [
    lambda w: w.pop("r"),
    lambda w: w.update(c="00"),
    lambda w: w.update(c=w["c"][:-1]),
    lambda w: w["c"].__setitem__(0, "zz"),
    lambda w: w["r"].__setitem__(1, "00" * 31),
])
def test_malformed_signature_is_format_error(ctx, soul_signature, mutate):
    wire = signature_to_wire(ctx, soul_signature)
    mutate(wire)
    with pytest.raises(FormatError):
        signature_from_wire(ctx, wire)


def test_signature_must_be_object(ctx):
    with pytest.raises(FormatError):
        signature_from_wire(ctx, ["not", "a", "dict"])


def test_scalar_above_order_is_invalid_key(ctx, soul_signature):
    wire = signature_to_wire(ctx, soul_signature)
    wire["r"][0] = "ff" * 32
    with pytest.raises(InvalidKeyError):
        signature_from_wire(ctx, wire)


def test_bad_ring_member_is_invalid_key(ctx, ring5):
    wire = ring_to_wire(ctx, ring5)
    wire[1] = "05" + "11" * 32
    with pytest.raises(InvalidKeyError):
        ring_from_wire(ctx, wire)


def test_ring_must_be_list(ctx):
    with pytest.raises(FormatError):
        ring_from_wire(ctx, "02" * 33)
