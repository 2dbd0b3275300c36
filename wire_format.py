"""
Hex wire shapes for rings, signatures and proofs.

    ring       [hex, ...]                          33 byte compressed points
    signature  {"keyImage": hex, "c": [hex, ...], "r": [hex, ...]}
    proof      {"z": [hex, ...], "w": [hex, ...], "finalHash": hex, "c0": hex}

Proof commitments may be the point at infinity, encoded as the single byte 00.

Scalars are 32 byte big endian. Output is bare lowercase hex, input may
carry a 0x prefix.
"""
from ecdsa.ellipticcurve import INFINITY

from curve_context import hex_to_bytes
from proof_exporter import Proof
from ring_curve_sig import Signature
from ring_errors import FormatError


def _require(obj, keys, what):
    if not isinstance(obj, dict):
        raise FormatError(f"{what} must be an object")
    missing = [k for k in keys if k not in obj]
    if missing:
        raise FormatError(f"{what} is missing {', '.join(missing)}")


def _hex_list(value, what):
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise FormatError(f"{what} must be a list of hex strings")
    return value


def _hex_str(value, what):
    if not isinstance(value, str):
        raise FormatError(f"{what} must be a hex string")
    return value


def scalar_to_hex(ctx, x):
    return ctx.encode_scalar(x).hex()


def scalar_from_hex(ctx, text):
    return ctx.decode_scalar(hex_to_bytes(_hex_str(text, "scalar")))


def point_to_hex(ctx, point):
    return ctx.encode_point(point).hex()


def point_from_hex(ctx, text):
    return ctx.as_point(hex_to_bytes(_hex_str(text, "point")))


def _commitment_from_hex(ctx, text):
    # commitments of a forged signature can be the point at infinity
    data = hex_to_bytes(_hex_str(text, "point"))
    if data == b"\x00":
        return INFINITY
    return ctx.as_point(data)


def ring_to_wire(ctx, ring):
    return [point_to_hex(ctx, ctx.as_point(pk)) for pk in ring]


def ring_from_wire(ctx, data):
    return tuple(point_from_hex(ctx, pk) for pk in _hex_list(data, "ring"))


def signature_to_wire(ctx, sig):
    return {
        "keyImage": point_to_hex(ctx, sig.key_image),
        "c": [scalar_to_hex(ctx, x) for x in sig.c],
        "r": [scalar_to_hex(ctx, x) for x in sig.r],
    }


def signature_from_wire(ctx, data):
    _require(data, ("keyImage", "c", "r"), "signature")
    c = _hex_list(data["c"], "signature.c")
    r = _hex_list(data["r"], "signature.r")
    if len(c) != len(r):
        raise FormatError(f"signature has {len(c)} challenges and {len(r)} responses")
    return Signature(
        key_image=point_from_hex(ctx, data["keyImage"]),
        c=tuple(scalar_from_hex(ctx, x) for x in c),
        r=tuple(scalar_from_hex(ctx, x) for x in r),
    )


def proof_to_wire(ctx, proof):
    return {
        "z": [point_to_hex(ctx, p) for p in proof.z],
        "w": [point_to_hex(ctx, p) for p in proof.w],
        "finalHash": scalar_to_hex(ctx, proof.final_hash),
        "c0": scalar_to_hex(ctx, proof.c0),
    }


def proof_from_wire(ctx, data):
    _require(data, ("z", "w", "finalHash", "c0"), "proof")
    return Proof(
        z=tuple(_commitment_from_hex(ctx, p) for p in _hex_list(data["z"], "proof.z")),
        w=tuple(_commitment_from_hex(ctx, p) for p in _hex_list(data["w"], "proof.w")),
        final_hash=scalar_from_hex(ctx, data["finalHash"]),
        c0=scalar_from_hex(ctx, data["c0"]),
    )
