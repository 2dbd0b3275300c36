"""
Domain separated hash functions used by the ring signature.

hash_to_scalar(tag, parts) feeds SHA-256 with the tag and every part, each
prefixed by its 4 byte big endian length, and reduces the digest mod n.

hash_to_point has two maps:

    "generator"  digest -> scalar h -> h*G. This is a simplification, not a
                 hash-to-curve. log_G(h*G) = h is public, so for every ring
                 member P anybody can compute h(P)*P and compare it with a
                 key image. Linkability still holds, signer anonymity against
                 key-image matching does not.
    "increment"  try-and-increment on the x coordinate. The discrete log of
                 the resulting point is unknown.
"""
import struct

from Crypto.Hash import SHA256
from ecdsa import numbertheory
from ecdsa.ellipticcurve import PointJacobi

DOMAIN_CHALLENGE = b"soul-ring/lsag/challenge/v1"
DOMAIN_KEY_IMAGE = b"soul-ring/lsag/key-image/v1"

POINT_MAPS = ("generator", "increment")


def _frame(data):
    return struct.pack(">I", len(data)) + data


class HashOracle:
    def __init__(self, curve_context, point_map="generator"):
        if point_map not in POINT_MAPS:
            raise ValueError(f"Unknown hash-to-point map {point_map!r}, expected one of {POINT_MAPS}")
        self.ctx = curve_context
        self.point_map = point_map

    def digest(self, domain_tag, parts):
        h = SHA256.new(_frame(domain_tag))
        for part in parts:
            h.update(_frame(bytes(part)))
        return h.digest()

    def hash_to_scalar(self, domain_tag, parts):
        return int.from_bytes(self.digest(domain_tag, parts), "big") % self.ctx.order

    def hash_to_point(self, data, domain_tag=DOMAIN_KEY_IMAGE):
        if self.point_map == "increment":
            return self._map_increment(data, domain_tag)
        h = self.hash_to_scalar(domain_tag, [data])
        return h * self.ctx.g

    def _map_increment(self, data, domain_tag):
        curve = self.ctx.curve.curve
        p = curve.p()
        x = int.from_bytes(self.digest(domain_tag, [data]), "big") % p
        while True:
            rhs = (x * x * x + curve.a() * x + curve.b()) % p
            if rhs and numbertheory.jacobi(rhs, p) == 1:
                break
            x = (x + 1) % p
        y = numbertheory.square_root_mod_prime(rhs, p)
        # even y, same convention as a 0x02 compressed prefix
        if y & 1:
            y = p - y
        return PointJacobi(curve, x, y, 1, self.ctx.order)
