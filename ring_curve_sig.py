import hmac
import logging
from dataclasses import dataclass
from typing import List, Tuple

from ecdsa.ellipticcurve import PointJacobi

from hash_oracle import DOMAIN_CHALLENGE, DOMAIN_KEY_IMAGE
from ring_errors import DomainError, FormatError, InvalidKeyError, RingMembershipError

logger = logging.getLogger(__name__)

MIN_RING_SIZE = 2


@dataclass(frozen=True)
class Signature:
    """Linkable ring signature. c[0] is the anchor of the challenge chain."""
    key_image: PointJacobi
    c: Tuple[int, ...]
    r: Tuple[int, ...]


@dataclass(frozen=True)
class ChainTrace:
    """Intermediate values of one pass around the ring.

    challenges[i] is the challenge used at index i, challenges[n] the value
    the chain wraps back to at index 0.
    """
    l_points: Tuple[PointJacobi, ...]
    r_points: Tuple[PointJacobi, ...]
    challenges: Tuple[int, ...]

    @property
    def final_hash(self):
        return self.challenges[-1]


class _Ring:
    """Ring members normalised to points, with their encodings and H_p(P_i)."""
    def __init__(self, ctx, oracle, members):
        members = list(members)
        if len(members) < MIN_RING_SIZE:
            raise DomainError(f"Ring needs at least {MIN_RING_SIZE} members, got {len(members)}")
        self.points = [ctx.as_point(pk) for pk in members]
        self.encoded = [ctx.encode_point(p) for p in self.points]
        self.blob = b"".join(self.encoded)
        self._oracle = oracle
        self._bases = {}

    def __len__(self):
        return len(self.points)

    def base(self, i):
        # key image base point of member i
        if i not in self._bases:
            self._bases[i] = self._oracle.hash_to_point(self.encoded[i], DOMAIN_KEY_IMAGE)
        return self._bases[i]

    def index(self, encoded_pk):
        try:
            return self.encoded.index(encoded_pk)
        except ValueError:
            return None


def _check_message(message):
    if isinstance(message, str):
        message = message.encode("utf-8")
    if not isinstance(message, (bytes, bytearray)):
        raise DomainError(f"Message must be bytes or str, got {type(message).__name__}")
    if not message:
        raise DomainError("Message must not be empty")
    return bytes(message)


class ChallengeHasher:
    """c_{i+1} = H(ring || message || I || L_i || R_i) under the challenge tag."""
    def __init__(self, ctx, oracle, ring_blob, message, key_image):
        self.ctx = ctx
        self.oracle = oracle
        self.prefix = [ring_blob, message, ctx.encode_point(key_image)]

    def __call__(self, l_point, r_point):
        parts = self.prefix + [self.ctx.encode_point(l_point), self.ctx.encode_point(r_point)]
        return self.oracle.hash_to_scalar(DOMAIN_CHALLENGE, parts)


class RingSigner:
    """
    Produces LSAG signatures.

    Attributes:
        ctx: CurveContext
        oracle: HashOracle
    """
    def __init__(self, ctx, oracle):
        self.ctx = ctx
        self.oracle = oracle

    def key_image(self, private_key):
        """I = x * H_p(x*G). Same value for every ring and message."""
        x = self.ctx.as_scalar(private_key)
        pk_byte = self.ctx.encode_point(x * self.ctx.g)
        return x * self.oracle.hash_to_point(pk_byte, DOMAIN_KEY_IMAGE)

    def sign(self, private_key, ring, message) -> Signature:
        message = _check_message(message)
        x = self.ctx.as_scalar(private_key)
        members = _Ring(self.ctx, self.oracle, ring)
        n = len(members)

        pi = members.index(self.ctx.encode_point(x * self.ctx.g))
        if pi is None:
            raise RingMembershipError("Signer's public key is not in the ring")

        # tag generation
        I = x * members.base(pi)
        challenge = ChallengeHasher(self.ctx, self.oracle, members.blob, message, I)

        c_list = [0] * n
        s_list = [0] * n

        # pi values
        alpha = self.ctx.random_scalar()
        c_list[(pi + 1) % n] = challenge(alpha * self.ctx.g, alpha * members.base(pi))

        # walk the rest of the ring, wrapping back to pi
        for step in range(1, n):
            i = (pi + step) % n
            s_list[i] = self.ctx.random_scalar()
            Li = s_list[i] * self.ctx.g + c_list[i] * members.points[i]
            Ri = s_list[i] * members.base(i) + c_list[i] * I
            c_list[(i + 1) % n] = challenge(Li, Ri)

        s_list[pi] = (alpha - c_list[pi] * x) % self.ctx.order
        logger.debug("Signed message with ring of %d members", n)
        return Signature(key_image=I, c=tuple(c_list), r=tuple(s_list))


class RingVerifier:
    """
    Checks LSAG signatures. Malformed input raises, a bad signature returns
    False. Does not look at any key image registry.
    """
    def __init__(self, ctx, oracle):
        self.ctx = ctx
        self.oracle = oracle

    def check_structure(self, ring, message, signature):
        if not isinstance(signature, Signature):
            raise FormatError(f"Expected Signature, got {type(signature).__name__}")
        message = _check_message(message)
        members = _Ring(self.ctx, self.oracle, ring)
        if not len(signature.c) == len(signature.r) == len(members):
            raise FormatError(
                f"Ring has {len(members)} members but signature has "
                f"{len(signature.c)} challenges and {len(signature.r)} responses")
        for x in list(signature.c) + list(signature.r):
            if isinstance(x, bool) or not isinstance(x, int) or not 0 <= x < self.ctx.order:
                raise InvalidKeyError("Signature scalar out of range")
        I = self.ctx.as_point(signature.key_image)
        return members, message, I

    def recompute(self, ring, message, signature) -> ChainTrace:
        """One pass around the ring starting from signature.c[0]."""
        members, message, I = self.check_structure(ring, message, signature)
        challenge = ChallengeHasher(self.ctx, self.oracle, members.blob, message, I)

        c_list: List[int] = [signature.c[0]]
        L_list = []
        R_list = []
        for i in range(len(members)):  # O(L)
            si, ci = signature.r[i], c_list[i]
            Li = si * self.ctx.g + ci * members.points[i]
            Ri = si * members.base(i) + ci * I
            L_list.append(Li)
            R_list.append(Ri)
            c_list.append(challenge(Li, Ri))
        return ChainTrace(l_points=tuple(L_list), r_points=tuple(R_list), challenges=tuple(c_list))

    def verify(self, ring, message, signature) -> bool:
        trace = self.recompute(ring, message, signature)
        valid = chain_matches(self.ctx, trace.challenges, signature.c)
        logger.debug("Ring signature over %d members verified: %s", len(signature.c), valid)
        return valid


def chain_matches(ctx, challenges, provided):
    """challenges holds n+1 recomputed values, provided the n signed ones."""
    expected = list(provided[1:]) + [provided[0]]
    got = b"".join(ctx.encode_scalar(c) for c in challenges[1:])
    want = b"".join(ctx.encode_scalar(c) for c in expected)
    return hmac.compare_digest(got, want)
