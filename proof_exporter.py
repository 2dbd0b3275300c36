import hmac
import logging
from dataclasses import dataclass
from typing import Tuple

from ecdsa.ellipticcurve import PointJacobi

from ring_curve_sig import ChallengeHasher
from ring_errors import FormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Proof:
    """
    Memoised verifier pass over a signature.

    z[i] and w[i] are the L_i and R_i commitments at ring index i,
    final_hash is the recomputed anchor and c0 the signature's anchor.
    """
    z: Tuple[PointJacobi, ...]
    w: Tuple[PointJacobi, ...]
    final_hash: int
    c0: int


class ProofExporter:
    def __init__(self, verifier):
        self.verifier = verifier
        self.ctx = verifier.ctx
        self.oracle = verifier.oracle

    def derive_proof(self, ring, message, signature) -> Proof:
        trace = self.verifier.recompute(ring, message, signature)
        return Proof(
            z=trace.l_points,
            w=trace.r_points,
            final_hash=trace.final_hash,
            c0=signature.c[0],
        )

    def confirm(self, ring, message, signature, proof) -> bool:
        """
        Cheap check of a proof against its signature: hashes only, no scalar
        multiplication. Trusts z and w to be the verifier's commitments, so
        it is only as good as the party that derived the proof.
        """
        members, message, I = self.verifier.check_structure(ring, message, signature)
        n = len(members)
        if not len(proof.z) == len(proof.w) == n:
            raise FormatError(
                f"Proof has {len(proof.z)} z and {len(proof.w)} w points for a ring of {n}")

        anchor = self.ctx.encode_scalar(signature.c[0])
        if not (hmac.compare_digest(self.ctx.encode_scalar(proof.c0), anchor)
                and hmac.compare_digest(self.ctx.encode_scalar(proof.final_hash), anchor)):
            return False

        challenge = ChallengeHasher(self.ctx, self.oracle, members.blob, message, I)
        expected = list(signature.c[1:]) + [proof.final_hash]
        for i in range(n):
            if challenge(proof.z[i], proof.w[i]) != expected[i]:
                logger.debug("Proof chain breaks at ring index %d", i)
                return False
        return True
