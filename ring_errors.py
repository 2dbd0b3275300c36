"""
Exceptions raised by the ring signature core and the key image registry.

sign(), verify() and derive_proof() raise the ValueError subclasses below on
malformed input only. A well-formed signature that fails the math is reported
by verify() returning False.
"""


class RingSignatureError(Exception):
    pass


class RingMembershipError(RingSignatureError, ValueError):
    """The signer's public key does not occur in the ring."""


class InvalidKeyError(RingSignatureError, ValueError):
    """A scalar is out of range or a point is not on the curve."""


class FormatError(RingSignatureError, ValueError):
    """Signature or proof fields have the wrong shape."""


class DomainError(RingSignatureError, ValueError):
    """Empty message, or a ring with fewer than two members."""


class AlreadyLinkedError(RingSignatureError):
    """Raised by a registry when a key image has already been registered."""

    def __init__(self, tag):
        super().__init__(f"Key image {tag} already linked")
        self.tag = tag
