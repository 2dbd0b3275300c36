import logging

from key_image_registry import key_image_tag

logger = logging.getLogger(__name__)


# links verified signatures to their key image
class VerifierServer:
    """
    Verifies a ring signature and, on success, records its key image.

    Attributes:
        verifier: RingVerifier
        registry: KeyImageRegistry
    """
    def __init__(self, verifier, registry):
        self.verifier = verifier
        self.registry = registry

    def verify_signature(self, ring, message, signature):
        return self.verifier.verify(ring, message, signature)

    def link_signature(self, ring, message, signature):
        """
        True once the key image is registered, False if the signature does
        not verify. A key image seen before raises AlreadyLinkedError.
        """
        if not self.verifier.verify(ring, message, signature):
            logger.info("Rejected signature over ring of %d members", len(signature.c))
            return False
        self.registry.register(signature.key_image)
        return True

    def is_linked(self, key_image):
        return self.registry.exists(key_image)

    def linked_at(self, key_image):
        return self.registry.linked_at(key_image)

    def tag(self, signature):
        return key_image_tag(signature.key_image)
