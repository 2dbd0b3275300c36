import logging
import threading

from Crypto.Random.random import randrange, sample

from ring_errors import DomainError

logger = logging.getLogger(__name__)


class RingMemberProvider:
    """
    Pool of public keys that rings are drawn from.

    Each consumer owns its provider. Members are kept in insertion order and
    deduplicated by their compressed encoding. When a selection needs more
    members than the pool holds, filler key pairs are generated. Safe to
    share between request threads.

    Attributes:
        ctx: CurveContext
        min_size: integer, pool size kept available for selection
    """
    def __init__(self, ctx, members=(), min_size=0):
        if min_size < 0:
            raise ValueError("min_size must not be negative")
        self.ctx = ctx
        self.min_size = min_size
        self._members = []
        self._index = {}
        # reentrant: select -> ensure_size -> generate -> add
        self._lock = threading.RLock()
        for pk in members:
            self.add(pk)

    def __len__(self):
        with self._lock:
            return len(self._members)

    def __contains__(self, pk):
        key = self.ctx.encode_point(self.ctx.as_point(pk))
        with self._lock:
            return key in self._index

    @property
    def members(self):
        with self._lock:
            return tuple(self._members)

    # add public key to pool, index in pool is returned
    def add(self, pk):
        point = self.ctx.as_point(pk)
        key = self.ctx.encode_point(point)
        with self._lock:
            if key not in self._index:
                self._index[key] = len(self._members)
                self._members.append(point)
            return self._index[key]

    def generate(self, count):
        """Add count fresh filler keys. Their private keys are discarded."""
        with self._lock:
            for _ in range(count):
                _, pk = self.ctx.keygen()
                self.add(pk)
            logger.info("Generated %d filler keys, pool now holds %d", count, len(self))

    def ensure_size(self, size=0):
        target = max(size, self.min_size)
        with self._lock:
            if len(self) < target:
                self.generate(target - len(self))

    def select(self, size, include=None, position=None):
        """
        Draw a ring of size distinct keys.

        include is placed exactly once at position (random when None).
        Returns (ring, index of include or None). The pool itself is only
        grown, never reordered.
        """
        if size < 2:
            raise DomainError(f"Ring needs at least 2 members, got {size}")
        if include is None:
            if position is not None:
                raise DomainError("position needs an include key")
            with self._lock:
                self.ensure_size(size)
                return tuple(sample(self._members, size)), None

        signer = self.ctx.as_point(include)
        signer_key = self.ctx.encode_point(signer)
        if position is None:
            position = randrange(0, size)
        if not 0 <= position < size:
            raise DomainError(f"position {position} outside ring of {size}")

        with self._lock:
            self.ensure_size()
            others = [p for p in self._members if self.ctx.encode_point(p) != signer_key]
            if len(others) < size - 1:
                self.ensure_size(len(self) + size - 1 - len(others))
                others = [p for p in self._members if self.ctx.encode_point(p) != signer_key]
            ring = sample(others, size - 1)
        ring.insert(position, signer)
        return tuple(ring), position
