"""
Registries of key images that have already been linked.

register() is an atomic check-and-insert: of two concurrent registrations of
the same key image exactly one succeeds, the other raises AlreadyLinkedError.
"""
import logging
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from contextlib import closing
from datetime import datetime
from typing import Optional

from ring_errors import AlreadyLinkedError, FormatError

logger = logging.getLogger(__name__)


def key_image_tag(key_image):
    """Registry key for a key image: lowercase hex of its compressed encoding."""
    if isinstance(key_image, str):
        tag = key_image.lower()
        if tag.startswith("0x"):
            tag = tag[2:]
        try:
            bytes.fromhex(tag)
        except ValueError as e:
            raise FormatError(f"Invalid key image hex: {e}") from e
        return tag
    if isinstance(key_image, (bytes, bytearray)):
        return bytes(key_image).hex()
    return key_image.to_bytes("compressed").hex()


class KeyImageRegistry(ABC):
    @abstractmethod
    def register(self, key_image):
        """Record key_image, AlreadyLinkedError if it is already present."""

    @abstractmethod
    def exists(self, key_image) -> bool:
        ...

    @abstractmethod
    def linked_at(self, key_image) -> Optional[str]:
        """Time key_image was registered, None if it never was."""


def _timestamp():
    return datetime.fromtimestamp(time.time()).strftime('%Y-%m-%d %H:%M:%S')


class MemoryKeyImageRegistry(KeyImageRegistry):
    def __init__(self):
        self._tags = {}  # tag -> linked_at
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._tags)

    def register(self, key_image):
        tag = key_image_tag(key_image)
        with self._lock:
            if tag in self._tags:
                raise AlreadyLinkedError(tag)
            self._tags[tag] = _timestamp()
        logger.info("Linked key image %s", tag)

    def exists(self, key_image):
        tag = key_image_tag(key_image)
        with self._lock:
            return tag in self._tags

    def linked_at(self, key_image):
        tag = key_image_tag(key_image)
        with self._lock:
            return self._tags.get(tag)


class SqliteKeyImageRegistry(KeyImageRegistry):
    """
    Key images stored in the link_tags table. The primary key constraint
    makes the insert atomic across threads and processes.
    """
    def __init__(self, path="database.db", timeout=5.0):
        self.path = path
        self.timeout = timeout
        self.init_db()

    def _connect(self):
        return closing(sqlite3.connect(self.path, timeout=self.timeout))

    def init_db(self):
        with self._connect() as conn:
            conn.execute('''CREATE TABLE IF NOT EXISTS link_tags (
                        tag TEXT PRIMARY KEY,
                        linked_at TEXT NOT NULL
                      )''')
            conn.commit()

    def reset(self):
        with self._connect() as conn:
            conn.execute('''DROP TABLE IF EXISTS link_tags''')
            conn.commit()
        self.init_db()

    def __len__(self):
        with self._connect() as conn:
            return conn.execute('SELECT COUNT(*) FROM link_tags').fetchone()[0]

    def register(self, key_image):
        tag = key_image_tag(key_image)
        timestamp = _timestamp()
        with self._connect() as conn:
            try:
                conn.execute('INSERT INTO link_tags (tag, linked_at) VALUES (?, ?)', (tag, timestamp))
                conn.commit()
            except sqlite3.IntegrityError as e:
                raise AlreadyLinkedError(tag) from e
        logger.info("Linked key image %s", tag)

    def exists(self, key_image):
        tag = key_image_tag(key_image)
        with self._connect() as conn:
            row = conn.execute('SELECT 1 FROM link_tags WHERE tag=?', (tag,)).fetchone()
        return row is not None

    def linked_at(self, key_image):
        tag = key_image_tag(key_image)
        with self._connect() as conn:
            row = conn.execute('SELECT linked_at FROM link_tags WHERE tag=?', (tag,)).fetchone()
        return row[0] if row else None
