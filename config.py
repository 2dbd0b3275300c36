"""
Settings read from the environment (and a .env file when present).
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from curve_context import resolve_curve
from hash_oracle import POINT_MAPS
from ring_errors import DomainError

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("soul_ring")


@dataclass
class Config:
    database: str = "database.db"
    curve: str = "SECP256k1"
    ring_size: int = 5
    max_ring_size: int = 10
    pool_size: int = 20
    hash_to_point: str = "generator"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.ring_size < 2:
            raise ValueError(f"RING_SIZE must be at least 2, got {self.ring_size}")
        if self.max_ring_size < self.ring_size:
            raise ValueError(
                f"RING_MAX_SIZE ({self.max_ring_size}) is below RING_SIZE ({self.ring_size})")
        if self.pool_size < 0:
            raise ValueError(f"RING_POOL_SIZE must not be negative, got {self.pool_size}")
        if self.hash_to_point not in POINT_MAPS:
            raise ValueError(f"RING_HASH_TO_POINT must be one of {POINT_MAPS}")
        try:
            resolve_curve(self.curve)
        except DomainError as e:
            raise ValueError(f"RING_CURVE: {e}") from e
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise ValueError(f"RING_LOG_LEVEL must be a logging level name, got {self.log_level!r}")

    @property
    def in_memory(self):
        return self.database == ":memory:"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        load_dotenv(env_file)
        return cls(
            database=os.getenv("RING_DATABASE", cls.database),
            curve=os.getenv("RING_CURVE", cls.curve),
            ring_size=_int_env("RING_SIZE", cls.ring_size),
            max_ring_size=_int_env("RING_MAX_SIZE", cls.max_ring_size),
            pool_size=_int_env("RING_POOL_SIZE", cls.pool_size),
            hash_to_point=os.getenv("RING_HASH_TO_POINT", cls.hash_to_point),
            log_level=os.getenv("RING_LOG_LEVEL", cls.log_level),
        )


def _int_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
