#!/usr/bin/env python3
"""
Naming helpers for Screen Upload
Derives opaque file names from the original name and upload time
"""

import hashlib
import time
from typing import Optional

from screenup.errors import EmptyInputError

# SHA-1 gives 40 hex characters; uniqueness matters, not collision security
HASH_ALGORITHM = 'sha1'
SEED_SEPARATOR = ':'


def truncated_timestamp(now: Optional[float] = None) -> int:
    """
    Current Unix time in whole seconds, wrapped to a signed 32-bit integer.

    Args:
        now: Timestamp to use instead of time.time()
    """
    if now is None:
        now = time.time()
    value = int(now) & 0xFFFFFFFF
    if value >= 2**31:
        value -= 2**32
    return value


def build_seed(name: str, now: Optional[float] = None) -> str:
    """Seed for generate_hash(): '{name}:{timestamp}'."""
    return f"{name}{SEED_SEPARATOR}{truncated_timestamp(now)}"


def generate_hash(seed: str) -> str:
    """
    Hash a seed string into a hex digest.

    Args:
        seed: Non-empty string to hash

    Returns:
        str: 40-character lowercase hex digest

    Raises:
        EmptyInputError: If seed is empty
    """
    if not seed:
        raise EmptyInputError("error generating hash: empty seed")

    digest = hashlib.new(HASH_ALGORITHM)
    digest.update(seed.encode('utf-8'))
    return digest.hexdigest()
