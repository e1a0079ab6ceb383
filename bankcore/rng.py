"""
bankcore.rng
Per-turn random generators for the weekly resolver.

Each resolved week draws from exactly one Random, seeded from the session's
base seed and the pre-increment turn number. Python's built-in hash() is
salted per process, so the seed comes from SHA-256 instead; replaying a
session with the same base seed reproduces every draw on any platform.
"""

from __future__ import annotations

import hashlib
import random

SEED_SALT = "bank-ceo-sim"


def turn_seed(turn: int, *, base_seed: int) -> int:
    """32-bit seed for one turn, 0..2**32-1."""
    payload = f"{SEED_SALT}|{int(base_seed)}|turn|{int(turn)}"
    return int.from_bytes(hashlib.sha256(payload.encode("utf-8")).digest()[:4], "big")


def turn_rng(turn: int, *, base_seed: int) -> random.Random:
    """Generator for one resolved turn of a session."""
    return random.Random(turn_seed(turn, base_seed=base_seed))
