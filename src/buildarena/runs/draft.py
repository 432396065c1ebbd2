"""Deterministic draft generation from a run seed.

The server and the mini-app client both replay runs from the seed, so the
digest and byte interpretation here are fixed: SHA-256 over the UTF-8
string "{seed}:{salt}", first four bytes read as an unsigned little-endian
32-bit integer.
"""

from __future__ import annotations

import hashlib

from buildarena.runs.catalog import DRAFT_SLOTS
from buildarena.runs.schemas import Choice


def hash_int(value: str) -> int:
    """Stable 32-bit integer derived from ``value``."""
    digest = hashlib.sha256(value.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "little")


def seeded_range(seed: str, salt: str, max_value: int) -> int:
    """Deterministic integer in ``[0, max_value)`` for (seed, salt)."""
    if max_value <= 0:
        raise ValueError(f"max_value must be positive, got {max_value}")
    return hash_int(f"{seed}:{salt}") % max_value


def get_round_choices(seed: str, round_number: int) -> list[Choice]:
    """Return the three draft cards (trait, unit, modifier) for a round."""
    choices = []
    for slot, (choice_type, pool) in enumerate(DRAFT_SLOTS):
        idx = seeded_range(seed, f"round:{round_number}:choice:{slot}", len(pool))
        item = pool[idx]
        choices.append(Choice(choice_id=f"{choice_type}:{item.id}", type=choice_type, item=item))
    return choices
