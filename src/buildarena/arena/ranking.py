"""Deterministic arena ranking: ZERO randomness.

Entries ranked by power_score DESC, then by earliest created_at ASC.
Ranks are contiguous 1..N for the N entries of a season.
"""

from __future__ import annotations

from buildarena.arena.schemas import ArenaEntry


def rank_entries(entries: list[ArenaEntry]) -> list[tuple[int, ArenaEntry]]:
    """Sort season entries and pair each with its 1-indexed rank.

    Input order does not matter; the entry_id is the final tiebreaker so two
    entries created in the same instant still rank the same way every time.
    """
    if not entries:
        return []

    ordered = sorted(entries, key=lambda e: (-e.power_score, e.created_at, e.entry_id))
    return [(idx + 1, entry) for idx, entry in enumerate(ordered)]
