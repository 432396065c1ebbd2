"""Build synthesis: turn a finished run into a scored, slot-stored build."""

from __future__ import annotations

import uuid
from collections import Counter
from datetime import datetime, timezone

from buildarena.exceptions import InvalidSlot
from buildarena.runs.catalog import MAX_SLOTS
from buildarena.runs.schemas import Build, Run

TRAIT_SYNERGY = 5
UNIT_SYNERGY = 6


def count_dupes(ids: list[str]) -> int:
    """Number of repeat picks: sum of (count - 1) over ids picked more than once."""
    return sum(count - 1 for count in Counter(ids).values() if count > 1)


def synergy_score(traits: list[str], units: list[str]) -> int:
    """Bonus for repeated traits and units. Modifiers never stack."""
    return TRAIT_SYNERGY * count_dupes(traits) + UNIT_SYNERGY * count_dupes(units)


def validate_slot_index(slot_index: object) -> int:
    if isinstance(slot_index, bool) or not isinstance(slot_index, int) or not 0 <= slot_index < MAX_SLOTS:
        raise InvalidSlot(slot_index, MAX_SLOTS)
    return slot_index


def build_snapshot_from_run(
    run: Run,
    slot_index: int,
    *,
    build_id: str | None = None,
    now: datetime | None = None,
) -> Build:
    """Snapshot a run's picks into a scored build for ``slot_index``.

    power_score = power + economy + synergy. Everything except build_id and
    created_at is derived from (run, slot_index).
    """
    slot_index = validate_slot_index(slot_index)
    traits = [p.item.id for p in run.picks if p.type == "trait"]
    units = [p.item.id for p in run.picks if p.type == "unit"]
    modifiers = [p.item.id for p in run.picks if p.type == "modifier"]

    return Build(
        build_id=build_id or str(uuid.uuid4()),
        player_id=run.player_id,
        run_id=run.run_id,
        traits=traits,
        units=units,
        modifiers=modifiers,
        power_score=run.power + run.economy + synergy_score(traits, units),
        seed=run.seed,
        slot_index=slot_index,
        created_at=now or datetime.now(timezone.utc),
        locked=False,
        locked_by_arena_entry_id=None,
    )
