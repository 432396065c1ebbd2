"""Build synthesis: dupes, synergy and power score."""

from datetime import datetime, timezone

import pytest

from buildarena.exceptions import InvalidSlot
from buildarena.runs.builds import build_snapshot_from_run, count_dupes, synergy_score
from buildarena.runs.catalog import MODIFIERS, TRAITS, UNITS
from buildarena.runs.schemas import Choice, Run

NOW = datetime(2026, 2, 23, 10, 0, tzinfo=timezone.utc)


def pick(choice_type, item) -> Choice:
    return Choice(choice_id=f"{choice_type}:{item.id}", type=choice_type, item=item)


def finished_run(picks, power=40, economy=6) -> Run:
    return Run(
        run_id="run-1",
        player_id="player-1",
        seed="seed-1",
        started_at=NOW,
        round=len(picks),
        hp=30,
        economy=economy,
        power=power,
        picks=picks,
        status="ready_to_finish",
        current_choices=[],
    )


class TestCountDupes:
    def test_all_distinct(self):
        assert count_dupes(["a", "b", "c"]) == 0

    def test_empty(self):
        assert count_dupes([]) == 0

    def test_pairs_and_triples(self):
        # a x3 -> 2, b x2 -> 1, c x1 -> 0
        assert count_dupes(["a", "b", "a", "c", "b", "a"]) == 3


class TestSynergy:
    def test_traits_worth_five_units_worth_six(self):
        assert synergy_score(["x", "x"], []) == 5
        assert synergy_score([], ["y", "y"]) == 6
        assert synergy_score(["x", "x", "x"], ["y", "y"]) == 16


class TestBuildSnapshot:
    def test_partitions_picks_by_type(self):
        run = finished_run([
            pick("trait", TRAITS[0]),
            pick("unit", UNITS[1]),
            pick("modifier", MODIFIERS[2]),
            pick("trait", TRAITS[3]),
        ])
        build = build_snapshot_from_run(run, 2)
        assert build.traits == ["berserk", "swift"]
        assert build.units == ["ember_mage"]
        assert build.modifiers == ["crit_core"]
        assert build.slot_index == 2
        assert build.player_id == "player-1"
        assert build.run_id == "run-1"
        assert build.seed == "seed-1"
        assert build.locked is False
        assert build.locked_by_arena_entry_id is None

    def test_no_synergy_when_distinct(self):
        run = finished_run([pick("trait", TRAITS[0]), pick("unit", UNITS[0])])
        assert build_snapshot_from_run(run, 0).power_score == 40 + 6

    def test_power_score_includes_synergy(self):
        run = finished_run([
            pick("trait", TRAITS[0]),
            pick("trait", TRAITS[0]),
            pick("unit", UNITS[2]),
            pick("unit", UNITS[2]),
            pick("unit", UNITS[2]),
        ])
        # power 40 + economy 6 + 5*1 + 6*2
        assert build_snapshot_from_run(run, 0).power_score == 63

    def test_modifier_repeats_ignored(self):
        run = finished_run([pick("modifier", MODIFIERS[0])] * 4)
        assert build_snapshot_from_run(run, 0).power_score == 46

    def test_deterministic(self):
        run = finished_run([pick("trait", TRAITS[1]), pick("unit", UNITS[4])])
        first = build_snapshot_from_run(run, 5, build_id="b-1", now=NOW)
        second = build_snapshot_from_run(run, 5, build_id="b-1", now=NOW)
        assert first == second

    @pytest.mark.parametrize("slot_index", [-1, 10, 99, True, "3"])
    def test_invalid_slot_rejected(self, slot_index):
        with pytest.raises(InvalidSlot):
            build_snapshot_from_run(finished_run([]), slot_index)
