"""Run state machine: picks, combat ticks and terminal states."""

from datetime import datetime, timezone

import pydantic
import pytest

from buildarena.exceptions import InvalidChoice, RunNotActive
from buildarena.runs.draft import get_round_choices
from buildarena.runs.engine import VALID_TRANSITIONS, apply_choice, combat_damage, start_run, validate_transition
from buildarena.runs.schemas import MAX_ROUNDS, Run

NOW = datetime(2026, 2, 23, 10, 0, tzinfo=timezone.utc)


def golden_run(**overrides) -> Run:
    fields = {
        "run_id": "run-1",
        "player_id": "player-1",
        "seed": "golden-seed",
        "started_at": NOW,
        "current_choices": get_round_choices("golden-seed", 1),
    }
    fields.update(overrides)
    return Run(**fields)


class TestStartRun:
    def test_initial_state(self):
        run = start_run("player-1", now=NOW)
        assert run.player_id == "player-1"
        assert run.round == 0
        assert run.hp == 100
        assert run.economy == 0
        assert run.power == 12
        assert run.picks == []
        assert run.status == "active"
        assert run.started_at == NOW
        assert run.current_choices == get_round_choices(run.seed, 1)

    def test_fresh_seed_per_run(self):
        assert start_run("p1").seed != start_run("p1").seed


class TestApplyChoice:
    def test_golden_first_pick(self):
        """arcane (+6 power): enemy 24 vs roll 19 -> 2 damage."""
        run = apply_choice(golden_run(), 0)
        assert run.round == 1
        assert run.power == 18
        assert run.hp == 98
        assert run.economy == 0
        assert [p.choice_id for p in run.picks] == ["trait:arcane"]
        assert run.status == "active"
        assert run.current_choices == get_round_choices("golden-seed", 2)

    def test_golden_economy_pick(self):
        """econ_boost (+1 power, +3 economy): enemy 24 vs roll 14 -> 5 damage."""
        run = apply_choice(golden_run(), 2)
        assert run.power == 13
        assert run.economy == 3
        assert run.hp == 95

    def test_input_run_not_mutated(self):
        run = golden_run()
        apply_choice(run, 0)
        assert run.round == 0
        assert run.picks == []
        assert run.hp == 100

    @pytest.mark.parametrize("index", [-1, 3, 10, True, "1", None])
    def test_invalid_index_rejected(self, index):
        with pytest.raises(InvalidChoice):
            apply_choice(golden_run(), index)

    def test_round_advances_by_one_and_is_bounded(self):
        run = golden_run(hp=10_000)
        for expected in range(1, MAX_ROUNDS + 1):
            run = apply_choice(run, expected % 3)
            assert run.round == expected
        assert run.round == MAX_ROUNDS
        assert run.status == "ready_to_finish"
        assert run.current_choices == []

    def test_zero_hp_fails_run(self):
        # power 0: enemy >= 18, roll <= 7 + 5 -> at least 3 damage
        run = apply_choice(golden_run(power=0, hp=1), 0)
        assert run.hp == 0
        assert run.status == "failed"
        assert run.current_choices == []

    def test_failure_takes_precedence_over_last_round(self):
        run = golden_run(
            power=0,
            hp=1,
            round=MAX_ROUNDS - 1,
            current_choices=get_round_choices("golden-seed", MAX_ROUNDS),
        )
        run = apply_choice(run, 0)
        assert run.round == MAX_ROUNDS
        assert run.status == "failed"

    def test_last_round_ready_to_finish(self):
        run = golden_run(
            hp=500,
            round=MAX_ROUNDS - 1,
            current_choices=get_round_choices("golden-seed", MAX_ROUNDS),
        )
        run = apply_choice(run, 1)
        assert run.round == MAX_ROUNDS
        assert run.status == "ready_to_finish"
        assert run.current_choices == []
        assert run.hp > 0

    @pytest.mark.parametrize("round_number", [-1, MAX_ROUNDS + 1])
    def test_round_outside_bounds_rejected(self, round_number):
        with pytest.raises(pydantic.ValidationError):
            golden_run(round=round_number)

    @pytest.mark.parametrize("status", ["failed", "ready_to_finish"])
    def test_terminal_runs_reject_picks(self, status):
        run = golden_run(status=status, current_choices=[])
        with pytest.raises(RunNotActive):
            apply_choice(run, 0)

    def test_hp_never_negative(self):
        assert combat_damage("golden-seed", 10, -100) > 0
        run = apply_choice(golden_run(power=-100, hp=5), 0)
        assert run.hp == 0

    def test_replay_is_deterministic(self):
        picks = [0, 1, 2, 0, 1, 2, 0, 1, 2, 0]

        def play() -> Run:
            run = golden_run()
            for pick in picks:
                if run.is_terminal:
                    break
                run = apply_choice(run, pick)
            return run

        assert play() == play()


class TestRunTransitions:
    def test_terminal_states_have_no_exits(self):
        assert VALID_TRANSITIONS["failed"] == []
        assert VALID_TRANSITIONS["ready_to_finish"] == []

    def test_active_can_end(self):
        validate_transition("active", "failed")
        validate_transition("active", "ready_to_finish")

    def test_cannot_leave_terminal_state(self):
        with pytest.raises(ValueError, match="Invalid transition"):
            validate_transition("failed", "active")
