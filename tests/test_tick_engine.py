# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Tests for the tick scheduler: run states, pipeline, rewind and pacing."""

import pytest

from footyline.engine.ball import OWNED_STATES, BallSnapshot, BallState, DisposalKind, FlightData
from footyline.engine.events import EventType
from footyline.engine.factory import build_engine
from footyline.engine.grid import AttackDirection, GridPosition, Side
from footyline.engine.match_clock import MatchPhase, StoppageKind
from footyline.engine.policy import StandPolicy
from footyline.engine.tick_engine import Command, RunState, TickEngine
from footyline.models.unit import FieldRole, UnitActivity
from footyline.utils.generator import generate_match_teams, generate_team


def record(engine: TickEngine, event_type: EventType) -> list:
    seen = []
    engine.bus.subscribe(event_type, seen.append)
    return seen


def assert_consistent(engine: TickEngine) -> None:
    grid = engine.grid
    assert grid.occupied_count == 18
    for unit in engine.units():
        assert grid.position_of(unit) == unit.position
        assert grid.unit_at(unit.position) is unit
        assert grid.in_zone(unit.position, unit.zone, unit.attack_direction)
        assert 0 <= unit.stamina <= unit.stamina_capacity
    holders = [unit for unit in engine.units() if unit.has_ball]
    if engine.ball.state in OWNED_STATES:
        assert [unit.unit_id for unit in holders] == [engine.ball.owner_id]
        assert engine.ball.position == holders[0].position
    else:
        assert holders == []
        assert engine.ball.owner_id is None


class TestRunStates:
    """Commands are only accepted from their allowed run states."""

    def test_starts_stopped(self, make_engine) -> None:
        engine = make_engine()
        assert engine.run_state is RunState.STOPPED
        assert engine.tick == 0

    def test_start_from_stopped_is_rejected(self, make_engine) -> None:
        engine = make_engine()
        rejected = record(engine, EventType.COMMAND_REJECTED)
        transition = engine.handle_command(Command.START)
        assert not transition.accepted
        assert engine.run_state is RunState.STOPPED
        assert len(rejected) == 1
        assert rejected[0].data["command"] == "start"

    def test_ready_start_pause_cycle(self, make_engine) -> None:
        engine = make_engine()
        changes = record(engine, EventType.RUN_STATE_CHANGED)
        assert engine.handle_command(Command.READY).accepted
        assert engine.handle_command(Command.START).accepted
        assert engine.handle_command(Command.PAUSE).accepted
        assert engine.handle_command(Command.START).accepted
        assert engine.run_state is RunState.RUNNING
        assert [event.data["current"] for event in changes] == ["READY", "RUNNING", "PAUSED", "RUNNING"]

    def test_ready_twice_is_rejected(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        assert not engine.ready().accepted
        assert engine.run_state is RunState.READY

    def test_step_while_running_is_rejected(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        engine.start()
        assert not engine.step().accepted
        assert engine.tick == 0

    def test_reset_from_any_state(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        engine.step()
        engine.step()
        assert engine.reset().accepted
        assert engine.run_state is RunState.STOPPED
        assert len(engine.history) == 0
        engine.ready()
        assert engine.tick == 0
        assert engine.clock.phase is MatchPhase.PRE_MATCH


class TestLayout:
    """Ready lays the units out in formation with the ball at centre."""

    def test_formation_slots(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        home_full_back = engine.home.units_by_role(FieldRole.FULL_BACK)[0]
        away_full_back = engine.away.units_by_role(FieldRole.FULL_BACK)[0]
        home_centre = engine.home.units_by_role(FieldRole.CENTRE)[0]
        assert home_full_back.position == GridPosition(3, 12)
        assert away_full_back.position == GridPosition(29, 12)
        assert home_centre.position == GridPosition(14, 12)
        assert home_centre.home_position == GridPosition(14, 12)

    def test_centres_stand_level_with_the_ball_up(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        centre = engine.grid.centre
        home_centre = engine.home.units_by_role(FieldRole.CENTRE)[0]
        away_centre = engine.away.units_by_role(FieldRole.CENTRE)[0]
        assert away_centre.position == GridPosition(18, 12)
        assert home_centre.position.manhattan(centre) == away_centre.position.manhattan(centre)
        for home_unit, away_unit in zip(engine.home, engine.away):
            assert home_unit.position.x - centre.x == centre.x - away_unit.position.x

    def test_ready_state(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        assert engine.ball.state is BallState.WITH_UMPIRE
        assert engine.ball.position == GridPosition(16, 12)
        assert len(engine.history) == 0
        assert_consistent(engine)

    def test_same_side_twice_is_rejected(self, make_team) -> None:
        home = make_team(Side.HOME, AttackDirection.RIGHT, 1)
        other = make_team(Side.HOME, AttackDirection.RIGHT, 10)
        with pytest.raises(ValueError):
            build_engine(home, other)

    def test_duplicate_unit_ids_are_rejected(self) -> None:
        home = generate_team(1, Side.HOME, AttackDirection.RIGHT, starting_unit_id=1)
        away = generate_team(2, Side.AWAY, AttackDirection.LEFT, starting_unit_id=5)
        with pytest.raises(ValueError, match="Duplicate"):
            build_engine(home, away)


class TestPipeline:
    """One tick runs ball, units, scoring and clock in order."""

    def test_first_step_starts_the_match(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        assert engine.step().accepted
        assert engine.run_state is RunState.PAUSED
        assert engine.tick == 1
        assert len(engine.history) == 1
        assert engine.history[0].tick == 0
        assert engine.clock.phase is MatchPhase.QUARTER_1
        assert engine.ball.state is BallState.LOOSE_ON_GROUND

    def test_tick_events_bracket_the_pipeline(self, make_engine) -> None:
        engine = make_engine()
        seen = []
        engine.bus.subscribe_all(seen.append)
        engine.ready()
        engine.step()
        types = [event.event_type for event in seen]
        assert types.index(EventType.TICK_STARTED) < types.index(EventType.QUARTER_STARTED)
        assert types[-2:] == [EventType.TICK_COMPLETED, EventType.RUN_STATE_CHANGED]
        assert all(event.tick == 1 for event in seen if event.event_type is EventType.TICK_COMPLETED)

    def test_loose_ball_under_a_unit_is_gathered(self, make_engine) -> None:
        engine = make_engine(policy=StandPolicy())
        engine.ready()
        engine.step()
        centre = engine.home.units_by_role(FieldRole.CENTRE)[0]
        engine.ball.restore(BallSnapshot(centre.position, BallState.LOOSE_ON_GROUND, None, None, 0.0, None))
        engine.step()
        assert engine.ball.owner_id == centre.unit_id
        assert centre.has_ball
        assert engine.ball.possession_quality == pytest.approx(0.6)

    def test_landing_on_a_unit_is_a_clean_pickup(self, make_engine) -> None:
        engine = make_engine(policy=StandPolicy())
        engine.ready()
        engine.step()
        centre = engine.home.units_by_role(FieldRole.CENTRE)[0]
        flight = FlightData(GridPosition(10, 12), centre.position, 0, 1, DisposalKind.KICK, 1)
        engine.ball.restore(BallSnapshot(GridPosition(10, 12), BallState.LOOSE_IN_AIR, None, Side.HOME, 0.0, flight))
        engine.step()
        assert engine.ball.state is BallState.HELD
        assert engine.ball.owner_id == centre.unit_id
        assert engine.ball.possession_quality == pytest.approx(1.0)

    def test_landing_on_sideline_is_out_of_bounds(self, make_engine) -> None:
        engine = make_engine(policy=StandPolicy())
        engine.ready()
        engine.step()
        flight = FlightData(GridPosition(16, 2), GridPosition(16, 0), 0, 1, DisposalKind.KICK, 5)
        engine.ball.restore(BallSnapshot(GridPosition(16, 2), BallState.LOOSE_IN_AIR, None, Side.HOME, 0.0, flight))
        engine.step()
        assert engine.ball.state is BallState.OUT_OF_BOUNDS
        assert engine.clock.stoppage is StoppageKind.OUT_OF_BOUNDS

    def test_ball_in_goal_registers_a_score(self, make_engine) -> None:
        engine = make_engine(policy=StandPolicy())
        scores = record(engine, EventType.SCORE_REGISTERED)
        engine.ready()
        engine.step()
        remaining = engine.clock.quarter_ticks_remaining
        engine.ball.restore(BallSnapshot(GridPosition(31, 12), BallState.LOOSE_ON_GROUND, None, None, 0.0, None))
        engine.step()
        assert engine.home.goals == 1
        assert engine.away.total_score == 0
        assert len(scores) == 1
        assert scores[0].side is Side.HOME
        assert engine.ball.state is BallState.WITH_UMPIRE
        assert engine.ball.position == GridPosition(16, 12)
        assert engine.clock.stoppage is StoppageKind.GOAL
        assert engine.clock.quarter_ticks_remaining == remaining

    def test_behind_at_left_end_goes_to_away(self, make_engine) -> None:
        engine = make_engine(policy=StandPolicy())
        engine.ready()
        engine.step()
        engine.ball.restore(BallSnapshot(GridPosition(0, 14), BallState.LOOSE_ON_GROUND, None, None, 0.0, None))
        engine.step()
        assert engine.away.behinds == 1
        assert engine.clock.stoppage is StoppageKind.BEHIND

    def test_stand_policy_keeps_units_still(self, make_engine) -> None:
        engine = make_engine(policy=StandPolicy())
        engine.ready()
        before = {unit.unit_id: unit.position for unit in engine.units()}
        for _ in range(5):
            engine.step()
        assert {unit.unit_id: unit.position for unit in engine.units()} == before

    def test_chasers_converge_on_the_ball(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        engine.step()
        away_centre = engine.away.units_by_role(FieldRole.CENTRE)[0]
        start = away_centre.position.manhattan(engine.ball.position)
        engine.step()
        engine.step()
        assert away_centre.position.manhattan(GridPosition(15, 12)) < start

    def test_opening_ball_up_goes_to_the_home_centre(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        engine.step()
        assert engine.ball.position == GridPosition(15, 12)
        home_centre = engine.home.units_by_role(FieldRole.CENTRE)[0]
        away_centre = engine.away.units_by_role(FieldRole.CENTRE)[0]
        engine.step()
        engine.step()
        assert home_centre.has_ball
        assert home_centre.position == GridPosition(15, 12)
        assert not away_centre.has_ball

    def test_both_sides_win_the_ball(self) -> None:
        home, away = generate_match_teams(seed=5)
        engine = build_engine(home, away)
        engine.ready()
        sides = set()
        for _ in range(3000):
            engine.step()
            if engine.ball.owner_id is not None:
                sides.add(engine.unit_by_id(engine.ball.owner_id).side)
            if len(sides) == 2:
                break
        assert sides == {Side.HOME, Side.AWAY}

    def test_exhausted_unit_stops_once(self, make_engine) -> None:
        engine = make_engine(policy=StandPolicy())
        exhausted = record(engine, EventType.UNIT_EXHAUSTED)
        engine.ready()
        engine.step()
        wing = engine.home.units_by_role(FieldRole.WING)[0]
        assert wing.position == GridPosition(13, 2)
        wing.stamina = 7
        assert wing.try_move_to(GridPosition(20, 2), engine.grid)
        engine.step()
        assert wing.is_moving
        assert exhausted == []
        engine.step()
        assert [event.data["unit"] for event in exhausted] == [wing.unit_id]
        assert wing.activity is UnitActivity.IDLE
        assert wing.target is None
        assert wing.position == GridPosition(15, 2)
        assert wing.stamina == 5
        engine.step()
        assert len(exhausted) == 1
        assert wing.position == GridPosition(15, 2)
        assert_consistent(engine)

    def test_blocked_unit_gives_up(self, make_engine) -> None:
        engine = make_engine(policy=StandPolicy())
        changes = record(engine, EventType.UNIT_STATE_CHANGED)
        engine.ready()
        engine.step()
        full_back = engine.home.units_by_role(FieldRole.FULL_BACK)[0]
        back_pocket = engine.home.units_by_role(FieldRole.BACK_POCKET)[0]
        assert full_back.position == GridPosition(3, 12)
        # The only cell that brings the full back closer is taken.
        assert engine.grid.move(back_pocket, GridPosition(3, 11))
        assert full_back.try_move_to(GridPosition(3, 9), engine.grid)
        engine.step()
        engine.step()
        assert full_back.is_moving
        assert full_back.blocked_ticks == 2
        engine.step()
        assert full_back.activity is UnitActivity.IDLE
        assert full_back.target is None
        assert full_back.position == GridPosition(3, 12)
        assert any("gave up" in event.description for event in changes)
        assert_consistent(engine)

    def test_invariants_hold_through_play(self, make_engine) -> None:
        engine = make_engine(quarter_ticks=60)
        engine.ready()
        for _ in range(400):
            engine.step()
            assert_consistent(engine)


class TestRewind:
    """Back discards the newest snapshot and restores the one beneath it."""

    def test_back_restores_previous_snapshot(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        for _ in range(3):
            engine.step()
        assert [snapshot.tick for snapshot in engine.history] == [0, 1, 2]
        expected = engine.history[1]

        assert engine.back().accepted
        assert engine.tick == 1
        assert engine.capture_snapshot() == expected
        assert len(engine.history) == 2
        assert_consistent(engine)

    def test_back_needs_two_entries(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        engine.step()
        rejected = record(engine, EventType.COMMAND_REJECTED)
        assert not engine.back().accepted
        assert engine.run_state is RunState.PAUSED
        assert engine.tick == 1
        assert len(rejected) == 1

    def test_back_while_running_is_rejected(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        engine.step()
        engine.step()
        engine.start()
        assert not engine.back().accepted
        assert engine.run_state is RunState.RUNNING

    def test_replay_after_back_is_identical(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        for _ in range(30):
            engine.step()
        reference = engine.capture_snapshot()
        engine.back()
        engine.step()
        engine.step()
        assert engine.capture_snapshot() == reference

    def test_history_is_bounded(self, make_engine) -> None:
        engine = make_engine(history_capacity=5)
        engine.ready()
        for _ in range(12):
            engine.step()
        assert len(engine.history) == 5
        assert [snapshot.tick for snapshot in engine.history] == [7, 8, 9, 10, 11]
        assert [snapshot.tick for snapshot in engine.recent_history(2)] == [10, 11]


class TestPacing:
    """Real-time pacing and headless runs."""

    def test_advance_only_runs_while_running(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        assert engine.advance(1.0) == 0
        engine.start()
        assert engine.advance(0.5) == 5
        assert engine.tick == 5

    def test_advance_accumulates_partial_ticks(self, make_engine) -> None:
        engine = make_engine()
        engine.ready()
        engine.start()
        assert engine.advance(0.04) == 0
        assert engine.advance(0.04) == 0
        assert engine.advance(0.04) == 1

    def test_speed_is_clamped(self, make_engine) -> None:
        engine = make_engine()
        assert engine.set_speed(100.0) == 8.0
        assert engine.tick_interval == pytest.approx(0.1 / 8.0)
        assert engine.set_speed(0.01) == 0.25
        assert engine.set_speed(2.0) == 2.0

    def test_run_until_finished(self, make_engine) -> None:
        engine = make_engine(quarter_ticks=20)
        engine.run_until_finished()
        assert engine.is_finished
        assert engine.run_state is RunState.PAUSED
        assert engine.ball.state is BallState.DEAD
        assert engine.clock.result is not None
        assert len(engine.clock.quarter_scores) == 4
        home_total, away_total = engine.home.total_score, engine.away.total_score
        assert (engine.clock.result.home_total, engine.clock.result.away_total) == (home_total, away_total)

    def test_run_until_finished_respects_max_ticks(self, make_engine) -> None:
        engine = make_engine()
        assert engine.run_until_finished(max_ticks=15) == 15
        assert engine.tick == 15
        assert engine.run_state is RunState.PAUSED

    def test_same_seed_same_match(self) -> None:
        snapshots = []
        for _ in range(2):
            home, away = generate_match_teams(seed=11)
            engine = build_engine(home, away)
            engine.run_until_finished(max_ticks=250)
            snapshots.append(engine.capture_snapshot())
        assert snapshots[0] == snapshots[1]
