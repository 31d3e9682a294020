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
"""Tests for the ball state machine, flight model and scoring zones."""

import pytest

from footyline.engine.ball import (
    Ball,
    BallSnapshot,
    BallState,
    DisposalKind,
    FlightData,
    ScoreType,
    publish_ball_transition,
)
from footyline.engine.config import BallPhysicsConfig, GridConfig
from footyline.engine.events import ErrorKind, EventBus, EventType
from footyline.engine.grid import AttackDirection, GridPosition, Side


@pytest.fixture
def ball() -> Ball:
    return Ball(GridConfig(), BallPhysicsConfig())


def held_by(ball: Ball, unit) -> Ball:
    ball.ball_up()
    ball.give_to_unit(unit, 1.0)
    return ball


class TestPossession:
    """Ownership transitions."""

    def test_starts_with_umpire_at_centre(self, ball: Ball) -> None:
        assert ball.state is BallState.WITH_UMPIRE
        assert ball.position == GridPosition(16, 12)
        assert ball.owner_id is None

    def test_ball_up_releases_at_centre(self, ball: Ball) -> None:
        transition = ball.ball_up()
        assert transition.accepted
        assert ball.state is BallState.LOOSE_ON_GROUND
        assert ball.position == GridPosition(16, 12)

    def test_ball_up_can_break_off_centre(self, ball: Ball) -> None:
        assert ball.ball_up(GridPosition(17, 12)).accepted
        assert ball.position == GridPosition(17, 12)

    def test_ball_up_off_the_field_is_rejected(self, ball: Ball) -> None:
        transition = ball.ball_up(GridPosition(16, 25))
        assert not transition.accepted
        assert transition.error is ErrorKind.INVALID_POSITION
        assert ball.state is BallState.WITH_UMPIRE

    def test_give_to_unit_sets_owner_and_position(self, ball: Ball, make_unit) -> None:
        unit = make_unit(4)
        unit.position = GridPosition(10, 7)
        transition = ball.give_to_unit(unit, 1.5)
        assert transition.accepted
        assert transition.possession_changed
        assert ball.state is BallState.HELD
        assert ball.owner_id == 4
        assert ball.position == GridPosition(10, 7)
        assert ball.last_touch_side is Side.HOME
        assert ball.possession_quality == 1.0

    def test_give_to_missing_unit_is_rejected(self, ball: Ball) -> None:
        transition = ball.give_to_unit(None, 1.0)
        assert not transition.accepted
        assert transition.error is ErrorKind.MISSING_REFERENCE
        assert ball.state is BallState.WITH_UMPIRE

    def test_bounce_keeps_owner_and_quality(self, ball: Ball, make_unit) -> None:
        unit = make_unit(3)
        ball.give_to_unit(unit, 0.7)
        transition = ball.bounce()
        assert transition.accepted
        assert ball.state is BallState.BOUNCING
        assert ball.owner_id == 3
        assert ball.possession_quality == pytest.approx(0.7)

    def test_bounce_requires_holder(self, ball: Ball) -> None:
        ball.ball_up()
        transition = ball.bounce()
        assert transition.error is ErrorKind.INVALID_TRANSITION
        assert ball.state is BallState.LOOSE_ON_GROUND

    def test_make_loose_ground_clears_owner(self, ball: Ball, make_unit) -> None:
        held_by(ball, make_unit(2))
        ball.make_loose_ground()
        assert ball.state is BallState.LOOSE_ON_GROUND
        assert ball.owner_id is None
        assert ball.possession_quality == 0.0

    def test_follow_tracks_holder(self, ball: Ball, make_unit) -> None:
        unit = make_unit(2)
        held_by(ball, unit)
        unit.position = GridPosition(9, 9)
        ball.follow(unit)
        assert ball.position == GridPosition(9, 9)

    def test_reset_to_center_from_any_state(self, ball: Ball, make_unit) -> None:
        unit = make_unit(2)
        unit.position = GridPosition(5, 5)
        held_by(ball, unit)
        transition = ball.reset_to_center()
        assert transition.possession_changed
        assert ball.state is BallState.WITH_UMPIRE
        assert ball.position == GridPosition(16, 12)
        assert ball.owner_id is None

    def test_out_of_bounds_umpire_and_dead(self, ball: Ball) -> None:
        ball.ball_up()
        assert ball.make_out_of_bounds().current is BallState.OUT_OF_BOUNDS
        assert ball.give_to_umpire().current is BallState.WITH_UMPIRE
        assert ball.make_dead().current is BallState.DEAD


class TestFlight:
    """Kicks and handballs travel along a straight line at a fixed speed."""

    def test_kick_lands_on_target_after_expected_ticks(self, ball: Ball, make_unit) -> None:
        kicker = make_unit(1)
        kicker.position = GridPosition(10, 12)
        held_by(ball, kicker)

        transition = ball.make_loose_air(GridPosition(10, 12), GridPosition(20, 12), DisposalKind.KICK, kicker)

        assert transition.accepted
        assert ball.owner_id is None
        assert ball.flight is not None
        assert ball.flight.ticks_total == 4
        assert ball.flight.kicker_id == 1
        landed = [ball.advance_flight() for _ in range(4)]
        assert landed == [False, False, False, True]
        assert ball.position == GridPosition(20, 12)
        assert ball.is_in_flight
        assert ball.land().accepted
        assert ball.state is BallState.LOOSE_ON_GROUND
        assert ball.flight is None

    def test_positions_in_flight_advance_towards_target(self, ball: Ball, make_unit) -> None:
        kicker = make_unit(1)
        kicker.position = GridPosition(10, 12)
        held_by(ball, kicker)
        ball.make_loose_air(GridPosition(10, 12), GridPosition(20, 12), DisposalKind.KICK, kicker)
        xs = []
        while not ball.advance_flight():
            xs.append(ball.position.x)
        assert xs == sorted(xs)
        assert all(10 < x < 20 for x in xs)

    def test_handball_is_slower(self, ball: Ball, make_unit) -> None:
        unit = make_unit(1)
        unit.position = GridPosition(10, 12)
        held_by(ball, unit)
        ball.make_loose_air(GridPosition(10, 12), GridPosition(12, 13), DisposalKind.HANDBALL, unit)
        assert ball.flight.ticks_total == 2

    def test_zero_distance_flight_takes_one_tick(self, ball: Ball, make_unit) -> None:
        unit = make_unit(1)
        unit.position = GridPosition(10, 12)
        held_by(ball, unit)
        ball.make_loose_air(GridPosition(10, 12), GridPosition(10, 12), DisposalKind.KICK, unit)
        assert ball.flight.ticks_total == 1
        assert ball.advance_flight()

    def test_intended_receiver_is_recorded(self, ball: Ball, make_unit) -> None:
        kicker, receiver = make_unit(1), make_unit(2)
        kicker.position = GridPosition(10, 12)
        held_by(ball, kicker)
        ball.make_loose_air(GridPosition(10, 12), GridPosition(14, 12), DisposalKind.KICK, kicker, receiver)
        assert ball.flight.intended_target_id == 2

    def test_kick_from_loose_ground_is_allowed(self, ball: Ball, make_unit) -> None:
        unit = make_unit(1)
        ball.ball_up()
        transition = ball.make_loose_air(GridPosition(16, 12), GridPosition(19, 12), DisposalKind.KICK, unit)
        assert transition.accepted
        assert ball.last_touch_side is Side.HOME

    def test_non_holder_cannot_kick(self, ball: Ball, make_unit) -> None:
        holder, other = make_unit(1), make_unit(2)
        held_by(ball, holder)
        transition = ball.make_loose_air(GridPosition(16, 12), GridPosition(19, 12), DisposalKind.KICK, other)
        assert transition.error is ErrorKind.INVALID_TRANSITION
        assert ball.state is BallState.HELD

    def test_missing_kicker_is_rejected(self, ball: Ball) -> None:
        ball.ball_up()
        transition = ball.make_loose_air(GridPosition(16, 12), GridPosition(19, 12), DisposalKind.KICK, None)
        assert transition.error is ErrorKind.MISSING_REFERENCE

    def test_off_field_target_is_rejected(self, ball: Ball, make_unit) -> None:
        unit = make_unit(1)
        held_by(ball, unit)
        transition = ball.make_loose_air(GridPosition(16, 12), GridPosition(40, 12), DisposalKind.KICK, unit)
        assert transition.error is ErrorKind.INVALID_PHYSICS_INPUT
        assert ball.state is BallState.HELD
        assert ball.owner_id == 1

    def test_non_positive_speed_is_rejected(self, make_unit) -> None:
        ball = Ball(GridConfig(), BallPhysicsConfig(kick_speed=0.0))
        unit = make_unit(1)
        held_by(ball, unit)
        transition = ball.make_loose_air(GridPosition(16, 12), GridPosition(19, 12), DisposalKind.KICK, unit)
        assert transition.error is ErrorKind.INVALID_PHYSICS_INPUT

    def test_land_requires_flight(self, ball: Ball) -> None:
        assert not ball.land().accepted
        assert ball.state is BallState.WITH_UMPIRE

    def test_advance_flight_without_flight_is_a_no_op(self, ball: Ball) -> None:
        assert ball.advance_flight()
        assert ball.position == GridPosition(16, 12)


class TestScoring:
    """Scoring zones sit on the end columns around the centre row."""

    @pytest.mark.parametrize(
        ("position", "direction", "score_type"),
        [
            (GridPosition(31, 12), AttackDirection.RIGHT, ScoreType.GOAL),
            (GridPosition(31, 13), AttackDirection.RIGHT, ScoreType.GOAL),
            (GridPosition(31, 10), AttackDirection.RIGHT, ScoreType.BEHIND),
            (GridPosition(31, 15), AttackDirection.RIGHT, ScoreType.BEHIND),
            (GridPosition(0, 12), AttackDirection.LEFT, ScoreType.GOAL),
            (GridPosition(0, 9), AttackDirection.LEFT, ScoreType.BEHIND),
        ],
    )
    def test_scoring_positions(self, ball: Ball, position, direction, score_type) -> None:
        ball.position = position
        check = ball.check_scoring_zone()
        assert check.scored
        assert check.direction is direction
        assert check.score_type is score_type

    @pytest.mark.parametrize("position", [GridPosition(31, 16), GridPosition(0, 8), GridPosition(30, 12)])
    def test_non_scoring_positions(self, ball: Ball, position) -> None:
        ball.position = position
        assert not ball.check_scoring_zone().scored

    def test_point_values(self) -> None:
        assert ScoreType.GOAL.value == 6
        assert ScoreType.BEHIND.value == 1


class TestSnapshots:
    """Capture and restore."""

    def test_restore_reinstates_flight(self, ball: Ball) -> None:
        flight = FlightData(GridPosition(5, 5), GridPosition(8, 5), 1, 2, DisposalKind.HANDBALL, 7)
        snapshot = BallSnapshot(GridPosition(6, 5), BallState.LOOSE_IN_AIR, None, Side.AWAY, 0.0, flight)
        ball.restore(snapshot)
        assert ball.snapshot() == snapshot
        assert ball.is_in_flight

    def test_restore_drops_owner_outside_owned_states(self, ball: Ball) -> None:
        ball.restore(BallSnapshot(GridPosition(3, 3), BallState.LOOSE_ON_GROUND, 4, Side.HOME, 0.0, None))
        assert ball.owner_id is None


class TestNotifications:
    """Ball transitions are turned into bus events."""

    def test_possession_change_publishes_two_events(self, ball: Ball, make_unit) -> None:
        bus = EventBus()
        seen = []
        bus.subscribe_all(seen.append)
        ball.ball_up()
        publish_ball_transition(bus, ball.give_to_unit(make_unit(5), 1.0))
        assert [event.event_type for event in seen] == [EventType.BALL_STATE_CHANGED, EventType.POSSESSION_CHANGED]
        assert seen[1].data["owner"] == 5

    def test_rejection_publishes_operation_rejected(self, ball: Ball) -> None:
        bus = EventBus()
        seen = []
        bus.subscribe(EventType.OPERATION_REJECTED, seen.append)
        publish_ball_transition(bus, ball.land())
        assert len(seen) == 1
        assert seen[0].data["error"] == ErrorKind.INVALID_TRANSITION.value
