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
"""Ball possession and flight state machine.

The ball moves between a small set of states through explicit operations.
Each operation checks that it is legal from the current state, mutates the
ball, and returns a :class:`BallTransition` describing what happened; the
caller decides which notifications to publish. A refused operation leaves the
ball untouched and returns a transition with ``accepted`` set to ``False``.

Ownership is tracked by unit identifier only. The ball never holds a
reference to a :class:`~footyline.models.unit.Unit`; callers resolve the id
through the rosters.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Dict, FrozenSet, Optional

from .config import BallPhysicsConfig, GridConfig
from .events import ErrorKind, EventBus, EventType
from .grid import AttackDirection, GridPosition, Side

if TYPE_CHECKING:
    from footyline.models.unit import Unit


class BallState(Enum):
    """Possession and flight states of the ball."""

    HELD = "held"
    BOUNCING = "bouncing"
    LOOSE_ON_GROUND = "loose_on_ground"
    LOOSE_IN_AIR = "loose_in_air"
    WITH_UMPIRE = "with_umpire"
    OUT_OF_BOUNDS = "out_of_bounds"
    DEAD = "dead"


OWNED_STATES: FrozenSet[BallState] = frozenset({BallState.HELD, BallState.BOUNCING})
"""States in which the ball must have an owner; every other state has none."""


class DisposalKind(Enum):
    """Ways a unit can send the ball into the air."""

    KICK = "kick"
    HANDBALL = "handball"


class ScoreType(Enum):
    """Scoring shots and their point values."""

    GOAL = 6
    BEHIND = 1


# Source states each guarded operation may be invoked from. Operations not
# listed here (out of bounds, umpire, centre reset, dead) apply from any state.
_ALLOWED_FROM: Dict[str, FrozenSet[BallState]] = {
    "give_to_unit": frozenset(
        {BallState.WITH_UMPIRE, BallState.LOOSE_ON_GROUND, BallState.HELD, BallState.BOUNCING}
    ),
    "bounce": frozenset({BallState.HELD}),
    "make_loose_ground": frozenset({BallState.HELD, BallState.BOUNCING}),
    "make_loose_air": frozenset({BallState.HELD, BallState.LOOSE_ON_GROUND}),
    "land": frozenset({BallState.LOOSE_IN_AIR}),
    "ball_up": frozenset({BallState.WITH_UMPIRE}),
}


@dataclass(frozen=True, slots=True)
class FlightData:
    """Parameters of a ball in flight.

    Parameters
    ----------
    start : GridPosition
        Cell the disposal left from.
    target : GridPosition
        Cell the ball will land on.
    ticks_elapsed : int
        Ticks flown so far.
    ticks_total : int
        Ticks needed to reach ``target``.
    kind : DisposalKind
        Kick or handball.
    kicker_id : int
        Identifier of the disposing unit.
    intended_target_id : int | None, optional
        Identifier of the intended receiver, if any.
    """

    start: GridPosition
    target: GridPosition
    ticks_elapsed: int
    ticks_total: int
    kind: DisposalKind
    kicker_id: int
    intended_target_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ScoreCheck:
    """Result of probing the ball position against the scoring zones.

    Parameters
    ----------
    scored : bool
        ``True`` when the position is a scoring position.
    direction : AttackDirection | None, optional
        Attack direction of the team that scores.
    score_type : ScoreType | None, optional
        Goal or behind.
    """

    scored: bool
    direction: Optional[AttackDirection] = None
    score_type: Optional[ScoreType] = None


NO_SCORE = ScoreCheck(False)


@dataclass(frozen=True, slots=True)
class BallTransition:
    """Outcome of a ball operation.

    Parameters
    ----------
    operation : str
        Name of the operation that produced this record.
    previous : BallState
        State before the operation.
    current : BallState
        State after the operation; equal to ``previous`` on rejection.
    previous_owner_id : int | None
        Owner before the operation.
    owner_id : int | None
        Owner after the operation.
    accepted : bool, optional
        ``False`` when the operation was refused.
    error : ErrorKind | None, optional
        Failure category for a refused operation.
    detail : str, optional
        Free-form explanation for logs.
    """

    operation: str
    previous: BallState
    current: BallState
    previous_owner_id: Optional[int]
    owner_id: Optional[int]
    accepted: bool = True
    error: Optional[ErrorKind] = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.accepted

    @property
    def machine(self) -> str:
        """Return the state machine name used in notifications."""
        return "ball"

    @property
    def changed(self) -> bool:
        """Return ``True`` when the state changed."""
        return self.accepted and self.previous is not self.current

    @property
    def possession_changed(self) -> bool:
        """Return ``True`` when the owner changed."""
        return self.accepted and self.previous_owner_id != self.owner_id


@dataclass(frozen=True, slots=True)
class BallSnapshot:
    """Immutable capture of the ball.

    Parameters
    ----------
    position : GridPosition
        Ball cell.
    state : BallState
        Ball state.
    owner_id : int | None
        Owning unit identifier.
    last_touch_side : Side | None
        Side that last touched the ball.
    possession_quality : float
        Quality of the current possession.
    flight : FlightData | None
        Flight parameters while in the air.
    """

    position: GridPosition
    state: BallState
    owner_id: Optional[int]
    last_touch_side: Optional[Side]
    possession_quality: float
    flight: Optional[FlightData]


class Ball:
    """The match ball.

    Parameters
    ----------
    grid_config : GridConfig
        Field geometry used for bounds and scoring checks.
    physics : BallPhysicsConfig
        Disposal speeds.
    """

    def __init__(self, grid_config: GridConfig, physics: BallPhysicsConfig) -> None:
        """Create a ball resting with the umpire at the centre.

        Parameters
        ----------
        grid_config : GridConfig
            Field geometry used for bounds and scoring checks.
        physics : BallPhysicsConfig
            Disposal speeds.
        """
        self.grid_config = grid_config
        self.physics = physics
        self.position = self.centre
        self.state = BallState.WITH_UMPIRE
        self.owner_id: Optional[int] = None
        self.last_touch_side: Optional[Side] = None
        self.possession_quality = 0.0
        self.flight: Optional[FlightData] = None

    @property
    def centre(self) -> GridPosition:
        """Return the centre cell of the field."""
        return GridPosition(self.grid_config.width // 2, self.grid_config.height // 2)

    @property
    def is_in_flight(self) -> bool:
        """Return ``True`` while the ball is loose in the air."""
        return self.state is BallState.LOOSE_IN_AIR

    def is_valid(self, pos: GridPosition) -> bool:
        """Return ``True`` when ``pos`` is on the field.

        Parameters
        ----------
        pos : GridPosition
            Cell to test.

        Returns
        -------
        bool
            Bounds check result.
        """
        return 0 <= pos.x < self.grid_config.width and 0 <= pos.y < self.grid_config.height

    def speed_for(self, kind: DisposalKind) -> float:
        """Return the configured flight speed for ``kind``.

        Parameters
        ----------
        kind : DisposalKind
            Disposal type.

        Returns
        -------
        float
            Cells travelled per tick.
        """
        if kind is DisposalKind.KICK:
            return self.physics.kick_speed
        return self.physics.handball_speed

    # --- transition helpers ------------------------------------------------------------
    def _reject(self, operation: str, error: ErrorKind, detail: str) -> BallTransition:
        """Build a refusal that leaves the ball unchanged.

        Parameters
        ----------
        operation : str
            Name of the refused operation.
        error : ErrorKind
            Failure category.
        detail : str
            Explanation for logs.

        Returns
        -------
        BallTransition
            Record with ``accepted`` set to ``False``.
        """
        return BallTransition(
            operation, self.state, self.state, self.owner_id, self.owner_id, False, error, detail
        )

    def _guard(self, operation: str) -> Optional[BallTransition]:
        """Return a refusal when ``operation`` is illegal from the current state.

        Parameters
        ----------
        operation : str
            Name of a guarded operation.

        Returns
        -------
        BallTransition | None
            Refusal, or ``None`` when the operation may proceed.
        """
        if self.state in _ALLOWED_FROM[operation]:
            return None
        return self._reject(operation, ErrorKind.INVALID_TRANSITION, f"{operation} not allowed from {self.state.name}")

    def _apply(
        self,
        operation: str,
        state: BallState,
        owner_id: Optional[int] = None,
        position: Optional[GridPosition] = None,
    ) -> BallTransition:
        """Move to ``state`` with ``owner_id`` and return the transition record.

        Parameters
        ----------
        operation : str
            Name of the operation being applied.
        state : BallState
            New state.
        owner_id : int | None, optional
            New owner; must be set exactly for the owned states.
        position : GridPosition | None, optional
            New ball cell, when the operation relocates the ball.

        Returns
        -------
        BallTransition
            Accepted transition.
        """
        previous, previous_owner = self.state, self.owner_id
        self.state = state
        self.owner_id = owner_id if state in OWNED_STATES else None
        if state is not BallState.LOOSE_IN_AIR:
            self.flight = None
        if self.owner_id is None:
            self.possession_quality = 0.0
        if position is not None:
            self.position = position
        return BallTransition(operation, previous, state, previous_owner, self.owner_id)

    # --- possession --------------------------------------------------------------------
    def give_to_unit(self, unit: Optional["Unit"], quality: float) -> BallTransition:
        """Hand the ball to ``unit``, clearing any previous owner.

        Parameters
        ----------
        unit : Unit | None
            New holder.
        quality : float
            Possession quality in ``[0, 1]``.

        Returns
        -------
        BallTransition
            Transition to ``HELD``; the caller clears the previous holder's flag.
        """
        if unit is None:
            return self._reject("give_to_unit", ErrorKind.MISSING_REFERENCE, "no unit to receive the ball")
        refusal = self._guard("give_to_unit")
        if refusal is not None:
            return refusal
        transition = self._apply("give_to_unit", BallState.HELD, unit.unit_id, unit.position)
        self.last_touch_side = unit.side
        self.possession_quality = max(0.0, min(1.0, quality))
        return transition

    def bounce(self) -> BallTransition:
        """Start a running bounce while keeping the holder.

        Returns
        -------
        BallTransition
            Transition from ``HELD`` to ``BOUNCING``.
        """
        refusal = self._guard("bounce")
        if refusal is not None:
            return refusal
        quality = self.possession_quality
        transition = self._apply("bounce", BallState.BOUNCING, self.owner_id)
        self.possession_quality = quality
        return transition

    def follow(self, unit: "Unit") -> None:
        """Keep the ball on its holder's cell.

        Parameters
        ----------
        unit : Unit
            Unit that just moved; ignored unless it owns the ball.
        """
        if self.owner_id == unit.unit_id and self.state in OWNED_STATES:
            self.position = unit.position

    def make_loose_ground(self) -> BallTransition:
        """Spill the ball from its holder onto the ground.

        Returns
        -------
        BallTransition
            Transition to ``LOOSE_ON_GROUND``.
        """
        refusal = self._guard("make_loose_ground")
        if refusal is not None:
            return refusal
        return self._apply("make_loose_ground", BallState.LOOSE_ON_GROUND)

    # --- flight ------------------------------------------------------------------------
    def make_loose_air(
        self,
        start: GridPosition,
        target: GridPosition,
        kind: DisposalKind,
        kicker: Optional["Unit"],
        intended_target: Optional["Unit"] = None,
    ) -> BallTransition:
        """Launch the ball from ``start`` towards ``target``.

        Parameters
        ----------
        start : GridPosition
            Launch cell.
        target : GridPosition
            Landing cell.
        kind : DisposalKind
            Kick or handball; selects the flight speed.
        kicker : Unit | None
            Disposing unit.
        intended_target : Unit | None, optional
            Intended receiver.

        Returns
        -------
        BallTransition
            Transition to ``LOOSE_IN_AIR`` or a refusal with no change.
        """
        if kicker is None:
            return self._reject("make_loose_air", ErrorKind.MISSING_REFERENCE, "disposal without a kicker")
        refusal = self._guard("make_loose_air")
        if refusal is not None:
            return refusal
        if self.state is BallState.HELD and self.owner_id != kicker.unit_id:
            return self._reject(
                "make_loose_air", ErrorKind.INVALID_TRANSITION, f"unit {kicker.unit_id} does not hold the ball"
            )
        if not self.is_valid(start) or not self.is_valid(target):
            return self._reject("make_loose_air", ErrorKind.INVALID_PHYSICS_INPUT, "flight endpoint out of bounds")
        speed = self.speed_for(kind)
        if speed <= 0:
            return self._reject("make_loose_air", ErrorKind.INVALID_PHYSICS_INPUT, f"{kind.value} speed must be positive")

        distance = start.manhattan(target)
        ticks_total = max(1, math.ceil(distance / speed))
        transition = self._apply("make_loose_air", BallState.LOOSE_IN_AIR, position=start)
        self.flight = FlightData(
            start=start,
            target=target,
            ticks_elapsed=0,
            ticks_total=ticks_total,
            kind=kind,
            kicker_id=kicker.unit_id,
            intended_target_id=intended_target.unit_id if intended_target is not None else None,
        )
        self.last_touch_side = kicker.side
        return transition

    @staticmethod
    def interpolate(flight: FlightData, ticks_elapsed: int) -> GridPosition:
        """Return the cell along ``flight`` after ``ticks_elapsed`` ticks.

        Parameters
        ----------
        flight : FlightData
            Flight being sampled.
        ticks_elapsed : int
            Ticks flown; the fraction is clamped to ``[0, 1]``.

        Returns
        -------
        GridPosition
            Rounded linear interpolation between start and target.
        """
        fraction = max(0.0, min(1.0, ticks_elapsed / flight.ticks_total))
        return GridPosition(
            flight.start.x + round((flight.target.x - flight.start.x) * fraction),
            flight.start.y + round((flight.target.y - flight.start.y) * fraction),
        )

    def advance_flight(self) -> bool:
        """Move an in-flight ball one tick along its path.

        Returns
        -------
        bool
            ``True`` when the ball is not in flight or has reached its target.
            The caller then calls :meth:`land`.
        """
        if self.state is not BallState.LOOSE_IN_AIR or self.flight is None:
            return True
        elapsed = min(self.flight.ticks_elapsed + 1, self.flight.ticks_total)
        self.flight = replace(self.flight, ticks_elapsed=elapsed)
        if elapsed >= self.flight.ticks_total:
            self.position = self.flight.target
            return True
        self.position = self.interpolate(self.flight, elapsed)
        return False

    def land(self) -> BallTransition:
        """Bring a flying ball down where it currently is.

        Returns
        -------
        BallTransition
            Transition from ``LOOSE_IN_AIR`` to ``LOOSE_ON_GROUND``.
        """
        refusal = self._guard("land")
        if refusal is not None:
            return refusal
        return self._apply("land", BallState.LOOSE_ON_GROUND)

    # --- stoppages ---------------------------------------------------------------------
    def ball_up(self, break_to: Optional[GridPosition] = None) -> BallTransition:
        """Release the ball from the umpire as a loose ground ball.

        Parameters
        ----------
        break_to : GridPosition | None, optional
            Cell the bounce comes down on; the ball stays where it is when omitted.

        Returns
        -------
        BallTransition
            Transition from ``WITH_UMPIRE`` to ``LOOSE_ON_GROUND``.
        """
        refusal = self._guard("ball_up")
        if refusal is not None:
            return refusal
        if break_to is not None and not self.is_valid(break_to):
            return self._reject("ball_up", ErrorKind.INVALID_POSITION, f"ball-up cell {break_to} is off the field")
        return self._apply("ball_up", BallState.LOOSE_ON_GROUND, position=break_to)

    def make_out_of_bounds(self) -> BallTransition:
        """Declare the ball out of play where it lies.

        Returns
        -------
        BallTransition
            Transition to ``OUT_OF_BOUNDS``.
        """
        return self._apply("make_out_of_bounds", BallState.OUT_OF_BOUNDS)

    def give_to_umpire(self) -> BallTransition:
        """Hand the ball to the umpire where it lies.

        Returns
        -------
        BallTransition
            Transition to ``WITH_UMPIRE``.
        """
        return self._apply("give_to_umpire", BallState.WITH_UMPIRE)

    def reset_to_center(self) -> BallTransition:
        """Return the ball to the umpire at the centre.

        Returns
        -------
        BallTransition
            Transition to ``WITH_UMPIRE`` with the ball on the centre cell.
        """
        return self._apply("reset_to_center", BallState.WITH_UMPIRE, position=self.centre)

    def make_dead(self) -> BallTransition:
        """Take the ball out of play for good (full time).

        Returns
        -------
        BallTransition
            Transition to ``DEAD``.
        """
        return self._apply("make_dead", BallState.DEAD)

    # --- scoring -----------------------------------------------------------------------
    def check_scoring_zone(self) -> ScoreCheck:
        """Probe the current position against both scoring zones.

        This is a pure query and can be called any number of times.

        Returns
        -------
        ScoreCheck
            Scoring direction and type, or :data:`NO_SCORE`.
        """
        cfg = self.grid_config
        centre_y = cfg.height // 2
        offset = abs(self.position.y - centre_y)
        if offset > cfg.goal_half_span:
            return NO_SCORE
        if self.position.x >= cfg.width - 1:
            direction = AttackDirection.RIGHT
        elif self.position.x <= 0:
            direction = AttackDirection.LEFT
        else:
            return NO_SCORE
        score_type = ScoreType.GOAL if offset <= cfg.goal_centre_half_span else ScoreType.BEHIND
        return ScoreCheck(True, direction, score_type)

    # --- snapshots ---------------------------------------------------------------------
    def snapshot(self) -> BallSnapshot:
        """Capture the ball.

        Returns
        -------
        BallSnapshot
            Frozen copy of every ball field.
        """
        return BallSnapshot(
            position=self.position,
            state=self.state,
            owner_id=self.owner_id,
            last_touch_side=self.last_touch_side,
            possession_quality=self.possession_quality,
            flight=self.flight,
        )

    def restore(self, snapshot: BallSnapshot) -> None:
        """Restore every ball field from ``snapshot``.

        Parameters
        ----------
        snapshot : BallSnapshot
            Capture previously taken from this ball.
        """
        self.position = snapshot.position
        self.state = snapshot.state
        self.owner_id = snapshot.owner_id if snapshot.state in OWNED_STATES else None
        self.last_touch_side = snapshot.last_touch_side
        self.possession_quality = snapshot.possession_quality
        self.flight = snapshot.flight if snapshot.state is BallState.LOOSE_IN_AIR else None


def publish_ball_transition(bus: EventBus, transition: BallTransition) -> None:
    """Publish the notifications a ball operation calls for.

    Parameters
    ----------
    bus : EventBus
        Bus to publish on.
    transition : BallTransition
        Outcome returned by a :class:`Ball` operation.
    """
    bus.emit_transition(EventType.BALL_STATE_CHANGED, transition)
    if transition.possession_changed:
        bus.emit(
            EventType.POSSESSION_CHANGED,
            f"Possession {transition.previous_owner_id} -> {transition.owner_id}",
            previous_owner=transition.previous_owner_id,
            owner=transition.owner_id,
        )
