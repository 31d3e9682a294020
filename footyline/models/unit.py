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
"""Domain models representing on-field units and their attributes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

from footyline.engine.events import ErrorKind, TransitionEvent
from footyline.engine.grid import AttackDirection, GridPosition, Side, Zone

if TYPE_CHECKING:
    from footyline.engine.grid import SpatialGrid


class FieldRole(Enum):
    """Positional role; each role is locked to one zone."""

    FULL_BACK = "FB"
    BACK_POCKET = "BP"
    HALF_BACK = "HB"
    WING = "W"
    CENTRE = "C"
    RUCK = "R"
    HALF_FORWARD = "HF"
    FORWARD_POCKET = "FP"
    FULL_FORWARD = "FF"

    @property
    def zone(self) -> Zone:
        """Return the zone this role is locked to."""
        return ROLE_ZONES[self]


ROLE_ZONES: Dict[FieldRole, Zone] = {
    FieldRole.FULL_BACK: Zone.DEFENSIVE,
    FieldRole.BACK_POCKET: Zone.DEFENSIVE,
    FieldRole.HALF_BACK: Zone.DEFENSIVE,
    FieldRole.WING: Zone.MIDFIELD,
    FieldRole.CENTRE: Zone.MIDFIELD,
    FieldRole.RUCK: Zone.MIDFIELD,
    FieldRole.HALF_FORWARD: Zone.FORWARD,
    FieldRole.FORWARD_POCKET: Zone.FORWARD,
    FieldRole.FULL_FORWARD: Zone.FORWARD,
}


class UnitActivity(Enum):
    """What a unit is doing during the current tick."""

    IDLE = "idle"
    MOVING = "moving"
    CONTESTING = "contesting"
    DISPOSING = "disposing"


@dataclass
class UnitAttributes:
    """Ratings that feed stamina capacity and the decision policy.

    Parameters
    ----------
    kicking : int
        Kick distance and accuracy.
    handball : int
        Handball skill.
    marking : int
        Ability to take the ball cleanly.
    endurance : int
        Stamina capacity.
    """

    kicking: int
    handball: int
    marking: int
    endurance: int

    def __post_init__(self) -> None:
        """Validate that all attributes fall within the 1-100 rating scale."""
        for attr, value in self.__dict__.items():
            if not 1 <= value <= 100:
                raise ValueError(f"{attr} must be between 1 and 100")


@dataclass(frozen=True, slots=True)
class UnitSnapshot:
    """Immutable capture of a unit's mutable state.

    Parameters
    ----------
    unit_id : int
        Identifier used to match the capture back to a roster entry.
    position : GridPosition
        Cell the unit occupied.
    stamina : int
        Stamina at capture time.
    activity : UnitActivity
        Activity at capture time.
    has_ball : bool
        Possession flag.
    possession_quality : float
        Quality of the possession, ``0.0`` without the ball.
    target : GridPosition | None
        Pending movement target.
    blocked_ticks : int
        Consecutive blocked steps.
    """

    unit_id: int
    position: GridPosition
    stamina: int
    activity: UnitActivity
    has_ball: bool
    possession_quality: float
    target: Optional[GridPosition]
    blocked_ticks: int


@dataclass(eq=False)
class Unit:
    """A zone-locked member of a roster.

    The unit only offers primitives (stamina, movement intent, possession);
    deciding what to do is left to a policy and executing it to the engine.

    Parameters
    ----------
    unit_id : int
        Unique identifier across both rosters.
    name : str
        Display name.
    side : Side
        Roster the unit belongs to.
    role : FieldRole
        Positional role, which fixes the zone.
    attack_direction : AttackDirection
        Direction the unit's team attacks, used to orient its zone.
    attributes : UnitAttributes
        Skill ratings.
    stamina_capacity : int, optional
        Maximum stamina.
    exhaustion_threshold : int, optional
        Stamina at or below which the unit can no longer exert itself.
    position : GridPosition, optional
        Current cell; written by the grid.
    """

    unit_id: int
    name: str
    side: Side
    role: FieldRole
    attack_direction: AttackDirection
    attributes: UnitAttributes
    stamina_capacity: int = 100
    exhaustion_threshold: int = 5
    position: GridPosition = GridPosition(0, 0)
    stamina: int = field(init=False)
    activity: UnitActivity = field(default=UnitActivity.IDLE, init=False)
    has_ball: bool = field(default=False, init=False)
    possession_quality: float = field(default=0.0, init=False)
    target: Optional[GridPosition] = field(default=None, init=False)
    blocked_ticks: int = field(default=0, init=False)
    home_position: Optional[GridPosition] = field(default=None, init=False)

    def __post_init__(self) -> None:
        """Start the unit fully rested."""
        if self.stamina_capacity <= 0:
            raise ValueError("stamina_capacity must be positive")
        self.stamina = self.stamina_capacity

    @property
    def zone(self) -> Zone:
        """Return the zone the unit is locked to."""
        return self.role.zone

    @property
    def is_moving(self) -> bool:
        """Return ``True`` while the unit has a pending movement target."""
        return self.activity in (UnitActivity.MOVING, UnitActivity.CONTESTING)

    # --- stamina -----------------------------------------------------------------------
    def spend_stamina(self, amount: int) -> bool:
        """Spend ``amount`` stamina, never dropping below zero.

        Parameters
        ----------
        amount : int
            Stamina to spend.

        Returns
        -------
        bool
            ``False`` once stamina is at or below the exhaustion threshold.
        """
        self.stamina = max(0, self.stamina - max(0, amount))
        return self.stamina > self.exhaustion_threshold

    def recover_stamina(self, amount: int) -> None:
        """Recover ``amount`` stamina, never exceeding capacity.

        Parameters
        ----------
        amount : int
            Stamina to recover.
        """
        self.stamina = min(self.stamina_capacity, self.stamina + max(0, amount))

    # --- activity ----------------------------------------------------------------------
    def transition_to(self, activity: UnitActivity) -> TransitionEvent:
        """Switch the unit's activity.

        Parameters
        ----------
        activity : UnitActivity
            Requested activity.

        Returns
        -------
        TransitionEvent
            Accepted change, or a rejection when disposing without the ball.
        """
        if activity is UnitActivity.DISPOSING and not self.has_ball:
            return TransitionEvent.rejected(
                "unit",
                self.activity,
                ErrorKind.INVALID_TRANSITION,
                f"unit {self.unit_id} cannot dispose without the ball",
            )
        previous = self.activity
        self.activity = activity
        return TransitionEvent("unit", previous, activity)

    def try_move_to(self, target: GridPosition, grid: "SpatialGrid", contest: bool = False) -> bool:
        """Set a movement target after checking bounds and the zone lock.

        The grid performs the actual steps later; this only records intent.

        Parameters
        ----------
        target : GridPosition
            Destination cell.
        grid : SpatialGrid
            Grid used for bounds and zone checks.
        contest : bool, optional
            Mark the move as a contest for the ball.

        Returns
        -------
        bool
            ``True`` when the target was accepted.
        """
        if not grid.is_valid(target):
            return False
        if not grid.in_zone(target, self.zone, self.attack_direction):
            return False
        self.target = target
        self.blocked_ticks = 0
        self.transition_to(UnitActivity.CONTESTING if contest else UnitActivity.MOVING)
        return True

    def arrive_at_target(self, grid: "SpatialGrid") -> TransitionEvent:
        """Snap to the pending target and go idle.

        The snap goes through ``grid`` so occupancy stays in step; if the grid
        refuses the cell the unit stays where it is.

        Parameters
        ----------
        grid : SpatialGrid
            Grid holding the unit.

        Returns
        -------
        TransitionEvent
            Activity change back to idle.
        """
        if self.target is not None and self.target != self.position:
            grid.move(self, self.target)
        return self.stop()

    def stop(self) -> TransitionEvent:
        """Drop any pending target and go idle.

        Returns
        -------
        TransitionEvent
            Activity change back to idle.
        """
        self.target = None
        self.blocked_ticks = 0
        return self.transition_to(UnitActivity.IDLE)

    # --- possession --------------------------------------------------------------------
    def gain_possession(self, quality: float) -> None:
        """Mark the unit as holding the ball.

        Parameters
        ----------
        quality : float
            Possession quality in ``[0, 1]``.
        """
        self.has_ball = True
        self.possession_quality = max(0.0, min(1.0, quality))
        if self.is_moving:
            self.stop()

    def lose_possession(self) -> None:
        """Clear the possession flag."""
        self.has_ball = False
        self.possession_quality = 0.0

    def reset_for_match(self) -> None:
        """Restore full stamina and clear possession and movement."""
        self.stamina = self.stamina_capacity
        self.activity = UnitActivity.IDLE
        self.has_ball = False
        self.possession_quality = 0.0
        self.target = None
        self.blocked_ticks = 0

    # --- snapshots ---------------------------------------------------------------------
    def snapshot(self) -> UnitSnapshot:
        """Capture the unit's mutable state.

        Returns
        -------
        UnitSnapshot
            Frozen copy of position, stamina, activity and possession.
        """
        return UnitSnapshot(
            unit_id=self.unit_id,
            position=self.position,
            stamina=self.stamina,
            activity=self.activity,
            has_ball=self.has_ball,
            possession_quality=self.possession_quality,
            target=self.target,
            blocked_ticks=self.blocked_ticks,
        )

    def restore(self, snapshot: UnitSnapshot) -> None:
        """Restore mutable state from ``snapshot`` (the grid re-places the unit).

        Parameters
        ----------
        snapshot : UnitSnapshot
            Capture previously taken from this unit.
        """
        self.stamina = max(0, min(self.stamina_capacity, snapshot.stamina))
        self.activity = snapshot.activity
        self.has_ball = snapshot.has_ball
        self.possession_quality = snapshot.possession_quality
        self.target = snapshot.target
        self.blocked_ticks = snapshot.blocked_ticks
