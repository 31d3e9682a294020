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
"""Shared decision-policy scaffolding: actions and the read-only field view."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from footyline.engine.ball import BallState
from footyline.engine.grid import AttackDirection, GridPosition, Side

if TYPE_CHECKING:
    from footyline.engine.ball import Ball
    from footyline.engine.grid import SpatialGrid
    from footyline.models.team import Team
    from footyline.models.unit import Unit


class ActionKind(Enum):
    """Primitive actions a policy can hand back to the scheduler."""

    STAND = "stand"
    MOVE_TO = "move_to"
    KICK_TO = "kick_to"
    HANDBALL_TO = "handball_to"


@dataclass(frozen=True, slots=True)
class Action:
    """A single decision for one unit.

    Parameters
    ----------
    kind : ActionKind
        Primitive to execute.
    target : GridPosition | None, optional
        Destination cell for movement or disposal.
    intended_unit_id : int | None, optional
        Receiver a disposal is aimed at.
    contest : bool, optional
        Mark a movement as a contest for the ball.
    """

    kind: ActionKind
    target: Optional[GridPosition] = None
    intended_unit_id: Optional[int] = None
    contest: bool = False

    @property
    def is_disposal(self) -> bool:
        """Return ``True`` for kicks and handballs."""
        return self.kind in (ActionKind.KICK_TO, ActionKind.HANDBALL_TO)


STAND = Action(ActionKind.STAND)


class FieldView:
    """Read-only window onto the match for decision making.

    The view exposes queries only. Units handed out are the live roster
    entries, so policies must treat them as read-only; every mutation goes
    through the scheduler.

    Parameters
    ----------
    grid : SpatialGrid
        Occupancy map.
    ball : Ball
        Match ball.
    home : Team
        Home roster.
    away : Team
        Away roster.
    """

    def __init__(self, grid: "SpatialGrid", ball: "Ball", home: "Team", away: "Team") -> None:
        """Wrap the live match objects.

        Parameters
        ----------
        grid : SpatialGrid
            Occupancy map.
        ball : Ball
            Match ball.
        home : Team
            Home roster.
        away : Team
            Away roster.
        """
        self._grid = grid
        self._ball = ball
        self._teams = {home.side: home, away.side: away}

    # --- ball --------------------------------------------------------------------------
    @property
    def ball_state(self) -> BallState:
        """Return the ball state."""
        return self._ball.state

    @property
    def ball_position(self) -> GridPosition:
        """Return the ball cell."""
        return self._ball.position

    @property
    def ball_owner_id(self) -> Optional[int]:
        """Return the holder's identifier, if any."""
        return self._ball.owner_id

    @property
    def flight_target(self) -> Optional[GridPosition]:
        """Return where an in-flight ball will land."""
        flight = self._ball.flight
        return flight.target if flight is not None else None

    # --- field -------------------------------------------------------------------------
    @property
    def width(self) -> int:
        """Return the field width in cells."""
        return self._grid.width

    @property
    def height(self) -> int:
        """Return the field height in cells."""
        return self._grid.height

    def clamp(self, pos: GridPosition) -> GridPosition:
        """Clamp ``pos`` onto the field.

        Parameters
        ----------
        pos : GridPosition
            Possibly off-field cell.

        Returns
        -------
        GridPosition
            Closest valid cell.
        """
        return self._grid.clamp(pos)

    def goal_position(self, direction: AttackDirection) -> GridPosition:
        """Return the centre of the goal a team attacking ``direction`` kicks at.

        Parameters
        ----------
        direction : AttackDirection
            Attack direction.

        Returns
        -------
        GridPosition
            Cell on the scoring edge at the centre row.
        """
        x = self._grid.width - 1 if direction is AttackDirection.RIGHT else 0
        return GridPosition(x, self._grid.height // 2)

    def can_reach(self, unit: "Unit", pos: GridPosition) -> bool:
        """Return ``True`` when ``pos`` is on the field and inside ``unit``'s zone.

        Parameters
        ----------
        unit : Unit
            Unit whose zone lock applies.
        pos : GridPosition
            Cell to test.

        Returns
        -------
        bool
            Bounds and zone check result.
        """
        return self._grid.is_valid(pos) and self._grid.in_zone(pos, unit.zone, unit.attack_direction)

    def unit_at(self, pos: GridPosition) -> Optional["Unit"]:
        """Return the unit standing on ``pos``.

        Parameters
        ----------
        pos : GridPosition
            Cell to inspect.

        Returns
        -------
        Unit | None
            Occupant or ``None``.
        """
        return self._grid.unit_at(pos)

    def units_in_radius(self, center: GridPosition, radius: int, side: Optional[Side] = None) -> List["Unit"]:
        """Return units within Manhattan ``radius`` of ``center``.

        Parameters
        ----------
        center : GridPosition
            Centre of the search.
        radius : int
            Maximum distance, inclusive.
        side : Side | None, optional
            Restrict to one roster.

        Returns
        -------
        List[Unit]
            Matching units.
        """
        return self._grid.units_in_radius(center, radius, side)

    def teammates(self, unit: "Unit") -> List["Unit"]:
        """Return ``unit``'s teammates in roster order, excluding ``unit``.

        Parameters
        ----------
        unit : Unit
            Reference unit.

        Returns
        -------
        List[Unit]
            Other members of the same roster.
        """
        return [mate for mate in self._teams[unit.side].units if mate is not unit]

    def team_units(self, side: Side) -> List["Unit"]:
        """Return every unit of ``side`` in roster order.

        Parameters
        ----------
        side : Side
            Roster to list.

        Returns
        -------
        List[Unit]
            Roster units.
        """
        return list(self._teams[side].units)


class Policy:
    """Base class for per-unit decision makers.

    Subclasses implement :meth:`decide`. A policy must be deterministic: the
    same view and unit always produce the same action.
    """

    name = "base"

    def decide(self, unit: "Unit", view: FieldView) -> Action:
        """Choose the next action for an idle ``unit``.

        Parameters
        ----------
        unit : Unit
            Idle unit awaiting a decision.
        view : FieldView
            Read-only match state.

        Returns
        -------
        Action
            Primitive action for the scheduler to execute.

        Raises
        ------
        NotImplementedError
            Always, in the base class.
        """
        raise NotImplementedError


class StandPolicy(Policy):
    """Policy that never moves anyone; useful for isolating other behaviour."""

    name = "stand"

    def decide(self, unit: "Unit", view: FieldView) -> Action:
        """Always stand still.

        Parameters
        ----------
        unit : Unit
            Idle unit awaiting a decision.
        view : FieldView
            Read-only match state.

        Returns
        -------
        Action
            :data:`STAND`.
        """
        return STAND
