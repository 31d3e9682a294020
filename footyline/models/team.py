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
"""Team domain model and scoreboard."""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from footyline.engine.grid import AttackDirection, Side
from footyline.models.unit import FieldRole, Unit, UnitSnapshot

ROSTER_SIZE = 9
GOAL_POINTS = 6
BEHIND_POINTS = 1


@dataclass(frozen=True, slots=True)
class TeamSnapshot:
    """Immutable capture of a team's score and units.

    Parameters
    ----------
    side : Side
        Roster side the capture belongs to.
    goals : int
        Goals kicked.
    behinds : int
        Behinds scored.
    units : Tuple[UnitSnapshot, ...]
        Unit captures in roster order.
    """

    side: Side
    goals: int
    behinds: int
    units: Tuple[UnitSnapshot, ...]


@dataclass(eq=False)
class Team:
    """Roster owner and scoreboard for one side.

    Parameters
    ----------
    team_id : int
        Unique identifier for the team.
    name : str
        Display name.
    side : Side
        Whether this is the home or away roster.
    attack_direction : AttackDirection
        Direction the team attacks for the whole match.
    units : List[Unit]
        Ordered roster; processing order inside a tick follows it.
    """

    team_id: int
    name: str
    side: Side
    attack_direction: AttackDirection
    units: List[Unit]
    goals: int = field(default=0, init=False)
    behinds: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        """Validate roster size and that every unit belongs to this side."""
        if len(self.units) != ROSTER_SIZE:
            raise ValueError(f"Team must have exactly {ROSTER_SIZE} units")
        for unit in self.units:
            if unit.side is not self.side or unit.attack_direction is not self.attack_direction:
                raise ValueError(f"Unit {unit.unit_id} does not belong to the {self.side.value} side")

    def __iter__(self) -> Iterator[Unit]:
        return iter(self.units)

    @property
    def total_score(self) -> int:
        """Return goals times six plus behinds."""
        return self.goals * GOAL_POINTS + self.behinds * BEHIND_POINTS

    def add_goal(self) -> int:
        """Credit a goal.

        Returns
        -------
        int
            Updated total score.
        """
        self.goals += 1
        return self.total_score

    def add_behind(self) -> int:
        """Credit a behind.

        Returns
        -------
        int
            Updated total score.
        """
        self.behinds += 1
        return self.total_score

    def reset_score(self) -> None:
        """Zero the scoreboard for a fresh match."""
        self.goals = 0
        self.behinds = 0

    def score_line(self) -> str:
        """Return the traditional ``goals.behinds (total)`` score line.

        Returns
        -------
        str
            Formatted score, for example ``"3.2 (20)"``.
        """
        return f"{self.goals}.{self.behinds} ({self.total_score})"

    def unit_by_id(self, unit_id: int) -> Optional[Unit]:
        """Look up a unit of this roster.

        Parameters
        ----------
        unit_id : int
            Identifier to find.

        Returns
        -------
        Unit | None
            Matching unit or ``None``.
        """
        return next((unit for unit in self.units if unit.unit_id == unit_id), None)

    def units_by_role(self, role: FieldRole) -> List[Unit]:
        """Return every unit playing ``role``.

        Parameters
        ----------
        role : FieldRole
            Role to filter by.

        Returns
        -------
        List[Unit]
            Units in roster order.
        """
        return [unit for unit in self.units if unit.role is role]

    def ball_carrier(self) -> Optional[Unit]:
        """Return the unit of this roster holding the ball.

        Returns
        -------
        Unit | None
            Holder or ``None``.
        """
        return next((unit for unit in self.units if unit.has_ball), None)

    def snapshot(self) -> TeamSnapshot:
        """Capture score and unit state.

        Returns
        -------
        TeamSnapshot
            Frozen capture in roster order.
        """
        return TeamSnapshot(self.side, self.goals, self.behinds, tuple(unit.snapshot() for unit in self.units))

    def restore(self, snapshot: TeamSnapshot) -> None:
        """Restore score and unit state, matching units by identifier.

        Units missing from the capture are left untouched; positions are
        re-applied by the grid, not here.

        Parameters
        ----------
        snapshot : TeamSnapshot
            Capture previously taken from this team.
        """
        self.goals = snapshot.goals
        self.behinds = snapshot.behinds
        by_id: Dict[int, UnitSnapshot] = {unit_snapshot.unit_id: unit_snapshot for unit_snapshot in snapshot.units}
        for unit in self.units:
            unit_snapshot = by_id.get(unit.unit_id)
            if unit_snapshot is not None:
                unit.restore(unit_snapshot)
