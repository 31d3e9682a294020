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
"""Spatial primitives: grid positions, zones and the occupancy map.

The grid is the single source of truth for where units stand. It has no
notion of time; the scheduler mutates it through :meth:`SpatialGrid.place`
and :meth:`SpatialGrid.move`, both of which validate bounds, occupancy and
zone locks before touching anything and report a reason code instead of
raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .config import GridConfig

if TYPE_CHECKING:
    from footyline.models.unit import Unit


@dataclass(frozen=True, slots=True)
class GridPosition:
    """Integer cell coordinate on the field.

    Parameters
    ----------
    x : int
        Column index, increasing towards the right-hand goal.
    y : int
        Row index.
    """

    x: int
    y: int

    def manhattan(self, other: "GridPosition") -> int:
        """Return the Manhattan distance between ``self`` and ``other``.

        Parameters
        ----------
        other : GridPosition
            Cell to measure against.

        Returns
        -------
        int
            Sum of the absolute axis differences.
        """
        return abs(self.x - other.x) + abs(self.y - other.y)

    def offset(self, dx: int, dy: int) -> "GridPosition":
        """Return the cell displaced by ``(dx, dy)``.

        Parameters
        ----------
        dx : int
            Column displacement.
        dy : int
            Row displacement.

        Returns
        -------
        GridPosition
            New position; bounds are not checked.
        """
        return GridPosition(self.x + dx, self.y + dy)


class Zone(Enum):
    """Horizontal band a unit is locked to for the whole match."""

    DEFENSIVE = "defensive"
    MIDFIELD = "midfield"
    FORWARD = "forward"


class AttackDirection(Enum):
    """Direction along the x axis a team attacks."""

    RIGHT = 1
    LEFT = -1


class Side(Enum):
    """Which of the two rosters a unit or event belongs to."""

    HOME = "home"
    AWAY = "away"

    @property
    def opponent(self) -> "Side":
        """Return the other side."""
        return Side.AWAY if self is Side.HOME else Side.HOME


class RejectReason(Enum):
    """Why a placement or move was refused."""

    OUT_OF_BOUNDS = "out_of_bounds"
    OCCUPIED = "occupied"
    OUTSIDE_ZONE = "outside_zone"
    NOT_PLACED = "not_placed"


@dataclass(frozen=True, slots=True)
class PlacementResult:
    """Outcome of a grid mutation request.

    Parameters
    ----------
    ok : bool
        ``True`` when the grid accepted the request.
    reason : RejectReason | None, optional
        Rejection code when ``ok`` is ``False``.
    """

    ok: bool
    reason: Optional[RejectReason] = None

    def __bool__(self) -> bool:
        return self.ok


_ACCEPTED = PlacementResult(True)


class SpatialGrid:
    """Occupancy map and zone geometry for a rectangular field.

    Parameters
    ----------
    config : GridConfig
        Field dimensions, zone bands and goal geometry.
    """

    def __init__(self, config: GridConfig) -> None:
        """Create an empty grid and precompute the zone bands.

        Parameters
        ----------
        config : GridConfig
            Field dimensions, zone bands and goal geometry.
        """
        if config.width < 3 or config.height < 3:
            raise ValueError("Grid must be at least 3x3 cells")
        self.config = config
        self.width = config.width
        self.height = config.height
        self._cells: Dict[GridPosition, "Unit"] = {}
        self._positions: Dict[int, GridPosition] = {}
        self._bands: Dict[Tuple[Zone, AttackDirection], Tuple[int, int]] = {}
        fractions = {
            Zone.DEFENSIVE: config.defensive_band,
            Zone.MIDFIELD: config.midfield_band,
            Zone.FORWARD: config.forward_band,
        }
        for zone, (lo_frac, hi_frac) in fractions.items():
            lo = max(0, math.floor(lo_frac * self.width))
            hi = min(self.width, math.ceil(hi_frac * self.width))
            self._bands[(zone, AttackDirection.RIGHT)] = (lo, hi)
            self._bands[(zone, AttackDirection.LEFT)] = (self.width - hi, self.width - lo)

    # --- geometry ----------------------------------------------------------------
    @property
    def centre(self) -> GridPosition:
        """Return the centre cell used for ball-ups."""
        return GridPosition(self.width // 2, self.height // 2)

    def is_valid(self, pos: GridPosition) -> bool:
        """Return ``True`` when ``pos`` lies on the field.

        Parameters
        ----------
        pos : GridPosition
            Cell to test.

        Returns
        -------
        bool
            Whether ``0 <= x < width`` and ``0 <= y < height``.
        """
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def clamp(self, pos: GridPosition) -> GridPosition:
        """Clamp ``pos`` to the nearest on-field cell.

        Parameters
        ----------
        pos : GridPosition
            Possibly off-field cell.

        Returns
        -------
        GridPosition
            Closest valid cell.
        """
        return GridPosition(
            max(0, min(self.width - 1, pos.x)),
            max(0, min(self.height - 1, pos.y)),
        )

    def zone_band(self, zone: Zone, direction: AttackDirection) -> Tuple[int, int]:
        """Return the half-open x-band ``[lo, hi)`` of ``zone`` for ``direction``.

        Parameters
        ----------
        zone : Zone
            Zone to look up.
        direction : AttackDirection
            Attack direction of the team the zone belongs to.

        Returns
        -------
        Tuple[int, int]
            Inclusive lower and exclusive upper column.
        """
        return self._bands[(zone, direction)]

    def in_zone(self, pos: GridPosition, zone: Zone, direction: AttackDirection) -> bool:
        """Return ``True`` when ``pos`` falls inside the zone band.

        Parameters
        ----------
        pos : GridPosition
            Cell to test.
        zone : Zone
            Zone whose band applies.
        direction : AttackDirection
            Attack direction that orients the band.

        Returns
        -------
        bool
            Whether the column of ``pos`` is inside the band.
        """
        lo, hi = self._bands[(zone, direction)]
        return lo <= pos.x < hi

    def zones_at(self, x: int, direction: AttackDirection) -> List[Zone]:
        """List the zones whose band contains column ``x``.

        Parameters
        ----------
        x : int
            Column index.
        direction : AttackDirection
            Attack direction that orients the bands.

        Returns
        -------
        List[Zone]
            Matching zones in defensive, midfield, forward order.
        """
        return [zone for zone in Zone if self.in_zone(GridPosition(x, 0), zone, direction)]

    def cells_in_zone(self, zone: Zone, direction: AttackDirection) -> List[GridPosition]:
        """Return every cell of a zone band in row-major order.

        Parameters
        ----------
        zone : Zone
            Zone to enumerate.
        direction : AttackDirection
            Attack direction that orients the band.

        Returns
        -------
        List[GridPosition]
            Cells inside the band.
        """
        lo, hi = self._bands[(zone, direction)]
        return [GridPosition(x, y) for y in range(self.height) for x in range(lo, hi)]

    def neighbors(self, pos: GridPosition) -> List[GridPosition]:
        """Return the on-field 8-connected neighbours of ``pos``.

        Parameters
        ----------
        pos : GridPosition
            Centre cell.

        Returns
        -------
        List[GridPosition]
            Neighbours enumerated with ``dx`` outermost, then ``dy``.
        """
        result: List[GridPosition] = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                candidate = pos.offset(dx, dy)
                if self.is_valid(candidate):
                    result.append(candidate)
        return result

    # --- occupancy queries -----------------------------------------------------------
    def is_occupied(self, pos: GridPosition) -> bool:
        """Return ``True`` when a unit stands on ``pos``.

        Parameters
        ----------
        pos : GridPosition
            Cell to test.

        Returns
        -------
        bool
            Occupancy flag.
        """
        return pos in self._cells

    def unit_at(self, pos: GridPosition) -> Optional["Unit"]:
        """Return the unit standing on ``pos``, if any.

        Parameters
        ----------
        pos : GridPosition
            Cell to inspect.

        Returns
        -------
        Unit | None
            Occupant or ``None``.
        """
        return self._cells.get(pos)

    def position_of(self, unit: "Unit") -> Optional[GridPosition]:
        """Return the cell the grid has on record for ``unit``.

        Parameters
        ----------
        unit : Unit
            Unit to look up.

        Returns
        -------
        GridPosition | None
            Recorded cell, or ``None`` when the unit is not on the grid.
        """
        return self._positions.get(unit.unit_id)

    @property
    def occupied_count(self) -> int:
        """Return the number of occupied cells."""
        return len(self._cells)

    def units_in_radius(self, center: GridPosition, radius: int, side: Optional[Side] = None) -> List["Unit"]:
        """Return units within Manhattan ``radius`` of ``center``.

        Parameters
        ----------
        center : GridPosition
            Centre of the search.
        radius : int
            Maximum Manhattan distance, inclusive.
        side : Side | None, optional
            Restrict the result to one roster.

        Returns
        -------
        List[Unit]
            Matching units in row-major scan order of the bounding square.
        """
        found: List["Unit"] = []
        for y in range(center.y - radius, center.y + radius + 1):
            for x in range(center.x - radius, center.x + radius + 1):
                cell = GridPosition(x, y)
                if not self.is_valid(cell) or cell.manhattan(center) > radius:
                    continue
                unit = self._cells.get(cell)
                if unit is None or (side is not None and unit.side is not side):
                    continue
                found.append(unit)
        return found

    def nearest_unit(
        self,
        pos: GridPosition,
        side: Optional[Side] = None,
        exclude: Optional["Unit"] = None,
    ) -> Optional["Unit"]:
        """Return the unit closest to ``pos`` by Manhattan distance.

        The whole field is scanned row by row; on equal distance the first
        unit found wins.

        Parameters
        ----------
        pos : GridPosition
            Reference cell.
        side : Side | None, optional
            Restrict the search to one roster.
        exclude : Unit | None, optional
            Unit to skip (typically the caller itself).

        Returns
        -------
        Unit | None
            Closest unit, or ``None`` when no unit qualifies.
        """
        best: Optional["Unit"] = None
        best_distance = math.inf
        for y in range(self.height):
            for x in range(self.width):
                unit = self._cells.get(GridPosition(x, y))
                if unit is None or unit is exclude:
                    continue
                if side is not None and unit.side is not side:
                    continue
                distance = pos.manhattan(GridPosition(x, y))
                if distance < best_distance:
                    best = unit
                    best_distance = distance
        return best

    def units_in_zone(self, zone: Zone, direction: AttackDirection, side: Optional[Side] = None) -> List["Unit"]:
        """Return units standing inside a zone band.

        Parameters
        ----------
        zone : Zone
            Zone to scan.
        direction : AttackDirection
            Attack direction that orients the band.
        side : Side | None, optional
            Restrict the result to one roster.

        Returns
        -------
        List[Unit]
            Units in row-major scan order.
        """
        found: List["Unit"] = []
        for cell in self.cells_in_zone(zone, direction):
            unit = self._cells.get(cell)
            if unit is not None and (side is None or unit.side is side):
                found.append(unit)
        return found

    def nearest_free_cell_in_zone(
        self, pos: GridPosition, zone: Zone, direction: AttackDirection
    ) -> Optional[GridPosition]:
        """Return the free cell of a zone closest to ``pos``.

        Parameters
        ----------
        pos : GridPosition
            Preferred cell.
        zone : Zone
            Zone that must contain the result.
        direction : AttackDirection
            Attack direction that orients the band.

        Returns
        -------
        GridPosition | None
            Closest unoccupied cell, ``None`` when the zone is full.
        """
        best: Optional[GridPosition] = None
        for cell in self.cells_in_zone(zone, direction):
            if cell in self._cells:
                continue
            if best is None or cell.manhattan(pos) < best.manhattan(pos):
                best = cell
        return best

    # --- routing ---------------------------------------------------------------------
    def step_toward(self, start: GridPosition, goal: GridPosition, unit: Optional["Unit"] = None) -> GridPosition:
        """Pick the free neighbour of ``start`` that most reduces distance to ``goal``.

        The router is greedy and local: it never backtracks, so it can stall in
        front of an obstacle. When no neighbour improves on ``start`` the start
        cell is returned and the caller should treat the unit as blocked.

        Parameters
        ----------
        start : GridPosition
            Current cell.
        goal : GridPosition
            Destination cell.
        unit : Unit | None, optional
            Mover whose zone lock filters the candidates; its own cell does
            not count as occupied.

        Returns
        -------
        GridPosition
            Chosen next cell, or ``start`` when blocked.
        """
        best = start
        best_distance = start.manhattan(goal)
        for candidate in self.neighbors(start):
            occupant = self._cells.get(candidate)
            if occupant is not None and occupant is not unit:
                continue
            if unit is not None and not self.in_zone(candidate, unit.zone, unit.attack_direction):
                continue
            distance = candidate.manhattan(goal)
            if distance < best_distance:
                best = candidate
                best_distance = distance
        return best

    # --- mutation --------------------------------------------------------------------
    def _validate(self, unit: "Unit", pos: GridPosition) -> PlacementResult:
        """Check bounds, occupancy and zone lock for putting ``unit`` on ``pos``.

        Parameters
        ----------
        unit : Unit
            Unit being placed or moved.
        pos : GridPosition
            Requested cell.

        Returns
        -------
        PlacementResult
            Acceptance or the first failing reason.
        """
        if not self.is_valid(pos):
            return PlacementResult(False, RejectReason.OUT_OF_BOUNDS)
        occupant = self._cells.get(pos)
        if occupant is not None and occupant is not unit:
            return PlacementResult(False, RejectReason.OCCUPIED)
        if not self.in_zone(pos, unit.zone, unit.attack_direction):
            return PlacementResult(False, RejectReason.OUTSIDE_ZONE)
        return _ACCEPTED

    def _commit(self, unit: "Unit", pos: GridPosition) -> None:
        """Record ``unit`` on ``pos`` and release its previous cell.

        Parameters
        ----------
        unit : Unit
            Unit being placed.
        pos : GridPosition
            Validated destination.
        """
        previous = self._positions.get(unit.unit_id)
        if previous is not None and self._cells.get(previous) is unit:
            del self._cells[previous]
        self._cells[pos] = unit
        self._positions[unit.unit_id] = pos
        unit.position = pos

    def place(self, unit: "Unit", pos: GridPosition) -> PlacementResult:
        """Put ``unit`` on the grid at ``pos``.

        Placing a unit that is already on the grid relocates it.

        Parameters
        ----------
        unit : Unit
            Unit to place.
        pos : GridPosition
            Requested cell.

        Returns
        -------
        PlacementResult
            Acceptance, or a reason code with no mutation performed.
        """
        result = self._validate(unit, pos)
        if result.ok:
            self._commit(unit, pos)
        return result

    def move(self, unit: "Unit", pos: GridPosition) -> PlacementResult:
        """Move a unit that is already on the grid.

        Moving to the unit's current cell succeeds without touching the map.

        Parameters
        ----------
        unit : Unit
            Unit to move.
        pos : GridPosition
            Requested cell.

        Returns
        -------
        PlacementResult
            Acceptance, or a reason code with no mutation performed.
        """
        current = self._positions.get(unit.unit_id)
        if current is None:
            return PlacementResult(False, RejectReason.NOT_PLACED)
        if current == pos:
            return _ACCEPTED
        result = self._validate(unit, pos)
        if result.ok:
            self._commit(unit, pos)
        return result

    def remove(self, unit: "Unit") -> None:
        """Take ``unit`` off the grid; a no-op when it is not placed.

        Parameters
        ----------
        unit : Unit
            Unit to remove.
        """
        previous = self._positions.pop(unit.unit_id, None)
        if previous is not None and self._cells.get(previous) is unit:
            del self._cells[previous]

    def clear(self) -> None:
        """Remove every unit from the grid."""
        self._cells.clear()
        self._positions.clear()
