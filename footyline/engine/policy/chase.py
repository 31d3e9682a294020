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
"""Placeholder policy: chase the loose ball, move it forward, hold shape."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from footyline.engine.ball import BallState
from footyline.engine.config import ENGINE_CONFIG, PolicyConfig
from footyline.engine.grid import GridPosition

from .base import STAND, Action, ActionKind, FieldView, Policy

if TYPE_CHECKING:
    from footyline.models.unit import Unit


class ChaseBallPolicy(Policy):
    """Simple, deterministic football brain.

    The holder handballs to a close teammate further up the ground, otherwise
    kicks: at goal when in range (wide of the posts when beyond accurate
    range), else to the most advanced teammate in range, else straight
    upfield. Without the ball, the team's closest eligible unit chases a loose
    or landing ball and everybody else drifts back to its formation slot.

    Parameters
    ----------
    config : PolicyConfig | None, optional
        Range and settle tuning; defaults to the engine configuration.
    """

    name = "chase"

    def __init__(self, config: Optional[PolicyConfig] = None) -> None:
        """Store the tuning block.

        Parameters
        ----------
        config : PolicyConfig | None, optional
            Range and settle tuning.
        """
        self.config = config or ENGINE_CONFIG.policy

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
            Disposal for the holder, a chase for the nominated unit, or a
            return to the formation slot.
        """
        if unit.has_ball:
            return self._dispose(unit, view)

        target = self._chase_target(view)
        if target is not None and self._is_chaser(unit, target, view):
            if unit.position == target:
                return STAND
            return Action(ActionKind.MOVE_TO, target, contest=True)

        home = unit.home_position
        if home is not None and unit.position.manhattan(home) > self.config.settle_distance:
            return Action(ActionKind.MOVE_TO, home)
        return STAND

    # --- without the ball -----------------------------------------------------------------
    def _chase_target(self, view: FieldView) -> Optional[GridPosition]:
        """Return the cell worth chasing, if the ball is there to be won.

        Parameters
        ----------
        view : FieldView
            Read-only match state.

        Returns
        -------
        GridPosition | None
            Loose ball cell, landing cell of a flying ball, or ``None``.
        """
        if view.ball_state is BallState.LOOSE_ON_GROUND:
            return view.ball_position
        if view.ball_state is BallState.LOOSE_IN_AIR:
            return view.flight_target
        return None

    def _is_chaser(self, unit: "Unit", target: GridPosition, view: FieldView) -> bool:
        """Return ``True`` when ``unit`` is its team's nominated chaser.

        The chaser is the closest unit whose zone contains ``target``; ties go
        to the earlier roster entry.

        Parameters
        ----------
        unit : Unit
            Candidate chaser.
        target : GridPosition
            Cell being chased.
        view : FieldView
            Read-only match state.

        Returns
        -------
        bool
            Whether ``unit`` should chase.
        """
        eligible = [mate for mate in view.team_units(unit.side) if view.can_reach(mate, target)]
        if not eligible:
            return False
        chaser = min(eligible, key=lambda mate: mate.position.manhattan(target))
        return chaser is unit

    # --- with the ball --------------------------------------------------------------------
    def kick_range(self, unit: "Unit") -> int:
        """Return how far ``unit`` can kick.

        Parameters
        ----------
        unit : Unit
            Kicker.

        Returns
        -------
        int
            Manhattan range in cells.
        """
        return self.config.kick_range_base + unit.attributes.kicking // self.config.kick_range_per_rating

    def accurate_range(self, unit: "Unit") -> int:
        """Return the distance inside which ``unit`` kicks goals rather than behinds.

        Parameters
        ----------
        unit : Unit
            Kicker.

        Returns
        -------
        int
            Manhattan range in cells.
        """
        return unit.attributes.kicking // self.config.accurate_range_per_rating

    def _dispose(self, unit: "Unit", view: FieldView) -> Action:
        """Pick a disposal for the holder.

        Parameters
        ----------
        unit : Unit
            Ball holder.
        view : FieldView
            Read-only match state.

        Returns
        -------
        Action
            Handball or kick.
        """
        forward = unit.attack_direction.value

        receiver = None
        for mate in view.teammates(unit):
            gain = (mate.position.x - unit.position.x) * forward
            if gain <= 0 or unit.position.manhattan(mate.position) > self.config.handball_range:
                continue
            if receiver is None or mate.position.x * forward > receiver.position.x * forward:
                receiver = mate
        if receiver is not None:
            return Action(ActionKind.HANDBALL_TO, receiver.position, receiver.unit_id)

        reach = self.kick_range(unit)
        goal = view.goal_position(unit.attack_direction)
        distance = unit.position.manhattan(goal)
        if distance <= reach:
            if distance > self.accurate_range(unit):
                # Sprays wide of the centre sub-band; side alternates by id.
                goal = view.clamp(goal.offset(0, 2 if unit.unit_id % 2 == 0 else -2))
            return Action(ActionKind.KICK_TO, goal)

        target = None
        for mate in view.teammates(unit):
            gain = (mate.position.x - unit.position.x) * forward
            if gain <= 0 or unit.position.manhattan(mate.position) > reach:
                continue
            if target is None or mate.position.x * forward > target.position.x * forward:
                target = mate
        if target is not None:
            return Action(ActionKind.KICK_TO, target.position, target.unit_id)

        return Action(ActionKind.KICK_TO, view.clamp(unit.position.offset(forward * reach, 0)))
