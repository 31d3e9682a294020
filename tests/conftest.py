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
"""Shared builders for units, teams and wired engines."""

from dataclasses import replace
from typing import Callable, Optional

import pytest

from footyline.engine.config import ENGINE_CONFIG, EngineConfig
from footyline.engine.factory import build_engine
from footyline.engine.grid import AttackDirection, Side
from footyline.engine.policy import Policy
from footyline.engine.tick_engine import TickEngine
from footyline.models.team import Team
from footyline.models.unit import FieldRole, Unit, UnitAttributes


def build_unit(
    unit_id: int,
    role: FieldRole = FieldRole.CENTRE,
    side: Side = Side.HOME,
    direction: AttackDirection = AttackDirection.RIGHT,
    kicking: int = 50,
) -> Unit:
    return Unit(
        unit_id=unit_id,
        name=f"Unit {unit_id}",
        side=side,
        role=role,
        attack_direction=direction,
        attributes=UnitAttributes(kicking=kicking, handball=50, marking=50, endurance=50),
        stamina_capacity=80,
        exhaustion_threshold=5,
    )


def build_team(side: Side, direction: AttackDirection, first_id: int, kicking: int = 50) -> Team:
    units = [build_unit(first_id + i, role, side, direction, kicking) for i, role in enumerate(FieldRole)]
    return Team(team_id=first_id, name=f"{side.value.title()} XVIII", side=side, attack_direction=direction, units=units)


def short_config(quarter_ticks: int = 40, history_capacity: int = 100) -> EngineConfig:
    clock = replace(
        ENGINE_CONFIG.clock,
        quarter_ticks=quarter_ticks,
        goal_stoppage_ticks=4,
        behind_stoppage_ticks=3,
        out_of_bounds_stoppage_ticks=2,
        quarter_break_ticks=3,
        half_time_ticks=5,
    )
    simulation = replace(ENGINE_CONFIG.simulation, history_capacity=history_capacity)
    return replace(ENGINE_CONFIG, clock=clock, simulation=simulation)


@pytest.fixture
def make_unit() -> Callable[..., Unit]:
    """Factory for single units with flat ratings."""
    return build_unit


@pytest.fixture
def make_team() -> Callable[..., Team]:
    """Factory for nine-unit teams, one unit per role."""
    return build_team


@pytest.fixture
def make_engine() -> Callable[..., TickEngine]:
    """Factory for engines over two fixed-rating teams and a short clock."""

    def factory(
        quarter_ticks: int = 40,
        history_capacity: int = 100,
        policy: Optional[Policy] = None,
        kicking: int = 50,
    ) -> TickEngine:
        home = build_team(Side.HOME, AttackDirection.RIGHT, 1, kicking)
        away = build_team(Side.AWAY, AttackDirection.LEFT, 10, kicking)
        return build_engine(home, away, short_config(quarter_ticks, history_capacity), policy=policy)

    return factory
