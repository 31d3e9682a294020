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
"""Composition root that builds and wires a match engine."""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from footyline.models.team import Team

from .ball import Ball
from .config import ENGINE_CONFIG, EngineConfig
from .events import EventBus
from .grid import SpatialGrid
from .match_clock import MatchClock
from .policy import Policy, create_policy
from .tick_engine import TickEngine

if TYPE_CHECKING:
    from footyline.utils.debug import MatchDebugger


def build_engine(
    home: Team,
    away: Team,
    config: EngineConfig = ENGINE_CONFIG,
    policy: Optional[Policy] = None,
    debugger: Optional["MatchDebugger"] = None,
) -> TickEngine:
    """Construct every match service and wire them together.

    Parameters
    ----------
    home : Team
        Home roster.
    away : Team
        Away roster.
    config : EngineConfig, optional
        Engine configuration, :data:`ENGINE_CONFIG` by default.
    policy : Policy | None, optional
        Decision policy; the chase policy when omitted.
    debugger : MatchDebugger | None, optional
        Log sink subscribed to the bus and handed to the engine.

    Returns
    -------
    TickEngine
        Engine in the ``STOPPED`` state.
    """
    grid = SpatialGrid(config.grid)
    ball = Ball(config.grid, config.ball_physics)
    bus = EventBus()
    clock = MatchClock(home, away, ball, bus, config.clock)
    if policy is None:
        policy = create_policy("chase", config.policy)
    if debugger is not None:
        debugger.attach(bus)
    return TickEngine(home, away, grid, ball, clock, bus, policy, config, debugger)
