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
"""Central configuration for engine tuning parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(slots=True)
class GridConfig:
    """Field dimensions, zone bands and goal geometry.

    Zone bands are expressed as fractions of the field width for a team
    attacking towards increasing ``x``; the grid converts them to integer
    cell bands and mirrors them for the opposite direction.

    Parameters
    ----------
    width : int, default=32
        Number of cells along the x axis.
    height : int, default=25
        Number of cells along the y axis.
    defensive_band : Tuple[float, float], default=(0.0, 0.45)
        Fractional ``[lo, hi)`` x-band of the defensive zone.
    midfield_band : Tuple[float, float], default=(0.25, 0.75)
        Fractional ``[lo, hi)`` x-band of the midfield zone.
    forward_band : Tuple[float, float], default=(0.55, 1.0)
        Fractional ``[lo, hi)`` x-band of the forward zone.
    goal_half_span : int, default=3
        Rows either side of the centre row that count as scoring (behind posts).
    goal_centre_half_span : int, default=1
        Rows either side of the centre row that count as a goal.
    """

    width: int = 32
    height: int = 25
    defensive_band: Tuple[float, float] = (0.0, 0.45)
    midfield_band: Tuple[float, float] = (0.25, 0.75)
    forward_band: Tuple[float, float] = (0.55, 1.0)
    goal_half_span: int = 3
    goal_centre_half_span: int = 1


@dataclass(slots=True)
class BallPhysicsConfig:
    """Disposal speeds and possession qualities used by ball flight.

    Parameters
    ----------
    kick_speed : float, default=3.0
        Cells travelled per tick by a kicked ball.
    handball_speed : float, default=2.0
        Cells travelled per tick by a handball.
    clean_pickup_quality : float, default=1.0
        Possession quality awarded when a unit is standing on the landing cell.
    gather_quality : float, default=0.6
        Possession quality awarded when a chasing unit runs onto a loose ball.
    """

    kick_speed: float = 3.0
    handball_speed: float = 2.0
    clean_pickup_quality: float = 1.0
    gather_quality: float = 0.6


@dataclass(slots=True)
class StaminaConfig:
    """Stamina capacity, costs and recovery for units.

    Parameters
    ----------
    base_capacity : int, default=60
        Capacity of a unit with the lowest endurance rating.
    endurance_scale : float, default=0.4
        Extra capacity per endurance point.
    move_cost : int, default=1
        Stamina spent for every greedy step.
    kick_cost : int, default=3
        Stamina spent on a kick.
    handball_cost : int, default=1
        Stamina spent on a handball.
    idle_recovery : int, default=2
        Stamina recovered by an idle unit each tick.
    exhaustion_threshold : int, default=5
        Stamina at or below which a unit is considered spent.
    """

    base_capacity: int = 60
    endurance_scale: float = 0.4
    move_cost: int = 1
    kick_cost: int = 3
    handball_cost: int = 1
    idle_recovery: int = 2
    exhaustion_threshold: int = 5


@dataclass(slots=True)
class ClockConfig:
    """Quarter length and stoppage durations, all in ticks.

    Parameters
    ----------
    quarter_ticks : int, default=1200
        Playing ticks in each quarter.
    goal_stoppage_ticks : int, default=30
        Clock freeze after a goal.
    behind_stoppage_ticks : int, default=15
        Clock freeze after a behind.
    out_of_bounds_stoppage_ticks : int, default=8
        Clock freeze after the ball leaves the field.
    quarter_break_ticks : int, default=60
        Length of the first and third quarter breaks.
    half_time_ticks : int, default=120
        Length of the half-time break.
    """

    quarter_ticks: int = 1200
    goal_stoppage_ticks: int = 30
    behind_stoppage_ticks: int = 15
    out_of_bounds_stoppage_ticks: int = 8
    quarter_break_ticks: int = 60
    half_time_ticks: int = 120


@dataclass(slots=True)
class FormationConfig:
    """Reference slots for each role, for a team attacking right.

    Slots are fractions of ``(width - 1, height - 1)`` so the layout scales
    with the configured field; the away side mirrors the x coordinate.

    Parameters
    ----------
    slots : Dict[str, Tuple[float, float]]
        Mapping of role code to fractional ``(x, y)`` slot.
    """

    slots: Dict[str, Tuple[float, float]] = field(
        default_factory=lambda: {
            "FB": (0.10, 0.50),
            "BP": (0.15, 0.20),
            "HB": (0.30, 0.80),
            "W": (0.42, 0.10),
            "C": (0.45, 0.50),
            "R": (0.48, 0.65),
            "HF": (0.68, 0.30),
            "FP": (0.80, 0.80),
            "FF": (0.88, 0.50),
        }
    )


@dataclass(slots=True)
class PolicyConfig:
    """Tuning for the placeholder decision policy.

    Parameters
    ----------
    handball_range : int, default=3
        Manhattan radius searched for a handball receiver.
    kick_range_base : int, default=6
        Kick range of a unit with zero kicking rating.
    kick_range_per_rating : int, default=10
        Kicking rating points per extra cell of range.
    accurate_range_per_rating : int, default=15
        Kicking rating points per cell of accurate range at goal.
    settle_distance : int, default=1
        Distance from the formation slot that counts as being in position.
    """

    handball_range: int = 3
    kick_range_base: int = 6
    kick_range_per_rating: int = 10
    accurate_range_per_rating: int = 15
    settle_distance: int = 1


@dataclass(slots=True)
class SimulationConfig:
    """Scheduler history and pacing controls.

    Parameters
    ----------
    history_capacity : int, default=100
        Maximum number of snapshots kept for rewinding.
    base_tick_seconds : float, default=0.1
        Real seconds per tick at a speed multiplier of 1.0.
    default_speed : float, default=1.0
        Speed multiplier applied when the engine is built.
    min_speed : float, default=0.25
        Lowest accepted speed multiplier.
    max_speed : float, default=8.0
        Highest accepted speed multiplier.
    max_blocked_ticks : int, default=3
        Consecutive blocked steps after which a moving unit gives up.
    """

    history_capacity: int = 100
    base_tick_seconds: float = 0.1
    default_speed: float = 1.0
    min_speed: float = 0.25
    max_speed: float = 8.0
    max_blocked_ticks: int = 3


@dataclass(slots=True)
class EngineConfig:
    """Top-level container for all engine tuning structures.

    Parameters
    ----------
    grid : GridConfig, default=GridConfig()
        Field geometry configuration.
    ball_physics : BallPhysicsConfig, default=BallPhysicsConfig()
        Ball flight and possession tuning.
    stamina : StaminaConfig, default=StaminaConfig()
        Unit stamina rules.
    clock : ClockConfig, default=ClockConfig()
        Quarter and stoppage timings.
    formation : FormationConfig, default=FormationConfig()
        Formation slot references.
    policy : PolicyConfig, default=PolicyConfig()
        Placeholder policy tuning.
    simulation : SimulationConfig, default=SimulationConfig()
        Scheduler parameters.
    """

    grid: GridConfig = field(default_factory=GridConfig)
    ball_physics: BallPhysicsConfig = field(default_factory=BallPhysicsConfig)
    stamina: StaminaConfig = field(default_factory=StaminaConfig)
    clock: ClockConfig = field(default_factory=ClockConfig)
    formation: FormationConfig = field(default_factory=FormationConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)


ENGINE_CONFIG = EngineConfig()
"""Default configuration used when callers do not supply their own."""
