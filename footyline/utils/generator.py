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
"""Utilities that synthesise test units and teams for quick simulations.

This is the only place randomness enters the project. Pass a seeded
``random.Random`` to get the same rosters (and therefore the same match)
every time.
"""
import random
from typing import List, Optional

from footyline.engine.config import ENGINE_CONFIG, StaminaConfig
from footyline.engine.grid import AttackDirection, Side
from footyline.models.team import Team
from footyline.models.unit import FieldRole, Unit, UnitAttributes

ROLE_IMPORTANT_ATTRIBUTES = {
    FieldRole.FULL_BACK: ["marking", "endurance"],
    FieldRole.BACK_POCKET: ["marking", "handball"],
    FieldRole.HALF_BACK: ["kicking", "marking"],
    FieldRole.WING: ["endurance", "handball"],
    FieldRole.CENTRE: ["handball", "kicking", "endurance"],
    FieldRole.RUCK: ["marking", "endurance"],
    FieldRole.HALF_FORWARD: ["kicking", "handball"],
    FieldRole.FORWARD_POCKET: ["kicking", "handball"],
    FieldRole.FULL_FORWARD: ["kicking", "marking"],
}

FIRST_NAMES = ["Jack", "Tom", "Sam", "Josh", "Liam", "Harry", "Max", "Zac", "Riley", "Kane"]
LAST_NAMES = ["Walsh", "Murphy", "Kelly", "Ryan", "Doyle", "Burke", "Nolan", "Quinn", "Healy"]
TEAM_PREFIXES = ["Hawks", "Magpies", "Swans", "Lions", "Tigers", "Crows", "Bombers"]
TEAM_CITIES = ["Ballarat", "Bendigo", "Geelong", "Hobart", "Launceston", "Mildura", "Wagga"]


def stamina_capacity_for(endurance: int, config: Optional[StaminaConfig] = None) -> int:
    """Return the stamina capacity implied by an endurance rating.

    Parameters
    ----------
    endurance : int
        Endurance rating, 1 to 100.
    config : StaminaConfig | None, optional
        Capacity tuning; the engine default when omitted.

    Returns
    -------
    int
        Capacity, never below one.
    """
    cfg = config or ENGINE_CONFIG.stamina
    return max(1, round(cfg.base_capacity + endurance * cfg.endurance_scale))


def generate_random_unit(
    unit_id: int,
    side: Side,
    direction: AttackDirection,
    role: FieldRole,
    rng: random.Random,
    name: Optional[str] = None,
    config: Optional[StaminaConfig] = None,
) -> Unit:
    """Generate a unit with random attributes weighted towards its role.

    Parameters
    ----------
    unit_id : int
        Unique identifier assigned to the created unit.
    side : Side
        Roster the unit belongs to.
    direction : AttackDirection
        Attack direction of the unit's team.
    role : FieldRole
        Positional role influencing attribute weighting.
    rng : random.Random
        Source of randomness.
    name : Optional[str]
        Display name; a pseudo-random name is chosen when omitted.
    config : StaminaConfig | None, optional
        Capacity and exhaustion tuning.

    Returns
    -------
    Unit
        A newly constructed unit with stochastic attribute scores.
    """
    cfg = config or ENGINE_CONFIG.stamina
    if name is None:
        name = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"

    base_range = (40, 80)
    boost_range = (60, 95)
    important = ROLE_IMPORTANT_ATTRIBUTES.get(role, [])

    def get_attribute(attr: str) -> int:
        """Draw one rating, boosted for the role's important attributes.

        Parameters
        ----------
        attr : str
            Attribute name.

        Returns
        -------
        int
            Rating between 40 and 95.
        """
        if attr in important:
            return rng.randint(*boost_range)
        return rng.randint(*base_range)

    attributes = UnitAttributes(
        kicking=get_attribute("kicking"),
        handball=get_attribute("handball"),
        marking=get_attribute("marking"),
        endurance=get_attribute("endurance"),
    )
    return Unit(
        unit_id=unit_id,
        name=name,
        side=side,
        role=role,
        attack_direction=direction,
        attributes=attributes,
        stamina_capacity=stamina_capacity_for(attributes.endurance, cfg),
        exhaustion_threshold=cfg.exhaustion_threshold,
    )


def generate_team(
    team_id: int,
    side: Side,
    direction: AttackDirection,
    rng: Optional[random.Random] = None,
    name: Optional[str] = None,
    starting_unit_id: int = 1,
    config: Optional[StaminaConfig] = None,
) -> Team:
    """Generate a nine-unit team, one unit per role.

    Parameters
    ----------
    team_id : int
        Unique identifier assigned to the generated team.
    side : Side
        Home or away.
    direction : AttackDirection
        Direction the team attacks.
    rng : random.Random | None, optional
        Source of randomness; an unseeded generator when omitted.
    name : Optional[str]
        Team name; synthesised when ``None``.
    starting_unit_id : int
        Identifier for the first generated unit; increments for each additional unit.
    config : StaminaConfig | None, optional
        Capacity and exhaustion tuning.

    Returns
    -------
    Team
        Team with a unit for every role, in role order.
    """
    rng = rng or random.Random()
    if name is None:
        name = f"{rng.choice(TEAM_CITIES)} {rng.choice(TEAM_PREFIXES)}"

    units: List[Unit] = []
    unit_id = starting_unit_id
    for role in FieldRole:
        units.append(generate_random_unit(unit_id, side, direction, role, rng, config=config))
        unit_id += 1
    return Team(team_id=team_id, name=name, side=side, attack_direction=direction, units=units)


def generate_match_teams(seed: Optional[int] = None, config: Optional[StaminaConfig] = None) -> tuple[Team, Team]:
    """Generate a home team attacking right and an away team attacking left.

    Parameters
    ----------
    seed : int | None, optional
        Seed for reproducible rosters.
    config : StaminaConfig | None, optional
        Capacity and exhaustion tuning.

    Returns
    -------
    tuple[Team, Team]
        ``(home, away)`` with unit ids 1-9 and 10-18.
    """
    rng = random.Random(seed)
    home = generate_team(1, Side.HOME, AttackDirection.RIGHT, rng, starting_unit_id=1, config=config)
    away = generate_team(2, Side.AWAY, AttackDirection.LEFT, rng, starting_unit_id=10, config=config)
    return home, away
