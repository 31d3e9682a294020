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
"""Utilities for constructing team rosters from serialized data sources.

The helpers translate plain dictionaries or JSON payloads into the
:class:`~footyline.models.unit.Unit` and :class:`~footyline.models.team.Team`
objects the engine understands. Missing attribute ratings default to 50 so
incomplete datasets stay usable; unknown roles or sides raise ``ValueError``.

The expected document looks like::

    {
      "home": {"id": 1, "name": "Hawks", "attackDirection": "right",
               "units": [{"id": 1, "name": "...", "role": "FB",
                          "attributes": {"kicking": 70, ...}}, ...]},
      "away": {...}
    }
"""
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from footyline.engine.config import ENGINE_CONFIG, StaminaConfig
from footyline.engine.grid import AttackDirection, Side
from footyline.models.team import Team
from footyline.models.unit import FieldRole, Unit, UnitAttributes
from footyline.utils.generator import stamina_capacity_for

_DEFAULT_DIRECTIONS = {Side.HOME: AttackDirection.RIGHT, Side.AWAY: AttackDirection.LEFT}


def _parse_role(value: str) -> FieldRole:
    """Resolve a role code (``"FB"``) or enum name (``"FULL_BACK"``).

    Parameters
    ----------
    value : str
        Role as written in the payload.

    Returns
    -------
    FieldRole
        Matching role.

    Raises
    ------
    ValueError
        If the role is unknown.
    """
    text = str(value).strip().upper()
    for role in FieldRole:
        if text in (role.value, role.name):
            return role
    known = ", ".join(role.value for role in FieldRole)
    raise ValueError(f"Unknown role '{value}'. Known roles: {known}")


def unit_from_dict(
    d: Dict[str, Any],
    side: Side,
    direction: AttackDirection,
    config: Optional[StaminaConfig] = None,
) -> Unit:
    """Build a ``Unit`` from a plain dictionary payload.

    Parameters
    ----------
    d : Dict[str, Any]
        Mapping with ``id``, ``name``, ``role`` and an ``attributes`` mapping.
    side : Side
        Roster the unit belongs to.
    direction : AttackDirection
        Attack direction of the unit's team.
    config : StaminaConfig | None, optional
        Capacity and exhaustion tuning.

    Returns
    -------
    Unit
        A unit with default ratings for any missing attribute.
    """
    cfg = config or ENGINE_CONFIG.stamina
    attrs = d.get("attributes", {}) or {}
    attributes = UnitAttributes(
        kicking=attrs.get("kicking", 50),
        handball=attrs.get("handball", 50),
        marking=attrs.get("marking", 50),
        endurance=attrs.get("endurance", 50),
    )
    unit_id = d.get("id", 0)
    return Unit(
        unit_id=unit_id,
        name=d.get("name", f"unit_{unit_id}"),
        side=side,
        role=_parse_role(d.get("role", "C")),
        attack_direction=direction,
        attributes=attributes,
        stamina_capacity=d.get("staminaCapacity", stamina_capacity_for(attributes.endurance, cfg)),
        exhaustion_threshold=cfg.exhaustion_threshold,
    )


def team_from_dict(d: Dict[str, Any], side: Side, config: Optional[StaminaConfig] = None) -> Team:
    """Build a ``Team`` from one section of a roster document.

    Parameters
    ----------
    d : Dict[str, Any]
        Team mapping with ``id``, ``name``, optional ``attackDirection`` and ``units``.
    side : Side
        Roster side of the section.
    config : StaminaConfig | None, optional
        Capacity and exhaustion tuning.

    Returns
    -------
    Team
        Validated nine-unit team.
    """
    direction_text = d.get("attackDirection")
    direction = AttackDirection[direction_text.upper()] if direction_text else _DEFAULT_DIRECTIONS[side]
    units = [unit_from_dict(entry, side, direction, config) for entry in d.get("units", [])]
    return Team(
        team_id=d.get("id", 0),
        name=d.get("name", f"Team_{side.value}"),
        side=side,
        attack_direction=direction,
        units=units,
    )


def load_teams_from_json(path: str, config: Optional[StaminaConfig] = None) -> Tuple[Team, Team]:
    """Load home and away teams from a roster document.

    Parameters
    ----------
    path : str
        Filesystem path to the JSON document.
    config : StaminaConfig | None, optional
        Capacity and exhaustion tuning.

    Returns
    -------
    tuple[Team, Team]
        ``(home, away)`` ready for simulation.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    KeyError
        Raised when the payload is missing the ``home`` or ``away`` section.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Roster JSON not found: {path}")

    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)

    home = team_from_dict(data["home"], Side.HOME, config)
    away = team_from_dict(data["away"], Side.AWAY, config)
    return home, away
