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
"""Decision policies and their registry."""
from __future__ import annotations

from typing import Dict, Optional, Type

from footyline.engine.config import PolicyConfig

from .base import STAND, Action, ActionKind, FieldView, Policy, StandPolicy
from .chase import ChaseBallPolicy

POLICY_CLASSES: Dict[str, Type[Policy]] = {
    ChaseBallPolicy.name: ChaseBallPolicy,
    StandPolicy.name: StandPolicy,
}


def create_policy(name: str = "chase", config: Optional[PolicyConfig] = None) -> Policy:
    """Instantiate a registered policy by name.

    Parameters
    ----------
    name : str, optional
        Registry key, ``"chase"`` by default.
    config : PolicyConfig | None, optional
        Tuning passed to policies that accept it.

    Returns
    -------
    Policy
        New policy instance.

    Raises
    ------
    ValueError
        If ``name`` is not registered.
    """
    try:
        policy_cls = POLICY_CLASSES[name]
    except KeyError as exc:
        known = ", ".join(sorted(POLICY_CLASSES))
        raise ValueError(f"Unknown policy '{name}'. Known policies: {known}") from exc
    if policy_cls is ChaseBallPolicy:
        return ChaseBallPolicy(config)
    return policy_cls()


__all__ = [
    "STAND",
    "Action",
    "ActionKind",
    "FieldView",
    "Policy",
    "StandPolicy",
    "ChaseBallPolicy",
    "POLICY_CLASSES",
    "create_policy",
]
