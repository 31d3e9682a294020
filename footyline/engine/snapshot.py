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
"""Typed whole-match snapshots and their fixed JSON schema.

A :class:`Snapshot` is what the scheduler pushes onto its rewind history at
the start of every tick. :meth:`Snapshot.to_dict` produces plain JSON-ready
data with camelCase keys so captures can be written to disk or inspected by
external tools; :meth:`Snapshot.from_dict` reads the same layout back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from footyline.models.team import TeamSnapshot
from footyline.models.unit import UnitActivity, UnitSnapshot

from .ball import BallSnapshot, BallState, DisposalKind, FlightData
from .grid import GridPosition, Side
from .match_clock import ClockSnapshot, MatchPhase, MatchResult, QuarterScore, StoppageKind

NO_OWNER = -1


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Complete observable state of a match at the start of a tick.

    Parameters
    ----------
    tick : int
        Tick counter at capture time.
    ball : BallSnapshot
        Ball capture, including flight data.
    teams : Tuple[TeamSnapshot, ...]
        Home then away team captures.
    clock : ClockSnapshot
        Match clock capture.
    """

    tick: int
    ball: BallSnapshot
    teams: Tuple[TeamSnapshot, ...]
    clock: ClockSnapshot

    def team(self, side: Side) -> Optional[TeamSnapshot]:
        """Return the capture for ``side``.

        Parameters
        ----------
        side : Side
            Roster side to look up.

        Returns
        -------
        TeamSnapshot | None
            Matching capture or ``None``.
        """
        return next((team for team in self.teams if team.side is side), None)

    def unit(self, unit_id: int) -> Optional[UnitSnapshot]:
        """Return the capture of one unit from either team.

        Parameters
        ----------
        unit_id : int
            Identifier to find.

        Returns
        -------
        UnitSnapshot | None
            Matching capture or ``None``.
        """
        for team in self.teams:
            for unit in team.units:
                if unit.unit_id == unit_id:
                    return unit
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the fixed snapshot schema.

        Returns
        -------
        Dict[str, Any]
            JSON-ready mapping.
        """
        return {
            "tick": self.tick,
            "ball": _ball_to_dict(self.ball),
            "teams": [_team_to_dict(team) for team in self.teams],
            "clock": _clock_to_dict(self.clock),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        """Rebuild a snapshot from :meth:`to_dict` output.

        Parameters
        ----------
        data : Dict[str, Any]
            Mapping in the fixed snapshot schema.

        Returns
        -------
        Snapshot
            Equivalent typed capture.

        Raises
        ------
        KeyError
            If a required key is missing.
        ValueError
            If an enum value is unknown.
        """
        return cls(
            tick=int(data["tick"]),
            ball=_ball_from_dict(data["ball"]),
            teams=tuple(_team_from_dict(team) for team in data["teams"]),
            clock=_clock_from_dict(data["clock"]),
        )


def _pos_to_dict(pos: Optional[GridPosition]) -> Optional[Dict[str, int]]:
    """Convert a position to ``{"x", "y"}``.

    Parameters
    ----------
    pos : GridPosition | None
        Position to convert.

    Returns
    -------
    Dict[str, int] | None
        Mapping, or ``None`` for a missing position.
    """
    if pos is None:
        return None
    return {"x": pos.x, "y": pos.y}


def _pos_from_dict(data: Optional[Dict[str, int]]) -> Optional[GridPosition]:
    """Read a position written by :func:`_pos_to_dict`.

    Parameters
    ----------
    data : Dict[str, int] | None
        Mapping with ``x`` and ``y``.

    Returns
    -------
    GridPosition | None
        Parsed position, or ``None``.
    """
    if data is None:
        return None
    return GridPosition(int(data["x"]), int(data["y"]))


def _optional_id(value: Optional[int]) -> int:
    """Encode an optional identifier with :data:`NO_OWNER` for ``None``.

    Parameters
    ----------
    value : int | None
        Identifier to encode.

    Returns
    -------
    int
        The identifier or ``-1``.
    """
    return NO_OWNER if value is None else value


def _id_or_none(value: int) -> Optional[int]:
    """Decode an identifier written by :func:`_optional_id`.

    Parameters
    ----------
    value : int
        Encoded identifier.

    Returns
    -------
    int | None
        The identifier, or ``None`` for ``-1``.
    """
    return None if value == NO_OWNER else int(value)


def _ball_to_dict(ball: BallSnapshot) -> Dict[str, Any]:
    """Serialise the ball section.

    Parameters
    ----------
    ball : BallSnapshot
        Ball capture.

    Returns
    -------
    Dict[str, Any]
        Ball mapping.
    """
    flight = None
    if ball.flight is not None:
        flight = {
            "start": _pos_to_dict(ball.flight.start),
            "target": _pos_to_dict(ball.flight.target),
            "ticksElapsed": ball.flight.ticks_elapsed,
            "ticksTotal": ball.flight.ticks_total,
            "kind": ball.flight.kind.value,
            "kickerId": ball.flight.kicker_id,
            "intendedTargetId": _optional_id(ball.flight.intended_target_id),
        }
    return {
        "pos": _pos_to_dict(ball.position),
        "state": ball.state.value,
        "ownerId": _optional_id(ball.owner_id),
        "lastTouchTeam": ball.last_touch_side.value if ball.last_touch_side else None,
        "quality": ball.possession_quality,
        "flight": flight,
    }


def _ball_from_dict(data: Dict[str, Any]) -> BallSnapshot:
    """Read the ball section.

    Parameters
    ----------
    data : Dict[str, Any]
        Ball mapping.

    Returns
    -------
    BallSnapshot
        Ball capture.
    """
    flight_data = data.get("flight")
    flight = None
    if flight_data is not None:
        flight = FlightData(
            start=_pos_from_dict(flight_data["start"]),
            target=_pos_from_dict(flight_data["target"]),
            ticks_elapsed=int(flight_data["ticksElapsed"]),
            ticks_total=int(flight_data["ticksTotal"]),
            kind=DisposalKind(flight_data["kind"]),
            kicker_id=int(flight_data["kickerId"]),
            intended_target_id=_id_or_none(flight_data.get("intendedTargetId", NO_OWNER)),
        )
    last_touch = data.get("lastTouchTeam")
    return BallSnapshot(
        position=_pos_from_dict(data["pos"]),
        state=BallState(data["state"]),
        owner_id=_id_or_none(data["ownerId"]),
        last_touch_side=Side(last_touch) if last_touch is not None else None,
        possession_quality=float(data.get("quality", 0.0)),
        flight=flight,
    )


def _team_to_dict(team: TeamSnapshot) -> Dict[str, Any]:
    """Serialise one team section.

    Parameters
    ----------
    team : TeamSnapshot
        Team capture.

    Returns
    -------
    Dict[str, Any]
        Team mapping with its units.
    """
    return {
        "side": team.side.value,
        "goals": team.goals,
        "behinds": team.behinds,
        "units": [
            {
                "id": unit.unit_id,
                "pos": _pos_to_dict(unit.position),
                "stamina": unit.stamina,
                "state": unit.activity.value,
                "hasBall": unit.has_ball,
                "quality": unit.possession_quality,
                "target": _pos_to_dict(unit.target),
                "blockedTicks": unit.blocked_ticks,
            }
            for unit in team.units
        ],
    }


def _team_from_dict(data: Dict[str, Any]) -> TeamSnapshot:
    """Read one team section.

    Parameters
    ----------
    data : Dict[str, Any]
        Team mapping.

    Returns
    -------
    TeamSnapshot
        Team capture.
    """
    units = tuple(
        UnitSnapshot(
            unit_id=int(unit["id"]),
            position=_pos_from_dict(unit["pos"]),
            stamina=int(unit["stamina"]),
            activity=UnitActivity(unit["state"]),
            has_ball=bool(unit["hasBall"]),
            possession_quality=float(unit.get("quality", 0.0)),
            target=_pos_from_dict(unit.get("target")),
            blocked_ticks=int(unit.get("blockedTicks", 0)),
        )
        for unit in data["units"]
    )
    return TeamSnapshot(Side(data["side"]), int(data["goals"]), int(data["behinds"]), units)


def _clock_to_dict(clock: ClockSnapshot) -> Dict[str, Any]:
    """Serialise the clock section.

    Parameters
    ----------
    clock : ClockSnapshot
        Clock capture.

    Returns
    -------
    Dict[str, Any]
        Clock mapping.
    """
    result = None
    if clock.result is not None:
        result = {
            "winner": clock.result.winner.value if clock.result.winner else None,
            "homeTotal": clock.result.home_total,
            "awayTotal": clock.result.away_total,
        }
    return {
        "phase": clock.phase.value,
        "quarterTicksRemaining": clock.quarter_ticks_remaining,
        "clockRunning": clock.clock_running,
        "stoppage": clock.stoppage.value if clock.stoppage else None,
        "stoppageTicksRemaining": clock.stoppage_ticks_remaining,
        "quarterScores": [
            {
                "quarter": score.quarter,
                "homeGoals": score.home_goals,
                "homeBehinds": score.home_behinds,
                "awayGoals": score.away_goals,
                "awayBehinds": score.away_behinds,
            }
            for score in clock.quarter_scores
        ],
        "result": result,
        "ballUps": clock.ball_ups,
    }


def _clock_from_dict(data: Dict[str, Any]) -> ClockSnapshot:
    """Read the clock section.

    Parameters
    ----------
    data : Dict[str, Any]
        Clock mapping.

    Returns
    -------
    ClockSnapshot
        Clock capture.
    """
    result_data = data.get("result")
    result = None
    if result_data is not None:
        winner = result_data.get("winner")
        result = MatchResult(
            Side(winner) if winner is not None else None,
            int(result_data["homeTotal"]),
            int(result_data["awayTotal"]),
        )
    stoppage = data.get("stoppage")
    return ClockSnapshot(
        phase=MatchPhase(data["phase"]),
        quarter_ticks_remaining=int(data["quarterTicksRemaining"]),
        clock_running=bool(data["clockRunning"]),
        stoppage=StoppageKind(stoppage) if stoppage is not None else None,
        stoppage_ticks_remaining=int(data["stoppageTicksRemaining"]),
        quarter_scores=tuple(
            QuarterScore(
                quarter=int(score["quarter"]),
                home_goals=int(score["homeGoals"]),
                home_behinds=int(score["homeBehinds"]),
                away_goals=int(score["awayGoals"]),
                away_behinds=int(score["awayBehinds"]),
            )
            for score in data.get("quarterScores", [])
        ),
        result=result,
        ball_ups=int(data.get("ballUps", 0)),
    )
