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
"""Match-phase director: quarters, breaks and stoppages.

The clock plays the part of the umpire's timekeeper. It walks a strictly
ordered phase sequence, freezes the quarter clock during stoppages and
restarts play with a centre ball-up whenever a stoppage ends.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from footyline.models.team import Team

from .ball import Ball, ScoreType, publish_ball_transition
from .config import ClockConfig
from .events import ErrorKind, EventBus, EventType, TransitionEvent
from .grid import AttackDirection, GridPosition, Side


class MatchPhase(Enum):
    """Phases of a match in the order they are played."""

    PRE_MATCH = "pre_match"
    QUARTER_1 = "quarter_1"
    QUARTER_BREAK_1 = "quarter_break_1"
    QUARTER_2 = "quarter_2"
    HALF_TIME = "half_time"
    QUARTER_3 = "quarter_3"
    QUARTER_BREAK_3 = "quarter_break_3"
    QUARTER_4 = "quarter_4"
    POST_MATCH = "post_match"

    @property
    def is_quarter(self) -> bool:
        """Return ``True`` for the four playing phases."""
        return self in _QUARTER_NUMBERS

    @property
    def is_break(self) -> bool:
        """Return ``True`` for quarter breaks and half time."""
        return self in (MatchPhase.QUARTER_BREAK_1, MatchPhase.HALF_TIME, MatchPhase.QUARTER_BREAK_3)


_QUARTER_NUMBERS: Dict[MatchPhase, int] = {
    MatchPhase.QUARTER_1: 1,
    MatchPhase.QUARTER_2: 2,
    MatchPhase.QUARTER_3: 3,
    MatchPhase.QUARTER_4: 4,
}

_NEXT_PHASE: Dict[MatchPhase, MatchPhase] = {
    MatchPhase.PRE_MATCH: MatchPhase.QUARTER_1,
    MatchPhase.QUARTER_1: MatchPhase.QUARTER_BREAK_1,
    MatchPhase.QUARTER_BREAK_1: MatchPhase.QUARTER_2,
    MatchPhase.QUARTER_2: MatchPhase.HALF_TIME,
    MatchPhase.HALF_TIME: MatchPhase.QUARTER_3,
    MatchPhase.QUARTER_3: MatchPhase.QUARTER_BREAK_3,
    MatchPhase.QUARTER_BREAK_3: MatchPhase.QUARTER_4,
    MatchPhase.QUARTER_4: MatchPhase.POST_MATCH,
}


class StoppageKind(Enum):
    """Reasons the quarter clock can be frozen."""

    GOAL = "goal"
    BEHIND = "behind"
    OUT_OF_BOUNDS = "out_of_bounds"
    QUARTER_BREAK = "quarter_break"
    HALF_TIME = "half_time"


@dataclass(frozen=True, slots=True)
class QuarterScore:
    """Score line recorded at the end of a quarter.

    Parameters
    ----------
    quarter : int
        Quarter number, 1 to 4.
    home_goals : int
        Home goals at the siren.
    home_behinds : int
        Home behinds at the siren.
    away_goals : int
        Away goals at the siren.
    away_behinds : int
        Away behinds at the siren.
    """

    quarter: int
    home_goals: int
    home_behinds: int
    away_goals: int
    away_behinds: int

    @property
    def home_total(self) -> int:
        """Return the home points total."""
        return self.home_goals * ScoreType.GOAL.value + self.home_behinds * ScoreType.BEHIND.value

    @property
    def away_total(self) -> int:
        """Return the away points total."""
        return self.away_goals * ScoreType.GOAL.value + self.away_behinds * ScoreType.BEHIND.value


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Final result.

    Parameters
    ----------
    winner : Side | None
        Winning side, ``None`` for a draw.
    home_total : int
        Home points.
    away_total : int
        Away points.
    """

    winner: Optional[Side]
    home_total: int
    away_total: int

    @property
    def is_draw(self) -> bool:
        """Return ``True`` when the totals are level."""
        return self.winner is None


@dataclass(frozen=True, slots=True)
class ClockSnapshot:
    """Immutable capture of the match clock.

    Parameters
    ----------
    phase : MatchPhase
        Current phase.
    quarter_ticks_remaining : int
        Ticks left in the current quarter.
    clock_running : bool
        Whether the quarter clock is counting down.
    stoppage : StoppageKind | None
        Active stoppage, if any.
    stoppage_ticks_remaining : int
        Countdown of the active stoppage.
    quarter_scores : Tuple[QuarterScore, ...]
        Score lines of completed quarters.
    result : MatchResult | None
        Final result once the match is over.
    ball_ups : int, default=0
        Centre ball-ups taken so far; sets which side the next bounce favours.
    """

    phase: MatchPhase
    quarter_ticks_remaining: int
    clock_running: bool
    stoppage: Optional[StoppageKind]
    stoppage_ticks_remaining: int
    quarter_scores: Tuple[QuarterScore, ...]
    result: Optional[MatchResult]
    ball_ups: int = 0


class MatchClock:
    """Drive the phase sequence and stoppages of one match.

    Parameters
    ----------
    home : Team
        Home roster, read for score lines and cleared of possession on restarts.
    away : Team
        Away roster.
    ball : Ball
        Ball re-spotted at centre when play restarts.
    bus : EventBus
        Notification sink for phase, quarter and ball events.
    config : ClockConfig
        Quarter length and stoppage durations.
    """

    def __init__(self, home: Team, away: Team, ball: Ball, bus: EventBus, config: ClockConfig) -> None:
        """Create a clock waiting in the pre-match phase.

        Parameters
        ----------
        home : Team
            Home roster.
        away : Team
            Away roster.
        ball : Ball
            Match ball.
        bus : EventBus
            Notification sink.
        config : ClockConfig
            Quarter length and stoppage durations.
        """
        self.home = home
        self.away = away
        self.ball = ball
        self.bus = bus
        self.config = config
        self.phase = MatchPhase.PRE_MATCH
        self.quarter_ticks_remaining = config.quarter_ticks
        self.clock_running = False
        self.stoppage: Optional[StoppageKind] = None
        self.stoppage_ticks_remaining = 0
        self.quarter_scores: List[QuarterScore] = []
        self.result: Optional[MatchResult] = None
        self.ball_ups = 0

    @property
    def in_stoppage(self) -> bool:
        """Return ``True`` while a stoppage is counting down."""
        return self.stoppage is not None

    @property
    def is_finished(self) -> bool:
        """Return ``True`` once the final siren has gone."""
        return self.phase is MatchPhase.POST_MATCH

    @property
    def quarter(self) -> int:
        """Return the current quarter number, ``0`` outside a quarter."""
        return _QUARTER_NUMBERS.get(self.phase, 0)

    def reset(self) -> None:
        """Return to the pre-match phase with a full quarter clock."""
        self.phase = MatchPhase.PRE_MATCH
        self.quarter_ticks_remaining = self.config.quarter_ticks
        self.clock_running = False
        self.stoppage = None
        self.stoppage_ticks_remaining = 0
        self.quarter_scores = []
        self.result = None
        self.ball_ups = 0

    def transition_to(self, phase: MatchPhase) -> TransitionEvent:
        """Move to ``phase`` if it is the next phase in the sequence.

        Parameters
        ----------
        phase : MatchPhase
            Requested phase.

        Returns
        -------
        TransitionEvent
            Accepted change or a rejection with the phase unchanged.
        """
        expected = _NEXT_PHASE.get(self.phase)
        if phase is not expected:
            return TransitionEvent.rejected(
                "match_phase",
                self.phase,
                ErrorKind.INVALID_TRANSITION,
                f"cannot move from {self.phase.name} to {phase.name}",
            )
        previous = self.phase
        self.phase = phase
        return TransitionEvent("match_phase", previous, phase)

    def _advance_phase(self) -> TransitionEvent:
        """Move to the next phase and publish the change.

        Returns
        -------
        TransitionEvent
            Transition record returned by :meth:`transition_to`.
        """
        transition = self.transition_to(_NEXT_PHASE[self.phase])
        self.bus.emit_transition(EventType.MATCH_PHASE_CHANGED, transition)
        return transition

    # --- tick --------------------------------------------------------------------------
    def on_tick(self) -> None:
        """Advance the clock by one tick.

        A pre-match clock opens the first quarter. An active stoppage counts
        down and, on expiry, either starts the next quarter (after a break) or
        resumes the current one. Otherwise a running quarter clock counts down
        and ends the quarter at zero.
        """
        if self.phase is MatchPhase.PRE_MATCH:
            self._advance_phase()
            self._start_quarter()
            return
        if self.phase is MatchPhase.POST_MATCH:
            return
        if self.stoppage is not None:
            self.stoppage_ticks_remaining -= 1
            if self.stoppage_ticks_remaining <= 0:
                self._end_stoppage()
            return
        if self.phase.is_quarter and self.clock_running:
            self.quarter_ticks_remaining -= 1
            if self.quarter_ticks_remaining <= 0:
                self._end_quarter()

    # --- stoppages ---------------------------------------------------------------------
    def start_stoppage(self, kind: StoppageKind, ticks: int) -> None:
        """Freeze the quarter clock for ``ticks`` ticks.

        Parameters
        ----------
        kind : StoppageKind
            Reason for the stoppage.
        ticks : int
            Stoppage length; at least one tick is always observed.
        """
        self.stoppage = kind
        self.stoppage_ticks_remaining = max(1, ticks)
        self.clock_running = False

    def on_score_registered(self, score_type: ScoreType) -> None:
        """Start the stoppage that follows a score.

        Parameters
        ----------
        score_type : ScoreType
            Goal or behind; goals stop play for longer.
        """
        if not self.phase.is_quarter:
            return
        if score_type is ScoreType.GOAL:
            self.start_stoppage(StoppageKind.GOAL, self.config.goal_stoppage_ticks)
        else:
            self.start_stoppage(StoppageKind.BEHIND, self.config.behind_stoppage_ticks)

    def on_ball_out_of_bounds(self) -> None:
        """Start the short stoppage that follows the ball leaving the field."""
        if not self.phase.is_quarter:
            return
        self.start_stoppage(StoppageKind.OUT_OF_BOUNDS, self.config.out_of_bounds_stoppage_ticks)

    def _end_stoppage(self) -> None:
        """Clear the stoppage and restart play."""
        self.stoppage = None
        self.stoppage_ticks_remaining = 0
        if self.phase.is_break:
            self._advance_phase()
            self._start_quarter()
            return
        self.clock_running = True
        self._restart_play()

    # --- quarters ----------------------------------------------------------------------
    def _start_quarter(self) -> None:
        """Reset the quarter clock and bounce the ball at centre."""
        self.quarter_ticks_remaining = self.config.quarter_ticks
        self.clock_running = True
        self.bus.emit(EventType.QUARTER_STARTED, f"Quarter {self.quarter} started", quarter=self.quarter)
        self._restart_play()

    def _end_quarter(self) -> None:
        """Record the quarter's score line and move to the following break."""
        score = QuarterScore(
            quarter=self.quarter,
            home_goals=self.home.goals,
            home_behinds=self.home.behinds,
            away_goals=self.away.goals,
            away_behinds=self.away.behinds,
        )
        self.quarter_scores.append(score)
        self.clock_running = False
        self.bus.emit(
            EventType.QUARTER_ENDED,
            f"Quarter {score.quarter} ended: {self.home.score_line()} to {self.away.score_line()}",
            quarter=score.quarter,
            home=score.home_total,
            away=score.away_total,
        )
        self._release_ball()
        publish_ball_transition(self.bus, self.ball.reset_to_center())

        finishing = self.phase is MatchPhase.QUARTER_4
        self._advance_phase()
        if finishing:
            self.result = self.compute_result()
            publish_ball_transition(self.bus, self.ball.make_dead())
            return
        if self.phase is MatchPhase.HALF_TIME:
            self.start_stoppage(StoppageKind.HALF_TIME, self.config.half_time_ticks)
        else:
            self.start_stoppage(StoppageKind.QUARTER_BREAK, self.config.quarter_break_ticks)

    def compute_result(self) -> MatchResult:
        """Return the result implied by the current scores.

        Returns
        -------
        MatchResult
            Winner by higher total, ``None`` when level.
        """
        home_total = self.home.total_score
        away_total = self.away.total_score
        if home_total > away_total:
            winner: Optional[Side] = Side.HOME
        elif away_total > home_total:
            winner = Side.AWAY
        else:
            winner = None
        return MatchResult(winner, home_total, away_total)

    # --- ball handling -----------------------------------------------------------------
    def _release_ball(self) -> None:
        """Clear the possession flag of whoever holds the ball."""
        for team in (self.home, self.away):
            for unit in team:
                if unit.has_ball:
                    unit.lose_possession()

    def ball_up_cell(self) -> GridPosition:
        """Return where the next centre bounce comes down.

        The bounce breaks one cell off the centre towards the defensive end of
        the favoured team, which alternates home, away, home and so on.
        Formations are mirrored about the centre cell, so the break decides
        which centre reaches the ball first.

        Returns
        -------
        GridPosition
            Centre cell shifted one column towards the favoured side.
        """
        favoured = self.home if self.ball_ups % 2 == 0 else self.away
        dx = -1 if favoured.attack_direction is AttackDirection.RIGHT else 1
        centre = self.ball.centre
        cell = GridPosition(centre.x + dx, centre.y)
        return cell if self.ball.is_valid(cell) else centre

    def _restart_play(self) -> None:
        """Re-spot the ball at centre and release it with a ball-up."""
        self._release_ball()
        publish_ball_transition(self.bus, self.ball.reset_to_center())
        cell = self.ball_up_cell()
        self.ball_ups += 1
        publish_ball_transition(self.bus, self.ball.ball_up(cell))

    # --- snapshots ---------------------------------------------------------------------
    def snapshot(self) -> ClockSnapshot:
        """Capture the clock.

        Returns
        -------
        ClockSnapshot
            Frozen copy of phase, countdowns, score lines and result.
        """
        return ClockSnapshot(
            phase=self.phase,
            quarter_ticks_remaining=self.quarter_ticks_remaining,
            clock_running=self.clock_running,
            stoppage=self.stoppage,
            stoppage_ticks_remaining=self.stoppage_ticks_remaining,
            quarter_scores=tuple(self.quarter_scores),
            result=self.result,
            ball_ups=self.ball_ups,
        )

    def restore(self, snapshot: ClockSnapshot) -> None:
        """Restore every clock field from ``snapshot``.

        Parameters
        ----------
        snapshot : ClockSnapshot
            Capture previously taken from this clock.
        """
        self.phase = snapshot.phase
        self.quarter_ticks_remaining = snapshot.quarter_ticks_remaining
        self.clock_running = snapshot.clock_running
        self.stoppage = snapshot.stoppage
        self.stoppage_ticks_remaining = snapshot.stoppage_ticks_remaining
        self.quarter_scores = list(snapshot.quarter_scores)
        self.result = snapshot.result
        self.ball_ups = snapshot.ball_ups
