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
"""Tick scheduler with a run-state machine and a bounded rewind history.

Each tick is one sequential pass through a fixed pipeline:

1. capture a :class:`~footyline.engine.snapshot.Snapshot` onto the history;
2. increment the tick counter;
3. advance a ball in flight, landing it and running the auto-pickup;
4. process every unit once, home roster first;
5. check the scoring zones;
6. advance the match clock.

Nothing in the pipeline draws random numbers, so the same starting state and
the same command sequence always reproduce the same snapshots.
"""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import TYPE_CHECKING, Deque, Dict, FrozenSet, Iterator, List, Optional

from footyline.models.team import Team
from footyline.models.unit import Unit, UnitActivity

from .ball import Ball, BallSnapshot, BallState, DisposalKind, ScoreCheck, ScoreType, publish_ball_transition
from .config import EngineConfig
from .events import ErrorKind, EventBus, EventType, TransitionEvent
from .grid import AttackDirection, GridPosition, SpatialGrid
from .match_clock import MatchClock
from .policy import Action, ActionKind, FieldView, Policy
from .snapshot import Snapshot

if TYPE_CHECKING:
    from footyline.utils.debug import MatchDebugger


class RunState(Enum):
    """Scheduler run states."""

    STOPPED = "stopped"
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"


class Command(Enum):
    """Control commands accepted by the scheduler."""

    READY = "ready"
    START = "start"
    PAUSE = "pause"
    STEP = "step"
    BACK = "back"
    RESET = "reset"


_ALL_STATES: FrozenSet[RunState] = frozenset(RunState)

# Run states each command may be issued from.
_COMMAND_SOURCES: Dict[Command, FrozenSet[RunState]] = {
    Command.READY: frozenset({RunState.STOPPED}),
    Command.START: frozenset({RunState.READY, RunState.PAUSED}),
    Command.PAUSE: frozenset({RunState.RUNNING}),
    Command.STEP: frozenset({RunState.READY, RunState.PAUSED}),
    Command.BACK: frozenset({RunState.PAUSED}),
    Command.RESET: _ALL_STATES,
}

# Legal run-state edges; reset to STOPPED is always allowed.
_RUN_TRANSITIONS: Dict[RunState, FrozenSet[RunState]] = {
    RunState.STOPPED: frozenset({RunState.READY, RunState.STOPPED}),
    RunState.READY: frozenset({RunState.RUNNING, RunState.PAUSED, RunState.STOPPED}),
    RunState.RUNNING: frozenset({RunState.PAUSED, RunState.STOPPED}),
    RunState.PAUSED: frozenset({RunState.RUNNING, RunState.PAUSED, RunState.STOPPED}),
}


class TickEngine:
    """Discrete-time scheduler that owns the match pipeline.

    Parameters
    ----------
    home : Team
        Home roster; its units are processed first every tick.
    away : Team
        Away roster.
    grid : SpatialGrid
        Occupancy map.
    ball : Ball
        Match ball.
    clock : MatchClock
        Match-phase director.
    bus : EventBus
        Notification sink.
    policy : Policy
        Decision maker for idle units.
    config : EngineConfig
        Engine configuration.
    debugger : MatchDebugger | None, optional
        Sink for per-tick ball and unit state lines.
    """

    def __init__(
        self,
        home: Team,
        away: Team,
        grid: SpatialGrid,
        ball: Ball,
        clock: MatchClock,
        bus: EventBus,
        policy: Policy,
        config: EngineConfig,
        debugger: Optional["MatchDebugger"] = None,
    ) -> None:
        """Wire the collaborators together in the stopped state.

        Parameters
        ----------
        home : Team
            Home roster.
        away : Team
            Away roster.
        grid : SpatialGrid
            Occupancy map.
        ball : Ball
            Match ball.
        clock : MatchClock
            Match-phase director.
        bus : EventBus
            Notification sink.
        policy : Policy
            Decision maker for idle units.
        config : EngineConfig
            Engine configuration.
        debugger : MatchDebugger | None, optional
            Sink for per-tick state lines.

        Raises
        ------
        ValueError
            If both rosters share a side or a unit identifier.
        """
        if home.side is away.side:
            raise ValueError("Home and away teams must be on different sides")
        self.home = home
        self.away = away
        self.grid = grid
        self.ball = ball
        self.clock = clock
        self.bus = bus
        self.policy = policy
        self.config = config
        self.debugger = debugger
        self.view = FieldView(grid, ball, home, away)

        self._units_by_id: Dict[int, Unit] = {}
        for unit in self.units():
            if unit.unit_id in self._units_by_id:
                raise ValueError(f"Duplicate unit id {unit.unit_id}")
            self._units_by_id[unit.unit_id] = unit

        self.run_state = RunState.STOPPED
        self.tick = 0
        self.history: Deque[Snapshot] = deque(maxlen=config.simulation.history_capacity)
        self.speed = config.simulation.default_speed
        self._accumulator = 0.0

    # --- lookups -----------------------------------------------------------------------
    @property
    def teams(self) -> tuple[Team, Team]:
        """Return ``(home, away)``."""
        return (self.home, self.away)

    @property
    def tick_interval(self) -> float:
        """Return real seconds per tick at the current speed."""
        return self.config.simulation.base_tick_seconds / self.speed

    @property
    def is_finished(self) -> bool:
        """Return ``True`` once the match clock has reached full time."""
        return self.clock.is_finished

    def units(self) -> Iterator[Unit]:
        """Iterate units in processing order.

        Returns
        -------
        Iterator[Unit]
            Home roster followed by away roster.
        """
        for team in self.teams:
            yield from team.units

    def unit_by_id(self, unit_id: Optional[int]) -> Optional[Unit]:
        """Resolve a unit identifier against both rosters.

        Parameters
        ----------
        unit_id : int | None
            Identifier to resolve.

        Returns
        -------
        Unit | None
            Matching unit, or ``None``.
        """
        if unit_id is None:
            return None
        return self._units_by_id.get(unit_id)

    def team_for_direction(self, direction: AttackDirection) -> Optional[Team]:
        """Return the team attacking ``direction``.

        Parameters
        ----------
        direction : AttackDirection
            Attack direction.

        Returns
        -------
        Team | None
            Matching team.
        """
        return next((team for team in self.teams if team.attack_direction is direction), None)

    # --- run-state machine -------------------------------------------------------------
    def transition_to(self, state: RunState) -> TransitionEvent:
        """Move the run-state machine to ``state`` if the edge exists.

        Parameters
        ----------
        state : RunState
            Requested state.

        Returns
        -------
        TransitionEvent
            Accepted change or rejection with the state unchanged.
        """
        if state not in _RUN_TRANSITIONS[self.run_state]:
            return TransitionEvent.rejected(
                "run_state",
                self.run_state,
                ErrorKind.INVALID_TRANSITION,
                f"cannot move from {self.run_state.name} to {state.name}",
            )
        previous = self.run_state
        self.run_state = state
        return TransitionEvent("run_state", previous, state)

    def _change_run_state(self, state: RunState) -> TransitionEvent:
        """Transition and publish the change.

        Parameters
        ----------
        state : RunState
            Requested state.

        Returns
        -------
        TransitionEvent
            Result of :meth:`transition_to`.
        """
        transition = self.transition_to(state)
        self.bus.emit_transition(EventType.RUN_STATE_CHANGED, transition)
        return transition

    def _reject(self, command: Command, detail: str) -> TransitionEvent:
        """Refuse ``command`` and publish the refusal.

        Parameters
        ----------
        command : Command
            Command being refused.
        detail : str
            Explanation for logs.

        Returns
        -------
        TransitionEvent
            Rejected transition leaving the run state unchanged.
        """
        transition = TransitionEvent.rejected("run_state", self.run_state, ErrorKind.INVALID_TRANSITION, detail)
        self.bus.emit(
            EventType.COMMAND_REJECTED,
            f"{command.value} rejected: {detail}",
            command=command.value,
            state=self.run_state.value,
            error=ErrorKind.INVALID_TRANSITION.value,
        )
        return transition

    def _admit(self, command: Command) -> Optional[TransitionEvent]:
        """Check ``command`` against the current run state.

        Parameters
        ----------
        command : Command
            Command being issued.

        Returns
        -------
        TransitionEvent | None
            Rejection, or ``None`` when the command may proceed.
        """
        if self.run_state in _COMMAND_SOURCES[command]:
            return None
        return self._reject(command, f"not allowed while {self.run_state.name}")

    def handle_command(self, command: Command) -> TransitionEvent:
        """Dispatch one of the six control commands.

        Parameters
        ----------
        command : Command
            Command to run.

        Returns
        -------
        TransitionEvent
            Run-state outcome of the command.
        """
        handlers = {
            Command.READY: self.ready,
            Command.START: self.start,
            Command.PAUSE: self.pause,
            Command.STEP: self.step,
            Command.BACK: self.back,
            Command.RESET: self.reset,
        }
        return handlers[command]()

    # --- commands ----------------------------------------------------------------------
    def ready(self) -> TransitionEvent:
        """Lay out a fresh match and move to ``READY``.

        Returns
        -------
        TransitionEvent
            Run-state outcome.
        """
        refusal = self._admit(Command.READY)
        if refusal is not None:
            return refusal
        self._lay_out_match()
        return self._change_run_state(RunState.READY)

    def start(self) -> TransitionEvent:
        """Start or resume real-time running.

        Returns
        -------
        TransitionEvent
            Run-state outcome.
        """
        refusal = self._admit(Command.START)
        if refusal is not None:
            return refusal
        self._accumulator = 0.0
        return self._change_run_state(RunState.RUNNING)

    def pause(self) -> TransitionEvent:
        """Pause real-time running.

        Returns
        -------
        TransitionEvent
            Run-state outcome.
        """
        refusal = self._admit(Command.PAUSE)
        if refusal is not None:
            return refusal
        return self._change_run_state(RunState.PAUSED)

    def step(self) -> TransitionEvent:
        """Advance exactly one tick and leave the engine paused.

        Returns
        -------
        TransitionEvent
            Run-state outcome.
        """
        refusal = self._admit(Command.STEP)
        if refusal is not None:
            return refusal
        self._run_tick()
        return self._change_run_state(RunState.PAUSED)

    def back(self) -> TransitionEvent:
        """Rewind one entry of history.

        The most recent snapshot is discarded and the match is restored from
        the snapshot beneath it, which stays on the history.

        Returns
        -------
        TransitionEvent
            Run-state outcome; rejected with fewer than two history entries.
        """
        refusal = self._admit(Command.BACK)
        if refusal is not None:
            return refusal
        if len(self.history) < 2:
            return self._reject(Command.BACK, f"needs two history entries, have {len(self.history)}")
        self.history.pop()
        self.restore_snapshot(self.history[-1])
        return self._change_run_state(RunState.PAUSED)

    def reset(self) -> TransitionEvent:
        """Discard history and return to ``STOPPED``.

        Returns
        -------
        TransitionEvent
            Run-state outcome.
        """
        self.history.clear()
        self._accumulator = 0.0
        return self._change_run_state(RunState.STOPPED)

    # --- pacing ------------------------------------------------------------------------
    def set_speed(self, multiplier: float) -> float:
        """Change how many real seconds elapse per tick.

        Parameters
        ----------
        multiplier : float
            Requested speed; clamped to the configured range.

        Returns
        -------
        float
            Speed actually applied.
        """
        sim = self.config.simulation
        self.speed = max(sim.min_speed, min(sim.max_speed, multiplier))
        return self.speed

    def advance(self, real_seconds: float) -> int:
        """Run as many whole ticks as ``real_seconds`` pays for while running.

        Parameters
        ----------
        real_seconds : float
            Wall-clock time elapsed since the last call.

        Returns
        -------
        int
            Number of ticks executed.
        """
        if self.run_state is not RunState.RUNNING:
            return 0
        self._accumulator += max(0.0, real_seconds)
        interval = self.tick_interval
        due = int(self._accumulator / interval + 1e-9)
        self._accumulator = max(0.0, self._accumulator - due * interval)
        ran = 0
        while ran < due and self.run_state is RunState.RUNNING:
            self._run_tick()
            ran += 1
        return ran

    def run_until_finished(self, max_ticks: Optional[int] = None) -> int:
        """Play headlessly until full time or ``max_ticks``.

        Parameters
        ----------
        max_ticks : int | None, optional
            Upper bound on ticks to run.

        Returns
        -------
        int
            Number of ticks executed.
        """
        if self.run_state is RunState.STOPPED:
            self.ready()
        if self.run_state is not RunState.RUNNING:
            self.start()
        ran = 0
        while self.run_state is RunState.RUNNING and not self.is_finished:
            if max_ticks is not None and ran >= max_ticks:
                break
            self._run_tick()
            ran += 1
        if self.run_state is RunState.RUNNING:
            self._change_run_state(RunState.PAUSED)
        return ran

    # --- layout ------------------------------------------------------------------------
    def formation_slot(self, unit: Unit) -> GridPosition:
        """Return ``unit``'s reference cell for the configured formation.

        Parameters
        ----------
        unit : Unit
            Unit to place.

        Returns
        -------
        GridPosition
            Slot scaled to the field. A left-attacking team mirrors it about
            the centre cell, so both sides stand level with the ball-up; the
            mirrored column is kept inside the unit's zone.
        """
        fx, fy = self.config.formation.slots.get(unit.role.value, (0.5, 0.5))
        x = round(fx * (self.grid.width - 1))
        y = round(fy * (self.grid.height - 1))
        if unit.attack_direction is AttackDirection.LEFT:
            lo, hi = self.grid.zone_band(unit.zone, unit.attack_direction)
            x = min(max(2 * self.grid.centre.x - x, lo), hi - 1)
        return self.grid.clamp(GridPosition(x, y))

    def _lay_out_match(self) -> None:
        """Reset scores, units, ball, clock and history for kick-off."""
        self.grid.clear()
        for team in self.teams:
            team.reset_score()
            for unit in team:
                unit.reset_for_match()
                slot = self.formation_slot(unit)
                if not self.grid.place(unit, slot):
                    fallback = self.grid.nearest_free_cell_in_zone(slot, unit.zone, unit.attack_direction)
                    if fallback is not None:
                        self.grid.place(unit, fallback)
                unit.home_position = unit.position
        self.ball.restore(BallSnapshot(self.ball.centre, BallState.WITH_UMPIRE, None, None, 0.0, None))
        self.clock.reset()
        self.tick = 0
        self.bus.tick = 0
        self.history.clear()
        self._accumulator = 0.0

    # --- snapshots ---------------------------------------------------------------------
    def capture_snapshot(self) -> Snapshot:
        """Capture the complete observable match state.

        Returns
        -------
        Snapshot
            Frozen capture; taking it has no side effects.
        """
        return Snapshot(
            tick=self.tick,
            ball=self.ball.snapshot(),
            teams=(self.home.snapshot(), self.away.snapshot()),
            clock=self.clock.snapshot(),
        )

    def restore_snapshot(self, snapshot: Snapshot) -> None:
        """Restore tick, rosters, occupancy, ball and clock from ``snapshot``.

        Units are matched by identifier; any unit missing from the capture
        keeps its current state and cell.

        Parameters
        ----------
        snapshot : Snapshot
            Capture to restore.
        """
        self.tick = snapshot.tick
        self.bus.tick = snapshot.tick
        for team in self.teams:
            team_snapshot = snapshot.team(team.side)
            if team_snapshot is not None:
                team.restore(team_snapshot)

        targets = {unit.unit_id: unit.position for unit in self.units()}
        for unit_snapshot in (u for team in snapshot.teams for u in team.units):
            if unit_snapshot.unit_id in targets:
                targets[unit_snapshot.unit_id] = unit_snapshot.position
        self.grid.clear()
        for unit in self.units():
            if not self.grid.place(unit, targets[unit.unit_id]):
                fallback = self.grid.nearest_free_cell_in_zone(
                    targets[unit.unit_id], unit.zone, unit.attack_direction
                )
                if fallback is not None:
                    self.grid.place(unit, fallback)

        self.ball.restore(snapshot.ball)
        self.clock.restore(snapshot.clock)

    # --- pipeline ----------------------------------------------------------------------
    def _run_tick(self) -> None:
        """Execute the six pipeline stages once."""
        self.history.append(self.capture_snapshot())
        self.tick += 1
        self.bus.tick = self.tick
        self.bus.emit(EventType.TICK_STARTED, f"Tick {self.tick} started")

        self._advance_ball()
        for unit in list(self.units()):
            self._process_unit(unit)
        self._check_scoring()
        self.clock.on_tick()

        self.bus.emit(EventType.TICK_COMPLETED, f"Tick {self.tick} completed")
        self._log_tick_state()
        if self.is_finished and self.run_state is RunState.RUNNING:
            self._change_run_state(RunState.PAUSED)

    # stage 3
    def _advance_ball(self) -> None:
        """Move a flying ball and resolve its landing."""
        if self.ball.state is not BallState.LOOSE_IN_AIR:
            return
        if not self.ball.advance_flight():
            return
        publish_ball_transition(self.bus, self.ball.land())
        if self.ball.position.y in (0, self.grid.height - 1):
            publish_ball_transition(self.bus, self.ball.make_out_of_bounds())
            self.clock.on_ball_out_of_bounds()
            return
        occupant = self.grid.unit_at(self.ball.position)
        if occupant is not None:
            self._give_ball(occupant, self.config.ball_physics.clean_pickup_quality)

    def _give_ball(self, unit: Unit, quality: float) -> bool:
        """Hand the ball to ``unit`` and clear the previous holder.

        Parameters
        ----------
        unit : Unit
            New holder.
        quality : float
            Possession quality.

        Returns
        -------
        bool
            ``True`` when the ball accepted the new owner.
        """
        transition = self.ball.give_to_unit(unit, quality)
        publish_ball_transition(self.bus, transition)
        if not transition.accepted:
            return False
        previous = self.unit_by_id(transition.previous_owner_id)
        if previous is not None and previous is not unit:
            previous.lose_possession()
        unit.gain_possession(quality)
        return True

    # stage 4
    def _process_unit(self, unit: Unit) -> None:
        """Run one unit's share of the tick.

        Parameters
        ----------
        unit : Unit
            Unit to process.
        """
        if unit.is_moving:
            self._advance_unit(unit)
            return
        unit.recover_stamina(self.config.stamina.idle_recovery)
        if self._gather_loose_ball(unit):
            return
        self._execute(unit, self.policy.decide(unit, self.view))

    def _gather_loose_ball(self, unit: Unit) -> bool:
        """Pick up a loose ground ball lying on ``unit``'s cell.

        Parameters
        ----------
        unit : Unit
            Candidate gatherer.

        Returns
        -------
        bool
            ``True`` when the unit took possession.
        """
        if self.ball.state is not BallState.LOOSE_ON_GROUND or self.ball.position != unit.position:
            return False
        return self._give_ball(unit, self.config.ball_physics.gather_quality)

    def _execute(self, unit: Unit, action: Action) -> None:
        """Carry out a policy decision through the primitives.

        Parameters
        ----------
        unit : Unit
            Unit the action belongs to.
        action : Action
            Decision returned by the policy.
        """
        if action.kind is ActionKind.STAND:
            return
        if action.kind is ActionKind.MOVE_TO:
            if action.target is not None and unit.try_move_to(action.target, self.grid, action.contest):
                self.bus.emit(
                    EventType.UNIT_STATE_CHANGED,
                    f"Unit {unit.unit_id} heading to ({action.target.x}, {action.target.y})",
                    unit.side,
                    unit=unit.unit_id,
                    activity=unit.activity.value,
                )
            else:
                self.bus.emit(
                    EventType.OPERATION_REJECTED,
                    f"unit: move target {action.target} refused for unit {unit.unit_id}",
                    unit.side,
                    error=ErrorKind.INVALID_POSITION.value,
                    unit=unit.unit_id,
                )
            return
        if action.is_disposal:
            self._dispose(unit, action)

    def _dispose(self, unit: Unit, action: Action) -> None:
        """Kick or handball the ball to ``action.target``.

        Parameters
        ----------
        unit : Unit
            Disposing unit.
        action : Action
            Kick or handball decision.
        """
        kind = DisposalKind.KICK if action.kind is ActionKind.KICK_TO else DisposalKind.HANDBALL
        if action.target is None or not self.grid.is_valid(action.target):
            self.bus.emit(
                EventType.OPERATION_REJECTED,
                f"ball: {kind.value} target {action.target} is off the field",
                unit.side,
                error=ErrorKind.INVALID_PHYSICS_INPUT.value,
                unit=unit.unit_id,
            )
            return

        self.bus.emit(
            EventType.DISPOSAL_ATTEMPTED,
            f"Unit {unit.unit_id} {kind.value} towards ({action.target.x}, {action.target.y})",
            unit.side,
            unit=unit.unit_id,
            kind=kind.value,
            target=(action.target.x, action.target.y),
        )
        self.bus.emit_transition(EventType.UNIT_STATE_CHANGED, unit.transition_to(UnitActivity.DISPOSING), unit.side)
        transition = self.ball.make_loose_air(
            unit.position, action.target, kind, unit, self.unit_by_id(action.intended_unit_id)
        )
        publish_ball_transition(self.bus, transition)
        if transition.accepted:
            unit.lose_possession()
            cost = self.config.stamina.kick_cost if kind is DisposalKind.KICK else self.config.stamina.handball_cost
            unit.spend_stamina(cost)
            self.bus.emit(
                EventType.DISPOSAL_COMPLETED,
                f"Unit {unit.unit_id} {kind.value} in the air for {self.ball.flight.ticks_total} ticks",
                unit.side,
                unit=unit.unit_id,
                kind=kind.value,
                ticks=self.ball.flight.ticks_total,
                intended=action.intended_unit_id,
            )
        self.bus.emit_transition(EventType.UNIT_STATE_CHANGED, unit.transition_to(UnitActivity.IDLE), unit.side)

    def _advance_unit(self, unit: Unit) -> None:
        """Arrive, step or give up for a unit with a pending target.

        Parameters
        ----------
        unit : Unit
            Moving or contesting unit.
        """
        target = unit.target
        if target is None or unit.position == target:
            self.bus.emit_transition(EventType.UNIT_STATE_CHANGED, unit.arrive_at_target(self.grid), unit.side)
            return
        if unit.stamina <= unit.exhaustion_threshold:
            self._exhaust(unit)
            return

        next_cell = self.grid.step_toward(unit.position, target, unit)
        if next_cell == unit.position or not self.grid.move(unit, next_cell):
            unit.blocked_ticks += 1
            if unit.blocked_ticks >= self.config.simulation.max_blocked_ticks:
                self.bus.emit(
                    EventType.UNIT_STATE_CHANGED,
                    f"Unit {unit.unit_id} gave up after {unit.blocked_ticks} blocked ticks",
                    unit.side,
                    unit=unit.unit_id,
                    activity=UnitActivity.IDLE.value,
                )
                unit.stop()
            return

        unit.blocked_ticks = 0
        self.bus.emit(
            EventType.UNIT_MOVED,
            f"Unit {unit.unit_id} moved to ({next_cell.x}, {next_cell.y})",
            unit.side,
            unit=unit.unit_id,
            position=(next_cell.x, next_cell.y),
        )
        capable = unit.spend_stamina(self.config.stamina.move_cost)
        if next_cell == target:
            self.bus.emit_transition(EventType.UNIT_STATE_CHANGED, unit.arrive_at_target(self.grid), unit.side)
        self.ball.follow(unit)
        self._gather_loose_ball(unit)
        if not capable:
            self._exhaust(unit)

    def _exhaust(self, unit: Unit) -> None:
        """Stop a unit that has run out of stamina.

        Parameters
        ----------
        unit : Unit
            Exhausted unit.
        """
        if unit.is_moving:
            unit.stop()
        self.bus.emit(
            EventType.UNIT_EXHAUSTED,
            f"Unit {unit.unit_id} is exhausted ({unit.stamina})",
            unit.side,
            unit=unit.unit_id,
            stamina=unit.stamina,
        )

    # stage 5
    def _check_scoring(self) -> Optional[ScoreCheck]:
        """Credit a score when the ball sits in a scoring zone.

        Returns
        -------
        ScoreCheck | None
            The score that was registered, or ``None``.
        """
        if self.ball.state not in (BallState.LOOSE_ON_GROUND, BallState.HELD):
            return None
        check = self.ball.check_scoring_zone()
        if not check.scored or check.direction is None or check.score_type is None:
            return None
        team = self.team_for_direction(check.direction)
        if team is None:
            return None

        total = team.add_goal() if check.score_type is ScoreType.GOAL else team.add_behind()
        self.bus.emit(
            EventType.SCORE_REGISTERED,
            f"{check.score_type.name.title()} to {team.name}: {team.score_line()}",
            team.side,
            score_type=check.score_type.name.lower(),
            goals=team.goals,
            behinds=team.behinds,
            total=total,
        )
        holder = self.unit_by_id(self.ball.owner_id)
        if holder is not None:
            holder.lose_possession()
        publish_ball_transition(self.bus, self.ball.reset_to_center())
        self.clock.on_score_registered(check.score_type)
        return check

    def _log_tick_state(self) -> None:
        """Write the per-tick ball and unit lines to the debugger."""
        if self.debugger is None:
            return
        ball = self.ball
        self.debugger.log_ball_state(self.tick, (ball.position.x, ball.position.y), ball.state.value, ball.owner_id)
        for team in self.teams:
            for unit in team:
                self.debugger.log_unit_state(
                    self.tick,
                    unit.unit_id,
                    team.name,
                    (unit.position.x, unit.position.y),
                    unit.activity.value,
                    unit.has_ball,
                    unit.stamina,
                    target=(unit.target.x, unit.target.y) if unit.target else None,
                    role=unit.role.value,
                )

    def recent_history(self, limit: int = 10) -> List[Snapshot]:
        """Return up to ``limit`` of the newest snapshots, oldest first.

        Parameters
        ----------
        limit : int, optional
            Maximum number of snapshots.

        Returns
        -------
        List[Snapshot]
            Tail of the history.
        """
        if limit <= 0:
            return []
        return list(self.history)[-limit:]
