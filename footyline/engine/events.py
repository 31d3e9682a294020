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
"""Event domain models and the synchronous notification bus.

The bus is a one-way sink: the engine publishes what happened and listeners
(the debug log, the viewer, tests) observe it. Nothing in the simulation core
reads from the bus to make a decision.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Union

from footyline.engine.grid import Side

if TYPE_CHECKING:
    from footyline.engine.ball import BallTransition


class ErrorKind(Enum):
    """Non-fatal failure categories reported by core operations."""

    INVALID_TRANSITION = "invalid_transition"
    INVALID_POSITION = "invalid_position"
    INVALID_PHYSICS_INPUT = "invalid_physics_input"
    MISSING_REFERENCE = "missing_reference"


class EventType(Enum):
    """Notification categories emitted by the engine."""

    RUN_STATE_CHANGED = "run_state_changed"
    TICK_STARTED = "tick_started"
    TICK_COMPLETED = "tick_completed"
    MATCH_PHASE_CHANGED = "match_phase_changed"
    QUARTER_STARTED = "quarter_started"
    QUARTER_ENDED = "quarter_ended"
    BALL_STATE_CHANGED = "ball_state_changed"
    POSSESSION_CHANGED = "possession_changed"
    SCORE_REGISTERED = "score_registered"
    UNIT_MOVED = "unit_moved"
    UNIT_STATE_CHANGED = "unit_state_changed"
    UNIT_EXHAUSTED = "unit_exhausted"
    DISPOSAL_ATTEMPTED = "disposal_attempted"
    DISPOSAL_COMPLETED = "disposal_completed"
    COMMAND_REJECTED = "command_rejected"
    OPERATION_REJECTED = "operation_rejected"


@dataclass(frozen=True)
class MatchEvent:
    """Record of a noteworthy moment during a simulation.

    Parameters
    ----------
    tick : int
        Tick index at which the event was emitted.
    event_type : EventType
        Category of the event.
    description : str
        Human-readable summary of what happened.
    side : Side | None, optional
        Team side associated with the event, when there is one.
    data : Mapping[str, Any], optional
        Structured payload for listeners that want more than the description.
    """

    tick: int
    event_type: EventType
    description: str
    side: Optional[Side] = None
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TransitionEvent:
    """Outcome of asking a state machine to change state.

    The owning object performs the transition and returns this record; the
    caller decides whether and how to publish it.

    Parameters
    ----------
    machine : str
        Name of the state machine (for example ``"run_state"``).
    previous : Enum
        State before the request.
    current : Enum
        State after the request; equal to ``previous`` on rejection.
    accepted : bool, optional
        ``False`` when the transition was refused.
    error : ErrorKind | None, optional
        Failure category for a refused transition.
    detail : str, optional
        Free-form explanation for logs.
    """

    machine: str
    previous: Enum
    current: Enum
    accepted: bool = True
    error: Optional[ErrorKind] = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.accepted

    @property
    def changed(self) -> bool:
        """Return ``True`` when the transition moved to a different state."""
        return self.accepted and self.previous is not self.current

    @classmethod
    def rejected(cls, machine: str, state: Enum, error: ErrorKind, detail: str) -> "TransitionEvent":
        """Build a refused transition that leaves ``state`` untouched.

        Parameters
        ----------
        machine : str
            Name of the state machine.
        state : Enum
            Current (and unchanged) state.
        error : ErrorKind
            Failure category.
        detail : str
            Explanation for logs.

        Returns
        -------
        TransitionEvent
            Record with ``accepted`` set to ``False``.
        """
        return cls(machine, state, state, accepted=False, error=error, detail=detail)


Handler = Callable[[MatchEvent], None]


class EventBus:
    """Synchronous fan-out of match events to registered handlers.

    Handlers registered for a category run first, in registration order,
    followed by catch-all handlers. Delivery happens inside :meth:`publish`;
    handlers must not issue engine commands from within a callback.
    """

    def __init__(self) -> None:
        """Create an empty bus stamped at tick zero."""
        self._handlers: Dict[EventType, List[Handler]] = defaultdict(list)
        self._catch_all: List[Handler] = []
        self.tick = 0

    def subscribe(self, event_type: EventType, handler: Handler) -> None:
        """Register ``handler`` for one event category.

        Parameters
        ----------
        event_type : EventType
            Category the handler wants to receive.
        handler : Callable[[MatchEvent], None]
            Callback invoked with each matching event.
        """
        self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: Handler) -> None:
        """Register ``handler`` for every event category.

        Parameters
        ----------
        handler : Callable[[MatchEvent], None]
            Callback invoked with every published event.
        """
        self._catch_all.append(handler)

    def unsubscribe(self, handler: Handler, event_type: Optional[EventType] = None) -> None:
        """Remove ``handler`` from one category or from the catch-all list.

        Parameters
        ----------
        handler : Callable[[MatchEvent], None]
            Previously registered callback.
        event_type : EventType | None, optional
            Category to remove it from; ``None`` targets catch-all handlers.
        """
        handlers = self._catch_all if event_type is None else self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: MatchEvent) -> None:
        """Deliver ``event`` to its category handlers, then to catch-all handlers.

        Parameters
        ----------
        event : MatchEvent
            Event to deliver.
        """
        for handler in list(self._handlers.get(event.event_type, ())):
            handler(event)
        for handler in list(self._catch_all):
            handler(event)

    def emit(
        self,
        event_type: EventType,
        description: str,
        side: Optional[Side] = None,
        **data: Any,
    ) -> MatchEvent:
        """Create an event stamped with the current tick and publish it.

        Parameters
        ----------
        event_type : EventType
            Category of the event.
        description : str
            Human-readable summary.
        side : Side | None, optional
            Team side associated with the event.
        **data : Any
            Structured payload fields.

        Returns
        -------
        MatchEvent
            The event that was published.
        """
        event = MatchEvent(self.tick, event_type, description, side, dict(data))
        self.publish(event)
        return event

    def emit_transition(
        self,
        event_type: EventType,
        transition: Union[TransitionEvent, "BallTransition"],
        side: Optional[Side] = None,
    ) -> None:
        """Publish ``transition`` if it changed state, or a rejection if it was refused.

        Parameters
        ----------
        event_type : EventType
            Category used for an accepted, state-changing transition.
        transition : TransitionEvent | BallTransition
            Outcome returned by a state machine.
        side : Side | None, optional
            Team side associated with the transition.
        """
        if not transition.accepted:
            self.emit(
                EventType.OPERATION_REJECTED,
                f"{transition.machine}: {transition.detail}",
                side,
                error=transition.error.value if transition.error else None,
                state=transition.current.name,
            )
        elif transition.changed:
            self.emit(
                event_type,
                f"{transition.machine}: {transition.previous.name} -> {transition.current.name}",
                side,
                previous=transition.previous.name,
                current=transition.current.name,
            )
