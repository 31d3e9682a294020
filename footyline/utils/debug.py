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
"""Structured logging utilities used to trace match simulations."""
from __future__ import annotations

import time
from collections import deque
from pathlib import Path
from threading import Lock
from typing import TYPE_CHECKING, Deque, List, Optional, TextIO, Tuple

from footyline.engine.events import EventType, MatchEvent

if TYPE_CHECKING:
    from footyline.engine.events import EventBus

_ERROR_EVENTS = (EventType.COMMAND_REJECTED, EventType.OPERATION_REJECTED)


class MatchDebugger:
    """Helper object that streams structured match telemetry to disk.

    The debugger is an ordinary bus listener: :meth:`attach` subscribes it to
    every event, and the scheduler additionally writes per-tick ball and unit
    state lines through it.

    Parameters
    ----------
    output_dir : str | Path, default="debug_logs"
        Directory where new session logs are created; created automatically when missing.
    """

    def __init__(self, output_dir: str | Path = "debug_logs") -> None:
        """Initialise the debugger and start the first logging session.

        Parameters
        ----------
        output_dir : str | Path
            Filesystem directory where log files are created or appended.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file: Optional[TextIO] = None
        self.session_start = time.strftime("%Y%m%d_%H%M%S")
        self._lock = Lock()
        self._line_number = 1
        self._recent_events: Deque[Tuple[int, str]] = deque(maxlen=200)
        self.start_new_session()

    @property
    def log_path(self) -> Path:
        """Return the path of the current session log."""
        return self.output_dir / f"match_debug_{self.session_start}.txt"

    def start_new_session(self) -> None:
        """Start a new debug logging session."""
        if self.log_file:
            self.log_file.close()

        self.log_file = open(self.log_path, "w", encoding="utf-8")
        self.log_file.write(f"=== Match Debug Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    # --- bus wiring --------------------------------------------------------------------
    def attach(self, bus: "EventBus") -> None:
        """Subscribe to every event published on ``bus``.

        Parameters
        ----------
        bus : EventBus
            Bus to listen to.
        """
        bus.subscribe_all(self.on_event)

    def detach(self, bus: "EventBus") -> None:
        """Stop listening to ``bus``.

        Parameters
        ----------
        bus : EventBus
            Bus previously passed to :meth:`attach`.
        """
        bus.unsubscribe(self.on_event)

    def on_event(self, event: MatchEvent) -> None:
        """Write one bus event, routing rejections to the error category.

        Parameters
        ----------
        event : MatchEvent
            Event delivered by the bus.
        """
        if event.event_type in _ERROR_EVENTS:
            self.log_error(event.event_type.value, f"Tick: {event.tick} | {event.description}")
            return
        self.log_match_event(event.tick, event.event_type.value, event.description)

    # --- state lines -------------------------------------------------------------------
    def log_ball_state(
        self,
        tick: int,
        position: tuple[int, int],
        state: str,
        owner_id: int | None = None,
    ) -> None:
        """Log the current state of the ball.

        Parameters
        ----------
        tick : int
            Tick index.
        position : tuple[int, int]
            Ball cell (x, y).
        state : str
            Ball state label.
        owner_id : int | None
            Holder's identifier, when the ball is held.
        """
        owner_str = f" | Owner: {owner_id}" if owner_id is not None else ""
        self._write_log(
            "BALL_STATE",
            f"Tick: {tick} | Pos: ({position[0]}, {position[1]}) | State: {state}{owner_str}",
        )

    def log_unit_state(
        self,
        tick: int,
        unit_id: int,
        team_name: str,
        position: tuple[int, int],
        activity: str,
        has_ball: bool,
        stamina: int,
        target: tuple[int, int] | None = None,
        role: str | None = None,
    ) -> None:
        """Log the current state of a unit.

        Parameters
        ----------
        tick : int
            Tick index.
        unit_id : int
            Identifier of the tracked unit.
        team_name : str
            Label for the unit's team.
        position : tuple[int, int]
            Unit cell (x, y).
        activity : str
            Activity label.
        has_ball : bool
            Whether the unit holds the ball.
        stamina : int
            Remaining stamina.
        target : tuple[int, int] | None
            Pending movement target, if any.
        role : str | None
            Role code (for example ``"FF"``) if available.
        """
        target_str = f" | Target: ({target[0]}, {target[1]})" if target else ""
        role_str = f" | Role: {role}" if role else ""
        self._write_log(
            "UNIT_STATE",
            f"Tick: {tick} | "
            f"Unit {unit_id} ({team_name}){role_str} | "
            f"Pos: ({position[0]}, {position[1]}) | "
            f"State: {activity} | "
            f"Has Ball: {has_ball} | "
            f"Stamina: {stamina}"
            f"{target_str}",
        )

    def log_match_event(self, tick: int, event_type: str, description: str) -> None:
        """Log a match event (score, disposal, phase change, etc.).

        Parameters
        ----------
        tick : int
            Tick index.
        event_type : str
            Short label identifying the event category.
        description : str
            Human-readable summary of the event.
        """
        self._write_log("MATCH_EVENT", f"Tick: {tick} | Event: {event_type} | Details: {description}")

    def log_error(self, error_type: str, description: str) -> None:
        """Log an error or warning.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, event_type: str, details: str) -> None:
        """Write a log entry to the file.

        Parameters
        ----------
        event_type : str
            Category label for the log entry.
        details : str
            Formatted message body to persist.
        """
        timestamp = time.strftime("%H:%M:%S")
        log_entry = f"[{timestamp}] {event_type}: {details}"

        with self._lock:
            line_no = self._line_number
            self._line_number += 1
            self._recent_events.append((line_no, log_entry))

            if self.log_file:
                self.log_file.write(f"{log_entry}\n")
                self.log_file.flush()

    def get_recent_events(self, limit: int = 20) -> List[str]:
        """Return the latest debug entries with line numbers for live displays.

        Parameters
        ----------
        limit : int
            Maximum number of entries to return.

        Returns
        -------
        List[str]
            Up to ``limit`` most recent log lines with prefixed line numbers.
        """
        with self._lock:
            selected = list(self._recent_events)[-limit:]
        return [f"{line_no:05d} {entry}" for line_no, entry in selected]

    def close(self) -> None:
        """Close the log file."""
        if self.log_file:
            self.log_file.close()
            self.log_file = None
