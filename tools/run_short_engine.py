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
"""Run a short seeded simulation and write a debug log for inspection."""
from footyline.engine.factory import build_engine
from footyline.utils.debug import MatchDebugger
from footyline.utils.generator import generate_match_teams


def run_short_simulation(ticks: int = 200, seed: int = 7) -> None:
    """Step a generated match a fixed number of ticks.

    Parameters
    ----------
    ticks : int
        Number of ticks to run (default 200).
    seed : int
        Roster seed; the same seed always produces the same log.
    """
    home, away = generate_match_teams(seed)
    debugger = MatchDebugger()
    engine = build_engine(home, away, debugger=debugger)

    ran = engine.run_until_finished(max_ticks=ticks)

    debugger.close()
    print(f"Done running {ran} ticks: {home.name} {home.score_line()} - {away.score_line()} {away.name}")
    print(f"Log written to {debugger.log_path}")


if __name__ == "__main__":
    run_short_simulation()
