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
"""Entry point for manual match simulations and the optional visualiser."""
import argparse
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from footyline.engine.config import ENGINE_CONFIG, EngineConfig
from footyline.engine.factory import build_engine
from footyline.engine.tick_engine import TickEngine
from footyline.utils.debug import MatchDebugger
from footyline.utils.generator import generate_match_teams
from footyline.utils.roster import load_teams_from_json


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Derive an engine configuration from command-line overrides.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed arguments.

    Returns
    -------
    EngineConfig
        Default configuration with the requested grid and clock overrides.
    """
    grid = replace(ENGINE_CONFIG.grid, width=args.width, height=args.height)
    clock = replace(ENGINE_CONFIG.clock, quarter_ticks=args.quarter_ticks)
    return replace(ENGINE_CONFIG, grid=grid, clock=clock)


def print_match_status(engine: TickEngine) -> None:
    """Print the score, the clock phase and any completed quarters.

    Parameters
    ----------
    engine : TickEngine
        Engine whose state should be reported.
    """
    home, away = engine.teams
    print(f"Tick {engine.tick} | {engine.clock.phase.name}")
    print(f"Score: {home.name} {home.score_line()} - {away.score_line()} {away.name}")
    for quarter in engine.clock.quarter_scores:
        print(
            f"  Q{quarter.quarter}: {quarter.home_goals}.{quarter.home_behinds} ({quarter.home_total}) - "
            f"{quarter.away_goals}.{quarter.away_behinds} ({quarter.away_total})"
        )
    result = engine.clock.result
    if result is not None:
        if result.is_draw:
            print(f"Result: draw at {result.home_total}")
        else:
            print(f"Result: {result.winner.name.title()} win {result.home_total} - {result.away_total}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse the command line.

    Parameters
    ----------
    argv : list[str] | None, optional
        Arguments to parse; ``sys.argv`` when omitted.

    Returns
    -------
    argparse.Namespace
        Parsed options.
    """
    parser = argparse.ArgumentParser(description="Run a footyline match simulation.")
    parser.add_argument("--width", type=int, default=ENGINE_CONFIG.grid.width, help="Field width in cells")
    parser.add_argument("--height", type=int, default=ENGINE_CONFIG.grid.height, help="Field height in cells")
    parser.add_argument(
        "--quarter-ticks", type=int, default=ENGINE_CONFIG.clock.quarter_ticks, help="Ticks of play per quarter"
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for generated rosters")
    parser.add_argument("--roster", type=Path, default=Path("data/teams.json"), help="Roster JSON document")
    parser.add_argument("--headless", action="store_true", help="Run to full time without the viewer")
    parser.add_argument("--max-ticks", type=int, default=None, help="Stop a headless run after this many ticks")
    parser.add_argument("--log-dir", type=Path, default=Path("debug_logs"), help="Directory for match logs")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Build a match from the command line and run it.

    Parameters
    ----------
    argv : list[str] | None, optional
        Arguments to parse; ``sys.argv`` when omitted.
    """
    args = parse_args(argv)
    config = build_config(args)

    if args.roster.exists():
        home, away = load_teams_from_json(str(args.roster), config.stamina)
    else:
        print(f"No roster file found at {args.roster}")
        print("Using generated teams...")
        home, away = generate_match_teams(args.seed, config.stamina)

    debugger = MatchDebugger(args.log_dir)
    engine = build_engine(home, away, config, debugger=debugger)
    print(f"Logging to {debugger.log_path}")

    try:
        if args.headless:
            ticks = engine.run_until_finished(args.max_ticks)
            print(f"Ran {ticks} ticks")
        else:
            from footyline.visualizer.visualizer import pygame, start_visualizer

            if pygame is None:
                print("pygame is not installed; rerun with --headless or install the 'viz' extra.")
                return
            print("Keys: r ready, space start/pause, s step, b back, x reset, +/- speed, q quit")
            start_visualizer(engine)
    except KeyboardInterrupt:
        print("\nMatch simulation interrupted.")
    finally:
        print()
        print_match_status(engine)
        debugger.close()


if __name__ == "__main__":
    main()
