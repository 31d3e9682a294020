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
"""Optional pygame viewer that drives a :class:`TickEngine` from the keyboard.

Keys: ``r`` ready, ``space`` start/pause, ``s`` step, ``b`` back, ``x`` reset,
``+``/``-`` change speed, ``q`` quit.
"""
from typing import Dict, Optional, Tuple

try:
    import pygame
except Exception:
    pygame = None

from footyline.engine.ball import BallState
from footyline.engine.grid import AttackDirection, GridPosition, Zone
from footyline.engine.tick_engine import Command, RunState, TickEngine

KEY_COMMANDS: Dict[str, Command] = {
    "r": Command.READY,
    "s": Command.STEP,
    "b": Command.BACK,
    "x": Command.RESET,
}

SPEED_STEPS = (0.25, 0.5, 1.0, 2.0, 4.0, 8.0)


def command_for_key(key_name: str, run_state: RunState) -> Optional[Command]:
    """Map a pygame key name to a control command.

    Space toggles between start and pause depending on ``run_state``.

    Parameters
    ----------
    key_name : str
        Name returned by ``pygame.key.name``.
    run_state : RunState
        Current run state of the engine.

    Returns
    -------
    Command | None
        Command to issue, or ``None`` for unmapped keys.
    """
    if key_name == "space":
        return Command.PAUSE if run_state is RunState.RUNNING else Command.START
    return KEY_COMMANDS.get(key_name)


def next_speed(current: float, faster: bool) -> float:
    """Return the neighbouring preset speed.

    Parameters
    ----------
    current : float
        Current speed multiplier.
    faster : bool
        Step up when ``True``, down otherwise.

    Returns
    -------
    float
        Adjacent preset, clamped to the ends of :data:`SPEED_STEPS`.
    """
    if faster:
        return next((step for step in SPEED_STEPS if step > current), SPEED_STEPS[-1])
    return next((step for step in reversed(SPEED_STEPS) if step < current), SPEED_STEPS[0])


def cell_to_screen(
    pos: GridPosition, grid_size: Tuple[int, int], field_rect: Tuple[int, int, int, int]
) -> Tuple[int, int]:
    """Return the pixel centre of a grid cell.

    Parameters
    ----------
    pos : GridPosition
        Cell to map.
    grid_size : Tuple[int, int]
        Field ``(width, height)`` in cells.
    field_rect : Tuple[int, int, int, int]
        ``(left, top, width, height)`` of the drawn field in pixels.

    Returns
    -------
    Tuple[int, int]
        Screen coordinates of the cell centre.
    """
    left, top, width, height = field_rect
    cell_w = width / grid_size[0]
    cell_h = height / grid_size[1]
    return int(left + (pos.x + 0.5) * cell_w), int(top + (pos.y + 0.5) * cell_h)


def start_visualizer(engine: TickEngine, screen_size: Tuple[int, int] = (1050, 680), fps: int = 30) -> None:
    """Start a pygame viewer for the match engine.

    The viewer runs on the calling thread and advances the engine with the
    frame time, so the engine is only ever touched by one caller. If
    ``pygame`` is not installed the function returns immediately.

    Parameters
    ----------
    engine : TickEngine
        Engine to drive and draw.
    screen_size : Tuple[int, int]
        Initial window size in pixels.
    fps : int
        Frame-rate cap.
    """
    if pygame is None:
        return

    pygame.init()
    screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)
    pygame.display.set_caption("Footyline")
    clock = pygame.time.Clock()

    GRASS = (38, 140, 62)
    GRID_LINE = (48, 156, 74)
    LINE = (245, 245, 245)
    HOME = (200, 30, 30)
    AWAY = (30, 90, 200)
    BALL = (250, 220, 60)
    POST = (250, 250, 100)
    TEXT = (235, 235, 235)
    ZONE_TINT = {Zone.DEFENSIVE: (0, 0, 0, 28), Zone.FORWARD: (255, 255, 255, 22)}

    font = pygame.font.SysFont(None, 18)
    grid_size = (engine.grid.width, engine.grid.height)
    goal_cfg = engine.grid.config
    running = True

    while running:
        dt = clock.tick(fps) / 1000.0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen_size = (event.w, event.h)
                screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)
            elif event.type == pygame.KEYDOWN:
                key_name = pygame.key.name(event.key)
                if key_name == "q":
                    running = False
                elif key_name in ("+", "=", "-"):
                    engine.set_speed(next_speed(engine.speed, key_name != "-"))
                else:
                    command = command_for_key(key_name, engine.run_state)
                    if command is not None:
                        engine.handle_command(command)

        engine.advance(dt)

        screen.fill((0, 0, 0))
        hud_h = 48
        field_rect = (10, hud_h, screen_size[0] - 20, screen_size[1] - hud_h - 10)
        left, top, width, height = field_rect
        cell_w = width / grid_size[0]
        cell_h = height / grid_size[1]
        pygame.draw.rect(screen, GRASS, field_rect)

        # Home team's defensive and forward bands; the away bands mirror them.
        for zone, tint in ZONE_TINT.items():
            lo, hi = engine.grid.zone_band(zone, AttackDirection.RIGHT)
            band = pygame.Surface((int((hi - lo) * cell_w), height), pygame.SRCALPHA)
            band.fill(tint)
            screen.blit(band, (int(left + lo * cell_w), top))

        for x in range(1, grid_size[0]):
            px = int(left + x * cell_w)
            pygame.draw.line(screen, GRID_LINE, (px, top), (px, top + height))
        for y in range(1, grid_size[1]):
            py = int(top + y * cell_h)
            pygame.draw.line(screen, GRID_LINE, (left, py), (left + width, py))
        pygame.draw.rect(screen, LINE, field_rect, 3)

        centre_y = grid_size[1] // 2
        for edge_x in (0, grid_size[0] - 1):
            for offset, thickness in ((goal_cfg.goal_half_span, 2), (goal_cfg.goal_centre_half_span, 4)):
                for dy in (-offset, offset):
                    cx, cy = cell_to_screen(GridPosition(edge_x, centre_y + dy), grid_size, field_rect)
                    pygame.draw.circle(screen, POST, (cx, cy), thickness + 2)

        radius = max(4, int(min(cell_w, cell_h) * 0.4))
        for team, colour in ((engine.home, HOME), (engine.away, AWAY)):
            for unit in team:
                sx, sy = cell_to_screen(unit.position, grid_size, field_rect)
                if unit.has_ball:
                    pygame.draw.circle(screen, BALL, (sx, sy), radius + 3)
                pygame.draw.circle(screen, colour, (sx, sy), radius)
                label = font.render(str(unit.unit_id), True, TEXT)
                screen.blit(label, (sx - label.get_width() // 2, sy - label.get_height() // 2))

        if engine.ball.state is not BallState.HELD:
            bx, by = cell_to_screen(engine.ball.position, grid_size, field_rect)
            pygame.draw.circle(screen, BALL, (bx, by), max(3, radius // 2))

        clock_state = engine.clock
        score_text = (
            f"{engine.home.name} {engine.home.score_line()}  -  "
            f"{engine.away.score_line()} {engine.away.name}"
        )
        status_text = (
            f"Tick {engine.tick} | {clock_state.phase.name} | "
            f"Quarter ticks left {clock_state.quarter_ticks_remaining} | "
            f"{engine.run_state.name} x{engine.speed:g} | Ball {engine.ball.state.name}"
        )
        screen.blit(font.render(score_text, True, TEXT), (10, 8))
        screen.blit(font.render(status_text, True, TEXT), (10, 26))

        pygame.display.flip()

    pygame.quit()
