"""Shared helpers for rendering the tile map and viewports."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from tilesense.sim.contracts import ActorFrame, Direction
from tilesense.sim.geometry import GridPosition, ObstacleMask, trace_line
from tilesense.sim.world_state import TileMap


TILE_STYLES = {
    "#": "bright_magenta",
    ".": "grey70",
    ",": "green3",
    ";": "yellow",
    ":": "grey85",
    "+": "dark_green",
    "=": "yellow3",
}

OBSTACLE_STYLE = "bold red"
SIGHT_STYLE = "on grey23"
PLAYER_STYLE = "bold bright_cyan"
EVENT_STYLE = "bold bright_yellow"

FACING_GLYPHS = {
    Direction.DOWN: "v",
    Direction.LEFT: "<",
    Direction.RIGHT: ">",
    Direction.UP: "^",
}


@dataclass(frozen=True)
class Viewport:
    x: int
    y: int
    width: int
    height: int


def compute_viewport(
    world_width: int,
    world_height: int,
    view_width: int,
    view_height: int,
    *,
    center: tuple[int, int] | None = None,
) -> Viewport:
    view_width = max(1, min(world_width, view_width))
    view_height = max(1, min(world_height, view_height))

    if center is not None:
        origin_x = center[0] - view_width // 2
        origin_y = center[1] - view_height // 2
    else:
        origin_x, origin_y = 0, 0

    origin_x = _clamp(origin_x, 0, max(0, world_width - view_width))
    origin_y = _clamp(origin_y, 0, max(0, world_height - view_height))

    return Viewport(x=origin_x, y=origin_y, width=view_width, height=view_height)


def render_map_lines(
    tile_map: TileMap,
    *,
    actors: list[ActorFrame],
    obstacles: ObstacleMask | None = None,
    show_sight: bool = False,
    viewport: Viewport | None = None,
) -> list[Text]:
    viewport = viewport or Viewport(0, 0, tile_map.width, tile_map.height)
    grid = [list(line) for line in tile_map.lines]
    styles = [[TILE_STYLES.get(ch, "grey70") for ch in row] for row in grid]

    if obstacles is not None:
        for y in range(tile_map.height):
            for x in range(tile_map.width):
                if obstacles.blocks(tile_map.cell(x, y)):
                    styles[y][x] = OBSTACLE_STYLE

    player = next((actor for actor in actors if actor.actor_id == "player"), None)
    if show_sight and player is not None:
        target = GridPosition(player.x, player.y)
        for actor in actors:
            if actor is player:
                continue
            for cell in trace_line(GridPosition(actor.x, actor.y), target):
                if tile_map.in_bounds(cell.x, cell.y):
                    styles[cell.y][cell.x] = f"{styles[cell.y][cell.x]} {SIGHT_STYLE}"

    for actor in actors:
        if not tile_map.in_bounds(actor.x, actor.y):
            continue
        if actor is player:
            grid[actor.y][actor.x] = "@"
            styles[actor.y][actor.x] = PLAYER_STYLE
        else:
            grid[actor.y][actor.x] = FACING_GLYPHS.get(actor.direction, "E")
            styles[actor.y][actor.x] = EVENT_STYLE

    lines: list[Text] = []
    for y in range(viewport.y, viewport.y + viewport.height):
        line = Text()
        row = grid[y]
        row_styles = styles[y]
        for x in range(viewport.x, viewport.x + viewport.width):
            line.append(row[x], style=row_styles[x])
        lines.append(line)
    return lines


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
