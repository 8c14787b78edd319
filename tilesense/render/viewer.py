"""Rich viewer rendering for TickPayload."""

from __future__ import annotations

from rich.columns import Columns
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tilesense.render.world_map import Viewport, render_map_lines
from tilesense.sim.contracts import TickPayload
from tilesense.sim.geometry import ObstacleMask
from tilesense.sim.world_state import TileMap


def render_tick(
    payload: TickPayload,
    *,
    tile_map: TileMap | None = None,
    obstacles: ObstacleMask | None = None,
    show_sight: bool = False,
    viewport: Viewport | None = None,
    max_events: int = 5,
) -> RenderableType:
    header = Text(f"Frame {payload.tick}  (map {payload.map_id})", style="bold")
    actors = _render_actors(payload)
    events = _render_events(payload, max_events=max_events)
    flags = _render_flags(payload)

    left_parts: list[RenderableType] = [header]
    if tile_map is not None:
        left_parts.append(
            Text("\n").join(
                render_map_lines(
                    tile_map,
                    actors=payload.actors,
                    obstacles=obstacles,
                    show_sight=show_sight,
                    viewport=viewport,
                )
            )
        )
    left_parts.append(actors)
    left = Group(*left_parts)
    right = Group(flags, events)
    return Columns([Panel(left, title="Map"), Panel(right, title="Sensors")])


def _render_actors(payload: TickPayload) -> RenderableType:
    table = Table(title="Actors", show_header=True, header_style="bold")
    table.add_column("Actor")
    table.add_column("Position")
    table.add_column("Facing")

    for actor in payload.actors:
        facing = actor.direction.name.lower()
        if actor.moving:
            facing = f"{facing} (moving)"
        table.add_row(actor.name, f"{actor.x},{actor.y}", facing)
    if not payload.actors:
        table.add_row("-", "None", "-")
    return table


def _render_flags(payload: TickPayload) -> RenderableType:
    table = Table(title="Switches", show_header=True, header_style="bold")
    table.add_column("Flag")
    table.add_column("Value")

    for switch_id, value in payload.flags.switches.items():
        table.add_row(f"switch {switch_id}", _format_flag(value))
    for key, value in payload.flags.self_switches.items():
        table.add_row(f"self {key}", _format_flag(value))
    if not payload.flags.switches and not payload.flags.self_switches:
        table.add_row("-", "None")
    return table


def _render_events(payload: TickPayload, *, max_events: int) -> RenderableType:
    table = Table(title="Recent Events", show_header=True, header_style="bold")
    table.add_column("Kind")
    table.add_column("Detail")

    events = payload.events or []
    for event in events[-max_events:]:
        table.add_row(event.kind, _format_payload(event.payload))
    if not events:
        table.add_row("-", "None")
    return table


def _format_flag(value: bool) -> Text:
    return Text("ON", style="green") if value else Text("OFF", style="grey50")


def _format_payload(payload: dict) -> str:
    if not payload:
        return "-"
    parts = [f"{key}={value}" for key, value in payload.items()]
    return ", ".join(parts)
