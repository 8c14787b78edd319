from rich.console import Console

from tilesense.render.viewer import render_tick
from tilesense.render.world_map import compute_viewport, render_map_lines
from tilesense.sim.contracts import (
    ActorFrame,
    Direction,
    Event,
    FlagSnapshot,
    TickPayload,
)
from tilesense.sim.geometry import ObstacleMask
from tilesense.sim.world_state import TileMap


def test_render_tick_contains_expected_sections() -> None:
    payload = TickPayload(
        tick=3,
        map_id=1,
        actors=_actors(),
        flags=FlagSnapshot(switches={2: True}, self_switches={"1:1:A": False}),
        events=[Event(kind="SWITCH_TOGGLED", payload={"event_id": 1})],
    )

    console = Console(width=140, record=True)
    console.print(render_tick(payload, tile_map=_tile_map(), obstacles=ObstacleMask()))
    output = console.export_text()

    assert "Frame 3" in output
    assert "Actors" in output
    assert "Switches" in output
    assert "Recent Events" in output
    assert "Guard" in output
    assert "SWITCH_TOGGLED" in output
    assert "switch 2" in output
    assert "ON" in output
    assert "@" in output


def test_render_tick_without_events_or_flags() -> None:
    payload = TickPayload(tick=1, map_id=1, actors=[], events=None)

    console = Console(width=120, record=True)
    console.print(render_tick(payload))
    output = console.export_text()

    assert "None" in output
    assert "Switches" in output


def test_map_lines_place_actors_and_facing() -> None:
    lines = render_map_lines(_tile_map(), actors=_actors(), show_sight=True)
    plain = [line.plain for line in lines]

    assert plain[1] == "#@.<#"
    assert plain[0] == "#####"


def test_viewport_clamps_to_world() -> None:
    viewport = compute_viewport(16, 10, 8, 4, center=(15, 9))

    assert (viewport.x, viewport.y, viewport.width, viewport.height) == (8, 6, 8, 4)
    assert compute_viewport(4, 4, 10, 10).width == 4


def _tile_map() -> TileMap:
    lines = ["#####", "#...#", "#####"]
    return TileMap(
        lines=lines,
        regions=[[0] * 5 for _ in lines],
        terrain=[[0] * 5 for _ in lines],
        width=5,
        height=3,
    )


def _actors() -> list[ActorFrame]:
    return [
        ActorFrame(actor_id="player", name="Player", x=1, y=1, direction=Direction.UP),
        ActorFrame(
            actor_id="event:1", name="Guard", x=3, y=1, direction=Direction.LEFT
        ),
    ]
