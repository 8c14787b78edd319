"""Load world data from JSON + ASCII maps."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tilesense.sim.contracts import Direction
from tilesense.sim.world_state import EventState, PlayerState, TileMap, WorldState

logger = logging.getLogger(__name__)

DEFAULT_WORLD_DIR = Path("world") / "demo"


@dataclass(frozen=True)
class WorldPaths:
    base_dir: Path = DEFAULT_WORLD_DIR

    @property
    def world_json(self) -> Path:
        return self.base_dir / "world.json"

    def resolve(self, name: str) -> Path:
        return self.base_dir / name


@dataclass(frozen=True)
class PlayerDef:
    x: int
    y: int
    direction: Direction


@dataclass(frozen=True)
class EventDef:
    id: int
    name: str
    x: int
    y: int
    direction: Direction
    commands: list[Any]
    route: list[Direction]
    move_interval: int


@dataclass(frozen=True)
class WorldConfig:
    map_id: int
    map_file: str
    region_file: str | None
    terrain_file: str | None
    obstacles: dict[str, Any]
    player: PlayerDef | None
    events: list[EventDef]
    script: list[str]


def load_world_config(*, paths: WorldPaths | None = None) -> WorldConfig:
    paths = paths or WorldPaths()
    data = _require_mapping(_load_json(paths.world_json), paths.world_json)

    raw_player = data.get("player")
    player = None
    if raw_player is not None:
        raw_player = _require_mapping(raw_player, "player")
        player = PlayerDef(
            x=_require_int(raw_player, "x", "player"),
            y=_require_int(raw_player, "y", "player"),
            direction=Direction.parse(raw_player.get("direction", "down")),
        )
    events = [
        _parse_event(_require_mapping(event, "event"))
        for event in data.get("events", [])
    ]
    _validate_event_ids(events)
    return WorldConfig(
        map_id=int(data.get("map_id", 1)),
        map_file=str(_require(data, "map_file", str(paths.world_json))),
        region_file=data.get("region_file"),
        terrain_file=data.get("terrain_file"),
        obstacles=dict(data.get("obstacles", {})),
        player=player,
        events=events,
        script=[str(entry) for entry in data.get("script", [])],
    )


def _parse_event(event: dict) -> EventDef:
    event_id = _require_int(event, "id", "event")
    label = f"event {event_id}"
    return EventDef(
        id=event_id,
        name=event.get("name", f"EV{event_id:03d}"),
        x=_require_int(event, "x", label),
        y=_require_int(event, "y", label),
        direction=Direction.parse(event.get("direction", "down")),
        commands=list(event.get("commands", [])),
        route=[Direction.parse(step) for step in event.get("route", [])],
        move_interval=int(event.get("move_interval", 60)),
    )


def load_world_state(
    *,
    paths: WorldPaths | None = None,
    config: WorldConfig | None = None,
) -> WorldState:
    paths = paths or WorldPaths()
    config = config or load_world_config(paths=paths)
    tile_map = load_tile_map(
        paths.resolve(config.map_file),
        region_path=paths.resolve(config.region_file) if config.region_file else None,
        terrain_path=(
            paths.resolve(config.terrain_file) if config.terrain_file else None
        ),
    )

    player = None
    if config.player is not None:
        _require_in_bounds(tile_map, config.player.x, config.player.y, "player")
        player = PlayerState(
            x=config.player.x, y=config.player.y, direction=config.player.direction
        )

    events: dict[int, EventState] = {}
    for event in config.events:
        _require_in_bounds(tile_map, event.x, event.y, f"event {event.id}")
        events[event.id] = EventState(
            event_id=event.id,
            name=event.name,
            x=event.x,
            y=event.y,
            direction=event.direction,
            commands=list(event.commands),
            route=list(event.route),
            move_interval=event.move_interval,
        )
    logger.debug(
        "Loaded map %s (%sx%s) with %s events",
        config.map_id,
        tile_map.width,
        tile_map.height,
        len(events),
    )
    return WorldState(
        map_id=config.map_id,
        tile_map=tile_map,
        player=player,
        events=events,
        obstacles=config.obstacles,
    )


def load_tile_map(
    map_path: Path,
    *,
    region_path: Path | None = None,
    terrain_path: Path | None = None,
) -> TileMap:
    lines = _load_lines(map_path)
    if not lines:
        raise ValueError(f"Map file {map_path} is empty.")
    width = len(lines[0])
    for row, line in enumerate(lines):
        if len(line) != width:
            raise ValueError(
                f"Map file {map_path} row {row} has width {len(line)}, "
                f"expected {width}."
            )
    height = len(lines)
    regions = _load_layer(region_path, width, height)
    terrain = _load_layer(terrain_path, width, height)
    return TileMap(
        lines=lines, regions=regions, terrain=terrain, width=width, height=height
    )


def _load_layer(path: Path | None, width: int, height: int) -> list[list[int]]:
    if path is None:
        return [[0] * width for _ in range(height)]
    lines = _load_lines(path)
    if len(lines) != height:
        raise ValueError(f"Layer {path} has {len(lines)} rows, expected {height}.")
    layer: list[list[int]] = []
    for row, line in enumerate(lines):
        if len(line) != width or not line.isdigit():
            raise ValueError(f"Layer {path} row {row} must be {width} digits.")
        layer.append([int(char) for char in line])
    return layer


def _load_lines(path: Path) -> list[str]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Missing world data file: {path}") from exc
    return [line.rstrip("\r") for line in text.split("\n") if line.strip()]


def _load_json(path: Path) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Missing world data file: {path}") from exc
    return json.loads(text)


def _require(data: dict, key: str, label: str) -> Any:
    if key not in data:
        raise ValueError(f"{label}: missing {key!r}.")
    return data[key]


def _require_int(data: dict, key: str, label: str) -> int:
    value = _require(data, key, label)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"{label}: {key!r} must be an integer, got {value!r}."
        ) from exc


def _require_mapping(value: Any, label: object) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"{label}: expected an object, got {type(value).__name__}.")
    return value


def _validate_event_ids(events: list[EventDef]) -> None:
    seen: set[int] = set()
    for event in events:
        if event.id <= 0:
            raise ValueError(f"Event id must be positive, got {event.id}.")
        if event.id in seen:
            raise ValueError(f"Duplicate event id {event.id}.")
        seen.add(event.id)


def _require_in_bounds(tile_map: TileMap, x: int, y: int, label: str) -> None:
    if not tile_map.in_bounds(x, y):
        raise ValueError(f"{label} at ({x}, {y}) is outside the map.")
