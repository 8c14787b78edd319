"""Map, player, event and switch state for the reference host."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tilesense.sim.contracts import ActorFrame, Direction, FlagSnapshot
from tilesense.sim.geometry import CellInfo, GridPosition
from tilesense.sim.proximity import AgentRole, AgentSnapshot

WALK_FRAMES = 16
DASH_FRAMES = 8

WALKABLE_TILES: set[str] = {
    ".",
    ",",
    ";",
    ":",
    "+",
    "=",
}


@dataclass(frozen=True)
class TileMap:
    lines: list[str]
    regions: list[list[int]]
    terrain: list[list[int]]
    width: int
    height: int

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> CellInfo | None:
        if not self.in_bounds(x, y):
            return None
        return CellInfo(region_id=self.regions[y][x], terrain_tag=self.terrain[y][x])

    def terrain_tag(self, x: int, y: int) -> int:
        return self.terrain[y][x] if self.in_bounds(x, y) else 0

    def is_passable(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return False
        return self.lines[y][x] in WALKABLE_TILES


@dataclass
class PlayerState:
    x: int
    y: int
    direction: Direction = Direction.DOWN
    move_frames: int = 0
    dashing: bool = False

    @property
    def position(self) -> GridPosition:
        return GridPosition(self.x, self.y)

    def is_moving(self) -> bool:
        return self.move_frames > 0

    def is_dashing(self) -> bool:
        return self.dashing

    def update(self) -> None:
        if self.move_frames > 0:
            self.move_frames -= 1
            if self.move_frames == 0:
                self.dashing = False


@dataclass
class EventState:
    event_id: int
    name: str
    x: int
    y: int
    direction: Direction = Direction.DOWN
    commands: list[Any] = field(default_factory=list)
    route: list[Direction] = field(default_factory=list)
    route_index: int = 0
    move_interval: int = 60

    @property
    def position(self) -> GridPosition:
        return GridPosition(self.x, self.y)


class SwitchStore:
    """Global switches; id 0 is "no switch" and never stored."""

    def __init__(self) -> None:
        self._values: dict[int, bool] = {}

    def value(self, switch_id: int) -> bool:
        return self._values.get(switch_id, False)

    def set_value(self, switch_id: int, value: bool) -> None:
        if switch_id <= 0:
            return
        self._values[switch_id] = value

    def snapshot(self) -> dict[int, bool]:
        return dict(sorted(self._values.items()))


class SelfSwitchStore:
    def __init__(self) -> None:
        self._values: dict[tuple[int, int, str], bool] = {}

    def value(self, key: tuple[int, int, str]) -> bool:
        return self._values.get(key, False)

    def set_value(self, key: tuple[int, int, str], value: bool) -> None:
        self._values[key] = value

    def snapshot(self) -> dict[str, bool]:
        return {
            f"{map_id}:{event_id}:{letter}": value
            for (map_id, event_id, letter), value in sorted(self._values.items())
        }


@dataclass
class WorldState:
    map_id: int
    tile_map: TileMap
    player: PlayerState | None
    events: dict[int, EventState]
    switches: SwitchStore = field(default_factory=SwitchStore)
    self_switches: SelfSwitchStore = field(default_factory=SelfSwitchStore)
    obstacles: dict[str, Any] = field(default_factory=dict)
    action_held: bool = False
    tick: int = 0

    # -- position provider

    def event_agent(self, event_id: int) -> AgentSnapshot | None:
        event = self.events.get(event_id)
        if event is None:
            return None
        return AgentSnapshot(
            role=AgentRole.OBSERVER, position=event.position, direction=event.direction
        )

    def player_agent(self) -> AgentSnapshot | None:
        if self.player is None:
            return None
        return AgentSnapshot(
            role=AgentRole.TARGET,
            position=self.player.position,
            direction=self.player.direction,
        )

    # -- map cell inspector

    def cell(self, x: int, y: int) -> CellInfo | None:
        return self.tile_map.cell(x, y)

    def terrain_tag(self, x: int, y: int) -> int:
        return self.tile_map.terrain_tag(x, y)

    # -- flag store

    def get_local(self, map_id: int, event_id: int, letter: str) -> bool:
        return self.self_switches.value((map_id, event_id, letter))

    def set_local(self, map_id: int, event_id: int, letter: str, value: bool) -> None:
        self.self_switches.set_value((map_id, event_id, letter), value)

    def get_global(self, switch_id: int) -> bool:
        return self.switches.value(switch_id)

    def set_global(self, switch_id: int, value: bool) -> None:
        self.switches.set_value(switch_id, value)

    # -- input signal

    def is_action_held(self) -> bool:
        return self.action_held

    # -- movement

    def is_occupied(self, x: int, y: int) -> bool:
        if self.player is not None and (self.player.x, self.player.y) == (x, y):
            return True
        return any((event.x, event.y) == (x, y) for event in self.events.values())

    def can_enter(self, x: int, y: int) -> bool:
        return self.tile_map.is_passable(x, y) and not self.is_occupied(x, y)

    def step_player(self, direction: Direction, *, dash: bool = False) -> bool:
        """Turn the player and start a one-cell step if the cell is free."""
        player = self.player
        if player is None or player.is_moving():
            return False
        player.direction = direction
        dx, dy = direction.delta
        if not self.can_enter(player.x + dx, player.y + dy):
            return False
        player.x += dx
        player.y += dy
        player.move_frames = DASH_FRAMES if dash else WALK_FRAMES
        player.dashing = dash
        return True

    def turn_player(self, direction: Direction) -> None:
        if self.player is not None and not self.player.is_moving():
            self.player.direction = direction

    def advance_event(self, event: EventState) -> bool:
        if not event.route:
            return False
        direction = event.route[event.route_index]
        event.route_index = (event.route_index + 1) % len(event.route)
        event.direction = direction
        dx, dy = direction.delta
        if not self.can_enter(event.x + dx, event.y + dy):
            return False
        event.x += dx
        event.y += dy
        return True

    # -- snapshots

    def actor_frames(self) -> list[ActorFrame]:
        frames: list[ActorFrame] = []
        if self.player is not None:
            frames.append(
                ActorFrame(
                    actor_id="player",
                    name="Player",
                    x=self.player.x,
                    y=self.player.y,
                    direction=self.player.direction,
                    moving=self.player.is_moving(),
                )
            )
        for event_id in sorted(self.events):
            event = self.events[event_id]
            frames.append(
                ActorFrame(
                    actor_id=f"event:{event_id}",
                    name=event.name,
                    x=event.x,
                    y=event.y,
                    direction=event.direction,
                )
            )
        return frames

    def flag_snapshot(self) -> FlagSnapshot:
        return FlagSnapshot(
            switches=self.switches.snapshot(),
            self_switches=self.self_switches.snapshot(),
        )
