"""Interactive Textual viewer: walk the player and watch the sensors."""

from __future__ import annotations

from collections import deque
from typing import Iterator

from rich.panel import Panel
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Static

from tilesense.render.textual_app import TilesenseApp
from tilesense.render.viewer import render_tick
from tilesense.render.world_map import Viewport, compute_viewport
from tilesense.sim.config import SensorConfig
from tilesense.sim.contracts import Direction, TickPayload
from tilesense.sim.footsteps import AudioSink
from tilesense.sim.script import IDLE, FrameInput
from tilesense.sim.tick_loop import run_ticks
from tilesense.sim.world_state import TileMap, WorldState

KEY_DIRECTIONS = {
    "up": Direction.UP,
    "down": Direction.DOWN,
    "left": Direction.LEFT,
    "right": Direction.RIGHT,
}
ACTION_KEYS = {"space", "enter"}
# Rows and columns of the frame taken by panel borders, the header and tables.
MAP_CHROME_ROWS = 8
MAP_CHROME_COLUMNS = 4


def key_to_input(key: str) -> FrameInput | None:
    if key in ACTION_KEYS:
        return FrameInput(action=True)
    dash = key.startswith("shift+")
    direction = KEY_DIRECTIONS.get(key.removeprefix("shift+"))
    if direction is None:
        return None
    return FrameInput(direction=direction, dash=dash)


def player_viewport(
    tile_map: TileMap, payload: TickPayload, view_width: int, view_height: int
) -> Viewport:
    """Viewport of the given size, centred on the player when present."""
    player = next(
        (actor for actor in payload.actors if actor.actor_id == "player"), None
    )
    return compute_viewport(
        tile_map.width,
        tile_map.height,
        view_width,
        view_height,
        center=(player.x, player.y) if player is not None else None,
    )


class PlayScreen(Screen):
    CSS = """
    Screen {
        layout: vertical;
    }
    #play-view {
        height: 1fr;
    }
    #play-help {
        height: 1;
    }
    """

    def __init__(
        self,
        state: WorldState,
        *,
        config: SensorConfig,
        audio: AudioSink | None = None,
        frame_interval: float = 1 / 30,
    ) -> None:
        super().__init__()
        self._state = state
        self._config = config
        self._frame_interval = frame_interval
        self._pending: deque[FrameInput] = deque()
        self._frames = run_ticks(
            state, None, config=config, audio=audio, inputs=self._inputs()
        )
        self._view: Static | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="root"):
            yield Static(id="play-view")
            yield Static(
                "arrows: walk  shift+arrows: dash  space/enter: action  q: quit",
                id="play-help",
            )

    def on_mount(self) -> None:
        self._view = self.query_one("#play-view", Static)
        self._view.update(Panel(Text("Starting..."), title="Tilesense"))
        self.set_interval(self._frame_interval, self._advance)

    def on_key(self, event: Key) -> None:
        if event.key == "q":
            self.app.exit()
            return
        frame_input = key_to_input(event.key)
        if frame_input is not None:
            self._pending.append(frame_input)

    def _inputs(self) -> Iterator[FrameInput]:
        while True:
            yield self._pending.popleft() if self._pending else IDLE

    def _advance(self) -> None:
        payload = next(self._frames)
        self._update_payload(payload)

    def _update_payload(self, payload: TickPayload) -> None:
        if not self._view:
            return
        size = self._view.content_size
        # The map panel shares the row with the sensors panel.
        view_width = max(1, size.width // 2 - MAP_CHROME_COLUMNS)
        view_height = max(1, size.height - MAP_CHROME_ROWS - len(payload.actors))
        viewport = player_viewport(
            self._state.tile_map, payload, view_width, view_height
        )
        self._view.update(
            render_tick(
                payload,
                tile_map=self._state.tile_map,
                obstacles=self._config.obstacles,
                show_sight=True,
                viewport=viewport,
            )
        )


def run_play_viewer(
    state: WorldState,
    *,
    config: SensorConfig,
    audio: AudioSink | None = None,
    frame_interval: float = 1 / 30,
) -> None:
    app = TilesenseApp(
        PlayScreen(state, config=config, audio=audio, frame_interval=frame_interval),
        title="Tilesense Play",
    )
    app.run()
