"""Frame loop orchestration for the reference host."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Sequence

from tilesense.sim.config import SensorConfig, load_sensor_config
from tilesense.sim.contracts import Event, TickPayload, coerce_sensor_command
from tilesense.sim.footsteps import AudioSink, FootstepPlayer, RecordingAudio
from tilesense.sim.proximity import SensorRunner
from tilesense.sim.script import IDLE, FrameInput
from tilesense.sim.world_state import WorldState

logger = logging.getLogger(__name__)

FrameCallback = Callable[[int], "Event | None"]


@dataclass(frozen=True)
class _Registration:
    name: str
    callback: FrameCallback


class FrameScheduler:
    """Per-frame callbacks, run in registration order."""

    def __init__(self) -> None:
        self._callbacks: list[_Registration] = []

    def register(self, name: str, callback: FrameCallback) -> None:
        self._callbacks.append(_Registration(name=name, callback=callback))
        logger.debug("Registered frame callback %s (#%s)", name, len(self._callbacks))

    def run_frame(self, frame: int) -> list[Event]:
        events: list[Event] = []
        for entry in self._callbacks:
            event = entry.callback(frame)
            if event is not None:
                events.append(event)
        return events


def build_scheduler(
    state: WorldState,
    *,
    config: SensorConfig,
    audio: AudioSink,
) -> FrameScheduler:
    scheduler = FrameScheduler()
    footsteps = FootstepPlayer(audio, state.terrain_tag)
    runner = SensorRunner(config, state)

    def _update_player(frame: int) -> Event | None:
        if state.player is not None:
            state.player.update()
        return None

    def _update_footsteps(frame: int) -> Event | None:
        if state.player is None:
            return None
        effect = footsteps.update(state.player)
        if effect is None:
            return None
        return Event(
            kind="FOOTSTEP",
            payload={
                "name": effect.name,
                "volume": effect.volume,
                "pitch": effect.pitch,
            },
        )

    scheduler.register("player", _update_player)
    scheduler.register("footsteps", _update_footsteps)

    for event_id in sorted(state.events):
        scheduler.register(f"event:{event_id}:move", _event_mover(state, event_id))
    for event_id in sorted(state.events):
        for index, command in enumerate(state.events[event_id].commands):
            scheduler.register(
                f"event:{event_id}:sensor:{index}",
                _sensor_callback(state, runner, event_id, command),
            )
    return scheduler


def run_ticks(
    state: WorldState,
    ticks: int | None,
    *,
    script: Sequence[FrameInput] | None = None,
    config: SensorConfig | None = None,
    audio: AudioSink | None = None,
    inputs: Iterable[FrameInput] | None = None,
) -> Iterator[TickPayload]:
    """Run frames and yield one payload per frame.

    ``script`` is replayed from the start; ``inputs`` may be any (possibly
    endless) iterable and takes precedence. Idle input once either runs out.
    """
    sensor_config = config or load_sensor_config(state.obstacles)
    scheduler = build_scheduler(
        state, config=sensor_config, audio=audio or RecordingAudio()
    )
    source = iter(inputs if inputs is not None else (script or []))
    step_count = 0
    while ticks is None or step_count < ticks:
        frame = state.tick + 1
        frame_input = next(source, IDLE)
        events = _apply_input(state, frame_input)
        events.extend(scheduler.run_frame(frame))
        state.action_held = False
        state.tick = frame
        step_count += 1
        yield TickPayload(
            tick=frame,
            map_id=state.map_id,
            actors=state.actor_frames(),
            flags=state.flag_snapshot(),
            events=events or None,
        )


def _apply_input(state: WorldState, frame_input: FrameInput) -> list[Event]:
    state.action_held = frame_input.action
    if frame_input.direction is None or state.player is None:
        return []
    if frame_input.turn_only:
        state.turn_player(frame_input.direction)
        return []
    origin = (state.player.x, state.player.y)
    if not state.step_player(frame_input.direction, dash=frame_input.dash):
        return []
    return [
        Event(
            kind="PLAYER_STEP",
            payload={
                "from": list(origin),
                "to": [state.player.x, state.player.y],
                "dash": frame_input.dash,
            },
        )
    ]


def _event_mover(state: WorldState, event_id: int) -> FrameCallback:
    def _move(frame: int) -> Event | None:
        event = state.events.get(event_id)
        if event is None or not event.route or event.move_interval <= 0:
            return None
        if frame % event.move_interval != 0:
            return None
        state.advance_event(event)
        return None

    return _move


def _sensor_callback(
    state: WorldState, runner: SensorRunner, event_id: int, command: object
) -> FrameCallback:
    def _sense(frame: int) -> Event | None:
        if not runner.run_command(event_id, command):
            return None
        event = state.events[event_id]
        logger.info("Frame %s: %s sensor fired", frame, event.name)
        return Event(
            kind="SWITCH_TOGGLED",
            payload={
                "event_id": event_id,
                "event": event.name,
                "mode": _mode_label(command),
            },
        )

    return _sense


def _mode_label(command: object) -> str:
    parsed = coerce_sensor_command(command)
    return parsed.mode.value if parsed is not None else "?"
