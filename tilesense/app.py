"""Application entry for running sensor scenarios."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Mapping

from tilesense.db.replay_log import (
    append_tick_payload,
    create_run_folder,
    write_header,
)
from tilesense.render.play_viewer import run_play_viewer
from tilesense.sim.config import SensorConfig, load_sensor_config
from tilesense.sim.contracts import TickPayload
from tilesense.sim.footsteps import RecordingAudio
from tilesense.sim.script import expand_script
from tilesense.sim.tick_loop import run_ticks
from tilesense.sim.world_loader import (
    DEFAULT_WORLD_DIR,
    WorldPaths,
    load_world_config,
    load_world_state,
)
from tilesense.sim.world_state import WorldState

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_FRAMES = 30


def resolve_world_paths(world_dir: Path | None = None) -> WorldPaths:
    base = world_dir or Path(os.getenv("TILESENSE_WORLD_DIR") or DEFAULT_WORLD_DIR)
    return WorldPaths(base_dir=base)


def load_scenario(
    world_dir: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> tuple[WorldState, SensorConfig, list[str]]:
    paths = resolve_world_paths(world_dir)
    config = load_world_config(paths=paths)
    state = load_world_state(paths=paths, config=config)
    sensor_config = load_sensor_config(config.obstacles, environ=environ)
    return state, sensor_config, config.script


def iter_scenario(
    state: WorldState,
    *,
    config: SensorConfig,
    script: Iterable[str],
    ticks: int | None = None,
    audio: RecordingAudio | None = None,
) -> Iterator[TickPayload]:
    frames = expand_script(script)
    total = ticks if ticks is not None else len(frames) + DEFAULT_SETTLE_FRAMES
    return run_ticks(state, total, script=frames, config=config, audio=audio)


def run_scenario(
    base_dir: Path,
    *,
    world_dir: Path | None = None,
    ticks: int | None = None,
    script: list[str] | None = None,
    timestamp: str | None = None,
) -> Path:
    paths = resolve_world_paths(world_dir)
    state, config, world_script = load_scenario(paths.base_dir)
    entries = script if script is not None else world_script
    run_dir, log_path = create_run_folder(base_dir, timestamp=timestamp)
    write_header(
        log_path,
        metadata={
            "run_id": run_dir.name,
            "created_at": run_dir.name,
            "world_dir": str(paths.base_dir),
            "map_id": state.map_id,
            "script": list(entries),
            "obstacles": config.model_dump(),
        },
    )
    audio = RecordingAudio()
    toggles = 0
    for payload in iter_scenario(
        state, config=config, script=entries, ticks=ticks, audio=audio
    ):
        toggles += sum(
            1 for event in payload.events or [] if event.kind == "SWITCH_TOGGLED"
        )
        append_tick_payload(log_path, payload)
    logger.info(
        "Ran %s frames: %s toggles, %s footsteps",
        state.tick,
        toggles,
        len(audio.played),
    )
    return run_dir


def run_play(world_dir: Path | None = None, *, frame_interval: float = 1 / 30) -> None:
    state, config, _ = load_scenario(world_dir)
    run_play_viewer(state, config=config, frame_interval=frame_interval)
