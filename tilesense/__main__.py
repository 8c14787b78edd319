"""Module entry point for `python -m tilesense`."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from tilesense.app import run_play, run_scenario
from tilesense.db.replay_log import RUN_LOG_NAME
from tilesense.render.replay_reader import read_header, read_tick_payloads
from tilesense.render.viewer import render_tick
from tilesense.sim.config import SensorConfig, load_sensor_config
from tilesense.sim.world_loader import WorldPaths, load_world_state

DEFAULT_REPLAY_DIR = Path("replay")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Run proximity sensor and footstep scenarios."
    )
    parser.add_argument(
        "--world",
        type=Path,
        default=None,
        help="World folder containing world.json (defaults to world/demo).",
    )
    parser.add_argument(
        "--play",
        action="store_true",
        help="Walk the player interactively in a Textual viewer.",
    )
    parser.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="Print a saved run folder frame by frame.",
    )
    parser.add_argument(
        "--latest",
        action="store_true",
        help="Replay the most recent run in --replay-dir.",
    )
    parser.add_argument(
        "--replay-dir",
        type=Path,
        default=DEFAULT_REPLAY_DIR,
        help="Base replay directory for new runs.",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Number of frames to run. Defaults to the script length plus 30.",
    )
    parser.add_argument(
        "--script",
        action="append",
        default=None,
        help="Input script entry (repeatable), e.g. 'walk:down', 'action:3'.",
    )
    parser.add_argument(
        "--only-events",
        action="store_true",
        help="When replaying, print only frames with events.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING...).",
    )
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        if args.play:
            run_play(args.world)
            return

        if args.latest:
            run_folder = _latest_run_folder(args.replay_dir)
            if run_folder is None:
                raise SystemExit("No run folder found. Run a scenario first.")
            _replay_run(run_folder, only_events=args.only_events)
            return

        if args.replay is not None:
            _replay_run(args.replay, only_events=args.only_events)
            return

        created_run = run_scenario(
            args.replay_dir,
            world_dir=args.world,
            ticks=args.ticks,
            script=args.script,
        )
    except (FileNotFoundError, ValueError, ValidationError) as exc:
        raise SystemExit(f"Error: {exc}") from exc
    print(f"Run saved to {created_run}")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _latest_run_folder(base_dir: Path) -> Path | None:
    if not base_dir.exists():
        return None
    run_dirs = [path for path in base_dir.iterdir() if path.is_dir()]
    if not run_dirs:
        return None
    return sorted(run_dirs)[-1]


def header_sensor_config(metadata: dict) -> SensorConfig:
    """Rebuild the sensor config saved in a replay header.

    Layers missing from the header keep their defaults; a saved ``None``
    stays disabled.
    """
    raw = metadata.get("obstacles") or {}
    section = {
        key: raw[f"obstacle_{key}"]
        for key in ("region_id", "terrain_tag")
        if f"obstacle_{key}" in raw
    }
    return load_sensor_config(section, environ={})


def _replay_run(run_folder: Path, *, only_events: bool = False) -> None:
    console = Console()
    log_path = run_folder / RUN_LOG_NAME
    if not log_path.exists():
        raise FileNotFoundError(f"Missing replay log: {log_path}")
    metadata = read_header(log_path) or {}
    tile_map = None
    obstacles = None
    world_dir = metadata.get("world_dir")
    if world_dir and Path(world_dir, "world.json").exists():
        tile_map = load_world_state(paths=WorldPaths(base_dir=Path(world_dir))).tile_map
        obstacles = header_sensor_config(metadata).obstacles
    for payload in read_tick_payloads(log_path):
        if only_events and not payload.events:
            continue
        console.print(render_tick(payload, tile_map=tile_map, obstacles=obstacles))


if __name__ == "__main__":
    main()
