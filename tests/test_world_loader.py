import json
from pathlib import Path

import pytest

from tilesense.sim.config import load_sensor_config
from tilesense.sim.contracts import Direction
from tilesense.sim.geometry import CellInfo
from tilesense.sim.world_loader import (
    WorldPaths,
    load_world_config,
    load_world_state,
)

DEMO_WORLD = Path(__file__).resolve().parents[1] / "world" / "demo"


def test_demo_world_loads() -> None:
    paths = WorldPaths(base_dir=DEMO_WORLD)
    config = load_world_config(paths=paths)
    state = load_world_state(paths=paths)

    assert config.script
    assert state.tile_map.width == 16
    assert state.tile_map.height == 10
    assert sorted(state.events) == [1, 2, 3]
    assert state.player is not None
    assert state.tile_map.cell(9, 3) == CellInfo(region_id=1, terrain_tag=0)
    assert state.tile_map.cell(-1, 0) is None
    assert not state.tile_map.is_passable(0, 0)

    sensor = load_sensor_config(config.obstacles, environ={})
    assert sensor.obstacle_region_id == 1
    assert sensor.obstacle_terrain_tag == 5


def test_world_without_layers_defaults_to_zero(tmp_path: Path) -> None:
    _write_world(tmp_path, {"map_file": "map.txt"}, ["...", "..."])

    state = load_world_state(paths=WorldPaths(base_dir=tmp_path))

    assert state.map_id == 1
    assert state.player is None
    assert state.events == {}
    assert state.tile_map.cell(2, 1) == CellInfo(region_id=0, terrain_tag=0)


def test_events_and_routes_parse(tmp_path: Path) -> None:
    _write_world(
        tmp_path,
        {
            "map_id": 4,
            "map_file": "map.txt",
            "player": {"x": 0, "y": 0, "direction": 6},
            "events": [
                {
                    "id": 7,
                    "x": 2,
                    "y": 1,
                    "direction": "up",
                    "route": ["left", "right"],
                    "commands": [{"mode": "Basic"}],
                }
            ],
        },
        ["...", "..."],
    )

    state = load_world_state(paths=WorldPaths(base_dir=tmp_path))
    event = state.events[7]

    assert state.map_id == 4
    assert state.player.direction == Direction.RIGHT
    assert event.name == "EV007"
    assert event.direction == Direction.UP
    assert event.route == [Direction.LEFT, Direction.RIGHT]
    assert event.commands == [{"mode": "Basic"}]


def test_missing_map_file_names_path(tmp_path: Path) -> None:
    (tmp_path / "world.json").write_text(
        json.dumps({"map_file": "missing.txt"}), encoding="utf-8"
    )

    with pytest.raises(FileNotFoundError, match="missing.txt"):
        load_world_state(paths=WorldPaths(base_dir=tmp_path))


def test_layer_size_mismatch_rejected(tmp_path: Path) -> None:
    _write_world(
        tmp_path,
        {"map_file": "map.txt", "region_file": "regions.txt"},
        ["...", "..."],
    )
    (tmp_path / "regions.txt").write_text("00\n00\n", encoding="utf-8")

    with pytest.raises(ValueError, match="regions.txt"):
        load_world_state(paths=WorldPaths(base_dir=tmp_path))


def test_duplicate_event_ids_rejected(tmp_path: Path) -> None:
    _write_world(
        tmp_path,
        {
            "map_file": "map.txt",
            "events": [{"id": 1, "x": 0, "y": 0}, {"id": 1, "x": 1, "y": 0}],
        },
        ["..."],
    )

    with pytest.raises(ValueError, match="Duplicate"):
        load_world_config(paths=WorldPaths(base_dir=tmp_path))


def test_event_outside_map_rejected(tmp_path: Path) -> None:
    _write_world(
        tmp_path,
        {"map_file": "map.txt", "events": [{"id": 1, "x": 5, "y": 0}]},
        ["..."],
    )

    with pytest.raises(ValueError, match="outside the map"):
        load_world_state(paths=WorldPaths(base_dir=tmp_path))


def test_missing_map_file_key_is_a_value_error(tmp_path: Path) -> None:
    (tmp_path / "world.json").write_text("{}", encoding="utf-8")

    with pytest.raises(ValueError, match="missing 'map_file'"):
        load_world_config(paths=WorldPaths(base_dir=tmp_path))


def test_event_without_coordinates_is_a_value_error(tmp_path: Path) -> None:
    _write_world(
        tmp_path,
        {"map_file": "map.txt", "events": [{"id": 2, "y": 0}]},
        ["..."],
    )

    with pytest.raises(ValueError, match="event 2: missing 'x'"):
        load_world_config(paths=WorldPaths(base_dir=tmp_path))


def test_non_object_world_and_bad_numbers_rejected(tmp_path: Path) -> None:
    (tmp_path / "world.json").write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError, match="expected an object"):
        load_world_config(paths=WorldPaths(base_dir=tmp_path))

    _write_world(
        tmp_path,
        {"map_file": "map.txt", "player": {"x": None, "y": 0}},
        ["..."],
    )
    with pytest.raises(ValueError, match="must be an integer"):
        load_world_config(paths=WorldPaths(base_dir=tmp_path))


def _write_world(base_dir: Path, data: dict, map_lines: list[str]) -> None:
    (base_dir / "world.json").write_text(json.dumps(data), encoding="utf-8")
    (base_dir / "map.txt").write_text("\n".join(map_lines) + "\n", encoding="utf-8")
