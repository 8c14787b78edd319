import pytest
from pydantic import ValidationError

from tilesense.sim.config import (
    ENV_OBSTACLE_REGION_ID,
    ENV_OBSTACLE_TERRAIN_TAG,
    SensorConfig,
    load_sensor_config,
)
from tilesense.sim.geometry import ObstacleMask


def test_defaults_block_region_and_terrain_one() -> None:
    config = load_sensor_config(environ={})

    assert config == SensorConfig()
    assert config.obstacles == ObstacleMask(region_id=1, terrain_tag=1)


def test_world_section_overrides_defaults() -> None:
    config = load_sensor_config({"region_id": 3, "terrain_tag": None}, environ={})

    assert config.obstacles == ObstacleMask(region_id=3, terrain_tag=None)


def test_environment_overrides_world_section() -> None:
    config = load_sensor_config(
        {"region_id": 3, "terrain_tag": 4},
        environ={ENV_OBSTACLE_REGION_ID: "7", ENV_OBSTACLE_TERRAIN_TAG: "none"},
    )

    assert config.obstacle_region_id == 7
    assert config.obstacle_terrain_tag is None


def test_malformed_ids_rejected_at_startup() -> None:
    with pytest.raises(ValidationError):
        load_sensor_config(environ={ENV_OBSTACLE_REGION_ID: "wall"})
    with pytest.raises(ValidationError):
        load_sensor_config({"terrain_tag": -2}, environ={})


def test_config_is_immutable() -> None:
    config = SensorConfig()

    with pytest.raises(ValidationError):
        config.obstacle_region_id = 4
