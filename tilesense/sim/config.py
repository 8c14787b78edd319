"""Sensor configuration read once at startup."""

from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from tilesense.sim.geometry import ObstacleMask

ENV_OBSTACLE_REGION_ID = "TILESENSE_OBSTACLE_REGION_ID"
ENV_OBSTACLE_TERRAIN_TAG = "TILESENSE_OBSTACLE_TERRAIN_TAG"
DEFAULT_OBSTACLE_REGION_ID = 1
DEFAULT_OBSTACLE_TERRAIN_TAG = 1


class SensorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    obstacle_region_id: int | None = Field(default=DEFAULT_OBSTACLE_REGION_ID, ge=0)
    obstacle_terrain_tag: int | None = Field(
        default=DEFAULT_OBSTACLE_TERRAIN_TAG, ge=0
    )

    @property
    def obstacles(self) -> ObstacleMask:
        return ObstacleMask(
            region_id=self.obstacle_region_id,
            terrain_tag=self.obstacle_terrain_tag,
        )


def load_sensor_config(
    data: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> SensorConfig:
    """Build the config from a world ``obstacles`` section plus env overrides.

    Raises ``pydantic.ValidationError`` on malformed values.
    """
    environ = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    if data:
        if "region_id" in data:
            values["obstacle_region_id"] = data["region_id"]
        if "terrain_tag" in data:
            values["obstacle_terrain_tag"] = data["terrain_tag"]
    region = environ.get(ENV_OBSTACLE_REGION_ID)
    if region:
        values["obstacle_region_id"] = _parse_env_id(region)
    terrain = environ.get(ENV_OBSTACLE_TERRAIN_TAG)
    if terrain:
        values["obstacle_terrain_tag"] = _parse_env_id(terrain)
    return SensorConfig.model_validate(values)


def _parse_env_id(value: str) -> str | None:
    # "none" switches the layer off.
    if value.strip().lower() == "none":
        return None
    return value.strip()
