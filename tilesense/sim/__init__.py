"""Proximity sensor core, footsteps and the reference host."""

from tilesense.sim.config import SensorConfig, load_sensor_config
from tilesense.sim.contracts import (
    ComparisonOperator,
    DetectionMode,
    Direction,
    Event,
    SensorCommand,
    TickPayload,
    coerce_sensor_command,
)
from tilesense.sim.footsteps import FootstepPlayer, SoundEffect
from tilesense.sim.geometry import (
    CellInfo,
    GridPosition,
    ObstacleMask,
    can_stealth_interact,
    has_line_of_sight,
    is_facing_toward,
    is_in_range,
    is_orthogonal,
    trace_line,
)
from tilesense.sim.proximity import (
    AgentRole,
    AgentSnapshot,
    ProximityEvaluator,
    SensorRunner,
    ToggleTarget,
)
from tilesense.sim.tick_loop import FrameScheduler, run_ticks
from tilesense.sim.world_state import WorldState

__all__ = [
    "AgentRole",
    "AgentSnapshot",
    "CellInfo",
    "ComparisonOperator",
    "DetectionMode",
    "Direction",
    "Event",
    "FootstepPlayer",
    "FrameScheduler",
    "GridPosition",
    "ObstacleMask",
    "ProximityEvaluator",
    "SensorCommand",
    "SensorConfig",
    "SensorRunner",
    "SoundEffect",
    "TickPayload",
    "ToggleTarget",
    "WorldState",
    "can_stealth_interact",
    "coerce_sensor_command",
    "has_line_of_sight",
    "is_facing_toward",
    "is_in_range",
    "is_orthogonal",
    "load_sensor_config",
    "run_ticks",
    "trace_line",
]
