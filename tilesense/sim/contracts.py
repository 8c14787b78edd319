"""Core data contracts for sensor commands, replay events and ticks."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)


class Direction(IntEnum):
    """Engine facing values (numpad layout)."""

    DOWN = 2
    LEFT = 4
    RIGHT = 6
    UP = 8

    @classmethod
    def parse(cls, raw: Any) -> "Direction":
        if isinstance(raw, Direction):
            return raw
        if isinstance(raw, str):
            name = raw.strip().upper()
            if name in cls.__members__:
                return cls[name]
            if name.isdigit():
                return cls(int(name))
            raise ValueError(f"Unknown direction {raw!r}.")
        return cls(raw)

    @property
    def delta(self) -> tuple[int, int]:
        return _DIRECTION_DELTAS[self]


_DIRECTION_DELTAS = {
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.UP: (0, -1),
}


class DetectionMode(str, Enum):
    ALL_DIRECTIONS = "all_directions"
    FACING = "facing"
    ORTHOGONAL = "orthogonal"
    FACING_IN_LINE = "facing_in_line"
    STEALTH_KILL = "stealth_kill"


# Plugin command names from the editor.
MODE_ALIASES: dict[str, DetectionMode] = {
    "Basic": DetectionMode.ALL_DIRECTIONS,
    "Facing": DetectionMode.FACING,
    "Orthogonal": DetectionMode.ORTHOGONAL,
    "FacingLine": DetectionMode.FACING_IN_LINE,
    "EnableStealthKill": DetectionMode.STEALTH_KILL,
}


class ComparisonOperator(str, Enum):
    LESS_THAN = "less than"
    LESS_OR_EQUAL = "less than or equal to"
    EQUAL = "equals"
    GREATER_OR_EQUAL = "greater than or equal to"
    GREATER_THAN = "greater than"


SELF_SWITCH_LETTERS = ("A", "B", "C", "D")
NO_SELF_SWITCH = "0"


class SensorCommand(BaseModel):
    """One configured sensor command attached to a map event."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    mode: DetectionMode
    operator: ComparisonOperator = ComparisonOperator.LESS_OR_EQUAL
    distance: float = 3
    self_switch: str = Field(default="A", alias="self-switch")
    switch: int = Field(default=0, ge=0)

    @field_validator("mode", mode="before")
    @classmethod
    def _resolve_alias(cls, value: Any) -> Any:
        if isinstance(value, str) and value in MODE_ALIASES:
            return MODE_ALIASES[value]
        return value

    @field_validator("self_switch", mode="before")
    @classmethod
    def _check_letter(cls, value: Any) -> Any:
        if value is None:
            return NO_SELF_SWITCH
        text = str(value).strip().upper()
        if text != NO_SELF_SWITCH and text not in SELF_SWITCH_LETTERS:
            raise ValueError(f"self-switch must be 0 or one of A-D, got {value!r}")
        return text

    @model_validator(mode="before")
    @classmethod
    def _stealth_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        mode = data.get("mode")
        if not isinstance(mode, str):
            return data
        if MODE_ALIASES.get(mode, mode) in (
            DetectionMode.STEALTH_KILL,
            DetectionMode.STEALTH_KILL.value,
        ):
            if "self_switch" not in data and "self-switch" not in data:
                data = {**data, "self_switch": "B"}
        return data

    @property
    def local_letter(self) -> str | None:
        return None if self.self_switch == NO_SELF_SWITCH else self.self_switch

    @property
    def switch_id(self) -> int | None:
        return self.switch or None


def coerce_sensor_command(raw: Any) -> SensorCommand | None:
    """Validate a sensor command or return None (never detects)."""
    if isinstance(raw, SensorCommand):
        return raw
    try:
        return SensorCommand.model_validate(raw)
    except ValidationError:
        return None


class Event(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: str
    payload: dict[str, Any] = Field(default_factory=dict)


class ActorFrame(BaseModel):
    model_config = ConfigDict(extra="forbid")

    actor_id: str
    name: str
    x: int
    y: int
    direction: Direction
    moving: bool = False


class FlagSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    switches: dict[int, bool] = Field(default_factory=dict)
    self_switches: dict[str, bool] = Field(default_factory=dict)


class TickPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tick: int
    map_id: int
    actors: list[ActorFrame]
    flags: FlagSnapshot = Field(default_factory=FlagSnapshot)
    events: list[Event] | None = None
