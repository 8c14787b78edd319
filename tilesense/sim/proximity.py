"""Proximity sensor: combine geometry predicates and toggle switches."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from tilesense.sim.config import SensorConfig
from tilesense.sim.contracts import (
    ComparisonOperator,
    DetectionMode,
    Direction,
    coerce_sensor_command,
)
from tilesense.sim.geometry import (
    CellInfo,
    GridPosition,
    can_stealth_interact,
    has_line_of_sight,
    is_facing_toward,
    is_in_range,
    is_orthogonal,
)

logger = logging.getLogger(__name__)


class AgentRole(str, Enum):
    OBSERVER = "observer"
    TARGET = "target"


@dataclass(frozen=True)
class AgentSnapshot:
    role: AgentRole
    position: GridPosition
    direction: Direction


@dataclass(frozen=True)
class ToggleTarget:
    map_id: int
    event_id: int
    letter: str | None = None
    switch_id: int | None = None


class PositionProvider(Protocol):
    map_id: int

    def event_agent(self, event_id: int) -> AgentSnapshot | None:
        """Snapshot of a map event, or None when it does not exist."""

    def player_agent(self) -> AgentSnapshot | None:
        """Snapshot of the player, or None outside an active map."""


class MapCellInspector(Protocol):
    def cell(self, x: int, y: int) -> CellInfo | None:
        """Region id and terrain tag of a cell; None outside the map."""


class FlagStore(Protocol):
    def get_local(self, map_id: int, event_id: int, letter: str) -> bool: ...

    def set_local(
        self, map_id: int, event_id: int, letter: str, value: bool
    ) -> None: ...

    def get_global(self, switch_id: int) -> bool: ...

    def set_global(self, switch_id: int, value: bool) -> None: ...


class InputSignal(Protocol):
    def is_action_held(self) -> bool: ...


class SensorHost(PositionProvider, MapCellInspector, FlagStore, InputSignal, Protocol):
    """Everything the evaluator needs from the running engine."""


class ProximityEvaluator:
    def __init__(
        self,
        config: SensorConfig,
        *,
        cells: MapCellInspector,
        flags: FlagStore,
    ) -> None:
        self._obstacles = config.obstacles
        self._cells = cells
        self._flags = flags

    def is_detected(
        self,
        mode: DetectionMode,
        observer: AgentSnapshot,
        target: AgentSnapshot,
        operator: ComparisonOperator,
        threshold: float,
        *,
        action_held: bool = False,
    ) -> bool:
        here = observer.position
        there = target.position
        if mode == DetectionMode.ALL_DIRECTIONS:
            matched = is_in_range(here, there, operator, threshold)
        elif mode == DetectionMode.FACING:
            matched = is_in_range(
                here, there, operator, threshold
            ) and is_facing_toward(observer.direction, here, there)
        elif mode == DetectionMode.ORTHOGONAL:
            matched = is_in_range(here, there, operator, threshold) and is_orthogonal(
                here, there
            )
        elif mode == DetectionMode.FACING_IN_LINE:
            matched = (
                is_in_range(here, there, operator, threshold)
                and is_facing_toward(observer.direction, here, there)
                and is_orthogonal(here, there)
            )
        elif mode == DetectionMode.STEALTH_KILL:
            matched = action_held and can_stealth_interact(
                there, target.direction, here
            )
        else:
            matched = False
        if not matched:
            return False
        return has_line_of_sight(here, there, self._obstacles, self._cells.cell)

    def evaluate(
        self,
        mode: DetectionMode,
        observer: AgentSnapshot,
        target: AgentSnapshot,
        operator: ComparisonOperator,
        threshold: float,
        toggle: ToggleTarget,
        *,
        action_held: bool = False,
    ) -> bool:
        """Flip the toggle's flags when the mode's condition holds.

        Flags are negated on every satisfying call, so a condition that
        holds across consecutive frames makes them oscillate.
        """
        if not self.is_detected(
            mode, observer, target, operator, threshold, action_held=action_held
        ):
            return False
        self.flip(toggle)
        return True

    def flip(self, toggle: ToggleTarget) -> None:
        if toggle.letter is not None:
            current = self._flags.get_local(
                toggle.map_id, toggle.event_id, toggle.letter
            )
            self._flags.set_local(
                toggle.map_id, toggle.event_id, toggle.letter, not current
            )
        if toggle.switch_id is not None:
            current = self._flags.get_global(toggle.switch_id)
            self._flags.set_global(toggle.switch_id, not current)


class SensorRunner:
    """Evaluate raw sensor commands for events against a live host."""

    def __init__(self, config: SensorConfig, host: SensorHost) -> None:
        self._host = host
        self._evaluator = ProximityEvaluator(config, cells=host, flags=host)

    def run_command(self, event_id: int, raw_command: Any) -> bool:
        command = coerce_sensor_command(raw_command)
        if command is None:
            logger.debug("Ignoring malformed sensor command for event %s", event_id)
            return False
        observer = self._host.event_agent(event_id)
        target = self._host.player_agent()
        if observer is None or target is None:
            logger.debug("Skipping sensor for event %s: agent unavailable", event_id)
            return False
        action_held = (
            command.mode == DetectionMode.STEALTH_KILL and self._host.is_action_held()
        )
        toggle = ToggleTarget(
            map_id=self._host.map_id,
            event_id=event_id,
            letter=command.local_letter,
            switch_id=command.switch_id,
        )
        fired = self._evaluator.evaluate(
            command.mode,
            observer,
            target,
            command.operator,
            command.distance,
            toggle,
            action_held=action_held,
        )
        if fired:
            logger.debug(
                "Event %s %s sensor fired (letter=%s, switch=%s)",
                event_id,
                command.mode.value,
                toggle.letter,
                toggle.switch_id,
            )
        return fired
