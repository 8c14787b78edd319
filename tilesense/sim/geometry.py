"""Grid geometry predicates for proximity and line of sight."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from tilesense.sim.contracts import ComparisonOperator, Direction


@dataclass(frozen=True)
class GridPosition:
    x: int
    y: int


@dataclass(frozen=True)
class CellInfo:
    region_id: int
    terrain_tag: int


@dataclass(frozen=True)
class ObstacleMask:
    """Region id / terrain tag that block sight. ``None`` disables a layer."""

    region_id: int | None = 1
    terrain_tag: int | None = 1

    def blocks(self, cell: CellInfo | None) -> bool:
        if cell is None:
            return False
        if self.region_id is not None and cell.region_id == self.region_id:
            return True
        return self.terrain_tag is not None and cell.terrain_tag == self.terrain_tag


CellLookup = Callable[[int, int], "CellInfo | None"]


def euclidean_distance(a: GridPosition, b: GridPosition) -> float:
    return math.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2)


def is_in_range(
    observer: GridPosition,
    target: GridPosition,
    operator: ComparisonOperator | str,
    threshold: float,
) -> bool:
    """Compare the Euclidean distance between two cells with *threshold*.

    Unknown operators never match.
    """
    try:
        operator = ComparisonOperator(operator)
    except (TypeError, ValueError):
        return False
    distance = euclidean_distance(observer, target)
    if operator is ComparisonOperator.LESS_THAN:
        return distance < threshold
    if operator is ComparisonOperator.LESS_OR_EQUAL:
        return distance <= threshold
    if operator is ComparisonOperator.EQUAL:
        return distance == threshold
    if operator is ComparisonOperator.GREATER_OR_EQUAL:
        return distance >= threshold
    if operator is ComparisonOperator.GREATER_THAN:
        return distance > threshold
    return False


def is_facing_toward(
    direction: Direction, observer: GridPosition, target: GridPosition
) -> bool:
    if direction == Direction.DOWN:
        return target.y > observer.y
    if direction == Direction.UP:
        return target.y < observer.y
    if direction == Direction.RIGHT:
        return target.x > observer.x
    if direction == Direction.LEFT:
        return target.x < observer.x
    return False


def is_orthogonal(observer: GridPosition, target: GridPosition) -> bool:
    return observer.x == target.x or observer.y == target.y


def trace_line(origin: GridPosition, target: GridPosition) -> list[GridPosition]:
    """Cells strictly between *origin* and *target* (Bresenham).

    Tracing stops once the traced cell is at least as far from the origin
    as the target is, so neither endpoint is returned.
    """
    dx = abs(target.x - origin.x)
    dy = abs(target.y - origin.y)
    step_x = 1 if origin.x < target.x else -1
    step_y = 1 if origin.y < target.y else -1
    hypotenuse = math.hypot(dx, dy)

    cells: list[GridPosition] = []
    error = dx - dy
    x, y = origin.x, origin.y
    while True:
        doubled = 2 * error
        if doubled > -dy:
            error -= dy
            x += step_x
        if doubled < dx:
            error += dx
            y += step_y
        if math.hypot(x - origin.x, y - origin.y) >= hypotenuse:
            break
        cells.append(GridPosition(x, y))
    return cells


def has_line_of_sight(
    observer: GridPosition,
    target: GridPosition,
    obstacles: ObstacleMask,
    lookup_cell: CellLookup,
) -> bool:
    for cell in trace_line(observer, target):
        if obstacles.blocks(lookup_cell(cell.x, cell.y)):
            return False
    return True


def can_stealth_interact(
    target: GridPosition, target_direction: Direction, observer: GridPosition
) -> bool:
    """Player standing next to the observer and facing it."""
    return is_facing_toward(target_direction, target, observer) and is_in_range(
        observer, target, ComparisonOperator.LESS_OR_EQUAL, 1
    )
