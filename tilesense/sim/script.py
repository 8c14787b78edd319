"""Scripted player input, expanded to one entry per frame.

Script entries:

- ``down`` / ``walk:down``: take one walking step, then let it finish
- ``dash:left``: take one dashing step
- ``turn:up``: face a direction without moving
- ``action`` / ``action:N``: hold the action button for N frames
- ``wait`` / ``wait:N``: idle for N frames
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from tilesense.sim.contracts import Direction
from tilesense.sim.world_state import DASH_FRAMES, WALK_FRAMES


@dataclass(frozen=True)
class FrameInput:
    direction: Direction | None = None
    dash: bool = False
    turn_only: bool = False
    action: bool = False


IDLE = FrameInput()


def expand_script(entries: Iterable[str]) -> list[FrameInput]:
    frames: list[FrameInput] = []
    for raw in entries:
        verb, _, arg = raw.strip().lower().partition(":")
        if verb in ("wait", "action"):
            count = int(arg) if arg else 1
            if count < 1:
                raise ValueError(f"Frame count must be positive in {raw!r}.")
            frame = FrameInput(action=True) if verb == "action" else IDLE
            frames.extend([frame] * count)
        elif verb in ("walk", "dash", "turn"):
            direction = Direction.parse(arg)
            if verb == "turn":
                frames.append(FrameInput(direction=direction, turn_only=True))
                continue
            dash = verb == "dash"
            frames.append(FrameInput(direction=direction, dash=dash))
            # The step itself consumes the first frame.
            frames.extend([IDLE] * ((DASH_FRAMES if dash else WALK_FRAMES) - 1))
        else:
            direction = Direction.parse(verb)
            frames.append(FrameInput(direction=direction))
            frames.extend([IDLE] * (WALK_FRAMES - 1))
    return frames
