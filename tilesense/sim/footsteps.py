"""Alternating footstep sounds keyed to the terrain under the player."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

WALK_INTERVAL = 20
DASH_INTERVAL = 15
DEFAULT_GROUND = "default"

GROUND_TYPES: dict[int, str] = {
    1: "grass",
    2: "dirt",
    3: "stone",
    4: "sand",
}


@dataclass(frozen=True)
class SoundEffect:
    name: str
    volume: int = 5
    pitch: int = 130
    pan: int = 0


class AudioSink(Protocol):
    def play_se(self, effect: SoundEffect) -> None: ...


class Walker(Protocol):
    x: int
    y: int

    def is_moving(self) -> bool: ...

    def is_dashing(self) -> bool: ...


class RecordingAudio:
    """Audio sink that keeps every effect it was asked to play."""

    def __init__(self) -> None:
        self.played: list[SoundEffect] = []

    def play_se(self, effect: SoundEffect) -> None:
        self.played.append(effect)


def ground_type_for(terrain_tag: int | None) -> str:
    if terrain_tag is None:
        return DEFAULT_GROUND
    return GROUND_TYPES.get(terrain_tag, DEFAULT_GROUND)


class FootstepPlayer:
    def __init__(
        self,
        audio: AudioSink,
        terrain_tag: Callable[[int, int], int],
    ) -> None:
        self._audio = audio
        self._terrain_tag = terrain_tag
        self.timer = 0
        self.left_foot = True
        self.ground_type = DEFAULT_GROUND
        self._cached_tag: int | None = None

    def update(self, walker: Walker) -> SoundEffect | None:
        """Advance one frame; returns the effect played, if any.

        The ground cache refreshes after the sound, so a step onto new
        terrain still sounds like the previous tile.
        """
        if self.timer > 0:
            self.timer -= 1
        effect = None
        if self.timer == 0 and walker.is_moving():
            name = "Footstep_Left" if self.left_foot else "Footstep_Right"
            self.timer = DASH_INTERVAL if walker.is_dashing() else WALK_INTERVAL
            if self.ground_type != DEFAULT_GROUND:
                name = f"{name}_{self.ground_type}"
            effect = SoundEffect(name=name)
            self._audio.play_se(effect)
            self.left_foot = not self.left_foot
        self._refresh_ground(walker)
        return effect

    def _refresh_ground(self, walker: Walker) -> None:
        tag = self._terrain_tag(walker.x, walker.y)
        if tag != self._cached_tag:
            self._cached_tag = tag
            self.ground_type = ground_type_for(tag)
