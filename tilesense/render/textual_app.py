"""Textual app wrapper for tilesense screens."""

from __future__ import annotations

from textual.app import App
from textual.screen import Screen


class TilesenseApp(App):
    """Run a single screen in a minimal Textual app."""

    def __init__(self, screen: Screen, *, title: str = "Tilesense") -> None:
        super().__init__()
        self._initial_screen = screen
        self.title = title

    def on_mount(self) -> None:
        self.push_screen(self._initial_screen)
