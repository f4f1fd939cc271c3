"""The application loop tying window, renderer and scene together."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from .events import EventBus, EventType
from .nodes import Node
from .renderer import GlBackend, Renderer


class App:
    """Runs frames until a quit event arrives, then releases everything."""

    def __init__(
        self,
        bus: Optional[EventBus] = None,
        window: Any = None,
        renderer: Optional[Renderer] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.bus = bus if bus is not None else EventBus()
        self.window = window
        self.renderer = renderer if renderer is not None else Renderer(self.bus)
        self.root: Optional[Node] = None
        self.is_running = False
        self.dt = 0.0
        self._clock = clock
        self._closed = False
        self.bus.subscribe(self._on_event, None)
        self.last_time = clock()

    def __enter__(self) -> "App":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _on_event(self, event_type: EventType, event: Any, user_data: Any) -> None:
        if event_type is EventType.QUIT:
            self.is_running = False

    def set_root(self, root: Node) -> None:
        self.root = root

    def step(self) -> None:
        """Run one frame: poll input, render, present, then update the scene."""
        if self.root is None:
            raise RuntimeError("no root node set")
        now = self._clock()
        self.dt = now - self.last_time
        self.last_time = now

        if self.window is not None:
            self.window.update()
        self.renderer.render(self.root)
        if self.window is not None:
            self.window.swap_buffers()

        self.root.update(self.dt)

    def run(self) -> None:
        """Run frames until quit, then close."""
        self.is_running = True
        try:
            while self.is_running:
                self.step()
        finally:
            self.close()

    def close(self) -> None:
        """Delete the scene, the renderer and the window."""
        if self._closed:
            return
        self._closed = True
        if self.root is not None:
            self.root.delete()
        self.renderer.close()
        if self.window is not None:
            self.window.close()


def create_app(title: str = "pear app", width: int = 800, height: int = 600) -> App:
    """Open a window with an OpenGL renderer and return the app driving them."""
    from .window import Window

    bus = EventBus()
    window = Window(bus, title, width, height)
    renderer = Renderer(bus, GlBackend(), width, height)
    return App(bus, window, renderer)