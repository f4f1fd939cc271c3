import pytest

from pearengine.app import App
from pearengine.events import EventType
from pearengine.nodes import Container, Script, root
from pearengine.renderer import Renderer


class FakeWindow:
    def __init__(self, log):
        self.log = log

    def update(self):
        self.log.append("update")

    def swap_buffers(self):
        self.log.append("swap")

    def close(self):
        self.log.append("close")


class FakeBackend:
    def __init__(self, log):
        self.log = log

    def draw(self, calls):
        self.log.append("draw")

    def close(self):
        self.log.append("backend close")


def _clock(values):
    return iter(values).__next__


def _app(log, clock):
    app = App(window=FakeWindow(log), clock=clock)
    app.renderer = Renderer(app.bus, FakeBackend(log))
    return app


def test_step_order_and_dt():
    log = []
    app = _app(log, _clock([0.0, 0.5, 1.0]))
    scene = root("root")
    seen = []
    Script(scene, "script", lambda script, dt: (log.append("script"), seen.append(dt)))
    app.set_root(scene)
    app.step()
    app.step()
    assert seen == [0.5, 0.5]
    assert app.dt == 0.5
    assert log == ["update", "draw", "swap", "script"] * 2


def test_step_without_root_raises():
    app = App(clock=_clock([0.0, 1.0]))
    with pytest.raises(RuntimeError):
        app.step()


def test_run_stops_on_quit_and_closes():
    log = []
    app = _app(log, _clock([float(i) for i in range(10)]))
    scene = root("root")
    Container(scene, "box")
    frames = []

    def on_update(script, dt):
        frames.append(dt)
        if len(frames) == 3:
            app.bus.send(EventType.QUIT, None)

    Script(scene, "script", on_update)
    app.set_root(scene)
    app.run()
    assert len(frames) == 3
    assert app.is_running is False
    assert scene.children == []
    assert log[-2:] == ["backend close", "close"]


def test_close_is_idempotent_and_context_manager():
    log = []
    with _app(log, _clock([0.0])) as app:
        app.set_root(root("root"))
    app.close()
    assert log.count("close") == 1
    assert log.count("backend close") == 1