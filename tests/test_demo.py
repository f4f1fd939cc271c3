import json

import numpy as np
import pytest

from pearengine.demo import build_scene, main, quit_on_escape, spin
from pearengine.events import EventBus, EventType, Key, KeyEvent
from pearengine.model import Model
from pearengine.nodes import Camera, Container, Pos, Rotation, Scale, Script, root


def _write_empty_models(directory):
    doc = {"asset": {"version": "2.0"}, "scenes": [{"nodes": []}], "nodes": []}
    for name in ("Avocado.glb", "BarramundiFish.glb"):
        (directory / name).write_text(json.dumps(doc))


def _quit_log():
    bus = EventBus()
    quits = []
    bus.subscribe(lambda t, e, u: quits.append(t) if t is EventType.QUIT else None, None)
    return bus, quits


def test_spin_turns_sibling_rotation():
    box = Container(root("root"), "box")
    script = Script(box, "script", spin)
    rotation = Rotation(box, "rotation", 0.0, 0.0, 0.0)
    spin(script, 0.5)
    np.testing.assert_allclose(rotation.rotation, [0.0, 5.0, 0.0])


def test_spin_without_rotation_sibling_raises():
    box = Container(root("root"), "box")
    script = Script(box, "script", spin)
    with pytest.raises(LookupError):
        spin(script, 0.1)


def test_quit_on_escape_sends_quit():
    bus, quits = _quit_log()
    quit_on_escape(EventType.KEY_PRESSED, KeyEvent(Key.ESCAPE), bus)
    assert quits == [EventType.QUIT]


def test_quit_on_escape_ignores_other_input():
    bus, quits = _quit_log()
    quit_on_escape(EventType.KEY_PRESSED, KeyEvent(Key.A), bus)
    quit_on_escape(EventType.KEY_RELEASED, KeyEvent(Key.ESCAPE), bus)
    assert quits == []


def test_build_scene_layout(tmp_path):
    _write_empty_models(tmp_path)
    scene = build_scene(tmp_path)
    assert [c.name for c in scene.children] == ["camera container", "avocado container", "fish container"]
    camera, avocado, fish = scene.children
    assert [type(c) for c in camera.children] == [Pos, Rotation, Camera]
    np.testing.assert_allclose(camera.children[0].pos, [0.0, 0.0, 10.0])
    assert [type(c) for c in avocado.children] == [Pos, Scale, Model]
    assert avocado.children[2].directory == tmp_path.as_posix()
    assert [type(c) for c in fish.children] == [Script, Rotation, Scale, Model]
    assert fish.children[0].on_update is spin


def test_scene_update_spins_only_the_fish(tmp_path):
    _write_empty_models(tmp_path)
    scene = build_scene(tmp_path)
    scene.update(0.5)
    camera, _, fish = scene.children
    np.testing.assert_allclose(fish.children[1].rotation, [0.0, 5.0, 0.0])
    np.testing.assert_allclose(camera.children[1].rotation, [0.0, -90.0, 0.0])


def test_main_reports_missing_assets(tmp_path, capsys):
    assert main(["--assets", str(tmp_path)]) == 1
    assert "Avocado.glb" in capsys.readouterr().err