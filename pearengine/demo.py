"""Sample scene: a camera, an avocado and a spinning fish."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, List, Optional, Union

from .events import EventBus, EventType, Key
from .gltf import GltfError
from .model import Model
from .nodes import Camera, Container, Node, Pos, Rotation, Scale, Script, root

SPIN_SPEED = 10.0


def spin(script: Script, dt: float) -> None:
    """Turn the sibling named "rotation" around the Y axis."""
    rotation = script.sibling("rotation")
    if rotation is None:
        raise LookupError(f"{script.name!r} has no sibling named 'rotation'")
    rotation.rotation[1] += SPIN_SPEED * dt


def quit_on_escape(event_type: EventType, event: Any, user_data: EventBus) -> None:
    """Send a quit event on ``user_data`` (the bus) when Escape is pressed."""
    if event_type is EventType.KEY_PRESSED and event.key == Key.ESCAPE:
        user_data.send(EventType.QUIT, None)


def _asset(assets_dir: Union[str, Path], name: str) -> str:
    return (Path(assets_dir) / name).as_posix()


def build_scene(assets_dir: Union[str, Path] = "assets") -> Node:
    """Build the sample scene, loading its models from ``assets_dir``."""
    scene = root("root")

    camera_container = Container(scene, "camera container")
    Pos(camera_container, "pos", 0.0, 0.0, 10.0)
    Rotation(camera_container, "rotation", 0.0, -90.0, 0.0)
    Camera(camera_container, "camera")

    avocado_container = Container(scene, "avocado container")
    Pos(avocado_container, "avocado pos", -2.0, 0.0, 0.0)
    Scale(avocado_container, "avocado scale", 50.0, 50.0, 50.0)
    Model(avocado_container, "avocado", _asset(assets_dir, "Avocado.glb"))

    fish_container = Container(scene, "fish container")
    Script(fish_container, "script", spin)
    Rotation(fish_container, "rotation", 0.0, 0.0, 0.0)
    Scale(fish_container, "scale", 5.0, 5.0, 5.0)
    Model(fish_container, "model", _asset(assets_dir, "BarramundiFish.glb"))

    return scene


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Show the sample scene.")
    parser.add_argument("--assets", default="assets", help="directory holding the models")
    args = parser.parse_args(argv)

    try:
        scene = build_scene(args.assets)
    except GltfError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    from .app import create_app

    app = create_app()
    app.bus.subscribe(quit_on_escape, app.bus)
    app.set_root(scene)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())