"""Scene graph nodes."""

from __future__ import annotations

from enum import Enum, auto
from typing import Callable, Iterator, List, Optional

import numpy as np

NODE_NAME_LENGTH = 128


class NodeType(Enum):
    ROOT = auto()
    CONTAINER = auto()
    POS = auto()
    ROTATION = auto()
    SCALE = auto()
    MODEL = auto()
    MESH = auto()
    CAMERA = auto()
    SCRIPT = auto()


def _vec3(x: float, y: float, z: float) -> np.ndarray:
    return np.array([x, y, z], dtype=np.float32)


class Node:
    """A named node in the scene tree; attaches itself to ``parent``."""

    node_type = NodeType.ROOT

    def __init__(self, parent: Optional["Node"], name: str) -> None:
        self.parent = parent
        self.children: List[Node] = []
        self.name = name[: NODE_NAME_LENGTH - 1]
        if parent is not None:
            parent.children.append(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def delete(self) -> None:
        """Release the whole subtree; subclasses free their own resources first."""
        for child in self.children:
            child.delete()
        self.children.clear()

    def update(self, dt: float) -> None:
        """Advance this node and its subtree by ``dt`` seconds."""
        for child in self.children:
            child.update(dt)

    def sibling(self, name: str) -> Optional["Node"]:
        """Return the first child of the parent with ``name``, or None."""
        if self.parent is None:
            raise ValueError(f"node {self.name!r} has no parent")
        return next((c for c in self.parent.children if c.name == name), None)

    def walk(self) -> Iterator["Node"]:
        """Yield this node and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


def root(name: str) -> Node:
    """Create a root node."""
    return Node(None, name)


class Container(Node):
    node_type = NodeType.CONTAINER


class Pos(Node):
    node_type = NodeType.POS

    def __init__(self, parent: Optional[Node], name: str, x: float, y: float, z: float) -> None:
        super().__init__(parent, name)
        self.pos = _vec3(x, y, z)


class Rotation(Node):
    node_type = NodeType.ROTATION

    def __init__(self, parent: Optional[Node], name: str, x: float, y: float, z: float) -> None:
        super().__init__(parent, name)
        self.rotation = _vec3(x, y, z)


class Scale(Node):
    node_type = NodeType.SCALE

    def __init__(self, parent: Optional[Node], name: str, x: float, y: float, z: float) -> None:
        super().__init__(parent, name)
        self.scale = _vec3(x, y, z)


class Camera(Node):
    node_type = NodeType.CAMERA

    def __init__(self, parent: Optional[Node], name: str) -> None:
        super().__init__(parent, name)
        self.use = True


ScriptFunc = Callable[["Script", float], None]


class Script(Node):
    """Node that runs a callback on every update."""

    node_type = NodeType.SCRIPT

    def __init__(self, parent: Optional[Node], name: str, on_update: Optional[ScriptFunc]) -> None:
        super().__init__(parent, name)
        self.on_update = on_update

    def update(self, dt: float) -> None:
        if self.on_update is not None:
            self.on_update(self, dt)
        super().update(dt)