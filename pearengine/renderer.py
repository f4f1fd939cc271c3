"""Walks the scene graph into draw calls and hands them to a drawing backend."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .events import EventBus, EventType, WindowResizedEvent
from .model import FILTER_NEAREST, Material, Mesh, Model, Texture
from .nodes import Node, NodeType
from .transforms import camera_view, look_at, model_matrix, perspective

DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
FIELD_OF_VIEW = 45.0
NEAR_PLANE = 0.1
FAR_PLANE = 100.0


@dataclass(eq=False)
class DrawCall:
    """One mesh to draw with the matrices and material in effect when it was reached."""

    mesh: Mesh
    material: Optional[Material]
    model: np.ndarray
    projection: np.ndarray
    view: np.ndarray


class Renderer:
    """Turns a node tree into draw calls, tracking transforms, the current model and the camera."""

    def __init__(
        self,
        bus: Optional[EventBus] = None,
        backend: Any = None,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ) -> None:
        self.backend = backend
        self.current_model: Optional[Model] = None
        self.width = 0
        self.height = 0
        self.projection = np.identity(4)
        self.view = np.identity(4)
        self.resize(width, height)
        if bus is not None:
            bus.subscribe(self._on_event, None)

    def _on_event(self, event_type: EventType, event: Any, user_data: Any) -> None:
        if event_type is EventType.WINDOW_RESIZED and isinstance(event, WindowResizedEvent):
            if event.width > 0 and event.height > 0:
                self.resize(event.width, event.height)

    def resize(self, width: int, height: int) -> None:
        """Rebuild the projection for a new viewport size and reset the view."""
        if width <= 0 or height <= 0:
            raise ValueError(f"invalid viewport size {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.projection = perspective(
            math.radians(FIELD_OF_VIEW), self.width / self.height, NEAR_PLANE, FAR_PLANE
        )
        self.view = look_at((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0, 0.0))

    def collect(self, node: Node) -> List[DrawCall]:
        """Return the draw calls for the tree under ``node`` in traversal order."""
        self.current_model = None
        calls: List[DrawCall] = []
        self._visit(node, np.zeros(3), np.zeros(3), np.ones(3), calls)
        return calls

    def _visit(
        self,
        node: Node,
        translation_v: np.ndarray,
        rotation_v: np.ndarray,
        scale_v: np.ndarray,
        calls: List[DrawCall],
    ) -> None:
        # Transform nodes change the state shared with their later siblings.
        kind = node.node_type
        if kind is NodeType.POS:
            translation_v += node.pos
        elif kind is NodeType.ROTATION:
            rotation_v += node.rotation
        elif kind is NodeType.SCALE:
            scale_v *= node.scale
        elif kind is NodeType.MODEL:
            self.current_model = node
        elif kind is NodeType.MESH:
            calls.append(self._draw_call(node, translation_v, rotation_v, scale_v))
        elif kind is NodeType.CAMERA:
            self.view = camera_view(translation_v, rotation_v)

        local = (translation_v.copy(), rotation_v.copy(), scale_v.copy())
        for child in node.children:
            self._visit(child, *local, calls)

    def _draw_call(
        self, mesh: Mesh, translation_v: np.ndarray, rotation_v: np.ndarray, scale_v: np.ndarray
    ) -> DrawCall:
        material = None
        if self.current_model is not None:
            material = self.current_model.materials[mesh.material_index]
        return DrawCall(
            mesh=mesh,
            material=material,
            model=model_matrix(translation_v, rotation_v, scale_v),
            projection=self.projection.copy(),
            view=self.view.copy(),
        )

    def render(self, node: Node) -> List[DrawCall]:
        """Collect the draw calls for ``node`` and pass them to the backend."""
        calls = self.collect(node)
        if self.backend is not None:
            self.backend.draw(calls)
        return calls

    def close(self) -> None:
        """Release the backend."""
        if self.backend is not None:
            self.backend.close()


_VERTEX_SOURCE = """#version 330 core
in vec3 a_pos;
in vec2 a_tex_coords;
in vec3 a_normal;

uniform mat4 u_projection;
uniform mat4 u_view;
uniform mat4 u_model;

out vec2 v_tex_coords;
out vec3 v_normal;

void main() {
    gl_Position = u_projection * u_view * u_model * vec4(a_pos, 1.0);
    v_tex_coords = a_tex_coords;
    v_normal = mat3(u_model) * a_normal;
}
"""

_FRAGMENT_SOURCE = """#version 330 core
in vec2 v_tex_coords;
in vec3 v_normal;

uniform sampler2D u_texture;

out vec4 frag_color;

void main() {
    frag_color = texture(u_texture, v_tex_coords);
}
"""

CLEAR_COLOR = (0.5, 0.5, 0.5, 1.0)


def _column_major(matrix: np.ndarray) -> Tuple[float, ...]:
    return tuple(float(x) for x in np.asarray(matrix, dtype=np.float64).T.ravel())


class GlBackend:
    """Draws draw calls with OpenGL through pyglet; needs a current GL context."""

    def __init__(self, clear_color: Sequence[float] = CLEAR_COLOR) -> None:
        from pyglet import gl
        from pyglet.graphics.shader import Shader, ShaderProgram

        self._gl = gl
        self.clear_color = tuple(clear_color)
        self._program = ShaderProgram(
            Shader(_VERTEX_SOURCE, "vertex"), Shader(_FRAGMENT_SOURCE, "fragment")
        )
        self._meshes: Dict[int, Tuple[Mesh, Any]] = {}
        self._textures: Dict[int, Tuple[Texture, Any]] = {}
        self._white = self._upload(Texture(np.full((1, 1, 4), 255, dtype=np.uint8)))

    def _upload(self, texture: Texture) -> Any:
        from pyglet.image import ImageData

        gl = self._gl
        pixels = np.ascontiguousarray(texture.pixels, dtype=np.uint8)
        image = ImageData(texture.width, texture.height, "RGBA", pixels.tobytes(), pitch=texture.width * 4)
        gl_texture = image.get_texture()
        gl.glBindTexture(gl_texture.target, gl_texture.id)
        for param, mode in (
            (gl.GL_TEXTURE_MAG_FILTER, texture.mag_filter),
            (gl.GL_TEXTURE_MIN_FILTER, texture.min_filter),
        ):
            value = gl.GL_NEAREST if mode == FILTER_NEAREST else gl.GL_LINEAR
            gl.glTexParameteri(gl_texture.target, param, value)
        return gl_texture

    def _texture(self, material: Optional[Material]) -> Any:
        if material is None or material.diffuse_texture is None:
            return self._white
        texture = material.diffuse_texture
        entry = self._textures.get(id(texture))
        if entry is None:
            entry = (texture, self._upload(texture))
            self._textures[id(texture)] = entry
        return entry[1]

    def _vertex_list(self, mesh: Mesh) -> Any:
        entry = self._meshes.get(id(mesh))
        if entry is not None:
            return entry[1]
        vertices = mesh.vertices.reshape(-1, 8)
        attributes = {
            "a_pos": vertices[:, 0:3],
            "a_tex_coords": vertices[:, 3:5],
            "a_normal": vertices[:, 5:8],
        }
        active = self._program.attributes
        data = {
            name: ("f", values.ravel().tolist())
            for name, values in attributes.items()
            if name in active
        }
        vlist = self._program.vertex_list_indexed(
            len(vertices), self._gl.GL_TRIANGLES, mesh.indices.tolist(), **data
        )
        self._meshes[id(mesh)] = (mesh, vlist)
        return vlist

    def _purge_released(self) -> None:
        for key, (mesh, vlist) in list(self._meshes.items()):
            if mesh.released:
                vlist.delete()
                del self._meshes[key]

    def draw(self, calls: Sequence[DrawCall]) -> None:
        """Clear the framebuffer and draw every call."""
        gl = self._gl
        self._purge_released()
        gl.glEnable(gl.GL_DEPTH_TEST)
        gl.glDepthFunc(gl.GL_LEQUAL)
        gl.glDepthMask(gl.GL_TRUE)
        gl.glEnable(gl.GL_CULL_FACE)
        gl.glCullFace(gl.GL_FRONT)
        gl.glClearColor(*self.clear_color)
        gl.glClear(gl.GL_COLOR_BUFFER_BIT | gl.GL_DEPTH_BUFFER_BIT)

        program = self._program
        program.use()
        try:
            program["u_texture"] = 0
            for call in calls:
                if call.mesh.num_indices == 0:
                    continue
                program["u_projection"] = _column_major(call.projection)
                program["u_view"] = _column_major(call.view)
                program["u_model"] = _column_major(call.model)
                texture = self._texture(call.material)
                gl.glActiveTexture(gl.GL_TEXTURE0)
                gl.glBindTexture(texture.target, texture.id)
                self._vertex_list(call.mesh).draw(gl.GL_TRIANGLES)
        finally:
            program.stop()

    def close(self) -> None:
        """Free all GPU resources."""
        for _, vlist in self._meshes.values():
            vlist.delete()
        self._meshes.clear()
        for _, texture in self._textures.values():
            texture.delete()
        self._textures.clear()
        self._white.delete()
        self._program.delete()