"""Model and mesh nodes loaded from glTF files."""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
from PIL import Image

from .gltf import GltfDocument, GltfError, interleave, load_gltf
from .nodes import Node, NodeType

FILTER_NEAREST = "nearest"
FILTER_LINEAR = "linear"
_GLTF_NEAREST = 9728
_TRIANGLES = 4


@dataclass
class Texture:
    """RGBA pixels (rows x columns x 4) with sampling filters."""

    pixels: np.ndarray
    mag_filter: str = FILTER_NEAREST
    min_filter: str = FILTER_NEAREST

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


@dataclass
class Material:
    name: str
    diffuse_texture: Optional[Texture] = None


def model_directory(filename: Union[str, Path]) -> str:
    """Return the part of ``filename`` before its last '/', or '' if there is none."""
    head, sep, _ = str(filename).rpartition("/")
    return head if sep else ""


def _item(document: GltfDocument, key: str, index: Any) -> Dict[str, Any]:
    items = document.data.get(key, [])
    if not isinstance(index, int) or not 0 <= index < len(items):
        raise GltfError(f"{key}[{index}] does not exist")
    return items[index]


def _filter(code: Any) -> str:
    return FILTER_NEAREST if code == _GLTF_NEAREST else FILTER_LINEAR


def _decode_image(data: bytes, name: str) -> np.ndarray:
    try:
        with Image.open(io.BytesIO(data)) as image:
            return np.asarray(image.convert("RGBA"), dtype=np.uint8).copy()
    except OSError as exc:
        raise GltfError(f"failed to load texture {name}!") from exc


class Mesh(Node):
    """Interleaved vertex data (position, tex coords, normal) with triangle indices."""

    node_type = NodeType.MESH

    def __init__(
        self,
        parent: Optional[Node],
        name: str,
        vertices: np.ndarray,
        indices: np.ndarray,
        material_index: int,
    ) -> None:
        super().__init__(parent, name)
        self.vertices = np.asarray(vertices, dtype=np.float32).ravel()
        self.indices = np.asarray(indices, dtype=np.uint32).ravel()
        self.material_index = material_index
        self.released = False

    @property
    def num_indices(self) -> int:
        return len(self.indices)

    def delete(self) -> None:
        """Drop the vertex and index data, then the subtree."""
        self.vertices = np.zeros(0, dtype=np.float32)
        self.indices = np.zeros(0, dtype=np.uint32)
        self.released = True
        super().delete()


class Model(Node):
    """Loads a glTF file and creates a Mesh child for each triangle primitive."""

    node_type = NodeType.MODEL

    def __init__(self, parent: Optional[Node], name: str, filename: Union[str, Path]) -> None:
        super().__init__(parent, name)
        self.filename = str(filename)
        self.directory = model_directory(self.filename)
        self.materials: List[Material] = []
        document = load_gltf(self.filename)
        for scene in document.data.get("scenes", []):
            for node_index in scene.get("nodes", []):
                self._handle_node(document, node_index)

    def _handle_node(self, document: GltfDocument, node_index: int) -> None:
        node = _item(document, "nodes", node_index)
        if "mesh" not in node:
            return
        matrix = document.world_matrix(node_index)
        gltf_mesh = _item(document, "meshes", node["mesh"])
        for primitive in gltf_mesh.get("primitives", []):
            mode = primitive.get("mode", _TRIANGLES)
            if mode != _TRIANGLES:
                raise GltfError(f"unsupported primitive type {mode}!")
            vertices = self._load_vertices(document, primitive, matrix)
            if "indices" in primitive:
                indices = document.read_indices(primitive["indices"])
            else:
                indices = np.arange(len(vertices) // 8, dtype=np.uint32)
            material_index = self.load_material(document, primitive.get("material"))
            Mesh(self, gltf_mesh.get("name", ""), vertices, indices, material_index)

    @staticmethod
    def _load_vertices(
        document: GltfDocument, primitive: Dict[str, Any], matrix: np.ndarray
    ) -> np.ndarray:
        positions = tex_coords = normals = None
        for attribute, accessor in primitive.get("attributes", {}).items():
            if attribute == "POSITION":
                points = document.read_accessor(accessor).astype(np.float64).reshape(-1, 3)
                positions = (points @ matrix[:3, :3].T + matrix[:3, 3]).ravel()
            elif attribute.startswith("TEXCOORD"):
                tex_coords = document.read_accessor(accessor)
            elif attribute == "NORMAL":
                normals = document.read_accessor(accessor)
        return interleave(positions, tex_coords, normals)

    def load_material(self, document: GltfDocument, material_index: Optional[int]) -> int:
        """Return the index of the named material, loading it on first use."""
        gltf_material = {} if material_index is None else _item(document, "materials", material_index)
        name = gltf_material.get("name", "")
        for index, material in enumerate(self.materials):
            if material.name == name:
                return index
        self.materials.append(self._create_material(document, gltf_material, name))
        return len(self.materials) - 1

    def _create_material(
        self, document: GltfDocument, gltf_material: Dict[str, Any], name: str
    ) -> Material:
        info = gltf_material.get("pbrMetallicRoughness", {}).get("baseColorTexture")
        if info is None:
            return Material(name)
        texture = _item(document, "textures", info.get("index"))
        source = texture.get("source")
        if source is None:
            raise GltfError(f"failed to load texture {texture.get('name', '')}!")
        pixels = _decode_image(document.image_bytes(source, self.directory), texture.get("name", ""))
        if "sampler" in texture:
            sampler = _item(document, "samplers", texture["sampler"])
            mag, min_ = _filter(sampler.get("magFilter")), _filter(sampler.get("minFilter"))
        else:
            mag = min_ = FILTER_NEAREST
        return Material(name, Texture(pixels, mag, min_))

    def delete(self) -> None:
        """Drop the textures, then the subtree."""
        for material in self.materials:
            material.diffuse_texture = None
        self.materials.clear()
        super().delete()