"""Reading glTF 2.0 documents (.gltf and .glb)."""

from __future__ import annotations

import base64
import json
import struct
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import unquote, unquote_to_bytes

import numpy as np

GLB_MAGIC = b"glTF"
_CHUNK_JSON = 0x4E4F534A
_CHUNK_BIN = 0x004E4942

_COMPONENT_DTYPES = {
    5120: np.int8,
    5121: np.uint8,
    5122: np.int16,
    5123: np.uint16,
    5125: np.uint32,
    5126: np.float32,
}
_TYPE_SIZES = {
    "SCALAR": 1,
    "VEC2": 2,
    "VEC3": 3,
    "VEC4": 4,
    "MAT2": 4,
    "MAT3": 9,
    "MAT4": 16,
}
_INDEX_TYPES = (np.uint8, np.uint16, np.uint32)


class GltfError(Exception):
    """Raised when a glTF document cannot be read."""


def _decode_data_uri(uri: str) -> bytes:
    header, _, payload = uri.partition(",")
    if ";base64" in header:
        try:
            return base64.b64decode(payload)
        except ValueError as exc:
            raise GltfError(f"bad base64 data uri: {exc}") from exc
    return unquote_to_bytes(payload)


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise GltfError(f"failed to read {path}: {exc}") from exc


def _quaternion_matrix(q: Sequence[float]) -> np.ndarray:
    x, y, z, w = (float(c) for c in q)
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w), 0.0],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w), 0.0],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y), 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


class GltfDocument:
    """A parsed glTF document together with its loaded buffers."""

    def __init__(
        self,
        data: Dict[str, Any],
        buffers: Sequence[bytes] = (),
        path: Union[str, Path] = "",
    ) -> None:
        self.data = data
        self.buffers: List[bytes] = [bytes(b) for b in buffers]
        self.path = str(path)
        self._parents: Dict[int, int] = {
            child: index
            for index, node in enumerate(data.get("nodes", []))
            for child in node.get("children", [])
        }

    def _get(self, key: str, index: int) -> Dict[str, Any]:
        items = self.data.get(key, [])
        if not isinstance(index, int) or not 0 <= index < len(items):
            raise GltfError(f"{key}[{index}] does not exist")
        return items[index]

    def _view(self, view_index: int) -> Tuple[bytes, Optional[int]]:
        view = self._get("bufferViews", view_index)
        buffer_index = view.get("buffer", 0)
        if not 0 <= buffer_index < len(self.buffers):
            raise GltfError(f"buffer {buffer_index} is not loaded")
        buffer = self.buffers[buffer_index]
        offset = view.get("byteOffset", 0)
        length = view.get("byteLength", 0)
        if offset + length > len(buffer):
            raise GltfError(f"bufferViews[{view_index}] exceeds its buffer")
        return buffer[offset : offset + length], view.get("byteStride")

    @staticmethod
    def _strided(
        data: bytes, dtype: np.dtype, count: int, ncomp: int, offset: int, stride: int
    ) -> np.ndarray:
        if count == 0:
            return np.zeros((0, ncomp), dtype=dtype)
        end = offset + stride * (count - 1) + dtype.itemsize * ncomp
        if end > len(data):
            raise GltfError("accessor reads past the end of its buffer view")
        return np.ndarray(
            (count, ncomp),
            dtype=dtype,
            buffer=data,
            offset=offset,
            strides=(stride, dtype.itemsize),
        ).copy()

    @staticmethod
    def _dtype(component_type: Any) -> np.dtype:
        try:
            return np.dtype(_COMPONENT_DTYPES[component_type]).newbyteorder("<")
        except KeyError:
            raise GltfError(f"unknown component type {component_type}") from None

    def _read_raw(self, index: int) -> Tuple[np.ndarray, Dict[str, Any]]:
        accessor = self._get("accessors", index)
        dtype = self._dtype(accessor.get("componentType"))
        try:
            ncomp = _TYPE_SIZES[accessor.get("type")]
        except KeyError:
            raise GltfError(f"unknown accessor type {accessor.get('type')}") from None
        count = accessor.get("count", 0)

        if "bufferView" in accessor:
            data, stride = self._view(accessor["bufferView"])
            out = self._strided(
                data,
                dtype,
                count,
                ncomp,
                accessor.get("byteOffset", 0),
                stride or dtype.itemsize * ncomp,
            )
        else:
            out = np.zeros((count, ncomp), dtype=dtype)

        sparse = accessor.get("sparse")
        if sparse:
            scount = sparse.get("count", 0)
            idx_info = sparse["indices"]
            idx_dtype = self._dtype(idx_info.get("componentType"))
            idx_data, _ = self._view(idx_info["bufferView"])
            positions = self._strided(
                idx_data, idx_dtype, scount, 1, idx_info.get("byteOffset", 0), idx_dtype.itemsize
            ).reshape(-1)
            val_info = sparse["values"]
            val_data, _ = self._view(val_info["bufferView"])
            values = self._strided(
                val_data, dtype, scount, ncomp, val_info.get("byteOffset", 0), dtype.itemsize * ncomp
            )
            if scount and int(positions.max()) >= count:
                raise GltfError("sparse index out of range")
            out[positions] = values
        return out, accessor

    def read_accessor(self, index: int) -> np.ndarray:
        """Return an accessor's elements as a flat float32 array."""
        raw, accessor = self._read_raw(index)
        if raw.dtype.kind == "f" or not accessor.get("normalized", False):
            out = raw.astype(np.float64)
        else:
            info = np.iinfo(raw.dtype)
            out = raw.astype(np.float64) / info.max
            if raw.dtype.kind == "i":
                out = np.maximum(out, -1.0)
        return out.reshape(-1).astype(np.float32)

    def read_indices(self, index: int) -> np.ndarray:
        """Return an index accessor as a flat uint32 array."""
        raw, _ = self._read_raw(index)
        if raw.dtype.type not in _INDEX_TYPES:
            raise GltfError(f"accessors[{index}] is not an unsigned integer accessor")
        return raw.reshape(-1).astype(np.uint32)

    def _local_matrix(self, node: Dict[str, Any]) -> np.ndarray:
        if "matrix" in node:
            return np.asarray(node["matrix"], dtype=np.float64).reshape(4, 4).T
        t = np.identity(4)
        t[:3, 3] = node.get("translation", (0.0, 0.0, 0.0))
        r = _quaternion_matrix(node.get("rotation", (0.0, 0.0, 0.0, 1.0)))
        s = np.identity(4)
        s[0, 0], s[1, 1], s[2, 2] = node.get("scale", (1.0, 1.0, 1.0))
        return t @ r @ s

    def world_matrix(self, node_index: int) -> np.ndarray:
        """Return the node's transform with all its ancestors applied."""
        matrix = np.identity(4)
        seen = set()
        current: Optional[int] = node_index
        while current is not None:
            if current in seen:
                raise GltfError("node hierarchy has a cycle")
            seen.add(current)
            matrix = self._local_matrix(self._get("nodes", current)) @ matrix
            current = self._parents.get(current)
        return matrix

    def image_bytes(self, image_index: int, directory: Union[str, Path] = "") -> bytes:
        """Return the encoded bytes of an image, embedded or next to the document."""
        image = self._get("images", image_index)
        if "bufferView" in image:
            data, _ = self._view(image["bufferView"])
            return data
        uri = image.get("uri")
        if uri is None:
            raise GltfError(f"images[{image_index}] has no data")
        if uri.startswith("data:"):
            return _decode_data_uri(uri)
        relative = unquote(uri)
        path = Path(directory) / relative if str(directory) else Path(relative)
        return _read_file(path)


def _parse_glb(raw: bytes) -> Tuple[Dict[str, Any], Optional[bytes]]:
    if len(raw) < 12:
        raise GltfError("truncated glb header")
    magic, version, length = struct.unpack_from("<4sII", raw, 0)
    if magic != GLB_MAGIC:
        raise GltfError("not a glb file")
    if version != 2:
        raise GltfError(f"unsupported glb version {version}")
    if length > len(raw):
        raise GltfError("truncated glb file")

    json_chunk: Optional[bytes] = None
    bin_chunk: Optional[bytes] = None
    pos = 12
    while pos + 8 <= length:
        chunk_length, chunk_type = struct.unpack_from("<II", raw, pos)
        pos += 8
        chunk = raw[pos : pos + chunk_length]
        if len(chunk) < chunk_length:
            raise GltfError("truncated glb chunk")
        pos += chunk_length
        if chunk_type == _CHUNK_JSON and json_chunk is None:
            json_chunk = chunk
        elif chunk_type == _CHUNK_BIN and bin_chunk is None:
            bin_chunk = chunk
    if json_chunk is None:
        raise GltfError("glb file has no json chunk")
    return _parse_json(json_chunk), bin_chunk


def _parse_json(raw: bytes) -> Dict[str, Any]:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise GltfError(f"invalid gltf json: {exc}") from exc
    if not isinstance(data, dict):
        raise GltfError("gltf json is not an object")
    return data


def load_gltf(path: Union[str, Path]) -> GltfDocument:
    """Parse a .gltf or .glb file and load its buffers."""
    path = Path(path)
    raw = _read_file(path)
    if raw[:4] == GLB_MAGIC:
        data, bin_chunk = _parse_glb(raw)
    else:
        data, bin_chunk = _parse_json(raw), None

    buffers: List[bytes] = []
    for index, buffer in enumerate(data.get("buffers", [])):
        uri = buffer.get("uri")
        if uri is None:
            if index == 0 and bin_chunk is not None:
                buffers.append(bin_chunk)
            else:
                raise GltfError(f"buffers[{index}] has no data")
        elif uri.startswith("data:"):
            buffers.append(_decode_data_uri(uri))
        else:
            buffers.append(_read_file(path.parent / unquote(uri)))
    return GltfDocument(data, buffers, path)


def interleave(
    positions: Optional[Sequence[float]],
    tex_coords: Optional[Sequence[float]],
    normals: Optional[Sequence[float]],
) -> np.ndarray:
    """Pack position (3), texture coordinate (2) and normal (3) data into one vertex array.

    Missing attributes are left as zeros.
    """
    parts = []
    for data, width in ((positions, 3), (tex_coords, 2), (normals, 3)):
        flat = np.zeros(0, np.float32) if data is None else np.asarray(data, np.float32).ravel()
        usable = len(flat) - len(flat) % width
        parts.append(flat[:usable].reshape(-1, width))
    count = max(len(p) for p in parts)
    out = np.zeros((count, 8), dtype=np.float32)
    out[: len(parts[0]), 0:3] = parts[0]
    out[: len(parts[1]), 3:5] = parts[1]
    out[: len(parts[2]), 5:8] = parts[2]
    return out.ravel()