"""Matrix helpers for the renderer.

Matrices are 4x4 numpy arrays that act on column vectors (``m @ v``).
Euler angles are given in degrees and applied X first, then Y, then Z.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

Vec3 = Sequence[float]

WORLD_UP = np.array([0.0, 1.0, 0.0])


def _vec(v: Vec3) -> np.ndarray:
    return np.asarray(v, dtype=np.float64).reshape(3)


def _normalize(v: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(v))
    return v / norm if norm > 0.0 else np.zeros(3)


def perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Right-handed perspective projection with clip depth in [-1, 1]; ``fovy`` in radians."""
    f = 1.0 / math.tan(fovy / 2.0)
    fn = 1.0 / (near - far)
    m = np.zeros((4, 4))
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (near + far) * fn
    m[2, 3] = 2.0 * near * far * fn
    m[3, 2] = -1.0
    return m


def look_at(eye: Vec3, center: Vec3, up: Vec3) -> np.ndarray:
    """Right-handed view matrix looking from ``eye`` towards ``center``."""
    eye_v = _vec(eye)
    f = _normalize(_vec(center) - eye_v)
    s = _normalize(np.cross(f, _vec(up)))
    u = np.cross(s, f)
    m = np.identity(4)
    m[0, :3] = s
    m[1, :3] = u
    m[2, :3] = -f
    m[0, 3] = -np.dot(s, eye_v)
    m[1, 3] = -np.dot(u, eye_v)
    m[2, 3] = np.dot(f, eye_v)
    return m


def translation(v: Vec3) -> np.ndarray:
    """Translation matrix."""
    m = np.identity(4)
    m[:3, 3] = _vec(v)
    return m


def euler(angles: Vec3) -> np.ndarray:
    """Rotation matrix from XYZ Euler angles in degrees."""
    x, y, z = np.radians(_vec(angles))
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)
    rx = np.array([[1, 0, 0, 0], [0, cx, -sx, 0], [0, sx, cx, 0], [0, 0, 0, 1]], dtype=np.float64)
    ry = np.array([[cy, 0, sy, 0], [0, 1, 0, 0], [-sy, 0, cy, 0], [0, 0, 0, 1]], dtype=np.float64)
    rz = np.array([[cz, -sz, 0, 0], [sz, cz, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1]], dtype=np.float64)
    return rz @ ry @ rx


def scaling(v: Vec3) -> np.ndarray:
    """Scale matrix."""
    m = np.identity(4)
    m[0, 0], m[1, 1], m[2, 2] = _vec(v)
    return m


def model_matrix(translation_v: Vec3, rotation_v: Vec3, scale_v: Vec3) -> np.ndarray:
    """Translate, then rotate, then scale, as applied to a mesh."""
    return translation(translation_v) @ euler(rotation_v) @ scaling(scale_v)


def camera_basis(rotation_v: Vec3) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return (front, right, up) for a camera with pitch ``rotation_v[0]`` and yaw ``rotation_v[1]``."""
    rot = _vec(rotation_v)
    pitch = math.radians(rot[0])
    yaw = math.radians(rot[1])
    front = _normalize(
        np.array(
            [
                math.cos(yaw) * math.cos(pitch),
                math.sin(pitch),
                math.sin(yaw) * math.cos(pitch),
            ]
        )
    )
    right = _normalize(np.cross(front, WORLD_UP))
    up = _normalize(np.cross(right, front))
    return front, right, up


def camera_view(position: Vec3, rotation_v: Vec3) -> np.ndarray:
    """View matrix for a camera at ``position`` with the given rotation."""
    pos = _vec(position)
    front, _, up = camera_basis(rotation_v)
    return look_at(pos, pos + front, up)