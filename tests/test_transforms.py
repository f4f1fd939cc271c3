import numpy as np
import pytest

from pearengine import transforms


def _point(v):
    return np.array([v[0], v[1], v[2], 1.0])


def test_translation_moves_origin():
    v = (1.5, -2.0, 4.0)
    out = transforms.translation(v) @ _point((0, 0, 0))
    assert np.allclose(out[:3], v)


def test_scaling_diagonal():
    v = (2.0, 3.0, 4.0)
    assert np.allclose(np.diag(transforms.scaling(v))[:3], v)


def test_euler_zero_is_identity():
    assert np.allclose(transforms.euler((0, 0, 0)), np.identity(4))


@pytest.mark.parametrize("angles", [(10, 20, 30), (-45, 90, 180), (0, -90, 0)])
def test_euler_is_rotation(angles):
    r = transforms.euler(angles)[:3, :3]
    assert np.allclose(r @ r.T, np.identity(3))
    assert np.isclose(np.linalg.det(r), 1.0)


def test_euler_quarter_turns_repeat():
    r = transforms.euler((0, 0, 90))
    assert np.allclose(np.linalg.matrix_power(r, 4), np.identity(4))


def test_euler_order_x_then_y_then_z():
    a, b, c = 15.0, 25.0, 35.0
    expected = (
        transforms.euler((0, 0, c)) @ transforms.euler((0, b, 0)) @ transforms.euler((a, 0, 0))
    )
    assert np.allclose(transforms.euler((a, b, c)), expected)


def test_model_matrix_composition():
    t, r, s = (1, 2, 3), (10, 20, 30), (2, 2, 2)
    expected = transforms.translation(t) @ transforms.euler(r) @ transforms.scaling(s)
    assert np.allclose(transforms.model_matrix(t, r, s), expected)


def test_look_at_maps_eye_to_origin_and_center_forward():
    eye = np.array([1.0, 2.0, 3.0])
    center = np.array([4.0, 6.0, 3.0])
    view = transforms.look_at(eye, center, (0, 1, 0))
    assert np.allclose((view @ _point(eye))[:3], 0.0)
    out = view @ _point(center)
    assert np.allclose(out[:2], 0.0)
    assert np.isclose(out[2], -np.linalg.norm(center - eye))


def test_perspective_depth_range():
    near, far = 0.1, 100.0
    proj = transforms.perspective(np.radians(45.0), 800 / 600, near, far)
    near_clip = proj @ _point((0, 0, -near))
    far_clip = proj @ _point((0, 0, -far))
    assert np.isclose(near_clip[2] / near_clip[3], -1.0)
    assert np.isclose(far_clip[2] / far_clip[3], 1.0)


def test_perspective_aspect_ratio():
    aspect = 16 / 9
    proj = transforms.perspective(np.radians(60.0), aspect, 0.1, 10.0)
    assert np.isclose(proj[1, 1] / proj[0, 0], aspect)


@pytest.mark.parametrize("rotation", [(0, -90, 0), (30, 45, 0), (-20, 170, 0)])
def test_camera_basis_orthonormal(rotation):
    front, right, up = transforms.camera_basis(rotation)
    for v in (front, right, up):
        assert np.isclose(np.linalg.norm(v), 1.0)
    assert np.isclose(np.dot(front, right), 0.0)
    assert np.isclose(np.dot(front, up), 0.0)
    assert np.isclose(np.dot(right, up), 0.0)


def test_camera_basis_yaw_minus_ninety_looks_down_negative_z():
    front, _, _ = transforms.camera_basis((0, -90, 0))
    assert np.allclose(front, [0.0, 0.0, -1.0])


def test_camera_view_centres_position_and_front():
    position = np.array([0.0, 0.0, 10.0])
    rotation = (10.0, -80.0, 0.0)
    view = transforms.camera_view(position, rotation)
    front, _, _ = transforms.camera_basis(rotation)
    assert np.allclose((view @ _point(position))[:3], 0.0)
    ahead = view @ _point(position + front)
    assert np.allclose(ahead[:2], 0.0)
    assert ahead[2] < 0