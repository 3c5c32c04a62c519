"""
矢量与旋转模块的单元测试
"""

import math

import numpy as np
import pytest

from reaction_simulation.core.vectors import (
    vector3,
    normalize,
    distance,
    spherical_to_cartesian,
    cartesian_to_spherical,
    rotation_from_angles,
    rotation_matrix,
    transform,
    beam_frame_matrix,
    build_orthonormal_frame,
)


class TestBasicVectors:
    """测试基本矢量运算"""

    def test_vector3_default(self):
        """测试默认零矢量"""
        np.testing.assert_array_equal(vector3(), [0.0, 0.0, 0.0])

    def test_normalize(self):
        """测试归一化"""
        v = normalize(vector3(3.0, 4.0, 0.0))
        np.testing.assert_array_almost_equal(v, [0.6, 0.8, 0.0])

    def test_normalize_zero_raises(self):
        """测试零矢量无法归一化"""
        with pytest.raises(ValueError):
            normalize(vector3())

    def test_distance(self):
        """测试两点距离"""
        assert distance(vector3(1, 2, 3), vector3(4, 6, 3)) == pytest.approx(5.0)


class TestSphericalCoordinates:
    """测试球坐标转换"""

    def test_round_trip(self):
        """测试球坐标往返转换"""
        v = spherical_to_cartesian(2.0, 0.7, 4.0)
        r, theta, phi = cartesian_to_spherical(v)
        assert r == pytest.approx(2.0)
        assert theta == pytest.approx(0.7)
        assert phi == pytest.approx(4.0)

    def test_phi_range(self):
        """测试方位角落在 [0, 2π) 内"""
        _, _, phi = cartesian_to_spherical(vector3(1.0, -1.0, 0.0))
        assert 0.0 <= phi < 2.0 * math.pi
        assert phi == pytest.approx(7.0 * math.pi / 4.0)

    def test_origin(self):
        """测试原点"""
        assert cartesian_to_spherical(vector3()) == (0.0, 0.0, 0.0)


class TestRotations:
    """测试旋转矩阵"""

    def test_identity_rotation(self):
        """测试零角度时为单位阵"""
        ux, uy, uz = rotation_from_angles(0.0, 0.0, 0.0)
        np.testing.assert_array_almost_equal(rotation_matrix(ux, uy, uz), np.eye(3))

    def test_orthonormal(self):
        """测试任意角度下局部轴正交归一"""
        ux, uy, uz = rotation_from_angles(0.3, -1.1, 2.0)
        m = rotation_matrix(ux, uy, uz)
        np.testing.assert_array_almost_equal(m.T @ m, np.eye(3))
        assert np.linalg.det(m) == pytest.approx(1.0)

    def test_theta_rotates_depth_axis(self):
        """测试绕 y 轴旋转时深度轴指向 (sinθ, 0, cosθ)"""
        theta = math.radians(30.0)
        _, _, uz = rotation_from_angles(theta, 0.0, 0.0)
        np.testing.assert_array_almost_equal(uz, [math.sin(theta), 0.0, math.cos(theta)])

    def test_transform(self):
        """测试局部到全局坐标变换"""
        ux, uy, uz = rotation_from_angles(math.pi / 2.0, 0.0, 0.0)
        m = rotation_matrix(ux, uy, uz)
        np.testing.assert_array_almost_equal(transform(m, vector3(0, 0, 1)), [1.0, 0.0, 0.0])

    def test_beam_frame_maps_z_axis(self):
        """测试束流坐标系将 +z 映射到束流方向"""
        direction = normalize(vector3(0.2, -0.3, 1.0))
        m = beam_frame_matrix(direction)
        np.testing.assert_array_almost_equal(m @ vector3(0, 0, 1), direction)
        np.testing.assert_array_almost_equal(m.T @ m, np.eye(3))

    def test_orthonormal_frame(self):
        """测试由轴构建的正交基"""
        axis, u, v = build_orthonormal_frame([0.0, 0.0, 5.0])
        for a, b in ((axis, u), (axis, v), (u, v)):
            assert np.dot(a, b) == pytest.approx(0.0, abs=1e-12)
        np.testing.assert_array_almost_equal(axis, [0.0, 0.0, 1.0])
