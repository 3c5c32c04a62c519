"""
二维射线、线段与正多边形的单元测试
"""

import pytest

from reaction_simulation.core.lines import Line, Ray, RegularPolygon, solve_line_parameters
from reaction_simulation.core.vectors import vector3


class TestLineParameters:
    """测试参数方程求解"""

    def test_crossing(self):
        """测试相交直线"""
        t1, t2 = solve_line_parameters(vector3(0, 0), vector3(1, 0), vector3(0.5, -1), vector3(0, 1))
        assert t1 == pytest.approx(0.5)
        assert t2 == pytest.approx(1.0)

    def test_parallel(self):
        """测试平行直线返回 None"""
        assert solve_line_parameters(vector3(0, 0), vector3(1, 0), vector3(0, 1), vector3(2, 0)) is None


class TestRayAndLine:
    """测试射线与线段求交"""

    def test_ray_hits_segment(self):
        """测试射线与线段相交"""
        ray = Ray.from_points(0.0, 0.0, 1.0, 0.0)
        line = Line.from_points(2.0, -1.0, 2.0, 1.0)
        point = ray.intersect(line)
        assert point is not None
        assert point[0] == pytest.approx(2.0)
        assert point[1] == pytest.approx(0.0)

    def test_ray_behind(self):
        """测试线段位于射线后方"""
        ray = Ray.from_points(0.0, 0.0, 1.0, 0.0)
        line = Line.from_points(-2.0, -1.0, -2.0, 1.0)
        assert ray.intersect(line) is None

    def test_segments_miss(self):
        """测试线段不相交"""
        a = Line.from_points(0.0, 0.0, 1.0, 0.0)
        b = Line.from_points(2.0, -1.0, 2.0, 1.0)
        assert a.intersect(b) is None
        assert b.intersect(a) is None

    def test_line_from_ray(self):
        """测试由射线构造线段"""
        ray = Ray(vector3(1.0, 1.0), vector3(0.0, 2.0))
        line = Line.from_ray(ray, 0.5)
        assert line.length == pytest.approx(1.0)
        assert line.intersect(Ray.from_points(0.0, 1.5, 1.0, 1.5)) is not None

    def test_ray_ray(self):
        """测试两条射线求交"""
        a = Ray.from_points(0.0, 0.0, 1.0, 1.0)
        b = Ray.from_points(2.0, 0.0, 1.0, 1.0)
        point = a.intersect(b)
        assert point[0] == pytest.approx(1.0)
        assert point[1] == pytest.approx(1.0)


class TestRegularPolygon:
    """测试正多边形"""

    def test_square(self):
        """测试正方形内外判断"""
        square = RegularPolygon()
        assert square.initialize(1.0, 4)
        assert square.chord_length == pytest.approx(2.0)
        assert square.is_inside(0.0, 0.0)
        assert square.is_inside(0.5, 0.5)
        assert not square.is_inside(1.5, 0.0)

    def test_double_initialize(self):
        """测试重复初始化失败"""
        poly = RegularPolygon()
        assert poly.initialize(1.0, 6)
        assert not poly.initialize(2.0, 6)

    def test_invalid(self):
        """测试无效参数"""
        assert not RegularPolygon().initialize(1.0, 2)
        assert not RegularPolygon().initialize(0.0, 5)
        assert not RegularPolygon().is_inside(0.0, 0.0)

    def test_dump(self):
        """测试边输出"""
        poly = RegularPolygon()
        poly.initialize(1.0, 5)
        sides = poly.dump()
        assert len(sides) == 5
        assert sides[0][0] == 0
