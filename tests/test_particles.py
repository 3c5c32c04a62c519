"""
粒子与靶的单元测试
"""

import math

import numpy as np
import pytest

from reaction_simulation.core.constants import AVOGADRO_CONSTANT, NEUTRON_RME, PROTON_RME, SPEED_OF_LIGHT
from reaction_simulation.core.materials import Material
from reaction_simulation.core.particles import Particle, RangeTableProvider, Target, straggle_angle
from reaction_simulation.core.sampling import make_rng
from reaction_simulation.core.vectors import vector3
from reaction_simulation.data_paths import get_material_file
from reaction_simulation.testing import make_water


@pytest.fixture
def water_target():
    target = Target(Particle("hydrogen", 1, 1))
    assert target.set_material(make_water(), 20.0)
    target.set_thickness(1.0)
    return target


class TestParticle:
    """测试粒子属性"""

    def test_proton_mass(self):
        """测试质子质量"""
        p = Particle("proton", 1, 1)
        assert p.mass == pytest.approx(PROTON_RME)
        assert p.n == 0.0

    def test_binding_energy(self):
        """测试结合能修正的氘核质量"""
        d = Particle("deuteron", 1, 2, 1.112)
        assert d.mass == pytest.approx(PROTON_RME + NEUTRON_RME - 2.224)
        assert d.mass_amu == pytest.approx(2.0136, abs=1e-3)

    def test_explicit_masses(self):
        """测试显式设置质量"""
        p = Particle("alpha", 2, 4)
        p.set_mass_mev(3727.379)
        assert p.mass == pytest.approx(3727.379)
        p.set_mass_amu(1.0)
        assert p.mass_amu == pytest.approx(1.0)

    def test_relativistic_round_trip(self):
        """测试动能与速度互换"""
        p = Particle("proton", 1, 1)
        v = p.velocity_from_ke(10.0)
        assert 0.0 < v < SPEED_OF_LIGHT
        assert p.ke_from_velocity(v) == pytest.approx(10.0)
        assert p.te_from_ke(10.0) == pytest.approx(PROTON_RME + 10.0)
        assert p.ke_from_te(p.te_from_velocity(v)) == pytest.approx(10.0)
        assert p.velocity_from_te(PROTON_RME + 10.0) == pytest.approx(v)

    def test_momentum(self):
        """测试动量"""
        p = Particle("proton", 1, 1)
        assert p.momentum_from_ke(0.0) == 0.0
        pc = p.momentum_from_ke(10.0)
        assert pc == pytest.approx(math.sqrt(10.0 ** 2 + 2.0 * 10.0 * PROTON_RME))
        assert p.momentum_from_velocity(p.velocity_from_ke(10.0)) == pytest.approx(pc)

    def test_range_table(self):
        """测试粒子射程表"""
        p = Particle("proton", 1, 1)
        assert p.table_range(5.0) == -1.0
        assert not p.initialized
        assert p.set_material(make_water(), 20.0)
        assert p.initialized
        assert not p.set_material(make_water(), 20.0)
        r = p.table_range(10.0)
        assert 1.0e-3 < r < 1.5e-3
        assert p.table_energy(r) == pytest.approx(10.0)
        energy, _ = p.table_new_energy(10.0, r / 2.0)
        assert 0.0 < energy < 10.0

    def test_deuteron_table_in_cd2(self):
        """测试氘核在 CD2 中的射程表可以建立"""
        cd2 = Material()
        assert cd2.read_file(str(get_material_file("cd2.mat")))
        d = Particle("deuteron", 1, 2, 1.112)
        assert d.set_material(cd2, 11.0)
        assert np.all(np.diff(d.table.range) > 0.0)
        assert d.table_energy(d.table_range(3.2)) == pytest.approx(3.2, rel=1e-3)

    def test_protocol(self):
        """测试射程查询协议"""
        assert isinstance(Particle(), RangeTableProvider)
        assert isinstance(Target(), RangeTableProvider)


class TestStraggling:
    """测试多次散射角"""

    def test_zero_cases(self):
        """测试无效输入"""
        assert straggle_angle(0.0, 1, 1, 1.0, 100.0) == 0.0
        assert straggle_angle(10.0, 1, 1, 0.0, 100.0) == 0.0
        assert straggle_angle(10.0, 1, 1, 1.0, 0.0) == 0.0

    def test_thicker_scatters_more(self):
        """测试更厚的靶散射更大"""
        thin = straggle_angle(10.0, 1, 1, 1.0, 4.0e4)
        thick = straggle_angle(10.0, 1, 1, 10.0, 4.0e4)
        assert 0.0 < thin < thick


class TestTarget:
    """测试靶"""

    def test_thickness(self, water_target):
        """测试物理厚度"""
        assert water_target.real_thickness == pytest.approx(1.0e-5)
        assert water_target.physical.depth == pytest.approx(1.0e-5)
        assert water_target.material.name == "water"

    def test_number_density(self, water_target):
        """测试单位面积靶核数"""
        expected = 1.0e-3 * AVOGADRO_CONSTANT / 18.015 * 2
        assert water_target.number_density == pytest.approx(expected)

    def test_tilted(self, water_target):
        """测试倾斜靶的有效厚度"""
        water_target.set_angle(math.radians(60.0))
        assert water_target.z_thickness == pytest.approx(2.0)
        assert water_target.real_z_thickness == pytest.approx(2.0e-5)

    def test_invalid_values(self, water_target):
        """测试无效厚度与密度"""
        assert not water_target.set_thickness(-1.0)
        assert not water_target.set_density(0.0)

    def test_interaction_depth(self, water_target):
        """测试反应点在靶内"""
        rng = make_rng(1)
        for _ in range(100):
            depth, surface, point = water_target.interaction_depth(vector3(0, 0, -1), vector3(0, 0, 1), rng)
            assert 0.0 <= depth <= water_target.real_thickness
            assert surface[2] == pytest.approx(-0.5e-5)
            assert point[2] == pytest.approx(surface[2] + depth)

    def test_tilted_interaction_depth(self, water_target):
        """测试倾斜靶内的路径长度"""
        water_target.set_angle(math.radians(60.0))
        rng = make_rng(2)
        depths = [water_target.interaction_depth(vector3(0, 0, -1), vector3(0, 0, 1), rng)[0] for _ in range(200)]
        assert max(depths) <= 2.0e-5 + 1e-15
        assert max(depths) > 1.0e-5

    def test_beam_misses(self, water_target):
        """测试束流未击中靶"""
        assert water_target.interaction_depth(vector3(1, 0, -1), vector3(0, 0, 1), make_rng(0)) is None

    def test_angle_straggling(self, water_target):
        """测试散射后方向仍为单位矢量且接近原方向"""
        rng = make_rng(4)
        direction = water_target.angle_straggling(vector3(0, 0, 1), 1, 1, 10.0, rng)
        assert np.linalg.norm(direction) == pytest.approx(1.0)
        assert direction[2] > 0.99

    def test_profile_energy_loss(self, water_target):
        """测试靶核在靶材料中的能损查询"""
        assert water_target.table_range(5.0) == pytest.approx(water_target.profile.table_range(5.0))
        assert water_target.table_energy(water_target.table_range(5.0)) == pytest.approx(5.0)
        assert water_target.table_new_energy(5.0, 0.0) == (5.0, 0.0)

    def test_material_not_ready(self):
        """测试材料未就绪"""
        from reaction_simulation.core.materials import Material
        assert not Target().set_material(Material(1), 10.0)

    def test_describe(self, water_target):
        """测试描述信息"""
        assert "water" in water_target.describe()
