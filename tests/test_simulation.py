"""
模拟主流程的单元测试
"""

import dataclasses
import math

import numpy as np
import pytest

from reaction_simulation.core.data_classes import RunStatistics
from reaction_simulation.core.geometry import Primitive
from reaction_simulation.core.kinematics import ReactionKinematics
from reaction_simulation.core.particles import Particle
from reaction_simulation.core.sampling import make_rng
from reaction_simulation.core.simulation import (
    BeamSettings,
    estimate_geometric_efficiency,
    geometric_efficiency_by_angle,
    print_run_statistics,
    records_to_dataframe,
    run_simulation,
    sample_beam_ray,
    simulate_event,
)
from reaction_simulation.core.vectors import vector3
from reaction_simulation import config
from reaction_simulation.runner import build_default_setup, run_full_simulation
from reaction_simulation.testing import create_recoil_detector, create_single_bar, validate_core


@pytest.fixture(scope="module")
def setup():
    return build_default_setup()


class TestBeamRays:
    """测试束流射线"""

    def test_pencil_beam(self):
        """测试无发散笔形束"""
        beam = BeamSettings(particle=Particle("proton", 1, 1))
        origin, direction = sample_beam_ray(beam, make_rng(0))
        np.testing.assert_array_almost_equal(origin, [0.0, 0.0, -1.0])
        np.testing.assert_array_almost_equal(direction, [0.0, 0.0, 1.0])

    def test_divergent_beam(self):
        """测试发散束由焦点指向束斑"""
        beam = BeamSettings(particle=Particle("proton", 1, 1), spot_radius=0.01, divergence=0.01)
        origin, direction = sample_beam_ray(beam, make_rng(1))
        assert origin[2] == pytest.approx(-0.01 / math.tan(0.01))
        spot = origin + direction
        assert spot[2] == pytest.approx(0.0)
        assert math.hypot(spot[0], spot[1]) <= 0.01

    def test_unknown_profile(self):
        """测试未知束斑类型"""
        beam = BeamSettings(particle=Particle("proton", 1, 1), profile="square")
        with pytest.raises(ValueError):
            sample_beam_ray(beam, make_rng(0))


class TestEvents:
    """测试单事件模拟"""

    def test_reaction_counters(self, setup):
        """测试计数器"""
        stats = RunStatistics()
        rng = make_rng(2)
        for _ in range(200):
            simulate_event(setup, rng, stats)
        assert stats.n_trials == 200
        assert stats.n_target_missed == 0
        assert stats.n_reactions == 200
        assert stats.n_geometric_hits <= stats.n_reactions

    def test_beam_misses_target(self, setup):
        """测试束流偏离靶"""
        beam = setup.beam
        original = beam.spot_radius
        beam.spot_radius = 1.0
        beam.profile = "halo"
        try:
            stats = RunStatistics()
            assert simulate_event(setup, make_rng(3), stats) is None
            assert stats.n_target_missed == 1
        finally:
            beam.spot_radius = original
            beam.profile = "circle"


class TestRun:
    """测试完整运行"""

    def test_collects_detections(self, setup):
        """测试收集指定数量的探测事件"""
        records, stats = run_simulation(setup, 10, make_rng(4))
        assert len(records) == 10
        assert stats.n_detected == 10
        assert all(r.detected for r in records)
        assert stats.n_geometric_hits >= stats.n_detected
        assert 0.0 < stats.detection_efficiency <= stats.geometric_efficiency <= 1.0
        low, high = setup.qdc_window
        for record in records:
            for hit in record.hits:
                assert hit.particle == "ejectile"
                assert low <= hit.qdc <= high
                assert hit.tof > 0.0
                assert 15.0 < hit.lab_theta < 60.0

    def test_reproducible(self, setup):
        """测试相同种子结果一致"""
        _, a = run_simulation(setup, 3, make_rng(5))
        _, b = run_simulation(setup, 3, make_rng(5))
        assert a == b

    def test_trial_limit(self, setup):
        """测试达到最大尝试次数后停止"""
        records, stats = run_simulation(setup, 10, make_rng(6), max_trials=5)
        assert stats.n_trials == 5
        assert len(records) <= 5

    def test_coincidence_without_recoil_detector(self, setup):
        """测试无反冲探测器时无符合事件"""
        records, stats = run_simulation(setup, 1, make_rng(7), coincidence=True, max_trials=300)
        assert records == []
        assert stats.n_detected == 0

    def test_coincidence_with_recoil_detector(self, setup):
        """测试反冲探测器与探测棒墙的符合事件"""
        recoil_det = create_recoil_detector(distance=0.25, size=0.4, theta_deg=62.0, phi_deg=180.0)
        coincident = dataclasses.replace(
            setup,
            detectors=setup.detectors + [recoil_det],
            perfect_detector=True,
            qdc_window=(0.0, math.inf),
            detector_material=None,
        )
        records, stats = run_simulation(coincident, 3, make_rng(12), coincidence=True)
        assert len(records) == 3
        assert stats.n_detected == 3
        recoil_index = len(setup.detectors)
        for record in records:
            labels = {hit.particle for hit in record.hits}
            assert labels == {"ejectile", "recoil"}
            for hit in record.hits:
                if hit.particle == "recoil":
                    assert hit.detector_index == recoil_index
                    assert 90.0 < hit.lab_phi < 270.0
                    assert 0.0 < hit.energy < record.beam_energy
                else:
                    assert hit.detector_index < recoil_index

    def test_dataframe(self, setup):
        """测试转换为 DataFrame"""
        records, _ = run_simulation(setup, 5, make_rng(8))
        frame = records_to_dataframe(records)
        assert len(frame) == sum(len(r.hits) for r in records)
        assert {"tof_ns", "qdc_mev", "lab_theta_deg", "com_angle_deg"} <= set(frame.columns)
        assert records_to_dataframe([]).empty

    def test_print_statistics(self, setup, capsys):
        """测试统计输出"""
        print_run_statistics(RunStatistics())
        assert "No events simulated" in capsys.readouterr().out
        _, stats = run_simulation(setup, 2, make_rng(9))
        print_run_statistics(stats, beam_rate=1.0e6)
        out = capsys.readouterr().out
        assert "Detected events" in out
        assert "Beam time" in out


class TestRunner:
    """测试完整模拟入口"""

    def test_build_default_setup(self):
        """测试内置实验装置可以建立（氘核在 CD2 中的射程表）"""
        built = build_default_setup()
        assert built.beam.particle.initialized
        assert built.target.profile.initialized
        assert np.all(np.diff(built.target.profile.table.range) > 0.0)
        assert built.target.material.name == "CD2"
        assert len(built.detectors) == 8
        assert built.detector_material is not None

    def test_run_full_simulation(self, tmp_path, capsys):
        """测试运行并保存图像"""
        records, stats = run_full_simulation(
            output_dir=tmp_path, n_detections=3, seed=11, progress=False, test_setup=True
        )
        assert len(records) == 3
        assert stats.n_detected == 3
        assert "Setup test" in capsys.readouterr().out
        figures = tmp_path / config.FIGURES_OUTPUT_DIR
        assert (figures / config.RUN_SUMMARY_FIGURE).exists()
        assert (figures / config.ANGULAR_DISTRIBUTION_FIGURE).exists()


class TestGeometricEfficiency:
    """测试几何效率估计"""

    def test_enclosing_box(self):
        """测试包围源点的探测器效率为 1"""
        box = Primitive()
        box.set_size(10.0, 10.0, 10.0)
        n_hits, eff = estimate_geometric_efficiency([box], 500, make_rng(10))
        assert n_hits == 500
        assert eff == 1.0

    def test_single_bar(self):
        """测试单根探测棒的立体角"""
        bar = create_single_bar(radius=1.0, theta_deg=30.0)
        _, eff = estimate_geometric_efficiency([bar], 20000, make_rng(11))
        expected = bar.width * bar.length / (4.0 * math.pi * 1.0 ** 2)
        assert eff == pytest.approx(expected, rel=0.3)

    def test_no_trials(self):
        """测试零次抽样"""
        assert estimate_geometric_efficiency([Primitive()], 0, make_rng(0)) == (0, 0.0)

    def test_offset_origin(self):
        """测试偏移源点"""
        bar = create_single_bar(radius=1.0)
        n_hits, _ = estimate_geometric_efficiency([bar], 100, make_rng(12), origin=vector3(0, 0, 5))
        assert n_hits < 100

    def test_binned_lab_frame(self):
        """测试按实验室角度分箱的几何效率"""
        bar = create_single_bar(radius=1.0, theta_deg=30.0)
        table = geometric_efficiency_by_angle([bar], 5000, make_rng(13), [0.0, 25.0, 180.0])
        assert list(table.columns) == ["theta_low_deg", "theta_high_deg", "n_rays", "n_hits", "efficiency"]
        assert table["n_rays"].sum() == 5000
        assert table["n_hits"].iloc[0] == 0
        assert table["n_hits"].iloc[1] > 0
        assert table["efficiency"].iloc[1] == pytest.approx(
            table["n_hits"].iloc[1] / table["n_rays"].iloc[1]
        )

    def test_binned_center_of_mass_conversion(self):
        """测试质心系各向同性时前向角度箱的射线更多"""
        kin = ReactionKinematics()
        assert kin.initialize(1, 2, 2, 1, 0.0)
        edges = np.arange(0.0, 190.0, 10.0)
        lab = geometric_efficiency_by_angle([], 10000, make_rng(14), edges)
        com = geometric_efficiency_by_angle([], 10000, make_rng(14), edges, kinematics=kin, beam_energy=10.0)
        assert com["n_rays"].sum() == 10000
        assert com["n_rays"].iloc[0] > lab["n_rays"].iloc[0]
        assert (com["n_hits"] == 0).all()
        assert (com["efficiency"] == 0.0).all()

    def test_binned_invalid_arguments(self):
        """测试无效分箱参数"""
        with pytest.raises(ValueError):
            geometric_efficiency_by_angle([], 10, make_rng(0), [10.0])
        with pytest.raises(ValueError):
            geometric_efficiency_by_angle([], 10, make_rng(0), [10.0, 5.0])
        kin = ReactionKinematics()
        kin.initialize(1, 2, 2, 1, 0.0)
        with pytest.raises(ValueError):
            geometric_efficiency_by_angle([], 10, make_rng(0), [0.0, 90.0], kinematics=kin)


class TestValidation:
    """测试内置校验"""

    def test_validate_core(self):
        """测试核心校验全部通过"""
        success, results = validate_core()
        assert success, results
