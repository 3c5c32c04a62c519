"""
探测效率表的单元测试
"""

import pytest

from reaction_simulation.core.efficiency import Efficiency, load_efficiency_file
from reaction_simulation.core.geometry import Primitive
from reaction_simulation.data_paths import get_efficiency_file


@pytest.fixture
def table_file(tmp_path):
    path = tmp_path / "eff.dat"
    path.write_text("# E eff\n2.0 0.6\n1.0 0.4\n4.0 0.2\n")
    return str(path)


class TestEfficiencyFiles:
    """测试效率文件读取"""

    def test_sorted(self, table_file):
        """测试按能量排序"""
        energy, eff = load_efficiency_file(table_file)
        assert list(energy) == [1.0, 2.0, 4.0]
        assert list(eff) == [0.4, 0.6, 0.2]

    def test_out_of_range_values(self, tmp_path):
        """测试效率超出 [0, 1]"""
        path = tmp_path / "bad.dat"
        path.write_text("1.0 1.5\n")
        with pytest.raises(ValueError):
            load_efficiency_file(str(path))
        assert Efficiency().read_large(str(path)) == 0

    def test_bundled_file(self):
        """测试读取内置效率表"""
        eff = Efficiency()
        assert eff.read_medium(str(get_efficiency_file("medium_bar"))) > 0
        assert eff.is_loaded("medium")


class TestInterpolation:
    """测试效率插值"""

    def test_interpolation(self, table_file):
        """测试线性插值与端点截断"""
        eff = Efficiency()
        assert eff.read_small(table_file) == 3
        assert eff.num_points("small") == 3
        assert eff.get_small_efficiency(1.5) == pytest.approx(0.5)
        assert eff.get_small_efficiency(0.1) == pytest.approx(0.4)
        assert eff.get_small_efficiency(10.0) == pytest.approx(0.2)

    def test_missing_table(self):
        """测试无效率表时为理想探测器"""
        eff = Efficiency()
        assert not eff.is_loaded("large")
        assert eff.get_large_efficiency(3.0) == 1.0
        assert eff.get_medium_efficiency(3.0) == 1.0

    def test_for_primitive(self, table_file):
        """测试按探测器尺寸选择效率表"""
        eff = Efficiency()
        eff.read_medium(table_file)
        bar = Primitive()
        bar.set_medium()
        assert eff.for_primitive(bar, 2.0) == pytest.approx(0.6)
        odd = Primitive()
        odd.set_size(0.1, 0.1, 0.1)
        assert eff.for_primitive(odd, 2.0) == 1.0
