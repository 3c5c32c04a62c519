"""
数据路径模块的单元测试
"""

import pytest

from reaction_simulation import config
from reaction_simulation.data_paths import (
    get_data_dir,
    get_material_dir,
    get_detector_dir,
    get_angular_dir,
    get_efficiency_dir,
    get_material_file,
    get_detector_file,
    get_angular_file,
    get_efficiency_file,
    list_material_files,
    list_detector_files,
)


class TestDataPaths:
    """测试内置数据文件定位"""

    def test_configured_files_exist(self):
        """测试配置中的数据文件均存在"""
        assert get_material_file(config.TARGET_MATERIAL_FILE).exists()
        assert get_material_file(config.DETECTOR_MATERIAL_FILE).exists()
        assert get_detector_file(config.DETECTOR_SETUP_FILE).exists()
        assert get_angular_file(config.GROUND_STATE_DISTRIBUTION_FILE).exists()
        assert get_efficiency_file(config.MEDIUM_BAR_EFFICIENCY_FILE).exists()

    def test_case_insensitive(self):
        """测试不区分大小写查找"""
        assert get_material_file("CD2").name == "cd2.mat"

    def test_missing(self):
        """测试文件不存在"""
        with pytest.raises(FileNotFoundError):
            get_material_file("unobtainium")

    def test_listing(self):
        """测试列出数据文件"""
        names = {p.name for p in list_material_files()}
        assert {"cd2.mat", "water.mat", "silicon.mat", "plastic.mat"} <= names
        assert [p.name for p in list_detector_files()] == ["bar_wall.det"]

    def test_data_dir(self):
        """测试数据根目录包含各类数据子目录"""
        data_dir = get_data_dir()
        assert data_dir.is_dir()
        assert data_dir.name == "data"
        for sub_dir in (get_material_dir(), get_detector_dir(), get_angular_dir(), get_efficiency_dir()):
            assert sub_dir.parent == data_dir
            assert sub_dir.is_dir()
