"""
反应模拟核心模块

该子包包含模拟的核心功能模块：
- constants: 物理常数和调试标志
- data_classes: 数据结构定义（PrimitiveHit, DetectorSpec, EventRecord 等）
- vectors: 三维矢量与旋转矩阵
- lines: 二维射线、线段与正多边形
- materials: 材料能损模型（Bethe-Bloch）
- range_table: 能量-射程查找表
- particles: 粒子与靶（组合而非继承）
- geometry: 探测器长方体几何与射线求交
- angular_dist: 角分布抽样
- efficiency: 探测效率表
- kinematics: 两体反应运动学
- sampling: 抽样方法（显式随机数发生器）
- simulation: 模拟主逻辑
"""

# 常数
from .constants import (
    AVOGADRO_CONSTANT,
    SPEED_OF_LIGHT,
    ELECTRON_RME,
    PROTON_RME,
    NEUTRON_RME,
    AMU_TO_MEV,
    DEBUG,
)

# 数据类
from .data_classes import (
    PrimitiveHit,
    DetectorSpec,
    DetectorHit,
    ReactionProducts,
    EventRecord,
    RunStatistics,
)

# 矢量
from .vectors import (
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

# 射线与线段
from .lines import (
    solve_line_parameters,
    Ray,
    Line,
    RegularPolygon,
)

# 材料
from .materials import (
    Material,
    read_material_file,
    radiation_length,
    ionization_potential,
)

# 射程表
from .range_table import RangeTable

# 粒子与靶
from .particles import (
    Particle,
    Target,
    RangeTableProvider,
    straggle_angle,
)

# 几何处理
from .geometry import (
    Primitive,
    read_detector_file,
    build_primitives,
    detector_angles,
)

# 角分布
from .angular_dist import (
    AngularDist,
    load_angular_distribution,
)

# 效率
from .efficiency import (
    Efficiency,
    load_efficiency_file,
)

# 运动学
from .kinematics import ReactionKinematics

# 抽样
from .sampling import (
    make_rng,
    frand,
    gauss_fwhm,
    random_circle,
    random_gauss,
    random_halo,
    sample_isotropic_direction,
    unit_sphere_random_angles,
    sample_direction_in_cone,
)

# 模拟
from .simulation import (
    BeamSettings,
    SimulationSetup,
    sample_beam_ray,
    simulate_event,
    run_simulation,
    estimate_geometric_efficiency,
    geometric_efficiency_by_angle,
    print_run_statistics,
    records_to_dataframe,
)

__all__ = [
    # 常数
    'AVOGADRO_CONSTANT',
    'SPEED_OF_LIGHT',
    'ELECTRON_RME',
    'PROTON_RME',
    'NEUTRON_RME',
    'AMU_TO_MEV',
    'DEBUG',
    # 数据类
    'PrimitiveHit',
    'DetectorSpec',
    'DetectorHit',
    'ReactionProducts',
    'EventRecord',
    'RunStatistics',
    # 矢量
    'vector3',
    'normalize',
    'distance',
    'spherical_to_cartesian',
    'cartesian_to_spherical',
    'rotation_from_angles',
    'rotation_matrix',
    'transform',
    'beam_frame_matrix',
    'build_orthonormal_frame',
    # 射线与线段
    'solve_line_parameters',
    'Ray',
    'Line',
    'RegularPolygon',
    # 材料
    'Material',
    'read_material_file',
    'radiation_length',
    'ionization_potential',
    # 射程表
    'RangeTable',
    # 粒子与靶
    'Particle',
    'Target',
    'RangeTableProvider',
    'straggle_angle',
    # 几何
    'Primitive',
    'read_detector_file',
    'build_primitives',
    'detector_angles',
    # 角分布
    'AngularDist',
    'load_angular_distribution',
    # 效率
    'Efficiency',
    'load_efficiency_file',
    # 运动学
    'ReactionKinematics',
    # 抽样
    'make_rng',
    'frand',
    'gauss_fwhm',
    'random_circle',
    'random_gauss',
    'random_halo',
    'sample_isotropic_direction',
    'unit_sphere_random_angles',
    'sample_direction_in_cone',
    # 模拟
    'BeamSettings',
    'SimulationSetup',
    'sample_beam_ray',
    'simulate_event',
    'run_simulation',
    'estimate_geometric_efficiency',
    'geometric_efficiency_by_angle',
    'print_run_statistics',
    'records_to_dataframe',
]
