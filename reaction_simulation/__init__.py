"""
Charged-Particle Reaction Simulation Package
============================================

This package provides a Monte-Carlo simulator for two-body nuclear
reactions on thin targets: a beam particle loses energy in the target,
reacts, and the reaction products are traced into an array of
rectangular detectors to predict detection efficiency and observables.

Modules:
--------
- constants: Physical constants and debug flag
- config: Configurable simulation parameters
- data_classes: Data structures (PrimitiveHit, DetectorSpec, EventRecord, ...)
- vectors / lines: 3D vectors, rotations, 2D rays and polygons
- materials: Bethe-Bloch stopping power, range and Birks light output
- range_table: Energy/range lookup tables
- particles: Particles and the reaction target
- geometry: Rectangular prism detectors and ray intersection
- angular_dist: Center-of-mass angular distribution sampling
- efficiency: Detector efficiency tables
- kinematics: Two-body reaction kinematics
- sampling: Random sampling utilities
- simulation: Event loop driver
"""

from . import config
from .core.constants import *
from .core.data_classes import (
    PrimitiveHit,
    DetectorSpec,
    DetectorHit,
    ReactionProducts,
    EventRecord,
    RunStatistics,
)
from .core.vectors import (
    vector3,
    normalize,
    spherical_to_cartesian,
    cartesian_to_spherical,
    rotation_from_angles,
    beam_frame_matrix,
)
from .core.lines import Ray, Line, RegularPolygon, solve_line_parameters
from .core.materials import Material, read_material_file, radiation_length, ionization_potential
from .core.range_table import RangeTable
from .core.particles import Particle, Target, RangeTableProvider
from .core.geometry import Primitive, read_detector_file, build_primitives
from .core.angular_dist import AngularDist, load_angular_distribution
from .core.efficiency import Efficiency
from .core.kinematics import ReactionKinematics
from .core.sampling import make_rng
from .core.simulation import (
    BeamSettings,
    SimulationSetup,
    simulate_event,
    run_simulation,
    estimate_geometric_efficiency,
    print_run_statistics,
    records_to_dataframe,
)

__version__ = "1.0.0"
__all__ = [
    # Config module
    "config",
    # Constants
    "AVOGADRO_CONSTANT",
    "SPEED_OF_LIGHT",
    "PROTON_RME",
    "NEUTRON_RME",
    "DEBUG",
    # Data classes
    "PrimitiveHit",
    "DetectorSpec",
    "DetectorHit",
    "ReactionProducts",
    "EventRecord",
    "RunStatistics",
    # Vectors and lines
    "vector3",
    "normalize",
    "spherical_to_cartesian",
    "cartesian_to_spherical",
    "rotation_from_angles",
    "beam_frame_matrix",
    "Ray",
    "Line",
    "RegularPolygon",
    "solve_line_parameters",
    # Energy loss
    "Material",
    "read_material_file",
    "radiation_length",
    "ionization_potential",
    "RangeTable",
    "Particle",
    "Target",
    "RangeTableProvider",
    # Geometry
    "Primitive",
    "read_detector_file",
    "build_primitives",
    # Reaction
    "AngularDist",
    "load_angular_distribution",
    "Efficiency",
    "ReactionKinematics",
    # Simulation
    "make_rng",
    "BeamSettings",
    "SimulationSetup",
    "simulate_event",
    "run_simulation",
    "estimate_geometric_efficiency",
    "print_run_statistics",
    "records_to_dataframe",
]
