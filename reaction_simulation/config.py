"""
Configuration settings for the reaction simulation.

This module contains the tunable parameters of the simulation. Users can
modify these values to customize a run without changing the core code.

Example material, detector and angular distribution files are bundled with
the package. Use `reaction_simulation.data_paths` to access them:

    from reaction_simulation.data_paths import get_material_file, get_detector_file
"""

from __future__ import annotations

from pathlib import Path

# =============================================================================
# Package Data Paths (内置数据路径)
# =============================================================================

# Package root directory
_PACKAGE_DIR = Path(__file__).resolve().parent

# Bundled data root (包内)
DATA_DIR = _PACKAGE_DIR / "data"

# Material definition files (包内)
MATERIAL_DIR = DATA_DIR / "materials"
TARGET_MATERIAL_FILE = "cd2.mat"
DETECTOR_MATERIAL_FILE = "plastic.mat"

# Detector setup files (包内)
DETECTOR_DIR = DATA_DIR / "detectors"
DETECTOR_SETUP_FILE = "bar_wall.det"

# Differential cross-section files (包内)
ANGULAR_DIR = DATA_DIR / "angular"
GROUND_STATE_DISTRIBUTION_FILE = "dp_ground_state.dat"

# Detector efficiency tables (包内)
EFFICIENCY_DIR = DATA_DIR / "efficiency"
MEDIUM_BAR_EFFICIENCY_FILE = "medium_bar.dat"

# Output directories (用户工作目录)
FIGURES_OUTPUT_DIR = "Figures"

# Output file names
RUN_SUMMARY_FIGURE = "run_summary.png"
ANGULAR_DISTRIBUTION_FIGURE = "angular_distribution.png"

# =============================================================================
# Energy Loss
# =============================================================================

# Number of points in a range table
DEFAULT_RANGE_TABLE_ENTRIES = 100

# Lowest energy in a range table (MeV)
RANGE_TABLE_START_ENERGY_MEV = 0.1

# Number of midpoint steps used to integrate 1/S
RANGE_INTEGRATION_STEPS = 1000

# Lower integration limit, avoids the divergence of 1/S at E = 0 (MeV)
RANGE_ENERGY_FLOOR_MEV = 1.0e-3

# Upper end of the search for the stopping power maximum, per unit of proton mass (MeV)
RANGE_PEAK_SEARCH_MEV = 10.0

# Number of log-spaced points used to locate the stopping power maximum
RANGE_PEAK_SEARCH_POINTS = 500

# =============================================================================
# Detector Configuration
# =============================================================================

# Standard bar sizes, (length, width, depth) in m
SMALL_BAR_SIZE = (0.60, 0.03, 0.03)
MEDIUM_BAR_SIZE = (1.20, 0.05, 0.03)
LARGE_BAR_SIZE = (2.00, 0.05, 0.05)

# Tolerance used to recognise a standard bar size (m)
BAR_SIZE_TOLERANCE = 1.0e-6

# Light output window used to accept a detector hit (MeVee)
QDC_LOWER_THRESHOLD_MEV = 0.1
QDC_UPPER_THRESHOLD_MEV = 5.0

# Timing resolution of a bar (ns FWHM)
TIME_RESOLUTION_NS = 3.0

# Birks' law parameters for plastic scintillator
BIRKS_L0 = 1.0  # 1/MeV
BIRKS_KB = 1.26e-4  # m/MeV
BIRKS_C = 0.0  # (m/MeV)²

# =============================================================================
# Beam and Target
# =============================================================================

# Beam particle (proton)
BEAM_Z = 1
BEAM_A = 1
BEAM_ENERGY_MEV = 10.0
BEAM_ENERGY_SPREAD_MEV = 0.0  # FWHM
BEAM_SPOT_RADIUS_M = 0.0
BEAM_DIVERGENCE_RAD = 0.0
BEAM_INTENSITY_PPS = 1.0e6

# Target (CD2 foil)
TARGET_Z = 1
TARGET_A = 2
TARGET_THICKNESS_MG_CM2 = 1.0
TARGET_ANGLE_DEG = 0.0

# Transverse size of the target foil (m)
TARGET_SIZE_M = 0.05

# Reaction d(p,d)p-like elastic channel by default
RECOIL_A = 2
EJECTILE_A = 1
REACTION_Q_VALUE_MEV = 0.0

# =============================================================================
# Simulation Parameters
# =============================================================================

# Number of detected events to simulate
DEFAULT_N_DETECTIONS = 1000

# Maximum number of trials per requested detection
MAX_TRIALS_PER_DETECTION = 1000

# Number of isotropic rays for a detector setup test
DEFAULT_SETUP_TEST_RAYS = 20000

# Random seed used when none is given
DEFAULT_SEED = 12345

# =============================================================================
# Visualization Settings
# =============================================================================

# Plot DPI settings
PLOT_DPI = 300
QUICK_PLOT_DPI = 150

# Summary figure size
RUN_SUMMARY_FIGSIZE = (12, 9)

# Number of histogram bins
HISTOGRAM_BINS = 100
