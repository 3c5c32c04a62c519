"""
Reaction Simulation Runner Module

This module provides the main simulation runner function that can be called
from scripts or imported directly.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import List, Optional, Tuple

from . import config
from .data_paths import (
    get_angular_file,
    get_detector_file,
    get_efficiency_file,
    get_material_file,
)
from .core.angular_dist import AngularDist
from .core.data_classes import EventRecord, RunStatistics
from .core.efficiency import Efficiency
from .core.geometry import Primitive, build_primitives, read_detector_file
from .core.kinematics import ReactionKinematics
from .core.materials import Material
from .core.particles import Particle, Target
from .core.sampling import make_rng
from .core.simulation import (
    BeamSettings,
    SimulationSetup,
    estimate_geometric_efficiency,
    print_run_statistics,
    run_simulation,
)
from .plotting import plot_angular_distribution, plot_run_summary
from .testing.simple_setups import create_bar_wall, print_setup_info

# Deuteron binding energy per nucleon (MeV)
DEUTERON_BINDING_PER_NUCLEON = 1.112


def load_material(file_name: str) -> Material:
    """Load a package-bundled material file.

    Raises
    ------
    FileNotFoundError
        If the material file does not exist.
    ValueError
        If the file cannot be parsed.
    """
    path = get_material_file(file_name)
    material = Material()
    if not material.read_file(str(path)):
        raise ValueError(f"Could not load material from {path}")
    print(f"[info] Loaded material '{material.name}' from {path.name}")
    return material


def load_detectors() -> List[Primitive]:
    """Load the detector setup, falling back to an analytic bar wall."""
    try:
        path = get_detector_file(config.DETECTOR_SETUP_FILE)
        primitives = build_primitives(read_detector_file(str(path)))
        print(f"[info] Loaded {len(primitives)} detectors from {path.name}")
    except (FileNotFoundError, ValueError) as e:
        print(f"[warning] Failed to load detector setup. Using a default bar wall. Error: {e}")
        primitives = create_bar_wall()
    return primitives


def load_ground_state_distribution(beam_intensity: float, target: Target) -> AngularDist:
    """Angular distribution of the ground state, isotropic if the file is unusable."""
    dist = AngularDist()
    try:
        path = get_angular_file(config.GROUND_STATE_DISTRIBUTION_FILE)
    except FileNotFoundError as e:
        print(f"[warning] {e}")
        path = None
    if path is not None and dist.initialize_from_file(str(path), beam_intensity, target):
        print(f"[info] Loaded angular distribution from {path.name} "
              f"(sigma = {dist.reaction_xsection:.4g} mb)")
        return dist

    print("[warning] Using an isotropic angular distribution.")
    dist = AngularDist()
    dist.initialize_isotropic(1.0)
    return dist


def load_efficiency() -> Optional[Efficiency]:
    efficiency = Efficiency()
    try:
        path = get_efficiency_file(config.MEDIUM_BAR_EFFICIENCY_FILE)
    except FileNotFoundError as e:
        print(f"[warning] {e}. Detector efficiency disabled.")
        return None
    if efficiency.read_medium(str(path)) == 0:
        return None
    print(f"[info] Loaded medium bar efficiency from {path.name}")
    return efficiency


def build_default_setup() -> SimulationSetup:
    """Assemble the bundled d(p,p)d experiment.

    A proton beam hits a CD2 foil. Scattered protons are detected by a wall
    of plastic scintillator bars.
    """
    target_material = load_material(config.TARGET_MATERIAL_FILE)
    detector_material = load_material(config.DETECTOR_MATERIAL_FILE)
    max_energy = config.BEAM_ENERGY_MEV + 5.0 * config.BEAM_ENERGY_SPREAD_MEV + 1.0

    beam_particle = Particle("proton", config.BEAM_Z, config.BEAM_A)
    if not beam_particle.set_material(target_material, max_energy):
        raise ValueError(f"Could not build the beam range table in {target_material.name}")

    target = Target(Particle("deuteron", config.TARGET_Z, config.TARGET_A, DEUTERON_BINDING_PER_NUCLEON))
    if not target.set_material(target_material, max_energy):
        raise ValueError(f"Could not build the target range table in {target_material.name}")
    target.set_thickness(config.TARGET_THICKNESS_MG_CM2)
    target.set_angle(math.radians(config.TARGET_ANGLE_DEG))

    beam = BeamSettings(particle=beam_particle)

    kinematics = ReactionKinematics()
    kinematics.initialize(
        config.BEAM_A,
        config.TARGET_A,
        config.RECOIL_A,
        config.EJECTILE_A,
        config.REACTION_Q_VALUE_MEV,
    )
    kinematics.set_distributions([load_ground_state_distribution(beam.intensity, target)])

    return SimulationSetup(
        beam=beam,
        target=target,
        detectors=load_detectors(),
        kinematics=kinematics,
        ejectile=Particle("proton", 1, config.EJECTILE_A),
        recoil=Particle("deuteron", 1, config.RECOIL_A, DEUTERON_BINDING_PER_NUCLEON),
        efficiency=load_efficiency(),
        detector_material=detector_material,
    )


def print_setup(setup: SimulationSetup):
    """Print the experiment configuration."""
    print("\n" + "=" * 70)
    print("EXPERIMENT CONFIGURATION")
    print("=" * 70)
    print(f"Beam: {setup.beam.particle.name}, {setup.beam.energy:.3f} MeV "
          f"(FWHM {setup.beam.energy_spread:.3f} MeV), {setup.beam.intensity:.3g} pps")
    print(setup.target.describe())
    print(setup.kinematics.describe())
    print_setup_info(setup.detectors, "Detector Setup")
    print("=" * 70 + "\n")


def run_full_simulation(
    output_dir: Optional[Path] = None,
    n_detections: Optional[int] = None,
    seed: Optional[int] = None,
    generate_plots: bool = True,
    progress: bool = True,
    test_setup: bool = False,
) -> Tuple[List[EventRecord], RunStatistics]:
    """Run the complete bundled reaction simulation.

    This is the main entry point for running simulations. It handles:
    1. Loading materials, detectors and reaction data (from package-bundled files)
    2. Running the Monte Carlo simulation
    3. Generating visualization plots

    Parameters
    ----------
    output_dir : Path, optional
        Directory for output figures. If None, uses current working directory.
    n_detections : int, optional
        Number of detected events to collect. If None, uses config default.
    seed : int, optional
        Random seed. If None, uses config default.
    generate_plots : bool
        Whether to generate visualization plots.
    progress : bool
        Whether to show a progress bar.
    test_setup : bool
        Estimate the geometric efficiency of the detector setup with
        isotropic rays before the run.

    Returns
    -------
    tuple
        (detected event records, run statistics)
    """
    output_dir = Path.cwd() if output_dir is None else Path(output_dir)
    if n_detections is None:
        n_detections = config.DEFAULT_N_DETECTIONS
    if seed is None:
        seed = config.DEFAULT_SEED

    setup = build_default_setup()
    print_setup(setup)

    print(f"[info] Starting simulation for {n_detections} detected events (seed {seed})...")
    rng = make_rng(seed)
    if test_setup:
        n_rays = config.DEFAULT_SETUP_TEST_RAYS
        n_hits, efficiency = estimate_geometric_efficiency(setup.detectors, n_rays, rng)
        print(f"[info] Setup test: {n_hits}/{n_rays} isotropic rays hit a detector "
              f"(geometric efficiency {100.0 * efficiency:.3f}%)")

    records, stats = run_simulation(setup, n_detections, rng, progress=progress)

    print_run_statistics(stats, beam_rate=setup.beam.intensity)
    rate = setup.kinematics.distributions[0].rate
    if rate > 0.0:
        print(f"[info] Reaction rate: {rate:.4g} /s, detected rate: "
              f"{rate * stats.n_detected / max(stats.n_reactions, 1):.4g} /s")

    if generate_plots and records:
        print("[info] Generating visualizations...")
        save_path = output_dir / config.FIGURES_OUTPUT_DIR / config.RUN_SUMMARY_FIGURE
        plot_run_summary(records, save_path=str(save_path))

        dist = setup.kinematics.distributions[0]
        samples = [dist.sample(rng) for _ in range(10 * n_detections)]
        samples = [s for s in samples if s >= 0.0]
        save_path = output_dir / config.FIGURES_OUTPUT_DIR / config.ANGULAR_DISTRIBUTION_FIGURE
        plot_angular_distribution(dist, samples, save_path=str(save_path))
        print("[info] Visualization complete!")

    return records, stats


def main():
    """Command-line entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the charged-particle reaction simulation")
    parser.add_argument("-n", "--detections", type=int, default=None,
                        help="Number of detected events to collect")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed")
    parser.add_argument("--no-plot", action="store_true",
                        help="Don't generate visualization plots")
    parser.add_argument("--no-progress", action="store_true",
                        help="Don't show a progress bar")
    parser.add_argument("--test-setup", action="store_true",
                        help="Estimate the geometric efficiency of the detector setup first")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Output directory for figures")

    args = parser.parse_args()

    run_full_simulation(
        output_dir=args.output_dir,
        n_detections=args.detections,
        seed=args.seed,
        generate_plots=not args.no_plot,
        progress=not args.no_progress,
        test_setup=args.test_setup,
    )


if __name__ == "__main__":
    main()
