"""
High-level simulation driver functions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from .. import config
from .constants import DEBUG
from .data_classes import DetectorHit, EventRecord, RunStatistics
from .efficiency import Efficiency
from .geometry import Primitive
from .kinematics import ReactionKinematics
from .materials import Material
from .particles import Particle, Target
from .sampling import (
    gauss_fwhm,
    random_circle,
    random_gauss,
    random_halo,
    sample_isotropic_direction,
    unit_sphere_random_angles,
)
from .vectors import (
    beam_frame_matrix,
    cartesian_to_spherical,
    distance,
    spherical_to_cartesian,
    transform,
    vector3,
)

BEAM_PROFILES = ("circle", "gauss", "halo")

# Number of stopped beam particles after which a warning is printed
STOPPED_BEAM_WARNING = 10000


@dataclass
class BeamSettings:
    """Beam particle and its phase space.

    ``particle`` carries the range table of the beam in the target
    material. With a non-zero ``divergence`` the beam is focused onto the
    target from a point upstream; otherwise it is parallel to +z.
    """

    particle: Particle
    energy: float = config.BEAM_ENERGY_MEV  # MeV
    energy_spread: float = config.BEAM_ENERGY_SPREAD_MEV  # MeV FWHM
    spot_radius: float = config.BEAM_SPOT_RADIUS_M  # m
    divergence: float = config.BEAM_DIVERGENCE_RAD  # rad
    profile: str = "circle"
    intensity: float = config.BEAM_INTENSITY_PPS  # particles/s


@dataclass
class SimulationSetup:
    """Everything needed to simulate events of one experiment."""

    beam: BeamSettings
    target: Target
    detectors: List[Primitive]
    kinematics: ReactionKinematics
    ejectile: Particle
    recoil: Particle
    efficiency: Optional[Efficiency] = None
    detector_material: Optional[Material] = None
    perfect_detector: bool = False
    time_resolution: float = config.TIME_RESOLUTION_NS  # ns FWHM
    qdc_window: Tuple[float, float] = (config.QDC_LOWER_THRESHOLD_MEV, config.QDC_UPPER_THRESHOLD_MEV)
    birks_parameters: Tuple[float, float, float] = field(
        default_factory=lambda: (config.BIRKS_L0, config.BIRKS_KB, config.BIRKS_C)
    )


def sample_beam_ray(beam: BeamSettings, rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    """Origin and direction of one beam particle."""
    if beam.profile not in BEAM_PROFILES:
        raise ValueError(f"Unknown beam profile '{beam.profile}'")

    def spot(offset: float) -> np.ndarray:
        if beam.profile == "gauss":
            return random_gauss(rng, 2.0 * beam.spot_radius, offset)
        if beam.profile == "halo":
            return random_halo(rng, beam.spot_radius, offset)
        return random_circle(rng, beam.spot_radius, offset)

    if beam.divergence > 0.0 and beam.spot_radius > 0.0:
        focus = vector3(0.0, 0.0, -beam.spot_radius / math.tan(beam.divergence))
        return focus, spot(0.0) - focus
    # Start 1 m upstream so the particle begins outside the target
    return spot(1.0), vector3(0.0, 0.0, 1.0)


def _light_output(setup: SimulationSetup, particle: Particle, deposit: float) -> float:
    if setup.detector_material is None:
        return deposit
    l0, kb, c = setup.birks_parameters
    return setup.detector_material.birks(deposit, particle.z, particle.mass, l0, kb, c)


def _detect(
    setup: SimulationSetup,
    index: int,
    prim: Primitive,
    origin: np.ndarray,
    direction: np.ndarray,
    particle: Particle,
    label: str,
    energy: float,
    rng: np.random.Generator,
    stats: RunStatistics,
) -> Tuple[bool, Optional[DetectorHit]]:
    """Track one reaction product into one detector.

    Returns whether the detector was struck and the accepted hit, if any.
    """
    hit = prim.intersect_primitive(origin, direction)
    if hit is None:
        return False, None
    if energy <= 0.0:
        return True, None

    if not setup.perfect_detector and setup.efficiency is not None:
        if rng.random() > setup.efficiency.for_primitive(prim, energy):
            stats.n_efficiency_rejected += 1
            return True, None

    # Random interaction point along the chord through the detector
    penetration = rng.random()
    point = hit.first_point
    if hit.second_point is not None:
        point = hit.first_point + (hit.second_point - hit.first_point) * penetration

    tof = distance(origin, point) / particle.velocity_from_ke(energy) * 1.0e9
    qdc = _light_output(setup, particle, energy * rng.random())
    if not setup.perfect_detector:
        tof += gauss_fwhm(rng, setup.time_resolution)

    low, high = setup.qdc_window
    if not low <= qdc <= high:
        return True, None

    _, theta, phi = cartesian_to_spherical(point)
    return True, DetectorHit(
        detector_index=index,
        particle=label,
        face=hit.face1,
        position=point,
        local_coords=hit.local_coords,
        lab_theta=math.degrees(theta),
        lab_phi=math.degrees(phi),
        energy=energy,
        qdc=qdc,
        tof=tof,
    )


def simulate_event(
    setup: SimulationSetup,
    rng: np.random.Generator,
    stats: RunStatistics,
) -> Optional[EventRecord]:
    """Simulate a single beam particle.

    Returns
    -------
    EventRecord or None
        The reaction and its detector hits, or None when no reaction
        occurred (beam missed or stopped in the target, or the state is
        energetically closed).
    """
    stats.n_trials += 1
    beam = setup.beam

    origin, direction = sample_beam_ray(beam, rng)
    interaction = setup.target.interaction_depth(origin, direction, rng)
    if interaction is None:
        stats.n_target_missed += 1
        return None
    depth, _, interaction_point = interaction

    beam_energy = beam.energy + gauss_fwhm(rng, beam.energy_spread)
    beam_range = beam.particle.table_range(beam_energy)
    if beam_range < 0.0:
        reaction_energy = beam_energy
    elif beam_range - depth <= 0.0:
        stats.n_beam_stopped += 1
        if stats.n_beam_stopped == STOPPED_BEAM_WARNING:
            print(
                f"[warning] {100.0 * stats.n_beam_stopped / stats.n_trials:.1f}% of beam particles "
                "have stopped in the target, the target may be too thick."
            )
        return None
    else:
        reaction_energy = beam.particle.table_energy(beam_range - depth)

    beam_direction = setup.target.angle_straggling(
        direction, beam.particle.a, beam.particle.z, beam_energy, rng
    )

    products = setup.kinematics.fill_vars(reaction_energy, rng)
    if products is None:
        stats.n_below_threshold += 1
        return None
    stats.n_reactions += 1

    # Move the products from the beam frame into the lab frame
    matrix = beam_frame_matrix(beam_direction)
    ejectile_dir = transform(matrix, spherical_to_cartesian(1.0, products.ejectile_theta, products.ejectile_phi))
    recoil_dir = transform(matrix, spherical_to_cartesian(1.0, products.recoil_theta, products.recoil_phi))

    record = EventRecord(
        beam_energy=reaction_energy,
        interaction_point=interaction_point,
        products=products,
    )

    geometric_hit = False
    for index, prim in enumerate(setup.detectors):
        if prim.is_recoil_detector:
            struck, hit = _detect(setup, index, prim, interaction_point, recoil_dir, setup.recoil,
                                  "recoil", products.recoil_energy, rng, stats)
        else:
            struck, hit = _detect(setup, index, prim, interaction_point, ejectile_dir, setup.ejectile,
                                  "ejectile", products.ejectile_energy, rng, stats)
            geometric_hit = geometric_hit or struck
        if hit is not None:
            record.hits.append(hit)

    if geometric_hit:
        stats.n_geometric_hits += 1
    return record


def _is_detected(record: EventRecord, coincidence: bool) -> bool:
    if coincidence:
        particles = {hit.particle for hit in record.hits}
        return "ejectile" in particles and "recoil" in particles
    return record.detected


def run_simulation(
    setup: SimulationSetup,
    n_wanted: int,
    rng: np.random.Generator,
    coincidence: bool = False,
    progress: bool = False,
    max_trials: Optional[int] = None,
) -> Tuple[List[EventRecord], RunStatistics]:
    """Simulate events until ``n_wanted`` of them are detected.

    Parameters
    ----------
    setup : SimulationSetup
        Experiment to simulate.
    n_wanted : int
        Number of detected events to collect.
    rng : numpy.random.Generator
        Source of all random draws.
    coincidence : bool, optional
        Require both an ejectile and a recoil hit for an event to count.
    progress : bool, optional
        Show a tqdm progress bar.
    max_trials : int, optional
        Stop after this many beam particles. Defaults to
        ``n_wanted * config.MAX_TRIALS_PER_DETECTION``.

    Returns
    -------
    tuple
        (detected event records, run statistics)
    """
    if max_trials is None:
        max_trials = n_wanted * config.MAX_TRIALS_PER_DETECTION

    stats = RunStatistics()
    records: List[EventRecord] = []
    with tqdm(total=n_wanted, disable=not progress, desc="Detected", unit="evt") as bar:
        while stats.n_detected < n_wanted and stats.n_trials < max_trials:
            record = simulate_event(setup, rng, stats)
            if record is None or not _is_detected(record, coincidence):
                continue
            stats.n_detected += 1
            records.append(record)
            bar.update(1)

    if stats.n_detected < n_wanted:
        print(
            f"[warning] Stopped after {stats.n_trials:,} beam particles with "
            f"{stats.n_detected}/{n_wanted} detected events."
        )
    if DEBUG:
        print_run_statistics(stats)
    return records, stats


def estimate_geometric_efficiency(
    primitives: Sequence[Primitive],
    n_trials: int,
    rng: np.random.Generator,
    origin: Optional[np.ndarray] = None,
) -> Tuple[int, float]:
    """Fraction of isotropic rays from ``origin`` that strike any detector.

    Returns
    -------
    tuple
        (number of rays which hit, geometric efficiency)
    """
    if n_trials <= 0:
        return 0, 0.0
    origin = vector3() if origin is None else np.asarray(origin, dtype=float)
    n_hits = 0
    for _ in range(n_trials):
        direction = sample_isotropic_direction(rng)
        if any(prim.intersect_primitive(origin, direction) is not None for prim in primitives):
            n_hits += 1
    return n_hits, n_hits / n_trials


def geometric_efficiency_by_angle(
    primitives: Sequence[Primitive],
    n_trials: int,
    rng: np.random.Generator,
    bin_edges_deg: Sequence[float],
    kinematics: Optional[ReactionKinematics] = None,
    beam_energy: Optional[float] = None,
    origin: Optional[np.ndarray] = None,
) -> pd.DataFrame:
    """Geometric efficiency of a detector setup in bins of lab angle.

    Without ``kinematics`` the rays are isotropic in the lab frame. With
    ``kinematics`` and ``beam_energy`` they are isotropic in the
    center-of-mass frame and the ejectile lab angle is used instead.

    Parameters
    ----------
    primitives : sequence of Primitive
        Detectors to test.
    n_trials : int
        Number of rays to generate.
    rng : numpy.random.Generator
        Source of all random draws.
    bin_edges_deg : sequence of float
        Increasing lab-angle bin edges (degrees).
    kinematics : ReactionKinematics, optional
        Reaction used to convert center-of-mass angles to the lab.
    beam_energy : float, optional
        Beam energy for the conversion (MeV).
    origin : np.ndarray, optional
        Ray origin, the lab origin by default.

    Returns
    -------
    pandas.DataFrame
        One row per bin with ``theta_low_deg``, ``theta_high_deg``,
        ``n_rays``, ``n_hits`` and ``efficiency``.
    """
    edges = np.asarray(bin_edges_deg, dtype=float)
    if edges.size < 2 or np.any(np.diff(edges) <= 0.0):
        raise ValueError("Angular bin edges must be increasing with at least two entries")
    if kinematics is not None and (beam_energy is None or beam_energy <= 0.0):
        raise ValueError("A positive beam energy is needed to convert center-of-mass angles")

    origin = vector3() if origin is None else np.asarray(origin, dtype=float)
    n_rays = np.zeros(edges.size - 1, dtype=int)
    n_hits = np.zeros(edges.size - 1, dtype=int)
    for _ in range(max(n_trials, 0)):
        if kinematics is None:
            direction = sample_isotropic_direction(rng)
            _, theta, _ = cartesian_to_spherical(direction)
        else:
            com_angle, phi = unit_sphere_random_angles(rng)
            theta = kinematics.com_to_lab(com_angle, beam_energy)
            if theta is None:
                continue
            direction = spherical_to_cartesian(1.0, theta, phi)

        index = int(np.searchsorted(edges, math.degrees(theta), side="right")) - 1
        if not 0 <= index < n_rays.size:
            continue
        n_rays[index] += 1
        if any(prim.intersect_primitive(origin, direction) is not None for prim in primitives):
            n_hits[index] += 1

    efficiency = np.divide(n_hits, n_rays, out=np.zeros(n_rays.size), where=n_rays > 0)
    return pd.DataFrame({
        "theta_low_deg": edges[:-1],
        "theta_high_deg": edges[1:],
        "n_rays": n_rays,
        "n_hits": n_hits,
        "efficiency": efficiency,
    })


def print_run_statistics(stats: RunStatistics, beam_rate: float = 0.0):
    """Print the counters of a run."""
    if stats.n_trials == 0:
        print("No events simulated.")
        return

    print("\n" + "=" * 60)
    print("SIMULATION STATISTICS")
    print("=" * 60)
    print(f"Beam particles simulated:  {stats.n_trials:,}")
    print(f"Missed the target:         {stats.n_target_missed:,}")
    print(f"Stopped in the target:     {stats.n_beam_stopped:,} "
          f"({100 * stats.n_beam_stopped / stats.n_trials:.2f}%)")
    print(f"Below reaction threshold:  {stats.n_below_threshold:,}")
    print(f"Reactions:                 {stats.n_reactions:,}")
    print(f"Geometric hits:            {stats.n_geometric_hits:,}")
    print(f"Rejected by efficiency:    {stats.n_efficiency_rejected:,}")
    print(f"Detected events:           {stats.n_detected:,}")
    print(f"Geometric efficiency:      {100 * stats.geometric_efficiency:.3f}%")
    print(f"Detection efficiency:      {100 * stats.detection_efficiency:.3f}%")
    if beam_rate > 0.0:
        print(f"Beam time:                 {stats.n_trials / beam_rate:.4g} s")
    print("=" * 60)


def records_to_dataframe(records: Sequence[EventRecord]) -> pd.DataFrame:
    """Flatten event records into one row per detector hit."""
    rows = []
    for event_id, record in enumerate(records):
        for hit in record.hits:
            rows.append({
                "event": event_id,
                "particle": hit.particle,
                "detector": hit.detector_index,
                "face": hit.face,
                "x_m": hit.position[0],
                "y_m": hit.position[1],
                "z_m": hit.position[2],
                "lab_theta_deg": hit.lab_theta,
                "lab_phi_deg": hit.lab_phi,
                "energy_mev": hit.energy,
                "qdc_mev": hit.qdc,
                "tof_ns": hit.tof,
                "hit_x_m": hit.local_coords[0],
                "hit_y_m": hit.local_coords[1],
                "hit_z_m": hit.local_coords[2],
                "beam_energy_mev": record.beam_energy,
                "state": record.products.state,
                "com_angle_deg": math.degrees(record.products.com_angle),
            })
    columns = [
        "event", "particle", "detector", "face", "x_m", "y_m", "z_m",
        "lab_theta_deg", "lab_phi_deg", "energy_mev", "qdc_mev", "tof_ns",
        "hit_x_m", "hit_y_m", "hit_z_m", "beam_energy_mev", "state", "com_angle_deg",
    ]
    return pd.DataFrame(rows, columns=columns)
