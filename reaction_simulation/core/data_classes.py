"""
Data classes for the reaction simulation.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np


@dataclass
class PrimitiveHit:
    """Result of intersecting a ray with a detector primitive.

    Attributes
    ----------
    first_point : np.ndarray
        Global position of the entry point (m).
    second_point : np.ndarray or None
        Global position of the exit point (m), or None when the ray starts
        inside the primitive.
    face1 : int
        Face struck at the entry point (0-5).
    face2 : int
        Face struck at the exit point, -1 if there is none.
    local_coords : np.ndarray
        Entry point in the primitive's local frame (m).
    normal : np.ndarray
        Outward unit normal of the entry face.
    """

    first_point: np.ndarray
    second_point: Optional[np.ndarray]
    face1: int
    face2: int
    local_coords: np.ndarray
    normal: np.ndarray

    @property
    def path_length(self) -> float:
        """Distance between the entry and exit points (m)."""
        if self.second_point is None:
            return 0.0
        return float(np.linalg.norm(self.second_point - self.first_point))


@dataclass
class DetectorSpec:
    """One line of a detector setup file."""

    position: np.ndarray  # m
    theta: float  # rad
    phi: float  # rad
    psi: float  # rad
    type: str = "vandle"
    subtype: str = "medium"
    length: float = 0.0  # m
    width: float = 0.0  # m
    depth: float = 0.0  # m
    material: str = ""


@dataclass
class DetectorHit:
    """A reaction product observed in one detector.

    Attributes
    ----------
    detector_index : int
        Index of the detector in the setup.
    particle : str
        'ejectile' or 'recoil'.
    face : int
        Face through which the particle entered.
    position : np.ndarray
        Global interaction point inside the detector (m).
    local_coords : np.ndarray
        Entry point in the detector frame (m).
    lab_theta : float
        Lab polar angle of the hit position (degrees).
    lab_phi : float
        Lab azimuthal angle of the hit position (degrees).
    energy : float
        Kinetic energy of the particle at the detector (MeV).
    qdc : float
        Light output deposited in the detector (MeVee).
    tof : float
        Time of flight from the reaction point, smeared by the timing
        resolution (ns).
    """

    detector_index: int
    particle: str
    face: int
    position: np.ndarray
    local_coords: np.ndarray
    lab_theta: float
    lab_phi: float
    energy: float
    qdc: float
    tof: float


@dataclass
class ReactionProducts:
    """Kinematics of the two reaction products in the lab frame."""

    state: int
    com_angle: float  # rad
    ejectile_energy: float  # MeV
    ejectile_theta: float  # rad, relative to the beam axis
    ejectile_phi: float  # rad
    recoil_energy: float  # MeV
    recoil_theta: float  # rad
    recoil_phi: float  # rad


@dataclass
class EventRecord:
    """Record of a single simulated reaction.

    Attributes
    ----------
    beam_energy : float
        Beam energy at the interaction point (MeV).
    interaction_point : np.ndarray
        Lab position of the reaction (m).
    products : ReactionProducts
        Sampled reaction kinematics.
    hits : list of DetectorHit
        Detector hits, empty when nothing was detected.
    """

    beam_energy: float
    interaction_point: np.ndarray
    products: ReactionProducts
    hits: List[DetectorHit] = field(default_factory=list)

    @property
    def detected(self) -> bool:
        return len(self.hits) > 0


@dataclass
class RunStatistics:
    """Counters accumulated over a run."""

    n_trials: int = 0
    n_target_missed: int = 0
    n_reactions: int = 0
    n_geometric_hits: int = 0
    n_detected: int = 0
    n_beam_stopped: int = 0
    n_below_threshold: int = 0
    n_efficiency_rejected: int = 0

    @property
    def geometric_efficiency(self) -> float:
        """Fraction of reactions that struck a detector."""
        if self.n_reactions == 0:
            return 0.0
        return self.n_geometric_hits / self.n_reactions

    @property
    def detection_efficiency(self) -> float:
        """Fraction of reactions that produced a detected event."""
        if self.n_reactions == 0:
            return 0.0
        return self.n_detected / self.n_reactions
