"""
Center-of-mass angular distributions of reaction products.
"""

from __future__ import annotations

import math
import os
from typing import Optional, Sequence, Tuple

import numpy as np

from .constants import INVALID_SAMPLE, MILLIBARN_TO_CM2


def load_angular_distribution(file_path: str) -> Tuple[np.ndarray, np.ndarray]:
    """
    Load a differential cross section from a two-column text file.

    The first column is the center-of-mass angle in degrees and the second
    the differential cross section in mb/sr. Lines starting with ``#`` are
    ignored.

    Returns
    -------
    tuple of np.ndarray
        (angles_deg, dsigma_domega)
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"Angular distribution file '{file_path}' does not exist.")

    data = np.loadtxt(file_path, comments='#', usecols=(0, 1), dtype=float, ndmin=2)
    if data.shape[0] < 2:
        raise ValueError(f"Angular distribution file '{file_path}' needs at least two points.")
    return data[:, 0].copy(), data[:, 1].copy()


class AngularDist:
    """Samples center-of-mass angles from a tabulated dσ/dΩ.

    The cumulative integral of dσ/dΩ·sinθ (times 2π) is built once and
    inverted by linear interpolation for every sample.
    """

    def __init__(self):
        self.com_theta = np.zeros(0)  # rad
        self.dsigma_domega = np.zeros(0)  # mb/sr
        self.integral = np.zeros(0)  # mb
        self.reaction_xsection = 0.0  # mb
        self.rate = 0.0  # reactions per second
        self.initialized = False

    @property
    def num_points(self) -> int:
        return len(self.com_theta)

    @property
    def is_isotropic(self) -> bool:
        return self.initialized and self.num_points == 0

    def initialize_from_file(self, file_path: str, beam_intensity: float = 0.0, target=None) -> bool:
        """Load the distribution from a file. Returns False on failure."""
        if self.initialized:
            return False
        try:
            angles, dsigma = load_angular_distribution(file_path)
        except (FileNotFoundError, ValueError) as e:
            print(f"[warning] Failed to load angular distribution. Error: {e}")
            return False
        return self.initialize(angles, dsigma, beam_intensity, target)

    def initialize(
        self,
        angles_deg: Sequence[float],
        dsigma_domega: Sequence[float],
        beam_intensity: float = 0.0,
        target=None,
    ) -> bool:
        """Set up the distribution from arrays.

        Parameters
        ----------
        angles_deg : sequence of float
            Increasing center-of-mass angles (degrees).
        dsigma_domega : sequence of float
            Differential cross section at each angle (mb/sr).
        beam_intensity : float, optional
            Beam intensity (particles/s), used for the reaction rate.
        target : Target, optional
            Target providing ``number_density`` (nuclei/cm²).
        """
        if self.initialized:
            return False
        angles = np.radians(np.asarray(angles_deg, dtype=float))
        dsigma = np.asarray(dsigma_domega, dtype=float)
        if angles.ndim != 1 or len(angles) < 2 or len(angles) != len(dsigma):
            return False
        if np.any(np.diff(angles) <= 0.0) or np.any(dsigma < 0.0):
            return False

        y = dsigma * np.sin(angles)
        segments = 0.5 * np.diff(angles) * (y[1:] + y[:-1]) * 2.0 * math.pi
        self.integral = np.concatenate(([0.0], np.cumsum(segments)))
        self.reaction_xsection = float(self.integral[-1])
        self.com_theta = angles
        self.dsigma_domega = dsigma
        self.rate = self._rate(beam_intensity, target)
        self.initialized = True
        return True

    def initialize_isotropic(self, total_xsection: float) -> bool:
        """Use an isotropic distribution with a total cross section (mb)."""
        if self.initialized or total_xsection <= 0.0:
            return False
        self.reaction_xsection = float(total_xsection)
        self.rate = 0.0
        self.initialized = True
        return True

    def _rate(self, beam_intensity: float, target) -> float:
        if target is None:
            return 0.0
        return self.reaction_xsection * MILLIBARN_TO_CM2 * beam_intensity * target.number_density

    def sample(self, rng: np.random.Generator) -> float:
        """Return a random center-of-mass angle (rad), or -1 on failure."""
        if not self.initialized:
            return INVALID_SAMPLE
        if self.num_points == 0:
            return rng.random() * math.pi
        if self.reaction_xsection <= 0.0:
            return INVALID_SAMPLE

        target = rng.random() * self.reaction_xsection
        index = int(np.searchsorted(self.integral, target, side='left'))
        index = min(max(index, 1), self.num_points - 1)
        low, high = self.integral[index - 1], self.integral[index]
        if high == low:
            return float(self.com_theta[index - 1])
        fraction = (target - low) / (high - low)
        return float(self.com_theta[index - 1] + fraction * (self.com_theta[index] - self.com_theta[index - 1]))

    def describe(self) -> str:
        if not self.initialized:
            return "AngularDist: not initialised"
        mode = "isotropic" if self.num_points == 0 else f"{self.num_points} points"
        return (
            f"AngularDist: {mode}, reaction cross section {self.reaction_xsection:.4g} mb,"
            f" rate {self.rate:.4g} /s"
        )
