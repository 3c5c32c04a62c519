"""
Random sampling utilities.

Every function takes an explicit ``numpy.random.Generator`` so that a run
is reproducible from its seed.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from .vectors import build_orthonormal_frame, vector3

# Converts a FWHM to a standard deviation, 1/(2√(2 ln 2))
FWHM_TO_SIGMA = 0.424628450


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create the random generator used for a run."""
    return np.random.default_rng(seed)


def frand(rng: np.random.Generator, low: float = 0.0, high: float = 1.0) -> float:
    """Uniform random number between ``low`` and ``high``."""
    return low + rng.random() * (high - low)


def gauss_fwhm(rng: np.random.Generator, fwhm: float) -> float:
    """Zero-centred Gaussian random number with the given FWHM."""
    if fwhm <= 0.0:
        return 0.0
    return float(rng.normal(0.0, FWHM_TO_SIGMA * fwhm))


def random_circle(rng: np.random.Generator, radius: float, offset: float = 0.0) -> np.ndarray:
    """Point uniformly distributed on a disk of ``radius`` at z = -offset."""
    r = radius * math.sqrt(rng.random())
    t = 2.0 * math.pi * rng.random()
    return vector3(r * math.cos(t), r * math.sin(t), -offset)


def random_gauss(rng: np.random.Generator, fwhm: float, offset: float = 0.0) -> np.ndarray:
    """Point on a Gaussian beam profile of the given FWHM at z = -offset."""
    return vector3(gauss_fwhm(rng, fwhm), gauss_fwhm(rng, fwhm), -offset)


def random_halo(rng: np.random.Generator, radius: float, offset: float = 0.0) -> np.ndarray:
    """Point on the perimeter of a circle of ``radius`` at z = -offset."""
    t = 2.0 * math.pi * rng.random()
    return vector3(radius * math.cos(t), radius * math.sin(t), -offset)


def sample_isotropic_direction(rng: np.random.Generator) -> np.ndarray:
    """Generate a random unit vector isotropically distributed on the sphere."""
    z = 2.0 * rng.random() - 1.0
    phi = 2.0 * math.pi * rng.random()
    r_xy = math.sqrt(max(0.0, 1.0 - z * z))
    return np.array([r_xy * math.cos(phi), r_xy * math.sin(phi), z], dtype=float)


def unit_sphere_random_angles(rng: np.random.Generator) -> Tuple[float, float]:
    """Isotropic (theta, phi) in radians."""
    phi = 2.0 * math.pi * rng.random()
    theta = math.acos(2.0 * rng.random() - 1.0)
    return theta, phi


def sample_direction_in_cone(
    rng: np.random.Generator,
    axis: np.ndarray,
    half_angle_deg: float,
) -> np.ndarray:
    """Sample a unit vector within a cone of half-angle ``half_angle_deg``."""
    axis, u, v = build_orthonormal_frame(axis)
    half_angle_rad = math.radians(half_angle_deg)
    cos_min = math.cos(half_angle_rad)
    cos_theta = (1.0 - cos_min) * rng.random() + cos_min
    sin_theta = math.sqrt(max(0.0, 1.0 - cos_theta * cos_theta))
    phi = 2.0 * math.pi * rng.random()
    local_dir = np.array(
        [
            sin_theta * math.cos(phi),
            sin_theta * math.sin(phi),
            cos_theta,
        ],
        dtype=float,
    )

    return local_dir[0] * u + local_dir[1] * v + local_dir[2] * axis
