"""
Three dimensional vector and rotation helpers.

Vectors are plain numpy arrays of shape (3,) and rotation matrices are
(3, 3) arrays whose columns are the local unit axes, so every helper here
works directly on the arrays used throughout the simulation.

+X is beam-right, +Y is vertical and +Z is the beam axis.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np


def vector3(x: float = 0.0, y: float = 0.0, z: float = 0.0) -> np.ndarray:
    """Return a new 3D vector."""
    return np.array([x, y, z], dtype=float)


def normalize(vector: np.ndarray) -> np.ndarray:
    """Return a unit vector parallel to ``vector``."""
    vector = np.asarray(vector, dtype=float)
    norm = np.linalg.norm(vector)
    if norm == 0.0:
        raise ValueError("Cannot normalize a zero-length vector")
    return vector / norm


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Distance between two points in 3D space."""
    return float(np.linalg.norm(np.asarray(b, dtype=float) - np.asarray(a, dtype=float)))


def spherical_to_cartesian(r: float, theta: float, phi: float) -> np.ndarray:
    """Convert spherical coordinates (m, rad, rad) to a cartesian vector."""
    sin_theta = math.sin(theta)
    return np.array([
        r * sin_theta * math.cos(phi),
        r * sin_theta * math.sin(phi),
        r * math.cos(theta),
    ], dtype=float)


def cartesian_to_spherical(vector: np.ndarray) -> Tuple[float, float, float]:
    """Convert a cartesian vector to (r, theta, phi).

    ``phi`` is returned in the range [0, 2π).
    """
    x, y, z = (float(c) for c in vector)
    r = math.sqrt(x * x + y * y + z * z)
    if r == 0.0:
        return 0.0, 0.0, 0.0
    theta = math.acos(max(-1.0, min(1.0, z / r)))
    phi = math.atan2(y, x)
    if phi < 0.0:
        phi += 2.0 * math.pi
    return r, theta, phi


def rotation_from_angles(theta: float, phi: float, psi: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Local unit axes for a pitch-roll-yaw rotation.

    The rotation is by ``theta`` about the y-axis, ``phi`` about the z-axis
    and ``psi`` about the x-axis.

    Returns
    -------
    tuple of np.ndarray
        (unit_x, unit_y, unit_z), the width, length and depth axes.
    """
    sin_theta, cos_theta = math.sin(theta), math.cos(theta)
    sin_phi, cos_phi = math.sin(phi), math.cos(phi)
    sin_psi, cos_psi = math.sin(psi), math.cos(psi)

    unit_x = np.array([cos_theta * cos_phi, cos_theta * sin_phi, -sin_theta])
    unit_y = np.array([
        sin_psi * sin_theta * cos_phi - cos_psi * sin_phi,
        sin_psi * sin_theta * sin_phi + cos_psi * cos_phi,
        cos_theta * sin_psi,
    ])
    unit_z = np.array([
        cos_psi * sin_theta * cos_phi + sin_psi * sin_phi,
        cos_psi * sin_theta * sin_phi - sin_psi * cos_phi,
        cos_theta * cos_psi,
    ])
    return normalize(unit_x), normalize(unit_y), normalize(unit_z)


def rotation_matrix(unit_x: np.ndarray, unit_y: np.ndarray, unit_z: np.ndarray) -> np.ndarray:
    """Build a rotation matrix whose columns are the given local axes."""
    return np.column_stack([unit_x, unit_y, unit_z]).astype(float)


def transform(matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
    """Transform a vector from the local frame into the global frame."""
    return matrix @ np.asarray(vector, dtype=float)


def beam_frame_matrix(direction: np.ndarray) -> np.ndarray:
    """Rotation which maps the +z axis onto ``direction``.

    Used to move reaction products generated around the beam axis into the
    lab frame.
    """
    _, theta, phi = cartesian_to_spherical(normalize(direction))
    sin_t, cos_t = math.sin(theta), math.cos(theta)
    sin_p, cos_p = math.sin(phi), math.cos(phi)
    rot_y = np.array([
        [cos_t, 0.0, sin_t],
        [0.0, 1.0, 0.0],
        [-sin_t, 0.0, cos_t],
    ])
    rot_z = np.array([
        [cos_p, -sin_p, 0.0],
        [sin_p, cos_p, 0.0],
        [0.0, 0.0, 1.0],
    ])
    return rot_z @ rot_y


def build_orthonormal_frame(axis: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Build an orthonormal coordinate frame from a given axis."""
    axis = np.array(axis, dtype=float)
    norm = np.linalg.norm(axis)
    if norm == 0.0:
        raise ValueError("Axis vector must be non-zero")
    axis /= norm
    up = np.array([0.0, 0.0, 1.0])
    if abs(np.dot(axis, up)) > 0.99:
        up = np.array([1.0, 0.0, 0.0])
    u = np.cross(up, axis)
    u /= np.linalg.norm(u)
    v = np.cross(axis, u)
    return axis, u, v
