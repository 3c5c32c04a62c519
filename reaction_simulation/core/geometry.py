"""
Detector geometry: oriented rectangular prisms and ray intersection.

+X is beam-right, +Y is the vertical axis and +Z is the beam axis. In the
local frame of a primitive the width runs along x, the length along y and
the depth along z. Faces are numbered

    0  front   (-z local)
    1  right   (+x local)
    2  back    (+z local)
    3  left    (-x local)
    4  top     (+y local)
    5  bottom  (-y local)
"""

from __future__ import annotations

import math
import os
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .. import config
from .data_classes import DetectorSpec, PrimitiveHit
from .vectors import (
    normalize,
    rotation_from_angles,
    rotation_matrix,
    spherical_to_cartesian,
    transform,
    vector3,
)

# Face opposite each face
OPPOSITE_FACE = (2, 3, 0, 1, 5, 4)

# Detector types which see ejectiles and recoils
EJECTILE_TYPES = ("vandle", "dual", "eject")
RECOIL_TYPES = ("dual", "recoil")

DETECTOR_FILE_COLUMNS = [
    "x", "y", "z", "theta", "phi", "psi",
    "type", "subtype", "length", "width", "depth", "material",
]


def _matches(size: Tuple[float, float, float], length: float, width: float, depth: float) -> bool:
    tol = config.BAR_SIZE_TOLERANCE
    return (
        abs(size[0] - length) <= tol
        and abs(size[1] - width) <= tol
        and abs(size[2] - depth) <= tol
    )


class Primitive:
    """A rectangular prism detector volume.

    Face centres are cached in global coordinates and rebuilt on the next
    query after any change to position, rotation or size.
    """

    def __init__(self):
        self.position = vector3()
        self.theta = 0.0
        self.phi = 0.0
        self.psi = 0.0
        self.unit_x = vector3(1.0, 0.0, 0.0)
        self.unit_y = vector3(0.0, 1.0, 0.0)
        self.unit_z = vector3(0.0, 0.0, 1.0)
        self.rotation = np.eye(3)
        self.length = 1.0
        self.width = 1.0
        self.depth = 1.0
        self.front_face = 0
        self.back_face = 2
        self.small = False
        self.medium = False
        self.large = False
        self.type = "unknown"
        self.subtype = "unknown"
        self.material_name = ""
        self.use_eject = False
        self.use_recoil = False
        self._face_centers = np.zeros((6, 3))
        self._needs_recompute = True

    @classmethod
    def from_spec(cls, spec: DetectorSpec) -> "Primitive":
        """Build a primitive from one detector file entry."""
        prim = cls()
        prim.set_position(spec.position)
        prim.set_rotation(spec.theta, spec.phi, spec.psi)
        if spec.type == "vandle":
            if spec.subtype == "small":
                prim.set_small()
            elif spec.subtype == "medium":
                prim.set_medium()
            elif spec.subtype == "large":
                prim.set_large()
            else:
                print(f"[warning] Unrecognised VANDLE subtype '{spec.subtype}', using explicit size")
                prim.set_size(spec.length, spec.width, spec.depth)
        else:
            prim.set_size(spec.length, spec.width, spec.depth)
        prim.type = spec.type
        prim.subtype = spec.subtype
        prim.material_name = spec.material
        prim.use_eject = spec.type in EJECTILE_TYPES
        prim.use_recoil = spec.type in RECOIL_TYPES
        return prim

    @property
    def needs_recompute(self) -> bool:
        return self._needs_recompute

    @property
    def is_recoil_detector(self) -> bool:
        return self.use_recoil and not self.use_eject

    def _set_face_coords(self):
        """Recompute the global centre of each face."""
        self._face_centers = np.array([
            self.position - self.unit_z * (self.depth / 2.0),
            self.position + self.unit_x * (self.width / 2.0),
            self.position + self.unit_z * (self.depth / 2.0),
            self.position - self.unit_x * (self.width / 2.0),
            self.position + self.unit_y * (self.length / 2.0),
            self.position - self.unit_y * (self.length / 2.0),
        ])
        self._needs_recompute = False

    def get_face_center(self, face: int) -> np.ndarray:
        if self._needs_recompute:
            self._set_face_coords()
        return self._face_centers[face].copy()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_position(self, position: Sequence[float]):
        """Set the centre of the detector (m)."""
        self.position = np.array(position, dtype=float)
        self._needs_recompute = True

    def set_polar_position(self, r: float, theta: float, phi: float):
        """Set the centre of the detector in spherical coordinates (m, rad, rad)."""
        self.position = spherical_to_cartesian(r, theta, phi)
        self._needs_recompute = True

    def set_rotation(self, theta: float, phi: float, psi: float):
        """Rotate the detector using the pitch-roll-yaw convention (rad)."""
        self.theta, self.phi, self.psi = theta, phi, psi
        self.unit_x, self.unit_y, self.unit_z = rotation_from_angles(theta, phi, psi)
        self.rotation = rotation_matrix(self.unit_x, self.unit_y, self.unit_z)
        self._needs_recompute = True

    def set_unit_vectors(self, unit_x: np.ndarray, unit_y: np.ndarray, unit_z: np.ndarray):
        """Set the local axes directly. The rotation angles are not updated."""
        self.unit_x = normalize(unit_x)
        self.unit_y = normalize(unit_y)
        self.unit_z = normalize(unit_z)
        self.rotation = rotation_matrix(self.unit_x, self.unit_y, self.unit_z)
        self._needs_recompute = True

    def set_size(self, length: float, width: float, depth: float):
        """Set the detector size (m); standard bar sizes are recognised."""
        if _matches(config.SMALL_BAR_SIZE, length, width, depth):
            self.set_small()
        elif _matches(config.MEDIUM_BAR_SIZE, length, width, depth):
            self.set_medium()
        elif _matches(config.LARGE_BAR_SIZE, length, width, depth):
            self.set_large()
        else:
            self.length, self.width, self.depth = float(length), float(width), float(depth)
            self.small = self.medium = self.large = False
            self._needs_recompute = True

    def _set_bar(self, size: Tuple[float, float, float]):
        self.length, self.width, self.depth = size
        self.small = self.medium = self.large = False
        self._needs_recompute = True

    def set_small(self):
        self._set_bar(config.SMALL_BAR_SIZE)
        self.small = True

    def set_medium(self):
        self._set_bar(config.MEDIUM_BAR_SIZE)
        self.medium = True

    def set_large(self):
        self._set_bar(config.LARGE_BAR_SIZE)
        self.large = True

    def set_front_face(self, face: int) -> bool:
        """Set the face which looks at the target; the back face is its opposite."""
        if not 0 <= face <= 5:
            return False
        self.front_face = face
        self.back_face = OPPOSITE_FACE[face]
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_unit_vector(self, face: int) -> np.ndarray:
        """Outward unit normal of a face."""
        if face == 0:
            return -self.unit_z
        if face == 1:
            return self.unit_x.copy()
        if face == 2:
            return self.unit_z.copy()
        if face == 3:
            return -self.unit_x
        if face == 4:
            return self.unit_y.copy()
        if face == 5:
            return -self.unit_y
        raise ValueError(f"Invalid face id: {face}")

    def get_local_coords(self, point: np.ndarray) -> np.ndarray:
        """Coordinates of a global point in the detector frame."""
        offset = np.asarray(point, dtype=float) - self.position
        return np.array([
            np.dot(offset, self.unit_x),
            np.dot(offset, self.unit_y),
            np.dot(offset, self.unit_z),
        ])

    def check_bounds(self, face: int, x: float, y: float, z: float) -> bool:
        """Check whether a local point lies within the rectangle of a face.

        Points on an edge count as inside.
        """
        half_w, half_l, half_d = self.width / 2.0, self.length / 2.0, self.depth / 2.0
        if face in (0, 2):
            return -half_w <= x <= half_w and -half_l <= y <= half_l
        if face in (1, 3):
            return -half_d <= z <= half_d and -half_l <= y <= half_l
        if face in (4, 5):
            return -half_w <= x <= half_w and -half_d <= z <= half_d
        return False

    def plane_intersect(
        self,
        origin: np.ndarray,
        direction: np.ndarray,
        face: int,
    ) -> Optional[Tuple[float, np.ndarray]]:
        """Intersect a ray with the infinite plane containing a face.

        Returns
        -------
        tuple or None
            (t, point) with ``point = origin + t*direction``, or None if the
            ray is parallel to the plane or the plane is behind the origin.
        """
        if self._needs_recompute:
            self._set_face_coords()
        unit = self.get_unit_vector(face)
        origin = np.asarray(origin, dtype=float)
        direction = np.asarray(direction, dtype=float)

        denom = float(np.dot(direction, unit))
        if abs(denom) < 1e-12:
            return None
        t = float(np.dot(self._face_centers[face] - origin, unit)) / denom
        if t < 0.0:
            return None
        return t, origin + direction * t

    def _face_hit(self, origin, direction, face: int):
        result = self.plane_intersect(origin, direction, face)
        if result is None:
            return None
        t, point = result
        local = self.get_local_coords(point)
        if not self.check_bounds(face, *local):
            return None
        return t, point, local

    def intersect_primitive(self, origin: np.ndarray, direction: np.ndarray) -> Optional[PrimitiveHit]:
        """Intersect a ray ``origin + t*direction`` (t >= 0) with the prism.

        Parameters
        ----------
        origin : np.ndarray
            Start of the ray in global coordinates (m).
        direction : np.ndarray
            Direction of the ray, need not be normalised.

        Returns
        -------
        PrimitiveHit or None
            Entry and exit points ordered by distance along the ray, or
            None if no face is struck.
        """
        if self._needs_recompute:
            self._set_face_coords()

        hits = []
        for face in range(6):
            hit = self._face_hit(origin, direction, face)
            if hit is not None:
                hits.append((hit[0], face, hit[1], hit[2]))
        if not hits:
            return None

        hits.sort(key=lambda h: h[0])
        _, face1, point1, local1 = hits[0]
        if len(hits) > 1:
            _, face2, point2, _ = hits[-1]
        else:
            face2, point2 = -1, None

        return PrimitiveHit(
            first_point=point1,
            second_point=point2,
            face1=face1,
            face2=face2,
            local_coords=local1,
            normal=self.get_unit_vector(face1),
        )

    def apparent_thickness(
        self,
        origin: np.ndarray,
        direction: np.ndarray,
        face1: int,
        face2: int,
    ) -> Tuple[float, Optional[np.ndarray], Optional[np.ndarray]]:
        """Path length of a ray between two given faces.

        Returns (-1, None, None) if the ray misses either face.
        """
        if not (0 <= face1 <= 5 and 0 <= face2 <= 5):
            return -1.0, None, None
        hit1 = self._face_hit(origin, direction, face1)
        if hit1 is None:
            return -1.0, None, None
        hit2 = self._face_hit(origin, direction, face2)
        if hit2 is None:
            return -1.0, None, None
        return float(np.linalg.norm(hit2[1] - hit1[1])), hit1[1], hit2[1]

    def random_point_inside(self, rng: np.random.Generator) -> np.ndarray:
        """Uniformly distributed global point inside the prism."""
        local = np.array([
            rng.uniform(-self.width / 2.0, self.width / 2.0),
            rng.uniform(-self.length / 2.0, self.length / 2.0),
            rng.uniform(-self.depth / 2.0, self.depth / 2.0),
        ])
        return self.position + transform(self.rotation, local)

    def dump_vertex(self) -> str:
        """Face centres followed by the detector centre, one point per line."""
        if self._needs_recompute:
            self._set_face_coords()
        rows = [*self._face_centers, self.position]
        return "\n".join("\t".join(f"{c:g}" for c in row) for row in rows)

    def dump_det(self) -> str:
        """Entry for a detector setup file."""
        fields = [
            *(f"{c:g}" for c in self.position),
            f"{self.theta:g}", f"{self.phi:g}", f"{self.psi:g}",
            self.type, self.subtype,
            f"{self.length:g}", f"{self.width:g}", f"{self.depth:g}",
        ]
        if self.material_name:
            fields.append(self.material_name)
        return "\t".join(fields)


def read_detector_file(file_path: str) -> List[DetectorSpec]:
    """Read a detector setup file.

    Whitespace-delimited columns
    ``x y z theta phi psi type subtype [length width depth [material]]``
    with positions in m and angles in rad; ``#`` starts a comment.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"Detector file '{file_path}' does not exist.")

    frame = pd.read_csv(
        file_path,
        sep=r"\s+",
        comment="#",
        header=None,
        names=DETECTOR_FILE_COLUMNS,
        dtype={"type": str, "subtype": str, "material": str},
    )
    if frame.empty:
        raise ValueError(f"Detector file '{file_path}' does not define any detectors.")

    numeric = ["x", "y", "z", "theta", "phi", "psi"]
    if frame[numeric].isna().any().any():
        raise ValueError(f"Detector file '{file_path}' has incomplete rows.")

    specs = []
    for row in frame.itertuples(index=False):
        dims = [0.0 if pd.isna(v) else float(v) for v in (row.length, row.width, row.depth)]
        if row.type != "vandle" and min(dims) <= 0.0:
            raise ValueError(f"Detector of type '{row.type}' in '{file_path}' needs a size.")
        specs.append(DetectorSpec(
            position=vector3(row.x, row.y, row.z),
            theta=float(row.theta),
            phi=float(row.phi),
            psi=float(row.psi),
            type=str(row.type),
            subtype=str(row.subtype),
            length=dims[0],
            width=dims[1],
            depth=dims[2],
            material="" if pd.isna(row.material) else str(row.material),
        ))
    return specs


def build_primitives(specs: Sequence[DetectorSpec]) -> List[Primitive]:
    """Create one Primitive per detector spec."""
    return [Primitive.from_spec(spec) for spec in specs]


def detector_angles(prim: Primitive) -> Tuple[float, float]:
    """Lab (theta, phi) of a detector centre in degrees."""
    r = float(np.linalg.norm(prim.position))
    if r == 0.0:
        return 0.0, 0.0
    theta = math.degrees(math.acos(max(-1.0, min(1.0, prim.position[2] / r))))
    phi = math.degrees(math.atan2(prim.position[1], prim.position[0])) % 360.0
    return theta, phi
