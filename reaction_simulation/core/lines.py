"""
Two dimensional rays, line segments and regular polygons.

Only the x and y components of the vectors are used; z is carried along
but ignored by the intersection tests.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .vectors import vector3


def solve_line_parameters(
    p1: np.ndarray,
    d1: np.ndarray,
    p2: np.ndarray,
    d2: np.ndarray,
    epsilon: float = 1e-12,
) -> Optional[Tuple[float, float]]:
    """Find where two parametric lines cross in the xy-plane.

    Solves ``p1 + d1*t1 == p2 + d2*t2`` for ``t1`` and ``t2``.

    Returns
    -------
    tuple or None
        (t1, t2), or None if the lines are parallel.
    """
    det = d2[0] * d1[1] - d1[0] * d2[1]
    if abs(det) < epsilon:
        return None
    vx = p2[0] - p1[0]
    vy = p2[1] - p1[1]
    t1 = (d2[0] * vy - d2[1] * vx) / det
    t2 = (d1[0] * vy - d1[1] * vx) / det
    return float(t1), float(t2)


@dataclass
class Ray:
    """Half-infinite line ``pos + t*dir`` with t >= 0."""

    pos: np.ndarray
    dir: np.ndarray

    @classmethod
    def from_points(cls, x1: float, y1: float, x2: float, y2: float) -> "Ray":
        """Ray starting at (x1, y1) and passing through (x2, y2)."""
        start = vector3(x1, y1)
        return cls(start, vector3(x2, y2) - start)

    @classmethod
    def from_line(cls, line: "Line") -> "Ray":
        return cls(line.p1.copy(), line.p2 - line.p1)

    def intersect(self, other) -> Optional[np.ndarray]:
        """Intersection point with another Ray or a Line, or None."""
        if isinstance(other, Line):
            solution = solve_line_parameters(self.pos, self.dir, other.p1, other.dir)
            if solution is None:
                return None
            t1, t2 = solution
            if t1 >= 0.0 and 0.0 <= t2 <= 1.0:
                return self.pos + self.dir * t1
            return None
        solution = solve_line_parameters(self.pos, self.dir, other.pos, other.dir)
        if solution is None:
            return None
        t1, t2 = solution
        if t1 >= 0.0 and t2 >= 0.0:
            return self.pos + self.dir * t1
        return None


@dataclass
class Line:
    """Line segment from ``p1`` to ``p2``, parametrised with 0 <= t <= 1."""

    p1: np.ndarray
    p2: np.ndarray

    @property
    def dir(self) -> np.ndarray:
        return self.p2 - self.p1

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.dir))

    @classmethod
    def from_points(cls, x1: float, y1: float, x2: float, y2: float) -> "Line":
        return cls(vector3(x1, y1), vector3(x2, y2))

    @classmethod
    def from_direction(cls, pos: np.ndarray, direction: np.ndarray, length: float) -> "Line":
        """Segment starting at ``pos`` running ``length`` times ``direction``."""
        start = np.asarray(pos, dtype=float)
        return cls(start.copy(), start + np.asarray(direction, dtype=float) * length)

    @classmethod
    def from_ray(cls, ray: Ray, length: float) -> "Line":
        return cls.from_direction(ray.pos, ray.dir, length)

    def intersect(self, other) -> Optional[np.ndarray]:
        """Intersection point with another Line or a Ray, or None."""
        if isinstance(other, Ray):
            solution = solve_line_parameters(self.p1, self.dir, other.pos, other.dir)
            if solution is None:
                return None
            t1, t2 = solution
            if 0.0 <= t1 <= 1.0 and t2 >= 0.0:
                return self.p1 + self.dir * t1
            return None
        solution = solve_line_parameters(self.p1, self.dir, other.p1, other.dir)
        if solution is None:
            return None
        t1, t2 = solution
        if 0.0 <= t1 <= 1.0 and 0.0 <= t2 <= 1.0:
            return self.p1 + self.dir * t1
        return None


@dataclass
class RegularPolygon:
    """Regular polygon centred on the origin.

    ``radius`` is the radius of the circle inscribed in the polygon; the
    first side is bisected by the +x axis.
    """

    n_sides: int = 0
    radius: float = 0.0
    sector: float = 0.0
    chord_length: float = 0.0
    sides: List[Line] = field(default_factory=list)
    init: bool = False

    def initialize(self, radius: float, n_sides: int) -> bool:
        if self.init or n_sides < 3 or radius <= 0.0:
            return False

        self.n_sides = n_sides
        self.sector = 2.0 * math.pi / n_sides
        self.radius = radius / math.cos(self.sector / 2.0)
        self.chord_length = 2.0 * self.radius * math.sin(self.sector / 2.0)

        theta = -self.sector / 2.0
        self.sides = []
        for _ in range(n_sides):
            start = vector3(self.radius * math.cos(theta), self.radius * math.sin(theta))
            theta += self.sector
            stop = vector3(self.radius * math.cos(theta), self.radius * math.sin(theta))
            self.sides.append(Line(start, stop))

        self.init = True
        return True

    def is_inside(self, x: float, y: float) -> bool:
        """Even-odd test using a ray cast along +x from (x, y)."""
        if not self.init:
            return False
        trace = Ray.from_points(x, y, x + 1.0, y)
        crossings = sum(1 for side in self.sides if side.intersect(trace) is not None)
        return crossings % 2 != 0

    def dump(self) -> List[Tuple[int, float, float, float, float]]:
        """Return (side, p1x, p1y, p2x, p2y) for every side."""
        return [
            (i, float(s.p1[0]), float(s.p1[1]), float(s.p2[0]), float(s.p2[1]))
            for i, s in enumerate(self.sides)
        ]
