"""
Energy/range lookup tables.

A RangeTable stores the range of one particle species in one material at a
set of energies, so that energy loss along a path can be evaluated with two
interpolations instead of a numerical integration.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .constants import DEBUG


def _interpolate(x: float, xs: np.ndarray, ys: np.ndarray) -> float:
    """Linear interpolation in a strictly increasing table.

    Values outside the table use the first or last segment and the result
    is clamped at zero.
    """
    index = int(np.searchsorted(xs, x))
    index = min(max(index, 1), len(xs) - 1)
    x0, x1 = xs[index - 1], xs[index]
    y0, y1 = ys[index - 1], ys[index]
    y = y0 + (x - x0) * (y1 - y0) / (x1 - x0)
    return max(float(y), 0.0)


class RangeTable:
    """Monotonic energy (MeV) to range (m) table."""

    def __init__(self):
        self.energy = np.zeros(0)
        self.range = np.zeros(0)
        self.initialized = False
        self._checked: Optional[bool] = None

    @property
    def num_entries(self) -> int:
        return len(self.energy)

    def init(self, num_entries: int) -> bool:
        """Allocate an empty table to be filled with ``set``."""
        if self.initialized or num_entries < 2:
            return False
        self.energy = np.zeros(num_entries)
        self.range = np.zeros(num_entries)
        self.initialized = True
        self._checked = None
        return True

    def init_from_material(
        self,
        num_entries: int,
        start_energy: float,
        stop_energy: float,
        charge: float,
        mass: float,
        material,
    ) -> bool:
        """Fill the table with ranges at evenly spaced energies.

        All entries come from one cumulative integration of 1/S in
        ``material.range_curve``.

        Parameters
        ----------
        num_entries : int
            Number of table points (at least 2).
        start_energy, stop_energy : float
            Energy span of the table (MeV).
        charge : float
            Charge number of the particle.
        mass : float
            Rest mass energy of the particle (MeV/c²).
        material : Material
            Material to integrate the stopping power in. Only used while
            the table is built.

        Returns
        -------
        bool
            False if the table is already initialised, the arguments are
            invalid or the ranges are not strictly increasing.
        """
        if self.initialized or num_entries < 2:
            return False
        if start_energy <= 0.0 or stop_energy <= start_energy:
            return False

        energies = np.linspace(start_energy, stop_energy, num_entries)
        ranges = material.range_curve(energies, charge, mass)
        if not (np.all(np.diff(ranges) > 0.0) and ranges[0] >= 0.0):
            if DEBUG:
                print(f"[debug] Range table for Z={charge}, M={mass} MeV is not monotonic")
            return False

        self.energy = energies
        self.range = ranges
        self.initialized = True
        self._checked = True
        return True

    def set(self, index: int, energy: float, range_m: float) -> bool:
        """Set one table entry by hand."""
        if not self.initialized or not 0 <= index < self.num_entries:
            return False
        self.energy[index] = energy
        self.range[index] = range_m
        self._checked = None
        return True

    def get_entry(self, index: int) -> Optional[Tuple[float, float]]:
        """Return (energy, range) at ``index``, or None if out of bounds."""
        if not self.initialized or not 0 <= index < self.num_entries:
            return None
        return float(self.energy[index]), float(self.range[index])

    @property
    def use_table(self) -> bool:
        """True when the table is filled and strictly increasing."""
        if not self.initialized:
            return False
        if self._checked is None:
            self._checked = bool(
                np.all(np.diff(self.energy) > 0.0) and np.all(np.diff(self.range) > 0.0)
            )
        return self._checked

    def get_range(self, energy: float) -> float:
        """Range (m) of a particle with kinetic ``energy`` (MeV).

        Returns -1 when the table is unusable.
        """
        if not self.use_table:
            return -1.0
        if energy <= 0.0:
            return 0.0
        return _interpolate(energy, self.energy, self.range)

    def get_energy(self, range_m: float) -> float:
        """Kinetic energy (MeV) of a particle with range ``range_m`` (m).

        Returns -1 when the table is unusable.
        """
        if not self.use_table:
            return -1.0
        if range_m <= 0.0:
            return 0.0
        return _interpolate(range_m, self.range, self.energy)

    def get_new_energy(self, energy: float, distance: float) -> Tuple[float, float]:
        """Energy after travelling ``distance`` (m) through the material.

        Returns
        -------
        tuple
            (new_energy, distance_traveled). A particle whose range is
            shorter than ``distance`` stops: (0.0, range). An unusable table
            gives (-1.0, 0.0).
        """
        if not self.use_table:
            return -1.0, 0.0
        if energy <= 0.0:
            return 0.0, 0.0
        if distance <= 0.0:
            return energy, 0.0

        full_range = self.get_range(energy)
        if distance >= full_range:
            return 0.0, full_range
        return self.get_energy(full_range - distance), distance

    def describe(self) -> str:
        lines = [f"RangeTable: {self.num_entries} entries"]
        for e, r in zip(self.energy, self.range):
            lines.append(f"  {e:10.4f} MeV  {r:12.6e} m")
        return "\n".join(lines)
