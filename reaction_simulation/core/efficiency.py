"""
Intrinsic detection efficiency of the standard bar sizes.
"""

from __future__ import annotations

import os
from typing import Tuple

import numpy as np


def load_efficiency_file(file_path: str) -> Tuple[np.ndarray, np.ndarray]:
    """
    Load an efficiency table: energy (MeV) and efficiency (0-1) columns.

    Returns
    -------
    tuple of np.ndarray
        (energy, efficiency) sorted by energy.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"Efficiency file '{file_path}' does not exist.")

    data = np.loadtxt(file_path, comments='#', usecols=(0, 1), dtype=float, ndmin=2)
    if data.shape[0] == 0:
        raise ValueError(f"Efficiency file '{file_path}' is empty.")
    if np.any(data[:, 1] < 0.0) or np.any(data[:, 1] > 1.0):
        raise ValueError(f"Efficiency values in '{file_path}' must lie between 0 and 1.")
    order = np.argsort(data[:, 0])
    return data[order, 0], data[order, 1]


class Efficiency:
    """Efficiency tables for small, medium and large bars.

    A bar size without a table is treated as perfectly efficient.
    """

    SIZES = ("small", "medium", "large")

    def __init__(self):
        self._tables = {size: None for size in self.SIZES}

    def _read(self, size: str, file_path: str) -> int:
        try:
            energy, efficiency = load_efficiency_file(file_path)
        except (FileNotFoundError, ValueError) as e:
            print(f"[warning] Failed to load {size} bar efficiency. Error: {e}")
            return 0
        self._tables[size] = (energy, efficiency)
        return len(energy)

    def read_small(self, file_path: str) -> int:
        """Load the small bar table; returns the number of points (0 on failure)."""
        return self._read("small", file_path)

    def read_medium(self, file_path: str) -> int:
        return self._read("medium", file_path)

    def read_large(self, file_path: str) -> int:
        return self._read("large", file_path)

    def is_loaded(self, size: str) -> bool:
        return self._tables.get(size) is not None

    def num_points(self, size: str) -> int:
        table = self._tables.get(size)
        return 0 if table is None else len(table[0])

    def get_efficiency(self, size: str, energy: float) -> float:
        """Interpolated efficiency at ``energy`` (MeV), clamped to the table ends."""
        table = self._tables.get(size)
        if table is None:
            return 1.0
        return float(np.interp(energy, table[0], table[1]))

    def get_small_efficiency(self, energy: float) -> float:
        return self.get_efficiency("small", energy)

    def get_medium_efficiency(self, energy: float) -> float:
        return self.get_efficiency("medium", energy)

    def get_large_efficiency(self, energy: float) -> float:
        return self.get_efficiency("large", energy)

    def for_primitive(self, prim, energy: float) -> float:
        """Efficiency of a detector primitive, 1.0 for non-standard sizes."""
        if prim.small:
            return self.get_small_efficiency(energy)
        if prim.medium:
            return self.get_medium_efficiency(energy)
        if prim.large:
            return self.get_large_efficiency(energy)
        return 1.0
