"""
Validation utilities for the energy-loss and geometry components.

This module provides functions to check that the numerical core behaves
sensibly before running full simulations.
"""

from __future__ import annotations

import math
from typing import List, Tuple

import numpy as np

from ..core.angular_dist import AngularDist
from ..core.constants import PROTON_RME
from ..core.materials import Material
from ..core.range_table import RangeTable
from ..core.sampling import make_rng
from .simple_setups import create_single_bar


def make_water() -> Material:
    """Liquid water, used as a reference material."""
    water = Material(2)
    water.set_name("water")
    water.set_density(1.0)
    water.set_elements([2, 1], [1, 8], [1.008, 15.999])
    return water


def validate_range_table(table: RangeTable, name: str = "Range table") -> Tuple[bool, str]:
    """Check a range table for monotonicity and interpolation round trips.

    Returns
    -------
    valid : bool
        True if the table is usable.
    message : str
        Description of validation result.
    """
    if not table.use_table:
        return False, f"{name}: table is not usable"

    energies = np.linspace(table.energy[0], table.energy[-1], 25)
    errors = [abs(table.get_energy(table.get_range(e)) - e) / e for e in energies]
    worst = max(errors)
    if worst > 1e-6:
        return False, f"{name}: round trip error {worst:.2e}"
    return True, f"{name}: Valid ({table.num_entries} entries, round trip error {worst:.1e})"


def validate_core() -> Tuple[bool, List[Tuple[str, bool, str]]]:
    """Run the built-in checks.

    Returns
    -------
    success : bool
        True if all checks pass.
    results : list
        (name, passed, message) per check.
    """
    results = []

    water = make_water()
    sp_low = water.stop_power(10.0, 1, PROTON_RME)
    sp_high = water.stop_power(100.0, 1, PROTON_RME)
    results.append((
        "Stopping power",
        0.0 < sp_high < sp_low,
        f"S(10 MeV) = {sp_low:.4g} MeV/m, S(100 MeV) = {sp_high:.4g} MeV/m",
    ))

    table = RangeTable()
    built = table.init_from_material(100, 0.1, 20.0, 1, PROTON_RME, water)
    valid, msg = validate_range_table(table, "Proton in water")
    results.append(("Range table", built and valid, msg))

    bar = create_single_bar(radius=1.0, subtype="medium")
    hit = bar.intersect_primitive(np.zeros(3), np.array([0.0, 0.0, 1.0]))
    ok = hit is not None and hit.face1 == 0 and hit.face2 == 2 and abs(hit.path_length - bar.depth) < 1e-12
    results.append(("Bar intersection", ok, "faces 0 -> 2" if ok else "unexpected hit"))

    dist = AngularDist()
    angles = np.linspace(0.0, 180.0, 181)
    dist.initialize(angles, np.ones_like(angles))
    rng = make_rng(1)
    mean = float(np.mean([dist.sample(rng) for _ in range(5000)]))
    results.append((
        "Angular sampling",
        abs(mean - math.pi / 2.0) < 0.05,
        f"mean theta = {mean:.4f} rad",
    ))

    return all(r[1] for r in results), results


def run_quick_test(verbose: bool = True) -> bool:
    """Run a quick validation test and print results.

    Example
    -------
    >>> from reaction_simulation.testing import run_quick_test
    >>> success = run_quick_test()
    """
    success, results = validate_core()

    if verbose:
        print("=" * 70)
        print("CORE VALIDATION")
        print("=" * 70)
        for test_name, passed, message in results:
            status = "✓" if passed else "✗"
            print(f"{status} {test_name}: {message}")
        print()
        print("=" * 70)
        if success:
            print("ALL TESTS PASSED ✓")
        else:
            print("SOME TESTS FAILED ✗")
        print("=" * 70)

    return success
