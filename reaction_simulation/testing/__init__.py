"""
Testing subpackage for the reaction simulation.

This subpackage provides tools for testing and debugging the simulation:
- Simple analytic detector setups
- Validation of the energy-loss, geometry and sampling core

Example usage:
    from reaction_simulation.testing import create_bar_wall, run_quick_test

    wall = create_bar_wall(n_bars=8, radius=1.0)
    run_quick_test()
"""

from .simple_setups import (
    bar_spacing_angle,
    create_single_bar,
    create_bar_wall,
    create_recoil_detector,
    print_setup_info,
)

from .validation import (
    make_water,
    validate_range_table,
    validate_core,
    run_quick_test,
)

__all__ = [
    # Simple setups
    "bar_spacing_angle",
    "create_single_bar",
    "create_bar_wall",
    "create_recoil_detector",
    "print_setup_info",
    # Validation
    "make_water",
    "validate_range_table",
    "validate_core",
    "run_quick_test",
]
