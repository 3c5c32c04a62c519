"""
Plotting subpackage for reaction simulation results.

Example usage:
    from reaction_simulation.plotting import plot_run_summary

    records, stats = run_simulation(setup, 1000, rng)
    plot_run_summary(records, save_path='Figures/run_summary.png')
"""

from .results import (
    plot_run_summary,
    plot_angular_distribution,
)

__all__ = [
    "plot_run_summary",
    "plot_angular_distribution",
]
