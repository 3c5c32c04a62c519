"""
Simulation results visualization.

This module provides figures for reaction simulation results: detected
particle kinematics, detector hit maps and sampled angular distributions.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt

from .. import config
from ..core.angular_dist import AngularDist
from ..core.data_classes import EventRecord
from ..core.simulation import records_to_dataframe


def _finish(fig, save_path: Optional[str], show: bool, dpi: int = config.PLOT_DPI):
    fig.tight_layout()
    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, dpi=dpi, bbox_inches='tight')
        print(f"[info] Saved figure to {save_path}")
    if show:
        plt.show()
    else:
        plt.close(fig)


def plot_run_summary(
    records: List[EventRecord],
    save_path: Optional[str] = None,
    show: bool = False,
):
    """Create an overview of the detected hits of a run.

    Parameters
    ----------
    records : List[EventRecord]
        Detected events returned by ``run_simulation``.
    save_path : str, optional
        File to save the figure to.
    show : bool
        Whether to open an interactive window.
    """
    frame = records_to_dataframe(records)
    if frame.empty:
        print("[warning] No detector hits to visualize.")
        return

    bins = config.HISTOGRAM_BINS
    fig, axes = plt.subplots(2, 2, figsize=config.RUN_SUMMARY_FIGSIZE)

    # 1. Energy vs lab angle (kinematic curves)
    ax1 = axes[0, 0]
    for particle, color in (("ejectile", "blue"), ("recoil", "red")):
        sub = frame[frame["particle"] == particle]
        if not sub.empty:
            ax1.scatter(sub["lab_theta_deg"], sub["energy_mev"], s=4, alpha=0.5,
                        color=color, label=particle.capitalize())
    ax1.set_xlabel('Lab Angle (deg)')
    ax1.set_ylabel('Energy (MeV)')
    ax1.set_title('Energy vs Lab Angle')
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    # 2. Time of flight
    ax2 = axes[0, 1]
    ax2.hist(frame["tof_ns"], bins=bins, color='purple', alpha=0.7)
    ax2.axvline(frame["tof_ns"].mean(), color='red', linestyle='--', linewidth=2,
                label=f'Mean: {frame["tof_ns"].mean():.2f} ns')
    ax2.set_xlabel('Time of Flight (ns)')
    ax2.set_ylabel('Count')
    ax2.set_title('TOF Distribution')
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    # 3. Light output
    ax3 = axes[1, 0]
    ax3.hist(frame["qdc_mev"], bins=bins, color='teal', alpha=0.7)
    ax3.set_xlabel('Light Output (MeVee)')
    ax3.set_ylabel('Count')
    ax3.set_title('QDC Distribution')
    ax3.grid(True, alpha=0.3)

    # 4. Hit map in lab angles
    ax4 = axes[1, 1]
    phi = frame["lab_phi_deg"].to_numpy()
    phi = np.where(phi > 180.0, phi - 360.0, phi)
    h = ax4.hist2d(frame["lab_theta_deg"], phi, bins=[bins // 2, bins // 2], cmin=1)
    fig.colorbar(h[3], ax=ax4, label='Count')
    ax4.set_xlabel('Lab Theta (deg)')
    ax4.set_ylabel('Lab Phi (deg)')
    ax4.set_title('Hit Map')

    _finish(fig, save_path, show)


def plot_angular_distribution(
    dist: AngularDist,
    samples: Sequence[float],
    save_path: Optional[str] = None,
    show: bool = False,
):
    """Compare sampled center-of-mass angles with the tabulated distribution.

    The histogram of ``samples`` (rad) is normalised to the reaction cross
    section so that it overlays 2π·dσ/dΩ·sinθ.
    """
    samples = np.degrees(np.asarray(samples, dtype=float))
    samples = samples[samples >= 0.0]
    if samples.size == 0:
        print("[warning] No angles to visualize.")
        return

    fig, ax = plt.subplots(figsize=(8, 6))
    counts, edges = np.histogram(samples, bins=config.HISTOGRAM_BINS, range=(0.0, 180.0))
    width = math.radians(edges[1] - edges[0])
    density = counts / (counts.sum() * width) * dist.reaction_xsection
    ax.step(edges[:-1], density, where='post', color='blue', label='Sampled')

    if dist.num_points > 0:
        curve = 2.0 * math.pi * dist.dsigma_domega * np.sin(dist.com_theta)
        ax.plot(np.degrees(dist.com_theta), curve, color='red', linewidth=2, label='Input')

    ax.set_xlabel('CoM Angle (deg)')
    ax.set_ylabel('dσ/dθ (mb/rad)')
    ax.set_title(f'Angular Distribution (σ = {dist.reaction_xsection:.3g} mb)')
    ax.legend()
    ax.grid(True, alpha=0.3)

    _finish(fig, save_path, show, dpi=config.QUICK_PLOT_DPI)
