"""
Two-body reaction kinematics.

Non-relativistic kinematics for A(b, e)R reactions: the beam ``b`` strikes
a target nucleus ``A`` at rest and produces an ejectile ``e`` and a recoil
``R``, possibly in an excited state. Masses are given in mass units (u);
only their ratios enter the velocities.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .angular_dist import AngularDist
from .data_classes import ReactionProducts


def _lab_angles(v_cm: float, v_rel: float, cos_theta: float, sin_theta: float) -> Tuple[float, float]:
    """Lab speed and polar angle of a particle moving at ``v_rel`` in the CM frame."""
    v_par = v_cm + v_rel * cos_theta
    v_perp = v_rel * sin_theta
    return math.hypot(v_par, v_perp), math.atan2(v_perp, v_par)


class ReactionKinematics:
    """Samples reaction products for a fixed two-body reaction.

    Each recoil state has an excitation energy and, optionally, an angular
    distribution whose total cross section weights how often the state is
    populated.
    """

    def __init__(self):
        self.beam_a = 0.0
        self.target_a = 0.0
        self.recoil_a = 0.0
        self.ejectile_a = 0.0
        self.q_value = 0.0  # MeV, ground state
        self.excitations = np.zeros(0)  # MeV
        self.distributions: List[AngularDist] = []
        self._state_weights: Optional[np.ndarray] = None
        self.initialized = False

    @property
    def num_states(self) -> int:
        return len(self.excitations)

    def initialize(
        self,
        beam_a: float,
        target_a: float,
        recoil_a: float,
        ejectile_a: float,
        q_value: float,
        excitations: Sequence[float] = (0.0,),
    ) -> bool:
        """Set up the reaction. Returns False on invalid masses or double init."""
        if self.initialized:
            return False
        if min(beam_a, target_a, recoil_a, ejectile_a) <= 0.0 or len(excitations) == 0:
            return False
        self.beam_a = float(beam_a)
        self.target_a = float(target_a)
        self.recoil_a = float(recoil_a)
        self.ejectile_a = float(ejectile_a)
        self.q_value = float(q_value)
        self.excitations = np.asarray(excitations, dtype=float)
        self.initialized = True
        return True

    def set_distributions(self, distributions: Sequence[AngularDist]) -> bool:
        """Attach one initialised angular distribution per recoil state."""
        if not self.initialized or len(distributions) != self.num_states:
            return False
        if not all(d.initialized for d in distributions):
            return False
        weights = np.array([d.reaction_xsection for d in distributions], dtype=float)
        self.distributions = list(distributions)
        self._state_weights = weights if weights.sum() > 0.0 else None
        return True

    @property
    def total_xsection(self) -> float:
        """Summed reaction cross section of all states (mb)."""
        return float(sum(d.reaction_xsection for d in self.distributions))

    def sample_state(self, rng: np.random.Generator) -> int:
        """Pick a recoil state, weighted by cross section when available."""
        if self._state_weights is None:
            return int(rng.integers(self.num_states))
        cumulative = np.cumsum(self._state_weights)
        index = int(np.searchsorted(cumulative, rng.random() * cumulative[-1], side='right'))
        return min(index, self.num_states - 1)

    def _velocities(self, beam_energy: float, state: int) -> Optional[Tuple[float, float, float]]:
        """CM velocity and the CM speeds of the ejectile and recoil."""
        total_in = self.beam_a + self.target_a
        e_cm = beam_energy * self.target_a / total_in
        e_cm_final = e_cm + self.q_value - self.excitations[state]
        if e_cm_final <= 0.0:
            return None
        total_out = self.ejectile_a + self.recoil_a
        v_cm = math.sqrt(2.0 * beam_energy / self.beam_a) * self.beam_a / total_in
        v_ejectile = math.sqrt(2.0 * e_cm_final * self.recoil_a / (self.ejectile_a * total_out))
        v_recoil = math.sqrt(2.0 * e_cm_final * self.ejectile_a / (self.recoil_a * total_out))
        return v_cm, v_ejectile, v_recoil

    def fill_vars(self, beam_energy: float, rng: np.random.Generator) -> Optional[ReactionProducts]:
        """Sample one reaction at ``beam_energy`` (MeV).

        Returns None when the state is energetically closed or the angular
        distribution fails to produce an angle. Lab angles are relative to
        the beam direction.
        """
        if not self.initialized or beam_energy <= 0.0:
            return None

        state = self.sample_state(rng)
        velocities = self._velocities(beam_energy, state)
        if velocities is None:
            return None
        v_cm, v_ejectile, v_recoil = velocities

        if self.distributions:
            com_angle = self.distributions[state].sample(rng)
            if com_angle < 0.0:
                return None
        else:
            com_angle = math.acos(2.0 * rng.random() - 1.0)
        phi = 2.0 * math.pi * rng.random()

        cos_t, sin_t = math.cos(com_angle), math.sin(com_angle)
        speed_e, theta_e = _lab_angles(v_cm, v_ejectile, cos_t, sin_t)
        speed_r, theta_r = _lab_angles(v_cm, v_recoil, -cos_t, sin_t)

        return ReactionProducts(
            state=state,
            com_angle=com_angle,
            ejectile_energy=0.5 * self.ejectile_a * speed_e ** 2,
            ejectile_theta=theta_e,
            ejectile_phi=phi,
            recoil_energy=0.5 * self.recoil_a * speed_r ** 2,
            recoil_theta=theta_r,
            recoil_phi=(phi + math.pi) % (2.0 * math.pi),
        )

    def com_to_lab(self, com_angle: float, beam_energy: float, state: int = 0) -> Optional[float]:
        """Lab angle (rad) of the ejectile emitted at ``com_angle`` (rad)."""
        if not self.initialized or not 0 <= state < self.num_states:
            return None
        velocities = self._velocities(beam_energy, state)
        if velocities is None:
            return None
        v_cm, v_ejectile, _ = velocities
        return _lab_angles(v_cm, v_ejectile, math.cos(com_angle), math.sin(com_angle))[1]

    def describe(self) -> str:
        lines = [
            f"Reaction: A={self.target_a:g}(A={self.beam_a:g}, A={self.ejectile_a:g})A={self.recoil_a:g}",
            f"  Q-value: {self.q_value:.4g} MeV",
        ]
        for i, ex in enumerate(self.excitations):
            xs = self.distributions[i].reaction_xsection if self.distributions else float('nan')
            lines.append(f"  State {i}: Ex = {ex:.4g} MeV, sigma = {xs:.4g} mb")
        return "\n".join(lines)
