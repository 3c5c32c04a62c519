"""
Energy loss of charged particles in compound materials.

The stopping power is the Bethe-Bloch formula scaled by the electron
density of the material, with the shell correction and the Sternheimer
density-effect correction subtracted. Energies are in MeV, masses in
MeV/c², lengths in metres and densities in g/cm³.
"""

from __future__ import annotations

import math
import os
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np

from .. import config
from .constants import (
    AVOGADRO_CONSTANT,
    BETHE_COEFFICIENT,
    DEBUG,
    ELECTRON_RME,
    IONIZATION_POTENTIALS_EV,
    PLASMA_ENERGY_COEFFICIENT,
    PROTON_RME,
    SHELL_A1, SHELL_A2,
    SHELL_B1, SHELL_B2,
    SHELL_C1, SHELL_C2,
    SHELL_MIN_ETA,
)


def ionization_potential(z: int) -> float:
    """Mean excitation energy (eV) of an element.

    Measured values are used up to aluminium and the Bloch approximation
    (10 eV per unit of charge) beyond.
    """
    z = int(round(z))
    if z <= 0:
        raise ValueError(f"Invalid atomic number: {z}")
    if z <= len(IONIZATION_POTENTIALS_EV):
        return IONIZATION_POTENTIALS_EV[z - 1]
    return 10.0 * z


def radiation_length(a: float, z: float) -> float:
    """Radiation length of an element (mg/cm²).

    See Barnett et al., Phys. Rev. D 54 (1996) 1, page 135.
    """
    return 7.164e5 * a / (z * (z + 1.0) * math.log(287.0 / math.sqrt(z)))


def beta_squared(energy: Union[float, np.ndarray], mass: float):
    """β² of a particle with kinetic ``energy`` and rest ``mass`` (MeV)."""
    return 1.0 - (mass / (energy + mass)) ** 2


def valid_composition(
    counts: Sequence[int],
    z_values: Sequence[float],
    a_values: Sequence[float],
) -> bool:
    """True if every element has a positive count, Z >= 1 and A > 0."""
    if not len(counts) == len(z_values) == len(a_values) or len(counts) == 0:
        return False
    return (
        all(c > 0 for c in counts)
        and all(z >= 1.0 for z in z_values)
        and all(a > 0.0 for a in a_values)
    )


def read_material_file(file_path: str) -> Dict[str, object]:
    """Read a line-oriented material definition file.

    Each non-empty line holds one property or one element; text after a
    ``#`` is ignored::

        name        CD2
        density     1.06
        molar_mass  16.04      # optional, computed from the elements otherwise
        element     6 12.011 1  # Z A count-per-molecule
        element     1 2.014 2

    Returns
    -------
    dict
        Keys ``name``, ``density``, ``molar_mass`` (or None), ``use_eloss``,
        ``counts``, ``Z`` and ``A``.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"Material file '{file_path}' does not exist.")

    name = os.path.splitext(os.path.basename(file_path))[0]
    density = None
    molar_mass = None
    use_eloss = True
    counts, z_values, a_values = [], [], []

    with open(file_path, 'r', encoding='utf-8') as f:
        for line_number, raw in enumerate(f, start=1):
            tokens = raw.split('#', 1)[0].split()
            if not tokens:
                continue
            key = tokens[0].lower()
            try:
                if key == 'name' and len(tokens) >= 2:
                    name = tokens[1]
                elif key == 'density' and len(tokens) >= 2:
                    density = float(tokens[1])
                elif key == 'molar_mass' and len(tokens) >= 2:
                    molar_mass = float(tokens[1])
                elif key == 'use_eloss' and len(tokens) >= 2:
                    use_eloss = tokens[1].lower() in ('1', 'true', 'yes')
                elif key == 'element' and len(tokens) >= 4:
                    z_values.append(float(tokens[1]))
                    a_values.append(float(tokens[2]))
                    counts.append(int(tokens[3]))
                else:
                    raise ValueError(f"unrecognised entry '{raw.strip()}'")
            except ValueError as e:
                raise ValueError(f"{file_path}:{line_number}: {e}")

    if density is None or density <= 0.0:
        raise ValueError(f"Material file '{file_path}' must define a positive density.")
    if not counts:
        raise ValueError(f"Material file '{file_path}' does not contain any elements.")
    if not valid_composition(counts, z_values, a_values):
        raise ValueError(f"Material file '{file_path}' contains an unphysical element.")

    return {
        'name': name,
        'density': density,
        'molar_mass': molar_mass,
        'use_eloss': use_eloss,
        'counts': counts,
        'Z': z_values,
        'A': a_values,
    }


class Material:
    """A compound material used for energy loss calculations.

    The material is configured with ``init`` and ``set_elements`` (and
    optionally ``set_density``/``set_molar_mass``), after which the derived
    quantities are read-only.
    """

    def __init__(self, num_elements: Optional[int] = None):
        self.name = ""
        self.num_elements = 0
        self.total_elements = 0
        self.num_per_molecule = np.zeros(0, dtype=int)
        self.element_z = np.zeros(0)
        self.element_a = np.zeros(0)
        self.element_i = np.zeros(0)  # eV
        self.avg_z = 0.0
        self.avg_a = 0.0
        self.density = 0.0  # g/cm³
        self.molar_mass = 0.0  # g/mol
        self.electron_density = 0.0  # m⁻³
        self.rad_length = 0.0  # mg/cm²
        self.ln_ibar = 0.0  # ln of the mean excitation energy in eV
        self.use_eloss = True
        self.initialized = False
        self._elements_set = False
        self._molar_mass_set = False

        if num_elements is not None:
            self.init(num_elements)

    def init(self, num_elements: int) -> bool:
        """Allocate the element arrays. Returns False if already initialised."""
        if self.initialized or num_elements <= 0:
            return False
        self.num_elements = int(num_elements)
        self.num_per_molecule = np.zeros(self.num_elements, dtype=int)
        self.element_z = np.zeros(self.num_elements)
        self.element_a = np.zeros(self.num_elements)
        self.element_i = np.zeros(self.num_elements)
        self.initialized = True
        return True

    def set_use_flag(self, state: bool = True):
        self.use_eloss = bool(state)

    def set_name(self, name: str):
        self.name = name

    def set_density(self, density: float):
        self.density = float(density)
        if self._elements_set:
            self._calculate()

    def set_molar_mass(self, molar_mass: float):
        self.molar_mass = float(molar_mass)
        self._molar_mass_set = True
        if self._elements_set:
            self._calculate()

    def set_elements(
        self,
        counts: Sequence[int],
        z_values: Sequence[float],
        a_values: Sequence[float],
    ) -> bool:
        """Set the composition of one molecule of the material."""
        if not self.initialized:
            return False
        counts = np.asarray(counts, dtype=int)
        z_values = np.asarray(z_values, dtype=float)
        a_values = np.asarray(a_values, dtype=float)
        if len(counts) != self.num_elements or not valid_composition(counts, z_values, a_values):
            return False

        self.num_per_molecule = counts
        self.element_z = z_values
        self.element_a = a_values
        self.element_i = np.array([ionization_potential(z) for z in z_values])
        self._elements_set = True
        self._calculate()
        return True

    def _calculate(self):
        """Derive the average charge, mass and ionization potential."""
        counts = self.num_per_molecule.astype(float)
        self.total_elements = int(counts.sum())
        self.avg_z = float(np.dot(counts, self.element_z) / counts.sum())
        self.avg_a = float(np.dot(counts, self.element_a) / counts.sum())
        if not self._molar_mass_set:
            self.molar_mass = float(np.dot(counts, self.element_a))

        # Bragg additivity, weighted by the electrons each element carries
        electrons = counts * self.element_z
        self.ln_ibar = float(np.dot(electrons, np.log(self.element_i)) / electrons.sum())

        # Electrons per m³
        self.electron_density = (
            self.density * 1.0e6 * AVOGADRO_CONSTANT * electrons.sum() / self.molar_mass
        )

        mass_fractions = counts * self.element_a / np.dot(counts, self.element_a)
        inverse_length = sum(
            w / radiation_length(a, z)
            for w, a, z in zip(mass_fractions, self.element_a, self.element_z)
        )
        self.rad_length = float(1.0 / inverse_length)

    @property
    def mean_excitation_energy(self) -> float:
        """Mean excitation energy Ī (eV)."""
        return math.exp(self.ln_ibar)

    @property
    def z_over_a(self) -> float:
        return float(np.dot(self.num_per_molecule, self.element_z) / np.dot(self.num_per_molecule, self.element_a))

    def is_ready(self) -> bool:
        return self.initialized and self._elements_set and self.density > 0.0

    def _shell(self, eta: np.ndarray) -> np.ndarray:
        """Shell correction term C (to be divided by Z) for a given βγ."""
        eta = np.maximum(eta, SHELL_MIN_ETA)
        ibar = self.mean_excitation_energy
        e2, e4, e6 = eta ** -2, eta ** -4, eta ** -6
        return (
            (SHELL_A1 * e2 + SHELL_B1 * e4 + SHELL_C1 * e6) * ibar ** 2
            + (SHELL_A2 * e2 + SHELL_B2 * e4 + SHELL_C2 * e6) * ibar ** 3
        )

    def _density(self, eta: np.ndarray) -> np.ndarray:
        """Sternheimer density effect correction δ for a given βγ."""
        plasma_energy = PLASMA_ENERGY_COEFFICIENT * math.sqrt(self.density * self.z_over_a)
        c_bar = 2.0 * (self.ln_ibar - math.log(plasma_energy)) + 1.0
        x0, x1 = self._density_parameters(c_bar)
        a = (c_bar - 4.606 * x0) / (x1 - x0) ** 3

        x = np.log10(np.maximum(eta, 1e-12))
        delta = np.where(
            x >= x1,
            4.606 * x - c_bar,
            4.606 * x - c_bar + a * (x1 - x) ** 3,
        )
        return np.where(x < x0, 0.0, delta)

    def _density_parameters(self, c_bar: float):
        """Sternheimer-Peierls x0 and x1 for condensed media and gases."""
        if self.density < 0.01:
            for limit, x0 in ((10.0, 1.6), (10.5, 1.7), (11.0, 1.8), (11.5, 1.9), (12.25, 2.0)):
                if c_bar < limit:
                    return x0, 4.0
            if c_bar < 13.804:
                return 2.0, 5.0
            return 0.326 * c_bar - 2.5, 5.0
        if self.mean_excitation_energy < 100.0:
            x0 = 0.2 if c_bar < 3.681 else 0.326 * c_bar - 1.0
            return x0, 2.0
        x0 = 0.2 if c_bar < 5.215 else 0.326 * c_bar - 1.5
        return x0, 3.0

    def _stop_power_array(self, energies: np.ndarray, charge: float, mass: float) -> np.ndarray:
        """Vectorised stopping power (MeV/m); non-positive results are zeroed."""
        energies = np.asarray(energies, dtype=float)
        b2 = beta_squared(energies, mass)
        gamma2 = 1.0 / (1.0 - b2)
        eta2 = b2 * gamma2
        ratio = ELECTRON_RME / mass
        w_max = 2.0 * ELECTRON_RME * eta2 / (1.0 + 2.0 * ratio * np.sqrt(gamma2) + ratio ** 2)

        ibar_mev = self.mean_excitation_energy * 1.0e-6
        eta = np.sqrt(eta2)
        bracket = (
            0.5 * np.log(2.0 * ELECTRON_RME * eta2 * w_max / ibar_mev ** 2)
            - b2
            - 0.5 * self._density(eta)
            - self._shell(eta) / self.avg_z
        )
        dedx = BETHE_COEFFICIENT * 2.0 * self.electron_density * charge ** 2 / b2 * bracket
        return np.where(dedx > 0.0, dedx, 0.0)

    def stop_power(self, energy: float, charge: float, mass: float) -> float:
        """Stopping power (MeV/m) of a particle in this material.

        Parameters
        ----------
        energy : float
            Kinetic energy (MeV).
        charge : float
            Charge number of the particle.
        mass : float
            Rest mass energy (MeV/c²).

        Returns
        -------
        float
            Energy loss per unit length, or 0 when energy loss is disabled
            or the inputs are unphysical.
        """
        if not self.use_eloss or not self.is_ready():
            return 0.0
        if charge <= 0.0 or energy <= 0.0 or mass <= 0.0:
            return 0.0
        return float(self._stop_power_array(np.array([energy]), charge, mass)[0])

    def _stopping_peak(self, charge: float, mass: float) -> Optional[Tuple[float, float]]:
        """Energy (MeV) and stopping power (MeV/m) at the maximum of S(E).

        Returns None when the stopping power vanishes everywhere.
        """
        floor = config.RANGE_ENERGY_FLOOR_MEV
        upper = max(config.RANGE_PEAK_SEARCH_MEV * mass / PROTON_RME, 10.0 * floor)
        energies = np.geomspace(floor, upper, config.RANGE_PEAK_SEARCH_POINTS)
        dedx = self._stop_power_array(energies, charge, mass)
        index = int(np.argmax(dedx))
        if dedx[index] <= 0.0:
            return None
        return float(energies[index]), float(dedx[index])

    def range_curve(self, energies: Sequence[float], charge: float, mass: float,
                    num_iterations: int = config.RANGE_INTEGRATION_STEPS) -> np.ndarray:
        """Ranges (m) at several kinetic energies from one cumulative integral.

        Below the stopping power maximum the Bethe-Bloch formula is not
        valid, and S is held at its peak value there, so R(E) = E / S_peak.
        Above the peak 1/S is integrated with the midpoint rule on a single
        grid reaching the largest requested energy, which makes the result
        strictly increasing in energy. Energies at or below the integration
        floor have zero range.
        """
        energies = np.asarray(energies, dtype=float)
        ranges = np.zeros(energies.shape)
        if not self.use_eloss or not self.is_ready():
            return ranges
        if charge <= 0.0 or mass <= 0.0 or num_iterations <= 0 or energies.size == 0:
            return ranges
        peak = self._stopping_peak(charge, mass)
        if peak is None:
            return ranges
        e_peak, s_peak = peak

        moving = energies > config.RANGE_ENERGY_FLOOR_MEV
        below = moving & (energies <= e_peak)
        ranges[below] = energies[below] / s_peak

        above = energies > e_peak
        if np.any(above):
            top = float(energies[above].max())
            step = (top - e_peak) / num_iterations
            edges = e_peak + np.arange(num_iterations + 1) * step
            dedx = self._stop_power_array(edges[:-1] + 0.5 * step, charge, mass)
            increments = step / np.maximum(dedx, s_peak * 1.0e-12)
            cumulative = e_peak / s_peak + np.concatenate(([0.0], np.cumsum(increments)))
            ranges[above] = np.interp(energies[above], edges, cumulative)
        return ranges

    def range(self, energy: float, charge: float, mass: float,
              num_iterations: int = config.RANGE_INTEGRATION_STEPS) -> float:
        """Range (m) of a particle with kinetic ``energy`` in this material.

        See ``range_curve`` for the treatment of low energies.
        """
        return float(self.range_curve(np.array([energy]), charge, mass, num_iterations)[0])

    def birks(self, energy: float, charge: float, mass: float,
              l0: float, kb: float, c: float = 0.0,
              num_iterations: int = config.RANGE_INTEGRATION_STEPS) -> float:
        """Scintillation light output from Birks' law.

        dL/dE = L0 / (1 + kB·S + C·S²), integrated over the particle's
        full energy. ``l0`` in 1/MeV, ``kb`` in m/MeV and ``c`` in (m/MeV)².
        """
        floor = config.RANGE_ENERGY_FLOOR_MEV
        if energy <= floor or num_iterations <= 0:
            return 0.0
        step = (energy - floor) / num_iterations
        midpoints = floor + (np.arange(num_iterations) + 0.5) * step
        if self.use_eloss and self.is_ready() and charge > 0.0 and mass > 0.0:
            dedx = self._stop_power_array(midpoints, charge, mass)
        else:
            dedx = np.zeros_like(midpoints)
        return float(np.sum(l0 * step / (1.0 + kb * dedx + c * dedx ** 2)))

    def read_file(self, file_path: str) -> bool:
        """Configure this material from a material file.

        Returns False (leaving the material untouched) if the material is
        already initialised or the file cannot be read.
        """
        if self.initialized:
            return False
        try:
            data = read_material_file(file_path)
        except (FileNotFoundError, ValueError) as e:
            print(f"[warning] Failed to read material file. Error: {e}")
            return False

        self.init(len(data['counts']))
        self.set_name(data['name'])
        self.density = data['density']
        if data['molar_mass'] is not None:
            self.molar_mass = data['molar_mass']
            self._molar_mass_set = True
        self.set_use_flag(data['use_eloss'])
        self.set_elements(data['counts'], data['Z'], data['A'])
        if DEBUG:
            print(f"[debug] {self.describe()}")
        return True

    def describe(self) -> str:
        """Human readable summary of the material."""
        lines = [
            f"Material: {self.name or 'unnamed'}",
            f"  Unique elements:    {self.num_elements}",
            f"  Elements/molecule:  {self.total_elements}",
            f"  Density:            {self.density:.4g} g/cm^3",
            f"  Molar mass:         {self.molar_mass:.4g} g/mol",
            f"  Average Z:          {self.avg_z:.4g}",
            f"  Average A:          {self.avg_a:.4g}",
            f"  Mean excitation:    {self.mean_excitation_energy:.4g} eV" if self._elements_set else "  Mean excitation:    n/a",
            f"  Electron density:   {self.electron_density:.4e} 1/m^3",
            f"  Radiation length:   {self.rad_length:.4g} mg/cm^2",
        ]
        for count, z, a in zip(self.num_per_molecule, self.element_z, self.element_a):
            lines.append(f"  Element: {count} x (Z = {z:g}, A = {a:g})")
        return "\n".join(lines)
