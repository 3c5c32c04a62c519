"""
Charged particles with an energy-loss table, and the reaction target.

A Target is not a Particle: it holds the energy-loss profile of the target
nucleus in the target material alongside its own thickness, tilt and
geometry. Both expose the range-table operations of RangeTableProvider.
"""

from __future__ import annotations

import math
from typing import Optional, Protocol, Tuple, runtime_checkable

import numpy as np

from .. import config
from .constants import (
    AMU_TO_MEV,
    AVOGADRO_CONSTANT,
    DEBUG,
    NEUTRON_RME,
    PROTON_RME,
    SPEED_OF_LIGHT,
)
from .geometry import Primitive
from .materials import Material
from .range_table import RangeTable
from .vectors import build_orthonormal_frame, normalize


@runtime_checkable
class RangeTableProvider(Protocol):
    """Anything that can answer energy-loss queries from a range table."""

    def table_range(self, energy: float) -> float: ...

    def table_energy(self, range_m: float) -> float: ...

    def table_new_energy(self, energy: float, distance: float) -> Tuple[float, float]: ...


class Particle:
    """A particle species with its range table in one material.

    Parameters
    ----------
    name : str
        Label used in output.
    z, a : float
        Charge and mass numbers.
    binding_energy_per_nucleon : float, optional
        Subtracted from the summed nucleon masses (MeV).
    """

    def __init__(self, name: str = "unknown", z: float = 0.0, a: float = 0.0,
                 binding_energy_per_nucleon: float = 0.0):
        self.table = RangeTable()
        self.material: Optional[Material] = None
        self.max_energy = 0.0
        self.set_particle(name, z, a, binding_energy_per_nucleon)

    def set_particle(self, name: str, z: float, a: float, binding_energy_per_nucleon: float = 0.0):
        self.name = name
        self.z = float(z)
        self.a = float(a)
        self.set_mass(binding_energy_per_nucleon)

    def set_mass(self, binding_energy_per_nucleon: float = 0.0):
        """Mass from the nucleon masses and the binding energy (MeV/c²)."""
        self.mass = (
            self.z * PROTON_RME
            + (self.a - self.z) * NEUTRON_RME
            - binding_energy_per_nucleon * self.a
        )

    def set_mass_mev(self, mass: float):
        self.mass = float(mass)

    def set_mass_amu(self, mass: float):
        self.mass = float(mass) * AMU_TO_MEV

    @property
    def n(self) -> float:
        return self.a - self.z

    @property
    def mass_amu(self) -> float:
        return self.mass / AMU_TO_MEV

    @property
    def initialized(self) -> bool:
        return self.table.use_table

    def set_material(
        self,
        material: Material,
        max_energy: float,
        num_entries: int = config.DEFAULT_RANGE_TABLE_ENTRIES,
    ) -> bool:
        """Build the range table of this particle in ``material``.

        The table spans from the configured start energy up to
        ``max_energy`` (MeV). Returns False if the table cannot be built.
        """
        if self.table.initialized:
            return False
        ok = self.table.init_from_material(
            num_entries,
            config.RANGE_TABLE_START_ENERGY_MEV,
            max_energy,
            self.z,
            self.mass,
            material,
        )
        if not ok:
            if DEBUG:
                print(f"[debug] Could not build range table for {self.name} in {material.name}")
            return False
        self.material = material
        self.max_energy = float(max_energy)
        return True

    # Relativistic conversions, energies in MeV and velocities in m/s

    def gamma(self, velocity: float) -> float:
        return 1.0 / math.sqrt(1.0 - (velocity / SPEED_OF_LIGHT) ** 2)

    def ke_from_te(self, energy: float) -> float:
        return energy - self.mass

    def te_from_ke(self, energy: float) -> float:
        return energy + self.mass

    def ke_from_velocity(self, velocity: float) -> float:
        return (self.gamma(velocity) - 1.0) * self.mass

    def te_from_velocity(self, velocity: float) -> float:
        return self.gamma(velocity) * self.mass

    def momentum_from_te(self, energy: float) -> float:
        """Momentum (MeV/c) from the total energy."""
        return math.sqrt(energy * energy - self.mass * self.mass)

    def momentum_from_ke(self, energy: float) -> float:
        return self.momentum_from_te(energy + self.mass)

    def momentum_from_velocity(self, velocity: float) -> float:
        return self.gamma(velocity) * self.mass * velocity / SPEED_OF_LIGHT

    def velocity_from_ke(self, energy: float) -> float:
        return SPEED_OF_LIGHT * math.sqrt(1.0 - (1.0 / (1.0 + energy / self.mass)) ** 2)

    def velocity_from_te(self, energy: float) -> float:
        return self.velocity_from_ke(energy - self.mass)

    # Range table queries, -1 when no table is available

    def table_range(self, energy: float) -> float:
        return self.table.get_range(energy)

    def table_energy(self, range_m: float) -> float:
        return self.table.get_energy(range_m)

    def table_new_energy(self, energy: float, distance: float) -> Tuple[float, float]:
        return self.table.get_new_energy(energy, distance)


def straggle_angle(energy: float, z: float, a: float, thickness: float, rad_length: float) -> float:
    """Width (rad) of the multiple-scattering angle distribution.

    Highland's formula with pβc approximated by twice the kinetic energy.
    ``thickness`` and ``rad_length`` share the same unit (mg/cm²).
    """
    if energy <= 0.0 or a <= 0.0 or thickness <= 0.0 or rad_length <= 0.0:
        return 0.0
    ratio = thickness / rad_length
    return (
        13.6 / (math.sqrt(2.0 * energy / a) * math.sqrt(2.0 * energy * a))
        * z * math.sqrt(ratio) * (1.0 + 0.038 * math.log(ratio))
    )


class Target:
    """A tilted foil target.

    Parameters
    ----------
    profile : Particle
        The target nucleus, used for energy-loss queries through the target
        material once ``set_material`` is called on the Target.
    """

    def __init__(self, profile: Optional[Particle] = None):
        self.profile = profile if profile is not None else Particle()
        self.thickness = 0.0  # mg/cm²
        self.z_thickness = 0.0  # mg/cm², along the beam axis
        self.angle = 0.0  # rad
        self.density = 0.0  # g/cm³
        self.rad_length = 0.0  # mg/cm²
        self.number_density = 0.0  # target nuclei per cm²
        self.physical = Primitive()
        self.physical.type = "target"
        self.physical.subtype = "foil"
        self._update_geometry()

    @property
    def material(self) -> Optional[Material]:
        return self.profile.material

    def set_material(
        self,
        material: Material,
        max_energy: float,
        num_entries: int = config.DEFAULT_RANGE_TABLE_ENTRIES,
    ) -> bool:
        """Use ``material`` for the target, building the profile's range table."""
        if not material.is_ready():
            return False
        if not self.profile.set_material(material, max_energy, num_entries):
            return False
        self.density = material.density
        self.rad_length = material.rad_length
        self.physical.material_name = material.name
        self._update_geometry()
        return True

    def set_thickness(self, thickness: float) -> bool:
        """Set the areal thickness (mg/cm²)."""
        if thickness < 0.0:
            return False
        self.thickness = float(thickness)
        self._update_geometry()
        return True

    def set_angle(self, angle: float):
        """Tilt the target about the y-axis (rad)."""
        self.angle = float(angle)
        self.physical.set_rotation(self.angle, 0.0, 0.0)
        self._update_geometry()

    def set_density(self, density: float) -> bool:
        if density <= 0.0:
            return False
        self.density = float(density)
        self._update_geometry()
        return True

    @property
    def real_thickness(self) -> float:
        """Physical thickness (m)."""
        if self.density <= 0.0:
            return 0.0
        return self.thickness / (self.density * 1.0e5)

    @property
    def real_z_thickness(self) -> float:
        """Physical thickness along the beam axis (m)."""
        if self.density <= 0.0:
            return 0.0
        return self.z_thickness / (self.density * 1.0e5)

    def _update_geometry(self):
        cos_angle = math.cos(self.angle)
        self.z_thickness = self.thickness / cos_angle if abs(cos_angle) > 1e-12 else 0.0
        self.physical.set_size(config.TARGET_SIZE_M, config.TARGET_SIZE_M, self.real_thickness)
        self.number_density = self._number_density()

    def _number_density(self) -> float:
        material = self.profile.material
        if material is None or material.molar_mass <= 0.0:
            return 0.0
        molecules = self.thickness * 1.0e-3 * AVOGADRO_CONSTANT / material.molar_mass
        matching = sum(
            int(count)
            for count, z in zip(material.num_per_molecule, material.element_z)
            if int(round(z)) == int(round(self.profile.z))
        )
        return molecules * matching

    def interaction_depth(
        self,
        origin: np.ndarray,
        direction: np.ndarray,
        rng: np.random.Generator,
    ) -> Optional[Tuple[float, np.ndarray, np.ndarray]]:
        """Pick a random reaction point along a beam ray through the target.

        Returns
        -------
        tuple or None
            (depth, surface_point, interaction_point): the distance (m)
            travelled inside the target, the entry point and the reaction
            point. None if the ray misses the target.
        """
        hit = self.physical.intersect_primitive(origin, direction)
        if hit is None or hit.second_point is None:
            return None
        chord = hit.second_point - hit.first_point
        depth = rng.random() * float(np.linalg.norm(chord))
        interaction = hit.first_point + normalize(direction) * depth
        return depth, hit.first_point, interaction

    def angle_straggling(
        self,
        direction: np.ndarray,
        a: float,
        z: float,
        energy: float,
        rng: np.random.Generator,
    ) -> np.ndarray:
        """Deflect a beam direction by multiple scattering in half the target."""
        direction = normalize(direction)
        sigma = straggle_angle(energy, z, a, self.z_thickness / 2.0, self.rad_length)
        if sigma <= 0.0 or not math.isfinite(sigma):
            return direction
        theta = rng.normal(0.0, sigma)
        phi = 2.0 * math.pi * rng.random()
        axis, u, v = build_orthonormal_frame(direction)
        return (
            math.cos(theta) * axis
            + math.sin(theta) * (math.cos(phi) * u + math.sin(phi) * v)
        )

    # Energy loss of the target nucleus in the target material

    def table_range(self, energy: float) -> float:
        return self.profile.table_range(energy)

    def table_energy(self, range_m: float) -> float:
        return self.profile.table_energy(range_m)

    def table_new_energy(self, energy: float, distance: float) -> Tuple[float, float]:
        return self.profile.table_new_energy(energy, distance)

    def describe(self) -> str:
        return (
            f"Target: {self.physical.material_name or 'unset'}, "
            f"{self.thickness:.4g} mg/cm^2 ({self.real_thickness * 1e6:.4g} um), "
            f"angle {math.degrees(self.angle):.3g} deg, "
            f"{self.number_density:.4e} nuclei/cm^2"
        )
