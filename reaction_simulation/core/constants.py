"""
Physical constants and simulation flags.
"""

import math

# Physical constants
AVOGADRO_CONSTANT = 6.02214076e23  # mol⁻¹
SPEED_OF_LIGHT = 2.99792458e8  # m/s
MEV_TO_JOULE = 1.602176634e-13  # J/MeV
MILLIBARN_TO_CM2 = 1.0e-27  # 1 mb = 10⁻²⁷ cm²

# Rest mass energies (MeV/c²)
ELECTRON_RME = 0.51099895
PROTON_RME = 938.27208816
NEUTRON_RME = 939.56542052
AMU_TO_MEV = 931.49410242

CLASSICAL_ELECTRON_RADIUS = 2.8179403262e-15  # m

# 2π r_e² m_e c², prefactor of the Bethe-Bloch formula when the electron
# density is expressed in m⁻³ (MeV·m²)
BETHE_COEFFICIENT = 2.0 * math.pi * CLASSICAL_ELECTRON_RADIUS ** 2 * ELECTRON_RME

# Shell correction coefficients (I in eV, η = βγ)
SHELL_A1, SHELL_A2 = 0.422377e-6, 3.858019e-9
SHELL_B1, SHELL_B2 = 0.0304043e-6, -0.1667989e-9
SHELL_C1, SHELL_C2 = -0.00038106e-6, 0.00157955e-9

# Lowest βγ for which the shell correction parametrisation is used
SHELL_MIN_ETA = 0.13

# Measured mean excitation energies (eV) for H through Al
IONIZATION_POTENTIALS_EV = (
    19.2, 41.8, 40.0, 63.7, 76.0, 78.0, 82.0,
    95.0, 115.0, 137.0, 149.0, 156.0, 166.0,
)

# Plasma energy coefficient, ħω_p = 28.816 √(ρ<Z/A>) eV
PLASMA_ENERGY_COEFFICIENT = 28.816

# Sentinel for failed angle samples and missing thickness
INVALID_SAMPLE = -1.0

# Debug flag
DEBUG = False
