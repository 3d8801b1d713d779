"""Physical and numerical constants (eV, cm, ns, K, Torr units)."""

import math

# Fundamental constants
SPEED_OF_LIGHT = 29.9792458  # Speed of light in cm/ns
ELECTRON_MASS = 510998.95  # Electron rest mass energy in eV
ELECTRON_MASS_GRAMME = 9.1093837015e-28  # Electron mass in g
ATOMIC_MASS_UNIT = 1.66053906660e-24  # Atomic mass unit in g
ATOMIC_MASS_UNIT_EV = 931.49410242e6  # Atomic mass unit in eV
ELEMENTARY_CHARGE = 1.602176634e-19  # Elementary charge in C
HBAR_C = 197.3269804e-7  # hbar * c in eV cm
FINE_STRUCTURE_CONSTANT = 1. / 137.035999084  # Dimensionless
BOLTZMANN_CONSTANT = 8.617333262e-5  # Boltzmann constant in eV/K
RYDBERG_ENERGY = 13.605693123  # Rydberg energy in eV
BOHR_RADIUS = 0.529177210903e-8  # Bohr radius in cm
LOSCHMIDT_NUMBER = 2.6867811e19  # Number density at 0 C, 1 atm in cm-3

# Reference conditions
ZERO_CELSIUS = 273.15  # Temperature in K
ATMOSPHERIC_PRESSURE = 760.  # Pressure in Torr
DEFAULT_TEMPERATURE = 293.15  # Room temperature in K

PI2 = math.pi ** 2

# Numerical constants
SMALL = 1e-20  # Floor for energies and probabilities
MIN_RESIDUAL_ENERGY = 1e-4  # Energy left to an electron whose loss exceeds its energy in eV

# Rate table layout
N_ENERGY_STEPS = 20000  # Number of linear energy bins
N_ENERGY_STEPS_LOG = 200  # Number of logarithmic energy bins
N_ENERGY_STEPS_GAMMA = 5000  # Number of photon energy bins
MAX_LEVELS = 512  # Maximum number of collision levels in a mixture
HIGH_ENERGY_THRESHOLD = 1e4  # Boundary between linear and logarithmic binning in eV
RELATIVISTIC_THRESHOLD = 1e3  # Energy above which relativistic velocities are used in eV

# Default energy ranges
DEFAULT_MAX_ELECTRON_ENERGY = 40.  # eV
DEFAULT_MAX_PHOTON_ENERGY = 20.  # eV
RANGE_HEADROOM = 1.05  # Factor applied when the energy range is extended

# Resonance lines
LINE_WINDOW_WIDTHS = 1000.  # Absorption window in units of the Voigt FWHM
MAX_CASCADE_STEPS = 10000  # Maximum number of transitions in one cascade

# Conversion from oscillator strength to transition rate in ns-1 eV-2
OSCILLATOR_TO_RATE = (
    2. * SPEED_OF_LIGHT * FINE_STRUCTURE_CONSTANT / (3. * ELECTRON_MASS * HBAR_C)
)
# Conversion from oscillator strength to integrated cross-section in cm2 eV
OSCILLATOR_TO_CROSS_SECTION = (
    FINE_STRUCTURE_CONSTANT * 2. * PI2 * HBAR_C * HBAR_C / ELECTRON_MASS
)


def number_density(pressure: float, temperature: float) -> float:
    """Number density of an ideal gas in cm-3.

    Args:
        pressure: Pressure in Torr
        temperature: Temperature in K

    Returns:
        Number density in cm-3
    """
    return LOSCHMIDT_NUMBER * (pressure / ATMOSPHERIC_PRESSURE) * (ZERO_CELSIUS / temperature)
