"""Cross-section provider interface and HDF5-backed electron cross-section database."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

import h5py
import numpy as np

from .constants import (
    ATOMIC_MASS_UNIT,
    BOHR_RADIUS,
    BOLTZMANN_CONSTANT,
    ELECTRON_MASS_GRAMME,
    ELEMENTARY_CHARGE,
    RYDBERG_ENERGY,
    ZERO_CELSIUS,
)
from ..utils.logging import get_logger
from ..utils.validation import ConfigurationError


logger = get_logger('physics.database')


@dataclass(frozen=True)
class PhysicsParameters:
    """Physical conditions and constants passed to the cross-section provider.

    Attributes:
        temperature: Gas temperature in K
        pressure: Gas pressure in Torr
        anisotropic: Whether angular distribution parameters are requested
        elementary_charge: Elementary charge in C
        electron_mass: Electron mass in g
        atomic_mass_unit: Atomic mass unit in g
        bohr_radius: Bohr radius in cm
        rydberg_energy: Rydberg energy in eV
    """
    temperature: float
    pressure: float
    anisotropic: bool = True
    elementary_charge: float = ELEMENTARY_CHARGE
    electron_mass: float = ELECTRON_MASS_GRAMME
    atomic_mass_unit: float = ATOMIC_MASS_UNIT
    bohr_radius: float = BOHR_RADIUS
    rydberg_energy: float = RYDBERG_ENERGY

    @property
    def thermal_energy(self) -> float:
        """kT in eV."""
        return BOLTZMANN_CONSTANT * self.temperature

    @property
    def temperature_celsius(self) -> float:
        return self.temperature - ZERO_CELSIUS


@dataclass
class CrossSectionRequest:
    """Energies at which raw cross-sections are requested.

    Attributes:
        energies: Electron energies in eV [N]
        parameters: Physical conditions of the gas
    """
    energies: np.ndarray
    parameters: PhysicsParameters


@dataclass
class GasCrossSections:
    """Raw cross-sections of one gas evaluated on requested energies.

    Cross-sections are in cm². Angular arrays hold the raw shape parameter
    of the scattering model of each term.

    Attributes:
        name: Gas name
        mass_ratio_energy: 2 m_e / M of the gas molecule
        elastic: Elastic cross-section [N]
        elastic_angular: Elastic angular parameter [N]
        elastic_model: Elastic scattering model index
        ionisation: Ionisation cross-sections [N, n_ion]
        ionisation_angular: Ionisation angular parameters [N, n_ion]
        ionisation_thresholds: Ionisation thresholds in eV [n_ion]
        ionisation_model: Ionisation scattering model index
        opal_beaty: Opal-Beaty-Peterson splitting parameters in eV [n_ion]
        ionisation_descriptions: Term descriptions [n_ion]
        attachment: Attachment cross-sections [N, n_att]
        attachment_descriptions: Term descriptions [n_att]
        inelastic: Inelastic cross-sections [N, n_in]
        inelastic_angular: Inelastic angular parameters [N, n_in]
        inelastic_thresholds: Inelastic thresholds in eV [n_in]
        inelastic_models: Scattering model index per inelastic term [n_in]
        inelastic_descriptions: Term descriptions [n_in]
        elastic_description: Description of the elastic term
    """
    name: str
    mass_ratio_energy: float
    elastic: np.ndarray
    elastic_angular: np.ndarray
    elastic_model: int
    ionisation: np.ndarray
    ionisation_angular: np.ndarray
    ionisation_thresholds: np.ndarray
    ionisation_model: int
    opal_beaty: np.ndarray
    ionisation_descriptions: List[str]
    attachment: np.ndarray
    attachment_descriptions: List[str]
    inelastic: np.ndarray
    inelastic_angular: np.ndarray
    inelastic_thresholds: np.ndarray
    inelastic_models: np.ndarray
    inelastic_descriptions: List[str]
    elastic_description: str = 'ELASTIC'

    @property
    def n_energies(self) -> int:
        return len(self.elastic)

    @property
    def mass_factor(self) -> float:
        """Recoil parameter r = 1 + m_e / M."""
        return 1. + 0.5 * self.mass_ratio_energy

    @property
    def ionisation_potential(self) -> float:
        return float(self.ionisation_thresholds[0])

    def validate(self) -> None:
        """Check array shapes against each other.

        Raises:
            ConfigurationError: If the arrays are inconsistent
        """
        n = self.n_energies
        checks = [
            ('elastic_angular', self.elastic_angular.shape == (n,)),
            ('ionisation', self.ionisation.ndim == 2 and self.ionisation.shape[0] == n),
            ('ionisation_angular', self.ionisation_angular.shape == self.ionisation.shape),
            ('ionisation_thresholds', len(self.ionisation_thresholds) == self.ionisation.shape[1]),
            ('opal_beaty', len(self.opal_beaty) == self.ionisation.shape[1]),
            ('attachment', self.attachment.ndim == 2 and self.attachment.shape[0] == n),
            ('inelastic', self.inelastic.ndim == 2 and self.inelastic.shape[0] == n),
            ('inelastic_angular', self.inelastic_angular.shape == self.inelastic.shape),
            ('inelastic_thresholds', len(self.inelastic_thresholds) == self.inelastic.shape[1]),
            ('inelastic_models', len(self.inelastic_models) == self.inelastic.shape[1]),
            ('inelastic_descriptions', len(self.inelastic_descriptions) == self.inelastic.shape[1]),
        ]
        bad = [name for name, ok in checks if not ok]
        if bad:
            raise ConfigurationError(
                f"Inconsistent cross-section arrays for {self.name}: {', '.join(bad)}"
            )
        if self.ionisation.shape[1] == 0:
            raise ConfigurationError(f"No ionisation cross-section for {self.name}")
        if self.attachment.shape[1] == 0:
            raise ConfigurationError(f"No attachment cross-section for {self.name}")




class CrossSectionProvider:
    """Source of raw electron cross-sections per gas.

    Subclasses return the cross-sections of a gas, identified by its
    numeric identifier, evaluated on the requested energies.
    """

    def get_cross_sections(
        self,
        gas_number: int,
        request: CrossSectionRequest
    ) -> GasCrossSections:
        """Evaluate the cross-sections of a gas.

        Args:
            gas_number: Numeric gas identifier
            request: Energies and physical conditions

        Returns:
            GasCrossSections on the requested energies

        Raises:
            ConfigurationError: If the gas is not available
        """
        raise NotImplementedError


def _interpolate_columns(energies: np.ndarray, grid: np.ndarray, table: np.ndarray) -> np.ndarray:
    """Linearly interpolate each column of a table onto new energies."""
    out = np.zeros((len(energies), table.shape[1]))
    for j in range(table.shape[1]):
        out[:, j] = np.interp(energies, grid, table[:, j])
    return out


class HDF5CrossSectionDatabase(CrossSectionProvider):
    """Tabulated electron cross-sections stored in an HDF5 file.

    Each gas is a group named after the gas, holding the numeric gas
    identifier and recoil factor as attributes and the tabulated
    cross-sections on a common energy grid as datasets. Tables are
    linearly interpolated onto the requested energies; outside the grid
    the edge values are used.

    Attributes:
        database_path: Path to HDF5 cross-section database
        gases: Mapping of gas number to group name
        cache: Raw tables loaded per gas number
    """

    def __init__(self, database_path: str):
        """Initialize HDF5CrossSectionDatabase.

        Args:
            database_path: Path to HDF5 cross-section database
        """
        self.database_path = Path(database_path)
        self.gases: Dict[int, str] = {}
        self.cache: Dict[int, dict] = {}

        if self.database_path.exists():
            self.load_database()
        else:
            logger.warning(f"Cross-section database not found: {database_path}")

    def load_database(self) -> None:
        """Index the gases contained in the HDF5 file."""
        logger.info(f"Loading cross-section database from {self.database_path}")

        try:
            with h5py.File(self.database_path, 'r') as f:
                for name in f.keys():
                    group = f[name]
                    if 'number' not in group.attrs:
                        logger.debug(f"Skipping group without gas number: {name}")
                        continue
                    self.gases[int(group.attrs['number'])] = name
        except OSError as e:
            raise ConfigurationError(f"Failed to load cross-section database: {e}") from e

        logger.info(f"Found {len(self.gases)} gases in database")

    def has_gas(self, gas_number: int) -> bool:
        return gas_number in self.gases

    def list_gases(self) -> List[str]:
        """Get list of all gases in database."""
        return list(self.gases.values())

    def _load_tables(self, gas_number: int) -> dict:
        if gas_number in self.cache:
            return self.cache[gas_number]

        if gas_number not in self.gases:
            raise ConfigurationError(
                f"Gas number {gas_number} not found in {self.database_path}"
            )
        name = self.gases[gas_number]

        try:
            with h5py.File(self.database_path, 'r') as f:
                group = f[name]
                tables = {
                    'name': name,
                    'mass_ratio_energy': float(group.attrs['mass_ratio_energy']),
                    'elastic_model': int(group.attrs['elastic_model']),
                    'ionisation_model': int(group.attrs['ionisation_model']),
                    'elastic_description': str(group.attrs.get('elastic_description', 'ELASTIC')),
                    'energy_grid': np.array(group['energy_grid'], dtype=np.float64),
                    'elastic': np.array(group['elastic'], dtype=np.float64),
                    'elastic_angular': np.array(group['elastic_angular'], dtype=np.float64),
                    'ionisation': np.array(group['ionisation'], dtype=np.float64),
                    'ionisation_angular': np.array(group['ionisation_angular'], dtype=np.float64),
                    'ionisation_thresholds': np.array(group['ionisation_thresholds'], dtype=np.float64),
                    'opal_beaty': np.array(group['opal_beaty'], dtype=np.float64),
                    'ionisation_descriptions': list(group['ionisation_descriptions'].asstr()[()]),
                    'attachment': np.array(group['attachment'], dtype=np.float64),
                    'attachment_descriptions': list(group['attachment_descriptions'].asstr()[()]),
                    'inelastic': np.array(group['inelastic'], dtype=np.float64),
                    'inelastic_angular': np.array(group['inelastic_angular'], dtype=np.float64),
                    'inelastic_thresholds': np.array(group['inelastic_thresholds'], dtype=np.float64),
                    'inelastic_models': np.array(group['inelastic_models'], dtype=np.int64),
                    'inelastic_descriptions': list(group['inelastic_descriptions'].asstr()[()]),
                }
        except KeyError as e:
            raise ConfigurationError(f"Missing cross-section data for {name}: {e}") from e

        self.cache[gas_number] = tables
        logger.debug(
            f"Loaded cross-sections for {name}: {len(tables['energy_grid'])} energy points, "
            f"{tables['inelastic'].shape[1]} inelastic terms"
        )
        return tables

    def get_cross_sections(
        self,
        gas_number: int,
        request: CrossSectionRequest
    ) -> GasCrossSections:
        tables = self._load_tables(gas_number)
        grid = tables['energy_grid']
        energies = np.asarray(request.energies, dtype=np.float64)

        if energies.max() > grid[-1]:
            logger.debug(
                f"{tables['name']}: requested energies above {grid[-1]:.3g} eV, "
                "using edge values"
            )

        cs = GasCrossSections(
            name=tables['name'],
            mass_ratio_energy=tables['mass_ratio_energy'],
            elastic=np.interp(energies, grid, tables['elastic']),
            elastic_angular=np.interp(energies, grid, tables['elastic_angular']),
            elastic_model=tables['elastic_model'],
            ionisation=_interpolate_columns(energies, grid, tables['ionisation']),
            ionisation_angular=_interpolate_columns(energies, grid, tables['ionisation_angular']),
            ionisation_thresholds=tables['ionisation_thresholds'].copy(),
            ionisation_model=tables['ionisation_model'],
            opal_beaty=tables['opal_beaty'].copy(),
            ionisation_descriptions=list(tables['ionisation_descriptions']),
            attachment=_interpolate_columns(energies, grid, tables['attachment']),
            attachment_descriptions=list(tables['attachment_descriptions']),
            inelastic=_interpolate_columns(energies, grid, tables['inelastic']),
            inelastic_angular=_interpolate_columns(energies, grid, tables['inelastic_angular']),
            inelastic_thresholds=tables['inelastic_thresholds'].copy(),
            inelastic_models=tables['inelastic_models'].copy(),
            inelastic_descriptions=list(tables['inelastic_descriptions']),
            elastic_description=tables['elastic_description'],
        )
        cs.validate()
        return cs

    def clear_cache(self) -> None:
        """Clear cached cross-section tables."""
        self.cache.clear()
        logger.debug("Cross-section cache cleared")
