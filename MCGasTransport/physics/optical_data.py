"""Photoabsorption cross-sections and ionisation yields."""

from pathlib import Path
from typing import Dict, Tuple, Union

import h5py
import numpy as np

from ..utils.logging import get_logger
from ..utils.validation import ConfigurationError


logger = get_logger('physics.optics')

ArrayLike = Union[float, np.ndarray]


class OpticalDataProvider:
    """Source of photoabsorption cross-sections and ionisation yields."""

    def is_available(self, gas: str) -> bool:
        raise NotImplementedError

    def get_photoabsorption(self, gas: str, energy: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        """Photoabsorption cross-section and ionisation yield of a gas.

        Args:
            gas: Gas name
            energy: Photon energy (or energies) in eV

        Returns:
            Tuple of (cross-section in cm², ionisation yield)
        """
        raise NotImplementedError


class HDF5OpticalData(OpticalDataProvider):
    """Photoabsorption tables stored alongside the electron cross-sections.

    Reads the ``photoabsorption`` subgroup of each gas group. Outside the
    tabulated range the cross-section is zero and the yield takes its edge
    value.

    Attributes:
        database_path: Path to HDF5 database
        tables: Loaded (energy, cross-section, yield) arrays per gas
    """

    def __init__(self, database_path: str):
        self.database_path = Path(database_path)
        self.tables: Dict[str, Tuple[np.ndarray, np.ndarray, np.ndarray]] = {}

        if self.database_path.exists():
            self.load_database()
        else:
            logger.warning(f"Optical database not found: {database_path}")

    def load_database(self) -> None:
        """Load all photoabsorption tables from the HDF5 file."""
        try:
            with h5py.File(self.database_path, 'r') as f:
                for name in f.keys():
                    if 'photoabsorption' not in f[name]:
                        continue
                    group = f[name]['photoabsorption']
                    self.tables[name] = (
                        np.array(group['energy_grid'], dtype=np.float64),
                        np.array(group['cross_section'], dtype=np.float64),
                        np.array(group['ionisation_yield'], dtype=np.float64),
                    )
        except (OSError, KeyError) as e:
            raise ConfigurationError(f"Failed to load optical data: {e}") from e

        logger.debug(f"Photoabsorption data available for: {', '.join(self.tables)}")

    def is_available(self, gas: str) -> bool:
        return gas in self.tables

    def get_photoabsorption(self, gas: str, energy: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        if gas not in self.tables:
            raise ConfigurationError(f"Photoabsorption data for {gas} not available")
        grid, cs, eta = self.tables[gas]
        return (
            np.interp(energy, grid, cs, left=0., right=0.),
            np.interp(energy, grid, eta),
        )
