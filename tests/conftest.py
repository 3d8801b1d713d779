"""Shared fixtures: in-memory model-gas providers and sessions."""

from typing import Iterable, Optional

import numpy as np
import pytest

from MCGasTransport import GasCollisionSession, GasConfig
from MCGasTransport.physics.cross_section_database import (
    CrossSectionProvider,
    CrossSectionRequest,
    GasCrossSections,
)
from MCGasTransport.physics.optical_data import OpticalDataProvider
from MCGasTransport.physics_data_preparation import GasDatabaseGenerator
from MCGasTransport.utils.validation import ConfigurationError


def _columns(energies: np.ndarray, grid: np.ndarray, table: np.ndarray) -> np.ndarray:
    out = np.empty((len(energies), table.shape[1]))
    for j in range(table.shape[1]):
        out[:, j] = np.interp(energies, grid, table[:, j])
    return out


class ModelGasProvider(CrossSectionProvider):
    """Cross-section provider backed by generator definitions kept in memory."""

    def __init__(self, generator: GasDatabaseGenerator):
        self.generator = generator
        self.by_number = {
            data['number']: name for name, data in generator.gases.items() if 'elastic' in data
        }
        self.calls = 0

    def get_cross_sections(self, gas_number: int, request: CrossSectionRequest) -> GasCrossSections:
        if gas_number not in self.by_number:
            raise ConfigurationError(f"Gas number {gas_number} not available")
        self.calls += 1
        name = self.by_number[gas_number]
        data = self.generator.gases[name]
        grid = data['energy_grid']
        e = np.asarray(request.energies, dtype=np.float64)
        return GasCrossSections(
            name=name,
            mass_ratio_energy=data['mass_ratio_energy'],
            elastic=np.interp(e, grid, data['elastic']),
            elastic_angular=np.interp(e, grid, data['elastic_angular']),
            elastic_model=data['elastic_model'],
            ionisation=_columns(e, grid, data['ionisation']),
            ionisation_angular=_columns(e, grid, data['ionisation_angular']),
            ionisation_thresholds=data['ionisation_thresholds'].copy(),
            ionisation_model=data['ionisation_model'],
            opal_beaty=data['opal_beaty'].copy(),
            ionisation_descriptions=list(data['ionisation_descriptions']),
            attachment=_columns(e, grid, data['attachment']),
            attachment_descriptions=list(data['attachment_descriptions']),
            inelastic=_columns(e, grid, data['inelastic']),
            inelastic_angular=_columns(e, grid, data['inelastic_angular']),
            inelastic_thresholds=data['inelastic_thresholds'].copy(),
            inelastic_models=data['inelastic_models'].copy(),
            inelastic_descriptions=list(data['inelastic_descriptions']),
        )


class ModelOpticalData(OpticalDataProvider):
    """Photoabsorption data backed by generator definitions kept in memory."""

    def __init__(self, generator: GasDatabaseGenerator):
        self.tables = {
            name: data['photoabsorption']
            for name, data in generator.gases.items() if 'photoabsorption' in data
        }

    def is_available(self, gas: str) -> bool:
        return gas in self.tables

    def get_photoabsorption(self, gas, energy):
        if gas not in self.tables:
            raise ConfigurationError(f"Photoabsorption data for {gas} not available")
        table = self.tables[gas]
        return (
            np.interp(energy, table['energy_grid'], table['cross_section'], left=0., right=0.),
            np.interp(energy, table['energy_grid'], table['ionisation_yield']),
        )


def make_generator(gases: Iterable[str] = ('Ar', 'CH4', 'CO2', 'nC4H10')) -> GasDatabaseGenerator:
    generator = GasDatabaseGenerator()
    for name in gases:
        generator.define_model_gas(name)
    return generator


def make_session(
    gases=None,
    generator: Optional[GasDatabaseGenerator] = None,
    **kwargs
) -> GasCollisionSession:
    generator = generator or make_generator()
    config = GasConfig(gases=gases or {'Ar': 90., 'CH4': 10.}, **kwargs)
    return GasCollisionSession(
        config,
        provider=ModelGasProvider(generator),
        optical=ModelOpticalData(generator),
    )


@pytest.fixture(scope='session')
def generator():
    """Model gases Ar, CH4, CO2 and nC4H10."""
    return make_generator()


@pytest.fixture
def provider(generator):
    return ModelGasProvider(generator)


@pytest.fixture
def optical(generator):
    return ModelOpticalData(generator)


@pytest.fixture
def ar_ch4_session(generator):
    """Ar/CH4 90/10 at 293.15 K and 760 Torr, up to 40 eV, seeded."""
    return make_session(generator=generator, random_seed=1234)


@pytest.fixture
def ar_ch4_deexcitation_session(generator):
    """Ar/CH4 90/10 with de-excitation enabled, seeded."""
    return make_session(generator=generator, random_seed=1234, deexcitation=True)


class FixedRandom:
    """Random source returning a fixed sequence of uniform numbers."""

    def __init__(self, *values: float):
        self.values = list(values) or [0.5]
        self.position = 0

    def uniform(self) -> float:
        value = self.values[self.position % len(self.values)]
        self.position += 1
        return value

    def uniform_pos(self) -> float:
        return self.uniform() or 0.5

    def voigt(self, mu, sigma, gamma) -> float:
        return mu
