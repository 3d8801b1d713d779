"""Tests for exporting and reading HDF5 gas databases."""

import numpy as np
import pytest

from MCGasTransport import GasCollisionSession, GasConfig
from MCGasTransport.physics.cross_section_database import (
    CrossSectionRequest,
    HDF5CrossSectionDatabase,
    PhysicsParameters,
)
from MCGasTransport.physics.gas_numbers import get_gas_number
from MCGasTransport.physics.optical_data import HDF5OpticalData
from MCGasTransport.physics_data_preparation import create_model_database
from MCGasTransport.utils.validation import ConfigurationError

from conftest import ModelGasProvider, ModelOpticalData


PARAMETERS = PhysicsParameters(temperature=293.15, pressure=760.)


@pytest.fixture(scope='module')
def database(tmp_path_factory):
    path = tmp_path_factory.mktemp('db') / 'model.h5'
    create_model_database(str(path), ['Ar', 'CH4', 'nC4H10'])
    return path


def test_cross_sections_match_generator(database, generator):
    db = HDF5CrossSectionDatabase(str(database))
    assert sorted(db.list_gases()) == ['Ar', 'CH4', 'nC4H10']
    request = CrossSectionRequest(np.linspace(0.1, 100., 50), PARAMETERS)
    expected = ModelGasProvider(generator).get_cross_sections(get_gas_number('Ar'), request)
    cs = db.get_cross_sections(get_gas_number('Ar'), request)
    assert cs.name == 'Ar'
    assert np.allclose(cs.elastic, expected.elastic)
    assert np.allclose(cs.inelastic, expected.inelastic)
    assert cs.inelastic_descriptions == expected.inelastic_descriptions
    assert cs.ionisation_descriptions == ['IONISATION  ELOSS= 15.7596']
    assert cs.ionisation_potential == pytest.approx(15.7596)
    assert cs.mass_factor == pytest.approx(expected.mass_factor)


def test_missing_gas_in_database(database):
    db = HDF5CrossSectionDatabase(str(database))
    with pytest.raises(ConfigurationError):
        db.get_cross_sections(get_gas_number('Xe'), CrossSectionRequest(np.array([1.]), PARAMETERS))


def test_interpolation_beyond_grid_uses_edge_values(database):
    db = HDF5CrossSectionDatabase(str(database))
    request = CrossSectionRequest(np.array([1e5, 1e7]), PARAMETERS)
    cs = db.get_cross_sections(get_gas_number('CH4'), request)
    grid_end = db.get_cross_sections(get_gas_number('CH4'),
                                     CrossSectionRequest(np.array([1e6]), PARAMETERS))
    assert cs.elastic[1] == pytest.approx(grid_end.elastic[0])


def test_optical_data_match_generator(database, generator):
    optics = HDF5OpticalData(str(database))
    expected = ModelOpticalData(generator)
    assert optics.is_available('nC4H10')
    assert not optics.is_available('CO2')
    energies = np.array([5., 9., 12., 18.])
    cs, eta = optics.get_photoabsorption('CH4', energies)
    cs_ref, eta_ref = expected.get_photoabsorption('CH4', energies)
    assert np.allclose(cs, cs_ref) and np.allclose(eta, eta_ref)
    # Zero cross-section outside the table
    assert optics.get_photoabsorption('CH4', 500.)[0] == 0.
    with pytest.raises(ConfigurationError):
        optics.get_photoabsorption('CO2', 10.)


def test_session_from_database(database, tmp_path):
    config = GasConfig(
        gases={'Ar': 95., 'nC4H10': 5.},
        random_seed=3,
        deexcitation=True,
        cross_section_database_path=str(database),
    )
    path = tmp_path / 'gas.yaml'
    config.to_yaml(str(path))
    session = GasCollisionSession.from_yaml(str(path))
    assert session.get_collision_rate(20.) > 0.
    result = session.sample_electron_collision(20.)
    assert 0 <= result.level < session.number_of_levels
    assert session.use_deexcitation
    assert session.sample_photon_collision(15.).collision_type is not None


def test_physics_data_locations():
    from MCGasTransport.physics_data import (
        get_gas_database_path,
        get_physics_data_dir,
        list_gas_databases,
    )
    assert get_physics_data_dir().is_dir()
    assert all(name.endswith('.h5') for name in list_gas_databases())
    with pytest.raises(FileNotFoundError):
        get_gas_database_path('does_not_exist.h5')
