"""Tests for GasCollisionSession: configuration, rebuilds and sampling."""

import numpy as np
import pytest

from MCGasTransport import GasCollisionSession, GasConfig
from MCGasTransport.core.data_models import (
    GROUND_STATE,
    CollisionType,
    PhotonCollisionType,
    ProductType,
    SplittingFunction,
)
from MCGasTransport.utils.validation import (
    ConfigurationError,
    ConsistencyError,
    InvalidEnergyError,
)

from conftest import make_session


CH4_IONISATION_POTENTIAL = 12.65


def _levels_of(session, collision_type):
    return [i for i in range(session.number_of_levels)
            if session.get_level(i).collision_type == collision_type]


def test_argon_methane_collisions(ar_ch4_session):
    session = ar_ch4_session
    n = 2000
    rng = np.random.default_rng(5)
    for _ in range(n):
        energy = float(rng.uniform(0.01, 40.))
        result = session.sample_electron_collision(energy)
        assert 0 <= result.level < session.number_of_levels
        assert 0. < result.energy <= energy
        assert result.collision_type == session.get_level(result.level).collision_type
        assert np.linalg.norm(result.direction) == pytest.approx(1.)
        if result.collision_type == CollisionType.IONISATION:
            electron, ion = result.secondaries
            assert electron.product_type == ProductType.ELECTRON
            assert ion.product_type == ProductType.ION
            assert result.energy + electron.energy <= energy - 0.999 * CH4_IONISATION_POTENTIAL
        else:
            assert result.secondaries == []
    assert session.get_number_of_electron_collisions() == n
    by_type = session.get_number_of_electron_collisions_by_type()
    assert sum(by_type.values()) == n
    assert by_type[CollisionType.ELASTIC] > 0
    assert sum(session.get_number_of_electron_collisions_by_level(i)
               for i in range(session.number_of_levels)) == n


def test_deexcitation_maps_argon_levels(ar_ch4_deexcitation_session):
    session = ar_ch4_deexcitation_session
    session.initialise()
    assert session.use_deexcitation
    mapped = [i for i in range(session.number_of_levels)
              if session.get_level(i).deexcitation is not None]
    assert mapped
    assert all(session.get_level(i).gas_name == 'Ar' for i in mapped)
    for _ in range(500):
        result = session.sample_electron_collision(30.)
        for product in result.products:
            assert product.energy > 0.
            assert product.product_type in (ProductType.PHOTON, ProductType.ELECTRON)


def test_initialise_is_idempotent(ar_ch4_session):
    session = ar_ch4_session
    session.initialise()
    tables = session.tables
    calls = session.provider.calls
    assert not session.is_changed
    session.initialise()
    session.get_collision_rate(10.)
    assert session.tables is tables
    assert session.provider.calls == calls


def test_configuration_changes_trigger_rebuild(ar_ch4_session):
    session = ar_ch4_session
    rate = session.get_collision_rate(10.)
    session.set_pressure(2. * 760.)
    assert session.is_changed
    assert session.get_collision_rate(10.) == pytest.approx(2. * rate)
    session.set_temperature(2. * 293.15)
    assert session.get_collision_rate(10.) == pytest.approx(rate)


def test_seed_reproducibility(generator):
    a = make_session(generator=generator, random_seed=77)
    b = make_session(generator=generator, random_seed=77)
    for energy in np.linspace(1., 39., 50):
        ra = a.sample_electron_collision(float(energy))
        rb = b.sample_electron_collision(float(energy))
        assert (ra.level, ra.energy, ra.direction) == (rb.level, rb.energy, rb.direction)

    a.set_random_seed(3)
    b.set_random_seed(3)
    assert a.sample_electron_collision(20.).energy == b.sample_electron_collision(20.).energy


def test_penning_transfer_with_unit_probability(generator):
    session = make_session(generator=generator, random_seed=21, penning_probability=1.)
    assert session.use_penning
    n_penning = 0
    for _ in range(3000):
        result = session.sample_electron_collision(30.)
        level = session.get_level(result.level)
        if (result.collision_type == CollisionType.EXCITATION and
                level.threshold > CH4_IONISATION_POTENTIAL):
            assert len(result.products) == 1
            electron = result.products[0]
            assert electron.product_type == ProductType.ELECTRON
            assert electron.energy == pytest.approx(level.threshold - CH4_IONISATION_POTENTIAL)
            assert electron.spread == 0.
            n_penning += 1
        else:
            assert result.products == []
    assert n_penning > 0
    assert session.get_number_of_penning_transfers() == n_penning


def test_penning_distance_spreads_electrons(generator):
    session = make_session(generator=generator, random_seed=8, penning_probability=1.,
                           penning_distance=1e-4)
    spreads = []
    for _ in range(2000):
        spreads += [p.spread for p in session.sample_electron_collision(30.).products]
    assert spreads
    assert all(0. <= s <= 1e-4 for s in spreads)


def test_per_gas_penning_parameters(generator):
    session = make_session({'Ar': 90., 'CO2': 10.}, generator=generator)
    session.initialise()
    session.enable_penning_transfer(0.5, 1e-4)
    session.enable_penning_transfer(0.2, 0., 'CO2')
    ar_exc = [i for i in _levels_of(session, CollisionType.EXCITATION)
              if session.get_level(i).gas_name == 'Ar']
    co2_exc = [i for i in _levels_of(session, CollisionType.EXCITATION)
               if session.get_level(i).gas_name == 'CO2']
    assert all(session.get_level(i).penning_probability == 0.5 for i in ar_exc)
    assert all(session.get_level(i).penning_distance == 1e-4 for i in ar_exc)
    assert all(session.get_level(i).penning_probability == 0.2 for i in co2_exc)
    for i in _levels_of(session, CollisionType.ELASTIC):
        assert session.get_level(i).penning_probability == 0.

    session.disable_penning_transfer('Ar')
    assert session.use_penning
    assert all(session.get_level(i).penning_probability == 0. for i in ar_exc)
    session.disable_penning_transfer('CO2')
    assert not session.use_penning
    assert all(session.get_level(i).penning_probability == 0. for i in co2_exc)

    with pytest.raises(ConfigurationError):
        session.enable_penning_transfer(0.3, 0., 'CH4')


def test_deexcitation_and_penning_exclude_each_other(ar_ch4_session):
    session = ar_ch4_session
    session.enable_penning_transfer(0.4)
    session.enable_deexcitation()
    assert session.use_deexcitation and not session.use_penning
    session.enable_penning_transfer(0.4)
    assert session.use_penning and not session.use_deexcitation

    with pytest.raises(ConfigurationError):
        GasConfig(deexcitation=True, penning_probability=0.3)


def test_invalid_energies(ar_ch4_session):
    session = ar_ch4_session
    with pytest.raises(InvalidEnergyError):
        session.sample_electron_collision(0.)
    with pytest.raises(InvalidEnergyError):
        session.get_collision_rate(-1.)
    with pytest.raises(InvalidEnergyError):
        session.sample_photon_collision(0.)
    with pytest.raises(InvalidEnergyError):
        session.get_photon_collision_rate(-5.)


def test_energy_range_adjustment(ar_ch4_session):
    session = ar_ch4_session
    session.initialise()
    rate = session.get_collision_rate(100.)
    assert session.max_electron_energy == pytest.approx(105.)
    assert session.tables.table.energy_final == pytest.approx(105.)
    assert rate > 0.

    session.sample_photon_collision(30.)
    assert session.max_photon_energy == pytest.approx(31.5)


def test_energy_range_without_adjustment(ar_ch4_session):
    session = ar_ch4_session
    session.disable_energy_range_adjustment()
    session.initialise()
    table = session.tables.table
    rate = session.get_collision_rate(100.)
    assert session.max_electron_energy == 40.
    assert rate == pytest.approx(table.total[-1].item())
    result = session.sample_electron_collision(100.)
    assert 0. < result.energy <= 100.


def test_null_collision_rate_bounds_total(ar_ch4_session):
    session = ar_ch4_session
    null_rate = session.get_null_collision_rate()
    for energy in np.linspace(0.1, 40., 100):
        assert session.get_collision_rate(float(energy)) <= null_rate * (1. + 1e-12)
    session.get_null_collision_rate(80.)
    assert session.max_electron_energy == pytest.approx(84.)


def test_level_rates_sum_to_total(ar_ch4_session):
    session = ar_ch4_session
    total = sum(session.get_level_collision_rate(20., k) for k in range(session.number_of_levels))
    assert total == pytest.approx(session.get_collision_rate(20.))


def test_configuration_errors_leave_state_unchanged(ar_ch4_session):
    session = ar_ch4_session
    session.initialise()
    composition = dict(session.composition)
    with pytest.raises(ConfigurationError):
        session.set_composition({'Unobtainium': 1.})
    with pytest.raises(ConfigurationError):
        session.set_composition({'Ar': -1.})
    assert session.composition == composition
    assert not session.is_changed

    with pytest.raises(ConfigurationError):
        session.enable_penning_transfer(1.5)
    assert not session.use_penning
    with pytest.raises(ConfigurationError):
        session.set_excitation_scaling_factor(-1., 'Ar')
    with pytest.raises(ConfigurationError):
        session.set_excitation_scaling_factor(2., 'CO2')
    with pytest.raises(ConfigurationError):
        session.set_splitting_function('bogus')
    with pytest.raises(ConfigurationError):
        session.set_max_electron_energy(0.)
    with pytest.raises(ConfigurationError):
        session.get_level(session.number_of_levels)
    with pytest.raises(ConfigurationError):
        session.get_level_collision_rate(10., -1)
    assert session.excitation_scaling == {}


def test_failed_rebuild_keeps_previous_tables(ar_ch4_session):
    session = ar_ch4_session
    session.initialise()
    tables = session.tables
    # Xe is a known gas without data in the provider
    session.set_composition({'Xe': 1.})
    with pytest.raises(ConfigurationError):
        session.get_collision_rate(10.)
    assert session.tables is tables
    assert session.is_changed

    session.set_composition({'Ar': 90., 'CH4': 10.})
    assert session.get_collision_rate(10.) > 0.


def test_inconsistent_deexcitation_table_disables_deexcitation(ar_ch4_deexcitation_session,
                                                               monkeypatch):
    session = ar_ch4_deexcitation_session

    def fail(deexcitations):
        raise ConsistencyError("broken channel list")

    monkeypatch.setattr(session.graph, 'validate', fail)
    session.initialise()
    assert not session.use_deexcitation
    assert session.deexcitations is None
    assert all(session.get_level(i).deexcitation is None for i in range(session.number_of_levels))
    session.sample_electron_collision(30.)


def test_compute_deexcitation(ar_ch4_deexcitation_session):
    session = ar_ch4_deexcitation_session
    mapped = [i for i in range(session.number_of_levels)
              if session.get_level(i).deexcitation is not None]
    for level in mapped:
        for _ in range(5):
            result = session.compute_deexcitation(level)
            assert result.final_level == GROUND_STATE or \
                session.get_level(result.final_level).gas_name == 'Ar'
            times = [p.time for p in result.products]
            assert times == sorted(times)

    with pytest.raises(ConfigurationError):
        session.compute_deexcitation(0)


def test_compute_deexcitation_requires_deexcitation(ar_ch4_session):
    excitations = _levels_of(ar_ch4_session, CollisionType.EXCITATION)
    with pytest.raises(ConfigurationError):
        ar_ch4_session.compute_deexcitation(excitations[0])


def test_photon_collisions(ar_ch4_session):
    session = ar_ch4_session
    n_ionising = 0
    for energy in np.linspace(9., 19.9, 200):
        result = session.sample_photon_collision(float(energy))
        assert -1. <= result.cos_theta <= 1.
        if result.collision_type == PhotonCollisionType.IONISATION:
            n_ionising += 1
            assert result.secondary_energy > 0.
            assert result.n_secondaries == 1
    total, ionising, inelastic = session.get_number_of_photon_collisions()
    assert total == 200
    assert ionising == n_ionising
    assert ionising + inelastic == total
    assert session.get_photon_collision_rate(15.) > 0.


def test_radiation_trapping_adds_line_absorption(ar_ch4_deexcitation_session):
    session = ar_ch4_deexcitation_session
    session.initialise()
    dxc = next(d for d in session.deexcitations if d.label == 'Ar_1S4')
    with_lines = session.get_photon_collision_rate(dxc.energy)
    session.disable_radiation_trapping()
    continuum = session.get_photon_collision_rate(dxc.energy)
    assert with_lines > 100. * continuum

    session.enable_radiation_trapping()
    result = session.sample_photon_collision(dxc.energy)
    assert result.collision_type == PhotonCollisionType.EXCITATION


def test_missing_photoabsorption_data_disables_deexcitation(generator):
    session = make_session(generator=generator, deexcitation=True)
    del session.optical.tables['CH4']
    session.initialise()
    assert session.photon_table is None
    assert not session.use_deexcitation
    with pytest.raises(ConfigurationError):
        session.sample_photon_collision(15.)
    # Electron collisions remain available
    assert session.get_collision_rate(15.) > 0.


def test_counter_reset(ar_ch4_session):
    session = ar_ch4_session
    for _ in range(10):
        session.sample_electron_collision(20.)
    session.sample_photon_collision(15.)
    session.reset_collision_counters()
    assert session.get_number_of_electron_collisions() == 0
    assert session.get_number_of_photon_collisions() == (0, 0, 0)
    assert session.get_number_of_penning_transfers() == 0


def test_splitting_function_selection(ar_ch4_session):
    session = ar_ch4_session
    session.set_splitting_function('green_sawada')
    assert session.secondary_sampler.splitting_function == SplittingFunction.GREEN_SAWADA
    for _ in range(200):
        session.sample_electron_collision(35.)


def test_cross_section_output(ar_ch4_session, tmp_path):
    session = ar_ch4_session
    session.enable_cross_section_output(str(tmp_path))
    session.initialise()
    assert (tmp_path / 'cs.txt').exists()
    assert (tmp_path / 'csgamma.txt').exists()


def test_describe_gas(ar_ch4_session):
    description = ar_ch4_session.describe_gas()
    assert description['composition'] == pytest.approx({'Ar': 0.9, 'CH4': 0.1})
    assert description['min_ionisation_potential'] == pytest.approx(CH4_IONISATION_POTENTIAL)
    assert len(description['levels']) == ar_ch4_session.number_of_levels
    assert description['levels'][0] == ('Ar', 'ELASTIC', 'ELASTIC', 0.)
    assert not description['deexcitation']
    assert description['null_collision_rate'] > 0.


def test_session_requires_data_source():
    config = GasConfig()
    config.cross_section_database_path = None
    with pytest.raises(ConfigurationError):
        GasCollisionSession(config)
