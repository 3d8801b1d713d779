"""Tests for the electron collision-rate tables of gas mixtures."""

import numpy as np
import pytest
import torch

from MCGasTransport.core.data_models import CollisionType
from MCGasTransport.physics import cross_section_mixer
from MCGasTransport.physics.constants import N_ENERGY_STEPS, N_ENERGY_STEPS_LOG
from MCGasTransport.physics.cross_section_mixer import (
    CrossSectionMixer,
    classify_inelastic,
    relativistic_factor,
)
from MCGasTransport.utils.validation import CapacityError, ConfigurationError

from conftest import ModelGasProvider


AR_CH4 = {'Ar': 0.9, 'CH4': 0.1}


@pytest.fixture
def tables(provider):
    return CrossSectionMixer(provider).build(AR_CH4, 293.15, 760., 40.)


def test_classify_inelastic():
    assert classify_inelastic('Ar', 'EXC  1S5    ELOSS= 11.5484', 11.5) == CollisionType.EXCITATION
    assert classify_inelastic('CO2', 'DEXC 7.0', 7.) == CollisionType.EXCITATION
    assert classify_inelastic('CH4', 'VIB V4 SUPERELASTIC', -0.162) == CollisionType.SUPERELASTIC
    assert classify_inelastic('CH4', 'VIB V4  ELOSS= 0.162', 0.162) == CollisionType.INELASTIC
    assert classify_inelastic('N2', 'ROT', 7.) == CollisionType.EXCITATION
    assert classify_inelastic('N2', 'VIB', 2.) == CollisionType.INELASTIC


def test_relativistic_factor_only_above_threshold():
    factor = relativistic_factor(np.array([10., 500., 1e5]))
    assert factor[0] == 1. and factor[1] == 1.
    assert 0. < factor[2] < 1.


def test_level_order_per_gas(tables):
    types = [lv.collision_type for lv in tables.levels]
    gases = [lv.gas for lv in tables.levels]
    assert gases == sorted(gases)
    assert len(tables.levels) == 24 + 9
    for i_gas in (0, 1):
        own = [t for t, g in zip(types, gases) if g == i_gas]
        assert own[0] == CollisionType.ELASTIC
        assert own[1] == CollisionType.IONISATION
        assert own[2] == CollisionType.ATTACHMENT
        assert all(t in (CollisionType.EXCITATION, CollisionType.INELASTIC,
                         CollisionType.SUPERELASTIC) for t in own[3:])
    ch4 = [lv for lv in tables.levels if lv.gas_name == 'CH4']
    assert ch4[3].collision_type == CollisionType.SUPERELASTIC
    assert ch4[3].threshold < 0.


def test_mixture_properties(tables):
    assert tables.gases == ['Ar', 'CH4']
    assert tables.fractions == [0.9, 0.1]
    assert tables.ionisation_potentials == pytest.approx([15.7596, 12.65])
    assert tables.min_ionisation_potential == pytest.approx(12.65)
    assert tables.opal_beaty == pytest.approx([10., 7.3])
    assert all(r > 1. for r in tables.mass_factors)
    assert tables.density == pytest.approx(2.5e19, rel=0.02)


def test_thresholds_and_energy_losses(tables):
    for level in tables.levels:
        r = tables.mass_factors[level.gas]
        assert level.energy_loss * r == pytest.approx(level.threshold)


def test_cumulative_probabilities(tables):
    table = tables.table
    assert table.total.shape == (N_ENERGY_STEPS,)
    assert table.cumulative.shape == (N_ENERGY_STEPS, len(tables.levels))
    assert table.total.dtype == torch.float64
    assert not table.has_log_grid
    cumulative = table.cumulative.numpy()
    assert np.all(np.diff(cumulative, axis=1) >= -1e-12)
    filled = table.total.numpy() > 0.
    assert filled.any()
    assert np.allclose(cumulative[filled, -1], 1.)
    assert table.null_collision_rate == pytest.approx(float(table.total.max()))


def test_excitations_only_above_threshold(tables):
    table = tables.table
    k = next(i for i, lv in enumerate(tables.levels) if lv.description.startswith('EXC  2P1'))
    assert table.level_rate(10., k) == 0.
    assert table.level_rate(30., k) > 0.


def test_excitation_scaling(provider, tables):
    scaled = CrossSectionMixer(provider).build(AR_CH4, 293.15, 760., 40., scaling={'Ar': 2.})
    k = next(i for i, lv in enumerate(tables.levels) if lv.description.startswith('EXC  1S4'))
    assert scaled.table.level_rate(25., k) == pytest.approx(2. * tables.table.level_rate(25., k))
    # Elastic terms are unaffected
    assert scaled.table.level_rate(25., 0) == pytest.approx(tables.table.level_rate(25., 0))


def test_rates_scale_with_pressure(provider, tables):
    doubled = CrossSectionMixer(provider).build(AR_CH4, 293.15, 1520., 40.)
    assert doubled.table.total_rate(20.) == pytest.approx(2. * tables.table.total_rate(20.))


def test_logarithmic_grid_above_high_energy(provider):
    tables = CrossSectionMixer(provider).build({'Ar': 1.}, 293.15, 760., 1e5)
    table = tables.table
    assert table.has_log_grid
    assert table.energy_step == pytest.approx(1e4 / N_ENERGY_STEPS)
    assert table.log_total.shape == (N_ENERGY_STEPS_LOG,)
    assert table.log_step == pytest.approx(np.log(10.) / N_ENERGY_STEPS_LOG)
    for energy in (1.2e4, 5e4, 9.9e4):
        rate = table.total_rate(energy)
        assert np.isfinite(rate) and 0. < rate <= table.null_collision_rate
    assert table.level_fraction(5e4, 0) > 0.


def test_negative_cross_sections_are_clamped(generator):
    class NegativeProvider(ModelGasProvider):
        def get_cross_sections(self, gas_number, request):
            cs = super().get_cross_sections(gas_number, request)
            if cs.name == 'CH4':
                cs.inelastic[:10, 1] = -1e-17
            return cs

    tables = CrossSectionMixer(NegativeProvider(generator)).build(AR_CH4, 293.15, 760., 40.)
    k = next(i for i, lv in enumerate(tables.levels) if lv.description == 'VIB V4  ELOSS= 0.162')
    assert tables.negative_bins == {k: 10}
    assert tables.table.level_fraction(0.001, k) == 0.


def test_capacity_limit(provider, monkeypatch):
    monkeypatch.setattr(cross_section_mixer, 'MAX_LEVELS', 30)
    with pytest.raises(CapacityError):
        CrossSectionMixer(provider).build(AR_CH4, 293.15, 760., 40.)


def test_unknown_and_unavailable_gases(provider):
    mixer = CrossSectionMixer(provider)
    with pytest.raises(ConfigurationError):
        mixer.build({'Unobtainium': 1.}, 293.15, 760., 40.)
    with pytest.raises(ConfigurationError):
        mixer.build({'Xe': 1.}, 293.15, 760., 40.)


def test_cross_section_output(provider, tmp_path):
    tables = CrossSectionMixer(provider).build(AR_CH4, 293.15, 760., 40., output_dir=tmp_path)
    data = np.loadtxt(tmp_path / 'cs.txt')
    assert data.shape == (N_ENERGY_STEPS, len(tables.levels) + 1)
    assert np.all(np.diff(data[:, 0]) > 0.)
    header = (tmp_path / 'cs.txt').read_text().splitlines()[1]
    assert header.startswith('# Ar:')
