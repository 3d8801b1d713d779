"""Tests for photon collision rates, resonance lines and photon sampling."""

import numpy as np
import pytest

from MCGasTransport.core.data_models import CollisionCounters, PhotonCollisionType
from MCGasTransport.physics.constants import LINE_WINDOW_WIDTHS, N_ENERGY_STEPS_GAMMA
from MCGasTransport.physics.cross_section_mixer import CrossSectionMixer
from MCGasTransport.physics.deexcitation_graph import DeexcitationGraph
from MCGasTransport.physics.photon_collision_table import PhotonCollisionTable, voigt_hwhm
from MCGasTransport.utils.validation import ConfigurationError

from conftest import FixedRandom, ModelOpticalData


@pytest.fixture
def mixture(provider):
    return CrossSectionMixer(provider).build({'Ar': 0.9, 'CH4': 0.1}, 293.15, 760., 40.)


def _build(optical, mixture, deexcitations=None, output_dir=None):
    return PhotonCollisionTable(optical).build(
        mixture.gases, mixture.fractions, mixture.mass_factors,
        mixture.density, 293.15, 20., deexcitations, output_dir,
    )


@pytest.fixture
def lines(optical, mixture):
    graph = DeexcitationGraph(optical)
    deexcitations = graph.build(mixture.levels, mixture.gases, mixture.fractions,
                                mixture.mass_factors, mixture.density, 293.15)
    table = _build(optical, mixture, deexcitations)
    return graph, deexcitations, table


def test_voigt_half_width_limits():
    # Pure Gaussian: sqrt(2 ln 2) sigma
    assert voigt_hwhm(1., 0.) == pytest.approx(np.sqrt(2. * np.log(2.)), rel=1e-4)
    # Pure Lorentzian: gamma
    assert voigt_hwhm(0., 1.) == pytest.approx(1., rel=1e-3)


def test_continuum_table(optical, mixture):
    table = _build(optical, mixture)
    assert table.total.shape == (N_ENERGY_STEPS_GAMMA,)
    assert table.cumulative.shape == (N_ENERGY_STEPS_GAMMA, 4)
    assert table.term_types == [PhotonCollisionType.IONISATION, PhotonCollisionType.INELASTIC] * 2
    assert table.term_gases == [0, 0, 1, 1]
    assert np.allclose(table.cumulative[:, -1].numpy(), table.total.numpy())
    # Below the methane absorption onset nothing is absorbed
    assert table.total[table.index(5.)].item() == 0.
    assert table.total[table.index(12.)].item() > 0.


def test_line_parameters(lines):
    _, deexcitations, _ = lines
    with_lines = [d for d in deexcitations if d.osc > 0.]
    assert with_lines
    for dxc in deexcitations:
        if dxc.osc > 0.:
            assert dxc.absorption_rate > 0.
            assert dxc.doppler_width > 0. and dxc.pressure_width > 0.
            assert dxc.width == pytest.approx(
                LINE_WINDOW_WIDTHS * voigt_hwhm(dxc.doppler_width, dxc.pressure_width))
        else:
            assert dxc.width == 0. and dxc.absorption_rate == 0.


def test_line_absorption_dominates_at_line_centre(optical, lines):
    _, deexcitations, table = lines
    dxc = next(d for d in deexcitations if d.label == 'Ar_1S4')
    builder = PhotonCollisionTable(optical)
    continuum = builder.rate(table, dxc.energy)
    with_line = builder.rate(table, dxc.energy, deexcitations)
    assert with_line > 100. * continuum
    # Outside the window only the continuum remains
    outside = dxc.energy - 2. * dxc.width
    assert builder.rate(table, outside, deexcitations) == pytest.approx(builder.rate(table, outside))


def test_sampling_at_line_centre_excites_level(optical, mixture, lines):
    graph, deexcitations, table = lines
    i_line = next(i for i, d in enumerate(deexcitations) if d.label == 'Ar_1S4')
    counters = CollisionCounters()
    result = PhotonCollisionTable(optical).sample(
        table, deexcitations[i_line].energy, FixedRandom(0.5), mixture.ionisation_potentials,
        counters, deexcitations, graph, mixture.min_ionisation_potential,
    )
    assert result.collision_type == PhotonCollisionType.EXCITATION
    assert result.level == i_line
    assert result.n_secondaries == len(result.products)
    assert counters.photon_by_type[PhotonCollisionType.EXCITATION] == 1


def test_continuum_ionisation_energy(optical, mixture):
    table = _build(optical, mixture)
    builder = PhotonCollisionTable(optical)
    counters = CollisionCounters()
    # At 20 eV both gases ionise with unit yield; argon dominates the low end
    result = builder.sample(table, 20., FixedRandom(0.1), mixture.ionisation_potentials, counters)
    assert result.collision_type == PhotonCollisionType.IONISATION
    assert result.level == 0
    assert result.n_secondaries == 1
    assert result.secondary_energy == pytest.approx(20. - 15.7596)

    result = builder.sample(table, 20., FixedRandom(0.99), mixture.ionisation_potentials, counters)
    assert result.collision_type == PhotonCollisionType.IONISATION
    assert result.level == 2
    assert result.secondary_energy == pytest.approx(20. - 12.65)
    assert result.cos_theta == pytest.approx(0.98)
    assert counters.photon_by_type[PhotonCollisionType.IONISATION] == 2


def test_continuum_absorption_below_ionisation_is_inelastic(optical, mixture):
    table = _build(optical, mixture)
    counters = CollisionCounters()
    result = PhotonCollisionTable(optical).sample(
        table, 10., FixedRandom(0.5), mixture.ionisation_potentials, counters)
    assert result.collision_type == PhotonCollisionType.INELASTIC
    assert result.level == 3
    assert result.n_secondaries == 0


def test_missing_photoabsorption_data(generator, mixture):
    optical = ModelOpticalData(generator)
    del optical.tables['CH4']
    with pytest.raises(ConfigurationError):
        _build(optical, mixture)


def test_isobutane_uses_butane_optics(generator):
    optical = ModelOpticalData(generator)
    table = PhotonCollisionTable(optical).build(['iC4H10'], [1.], [1.00001], 2.5e19, 293.15, 20.)
    assert table.total[table.index(12.)].item() > 0.


def test_photon_rate_output(optical, mixture, tmp_path):
    _build(optical, mixture, output_dir=tmp_path)
    data = np.loadtxt(tmp_path / 'csgamma.txt')
    assert data.shape == (N_ENERGY_STEPS_GAMMA, 5)
