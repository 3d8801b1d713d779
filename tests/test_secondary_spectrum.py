"""Tests for secondary electron energy models and the random source."""

import math

import pytest

from MCGasTransport.core.data_models import SplittingFunction
from MCGasTransport.physics.constants import SMALL
from MCGasTransport.physics.random_source import RandomSource
from MCGasTransport.physics.secondary_spectrum import (
    GREEN_SAWADA_TA,
    SecondaryEnergySampler,
    green_sawada_parameters,
)

from conftest import FixedRandom


def test_opal_beaty_with_fixed_draw_matches_closed_form():
    sampler = SecondaryEnergySampler(SplittingFunction.OPAL_BEATY)
    energy, loss, w = 30., 15.7596, 10.
    esec = sampler.sample(FixedRandom(0.5), 0, energy, loss, w)
    assert esec == pytest.approx(w * math.tan(0.5 * math.atan(0.5 * (energy - loss) / w)))


def test_flat_splitting_is_uniform_in_available_energy():
    sampler = SecondaryEnergySampler(SplittingFunction.FLAT)
    assert sampler.sample(FixedRandom(0.25), 0, 30., 10., 10.) == pytest.approx(5.)


def test_secondary_energy_has_floor():
    sampler = SecondaryEnergySampler(SplittingFunction.FLAT)
    assert sampler.sample(FixedRandom(0.), 0, 30., 10., 10.) == SMALL


def test_green_sawada_fitted_and_fallback_parameters():
    params = green_sawada_parameters('Ar', 10., 15.7596)
    assert params.fitted
    assert (params.gs, params.gb, params.ts) == (6.92, 7.85, 6.87)
    assert params.ta == GREEN_SAWADA_TA
    assert params.tb == pytest.approx(2. * 15.7596)

    fallback = green_sawada_parameters('iC4H10', 12.5, 10.67)
    assert not fallback.fitted
    assert (fallback.gs, fallback.gb, fallback.ts, fallback.ta) == (12.5, 0., 0., 0.)


def test_green_sawada_fallback_reproduces_opal_beaty():
    energy, loss, w = 40., 10.67, 12.5
    green_sawada = SecondaryEnergySampler(SplittingFunction.GREEN_SAWADA)
    green_sawada.setup(['iC4H10'], [w], [10.67])
    opal_beaty = SecondaryEnergySampler(SplittingFunction.OPAL_BEATY)
    for u in (0.1, 0.5, 0.9):
        assert green_sawada.sample(FixedRandom(u), 0, energy, loss, w) == pytest.approx(
            opal_beaty.sample(FixedRandom(u), 0, energy, loss, w))


def test_green_sawada_stays_below_half_available_energy():
    sampler = SecondaryEnergySampler(SplittingFunction.GREEN_SAWADA)
    sampler.setup(['Ar'], [10.], [15.7596])
    rng = RandomSource(seed=11)
    for _ in range(500):
        esec = sampler.sample(rng, 0, 100., 15.7596, 10.)
        assert SMALL <= esec <= 0.5 * (100. - 15.7596) + 1e-9


def test_random_source_is_reproducible():
    a = RandomSource(seed=42)
    b = RandomSource(seed=42)
    assert [a.uniform() for _ in range(10)] == [b.uniform() for _ in range(10)]
    a.seed(5)
    b.seed(5)
    assert a.gaussian() == b.gaussian()
    assert a.voigt(1., 0.1, 0.2) == b.voigt(1., 0.1, 0.2)


def test_random_source_ranges():
    rng = RandomSource(seed=1, batch_size=16)
    for _ in range(100):
        u = rng.uniform()
        assert 0. <= u < 1.
        assert 0. < rng.uniform_pos() < 1.


def test_voigt_degenerate_widths():
    rng = RandomSource(seed=9)
    assert rng.voigt(2., 0., 0.) == pytest.approx(2.)
