"""Tests for scattering kinematics and angular distributions."""

import math

import numpy as np
import pytest

from MCGasTransport.core.data_models import ScatteringModel
from MCGasTransport.physics.constants import SMALL
from MCGasTransport.physics.kinematics import (
    angular_parameters,
    rotate_direction,
    sample_cos_theta,
    scatter,
)
from MCGasTransport.physics.random_source import RandomSource

from conftest import FixedRandom


# Recoil parameters of Ar, CH4 and He
MASS_FACTORS = [1.0000137, 1.0000342, 1.000137]


@pytest.mark.parametrize('mass_factor', MASS_FACTORS)
def test_energy_after_collision_is_positive_and_not_above_initial(mass_factor):
    rng = np.random.default_rng(7)
    for _ in range(2000):
        energy = float(rng.uniform(1e-3, 1e5))
        loss = float(rng.uniform(0., 1.)) * energy * rng.choice([0., 0.5, 0.999])
        ctheta0 = float(rng.uniform(-1., 1.))
        e1, ctheta = scatter(energy, loss, ctheta0, mass_factor)
        assert SMALL <= e1 <= energy
        assert -1. <= ctheta <= 1.


def test_elastic_forward_scattering_keeps_energy():
    e1, ctheta = scatter(10., 0., 1., MASS_FACTORS[0])
    assert e1 == pytest.approx(10.)
    assert ctheta == pytest.approx(1.)


def test_elastic_backscattering_loses_recoil_energy():
    r = MASS_FACTORS[0]
    e1, _ = scatter(10., 0., -1., r)
    # 4 m/M energy loss for head-on collisions
    assert e1 == pytest.approx(10. * (1. - 4. * (r - 1.) / r ** 2), rel=1e-9)


def test_inelastic_loss_is_subtracted():
    e1, _ = scatter(20., 11.5, 1., MASS_FACTORS[0])
    assert e1 == pytest.approx(20. - 11.5, rel=1e-3)


def test_rotation_preserves_unit_length_and_polar_angle():
    direction = (0.6, 0., 0.8)
    for ctheta in (-0.9, -0.2, 0.3, 0.99):
        for phi in (0., 1., 4.):
            d = rotate_direction(direction, ctheta, phi)
            assert math.sqrt(sum(x * x for x in d)) == pytest.approx(1.)
            cos_angle = sum(a * b for a, b in zip(direction, d))
            assert cos_angle == pytest.approx(ctheta)


def test_rotation_along_z_axis_uses_angles_directly():
    d = rotate_direction((0., 0., 1.), 0.5, 0.)
    assert d == pytest.approx((math.sqrt(0.75), 0., 0.5))


def test_angular_parameters_isotropic_and_passthrough():
    par = np.array([0.1, 0.7, 1.5])
    cut, out = angular_parameters(ScatteringModel.ISOTROPIC, par)
    assert np.all(cut == 1.) and np.all(out == 0.5)
    cut, out = angular_parameters(ScatteringModel.PARAMETERISED, par)
    assert np.all(cut == 1.) and np.allclose(out, par)


def test_angular_parameters_cutoff_model():
    cut, out = angular_parameters(ScatteringModel.CUTOFF, np.array([0.8, 1.3]))
    assert cut[0] == 1. and out[0] == pytest.approx(0.8)
    cns = 1.3 - 0.5
    thetac = math.asin(2. * math.sqrt(cns - cns * cns))
    fac = (1. - math.cos(thetac)) / math.sin(thetac) ** 2
    assert cut[1] == pytest.approx(thetac * 2. / math.pi)
    assert out[1] == pytest.approx(cns * fac + 0.5)


def test_cos_theta_models():
    rng = RandomSource(seed=3)
    for model, cut, par in ((0, 1., 0.5), (1, 0.4, 0.8), (2, 1., 0.9), (7, 1., 0.5)):
        for _ in range(200):
            c = sample_cos_theta(rng, model, cut, par, True)
            assert -1. <= c <= 1.


def test_parameterised_model_remaps_cos_theta():
    rng = FixedRandom(0.25)
    c = sample_cos_theta(rng, ScatteringModel.PARAMETERISED, 1., 0.5, True)
    assert c == pytest.approx((0.5 + 0.5) / (1. + 0.5 * 0.5))
    rng = FixedRandom(0.25)
    assert sample_cos_theta(rng, ScatteringModel.PARAMETERISED, 1., 0.5, False) == pytest.approx(0.5)
