"""Scattering-angle sampling, two-body kinematics and direction rotation."""

import math
from typing import Tuple

import numpy as np

from .constants import SMALL
from .random_source import RandomSource
from ..core.data_models import ScatteringModel
from ..utils.logging import get_logger


logger = get_logger('physics.kinematics')


def angular_parameters(model: int, par: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Convert raw angular parameters of a scattering model into (cut, par).

    Model 0 (or below) is isotropic. Model 1 with a parameter above 1
    describes forward scattering within a cone: the cut-off angle and the
    renormalised forward probability are derived from the parameter.
    Model 2 and above pass the parameter through.

    Args:
        model: Scattering model index
        par: Raw angular parameters

    Returns:
        Tuple of (angular cut, angular parameter) arrays
    """
    par = np.asarray(par, dtype=np.float64)
    cut = np.ones_like(par)
    if model <= ScatteringModel.ISOTROPIC:
        return cut, np.full_like(par, 0.5)
    if model >= ScatteringModel.PARAMETERISED:
        return cut, par.copy()

    out = par.copy()
    mask = par > 1.
    if np.any(mask):
        cns = par[mask] - 0.5
        thetac = np.arcsin(2. * np.sqrt(np.clip(cns - cns * cns, 0., 0.25)))
        sin2 = np.sin(thetac) ** 2
        with np.errstate(divide='ignore', invalid='ignore'):
            fac = np.where(sin2 > 0., (1. - np.cos(thetac)) / sin2, 0.5)
        out[mask] = cns * fac + 0.5
        cut[mask] = thetac * 2. / np.pi
    return cut, out


def sample_cos_theta(
    rng: RandomSource,
    model: int,
    cut: float,
    par: float,
    anisotropic: bool
) -> float:
    """Sample the cosine of the scattering angle in the centre-of-mass frame."""
    ctheta0 = 1. - 2. * rng.uniform()
    if not anisotropic:
        return ctheta0
    if model == ScatteringModel.ISOTROPIC:
        return ctheta0
    if model == ScatteringModel.CUTOFF:
        ctheta0 = 1. - rng.uniform() * cut
        if rng.uniform() > par:
            ctheta0 = -ctheta0
        return ctheta0
    if model == ScatteringModel.PARAMETERISED:
        return (ctheta0 + par) / (1. + par * ctheta0)
    logger.warning(f"Unknown scattering model {model}, using isotropic distribution")
    return ctheta0


def scatter(energy: float, loss: float, ctheta0: float, mass_factor: float) -> Tuple[float, float]:
    """Energy and lab-frame polar angle after a collision with a heavy target.

    Args:
        energy: Electron energy before the collision in eV
        loss: Energy loss in eV
        ctheta0: Cosine of the centre-of-mass scattering angle
        mass_factor: Recoil parameter r = 1 + m_e / M

    Returns:
        Tuple of (energy after the collision, cos theta in the lab frame)
    """
    s1 = mass_factor
    s2 = (s1 * s1) / (s1 - 1.)
    theta0 = math.acos(ctheta0)
    arg = max(1. - s1 * loss / energy, SMALL)
    d = 1. - ctheta0 * math.sqrt(arg)

    e1 = max(energy * (1. - loss / (s1 * energy) - 2. * d / s2), SMALL)
    q = min(math.sqrt((energy / e1) * arg) / s1, 1.)
    theta = math.asin(q * math.sin(theta0))
    ctheta = math.cos(theta)
    if ctheta0 < 0.:
        u = (s1 - 1.) * (s1 - 1.) / arg
        if ctheta0 * ctheta0 > u:
            ctheta = -ctheta
    return e1, ctheta


def rotate_direction(
    direction: Tuple[float, float, float],
    ctheta: float,
    phi: float
) -> Tuple[float, float, float]:
    """Rotate a unit vector by polar angle acos(ctheta) and azimuth phi.

    Args:
        direction: Incoming direction (dx, dy, dz)
        ctheta: Cosine of the polar angle
        phi: Azimuth in rad

    Returns:
        Outgoing direction (dx, dy, dz)
    """
    dx, dy, dz = direction
    dz = min(dz, 1.)
    stheta = math.sqrt(max(1. - ctheta * ctheta, 0.))
    cphi = math.cos(phi)
    sphi = math.sin(phi)
    arg_z = math.sqrt(dx * dx + dy * dy)
    if arg_z == 0.:
        return cphi * stheta, sphi * stheta, ctheta
    a = stheta / arg_z
    dz1 = dz * ctheta + arg_z * stheta * sphi
    dy1 = dy * ctheta + a * (dx * cphi - dy * dz * sphi)
    dx1 = dx * ctheta - a * (dy * cphi + dx * dz * sphi)
    return dx1, dy1, dz1
