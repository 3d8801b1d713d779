"""Energy sharing between primary and secondary electrons in ionising collisions."""

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .constants import SMALL
from .random_source import RandomSource
from ..core.data_models import SplittingFunction
from ..utils.logging import get_logger


logger = get_logger('physics.secondaries')


# Green-Sawada fit parameters (Gamma_s, Gamma_b, T_s) in eV
GREEN_SAWADA_FITS: Dict[str, Tuple[float, float, float]] = {
    'He': (15.5, 24.5, -2.25),
    'He-3': (15.5, 24.5, -2.25),
    'Ne': (24.3, 21.6, -6.49),
    'Ar': (6.92, 7.85, 6.87),
    'Kr': (7.95, 13.5, 3.90),
    'Xe': (7.93, 11.5, 3.81),
    'H2': (7.07, 7.7, 1.87),
    'D2': (7.07, 7.7, 1.87),
    'N2': (13.8, 15.6, 4.71),
    'O2': (18.5, 12.1, 1.86),
    'CH4': (7.06, 12.5, 3.45),
    'H2O': (12.8, 12.6, 1.28),
    'CO': (13.3, 14.0, 2.03),
    'C2H2': (9.28, 5.8, 1.37),
    'NO': (10.4, 9.5, -4.30),
    'CO2': (12.3, 13.8, -2.46),
}

GREEN_SAWADA_TA = 1000.


@dataclass
class GreenSawadaParameters:
    """Parameters of the Green-Sawada secondary energy distribution.

    With gb = ts = ta = 0 the distribution reduces to Opal-Beaty-Peterson
    with splitting parameter gs.
    """
    gs: float
    gb: float
    ts: float
    ta: float
    tb: float
    fitted: bool = True


def green_sawada_parameters(
    gas: str,
    opal_beaty: float,
    ionisation_potential: float
) -> GreenSawadaParameters:
    """Green-Sawada parameters of a gas.

    Args:
        gas: Gas name
        opal_beaty: Opal-Beaty-Peterson parameter of the first ionisation term
        ionisation_potential: Ionisation potential of the gas in eV

    Returns:
        Fitted parameters, or the Opal-Beaty equivalent if no fit is known
    """
    tb = 2. * ionisation_potential
    if gas in GREEN_SAWADA_FITS:
        gs, gb, ts = GREEN_SAWADA_FITS[gas]
        return GreenSawadaParameters(gs, gb, ts, GREEN_SAWADA_TA, tb)
    return GreenSawadaParameters(opal_beaty, 0., 0., 0., tb, fitted=False)


class SecondaryEnergySampler:
    """Samples the secondary electron energy in ionising collisions.

    Attributes:
        splitting_function: Distribution used for the energy sharing
        green_sawada: Green-Sawada parameters per gas index
    """

    def __init__(self, splitting_function: SplittingFunction = SplittingFunction.OPAL_BEATY):
        self.splitting_function = splitting_function
        self.green_sawada: List[GreenSawadaParameters] = []

    def setup(
        self,
        gases: List[str],
        opal_beaty: List[float],
        ionisation_potentials: List[float]
    ) -> None:
        """Set up the Green-Sawada parameters of the mixture components."""
        self.green_sawada = []
        for gas, w, ip in zip(gases, opal_beaty, ionisation_potentials):
            params = green_sawada_parameters(gas, w, ip)
            if not params.fitted and self.splitting_function == SplittingFunction.GREEN_SAWADA:
                logger.info(
                    f"Green-Sawada fit parameters for {gas} not available, "
                    "using Opal-Beaty formula instead"
                )
            self.green_sawada.append(params)

    def sample(
        self,
        rng: RandomSource,
        gas: int,
        energy: float,
        loss: float,
        opal_beaty: float
    ) -> float:
        """Sample the energy of the secondary electron.

        Args:
            rng: Random source
            gas: Index of the gas component
            energy: Energy of the primary electron in eV
            loss: Ionisation threshold divided by the recoil factor in eV
            opal_beaty: Opal-Beaty-Peterson parameter of the level in eV

        Returns:
            Secondary electron energy in eV (at least SMALL)
        """
        if self.splitting_function == SplittingFunction.OPAL_BEATY:
            w = opal_beaty
            esec = w * math.tan(rng.uniform() * math.atan(0.5 * (energy - loss) / w))
        elif self.splitting_function == SplittingFunction.GREEN_SAWADA:
            p = self.green_sawada[gas]
            w = p.gs * energy / (energy + p.gb)
            esec0 = p.ts - p.ta / (energy + p.tb)
            r = rng.uniform()
            esec = esec0 + w * math.tan(
                (r - 1.) * math.atan(esec0 / w) +
                r * math.atan((0.5 * (energy - loss) - esec0) / w)
            )
        else:
            esec = rng.uniform() * (energy - loss)
        if esec <= 0.:
            esec = SMALL
        return esec
