"""Photon collision rates: photoabsorption continuum and resonance lines."""

import math
from pathlib import Path
from typing import List, Optional

import numpy as np
import torch
from scipy.special import voigt_profile

from .constants import (
    BOLTZMANN_CONSTANT,
    ELECTRON_MASS,
    FINE_STRUCTURE_CONSTANT,
    HBAR_C,
    LINE_WINDOW_WIDTHS,
    N_ENERGY_STEPS_GAMMA,
    OSCILLATOR_TO_CROSS_SECTION,
    SMALL,
    SPEED_OF_LIGHT,
)
from .deexcitation_graph import DeexcitationGraph
from .optical_data import OpticalDataProvider
from .random_source import RandomSource
from ..core.data_models import (
    CollisionCounters,
    Deexcitation,
    PhotonCollisionResult,
    PhotonCollisionType,
    PhotonRateTable,
    locate_level,
)
from ..utils.logging import get_logger
from ..utils.validation import ConfigurationError


logger = get_logger('physics.photons')

# Gases whose photoabsorption data are taken from a related species
OPTICAL_ALIASES = {'iC4H10': 'nC4H10'}

RESONANCE_BROADENING = 1.92 * math.pi * math.sqrt(1. / 3.)


def voigt_hwhm(doppler_width: float, pressure_width: float) -> float:
    """Half width at half maximum of a Voigt profile.

    Olivero and Longbothum, J. Quant. Spectr. Rad. Trans. 17 (1977) 233.

    Args:
        doppler_width: Standard deviation of the Gaussian component in eV
        pressure_width: Width parameter of the Lorentzian component in eV

    Returns:
        Half width in eV
    """
    hw_gauss = doppler_width * math.sqrt(2. * math.log(2.))
    hw_lorentz = pressure_width
    return 0.5 * (1.0692 * hw_lorentz +
                  math.sqrt(0.86639 * hw_lorentz * hw_lorentz +
                            4. * hw_gauss * hw_gauss))


class PhotonCollisionTable:
    """Builds and samples photon collision rates of a gas mixture.

    Each gas contributes an ionising and a non-ionising absorption term.
    Resonance lines of de-excitable levels are added on top of the
    continuum within a window around the line energy.

    Attributes:
        optical: Photoabsorption data
        device: Device for the rate tensors
    """

    def __init__(self, optical: OpticalDataProvider, device: str = 'cpu'):
        self.optical = optical
        self.device = device

    def build(
        self,
        gases: List[str],
        fractions: List[float],
        mass_factors: List[float],
        density: float,
        temperature: float,
        max_energy: float,
        deexcitations: Optional[List[Deexcitation]] = None,
        output_dir: Optional[Path] = None
    ) -> PhotonRateTable:
        """Build the photon collision-rate table.

        If a de-excitation table is given, the line widths and absorption
        rates of its entries are computed as well.

        Args:
            gases: Gas names of the mixture components
            fractions: Mole fractions of the components
            mass_factors: Recoil parameter per gas
            density: Number density in cm-3
            temperature: Temperature in K
            max_energy: Upper end of the table in eV
            deexcitations: De-excitation table, if de-excitation is enabled
            output_dir: Directory to write csgamma.txt to, if any

        Returns:
            PhotonRateTable

        Raises:
            ConfigurationError: If photoabsorption data of a gas are missing
        """
        e_step = max_energy / N_ENERGY_STEPS_GAMMA
        energies = (np.arange(N_ENERGY_STEPS_GAMMA) + 0.5) * e_step

        terms = []
        term_types: List[PhotonCollisionType] = []
        term_gases: List[int] = []
        for i, gas in enumerate(gases):
            name = OPTICAL_ALIASES.get(gas, gas)
            if name != gas:
                logger.debug(f"Using {name} photoabsorption data for {gas}")
            if not self.optical.is_available(name):
                raise ConfigurationError(f"Photoabsorption data for {name} not available")
            prefactor = density * SPEED_OF_LIGHT * fractions[i]
            cs, eta = self.optical.get_photoabsorption(name, energies)
            cs = np.asarray(cs, dtype=np.float64)
            eta = np.asarray(eta, dtype=np.float64)
            terms.append(cs * prefactor * eta)
            term_types.append(PhotonCollisionType.IONISATION)
            term_gases.append(i)
            terms.append(cs * prefactor * (1. - eta))
            term_types.append(PhotonCollisionType.INELASTIC)
            term_gases.append(i)

        rates = np.stack(terms, axis=1)
        total = rates.sum(axis=1)

        if output_dir is not None:
            output_dir = Path(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            np.savetxt(output_dir / 'csgamma.txt', np.column_stack([energies, rates]))
            logger.info(f"Photon collision rates written to {output_dir / 'csgamma.txt'}")

        table = PhotonRateTable(
            energy_final=max_energy,
            energy_step=e_step,
            total=torch.tensor(total, dtype=torch.float64, device=self.device),
            cumulative=torch.tensor(np.cumsum(rates, axis=1), dtype=torch.float64,
                                    device=self.device),
            term_types=term_types,
            term_gases=term_gases,
        )

        if deexcitations is not None:
            n_lines = self._setup_lines(deexcitations, fractions, mass_factors,
                                        density, temperature)
            if n_lines == 0:
                logger.warning("No resonance lines found")
            else:
                logger.debug(f"{n_lines} resonance absorption lines")
        return table

    @staticmethod
    def _setup_lines(
        deexcitations: List[Deexcitation],
        fractions: List[float],
        mass_factors: List[float],
        density: float,
        temperature: float
    ) -> int:
        n_lines = 0
        for dxc in deexcitations:
            if dxc.osc < SMALL:
                continue
            fraction = fractions[dxc.gas]
            dxc.absorption_rate = (density * SPEED_OF_LIGHT * fraction *
                                   OSCILLATOR_TO_CROSS_SECTION * dxc.osc)
            m_gas = ELECTRON_MASS / (mass_factors[dxc.gas] - 1.)
            dxc.doppler_width = math.sqrt(BOLTZMANN_CONSTANT * temperature / m_gas) * dxc.energy
            # Ali and Griem, Phys. Rev. 140 (1965) 1044
            dxc.pressure_width = (RESONANCE_BROADENING * FINE_STRUCTURE_CONSTANT *
                                  HBAR_C ** 3 * dxc.osc * density * fraction /
                                  (ELECTRON_MASS * dxc.energy))
            dxc.width = LINE_WINDOW_WIDTHS * voigt_hwhm(dxc.doppler_width, dxc.pressure_width)
            n_lines += 1
            logger.debug(
                f"{dxc.label}: line at {dxc.energy:.3f} eV, window +/- {dxc.width:.2e} eV"
            )
        return n_lines

    @staticmethod
    def _lines(
        deexcitations: Optional[List[Deexcitation]],
        energy: float
    ) -> List[tuple]:
        """Absorption rates of the lines whose window contains an energy."""
        lines = []
        if not deexcitations:
            return lines
        for i, dxc in enumerate(deexcitations):
            if dxc.absorption_rate > 0. and abs(energy - dxc.energy) <= dxc.width:
                rate = dxc.absorption_rate * voigt_profile(
                    energy - dxc.energy, dxc.doppler_width, dxc.pressure_width)
                lines.append((i, float(rate)))
        return lines

    def rate(
        self,
        table: PhotonRateTable,
        energy: float,
        deexcitations: Optional[List[Deexcitation]] = None
    ) -> float:
        """Photon collision rate at an energy in ns-1.

        Args:
            table: Photon rate table
            energy: Photon energy in eV
            deexcitations: De-excitation table if line absorption is included
        """
        rate = table.total[table.index(energy)].item()
        for _, line_rate in self._lines(deexcitations, energy):
            rate += line_rate
        return rate

    def sample(
        self,
        table: PhotonRateTable,
        energy: float,
        rng: RandomSource,
        ionisation_potentials: List[float],
        counters: CollisionCounters,
        deexcitations: Optional[List[Deexcitation]] = None,
        graph: Optional[DeexcitationGraph] = None,
        min_ionisation_potential: float = 0.
    ) -> PhotonCollisionResult:
        """Sample a photon collision.

        Args:
            table: Photon rate table
            energy: Photon energy in eV
            rng: Random source
            ionisation_potentials: Ionisation potential per gas in eV
            counters: Collision counters updated by the call
            deexcitations: De-excitation table if line absorption is included
            graph: De-excitation graph used to follow the cascade of an absorbed line
            min_ionisation_potential: Lowest ionisation potential in the mixture in eV

        Returns:
            PhotonCollisionResult
        """
        i_e = table.index(energy)
        continuum = table.total[i_e].item()
        r = continuum
        cumulative_lines = []
        for i, line_rate in self._lines(deexcitations, energy):
            r += line_rate
            cumulative_lines.append((i, r))
        r *= rng.uniform()

        if cumulative_lines and r >= continuum:
            # Absorption by a discrete line
            i_line = cumulative_lines[-1][0]
            for i, p in cumulative_lines:
                if r <= p:
                    i_line = i
                    break
            counters.photon_by_type[PhotonCollisionType.EXCITATION] += 1
            cascade = graph.cascade(deexcitations, i_line, rng, min_ionisation_potential)
            counters.n_penning += cascade.n_penning
            return PhotonCollisionResult(
                collision_type=PhotonCollisionType.EXCITATION,
                level=i_line,
                n_secondaries=len(cascade.products),
                products=cascade.products,
            )

        term = locate_level(table.cumulative[i_e], r)
        collision_type = table.term_types[term]
        counters.photon_by_type[collision_type] += 1
        result = PhotonCollisionResult(collision_type=collision_type, level=term)
        if collision_type == PhotonCollisionType.IONISATION:
            gas = table.term_gases[term]
            result.secondary_energy = max(energy - ionisation_potentials[gas], SMALL)
            result.n_secondaries = 1
        result.cos_theta = 2. * rng.uniform() - 1.
        return result
