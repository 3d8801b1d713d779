"""De-excitation channels of excited argon levels and cascade simulation."""

import math
from typing import Dict, List, Optional, Tuple

from . import argon_deexcitation_data as ar
from .constants import (
    ATOMIC_MASS_UNIT,
    BOHR_RADIUS,
    BOLTZMANN_CONSTANT,
    ELECTRON_MASS,
    ELECTRON_MASS_GRAMME,
    FINE_STRUCTURE_CONSTANT,
    MAX_CASCADE_STEPS,
    OSCILLATOR_TO_RATE,
    PI2,
    RYDBERG_ENERGY,
    SMALL,
    SPEED_OF_LIGHT,
)
from .optical_data import OpticalDataProvider
from .random_source import RandomSource
from ..core.data_models import (
    GROUND_STATE,
    CascadeResult,
    CollisionLevel,
    CollisionType,
    Deexcitation,
    DeexcitationChannelType,
    DeexcitationProduct,
    ProductType,
)
from ..utils.logging import get_logger
from ..utils.validation import ConsistencyError, UnknownLevelError


logger = get_logger('physics.deexcitation')

RAD = DeexcitationChannelType.RADIATIVE
COLL_ION = DeexcitationChannelType.COLLISIONAL_IONISING
COLL_NON_ION = DeexcitationChannelType.COLLISIONAL_NON_IONISING


def rate_constant_wk(
    energy: float,
    osc: float,
    pacs: float,
    r1: float,
    r2: float,
    temperature: float
) -> float:
    """Quenching rate constant from the Watanabe-Katsuura formula.

    Args:
        energy: Excitation energy in eV
        osc: Oscillator strength of the excited level
        pacs: Photoabsorption cross-section of the quencher at that energy in cm²
        r1: Recoil parameter of the excited gas
        r2: Recoil parameter of the quencher
        temperature: Temperature in K

    Returns:
        Rate constant in cm3 ns-1
    """
    m1 = ELECTRON_MASS_GRAMME / (r1 - 1.)
    m2 = ELECTRON_MASS_GRAMME / (r2 - 1.)
    m_reduced = (m1 * m2 / (m1 + m2)) / ATOMIC_MASS_UNIT
    u_a = (RYDBERG_ENERGY / energy) * osc
    u_q = (2. * RYDBERG_ENERGY / energy) * pacs / (
        4. * PI2 * FINE_STRUCTURE_CONSTANT * BOHR_RADIUS * BOHR_RADIUS)
    return 2.591e-19 * (u_a * u_q) ** 0.4 * (temperature / m_reduced) ** 0.3


def rate_constant_hard_sphere(
    radius1: float,
    radius2: float,
    r1: float,
    r2: float,
    temperature: float
) -> float:
    """Quenching rate constant from a hard-sphere cross-section.

    Returns:
        Rate constant in cm3 ns-1
    """
    r = radius1 + radius2
    sigma = r * r * math.pi
    m1 = ELECTRON_MASS / (r1 - 1.)
    m2 = ELECTRON_MASS / (r2 - 1.)
    m_reduced = m1 * m2 / (m1 + m2)
    vel = SPEED_OF_LIGHT * math.sqrt(
        8. * BOLTZMANN_CONSTANT * temperature / (math.pi * m_reduced))
    return sigma * vel


class DeexcitationGraph:
    """Builds de-excitation tables and follows de-excitation cascades.

    Each de-excitable level carries a list of decay channels: radiative
    transitions, collisional transfer to other excited levels, Penning or
    associative ionisation, and loss by quenching. After normalisation the
    channel probabilities are cumulative.

    Attributes:
        optical: Photoabsorption data of quenching gases
        max_steps: Maximum number of transitions followed in one cascade
    """

    def __init__(self, optical: OpticalDataProvider, max_steps: int = MAX_CASCADE_STEPS):
        self.optical = optical
        self.max_steps = max_steps

    def build(
        self,
        levels: List[CollisionLevel],
        gases: List[str],
        fractions: List[float],
        mass_factors: List[float],
        density: float,
        temperature: float
    ) -> List[Deexcitation]:
        """Set up the de-excitation channels of the mixture.

        The de-excitation index of each argon excitation level is stored on
        the level itself.

        Args:
            levels: Collision levels of the mixture
            gases: Gas names of the mixture components
            fractions: Mole fractions of the components
            mass_factors: Recoil parameter per gas
            density: Number density in cm-3
            temperature: Temperature in K

        Returns:
            List of de-excitation entries

        Raises:
            UnknownLevelError: If an argon excitation level is not known
        """
        for level in levels:
            level.deexcitation = None

        i_ar = -1
        level_map: Dict[str, int] = {}
        for i, level in enumerate(levels):
            if level.collision_type != CollisionType.EXCITATION or level.gas_name != 'Ar':
                continue
            if i_ar < 0:
                i_ar = level.gas
            key = ar.level_key(level.description)
            if key not in ar.ARGON_LEVEL_NAMES:
                raise UnknownLevelError(f"Unknown Ar excitation level: {key!r}")
            level_map[ar.ARGON_LEVEL_NAMES[key]] = i

        labels = sorted(level_map)
        index: Dict[str, int] = {label: j for j, label in enumerate(labels)}
        deexcitations: List[Deexcitation] = []
        for label in labels:
            level = levels[level_map[label]]
            dxc = Deexcitation(
                gas=level.gas,
                level=level_map[label],
                label=label,
                energy=level.energy_loss * mass_factors[level.gas],
            )
            self._add_radiative(dxc, index)
            deexcitations.append(dxc)
            level.deexcitation = len(deexcitations) - 1

        logger.debug(f"Found {len(deexcitations)} levels with radiative de-excitation data")

        if i_ar >= 0:
            for name in (ar.ARGON_DIMER, ar.ARGON_EXCIMER):
                index[name] = len(deexcitations)
                deexcitations.append(Deexcitation(
                    gas=i_ar, level=None, label=name, energy=ar.ARGON_DIMER_ENERGY))
            n_ar = density * fractions[i_ar]
            for dxc in deexcitations:
                self._add_argon_collisional(dxc, index, n_ar)

            for quencher, data in ar.ARGON_QUENCHERS.items():
                if quencher not in gases:
                    continue
                i_q = gases.index(quencher)
                self._add_quenching(
                    deexcitations, data, density * fractions[i_q],
                    mass_factors[i_ar], mass_factors[i_q], temperature,
                )

        for dxc in deexcitations:
            dxc.normalise()
            if dxc.rate > 0.:
                logger.debug(
                    f"{dxc.label}: energy {dxc.energy:.3f} eV, lifetime {1. / dxc.rate:.3f} ns, "
                    f"{len(dxc.channels)} channels"
                )
        return deexcitations

    @staticmethod
    def _target(index: Dict[str, int], source: str, target: Optional[str]) -> Optional[int]:
        if target is ar.GROUND:
            return GROUND_STATE
        if target not in index:
            logger.warning(
                f"De-excitation target {target} of {source} not present in the mixture, "
                "channel skipped"
            )
            return None
        return index[target]

    def _add_radiative(self, dxc: Deexcitation, index: Dict[str, int]) -> None:
        if dxc.label == 'Ar_Higher':
            for target in ar.ARGON_HIGHER_TARGETS:
                final = self._target(index, dxc.label, target)
                if final is not None:
                    dxc.add_channel(ar.ARGON_HIGHER_RATE, final, COLL_NON_ION)
            return
        osc, transitions = ar.ARGON_RADIATIVE[dxc.label]
        dxc.osc = osc
        for rate, target in transitions:
            if rate == ar.RESONANCE:
                rate = OSCILLATOR_TO_RATE * dxc.energy * dxc.energy * osc
            final = self._target(index, dxc.label, target)
            if final is not None:
                dxc.add_channel(rate, final, RAD)

    def _add_argon_collisional(self, dxc: Deexcitation, index: Dict[str, int], n_ar: float) -> None:
        label = dxc.label

        def add(rate: float, target: str, channel_type=COLL_NON_ION) -> None:
            final = self._target(index, label, target)
            if final is not None:
                dxc.add_channel(rate, final, channel_type)

        if label in ar.ARGON_METASTABLE_TRANSFER:
            k3b, k2b = ar.ARGON_METASTABLE_TRANSFER[label]
            add(k3b * n_ar * n_ar, ar.ARGON_EXCIMER)
            add(k2b * n_ar, 'Ar_1S4')
        for k, target in ar.ARGON_4P_MIXING.get(label, []):
            add(k * n_ar, target)
        if label in ar.ARGON_4P_TO_4S:
            for target in ar.LEVELS_4S:
                add(0.25 * ar.ARGON_4P_TO_4S[label] * n_ar, target)
        if label in ar.ARGON_3D5S_LEVELS or label in ar.ARGON_HIGH_LEVELS:
            for target in ar.LEVELS_4P:
                add(0.1 * ar.ARGON_TO_4P_RATE * n_ar, target)
        if label in ar.ARGON_HIGH_LEVELS:
            add(ar.ARGON_HORNBECK_MOLNAR * n_ar, ar.ARGON_DIMER, COLL_ION)

    def _photoabsorption(self, gas: str, energy: float) -> Tuple[float, float]:
        if not self.optical.is_available(gas):
            return 0., 0.
        pacs, eta = self.optical.get_photoabsorption(gas, energy)
        return float(pacs), float(eta)

    def _add_quenching(
        self,
        deexcitations: List[Deexcitation],
        data: dict,
        n_q: float,
        r_ar: float,
        r_q: float,
        temperature: float
    ) -> None:
        if not self.optical.is_available(data['optics']):
            logger.warning(
                f"Photoabsorption data for {data['optics']} not available, "
                "estimated quenching rates set to zero"
            )
        for dxc in deexcitations:
            pacs, eta = self._photoabsorption(data['optics'], dxc.energy)
            p_wk = eta ** 0.4
            if dxc.label in data['rates']:
                k, probability = data['rates'][dxc.label]
                if probability is None:
                    dxc.add_channel(k * n_q)
                elif probability == ar.WK:
                    dxc.add_penning(k * n_q, p_wk)
                else:
                    dxc.add_penning(k * n_q, probability)
                continue

            if dxc.osc > 0.:
                k = rate_constant_wk(dxc.energy, dxc.osc, pacs, r_ar, r_q, temperature)
            elif dxc.label in ar.ARGON_NON_RESONANT_3D:
                k = rate_constant_hard_sphere(ar.ARGON_RADIUS_3D, data['radius'],
                                              r_ar, r_q, temperature)
            elif dxc.label in ar.ARGON_NON_RESONANT_5S:
                k = rate_constant_hard_sphere(ar.ARGON_RADIUS_5S, data['radius'],
                                              r_ar, r_q, temperature)
            else:
                continue
            if data['penning_wk']:
                dxc.add_penning(k * n_q, p_wk)
            else:
                dxc.add_channel(k * n_q)

    @staticmethod
    def validate(deexcitations: List[Deexcitation]) -> None:
        """Check the channel lists of all entries.

        Raises:
            ConsistencyError: If a channel points outside the table, has an
                invalid type, or the cumulative probabilities are not
                non-decreasing up to one
        """
        n = len(deexcitations)
        for dxc in deexcitations:
            previous = 0.
            for channel in dxc.channels:
                if channel.final != GROUND_STATE and not 0 <= channel.final < n:
                    raise ConsistencyError(
                        f"{dxc.label}: final level {channel.final} out of range")
                if not isinstance(channel.channel_type, DeexcitationChannelType):
                    raise ConsistencyError(
                        f"{dxc.label}: invalid channel type {channel.channel_type}")
                if dxc.rate > 0. and channel.probability < previous - 1e-12:
                    raise ConsistencyError(
                        f"{dxc.label}: cumulative probabilities are not monotonic")
                previous = channel.probability
            if dxc.rate > 0. and dxc.channels and abs(previous - 1.) > 1e-9:
                raise ConsistencyError(
                    f"{dxc.label}: branching ratios sum to {previous}")

    def cascade(
        self,
        deexcitations: List[Deexcitation],
        start: int,
        rng: RandomSource,
        min_ionisation_potential: float
    ) -> CascadeResult:
        """Follow the de-excitation cascade of an excited level.

        Args:
            deexcitations: De-excitation table
            start: Index of the initial de-excitation entry
            rng: Random source
            min_ionisation_potential: Lowest ionisation potential in the mixture in eV

        Returns:
            CascadeResult with the emitted products in time order
        """
        result = CascadeResult(final_level=start)
        t = 0.
        i_level = start
        steps = 0
        while 0 <= i_level < len(deexcitations):
            dxc = deexcitations[i_level]
            if dxc.rate <= 0. or not dxc.channels:
                # Dead end
                result.final_level = i_level
                return result
            steps += 1
            if steps > self.max_steps:
                logger.warning(
                    f"De-excitation cascade from {deexcitations[start].label} exceeded "
                    f"{self.max_steps} steps, stopped at {dxc.label}"
                )
                result.final_level = i_level
                return result

            t += -math.log(rng.uniform_pos()) / dxc.rate
            f_level = GROUND_STATE
            channel_type = RAD
            r = rng.uniform()
            for channel in dxc.channels:
                if r <= channel.probability:
                    f_level = channel.final
                    channel_type = channel.channel_type
                    break

            if channel_type == RAD:
                if f_level >= 0:
                    energy = max(dxc.energy - deexcitations[f_level].energy, SMALL)
                    result.products.append(
                        DeexcitationProduct(t, 0., ProductType.PHOTON, energy))
                    i_level = f_level
                    continue
                delta = self._line_shift(dxc, rng)
                result.products.append(
                    DeexcitationProduct(t, 0., ProductType.PHOTON, dxc.energy + delta))
                result.final_level = i_level
                return result

            if channel_type == COLL_ION:
                result.n_penning += 1
                if f_level >= 0:
                    # Associative ionisation
                    energy = max(dxc.energy - deexcitations[f_level].energy, SMALL)
                    result.products.append(
                        DeexcitationProduct(t, 0., ProductType.ELECTRON, energy))
                    i_level = f_level
                    continue
                # Penning ionisation
                energy = max(dxc.energy - min_ionisation_potential, SMALL)
                result.products.append(
                    DeexcitationProduct(t, 0., ProductType.ELECTRON, energy))
                result.final_level = i_level
                return result

            # Collisional, non-ionising
            i_level = f_level
            result.final_level = f_level

        return result

    @staticmethod
    def _line_shift(dxc: Deexcitation, rng: RandomSource) -> float:
        """Sample the photon energy offset of a resonance line."""
        if dxc.width <= 0.:
            return 0.
        delta = rng.voigt(0., dxc.doppler_width, dxc.pressure_width)
        while dxc.energy + delta < SMALL or abs(delta) >= dxc.width:
            delta = rng.voigt(0., dxc.doppler_width, dxc.pressure_width)
        return delta
