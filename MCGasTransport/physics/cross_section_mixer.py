"""Combines per-gas cross-sections into a table of electron collision rates."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import torch

from .constants import (
    ATOMIC_MASS_UNIT_EV,
    ELECTRON_MASS,
    HIGH_ENERGY_THRESHOLD,
    MAX_LEVELS,
    N_ENERGY_STEPS,
    N_ENERGY_STEPS_LOG,
    RELATIVISTIC_THRESHOLD,
    SMALL,
    SPEED_OF_LIGHT,
    number_density,
)
from .cross_section_database import (
    CrossSectionProvider,
    CrossSectionRequest,
    GasCrossSections,
    PhysicsParameters,
)
from .gas_numbers import get_gas_number
from .kinematics import angular_parameters
from ..core.data_models import CollisionLevel, CollisionType, RateTable, ScatteringModel
from ..utils.logging import get_logger
from ..utils.validation import CapacityError


logger = get_logger('physics.mixer')


def classify_inelastic(gas: str, description: str, threshold: float) -> CollisionType:
    """Classify an inelastic cross-section term by its description.

    Terms whose description starts with 'EX' (optionally after one
    character) are excitations, as are all N2 terms above 6 eV. Terms with
    a negative threshold are superelastic.
    """
    if description[1:3] == 'EX' or description[0:2] == 'EX' or (gas == 'N2' and threshold > 6.):
        return CollisionType.EXCITATION
    if threshold < 0.:
        return CollisionType.SUPERELASTIC
    return CollisionType.INELASTIC


def relativistic_factor(energies: np.ndarray) -> np.ndarray:
    """Ratio of relativistic to non-relativistic velocity above 1 keV."""
    re = energies / ELECTRON_MASS
    factor = np.sqrt(1. + 0.5 * re) / (1. + re)
    return np.where(energies > RELATIVISTIC_THRESHOLD, factor, 1.)


@dataclass
class MixtureTables:
    """Result of a mixer build.

    Attributes:
        levels: Collision levels, ordered by gas, then elastic, ionisation,
            attachment and inelastic terms
        table: Electron collision rate table
        gases: Gas names of the mixture components
        fractions: Mole fractions of the components
        mass_factors: Recoil parameter r per gas
        ionisation_potentials: Ionisation potential per gas in eV
        opal_beaty: Opal-Beaty parameter of the first ionisation term per gas
        min_ionisation_potential: Lowest ionisation potential in the mixture in eV
        density: Number density in cm-3
    """
    levels: List[CollisionLevel]
    table: RateTable
    gases: List[str]
    fractions: List[float]
    mass_factors: List[float]
    ionisation_potentials: List[float]
    opal_beaty: List[float]
    min_ionisation_potential: float
    density: float
    negative_bins: Dict[int, int] = field(default_factory=dict)


class CrossSectionMixer:
    """Builds electron collision-rate tables for a gas mixture.

    The linear grid covers [0, min(eFinal, eHigh)] with fixed-width bins;
    above eHigh a logarithmic grid extends the table to eFinal. Each bin
    stores the total collision rate and the cumulative probabilities of
    all levels, plus the angular distribution parameters per level.

    Attributes:
        provider: Source of raw cross-sections
        device: Device for tensor storage
    """

    def __init__(self, provider: CrossSectionProvider, device: str = 'cpu'):
        self.provider = provider
        self.device = device

    def build(
        self,
        composition: Dict[str, float],
        temperature: float,
        pressure: float,
        max_energy: float,
        anisotropic: bool = True,
        scaling: Optional[Dict[str, float]] = None,
        output_dir: Optional[Path] = None
    ) -> MixtureTables:
        """Build the collision-rate table.

        Args:
            composition: Normalised mole fractions keyed by gas name
            temperature: Temperature in K
            pressure: Pressure in Torr
            max_energy: Upper end of the table in eV
            anisotropic: Whether angular distribution parameters are requested
            scaling: Excitation scaling factor per gas name
            output_dir: Directory to write cs.txt to, if any

        Returns:
            MixtureTables with levels and rate table

        Raises:
            ConfigurationError: If a gas is unknown or not available
            CapacityError: If the number of levels exceeds MAX_LEVELS
        """
        scaling = scaling or {}
        gases = list(composition.keys())
        fractions = [composition[g] for g in gases]
        numbers = [get_gas_number(g) for g in gases]

        e_high = HIGH_ENERGY_THRESHOLD
        e_step = min(max_energy, e_high) / N_ENERGY_STEPS
        energies = (np.arange(N_ENERGY_STEPS) + 0.5) * e_step
        use_log = max_energy > e_high
        log_step = 0.
        log_energies = None
        if use_log:
            r_log = (max_energy / e_high) ** (1. / N_ENERGY_STEPS_LOG)
            log_step = float(np.log(r_log))
            log_energies = e_high * r_log ** (np.arange(N_ENERGY_STEPS_LOG) + 1.)

        logger.info(
            f"Creating table of collision rates with {N_ENERGY_STEPS} linear "
            f"energy steps between 0 and {min(max_energy, e_high):g} eV"
        )
        if use_log:
            logger.info(
                f"{N_ENERGY_STEPS_LOG} logarithmic energy steps between "
                f"{e_high:g} and {max_energy:g} eV"
            )

        parameters = PhysicsParameters(temperature=temperature, pressure=pressure,
                                       anisotropic=anisotropic)
        density = number_density(pressure, temperature)
        prefactor = density * SPEED_OF_LIGHT * np.sqrt(2. / ELECTRON_MASS)

        levels: List[CollisionLevel] = []
        columns: List[np.ndarray] = []
        cuts: List[np.ndarray] = []
        pars: List[np.ndarray] = []
        log_columns: List[np.ndarray] = []
        log_cuts: List[np.ndarray] = []
        log_pars: List[np.ndarray] = []
        raw_columns: List[np.ndarray] = []
        mass_factors: List[float] = []
        ion_pots: List[float] = []
        opal_beaty: List[float] = []
        negative_bins: Dict[int, int] = {}

        for i_gas, (gas, number, fraction) in enumerate(zip(gases, numbers, fractions)):
            cs = self.provider.get_cross_sections(number, CrossSectionRequest(energies, parameters))
            cs.validate()
            cs_log = None
            if use_log:
                cs_log = self.provider.get_cross_sections(
                    number, CrossSectionRequest(log_energies, parameters))
                cs_log.validate()

            kept_ion = [j for j, t in enumerate(cs.ionisation_thresholds) if t <= max_energy]
            n_new = 1 + len(kept_ion) + cs.attachment.shape[1] + cs.inelastic.shape[1]
            if len(levels) + n_new > MAX_LEVELS:
                raise CapacityError(
                    f"Max. number of levels ({MAX_LEVELS}) exceeded when adding {gas}"
                )

            r = cs.mass_factor
            mass_factors.append(r)
            ion_pots.append(cs.ionisation_potential)
            opal_beaty.append(float(cs.opal_beaty[0]))
            van = fraction * prefactor
            scale = scaling.get(gas, 1.)

            mass_amu = (2. / cs.mass_ratio_energy) * ELECTRON_MASS / ATOMIC_MASS_UNIT_EV
            logger.debug(
                f"{cs.name}: mass {mass_amu:.3f} amu, "
                f"ionisation threshold {cs.ionisation_potential:.3f} eV"
            )

            terms = self._collect_terms(i_gas, gas, cs, kept_ion, r)
            for level, source, index, model in terms:
                levels.append(level)
                raw = self._column(cs, source, index)
                rate = raw * van
                if level.collision_type in (CollisionType.INELASTIC, CollisionType.EXCITATION,
                                            CollisionType.SUPERELASTIC):
                    rate = rate * scale
                raw_columns.append(raw)
                columns.append(rate)
                cut, par = self._angular(cs, source, index, model)
                cuts.append(cut)
                pars.append(par)
                if use_log:
                    log_rate = self._column(cs_log, source, index) * van
                    if level.collision_type in (CollisionType.INELASTIC, CollisionType.EXCITATION,
                                                CollisionType.SUPERELASTIC):
                        log_rate = log_rate * scale
                    log_columns.append(log_rate)
                    log_cut, log_par = self._angular(cs_log, source, index, model)
                    log_cuts.append(log_cut)
                    log_pars.append(log_par)

            n_exc = sum(1 for t in terms if t[0].collision_type == CollisionType.EXCITATION)
            n_sup = sum(1 for t in terms if t[0].collision_type == CollisionType.SUPERELASTIC)
            n_in = cs.inelastic.shape[1]
            if n_in > 0:
                logger.debug(
                    f"{n_in} inelastic terms ({n_exc} excitations, "
                    f"{n_sup} superelastic, {n_in - n_exc - n_sup} other)"
                )

        rates = np.stack(columns, axis=1)
        total, cumulative = self._normalise(rates, negative_bins)
        total = total * np.sqrt(energies) * relativistic_factor(energies)
        null_rate = float(total.max())

        if output_dir is not None:
            self._write_output(output_dir, energies, raw_columns, levels)

        table = RateTable(
            energy_final=max_energy,
            energy_high=e_high,
            energy_step=e_step,
            total=self._tensor(total),
            cumulative=self._tensor(cumulative),
            scattering_cut=self._tensor(np.stack(cuts, axis=1)),
            scattering_par=self._tensor(np.stack(pars, axis=1)),
        )

        if use_log:
            log_rates = np.stack(log_columns, axis=1)
            log_total, log_cumulative = self._normalise(log_rates, {})
            re = log_energies / ELECTRON_MASS
            log_total = log_total * np.sqrt(log_energies) * np.sqrt(1. + 0.5 * re) / (1. + re)
            null_rate = max(null_rate, float(log_total.max()))
            table.log_step = log_step
            table.log_total = self._tensor(np.log(np.maximum(log_total, SMALL)))
            table.log_cumulative = self._tensor(log_cumulative)
            table.log_scattering_cut = self._tensor(np.stack(log_cuts, axis=1))
            table.log_scattering_par = self._tensor(np.stack(log_pars, axis=1))

        table.null_collision_rate = null_rate

        for k, count in negative_bins.items():
            logger.warning(
                f"Negative collision rate for level {k} ({levels[k].description.strip()}) "
                f"in {count} energy bins, set to zero"
            )

        min_ion_pot = min(ion_pots)
        logger.info(
            f"Lowest ionisation threshold in the mixture: {min_ion_pot:g} eV "
            f"({gases[ion_pots.index(min_ion_pot)]})"
        )
        logger.info(f"{len(levels)} collision levels, null-collision rate {null_rate:.4g} ns-1")

        return MixtureTables(
            levels=levels,
            table=table,
            gases=gases,
            fractions=fractions,
            mass_factors=mass_factors,
            ionisation_potentials=ion_pots,
            opal_beaty=opal_beaty,
            min_ionisation_potential=min_ion_pot,
            density=density,
            negative_bins=negative_bins,
        )

    def _collect_terms(
        self,
        i_gas: int,
        gas: str,
        cs: GasCrossSections,
        kept_ion: List[int],
        r: float
    ) -> List[Tuple[CollisionLevel, str, int, int]]:
        """Levels of one gas with the source array and model of each."""
        terms = [(
            CollisionLevel(i_gas, gas, CollisionType.ELASTIC, cs.elastic_description,
                           0., 0., cs.elastic_model),
            'elastic', 0, cs.elastic_model,
        )]
        for j in kept_ion:
            threshold = float(cs.ionisation_thresholds[j])
            terms.append((
                CollisionLevel(i_gas, gas, CollisionType.IONISATION,
                               cs.ionisation_descriptions[j], threshold / r, threshold,
                               cs.ionisation_model, float(cs.opal_beaty[j])),
                'ionisation', j, cs.ionisation_model,
            ))
        for j in range(cs.attachment.shape[1]):
            terms.append((
                CollisionLevel(i_gas, gas, CollisionType.ATTACHMENT,
                               cs.attachment_descriptions[j], 0., 0.,
                               ScatteringModel.ISOTROPIC),
                'attachment', j, ScatteringModel.ISOTROPIC,
            ))
        for j in range(cs.inelastic.shape[1]):
            threshold = float(cs.inelastic_thresholds[j])
            description = cs.inelastic_descriptions[j]
            model = int(cs.inelastic_models[j])
            terms.append((
                CollisionLevel(i_gas, gas, classify_inelastic(gas, description, threshold),
                               description, threshold / r, threshold, model),
                'inelastic', j, model,
            ))
        return terms

    @staticmethod
    def _column(cs: GasCrossSections, source: str, index: int) -> np.ndarray:
        if source == 'elastic':
            return cs.elastic
        return getattr(cs, source)[:, index]

    @staticmethod
    def _angular(
        cs: GasCrossSections,
        source: str,
        index: int,
        model: int
    ) -> Tuple[np.ndarray, np.ndarray]:
        n = cs.n_energies
        if source == 'attachment':
            return np.ones(n), np.full(n, 0.5)
        if source == 'elastic':
            return angular_parameters(model, cs.elastic_angular)
        return angular_parameters(model, getattr(cs, source + '_angular')[:, index])

    @staticmethod
    def _normalise(
        rates: np.ndarray,
        negative_bins: Dict[int, int]
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Clamp negative rates, sum and build cumulative probabilities."""
        negative = rates < 0.
        if np.any(negative):
            for k in np.nonzero(negative.any(axis=0))[0]:
                negative_bins[int(k)] = negative_bins.get(int(k), 0) + int(negative[:, k].sum())
            rates = np.where(negative, 0., rates)
        total = rates.sum(axis=1)
        safe = np.where(total > 0., total, 1.)
        cumulative = np.cumsum(rates / safe[:, None], axis=1)
        return total, cumulative

    def _tensor(self, array: np.ndarray) -> torch.Tensor:
        return torch.as_tensor(np.ascontiguousarray(array), dtype=torch.float64,
                               device=self.device)

    @staticmethod
    def _write_output(
        output_dir: Path,
        energies: np.ndarray,
        raw_columns: List[np.ndarray],
        levels: List[CollisionLevel]
    ) -> None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        header = ['energy [eV] vs. cross-section [cm2]']
        header += [f'{lv.gas_name}: {lv.description.strip()}' for lv in levels]
        np.savetxt(output_dir / 'cs.txt', np.column_stack([energies] + raw_columns),
                   header='\n'.join(header))
        logger.info(f"Cross-sections written to {output_dir / 'cs.txt'}")
