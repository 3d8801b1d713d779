"""Gas collision session: configuration, lazy table rebuilds and queries."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .data_models import (
    GROUND_STATE,
    CascadeResult,
    CollisionCounters,
    CollisionLevel,
    CollisionResult,
    CollisionType,
    Deexcitation,
    PhotonCollisionResult,
    PhotonRateTable,
    SplittingFunction,
)
from ..physics.collision_sampler import CollisionSampler
from ..physics.constants import RANGE_HEADROOM, SMALL
from ..physics.cross_section_database import CrossSectionProvider, HDF5CrossSectionDatabase
from ..physics.cross_section_mixer import CrossSectionMixer, MixtureTables
from ..physics.deexcitation_graph import DeexcitationGraph
from ..physics.gas_numbers import get_gas_number
from ..physics.optical_data import HDF5OpticalData, OpticalDataProvider
from ..physics.photon_collision_table import PhotonCollisionTable
from ..physics.random_source import RandomSource
from ..physics.secondary_spectrum import SecondaryEnergySampler
from ..utils.config import GasConfig
from ..utils.logging import get_logger
from ..utils.validation import (
    ConfigurationError,
    ConsistencyError,
    normalise_fractions,
    validate_config,
    validate_energy,
    validate_positive,
    validate_probability,
)


logger = get_logger('session')


class GasCollisionSession:
    """Electron and photon collision treatment of a gas mixture.

    The session owns the mixture configuration and the collision tables
    built from it. Any change of the configuration marks the tables as
    outdated; they are rebuilt on the next query. A failed rebuild leaves
    the previous tables in place.

    Attributes:
        config: Configuration the session was created from
        provider: Source of electron cross-sections
        optical: Source of photoabsorption data
        device: Device of the rate tables
        rng: Random source of the session
        counters: Collision statistics
    """

    def __init__(
        self,
        config: Optional[GasConfig] = None,
        provider: Optional[CrossSectionProvider] = None,
        optical: Optional[OpticalDataProvider] = None
    ):
        """Initialize GasCollisionSession.

        Args:
            config: Session configuration (default configuration if None)
            provider: Cross-section provider (HDF5 database from the config if None)
            optical: Photoabsorption data (HDF5 database from the config if None)

        Raises:
            ConfigurationError: If no data source is available
        """
        if config is None:
            config = GasConfig.get_default_config()
        validate_config(config)
        self.config = config
        self.device = config.device

        if provider is None or optical is None:
            if not config.cross_section_database_path:
                raise ConfigurationError(
                    "No cross-section database path provided and default database not found. "
                    "Please generate a gas database or provide explicit data sources."
                )
            if provider is None:
                provider = HDF5CrossSectionDatabase(config.cross_section_database_path)
            if optical is None:
                optical = HDF5OpticalData(config.cross_section_database_path)
        self.provider = provider
        self.optical = optical

        self.rng = RandomSource(config.random_seed)
        if config.random_seed is not None:
            logger.info(f"Random seed set to {config.random_seed}")

        self.mixer = CrossSectionMixer(provider, device=self.device)
        self.graph = DeexcitationGraph(optical, max_steps=config.max_cascade_steps)
        self.photon_builder = PhotonCollisionTable(optical, device=self.device)
        self.secondary_sampler = SecondaryEnergySampler(SplittingFunction(config.splitting_function))
        self.sampler = CollisionSampler(self.secondary_sampler, self.graph,
                                        anisotropic=config.anisotropic_scattering)
        self.counters = CollisionCounters()

        self.composition: Dict[str, float] = {}
        self.excitation_scaling: Dict[str, float] = {}
        self._penning_probability = 0.
        self._penning_distance = 0.
        self._penning_by_gas: Dict[str, Tuple[float, float]] = {}
        self.set_composition(config.gases)
        self.temperature = config.temperature
        self.pressure = config.pressure
        self.max_electron_energy = config.max_electron_energy
        self.max_photon_energy = config.max_photon_energy
        self.auto_adjust = config.auto_adjust_energy_range
        self.anisotropic = config.anisotropic_scattering
        self.use_deexcitation = False
        self.use_radiation_trapping = config.radiation_trapping
        self.use_penning = False
        self.output_dir: Optional[Path] = None

        self.tables: Optional[MixtureTables] = None
        self.deexcitations: Optional[List[Deexcitation]] = None
        self.photon_table: Optional[PhotonRateTable] = None
        self._dirty = True

        for gas, factor in (config.excitation_scaling or {}).items():
            self.set_excitation_scaling_factor(factor, gas)
        if config.deexcitation:
            self.enable_deexcitation()
        if config.penning_probability is not None:
            self.enable_penning_transfer(config.penning_probability, config.penning_distance)
        for gas, (probability, distance) in (config.penning_by_gas or {}).items():
            self.enable_penning_transfer(probability, distance, gas)
        if config.cross_section_output:
            self.enable_cross_section_output(config.cross_section_output)

        logger.info(
            f"GasCollisionSession initialized: {self._mixture_string()}, "
            f"T = {self.temperature} K, p = {self.pressure} Torr, device={self.device}"
        )

    @classmethod
    def from_yaml(
        cls,
        yaml_path: str,
        provider: Optional[CrossSectionProvider] = None,
        optical: Optional[OpticalDataProvider] = None
    ) -> 'GasCollisionSession':
        """Create a session from a YAML configuration file."""
        return cls(GasConfig.from_yaml(yaml_path), provider=provider, optical=optical)

    def _mixture_string(self) -> str:
        return ', '.join(f"{gas} {100. * f:g}%" for gas, f in self.composition.items())

    @property
    def is_changed(self) -> bool:
        """Whether the tables need to be rebuilt before the next query."""
        return self._dirty

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_composition(self, gases: Dict[str, float]) -> None:
        """Set the gas mixture.

        Args:
            gases: Fractions keyed by gas name, normalised to unity

        Raises:
            ConfigurationError: If a gas is unknown or the fractions are invalid
        """
        for name in gases:
            get_gas_number(name)
        composition = normalise_fractions(gases)
        self.composition = composition
        self._penning_by_gas = {
            gas: values for gas, values in self._penning_by_gas.items() if gas in composition
        }
        self.excitation_scaling = {
            gas: factor for gas, factor in self.excitation_scaling.items() if gas in composition
        }
        self._dirty = True

    def set_temperature(self, temperature: float) -> None:
        self.temperature = validate_positive(temperature, 'temperature')
        self._dirty = True

    def set_pressure(self, pressure: float) -> None:
        self.pressure = validate_positive(pressure, 'pressure')
        self._dirty = True

    def set_max_electron_energy(self, energy: float) -> None:
        """Set the upper end of the electron rate table.

        Raises:
            ConfigurationError: If the energy is not above the floor value
        """
        if energy <= SMALL:
            raise ConfigurationError(f"Maximum electron energy must be positive, got {energy}")
        self.max_electron_energy = float(energy)
        self._dirty = True

    def set_max_photon_energy(self, energy: float) -> None:
        """Set the upper end of the photon rate table.

        Raises:
            ConfigurationError: If the energy is not above the floor value
        """
        if energy <= SMALL:
            raise ConfigurationError(f"Maximum photon energy must be positive, got {energy}")
        self.max_photon_energy = float(energy)
        self._dirty = True

    def enable_energy_range_adjustment(self) -> None:
        self.auto_adjust = True

    def disable_energy_range_adjustment(self) -> None:
        self.auto_adjust = False

    def enable_anisotropic_scattering(self) -> None:
        self.anisotropic = True
        self._dirty = True

    def disable_anisotropic_scattering(self) -> None:
        self.anisotropic = False
        self._dirty = True

    def set_splitting_function(self, name: str) -> None:
        """Select the secondary electron energy model.

        Args:
            name: 'opal_beaty', 'green_sawada' or 'flat'

        Raises:
            ConfigurationError: If the name is not a known model
        """
        try:
            function = SplittingFunction(name)
        except ValueError:
            raise ConfigurationError(f"Unknown splitting function: {name}") from None
        self.secondary_sampler.splitting_function = function
        if self.tables is not None:
            self.secondary_sampler.setup(self.tables.gases, self.tables.opal_beaty,
                                         self.tables.ionisation_potentials)

    def enable_deexcitation(self) -> None:
        """Follow de-excitation cascades of excited levels.

        Simplified Penning transfer is switched off.
        """
        if self.use_penning:
            logger.info("Penning transfer will be switched off")
        self.use_penning = False
        self.use_deexcitation = True
        self._dirty = True

    def disable_deexcitation(self) -> None:
        self.use_deexcitation = False
        self._dirty = True

    def enable_radiation_trapping(self) -> None:
        self.use_radiation_trapping = True
        if not self.use_deexcitation:
            logger.warning("Radiation trapping is enabled but de-excitation is not")

    def disable_radiation_trapping(self) -> None:
        self.use_radiation_trapping = False

    def enable_penning_transfer(
        self,
        probability: float,
        distance: float = 0.,
        gas: Optional[str] = None
    ) -> None:
        """Enable the simplified Penning transfer model.

        Args:
            probability: Transfer probability of excitations above the lowest
                ionisation potential
            distance: Mean distance of the Penning electron in cm
            gas: Apply only to the excitation levels of this gas

        Raises:
            ConfigurationError: If the probability is outside [0, 1] or the
                gas is not part of the mixture
        """
        probability = validate_probability(probability, 'Penning transfer probability')
        if distance < SMALL:
            distance = 0.
        if gas is None:
            self._penning_probability = probability
            self._penning_distance = distance
            self._penning_by_gas = {}
            logger.info(
                f"Global Penning transfer parameters set to r = {probability}, "
                f"lambda = {distance} cm"
            )
        else:
            get_gas_number(gas)
            if gas not in self.composition:
                raise ConfigurationError(f"Gas {gas} is not part of the present gas mixture")
            self._penning_by_gas[gas] = (probability, distance)
            logger.info(
                f"Penning transfer parameters for {gas} set to r = {probability}, "
                f"lambda = {distance} cm"
            )
        if self.use_deexcitation:
            logger.info("De-excitation handling will be switched off")
            self.use_deexcitation = False
        self.use_penning = True
        self._apply_penning()

    def disable_penning_transfer(self, gas: Optional[str] = None) -> None:
        """Disable the simplified Penning transfer, globally or for one gas.

        Raises:
            ConfigurationError: If the gas is not part of the mixture
        """
        if gas is None:
            self._penning_probability = 0.
            self._penning_distance = 0.
            self._penning_by_gas = {}
            self.use_penning = False
        else:
            get_gas_number(gas)
            if gas not in self.composition:
                raise ConfigurationError(f"Gas {gas} is not part of the present gas mixture")
            self._penning_by_gas[gas] = (0., 0.)
            if not any(self._penning_parameters(g)[0] > SMALL for g in self.composition):
                logger.info("Penning transfer globally switched off")
                self.use_penning = False
        self._apply_penning()

    def set_excitation_scaling_factor(self, factor: float, gas: str) -> None:
        """Scale the inelastic cross-sections of a gas.

        Raises:
            ConfigurationError: If the factor is not positive or the gas is not
                part of the mixture
        """
        validate_positive(factor, 'excitation scaling factor')
        get_gas_number(gas)
        if gas not in self.composition:
            raise ConfigurationError(f"Gas {gas} is not part of the present gas mixture")
        self.excitation_scaling[gas] = float(factor)
        self._dirty = True

    def enable_cross_section_output(self, directory: str = '.') -> None:
        """Write cs.txt and csgamma.txt to a directory on every rebuild."""
        self.output_dir = Path(directory)
        self._dirty = True

    def disable_cross_section_output(self) -> None:
        self.output_dir = None

    def set_random_seed(self, seed: int) -> None:
        self.rng.seed(seed)

    # ------------------------------------------------------------------
    # Table construction
    # ------------------------------------------------------------------

    def initialise(self) -> None:
        """Build the collision tables if the configuration has changed.

        Raises:
            ConfigurationError: If a gas is unknown or has no cross-sections
            CapacityError: If the mixture has too many levels
            UnknownLevelError: If an argon excitation level is not known
        """
        if not self._dirty:
            logger.debug("Nothing changed, tables are up to date")
            return
        self._rebuild()

    def _rebuild(self) -> None:
        gases = list(self.composition.keys())
        tables = self.mixer.build(
            self.composition,
            self.temperature,
            self.pressure,
            self.max_electron_energy,
            anisotropic=self.anisotropic,
            scaling=self.excitation_scaling,
            output_dir=self.output_dir,
        )

        use_deexcitation = self.use_deexcitation
        deexcitations = None
        if use_deexcitation:
            deexcitations = self.graph.build(
                tables.levels, gases, tables.fractions, tables.mass_factors,
                tables.density, self.temperature,
            )
            try:
                self.graph.validate(deexcitations)
            except ConsistencyError as e:
                logger.error(f"Inconsistent de-excitation table: {e}")
                logger.error("De-excitation handling will be switched off")
                use_deexcitation = False
                deexcitations = None
                for level in tables.levels:
                    level.deexcitation = None

        photon_table = None
        try:
            photon_table = self.photon_builder.build(
                gases, tables.fractions, tables.mass_factors, tables.density,
                self.temperature, self.max_photon_energy,
                deexcitations=deexcitations, output_dir=self.output_dir,
            )
        except ConfigurationError as e:
            logger.error(f"Photon collision table not available: {e}")
            if use_deexcitation:
                logger.error("De-excitation handling will be switched off")
                use_deexcitation = False
                deexcitations = None
                for level in tables.levels:
                    level.deexcitation = None

        self.tables = tables
        self.deexcitations = deexcitations
        self.photon_table = photon_table
        self.use_deexcitation = use_deexcitation
        self.secondary_sampler.setup(gases, tables.opal_beaty, tables.ionisation_potentials)
        self._apply_penning()
        self.counters.reset_electron(len(tables.levels))
        self._dirty = False

    def _penning_parameters(self, gas: str) -> Tuple[float, float]:
        if gas in self._penning_by_gas:
            return self._penning_by_gas[gas]
        return self._penning_probability, self._penning_distance

    def _apply_penning(self) -> None:
        if self.tables is None:
            return
        for level in self.tables.levels:
            level.penning_probability = 0.
            level.penning_distance = 0.
            if not self.use_penning or level.collision_type != CollisionType.EXCITATION:
                continue
            level.penning_probability, level.penning_distance = \
                self._penning_parameters(level.gas_name)

    def _update(self) -> MixtureTables:
        if self._dirty:
            self._rebuild()
        self.sampler.anisotropic = self.anisotropic
        self.sampler.use_deexcitation = self.use_deexcitation
        self.sampler.use_penning = self.use_penning
        return self.tables

    def _check_electron_range(self, energy: float) -> None:
        validate_energy(energy)
        if energy <= self.max_electron_energy:
            return
        if self.auto_adjust:
            logger.warning(
                f"Electron energy ({energy} eV) exceeds the current energy range "
                f"({self.max_electron_energy} eV), increasing energy range to "
                f"{RANGE_HEADROOM * energy} eV"
            )
            self.set_max_electron_energy(RANGE_HEADROOM * energy)
        else:
            logger.warning(
                f"Electron energy ({energy} eV) exceeds the current energy range "
                f"({self.max_electron_energy} eV), using the last bin"
            )

    def _check_photon_range(self, energy: float) -> None:
        validate_energy(energy)
        if energy > self.max_photon_energy and self.auto_adjust:
            logger.warning(
                f"Photon energy ({energy} eV) exceeds the current energy range "
                f"({self.max_photon_energy} eV), increasing energy range to "
                f"{RANGE_HEADROOM * energy} eV"
            )
            self.set_max_photon_energy(RANGE_HEADROOM * energy)

    def _line_table(self) -> Optional[List[Deexcitation]]:
        if self.use_deexcitation and self.use_radiation_trapping and self.deexcitations:
            return self.deexcitations
        return None

    # ------------------------------------------------------------------
    # Electron queries
    # ------------------------------------------------------------------

    def get_null_collision_rate(self, energy: Optional[float] = None) -> float:
        """Upper bound of the total electron collision rate in ns-1.

        Args:
            energy: If given, the table range is extended to cover this energy
        """
        if energy is not None:
            self._check_electron_range(energy)
        return self._update().table.null_collision_rate

    def get_collision_rate(self, energy: float) -> float:
        """Total electron collision rate at an energy in ns-1."""
        self._check_electron_range(energy)
        return self._update().table.total_rate(energy)

    def get_level_collision_rate(self, energy: float, level: int) -> float:
        """Collision rate of a single level at an energy in ns-1."""
        self._check_electron_range(energy)
        tables = self._update()
        self._check_level(level)
        return tables.table.level_rate(energy, level)

    def sample_electron_collision(
        self,
        energy: float,
        direction: Tuple[float, float, float] = (0., 0., 1.)
    ) -> CollisionResult:
        """Sample the collision of an electron.

        Args:
            energy: Electron energy in eV
            direction: Direction of the electron (dx, dy, dz)

        Returns:
            CollisionResult

        Raises:
            InvalidEnergyError: If the energy is not positive
        """
        self._check_electron_range(energy)
        tables = self._update()
        return self.sampler.sample(tables, self.deexcitations, energy, direction,
                                   self.rng, self.counters)

    def compute_deexcitation(self, level: int) -> CascadeResult:
        """Follow the de-excitation cascade of an excited collision level.

        Args:
            level: Index of the collision level

        Returns:
            CascadeResult whose final level is a collision-level index
            (GROUND_STATE for the ground state or a pseudo-level)

        Raises:
            ConfigurationError: If de-excitation is disabled or the level
                cannot de-excite
        """
        tables = self._update()
        if not self.use_deexcitation or self.deexcitations is None:
            raise ConfigurationError("De-excitation is not enabled")
        self._check_level(level)
        index = tables.levels[level].deexcitation
        if index is None:
            raise ConfigurationError(f"Level {level} is not de-excitable")
        result = self.graph.cascade(self.deexcitations, index, self.rng,
                                    tables.min_ionisation_potential)
        self.counters.n_penning += result.n_penning
        if result.final_level >= 0:
            final = self.deexcitations[result.final_level].level
            result.final_level = GROUND_STATE if final is None else final
        return result

    # ------------------------------------------------------------------
    # Photon queries
    # ------------------------------------------------------------------

    def _photon_table(self) -> PhotonRateTable:
        self._update()
        if self.photon_table is None:
            raise ConfigurationError("Photon collision table is not available")
        return self.photon_table

    def get_photon_collision_rate(self, energy: float) -> float:
        """Photon collision rate at an energy in ns-1."""
        self._check_photon_range(energy)
        table = self._photon_table()
        return self.photon_builder.rate(table, energy, self._line_table())

    def sample_photon_collision(self, energy: float) -> PhotonCollisionResult:
        """Sample the collision of a photon.

        Raises:
            InvalidEnergyError: If the energy is not positive
            ConfigurationError: If photoabsorption data are not available
        """
        self._check_photon_range(energy)
        table = self._photon_table()
        return self.photon_builder.sample(
            table, energy, self.rng, self.tables.ionisation_potentials, self.counters,
            deexcitations=self._line_table(), graph=self.graph,
            min_ionisation_potential=self.tables.min_ionisation_potential,
        )

    # ------------------------------------------------------------------
    # Counters and inspection
    # ------------------------------------------------------------------

    def reset_collision_counters(self) -> None:
        n_levels = len(self.tables.levels) if self.tables is not None else 0
        self.counters.reset(n_levels)

    def get_number_of_electron_collisions(self) -> int:
        return self.counters.n_electron_collisions

    def get_number_of_electron_collisions_by_type(self) -> Dict[CollisionType, int]:
        return {t: int(self.counters.electron_by_type[t]) for t in CollisionType}

    def get_number_of_electron_collisions_by_level(self, level: int) -> int:
        self._check_level(level)
        return int(self.counters.electron_by_level[level])

    def get_number_of_penning_transfers(self) -> int:
        return self.counters.n_penning

    def get_number_of_photon_collisions(self) -> Tuple[int, int, int]:
        """Numbers of (all, ionising, inelastic) photon collisions."""
        by_type = self.counters.photon_by_type
        return self.counters.n_photon_collisions, int(by_type[1]), int(by_type[2])

    @property
    def number_of_levels(self) -> int:
        return len(self._update().levels)

    def get_level(self, level: int) -> CollisionLevel:
        """Collision level of the mixture by index."""
        tables = self._update()
        self._check_level(level)
        return tables.levels[level]

    def _check_level(self, level: int) -> None:
        n = len(self.tables.levels) if self.tables is not None else 0
        if level < 0 or level >= n:
            raise ConfigurationError(f"Level index {level} out of range (0 - {n - 1})")

    def describe_gas(self) -> Dict:
        """Summary of the mixture and its collision levels.

        Returns:
            Dictionary with mixture, conditions and level descriptions
        """
        tables = self._update()
        return {
            'composition': dict(self.composition),
            'temperature': self.temperature,
            'pressure': self.pressure,
            'density': tables.density,
            'max_electron_energy': self.max_electron_energy,
            'max_photon_energy': self.max_photon_energy,
            'ionisation_potentials': dict(zip(tables.gases, tables.ionisation_potentials)),
            'min_ionisation_potential': tables.min_ionisation_potential,
            'levels': [
                (level.gas_name, level.collision_type.name, level.description.strip(),
                 level.threshold)
                for level in tables.levels
            ],
            'deexcitation': self.use_deexcitation,
            'penning': self.use_penning,
            'null_collision_rate': tables.table.null_collision_rate,
        }
