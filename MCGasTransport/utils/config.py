"""Configuration management for gas collision sessions."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import yaml
from pathlib import Path

from ..physics_data import DEFAULT_GAS_DATABASE
from .validation import (
    ConfigurationError,
    normalise_fractions,
    validate_positive,
    validate_probability,
)


SPLITTING_FUNCTIONS = ('opal_beaty', 'green_sawada', 'flat')


@dataclass
class GasConfig:
    """Configuration of a gas mixture and its collision treatment.

    Attributes:
        gases: Mole fractions keyed by gas name (normalised on load)
        temperature: Temperature in K
        pressure: Pressure in Torr
        max_electron_energy: Upper end of the electron rate table in eV
        max_photon_energy: Upper end of the photon rate table in eV
        anisotropic_scattering: Use the angular distribution models of the levels
        auto_adjust_energy_range: Extend the tables when queried above their range
        deexcitation: Follow de-excitation cascades of excited argon levels
        radiation_trapping: Include resonance line absorption in photon rates
        penning_probability: Penning transfer probability (None to disable)
        penning_distance: Mean distance of Penning ionisation in cm
        penning_by_gas: Penning probability and distance per gas name
        splitting_function: Secondary energy model ('opal_beaty', 'green_sawada' or 'flat')
        excitation_scaling: Excitation scaling factor per gas name
        random_seed: Random seed for reproducibility (None for random)
        device: Computation device for rate tables ('cuda' or 'cpu')
        max_cascade_steps: Maximum number of transitions in one cascade
        cross_section_database_path: Path to gas cross-section HDF5 file
        cross_section_output: Directory for cs.txt / csgamma.txt dumps (None to disable)
    """
    gases: Dict[str, float] = field(default_factory=lambda: {'Ar': 90., 'CH4': 10.})
    temperature: float = 293.15
    pressure: float = 760.
    max_electron_energy: float = 40.
    max_photon_energy: float = 20.
    anisotropic_scattering: bool = True
    auto_adjust_energy_range: bool = True
    deexcitation: bool = False
    radiation_trapping: bool = True
    penning_probability: Optional[float] = None
    penning_distance: float = 0.
    penning_by_gas: Optional[Dict[str, List[float]]] = None
    splitting_function: str = 'opal_beaty'
    excitation_scaling: Optional[Dict[str, float]] = None
    random_seed: Optional[int] = None
    device: str = 'cpu'
    max_cascade_steps: int = 10000
    cross_section_database_path: Optional[str] = None
    cross_section_output: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.cross_section_database_path is None:
            self.cross_section_database_path = DEFAULT_GAS_DATABASE

        self._validate()

    def _validate(self) -> None:
        """Validate configuration parameters."""
        import torch
        from ..physics.gas_numbers import is_known_gas
        from .logging import get_logger
        logger = get_logger('config')

        # Validate mixture
        for name in self.gases:
            if not is_known_gas(name):
                raise ConfigurationError(f"Unknown gas: {name}")
        self.gases = normalise_fractions(self.gases)

        validate_positive(self.temperature, 'temperature')
        validate_positive(self.pressure, 'pressure')
        validate_positive(self.max_electron_energy, 'max_electron_energy')
        validate_positive(self.max_photon_energy, 'max_photon_energy')

        if self.splitting_function not in SPLITTING_FUNCTIONS:
            raise ConfigurationError(
                f"splitting_function must be one of {SPLITTING_FUNCTIONS}, "
                f"got {self.splitting_function}"
            )

        # Penning transfer and de-excitation exclude each other
        penning = self.penning_probability is not None or bool(self.penning_by_gas)
        if penning and self.deexcitation:
            raise ConfigurationError(
                "Penning transfer and de-excitation cannot be enabled together"
            )
        if self.penning_probability is not None:
            validate_probability(self.penning_probability, 'penning_probability')
        for name, (probability, _) in (self.penning_by_gas or {}).items():
            if name not in self.gases:
                raise ConfigurationError(f"Penning transfer set for {name}, which is not in the mixture")
            validate_probability(probability, f"penning_probability of {name}")

        for name, factor in (self.excitation_scaling or {}).items():
            if name not in self.gases:
                raise ConfigurationError(f"Excitation scaling set for {name}, which is not in the mixture")
            validate_positive(factor, f"excitation scaling factor of {name}")

        if self.max_cascade_steps <= 0:
            raise ConfigurationError(
                f"max_cascade_steps must be positive, got {self.max_cascade_steps}")

        # Validate device with automatic fallback
        if self.device not in ['cuda', 'cpu']:
            raise ConfigurationError(f"device must be 'cuda' or 'cpu', got {self.device}")

        if self.device == 'cuda' and not torch.cuda.is_available():
            logger.warning("CUDA requested but not available, falling back to CPU")
            self.device = 'cpu'

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'GasConfig':
        """Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            GasConfig instance
        """
        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f)

        if config_dict.get('penning_by_gas'):
            config_dict['penning_by_gas'] = {
                name: list(values) for name, values in config_dict['penning_by_gas'].items()
            }

        return cls(**config_dict)

    def to_yaml(self, yaml_path: str) -> None:
        """Save configuration to YAML file.

        Args:
            yaml_path: Path to save YAML configuration
        """
        config_dict = {
            'gases': dict(self.gases),
            'temperature': self.temperature,
            'pressure': self.pressure,
            'max_electron_energy': self.max_electron_energy,
            'max_photon_energy': self.max_photon_energy,
            'anisotropic_scattering': self.anisotropic_scattering,
            'auto_adjust_energy_range': self.auto_adjust_energy_range,
            'deexcitation': self.deexcitation,
            'radiation_trapping': self.radiation_trapping,
            'penning_probability': self.penning_probability,
            'penning_distance': self.penning_distance,
            'penning_by_gas': (
                {name: list(values) for name, values in self.penning_by_gas.items()}
                if self.penning_by_gas else None
            ),
            'splitting_function': self.splitting_function,
            'excitation_scaling': dict(self.excitation_scaling) if self.excitation_scaling else None,
            'random_seed': self.random_seed,
            'device': self.device,
            'max_cascade_steps': self.max_cascade_steps,
            'cross_section_database_path': self.cross_section_database_path,
            'cross_section_output': self.cross_section_output,
        }

        Path(yaml_path).parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, 'w') as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

    @staticmethod
    def get_default_config() -> 'GasConfig':
        """Get a default configuration for testing.

        Returns:
            GasConfig for Ar/CH4 90/10 at room temperature and atmospheric pressure
        """
        return GasConfig(
            gases={'Ar': 90., 'CH4': 10.},
            temperature=293.15,
            pressure=760.,
            max_electron_energy=40.,
        )
