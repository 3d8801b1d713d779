"""Error taxonomy and validation helpers for configuration values."""

from pathlib import Path
from typing import Dict

from .logging import get_logger


logger = get_logger('validation')


class GasTransportError(Exception):
    """Base exception for gas transport errors."""
    pass


class ConfigurationError(GasTransportError):
    """Raised for unknown gases, invalid probabilities or scaling factors.

    The failing operation is aborted and prior state is left unchanged.
    """
    pass


class CapacityError(GasTransportError):
    """Raised when the number of collision levels exceeds the table capacity."""
    pass


class ConsistencyError(GasTransportError):
    """Raised when de-excitation channel lists are inconsistent."""
    pass


class UnknownLevelError(GasTransportError):
    """Raised when an excitation level has no knowledge-base entry."""
    pass


class InvalidEnergyError(GasTransportError):
    """Raised for non-positive query energies."""
    pass


# Maximum number of components in a gas mixture
MAX_GAS_COMPONENTS = 6


def validate_probability(value: float, name: str = 'probability') -> float:
    """Check that a value lies in [0, 1].

    Args:
        value: Value to check
        name: Name used in the error message

    Returns:
        The value as float

    Raises:
        ConfigurationError: If the value is outside [0, 1]
    """
    if value < 0. or value > 1.:
        raise ConfigurationError(f"{name} must be in the range [0, 1], got {value}")
    return float(value)


def validate_positive(value: float, name: str) -> float:
    """Check that a value is strictly positive.

    Raises:
        ConfigurationError: If the value is not positive
    """
    if value <= 0.:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return float(value)


def validate_energy(energy: float) -> None:
    """Raise InvalidEnergyError for non-positive energies."""
    if energy <= 0.:
        raise InvalidEnergyError(f"Energy must be greater than zero, got {energy} eV")


def normalise_fractions(gases: Dict[str, float]) -> Dict[str, float]:
    """Normalise the mole fractions of a gas mixture to unity.

    Args:
        gases: Mapping of gas name to (unnormalised) fraction

    Returns:
        Mapping with fractions summing to one, in insertion order

    Raises:
        ConfigurationError: If the mixture is empty, too large or has
            non-positive fractions
    """
    if not gases:
        raise ConfigurationError("Gas mixture must contain at least one component")
    if len(gases) > MAX_GAS_COMPONENTS:
        raise ConfigurationError(
            f"Gas mixture has {len(gases)} components, "
            f"at most {MAX_GAS_COMPONENTS} are supported"
        )
    for name, fraction in gases.items():
        if fraction <= 0.:
            raise ConfigurationError(f"Fraction of {name} must be positive, got {fraction}")
    total = sum(gases.values())
    return {name: fraction / total for name, fraction in gases.items()}


def validate_config(config) -> None:
    """Run additional runtime checks on a gas configuration.

    Args:
        config: GasConfig instance

    Raises:
        ConfigurationError: If the configuration is unusable
    """
    if config.cross_section_database_path:
        db_path = Path(config.cross_section_database_path)
        if not db_path.exists():
            logger.warning(
                f"Cross-section database not found: {config.cross_section_database_path}"
            )

    if config.cross_section_output:
        out_dir = Path(config.cross_section_output)
        if out_dir.exists() and not out_dir.is_dir():
            raise ConfigurationError(
                f"Cross-section output location is not a directory: {out_dir}"
            )

    logger.debug("Configuration validation passed")
