"""Utility modules for configuration, logging, and validation."""

from .config import GasConfig
from .logging import setup_logger, get_logger
from .validation import (
    GasTransportError,
    ConfigurationError,
    CapacityError,
    ConsistencyError,
    UnknownLevelError,
    InvalidEnergyError,
    validate_config
)

__all__ = [
    'GasConfig',
    'setup_logger',
    'get_logger',
    'GasTransportError',
    'ConfigurationError',
    'CapacityError',
    'ConsistencyError',
    'UnknownLevelError',
    'InvalidEnergyError',
    'validate_config'
]
