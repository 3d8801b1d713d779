"""Physics modules for cross-section mixing, de-excitation and collision sampling."""

from .cross_section_database import (
    PhysicsParameters,
    CrossSectionRequest,
    GasCrossSections,
    CrossSectionProvider,
    HDF5CrossSectionDatabase
)
from .optical_data import OpticalDataProvider, HDF5OpticalData
from .random_source import RandomSource
from .cross_section_mixer import CrossSectionMixer, MixtureTables
from .deexcitation_graph import DeexcitationGraph
from .secondary_spectrum import SecondaryEnergySampler
from .collision_sampler import CollisionSampler
from .photon_collision_table import PhotonCollisionTable
from .gas_numbers import get_gas_number, list_gases

__all__ = [
    'PhysicsParameters',
    'CrossSectionRequest',
    'GasCrossSections',
    'CrossSectionProvider',
    'HDF5CrossSectionDatabase',
    'OpticalDataProvider',
    'HDF5OpticalData',
    'RandomSource',
    'CrossSectionMixer',
    'MixtureTables',
    'DeexcitationGraph',
    'SecondaryEnergySampler',
    'CollisionSampler',
    'PhotonCollisionTable',
    'get_gas_number',
    'list_gases'
]
