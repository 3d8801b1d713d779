"""Core data models and the gas collision session."""

from .data_models import (
    CollisionType,
    ScatteringModel,
    DeexcitationChannelType,
    ProductType,
    PhotonCollisionType,
    SplittingFunction,
    CollisionLevel,
    RateTable,
    Deexcitation,
    DeexcitationProduct,
    CascadeResult,
    CollisionResult,
    PhotonRateTable,
    PhotonCollisionResult,
    CollisionCounters
)
from .gas_session import GasCollisionSession

__all__ = [
    'CollisionType',
    'ScatteringModel',
    'DeexcitationChannelType',
    'ProductType',
    'PhotonCollisionType',
    'SplittingFunction',
    'CollisionLevel',
    'RateTable',
    'Deexcitation',
    'DeexcitationProduct',
    'CascadeResult',
    'CollisionResult',
    'PhotonRateTable',
    'PhotonCollisionResult',
    'CollisionCounters',
    'GasCollisionSession'
]
