"""
Electron and Photon Collision Modelling in Gas Mixtures

A PyTorch-based library that builds collision-rate tables for gas mixtures,
samples electron and photon collisions, and follows de-excitation and
Penning cascades for detector simulation.
"""

__version__ = "0.1.0"

from .core.gas_session import GasCollisionSession
from .utils.config import GasConfig

__all__ = ['GasCollisionSession', 'GasConfig']
