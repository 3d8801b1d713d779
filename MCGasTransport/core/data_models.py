"""Core data models for collision-rate tables and sampled events."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

import numpy as np
import torch


class CollisionType(IntEnum):
    """Electron collision types."""
    ELASTIC = 0
    IONISATION = 1
    ATTACHMENT = 2
    INELASTIC = 3
    EXCITATION = 4
    SUPERELASTIC = 5


class ScatteringModel(IntEnum):
    """Angular distribution models for electron scattering."""
    ISOTROPIC = 0
    CUTOFF = 1
    PARAMETERISED = 2


class DeexcitationChannelType(IntEnum):
    """Types of de-excitation transitions."""
    RADIATIVE = 0
    COLLISIONAL_IONISING = 1
    COLLISIONAL_NON_IONISING = -1


class ProductType(IntEnum):
    """Particles emitted in collisions and cascades."""
    PHOTON = 0
    ELECTRON = 1
    ION = 2


class PhotonCollisionType(IntEnum):
    """Photon collision types."""
    ELASTIC = 0
    IONISATION = 1
    INELASTIC = 2
    EXCITATION = 3


class SplittingFunction(Enum):
    """Secondary electron energy distributions in ionising collisions."""
    OPAL_BEATY = 'opal_beaty'
    GREEN_SAWADA = 'green_sawada'
    FLAT = 'flat'


# Index of the final level meaning "ground state" or "ionisation/loss"
GROUND_STATE = -1


@dataclass
class CollisionLevel:
    """One cross-section term of the gas mixture.

    Attributes:
        gas: Index of the gas component
        gas_name: Name of the gas component
        collision_type: Type of collision
        description: Description of the term
        energy_loss: Energy loss in the collision (threshold / r) in eV
        threshold: Threshold energy in eV
        scattering_model: Angular distribution model index
        opal_beaty: Opal-Beaty-Peterson splitting parameter in eV
        deexcitation: Index into the de-excitation table (None if not de-excitable)
        penning_probability: Penning transfer probability
        penning_distance: Mean distance of Penning ionisation in cm
    """
    gas: int
    gas_name: str
    collision_type: CollisionType
    description: str
    energy_loss: float
    threshold: float
    scattering_model: int = 0
    opal_beaty: float = 1.
    deexcitation: Optional[int] = None
    penning_probability: float = 0.
    penning_distance: float = 0.


def locate_level(cumulative: torch.Tensor, r: float) -> int:
    """Find the first entry of a cumulative distribution not below r.

    Values at or below the first entry map to 0, values at or above the
    last entry map to the last index.

    Args:
        cumulative: Non-decreasing cumulative values [L]
        r: Sampled value

    Returns:
        Selected index
    """
    n = cumulative.shape[0]
    if r <= cumulative[0].item():
        return 0
    if r >= cumulative[n - 1].item():
        return n - 1
    query = torch.tensor([r], dtype=cumulative.dtype, device=cumulative.device)
    return int(torch.searchsorted(cumulative, query, right=False)[0].item())


@dataclass
class RateTable:
    """Electron collision rates on linear and logarithmic energy grids.

    Attributes:
        energy_final: Upper end of the table in eV
        energy_high: Boundary between linear and logarithmic binning in eV
        energy_step: Width of the linear bins in eV
        total: Total collision rate per linear bin in ns-1 [N]
        cumulative: Cumulative level probabilities per linear bin [N, L]
        scattering_cut: Angular cut per linear bin and level [N, L]
        scattering_par: Angular parameter per linear bin and level [N, L]
        log_step: Logarithm of the geometric step of the logarithmic bins
        log_total: Log of the total collision rate per logarithmic bin [M]
        log_cumulative: Cumulative level probabilities per logarithmic bin [M, L]
        log_scattering_cut: Angular cut per logarithmic bin and level [M, L]
        log_scattering_par: Angular parameter per logarithmic bin and level [M, L]
        null_collision_rate: Maximum total rate over both grids in ns-1
    """
    energy_final: float
    energy_high: float
    energy_step: float
    total: torch.Tensor
    cumulative: torch.Tensor
    scattering_cut: torch.Tensor
    scattering_par: torch.Tensor
    log_step: float = 0.
    log_total: Optional[torch.Tensor] = None
    log_cumulative: Optional[torch.Tensor] = None
    log_scattering_cut: Optional[torch.Tensor] = None
    log_scattering_par: Optional[torch.Tensor] = None
    null_collision_rate: float = 0.

    @property
    def n_levels(self) -> int:
        return self.cumulative.shape[1]

    @property
    def has_log_grid(self) -> bool:
        return self.log_total is not None

    def is_logarithmic(self, energy: float) -> bool:
        return self.has_log_grid and energy > self.energy_high

    def linear_index(self, energy: float) -> int:
        n = self.total.shape[0]
        return min(max(int(energy / self.energy_step), 0), n - 1)

    def log_index(self, energy: float) -> int:
        n = self.log_total.shape[0]
        return min(max(int(np.log(energy / self.energy_high) / self.log_step), 0), n - 1)

    def lookup(self, energy: float) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """Cumulative probabilities and angular parameters of the bin of an energy."""
        if self.is_logarithmic(energy):
            i = self.log_index(energy)
            return self.log_cumulative[i], self.log_scattering_cut[i], self.log_scattering_par[i]
        i = self.linear_index(energy)
        return self.cumulative[i], self.scattering_cut[i], self.scattering_par[i]

    def total_rate(self, energy: float) -> float:
        """Total collision rate at an energy in ns-1.

        Above the linear range the rate is interpolated log-log between
        the upper edges of adjacent logarithmic bins.
        """
        if not self.is_logarithmic(energy):
            return self.total[self.linear_index(energy)].item()
        e_log = np.log(energy)
        i = self.log_index(energy)
        f_max = self.log_total[i].item()
        if i == 0:
            f_min = np.log(self.total[-1].item())
        else:
            f_min = self.log_total[i - 1].item()
        e_min = np.log(self.energy_high) + i * self.log_step
        return float(np.exp(f_min + (e_log - e_min) * (f_max - f_min) / self.log_step))

    def level_fraction(self, energy: float, level: int) -> float:
        """Probability of a given level at an energy."""
        row = self.lookup(energy)[0]
        if level == 0:
            return row[0].item()
        return (row[level] - row[level - 1]).item()

    def level_rate(self, energy: float, level: int) -> float:
        return self.total_rate(energy) * self.level_fraction(energy, level)


@dataclass
class DeexcitationChannel:
    """One decay channel of an excited level.

    Attributes:
        probability: Rate in ns-1 before normalisation, cumulative probability after
        final: Index of the final de-excitation level (GROUND_STATE for ground/loss)
        channel_type: Type of the transition
    """
    probability: float
    final: int
    channel_type: DeexcitationChannelType


@dataclass
class Deexcitation:
    """De-excitation data of an excited level.

    Attributes:
        gas: Index of the gas component
        level: Index of the associated collision level (None for pseudo-levels)
        label: Level label (e.g. 'Ar_1S4')
        energy: Excitation energy in eV
        osc: Oscillator strength
        channels: Decay channels
        rate: Total decay rate in ns-1
        doppler_width: Doppler broadening (standard deviation) in eV
        pressure_width: Pressure broadening (half width) in eV
        width: Window within which photons can be absorbed by the line in eV
        absorption_rate: Integrated absorption collision rate in eV ns-1
    """
    gas: int
    level: Optional[int]
    label: str
    energy: float
    osc: float = 0.
    channels: List[DeexcitationChannel] = field(default_factory=list)
    rate: float = 0.
    doppler_width: float = 0.
    pressure_width: float = 0.
    width: float = 0.
    absorption_rate: float = 0.

    def add_channel(
        self,
        rate: float,
        final: int = GROUND_STATE,
        channel_type: DeexcitationChannelType = DeexcitationChannelType.COLLISIONAL_NON_IONISING
    ) -> None:
        self.channels.append(DeexcitationChannel(rate, final, channel_type))

    def add_penning(self, rate: float, probability: float) -> None:
        """Split a quenching rate into ionising and non-ionising parts."""
        self.add_channel(rate * probability, GROUND_STATE,
                         DeexcitationChannelType.COLLISIONAL_IONISING)
        self.add_channel(rate * (1. - probability), GROUND_STATE,
                         DeexcitationChannelType.COLLISIONAL_NON_IONISING)

    def normalise(self) -> None:
        """Sum the channel rates and convert them to a cumulative distribution."""
        self.rate = sum(channel.probability for channel in self.channels)
        if self.rate <= 0.:
            return
        running = 0.
        for channel in self.channels:
            running += channel.probability / self.rate
            channel.probability = running

    @property
    def probabilities(self) -> List[float]:
        return [channel.probability for channel in self.channels]

    @property
    def finals(self) -> List[int]:
        return [channel.final for channel in self.channels]

    @property
    def types(self) -> List[DeexcitationChannelType]:
        return [channel.channel_type for channel in self.channels]


@dataclass
class DeexcitationProduct:
    """Photon or electron emitted in a de-excitation cascade.

    Attributes:
        time: Time offset with respect to the collision in ns
        spread: Radial distance from the collision point in cm
        product_type: Type of particle
        energy: Energy in eV
    """
    time: float
    spread: float
    product_type: ProductType
    energy: float


@dataclass
class CascadeResult:
    """Outcome of following a de-excitation cascade.

    Attributes:
        products: Emitted photons and electrons in time order
        final_level: De-excitation index at which the cascade ended
        n_penning: Number of Penning or associative ionisations
    """
    products: List[DeexcitationProduct] = field(default_factory=list)
    final_level: int = GROUND_STATE
    n_penning: int = 0


@dataclass
class Secondary:
    """Secondary particle of an ionising collision."""
    product_type: ProductType
    energy: float


@dataclass
class CollisionResult:
    """Outcome of a sampled electron collision.

    Attributes:
        collision_type: Type of the collision
        level: Index of the collision level
        energy: Electron energy after the collision in eV
        direction: Direction after the collision (dx, dy, dz)
        secondaries: Electron and ion from ionisation
        products: De-excitation or Penning products
    """
    collision_type: CollisionType
    level: int
    energy: float
    direction: Tuple[float, float, float]
    secondaries: List[Secondary] = field(default_factory=list)
    products: List[DeexcitationProduct] = field(default_factory=list)

    @property
    def n_deexcitation_products(self) -> int:
        return len(self.products)

    def get_deexcitation_product(self, i: int) -> DeexcitationProduct:
        return self.products[i]


@dataclass
class PhotonRateTable:
    """Photon collision rates on a linear energy grid.

    Attributes:
        energy_final: Upper end of the table in eV
        energy_step: Bin width in eV
        total: Total continuum collision rate per bin in ns-1 [N]
        cumulative: Cumulative (unnormalised) rates per bin [N, T]
        term_types: Collision type of each term [T]
        term_gases: Gas index of each term [T]
    """
    energy_final: float
    energy_step: float
    total: torch.Tensor
    cumulative: torch.Tensor
    term_types: List[PhotonCollisionType]
    term_gases: List[int]

    def index(self, energy: float) -> int:
        n = self.total.shape[0]
        return min(max(int(energy / self.energy_step), 0), n - 1)


@dataclass
class PhotonCollisionResult:
    """Outcome of a sampled photon collision.

    Attributes:
        collision_type: Type of the collision
        level: Term index, or de-excitation index for line absorption
        energy: Photon energy after the collision in eV
        cos_theta: Cosine of the scattering angle
        n_secondaries: Number of secondaries (electrons or cascade products)
        secondary_energy: Energy of the photoelectron in eV
        products: Cascade products of a line absorption
    """
    collision_type: PhotonCollisionType
    level: int
    energy: float = 0.
    cos_theta: float = 1.
    n_secondaries: int = 0
    secondary_energy: float = 0.
    products: List[DeexcitationProduct] = field(default_factory=list)


@dataclass
class CollisionCounters:
    """Collision statistics of a session.

    Attributes:
        electron_by_type: Electron collisions per collision type [6]
        electron_by_level: Electron collisions per level [L]
        photon_by_type: Photon collisions per collision type [4]
        n_penning: Number of Penning transfers
    """
    electron_by_type: np.ndarray = field(
        default_factory=lambda: np.zeros(len(CollisionType), dtype=np.int64))
    electron_by_level: np.ndarray = field(
        default_factory=lambda: np.zeros(0, dtype=np.int64))
    photon_by_type: np.ndarray = field(
        default_factory=lambda: np.zeros(len(PhotonCollisionType), dtype=np.int64))
    n_penning: int = 0

    def reset_electron(self, n_levels: int) -> None:
        self.electron_by_type[:] = 0
        self.electron_by_level = np.zeros(n_levels, dtype=np.int64)

    def reset(self, n_levels: int) -> None:
        self.reset_electron(n_levels)
        self.photon_by_type[:] = 0
        self.n_penning = 0

    def count_electron(self, collision_type: CollisionType, level: int) -> None:
        self.electron_by_type[collision_type] += 1
        self.electron_by_level[level] += 1

    @property
    def n_electron_collisions(self) -> int:
        return int(self.electron_by_type.sum())

    @property
    def n_photon_collisions(self) -> int:
        return int(self.photon_by_type.sum())
