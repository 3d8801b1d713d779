"""Sampling of electron collisions from a mixture rate table."""

import math
from typing import List, Optional, Tuple

from .constants import MIN_RESIDUAL_ENERGY, PI2, SMALL
from .cross_section_mixer import MixtureTables
from .deexcitation_graph import DeexcitationGraph
from .kinematics import rotate_direction, sample_cos_theta, scatter
from .random_source import RandomSource
from .secondary_spectrum import SecondaryEnergySampler
from ..core.data_models import (
    CollisionCounters,
    CollisionResult,
    CollisionType,
    Deexcitation,
    DeexcitationProduct,
    ProductType,
    Secondary,
    locate_level,
)
from ..utils.logging import get_logger
from ..utils.validation import InvalidEnergyError


logger = get_logger('physics.sampler')


class CollisionSampler:
    """Samples the outcome of an electron collision.

    The sampler selects a level from the cumulative probabilities of the
    energy bin, applies the energy loss of the level, expands excitations
    into de-excitation cascades or Penning transfers, and computes the new
    energy and direction of the electron.

    Attributes:
        secondary_sampler: Model for the secondary electron energy in ionisations
        graph: De-excitation graph used to follow cascades
        anisotropic: Whether the angular models of the levels are used
        use_deexcitation: Whether excitations are expanded into cascades
        use_penning: Whether the simplified Penning transfer is applied
    """

    def __init__(
        self,
        secondary_sampler: SecondaryEnergySampler,
        graph: DeexcitationGraph,
        anisotropic: bool = True
    ):
        self.secondary_sampler = secondary_sampler
        self.graph = graph
        self.anisotropic = anisotropic
        self.use_deexcitation = False
        self.use_penning = False

    def sample(
        self,
        tables: MixtureTables,
        deexcitations: Optional[List[Deexcitation]],
        energy: float,
        direction: Tuple[float, float, float],
        rng: RandomSource,
        counters: CollisionCounters
    ) -> CollisionResult:
        """Sample a collision of an electron.

        Args:
            tables: Mixture levels and rate table
            deexcitations: De-excitation table (None if not available)
            energy: Electron energy in eV
            direction: Incoming direction (dx, dy, dz)
            rng: Random source
            counters: Collision counters updated by the call

        Returns:
            CollisionResult with the selected level, new energy and direction,
            ionisation secondaries and de-excitation products

        Raises:
            InvalidEnergyError: If the energy is not positive
        """
        if energy <= 0.:
            raise InvalidEnergyError(f"Electron energy must be positive, got {energy}")

        table = tables.table
        cumulative, cut, par = table.lookup(energy)
        level_index = locate_level(cumulative, rng.uniform())
        level = tables.levels[level_index]
        counters.count_electron(level.collision_type, level_index)

        loss = level.energy_loss
        secondaries: List[Secondary] = []
        products: List[DeexcitationProduct] = []

        if level.collision_type == CollisionType.IONISATION:
            esec = self.secondary_sampler.sample(
                rng, level.gas, energy, loss, level.opal_beaty)
            loss += esec
            secondaries.append(Secondary(ProductType.ELECTRON, esec))
            secondaries.append(Secondary(ProductType.ION, 0.))
        elif level.collision_type == CollisionType.EXCITATION:
            products = self._excitation_products(
                tables, deexcitations, level_index, rng, counters)

        if energy < loss:
            loss = energy - MIN_RESIDUAL_ENERGY

        ctheta0 = sample_cos_theta(
            rng, level.scattering_model,
            cut[level_index].item(), par[level_index].item(),
            self.anisotropic,
        )
        e1, ctheta = scatter(energy, loss, ctheta0, tables.mass_factors[level.gas])
        phi = PI2 * rng.uniform()
        new_direction = rotate_direction(direction, ctheta, phi)

        return CollisionResult(
            collision_type=level.collision_type,
            level=level_index,
            energy=e1,
            direction=new_direction,
            secondaries=secondaries,
            products=products,
        )

    def _excitation_products(
        self,
        tables: MixtureTables,
        deexcitations: Optional[List[Deexcitation]],
        level_index: int,
        rng: RandomSource,
        counters: CollisionCounters
    ) -> List[DeexcitationProduct]:
        level = tables.levels[level_index]
        if self.use_deexcitation and deexcitations is not None and level.deexcitation is not None:
            cascade = self.graph.cascade(
                deexcitations, level.deexcitation, rng, tables.min_ionisation_potential)
            counters.n_penning += cascade.n_penning
            return cascade.products

        if not self.use_penning:
            return []
        if level.threshold <= tables.min_ionisation_potential:
            return []
        if rng.uniform() >= level.penning_probability:
            return []

        esec = max(level.threshold - tables.min_ionisation_potential, SMALL)
        spread = 0.
        if level.penning_distance > SMALL:
            spread = level.penning_distance * math.pow(rng.uniform_pos(), 1. / 3.)
        counters.n_penning += 1
        return [DeexcitationProduct(0., spread, ProductType.ELECTRON, esec)]
