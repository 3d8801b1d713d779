"""
Basic usage example for gas collision sessions.

This example demonstrates how to:
1. Generate a model gas database
2. Configure an Ar/CH4 mixture and build its collision tables
3. Sample electron collisions with Penning transfer or de-excitation
4. Sample photon collisions including resonance line absorption
"""

from pathlib import Path

from MCGasTransport import GasCollisionSession, GasConfig
from MCGasTransport.core.data_models import CollisionType, ProductType
from MCGasTransport.physics_data_preparation import create_model_database
from MCGasTransport.utils import setup_logger


def create_database(output_dir: str = './gas_data') -> str:
    """Write a database of analytic model gases.

    Args:
        output_dir: Directory to save the database

    Returns:
        Path to the database file
    """
    db_path = Path(output_dir) / 'model_gases.h5'
    create_model_database(str(db_path))
    print(f"Model gas database created: {db_path}")
    return str(db_path)


def example_configuration(db_path: str) -> GasConfig:
    """Example of configuration management."""
    print("\n=== Example 1: Configuration ===\n")

    config = GasConfig(
        gases={'Ar': 90., 'CH4': 10.},
        temperature=293.15,
        pressure=760.,
        max_electron_energy=40.,
        random_seed=1234,
        cross_section_database_path=db_path,
    )

    print("Configuration created:")
    print(f"  Mixture: {config.gases}")
    print(f"  T = {config.temperature} K, p = {config.pressure} Torr")
    print(f"  Device: {config.device}")

    config_path = './gas_data/config.yaml'
    config.to_yaml(config_path)
    print(f"\nConfiguration saved to: {config_path}")
    return GasConfig.from_yaml(config_path)


def example_electron_collisions(config: GasConfig) -> GasCollisionSession:
    """Sample electron collisions with Penning transfer."""
    print("\n=== Example 2: Electron collisions ===\n")

    session = GasCollisionSession(config)
    session.enable_penning_transfer(0.18, 0.)

    info = session.describe_gas()
    print(f"Levels: {len(info['levels'])}")
    print(f"Lowest ionisation potential: {info['min_ionisation_potential']:.3f} eV")
    print(f"Null-collision rate: {info['null_collision_rate']:.3e} ns-1")

    n_samples = 10000
    for _ in range(n_samples):
        session.sample_electron_collision(25.)

    by_type = session.get_number_of_electron_collisions_by_type()
    print(f"\nCollisions at 25 eV ({n_samples} samples):")
    for collision_type in CollisionType:
        print(f"  {collision_type.name:12s} {by_type[collision_type]}")
    print(f"  Penning transfers: {session.get_number_of_penning_transfers()}")
    return session


def example_deexcitation(session: GasCollisionSession):
    """Follow de-excitation cascades of argon levels."""
    print("\n=== Example 3: De-excitation ===\n")

    session.enable_deexcitation()
    session.reset_collision_counters()
    n_photons = 0
    n_electrons = 0
    for _ in range(5000):
        result = session.sample_electron_collision(25.)
        n_photons += sum(p.product_type == ProductType.PHOTON for p in result.products)
        n_electrons += sum(p.product_type == ProductType.ELECTRON for p in result.products)

    print(f"Cascade photons: {n_photons}")
    print(f"Penning electrons: {n_electrons}")

    for energy in (11.6, 12.5, 15., 18.):
        result = session.sample_photon_collision(energy)
        print(f"  Photon at {energy:5.1f} eV: {result.collision_type.name}")
    total, ionising, inelastic = session.get_number_of_photon_collisions()
    print(f"Photon collisions: {total} ({ionising} ionising, {inelastic} inelastic)")


if __name__ == '__main__':
    print("Gas Collision Modelling - Basic Usage Examples")
    print("=" * 60)

    setup_logger(level=20)

    try:
        db_path = create_database()
        config = example_configuration(db_path)
        session = example_electron_collisions(config)
        example_deexcitation(session)

        print("\n" + "=" * 60)
        print("Examples completed successfully!")
    except KeyboardInterrupt:
        print("\n\nExamples interrupted by user")
