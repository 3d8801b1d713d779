"""Physics data package containing gas cross-section databases.

Databases produced by ``physics_data_preparation`` are placed in the
``gas_databases`` directory and picked up as defaults.
"""

from pathlib import Path


def get_physics_data_dir() -> Path:
    """Get the physics data directory path.

    Returns:
        Path to the physics_data directory
    """
    return Path(__file__).parent


def get_gas_database_path(database_name: str = 'default.h5') -> Path:
    """Get path to a gas cross-section database file.

    Args:
        database_name: Name of the database file (default: 'default.h5')

    Returns:
        Path to the database file

    Raises:
        FileNotFoundError: If the database file doesn't exist
    """
    db_path = get_physics_data_dir() / 'gas_databases' / database_name
    if not db_path.exists():
        raise FileNotFoundError(
            f"Gas database not found: {db_path}\n"
            f"Available databases: {list_gas_databases()}"
        )
    return db_path


def list_gas_databases() -> list:
    """List all available gas databases.

    Returns:
        List of database filenames
    """
    db_dir = get_physics_data_dir() / 'gas_databases'
    if not db_dir.exists():
        return []
    return [f.name for f in db_dir.glob('*.h5')]


try:
    DEFAULT_GAS_DATABASE = str(get_gas_database_path())
except FileNotFoundError:
    DEFAULT_GAS_DATABASE = None


__all__ = [
    'get_physics_data_dir',
    'get_gas_database_path',
    'list_gas_databases',
    'DEFAULT_GAS_DATABASE',
]
