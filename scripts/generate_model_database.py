"""Generate the default gas database from the analytic model gases."""

import argparse

from MCGasTransport.physics_data import get_physics_data_dir
from MCGasTransport.physics_data_preparation import MODEL_GASES, create_model_database


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        '--output',
        default=str(get_physics_data_dir() / 'gas_databases' / 'default.h5'),
        help='Path of the HDF5 file to write',
    )
    parser.add_argument(
        '--gases', nargs='+', default=list(MODEL_GASES),
        help='Model gases to include',
    )
    args = parser.parse_args()

    print("Generating gas database...")
    print(f"  Gases: {', '.join(args.gases)}")
    create_model_database(args.output, args.gases)
    print(f"✓ Gas database generated: {args.output}")


if __name__ == '__main__':
    main()
