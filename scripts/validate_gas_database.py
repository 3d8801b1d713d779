#!/usr/bin/env python3
"""Validate a gas database: electron cross-sections and photoabsorption data."""

import sys

import numpy as np

from MCGasTransport.physics import (
    CrossSectionRequest,
    HDF5CrossSectionDatabase,
    HDF5OpticalData,
    PhysicsParameters,
    get_gas_number,
)
from MCGasTransport.physics_data import DEFAULT_GAS_DATABASE
from MCGasTransport.utils import GasTransportError


def validate_cross_sections(db_path: str) -> bool:
    """Check that every gas loads and has physical cross-sections."""
    print("=" * 60)
    print("Validating Electron Cross-Sections")
    print("=" * 60)
    print(f"Loading: {db_path}")

    db = HDF5CrossSectionDatabase(db_path)
    gases = db.list_gases()
    print(f"✓ Found {len(gases)} gases: {', '.join(gases)}")

    energies = np.geomspace(0.01, 1e4, 500)
    request = CrossSectionRequest(energies, PhysicsParameters(temperature=293.15, pressure=760.))
    ok = True
    for gas in gases:
        try:
            cs = db.get_cross_sections(get_gas_number(gas), request)
        except GasTransportError as e:
            print(f"  ✗ {gas}: {e}")
            ok = False
            continue
        negative = (cs.elastic < 0.).sum() + (cs.ionisation < 0.).sum() + (cs.attachment < 0.).sum()
        print(f"  ✓ {gas}: Ip = {cs.ionisation_potential:.3f} eV, "
              f"{cs.inelastic.shape[1]} inelastic terms")
        if negative:
            print(f"    ✗ {negative} negative values")
            ok = False
    return ok


def validate_optical_data(db_path: str) -> bool:
    """Check that yields are in [0, 1] and cross-sections non-negative."""
    print("\n" + "=" * 60)
    print("Validating Photoabsorption Data")
    print("=" * 60)

    optics = HDF5OpticalData(db_path)
    energies = np.linspace(1., 100., 500)
    ok = True
    for gas in sorted(optics.tables):
        cs, eta = optics.get_photoabsorption(gas, energies)
        valid = np.all(cs >= 0.) and np.all((eta >= 0.) & (eta <= 1.))
        print(f"  {'✓' if valid else '✗'} {gas}: max cross-section {cs.max():.3e} cm²")
        ok = ok and valid
    return ok


if __name__ == '__main__':
    path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_GAS_DATABASE
    if path is None:
        print("✗ No database given and default database not found")
        print("  Run scripts/generate_model_database.py first")
        sys.exit(1)

    ok = validate_cross_sections(path)
    ok = validate_optical_data(path) and ok
    print("\n" + ("✓ Database valid" if ok else "✗ Database has errors"))
    sys.exit(0 if ok else 1)
