"""Gas cross-section database generator."""

import h5py
import numpy as np
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..physics.constants import ATOMIC_MASS_UNIT_EV, ELECTRON_MASS
from ..physics.gas_numbers import get_gas_number
from ..utils.logging import get_logger


logger = get_logger('data_preparation')


# Analytic model gases. Thresholds and masses follow the real species;
# the cross-section shapes are smooth parameterisations for testing and
# demonstration.
MODEL_GASES: Dict[str, dict] = {
    'Ar': {
        'mass': 39.948,
        'elastic': (1.5e-15, 5., 2),
        'ionisation': [(15.7596, 10., 1.5e-13, 'IONISATION  ELOSS= 15.7596')],
        'attachment': [],
        'inelastic': [
            ('EXC  1S5    ELOSS= 11.5484', 11.5484, 8.e-18),
            ('EXC  1S4    ELOSS= 11.6236', 11.6236, 3.e-17),
            ('EXC  1S3    ELOSS= 11.7232', 11.7232, 1.e-18),
            ('EXC  1S2    ELOSS= 11.8281', 11.8281, 6.e-17),
            ('EXC  2P10   ELOSS= 12.9070', 12.9070, 1.5e-17),
            ('EXC  2P9    ELOSS= 13.0757', 13.0757, 1.e-17),
            ('EXC  2P8    ELOSS= 13.0951', 13.0951, 8.e-18),
            ('EXC  2P7    ELOSS= 13.1526', 13.1526, 5.e-18),
            ('EXC  2P6    ELOSS= 13.1718', 13.1718, 8.e-18),
            ('EXC  2P5    ELOSS= 13.2730', 13.2730, 4.e-18),
            ('EXC  2P4    ELOSS= 13.2826', 13.2826, 4.e-18),
            ('EXC  2P3    ELOSS= 13.3024', 13.3024, 6.e-18),
            ('EXC  2P2    ELOSS= 13.3283', 13.3283, 5.e-18),
            ('EXC  2P1    ELOSS= 13.4797', 13.4797, 3.e-18),
            ('EXC  3D6    ELOSS= 13.8450', 13.8450, 2.e-18),
            ('EXC  3D5    ELOSS= 13.8640', 13.8640, 4.e-18),
            ('EXC  3D3    ELOSS= 13.9030', 13.9030, 3.e-18),
            ('EXC  2S5    ELOSS= 13.9686', 13.9686, 2.e-18),
            ('EXC  2S4    ELOSS= 14.0123', 14.0123, 6.e-18),
            ('EXC  2S3    ELOSS= 14.0627', 14.0627, 1.e-18),
            ('EXC  2S2    ELOSS= 14.0900', 14.0900, 6.e-18),
        ],
        'photoabsorption': (15.7596, 3.5e-17, 15.7596, 15.7596),
    },
    'CH4': {
        'mass': 16.043,
        'elastic': (2.e-15, 3., 0),
        'ionisation': [(12.65, 7.3, 2.e-13, 'IONISATION  ELOSS= 12.65')],
        'attachment': [('ATTACHMENT DISSOCIATIVE', 9.5, 1.e-19, 1.5)],
        'inelastic': [
            ('VIB V4 SUPERELASTIC', -0.162, 2.e-17),
            ('VIB V4  ELOSS= 0.162', 0.162, 4.e-16),
            ('VIB V1  ELOSS= 0.361', 0.361, 2.e-16),
            ('VIB 2V4 ELOSS= 0.522', 0.522, 5.e-17),
            ('EXC  DISS   ELOSS= 9.0', 9.0, 1.e-16),
            ('EXC  DISS   ELOSS= 10.0', 10.0, 8.e-17),
        ],
        'photoabsorption': (8.5, 4.e-17, 12.65, 20.),
    },
    'CO2': {
        'mass': 44.01,
        'elastic': (3.e-15, 2., 0),
        'ionisation': [(13.773, 13.8, 2.5e-13, 'IONISATION  ELOSS= 13.773')],
        'attachment': [('ATTACHMENT DISSOCIATIVE', 8.2, 4.e-19, 1.)],
        'inelastic': [
            ('VIB V2  ELOSS= 0.083', 0.083, 3.e-16),
            ('VIB V1  ELOSS= 0.172', 0.172, 1.e-16),
            ('VIB V3  ELOSS= 0.291', 0.291, 2.e-16),
            ('EXC  DISS   ELOSS= 7.0', 7.0, 5.e-17),
            ('EXC  DISS   ELOSS= 10.5', 10.5, 1.5e-16),
        ],
        'photoabsorption': (11., 5.e-17, 13.773, 20.),
    },
    'nC4H10': {
        'mass': 58.12,
        'elastic': (5.e-15, 2., 0),
        'ionisation': [(10.67, 12.5, 4.e-13, 'IONISATION  ELOSS= 10.67')],
        'attachment': [('ATTACHMENT', 0., 0., 1.)],
        'inelastic': [
            ('VIB V1  ELOSS= 0.12', 0.12, 5.e-16),
            ('EXC  DISS   ELOSS= 8.0', 8.0, 2.e-16),
        ],
        'photoabsorption': (7.5, 1.e-16, 10.67, 17.),
    },
}


def elastic_model(energy: np.ndarray, sigma0: float, e0: float) -> np.ndarray:
    """Smooth elastic cross-section falling off at high energy."""
    return sigma0 * (0.05 + energy / (energy + e0)) / (1. + (energy / 100.) ** 0.8)


def ionisation_model(energy: np.ndarray, threshold: float, a: float) -> np.ndarray:
    """Lotz-type ionisation cross-section a ln(E/I) / (E I)."""
    cs = np.zeros_like(energy)
    above = energy > threshold
    cs[above] = a * np.log(energy[above] / threshold) / (energy[above] * threshold)
    return cs


def excitation_model(energy: np.ndarray, threshold: float, peak: float) -> np.ndarray:
    """Excitation cross-section peaking at twice the threshold.

    Negative thresholds describe superelastic terms, which are constant.
    """
    if threshold <= 0.:
        return np.full_like(energy, peak)
    cs = np.zeros_like(energy)
    above = energy > threshold
    x = energy[above] / threshold
    cs[above] = peak * 4. * (x - 1.) / (x * x)
    return cs


def attachment_model(energy: np.ndarray, e0: float, peak: float, width: float) -> np.ndarray:
    """Gaussian resonance of dissociative attachment."""
    return peak * np.exp(-((energy - e0) / width) ** 2)


def photoabsorption_model(
    energy: np.ndarray,
    onset: float,
    peak: float,
    ionisation_potential: float,
    full_yield: float
) -> Tuple[np.ndarray, np.ndarray]:
    """Photoabsorption cross-section and ionisation yield.

    The cross-section rises above the onset and decays as E^-2 beyond
    twice the onset. The yield rises linearly from the ionisation potential
    to full_yield.
    """
    cs = np.zeros_like(energy)
    above = energy > onset
    x = energy[above] / onset
    cs[above] = peak * np.minimum(x - 1., 1.) / np.maximum(x / 2., 1.) ** 2
    if full_yield > ionisation_potential:
        eta = np.clip((energy - ionisation_potential) / (full_yield - ionisation_potential), 0., 1.)
    else:
        eta = np.where(energy >= ionisation_potential, 1., 0.)
    return cs, eta


class GasDatabaseGenerator:
    """Generates HDF5 databases of electron cross-sections and photoabsorption data.

    Attributes:
        gases: Dictionary of defined gases
    """

    def __init__(self):
        self.gases: Dict[str, dict] = {}

        logger.info("GasDatabaseGenerator initialized")

    def define_gas(
        self,
        name: str,
        energy_grid: np.ndarray,
        mass_amu: float,
        elastic: np.ndarray,
        ionisation: np.ndarray,
        ionisation_thresholds: List[float],
        opal_beaty: List[float],
        ionisation_descriptions: List[str],
        attachment: np.ndarray,
        attachment_descriptions: List[str],
        inelastic: np.ndarray,
        inelastic_thresholds: List[float],
        inelastic_descriptions: List[str],
        elastic_angular: Optional[np.ndarray] = None,
        elastic_model: int = 0,
        ionisation_model: int = 0,
        inelastic_models: Optional[List[int]] = None
    ) -> None:
        """Define the electron cross-sections of a gas.

        Args:
            name: Gas name (must have a gas number)
            energy_grid: Energies in eV [M]
            mass_amu: Molecular mass in amu
            elastic: Elastic cross-section in cm² [M]
            ionisation: Ionisation cross-sections [M, k]
            ionisation_thresholds: Ionisation thresholds in eV [k]
            opal_beaty: Opal-Beaty-Peterson parameters in eV [k]
            ionisation_descriptions: Term descriptions [k]
            attachment: Attachment cross-sections [M, a]
            attachment_descriptions: Term descriptions [a]
            inelastic: Inelastic cross-sections [M, j]
            inelastic_thresholds: Thresholds in eV [j]
            inelastic_descriptions: Term descriptions [j]
            elastic_angular: Elastic angular parameter [M]
            elastic_model: Elastic scattering model index
            ionisation_model: Ionisation scattering model index
            inelastic_models: Scattering model index per inelastic term [j]
        """
        energy_grid = np.asarray(energy_grid, dtype=np.float64)
        n = len(energy_grid)
        ionisation = np.asarray(ionisation, dtype=np.float64).reshape(n, -1)
        attachment = np.asarray(attachment, dtype=np.float64).reshape(n, -1)
        inelastic = np.asarray(inelastic, dtype=np.float64).reshape(n, -1)
        if elastic_angular is None:
            elastic_angular = np.zeros(n)
        if inelastic_models is None:
            inelastic_models = [0] * inelastic.shape[1]

        self.gases[name] = {
            'number': get_gas_number(name),
            'mass_ratio_energy': 2. * ELECTRON_MASS / (mass_amu * ATOMIC_MASS_UNIT_EV),
            'elastic_model': elastic_model,
            'ionisation_model': ionisation_model,
            'energy_grid': energy_grid,
            'elastic': np.asarray(elastic, dtype=np.float64),
            'elastic_angular': np.asarray(elastic_angular, dtype=np.float64),
            'ionisation': ionisation,
            'ionisation_angular': np.zeros_like(ionisation),
            'ionisation_thresholds': np.asarray(ionisation_thresholds, dtype=np.float64),
            'opal_beaty': np.asarray(opal_beaty, dtype=np.float64),
            'ionisation_descriptions': list(ionisation_descriptions),
            'attachment': attachment,
            'attachment_descriptions': list(attachment_descriptions),
            'inelastic': inelastic,
            'inelastic_angular': np.zeros_like(inelastic),
            'inelastic_thresholds': np.asarray(inelastic_thresholds, dtype=np.float64),
            'inelastic_models': np.asarray(inelastic_models, dtype=np.int64),
            'inelastic_descriptions': list(inelastic_descriptions),
        }

        logger.info(
            f"Defined gas: {name} ({mass_amu} amu, {ionisation.shape[1]} ionisation, "
            f"{attachment.shape[1]} attachment, {inelastic.shape[1]} inelastic terms)"
        )

    def define_photoabsorption(
        self,
        name: str,
        energy_grid: np.ndarray,
        cross_section: np.ndarray,
        ionisation_yield: np.ndarray
    ) -> None:
        """Define the photoabsorption cross-section and ionisation yield of a gas."""
        if name not in self.gases:
            self.gases[name] = {'number': get_gas_number(name)}
        self.gases[name]['photoabsorption'] = {
            'energy_grid': np.asarray(energy_grid, dtype=np.float64),
            'cross_section': np.asarray(cross_section, dtype=np.float64),
            'ionisation_yield': np.asarray(ionisation_yield, dtype=np.float64),
        }

    def define_model_gas(self, name: str, max_energy: float = 1e6) -> None:
        """Define a gas from the analytic model parameterisations.

        Args:
            name: Gas name (key of MODEL_GASES)
            max_energy: Upper end of the energy grid in eV
        """
        params = MODEL_GASES[name]
        thresholds = [t for t, _, _, _ in params['ionisation']]
        thresholds += [t for _, t, _ in params['inelastic'] if t > 0.]
        energy_grid = np.unique(np.concatenate([
            [0.], np.geomspace(1e-3, max_energy, 600), thresholds,
        ]))

        sigma0, e0, model = params['elastic']
        elastic = elastic_model(energy_grid, sigma0, e0)
        elastic_angular = energy_grid / (energy_grid + 50.) if model == 2 else np.zeros_like(energy_grid)

        ionisation = np.column_stack([
            ionisation_model(energy_grid, t, a) for t, _, a, _ in params['ionisation']
        ])
        attachment_terms = params['attachment'] or [('ATTACHMENT', 0., 0., 1.)]
        attachment = np.column_stack([
            attachment_model(energy_grid, e, peak, w) for _, e, peak, w in attachment_terms
        ])
        inelastic = np.column_stack([
            excitation_model(energy_grid, t, peak) for _, t, peak in params['inelastic']
        ])

        self.define_gas(
            name,
            energy_grid,
            params['mass'],
            elastic,
            ionisation,
            [t for t, _, _, _ in params['ionisation']],
            [w for _, w, _, _ in params['ionisation']],
            [d for _, _, _, d in params['ionisation']],
            attachment,
            [d for d, _, _, _ in attachment_terms],
            inelastic,
            [t for _, t, _ in params['inelastic']],
            [d for d, _, _ in params['inelastic']],
            elastic_angular=elastic_angular,
            elastic_model=model,
        )

        photon_grid = np.linspace(0., 100., 2001)
        cs, eta = photoabsorption_model(photon_grid, *params['photoabsorption'])
        self.define_photoabsorption(name, photon_grid, cs, eta)

    def export_database(self, output_path: str) -> None:
        """Export the gas database to HDF5.

        Args:
            output_path: Path to output HDF5 file
        """
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        string_dtype = h5py.string_dtype()
        with h5py.File(output_file, 'w') as f:
            for gas_name, gas_data in self.gases.items():
                gas_group = f.create_group(gas_name)
                gas_group.attrs['number'] = gas_data['number']

                if 'elastic' not in gas_data:
                    logger.warning(f"No electron cross-section data for {gas_name}")
                else:
                    gas_group.attrs['mass_ratio_energy'] = gas_data['mass_ratio_energy']
                    gas_group.attrs['elastic_model'] = gas_data['elastic_model']
                    gas_group.attrs['ionisation_model'] = gas_data['ionisation_model']
                    for key in ('energy_grid', 'elastic', 'elastic_angular', 'ionisation',
                                'ionisation_angular', 'ionisation_thresholds', 'opal_beaty',
                                'attachment', 'inelastic', 'inelastic_angular',
                                'inelastic_thresholds', 'inelastic_models'):
                        gas_group.create_dataset(key, data=gas_data[key])
                    for key in ('ionisation_descriptions', 'attachment_descriptions',
                                'inelastic_descriptions'):
                        gas_group.create_dataset(
                            key, data=np.array(gas_data[key], dtype=object), dtype=string_dtype)

                if 'photoabsorption' in gas_data:
                    optical_group = gas_group.create_group('photoabsorption')
                    for key, values in gas_data['photoabsorption'].items():
                        optical_group.create_dataset(key, data=values)

        logger.info(f"Exported gas database: {output_path}")


def create_model_database(
    output_path: str,
    gases: Optional[List[str]] = None
) -> None:
    """Write a database of analytic model gases.

    Args:
        output_path: Path to output HDF5 file
        gases: Gas names to include (all model gases if None)
    """
    generator = GasDatabaseGenerator()
    for name in gases or list(MODEL_GASES):
        generator.define_model_gas(name)
    generator.export_database(output_path)
