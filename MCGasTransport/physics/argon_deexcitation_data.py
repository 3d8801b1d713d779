"""Argon de-excitation data: radiative transitions, collisional transfer and quenching.

Level labels follow Paschen notation with an 'Ar_' prefix. Radiative rates
are in ns-1, two-body rate constants in cm3 ns-1, three-body rate constants
in cm6 ns-1, collision radii in cm.

Radiative transition rates are taken from the NIST Atomic Spectra Database,
complemented by Zatsarinny and Bartschat, J. Phys. B 39 (2006) 2145.
Oscillator strengths not in NIST are from Berkowitz, Atomic and Molecular
Photoabsorption (2002), and Lee and Lu, Phys. Rev. A 8 (1973) 1241.
"""

from typing import Dict, List, Optional, Tuple, Union


# Final level of a transition to the ground state (or loss by quenching)
GROUND = None
# Placeholder for a resonance transition rate derived from the oscillator strength
RESONANCE = 'resonance'

Rate = Union[float, str]
Transition = Tuple[Rate, Optional[str]]


# Magboltz level descriptions (characters 5-11 of the term description)
ARGON_LEVEL_NAMES: Dict[str, str] = {
    '1S5': 'Ar_1S5', '1S4': 'Ar_1S4', '1S3': 'Ar_1S3', '1S2': 'Ar_1S2',
    '2P10': 'Ar_2P10', '2P9': 'Ar_2P9', '2P8': 'Ar_2P8', '2P7': 'Ar_2P7',
    '2P6': 'Ar_2P6', '2P5': 'Ar_2P5', '2P4': 'Ar_2P4', '2P3': 'Ar_2P3',
    '2P2': 'Ar_2P2', '2P1': 'Ar_2P1',
    '3D6': 'Ar_3D6', '3D5': 'Ar_3D5', '3D3': 'Ar_3D3', '3D4!': 'Ar_3D4!',
    '3D4': 'Ar_3D4', '3D1!!': 'Ar_3D1!!', '2S5': 'Ar_2S5', '2S4': 'Ar_2S4',
    '3D1!': 'Ar_3D1!', '3D2': 'Ar_3D2', '3S1!!!!': 'Ar_3S1!!!!',
    '3S1!!': 'Ar_3S1!!', '3S1!!!': 'Ar_3S1!!!', '2S3': 'Ar_2S3',
    '2S2': 'Ar_2S2', '3S1!': 'Ar_3S1!',
    '4D5': 'Ar_4D5', '3S4': 'Ar_3S4', '4D2': 'Ar_4D2', '4S1!': 'Ar_4S1!',
    '3S2': 'Ar_3S2', '5D5': 'Ar_5D5', '4S4': 'Ar_4S4', '5D2': 'Ar_5D2',
    '6D5': 'Ar_6D5', '5S1!': 'Ar_5S1!', '4S2': 'Ar_4S2', '5S4': 'Ar_5S4',
    '6D2': 'Ar_6D2', 'HIGH': 'Ar_Higher',
}


def level_key(description: str) -> str:
    """Extract the level key from a cross-section term description."""
    return description[5:12].strip()


LEVELS_4S = ['Ar_1S5', 'Ar_1S4', 'Ar_1S3', 'Ar_1S2']
LEVELS_4P = ['Ar_2P10', 'Ar_2P9', 'Ar_2P8', 'Ar_2P7', 'Ar_2P6',
             'Ar_2P5', 'Ar_2P4', 'Ar_2P3', 'Ar_2P2', 'Ar_2P1']
_TO_4P_8 = ['Ar_2P10', 'Ar_2P9', 'Ar_2P8', 'Ar_2P7',
            'Ar_2P6', 'Ar_2P4', 'Ar_2P3', 'Ar_2P2']
_TO_4P_RES = [GROUND, 'Ar_2P10', 'Ar_2P8', 'Ar_2P7', 'Ar_2P6',
              'Ar_2P5', 'Ar_2P4', 'Ar_2P3', 'Ar_2P2', 'Ar_2P1']


def _transitions(rates: List[Rate], finals: List[Optional[str]]) -> List[Transition]:
    return list(zip(rates, finals))


# Label -> (oscillator strength, [(rate, final level)])
ARGON_RADIATIVE: Dict[str, Tuple[float, List[Transition]]] = {
    # Metastables
    'Ar_1S5': (0., []),
    'Ar_1S3': (0., []),
    'Ar_1S4': (0.0609, [(0.119, GROUND)]),
    'Ar_1S2': (0.25, [(0.51, GROUND)]),
    'Ar_2P10': (0., _transitions([0.0189, 5.43e-3, 9.8e-4, 1.9e-4], LEVELS_4S)),
    'Ar_2P9': (0., [(0.0331, 'Ar_1S5')]),
    'Ar_2P8': (0., _transitions([9.28e-3, 0.0215, 1.47e-3], ['Ar_1S5', 'Ar_1S4', 'Ar_1S2'])),
    'Ar_2P7': (0., _transitions([5.18e-3, 0.025, 2.43e-3, 1.06e-3], LEVELS_4S)),
    'Ar_2P6': (0., _transitions([0.0245, 4.9e-3, 5.03e-3], ['Ar_1S5', 'Ar_1S4', 'Ar_1S2'])),
    'Ar_2P5': (0., [(0.0402, 'Ar_1S4')]),
    'Ar_2P4': (0., _transitions([6.25e-4, 2.2e-5, 0.0186, 0.0139], LEVELS_4S)),
    'Ar_2P3': (0., _transitions([3.8e-3, 8.47e-3, 0.0223], ['Ar_1S5', 'Ar_1S4', 'Ar_1S2'])),
    'Ar_2P2': (0., _transitions([6.39e-3, 1.83e-3, 0.0117, 0.0153], LEVELS_4S)),
    'Ar_2P1': (0., _transitions([2.36e-4, 0.0445], ['Ar_1S4', 'Ar_1S2'])),
    'Ar_3D6': (0., _transitions([8.1e-3, 7.73e-4, 1.2e-4, 3.6e-4],
                                ['Ar_2P10', 'Ar_2P7', 'Ar_2P4', 'Ar_2P2'])),
    'Ar_3D5': (0.0011, _transitions(
        [7.4e-3, 3.9e-5, 3.09e-4, 1.37e-3, 5.75e-4, 3.2e-5, 1.4e-4, 1.7e-4, 2.49e-6, RESONANCE],
        ['Ar_2P10', 'Ar_2P8', 'Ar_2P7', 'Ar_2P6', 'Ar_2P5', 'Ar_2P4', 'Ar_2P3',
         'Ar_2P2', 'Ar_2P1', GROUND])),
    'Ar_3D3': (0., _transitions(
        [4.9e-3, 9.82e-5, 1.2e-4, 2.6e-4, 2.5e-3, 9.41e-5, 3.9e-4, 1.1e-4], _TO_4P_8)),
    'Ar_3D4!': (0., [(0.01593, 'Ar_2P9')]),
    'Ar_3D4': (0., _transitions([2.29e-3, 0.011, 8.8e-5, 2.53e-6],
                                ['Ar_2P9', 'Ar_2P8', 'Ar_2P6', 'Ar_2P3'])),
    'Ar_3D1!!': (0., _transitions(
        [5.85e-6, 1.2e-4, 5.7e-3, 7.3e-3, 2e-4, 1.54e-6, 2.08e-5, 6.75e-7], _TO_4P_8)),
    'Ar_2S5': (0., _transitions(
        [4.9e-3, 0.011, 1.1e-3, 4.6e-4, 3.3e-3, 5.9e-5, 1.2e-4, 3.1e-4], _TO_4P_8)),
    'Ar_2S4': (0.027, _transitions(
        [0.077, 2.44e-3, 8.9e-3, 4.6e-3, 2.7e-3, 1.3e-3, 4.5e-4, 2.9e-5, 3e-5, 1.6e-4],
        _TO_4P_RES)),
    'Ar_3D1!': (0., _transitions([3.1e-3, 2e-3, 0.015, 9.8e-6],
                                 ['Ar_2P9', 'Ar_2P8', 'Ar_2P6', 'Ar_2P3'])),
    'Ar_3D2': (0.0932, _transitions(
        [0.27, 1.35e-5, 9.52e-4, 0.011, 4.01e-5, 4.3e-3, 8.96e-4, 4.45e-5, 5.87e-5, 8.77e-4],
        _TO_4P_RES)),
    'Ar_3S1!!!!': (0., _transitions(
        [7.51e-6, 4.3e-5, 8.3e-4, 5.01e-5, 2.09e-4, 0.013, 2.2e-3, 3.35e-6], _TO_4P_8)),
    'Ar_3S1!!': (0., _transitions(
        [1.89e-4, 1.52e-4, 7.21e-4, 3.69e-4, 3.76e-3, 1.72e-4, 5.8e-4, 6.2e-3], _TO_4P_8)),
    'Ar_3S1!!!': (0., _transitions([7.36e-4, 4.2e-5, 9.3e-5, 0.015],
                                   ['Ar_2P9', 'Ar_2P8', 'Ar_2P6', 'Ar_2P3'])),
    'Ar_2S3': (0., _transitions([3.26e-3, 2.22e-3, 0.01, 5.1e-3],
                                ['Ar_2P10', 'Ar_2P7', 'Ar_2P4', 'Ar_2P2'])),
    'Ar_2S2': (0.0119, _transitions(
        [0.035, 1.76e-3, 2.1e-4, 2.8e-4, 1.39e-3, 3.8e-4, 2.0e-3, 8.9e-3, 3.4e-3, 1.9e-3],
        _TO_4P_RES)),
    'Ar_3S1!': (0.106, _transitions(
        [0.313, 2.05e-5, 8.33e-5, 3.9e-4, 3.96e-4, 4.2e-4, 4.5e-3, 4.84e-5, 7.1e-3, 5.2e-3],
        _TO_4P_RES)),
    'Ar_4D5': (0.0019, _transitions(
        [2.78e-3, 2.8e-4, 8.6e-4, 9.2e-4, 4.6e-4, 1.6e-4, RESONANCE],
        ['Ar_2P10', 'Ar_2P8', 'Ar_2P6', 'Ar_2P5', 'Ar_2P3', 'Ar_2P2', GROUND])),
    'Ar_3S4': (0.0144, _transitions(
        [4.21e-4, 2e-3, 1.7e-3, 7.2e-4, 3.5e-4, 1.2e-4, 4.2e-6, 3.3e-5, 9.7e-5, RESONANCE],
        ['Ar_2P10', 'Ar_2P8', 'Ar_2P7', 'Ar_2P6', 'Ar_2P5', 'Ar_2P4', 'Ar_2P3',
         'Ar_2P2', 'Ar_2P1', GROUND])),
    'Ar_4D2': (0.048, _transitions([1.7e-4, RESONANCE], ['Ar_2P7', GROUND])),
    'Ar_4S1!': (0.0209, _transitions(
        [1.05e-3, 3.1e-5, 2.5e-5, 4.0e-4, 5.8e-5, 1.2e-4, RESONANCE],
        ['Ar_2P10', 'Ar_2P8', 'Ar_2P7', 'Ar_2P6', 'Ar_2P5', 'Ar_2P3', GROUND])),
    'Ar_3S2': (0.0221, _transitions(
        [2.85e-4, 5.1e-5, 5.3e-5, 1.6e-4, 1.5e-4, 6.0e-4, 2.48e-3, 9.6e-4, 3.59e-4, RESONANCE],
        ['Ar_2P10', 'Ar_2P8', 'Ar_2P7', 'Ar_2P6', 'Ar_2P5', 'Ar_2P4', 'Ar_2P3',
         'Ar_2P2', 'Ar_2P1', GROUND])),
    'Ar_5D5': (0.0041, _transitions(
        [2.2e-3, 1.1e-4, 7.6e-5, 4.2e-4, 2.4e-4, 2.1e-4, 2.4e-4, 1.2e-4, RESONANCE],
        ['Ar_2P10', 'Ar_2P8', 'Ar_2P7', 'Ar_2P6', 'Ar_2P5', 'Ar_2P4', 'Ar_2P3',
         'Ar_2P2', GROUND])),
    'Ar_4S4': (0.0139, _transitions(
        [1.9e-4, 1.1e-3, 5.2e-4, 5.1e-4, 9.4e-5, 5.4e-5, RESONANCE],
        ['Ar_2P10', 'Ar_2P8', 'Ar_2P7', 'Ar_2P6', 'Ar_2P5', 'Ar_2P4', GROUND])),
    'Ar_5D2': (0.0426, _transitions(
        [5.9e-5, 9.0e-6, 1.5e-4, 3.1e-5, RESONANCE],
        ['Ar_2P8', 'Ar_2P7', 'Ar_2P5', 'Ar_2P2', GROUND])),
    'Ar_6D5': (0.00075, _transitions(
        [1.9e-3, 4.2e-4, 3e-4, 5.1e-5, 6.6e-5, 1.21e-4, RESONANCE],
        ['Ar_2P10', 'Ar_2P6', 'Ar_2P5', 'Ar_2P4', 'Ar_2P3', 'Ar_2P1', GROUND])),
    'Ar_5S1!': (0.00051, _transitions([7.7e-5, RESONANCE], ['Ar_2P5', GROUND])),
    'Ar_4S2': (0.00074, _transitions(
        [4.5e-4, 2e-4, 2.1e-4, 1.2e-4, 1.8e-4, 9e-4, 3.3e-4, RESONANCE],
        ['Ar_2P10', 'Ar_2P8', 'Ar_2P7', 'Ar_2P5', 'Ar_2P4', 'Ar_2P3', 'Ar_2P2', GROUND])),
    'Ar_5S4': (0.0211, _transitions(
        [3.6e-4, 1.2e-4, 1.5e-4, 1.4e-4, 7.5e-5, RESONANCE],
        ['Ar_2P8', 'Ar_2P6', 'Ar_2P4', 'Ar_2P3', 'Ar_2P2', GROUND])),
    'Ar_6D2': (0.0574, _transitions([3.33e-3, RESONANCE], ['Ar_2P7', GROUND])),
}

# Sum of higher J = 1 states, allocated with equal probability to the
# five nearest levels below (collisional, non-ionising)
ARGON_HIGHER_TARGETS = ['Ar_6D5', 'Ar_5S1!', 'Ar_4S2', 'Ar_5S4', 'Ar_6D2']
ARGON_HIGHER_RATE = 100.

# Pseudo-levels for molecular argon
ARGON_DIMER = 'Ar_Dimer'
ARGON_EXCIMER = 'Ar_Excimer'
ARGON_DIMER_ENERGY = 14.71

# Metastables: (three-body excimer formation, two-body mixing to 1S4)
# Kolts and Setser, J. Chem. Phys. 68 (1978) 4848
ARGON_METASTABLE_TRANSFER: Dict[str, Tuple[float, float]] = {
    'Ar_1S5': (1.1e-41, 2.1e-24),
    'Ar_1S3': (0.83e-41, 5.3e-24),
}

# Population transfer within the 4p levels
# Nguyen and Sadeghi, Phys. Rev. 18 (1978) 1388
ARGON_4P_MIXING: Dict[str, List[Tuple[float, str]]] = {
    'Ar_2P2': [(0.5e-21, 'Ar_2P3')],
    'Ar_2P3': [(27.5e-21, 'Ar_2P4'), (0.3e-21, 'Ar_2P5'), (44.0e-21, 'Ar_2P6'),
               (1.4e-21, 'Ar_2P7'), (1.9e-21, 'Ar_2P8'), (0.8e-21, 'Ar_2P9')],
    'Ar_2P4': [(23.0e-21, 'Ar_2P3'), (0.7e-21, 'Ar_2P5'), (4.8e-21, 'Ar_2P6'),
               (3.2e-21, 'Ar_2P7'), (1.4e-21, 'Ar_2P8'), (3.3e-21, 'Ar_2P9')],
    'Ar_2P5': [(1.7e-21, 'Ar_2P4'), (11.3e-21, 'Ar_2P6'), (9.5e-21, 'Ar_2P8')],
    'Ar_2P6': [(4.1e-21, 'Ar_2P7'), (6.0e-21, 'Ar_2P8'), (1.0e-21, 'Ar_2P9')],
    'Ar_2P7': [(2.5e-21, 'Ar_2P6'), (14.3e-21, 'Ar_2P8'), (23.3e-21, 'Ar_2P9')],
    'Ar_2P8': [(0.3e-21, 'Ar_2P6'), (0.8e-21, 'Ar_2P7'), (18.2e-21, 'Ar_2P9'),
               (1.0e-21, 'Ar_2P10')],
    'Ar_2P9': [(6.8e-21, 'Ar_2P8'), (5.1e-21, 'Ar_2P10')],
}

# Transfer from 4p to 4s levels, split equally over the four 4s levels
# Sadeghi et al., J. Chem. Phys. 115 (2001) 3144 (2P1),
# Chang and Setser, J. Chem. Phys. 69 (1978) 3885 (others)
ARGON_4P_TO_4S: Dict[str, float] = {
    'Ar_2P1': 1.6e-20,
    'Ar_2P2': 5.3e-20,
    'Ar_2P3': 4.7e-20,
    'Ar_2P4': 3.9e-20,
    'Ar_2P7': 5.5e-20,
    'Ar_2P8': 3.e-20,
    'Ar_2P9': 3.5e-20,
    'Ar_2P10': 2.0e-20,
}

# Transfer from 3d, 5s and higher levels to 4p (order of magnitude estimate),
# split as 0.1 x k over the ten 4p levels
ARGON_TO_4P_RATE = 1.e-20
ARGON_3D5S_LEVELS = [
    'Ar_3D6', 'Ar_3D5', 'Ar_3D3', 'Ar_3D4!', 'Ar_3D4', 'Ar_3D1!!', 'Ar_3D1!',
    'Ar_3D2', 'Ar_3S1!!!!', 'Ar_3S1!!', 'Ar_3S1!!!', 'Ar_3S1!', 'Ar_2S5',
    'Ar_2S4', 'Ar_2S3', 'Ar_2S2',
]
ARGON_HIGH_LEVELS = [
    'Ar_4D5', 'Ar_3S4', 'Ar_4D2', 'Ar_4S1!', 'Ar_3S2', 'Ar_5D5', 'Ar_4S4',
    'Ar_5D2', 'Ar_6D5', 'Ar_5S1!', 'Ar_4S2', 'Ar_5S4', 'Ar_6D2',
]

# Hornbeck-Molnar associative ionisation of the higher levels
# Becker and Lampe, J. Chem. Phys. 42 (1965) 3857; value not validated
ARGON_HORNBECK_MOLNAR = 2.e-18

# Collision radii for the hard-sphere estimate of non-resonant levels
ARGON_RADIUS_3D = 436.e-10
ARGON_RADIUS_5S = 635.e-10
ARGON_NON_RESONANT_3D = [
    'Ar_3D6', 'Ar_3D3', 'Ar_3D4!', 'Ar_3D4', 'Ar_3D1!!', 'Ar_3D1!',
    'Ar_3S1!!!!', 'Ar_3S1!!', 'Ar_3S1!!!',
]
ARGON_NON_RESONANT_5S = ['Ar_2S5', 'Ar_2S3']

# 4p levels quenched with an average rate constant
AVERAGE_4P = ['Ar_2P10', 'Ar_2P9', 'Ar_2P7', 'Ar_2P4', 'Ar_2P3', 'Ar_2P2']

# Penning probability: a float, WK for eta^0.4 of the quencher, or None for
# non-ionising quenching
WK = 'wk'
PenningProbability = Union[float, str, None]


def _with_4p_average(rates: Dict[str, Tuple[float, PenningProbability]],
                     average: Tuple[float, PenningProbability]
                     ) -> Dict[str, Tuple[float, PenningProbability]]:
    table = dict(rates)
    for label in AVERAGE_4P:
        table[label] = average
    return table


# Scaling of ethane 4p rate constants to isobutane
_FR_ISO = (340. + 250.) / (340. + 195.)
ISOBUTANE_4P_FACTOR = _FR_ISO * _FR_ISO * ((30.1 / 58.1) * (39.9 + 58.1) / (39.9 + 30.1)) ** 0.5


# Quencher -> collision radius, optical data name, rate constants per level
# Velazco et al., J. Chem. Phys. 69 (1978); Chen and Setser, J. Phys. Chem. 95 (1991);
# Sadeghi et al., J. Chem. Phys. 115 (2001)
ARGON_QUENCHERS: Dict[str, dict] = {
    'CO2': {
        'radius': 165.e-10,
        'optics': 'CO2',
        'penning_wk': True,
        'rates': _with_4p_average({
            'Ar_1S5': (5.3e-19, None),
            'Ar_1S4': (5.0e-19, None),
            'Ar_1S3': (5.9e-19, None),
            'Ar_1S2': (7.4e-19, None),
            'Ar_2P8': (6.4e-19, None),
            'Ar_2P6': (6.1e-19, None),
            'Ar_2P5': (6.6e-19, None),
            'Ar_2P1': (6.2e-19, None),
        }, (6.33e-19, None)),
    },
    'CH4': {
        'radius': 190.e-10,
        'optics': 'CH4',
        'penning_wk': True,
        'rates': _with_4p_average({
            'Ar_1S5': (4.55e-19, None),
            'Ar_1S4': (4.5e-19, None),
            'Ar_1S3': (5.30e-19, None),
            'Ar_1S2': (5.7e-19, None),
            'Ar_2P8': (7.4e-19, WK),
            'Ar_2P6': (3.4e-19, WK),
            'Ar_2P5': (6.0e-19, WK),
            'Ar_2P1': (9.3e-19, WK),
        }, (6.53e-19, WK)),
    },
    'C2H6': {
        'radius': 195.e-10,
        'optics': 'C2H6',
        'penning_wk': True,
        'rates': _with_4p_average({
            'Ar_1S5': (5.29e-19, WK),
            'Ar_1S4': (6.2e-19, WK),
            'Ar_1S3': (6.53e-19, WK),
            'Ar_1S2': (10.7e-19, WK),
            'Ar_2P8': (9.2e-19, WK),
            'Ar_2P6': (4.8e-19, WK),
            'Ar_2P5': (9.9e-19, WK),
            'Ar_2P1': (11.0e-19, WK),
        }, (8.7e-19, WK)),
    },
    'iC4H10': {
        'radius': 250.e-10,
        'optics': 'nC4H10',
        'penning_wk': True,
        'rates': _with_4p_average({
            'Ar_1S5': (7.1e-19, WK),
            'Ar_1S4': (6.1e-19, WK),
            'Ar_1S3': (8.5e-19, WK),
            'Ar_1S2': (11.0e-19, WK),
            'Ar_2P8': (ISOBUTANE_4P_FACTOR * 9.2e-19, WK),
            'Ar_2P6': (ISOBUTANE_4P_FACTOR * 4.8e-19, WK),
            'Ar_2P5': (ISOBUTANE_4P_FACTOR * 9.9e-19, WK),
            'Ar_2P1': (ISOBUTANE_4P_FACTOR * 11.0e-19, WK),
        }, (ISOBUTANE_4P_FACTOR * 5.5e-19, WK)),
    },
    'C2H2': {
        'radius': 165.e-10,
        'optics': 'C2H2',
        'penning_wk': True,
        'rates': _with_4p_average({
            'Ar_1S5': (5.6e-19, 0.61),
            'Ar_1S4': (4.6e-19, WK),
            'Ar_1S3': (5.6e-19, 0.61),
            'Ar_1S2': (8.7e-19, WK),
            'Ar_2P8': (5.0e-19, 0.3),
            'Ar_2P6': (5.7e-19, 0.3),
            'Ar_2P5': (6.0e-19, 0.3),
            'Ar_2P1': (5.3e-19, 0.3),
        }, (5.5e-19, 0.3)),
    },
    'CF4': {
        'radius': 235.e-10,
        'optics': 'CF4',
        'penning_wk': False,
        'rates': _with_4p_average({
            'Ar_1S5': (0.33e-19, None),
            'Ar_1S3': (0.26e-19, None),
            'Ar_2P8': (1.7e-19, None),
            'Ar_2P6': (1.7e-19, None),
            'Ar_2P5': (1.6e-19, None),
            'Ar_2P1': (2.2e-19, None),
        }, (1.8e-19, None)),
    },
}
