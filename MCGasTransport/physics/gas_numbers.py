"""Gas identifiers used by Magboltz-compatible cross-section sources."""

from typing import Dict, List

from ..utils.validation import ConfigurationError


# Gas name -> numeric identifier. Must stay in sync with external data
# keyed by the same identifiers.
GAS_NUMBERS: Dict[str, int] = {
    'CF4': 1,
    'Ar': 2,
    'He': 3,
    'He-4': 3,
    'He-3': 4,
    'Ne': 5,
    'Kr': 6,
    'Xe': 7,
    'CH4': 8,
    'C2H6': 9,
    'C3H8': 10,
    'iC4H10': 11,
    'CO2': 12,
    'neoC5H12': 13,
    'H2O': 14,
    'O2': 15,
    'N2': 16,
    'NO': 17,
    'N2O': 18,
    'C2H4': 19,
    'C2H2': 20,
    'H2': 21,
    'D2': 22,
    'CO': 23,
    'Methylal': 24,
    'DME': 25,
    'Reid-Step': 26,
    'Maxwell-Model': 27,
    'Reid-Ramp': 28,
    'C2F6': 29,
    'SF6': 30,
    'NH3': 31,
    'C3H6': 32,
    'cC3H6': 33,
    'CH3OH': 34,
    'C2H5OH': 35,
    'C3H7OH': 36,
    'Cs': 37,
    'F2': 38,
    'CS2': 39,
    'COS': 40,
    'CD4': 41,
    'BF3': 42,
    'C2HF5': 43,
    'C2H2F4': 43,
    'TMA': 44,
    'CHF3': 50,
    'CF3Br': 51,
    'C3F8': 52,
    'O3': 53,
    'Hg': 54,
    'H2S': 55,
    'nC4H10': 56,
    'nC5H12': 57,
    'N2 (Phelps)': 58,
    'GeH4': 59,
    'SiH4': 60,
}


def get_gas_number(name: str) -> int:
    """Look up the numeric identifier of a gas.

    Args:
        name: Gas name (e.g. 'Ar', 'CH4', 'iC4H10')

    Returns:
        Numeric gas identifier

    Raises:
        ConfigurationError: If the gas is not known
    """
    try:
        return GAS_NUMBERS[name]
    except KeyError:
        raise ConfigurationError(f"Gas {name!r} has no corresponding gas number") from None


def is_known_gas(name: str) -> bool:
    return name in GAS_NUMBERS


def list_gases() -> List[str]:
    """List all gas names with an identifier."""
    return list(GAS_NUMBERS.keys())
