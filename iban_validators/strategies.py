"""
National BBAN Checksum Strategies
Version: 1.0.0

Country-specific control-digit checks applied to the BBAN (the part of an
IBAN after the country code and check digits):

- MOD97:        Bosnia, Montenegro, North Macedonia, Portugal, Serbia, Slovenia
- BELGIAN:      Belgium (account mod 97, zero remainder means 97)
- CZECH_SLOVAK: Czech Republic, Slovakia (two weighted modulo-11 fields)
- ESTONIAN:     Estonia (7-3-1 weighted modulo-10)
- SPANISH:      Spain (two weighted modulo-11 fields)
- FRENCH:       France, Monaco (French letter table, then mod 97)
- CROATIAN:     Croatia (two ISO 7064 MOD 11,10 fields)
- HUNGARIAN:    Hungary (9-7-3-1 weighted modulo-10, account field width
                depends on zero padding)
- NORWEGIAN:    Norway (weighted modulo-11)
- POLISH:       Poland (3-9-7-1 weighted modulo-10 on the bank sort code)

Every check receives a BBAN that already matched its country's structural
pattern. Checks never raise: malformed input returns False.

References:
- SWIFT IBAN Registry (ISO 13616)
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Dict, List, Optional, Sequence

from .mod97 import mod97

logger = logging.getLogger(__name__)


class ChecksumStrategy(enum.Enum):
    """National BBAN checksum algorithms, one member per family."""

    MOD97 = "mod97"
    BELGIAN = "belgian"
    CZECH_SLOVAK = "czech_slovak"
    ESTONIAN = "estonian"
    SPANISH = "spanish"
    FRENCH = "french"
    CROATIAN = "croatian"
    HUNGARIAN = "hungarian"
    NORWEGIAN = "norwegian"
    POLISH = "polish"


# French banking standard letter table (not sequential: S maps to 2)
FRENCH_LETTER_VALUES = {
    **dict.fromkeys("AJ", "1"),
    **dict.fromkeys("BKS", "2"),
    **dict.fromkeys("CLT", "3"),
    **dict.fromkeys("DMU", "4"),
    **dict.fromkeys("ENV", "5"),
    **dict.fromkeys("FOW", "6"),
    **dict.fromkeys("GPX", "7"),
    **dict.fromkeys("HQY", "8"),
    **dict.fromkeys("IRZ", "9"),
}

CZECH_SLOVAK_PREFIX_WEIGHTS = [10, 5, 8, 4, 2, 1]
CZECH_SLOVAK_ACCOUNT_WEIGHTS = [6, 3, 7, 9, 10, 5, 8, 4, 2, 1]
ESTONIAN_WEIGHTS = [7, 1, 3, 7, 1, 3, 7, 1, 3, 7, 1, 3, 7]
SPANISH_BANK_BRANCH_WEIGHTS = [4, 8, 5, 10, 9, 7, 3, 6]
SPANISH_ACCOUNT_WEIGHTS = [1, 2, 4, 8, 5, 10, 9, 7, 3, 6]
HUNGARIAN_WEIGHTS = [9, 7, 3, 1, 9, 7, 3, 1, 9, 7, 3, 1, 9, 7, 3]
NORWEGIAN_WEIGHTS = [5, 4, 3, 2, 7, 6, 5, 4, 3, 2]
POLISH_WEIGHTS = [3, 9, 7, 1, 3, 9, 7]

HUNGARIAN_SHORT_ACCOUNT_SUFFIX = "00000000"


def _parse_digits(text: str) -> Optional[List[int]]:
    """Return the digits of ``text`` as ints, or None if any char is not 0-9."""
    if not text or not all("0" <= ch <= "9" for ch in text):
        return None
    return [int(ch) for ch in text]


def _strip_separators(bban: str) -> str:
    if not isinstance(bban, str):
        return ""
    return bban.replace(" ", "").replace(".", "")


def _weighted_sum(digits: Sequence[int], weights: Sequence[int]) -> int:
    return sum(d * w for d, w in zip(digits, weights))


def _mod11_control(total: int) -> int:
    """Control digit rule shared by the Spanish and Czech/Slovak fields."""
    remainder = total % 11
    if remainder in (0, 1):
        return remainder
    return 11 - remainder


def _mod11_strict_control(total: int) -> int:
    """Norwegian rule: remainder 1 yields 10, which no digit can match."""
    remainder = total % 11
    return 0 if remainder == 0 else 11 - remainder


def _mod10_control(total: int) -> int:
    remainder = total % 10
    return 0 if remainder == 0 else 10 - remainder


def _check_weighted_field(
    bban: str,
    start: int,
    end: int,
    control_index: int,
    weights: Sequence[int],
    control_rule: Callable[[int], int],
) -> bool:
    """Compare ``bban[control_index]`` against the control digit of ``bban[start:end]``."""
    if not isinstance(bban, str) or len(bban) <= max(end - 1, control_index):
        return False

    field = _parse_digits(bban[start:end])
    control = _parse_digits(bban[control_index])
    if field is None or control is None:
        return False

    expected = control_rule(_weighted_sum(field, weights))
    if expected != control[0]:
        logger.debug(
            f"weighted field [{start}:{end}] control mismatch: expected {expected}, got {control[0]}"
        )
        return False
    return True


def check_mod97_bban(bban: str) -> bool:
    """Generic national MOD-97: the whole BBAN must be congruent to 1 mod 97."""
    return mod97(_strip_separators(bban)) == 1


def check_belgian_bban(bban: str) -> bool:
    """
    Validate Belgian BBAN (12 digits).

    Algorithm:
    1. Split into a 10-digit checking part and a 2-digit checksum
    2. Remainder R = checking part mod 97 (R == 0 is written as 97)
    3. Valid if R equals the checksum

    Examples:
        >>> check_belgian_bban("539007547034")
        True
        >>> check_belgian_bban("539007547035")
        False
    """
    stripped = _strip_separators(bban)
    if len(stripped) < 3:
        return False

    checking_part = _parse_digits(stripped[:-2])
    checksum = _parse_digits(stripped[-2:])
    if checking_part is None or checksum is None:
        return False

    remainder = int(stripped[:-2]) % 97
    if remainder == 0:
        remainder = 97
    return remainder == int(stripped[-2:])


def check_czech_slovak_bban(bban: str) -> bool:
    """
    Validate Czech or Slovak BBAN (20 digits).

    Layout: bank code (0-3), prefix (4-9, control at 9), account (10-19,
    control at 19). Both fields use modulo-11 weighted sums.
    """
    if not _check_weighted_field(bban, 4, 9, 9, CZECH_SLOVAK_PREFIX_WEIGHTS, _mod11_control):
        return False
    return _check_weighted_field(bban, 10, 19, 19, CZECH_SLOVAK_ACCOUNT_WEIGHTS, _mod11_control)


def check_estonian_bban(bban: str) -> bool:
    """Validate Estonian BBAN: positions 2-14 weighted 7-1-3, control at 15."""
    return _check_weighted_field(bban, 2, 15, 15, ESTONIAN_WEIGHTS, _mod10_control)


def check_spanish_bban(bban: str) -> bool:
    """
    Validate Spanish BBAN (20 digits) with its two control digits.

    Layout: bank + branch (0-7), control for bank/branch (8), control for
    account (9), account number (10-19).
    """
    if not _check_weighted_field(bban, 0, 8, 8, SPANISH_BANK_BRANCH_WEIGHTS, _mod11_control):
        return False
    return _check_weighted_field(bban, 10, 20, 9, SPANISH_ACCOUNT_WEIGHTS, _mod11_control)


def check_french_bban(bban: str) -> bool:
    """
    Validate French or Monegasque BBAN (23 characters, RIB key at the end).

    Letters in the account number are replaced using the French banking
    table (A/J=1, B/K/S=2, ... I/R/Z=9); the resulting number must be
    divisible by 97.
    """
    stripped = _strip_separators(bban)
    converted = "".join(FRENCH_LETTER_VALUES.get(ch, ch) for ch in stripped)
    return mod97(converted) == 0


def _iso7064_mod11_10(digits: Sequence[int]) -> int:
    """ISO 7064 MOD 11,10 control digit for ``digits``."""
    product = 10
    for digit in digits:
        product += digit
        if product % 10 != 0:
            product %= 10
        product = (product * 2) % 11
    control = 11 - product
    return 0 if control == 10 else control


def check_croatian_bban(bban: str) -> bool:
    """
    Validate Croatian BBAN (17 digits).

    Layout: bank (0-5), bank control (6), account (7-15), account control (16).
    """
    if not isinstance(bban, str) or len(bban) < 17:
        return False

    bank = _parse_digits(bban[0:6])
    account = _parse_digits(bban[7:16])
    controls = _parse_digits(bban[6] + bban[16])
    if bank is None or account is None or controls is None:
        return False

    return _iso7064_mod11_10(bank) == controls[0] and _iso7064_mod11_10(account) == controls[1]


def check_hungarian_bban(bban: str) -> bool:
    """
    Validate Hungarian BBAN (24 digits).

    Algorithm:
    1. Bank/branch (0-6) weighted 9-7-3-1, control digit at 7
    2. If the BBAN ends with eight zeros the account number is the short
       16-digit form: positions 8-14 checked against control at 15
    3. Otherwise the full 24-digit form: positions 8-22 checked against
       control at 23

    Both checks use the modulo-10 rule (0 -> 0, R -> 10 - R).
    """
    if not _check_weighted_field(bban, 0, 7, 7, HUNGARIAN_WEIGHTS, _mod10_control):
        return False

    if bban.endswith(HUNGARIAN_SHORT_ACCOUNT_SUFFIX):
        return _check_weighted_field(bban, 8, 15, 15, HUNGARIAN_WEIGHTS, _mod10_control)
    return _check_weighted_field(bban, 8, 23, 23, HUNGARIAN_WEIGHTS, _mod10_control)


def check_norwegian_bban(bban: str) -> bool:
    """
    Validate Norwegian BBAN (11 digits, modulo-11 control at position 10).

    Examples:
        >>> check_norwegian_bban("86011117947")
        True
    """
    stripped = _strip_separators(bban)
    return _check_weighted_field(stripped, 0, 10, 10, NORWEGIAN_WEIGHTS, _mod11_strict_control)


def check_polish_bban(bban: str) -> bool:
    """Validate Polish BBAN: bank sort code (0-6) weighted 3-9-7-1, control at 7."""
    return _check_weighted_field(bban, 0, 7, 7, POLISH_WEIGHTS, _mod10_control)


STRATEGY_FUNCTIONS: Dict[ChecksumStrategy, Callable[[str], bool]] = {
    ChecksumStrategy.MOD97: check_mod97_bban,
    ChecksumStrategy.BELGIAN: check_belgian_bban,
    ChecksumStrategy.CZECH_SLOVAK: check_czech_slovak_bban,
    ChecksumStrategy.ESTONIAN: check_estonian_bban,
    ChecksumStrategy.SPANISH: check_spanish_bban,
    ChecksumStrategy.FRENCH: check_french_bban,
    ChecksumStrategy.CROATIAN: check_croatian_bban,
    ChecksumStrategy.HUNGARIAN: check_hungarian_bban,
    ChecksumStrategy.NORWEGIAN: check_norwegian_bban,
    ChecksumStrategy.POLISH: check_polish_bban,
}

_missing = set(ChecksumStrategy) - set(STRATEGY_FUNCTIONS)
if _missing:
    raise RuntimeError(f"No implementation for checksum strategies: {sorted(s.name for s in _missing)}")


def run_checksum(strategy: ChecksumStrategy, bban: str) -> bool:
    """
    Run the national check for ``strategy`` against ``bban``.

    Args:
        strategy: Member of ChecksumStrategy
        bban: BBAN already matched against the country pattern

    Returns:
        True if the national control digits match, False otherwise
        (including non-string input)
    """
    if not isinstance(bban, str):
        logger.debug(f"run_checksum rejected invalid type {type(bban).__name__}")
        return False

    is_valid = STRATEGY_FUNCTIONS[strategy](bban)
    if not is_valid:
        logger.debug(f"{strategy.name} national checksum failed")
    return is_valid


__all__ = [
    "ChecksumStrategy",
    "FRENCH_LETTER_VALUES",
    "STRATEGY_FUNCTIONS",
    "run_checksum",
    "check_mod97_bban",
    "check_belgian_bban",
    "check_czech_slovak_bban",
    "check_estonian_bban",
    "check_spanish_bban",
    "check_french_bban",
    "check_croatian_bban",
    "check_hungarian_bban",
    "check_norwegian_bban",
    "check_polish_bban",
]
