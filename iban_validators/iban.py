"""
IBAN Validator
Version: 1.0.0

ISO 13616 validation of International Bank Account Numbers. Validation runs
as ordered fail-fast stages; the first failing stage rejects the input:

1. Input guard      - must be a non-empty string
2. Normalize        - strip whitespace and hyphens, upper-case
3. Shape            - 15..34 chars, <2 letters><2 digits><alphanumerics>
4. Registry lookup  - country code must be supported
5. Length           - exact length for the country
6. BBAN pattern     - BBAN matches the country structure
7. National check   - country-specific BBAN checksum, where one exists
8. Universal check  - ISO 7064 MOD 97-10 over the rearranged IBAN

Every failure, including unexpected data inside a stage, yields False.
"""

from __future__ import annotations

import logging
from typing import Any

import regex as re

from .mod97 import iso13616_to_digits, mod97
from .registry import lookup
from .strategies import run_checksum

logger = logging.getLogger(__name__)

IBAN_MIN_LENGTH = 15
IBAN_MAX_LENGTH = 34

_SEPARATOR_REGEX = re.compile(r"[\s-]")
_IBAN_SHAPE_REGEX = re.compile(r"[A-Z]{2}[0-9]{2}[A-Z0-9]+")


def normalize_iban(value: Any) -> str:
    """
    Strip whitespace and hyphen separators and upper-case the result.

    Args:
        value: Raw IBAN text (e.g. "fr14-2004-1010 ...")

    Returns:
        Normalized IBAN, or "" for non-string input

    Example:
        >>> normalize_iban("NL91 ABNA 0417 1643 00")
        'NL91ABNA0417164300'
    """
    if not isinstance(value, str):
        return ""
    return _SEPARATOR_REGEX.sub("", value).upper()


def _universal_checksum(iban: str) -> bool:
    """MOD 97-10: country code and check digits moved to the end, letters as 10..35."""
    rearranged = iban[4:] + iban[:4]
    digits = iso13616_to_digits(rearranged)
    if digits is None:
        return False
    return mod97(digits) == 1


def is_valid_iban(value: Any) -> bool:
    """
    Validate an IBAN against its country format and checksums.

    Args:
        value: Candidate IBAN; spaces and hyphens are ignored, case is ignored

    Returns:
        True only if every validation stage passes, False otherwise
        (including non-string input, unsupported countries, bad BBAN
        structure and failed checksums)

    Examples:
        >>> is_valid_iban("NL91 ABNA 0417 1643 00")
        True
        >>> is_valid_iban("NL91ABNA0417164301")
        False
        >>> is_valid_iban(None)
        False
    """
    if not isinstance(value, str) or not value:
        logger.debug(f"is_valid_iban rejected invalid input type {type(value).__name__}")
        return False

    iban = normalize_iban(value)

    if not IBAN_MIN_LENGTH <= len(iban) <= IBAN_MAX_LENGTH:
        logger.debug(f"is_valid_iban rejected length {len(iban)} outside {IBAN_MIN_LENGTH}..{IBAN_MAX_LENGTH}")
        return False

    if not _IBAN_SHAPE_REGEX.fullmatch(iban):
        logger.debug("is_valid_iban rejected malformed shape")
        return False

    country_code = iban[:2]
    spec = lookup(country_code)
    if spec is None:
        logger.debug(f"is_valid_iban rejected unsupported country {country_code}")
        return False

    if len(iban) != spec.length:
        logger.debug(f"is_valid_iban rejected {country_code} length: expected {spec.length}, got {len(iban)}")
        return False

    bban = iban[4:]
    if not spec.matches_bban(bban):
        logger.debug(f"is_valid_iban rejected {country_code} BBAN structure")
        return False

    if spec.national_checksum is not None and not run_checksum(spec.national_checksum, bban):
        logger.debug(f"is_valid_iban rejected {country_code} national checksum")
        return False

    is_valid = _universal_checksum(iban)
    if not is_valid:
        logger.debug(f"is_valid_iban rejected {country_code} MOD-97 check digits")
    return is_valid


def checksum_iban(text: str) -> bool:
    """Presidio validator wrapper for IBAN validation."""
    return is_valid_iban(text)


__all__ = [
    "IBAN_MIN_LENGTH",
    "IBAN_MAX_LENGTH",
    "normalize_iban",
    "is_valid_iban",
    "checksum_iban",
]
