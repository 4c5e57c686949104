"""
MOD-97 Calculator
Version: 1.0.0

Arbitrary-length modulo-97 reduction over decimal digit strings, plus the
ISO 13616 letter substitution used by the universal IBAN checksum.

The reduction works chunk by chunk so intermediate values stay small:
(a * 10^k + b) mod 97 == ((a mod 97) * 10^k + b) mod 97
"""

from __future__ import annotations

import logging
from typing import Optional

import regex as re

logger = logging.getLogger(__name__)

# Largest prefix reduced per step (nine digits always fit a machine word)
MOD97_CHUNK_SIZE = 9

_DIGITS_REGEX = re.compile(r"[0-9]+")
_ISO13616_REGEX = re.compile(r"[0-9A-Z]+")


def mod97(digits: str) -> Optional[int]:
    """
    Compute ``digits mod 97`` for a decimal string of any length.

    Algorithm:
    1. Take a prefix of at most 9 digits
    2. Reduce it modulo 97
    3. Splice the remainder back in front of the remaining digits
    4. Repeat until at most 2 digits remain, return their value mod 97

    Args:
        digits: String of ASCII digits (may be hundreds of digits long)

    Returns:
        Remainder in range 0..96, or None if the input is empty, not a
        string, or contains anything other than 0-9

    Examples:
        >>> mod97("3214282912345698765432161182")
        1
        >>> mod97("12AB") is None
        True
    """
    if not isinstance(digits, str) or not digits:
        return None

    remainder = digits
    while len(remainder) > 2:
        chunk = remainder[:MOD97_CHUNK_SIZE]
        if not _DIGITS_REGEX.fullmatch(chunk):
            logger.debug(f"mod97 rejected non-numeric chunk of length {len(chunk)}")
            return None
        remainder = str(int(chunk) % 97) + remainder[len(chunk):]

    if not _DIGITS_REGEX.fullmatch(remainder):
        return None
    return int(remainder) % 97


def iso13616_to_digits(text: str) -> Optional[str]:
    """Replace every letter with its ISO 13616 value (A=10 ... Z=35).

    Returns None when ``text`` holds anything besides 0-9 and A-Z.
    """
    if not isinstance(text, str) or not _ISO13616_REGEX.fullmatch(text):
        return None
    return "".join(ch if ch.isdigit() else str(ord(ch) - 55) for ch in text)


__all__ = [
    "MOD97_CHUNK_SIZE",
    "mod97",
    "iso13616_to_digits",
]
