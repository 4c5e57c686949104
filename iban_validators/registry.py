"""
IBAN Country Specification Registry
Version: 1.0.0

Static table of IBAN formats per country: total length, BBAN structure and
the optional national checksum applied to the BBAN. The registry and SEPA
flags are informational and are not consulted during validation.

The table is built once at import and exposed read-only, so it can be shared
across threads without locking.

References:
- SWIFT IBAN Registry (ISO 13616)
- European Payments Council: EPC409-09 SEPA scheme countries
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Optional

import regex as re

from .strategies import ChecksumStrategy

logger = logging.getLogger(__name__)

# Seconds allowed for a single BBAN pattern match (ReDoS protection)
BBAN_MATCH_TIMEOUT = 0.1


@dataclass(frozen=True)
class CountrySpec:
    """IBAN format for one country.

    Attributes:
        country_code: ISO 3166-1 alpha-2 code (e.g. "DE").
        length: Exact length of a normalized IBAN for this country.
        bban_pattern: Regex source describing the BBAN, matched in full.
        national_checksum: Country BBAN check, or None for MOD-97 only.
        iban_registry: Listed in the official SWIFT IBAN registry.
        sepa: Member of the SEPA scheme.
    """

    country_code: str
    length: int
    bban_pattern: str
    national_checksum: Optional[ChecksumStrategy] = None
    iban_registry: bool = True
    sepa: bool = False
    _compiled: Any = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", re.compile(self.bban_pattern))

    @property
    def bban_length(self) -> int:
        return self.length - 4

    def matches_bban(self, bban: str) -> bool:
        """Return True if ``bban`` matches the country pattern exactly."""
        if not isinstance(bban, str):
            return False
        try:
            return self._compiled.fullmatch(bban, timeout=BBAN_MATCH_TIMEOUT) is not None
        except TimeoutError:
            logger.warning(f"BBAN pattern match timed out for {self.country_code}")
            return False

    def to_dict(self) -> dict:
        return {
            "country_code": self.country_code,
            "length": self.length,
            "bban_pattern": self.bban_pattern,
            "national_checksum": self.national_checksum.value if self.national_checksum else None,
            "iban_registry": self.iban_registry,
            "sepa": self.sepa,
        }


def _spec(
    country_code: str,
    length: int,
    bban_pattern: str,
    national_checksum: Optional[ChecksumStrategy] = None,
    sepa: bool = False,
) -> CountrySpec:
    return CountrySpec(
        country_code=country_code,
        length=length,
        bban_pattern=bban_pattern,
        national_checksum=national_checksum,
        sepa=sepa,
    )


_SPECS = [
    _spec("AD", 24, r"[0-9]{8}[A-Z0-9]{12}", sepa=True),
    _spec("AE", 23, r"[0-9]{3}[0-9]{16}"),
    _spec("AL", 28, r"[0-9]{8}[A-Z0-9]{16}"),
    _spec("AT", 20, r"[0-9]{16}", sepa=True),
    _spec("AZ", 28, r"[A-Z]{4}[A-Z0-9]{20}"),
    _spec("BA", 20, r"[0-9]{16}", ChecksumStrategy.MOD97),
    _spec("BE", 16, r"[0-9]{12}", ChecksumStrategy.BELGIAN, sepa=True),
    _spec("BG", 22, r"[A-Z]{4}[0-9]{6}[A-Z0-9]{8}", sepa=True),
    _spec("BH", 22, r"[A-Z]{4}[A-Z0-9]{14}"),
    _spec("BR", 29, r"[0-9]{23}[A-Z]{1}[A-Z0-9]{1}"),
    _spec("BY", 28, r"[A-Z]{4}[0-9]{4}[A-Z0-9]{16}"),
    _spec("CH", 21, r"[0-9]{5}[A-Z0-9]{12}", sepa=True),
    _spec("CR", 22, r"[0-9]{18}"),
    _spec("CY", 28, r"[0-9]{8}[A-Z0-9]{16}", sepa=True),
    _spec("CZ", 24, r"[0-9]{20}", ChecksumStrategy.CZECH_SLOVAK, sepa=True),
    _spec("DE", 22, r"[0-9]{18}", sepa=True),
    _spec("DK", 18, r"[0-9]{14}", sepa=True),
    _spec("DO", 28, r"[A-Z]{4}[0-9]{20}"),
    _spec("EE", 20, r"[0-9]{16}", ChecksumStrategy.ESTONIAN, sepa=True),
    _spec("EG", 29, r"[0-9]{25}"),
    _spec("ES", 24, r"[0-9]{20}", ChecksumStrategy.SPANISH, sepa=True),
    _spec("FI", 18, r"[0-9]{14}", sepa=True),
    _spec("FO", 18, r"[0-9]{14}"),
    _spec("FR", 27, r"[0-9]{10}[A-Z0-9]{11}[0-9]{2}", ChecksumStrategy.FRENCH, sepa=True),
    _spec("GB", 22, r"[A-Z]{4}[0-9]{14}", sepa=True),
    _spec("GE", 22, r"[A-Z0-9]{2}[0-9]{16}"),
    _spec("GI", 23, r"[A-Z]{4}[A-Z0-9]{15}", sepa=True),
    _spec("GL", 18, r"[0-9]{14}"),
    _spec("GR", 27, r"[0-9]{7}[A-Z0-9]{16}", sepa=True),
    _spec("GT", 28, r"[A-Z0-9]{24}"),
    _spec("HR", 21, r"[0-9]{17}", ChecksumStrategy.CROATIAN, sepa=True),
    _spec("HU", 28, r"[0-9]{24}", ChecksumStrategy.HUNGARIAN, sepa=True),
    _spec("IE", 22, r"[A-Z0-9]{4}[0-9]{14}", sepa=True),
    _spec("IL", 23, r"[0-9]{19}"),
    _spec("IS", 26, r"[0-9]{22}", sepa=True),
    _spec("IT", 27, r"[A-Z]{1}[0-9]{10}[A-Z0-9]{12}", sepa=True),
    _spec("JO", 30, r"[A-Z]{4}[0-9]{4}[A-Z0-9]{18}"),
    _spec("KW", 30, r"[A-Z]{4}[A-Z0-9]{22}"),
    _spec("KZ", 20, r"[0-9]{3}[A-Z0-9]{13}"),
    _spec("LB", 28, r"[0-9]{4}[A-Z0-9]{20}"),
    _spec("LC", 32, r"[A-Z]{4}[A-Z0-9]{24}"),
    _spec("LI", 21, r"[0-9]{5}[A-Z0-9]{12}", sepa=True),
    _spec("LT", 20, r"[0-9]{16}", sepa=True),
    _spec("LU", 20, r"[0-9]{3}[A-Z0-9]{13}", sepa=True),
    _spec("LV", 21, r"[A-Z]{4}[A-Z0-9]{13}", sepa=True),
    _spec("MC", 27, r"[0-9]{10}[A-Z0-9]{11}[0-9]{2}", ChecksumStrategy.FRENCH, sepa=True),
    _spec("MD", 24, r"[A-Z0-9]{2}[A-Z0-9]{18}"),
    _spec("ME", 22, r"[0-9]{18}", ChecksumStrategy.MOD97),
    _spec("MK", 19, r"[0-9]{3}[A-Z0-9]{10}[0-9]{2}", ChecksumStrategy.MOD97),
    _spec("MR", 27, r"[0-9]{23}"),
    _spec("MT", 31, r"[A-Z]{4}[0-9]{5}[A-Z0-9]{18}", sepa=True),
    _spec("MU", 30, r"[A-Z]{4}[0-9]{19}[A-Z]{3}"),
    _spec("NL", 18, r"[A-Z]{4}[0-9]{10}", sepa=True),
    _spec("NO", 15, r"[0-9]{11}", ChecksumStrategy.NORWEGIAN, sepa=True),
    _spec("PK", 24, r"[A-Z0-9]{4}[0-9]{16}"),
    _spec("PL", 28, r"[0-9]{24}", ChecksumStrategy.POLISH, sepa=True),
    _spec("PS", 29, r"[A-Z0-9]{4}[0-9]{21}"),
    _spec("PT", 25, r"[0-9]{21}", ChecksumStrategy.MOD97, sepa=True),
    _spec("QA", 29, r"[A-Z]{4}[A-Z0-9]{21}"),
    _spec("RO", 24, r"[A-Z]{4}[A-Z0-9]{16}", sepa=True),
    _spec("RS", 22, r"[0-9]{18}", ChecksumStrategy.MOD97),
    _spec("SA", 24, r"[0-9]{2}[A-Z0-9]{18}"),
    _spec("SE", 24, r"[0-9]{20}", sepa=True),
    _spec("SI", 19, r"[0-9]{15}", ChecksumStrategy.MOD97, sepa=True),
    _spec("SK", 24, r"[0-9]{20}", ChecksumStrategy.CZECH_SLOVAK, sepa=True),
    _spec("SM", 27, r"[A-Z]{1}[0-9]{10}[A-Z0-9]{12}", sepa=True),
    _spec("TN", 24, r"[0-9]{20}"),
    _spec("TR", 26, r"[0-9]{5}[A-Z0-9]{17}"),
    _spec("UA", 29, r"[0-9]{6}[A-Z0-9]{19}"),
    _spec("VG", 24, r"[A-Z0-9]{4}[0-9]{16}"),
    _spec("XK", 20, r"[0-9]{16}"),
]

COUNTRY_SPECS: Mapping[str, CountrySpec] = MappingProxyType({spec.country_code: spec for spec in _SPECS})

for _code, _entry in COUNTRY_SPECS.items():
    # Every registered length must sit inside the global IBAN bounds
    if _entry.length < 15 or _entry.length > 34:
        raise RuntimeError(f"IBAN length {_entry.length} for {_code} outside ISO 13616 bounds")


def lookup(country_code: str) -> Optional[CountrySpec]:
    """
    Return the specification for an exact two-letter country code.

    Args:
        country_code: Upper-case ISO 3166-1 alpha-2 code

    Returns:
        CountrySpec, or None for unsupported codes (no fuzzy matching,
        lower-case codes are not found)

    Examples:
        >>> lookup("NL").length
        18
        >>> lookup("XX") is None
        True
    """
    if not isinstance(country_code, str):
        return None
    return COUNTRY_SPECS.get(country_code)


def supported_countries() -> List[str]:
    """Sorted list of all country codes in the registry."""
    return sorted(COUNTRY_SPECS)


def sepa_countries() -> List[str]:
    """Sorted list of country codes flagged as SEPA members."""
    return sorted(code for code, spec in COUNTRY_SPECS.items() if spec.sepa)


__all__ = [
    "BBAN_MATCH_TIMEOUT",
    "CountrySpec",
    "COUNTRY_SPECS",
    "lookup",
    "supported_countries",
    "sepa_countries",
]
