"""
IBAN Validators Package
Version: 1.0.0

Registry-driven IBAN validation (ISO 13616) with national BBAN checksums
and a Presidio recognizer for finding valid IBANs in text.
"""

from .iban import (
    IBAN_MAX_LENGTH,
    IBAN_MIN_LENGTH,
    checksum_iban,
    is_valid_iban,
    normalize_iban,
)
from .mod97 import iso13616_to_digits, mod97
from .registry import (
    COUNTRY_SPECS,
    CountrySpec,
    lookup,
    sepa_countries,
    supported_countries,
)
from .strategies import ChecksumStrategy, run_checksum

__all__ = [
    # Validation
    "is_valid_iban",
    "checksum_iban",
    "normalize_iban",
    "IBAN_MIN_LENGTH",
    "IBAN_MAX_LENGTH",
    # Registry
    "CountrySpec",
    "COUNTRY_SPECS",
    "lookup",
    "supported_countries",
    "sepa_countries",
    # Checksums
    "ChecksumStrategy",
    "run_checksum",
    "mod97",
    "iso13616_to_digits",
]

__version__ = "1.0.0"
