"""
Unit Tests for the IBAN Country Specification Registry

Test coverage:
- Exact lookup semantics
- Table consistency (lengths, pattern widths, national checksums)
- Full-match BBAN patterns
- Immutability
"""

import dataclasses

import pytest
import regex

from iban_validators.registry import (
    COUNTRY_SPECS,
    CountrySpec,
    lookup,
    sepa_countries,
    supported_countries,
)
from iban_validators.strategies import ChecksumStrategy


class TestLookup:
    """Test exact two-letter lookup"""

    def test_known_country(self):
        spec = lookup("NL")
        assert spec is not None
        assert spec.country_code == "NL"
        assert spec.length == 18
        assert spec.national_checksum is None

    @pytest.mark.parametrize("code", ["XX", "ZZ", "nl", "Nl", "NLD", "N", "", None, 42])
    def test_unsupported_codes_return_none(self, code):
        assert lookup(code) is None

    def test_supported_countries_sorted(self):
        codes = supported_countries()
        assert codes == sorted(codes)
        assert len(codes) == 71
        assert codes[0] == "AD"
        assert codes[-1] == "XK"


class TestTableConsistency:
    """Every entry must be internally consistent"""

    @pytest.mark.parametrize("code", sorted(COUNTRY_SPECS))
    def test_length_within_iso_bounds(self, code):
        assert 15 <= COUNTRY_SPECS[code].length <= 34

    @pytest.mark.parametrize("code", sorted(COUNTRY_SPECS))
    def test_pattern_width_matches_bban_length(self, code):
        spec = COUNTRY_SPECS[code]
        width = sum(int(n) for n in regex.findall(r"\{(\d+)\}", spec.bban_pattern))
        assert width == spec.bban_length == spec.length - 4

    def test_national_checksum_assignments(self):
        assigned = {
            code: spec.national_checksum
            for code, spec in COUNTRY_SPECS.items()
            if spec.national_checksum is not None
        }
        assert assigned == {
            "BA": ChecksumStrategy.MOD97,
            "BE": ChecksumStrategy.BELGIAN,
            "CZ": ChecksumStrategy.CZECH_SLOVAK,
            "EE": ChecksumStrategy.ESTONIAN,
            "ES": ChecksumStrategy.SPANISH,
            "FR": ChecksumStrategy.FRENCH,
            "HR": ChecksumStrategy.CROATIAN,
            "HU": ChecksumStrategy.HUNGARIAN,
            "MC": ChecksumStrategy.FRENCH,
            "ME": ChecksumStrategy.MOD97,
            "MK": ChecksumStrategy.MOD97,
            "NO": ChecksumStrategy.NORWEGIAN,
            "PL": ChecksumStrategy.POLISH,
            "PT": ChecksumStrategy.MOD97,
            "RS": ChecksumStrategy.MOD97,
            "SI": ChecksumStrategy.MOD97,
            "SK": ChecksumStrategy.CZECH_SLOVAK,
        }

    def test_sepa_flags(self):
        sepa = sepa_countries()
        for code in ["DE", "FR", "NL", "NO", "CH", "GB", "SM"]:
            assert code in sepa
        for code in ["BR", "JO", "ME", "RS", "TR", "AE"]:
            assert code not in sepa

    def test_all_entries_listed_in_iban_registry(self):
        assert all(spec.iban_registry for spec in COUNTRY_SPECS.values())


class TestBbanPattern:
    """BBAN patterns must match the whole BBAN, never a part"""

    def test_exact_match(self):
        assert lookup("NL").matches_bban("ABNA0417164300")

    @pytest.mark.parametrize(
        "bban",
        [
            "ABNA041716430",  # one short
            "ABNA04171643000",  # one long
            "abna0417164300",  # lower case
            "ABN10417164300",  # digit in bank code
            "",
            None,
        ],
    )
    def test_rejects_partial_or_malformed(self, bban):
        assert not lookup("NL").matches_bban(bban)

    def test_mixed_character_classes(self):
        spec = lookup("IT")
        assert spec.matches_bban("X0542811101000000123456")
        assert not spec.matches_bban("10542811101000000123456")


class TestImmutability:
    """Registry is read-only after import"""

    def test_mapping_is_read_only(self):
        with pytest.raises(TypeError):
            COUNTRY_SPECS["XX"] = COUNTRY_SPECS["NL"]

    def test_country_spec_is_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            COUNTRY_SPECS["NL"].length = 20

    def test_to_dict(self):
        assert COUNTRY_SPECS["BE"].to_dict() == {
            "country_code": "BE",
            "length": 16,
            "bban_pattern": "[0-9]{12}",
            "national_checksum": "belgian",
            "iban_registry": True,
            "sepa": True,
        }

    def test_equal_specs_compare_equal(self):
        assert CountrySpec("NL", 18, "[A-Z]{4}[0-9]{10}", sepa=True) == COUNTRY_SPECS["NL"]
