"""
Unit Tests for the Presidio IBAN Recognizer

Test coverage:
- Valid IBANs in free text are detected with full confidence
- Candidates failing validation are dropped during matching
- Separator cleaning before validation
"""

import pytest
from presidio_analyzer import Pattern

from iban_validators.iban import is_valid_iban
from iban_validators.recognizer import (
    IBAN_ENTITY,
    IBAN_PATTERN,
    IbanRecognizer,
    ValidatedPatternRecognizer,
    build_iban_recognizer,
)


@pytest.fixture
def recognizer():
    return build_iban_recognizer()


def _analyze(recognizer, text):
    return recognizer.analyze(text=text, entities=[IBAN_ENTITY], nlp_artifacts=None)


class TestIbanRecognizer:
    """Test IBAN detection in text"""

    def test_detects_grouped_iban(self, recognizer):
        text = "Please transfer the deposit to NL91 ABNA 0417 1643 00, thanks."
        results = _analyze(recognizer, text)

        assert len(results) == 1
        result = results[0]
        assert result.entity_type == IBAN_ENTITY
        assert text[result.start:result.end] == "NL91 ABNA 0417 1643 00"
        assert result.score == 1.0

    def test_detects_compact_iban(self, recognizer):
        text = "IBAN: DE89370400440532013000"
        results = _analyze(recognizer, text)

        assert len(results) == 1
        assert text[results[0].start:results[0].end] == "DE89370400440532013000"

    def test_detects_multiple_ibans(self, recognizer):
        text = "From BE68539007547034 to NO9386011117947."
        results = sorted(_analyze(recognizer, text), key=lambda r: r.start)

        assert [text[r.start:r.end] for r in results] == ["BE68539007547034", "NO9386011117947"]

    def test_short_word_after_grouped_iban(self, recognizer):
        text = "Account BE68 5390 0754 7034 to be paid"
        results = _analyze(recognizer, text)

        assert len(results) == 1
        assert text[results[0].start:results[0].end] == "BE68 5390 0754 7034"

    def test_adjacent_grouped_ibans(self, recognizer):
        text = "BE68 5390 0754 7034 NO93 8601 1117 947"
        results = sorted(_analyze(recognizer, text), key=lambda r: r.start)

        assert [text[r.start:r.end] for r in results] == ["BE68 5390 0754 7034", "NO93 8601 1117 947"]
        assert all(r.score == 1.0 for r in results)
        assert all(r.recognition_metadata["recognizer_name"] == "IBAN Recognizer" for r in results)

    def test_same_iban_written_twice(self, recognizer):
        text = "BE68 5390 0754 7034 BE68 5390 0754 7034"
        results = sorted(_analyze(recognizer, text), key=lambda r: r.start)

        assert [(r.start, r.end) for r in results] == [(0, 19), (20, 39)]

    def test_invalid_iban_followed_by_valid_one(self, recognizer):
        text = "BE68 5390 0754 7035 NO93 8601 1117 947"
        results = _analyze(recognizer, text)

        assert [text[r.start:r.end] for r in results] == ["NO93 8601 1117 947"]

    def test_run_together_compact_ibans_not_split(self, recognizer):
        assert _analyze(recognizer, "BE68539007547034NO9386011117947") == []

    def test_drops_invalid_checksum(self, recognizer):
        text = "Wrong account NL91 ABNA 0417 1643 01, right account GB82 WEST 1234 5698 7654 32."
        results = _analyze(recognizer, text)

        assert len(results) == 1
        assert text[results[0].start:results[0].end] == "GB82 WEST 1234 5698 7654 32"

    def test_drops_unsupported_country(self, recognizer):
        assert _analyze(recognizer, "Reference XX12 3456 7890 1234 56.") == []

    def test_text_without_iban(self, recognizer):
        assert _analyze(recognizer, "Nothing to see here, order 12345.") == []

    def test_recognizer_metadata(self, recognizer):
        assert recognizer.supported_entities == [IBAN_ENTITY]
        assert recognizer.name == "IBAN Recognizer"
        assert "iban" in recognizer.context


class TestValidatedPatternRecognizer:
    """Test validator wiring"""

    def test_cleans_separators_before_validation(self):
        captured = []

        def capture_validator(value: str) -> bool:
            captured.append(value)
            return True

        recognizer = ValidatedPatternRecognizer(
            supported_entity=IBAN_ENTITY,
            name="IBAN_CAPTURE_TEST",
            patterns=[Pattern("iban", IBAN_PATTERN, 0.5)],
            validator_func=capture_validator,
        )

        recognizer.validate_result("FR14-2004-1010 0505")
        assert captured[-1] == "FR14200410100505"

    def test_validate_and_invalidate_are_complementary(self):
        recognizer = ValidatedPatternRecognizer(
            supported_entity=IBAN_ENTITY,
            name="IBAN_BEHAVIOR_TEST",
            patterns=[Pattern("iban", IBAN_PATTERN, 0.5)],
            validator_func=is_valid_iban,
        )

        assert recognizer.validate_result("NL91 ABNA 0417 1643 00") is True
        assert recognizer.invalidate_result("NL91 ABNA 0417 1643 00") is False
        assert recognizer.validate_result("NL91 ABNA 0417 1643 01") is False
        assert recognizer.invalidate_result("NL91 ABNA 0417 1643 01") is True

    def test_without_validator_keeps_pattern_score(self):
        recognizer = ValidatedPatternRecognizer(
            supported_entity=IBAN_ENTITY,
            name="IBAN_NO_VALIDATOR",
            patterns=[Pattern("iban", IBAN_PATTERN, 0.5)],
        )

        assert recognizer.validate_result("NL91ABNA0417164300") is None
        assert recognizer.invalidate_result("NL91ABNA0417164300") is None
