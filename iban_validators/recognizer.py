"""
Presidio IBAN Recognizer
Version: 1.0.0

Pattern recognizer that finds IBAN candidates in free text and keeps only
those that pass full validation (country format, national and MOD-97
checksums). Invalid candidates are rejected during pattern matching, so they
never reach scoring or the caller.

Grouped IBANs written one after another ("BE68 5390 0754 7034 NO93 8601 1117
947") form a single regex match. IbanRecognizer cuts such a match into
country-length pieces and validates each piece on its own.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

import regex
from presidio_analyzer import EntityRecognizer, Pattern, PatternRecognizer, RecognizerResult

from .iban import is_valid_iban
from .registry import lookup

logger = logging.getLogger(__name__)

IBAN_ENTITY = "IBAN_CODE"

# Country code + check digits, then 2-7 groups of four (optionally separated
# by a space or hyphen) and a trailing group of one to four characters
IBAN_PATTERN = r"\b[A-Z]{2}[0-9]{2}(?:[ -]?[A-Z0-9]{4}){2,7}(?:[ -]?[A-Z0-9]{1,4})?\b"

# Same without the trailing group: the greedy tail above swallows a short
# following word ("... 7034 to"), which then fails validation
IBAN_FULL_GROUPS_PATTERN = r"\b[A-Z]{2}[0-9]{2}(?:[ -]?[A-Z0-9]{4}){2,7}\b"

# Mirrored by the IBAN_CODE context list in config/recognizers.yaml
DEFAULT_IBAN_CONTEXT = ["iban", "account", "bank", "transfer", "konto", "rachunek"]

IBAN_SEPARATORS = " -"

# Seconds allowed for re-scanning text when splitting merged candidates
SPLIT_MATCH_TIMEOUT = 1.0


class ValidatedPatternRecognizer(PatternRecognizer):
    """
    Pattern recognizer with integrated validation.
    Rejects invalid matches DURING pattern matching, not in post-processing.

    Presidio raises the score of a match to 1.0 when ``validate_result``
    returns True and drops the match when it returns False.

    Args:
        validator_func: Callable that takes the matched text and returns bool
        **kwargs: Additional arguments passed to PatternRecognizer

    Example:
        >>> recognizer = ValidatedPatternRecognizer(
        ...     supported_entity="IBAN_CODE",
        ...     name="IBAN Recognizer",
        ...     patterns=[Pattern("iban", IBAN_PATTERN, 0.5)],
        ...     validator_func=is_valid_iban,
        ... )
    """

    def __init__(self, validator_func: Optional[Callable[[str], bool]] = None, **kwargs):
        super().__init__(**kwargs)
        self.validator_func = validator_func

    def _execute_validator(self, pattern_text: str, context: str = "VALIDATE") -> bool:
        """Clean separators from the match and run the validator on it."""
        validation_text = pattern_text.replace("-", "").replace(" ", "")

        is_valid = self.validator_func(validation_text)
        logger.debug(f"[{context}] {self.name}: candidate of length {len(validation_text)} result={is_valid}")

        if not is_valid:
            logger.debug(f"[REJECTED] {self.name}: candidate failed validation")

        return is_valid

    def validate_result(self, pattern_text: str) -> Optional[bool]:
        """
        Called BEFORE scoring.

        Returns:
            None (no validator, keep pattern score), True (boost to 1.0)
            or False (reject)
        """
        if self.validator_func:
            return self._execute_validator(pattern_text, "VALIDATE")
        return None

    def invalidate_result(self, pattern_text: str) -> Optional[bool]:
        """Return True to INVALIDATE (reject) the match."""
        if self.validator_func:
            return not self._execute_validator(pattern_text, "INVALIDATE")
        return None


def _piece_end(text: str, start: int, end: int, length: int) -> Optional[int]:
    """
    Index just past the ``length``-th non-separator character from ``start``.

    Returns None if ``text[start:end]`` is too short or the piece does not end
    at a separator or at ``end``.
    """
    count = 0
    for index in range(start, end):
        if text[index] in IBAN_SEPARATORS:
            continue
        count += 1
        if count == length:
            stop = index + 1
            if stop == end or text[stop] in IBAN_SEPARATORS:
                return stop
            return None
    return None


class IbanRecognizer(ValidatedPatternRecognizer):
    """
    ValidatedPatternRecognizer that also splits merged IBAN candidates.

    A match that fails validation is cut at the registered length of its
    country code. Each piece that validates is reported with score 1.0,
    then cutting continues after the next separator.
    """

    def analyze(
        self,
        text: str,
        entities: List[str],
        nlp_artifacts=None,
        regex_flags: Optional[int] = None,
    ) -> List[RecognizerResult]:
        results = super().analyze(text, entities, nlp_artifacts, regex_flags)
        if not self.validator_func:
            return results

        flags = regex_flags if regex_flags else self.global_regex_flags
        accepted = {(result.start, result.end) for result in results}

        for pattern in self.patterns:
            compiled = regex.compile(pattern.regex, flags=flags)
            try:
                matches = list(compiled.finditer(text, timeout=SPLIT_MATCH_TIMEOUT))
            except TimeoutError:
                logger.warning(f"Splitting scan for pattern '{pattern.name}' timed out, skipping")
                continue

            for match in matches:
                if match.span() in accepted:
                    continue
                for start, end in self.split_candidate(text, match.start(), match.end()):
                    results.append(self._piece_result(pattern, start, end, flags))

        return EntityRecognizer.remove_duplicates(results)

    def split_candidate(self, text: str, start: int, end: int) -> List[Tuple[int, int]]:
        """Return spans of valid IBANs found by cutting ``text[start:end]`` at country lengths."""
        spans = []
        position = start
        while position < end:
            spec = lookup(text[position:position + 2].upper())
            if spec is None:
                break

            stop = _piece_end(text, position, end, spec.length)
            if stop is None:
                break

            if self._execute_validator(text[position:stop], "SPLIT"):
                spans.append((position, stop))

            position = stop
            while position < end and text[position] in IBAN_SEPARATORS:
                position += 1

        return spans

    def _piece_result(self, pattern: Pattern, start: int, end: int, flags: int) -> RecognizerResult:
        explanation = self.build_regex_explanation(
            self.name, pattern.name, pattern.regex, pattern.score, True, flags
        )
        explanation.score = EntityRecognizer.MAX_SCORE
        return RecognizerResult(
            entity_type=self.supported_entities[0],
            start=start,
            end=end,
            score=EntityRecognizer.MAX_SCORE,
            analysis_explanation=explanation,
            recognition_metadata={
                RecognizerResult.RECOGNIZER_NAME_KEY: self.name,
                RecognizerResult.RECOGNIZER_IDENTIFIER_KEY: self.id,
            },
        )


def build_iban_recognizer(
    score: float = 0.5,
    context: Optional[List[str]] = None,
    supported_language: str = "en",
    name: str = "IBAN Recognizer",
) -> IbanRecognizer:
    """Build a recognizer for IBAN_CODE entities backed by ``is_valid_iban``."""
    return IbanRecognizer(
        supported_entity=IBAN_ENTITY,
        name=name,
        supported_language=supported_language,
        patterns=[
            Pattern(name="iban_grouped_or_compact", regex=IBAN_PATTERN, score=score),
            Pattern(name="iban_full_groups", regex=IBAN_FULL_GROUPS_PATTERN, score=score),
        ],
        context=context if context is not None else DEFAULT_IBAN_CONTEXT,
        validator_func=is_valid_iban,
    )


__all__ = [
    "IBAN_ENTITY",
    "IBAN_PATTERN",
    "IBAN_FULL_GROUPS_PATTERN",
    "DEFAULT_IBAN_CONTEXT",
    "ValidatedPatternRecognizer",
    "IbanRecognizer",
    "build_iban_recognizer",
]
