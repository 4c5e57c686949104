"""
IBAN Guard - Validation API
Flask wrapper around the iban_validators package
Version: 1.0.0

Features:
- ISO 13616 IBAN validation for 71 countries (single and batch)
- National BBAN checksums (BE, CZ, EE, ES, FR, HR, HU, MC, NO, PL, SK, ...)
- IBAN detection in free text via Presidio pattern recognizers
- Recognizer definitions loaded from config/recognizers.yaml
"""

from flask import Flask, request, jsonify
from presidio_analyzer import PatternRecognizer, Pattern
import regex
import time
import logging
import yaml
import os
from typing import List

from iban_validators import (
    __version__,
    COUNTRY_SPECS,
    checksum_iban,
    is_valid_iban,
    supported_countries,
)
from iban_validators.recognizer import IbanRecognizer, ValidatedPatternRecognizer

# Configure logging
logging.basicConfig(level=os.getenv('IBAN_LOG_LEVEL', 'INFO').upper())
logger = logging.getLogger(__name__)

# Service configuration (read once at startup)
RECOGNIZERS_PATH = os.getenv(
    'IBAN_RECOGNIZERS_PATH',
    os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config', 'recognizers.yaml')
)
MAX_BATCH = int(os.getenv('IBAN_MAX_BATCH', '1000'))
MAX_TEXT_LENGTH = int(os.getenv('IBAN_MAX_TEXT_LENGTH', '10000'))
API_PORT = int(os.getenv('IBAN_API_PORT', '5002'))

MAX_PATTERN_LENGTH = 500

# Initialize Flask app
app = Flask(__name__)

# Recognizers built at startup; never mutated afterwards
recognizers: List[PatternRecognizer] = []
loaded_recognizers = []
startup_error = None

VALIDATOR_MAP = {
    'checksum_iban': checksum_iban,
}

# validator_class values accepted in recognizers.yaml
RECOGNIZER_CLASSES = {
    'ValidatedPatternRecognizer': ValidatedPatternRecognizer,
    'IbanRecognizer': IbanRecognizer,
}


def load_custom_recognizers(yaml_path: str) -> List[PatternRecognizer]:
    """Load custom recognizers from YAML configuration"""
    loaded = []

    try:
        with open(yaml_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)

        if not config or 'recognizers' not in config:
            logger.warning("No recognizers found in YAML config")
            return loaded

        for rec_config in config['recognizers']:
            name = rec_config['name']
            supported_language = rec_config.get('supported_language', 'en')
            supported_entity = rec_config.get('supported_entity', name)
            context = rec_config.get('context', [])

            patterns = []
            for pattern_config in rec_config.get('patterns', []):
                regex_str = pattern_config['regex']

                # Validate regex complexity to prevent ReDoS
                if len(regex_str) > MAX_PATTERN_LENGTH:
                    logger.warning(f"Regex pattern too long ({len(regex_str)} chars) in {name}: {regex_str[:50]}...")
                    raise ValueError(f"Regex pattern exceeds maximum length of {MAX_PATTERN_LENGTH} characters")

                if regex.search(r'\([^)]*[*+]\)[*+]', regex_str):
                    logger.warning(f"Potentially dangerous nested quantifiers in {name}: {regex_str}")
                    raise ValueError("Regex contains nested quantifiers which may cause ReDoS")

                try:
                    regex.compile(regex_str)
                except regex.error as e:
                    logger.error(f"Invalid regex in {name}: {e}")
                    raise ValueError(f"Invalid regex pattern: {e}")

                patterns.append(Pattern(
                    name=pattern_config['name'],
                    regex=regex_str,
                    score=pattern_config['score']
                ))

            validator_class = rec_config.get('validator_class')
            validator_func_name = rec_config.get('validator_func')
            validator_func = VALIDATOR_MAP.get(validator_func_name) if validator_func_name else None

            recognizer_cls = RECOGNIZER_CLASSES.get(validator_class)

            if recognizer_cls and validator_func:
                recognizer = recognizer_cls(
                    supported_entity=supported_entity,
                    name=name,
                    supported_language=supported_language,
                    patterns=patterns,
                    context=context if context else None,
                    validator_func=validator_func
                )
                logger.info(f"{validator_class} with '{validator_func_name}' for {name}")
            else:
                if validator_func_name and not validator_func:
                    logger.warning(f"Validator '{validator_func_name}' not found, using standard PatternRecognizer")
                recognizer = PatternRecognizer(
                    supported_entity=supported_entity,
                    name=name,
                    supported_language=supported_language,
                    patterns=patterns,
                    context=context if context else None
                )

            loaded.append(recognizer)
            logger.info(f"Loaded custom recognizer: {name} ({supported_entity})")

        return loaded

    except FileNotFoundError:
        logger.error(f"Recognizers YAML file not found: {yaml_path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse recognizers YAML: {e}")
        raise


def initialize_recognizers(yaml_path: str = RECOGNIZERS_PATH) -> None:
    """Build recognizers from YAML; on failure the service runs degraded."""
    global recognizers, loaded_recognizers, startup_error

    try:
        recognizers = load_custom_recognizers(yaml_path)
        loaded_recognizers = [
            {'name': r.name, 'entities': r.supported_entities}
            for r in recognizers
        ]
        startup_error = None
    except (FileNotFoundError, yaml.YAMLError, ValueError, KeyError) as e:
        recognizers = []
        loaded_recognizers = []
        startup_error = str(e)
        logger.error(f"Failed to load recognizers: {e}")
        logger.warning("IBAN Guard is running in DEGRADED mode (text analysis unavailable)")


initialize_recognizers()


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint with service info"""
    payload = {
        'status': 'healthy',
        'version': __version__,
        'service': 'iban-guard',
        'countries_supported': len(COUNTRY_SPECS),
        'custom_recognizers': loaded_recognizers,
        'recognizers_loaded': len(loaded_recognizers),
    }

    if startup_error:
        payload['status'] = 'degraded'
        payload['error'] = startup_error
        return jsonify(payload), 503

    return jsonify(payload), 200


@app.route('/countries', methods=['GET'])
def countries():
    """
    List supported countries with their IBAN format.

    Query parameters:
        sepa: "true" to list SEPA members only
    """
    sepa_only = request.args.get('sepa', 'false').lower() in ('true', '1', 'yes')

    entries = [
        COUNTRY_SPECS[code].to_dict()
        for code in supported_countries()
        if not sepa_only or COUNTRY_SPECS[code].sepa
    ]
    return jsonify({'countries': entries, 'count': len(entries)}), 200


@app.route('/validate', methods=['POST'])
def validate():
    """
    Validate one IBAN or a batch.

    Request body:
    {"iban": "NL91 ABNA 0417 1643 00"}
    or
    {"ibans": ["NL91ABNA0417164300", "BE68539007547034"]}
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict):
        return jsonify({
            'error': 'Invalid request',
            'message': 'Request body must be a JSON object'
        }), 400

    if 'iban' in data:
        return jsonify({
            'iban': data['iban'],
            'valid': is_valid_iban(data['iban'])
        }), 200

    if 'ibans' in data:
        ibans = data['ibans']
        if not isinstance(ibans, list):
            return jsonify({
                'error': 'Invalid request',
                'message': 'ibans must be a list'
            }), 400

        if len(ibans) > MAX_BATCH:
            return jsonify({
                'error': 'Batch too large',
                'message': f'Maximum batch size is {MAX_BATCH}'
            }), 422

        results = [{'iban': item, 'valid': is_valid_iban(item)} for item in ibans]
        return jsonify({
            'results': results,
            'valid_count': sum(1 for r in results if r['valid'])
        }), 200

    return jsonify({
        'error': 'Invalid request',
        'message': 'iban or ibans field is required'
    }), 400


@app.route('/analyze', methods=['POST'])
def analyze():
    """
    Find valid IBANs in free text.

    Request body:
    {"text": "Please transfer to NL91 ABNA 0417 1643 00."}
    """
    start_time = time.time()

    try:
        data = request.get_json(silent=True)

        if not isinstance(data, dict):
            return jsonify({
                'error': 'Invalid request',
                'message': 'Request body must be JSON'
            }), 400

        text = data.get('text')

        if not isinstance(text, str) or not text.strip():
            return jsonify({
                'error': 'Invalid request',
                'message': 'Text field cannot be empty'
            }), 400

        if len(text) > MAX_TEXT_LENGTH:
            return jsonify({
                'error': 'Text too long',
                'message': f'Maximum text length is {MAX_TEXT_LENGTH:,} characters'
            }), 422

        if startup_error:
            logger.error("Recognizers unavailable - degraded mode active")
            return jsonify({
                'error': 'RECOGNIZERS_UNAVAILABLE',
                'message': startup_error,
                'status': 'degraded'
            }), 503

        results = []
        for recognizer in recognizers:
            results.extend(recognizer.analyze(
                text=text,
                entities=recognizer.supported_entities,
                nlp_artifacts=None
            ))

        entities_found = [
            {
                'entity_type': result.entity_type,
                'start': result.start,
                'end': result.end,
                'score': result.score,
                'text': text[result.start:result.end],
            }
            for result in sorted(results, key=lambda r: r.start)
        ]

        return jsonify({
            'entities': entities_found,
            'processing_time_ms': int((time.time() - start_time) * 1000)
        }), 200

    except ValueError as e:
        logger.warning(f"Invalid input for /analyze: {e}")
        return jsonify({
            'error': 'Invalid input',
            'message': str(e)
        }), 400

    except Exception as e:
        logger.error(f"Unexpected error analyzing text: {e}", exc_info=True)
        return jsonify({
            'error': 'Internal server error',
            'message': 'An unexpected error occurred',
            'error_id': 'IBAN_GUARD_UNKNOWN_ERROR',
            'error_type': type(e).__name__
        }), 500


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=API_PORT, debug=False)
