"""
Normalization of generated text into domain payloads.
"""

from typing import Any, Dict, Iterable, Union

from ..models.core import InteractionCheckResult, Medication, MedicationInfo, MedicationSuggestions
from ..utils.json_utils import extract_json_object
from ..utils.logging_config import get_logger
from ..utils.timestamp_utils import now_iso

logger = get_logger(__name__)

KIND_INTERACTION = 'interaction'
KIND_INFO = 'info'
KIND_SUGGESTIONS = 'suggestions'
KIND_QUESTION = 'question'
RESPONSE_KINDS = (KIND_INTERACTION, KIND_INFO, KIND_SUGGESTIONS, KIND_QUESTION)


def _fallback(raw_text: str, kind: str) -> Dict[str, Any]:
    if kind == KIND_INTERACTION:
        return {'hasInteractions': False, 'interactions': [], 'summary': raw_text}
    if kind == KIND_INFO:
        return {'rawInfo': raw_text}
    return {'rawSuggestions': raw_text}


def normalize(raw_text: str, kind: str) -> Union[Dict[str, Any], str]:
    """Turn generated text into a payload for the given response kind.

    The widest `{...}` span is parsed and returned as-is, without schema
    checks. When there is no span, it does not parse, or it is not an object,
    a raw-text wrapper is returned instead. Question answers are plain text and
    are returned unchanged.

    Args:
        raw_text: Text produced by a ResponseGenerator
        kind: One of RESPONSE_KINDS

    Returns:
        Parsed dict, raw-text wrapper dict, or the raw text for questions

    Raises:
        ValueError: If kind is unknown
    """
    if kind not in RESPONSE_KINDS:
        raise ValueError(f'Unknown response kind: {kind}')

    if kind == KIND_QUESTION:
        return raw_text

    parsed = extract_json_object(raw_text)
    if isinstance(parsed, dict):
        return parsed

    logger.warning(f'No JSON object in {kind} response, wrapping raw text')
    return _fallback(raw_text, kind)


def to_interaction_result(raw_text: str, medications: Iterable[Medication]) -> InteractionCheckResult:
    """Normalize an interaction-check response and stamp when and what was checked."""
    payload = dict(normalize(raw_text, KIND_INTERACTION))
    payload['checkedAt'] = now_iso()
    payload['medicationsChecked'] = [medication.name for medication in medications]
    return InteractionCheckResult.from_dict(payload)


def to_medication_info(raw_text: str) -> MedicationInfo:
    return MedicationInfo.from_dict(normalize(raw_text, KIND_INFO))


def to_medication_suggestions(raw_text: str) -> MedicationSuggestions:
    return MedicationSuggestions.from_dict(normalize(raw_text, KIND_SUGGESTIONS))
