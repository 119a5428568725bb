"""
JSON utilities for pulling structured payloads out of generated text.
"""

import json
import re
from typing import Any, Optional

# Greedy: first '{' through the last '}' in the text
_JSON_OBJECT_PATTERN = re.compile(r'\{[\s\S]*\}')


def clean_json_response(response: str) -> str:
    """Clean LLM response by removing code block markers.

    Args:
        response: Raw LLM response

    Returns:
        Cleaned JSON string
    """
    response = response.strip()

    # Remove ```json and ``` markers
    if response.startswith('```json'):
        response = response[7:]
    elif response.startswith('```'):
        response = response[3:]

    if response.endswith('```'):
        response = response[:-3]

    return response.strip()


def find_json_object(text: str) -> Optional[str]:
    """Return the widest `{...}` span in the text, or None if there is none."""
    if not text:
        return None
    match = _JSON_OBJECT_PATTERN.search(clean_json_response(text))
    return match.group(0) if match else None


def extract_json_object(text: str) -> Optional[Any]:
    """Extract and parse the JSON object embedded in free text.

    Surrounding prose and code fences are ignored.

    Args:
        text: Generated text that may contain a JSON object

    Returns:
        The parsed value, or None when no span is found or it does not parse
    """
    span = find_json_object(text)
    if span is None:
        return None
    try:
        return json.loads(span)
    except (json.JSONDecodeError, RecursionError):
        return None
