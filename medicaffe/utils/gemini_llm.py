"""
Google Gemini generateContent client.
"""

from typing import Any, Dict, Optional

import requests

from .config import GeminiConfig
from .logging_config import get_logger
from .response_generator import GenerationError, ResponseGenerator

logger = get_logger(__name__)


class GeminiLLM(ResponseGenerator):
    """Single-shot Gemini client; no retries, no streaming."""

    name = 'gemini'

    def __init__(self, config: GeminiConfig, session: Optional[requests.Session] = None):
        """
        Initialize Gemini client.

        Args:
            config: GeminiConfig instance with endpoint and generation parameters
            session: Optional requests session, a new one is created if None
        """
        self.config = config
        self.session = session or requests.Session()

        logger.info(f'Initialized Gemini client with model: {config.model}')

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            'contents': [{
                'parts': [{
                    'text': prompt
                }]
            }],
            'generationConfig': {
                'temperature': self.config.temperature,
                'maxOutputTokens': self.config.max_tokens,
            },
        }

    def generate(self, prompt: str) -> str:
        """
        Send a prompt to the endpoint and return the first candidate's text.

        Args:
            prompt: Natural-language prompt

        Returns:
            Generated text

        Raises:
            GenerationError: On transport failure, non-success status or malformed envelope
        """
        try:
            response = self.session.post(self.config.api_url,
                                         params={'key': self.config.api_key},
                                         json=self.build_payload(prompt),
                                         timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error(f'Gemini request failed: {e}')
            raise GenerationError(f'Gemini request failed: {e}') from e

        if not response.ok:
            logger.error(f'Gemini request failed with status {response.status_code}')
            raise GenerationError(f'API request failed with status {response.status_code}')

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError(f'Invalid JSON from AI API: {e}') from e

        text = self._extract_text(data)
        if not text:
            raise GenerationError('Invalid response structure from AI API')

        logger.debug(f'Gemini response generated successfully (length: {len(text)})')
        return text

    @staticmethod
    def _extract_text(data: Any) -> Optional[str]:
        try:
            text = data['candidates'][0]['content']['parts'][0]['text']
        except (KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) else None
