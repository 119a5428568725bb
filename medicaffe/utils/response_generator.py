"""
Pluggable text generation backends.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .config import GEMINI_API_KEY_PLACEHOLDER, AppConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class GenerationError(Exception):
    """Raised when a text generation backend fails or returns an unusable envelope."""
    pass


class ResponseGenerator(ABC):
    """Maps a prompt to raw generated text."""

    name = 'generator'

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """
        Generate text for a prompt.

        Args:
            prompt: Natural-language prompt

        Returns:
            Raw generated text

        Raises:
            GenerationError: If the backend fails
        """

    def health_check(self) -> bool:
        """
        Perform a health check on the backend.

        Returns:
            True if service is healthy, False otherwise
        """
        try:
            return len(self.generate("Respond with just 'OK'.").strip()) > 0
        except GenerationError as e:
            logger.error(f'{self.name} health check failed: {e}')
            return False


def is_gemini_configured(api_key: Optional[str]) -> bool:
    return bool(api_key) and api_key != GEMINI_API_KEY_PLACEHOLDER


def create_response_generator(config: Optional[AppConfig] = None) -> ResponseGenerator:
    """Select the generator for this configuration.

    The mock is used when mock mode is on or the chosen live backend has no
    credentials configured.

    Args:
        config: AppConfig instance, uses default if None

    Returns:
        A ResponseGenerator instance

    Raises:
        ValueError: If the configured provider is unknown
    """
    if config is None:
        from .config import config as default_config
        config = default_config

    from .mock_llm import MockLLM

    provider = config.ai_provider.lower()
    if provider not in ('gemini', 'bedrock'):
        raise ValueError(f'Unknown AI provider: {config.ai_provider}')

    if config.use_mock:
        logger.info('Using mock responses (mock mode enabled)')
        return MockLLM(config.mock_llm)

    if provider == 'gemini':
        if not is_gemini_configured(config.gemini.api_key):
            logger.info('Using mock responses (API key not configured)')
            return MockLLM(config.mock_llm)
        from .gemini_llm import GeminiLLM
        return GeminiLLM(config.gemini)

    from .bedrock_llm import BedrockLLM
    return BedrockLLM(config.bedrock_llm)
