"""
Amazon Bedrock LLM backend for prompt-in, text-out generation.
"""

from typing import Any, Dict, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import BedrockLLMConfig
from .logging_config import get_logger
from .response_generator import GenerationError, ResponseGenerator

logger = get_logger(__name__)

SYSTEM_PROMPT = 'You are a careful pharmaceutical information assistant. Follow the requested output format exactly.'


class BedrockLLM(ResponseGenerator):
    """Amazon Bedrock LLM client; a failed call is reported, never retried."""

    name = 'bedrock'

    def __init__(self, config: BedrockLLMConfig, client: Optional[Any] = None):
        """
        Initialize Bedrock LLM client.

        Args:
            config: BedrockLLMConfig instance with connection parameters
            client: Optional pre-built bedrock-runtime client
        """
        self.config = config
        self.model_id = config.model_id

        # Create Bedrock runtime client with timeout configuration
        self.bedrock_runtime = client or boto3.client('bedrock-runtime',
                                                      region_name=config.region,
                                                      config=BotoConfig(connect_timeout=config.timeout,
                                                                        read_timeout=config.timeout,
                                                                        retries={'max_attempts': 0}))

        logger.info(f'Initialized Bedrock LLM client with model: {self.model_id}')

    def generate(self, prompt: str) -> str:
        """
        Generate a response for a single user prompt.

        Args:
            prompt: Natural-language prompt

        Returns:
            Generated text

        Raises:
            GenerationError: If the request fails or produces no text
        """
        messages = [{'role': 'user', 'content': [{'text': prompt}]}]
        inf_params: Dict[str, Any] = {
            'maxTokens': self.config.max_tokens,
            'temperature': self.config.temperature,
        }

        try:
            stream = self.bedrock_runtime.converse_stream(modelId=self.model_id,
                                                          messages=messages,
                                                          system=[{'text': SYSTEM_PROMPT}],
                                                          inferenceConfig=inf_params).get('stream')

            msg = ''
            if stream:
                for event in stream:
                    if 'contentBlockDelta' in event:
                        msg += event['contentBlockDelta']['delta'].get('text', '')
                    if 'metadata' in event:
                        logger.debug(f"Bedrock usage: {event['metadata'].get('usage')}")

        except (ClientError, BotoCoreError) as e:
            logger.error(f'Bedrock LLM request failed: {e}')
            raise GenerationError(f'Bedrock LLM request failed: {e}') from e

        if not msg:
            raise GenerationError('Invalid response structure from AI API')

        logger.debug(f'Bedrock LLM response generated successfully (length: {len(msg)})')
        return msg
