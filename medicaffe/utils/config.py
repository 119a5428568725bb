"""
Configuration management for text generation backends, storage and application settings.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

GEMINI_API_KEY_PLACEHOLDER = 'YOUR_GEMINI_API_KEY'


@dataclass
class GeminiConfig:
    """Configuration for the Gemini generateContent endpoint."""
    api_url: str
    api_key: str
    model: str
    max_tokens: int
    temperature: float
    timeout: float


@dataclass
class BedrockLLMConfig:
    """Configuration for Amazon Bedrock LLM service."""
    region: str
    model_id: str
    max_tokens: int
    temperature: float
    timeout: float


@dataclass
class MockLLMConfig:
    """Configuration for the deterministic mock generator."""
    delay: float


@dataclass
class StorageConfig:
    """Configuration for the on-device key-value store."""
    backend: str
    directory: str


@dataclass
class MCPConfig:
    """Configuration for MCP interface."""
    transport: str
    host: str
    port: int


@dataclass
class AppConfig:
    """Main application configuration."""
    environment: str
    log_level: str
    ai_provider: str
    use_mock: bool
    system_color_scheme: str
    gemini: GeminiConfig
    bedrock_llm: BedrockLLMConfig
    mock_llm: MockLLMConfig
    storage: StorageConfig
    mcp: MCPConfig


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def load_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    environment = os.getenv('ENVIRONMENT', 'development')

    # Gemini configuration
    gemini_model = os.getenv('GEMINI_MODEL', 'gemini-1.5-flash')
    gemini_config = GeminiConfig(
        api_url=os.getenv('GEMINI_API_URL',
                          f'https://generativelanguage.googleapis.com/v1beta/models/{gemini_model}:generateContent'),
        api_key=os.getenv('GEMINI_API_KEY', GEMINI_API_KEY_PLACEHOLDER),
        model=gemini_model,
        max_tokens=int(os.getenv('GEMINI_MAX_TOKENS', '1024')),
        temperature=float(os.getenv('GEMINI_TEMPERATURE', '0.7')),
        timeout=float(os.getenv('GEMINI_TIMEOUT', '30.0')))

    # Bedrock configuration
    bedrock_llm_config = BedrockLLMConfig(region=os.getenv('BEDROCK_LLM_AWS_REGION', 'us-east-1'),
                                          model_id=os.getenv('BEDROCK_LLM_MODEL_ID', 'anthropic.claude-3-haiku-20240307-v1:0'),
                                          max_tokens=int(os.getenv('BEDROCK_LLM_MAX_TOKENS', '1024')),
                                          temperature=float(os.getenv('BEDROCK_LLM_TEMPERATURE', '0.7')),
                                          timeout=float(os.getenv('BEDROCK_LLM_TIMEOUT', '60.0')))

    mock_llm_config = MockLLMConfig(delay=float(os.getenv('MOCK_LLM_DELAY', '1.5')))

    # Storage configuration
    storage_config = StorageConfig(backend=os.getenv('STORAGE_BACKEND', 'file'),
                                   directory=os.getenv('STORAGE_DIR', os.path.expanduser('~/.medicaffe')))

    # MCP configuration
    mcp_config = MCPConfig(transport=os.getenv('MCP_TRANSPORT', 'stdio'),
                           host=os.getenv('MCP_HOST', '127.0.0.1'),
                           port=int(os.getenv('MCP_PORT', '8000')))

    return AppConfig(environment=environment,
                     log_level=os.getenv('LOG_LEVEL', 'INFO'),
                     ai_provider=os.getenv('AI_PROVIDER', 'gemini'),
                     use_mock=_env_flag('AI_USE_MOCK', 'true'),
                     system_color_scheme=os.getenv('SYSTEM_COLOR_SCHEME', 'light'),
                     gemini=gemini_config,
                     bedrock_llm=bedrock_llm_config,
                     mock_llm=mock_llm_config,
                     storage=storage_config,
                     mcp=mcp_config)


# Global configuration instance
config = load_config()
