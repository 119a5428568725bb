"""
Health check utilities for the application.
"""

from typing import Any, Dict

from .config import AppConfig
from .kv_store import JsonStorage
from .logging_config import get_logger
from .response_generator import ResponseGenerator

logger = get_logger(__name__)

SERVICE_NAME = 'MediCaffe'
SERVICE_VERSION = '1.0.0'


def get_health_status(generator: ResponseGenerator, storage: JsonStorage) -> Dict[str, Any]:
    """Get detailed health status of all components.

    Args:
        generator: Active text generation backend
        storage: JSON storage adapter

    Returns:
        Dictionary with health status of each component
    """
    health_status = {}

    # Check text generation
    try:
        health_status['generator'] = {'healthy': generator.health_check(), 'backend': generator.name}
    except Exception as e:
        health_status['generator'] = {'healthy': False, 'backend': generator.name, 'error': str(e)}

    # Check storage
    try:
        health_status['storage'] = {'healthy': storage.health_check(), 'backend': type(storage.store).__name__}
    except Exception as e:
        health_status['storage'] = {'healthy': False, 'backend': type(storage.store).__name__, 'error': str(e)}

    return health_status


def check_health(generator: ResponseGenerator, storage: JsonStorage) -> bool:
    """Check the health of all system components.

    Returns:
        True if all components are healthy, False otherwise
    """
    health_status = get_health_status(generator, storage)
    all_healthy = all(status.get('healthy', False) for status in health_status.values())

    if all_healthy:
        logger.info('All system components are healthy')
    else:
        logger.warning('Some system components are unhealthy')

    return all_healthy


def get_system_info(config: AppConfig, generator: ResponseGenerator, storage: JsonStorage) -> Dict[str, Any]:
    """Get system information and configuration.

    Returns:
        Dictionary with system information
    """
    return {
        'service_name': SERVICE_NAME,
        'version': SERVICE_VERSION,
        'configuration': {
            'environment': config.environment,
            'ai_provider': config.ai_provider,
            'generator': generator.name,
            'storage_backend': config.storage.backend,
        },
        'health_status': get_health_status(generator, storage)
    }
