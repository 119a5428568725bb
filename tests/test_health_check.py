"""Tests for health and system info reporting."""

from __future__ import annotations

from conftest import RecordingGenerator

from medicaffe.utils.config import config
from medicaffe.utils.health_check import check_health, get_health_status, get_system_info
from medicaffe.utils.response_generator import GenerationError


def test_healthy_components(storage, mock_generator):
    status = get_health_status(mock_generator, storage)

    assert status['generator'] == {'healthy': True, 'backend': 'mock'}
    assert status['storage']['healthy'] is True
    assert check_health(mock_generator, storage) is True


def test_failing_generator_is_unhealthy(storage):
    generator = RecordingGenerator(error=GenerationError('down'))

    assert get_health_status(generator, storage)['generator']['healthy'] is False
    assert check_health(generator, storage) is False


def test_unreadable_storage_is_unhealthy(kv_store, storage, mock_generator):
    kv_store.fail_reads_for.add('@medicaffe_health_probe')
    assert get_health_status(mock_generator, storage)['storage']['healthy'] is False


def test_system_info(storage, mock_generator):
    info = get_system_info(config, mock_generator, storage)

    assert info['service_name'] == 'MediCaffe'
    assert info['configuration']['generator'] == 'mock'
    assert set(info['health_status']) == {'generator', 'storage'}
