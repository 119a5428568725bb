"""Shared fixtures for the MediCaffe test suite."""

from __future__ import annotations

from typing import List, Optional

import pytest

from medicaffe.models.core import Medication
from medicaffe.services.ai_assistant import AIAssistantService
from medicaffe.services.app_state import AppStateManager
from medicaffe.utils.config import MockLLMConfig
from medicaffe.utils.kv_store import InMemoryKeyValueStore, JsonStorage
from medicaffe.utils.mock_llm import MockLLM
from medicaffe.utils.response_generator import GenerationError, ResponseGenerator


class RecordingGenerator(ResponseGenerator):
    """Returns a fixed reply (or raises) and remembers every prompt."""

    name = 'recording'

    def __init__(self, reply: str = '', error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store whose reads or writes can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False
        self.fail_reads_for = set()

    def get(self, key):
        if key in self.fail_reads_for:
            raise OSError(f'read failed: {key}')
        return super().get(key)

    def set(self, key, value):
        if self.fail_writes:
            raise OSError('disk full')
        super().set(key, value)

    def remove(self, key):
        if self.fail_writes:
            raise OSError('disk full')
        super().remove(key)


def make_medication(name: str, dosage: str = '100', unit: str = 'mg', **kwargs) -> Medication:
    return Medication(name=name, dosage=dosage, unit=unit, **kwargs)


@pytest.fixture
def kv_store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def storage(kv_store) -> JsonStorage:
    return JsonStorage(kv_store)


@pytest.fixture
def mock_generator() -> MockLLM:
    return MockLLM(MockLLMConfig(delay=0))


@pytest.fixture
def state(storage) -> AppStateManager:
    manager = AppStateManager(storage)
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def assistant(state, mock_generator) -> AIAssistantService:
    return AIAssistantService(mock_generator, state.interaction_history_store, state.chat_history_store)


@pytest.fixture
def generation_failure() -> GenerationError:
    return GenerationError('API request failed with status 503')
