"""
Key-value storage backends and the JSON storage adapter used by the app.
"""

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional
from urllib.parse import quote

from .config import StorageConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class StorageError(Exception):
    """Custom exception for key-value storage errors."""
    pass


class KeyValueStore(ABC):
    """String-keyed, string-valued store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a string under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key; absent keys are ignored."""

    def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.remove(key)


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, mainly for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class FileKeyValueStore(KeyValueStore):
    """One file per key inside a directory; writes replace the file atomically."""

    def __init__(self, directory: str):
        self.directory = directory
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise StorageError(f'Cannot create storage directory {directory}: {e}') from e
        logger.info(f'Initialized file key-value store at: {directory}')

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, quote(key, safe='') + '.json')

    def get(self, key: str) -> Optional[str]:
        try:
            with open(self._path(key), 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix='.tmp-')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_path, self._path(key))
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def remove(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


def create_key_value_store(storage_config: StorageConfig) -> KeyValueStore:
    """Create the backend named by the storage configuration."""
    if storage_config.backend == 'memory':
        return InMemoryKeyValueStore()
    if storage_config.backend == 'file':
        return FileKeyValueStore(storage_config.directory)
    raise ValueError(f'Unknown storage backend: {storage_config.backend}')


class JsonStorage:
    """JSON-serializing adapter over a KeyValueStore.

    Reads of missing or malformed values return the caller's default. Backend
    failures are raised as StorageError.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_data(self, key: str, default: Any = None) -> Any:
        """Retrieve and deserialize the value stored under key.

        Args:
            key: Storage key
            default: Value returned when the key is absent, undecodable or not valid JSON

        Returns:
            Deserialized value or default

        Raises:
            StorageError: If the backend read fails
        """
        try:
            raw = self.store.get(key)
        except UnicodeDecodeError as e:
            logger.warning(f'Undecodable data stored under {key}, returning default: {e}')
            return default
        except OSError as e:
            logger.error(f'Error retrieving data for key {key}: {e}')
            raise StorageError(f'Read failed for {key}: {e}') from e

        if raw is None:
            logger.debug(f'No data found for key: {key}, returning default')
            return default

        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f'Malformed JSON stored under {key}, returning default: {e}')
            return default

    def store_data(self, key: str, value: Any) -> None:
        """Serialize and store value under key.

        Raises:
            StorageError: If serialization or the backend write fails
        """
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f'Cannot serialize data for key {key}: {e}')
            raise StorageError(f'Serialization failed for {key}: {e}') from e

        try:
            self.store.set(key, payload)
        except OSError as e:
            logger.error(f'Error saving data for key {key}: {e}')
            raise StorageError(f'Write failed for {key}: {e}') from e

        logger.debug(f'Saved data for key: {key}')

    def remove_data(self, key: str) -> None:
        try:
            self.store.remove(key)
        except OSError as e:
            logger.error(f'Error removing data for key {key}: {e}')
            raise StorageError(f'Remove failed for {key}: {e}') from e

    def clear_all(self, keys: Iterable[str]) -> None:
        """Remove every listed key in one call."""
        keys = list(keys)
        try:
            self.store.multi_remove(keys)
        except OSError as e:
            logger.error(f'Error clearing app data: {e}')
            raise StorageError(f'Clear failed: {e}') from e
        logger.info(f'Cleared {len(keys)} storage keys')

    def health_check(self) -> bool:
        """Return True if the backend answers a read."""
        try:
            self.store.get('@medicaffe_health_probe')
            return True
        except OSError as e:
            logger.error(f'Storage health check failed: {e}')
            return False
