"""
Bounded history stores for interaction checks and assistant chat.
"""

from typing import List

from ..models.core import STORAGE_KEYS, ChatMessage, InteractionCheckResult
from ..utils.kv_store import JsonStorage
from ..utils.logging_config import get_logger
from ..utils.timestamp_utils import generate_id, now_iso

logger = get_logger(__name__)

MAX_INTERACTION_HISTORY = 50
MAX_CHAT_HISTORY = 100


class InteractionHistoryStore:
    """Newest-first list of interaction checks, keeping the most recent 50."""

    def __init__(self, storage: JsonStorage, limit: int = MAX_INTERACTION_HISTORY):
        self.storage = storage
        self.limit = limit
        self.key = STORAGE_KEYS['INTERACTIONS_HISTORY']

    def _load_raw(self) -> list:
        history = self.storage.get_data(self.key, [])
        return history if isinstance(history, list) else []

    def record(self, result: InteractionCheckResult) -> InteractionCheckResult:
        """Store a check result as the newest history entry.

        The entry gets a fresh id and checkedAt. Entries beyond the limit are
        dropped, oldest first.

        Args:
            result: Normalized interaction check result

        Returns:
            The stored entry

        Raises:
            StorageError: If the history cannot be read or written
        """
        entry = InteractionCheckResult.from_dict(result.to_dict())
        entry.id = generate_id()
        entry.checked_at = now_iso()

        history = [entry.to_dict()] + self._load_raw()
        self.storage.store_data(self.key, history[:self.limit])

        logger.debug(f'Recorded interaction check {entry.id} ({len(history[:self.limit])} in history)')
        return entry

    def list(self) -> List[InteractionCheckResult]:
        return [InteractionCheckResult.from_dict(item) for item in self._load_raw() if isinstance(item, dict)]

    def clear(self) -> None:
        self.storage.remove_data(self.key)


class ChatHistoryStore:
    """Oldest-first chat transcript, keeping the last 100 messages."""

    def __init__(self, storage: JsonStorage, limit: int = MAX_CHAT_HISTORY):
        self.storage = storage
        self.limit = limit
        self.key = STORAGE_KEYS['AI_CHAT_HISTORY']

    def _load_raw(self) -> list:
        history = self.storage.get_data(self.key, [])
        return history if isinstance(history, list) else []

    def add(self, role: str, content: str) -> ChatMessage:
        """Append a message and persist the trimmed transcript.

        Raises:
            ValidationError: If role is not user, assistant or error
            StorageError: If the transcript cannot be read or written
        """
        message = ChatMessage(role=role, content=content)
        history = self._load_raw()
        history.append(message.to_dict())
        self.storage.store_data(self.key, history[-self.limit:])
        return message

    def list(self) -> List[ChatMessage]:
        messages = []
        for item in self._load_raw():
            try:
                messages.append(ChatMessage.from_dict(item))
            except (ValueError, AttributeError) as e:
                logger.warning(f'Skipping unreadable chat message: {e}')
        return messages

    def clear(self) -> None:
        self.storage.remove_data(self.key)
