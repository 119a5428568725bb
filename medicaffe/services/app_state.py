"""
Application State Manager: the in-memory source of truth for profile,
medications, histories and settings, written through to storage.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

from ..models.core import (STORAGE_KEYS, THEME_DARK, THEME_LIGHT, THEME_MODES, THEME_SYSTEM, AppSettings, ChatMessage,
                           InteractionCheckResult, Medication, UserProfile, ValidationError)
from ..utils.kv_store import JsonStorage, StorageError
from ..utils.logging_config import get_logger
from ..utils.timestamp_utils import now_iso
from .history import ChatHistoryStore, InteractionHistoryStore

logger = get_logger(__name__)

# Fields that callers may not overwrite through update_medication
PROTECTED_MEDICATION_FIELDS = ('id', 'createdAt')


class AppStateManager:
    """Holds application state for one process and persists every change.

    Each write method persists first and only then updates memory, so a
    storage failure leaves in-memory state matching what is durable. Failures
    set `error` and return None/False.
    """

    def __init__(self, storage: JsonStorage, system_color_scheme: Optional[Callable[[], str]] = None):
        """Initialize the state manager.

        Args:
            storage: JSON storage adapter
            system_color_scheme: Callable returning the OS scheme ('light' or 'dark')
        """
        self.storage = storage
        self.interaction_history_store = InteractionHistoryStore(storage)
        self.chat_history_store = ChatHistoryStore(storage)
        self.system_color_scheme = system_color_scheme or (lambda: THEME_LIGHT)

        self.user_profile: Optional[UserProfile] = None
        self.medications: List[Medication] = []
        self.onboarding_complete = False
        self.interaction_history: List[InteractionCheckResult] = []
        self.chat_history: List[ChatMessage] = []
        self.settings = AppSettings()
        self.is_loading = True
        self.error: Optional[str] = None

        logger.info('Initialized AppStateManager')

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load every persisted collection concurrently.

        Loads are isolated: one that fails is logged, recorded in `error` and
        leaves its collection at the default.
        """
        logger.info('Loading initial data...')
        self.is_loading = True

        loaders: Dict[str, Callable[[], Any]] = {
            'user_profile': self._load_profile,
            'medications': self._load_medications,
            'onboarding_complete': self._load_onboarding,
            'interaction_history': self.interaction_history_store.list,
            'chat_history': self.chat_history_store.list,
            'settings': self._load_settings,
        }

        with ThreadPoolExecutor(max_workers=len(loaders), thread_name_prefix='medicaffe-load') as executor:
            futures = {name: executor.submit(loader) for name, loader in loaders.items()}

        failed = []
        for name, future in futures.items():
            try:
                setattr(self, name, future.result())
            except (StorageError, ValueError, TypeError, AttributeError) as e:
                logger.error(f'Error loading {name}: {e}')
                failed.append(name)

        if failed:
            self.error = f'Failed to load app data: {", ".join(failed)}'

        self.is_loading = False
        logger.info(f'Initial data loaded (medications: {len(self.medications)}, '
                    f'onboarding complete: {self.onboarding_complete})')

    def close(self) -> None:
        """Drop in-memory state. Persisted data is untouched."""
        self.user_profile = None
        self.medications = []
        self.onboarding_complete = False
        self.interaction_history = []
        self.chat_history = []
        self.settings = AppSettings()
        self.error = None
        self.is_loading = True
        logger.info('AppStateManager closed')

    def _load_profile(self) -> Optional[UserProfile]:
        data = self.storage.get_data(STORAGE_KEYS['USER_PROFILE'], None)
        return UserProfile.from_dict(data) if isinstance(data, dict) else None

    def _load_medications(self) -> List[Medication]:
        data = self.storage.get_data(STORAGE_KEYS['MEDICATIONS'], [])
        if not isinstance(data, list):
            return []
        medications = []
        for item in data:
            try:
                medications.append(Medication.from_dict(item))
            except (ValidationError, AttributeError) as e:
                logger.warning(f'Skipping unreadable stored medication: {e}')
        return medications

    def _load_onboarding(self) -> bool:
        return self.storage.get_data(STORAGE_KEYS['ONBOARDING_COMPLETE'], False) is True

    def _load_settings(self) -> AppSettings:
        data = self.storage.get_data(STORAGE_KEYS['APP_SETTINGS'], None)
        return AppSettings.from_dict(data) if isinstance(data, dict) else AppSettings()

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def active_medications(self) -> List[Medication]:
        return [medication for medication in self.medications if medication.is_active is not False]

    @property
    def inactive_medications(self) -> List[Medication]:
        return [medication for medication in self.medications if medication.is_active is False]

    def get_medication(self, medication_id: str) -> Optional[Medication]:
        for medication in self.medications:
            if medication.id == medication_id:
                return medication
        return None

    # ------------------------------------------------------------------
    # Medications
    # ------------------------------------------------------------------

    def _save_medications(self, medications: List[Medication]) -> None:
        self.storage.store_data(STORAGE_KEYS['MEDICATIONS'], [medication.to_dict() for medication in medications])

    def add_medication(self, data: Dict[str, Any]) -> Optional[Medication]:
        """Add a medication with a fresh id, createdAt and isActive=True.

        Args:
            data: camelCase medication fields; id, createdAt and isActive are ignored

        Returns:
            The stored Medication, or None if it could not be persisted

        Raises:
            ValidationError: If the medication data is invalid
        """
        fields = {k: v for k, v in data.items() if k not in ('id', 'createdAt', 'updatedAt', 'isActive')}
        medication = Medication.from_dict(fields)

        try:
            self._save_medications(self.medications + [medication])
        except StorageError as e:
            logger.error(f'Error adding medication: {e}')
            self.error = 'Failed to add medication'
            return None

        self.medications = self.medications + [medication]
        logger.info(f'Medication added: {medication.name}')
        return medication

    def update_medication(self, medication_id: str, updates: Dict[str, Any]) -> Optional[Medication]:
        """Merge camelCase updates into an existing medication and stamp updatedAt.

        Returns:
            The updated Medication, or None if the id is unknown or persistence failed

        Raises:
            ValidationError: If the merged medication is invalid
        """
        index = next((i for i, medication in enumerate(self.medications) if medication.id == medication_id), None)
        if index is None:
            logger.warning(f'Cannot update unknown medication: {medication_id}')
            return None

        merged = self.medications[index].to_dict()
        merged.update({k: v for k, v in updates.items() if k not in PROTECTED_MEDICATION_FIELDS})
        merged['updatedAt'] = now_iso()
        updated = Medication.from_dict(merged)

        medications = list(self.medications)
        medications[index] = updated
        try:
            self._save_medications(medications)
        except StorageError as e:
            logger.error(f'Error updating medication: {e}')
            self.error = 'Failed to update medication'
            return None

        self.medications = medications
        logger.info(f'Medication updated: {medication_id}')
        return updated

    def delete_medication(self, medication_id: str) -> bool:
        """Delete a medication. Unknown ids return False without touching storage."""
        medications = [medication for medication in self.medications if medication.id != medication_id]
        if len(medications) == len(self.medications):
            logger.warning(f'Cannot delete unknown medication: {medication_id}')
            return False

        try:
            self._save_medications(medications)
        except StorageError as e:
            logger.error(f'Error deleting medication: {e}')
            self.error = 'Failed to delete medication'
            return False

        self.medications = medications
        logger.info(f'Medication deleted: {medication_id}')
        return True

    # ------------------------------------------------------------------
    # Profile and onboarding
    # ------------------------------------------------------------------

    def update_profile(self, profile: Dict[str, Any]) -> Optional[UserProfile]:
        """Replace the user profile; last write wins.

        Raises:
            ValidationError: If the profile data is invalid
        """
        updated = UserProfile.from_dict(profile)
        updated.updated_at = now_iso()

        try:
            self.storage.store_data(STORAGE_KEYS['USER_PROFILE'], updated.to_dict())
        except StorageError as e:
            logger.error(f'Error updating profile: {e}')
            self.error = 'Failed to update profile'
            return None

        self.user_profile = updated
        logger.info('User profile updated')
        return updated

    def complete_onboarding(self) -> bool:
        try:
            self.storage.store_data(STORAGE_KEYS['ONBOARDING_COMPLETE'], True)
        except StorageError as e:
            logger.error(f'Error completing onboarding: {e}')
            self.error = 'Failed to complete onboarding'
            return False

        self.onboarding_complete = True
        logger.info('Onboarding marked as complete')
        return True

    # ------------------------------------------------------------------
    # Settings and theme
    # ------------------------------------------------------------------

    def update_settings(self, **changes: Any) -> Optional[AppSettings]:
        """Persist changed settings, given as snake_case attribute names.

        Raises:
            ValidationError: On unknown setting names or an invalid theme mode
        """
        current = self.settings.to_dict()
        for attr, value in changes.items():
            key = next((k for k, a in AppSettings._FIELDS.items() if a == attr), None)
            if key is None:
                raise ValidationError(f'Unknown setting: {attr}')
            if attr == 'theme_mode' and value not in THEME_MODES:
                raise ValidationError(f'Invalid theme mode {value!r}; expected one of: {", ".join(THEME_MODES)}')
            current[key] = value

        try:
            self.storage.store_data(STORAGE_KEYS['APP_SETTINGS'], current)
        except StorageError as e:
            logger.error(f'Error saving settings: {e}')
            self.error = 'Failed to save settings'
            return None

        self.settings = AppSettings.from_dict(current)
        return self.settings

    @property
    def theme_mode(self) -> str:
        return self.settings.theme_mode

    @property
    def is_dark_mode(self) -> bool:
        """Resolve the theme mode, consulting the OS scheme for `system`."""
        if self.theme_mode == THEME_SYSTEM:
            return self.system_color_scheme() == THEME_DARK
        return self.theme_mode == THEME_DARK

    def set_theme_mode(self, mode: str) -> bool:
        """Set the theme mode to light, dark or system."""
        if self.update_settings(theme_mode=mode) is None:
            return False
        logger.info(f'Theme mode set to {mode}')
        return True

    def toggle_theme(self) -> bool:
        """Flip between light and dark based on what is currently shown."""
        return self.set_theme_mode(THEME_LIGHT if self.is_dark_mode else THEME_DARK)

    # ------------------------------------------------------------------
    # Histories
    # ------------------------------------------------------------------

    def refresh_interaction_history(self) -> List[InteractionCheckResult]:
        try:
            self.interaction_history = self.interaction_history_store.list()
        except StorageError as e:
            logger.error(f'Error refreshing interaction history: {e}')
            return []
        return self.interaction_history

    def refresh_chat_history(self) -> List[ChatMessage]:
        try:
            self.chat_history = self.chat_history_store.list()
        except StorageError as e:
            logger.error(f'Error refreshing chat history: {e}')
            return []
        return self.chat_history

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def clear_all_data(self) -> bool:
        """Remove every persisted collection and reset memory to defaults."""
        try:
            self.storage.clear_all(STORAGE_KEYS.values())
        except StorageError as e:
            logger.error(f'Error clearing all data: {e}')
            self.error = 'Failed to clear app data'
            return False

        self.close()
        self.is_loading = False
        return True

    def clear_error(self) -> None:
        self.error = None
