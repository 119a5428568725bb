"""
MCP interface layer exposing MediCaffe operations as fastmcp tools.

Run with `python -m medicaffe.mcp_interface`.
"""
from typing import Any, Dict, List, Optional, Tuple

from fastmcp import FastMCP

from .models.core import ValidationError
from .services.ai_assistant import AIAssistantService
from .services.app_state import AppStateManager
from .utils.config import AppConfig, config
from .utils.health_check import get_system_info
from .utils.kv_store import JsonStorage, create_key_value_store
from .utils.logging_config import get_logger
from .utils.response_generator import GenerationError, create_response_generator

logger = get_logger(__name__)


def create_services(app_config: AppConfig) -> Tuple[AppStateManager, AIAssistantService]:
    """Build and initialize the state manager and assistant for a configuration."""
    storage = JsonStorage(create_key_value_store(app_config.storage))
    state = AppStateManager(storage, system_color_scheme=lambda: app_config.system_color_scheme)
    state.initialize()

    assistant = AIAssistantService(create_response_generator(app_config), state.interaction_history_store,
                                   state.chat_history_store)
    return state, assistant


def create_mcp(state: AppStateManager, assistant: AIAssistantService, app_config: AppConfig) -> FastMCP:
    """Register MediCaffe tools on a new FastMCP application."""
    mcp = FastMCP('MediCaffe')

    def _medications_for(ids: Optional[List[str]]) -> list:
        if not ids:
            return state.active_medications
        medications = []
        for medication_id in ids:
            medication = state.get_medication(medication_id)
            if medication is None:
                raise ValueError(f'Unknown medication id: {medication_id}')
            medications.append(medication)
        return medications

    def _require_medication(medication_id: str):
        medication = state.get_medication(medication_id)
        if medication is None:
            raise ValueError(f'Unknown medication id: {medication_id}')
        return medication

    @mcp.tool()
    def list_medications(include_inactive: bool = False) -> List[Dict[str, Any]]:
        """List the user's medications, active ones only unless include_inactive is set."""
        medications = state.medications if include_inactive else state.active_medications
        return [medication.to_dict() for medication in medications]

    @mcp.tool()
    def add_medication(medication: Dict[str, Any]) -> Dict[str, Any]:
        """Add a medication.

        Args:
            medication: camelCase fields (name, dosage, unit, form, frequency, timing, category, notes, prescribedBy)

        Returns:
            The stored medication
        """
        try:
            added = state.add_medication(medication)
        except ValidationError as e:
            raise Exception(f'Invalid medication: {e}')
        if added is None:
            raise Exception(state.error or 'Failed to add medication')
        return added.to_dict()

    @mcp.tool()
    def update_medication(medication_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Update fields of an existing medication."""
        try:
            updated = state.update_medication(medication_id, updates)
        except ValidationError as e:
            raise Exception(f'Invalid medication: {e}')
        if updated is None:
            raise Exception(state.error or f'Unknown medication id: {medication_id}')
        return updated.to_dict()

    @mcp.tool()
    def delete_medication(medication_id: str) -> bool:
        """Delete a medication by id."""
        return state.delete_medication(medication_id)

    @mcp.tool()
    def check_interactions(medication_ids: Optional[List[str]] = None) -> Dict[str, Any]:
        """Check medications for interactions; defaults to all active medications.

        Returns:
            The interaction check result plus `showsWarning`, which ignores `none` placeholder records
        """
        try:
            result = assistant.check_interactions(_medications_for(medication_ids))
        except GenerationError as e:
            raise Exception(str(e))
        state.refresh_interaction_history()
        payload = result.to_dict()
        payload['showsWarning'] = result.shows_warning
        return payload

    @mcp.tool()
    def get_interaction_history() -> List[Dict[str, Any]]:
        """Return past interaction checks, newest first."""
        return [entry.to_dict() for entry in state.refresh_interaction_history()]

    @mcp.tool()
    def get_medication_info(medication_id: str) -> Dict[str, Any]:
        """Return reference information about one of the user's medications."""
        try:
            return assistant.fetch_medication_info(_require_medication(medication_id)).to_dict()
        except GenerationError as e:
            raise Exception(str(e))

    @mcp.tool()
    def get_medication_suggestions(medication_id: str) -> Dict[str, Any]:
        """Return timing and best-practice suggestions for one of the user's medications."""
        try:
            return assistant.fetch_suggestions(_require_medication(medication_id)).to_dict()
        except GenerationError as e:
            raise Exception(str(e))

    @mcp.tool()
    def ask_question(question: str) -> str:
        """Ask a free-text question; the user's active medications are sent as context."""
        if not question or not question.strip():
            raise ValueError('Question is required')
        try:
            answer = assistant.ask_question(question.strip(), state.active_medications)
        except GenerationError as e:
            raise Exception(str(e))
        state.refresh_chat_history()
        return answer

    @mcp.tool()
    def get_chat_history() -> List[Dict[str, Any]]:
        """Return the assistant chat transcript, oldest first."""
        return [message.to_dict() for message in state.refresh_chat_history()]

    @mcp.tool()
    def update_profile(profile: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the user profile (name, age, allergies, conditions and any extra keys)."""
        try:
            updated = state.update_profile(profile)
        except ValidationError as e:
            raise Exception(f'Invalid profile: {e}')
        if updated is None:
            raise Exception(state.error or 'Failed to update profile')
        return updated.to_dict()

    @mcp.tool()
    def complete_onboarding() -> bool:
        """Mark onboarding as complete."""
        return state.complete_onboarding()

    @mcp.tool()
    def set_theme_mode(mode: str) -> Dict[str, Any]:
        """Set the theme mode to light, dark or system."""
        try:
            saved = state.set_theme_mode(mode)
        except ValidationError as e:
            raise Exception(str(e))
        if not saved:
            raise Exception(state.error or 'Failed to save settings')
        return {'themeMode': state.theme_mode, 'isDarkMode': state.is_dark_mode}

    @mcp.tool()
    def toggle_theme() -> Dict[str, Any]:
        """Flip the theme between light and dark."""
        if not state.toggle_theme():
            raise Exception(state.error or 'Failed to save settings')
        return {'themeMode': state.theme_mode, 'isDarkMode': state.is_dark_mode}

    @mcp.tool()
    def clear_all_data() -> bool:
        """Delete every stored collection."""
        return state.clear_all_data()

    @mcp.tool()
    def system_info() -> Dict[str, Any]:
        """Return configuration and component health."""
        return get_system_info(app_config, assistant.generator, state.storage)

    return mcp


if __name__ == '__main__':
    app_state, ai_assistant = create_services(config)
    mcp = create_mcp(app_state, ai_assistant, config)
    if config.mcp.transport == 'stdio':
        mcp.run()
    else:
        mcp.run(transport=config.mcp.transport, host=config.mcp.host, port=config.mcp.port)
