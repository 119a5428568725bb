"""
AI Assistant Service: runs prompt building, generation, normalization and
history recording for each AI feature, tracking loading and error state.
"""

from typing import Optional, Sequence

from ..models.core import InteractionCheckResult, Medication, MedicationInfo, MedicationSuggestions
from ..utils.kv_store import StorageError
from ..utils.logging_config import get_logger
from ..utils.response_generator import GenerationError, ResponseGenerator
from .history import ChatHistoryStore, InteractionHistoryStore
from .prompt_builders import (build_interaction_prompt, build_medication_info_prompt, build_question_prompt,
                              build_suggestions_prompt)
from .response_normalizer import to_interaction_result, to_medication_info, to_medication_suggestions

logger = get_logger(__name__)

INTERACTION_ERROR = 'Failed to check drug interactions. Please try again.'
INFO_ERROR = 'Failed to get medication information. Please try again.'
SUGGESTIONS_ERROR = 'Failed to get suggestions. Please try again.'
QUESTION_ERROR = 'Failed to get an answer. Please try again.'


class AIAssistantService:
    """Entry point for interaction checks, medication lookups and Q&A."""

    def __init__(self, generator: ResponseGenerator, interaction_history: InteractionHistoryStore,
                 chat_history: ChatHistoryStore):
        self.generator = generator
        self.interaction_history = interaction_history
        self.chat_history = chat_history
        self.loading = False
        self.error: Optional[str] = None

        logger.info(f'Initialized AIAssistantService with {generator.name} generator')

    def clear_error(self) -> None:
        self.error = None

    def _generate(self, prompt: str, message: str) -> str:
        self.loading = True
        self.error = None
        try:
            return self.generator.generate(prompt)
        except GenerationError as e:
            logger.error(f'{message} ({e})')
            self.error = message
            raise GenerationError(message) from e
        finally:
            self.loading = False

    def check_interactions(self, medications: Sequence[Medication]) -> InteractionCheckResult:
        """Check a set of medications for interactions and record the result.

        Fewer than two medications short-circuits with a fixed result and the
        generator is not called.

        Args:
            medications: Medications to check together

        Returns:
            The recorded result, or the unrecorded result if history could not be written

        Raises:
            GenerationError: If the generator fails
        """
        if len(medications) < 2:
            result = InteractionCheckResult.not_enough_medications()
        else:
            raw = self._generate(build_interaction_prompt(medications), INTERACTION_ERROR)
            result = to_interaction_result(raw, medications)

        try:
            result = self.interaction_history.record(result)
        except StorageError as e:
            logger.warning(f'Interaction check not saved to history: {e}')

        logger.info(f'Interaction check completed: {result.has_interactions}')
        return result

    def fetch_medication_info(self, medication: Medication) -> MedicationInfo:
        """
        Raises:
            GenerationError: If the generator fails
        """
        raw = self._generate(build_medication_info_prompt(medication), INFO_ERROR)
        logger.info(f'Medication info fetched for: {medication.name}')
        return to_medication_info(raw)

    def fetch_suggestions(self, medication: Medication) -> MedicationSuggestions:
        """
        Raises:
            GenerationError: If the generator fails
        """
        raw = self._generate(build_suggestions_prompt(medication), SUGGESTIONS_ERROR)
        logger.info(f'Suggestions fetched for: {medication.name}')
        return to_medication_suggestions(raw)

    def ask_question(self, question: str, medications: Sequence[Medication] = ()) -> str:
        """Answer a free-text question, saving both sides of the exchange to chat history.

        Args:
            question: The user's question
            medications: The user's current medications, used as context

        Returns:
            The answer text

        Raises:
            GenerationError: If the generator fails
        """
        self._save_chat('user', question)
        answer = self._generate(build_question_prompt(question, medications), QUESTION_ERROR)
        self._save_chat('assistant', answer)

        logger.info('Question answered successfully')
        return answer

    def _save_chat(self, role: str, content: str) -> None:
        try:
            self.chat_history.add(role, content)
        except StorageError as e:
            logger.warning(f'Chat message not saved to history: {e}')
