"""Tests for the AI assistant orchestration layer."""

from __future__ import annotations

import pytest
from conftest import RecordingGenerator, make_medication

from medicaffe.models.core import NOT_ENOUGH_MEDICATIONS_SUMMARY, STORAGE_KEYS
from medicaffe.services.ai_assistant import (INFO_ERROR, INTERACTION_ERROR, QUESTION_ERROR, SUGGESTIONS_ERROR,
                                             AIAssistantService)
from medicaffe.services.app_state import AppStateManager
from medicaffe.utils.kv_store import FileKeyValueStore, JsonStorage
from medicaffe.utils.response_generator import GenerationError


def _assistant(state, generator) -> AIAssistantService:
    return AIAssistantService(generator, state.interaction_history_store, state.chat_history_store)


class TestCheckInteractions:
    @pytest.mark.parametrize('count', [0, 1])
    def test_fewer_than_two_medications_skips_generator(self, state, count):
        generator = RecordingGenerator(reply='{}')
        medications = [make_medication('Aspirin')][:count]

        result = _assistant(state, generator).check_interactions(medications)

        assert generator.prompts == []
        assert result.has_interactions is False
        assert result.interactions == []
        assert result.summary == NOT_ENOUGH_MEDICATIONS_SUMMARY

    def test_aspirin_ibuprofen_with_mock(self, assistant):
        result = assistant.check_interactions([make_medication('Aspirin'), make_medication('Ibuprofen')])

        assert result.has_interactions is True
        assert len(result.interactions) == 1
        assert result.interactions[0].severity == 'moderate'
        assert result.interactions[0].medications == ['Aspirin', 'Ibuprofen']
        assert result.shows_warning is True
        assert result.medications_checked == ['Aspirin', 'Ibuprofen']

    def test_warfarin_with_mock_is_severe(self, assistant):
        result = assistant.check_interactions([make_medication('Warfarin'), make_medication('Ibuprofen')])

        assert 'severe' in [record.severity for record in result.interactions]
        assert result.highest_severity == 'severe'

    def test_no_known_drugs_is_not_a_warning(self, assistant):
        result = assistant.check_interactions([make_medication('Vitamin D'), make_medication('Cetirizine')])

        assert len(result.interactions) == 1
        assert result.interactions[0].severity == 'none'
        assert result.has_interactions is False
        assert result.shows_warning is False
        assert result.reportable_interactions == []

    def test_result_is_recorded_in_history(self, state, assistant):
        result = assistant.check_interactions([make_medication('Aspirin'), make_medication('Ibuprofen')])

        history = state.refresh_interaction_history()
        assert [entry.id for entry in history] == [result.id]
        assert result.id is not None

    def test_history_write_failure_does_not_fail_check(self, state, assistant, kv_store):
        kv_store.fail_writes = True

        result = assistant.check_interactions([make_medication('Aspirin'), make_medication('Ibuprofen')])

        assert result.interactions[0].severity == 'moderate'
        assert result.id is None
        assert assistant.error is None

    def test_generation_error_sets_message_and_reraises(self, state, generation_failure):
        assistant = _assistant(state, RecordingGenerator(error=generation_failure))

        with pytest.raises(GenerationError, match='Failed to check drug interactions'):
            assistant.check_interactions([make_medication('Aspirin'), make_medication('Ibuprofen')])

        assert assistant.error == INTERACTION_ERROR
        assert assistant.loading is False
        assert state.refresh_interaction_history() == []

    def test_prose_response_falls_back_to_summary(self, state):
        assistant = _assistant(state, RecordingGenerator(reply='These look safe to combine.'))

        result = assistant.check_interactions([make_medication('A'), make_medication('B')])

        assert result.has_interactions is False
        assert result.summary == 'These look safe to combine.'


class TestLookups:
    def test_fetch_medication_info(self, assistant):
        info = assistant.fetch_medication_info(make_medication('Metformin', '500', 'mg'))
        assert info.drug_class == 'Biguanide (Antidiabetic)'
        assert assistant.loading is False

    def test_fetch_suggestions(self, assistant):
        suggestions = assistant.fetch_suggestions(make_medication('Aspirin'))
        assert len(suggestions.tips) == 4

    @pytest.mark.parametrize('method, message', [('fetch_medication_info', INFO_ERROR),
                                                 ('fetch_suggestions', SUGGESTIONS_ERROR)])
    def test_lookup_failures(self, state, generation_failure, method, message):
        assistant = _assistant(state, RecordingGenerator(error=generation_failure))

        with pytest.raises(GenerationError):
            getattr(assistant, method)(make_medication('Aspirin'))

        assert assistant.error == message
        assistant.clear_error()
        assert assistant.error is None


class TestAskQuestion:
    def test_question_and_answer_are_saved(self, state, assistant):
        answer = assistant.ask_question('Is alcohol okay?', [make_medication('Warfarin')])

        history = state.refresh_chat_history()
        assert answer.startswith('Alcohol can interact')
        assert [(m.role, m.content) for m in history] == [('user', 'Is alcohol okay?'), ('assistant', answer)]

    def test_medications_are_sent_as_context(self, state):
        generator = RecordingGenerator(reply='ok')

        _assistant(state, generator).ask_question('Anything to avoid?', [make_medication('Aspirin')])

        assert 'The user is currently taking: Aspirin' in generator.prompts[0]

    def test_failure_keeps_question_only(self, state, generation_failure):
        assistant = _assistant(state, RecordingGenerator(error=generation_failure))

        with pytest.raises(GenerationError):
            assistant.ask_question('Hello?')

        assert assistant.error == QUESTION_ERROR
        assert [m.role for m in state.refresh_chat_history()] == ['user']


def test_corrupt_history_file_does_not_break_checks(tmp_path, mock_generator):
    store = FileKeyValueStore(str(tmp_path))
    state = AppStateManager(JsonStorage(store))
    state.initialize()
    with open(store._path(STORAGE_KEYS['INTERACTIONS_HISTORY']), 'wb') as f:
        f.write(b'\xff\xfe[not utf8')
    assistant = _assistant(state, mock_generator)

    result = assistant.check_interactions([make_medication('Aspirin'), make_medication('Ibuprofen')])

    assert result.interactions[0].severity == 'moderate'
    assert [entry.id for entry in state.refresh_interaction_history()] == [result.id]
    state.close()
