"""Tests for embedded-JSON extraction and response normalization."""

from __future__ import annotations

import pytest
from conftest import make_medication

from medicaffe.services.response_normalizer import (KIND_INFO, KIND_INTERACTION, KIND_QUESTION, KIND_SUGGESTIONS,
                                                    normalize, to_interaction_result, to_medication_info,
                                                    to_medication_suggestions)
from medicaffe.utils.json_utils import clean_json_response, extract_json_object, find_json_object


class TestJsonUtils:
    def test_clean_json_response_strips_fences(self):
        assert clean_json_response('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert clean_json_response('```\n{"a": 1}```') == '{"a": 1}'

    def test_find_json_object_is_greedy(self):
        text = 'first {"a": 1} then {"b": 2} done'
        assert find_json_object(text) == '{"a": 1} then {"b": 2}'

    def test_extract_ignores_surrounding_prose(self):
        text = 'Sure! Here is the analysis:\n{"hasInteractions": true, "summary": "x"}\nStay safe.'
        assert extract_json_object(text) == {'hasInteractions': True, 'summary': 'x'}

    def test_extract_returns_none_without_object(self):
        assert extract_json_object('no braces here') is None
        assert extract_json_object('') is None

    def test_extract_returns_none_on_invalid_json(self):
        assert extract_json_object('{not json}') is None

    def test_extract_returns_none_on_excessive_nesting(self):
        assert extract_json_object('{"a": ' + '[' * 200000 + ']' * 200000 + '}') is None


class TestNormalize:
    def test_embedded_json_is_returned_unvalidated(self):
        raw = 'Analysis follows.\n```json\n{"hasInteractions": false, "extra": [1, 2]}\n```'
        assert normalize(raw, KIND_INTERACTION) == {'hasInteractions': False, 'extra': [1, 2]}

    def test_interaction_fallback_wraps_raw_text(self):
        raw = 'I could not produce JSON, but these look fine together.'
        assert normalize(raw, KIND_INTERACTION) == {'hasInteractions': False, 'interactions': [], 'summary': raw}

    def test_info_and_suggestion_fallbacks(self):
        assert normalize('plain text', KIND_INFO) == {'rawInfo': 'plain text'}
        assert normalize('{broken', KIND_SUGGESTIONS) == {'rawSuggestions': '{broken'}

    def test_deeply_nested_output_falls_back_to_raw_text(self):
        raw = '{"a": ' + '[' * 200000 + ']' * 200000 + '}'
        assert normalize(raw, KIND_INTERACTION) == {'hasInteractions': False, 'interactions': [], 'summary': raw}

    def test_question_returns_raw_text(self):
        raw = 'Take it with food {maybe}.'
        assert normalize(raw, KIND_QUESTION) == raw

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            normalize('{}', 'recipe')


class TestTypedNormalization:
    def test_interaction_result_is_stamped(self):
        medications = [make_medication('Aspirin'), make_medication('Ibuprofen')]
        raw = '{"hasInteractions": true, "interactions": [], "summary": "s", "medicationsChecked": ["Other"]}'

        result = to_interaction_result(raw, medications)

        assert result.medications_checked == ['Aspirin', 'Ibuprofen']
        assert result.checked_at is not None
        assert result.has_interactions is True

    def test_interaction_result_fills_defaults(self):
        raw = '{"interactions": [{"severity": "SEVERE"}, "junk", {"severity": "catastrophic", "medications": "A"}]}'

        result = to_interaction_result(raw, [make_medication('A'), make_medication('B')])

        assert result.has_interactions is False
        assert result.summary == ''
        assert [record.severity for record in result.interactions] == ['severe', 'moderate']
        assert result.interactions[0].medications == []
        assert result.interactions[1].medications == ['A']
        assert result.interactions[0].description == ''

    def test_fallback_interaction_result_keeps_text_as_summary(self):
        result = to_interaction_result('Nothing structured.', [make_medication('A'), make_medication('B')])

        assert result.has_interactions is False
        assert result.interactions == []
        assert result.summary == 'Nothing structured.'
        assert result.shows_warning is False

    def test_medication_info_defaults(self):
        info = to_medication_info('{"genericName": "Acetylsalicylic Acid", "commonUses": "Pain relief"}')

        assert info.generic_name == 'Acetylsalicylic Acid'
        assert info.common_uses == ['Pain relief']
        assert info.precautions == []
        assert info.raw_info is None

    def test_medication_info_raw_fallback(self):
        info = to_medication_info('Aspirin is an NSAID.')
        assert info.raw_info == 'Aspirin is an NSAID.'
        assert info.to_dict()['rawInfo'] == 'Aspirin is an NSAID.'

    def test_suggestions_raw_fallback(self):
        suggestions = to_medication_suggestions('Take it in the morning.')
        assert suggestions.raw_suggestions == 'Take it in the morning.'
        assert suggestions.tips == []
