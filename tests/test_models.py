"""Tests for core data models and identifiers."""

from __future__ import annotations

import pytest

from medicaffe.models.core import (AppSettings, ChatMessage, InteractionCheckResult, Medication, UserProfile,
                                   ValidationError)
from medicaffe.utils.timestamp_utils import generate_id, now_iso


def test_generate_id_is_unique_and_increasing():
    ids = [generate_id() for _ in range(500)]

    assert len(set(ids)) == 500
    assert [int(i) for i in ids] == sorted(int(i) for i in ids)


def test_now_iso_format():
    assert now_iso(0) == '1970-01-01T00:00:00.000Z'


class TestMedication:
    def test_defaults(self):
        medication = Medication(name=' Aspirin ', dosage='81', unit='mg')

        assert medication.name == 'Aspirin'
        assert medication.is_active is True
        assert medication.created_at
        assert medication.updated_at is None
        assert medication.label == 'Aspirin (81 mg)'
        assert 'updatedAt' not in medication.to_dict()

    @pytest.mark.parametrize('overrides', [{'name': ''}, {'form': 'gummy'}, {'frequency': 'hourly'},
                                           {'timing': 'midnight'}, {'category': 'magic'}])
    def test_invalid_fields(self, overrides):
        fields = dict(name='Aspirin', dosage='81', unit='mg')
        fields.update(overrides)
        with pytest.raises(ValidationError):
            Medication(**fields)

    def test_dict_round_trip_keeps_camel_case(self):
        medication = Medication(name='Aspirin', dosage='81', unit='mg', timing='morning', prescribed_by='Dr. Lee')
        data = medication.to_dict()

        assert data['prescribedBy'] == 'Dr. Lee'
        assert data['isActive'] is True
        assert Medication.from_dict(data) == medication

    def test_from_dict_treats_missing_is_active_as_active(self):
        assert Medication.from_dict({'name': 'Aspirin', 'dosage': 81, 'unit': 'mg'}).is_active is True


class TestInteractionCheckResult:
    def test_stored_flag_is_not_rederived(self):
        result = InteractionCheckResult.from_dict({
            'hasInteractions': False,
            'interactions': [{'medications': ['A', 'B'], 'severity': 'severe'}],
        })

        assert result.has_interactions is False
        assert result.shows_warning is True

    def test_none_placeholder_is_not_reportable(self):
        result = InteractionCheckResult.from_dict({
            'hasInteractions': True,
            'interactions': [{'medications': ['All checked medications'], 'severity': 'none'}],
        })

        assert result.shows_warning is False
        assert result.highest_severity == 'none'

    def test_non_list_interactions(self):
        result = InteractionCheckResult.from_dict({'interactions': 'none', 'hasInteractions': 'yes'})

        assert result.interactions == []
        assert result.has_interactions is False


def test_settings_preserve_unknown_keys_and_reject_bad_theme():
    settings = AppSettings.from_dict({'themeMode': 'neon', 'language': 'en', 'notifications': False})

    assert settings.theme_mode == 'system'
    assert settings.notifications is False
    assert settings.to_dict()['language'] == 'en'


def test_profile_rejects_bad_age():
    with pytest.raises(ValidationError):
        UserProfile.from_dict({'name': 'Sam', 'age': 'forty'})


def test_chat_message_roles():
    assert ChatMessage(role='error', content='boom').role == 'error'
    with pytest.raises(ValidationError):
        ChatMessage(role='system', content='nope')
