"""Tests for prompt builders."""

from __future__ import annotations

from conftest import make_medication

from medicaffe.services.prompt_builders import (build_interaction_prompt, build_medication_info_prompt,
                                                build_question_prompt, build_suggestions_prompt)


def test_interaction_prompt_lists_medications_with_dosage():
    prompt = build_interaction_prompt([make_medication('Aspirin', '81', 'mg'), make_medication('Warfarin', '5', 'mg')])

    assert 'Medications: Aspirin (81 mg), Warfarin (5 mg)' in prompt
    assert 'Analyze the following medications' in prompt
    for field_name in ('"hasInteractions"', '"interactions"', '"medications"', '"severity"', '"description"',
                       '"recommendation"', '"summary"'):
        assert field_name in prompt
    assert 'none|mild|moderate|severe' in prompt
    assert 'educational purposes only' in prompt


def test_interaction_prompt_does_not_enforce_minimum():
    prompt = build_interaction_prompt([make_medication('Aspirin')])
    assert 'Medications: Aspirin (100 mg)' in prompt


def test_medication_info_prompt_requests_all_fields():
    prompt = build_medication_info_prompt(make_medication('Metformin', '500', 'mg', form='tablet'))

    assert 'detailed information about' in prompt
    assert 'Medication: Metformin' in prompt
    assert 'Dosage: 500 mg' in prompt
    assert 'Form: tablet' in prompt
    for field_name in ('genericName', 'drugClass', 'commonUses', 'howItWorks', 'commonSideEffects',
                       'seriousSideEffects', 'precautions', 'foodInteractions', 'storageInstructions',
                       'missedDoseGuidance'):
        assert f'"{field_name}"' in prompt


def test_suggestions_prompt_includes_frequency():
    prompt = build_suggestions_prompt(make_medication('Lisinopril', '10', 'mg', frequency='twice_daily'))

    assert 'suggestions for taking' in prompt
    assert 'Frequency: twice_daily' in prompt
    for field_name in ('bestTimeToTake', 'withFood', 'tips', 'warnings', 'reminders'):
        assert f'"{field_name}"' in prompt


def test_question_prompt_with_context():
    prompt = build_question_prompt('Can I drink coffee?', [make_medication('Aspirin'), make_medication('Metformin')])

    assert 'The user is currently taking: Aspirin, Metformin' in prompt
    assert 'User Question: Can I drink coffee?' in prompt
    assert 'JSON' not in prompt


def test_question_prompt_without_context():
    prompt = build_question_prompt('What is a generic drug?')
    assert 'currently taking' not in prompt
