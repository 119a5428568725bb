"""
Prompt builders for each AI use case.

All builders are pure string formatting and never fail. The interaction
builder does not check that at least two medications were given; callers do.
"""

from typing import Iterable, Sequence

from ..models.core import Medication

DISCLAIMER_INSTRUCTION = 'Important: This is for educational purposes only. Always recommend consulting a healthcare provider.'


def build_interaction_prompt(medications: Sequence[Medication]) -> str:
    """Build the interaction-check prompt for a list of medications."""
    medication_names = ', '.join(medication.label for medication in medications)

    return f"""You are a pharmaceutical expert. Analyze the following medications for potential drug interactions:

Medications: {medication_names}

Please provide:
1. A list of any potential interactions between these medications
2. The severity level of each interaction (none, mild, moderate, or severe)
3. A brief explanation of each interaction
4. Recommendations for each interaction

Format your response as JSON with this structure:
{{
  "hasInteractions": boolean,
  "interactions": [
    {{
      "medications": ["Med1", "Med2"],
      "severity": "none|mild|moderate|severe",
      "description": "Description of the interaction",
      "recommendation": "What the patient should do"
    }}
  ],
  "summary": "Brief overall summary"
}}

{DISCLAIMER_INSTRUCTION}"""


def build_medication_info_prompt(medication: Medication) -> str:
    """Build the prompt requesting reference information for one medication."""
    return f"""You are a pharmaceutical expert. Provide detailed information about the following medication:

Medication: {medication.name}
Dosage: {medication.dosage} {medication.unit}
Form: {medication.form}

Please provide the following information in JSON format:
{{
  "genericName": "Generic name if brand name was given",
  "drugClass": "Classification of the drug",
  "commonUses": ["List of common uses"],
  "howItWorks": "Brief explanation of mechanism",
  "commonSideEffects": ["List of common side effects"],
  "seriousSideEffects": ["List of serious side effects to watch for"],
  "precautions": ["Important precautions"],
  "foodInteractions": ["Foods to avoid or be aware of"],
  "storageInstructions": "How to store the medication",
  "missedDoseGuidance": "What to do if a dose is missed"
}}

Important: This is for educational purposes only. Always recommend consulting a healthcare provider for medical advice."""


def build_suggestions_prompt(medication: Medication) -> str:
    """Build the prompt requesting timing and best-practice suggestions."""
    return f"""You are a pharmaceutical expert. Provide helpful suggestions for taking the following medication:

Medication: {medication.name}
Dosage: {medication.dosage} {medication.unit}
Form: {medication.form}
Frequency: {medication.frequency}

Please provide suggestions in JSON format:
{{
  "bestTimeToTake": "Optimal time(s) to take this medication",
  "withFood": "Whether to take with or without food",
  "tips": ["Helpful tips for taking this medication"],
  "warnings": ["Important things to avoid or watch out for"],
  "reminders": ["Things to remember about this medication"]
}}"""


def build_question_prompt(question: str, medications: Iterable[Medication] = ()) -> str:
    """Build a free-text Q&A prompt, with the user's medications as context when given."""
    names = [medication.name for medication in medications]
    medication_context = f'\n\nThe user is currently taking: {", ".join(names)}' if names else ''

    return f"""You are a helpful pharmaceutical assistant. Answer the following question about medications.{medication_context}

User Question: {question}

Please provide a helpful, accurate, and easy-to-understand answer. If the question requires professional medical advice, recommend consulting a healthcare provider.

Important guidelines:
- Be informative but not a replacement for professional medical advice
- If the question is about specific dosing or treatment decisions, advise consulting a doctor
- Keep the response concise but thorough
- Use simple language that's easy to understand"""
