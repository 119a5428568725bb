"""
Deterministic mock generator used for demos and when no live backend is configured.

Routing is by substring on the prompt, and drug detection is a
case-insensitive substring test on the whole prompt. Keep the interaction
rules stable: demo scenarios depend on them.
"""

import json
import time
from typing import Dict, List

from .config import MockLLMConfig
from .logging_config import get_logger
from .response_generator import ResponseGenerator

logger = get_logger(__name__)

KNOWN_DRUGS = ('aspirin', 'ibuprofen', 'warfarin', 'lisinopril', 'metformin')

QUESTION_MARKER = 'User Question:'

_ASPIRIN_INFO = {
    'genericName': 'Acetylsalicylic Acid',
    'drugClass': 'Nonsteroidal Anti-inflammatory Drug (NSAID) / Antiplatelet',
    'commonUses': ['Pain relief', 'Fever reduction', 'Heart attack prevention', 'Stroke prevention'],
    'howItWorks': ('Aspirin works by blocking the production of prostaglandins, chemicals that cause inflammation, '
                   'pain, and fever. It also prevents blood platelets from clumping together, reducing the risk of '
                   'blood clots.'),
    'commonSideEffects': ['Stomach upset', 'Heartburn', 'Nausea', 'Easy bruising'],
    'seriousSideEffects': ['Stomach bleeding', 'Allergic reactions', 'Ringing in ears (tinnitus)',
                           'Severe stomach pain'],
    'precautions': ['Avoid alcohol', 'Not for children with viral infections', 'Inform doctor before surgery',
                    'May interact with blood thinners'],
    'foodInteractions': ['Alcohol increases bleeding risk', 'Take with food to reduce stomach upset'],
    'storageInstructions': 'Store at room temperature away from moisture and heat. Keep in original container.',
    'missedDoseGuidance': ("If taking regularly, take the missed dose as soon as you remember. Skip if it's almost "
                           'time for the next dose.'),
}

_METFORMIN_INFO = {
    'genericName': 'Metformin Hydrochloride',
    'drugClass': 'Biguanide (Antidiabetic)',
    'commonUses': ['Type 2 diabetes management', 'Prediabetes treatment', 'PCOS management'],
    'howItWorks': ('Metformin reduces glucose production in the liver, decreases intestinal absorption of glucose, '
                   'and improves insulin sensitivity in muscle cells.'),
    'commonSideEffects': ['Nausea', 'Diarrhea', 'Stomach upset', 'Metallic taste', 'Loss of appetite'],
    'seriousSideEffects': ['Lactic acidosis (rare but serious)', 'Vitamin B12 deficiency',
                           'Low blood sugar when combined with other diabetes medications'],
    'precautions': ['Stay hydrated', 'Avoid excessive alcohol', 'May need to stop before contrast imaging',
                    'Monitor kidney function'],
    'foodInteractions': ['Take with meals to reduce stomach upset', 'Limit alcohol consumption'],
    'storageInstructions': 'Store at room temperature away from moisture and light.',
    'missedDoseGuidance': 'Take with your next meal. Do not double the dose. Contact your doctor if you miss multiple doses.',
}

_GENERIC_INFO = {
    'genericName': 'Information not available',
    'drugClass': 'Consult your pharmacist',
    'commonUses': ['Consult your healthcare provider for specific information about this medication'],
    'howItWorks': ('Please consult your pharmacist or healthcare provider for detailed information about how this '
                   'medication works.'),
    'commonSideEffects': ['Side effects vary by medication', 'Consult your pharmacist for specific information'],
    'seriousSideEffects': ['Seek medical attention for any severe or unusual symptoms'],
    'precautions': ["Follow your doctor's instructions", 'Read the medication guide provided with your prescription'],
    'foodInteractions': ['Consult your pharmacist about food interactions'],
    'storageInstructions': 'Store as directed on the medication label.',
    'missedDoseGuidance': 'Follow the guidance provided with your medication or consult your pharmacist.',
}

_SUGGESTIONS = {
    'bestTimeToTake': ('Take at the same time each day for best results. Morning doses with breakfast are often '
                       'recommended unless your doctor specifies otherwise.'),
    'withFood': ('Take with food or a full glass of water to minimize stomach upset, unless your medication label '
                 'indicates otherwise.'),
    'tips': [
        'Set a daily alarm to help remember your dose',
        'Keep your medication in a visible place as a reminder',
        'Use a pill organizer to track daily doses',
        'Keep a medication diary to track any side effects',
    ],
    'warnings': [
        'Do not stop taking this medication without consulting your doctor',
        'Inform all healthcare providers about all medications you take',
        'Store away from children and pets',
        'Check expiration dates regularly',
    ],
    'reminders': [
        'Refill your prescription before running out',
        'Keep a list of all your medications in your wallet',
        'Bring all medications to doctor appointments',
        'Report any unusual side effects to your healthcare provider',
    ],
}

_QA_ANSWERS = (
    (('side effect', ),
     'Side effects vary depending on the specific medication. Common side effects to watch for include nausea, '
     'dizziness, headache, and stomach upset. If you experience severe side effects like difficulty breathing, '
     'severe rash, or unusual bleeding, seek medical attention immediately. Always read the medication guide that '
     'comes with your prescription and discuss any concerns with your pharmacist or doctor.'),
    (('miss', 'forgot'),
     "If you miss a dose, the general guideline is to take it as soon as you remember. However, if it's almost time "
     'for your next scheduled dose, skip the missed dose and continue with your regular schedule. Never take a '
     'double dose to make up for a missed one. For specific medications, especially those with narrow dosing '
     'windows (like some heart medications or antibiotics), consult your pharmacist or doctor for guidance.'),
    (('food', 'eat'),
     'Whether to take medication with food depends on the specific medication. Some medications work better on an '
     'empty stomach, while others should be taken with food to reduce stomach upset or improve absorption. Check '
     'your medication label or consult your pharmacist. As a general rule, drinking a full glass of water with your '
     'medication is usually recommended.'),
    (('alcohol', ),
     'Alcohol can interact with many medications, potentially causing dangerous side effects or reducing medication '
     "effectiveness. It's generally advisable to limit or avoid alcohol while taking prescription medications. "
     'Specific interactions include increased drowsiness with sedatives, increased bleeding risk with blood '
     'thinners, and liver damage risk with certain medications. Always check with your pharmacist or doctor about '
     'alcohol interactions with your specific medications.'),
)

_QA_DEFAULT = ('Thank you for your question. For the most accurate and personalized medical advice, I recommend '
               'consulting with your healthcare provider or pharmacist. They can provide guidance specific to your '
               'health conditions and medications. If you have an urgent medical concern, please contact your '
               'doctor or visit a healthcare facility.\n\nIs there anything else I can help you with regarding '
               'general medication information?')


def _detect_drugs(prompt: str) -> Dict[str, bool]:
    lowered = prompt.lower()
    return {drug: drug in lowered for drug in KNOWN_DRUGS}


def mock_interaction_response(prompt: str) -> str:
    found = _detect_drugs(prompt)
    interactions: List[Dict] = []

    if found['aspirin'] and found['ibuprofen']:
        interactions.append({
            'medications': ['Aspirin', 'Ibuprofen'],
            'severity': 'moderate',
            'description': ('Both medications are NSAIDs and taking them together may increase the risk of '
                            'gastrointestinal bleeding and reduce the cardioprotective effect of aspirin.'),
            'recommendation': ('Avoid taking both medications at the same time. If you need both, consult your '
                               'doctor about proper spacing. Consider using acetaminophen as an alternative pain '
                               'reliever.'),
        })

    if found['warfarin'] and (found['aspirin'] or found['ibuprofen']):
        interactions.append({
            'medications': ['Warfarin', 'Aspirin' if found['aspirin'] else 'Ibuprofen'],
            'severity': 'severe',
            'description': ('Combining blood thinners with NSAIDs significantly increases the risk of serious '
                            'bleeding, including internal bleeding.'),
            'recommendation': ('This combination should be avoided unless specifically prescribed by your doctor. '
                               'Seek immediate medical attention if you experience unusual bleeding, bruising, or '
                               'dark stools.'),
        })

    if found['lisinopril'] and found['ibuprofen']:
        interactions.append({
            'medications': ['Lisinopril', 'Ibuprofen'],
            'severity': 'moderate',
            'description': ('NSAIDs like ibuprofen may reduce the blood pressure-lowering effect of ACE inhibitors '
                            'like lisinopril and may increase the risk of kidney problems.'),
            'recommendation': ('Monitor your blood pressure regularly. Consider using acetaminophen instead of '
                               'ibuprofen for pain relief. Stay well hydrated.'),
        })

    if found['metformin'] and found['ibuprofen']:
        interactions.append({
            'medications': ['Metformin', 'Ibuprofen'],
            'severity': 'mild',
            'description': ('Occasional use of ibuprofen with metformin is generally safe, but regular use may affect '
                            'kidney function, which is important for metformin clearance.'),
            'recommendation': ('Occasional use is typically fine. For chronic pain management, discuss alternatives '
                               'with your healthcare provider.'),
        })

    if interactions:
        summary = (f'Found {len(interactions)} potential interaction(s) between your medications. Please review the '
                   'details and consult your healthcare provider if you have concerns.')
    else:
        summary = ('No significant drug interactions were detected between your current medications. Continue taking '
                   'them as prescribed.')

    return json.dumps({
        'hasInteractions': len(interactions) > 0,
        'interactions': interactions or [{
            'medications': ['All checked medications'],
            'severity': 'none',
            'description': "No significant interactions were found between the medications you're taking.",
            'recommendation': ('Continue taking your medications as prescribed. Always inform your healthcare '
                               'provider about all medications you take.'),
        }],
        'summary': summary,
    })


def mock_medication_info(prompt: str) -> str:
    found = _detect_drugs(prompt)
    if found['aspirin']:
        return json.dumps(_ASPIRIN_INFO)
    if found['metformin']:
        return json.dumps(_METFORMIN_INFO)
    return json.dumps(_GENERIC_INFO)


def mock_suggestions(prompt: str) -> str:
    return json.dumps(_SUGGESTIONS)


def _question_text(prompt: str) -> str:
    # Question block only: the instructions contain "treatment", which matches "eat"
    start = prompt.find(QUESTION_MARKER)
    if start == -1:
        return prompt
    question = prompt[start + len(QUESTION_MARKER):]
    end = question.find('\n\n')
    return question if end == -1 else question[:end]


def mock_answer(prompt: str) -> str:
    lowered = _question_text(prompt).lower()
    for keywords, answer in _QA_ANSWERS:
        if any(keyword in lowered for keyword in keywords):
            return answer
    return _QA_DEFAULT


class MockLLM(ResponseGenerator):
    """Canned responses selected by prompt content, after a simulated delay."""

    name = 'mock'

    def __init__(self, config: MockLLMConfig):
        self.config = config
        logger.info(f'Initialized mock generator (delay: {config.delay}s)')

    def generate(self, prompt: str) -> str:
        if self.config.delay > 0:
            time.sleep(self.config.delay)

        if 'drug interactions' in prompt or 'Analyze the following medications' in prompt:
            return mock_interaction_response(prompt)
        if 'detailed information about' in prompt:
            return mock_medication_info(prompt)
        if 'suggestions for taking' in prompt:
            return mock_suggestions(prompt)
        return mock_answer(prompt)

    def health_check(self) -> bool:
        return True
