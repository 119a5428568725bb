"""
Core data models for medications, interaction checks, AI lookups and chat.

Persisted and generated JSON uses camelCase keys; the dataclasses use
snake_case attributes and convert at the `to_dict`/`from_dict` boundary.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils.timestamp_utils import generate_id, now_iso


class ValidationError(ValueError):
    """Raised when caller-supplied domain data is invalid."""
    pass


# Storage keys, one per persisted collection
STORAGE_KEYS = {
    'USER_PROFILE': '@medicaffe_user_profile',
    'MEDICATIONS': '@medicaffe_medications',
    'INTERACTIONS_HISTORY': '@medicaffe_interactions_history',
    'AI_CHAT_HISTORY': '@medicaffe_ai_chat_history',
    'ONBOARDING_COMPLETE': '@medicaffe_onboarding_complete',
    'APP_SETTINGS': '@medicaffe_settings',
}

MEDICATION_FORMS = ('tablet', 'capsule', 'liquid', 'injection', 'cream', 'inhaler', 'drops', 'patch', 'other')

FREQUENCY_OPTIONS = ('once_daily', 'twice_daily', 'three_times_daily', 'four_times_daily', 'every_4_hours',
                     'every_6_hours', 'every_8_hours', 'every_12_hours', 'once_weekly', 'as_needed')

TIMING_OPTIONS = ('morning', 'afternoon', 'evening', 'bedtime', 'with_breakfast', 'with_lunch', 'with_dinner',
                  'before_meals', 'after_meals', 'empty_stomach')

MEDICATION_CATEGORIES = ('pain_relief', 'cardiovascular', 'diabetes', 'antibiotics', 'allergies', 'digestive',
                         'mental_health', 'vitamins', 'respiratory', 'skin', 'hormones', 'other')

SEVERITY_NONE = 'none'
SEVERITY_MILD = 'mild'
SEVERITY_MODERATE = 'moderate'
SEVERITY_SEVERE = 'severe'
SEVERITY_LEVELS = (SEVERITY_NONE, SEVERITY_MILD, SEVERITY_MODERATE, SEVERITY_SEVERE)

INTERACTION_SEVERITY = {
    SEVERITY_NONE: {
        'label': 'No Known Interaction',
        'description': 'These medications can typically be taken together safely.',
    },
    SEVERITY_MILD: {
        'label': 'Mild Interaction',
        'description': 'Minor interaction that usually does not require medical attention.',
    },
    SEVERITY_MODERATE: {
        'label': 'Moderate Interaction',
        'description': 'May require monitoring or dosage adjustment. Consult your healthcare provider.',
    },
    SEVERITY_SEVERE: {
        'label': 'Severe Interaction',
        'description': 'Potentially dangerous combination. Consult your healthcare provider immediately.',
    },
}

CHAT_ROLES = ('user', 'assistant', 'error')

THEME_LIGHT = 'light'
THEME_DARK = 'dark'
THEME_SYSTEM = 'system'
THEME_MODES = (THEME_LIGHT, THEME_DARK, THEME_SYSTEM)

NOT_ENOUGH_MEDICATIONS_SUMMARY = 'At least two medications are needed to check for interactions.'


def _as_str(value: Any, default: str = '') -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _as_str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value] if value else []
    if not isinstance(value, (list, tuple)):
        return []
    return [_as_str(item) for item in value if item is not None]


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == '':
        return None
    return _as_str(value)


def _check_choice(name: str, value: Optional[str], choices: tuple, allow_none: bool = False) -> None:
    if value is None and allow_none:
        return
    if value not in choices:
        raise ValidationError(f'Invalid {name} {value!r}; expected one of: {", ".join(choices)}')


@dataclass
class Medication:
    """A medication tracked by the user."""
    name: str
    dosage: str
    unit: str
    form: str = 'tablet'
    frequency: str = 'once_daily'
    timing: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    prescribed_by: Optional[str] = None
    is_active: bool = True
    id: str = field(default_factory=generate_id)
    created_at: str = field(default_factory=now_iso)
    updated_at: Optional[str] = None

    def __post_init__(self):
        self.name = _as_str(self.name).strip()
        if not self.name:
            raise ValidationError('Medication name is required')
        self.dosage = _as_str(self.dosage).strip()
        self.unit = _as_str(self.unit).strip()
        _check_choice('form', self.form, MEDICATION_FORMS)
        _check_choice('frequency', self.frequency, FREQUENCY_OPTIONS)
        _check_choice('timing', self.timing, TIMING_OPTIONS, allow_none=True)
        _check_choice('category', self.category, MEDICATION_CATEGORIES, allow_none=True)

    @property
    def label(self) -> str:
        """Display form used in prompts, e.g. `Aspirin (81 mg)`."""
        return f'{self.name} ({self.dosage} {self.unit})'

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'dosage': self.dosage,
            'unit': self.unit,
            'form': self.form,
            'frequency': self.frequency,
            'timing': self.timing,
            'category': self.category,
            'notes': self.notes,
            'prescribedBy': self.prescribed_by,
            'isActive': self.is_active,
            'createdAt': self.created_at,
        }
        if self.updated_at is not None:
            data['updatedAt'] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Medication':
        """Build a Medication from camelCase data; missing id/createdAt are generated."""
        kwargs = dict(name=data.get('name'),
                      dosage=_as_str(data.get('dosage')),
                      unit=_as_str(data.get('unit')),
                      form=data.get('form') or 'tablet',
                      frequency=data.get('frequency') or 'once_daily',
                      timing=_optional_str(data.get('timing')),
                      category=_optional_str(data.get('category')),
                      notes=_optional_str(data.get('notes')),
                      prescribed_by=_optional_str(data.get('prescribedBy')),
                      is_active=data.get('isActive') is not False,
                      updated_at=data.get('updatedAt'))
        if data.get('id'):
            kwargs['id'] = _as_str(data['id'])
        if data.get('createdAt'):
            kwargs['created_at'] = data['createdAt']
        return cls(**kwargs)


@dataclass
class InteractionRecord:
    """A single potential interaction between two or more medications."""
    medications: List[str]
    severity: str
    description: str = ''
    recommendation: str = ''

    @property
    def is_reportable(self) -> bool:
        return self.severity != SEVERITY_NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'medications': list(self.medications),
            'severity': self.severity,
            'description': self.description,
            'recommendation': self.recommendation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InteractionRecord':
        severity = _as_str(data.get('severity'), SEVERITY_MODERATE).strip().lower()
        if severity not in SEVERITY_LEVELS:
            # Unknown levels are shown as moderate
            severity = SEVERITY_MODERATE
        return cls(medications=_as_str_list(data.get('medications')),
                   severity=severity,
                   description=_as_str(data.get('description')),
                   recommendation=_as_str(data.get('recommendation')))


@dataclass
class InteractionCheckResult:
    """Outcome of an interaction check, as stored in history.

    `has_interactions` is the generator-supplied flag and is never re-derived.
    Display code should use `shows_warning`, which ignores `none` placeholder
    records such as the one returned when nothing was found.
    """
    has_interactions: bool
    interactions: List[InteractionRecord] = field(default_factory=list)
    summary: str = ''
    checked_at: Optional[str] = None
    medications_checked: List[str] = field(default_factory=list)
    id: Optional[str] = None

    @property
    def reportable_interactions(self) -> List[InteractionRecord]:
        return [record for record in self.interactions if record.is_reportable]

    @property
    def shows_warning(self) -> bool:
        return len(self.reportable_interactions) > 0

    @property
    def highest_severity(self) -> str:
        levels = [SEVERITY_LEVELS.index(record.severity) for record in self.interactions]
        return SEVERITY_LEVELS[max(levels)] if levels else SEVERITY_NONE

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'hasInteractions': self.has_interactions,
            'interactions': [record.to_dict() for record in self.interactions],
            'summary': self.summary,
            'checkedAt': self.checked_at,
            'medicationsChecked': list(self.medications_checked),
        }
        if self.id is not None:
            data['id'] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InteractionCheckResult':
        """Coerce an untrusted payload into a result, filling defaults for missing fields."""
        raw_interactions = data.get('interactions')
        if not isinstance(raw_interactions, list):
            raw_interactions = []
        interactions = [InteractionRecord.from_dict(item) for item in raw_interactions if isinstance(item, dict)]
        return cls(has_interactions=data.get('hasInteractions') is True,
                   interactions=interactions,
                   summary=_as_str(data.get('summary')),
                   checked_at=data.get('checkedAt'),
                   medications_checked=_as_str_list(data.get('medicationsChecked')),
                   id=_optional_str(data.get('id')))

    @classmethod
    def not_enough_medications(cls) -> 'InteractionCheckResult':
        return cls(has_interactions=False, interactions=[], summary=NOT_ENOUGH_MEDICATIONS_SUMMARY)


@dataclass
class MedicationInfo:
    """Reference information about a single medication."""
    generic_name: str = ''
    drug_class: str = ''
    common_uses: List[str] = field(default_factory=list)
    how_it_works: str = ''
    common_side_effects: List[str] = field(default_factory=list)
    serious_side_effects: List[str] = field(default_factory=list)
    precautions: List[str] = field(default_factory=list)
    food_interactions: List[str] = field(default_factory=list)
    storage_instructions: str = ''
    missed_dose_guidance: str = ''
    raw_info: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'genericName': self.generic_name,
            'drugClass': self.drug_class,
            'commonUses': list(self.common_uses),
            'howItWorks': self.how_it_works,
            'commonSideEffects': list(self.common_side_effects),
            'seriousSideEffects': list(self.serious_side_effects),
            'precautions': list(self.precautions),
            'foodInteractions': list(self.food_interactions),
            'storageInstructions': self.storage_instructions,
            'missedDoseGuidance': self.missed_dose_guidance,
        }
        if self.raw_info is not None:
            data['rawInfo'] = self.raw_info
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MedicationInfo':
        return cls(generic_name=_as_str(data.get('genericName')),
                   drug_class=_as_str(data.get('drugClass')),
                   common_uses=_as_str_list(data.get('commonUses')),
                   how_it_works=_as_str(data.get('howItWorks')),
                   common_side_effects=_as_str_list(data.get('commonSideEffects')),
                   serious_side_effects=_as_str_list(data.get('seriousSideEffects')),
                   precautions=_as_str_list(data.get('precautions')),
                   food_interactions=_as_str_list(data.get('foodInteractions')),
                   storage_instructions=_as_str(data.get('storageInstructions')),
                   missed_dose_guidance=_as_str(data.get('missedDoseGuidance')),
                   raw_info=_optional_str(data.get('rawInfo')))


@dataclass
class MedicationSuggestions:
    """Timing and best-practice suggestions for taking a medication."""
    best_time_to_take: str = ''
    with_food: str = ''
    tips: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    reminders: List[str] = field(default_factory=list)
    raw_suggestions: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'bestTimeToTake': self.best_time_to_take,
            'withFood': self.with_food,
            'tips': list(self.tips),
            'warnings': list(self.warnings),
            'reminders': list(self.reminders),
        }
        if self.raw_suggestions is not None:
            data['rawSuggestions'] = self.raw_suggestions
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MedicationSuggestions':
        return cls(best_time_to_take=_as_str(data.get('bestTimeToTake')),
                   with_food=_as_str(data.get('withFood')),
                   tips=_as_str_list(data.get('tips')),
                   warnings=_as_str_list(data.get('warnings')),
                   reminders=_as_str_list(data.get('reminders')),
                   raw_suggestions=_optional_str(data.get('rawSuggestions')))


@dataclass
class ChatMessage:
    """One turn of the assistant conversation."""
    role: str
    content: str
    id: str = field(default_factory=generate_id)
    timestamp: str = field(default_factory=now_iso)

    def __post_init__(self):
        _check_choice('role', self.role, CHAT_ROLES)

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'role': self.role, 'content': self.content, 'timestamp': self.timestamp}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChatMessage':
        kwargs = dict(role=data.get('role'), content=_as_str(data.get('content')))
        if data.get('id'):
            kwargs['id'] = _as_str(data['id'])
        if data.get('timestamp'):
            kwargs['timestamp'] = data['timestamp']
        return cls(**kwargs)


@dataclass
class UserProfile:
    """The single user profile. Unknown keys are kept in `extra`."""
    name: str = ''
    age: Optional[int] = None
    allergies: List[str] = field(default_factory=list)
    conditions: List[str] = field(default_factory=list)
    updated_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KNOWN = ('name', 'age', 'allergies', 'conditions', 'updatedAt')

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({'name': self.name, 'age': self.age, 'allergies': list(self.allergies),
                     'conditions': list(self.conditions)})
        if self.updated_at is not None:
            data['updatedAt'] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserProfile':
        age = data.get('age')
        try:
            age = int(age) if age not in (None, '') else None
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid age {age!r}')
        return cls(name=_as_str(data.get('name')),
                   age=age,
                   allergies=_as_str_list(data.get('allergies')),
                   conditions=_as_str_list(data.get('conditions')),
                   updated_at=data.get('updatedAt'),
                   extra={k: v for k, v in data.items() if k not in cls._KNOWN})


@dataclass
class AppSettings:
    """Application settings. Unknown keys are kept in `extra`."""
    notifications: bool = True
    theme_mode: str = THEME_SYSTEM
    font_size: str = 'medium'
    haptic_feedback: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)

    _FIELDS = {
        'notifications': 'notifications',
        'themeMode': 'theme_mode',
        'fontSize': 'font_size',
        'hapticFeedback': 'haptic_feedback',
    }

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({key: getattr(self, attr) for key, attr in self._FIELDS.items()})
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppSettings':
        settings = cls(extra={k: v for k, v in data.items() if k not in cls._FIELDS})
        for key, attr in cls._FIELDS.items():
            if key in data and data[key] is not None:
                setattr(settings, attr, data[key])
        if settings.theme_mode not in THEME_MODES:
            settings.theme_mode = THEME_SYSTEM
        return settings
