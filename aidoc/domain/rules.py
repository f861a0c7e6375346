from typing import List

from .errors import InvalidInput
from .models import SymptomEntry


HISTORY_KEY = "aidoc_history"
DISCLAIMER_KEY = "aidoc_disclaimer_accepted"
HISTORY_LIMIT = 10


def validate_symptoms(symptoms: str | None) -> str:
    """Return the symptom text unchanged, or raise InvalidInput if it is blank.

    Trimming is only used for the emptiness check; the caller keeps sending and
    storing the original text.
    """
    if symptoms is None or not symptoms.strip():
        raise InvalidInput("Please describe your symptoms first.")
    return symptoms


def prepend_bounded(entries: List[SymptomEntry], entry: SymptomEntry, limit: int = HISTORY_LIMIT) -> List[SymptomEntry]:
    return [entry, *entries][:limit]
