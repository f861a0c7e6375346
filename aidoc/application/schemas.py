from typing import List, Optional

from pydantic import BaseModel

from aidoc.domain.models import DiagnosisResult, Likelihood, Severity, SymptomEntry


def _enum_values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


# Structured-output contract declared to the model. Type names follow the
# OpenAPI subset accepted by Gemini; Mistral receives it as instructions.
DIAGNOSIS_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "potentialConditions": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "likelihood": {"type": "STRING", "format": "enum", "enum": _enum_values(Likelihood)},
                    "description": {"type": "STRING"},
                    "commonSymptoms": {"type": "ARRAY", "items": {"type": "STRING"}},
                },
                "required": ["name", "likelihood", "description", "commonSymptoms"],
            },
        },
        "severity": {"type": "STRING", "format": "enum", "enum": _enum_values(Severity)},
        "recommendation": {"type": "STRING"},
        "nextSteps": {"type": "ARRAY", "items": {"type": "STRING"}},
        "disclaimer": {"type": "STRING"},
    },
    "required": ["potentialConditions", "severity", "recommendation", "disclaimer"],
}


class ViewState(BaseModel):
    symptoms: str = ""
    is_loading: bool = False
    result: Optional[DiagnosisResult] = None
    history: List[SymptomEntry] = []
    show_disclaimer: bool = True
    has_accepted_disclaimer: bool = False
    notification: Optional[str] = None
