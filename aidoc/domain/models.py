from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EMERGENCY = "Emergency"


class Likelihood(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"


class _Frozen(BaseModel):
    # camelCase on the wire, snake_case in Python; both accepted on input
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Condition(_Frozen):
    name: str
    likelihood: Likelihood
    description: str
    common_symptoms: List[str] = Field(..., alias="commonSymptoms")


class DiagnosisResult(_Frozen):
    potential_conditions: List[Condition] = Field(..., alias="potentialConditions")
    severity: Severity
    recommendation: str
    next_steps: List[str] = Field(default_factory=list, alias="nextSteps")
    disclaimer: str

    @field_validator("next_steps", mode="before")
    @classmethod
    def default_next_steps(cls, v):
        # older responses and history written before nextSteps existed
        return [] if v is None else v


class SymptomEntry(_Frozen):
    id: str
    timestamp: int = Field(..., description="Milliseconds since epoch")
    symptoms: str
    result: DiagnosisResult
