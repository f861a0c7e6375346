import asyncio
import json
import logging

from pydantic import ValidationError

from aidoc.application.ports import LLMPort
from aidoc.application.schemas import DIAGNOSIS_RESPONSE_SCHEMA
from aidoc.domain.errors import DiagnosisUnavailable
from aidoc.domain.models import DiagnosisResult


logger = logging.getLogger(__name__)


ANALYSIS_FAILED = "Failed to analyze symptoms. Please try again."

SYSTEM_PROMPT = (
    "You are a careful virtual health assistant. You are an AI, not a doctor. "
    "Your response must be structured, cautious, and include a strong disclaimer. "
    "Focus on common possibilities but always prioritize safety and professional consultation. "
    "Return a strict JSON object matching the schema provided."
)


def build_diagnosis_prompt(symptoms: str) -> str:
    return (
        "Analyze the following symptoms and provide potential diagnosis guidance.\n"
        f"SYMPTOMS: {symptoms}\n\n"
        "IMPORTANT: You are an AI, not a doctor. Your response must be structured, cautious, "
        "and include a strong disclaimer in the 'disclaimer' field. "
        "Use cautious phrasing in 'recommendation' and 'nextSteps' and never claim certainty. "
        "Focus on common possibilities but always prioritize safety and professional consultation."
    )


def build_schema_instructions() -> str:
    return (
        "You MUST return ONLY a valid JSON object. Do NOT include any markdown, code fences, or explanations. "
        "JSON keys: potentialConditions (array of objects), severity (one of 'Low', 'Medium', 'High', 'Emergency'), "
        "recommendation (string), nextSteps (array of strings), disclaimer (string).\n"
        "Each potential condition object MUST have: name (string), likelihood (one of 'Low', 'Moderate', 'High'), "
        "description (string), commonSymptoms (array of strings).\n"
        "Start your response with { and end with }. Return valid JSON only."
    )


def _extract_json_object(raw: str) -> str:
    raw = raw.strip()
    if not raw.startswith('{'):
        start_idx = raw.find('{')
        if start_idx != -1:
            raw = raw[start_idx:]
    if not raw.endswith('}'):
        end_idx = raw.rfind('}')
        if end_idx != -1:
            raw = raw[:end_idx+1]
    return raw


def parse_diagnosis(raw: str | None) -> DiagnosisResult:
    """Turn raw model text into a DiagnosisResult.

    Any text that is not a JSON object matching the result shape, including
    unknown severity or likelihood values, raises DiagnosisUnavailable.
    """
    if not raw or not raw.strip():
        raise DiagnosisUnavailable(ANALYSIS_FAILED)
    candidate = _extract_json_object(raw)
    try:
        data = json.loads(candidate)
        return DiagnosisResult.model_validate(data)
    except (json.JSONDecodeError, ValidationError, RecursionError) as e:
        logger.warning("Diagnosis JSON invalid: %s. Raw: %s", e, raw[:200])
        raise DiagnosisUnavailable(ANALYSIS_FAILED) from e


class DiagnosisClient:
    def __init__(self, llm: LLMPort, schema: dict | None = None):
        self.llm = llm
        self.schema = schema or DIAGNOSIS_RESPONSE_SCHEMA

    async def diagnose(self, symptoms: str) -> DiagnosisResult:
        prompt = build_diagnosis_prompt(symptoms)
        try:
            raw = await asyncio.to_thread(self.llm.generate_json, prompt, self.schema)
        except Exception as e:
            logger.error("Diagnosis request failed: %s", e)
            raise DiagnosisUnavailable(ANALYSIS_FAILED) from e
        return parse_diagnosis(raw)
