from typing import Optional, Protocol

from aidoc.domain.models import DiagnosisResult


class LLMPort(Protocol):
    def generate_json(self, prompt: str, schema: dict) -> str:
        """
        Sends one prompt with a declared output schema and returns the raw JSON text.
        """
        ...


class StoragePort(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class DiagnosisPort(Protocol):
    async def diagnose(self, symptoms: str) -> DiagnosisResult:
        ...
