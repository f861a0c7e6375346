import logging

from aidoc.application.diagnosis import SYSTEM_PROMPT, build_schema_instructions
from aidoc.application.ports import LLMPort
from aidoc.infrastructure.config import Settings


logger = logging.getLogger(__name__)


class MistralLLMAdapter(LLMPort):
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()
        self._client = None
        self._model = self.settings.mistral_model
        self._init_client()

    def _init_client(self):
        api_key = self.settings.mistral_api_key
        if not api_key:
            logger.error("Mistral API key is missing.")
            self._client = None
            return
        try:
            from mistralai import Mistral
            self._client = Mistral(api_key=api_key, timeout_ms=int(self.settings.request_timeout * 1000))
        except Exception as e:
            logger.exception("Failed to initialize Mistral client: %s", e)
            self._client = None

    def generate_json(self, prompt: str, schema: dict) -> str:
        # Mistral's JSON mode takes no schema; the shape goes in as instructions
        if not self._client:
            raise RuntimeError("Mistral client not initialized (missing API key or import error)")
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_schema_instructions()},
            {"role": "user", "content": prompt},
        ]
        try:
            response = self._client.chat.complete(
                model=self._model,
                messages=messages,
                response_format={"type": "json_object"},
            )
            return response.choices[0].message.content
        except Exception as e:
            logger.exception("Mistral chat call failed: %s", e)
            raise
