import logging

from aidoc.application.ports import LLMPort
from aidoc.infrastructure.config import Settings


logger = logging.getLogger(__name__)


class GeminiLLMAdapter(LLMPort):
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()
        self._client = None
        self._model = self.settings.gemini_model
        self._timeout = self.settings.request_timeout
        self._init_client()

    def _init_client(self):
        api_key = self.settings.gemini_api_key
        if not api_key:
            logger.error("Gemini API key is missing.")
            self._client = None
            return
        try:
            import google.generativeai as genai
            genai.configure(api_key=api_key)
            self._client = genai.GenerativeModel(self._model)
        except Exception as e:
            logger.exception("Failed to initialize Gemini client: %s", e)
            self._client = None

    def generate_json(self, prompt: str, schema: dict) -> str:
        if not self._client:
            raise RuntimeError("Gemini client not initialized (missing API key or import error)")
        try:
            response = self._client.generate_content(
                prompt,
                generation_config={
                    "response_mime_type": "application/json",
                    "response_schema": schema,
                },
                request_options={"timeout": self._timeout},
            )
        except Exception as e:
            logger.exception("Gemini generate_content failed: %s", e)
            raise
        text = getattr(response, "text", None)
        if not text:
            raise RuntimeError("Gemini response did not contain text content.")
        return text
