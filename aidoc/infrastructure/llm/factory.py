import logging

from aidoc.application.ports import LLMPort
from aidoc.infrastructure.config import Settings
from aidoc.infrastructure.llm.gemini_client import GeminiLLMAdapter
from aidoc.infrastructure.llm.mistral_client import MistralLLMAdapter


logger = logging.getLogger(__name__)


def create_llm_adapter(settings: Settings | None = None) -> LLMPort:
    settings = settings or Settings()
    provider = settings.llm_provider
    if provider == "mistral":
        return MistralLLMAdapter(settings=settings)
    if provider != "gemini":
        logger.warning("Unknown LLM_PROVIDER %r, falling back to gemini", provider)
    return GeminiLLMAdapter(settings=settings)
