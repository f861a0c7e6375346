import os
import logging
from pathlib import Path

try:
    import streamlit as st  # type: ignore
    _HAS_STREAMLIT = True
except Exception:
    _HAS_STREAMLIT = False

logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).parent.parent.parent


def get_secret(name: str, default: str | None = None) -> str | None:
    # Prefer Streamlit secrets if available
    if _HAS_STREAMLIT:
        try:
            if name in st.secrets:
                return str(st.secrets.get(name))
        except Exception:
            pass
    # Fallback to environment variables
    return os.environ.get(name, default)


class Settings:
    @property
    def llm_provider(self) -> str:
        return (get_secret("LLM_PROVIDER", "gemini") or "gemini").strip().lower()

    @property
    def gemini_api_key(self) -> str:
        # An empty key is allowed here; the client fails when it is first used
        return get_secret("GEMINI_API_KEY", "") or ""

    @property
    def gemini_model(self) -> str:
        return get_secret("GEMINI_MODEL", "gemini-2.5-pro") or "gemini-2.5-pro"

    @property
    def mistral_api_key(self) -> str:
        return get_secret("MISTRAL_API_KEY", "") or ""

    @property
    def mistral_model(self) -> str:
        return get_secret("MISTRAL_MODEL", "mistral-large-latest") or "mistral-large-latest"

    @property
    def request_timeout(self) -> float:
        raw = get_secret("LLM_TIMEOUT_SECONDS", "60")
        try:
            return float(raw)
        except (TypeError, ValueError):
            logger.warning("Invalid LLM_TIMEOUT_SECONDS %r, using 60", raw)
            return 60.0

    @property
    def storage_path(self) -> str:
        default = str(PROJECT_ROOT / ".streamlit" / "aidoc_storage.json")
        return get_secret("AIDOC_STORAGE_PATH", default) or default
