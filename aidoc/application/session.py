import logging
import time
import uuid
from enum import Enum
from typing import Callable, Optional

from aidoc.application.disclaimer import DisclaimerGate
from aidoc.application.history import HistoryStore
from aidoc.application.ports import DiagnosisPort
from aidoc.application.schemas import ViewState
from aidoc.domain.errors import DiagnosisUnavailable, InvalidInput
from aidoc.domain.models import DiagnosisResult, SymptomEntry
from aidoc.domain.rules import validate_symptoms


logger = logging.getLogger(__name__)


ANALYSIS_ERROR_MESSAGE = "An error occurred during analysis. Please try again."


class SessionStage(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())


class SessionController:
    """Owns the single in-flight diagnosis and what the view should show."""

    def __init__(
        self,
        client: DiagnosisPort,
        history: HistoryStore,
        disclaimer: DisclaimerGate,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.client = client
        self.history = history
        self.disclaimer = disclaimer
        self.clock = clock
        self.id_factory = id_factory
        self.stage = SessionStage.IDLE
        self.result: Optional[DiagnosisResult] = None
        self.symptoms = ""
        self.notification: Optional[str] = None

    def start(self) -> None:
        """Read persisted history and the disclaimer flag."""
        self.history.load()
        self.disclaimer.load()

    @property
    def is_loading(self) -> bool:
        return self.stage is SessionStage.LOADING

    def set_symptoms(self, text: str) -> None:
        self.symptoms = text

    async def submit(self, symptoms: str) -> Optional[DiagnosisResult]:
        """
        Run one diagnosis for the given text.

        Returns:
            The new result, or None if the submission was rejected or failed
        """
        if self.is_loading:
            logger.warning("Submission ignored: a diagnosis is already in flight")
            return None
        try:
            validate_symptoms(symptoms)
        except InvalidInput as e:
            logger.info("Submission rejected: %s", e)
            return None

        self.symptoms = symptoms
        self.notification = None
        self.stage = SessionStage.LOADING

        try:
            result = await self.client.diagnose(symptoms)
        except DiagnosisUnavailable as e:
            logger.error("Diagnosis failed: %s", e)
            self._restore_after_failure()
            return None
        except Exception as e:
            logger.exception("Unexpected error during diagnosis: %s", e)
            self._restore_after_failure()
            return None

        self.result = result
        self.stage = SessionStage.READY
        entry = SymptomEntry(
            id=self.id_factory(),
            timestamp=self.clock(),
            symptoms=symptoms,
            result=result.model_copy(deep=True),
        )
        self.history.prepend(entry)
        return result

    def _restore_after_failure(self) -> None:
        self.notification = ANALYSIS_ERROR_MESSAGE
        # back to whatever was displayed before the call
        self.stage = SessionStage.READY if self.result is not None else SessionStage.IDLE

    def select_from_history(self, entry_id: str) -> bool:
        entry = self.history.find(entry_id)
        if entry is None:
            logger.debug("History entry %s not found", entry_id)
            return False
        self.result = entry.result
        if not self.is_loading:
            self.stage = SessionStage.READY
        return True

    def clear_history(self) -> None:
        self.history.clear()

    def dismiss_notification(self) -> None:
        self.notification = None

    def accept_disclaimer(self) -> None:
        self.disclaimer.accept()

    def dismiss_disclaimer(self) -> bool:
        return self.disclaimer.dismiss()

    def reopen_disclaimer(self) -> None:
        self.disclaimer.reopen()

    def view_state(self) -> ViewState:
        return ViewState(
            symptoms=self.symptoms,
            is_loading=self.is_loading,
            result=self.result,
            history=self.history.entries,
            show_disclaimer=self.disclaimer.visible,
            has_accepted_disclaimer=self.disclaimer.accepted,
            notification=self.notification,
        )
