import logging

from aidoc.application.ports import StoragePort
from aidoc.domain.errors import StorageUnavailable
from aidoc.domain.rules import DISCLAIMER_KEY


logger = logging.getLogger(__name__)


class DisclaimerGate:
    """One-time, per-device acceptance of the safety notice."""

    def __init__(self, storage: StoragePort, key: str = DISCLAIMER_KEY):
        self.storage = storage
        self.key = key
        self.accepted = False
        self.visible = True

    def load(self) -> bool:
        try:
            self.accepted = self.storage.get(self.key) == "true"
        except StorageUnavailable as e:
            logger.warning("Disclaimer flag could not be read: %s", e)
            self.accepted = False
        self.visible = not self.accepted
        return self.accepted

    def accept(self) -> None:
        self.accepted = True
        self.visible = False
        try:
            self.storage.set(self.key, "true")
        except StorageUnavailable as e:
            logger.warning("Disclaimer flag could not be saved: %s", e)

    def dismiss(self) -> bool:
        # Closing without accepting is not allowed
        if not self.accepted:
            return False
        self.visible = False
        return True

    def reopen(self) -> None:
        self.visible = True
