"""Bounded, newest-first cache of past diagnoses in device-local storage."""
import json
import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from aidoc.application.ports import StoragePort
from aidoc.domain.errors import StorageUnavailable
from aidoc.domain.models import SymptomEntry
from aidoc.domain.rules import HISTORY_KEY, HISTORY_LIMIT, prepend_bounded


logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(List[SymptomEntry])


class HistoryStore:
    """Keeps at most ``limit`` entries, persisted as one JSON array."""

    def __init__(self, storage: StoragePort, key: str = HISTORY_KEY, limit: int = HISTORY_LIMIT):
        self.storage = storage
        self.key = key
        self.limit = limit
        self._entries: List[SymptomEntry] = []

    @property
    def entries(self) -> List[SymptomEntry]:
        return list(self._entries)

    def load(self) -> List[SymptomEntry]:
        """
        Read history from storage.

        Returns:
            Stored entries, or an empty list if nothing usable is persisted
        """
        try:
            raw = self.storage.get(self.key)
        except StorageUnavailable as e:
            logger.warning("History could not be read: %s", e)
            raw = None

        entries: List[SymptomEntry] = []
        if raw:
            try:
                entries = _ENTRIES.validate_python(json.loads(raw))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning("Discarding malformed history: %s", e)
                entries = []

        self._entries = entries[:self.limit]
        return self.entries

    def prepend(self, entry: SymptomEntry) -> List[SymptomEntry]:
        self._entries = prepend_bounded(self._entries, entry, self.limit)
        self._save()
        return self.entries

    def clear(self) -> None:
        self._entries = []
        try:
            self.storage.remove(self.key)
        except StorageUnavailable as e:
            logger.warning("History could not be removed: %s", e)

    def find(self, entry_id: str) -> Optional[SymptomEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def _save(self) -> None:
        payload = json.dumps([e.model_dump(mode="json", by_alias=True) for e in self._entries])
        try:
            self.storage.set(self.key, payload)
        except StorageUnavailable as e:
            logger.warning("History could not be saved: %s", e)
