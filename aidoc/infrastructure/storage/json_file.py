"""Device-local key-value storage kept in a single JSON file."""
import json
import logging
import os
from typing import Dict, Optional

from aidoc.application.ports import StoragePort
from aidoc.domain.errors import StorageUnavailable


logger = logging.getLogger(__name__)


class JsonFileStorage(StoragePort):
    """Maps string keys to string values, like a browser's localStorage."""

    def __init__(self, storage_path: str):
        """
        Args:
            storage_path: Path to the JSON file. Created on first use.
        """
        self.storage_path = storage_path
        self._ensure_storage_exists()

    def _ensure_storage_exists(self) -> None:
        """Create storage directory and file if they don't exist."""
        try:
            storage_dir = os.path.dirname(self.storage_path)
            if storage_dir and not os.path.exists(storage_dir):
                os.makedirs(storage_dir, exist_ok=True)

            if not os.path.exists(self.storage_path) or os.path.getsize(self.storage_path) == 0:
                self._save_items({})
        except OSError as e:
            raise StorageUnavailable(f"Cannot prepare {self.storage_path}: {e}") from e

    def _load_items(self) -> Dict[str, str]:
        try:
            with open(self.storage_path, 'r', encoding='utf-8') as f:
                items = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Storage file %s is missing or unreadable; treating it as empty", self.storage_path)
            return {}
        except OSError as e:
            raise StorageUnavailable(f"Cannot read {self.storage_path}: {e}") from e
        if not isinstance(items, dict):
            logger.warning("Storage file %s does not hold an object; ignoring it", self.storage_path)
            return {}
        return items

    def _save_items(self, items: Dict[str, str]) -> None:
        try:
            with open(self.storage_path, 'w', encoding='utf-8') as f:
                json.dump(items, f, indent=2)
        except OSError as e:
            raise StorageUnavailable(f"Cannot write {self.storage_path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        value = self._load_items().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        items = self._load_items()
        items[key] = value
        self._save_items(items)

    def remove(self, key: str) -> None:
        items = self._load_items()
        if key in items:
            del items[key]
            self._save_items(items)
