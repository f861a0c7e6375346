from typing import Dict, Optional

from aidoc.application.ports import StoragePort


class InMemoryStorage(StoragePort):
    def __init__(self, items: Dict[str, str] | None = None):
        self.items: Dict[str, str] = dict(items or {})

    def get(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove(self, key: str) -> None:
        self.items.pop(key, None)
