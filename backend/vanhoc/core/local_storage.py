# vanhoc/core/local_storage.py
"""
Key/value store persisted as a single JSON file on the local machine.
Holds what the browser client kept in localStorage: the session user and any
user-entered GitHub configuration. Values are strings; callers serialize.
"""
import json
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    localStorage-like key/value store.

    With path=None the data lives in memory only (used by tests and by
    deployments that do not want anything written to disk).
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._items: dict[str, str] = {}
        self._loaded = False

    def _load(self) -> dict[str, str]:
        if self._loaded:
            return self._items
        self._loaded = True
        if self.path and os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    self._items = {str(k): str(v) for k, v in data.items()}
            except (json.JSONDecodeError, OSError) as e:
                logger.warning("[storage] Ignoring unreadable %s: %s", self.path, e)
        return self._items

    def _save(self) -> None:
        """Write all items to disk. On failure the in-memory values are kept and the error is logged."""
        if not self.path:
            return
        tmp_path = f"{self.path}.tmp"
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._items, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("[storage] Could not write %s: %s", self.path, e)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._save()

    def remove_item(self, key: str) -> None:
        if self._load().pop(key, None) is not None:
            self._save()

    def scoped(self, scope: str) -> "ScopedStorage":
        """View of this store whose keys are prefixed with `scope`."""
        return ScopedStorage(self, scope)


class ScopedStorage:
    """
    One client's slice of a shared LocalStorage.
    Keys are stored as "{scope}:{key}" in the parent store.
    """

    def __init__(self, parent: LocalStorage, scope: str):
        self.parent = parent
        self.scope = scope

    def _key(self, key: str) -> str:
        return f"{self.scope}:{key}"

    def get_item(self, key: str) -> Optional[str]:
        return self.parent.get_item(self._key(key))

    def set_item(self, key: str, value: str) -> None:
        self.parent.set_item(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self.parent.remove_item(self._key(key))
