import json
import logging
import os
import threading
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    String key/value store persisted as a single JSON file.

    Mirrors the browser's localStorage: values are stored as strings and a
    missing key reads as None. With no path the store lives in memory only.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._lock = threading.Lock()
        self._items: Dict[str, str] = {}
        if path and os.path.exists(path):
            try:
                with open(path, "r", encoding="utf-8") as fh:
                    loaded = json.load(fh)
                self._items = {str(k): str(v) for k, v in loaded.items()}
            except (OSError, ValueError, AttributeError) as e:
                logger.warning(f"Discarding unreadable storage file {path}: {e}")
                self._items = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value
            self._flush()

    def remove_item(self, key: str) -> None:
        with self._lock:
            if self._items.pop(key, None) is not None:
                self._flush()

    def clear(self) -> None:
        with self._lock:
            self._items = {}
            self._flush()

    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Stored value for {key} is not valid JSON, ignoring it")
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value))

    def _flush(self) -> None:
        if not self.path:
            return
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(self._items, fh)
        os.replace(tmp, self.path)
