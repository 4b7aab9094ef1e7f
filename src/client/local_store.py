"""
Local key-value store shared by every tab of one client profile.

Values are kept JSON-encoded, the way a browser's localStorage would hold
them, and every write wakes all subscribers with the changed key.
"""

import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[str, Optional[Any]], None]


class LocalStore:
    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.RLock()
        self._subscribers: List[ChangeHandler] = []

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            raw = self._data.get(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        with self._lock:
            self._data[key] = encoded
        self._notify(key, value)

    def remove(self, key: str) -> None:
        with self._lock:
            existed = self._data.pop(key, None) is not None
        if existed:
            self._notify(key, None)

    def subscribe(self, handler: ChangeHandler) -> Callable[[], None]:
        """Register a change handler; returns a callable that unsubscribes it."""
        with self._lock:
            self._subscribers.append(handler)
        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: ChangeHandler) -> None:
        with self._lock:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

    def _notify(self, key: str, value: Optional[Any]) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for handler in subscribers:
            try:
                handler(key, value)
            except Exception:
                # One broken tab must not keep the others from hearing the change
                logger.exception("Local store subscriber failed for key %s", key)
