"""
Notification Service Module

An in-process publish/subscribe bus used to republish region query events
("addPost", "removePost") to whoever is presenting the map.
"""

import itertools
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from utils.logger import get_logger

logger = get_logger(__name__)

ADD_POST = "addPost"
REMOVE_POST = "removePost"

Observer = Callable[[str, Dict[str, Any]], None]

class NotificationCenter:
    """Dispatches named notifications with a user_info payload to observers."""

    def __init__(self):
        self._observers: Dict[int, Tuple[str, Observer]] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()

    def add_observer(self, name: str, callback: Observer) -> int:
        """
        Subscribe to a notification name.

        Args:
            name: Notification name, e.g. ADD_POST.
            callback: Called as callback(name, user_info).

        Returns:
            int: A token for remove_observer().
        """
        with self._lock:
            token = next(self._tokens)
            self._observers[token] = (name, callback)
        return token

    def remove_observer(self, token: int) -> None:
        with self._lock:
            self._observers.pop(token, None)

    def observer_count(self, name: Optional[str] = None) -> int:
        with self._lock:
            if name is None:
                return len(self._observers)
            return sum(1 for n, _ in self._observers.values() if n == name)

    def post(self, name: str, user_info: Optional[Dict[str, Any]] = None) -> int:
        """
        Deliver a notification to every observer of its name.

        An observer that raises is logged and skipped.

        Returns:
            int: Number of observers that received the notification.
        """
        user_info = user_info or {}
        with self._lock:
            targets = [cb for n, cb in self._observers.values() if n == name]

        delivered = 0
        for callback in targets:
            try:
                callback(name, user_info)
                delivered += 1
            except Exception as e:
                logger.error(f"Observer for '{name}' failed: {e}", exc_info=True)
        return delivered

# Create a default notification center for use throughout the application
notification_center = NotificationCenter()
