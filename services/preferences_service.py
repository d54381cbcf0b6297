"""
Preferences Service Module

A small local key-value store persisted as a JSON file. Pulse reads the
"hiddenPosts" dictionary from it to filter posts the user has hidden.
"""

import json
import os
from typing import Any, Dict, Optional

from config import settings
from utils.helpers import ensure_dir_exists
from utils.logger import get_logger

logger = get_logger(__name__)

class Preferences:
    """JSON-file backed user preferences."""

    def __init__(self, path: Optional[str] = None):
        self.path = str(path or settings.PREFERENCES_FILE)

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read preferences from {self.path}: {e}")
            return {}

    def _save(self, data: Dict[str, Any]) -> None:
        ensure_dir_exists(os.path.dirname(self.path))
        tmp_path = self.path + ".tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def dictionary(self, key: str) -> Optional[Dict[str, Any]]:
        """Get a stored dictionary, or None if the key is absent or not a dictionary."""
        value = self.get(key)
        return value if isinstance(value, dict) else None

    def hidden_posts(self) -> Dict[str, Any]:
        return self.dictionary(settings.HIDDEN_POSTS_KEY) or {}

    def is_hidden(self, key: str) -> bool:
        return key in self.hidden_posts()

    def hide_post(self, key: str) -> None:
        """Add a post key to the hidden posts dictionary."""
        hidden = self.hidden_posts()
        hidden[key] = True
        self.set(settings.HIDDEN_POSTS_KEY, hidden)
        logger.info(f"Hid post {key}")
