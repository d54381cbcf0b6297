"""
Database Module for Pulse

This module handles the connection to the hosted realtime database and the
read/write operations the Pulse client performs on it.
"""

from typing import Optional, Dict, Any, Callable

from firebase_admin import db as firebase_db

from data.firebase_app import get_firebase_app, delete_firebase_app
from utils.exceptions import DatabaseError
from utils.helpers import join_path
from utils.logger import get_logger

logger = get_logger(__name__)

class RealtimeDatabase:
    """Realtime database manager for the Pulse client."""

    def __init__(self, app=None):
        """
        Initialize the database manager.

        Args:
            app: An already initialised Firebase app (optional). When omitted,
                the app is created from settings on first connect.
        """
        self.app = app
        self.root = None

    def connect(self) -> bool:
        """
        Establish the root database reference.

        Returns:
            bool: True if connection was successful, False otherwise.
        """
        if self.root is not None:
            return True
        try:
            if self.app is None:
                self.app = get_firebase_app()
            self.root = firebase_db.reference("/", app=self.app)
            logger.info("Successfully connected to realtime database")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to realtime database: {e}")
            self.root = None
            return False

    def close(self) -> None:
        """Release the database reference and the Firebase app."""
        try:
            if self.app is not None:
                delete_firebase_app(self.app)
        except Exception as e:
            logger.error(f"Error closing realtime database: {e}")
        finally:
            self.app = None
            self.root = None

    def reference(self, *path: str):
        """
        Get a reference to a path below the root.

        Raises:
            DatabaseError: If the database is not reachable.
        """
        if not self.connect():
            raise DatabaseError("Realtime database is not connected")
        child_path = join_path(*path)
        return self.root.child(child_path) if child_path else self.root

    def set_value(self, path: str, value: Any) -> bool:
        """
        Overwrite the value at a path.

        Args:
            path: Slash-separated path below the root.
            value: JSON-compatible value.

        Returns:
            bool: True if the write was successful, False otherwise.
        """
        if not self.connect():
            return False

        try:
            self.root.child(path).set(value)
            logger.debug(f"Wrote {path}")
            return True
        except DatabaseError:
            raise
        except Exception as e:
            logger.error(f"Error writing {path}: {e}")
            return False

    def update_paths(self, updates: Dict[str, Any]) -> bool:
        """
        Atomically write several paths relative to the root.

        Either every path is written or none is. A None value deletes the path.

        Args:
            updates: Mapping of slash-separated path to value.

        Returns:
            bool: True if the update was successful, False otherwise.
        """
        if not updates:
            return True
        if not self.connect():
            return False

        try:
            self.root.update(updates)
            logger.debug(f"Updated {len(updates)} paths: {', '.join(updates)}")
            return True
        except DatabaseError:
            raise
        except Exception as e:
            logger.error(f"Error updating paths {', '.join(updates)}: {e}")
            return False

    def get_value(self, path: str) -> Optional[Any]:
        """
        Read the value at a path.

        Returns:
            The stored value, or None if the path is empty or an error occurred.
        """
        if not self.connect():
            return None

        try:
            return self.root.child(path).get()
        except DatabaseError:
            raise
        except Exception as e:
            logger.error(f"Error reading {path}: {e}")
            return None

    def query_range(self, path: str, child: str, start: str, end: str) -> Dict[str, Any]:
        """
        Query the children of a path ordered by a child key.

        Args:
            path: The collection path (e.g. "geoPosts").
            child: The child key to order by (e.g. "g").
            start: Inclusive lower bound.
            end: Inclusive upper bound.

        Returns:
            Dict[str, Any]: Matching children keyed by node name (empty on error).
        """
        if not self.connect():
            return {}

        try:
            result = self.root.child(path).order_by_child(child).start_at(start).end_at(end).get()
            return dict(result or {})
        except DatabaseError:
            raise
        except Exception as e:
            logger.error(f"Error querying {path} by {child} in [{start}, {end}]: {e}")
            return {}

    def listen(self, path: str, callback: Callable[[Any], None]):
        """
        Attach a standing listener to a path.

        The callback receives firebase_admin.db.Event objects on a background thread.

        Returns:
            The listener registration (call close() to detach), or None on error.
        """
        if not self.connect():
            return None

        try:
            registration = self.root.child(path).listen(callback)
            logger.info(f"Listening for changes on {path}")
            return registration
        except DatabaseError:
            raise
        except Exception as e:
            logger.error(f"Error listening on {path}: {e}")
            return None

# Create a default database instance for use throughout the application
db = RealtimeDatabase()
