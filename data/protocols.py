"""
Data Layer Protocol Definitions

This module defines typing.Protocol interfaces for the hosted services the
Pulse client talks to. These protocols enable dependency injection, making
the services testable without a real Firebase project.

Protocols defined:
- RealtimeStore: Interface for reading and writing realtime database paths
"""

from typing import Protocol, Optional, Dict, Any, Callable


class ListenerRegistration(Protocol):
    """Handle returned by a standing database listener."""

    def close(self) -> None:
        ...


class RealtimeStore(Protocol):
    """Protocol defining the interface for realtime database operations.

    Implementations should provide methods for:
    - Writing single paths and atomic multi-path updates
    - Reading a path and ranged child queries
    - Attaching standing listeners

    This protocol abstracts the hosted database, allowing services to work
    with any compatible backend (Firebase, in-memory fake, etc.).
    """

    def set_value(self, path: str, value: Any) -> bool:
        """Overwrite the value at a path.

        Args:
            path: Slash-separated path below the database root.
            value: JSON-compatible value.

        Returns:
            True if the write succeeded, False otherwise.
        """
        ...

    def update_paths(self, updates: Dict[str, Any]) -> bool:
        """Atomically write several paths at once.

        Args:
            updates: Mapping of path to value; a None value deletes the path.

        Returns:
            True if the update succeeded, False otherwise.
        """
        ...

    def get_value(self, path: str) -> Optional[Any]:
        """Read the value at a path, or None if absent or on error."""
        ...

    def query_range(self, path: str, child: str, start: str, end: str) -> Dict[str, Any]:
        """Return the children of a path whose `child` value is in [start, end]."""
        ...

    def listen(self, path: str, callback: Callable[[Any], None]) -> Optional[ListenerRegistration]:
        """Attach a standing listener to a path."""
        ...
