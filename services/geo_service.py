"""
Geo Index Service Module

This module indexes post locations in the realtime database using the
GeoFire layout (geoPosts/<key> = {"g": geohash, "l": [lat, lon]}) and
provides live region queries that report keys entering and leaving a
map viewport.

firebase-admin can only attach listeners to references, not to ordered
range queries, so a region query listens on the whole geoPosts node and
receives every index change. Single-entry changes that cannot affect the
viewport are dropped from the event data alone; only the rest trigger a
ranged fetch over the viewport's geohash prefix.
"""

import itertools
import os
import threading
from typing import Callable, Dict, Optional, Tuple

import geohash2

from config import settings
from data.database import db as default_db
from data.models import GeoPost, Location, Region
from data.protocols import RealtimeStore
from utils.exceptions import InvalidLocationError
from utils.helpers import is_valid_coordinate, join_path
from utils.logger import get_logger

logger = get_logger(__name__)

KEY_ENTERED = "key_entered"
KEY_EXITED = "key_exited"
EVENT_TYPES = (KEY_ENTERED, KEY_EXITED)

# Highest character of the geohash alphabet sorts below "~"
RANGE_END_SUFFIX = "~"

GeoCallback = Callable[[str, Location], None]


class GeoIndexService:
    """Service for writing and querying post locations."""

    def __init__(self, database: Optional[RealtimeStore] = None, precision: Optional[int] = None):
        """
        Initialize the geo index.

        Args:
            database: A RealtimeStore implementation, defaults to the shared database.
            precision: Geohash length, defaults to settings.GEOHASH_PRECISION.
        """
        self.db = database if database is not None else default_db
        self.precision = precision or settings.GEOHASH_PRECISION

    @staticmethod
    def location_path(key: str) -> str:
        return join_path(settings.GEO_POSTS_NODE, key)

    def encode(self, location: Location, precision: Optional[int] = None) -> str:
        return geohash2.encode(location.latitude, location.longitude, precision=precision or self.precision)

    def entry_for(self, key: str, location: Location) -> GeoPost:
        """
        Build the index entry for a key.

        Raises:
            InvalidLocationError: If the coordinates are out of range.
        """
        if not key:
            raise InvalidLocationError("Geo index key must not be empty")
        if not is_valid_coordinate(location.latitude, location.longitude):
            raise InvalidLocationError(
                f"Invalid location for {key}: ({location.latitude}, {location.longitude})"
            )
        return GeoPost(key=key, location=location, geohash=self.encode(location))

    def set_location(self, key: str, location: Location) -> bool:
        """Write (or move) the indexed location of a key."""
        entry = self.entry_for(key, location)
        written = self.db.set_value(self.location_path(key), entry.to_dict())
        if written:
            logger.debug(f"Indexed {key} at {entry.geohash}")
        return written

    def get_location(self, key: str) -> Optional[Location]:
        """Read the indexed location of a key, or None if not indexed."""
        entry = GeoPost.from_dict(key, self.db.get_value(self.location_path(key)))
        return entry.location if entry else None

    def remove_location(self, key: str) -> bool:
        """Remove a key from the index."""
        return self.db.update_paths({self.location_path(key): None})

    def query_bounds(self, region: Region) -> Tuple[str, str]:
        """
        Get the geohash range covering a viewport.

        The range is the longest prefix shared by the geohashes of the
        viewport corners, so it may include points outside the viewport.
        """
        corners = [
            Location(region.south, region.west),
            Location(region.south, region.east),
            Location(region.north, region.west),
            Location(region.north, region.east),
        ]
        prefix = os.path.commonprefix([self.encode(c) for c in corners])
        return prefix, prefix + RANGE_END_SUFFIX

    def entries_in_range(self, start: str, end: str) -> Dict[str, GeoPost]:
        """Fetch well-formed index entries whose geohash lies in [start, end]."""
        raw = self.db.query_range(settings.GEO_POSTS_NODE, "g", start, end)
        entries = {}
        for key, value in raw.items():
            entry = GeoPost.from_dict(key, value)
            if entry is None:
                logger.warning(f"Skipping malformed geo index entry: {key}")
                continue
            entries[key] = entry
        return entries

    def query(self, region: Region) -> "RegionQuery":
        """Create a region query for a viewport. Call start() to begin delivery."""
        return RegionQuery(self, region)


class RegionQuery:
    """
    A live query bound to a rectangular viewport.

    Observers are told when keys enter or exit the viewport, either because
    the index changed or because the viewport was moved.
    """

    def __init__(self, geo: GeoIndexService, region: Region):
        self._geo = geo
        self._region = region
        self._observers: Dict[int, Tuple[str, GeoCallback]] = {}
        self._handles = itertools.count(1)
        self._inside: Dict[str, Location] = {}
        self._registration = None
        self._started = False
        # Listener events arrive on a background thread
        self._lock = threading.RLock()

    @property
    def region(self) -> Region:
        return self._region

    @region.setter
    def region(self, region: Region) -> None:
        with self._lock:
            self._region = region
            if self._started:
                self.refresh()

    @property
    def keys_inside(self) -> Dict[str, Location]:
        with self._lock:
            return dict(self._inside)

    def observe(self, event_type: str, callback: GeoCallback) -> int:
        """
        Register a callback for KEY_ENTERED or KEY_EXITED.

        Keys already inside the viewport are reported to new KEY_ENTERED
        observers immediately.

        Returns:
            int: A handle for remove_observer().
        """
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown region query event: {event_type}")

        with self._lock:
            handle = next(self._handles)
            self._observers[handle] = (event_type, callback)
            if event_type == KEY_ENTERED:
                for key, location in self._inside.items():
                    self._deliver(callback, key, location)
        return handle

    def remove_observer(self, handle: int) -> None:
        with self._lock:
            self._observers.pop(handle, None)

    def remove_all_observers(self) -> None:
        with self._lock:
            self._observers.clear()

    def start(self) -> None:
        """Attach the index listener and evaluate the current viewport."""
        with self._lock:
            if self._started:
                return
            self._started = True
            self._registration = self._geo.db.listen(settings.GEO_POSTS_NODE, self._on_index_change)
            self.refresh()

    def cancel(self) -> None:
        """Detach the listener and drop all observers and state."""
        with self._lock:
            registration, self._registration = self._registration, None
            self._started = False
            self._observers.clear()
            self._inside.clear()

        # close() joins the listener thread, which may be waiting on the lock
        if registration is not None:
            try:
                registration.close()
            except Exception as e:
                logger.warning(f"Error closing region query listener: {e}")

    def refresh(self) -> None:
        """Re-evaluate which keys are inside the viewport and notify observers."""
        with self._lock:
            if not self._started:
                return

            start, end = self._geo.query_bounds(self._region)
            candidates = self._geo.entries_in_range(start, end)
            now_inside = {
                key: entry.location
                for key, entry in candidates.items()
                if self._region.contains(entry.location)
            }

            exited = [key for key in self._inside if key not in now_inside]
            entered = [key for key in now_inside if key not in self._inside]

            for key in exited:
                last = candidates[key].location if key in candidates else self._inside[key]
                del self._inside[key]
                self._notify(KEY_EXITED, key, last)

            for key in entered:
                self._inside[key] = now_inside[key]
                self._notify(KEY_ENTERED, key, now_inside[key])

            # Keys that moved but stayed inside
            for key, location in now_inside.items():
                self._inside[key] = location

            if entered or exited:
                logger.debug(f"Region query: {len(entered)} entered, {len(exited)} exited")

    def affects_region(self, path: str, data) -> bool:
        """
        Check whether an index change at a listener path can alter the keys
        inside the viewport.

        Changes to a single entry are judged from the event data: they matter
        only if the key is inside now or its new location is. Anything else
        (root snapshots, partial entry writes) needs a full evaluation.
        """
        key = (path or "/").strip("/")
        if not key or "/" in key:
            return True

        with self._lock:
            if key in self._inside:
                return True
            if data is None:
                return False
            entry = GeoPost.from_dict(key, data)
            if entry is None:
                return True
            return self._region.contains(entry.location)

    def _on_index_change(self, event) -> None:
        path = getattr(event, 'path', '/')
        logger.debug(f"Geo index changed at {path}")
        try:
            if self.affects_region(path, getattr(event, 'data', None)):
                self.refresh()
        except Exception as e:
            logger.error(f"Error refreshing region query: {e}", exc_info=True)

    def _notify(self, event_type: str, key: str, location: Location) -> None:
        for registered_type, callback in list(self._observers.values()):
            if registered_type == event_type:
                self._deliver(callback, key, location)

    @staticmethod
    def _deliver(callback: GeoCallback, key: str, location: Location) -> None:
        try:
            callback(key, location)
        except Exception as e:
            logger.error(f"Region query observer failed for {key}: {e}", exc_info=True)
