"""
Data Models for Pulse

This module contains data classes for posts, geo index entries, and
map viewports, plus their realtime database serialisation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from utils.helpers import safe_get


@dataclass(frozen=True)
class Location:
    """A WGS84 point."""
    latitude: float
    longitude: float

    def as_list(self) -> List[float]:
        return [self.latitude, self.longitude]


@dataclass(frozen=True)
class Region:
    """
    A rectangular map viewport described by its centre and span.

    The span is the full height/width of the viewport in degrees, so the
    northern edge sits at ``center_latitude + latitude_delta / 2``.
    """
    center_latitude: float
    center_longitude: float
    latitude_delta: float
    longitude_delta: float

    @property
    def south(self) -> float:
        return max(-90.0, self.center_latitude - self.latitude_delta / 2)

    @property
    def north(self) -> float:
        return min(90.0, self.center_latitude + self.latitude_delta / 2)

    @property
    def west(self) -> float:
        return _wrap_longitude(self.center_longitude - self.longitude_delta / 2)

    @property
    def east(self) -> float:
        return _wrap_longitude(self.center_longitude + self.longitude_delta / 2)

    @property
    def crosses_antimeridian(self) -> bool:
        return self.longitude_delta < 360 and self.west > self.east

    def contains(self, location: Location) -> bool:
        """Check whether a point lies inside the viewport (edges inclusive)."""
        if not self.south <= location.latitude <= self.north:
            return False
        if self.longitude_delta >= 360:
            return True
        if self.crosses_antimeridian:
            return location.longitude >= self.west or location.longitude <= self.east
        return self.west <= location.longitude <= self.east

    @classmethod
    def from_bounds(cls, south: float, west: float, north: float, east: float) -> "Region":
        """Build a viewport from its edges."""
        width = east - west if east >= west else east + 360 - west
        return cls(
            center_latitude=(south + north) / 2,
            center_longitude=_wrap_longitude(west + width / 2),
            latitude_delta=north - south,
            longitude_delta=width,
        )


def _wrap_longitude(longitude: float) -> float:
    if -180.0 <= longitude <= 180.0:
        return longitude
    return ((longitude + 180.0) % 360.0) - 180.0


@dataclass
class Post:
    """A post record as stored under posts/<key> and users/<uid>/posts/<key>."""
    key: str
    message: str
    time: float                        # Seconds since epoch
    image: str                         # Download URL of the uploaded image
    user: str                          # Author id
    score: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "time": self.time,
            "score": self.score,
            "image": self.image,
            "user": self.user,
        }

    @classmethod
    def from_dict(cls, key: str, data: Optional[Dict[str, Any]]) -> "Post":
        data = data or {}
        return cls(
            key=key,
            message=data.get("message", ""),
            time=float(data.get("time", 0)),
            image=data.get("image", ""),
            user=data.get("user", ""),
            score=int(data.get("score", 1)),
        )


@dataclass
class GeoPost:
    """A geo index entry as stored under geoPosts/<key>."""
    key: str
    location: Location
    geohash: str

    def to_dict(self) -> Dict[str, Any]:
        return {"g": self.geohash, "l": self.location.as_list()}

    @classmethod
    def from_dict(cls, key: str, data: Optional[Dict[str, Any]]) -> Optional["GeoPost"]:
        """Parse an index entry; returns None if the entry is malformed."""
        lat = safe_get(data, "l", 0)
        lon = safe_get(data, "l", 1)
        geohash = safe_get(data, "g")
        if lat is None or lon is None or not geohash:
            return None
        try:
            location = Location(float(lat), float(lon))
        except (TypeError, ValueError):
            return None
        return cls(key=key, location=location, geohash=geohash)


@dataclass
class PostViewModel:
    """Presentation-facing placeholder for a post visible on the map."""
    key: str
    post: Optional[Post] = field(default=None)

    @property
    def is_loaded(self) -> bool:
        return self.post is not None
