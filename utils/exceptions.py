"""
Custom Exception Classes for Pulse

This module defines custom exceptions for better error handling and
categorization of failures across the application.
"""


class PulseError(Exception):
    """Base exception for all Pulse application errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(PulseError):
    """Raised when configuration validation fails or required settings are missing."""
    pass


# =============================================================================
# Storage Errors
# =============================================================================

class StorageError(PulseError):
    """Base exception for object storage errors."""
    pass


class ImageEncodingError(StorageError):
    """Raised when an image cannot be encoded to JPEG."""
    pass


class MediaUploadError(StorageError):
    """Raised when an image upload fails."""
    pass


# =============================================================================
# Database Errors
# =============================================================================

class DatabaseError(PulseError):
    """Base exception for realtime database errors."""
    pass


class ConnectionError(DatabaseError):
    """Raised when the Firebase app or database reference cannot be created."""
    pass


class WriteError(DatabaseError):
    """Raised when a database write fails."""
    pass


class QueryError(DatabaseError):
    """Raised when a database query fails."""
    pass


# =============================================================================
# Geo Index Errors
# =============================================================================

class GeoIndexError(PulseError):
    """Base exception for geospatial index errors."""
    pass


class InvalidLocationError(GeoIndexError):
    """Raised when a latitude/longitude pair is out of range."""
    pass
