"""
Configuration Settings for Pulse

This module centralizes all configuration settings for the Pulse client,
including environment variables, Firebase project settings, and application constants.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

from utils.exceptions import ConfigurationError

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))

# Firebase Project
FIREBASE_CREDENTIALS_PATH = os.getenv("FIREBASE_CREDENTIALS_PATH", "")   # Empty = application default credentials
FIREBASE_DATABASE_URL = os.getenv("FIREBASE_DATABASE_URL", "")
FIREBASE_STORAGE_BUCKET = os.getenv("FIREBASE_STORAGE_BUCKET", "")
FIREBASE_APP_NAME = os.getenv("FIREBASE_APP_NAME", "pulse")

# Signed-in user that authors new posts
PULSE_USER_ID = os.getenv("PULSE_USER_ID", "")

# =============================================================================
# Realtime Database Layout
# =============================================================================

POSTS_NODE = "posts"                 # posts/<key>
GEO_POSTS_NODE = "geoPosts"          # geoPosts/<key> = {"g": geohash, "l": [lat, lon]}
USERS_NODE = "users"                 # users/<uid>/posts/<key>
USER_POSTS_CHILD = "posts"
INITIAL_POST_SCORE = 1

# =============================================================================
# Cloud Storage Settings
# =============================================================================

IMAGES_FOLDER = "images"             # images/<key>
IMAGE_CONTENT_TYPE = "image/jpg"
JPEG_QUALITY = int(os.getenv("JPEG_QUALITY", "0"))
DOWNLOAD_URL_TEMPLATE = "https://firebasestorage.googleapis.com/v0/b/{bucket}/o/{path}?alt=media&token={token}"

# Upload Retry
UPLOAD_MAX_ATTEMPTS = 3
UPLOAD_RETRY_DELAY = 1               # Seconds before the first retry
UPLOAD_RETRY_BACKOFF = 2

# =============================================================================
# Geo Index Settings
# =============================================================================

GEOHASH_PRECISION = 10               # Same default precision as GeoFire

# =============================================================================
# Local Preferences
# =============================================================================

PREFERENCES_FILE = os.getenv("PULSE_PREFERENCES_FILE", os.path.join(APP_ROOT, "preferences.json"))
HIDDEN_POSTS_KEY = "hiddenPosts"

# =============================================================================
# Configuration Validation
# =============================================================================

def validate_settings():
    """
    Validate that all required settings are properly configured.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    errors = []

    # Required environment variables
    required_vars = [
        ("FIREBASE_DATABASE_URL", FIREBASE_DATABASE_URL),
        ("FIREBASE_STORAGE_BUCKET", FIREBASE_STORAGE_BUCKET),
        ("PULSE_USER_ID", PULSE_USER_ID),
    ]

    for var_name, var_value in required_vars:
        if not var_value:
            errors.append(f"Missing required environment variable: {var_name}")

    if FIREBASE_CREDENTIALS_PATH and not os.path.isfile(FIREBASE_CREDENTIALS_PATH):
        errors.append(f"FIREBASE_CREDENTIALS_PATH does not point to a file: {FIREBASE_CREDENTIALS_PATH}")

    if FIREBASE_DATABASE_URL and not FIREBASE_DATABASE_URL.startswith("https://"):
        errors.append("FIREBASE_DATABASE_URL must be an https:// URL")

    # Validate numeric settings are within reasonable bounds
    numeric_validations = [
        ("JPEG_QUALITY", JPEG_QUALITY, 0, 95),
        ("GEOHASH_PRECISION", GEOHASH_PRECISION, 1, 22),
        ("UPLOAD_MAX_ATTEMPTS", UPLOAD_MAX_ATTEMPTS, 1, 10),
    ]

    for name, value, min_val, max_val in numeric_validations:
        if value < min_val or value > max_val:
            errors.append(f"{name} must be between {min_val} and {max_val}, got {value}")

    if UPLOAD_RETRY_DELAY < 0:
        errors.append(f"UPLOAD_RETRY_DELAY must not be negative, got {UPLOAD_RETRY_DELAY}")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    return {
        "firebase": {
            "app_name": FIREBASE_APP_NAME,
            "database_url": FIREBASE_DATABASE_URL,
            "storage_bucket": FIREBASE_STORAGE_BUCKET,
            "credentials": "service account" if FIREBASE_CREDENTIALS_PATH else "application default",
        },
        "user_configured": bool(PULSE_USER_ID),
        "images": {
            "content_type": IMAGE_CONTENT_TYPE,
            "jpeg_quality": JPEG_QUALITY,
        },
        "geohash_precision": GEOHASH_PRECISION,
    }
