"""
Shared Test Fixtures for Pulse

This module provides common fixtures used across all test modules.
Fixtures include mocks for settings, the realtime database, cloud storage,
logging, and factories for test objects.
"""

import pytest
from unittest.mock import MagicMock, patch
from datetime import datetime, timezone
from typing import Optional, Dict, Any
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def mock_settings():
    """
    Mock the settings module with test configuration values.

    Use together with patched_settings to install it in the modules under
    test, preventing tests from touching a real Firebase project.

    Returns:
        MagicMock: A mock settings object with default test values.
    """
    mock_settings_module = MagicMock()
    mock_settings_module.FIREBASE_CREDENTIALS_PATH = ""
    mock_settings_module.FIREBASE_DATABASE_URL = "https://pulse-test.firebaseio.com"
    mock_settings_module.FIREBASE_STORAGE_BUCKET = "pulse-test.appspot.com"
    mock_settings_module.FIREBASE_APP_NAME = "pulse-test"
    mock_settings_module.PULSE_USER_ID = "user-123"

    mock_settings_module.POSTS_NODE = "posts"
    mock_settings_module.GEO_POSTS_NODE = "geoPosts"
    mock_settings_module.USERS_NODE = "users"
    mock_settings_module.USER_POSTS_CHILD = "posts"
    mock_settings_module.INITIAL_POST_SCORE = 1

    mock_settings_module.IMAGES_FOLDER = "images"
    mock_settings_module.IMAGE_CONTENT_TYPE = "image/jpg"
    mock_settings_module.JPEG_QUALITY = 0
    mock_settings_module.DOWNLOAD_URL_TEMPLATE = (
        "https://firebasestorage.googleapis.com/v0/b/{bucket}/o/{path}?alt=media&token={token}"
    )
    mock_settings_module.UPLOAD_MAX_ATTEMPTS = 1
    mock_settings_module.UPLOAD_RETRY_DELAY = 0
    mock_settings_module.UPLOAD_RETRY_BACKOFF = 2

    mock_settings_module.GEOHASH_PRECISION = 10
    mock_settings_module.PREFERENCES_FILE = "/tmp/pulse_test_preferences.json"
    mock_settings_module.HIDDEN_POSTS_KEY = "hiddenPosts"

    return mock_settings_module


@pytest.fixture
def patched_settings(mock_settings):
    """
    Point every module's `settings` name at the mock settings object.

    Modules bind `settings` at import time, so patching config.settings
    alone does not reach them.
    """
    targets = [
        'data.firebase_app.settings',
        'services.storage_service.settings',
        'services.geo_service.settings',
        'services.preferences_service.settings',
        'services.pulse_service.settings',
    ]
    patchers = [patch(target, mock_settings) for target in targets]
    for p in patchers:
        p.start()
    yield mock_settings
    for p in reversed(patchers):
        p.stop()


# =============================================================================
# Database Fixtures
# =============================================================================

class FakeRealtimeDatabase:
    """
    In-memory stand-in for RealtimeDatabase.

    Stores values in a nested dict and records every write so tests can
    assert on the exact calls made.
    """

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.updates = []
        self.fail_updates = False
        self.listeners = []

    @staticmethod
    def _parts(path: str):
        return [p for p in path.split("/") if p]

    def get_value(self, path: str):
        node = self.data
        for part in self._parts(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _write(self, path: str, value):
        parts = self._parts(path)
        node = self.data
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        if value is None:
            node.pop(parts[-1], None)
        else:
            node[parts[-1]] = value

    def set_value(self, path: str, value) -> bool:
        self._write(path, value)
        return True

    def update_paths(self, updates: Dict[str, Any]) -> bool:
        self.updates.append(dict(updates))
        if self.fail_updates:
            return False
        for path, value in updates.items():
            self._write(path, value)
        return True

    def query_range(self, path: str, child: str, start: str, end: str) -> Dict[str, Any]:
        collection = self.get_value(path) or {}
        return {
            key: value for key, value in collection.items()
            if isinstance(value, dict) and start <= value.get(child, "") <= end
        }

    def listen(self, path: str, callback):
        registration = MagicMock()
        self.listeners.append((path, callback, registration))
        return registration


@pytest.fixture
def fake_db():
    """Provide an empty in-memory realtime database."""
    return FakeRealtimeDatabase()


@pytest.fixture
def mock_firebase_reference():
    """
    Mock the firebase_admin.db root reference used by RealtimeDatabase.

    Returns:
        tuple: (mock_reference_function, mock_root_reference).
    """
    mock_root = MagicMock()
    mock_child = MagicMock()
    mock_root.child.return_value = mock_child

    with patch('data.database.firebase_db.reference', return_value=mock_root) as mock_reference, \
         patch('data.database.get_firebase_app', return_value=MagicMock(name="app")):
        yield mock_reference, mock_root


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def mock_bucket():
    """Mock google.cloud.storage Bucket with a single reusable blob."""
    bucket = MagicMock()
    bucket.name = "pulse-test.appspot.com"
    blob = MagicMock()
    bucket.blob.return_value = blob
    return bucket


@pytest.fixture
def mock_storage_service():
    """Mock StorageService that encodes and uploads successfully."""
    storage = MagicMock()
    storage.encode_image.return_value = b"jpeg-bytes"
    storage.upload_image.return_value = "https://firebasestorage.googleapis.com/v0/b/test/o/images%2Fpost-1?alt=media&token=t"
    storage.delete_image.return_value = True
    return storage


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def capture_logs():
    """
    Capture log messages for assertion in tests.

    Returns:
        list: A list that will contain captured log records.
    """
    import logging

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    app_logger = logging.getLogger("pulse")
    original_level = app_logger.level
    app_logger.setLevel(logging.DEBUG)
    app_logger.addHandler(handler)

    yield handler.records

    app_logger.removeHandler(handler)
    app_logger.setLevel(original_level)


# =============================================================================
# Data Model Factories
# =============================================================================

@pytest.fixture
def post_factory():
    """
    Factory fixture for creating Post test objects.

    Returns:
        callable: A factory function for creating Post objects.
    """
    from data.models import Post

    def _create_post(
        key: str = 'post-1',
        message: str = 'Sunset over the bay',
        time: float = 1700000000.0,
        image: str = 'https://example.com/images/post-1.jpg',
        user: str = 'user-123',
        score: int = 1
    ) -> Post:
        return Post(key=key, message=message, time=time, image=image, user=user, score=score)

    return _create_post


@pytest.fixture
def fixed_now():
    """A fixed reference time for relative time tests."""
    return datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def tmp_preferences(tmp_path):
    """Preferences stored in a temporary file."""
    from services.preferences_service import Preferences
    return Preferences(path=str(tmp_path / "prefs" / "preferences.json"))
