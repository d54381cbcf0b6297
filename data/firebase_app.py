"""
Firebase App Module

Initialises the Firebase Admin app shared by the realtime database and
cloud storage services.
"""

from typing import Optional

import firebase_admin
from firebase_admin import credentials

from config import settings
from utils.exceptions import ConnectionError as DatabaseConnectionError
from utils.logger import get_logger

logger = get_logger(__name__)


def _credential():
    if settings.FIREBASE_CREDENTIALS_PATH:
        return credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
    return credentials.ApplicationDefault()


def get_firebase_app(name: Optional[str] = None):
    """
    Get the named Firebase app, initialising it on first use.

    Args:
        name: App name, defaults to settings.FIREBASE_APP_NAME.

    Returns:
        firebase_admin.App: The initialised app.

    Raises:
        DatabaseConnectionError: If the app cannot be initialised.
    """
    name = name or settings.FIREBASE_APP_NAME
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        # not initialised yet
        pass

    options = {}
    if settings.FIREBASE_DATABASE_URL:
        options["databaseURL"] = settings.FIREBASE_DATABASE_URL
    if settings.FIREBASE_STORAGE_BUCKET:
        options["storageBucket"] = settings.FIREBASE_STORAGE_BUCKET

    try:
        app = firebase_admin.initialize_app(_credential(), options, name=name)
        logger.info(f"Initialised Firebase app '{name}'")
        return app
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to initialise Firebase app '{name}': {e}") from e


def delete_firebase_app(app) -> None:
    """Release a Firebase app and its listeners."""
    try:
        firebase_admin.delete_app(app)
        logger.info("Firebase app deleted")
    except ValueError as e:
        logger.warning(f"Firebase app already deleted: {e}")
