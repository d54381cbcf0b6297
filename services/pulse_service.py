"""
Pulse Service Module

This module is the client's single entry point to the hosted backend. It owns
the realtime database, cloud storage and geo index handles, keeps the cache of
posts visible in the current map viewport, and runs the post creation
pipeline (upload image, then write the post records).
"""

from typing import Dict, List, Optional, Any

from config import settings
from data.database import db as default_db
from data.models import Location, Post, PostViewModel, Region
from data.protocols import RealtimeStore
from services.geo_service import GeoIndexService, RegionQuery, KEY_ENTERED, KEY_EXITED
from services.notification_service import (
    NotificationCenter, notification_center, ADD_POST, REMOVE_POST
)
from services.preferences_service import Preferences
from services.storage_service import StorageService, ImageSource
from utils.exceptions import PulseError, StorageError, DatabaseError, GeoIndexError
from utils.helpers import join_path
from utils.logger import get_logger

logger = get_logger(__name__)

class PulseService:
    """
    Façade over the hosted services used by the Pulse map.

    Attributes:
        posts: Posts currently inside the map viewport, keyed by post key.
    """

    def __init__(self, database: Optional[RealtimeStore] = None, storage: Optional[StorageService] = None,
                 geo: Optional[GeoIndexService] = None,
                 notifications: Optional[NotificationCenter] = None,
                 preferences: Optional[Preferences] = None,
                 user_id: Optional[str] = None):
        """
        Initialize the service. Every collaborator can be injected; defaults
        are built from settings.
        """
        self.db = database if database is not None else default_db
        self.storage = storage or StorageService()
        self.geo = geo or GeoIndexService(self.db)
        self.notifications = notifications or notification_center
        self.preferences = preferences or Preferences()
        self.user_id = user_id if user_id is not None else settings.PULSE_USER_ID

        self.posts: Dict[str, PostViewModel] = {}
        self.region_query: Optional[RegionQuery] = None

    # =========================================================================
    # Update Region
    # =========================================================================

    def update(self, region: Region) -> None:
        """
        Point the live region query at a map viewport.

        The first call creates the query and its enter/exit observers; later
        calls only move the viewport of the existing query.
        """
        if self.region_query is None:
            self.region_query = self.geo.query(region)
            self.region_query.observe(KEY_ENTERED, self._on_key_entered)
            self.region_query.observe(KEY_EXITED, self._on_key_exited)
            self.region_query.start()
            logger.info("Started region query")
        else:
            self.region_query.region = region

    def stop(self) -> None:
        """Cancel the region query and forget the visible posts."""
        if self.region_query is not None:
            self.region_query.cancel()
            self.region_query = None
        self.posts.clear()

    def _on_key_entered(self, key: str, location: Location) -> None:
        if not key or location is None:
            return

        hidden = self.preferences.dictionary(settings.HIDDEN_POSTS_KEY)
        if hidden and key in hidden:
            logger.debug(f"Skipping hidden post {key}")
            return

        self.posts[key] = PostViewModel(key=key)
        self.notifications.post(ADD_POST, {"key": key, "location": location})

    def _on_key_exited(self, key: str, location: Location) -> None:
        if not key:
            return

        self.posts.pop(key, None)
        self.notifications.post(REMOVE_POST, {"key": key})

    def visible_post_keys(self) -> List[str]:
        return list(self.posts)

    # =========================================================================
    # Create Post
    # =========================================================================

    def post_record(self, key: str, message: str, image_url: str, time: float) -> Post:
        return Post(
            key=key,
            message=message,
            time=time,
            image=image_url,
            user=self.user_id,
            score=settings.INITIAL_POST_SCORE,
        )

    @staticmethod
    def post_path(key: str) -> str:
        return join_path(settings.POSTS_NODE, key)

    def user_post_path(self, key: str, user_id: Optional[str] = None) -> str:
        return join_path(settings.USERS_NODE, user_id or self.user_id, settings.USER_POSTS_CHILD, key)

    def geo_record(self, key: str, location: Location) -> Dict[str, Any]:
        return self.geo.entry_for(key, location).to_dict()

    def new_post(self, key: str, location: Location, image: ImageSource,
                 comment: str, time: float) -> bool:
        """
        Create a post: upload its image, then write the post records.

        The post, the per-user copy and the geo index entry are written in a
        single multi-path update. If that write fails the uploaded image is
        removed again.

        Args:
            key: The new post's key.
            location: Where the post was made.
            image: A Pillow image, raw image bytes, or an image file path.
            comment: The post message.
            time: Creation time in seconds since epoch.

        Returns:
            bool: True if the image and all records were written, False otherwise.
        """
        if not self.user_id:
            logger.error("Cannot create a post without a signed-in user")
            return False

        image_url = None
        try:
            geo_entry = self.geo_record(key, location)
            image_url = self.storage.upload_image(key, self.storage.encode_image(image))
            if not image_url:
                logger.error(f"There was an error uploading the file for post {key}")
                return False

            record = self.post_record(key, comment, image_url, time).to_dict()
            updates = {
                self.post_path(key): record,
                self.user_post_path(key): dict(record),
                self.geo.location_path(key): geo_entry,
            }

            if not self.db.update_paths(updates):
                logger.error(f"Failed to write records for post {key}")
                self._discard_image(key)
                return False

            logger.info(f"Created post {key}")
            return True

        except GeoIndexError as e:
            logger.error(f"Invalid location for post {key}: {e}")
            return False
        except StorageError as e:
            logger.error(f"Storage error creating post {key}: {e}")
            return False
        except DatabaseError as e:
            logger.error(f"Database error creating post {key}: {e}")
            if image_url:
                self._discard_image(key)
            return False
        except PulseError as e:
            logger.error(f"Error creating post {key}: {e}", exc_info=True)
            if image_url:
                self._discard_image(key)
            return False

    def _discard_image(self, key: str) -> None:
        """Remove the image uploaded for a post whose records were not written."""
        logger.info(f"Removing uploaded image for post {key}")
        try:
            if not self.storage.delete_image(key):
                logger.warning(f"Image for post {key} could not be removed")
        except StorageError as e:
            logger.warning(f"Image for post {key} could not be removed: {e}")

    # =========================================================================
    # Read / Delete Post
    # =========================================================================

    def get_post(self, key: str) -> Optional[Post]:
        """Fetch a post record, or None if it does not exist."""
        data = self.db.get_value(self.post_path(key))
        if not isinstance(data, dict):
            return None
        return Post.from_dict(key, data)

    def load_post(self, key: str) -> Optional[PostViewModel]:
        """Fetch a visible post's record into its view model."""
        view_model = self.posts.get(key)
        if view_model is None:
            return None
        if not view_model.is_loaded:
            view_model.post = self.get_post(key)
        return view_model

    def delete_post(self, key: str) -> bool:
        """
        Remove a post's records, its geo index entry and its image.

        Returns:
            bool: True if the records were removed, False otherwise.
        """
        post = self.get_post(key)
        author = post.user if post and post.user else self.user_id

        updates = {
            self.post_path(key): None,
            self.geo.location_path(key): None,
        }
        if author:
            updates[self.user_post_path(key, author)] = None

        if not self.db.update_paths(updates):
            logger.error(f"Failed to delete records for post {key}")
            return False

        if not self.storage.delete_image(key):
            logger.warning(f"Records for post {key} deleted but its image was not")

        logger.info(f"Deleted post {key}")
        return True
