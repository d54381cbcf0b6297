"""
Storage Service Module

This module handles post images in Firebase Cloud Storage. It provides
functionality for JPEG-encoding images, uploading them with a download
token, and deleting them again.
"""

import io
import uuid
from typing import Optional, Union
from urllib.parse import quote

from PIL import Image
from firebase_admin import storage

from config import settings
from data.firebase_app import get_firebase_app
from utils.exceptions import ImageEncodingError, MediaUploadError, StorageError
from utils.helpers import retry, join_path
from utils.logger import get_logger

logger = get_logger(__name__)

ImageSource = Union[Image.Image, bytes, str]

class StorageService:
    """Service for storing post images in Firebase Cloud Storage."""

    def __init__(self, bucket=None):
        """
        Initialize the storage service.

        Args:
            bucket: A google.cloud.storage Bucket (optional). When omitted,
                the default bucket of the Firebase app is used on first access.
        """
        self._bucket = bucket

    @property
    def bucket(self):
        if self._bucket is None:
            self._bucket = storage.bucket(settings.FIREBASE_STORAGE_BUCKET or None, app=get_firebase_app())
        return self._bucket

    @staticmethod
    def image_path(key: str) -> str:
        return join_path(settings.IMAGES_FOLDER, key)

    def encode_image(self, image: ImageSource, quality: Optional[int] = None) -> bytes:
        """
        Encode an image as JPEG.

        Args:
            image: A Pillow image, raw image bytes, or a path to an image file.
            quality: JPEG quality, defaults to settings.JPEG_QUALITY.

        Returns:
            bytes: The JPEG-encoded image.

        Raises:
            ImageEncodingError: If the image cannot be read or encoded.
        """
        quality = settings.JPEG_QUALITY if quality is None else quality
        try:
            if isinstance(image, bytes):
                image = Image.open(io.BytesIO(image))
            elif isinstance(image, str):
                image = Image.open(image)

            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")

            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=quality)
            return buffer.getvalue()
        except Exception as e:
            raise ImageEncodingError(f"Failed to encode image as JPEG: {e}") from e

    def download_url(self, path: str, token: str) -> str:
        """Build the tokenised Firebase download URL for an object."""
        return settings.DOWNLOAD_URL_TEMPLATE.format(
            bucket=self.bucket.name,
            path=quote(path, safe=""),
            token=token,
        )

    def upload_image(self, key: str, data: bytes) -> Optional[str]:
        """
        Upload image bytes to images/<key>.

        Args:
            key: The post key.
            data: JPEG bytes.

        Returns:
            Optional[str]: The download URL, or None if the upload failed.
        """
        if not data:
            logger.error(f"Refusing to upload empty image for post {key}")
            return None

        path = self.image_path(key)
        token = str(uuid.uuid4())

        def _upload():
            blob = self.bucket.blob(path)
            blob.metadata = {"firebaseStorageDownloadTokens": token}
            blob.upload_from_string(data, content_type=settings.IMAGE_CONTENT_TYPE)
            return blob

        try:
            retry(
                _upload,
                max_attempts=settings.UPLOAD_MAX_ATTEMPTS,
                delay=settings.UPLOAD_RETRY_DELAY,
                backoff=settings.UPLOAD_RETRY_BACKOFF,
            )
            url = self.download_url(path, token)
            logger.info(f"Uploaded image for post {key} ({len(data)} bytes)")
            return url

        except StorageError:
            raise
        except Exception as e:
            logger.error(f"There was an error uploading the file {path}: {e}")
            return None

    def upload(self, key: str, image: ImageSource) -> str:
        """
        Encode and upload an image, raising on failure.

        Raises:
            ImageEncodingError: If the image cannot be encoded.
            MediaUploadError: If the upload failed.
        """
        url = self.upload_image(key, self.encode_image(image))
        if not url:
            raise MediaUploadError(f"Upload failed for post {key}")
        return url

    def delete_image(self, key: str) -> bool:
        """
        Delete the image stored for a post.

        Returns:
            bool: True if the image was deleted, False otherwise.
        """
        path = self.image_path(key)
        try:
            self.bucket.blob(path).delete()
            logger.info(f"Deleted image {path}")
            return True
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Error deleting image {path}: {e}")
            return False
