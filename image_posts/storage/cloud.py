"""Cloudinary implementation of ImageBackend."""
import asyncio
import io
import logging
from typing import Any
from urllib.parse import urlparse

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from image_posts.exceptions import StorageError

from .base import ImageBackend, StoredImage, check_size

logger = logging.getLogger(__name__)


class CloudinaryImageBackend(ImageBackend):
    """Cloudinary media host storage.

    Uploads images into a fixed folder and keeps the ``public_id`` that
    Cloudinary returns as the deletion key. The SDK is blocking, so every
    call runs in a worker thread. Credentials are passed per call instead
    of through ``cloudinary.config``.
    """

    HOST_SUFFIX = "cloudinary.com"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "image-posts",
        max_upload_size: int = 5 * 1024 * 1024,
    ):
        if not (cloud_name and api_key and api_secret):
            raise ValueError(
                "CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and "
                "CLOUDINARY_API_SECRET must be set for cloudinary storage"
            )

        self.cloud_name = cloud_name
        self.folder = folder.strip("/")
        self.max_upload_size = max_upload_size
        self._options: dict[str, Any] = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
            "secure": True,
        }
        logger.info(f"Initialized CloudinaryImageBackend for cloud {cloud_name}, folder {self.folder}")

    async def store(self, content: bytes, filename: str, content_type: str) -> StoredImage:
        check_size(content, self.max_upload_size)

        def _upload() -> dict[str, Any]:
            return cloudinary.uploader.upload(
                io.BytesIO(content),
                folder=self.folder,
                resource_type="image",
                filename=filename,
                **self._options,
            )

        try:
            result = await asyncio.to_thread(_upload)
        except CloudinaryError as e:
            logger.error(f"Cloudinary upload failed: {e}")
            raise StorageError(f"Failed to upload image: {e}") from e

        try:
            stored = StoredImage(public_url=result["secure_url"], key=result["public_id"])
        except (KeyError, TypeError) as e:
            logger.error(f"Unexpected Cloudinary upload response: {result!r}")
            raise StorageError("Cloudinary upload response is missing fields") from e

        logger.info(f"Uploaded image to Cloudinary: {stored.key}")
        return stored

    async def delete(self, key: str) -> bool:
        def _destroy() -> dict[str, Any]:
            return cloudinary.uploader.destroy(
                key,
                resource_type="image",
                invalidate=True,
                **self._options,
            )

        try:
            result = await asyncio.to_thread(_destroy)
        except CloudinaryError as e:
            logger.error(f"Cloudinary delete failed for {key}: {e}")
            raise StorageError(f"Failed to delete image: {e}") from e

        outcome = (result or {}).get("result")
        if outcome == "ok":
            logger.info(f"Deleted image from Cloudinary: {key}")
            return True
        if outcome == "not found":
            logger.warning(f"Image not found on Cloudinary: {key}")
            return False

        raise StorageError(f"Unexpected Cloudinary delete result for {key}: {outcome}")

    def owns(self, image_url: str) -> bool:
        hostname = urlparse(image_url or "").hostname or ""
        return hostname == self.HOST_SUFFIX or hostname.endswith("." + self.HOST_SUFFIX)

    def key_for_url(self, image_url: str) -> str:
        """Reconstruct a public_id from a delivery URL.

        Only correct for URLs of the form ``.../<folder>/<name>.<ext>``.
        Posts created by this backend store the real public_id instead.
        """
        last_segment = urlparse(image_url).path.rstrip("/").split("/")[-1]
        name = last_segment.split(".")[0]
        return f"{self.folder}/{name}"
