"""Local filesystem implementation of ImageBackend."""
import logging
import secrets
import time
from pathlib import Path

from image_posts.exceptions import StorageError, UnsupportedMediaTypeError

from .base import IMAGE_FIELD_NAME, ImageBackend, StoredImage, check_size

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({".jpeg", ".jpg", ".png", ".gif"})
ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif"})


class LocalImageBackend(ImageBackend):
    """Local filesystem image storage.

    Stores images as files in a directory that the application serves
    as static files under ``url_prefix``. Each image gets a unique
    filename built from the upload field name, the current time and a
    random suffix, keeping the original extension.
    """

    def __init__(
        self,
        storage_root: str | Path,
        url_prefix: str = "/uploads",
        max_upload_size: int = 5 * 1024 * 1024,
    ):
        """Initialize local image backend.

        Args:
            storage_root: Directory images are written to.
            url_prefix: Root-relative URL prefix the directory is served under.
            max_upload_size: Maximum accepted image size in bytes.
        """
        self.storage_root = Path(storage_root)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.max_upload_size = max_upload_size

        self._ensure_storage_dir()
        logger.info(f"Initialized LocalImageBackend with root: {self.storage_root}")

    def _ensure_storage_dir(self) -> None:
        """Ensure the storage directory exists."""
        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create storage directory: {e}")
            raise StorageError(f"Failed to create storage directory: {e}")

    def _check_type(self, filename: str, content_type: str) -> str:
        """Validate the upload type and return its normalized extension."""
        extension = Path(filename or "").suffix.lower()
        if extension not in ALLOWED_EXTENSIONS or (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
            raise UnsupportedMediaTypeError(
                "Only image files are allowed (jpeg, jpg, png, gif)"
            )
        return extension

    def _generate_filename(self, extension: str) -> str:
        timestamp = int(time.time() * 1000)
        return f"{IMAGE_FIELD_NAME}-{timestamp}-{secrets.token_hex(4)}{extension}"

    def _resolve(self, key: str) -> Path:
        """Map a key (``<prefix>/<filename>``) to a file under storage_root."""
        # Only the final component is used so keys cannot escape storage_root
        return self.storage_root / Path(key).name

    async def store(self, content: bytes, filename: str, content_type: str) -> StoredImage:
        """Write image content to the storage directory.

        Returns:
            StoredImage: ``public_url`` and ``key`` are both the
            root-relative path the image is served under.
        """
        check_size(content, self.max_upload_size)
        extension = self._check_type(filename, content_type)

        name = self._generate_filename(extension)
        file_path = self.storage_root / name

        try:
            file_path.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to save image: {e}")
            raise StorageError(f"Failed to save image: {e}")

        public_url = f"{self.url_prefix}/{name}"
        logger.debug(f"Saved image to: {file_path}")
        return StoredImage(public_url=public_url, key=public_url)

    async def delete(self, key: str) -> bool:
        file_path = self._resolve(key)

        if not file_path.exists():
            logger.warning(f"Image not found for deletion: {key}")
            return False

        try:
            file_path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete image {file_path}: {e}")
            raise StorageError(f"Failed to delete image: {e}")

        logger.info(f"Deleted image: {file_path}")
        return True

    def owns(self, image_url: str) -> bool:
        return bool(image_url) and image_url.startswith(self.url_prefix + "/")

    def key_for_url(self, image_url: str) -> str:
        return image_url

    def path_for(self, key: str) -> Path:
        """Filesystem path of a stored image."""
        return self._resolve(key)
