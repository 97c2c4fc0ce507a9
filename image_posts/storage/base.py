"""Image backend interface for post image persistence."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from image_posts.exceptions import PayloadTooLargeError

# Form field the image must be uploaded under
IMAGE_FIELD_NAME = "image"


@dataclass(frozen=True)
class StoredImage:
    """Result of storing an image in a backend.

    Attributes:
        public_url: URL clients use to fetch the image.
        key: Backend-internal key used to delete the image later.
    """
    public_url: str
    key: str


@runtime_checkable
class ImageBackend(Protocol):
    """Abstract interface for post image storage.

    Implementations can use various backends such as the local filesystem
    or a cloud media host. Exactly one backend is active per process,
    chosen from configuration at startup.
    """

    async def store(self, content: bytes, filename: str, content_type: str) -> StoredImage:
        """Store image content.

        Args:
            content: Raw image bytes to store.
            filename: Original filename of the upload.
            content_type: MIME type reported for the upload.

        Returns:
            StoredImage: Public URL and deletion key for the stored image.

        Raises:
            PayloadTooLargeError: If the content exceeds the size ceiling.
            UnsupportedMediaTypeError: If the backend rejects the file type.
            StorageError: If the image cannot be saved.
        """
        ...

    async def delete(self, key: str) -> bool:
        """Delete a stored image.

        Args:
            key: Key returned by ``store``.

        Returns:
            bool: True if the image was deleted, False if it was already absent.

        Raises:
            StorageError: If the image exists but cannot be deleted.
        """
        ...

    def owns(self, image_url: str) -> bool:
        """Check whether an image URL points into this backend."""
        ...

    def key_for_url(self, image_url: str) -> str:
        """Derive the deletion key for an image URL issued by this backend."""
        ...


def check_size(content: bytes, max_size: int) -> None:
    """Raise PayloadTooLargeError if content is larger than max_size bytes."""
    if len(content) > max_size:
        raise PayloadTooLargeError(len(content), max_size)
