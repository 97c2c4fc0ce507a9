"""Post service coordinating the image backend and the post store."""

import logging
from typing import Optional

from image_posts.exceptions import BadRequestError, ImagePostsError
from image_posts.models.db import Post
from image_posts.repositories import PostRepository
from image_posts.storage.base import ImageBackend

logger = logging.getLogger(__name__)


class PostService:
    """Create, read and delete posts together with their images.

    Creation stores the image first and only then writes the post record.
    Deletion removes the image first (best effort) and then the record.
    Neither operation is atomic across the two stores.
    """

    def __init__(
        self,
        repository: PostRepository,
        image_backend: ImageBackend,
        cleanup_orphaned_images: bool = False,
    ):
        """Initialize the service.

        Args:
            repository: Store for post records.
            image_backend: Active image backend.
            cleanup_orphaned_images: Delete a freshly stored image again
                when the post record cannot be written. When disabled the
                image is left in place for manual reconciliation.
        """
        self.repository = repository
        self.image_backend = image_backend
        self.cleanup_orphaned_images = cleanup_orphaned_images

    async def create_post(
        self,
        title: Optional[str],
        description: Optional[str],
        content: bytes,
        filename: str,
        content_type: str,
    ) -> Post:
        """Store the image, then persist a post pointing at it.

        Raises:
            BadRequestError: If the image content is empty.
            PayloadTooLargeError: If the image exceeds the size ceiling.
            UnsupportedMediaTypeError: If the backend rejects the file type.
            StorageError: If the image cannot be stored.
            PostValidationError: If the title is missing.
            DatabaseError: If the post record cannot be written.
        """
        if not content:
            raise BadRequestError("Image file cannot be empty")

        logger.info(f"Storing image: {filename}, content length: {len(content)}")
        stored = await self.image_backend.store(content, filename, content_type)

        try:
            post = self.repository.create_post(
                title=title,
                image_url=stored.public_url,
                description=description,
                image_key=stored.key,
            )
        except ImagePostsError:
            if self.cleanup_orphaned_images:
                await self._discard_image(stored.key)
            else:
                logger.warning(f"Post creation failed, image left orphaned: {stored.public_url}")
            raise

        logger.info(f"Created post {post.id} with image {post.image_url}")
        return post

    def list_posts(self) -> list[Post]:
        return self.repository.list_posts()

    def get_post(self, post_id: str) -> Post:
        return self.repository.get_post(post_id)

    async def delete_post(self, post_id: str) -> None:
        """Delete a post and, best effort, its image.

        Raises:
            PostNotFoundError: If no post has this ID.
            InvalidPostIdError: If post_id is not a valid UUID.
            DatabaseError: If the post record cannot be deleted.
        """
        post = self.repository.get_post(post_id)

        if self.image_backend.owns(post.image_url):
            key = post.image_key or self.image_backend.key_for_url(post.image_url)
            await self._discard_image(key)
        else:
            logger.warning(
                f"Image {post.image_url} of post {post_id} is not owned by the active backend, skipping"
            )

        if not self.repository.delete_post(post_id):
            logger.info(f"Post {post_id} was already deleted")
        else:
            logger.info(f"Deleted post {post_id}")

    async def _discard_image(self, key: str) -> None:
        """Delete an image, logging instead of raising on failure."""
        try:
            deleted = await self.image_backend.delete(key)
        except Exception as e:
            logger.error(f"Failed to delete image {key}: {e}")
            return

        if deleted:
            logger.info(f"Deleted image {key}")
        else:
            logger.warning(f"Image {key} was already absent")
