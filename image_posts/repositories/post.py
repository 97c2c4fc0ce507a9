"""Post repository for managing post records."""

import logging
import uuid
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from image_posts.exceptions import (
    DatabaseError,
    InvalidPostIdError,
    PostNotFoundError,
    PostValidationError,
)
from image_posts.models.db import Post, utcnow

logger = logging.getLogger(__name__)


def parse_post_id(post_id: str | uuid.UUID) -> uuid.UUID:
    """Parse a post ID into a UUID.

    Raises:
        InvalidPostIdError: If the value is not a valid UUID.
    """
    if isinstance(post_id, uuid.UUID):
        return post_id
    try:
        return uuid.UUID(str(post_id))
    except ValueError:
        raise InvalidPostIdError(str(post_id))


def _clean_fields(
    title: Optional[str],
    image_url: Optional[str],
    description: Optional[str],
) -> tuple[str, str, Optional[str]]:
    """Trim text fields and enforce the required ones."""
    title = (title or "").strip()
    if not title:
        raise PostValidationError("Post title is required")

    image_url = (image_url or "").strip()
    if not image_url:
        raise PostValidationError("Post image URL is required")

    if description is not None:
        description = description.strip() or None

    return title, image_url, description


class PostRepository(Protocol):
    """Interface for post storage.

    Implementations can use various backends such as in-memory or database.
    """

    def create_post(
        self,
        title: str,
        image_url: str,
        description: Optional[str] = None,
        image_key: Optional[str] = None,
    ) -> Post:
        """Create and persist a new post.

        Args:
            title: Post title, trimmed; must not be blank.
            image_url: Public URL of the post image; must not be blank.
            description: Optional description, trimmed.
            image_key: Backend key used to delete the image later.

        Returns:
            Post: The stored post with ``id`` and ``created_at`` assigned.

        Raises:
            PostValidationError: If title or image_url is missing or blank.
        """
        ...

    def list_posts(self) -> list[Post]:
        """Return all posts, most recent first."""
        ...

    def get_post(self, post_id: str) -> Post:
        """Get a post by its ID.

        Raises:
            PostNotFoundError: If no post has this ID.
            InvalidPostIdError: If post_id is not a valid UUID.
        """
        ...

    def delete_post(self, post_id: str) -> bool:
        """Delete a post.

        Returns:
            bool: True if the post was deleted, False if it was already absent.

        Raises:
            InvalidPostIdError: If post_id is not a valid UUID.
        """
        ...

    def count(self) -> int:
        """Get the total number of posts."""
        ...


class InMemoryPostRepository(PostRepository):
    """In-memory implementation of PostRepository.

    Data is not persisted and will be lost when the application restarts.
    Suitable for development and testing.
    """

    def __init__(self):
        """Initialize the in-memory repository."""
        self._storage: dict[uuid.UUID, Post] = {}
        logger.info("Initialized InMemoryPostRepository")

    def create_post(
        self,
        title: str,
        image_url: str,
        description: Optional[str] = None,
        image_key: Optional[str] = None,
    ) -> Post:
        title, image_url, description = _clean_fields(title, image_url, description)

        post = Post(
            id=uuid.uuid4(),
            title=title,
            description=description,
            image_url=image_url,
            image_key=image_key,
            created_at=utcnow(),
        )
        self._storage[post.id] = post
        logger.debug(f"Added post: {post.id}")
        return post

    def list_posts(self) -> list[Post]:
        return sorted(self._storage.values(), key=lambda p: p.created_at, reverse=True)

    def get_post(self, post_id: str) -> Post:
        key = parse_post_id(post_id)
        if key not in self._storage:
            raise PostNotFoundError(str(post_id))
        return self._storage[key]

    def delete_post(self, post_id: str) -> bool:
        key = parse_post_id(post_id)
        if self._storage.pop(key, None) is None:
            logger.warning(f"Cannot delete non-existent post: {post_id}")
            return False
        logger.debug(f"Deleted post: {post_id}")
        return True

    def count(self) -> int:
        return len(self._storage)

    def clear(self) -> None:
        """Clear all entries from the repository.

        This is mainly useful for testing purposes.
        """
        self._storage.clear()
        logger.debug("Cleared all posts from repository")


class PostDBRepository(PostRepository):
    """SQLAlchemy-based implementation of PostRepository.

    Data is persisted and will survive application restarts.
    Any SQLAlchemy failure is rolled back and surfaced as DatabaseError.
    """

    def __init__(self, db: Session):
        """Initialize the repository with a database session.

        Args:
            db: SQLAlchemy session for database operations
        """
        self.db = db

    def create_post(
        self,
        title: str,
        image_url: str,
        description: Optional[str] = None,
        image_key: Optional[str] = None,
    ) -> Post:
        title, image_url, description = _clean_fields(title, image_url, description)

        try:
            post = Post(
                id=uuid.uuid4(),
                title=title,
                description=description,
                image_url=image_url,
                image_key=image_key,
                created_at=utcnow(),
            )
            self.db.add(post)
            self.db.commit()
            self.db.refresh(post)

            logger.info(f"Created post record: {post.id}")
            return post

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create post: {e}")
            raise DatabaseError(f"Failed to create post: {e}") from e

    def list_posts(self) -> list[Post]:
        try:
            posts = self.db.query(Post).order_by(Post.created_at.desc()).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to list posts: {e}")
            raise DatabaseError(f"Failed to list posts: {e}") from e

        logger.debug(f"Found {len(posts)} posts")
        return posts

    def get_post(self, post_id: str) -> Post:
        post = self._get_post(parse_post_id(post_id))
        if post is None:
            logger.debug(f"Post not found: {post_id}")
            raise PostNotFoundError(str(post_id))
        return post

    def delete_post(self, post_id: str) -> bool:
        post = self._get_post(parse_post_id(post_id))
        if post is None:
            logger.warning(f"Cannot delete non-existent post: {post_id}")
            return False

        try:
            self.db.delete(post)
            self.db.commit()
            logger.info(f"Deleted post: {post_id}")
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete post {post_id}: {e}")
            raise DatabaseError(f"Failed to delete post: {e}") from e

    def count(self) -> int:
        try:
            return self.db.query(Post).count()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"Failed to count posts: {e}") from e

    def _get_post(self, post_id: uuid.UUID) -> Optional[Post]:
        """Internal method to retrieve a post by its parsed ID."""
        try:
            return self.db.query(Post).filter(Post.id == post_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to load post {post_id}: {e}")
            raise DatabaseError(f"Failed to load post: {e}") from e
