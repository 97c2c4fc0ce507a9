"""Unit tests for PostService."""

import logging
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from image_posts.exceptions import (
    BadRequestError,
    DatabaseError,
    PostNotFoundError,
    PostValidationError,
    StorageError,
    UnsupportedMediaTypeError,
)
from image_posts.repositories import InMemoryPostRepository
from image_posts.services import PostService
from image_posts.storage import StoredImage


@pytest.fixture
def repository():
    return InMemoryPostRepository()


@pytest.fixture
def backend():
    """Mock image backend owning URLs under /uploads."""
    backend = MagicMock()
    backend.store = AsyncMock(return_value=StoredImage("/uploads/image-1.jpg", "/uploads/image-1.jpg"))
    backend.delete = AsyncMock(return_value=True)
    backend.owns.side_effect = lambda url: url.startswith("/uploads/")
    backend.key_for_url.side_effect = lambda url: url
    return backend


@pytest.fixture
def service(repository, backend):
    return PostService(repository, backend)


class TestCreatePost:

    @pytest.mark.asyncio
    async def test_create_post_success(self, service, repository, backend):
        """Test that the image is stored before the post is written."""
        post = await service.create_post("T", None, b"img", "a.jpg", "image/jpeg")

        backend.store.assert_awaited_once_with(b"img", "a.jpg", "image/jpeg")
        assert post.title == "T"
        assert post.image_url == "/uploads/image-1.jpg"
        assert post.image_key == "/uploads/image-1.jpg"
        assert repository.count() == 1

    @pytest.mark.asyncio
    async def test_empty_content_rejected(self, service, repository, backend):
        with pytest.raises(BadRequestError, match="empty"):
            await service.create_post("T", None, b"", "a.jpg", "image/jpeg")

        backend.store.assert_not_awaited()
        assert repository.count() == 0

    @pytest.mark.asyncio
    async def test_backend_failure_creates_no_post(self, service, repository, backend):
        """Test that no post is written when the image cannot be stored."""
        backend.store.side_effect = StorageError("disk full")

        with pytest.raises(StorageError):
            await service.create_post("T", None, b"img", "a.jpg", "image/jpeg")

        assert repository.count() == 0

    @pytest.mark.asyncio
    async def test_unsupported_type_creates_no_post(self, service, repository, backend):
        backend.store.side_effect = UnsupportedMediaTypeError("Only image files are allowed")

        with pytest.raises(UnsupportedMediaTypeError):
            await service.create_post("T", None, b"img", "a.txt", "text/plain")

        assert repository.count() == 0

    @pytest.mark.asyncio
    async def test_store_failure_leaves_orphan_by_default(self, service, backend, caplog):
        """Test that the stored image is kept when the post cannot be written."""
        with caplog.at_level(logging.WARNING):
            with pytest.raises(PostValidationError):
                await service.create_post(None, None, b"img", "a.jpg", "image/jpeg")

        backend.delete.assert_not_awaited()
        assert "image left orphaned: /uploads/image-1.jpg" in caplog.text

    @pytest.mark.asyncio
    async def test_store_failure_cleans_up_when_enabled(self, backend):
        """Test compensating image deletion when cleanup is enabled."""
        repository = MagicMock()
        repository.create_post.side_effect = DatabaseError("connection lost")
        service = PostService(repository, backend, cleanup_orphaned_images=True)

        with pytest.raises(DatabaseError):
            await service.create_post("T", None, b"img", "a.jpg", "image/jpeg")

        backend.delete.assert_awaited_once_with("/uploads/image-1.jpg")


class TestReadPosts:

    def test_list_and_get_pass_through(self, service, repository):
        post = repository.create_post(title="T", image_url="/uploads/a.jpg")

        assert service.list_posts() == [post]
        assert service.get_post(str(post.id)) is post

    def test_get_missing(self, service):
        with pytest.raises(PostNotFoundError):
            service.get_post(str(uuid.uuid4()))


class TestDeletePost:

    @pytest.mark.asyncio
    async def test_delete_removes_image_then_post(self, service, repository, backend):
        post = repository.create_post(title="T", image_url="/uploads/a.jpg", image_key="/uploads/a.jpg")

        await service.delete_post(str(post.id))

        backend.delete.assert_awaited_once_with("/uploads/a.jpg")
        assert repository.count() == 0

    @pytest.mark.asyncio
    async def test_delete_derives_key_without_stored_key(self, service, repository, backend):
        """Test the URL-derived key fallback for posts without image_key."""
        post = repository.create_post(title="T", image_url="/uploads/legacy.jpg")

        await service.delete_post(str(post.id))

        backend.key_for_url.assert_called_once_with("/uploads/legacy.jpg")
        backend.delete.assert_awaited_once_with("/uploads/legacy.jpg")

    @pytest.mark.asyncio
    async def test_image_delete_failure_is_not_fatal(self, service, repository, backend, caplog):
        """Test that the post is removed even if the image delete fails."""
        backend.delete.side_effect = StorageError("permission denied")
        post = repository.create_post(title="T", image_url="/uploads/a.jpg")

        with caplog.at_level(logging.ERROR):
            await service.delete_post(str(post.id))

        assert repository.count() == 0
        assert "Failed to delete image /uploads/a.jpg" in caplog.text

    @pytest.mark.asyncio
    async def test_foreign_image_url_is_skipped(self, service, repository, backend):
        """Test that images not owned by the active backend are left alone."""
        post = repository.create_post(
            title="T",
            image_url="https://res.cloudinary.com/demo/image/upload/v1/image-posts/a.jpg",
        )

        await service.delete_post(str(post.id))

        backend.delete.assert_not_awaited()
        assert repository.count() == 0

    @pytest.mark.asyncio
    async def test_delete_missing_post(self, service, backend):
        with pytest.raises(PostNotFoundError):
            await service.delete_post(str(uuid.uuid4()))

        backend.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_race_already_removed(self, backend):
        """Test that a record removed between lookup and delete is not an error."""
        repository = MagicMock()
        repository.get_post.return_value = MagicMock(image_url="/uploads/a.jpg", image_key="/uploads/a.jpg")
        repository.delete_post.return_value = False
        service = PostService(repository, backend)

        await service.delete_post(str(uuid.uuid4()))

        repository.delete_post.assert_called_once()
