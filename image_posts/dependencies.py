"""FastAPI dependency injection configuration."""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from config import Settings, get_settings
from image_posts.db import get_db
from image_posts.repositories import (
    InMemoryPostRepository,
    PostDBRepository,
    PostRepository,
)
from image_posts.services import PostService
from image_posts.storage import CloudinaryImageBackend, ImageBackend, LocalImageBackend

logger = logging.getLogger(__name__)


# Global instance for in-memory repository
_in_memory_repository: InMemoryPostRepository | None = None

# Global instance for the image backend
_image_backend: ImageBackend | None = None


def create_image_backend(settings: Settings) -> ImageBackend:
    """Build the image backend selected by STORAGE_TYPE.

    - "local": LocalImageBackend, files served under STATIC_URL_PREFIX
    - "cloudinary": CloudinaryImageBackend, requires Cloudinary credentials

    Raises:
        ValueError: If cloudinary storage is selected without credentials.
    """
    if settings.storage_type == "cloudinary":
        return CloudinaryImageBackend(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            folder=settings.cloudinary_folder,
            max_upload_size=settings.max_upload_size,
        )

    return LocalImageBackend(
        storage_root=settings.storage_root,
        url_prefix=settings.static_url_prefix,
        max_upload_size=settings.max_upload_size,
    )


def get_post_repository(db: Session = Depends(get_db)) -> PostRepository:
    """Get the post repository selected by POST_STORAGE.

    - "memory": InMemoryPostRepository (data lost on restart)
    - "database": PostDBRepository (data persisted in database)
    """
    settings = get_settings()

    if settings.post_storage == "database":
        return PostDBRepository(db)

    global _in_memory_repository
    if _in_memory_repository is None:
        _in_memory_repository = InMemoryPostRepository()
        logger.info("Created in-memory repository for posts")
    return _in_memory_repository


def get_image_backend() -> ImageBackend:
    """Get the process-wide image backend, creating it on first use."""
    global _image_backend

    if _image_backend is None:
        settings = get_settings()
        _image_backend = create_image_backend(settings)
        logger.info(f"Created {settings.storage_type} image backend")

    return _image_backend


def get_post_service(
    repository: PostRepository = Depends(get_post_repository),
    image_backend: ImageBackend = Depends(get_image_backend),
) -> PostService:
    """Get a PostService bound to the request's repository."""
    return PostService(
        repository,
        image_backend,
        cleanup_orphaned_images=get_settings().cleanup_orphaned_images,
    )
