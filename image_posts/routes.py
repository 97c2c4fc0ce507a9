"""HTTP routes for posts."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from config import get_settings
from image_posts.dependencies import get_post_service
from image_posts.exceptions import (
    BadRequestError,
    DatabaseError,
    InvalidPostIdError,
    PayloadTooLargeError,
    PostNotFoundError,
    PostValidationError,
    StorageError,
    UnsupportedMediaTypeError,
)
from image_posts.schemas import MessageResponse, PostResponse
from image_posts.services import PostService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

SERVER_ERROR = "Server error"
POST_NOT_FOUND = "Post not found"


async def read_upload(image: UploadFile, limit: int) -> bytes:
    """Read an uploaded file, never buffering more than limit + 1 bytes.

    Raises:
        PayloadTooLargeError: If the declared or actual size exceeds limit.
    """
    if image.size is not None and image.size > limit:
        raise PayloadTooLargeError(image.size, limit)

    content = await image.read(limit + 1)
    if len(content) > limit:
        raise PayloadTooLargeError(len(content), limit)
    return content


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Create a post from an uploaded image.

    The image is stored by the active image backend before the post
    record is written. If the record cannot be written the image stays
    in storage unless CLEANUP_ORPHANED_IMAGES is enabled.

    Raises:
        HTTPException: 400 if the image is missing, empty or of an
            unsupported type, or the title is missing; 413 if the image
            is too large; 500 if storage or the database fails.
    """
    if image is None:
        raise HTTPException(
            status_code=400,
            detail='No image uploaded. Include an image file in the "image" field.'
        )

    try:
        content = await read_upload(image, get_settings().max_upload_size)
        post = await service.create_post(
            title=title,
            description=description,
            content=content,
            filename=image.filename or "",
            content_type=image.content_type or "",
        )
    except (BadRequestError, UnsupportedMediaTypeError, PostValidationError) as e:
        logger.warning(f"Rejected post upload: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except PayloadTooLargeError as e:
        logger.warning(f"Rejected post upload: {e}")
        raise HTTPException(status_code=413, detail=str(e))
    except (StorageError, DatabaseError) as e:
        logger.error(f"Failed to create post: {e}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

    return PostResponse.model_validate(post)


@router.get("", response_model=list[PostResponse])
async def list_posts(
    service: PostService = Depends(get_post_service),
) -> list[PostResponse]:
    """List all posts, newest first."""
    try:
        posts = service.list_posts()
    except DatabaseError as e:
        logger.error(f"Failed to list posts: {e}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

    logger.info(f"Listing {len(posts)} posts.")
    return [PostResponse.model_validate(post) for post in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Get a single post.

    Unknown and malformed IDs both return 404.
    """
    try:
        post = service.get_post(post_id)
    except (PostNotFoundError, InvalidPostIdError) as e:
        logger.warning(str(e))
        raise HTTPException(status_code=404, detail=POST_NOT_FOUND)
    except DatabaseError as e:
        logger.error(f"Failed to load post {post_id}: {e}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

    return PostResponse.model_validate(post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    service: PostService = Depends(get_post_service),
) -> MessageResponse:
    """Delete a post and its image.

    A failure to delete the image is logged and does not prevent
    the post from being removed.
    """
    try:
        await service.delete_post(post_id)
    except (PostNotFoundError, InvalidPostIdError) as e:
        logger.warning(str(e))
        raise HTTPException(status_code=404, detail=POST_NOT_FOUND)
    except DatabaseError as e:
        logger.error(f"Failed to delete post {post_id}: {e}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

    return MessageResponse(msg="Post removed")
