"""Tests for the Pydantic response schemas."""

import uuid

from image_posts.models import Post
from image_posts.models.db import utcnow
from image_posts.schemas import MessageResponse, PostResponse


def test_post_response_from_model():
    """Test that a Post model serializes with camelCase keys."""
    post = Post(
        id=uuid.uuid4(),
        title="T",
        description=None,
        image_url="/uploads/image-1.jpg",
        image_key="/uploads/image-1.jpg",
        created_at=utcnow(),
    )

    data = PostResponse.model_validate(post).model_dump(by_alias=True, mode="json")

    assert set(data) == {"id", "title", "description", "imageUrl", "createdAt"}
    assert data["id"] == str(post.id)
    assert data["imageUrl"] == "/uploads/image-1.jpg"
    assert data["description"] is None


def test_post_response_accepts_field_names():
    response = PostResponse(
        id=uuid.uuid4(),
        title="T",
        image_url="https://res.cloudinary.com/demo/image/upload/a.jpg",
        created_at=utcnow(),
    )
    assert response.image_url.startswith("https://")


def test_post_repr():
    post = Post(id=uuid.uuid4(), title="T", image_url="/uploads/a.jpg")
    assert "title='T'" in repr(post)


def test_message_response():
    assert MessageResponse(msg="Post removed").model_dump() == {"msg": "Post removed"}
