"""Post-related Pydantic schemas for API responses."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PostResponse(BaseModel):
    """Response model for a single post.

    Serialized with camelCase keys (``imageUrl``, ``createdAt``).
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "550e8400-e29b-41d4-a716-446655440000",
                    "title": "Sunset",
                    "description": "Taken from the pier",
                    "imageUrl": "/uploads/image-1700000000000-9f86d081.jpg",
                    "createdAt": "2024-01-01T12:00:00Z"
                }
            ]
        }
    )

    id: UUID = Field(..., description="Unique identifier of the post")
    title: str = Field(..., description="Post title")
    description: Optional[str] = Field(None, description="Optional post description")
    image_url: str = Field(
        ...,
        alias="imageUrl",
        description="Root-relative static path or absolute URL of the post image"
    )
    created_at: datetime = Field(
        ...,
        alias="createdAt",
        description="Creation timestamp"
    )


class MessageResponse(BaseModel):
    """Plain acknowledgment message."""

    msg: str = Field(..., description="Human-readable message")
