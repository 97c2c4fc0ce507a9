"""SQLAlchemy database models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text, TypeDecorator, Uuid
from sqlalchemy.orm import declarative_base

# Create the declarative base
Base = declarative_base()


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """DateTime stored as UTC and always loaded timezone-aware.

    SQLite drops the offset on storage, so naive values read back are UTC.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Post(Base):
    """Model representing a post with its associated image.

    The image itself lives in an image backend; the post only keeps the
    public URL and the key the backend needs to delete it later.
    """
    __tablename__ = "posts"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False
    )

    title = Column(String(255), nullable=False)

    description = Column(Text, nullable=True)

    # Root-relative static path (local backend) or absolute URL (cloud backend)
    image_url = Column(String, nullable=False)

    # Backend key returned by the upload, used for deletion
    image_key = Column(String, nullable=True)

    created_at = Column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
        index=True
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, title={self.title!r}, image_url={self.image_url})>"
