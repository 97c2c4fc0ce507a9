"""Shared fixtures for the image posts tests."""
import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from image_posts.db import get_db
from image_posts.dependencies import get_image_backend
from image_posts.main import app
from image_posts.models import Base
from image_posts.storage import LocalImageBackend


def create_test_image(width: int = 10, height: int = 10, seed: int = 0, fmt: str = "JPEG") -> bytes:
    """Create a small test image.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Seed for generating different colored images.
        fmt: Pillow format name (JPEG, PNG, GIF).

    Returns:
        bytes: Encoded image data.
    """
    color = ((seed * 50) % 256, (seed * 100) % 256, (seed * 150) % 256)
    img = Image.new("RGB", (width, height), color=color)

    img_bytes = io.BytesIO()
    img.save(img_bytes, format=fmt)
    return img_bytes.getvalue()


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database session shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def image_backend(tmp_path):
    """Create a LocalImageBackend writing into a temporary directory."""
    return LocalImageBackend(storage_root=tmp_path / "uploads", url_prefix="/uploads")


@pytest.fixture
def client(db_session, image_backend):
    """Test client with the database and image backend overridden."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_image_backend] = lambda: image_backend

    yield TestClient(app)

    app.dependency_overrides.clear()
