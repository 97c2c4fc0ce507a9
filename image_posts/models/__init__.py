"""Database models for the image posts service."""

from .db import Base, Post

__all__ = ["Base", "Post"]
