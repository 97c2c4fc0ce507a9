"""Service layer."""

from .posts import PostService

__all__ = ["PostService"]
