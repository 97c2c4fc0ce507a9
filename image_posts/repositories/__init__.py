"""Repository implementations for data access."""

from .post import InMemoryPostRepository, PostDBRepository, PostRepository

__all__ = [
    "PostRepository",
    "InMemoryPostRepository",
    "PostDBRepository",
]
