"""Pydantic schemas for request/response validation."""

from .post import MessageResponse, PostResponse

__all__ = ["PostResponse", "MessageResponse"]
