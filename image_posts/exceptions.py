"""Exception types raised by the store, the image backends and the service."""


class ImagePostsError(Exception):
    """Base exception for all image posts errors."""
    pass


class PostValidationError(ImagePostsError):
    """A required post field is missing or blank."""
    pass


class BadRequestError(ImagePostsError):
    """The request is missing the image upload or the upload is empty."""
    pass


class UnsupportedMediaTypeError(ImagePostsError):
    """The uploaded file is not an accepted image type."""
    pass


class PayloadTooLargeError(ImagePostsError):
    """The uploaded file exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Image is {size} bytes, limit is {limit} bytes")


class PostNotFoundError(ImagePostsError):
    """No post exists for the given ID."""

    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__(f"Post with ID {post_id} not found")


class InvalidPostIdError(ImagePostsError):
    """The given post ID is not a valid UUID."""

    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__(f"Invalid post ID: {post_id}")


class StorageError(ImagePostsError):
    """Disk or cloud I/O failure in an image backend."""
    pass


class DatabaseError(ImagePostsError):
    """A round trip to the post store failed."""
    pass
