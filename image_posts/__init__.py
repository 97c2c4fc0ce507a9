"""REST backend for image posts."""

__version__ = "0.1.0"
