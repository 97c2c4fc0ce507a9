"""Application settings and configuration."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(
        default="Image Posts API",
        description="Application name"
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version"
    )
    environment: Literal["local", "dev", "stage", "prod"] = Field(
        default="local",
        description="Deployment environment"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # API Configuration
    api_prefix: str = Field(
        default="/api",
        description="API route prefix"
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    # Server Configuration
    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to"
    )
    port: int = Field(
        default=5000,
        description="Port the HTTP server listens on"
    )
    worker_count: int = Field(
        default=1,
        description="Number of worker processes"
    )

    # Image Storage Configuration
    storage_type: Literal["local", "cloudinary"] = Field(
        default="local",
        description="Storage backend type for post images"
    )
    storage_root: Path = Field(
        default=Path("uploads"),
        description="Root directory for local image storage"
    )
    static_url_prefix: str = Field(
        default="/uploads",
        description="URL prefix under which locally stored images are served"
    )
    max_upload_size: int = Field(
        default=5 * 1024 * 1024,  # 5MB
        description="Maximum image upload size in bytes, shared by all storage backends"
    )
    cleanup_orphaned_images: bool = Field(
        default=False,
        description="Delete an uploaded image again when saving its post fails"
    )

    @field_validator("storage_root", mode="before")
    @classmethod
    def resolve_storage_path(cls, v: str | Path) -> Path:
        """Ensure storage root is a Path object."""
        if isinstance(v, str):
            return Path(v)
        return v

    @field_validator("static_url_prefix")
    @classmethod
    def normalize_static_prefix(cls, v: str) -> str:
        """Ensure the static prefix is root-relative without a trailing slash."""
        v = "/" + v.strip("/")
        return v

    # Cloudinary Configuration
    cloudinary_cloud_name: Optional[str] = Field(
        default=None,
        description="Cloudinary cloud name"
    )
    cloudinary_api_key: Optional[str] = Field(
        default=None,
        description="Cloudinary API key"
    )
    cloudinary_api_secret: Optional[str] = Field(
        default=None,
        description="Cloudinary API secret"
    )
    cloudinary_folder: str = Field(
        default="image-posts",
        description="Cloudinary folder that uploaded images are placed in"
    )

    # Post Storage Configuration
    post_storage: Literal["memory", "database"] = Field(
        default="database",
        description="Storage backend for post records"
    )
    database_url: str = Field(
        default="sqlite:///data/posts.sqlite3",
        description="Database connection URL"
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements (for debugging)"
    )

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Path to log file (if None, logs to stdout only)"
    )

    @property
    def log_level_numeric(self) -> int:
        """Get numeric log level."""
        return getattr(logging, self.log_level)

    def configure_logging(self) -> None:
        """Configure logging based on settings."""
        import sys

        handlers: list[logging.Handler] = []

        console_handler = logging.StreamHandler(sys.stdout)
        handlers.append(console_handler)

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file)
            handlers.append(file_handler)

        if self.log_json:
            import json

            class JSONFormatter(logging.Formatter):
                def format(self, record: logging.LogRecord) -> str:
                    log_obj = {
                        "timestamp": self.formatTime(record),
                        "level": record.levelname,
                        "logger": record.name,
                        "message": record.getMessage(),
                        "module": record.module,
                        "function": record.funcName,
                        "line": record.lineno,
                    }
                    if record.exc_info:
                        log_obj["exception"] = self.formatException(record.exc_info)
                    return json.dumps(log_obj)

            formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(self.log_format)

        for handler in handlers:
            handler.setFormatter(formatter)

        logging.basicConfig(
            level=self.log_level_numeric,
            handlers=handlers,
            force=True,
        )

        if self.debug:
            logging.getLogger("image_posts").setLevel(logging.DEBUG)
        else:
            # The Cloudinary SDK logs every request through urllib3
            logging.getLogger("urllib3").setLevel(logging.WARNING)
            logging.getLogger("httpx").setLevel(logging.WARNING)

    @property
    def cloudinary_configured(self) -> bool:
        """Whether all Cloudinary credentials are present."""
        return all((
            self.cloudinary_cloud_name,
            self.cloudinary_api_key,
            self.cloudinary_api_secret,
        ))


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
