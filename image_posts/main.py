import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from config import get_settings
from image_posts.db import init_db
from image_posts.dependencies import get_image_backend
from image_posts.routes import router as posts_router

# Get settings and configure logging before anything else
settings = get_settings()
settings.configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Storage type: {settings.storage_type}")

    if settings.post_storage == "database":
        init_db()

    # Build the image backend now so bad storage config fails at startup
    get_image_backend()

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(posts_router, prefix=settings.api_prefix)

if settings.storage_type == "local":
    settings.storage_root.mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.static_url_prefix,
        StaticFiles(directory=settings.storage_root),
        name="uploads",
    )
    logger.debug(f"Serving {settings.storage_root} under {settings.static_url_prefix}")


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    """Liveness message."""
    return f"{settings.app_name} is running"


@app.get("/health")
def health_check() -> dict[str, str]:
    """Simple health-check endpoint."""
    return {
        "status": "ok",
        "environment": settings.environment,
        "version": settings.app_version,
    }


@app.get("/config")
def get_config() -> dict[str, Any]:
    """Get current configuration (non-sensitive values only)."""
    return {
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "environment": settings.environment,
        "debug": settings.debug,
        "api_prefix": settings.api_prefix,
        "storage_type": settings.storage_type,
        "static_url_prefix": settings.static_url_prefix,
        "post_storage": settings.post_storage,
        "log_level": settings.log_level,
        "log_json": settings.log_json,
        "max_upload_size": settings.max_upload_size,
    }
