"""FastAPI application: main entry point."""

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from fansite.config import get_settings
from fansite.core.exceptions import register_exception_handlers
from fansite.core.logging import configure_logging
from fansite.core.middleware import setup_middleware
from fansite.infrastructure.database import get_db
from fansite.infrastructure.seed import seed_demo_data
from fansite.infrastructure.storage import VideoStorage

# Import routers
from fansite.interfaces.api.auth import router as auth_router
from fansite.interfaces.api.users import router as users_router
from fansite.interfaces.api.videos import router as videos_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)

APP_NAME = "Fan-site Media API"
APP_VERSION = "1.0.0"


class ThumbnailFiles(StaticFiles):
    """Static files limited to generated thumbnails; raw uploads stay behind the stream route."""

    async def get_response(self, path: str, scope):
        if not VideoStorage.is_thumbnail(Path(path).name):
            raise StarletteHTTPException(status_code=404)
        return await super().get_response(path, scope)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting fan-site media API", env=settings.ENVIRONMENT)

    (Path(settings.UPLOAD_DIR) / "videos").mkdir(parents=True, exist_ok=True)

    if settings.SEED_DEMO_DATA:
        seed_demo_data(get_db())

    yield

    logger.info("Fan-site media API stopped")


app = FastAPI(
    title=APP_NAME,
    description="Authentication and video library backend for the fan site",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Logging)
setup_middleware(app)

# Exception handling
register_exception_handlers(app)

# Added last so it runs first; the refresh cookie needs credentials allowed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Content-Range", "Accept-Ranges", "Content-Length"],
)

# Include routers
app.include_router(auth_router)
app.include_router(videos_router)
app.include_router(users_router)

# Thumbnails are written under UPLOAD_DIR/videos/<owner>/
app.mount("/uploads", ThumbnailFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/")
def root():
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}
