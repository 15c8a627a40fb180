"""FastAPI web application for the photo studio."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..core.config import Config, get_config
from ..core.logger import audit_log, get_logger
from ..database.engine import get_database_engine
from .errors import setup_exception_handlers
from .routes import admin, client, finances, galleries, instagram, public

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Photo Studio web application")

    db_engine = get_database_engine()
    await db_engine.create_all_tables()

    audit_log("APPLICATION_START")

    yield

    logger.info("Shutting down Photo Studio web application")
    await db_engine.close()
    audit_log("APPLICATION_STOP")


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Build the application with its middleware, handlers and routers."""
    config = config or get_config()

    app = FastAPI(
        title=config.app_name,
        description="Bookings, client galleries, invoicing and Instagram sync for a photography studio",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(public.router)
    app.include_router(admin.auth_router)
    app.include_router(admin.router)
    app.include_router(galleries.router)
    app.include_router(finances.router)
    app.include_router(instagram.router)
    app.include_router(client.router)

    downloads_dir = config.web.downloads_dir
    if downloads_dir and downloads_dir.is_dir():
        app.mount("/downloads", StaticFiles(directory=str(downloads_dir)), name="downloads")
        logger.info(f"Serving downloads from {downloads_dir}")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    @app.get("/")
    async def root():
        return {
            "name": config.app_name,
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()
