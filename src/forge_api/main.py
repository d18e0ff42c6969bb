# src/forge_api/main.py
"""Main entry point for the Forge moderation API."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from forge_api.api.exception_handlers import setup_exception_handlers
from forge_api.api.v1 import (
    analytics_router,
    moderation_router,
    report_centre_router,
    reports_router,
    system_router,
    users_router,
    visitors_router,
)
from forge_api.core.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Forge API",
    description="Moderation, reporting and visitor tracking for The Forge",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

setup_exception_handlers(app)

# Include API routers
app.include_router(reports_router, prefix="/api/v1")
app.include_router(report_centre_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(visitors_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    logger.info("%s %s starting (cache backend: %s)", settings.app_name, settings.app_version, settings.cache_backend)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("forge_api.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
