# src/campus_connect/main.py
"""Main entry point for the Campus Connect application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from campus_connect.api.errors import install_error_handlers
from campus_connect.api.v1 import (
    admin_router,
    auth_router,
    clubs_router,
    events_router,
    flags_router,
    memberships_router,
    users_router,
)
from campus_connect.core.settings import settings
from campus_connect.db.session import create_tables, engine

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Clubs, events and moderation for a campus community",
    version=settings.app_version,
    debug=settings.debug,
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

install_error_handlers(app)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(clubs_router, prefix="/api/v1")
app.include_router(memberships_router, prefix="/api/v1")
app.include_router(events_router, prefix="/api/v1")
app.include_router(flags_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    # Postgres schemas are managed by Alembic; local SQLite files are created in place.
    if engine.dialect.name == "sqlite":
        create_tables()


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

    uvicorn.run("campus_connect.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
