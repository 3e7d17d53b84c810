"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, and wires the identity store in lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from src.adapters.repository.json_file import JsonFileIdentityRepository
from src.adapters.security.bcrypt_hasher import BcryptPasswordHasher
from src.api.models import HealthResponse
from src.api.v1 import router as v1_router
from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Identity API v1 - Register, authenticate and manage users",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Loads the identity snapshot into a single repository instance
    - Builds the password hasher with the configured cost
    - Drops the in-memory store on shutdown (every mutation is already persisted)
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    logger.info("Starting application...")

    repository = JsonFileIdentityRepository(settings.users_file)
    repository.load()

    app.state.repository = repository
    app.state.hasher = BcryptPasswordHasher(rounds=settings.bcrypt_cost)

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    del app.state.repository


app = FastAPI(
    title="identity-core",
    description="Identity record storage and credential verification API",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint.

    Returns 200 OK with the number of loaded users.
    """
    repository = request.app.state.repository
    return HealthResponse(status="healthy", users=len(repository))
