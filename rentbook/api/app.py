"""FastAPI application for the billing API."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rentbook.api.bills import router as bills_router
from rentbook.api.properties import router as properties_router
from rentbook.config import get_settings
from rentbook.services.db import init_models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create missing tables before serving requests."""
    await init_models()
    logger.info("Database tables ready")
    yield


settings = get_settings()

app = FastAPI(
    title=settings.api_title,
    description="Rental bills, payment claims and owner verification",
    version=settings.api_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(bills_router)
app.include_router(properties_router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {"status": "ok"}
