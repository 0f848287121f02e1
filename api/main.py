"""Sketch2CAD FastAPI Application"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv
load_dotenv()  # Load .env file

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .routes import design, export, health

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


class ProxyHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to handle X-Forwarded-Proto for HTTPS redirects behind a reverse proxy."""

    async def dispatch(self, request: Request, call_next):
        if request.headers.get("x-forwarded-proto") == "https":
            request.scope["scheme"] = "https"
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler."""
    logger.info("Starting Sketch2CAD API...")
    config = design.get_pipeline_config()
    logger.info(
        f"Pipeline: stage timeout {config.stage_timeout_seconds:g}s, "
        f"queue size {config.queue_size}, lock enforcement {config.lock_enforcement}"
    )
    if design.get_orchestrator() is None:
        logger.warning("Model provider not configured; generation endpoints will return 503")
    yield
    logger.info("Shutting down Sketch2CAD API...")


app = FastAPI(
    title="Sketch2CAD",
    description="Text, sketch and photo to architectural CAD model API",
    version="0.1.0",
    lifespan=lifespan,
)

# Proxy headers middleware (must be added first)
app.add_middleware(ProxyHeadersMiddleware)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(design.router, prefix="/api/cad", tags=["Design"])
app.include_router(export.router, prefix="/api/export", tags=["Export"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Sketch2CAD",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs",
    }
