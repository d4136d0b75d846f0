"""
FastAPI application entry point.
Sets up the attachments gateway with lifespan events for database and
identity provider initialization.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from gateway.config import settings
from gateway.database import init_db
from gateway.api import attachments
from gateway.api.router import api_router
from gateway.api.responses import register_exception_handlers
from gateway.auth.firebase import initialize_firebase
from gateway.middleware.metrics_middleware import MetricsMiddleware
from gateway.storage.object_client import close_object_client
from gateway.utils.logging import configure_logging

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: logging, database tables, Firebase Admin SDK
    - Shutdown: close the object store connection pool
    """
    configure_logging('attachments-api', settings.log_level)

    await init_db()

    # Skip if Firebase config not provided (local dev without Firebase)
    if settings.firebase_project_id:
        try:
            initialize_firebase()
        except Exception as e:
            if settings.environment == "production":
                raise
            logger.warning(f"Firebase initialization failed: {e}")

    yield

    await close_object_client()


app = FastAPI(
    title="Note Attachments Gateway",
    description="Signed uploads and deletes of note attachments to S3-compatible storage",
    version=VERSION,
    lifespan=lifespan
)

# CORS middleware (browser preflights carrying an Origin header)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_allow_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (must be after CORS to track all requests)
app.add_middleware(MetricsMiddleware)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api")
app.include_router(attachments.router, tags=["attachments"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Note Attachments Gateway",
        "version": VERSION,
        "environment": settings.environment
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
