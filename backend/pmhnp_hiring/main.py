"""
FastAPI Main Application

Entry point for the PMHNP Hiring API server.
Configures routing, middleware, and application lifecycle events.
"""

from typing import Dict, Any
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError

from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.database import db_manager
from pmhnp_hiring.core.events import event_manager, INGESTION_SOURCE_COMPLETED
from pmhnp_hiring.core.exceptions import BaseApplicationException
from pmhnp_hiring.api.v1 import (
    jobs_router,
    companies_router,
    cron_router,
    stats_router,
    health_router,
    metrics_router,
)
from pmhnp_hiring.services.notifier import DiscordNotifier
from pmhnp_hiring.utils.logger import configure_logging, get_logger

# Initialize logger
logger = get_logger(__name__)

# Get application settings
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    logger.info("Starting PMHNP Hiring API...")

    owns_database = not db_manager.is_initialized
    if owns_database:
        try:
            await db_manager.init_database()
            await db_manager.create_tables()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    notifier = DiscordNotifier()
    if notifier.enabled:
        notifier.subscribe(event_manager)
        logger.info("Discord ingestion notifications enabled")

    yield

    logger.info("Shutting down PMHNP Hiring API...")
    event_manager.unsubscribe(INGESTION_SOURCE_COMPLETED, notifier.handle_ingestion_event)
    if owns_database:
        try:
            await db_manager.close_connections()
        except Exception as e:
            logger.warning(f"Error during shutdown: {e}")
    logger.info("Application shutdown complete")


# Create FastAPI application instance
app = FastAPI(
    title=settings.APP_NAME,
    description="Job ingestion and deduplication pipeline for psychiatric nurse practitioner listings",
    version=settings.VERSION,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=settings.CORS_CREDENTIALS,
    allow_methods=settings.get_cors_methods_list(),
    allow_headers=settings.get_cors_headers_list(),
)

# Include API routers
app.include_router(health_router, prefix="/api/v1")
app.include_router(jobs_router, prefix="/api/v1")
app.include_router(companies_router, prefix="/api/v1")
app.include_router(cron_router, prefix="/api/v1")
app.include_router(stats_router, prefix="/api/v1")
app.include_router(metrics_router)


@app.exception_handler(BaseApplicationException)
async def application_exception_handler(request: Request, exc: BaseApplicationException) -> JSONResponse:
    """Render application errors with their own status code."""
    if exc.http_status >= 500:
        logger.error(f"Application error: {exc.message}", error_code=exc.error_code, path=request.url.path)
    else:
        logger.warning(f"Request rejected: {exc.message}", error_code=exc.error_code, path=request.url.path)

    headers = {}
    if exc.retry_after is not None:
        headers["Retry-After"] = str(exc.retry_after)
    if exc.http_status == 429 and exc.details.get("limit") is not None:
        headers["X-RateLimit-Limit"] = str(exc.details["limit"])
        headers["X-RateLimit-Remaining"] = "0"
        if exc.details.get("reset_at") is not None:
            headers["X-RateLimit-Reset"] = str(exc.details["reset_at"])

    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.to_dict()},
        headers=headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": jsonable_encoder(exc.errors())
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    # Don't expose internal errors in production
    if settings.ENVIRONMENT == "production":
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc)
        }
    )


@app.get("/")
async def root() -> Dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "message": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "running",
        "health_url": "/api/v1/health",
        "metrics_url": "/metrics"
    }


if __name__ == "__main__":
    uvicorn.run(
        "pmhnp_hiring.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
