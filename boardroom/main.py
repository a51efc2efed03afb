"""
AI Board of Directors API - FastAPI Application

Main entry point for the API server.
Run with: uvicorn boardroom.main:app --reload
"""

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from boardroom.config.settings import settings
from boardroom.config.database import init_db
from boardroom.endpoints import api_router
from boardroom.endpoints.chat_websocket import router as ws_router
from boardroom.middleware.auth import AuthMiddleware
from boardroom.middleware.error_handler import setup_exception_handlers
from boardroom.middleware.logging import LoggingMiddleware, configure_logging

# Configure structured logging
configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(
        "Starting AI Board of Directors API",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        environment=settings.ENVIRONMENT,
    )

    # Schema comes from alembic in production; create tables for dev and SQLite
    if settings.DEBUG or settings.is_sqlite:
        logger.info("Initializing database tables")
        try:
            init_db()
        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))

    yield

    logger.info("Shutting down AI Board of Directors API")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Chat with a board of AI advisors, each with its own personality",
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Setup exception handlers
setup_exception_handlers(app)

# Middleware added last runs first: CORS, then request logging, then auth.
# Auth sits inside logging so the log line carries the user id.
app.add_middleware(AuthMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api/v1")

# WebSocket routes authenticate from the token query param or cookie
app.include_router(ws_router, prefix="/api/v1")

# Uploaded media is served straight from disk
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/health")
async def root_health():
    """Simple health check for load balancer."""
    return {"status": "ok", "version": settings.APP_VERSION}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/api/docs" if settings.DEBUG else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "boardroom.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
