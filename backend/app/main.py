"""
Main FastAPI application entry point.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api import router as api_router
from app.core.config import get_settings
from app.core.database import get_db
from app.core.exceptions import register_exception_handlers
from app.core.logging import get_logger, setup_logging
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)

settings = get_settings()

# Set up logging
setup_logging()
logger = get_logger(__name__)

STARTED_AT = time.monotonic()


def init_database() -> None:
    """Create missing tables and seed the starter catalog when it is empty."""
    from app import models  # noqa: F401  registers every table on Base.metadata
    from app.core.database import Base, SessionLocal, engine
    from app.scripts.seed_database import seed_if_empty

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables verified/created")

    if settings.AUTO_SEED:
        db = SessionLocal()
        try:
            seed_if_empty(db)
        finally:
            db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(
        f"Starting {settings.APP_NAME}",
        extra={
            "extra_fields": {
                "environment": settings.ENVIRONMENT,
                "debug": settings.DEBUG,
                "version": settings.VERSION,
            }
        },
    )

    try:
        init_database()
    except SQLAlchemyError as e:
        # Serve anyway; /health reports the database as disconnected
        logger.error(f"Failed to initialize database: {e}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}")


app = FastAPI(
    title=settings.APP_NAME,
    description="Track books, write reviews and follow other readers",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan,
)

register_exception_handlers(app)

# CORS middleware - must be added first (outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Add other middleware
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)


def _database_status(db: Session) -> str:
    try:
        db.execute(text("SELECT 1"))
        return "connected"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return "disconnected"


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint for load balancers and monitoring.

    Always answers 200; the database field reports connectivity.
    """
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "database": _database_status(db),
        "uptime_seconds": round(time.monotonic() - STARTED_AT, 1),
        "timestamp": datetime.utcnow().isoformat(),
    }


@app.get("/health/ready")
async def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness check endpoint.

    Verifies the application can handle requests (database connected).
    """
    db_status = _database_status(db)
    status = "ready" if db_status == "connected" else "not_ready"

    return {
        "status": status,
        "checks": {
            "database": db_status,
        },
    }


# Include API routes
app.include_router(api_router, prefix=settings.API_V1_PREFIX)
