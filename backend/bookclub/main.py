"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from bookclub.api import router as api_router
from bookclub.core.config import get_settings
from bookclub.core.database import Base, SessionLocal, engine
from bookclub.core.exceptions import BookClubError, bookclub_error_handler
from bookclub.core.logging import get_logger, setup_logging
from bookclub.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from bookclub.models import *  # noqa: F401, F403
from bookclub.scripts.seed_database import seed_admin

settings = get_settings()

setup_logging()
logger = get_logger(__name__)

APP_VERSION = "1.0.0"


def init_sentry():
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.1 if settings.ENVIRONMENT == "production" else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        f"Starting {settings.APP_NAME}",
        extra={
            "extra_fields": {
                "environment": settings.ENVIRONMENT,
                "debug": settings.DEBUG,
            }
        },
    )

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables verified/created")

    if settings.SEED_ON_STARTUP:
        db = SessionLocal()
        try:
            seed_admin(db)
        finally:
            db.close()

    if settings.SENTRY_DSN:
        init_sentry()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")


app = FastAPI(
    title=settings.APP_NAME,
    description="Private book club: suggestions, voting, ratings and discussion questions",
    version=APP_VERSION,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan,
)

app.add_exception_handler(BookClubError, bookclub_error_handler)

# CORS middleware - must be added first (outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health_check():
    """Liveness probe for load balancers and monitoring."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health/ready")
async def readiness_check():
    """Readiness probe: the database answers a trivial query."""
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "disconnected"
    finally:
        db.close()

    return {
        "status": "ready" if db_status == "connected" else "not_ready",
        "checks": {"database": db_status},
    }


app.include_router(api_router, prefix=settings.API_V1_PREFIX)
