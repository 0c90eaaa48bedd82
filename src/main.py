"""FastAPI application entry point for the SACCO fraud monitor."""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware.error_handler import HANDLED_EXCEPTIONS, global_exception_handler
from src.api.middleware.logging import StructuredLoggingMiddleware
from src.api.routes.fraud import router as fraud_router
from src.api.routes.health import router as health_router
from src.api.routes.members import router as members_router
from src.api.routes.transactions import router as transactions_router
from src.config import settings
from src.db.database import Database
from src.domains.fraud.scorer import FraudScorer
from src.shared.logging import setup_logging

logger = structlog.get_logger()

# Track app start time for uptime calculation
APP_START_TIME: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown logic."""
    global APP_START_TIME
    APP_START_TIME = time.time()
    setup_logging(settings.log_level)

    logger.info(
        "sacco_fraud_monitor_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
    )

    db = Database.from_settings(settings)
    db.connect()
    await db.create_all()
    app.state.db = db

    yield

    await db.dispose()
    logger.info("sacco_fraud_monitor_shutting_down")


app = FastAPI(
    title="SACCO Fraud Monitor",
    description="Member transactions and fraud alerting for savings cooperatives",
    version=settings.app_version,
    lifespan=lifespan,
)

# The scorer holds no connections; it uses the request's session
app.state.scorer = FraudScorer(timezone=settings.timezone)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Structured logging middleware
app.add_middleware(StructuredLoggingMiddleware)

# Domain errors map to 4xx; everything else becomes a 500
for exc_class in HANDLED_EXCEPTIONS:
    app.add_exception_handler(exc_class, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Register routers
app.include_router(health_router)
app.include_router(members_router)
app.include_router(transactions_router)
app.include_router(fraud_router)


def get_uptime() -> int:
    """Get application uptime in seconds."""
    if APP_START_TIME == 0.0:
        return 0
    return int(time.time() - APP_START_TIME)
