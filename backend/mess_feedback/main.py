"""
FastAPI application factory.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from mess_feedback.config import settings
from mess_feedback.database import Database
from mess_feedback.core.auth import check_signing_key
from mess_feedback.core.exceptions import register_exception_handlers
from mess_feedback.core.middleware import setup_middleware
from mess_feedback.models.feedback import utc_today
from mess_feedback.services.seed_service import SAMPLE_MENU, seed_admin, seed_menu, seed_roles
from mess_feedback.api.v1 import router as api_v1_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT,
)
log = logging.getLogger(__name__)


async def prepare_storage(database: Database) -> None:
    """Optionally create tables, then seed reference data. Safe to rerun."""
    if settings.DB_CREATE_TABLES:
        await database.create_all()
    async with database.session() as db:
        await seed_roles(db)
        if settings.SEED_DEFAULT_ADMIN:
            await seed_admin(db)
        if settings.SEED_SAMPLE_MENU:
            await seed_menu(db, utc_today(), SAMPLE_MENU)
    log.info("Database ready")


async def init_storage(database: Database) -> None:
    """Connect and prepare storage; if it is down, preparation waits for the first request."""
    database.connect()
    database.set_initializer(prepare_storage)
    if not await database.ping():
        log.error("Database unreachable at startup; requests will fail with 503 until it recovers")
        return
    await database.ensure_ready()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown logic."""
    # ── Startup ──────────────────────────────────────────
    log.info("Starting %s v%s (%s)", settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT)
    check_signing_key()
    database: Database = app.state.database
    await init_storage(database)
    yield
    # ── Shutdown ─────────────────────────────────────────
    log.info("Shutting down…")
    await database.dispose()


def create_app(database: Database | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Meal feedback collection and statistics for an institutional mess",
        lifespan=lifespan,
    )
    app.state.database = database or Database(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        connect_timeout=settings.DB_CONNECT_TIMEOUT,
    )

    # Middleware
    setup_middleware(app)

    # Exception handlers
    register_exception_handlers(app)

    # Routers
    app.include_router(api_v1_router, prefix="/api/v1")

    # Health check
    @app.get("/health", tags=["health"])
    async def health(request: Request):
        db: Database = request.app.state.database
        connected = db.is_connected and await db.ping()
        return {
            "status": "ok",
            "version": settings.APP_VERSION,
            "database": "connected" if connected else "disconnected",
        }

    return app


app = create_app()
