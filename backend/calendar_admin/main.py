"""FastAPI application entry point: middleware, routers, startup checks."""

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from calendar_admin.config import ConfigurationError, settings
from calendar_admin.database import Base, get_engine
import calendar_admin.models  # noqa: F401 - registers models on Base.metadata
from calendar_admin.middleware.error_handler import add_error_handlers
from calendar_admin.routers import admin, events
from calendar_admin.utils.schema_sync import sync_missing_schema_objects

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_TITLE,
    description="學校行事曆管理後端: 公開事件 API 與管理平台",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

add_error_handlers(app)

app.include_router(events.router)
app.include_router(admin.router)


@app.on_event("startup")
def ensure_schema():
    settings.validate_required()
    if settings.STORAGE_BACKEND != "sql":
        logger.info("Using JSON storage at %s", settings.EVENTS_JSON_PATH)
        return
    engine = get_engine()
    logger.info("Connecting to %s", engine.url.render_as_string(hide_password=True))
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection OK")
        # Create missing tables, then missing columns on older tables.
        Base.metadata.create_all(bind=engine)
        sync_missing_schema_objects(engine, Base.metadata)
    except SQLAlchemyError as exc:
        # Keep serving; requests report the storage failure individually.
        logger.error("Database unavailable at startup: %s", exc)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": settings.APP_TITLE}


def run():
    """Console entry point: validate configuration, then serve with uvicorn."""
    try:
        settings.validate_required()
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        sys.exit(1)

    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
