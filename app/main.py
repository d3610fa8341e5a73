from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_api_settings
from app.schemas.royalty_summary import HealthResponse

logger = logging.getLogger(__name__)

_NUMERIC_SETTINGS: tuple[str, ...] = (
    "ROYALTY_SUMMARY_BATCH_SIZE",
    "ROYALTY_SUMMARY_DISTRIBUTION_PLACES",
    "ROYALTY_SUMMARY_MONTHLY_PLACES",
    "ROYALTY_SUMMARY_AMOUNT_PLACES",
)


def _validate_env() -> None:
    """
    Fail fast on configuration the summary engine cannot run with.

    Every problem is collected and raised together as one RuntimeError:
    - a PostgreSQL URL must resolve from DATABASE_URL, CLOUD_DATABASE_URL or
      LOCAL_DATABASE_URL;
    - numeric ROYALTY_SUMMARY_* overrides must be non-negative integers.
    """

    from db.config import load_database_settings

    errors: list[str] = []

    try:
        load_database_settings()
    except RuntimeError as exc:
        errors.append(str(exc))

    for name in _NUMERIC_SETTINGS:
        raw_value = os.getenv(name)
        if raw_value is not None and not raw_value.strip().isdigit():
            errors.append(f"{name}='{raw_value}' is not a non-negative integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
        )


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _verify_database() -> None:
    """
    Ping the database and require every summary table to exist.

    Migrations are never applied here; a missing table aborts startup with
    the list of absent tables.
    """

    import db.models  # noqa: F401 registers the summary tables on Base.metadata
    from db.base import Base
    from db.session import get_engine

    engine = get_engine()
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            present = set(inspect(connection).get_table_names())
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - present)
    if missing:
        logger.critical(
            "Schema mismatch missing_tables=%s. Run 'alembic upgrade head' and restart.",
            ", ".join(missing),
        )
        raise RuntimeError(f"Schema mismatch: missing tables {', '.join(missing)}.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _verify_database()
    logger.info("Database connectivity and schema confirmed")
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    settings = get_api_settings()
    application = FastAPI(
        title=settings.title,
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import royalty_summary_router

    application.include_router(royalty_summary_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(status="ok", service=settings.title)

    return application


app = create_app()
