"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from sqlalchemy import text

from poligraph.config import get_settings
from poligraph.db.session import SessionLocal
from poligraph.log_config import configure_logging
from poligraph.routers import affairs, identity

logger = logging.getLogger(__name__)


def _check_database() -> None:
    """Ping the database at process start."""

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database ping failed; continuing without startup check.")


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(level=get_settings().log_level)
    _check_database()
    yield


app = FastAPI(title=get_settings().app_name, version="0.1.0", lifespan=lifespan)

app.include_router(identity.router, tags=["identity"])
app.include_router(affairs.router, tags=["affairs"])


@app.get("/health")
def health() -> dict[str, str]:
    """Simple health check endpoint."""

    return {"status": "ok"}
