"""Expose the Default Alive or Dead FastAPI app and enforce local development CORS defaults."""

import logging
import os
import re
from contextlib import asynccontextmanager
from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .migrations import run_database_migrations
from .routers import (
    admin_activity_router,
    announcements_admin_router,
    announcements_router,
    auth_router,
    default_alive_router,
    financial_entries_router,
    payments_router,
    pricing_tiers_router,
)

LOGGER = logging.getLogger(__name__)

LOCAL_DEVELOPMENT_ORIGIN = "http://localhost:5173"
LOCAL_DEVELOPMENT_ORIGINS = {
    LOCAL_DEVELOPMENT_ORIGIN,
    "http://localhost:5174",
}
LOCALHOST_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$"

DEFAULT_ALLOWED_ORIGINS = {
    *LOCAL_DEVELOPMENT_ORIGINS,
    "http://127.0.0.1:5173",
    "http://0.0.0.0:5173",
    "http://127.0.0.1:5174",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
}

STARTUP_MIGRATIONS_ENV = "ENABLE_STARTUP_MIGRATIONS"
DEFAULT_ALIVE_PREFIX = "/default-alive-or-dead"


def _normalize_origin(origin: str) -> str | None:
    stripped = origin.strip()
    if not stripped:
        return None
    return stripped.rstrip("/")


def _read_allowed_origins(raw_origins: Iterable[str]) -> list[str]:
    normalized = {_normalize_origin(origin) for origin in raw_origins}
    return sorted({origin for origin in normalized if origin})


def _split_raw_origins(raw_value: str) -> list[str]:
    """Split a raw origin string using commas or whitespace as separators."""

    return [origin for origin in re.split(r"[\s,]+", raw_value) if origin]


def _load_allowed_origins_from_env() -> list[str]:
    raw_value = os.getenv("BACKEND_ALLOWED_ORIGINS")
    if not raw_value:
        return []
    return _read_allowed_origins(_split_raw_origins(raw_value))


def _resolve_allowed_origins() -> list[str]:
    env_origins = _load_allowed_origins_from_env()
    if env_origins:
        origins = list(env_origins)
    else:
        origins = _read_allowed_origins(DEFAULT_ALLOWED_ORIGINS)

    missing_dev_origins = [
        origin for origin in LOCAL_DEVELOPMENT_ORIGINS if origin not in origins
    ]
    if missing_dev_origins:
        # The Vite dev server origins are always allowed.
        origins = _read_allowed_origins([*origins, *missing_dev_origins])

    return origins


def _read_bool_env(name: str, default: bool = True) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def ensure_database_is_ready() -> None:
    """Apply pending database migrations when the service starts."""

    if not _read_bool_env(STARTUP_MIGRATIONS_ENV, True):
        LOGGER.info("Startup migrations disabled via %s", STARTUP_MIGRATIONS_ENV)
        return
    LOGGER.info("Ensuring database schema is up to date before serving requests")
    run_database_migrations()


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_database_is_ready()
    yield


app = FastAPI(title="Default Alive or Dead API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_resolve_allowed_origins(),
    allow_origin_regex=LOCALHOST_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(default_alive_router, prefix=DEFAULT_ALIVE_PREFIX, tags=["default-alive-or-dead"])
app.include_router(
    financial_entries_router,
    prefix=f"{DEFAULT_ALIVE_PREFIX}/financial-entries",
    tags=["financial-entries"],
)
app.include_router(
    announcements_router,
    prefix=f"{DEFAULT_ALIVE_PREFIX}/announcements",
    tags=["announcements"],
)
app.include_router(
    announcements_admin_router,
    prefix=f"{DEFAULT_ALIVE_PREFIX}/admin/announcements",
    tags=["announcements"],
)
app.include_router(payments_router, prefix="/payments", tags=["payments"])
app.include_router(pricing_tiers_router, prefix="/admin/pricing-tiers", tags=["pricing-tiers"])
app.include_router(admin_activity_router, prefix="/admin/activity", tags=["admin-activity"])


@app.get("/", tags=["health"])
def read_root() -> dict[str, str]:
    """Return a simple health check response."""
    return {"status": "ok"}
