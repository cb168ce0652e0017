"""Bring the database schema to the latest Alembic revision at startup."""

from __future__ import annotations

import errno
import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import make_url
from sqlalchemy.engine.reflection import Inspector

from .database import SQLALCHEMY_DATABASE_URL, build_engine_kwargs

LOGGER = logging.getLogger(__name__)

BACKEND_DIR = Path(__file__).resolve().parent.parent
LOCK_FILENAME = ".alembic-migration.lock"
LOCK_RETRY_DELAY = 0.25
LOCK_TIMEOUT_ENV = "ALEMBIC_MIGRATION_LOCK_TIMEOUT"
DEFAULT_LOCK_TIMEOUT = 30.0

if os.name == "posix":  # pragma: no cover - platform specific
    import fcntl
else:  # pragma: no cover - platform specific
    import msvcrt

APPLICATION_TABLES = frozenset(
    {
        "payments",
        "financial_entries",
        "ebitda_snapshots",
        "pricing_tiers",
        "admin_action_logs",
        "announcements",
    }
)


def _has_columns(inspector: Inspector, table_name: str, *columns: str) -> bool:
    if not inspector.has_table(table_name):
        return False
    present = {column["name"] for column in inspector.get_columns(table_name)}
    return set(columns) <= present


def _has_index(inspector: Inspector, table_name: str, index_name: str) -> bool:
    if not inspector.has_table(table_name):
        return False
    return any(index["name"] == index_name for index in inspector.get_indexes(table_name))


def _matches_initial_schema(inspector: Inspector) -> bool:
    return (
        _has_columns(inspector, "ebitda_snapshots", "week_start_date", "current_funding")
        and _has_columns(inspector, "financial_entries", "week_start_date", "operating_expenses")
        and _has_index(inspector, "payments", "payments_payment_date_idx")
        and inspector.has_table("pricing_tiers")
        and inspector.has_table("admin_action_logs")
    )


def _matches_announcements_schema(inspector: Inspector) -> bool:
    return (
        _matches_initial_schema(inspector)
        and _has_columns(inspector, "announcements", "type", "expires_at")
        and _has_index(inspector, "pricing_tiers", "pricing_tiers_single_current_idx")
    )


# Newest first: the first matching check names the revision of an unversioned schema.
SCHEMA_REVISIONS: Sequence[tuple[str, Callable[[Inspector], bool]]] = (
    ("20241207_0002", _matches_announcements_schema),
    ("20241130_0001", _matches_initial_schema),
)


@dataclass(frozen=True)
class MigrationPlan:
    """What to do with a database before serving requests."""

    reason: str
    stamp_revision: Optional[str] = None
    run_upgrade: bool = True


def plan_migration(inspector: Inspector, head_revision: Optional[str]) -> MigrationPlan:
    """Decide whether the schema must be stamped, upgraded or both.

    Databases created before Alembic tracked them (``create_all`` in tests
    or an older deployment) are stamped with the revision their tables
    match so the upgrade only applies what is missing.
    """

    if inspector.has_table("alembic_version"):
        return MigrationPlan("Alembic version table present")

    if not APPLICATION_TABLES & set(inspector.get_table_names()):
        return MigrationPlan("no application tables found")

    for revision, matches in SCHEMA_REVISIONS:
        if matches(inspector):
            return MigrationPlan(
                f"unversioned schema matches revision {revision}",
                stamp_revision=revision,
                run_upgrade=revision != head_revision,
            )

    return MigrationPlan("unversioned schema does not match a known revision")


def _read_lock_timeout() -> float:
    raw = os.getenv(LOCK_TIMEOUT_ENV)
    try:
        value = float(raw) if raw else DEFAULT_LOCK_TIMEOUT
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r", LOCK_TIMEOUT_ENV, raw)
        return DEFAULT_LOCK_TIMEOUT
    if value <= 0:
        LOGGER.warning(
            "%s must be positive; using %.1f seconds", LOCK_TIMEOUT_ENV, DEFAULT_LOCK_TIMEOUT
        )
        return DEFAULT_LOCK_TIMEOUT
    return value


class MigrationLock:
    """Exclusive file lock shared by every process migrating the same checkout."""

    def __init__(self, path: Path, *, timeout: float) -> None:
        self.path = path
        self.timeout = timeout
        self._handle = None

    @staticmethod
    def _is_contended(error: OSError) -> bool:
        if isinstance(error, BlockingIOError):
            return True
        if error.errno in {errno.EACCES, errno.EAGAIN, errno.EBUSY}:
            return True
        # Windows reports sharing (32) and lock (33) violations.
        return getattr(error, "winerror", None) in {32, 33}

    def _try_lock(self) -> None:
        if os.name == "posix":  # pragma: no cover - platform specific
            fcntl.flock(self._handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        else:  # pragma: no cover - platform specific
            msvcrt.locking(self._handle.fileno(), msvcrt.LK_NBLCK, 1)

    def _unlock(self) -> None:
        if os.name == "posix":  # pragma: no cover - platform specific
            fcntl.flock(self._handle.fileno(), fcntl.LOCK_UN)
        else:  # pragma: no cover - platform specific
            msvcrt.locking(self._handle.fileno(), msvcrt.LK_UNLCK, 1)

    def __enter__(self) -> "MigrationLock":
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("a+")
        deadline = time.monotonic() + self.timeout
        while True:
            try:
                self._try_lock()
                break
            except OSError as error:
                if not self._is_contended(error):
                    self._handle.close()
                    raise
                if time.monotonic() >= deadline:
                    self._handle.close()
                    raise TimeoutError("Timed out waiting for the migration lock") from error
                time.sleep(LOCK_RETRY_DELAY)
        LOGGER.debug("Acquired migration lock at %s", self.path)
        return self

    def __exit__(self, *exc_info) -> None:
        try:
            self._unlock()
        except OSError:  # pragma: no cover - the lock dies with the handle
            LOGGER.debug("Unable to release migration lock at %s", self.path)
        finally:
            self._handle.close()
            self._handle = None


def _alembic_config(database_url: str) -> Config:
    config = Config(str(BACKEND_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    # ConfigParser interpolation treats "%" specially
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return config


def run_database_migrations() -> None:
    """Stamp unversioned schemas and upgrade the database to the latest revision."""

    project_root = BACKEND_DIR.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    database_url = os.getenv("DATABASE_URL") or SQLALCHEMY_DATABASE_URL
    config = _alembic_config(database_url)
    head_revision = ScriptDirectory.from_config(config).get_current_head()
    LOGGER.info("Migrating %s to revision %s", make_url(database_url), head_revision)

    with MigrationLock(BACKEND_DIR / LOCK_FILENAME, timeout=_read_lock_timeout()):
        engine = create_engine(database_url, **build_engine_kwargs(database_url))
        try:
            plan = plan_migration(inspect(engine), head_revision)
        finally:
            engine.dispose()

        LOGGER.info("Migration plan: %s", plan.reason)
        if plan.stamp_revision:
            command.stamp(config, plan.stamp_revision)
        if plan.run_upgrade:
            command.upgrade(config, "head")
        else:
            LOGGER.info("Schema already at revision %s; nothing to apply", head_revision)
