"""Where circuit logs are stored, and how sessions are handed out.

The default store is one SQLite file next to the settings file.  Set
``REPCLOCK_DB_URL`` to any SQLAlchemy URL to log somewhere else; tests
call :func:`configure_engine` with ``sqlite:///:memory:``.
"""

import logging
import os
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from ..settings import APP_SUPPORT_DIR
from .models import Base

logger = logging.getLogger(__name__)

# ── location ──────────────────────────────────────────────────────────────

DB_PATH = APP_SUPPORT_DIR / "repclock.db"
DB_URL_ENV = "REPCLOCK_DB_URL"


def database_url() -> str:
    """``REPCLOCK_DB_URL`` if set, else the SQLite file at ``DB_PATH``."""
    return os.environ.get(DB_URL_ENV) or f"sqlite:///{DB_PATH}"


# ── engine & session factory (created lazily) ─────────────────────────────

_engine: Engine | None = None
_SessionFactory = None


def _build_engine(url: str) -> Engine:
    is_sqlite = url.startswith("sqlite")
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False} if is_sqlite else {},
        echo=False,
    )
    if is_sqlite:
        # rounds and sets reference their parent log; SQLite only checks
        # that when asked, per connection
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    return engine


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = database_url()
        if url == f"sqlite:///{DB_PATH}":
            DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        _engine = _build_engine(url)
        logger.debug("circuit log database: %s", _engine.url)
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Log to *url* from now on, dropping any engine already open."""
    global _engine, _SessionFactory
    _SessionFactory = None
    if _engine is not None:
        _engine.dispose()
    _engine = _build_engine(url)


def init_db() -> None:
    """Create the circuit log tables that do not exist yet."""
    engine = _get_engine()
    Base.metadata.create_all(engine)
    logger.debug("circuit log tables ready on %s", engine.url)


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    session: OrmSession = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
