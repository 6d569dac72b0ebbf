import logging
from contextlib import contextmanager
from collections.abc import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from epggrab.config import settings
from epggrab.models import Base

logger = logging.getLogger(__name__)

# Engine and session factory - initialized in init_db() during startup
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create session factory from engine"""
    return sessionmaker(
        engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session_factory() -> sessionmaker[Session]:
    """Get the session factory (initialized in init_db)"""
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() during startup.")
    return _session_factory


def init_db(database_path: str | None = None) -> None:
    """Initialize database schema and engine"""
    global _engine, _session_factory

    database_path = database_path or settings.database_path
    logger.info(f"Initializing database at {database_path}")

    if _engine is not None:
        _engine.dispose()

    _engine = create_engine(
        f"sqlite:///{database_path}",
        echo=False,
        pool_pre_ping=True,
        connect_args={"timeout": 30},
    )

    # Configure SQLite pragmas
    def configure_sqlite(dbapi_conn, _):
        """Configure SQLite connection parameters"""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode = WAL")
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    # Register the event listener
    event.listen(_engine, "connect", configure_sqlite)

    # Create all tables
    Base.metadata.create_all(_engine)

    # Create session factory
    _session_factory = _create_session_factory(_engine)

    logger.info("Database initialized successfully")


def close_db() -> None:
    """Close database connections on shutdown"""
    global _engine, _session_factory
    if _engine:
        _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database connections closed")


@contextmanager
def session_scope(*, begin: bool = True) -> Iterator[Session]:
    """
    Provide a session context manager with optional automatic transaction handling.

    Args:
        begin: When True (default), wrap the session in `session.begin()` for auto commit/rollback.
               When False, caller is responsible for transaction demarcation and commit/rollback.
    """
    session_factory = get_session_factory()

    with session_factory() as session:
        if begin:
            with session.begin():
                yield session
        else:
            try:
                yield session
            except Exception:
                session.rollback()
                raise
            else:
                session.commit()
