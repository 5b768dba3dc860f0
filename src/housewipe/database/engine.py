"""Database engine and session management."""

import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from housewipe.models.db_models import Base

# Default database path
DEFAULT_DB_PATH = Path(__file__).parent.parent.parent.parent / "data" / "housewipe.db"


def _get_db_path() -> Path:
    """Get database path from environment variable or default."""
    env_path = os.environ.get("HOUSEWIPE_DB_PATH")
    if env_path:
        return Path(env_path)
    return DEFAULT_DB_PATH


def get_database_url(db_path: Path | None = None) -> str:
    """Get database URL from environment or construct from path.

    Args:
        db_path: Optional path to SQLite database file.

    Returns:
        Database URL string (e.g., "sqlite:///..." or "postgresql://...").

    Priority:
        1. DATABASE_URL environment variable (for PostgreSQL/external databases)
        2. Explicit db_path argument
        3. HOUSEWIPE_DB_PATH environment variable
        4. Default path (data/housewipe.db)
    """
    if url := os.environ.get("DATABASE_URL"):
        return url
    path = db_path or _get_db_path()
    return f"sqlite:///{path}"


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine for the given URL.

    Args:
        database_url: SQLAlchemy database URL.
        echo: Whether to echo SQL statements.

    Returns:
        SQLAlchemy Engine instance.

    Features:
        - Enables WAL mode and foreign keys for file-backed SQLite
        - Shares one connection for in-memory SQLite
        - Configures connection pooling for server databases
    """
    engine_kwargs: dict[str, Any] = {"echo": echo}
    is_sqlite = database_url.startswith("sqlite")
    in_memory = is_sqlite and (":memory:" in database_url or database_url == "sqlite://")

    if is_sqlite:
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": 30,  # SQLite busy timeout in seconds
        }
        if in_memory:
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["pool_recycle"] = 3600
        engine_kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **engine_kwargs)

    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        if not in_memory:
            with engine.connect() as conn:
                conn.execute(text("PRAGMA journal_mode=WAL"))
                conn.commit()

    return engine


class Database:
    """Explicitly constructed store handle.

    Owns the engine and session factory. Every operation acquires its own
    session through :meth:`session` and releases it on exit.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, autoflush=False)

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "Database":
        """Create a handle for a database URL and ensure the schema exists."""
        database = cls(create_db_engine(database_url, echo=echo))
        database.create_all()
        return database

    @classmethod
    def from_path(cls, db_path: Path | str | None = None, echo: bool = False) -> "Database":
        """Create a handle for a SQLite file (or the configured database).

        The parent directory of the SQLite file is created if needed.
        """
        path_obj = Path(db_path) if db_path else None
        database_url = get_database_url(db_path=path_obj)
        if database_url.startswith("sqlite") and not os.environ.get("DATABASE_URL"):
            (path_obj or _get_db_path()).parent.mkdir(parents=True, exist_ok=True)
        return cls.from_url(database_url, echo=echo)

    @property
    def engine(self) -> Engine:
        return self._engine

    def create_all(self) -> None:
        """Create all tables (idempotent)."""
        Base.metadata.create_all(self._engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Acquire a session for one unit of work.

        Uncommitted changes are rolled back if the block raises; the session
        is always closed.
        """
        session = self._session_factory()
        try:
            yield session
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
