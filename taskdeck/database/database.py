"""Database connection and session management for taskdeck.

Local development runs on a SQLite file; hosted deployments point
`DATABASE_URL` at PostgreSQL and manage the schema with Alembic.
"""

import os
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskdeck.db")


def _is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in (database_url or "")


def _is_in_memory_sqlite(database_url: str) -> bool:
    return _is_sqlite_url(database_url) and (":memory:" in database_url or database_url.rstrip("/").endswith("sqlite:"))


def get_engine_kwargs(database_url: str) -> dict:
    """create_engine kwargs for a DB URL, computed without connecting."""
    engine_kwargs: dict = {
        "echo": os.getenv("DEBUG", "False").lower() == "true",
        "pool_pre_ping": True,
    }

    if _is_sqlite_url(database_url):
        # Request handlers run in a threadpool; one SQLite connection may cross threads.
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        return engine_kwargs

    engine_kwargs["pool_size"] = int(os.getenv("DB_POOL_SIZE", "5"))
    engine_kwargs["max_overflow"] = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    engine_kwargs["pool_timeout"] = int(os.getenv("DB_POOL_TIMEOUT_SEC", "30"))
    return engine_kwargs


def _install_sqlite_pragmas(engine: Engine, database_url: str) -> None:
    use_wal = not _is_in_memory_sqlite(database_url)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        # Template deletion relies on ON DELETE SET NULL for parent_task_id.
        cursor.execute("PRAGMA foreign_keys=ON")
        if use_wal:
            # Page-load generation runs alongside normal reads.
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def build_engine(database_url: str) -> Engine:
    built = create_engine(database_url, **get_engine_kwargs(database_url))
    if _is_sqlite_url(database_url):
        _install_sqlite_pragmas(built, database_url)
    return built


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Session:
    """Get database session (dependency for FastAPI)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Bring the schema up to date.

    With `RUN_MIGRATIONS=true` on a non-SQLite database this upgrades through
    Alembic (config from `ALEMBIC_INI`); otherwise tables are created directly.
    """
    run_migrations = os.getenv("RUN_MIGRATIONS", "False").lower() == "true"
    if run_migrations and not _is_sqlite_url(DATABASE_URL):
        from alembic import command
        from alembic.config import Config

        alembic_cfg = Config(os.getenv("ALEMBIC_INI", "alembic.ini"))
        alembic_cfg.set_main_option("sqlalchemy.url", DATABASE_URL)
        command.upgrade(alembic_cfg, "head")
        return

    # Registers TaskDB/UserDB on Base.metadata.
    from taskdeck.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
