"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.engine import make_url
from sqlmodel import Session, SQLModel, create_engine

from src.auth_api.runtime.config.config_data import ConfigData
from src.auth_api.runtime.context import get_config


def engine_options(config: ConfigData) -> dict[str, Any]:
    """Keyword arguments for ``create_engine`` matching the configured backend."""
    db_config = config.database
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}

    if db_config.is_sqlite:
        # request handlers run in a thread pool
        options["connect_args"] = {"check_same_thread": False, "timeout": 20}
        if config.app.environment == "production":
            logger.warning("SQLite is not recommended for production; use PostgreSQL")
        return options

    options.update(
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_recycle=db_config.pool_recycle,
    )
    if db_config.url.startswith("postgresql"):
        options["connect_args"] = {
            "application_name": f"{config.app.environment}_auth_api",
            "connect_timeout": 30,
        }
    return options


class DbSessionService:
    """Owns the engine and hands out sessions.

    Pass ``engine`` to reuse an existing engine (tests use an in-memory one);
    otherwise it is built from the ``database`` configuration section.
    """

    def __init__(self, engine: Engine | None = None):
        if engine is None:
            config = get_config()
            logger.info(
                "Configuring database engine for environment: {}",
                config.app.environment,
            )
            if config.database.is_sqlite:
                self._ensure_sqlite_directory(config.database.url)
            engine = create_engine(
                config.database.connection_string, **engine_options(config)
            )
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    @staticmethod
    def _ensure_sqlite_directory(url: str) -> None:
        database = make_url(url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

    def create_all(self) -> None:
        """Create all database tables."""
        from src.auth_api.entities.core.user import UserTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def get_session(self) -> Session:
        return Session(self._engine, expire_on_commit=False)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session committed on success and rolled back on error."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error("Database transaction failed: {}: {}", type(e).__name__, e)
            raise
        finally:
            session.close()

    def health_check(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database health check failed: {}: {}", type(e).__name__, e)
            return False
        return True
