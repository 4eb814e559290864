"""Database engine, session lifecycle and the request-scoped session dependency."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import sqlalchemy as sa
from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from catalog.config.settings import Settings

logger = logging.getLogger(__name__)


def normalize_database_url(url: Optional[str]) -> str:
    """Get a database URL with an async driver."""
    if not url:
        raise ValueError("DATABASE_URL is not set")

    # Convert postgres:// to postgresql:// for compatibility
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    if url.startswith("sqlite://"):
        url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    return url


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    @property
    def dialect_name(self) -> str:
        if not self.engine:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.engine.dialect.name

    async def init(self) -> None:
        """Create the engine and its bounded connection pool."""
        url = normalize_database_url(self.settings.DATABASE_URL)

        if url.startswith("sqlite"):
            self.engine = create_async_engine(url, echo=self.settings.DEBUG)
            _enable_sqlite_constraints(self.engine)
        else:
            self.engine = create_async_engine(
                url,
                echo=self.settings.DEBUG,
                pool_size=self.settings.DB_POOL_SIZE,
                max_overflow=self.settings.DB_MAX_OVERFLOW,
                pool_timeout=self.settings.DB_POOL_TIMEOUT,
                pool_recycle=self.settings.DB_POOL_RECYCLE,
                pool_pre_ping=True,
                connect_args={
                    "server_settings": {"application_name": self.settings.APP_NAME},
                },
            )

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            f"Database connection initialized ({self.engine.dialect.name}, "
            f"pool_size={self.settings.DB_POOL_SIZE})"
        )

    async def close(self) -> None:
        """Dispose of every pooled connection."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None
            logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a session that commits on success and rolls back on error."""
        if not self.session_factory:
            raise RuntimeError("Database not initialized. Call init() first.")

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def check_health(self) -> bool:
        """Check the database answers a trivial query."""
        if not self.engine:
            return False

        try:
            async with self.engine.connect() as conn:
                await conn.execute(sa.text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False


def _enable_sqlite_constraints(engine: AsyncEngine) -> None:
    """Turn on foreign keys and let SQLAlchemy drive transactions so
    SAVEPOINT works with the sqlite driver."""

    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def on_begin(conn):
        conn.exec_driver_sql("BEGIN")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session from the application's database."""
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database not initialized. Call init() first.")

    async with database.session() as session:
        yield session
