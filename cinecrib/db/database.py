"""Database connection and session management."""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cinecrib.config import get_settings

settings = get_settings()

# Isolation level for multi-statement reads that must agree with each other
SNAPSHOT_ISOLATION_LEVEL = "REPEATABLE READ"

engine = create_async_engine(
    settings.database_url_async,
    echo=settings.is_development,
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=20,
    pool_timeout=30,
    pool_recycle=1800,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Initialize database (create tables if needed)."""
    from cinecrib.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database session."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def begin_read_snapshot(db: AsyncSession) -> None:
    """Start the session's transaction so following reads share one snapshot.

    On PostgreSQL the transaction is opened at REPEATABLE READ; under the
    default READ COMMITTED every statement would take a fresh snapshot.
    Other dialects only get the session's connection checked out; the SQLite
    driver emits no BEGIN before a SELECT, so reads there are not isolated
    from concurrent writers.

    An open transaction with no pending writes (e.g. after the session user
    lookup) is committed first so the snapshot starts fresh. One holding
    writes is left as-is.
    """
    if db.in_transaction():
        if db.new or db.dirty or db.deleted:
            return
        await db.commit()

    bind = db.get_bind()
    if bind.dialect.name == "postgresql":
        await db.connection(execution_options={"isolation_level": SNAPSHOT_ISOLATION_LEVEL})
    else:
        await db.connection()


async def ping_database(db: AsyncSession) -> None:
    """Run a trivial query; raises if the database is unreachable."""
    await db.execute(text("SELECT 1"))
