import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.core.config import (
    DATABASE_URL, DB_TYPE,
    DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT,
    DB_HEALTH_TIMEOUT, DB_RETRY_ATTEMPTS,
)
from app.core.retry import execute_with_retry

logger = logging.getLogger(__name__)

Base = declarative_base()


def _engine_options() -> dict:
    if DB_TYPE != "postgres":
        return {}
    return {
        "pool_size": DB_POOL_SIZE,
        "max_overflow": DB_MAX_OVERFLOW,
        "pool_timeout": DB_POOL_TIMEOUT,
        "pool_pre_ping": True,
        "connect_args": {
            # Disable prepared statements (important for PgBouncer)
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
        },
    }


engine = create_async_engine(DATABASE_URL, echo=False, future=True, **_engine_options())

AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# SQLite foreign key enforcement
if DB_TYPE == "sqlite":
    from sqlalchemy import event

    @event.listens_for(engine.sync_engine, "connect")
    def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def fetch(db: AsyncSession, statement):
    """Read-only execute with retry; the session is rolled back between attempts."""
    return await execute_with_retry(lambda: db.execute(statement), on_retry=db.rollback)


async def check_database(db: AsyncSession, retries: int = DB_RETRY_ATTEMPTS) -> bool:
    result = await execute_with_retry(
        lambda: db.execute(text("SELECT 1 AS test")),
        retries=retries,
        timeout=DB_HEALTH_TIMEOUT,
        on_retry=db.rollback,
    )
    return result.scalar() == 1


import app.models  # noqa: E402,F401


async def init_models():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def dispose_engine():
    await engine.dispose()
