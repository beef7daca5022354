"""
Database session and engine configuration.

One asyncpg engine for the process. Request handlers get a session per
request; the ETL upload path takes the factory and opens one session per step.
"""

import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from typing import AsyncGenerator

from app.core.config import settings

logger = logging.getLogger(__name__)

# Create the async database engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    future=True,
)

@event.listens_for(engine.sync_engine, "connect")
def set_search_path(dbapi_connection, connection_record):
    """Pin the schema search path on every new pooled connection."""
    existing_autocommit = dbapi_connection.autocommit
    dbapi_connection.autocommit = True
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute(f"SET SESSION search_path TO {settings.DB_SEARCH_PATH}")
    except Exception:
        logger.exception("Error setting search_path")
    finally:
        cursor.close()
        dbapi_connection.autocommit = existing_autocommit

# Create a session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Keeps data accessible after commit
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session.

    The session is committed when the request handler returns normally,
    rolled back on any exception, and always closed.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

def get_session_factory() -> async_sessionmaker:
    """
    Dependency returning the session factory.

    Services that manage their own transaction boundaries (the ETL upload
    path) open one session per step from this factory.
    """
    return async_session_maker
