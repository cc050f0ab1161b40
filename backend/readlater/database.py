"""
Readlater Backend — Database Engine & ORM Base
================================================

What:  Async SQLAlchemy engine factory, declarative Base and lifecycle helpers.
How:   create_engine_from_config() builds a pooled async engine from AppConfig.
       create_app() owns the engine; there is no module-level engine.
Who:   main.create_app(), alembic/env.py, and the test fixtures.

Connection Pooling Strategy:
    pool_size:        PG_POOL_MAX persistent connections
    max_overflow:     half of pool_size for spikes
    pool_pre_ping:    validates connections before use (stale after DB restart)
    pool_recycle=3600 recycles connections every hour
"""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from readlater.config import AppConfig


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads for --autogenerate.
    """
    pass


def create_engine_from_config(config: AppConfig) -> AsyncEngine:
    """
    Create the application's async engine.

    PostgreSQL URLs get the pooled configuration; other URLs (a local
    sqlite+aiosqlite override) use the driver's default pool.
    """
    url = config.database_url
    echo = config.runtime.log_level == "DEBUG"

    if url.startswith("postgresql"):
        pool_size = max(config.pg.pool.max, 1)
        return create_async_engine(
            url,
            pool_size=pool_size,
            max_overflow=pool_size // 2,
            pool_pre_ping=config.runtime.db_pool_pre_ping,
            pool_recycle=3600,
            echo=echo,
        )
    return create_async_engine(url, echo=echo)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
