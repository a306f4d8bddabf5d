"""Engine construction for the SQL contact store.

``engine_from_config`` is what the application uses; ``create_engine`` is
the lower-level form tests call with a SQLite URL. Each in-flight listing
pins one pooled connection for the length of its scan, so ``pool_size``
bounds concurrent listings.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from contacts_service.core.config import DatabaseConfig

from .models import Base

logger = logging.getLogger(__name__)


def create_engine(
    url: str,
    *,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    echo: bool = False,
    use_null_pool: bool = False,
) -> AsyncEngine:
    """Build an :class:`AsyncEngine` for *url*.

    ``use_null_pool`` opens a fresh connection per checkout and closes it on
    release; the CLI and the test suite use it so nothing outlives the
    event loop. SQLite URLs keep SQLAlchemy's default pool.
    """
    kwargs: dict = {"echo": echo}
    if use_null_pool:
        kwargs["poolclass"] = NullPool
    elif not url.startswith("sqlite"):
        kwargs.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
        )

    engine = create_async_engine(url, **kwargs)
    logger.info(
        "SQL engine ready: %s", engine.url.render_as_string(hide_password=True)
    )
    return engine


def engine_from_config(config: DatabaseConfig, *, use_null_pool: bool = False) -> AsyncEngine:
    return create_engine(
        config.url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        echo=config.echo,
        use_null_pool=use_null_pool,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Contacts are copied out of the session before commit returns.
    return async_sessionmaker(bind=engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create the ``contacts`` table if it is missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Contacts schema verified")
