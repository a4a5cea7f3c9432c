"""SQLAlchemy async session setup for the AdOps taxonomy service.

Provides:
- Base: DeclarativeBase for all ORM models
- engine / async_session_factory: configured from settings
- get_async_session: FastAPI dependency, one Unit-of-Work per request
- session_scope: the same Unit-of-Work for work that outlives a request
  (background regeneration after a move)
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from adops.config.settings import get_settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


_settings = get_settings()

engine = create_async_engine(
    _settings.DATABASE_URL,
    echo=(_settings.ENVIRONMENT == "dev"),
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session that commits on clean exit and rolls back on error."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session.

    Repositories only call add()/flush()/delete(); the commit happens once
    at the end of a successful request.
    """
    async with session_scope() as session:
        yield session
