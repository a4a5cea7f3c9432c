"""Shared pytest fixtures for the AdOps test suite.

Provides:
- anyio_backend: asyncio only (the code under test uses asyncio primitives)
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits don't leak)
- documents: DocumentRepository bound to db_session
- client: AsyncClient with dependency overrides for DB-backed testing and a
  fresh BackgroundTasks on app.state (ASGITransport skips the lifespan)
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from adops.db.session import Base, get_async_session
import adops.db.tables  # noqa: F401  (registers ORM models on Base.metadata)
from adops.moves.background import BackgroundTasks
from adops.repositories.documents import DocumentRepository


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed and rolls back at teardown.
    Application code calling session.commit() releases the SAVEPOINT,
    which is then restarted so later operations stay in the same outer
    transaction.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)

        nested = await conn.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(sync_session, transaction):  # noqa: ARG001
            nonlocal nested
            if transaction.nested and not transaction._parent.nested:
                nested = conn.sync_connection.begin_nested()

        yield session

        await session.close()
        await trans.rollback()


@pytest.fixture
async def documents(db_session) -> DocumentRepository:
    return DocumentRepository(db_session)


@pytest.fixture
async def client(db_session):
    """AsyncClient with get_async_session overridden to use the test session."""
    from adops.api.main import app

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_async_session] = _override_session
    app.state.background_tasks = BackgroundTasks()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    await app.state.background_tasks.drain()
    app.dependency_overrides.clear()
