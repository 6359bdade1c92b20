"""
Pytest fixtures for test database, client, and seeded events.

Each test gets its own SQLite database file (aiosqlite) with the full schema,
including the partial unique indexes. Every request and every fixture uses
its own session, so committed state is what tests observe.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./careerhub-dev.db")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from careerhub.db.base import Base  # noqa: E402
from careerhub.db.session import create_engine_for, create_session_factory, get_db  # noqa: E402
from careerhub.main import app  # noqa: E402
from careerhub.models.event import Event  # noqa: E402
from careerhub.models.registration import Registration  # noqa: E402
from careerhub.services.registration_store import SqlAlchemyRegistrationStore  # noqa: E402


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Fresh database file per test with all tables created."""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'rsvp_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession) -> SqlAlchemyRegistrationStore:
    return SqlAlchemyRegistrationStore(db_session)


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each get a session on the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_event(session_factory):
    """Factory: insert an event and return its id."""

    async def _make_event(capacity: int, spots_taken: int = 0, **fields) -> int:
        async with session_factory() as session:
            event = Event(
                title=fields.pop("title", "Career Development Workshop"),
                date=fields.pop("date", datetime.now(timezone.utc) + timedelta(days=30)),
                location=fields.pop("location", "Amphitheater A"),
                capacity=capacity,
                spots_taken=spots_taken,
                **fields,
            )
            session.add(event)
            await session.commit()
            return event.id

    return _make_event


@pytest_asyncio.fixture
async def single_seat_event(make_event) -> int:
    """Event with capacity=1, spots_taken=0."""
    return await make_event(capacity=1)


@pytest_asyncio.fixture
async def open_event(make_event) -> int:
    """Event with 100 free seats."""
    return await make_event(capacity=100, slug="internship-fair")


@pytest_asyncio.fixture
async def full_event(make_event) -> int:
    """Event with capacity=2 and both seats taken."""
    return await make_event(capacity=2, spots_taken=2, title="Sold Out Tech Talk")


@pytest.fixture
def load_state(session_factory):
    """Read (spots_taken, active registrations) for an event from a fresh session."""

    async def _load_state(event_id: int) -> tuple[int, list[Registration]]:
        async with session_factory() as session:
            spots_taken = await session.scalar(
                select(Event.spots_taken).where(Event.id == event_id)
            )
            result = await session.execute(
                select(Registration)
                .where(Registration.event_id == event_id, Registration.status != "cancelled")
                .order_by(Registration.id)
            )
            return spots_taken, list(result.scalars().all())

    return _load_state
