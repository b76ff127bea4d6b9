import os

os.environ.setdefault("CPM_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CPM_AUTH_MODE", "dev")
os.environ.setdefault("CPM_ENABLE_GMAIL", "false")

from datetime import date

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from careerpath.models import Base, Profile, UserRole
from careerpath.services.notifications import CandidatePassedFacts


class RecordingNotifier:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[CandidatePassedFacts] = []

    async def notify_candidate_passed(self, facts: CandidatePassedFacts) -> None:
        self.calls.append(facts)
        if self.fail:
            raise RuntimeError("mail relay unavailable")


@pytest.fixture()
async def async_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(async_engine):
    return async_sessionmaker(bind=async_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def failing_notifier():
    return RecordingNotifier(fail=True)


@pytest.fixture()
def process_fields():
    return {
        "position": "Backend Engineer",
        "role": "Engineering",
        "start_date": date(2024, 1, 1),
        "end_date": date(2024, 3, 31),
    }


@pytest.fixture()
def make_profile(session_factory):
    async def _make(*, user_id: str, email: str, role: str | None = None, is_active: bool = True) -> None:
        async with session_factory() as session:
            session.add(
                Profile(user_id=user_id, email=email, full_name=email.split("@")[0].title(), is_active=is_active)
            )
            if role:
                session.add(UserRole(user_id=user_id, role=role))
            await session.commit()

    return _make


@pytest.fixture()
async def client(session_factory, notifier):
    from careerpath.api import deps
    from careerpath.main import app

    async def _override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db_session] = _override_session
    app.state.notifier = notifier
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    app.dependency_overrides.clear()
    app.state.notifier = None
