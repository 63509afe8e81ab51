# tests/conftest.py
"""
Shared fixtures: in-memory repositories, a recording push channel and
database/redis mocks.
"""

from __future__ import annotations

import asyncio
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

# Environment must be set before huduma.config is imported
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("REDIS_PASSWORD", "")
os.environ.setdefault("REALTIME_BACKEND", "local")

from huduma.api import dependencies
from huduma.api.app import create_app
from huduma.common.constants import JobStatus, MessageType, UserType
from huduma.core.favorites.models import Favorite, FavoriteWithProvider
from huduma.core.jobs.models import Job
from huduma.core.messages.models import Message, MessageWithParties
from huduma.core.notifications.service import JobLifecycleNotifier
from huduma.core.reviews.models import RatingSummary, Review, ReviewWithCustomer
from huduma.core.users.models import User
from huduma.realtime.dispatcher import Dispatcher
from huduma.realtime.registry import ConnectionRegistry


# =============================================================================
# IN-MEMORY REPOSITORIES
# =============================================================================

class FakeUserRepository:
    def __init__(self) -> None:
        self.users: dict[str, User] = {}

    def add(self, user_type: UserType, first_name: str = "Test", phone_number: Optional[str] = None) -> User:
        user = User(
            phone_number=phone_number or f"+2547{len(self.users):08d}",
            first_name=first_name,
            last_name="User",
            user_type=user_type,
            location="Nairobi",
        )
        self.users[user.id] = user
        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def get_by_phone(self, phone_number: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.phone_number == phone_number), None)

    async def create(self, user: User) -> User:
        self.users[user.id] = user
        return user


class FakeJobRepository:
    def __init__(self) -> None:
        self.jobs: dict[str, Job] = {}

    def add(self, customer_id: str, provider_id: Optional[str], status: JobStatus = JobStatus.PENDING) -> Job:
        job = Job(
            customer_id=customer_id,
            provider_id=provider_id,
            category_id="plumbing",
            title="Fix kitchen sink",
            description="Leaking pipe under the sink",
            location="Westlands, Nairobi",
            status=status,
        )
        self.jobs[job.id] = job
        return job

    async def get_by_id(self, job_id: str) -> Optional[Job]:
        return self.jobs.get(job_id)

    async def list_for_user(self, user_id: str, user_type: UserType) -> list[Job]:
        attr = "customer_id" if user_type == UserType.CUSTOMER else "provider_id"
        jobs = [j for j in self.jobs.values() if getattr(j, attr) == user_id]
        return sorted(jobs, key=lambda j: j.created_at, reverse=True)

    async def create(self, job: Job) -> Job:
        self.jobs[job.id] = job
        return job

    async def update(self, job_id: str, changes: dict[str, Any]) -> Optional[Job]:
        job = self.jobs.get(job_id)
        if job is None:
            return None
        updated = Job.model_validate({
            **job.model_dump(),
            **changes,
            "updated_at": datetime.now(timezone.utc),
        })
        self.jobs[job_id] = updated
        return updated


class FakeMessageRepository:
    """Mirrors the SQL ordering: created_at clamped per job, seq breaks ties."""

    def __init__(self, users: FakeUserRepository, clock: Any = None) -> None:
        self._users = users
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.rows: list[tuple[int, Message]] = []

    async def insert(
        self,
        job_id: str,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: MessageType = MessageType.TEXT,
        image_url: Optional[str] = None,
    ) -> Message:
        latest = max(
            (m.created_at for _, m in self.rows if m.job_id == job_id),
            default=None,
        )
        now = self._clock()
        created_at = max(now, latest) if latest is not None else now
        message = Message(
            id=str(uuid4()),
            job_id=job_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            message_type=message_type,
            image_url=image_url,
            is_read=False,
            created_at=created_at,
        )
        self.rows.append((len(self.rows) + 1, message))
        return message

    async def list_for_job(self, job_id: str) -> list[MessageWithParties]:
        rows = sorted(
            ((seq, m) for seq, m in self.rows if m.job_id == job_id),
            key=lambda item: (item[1].created_at, item[0]),
        )
        return [
            MessageWithParties(
                **m.model_dump(),
                sender=self._users.users[m.sender_id].summary(),
                receiver=self._users.users[m.receiver_id].summary(),
            )
            for _, m in rows
        ]

    async def mark_read(self, job_id: str, receiver_id: str) -> int:
        changed = 0
        for index, (seq, m) in enumerate(self.rows):
            if m.job_id == job_id and m.receiver_id == receiver_id and not m.is_read:
                self.rows[index] = (seq, m.model_copy(update={"is_read": True}))
                changed += 1
        return changed


class FakeReviewRepository:
    def __init__(self, users: FakeUserRepository) -> None:
        self._users = users
        self.reviews: dict[str, Review] = {}

    async def create(self, review: Review) -> Review:
        self.reviews[review.id] = review
        return review

    async def get_by_job(self, job_id: str) -> Optional[Review]:
        return next((r for r in self.reviews.values() if r.job_id == job_id), None)

    async def list_for_provider(self, provider_id: str) -> list[ReviewWithCustomer]:
        reviews = [r for r in self.reviews.values() if r.provider_id == provider_id]
        reviews.sort(key=lambda r: r.created_at, reverse=True)
        return [
            ReviewWithCustomer(**r.model_dump(), customer=self._users.users[r.customer_id].summary())
            for r in reviews
        ]

    async def rating_summary(self, provider_id: str) -> RatingSummary:
        ratings = [r.rating for r in self.reviews.values() if r.provider_id == provider_id]
        average = round(sum(ratings) / len(ratings), 2) if ratings else 0.0
        return RatingSummary(provider_id=provider_id, average_rating=average, review_count=len(ratings))


class FakeFavoriteRepository:
    def __init__(self, users: FakeUserRepository) -> None:
        self._users = users
        self.favorites: dict[tuple[str, str], Favorite] = {}

    async def list_for_customer(self, customer_id: str) -> list[FavoriteWithProvider]:
        return [
            FavoriteWithProvider(**f.model_dump(), provider=self._users.users[f.provider_id].summary())
            for (cid, _), f in self.favorites.items()
            if cid == customer_id
        ]

    async def add(self, favorite: Favorite) -> Favorite:
        key = (favorite.customer_id, favorite.provider_id)
        return self.favorites.setdefault(key, favorite)

    async def remove(self, customer_id: str, provider_id: str) -> int:
        return 1 if self.favorites.pop((customer_id, provider_id), None) else 0


# =============================================================================
# PUSH CHANNEL
# =============================================================================

class RecordingChannel:
    """PushChannel that records what it was sent."""

    def __init__(self, fail: Optional[Exception] = None, hang: bool = False) -> None:
        self.sent: list[str] = []
        self.writable = True
        self.closed_with: Optional[int] = None
        self._fail = fail
        self._hang = hang

    @property
    def is_writable(self) -> bool:
        return self.writable

    async def send_text(self, data: str) -> None:
        if self._hang:
            await asyncio.sleep(10)
        if self._fail is not None:
            raise self._fail
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed_with = code
        self.writable = False


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_db() -> AsyncMock:
    """Database manager mock."""
    db = AsyncMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="UPDATE 0")
    db.fetchval = AsyncMock(return_value=None)
    return db


@pytest.fixture
def mock_redis() -> AsyncMock:
    """RedisClient mock."""
    redis = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    redis.make_key = lambda key: f"huduma:{key}"
    return redis


@pytest.fixture
def users_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def jobs_repo() -> FakeJobRepository:
    return FakeJobRepository()


@pytest.fixture
def messages_repo(users_repo: FakeUserRepository) -> FakeMessageRepository:
    return FakeMessageRepository(users_repo)


@pytest.fixture
def reviews_repo(users_repo: FakeUserRepository) -> FakeReviewRepository:
    return FakeReviewRepository(users_repo)


@pytest.fixture
def favorites_repo(users_repo: FakeUserRepository) -> FakeFavoriteRepository:
    return FakeFavoriteRepository(users_repo)


@pytest.fixture
def customer(users_repo: FakeUserRepository) -> User:
    return users_repo.add(UserType.CUSTOMER, first_name="Amina")


@pytest.fixture
def provider(users_repo: FakeUserRepository) -> User:
    return users_repo.add(UserType.PROVIDER, first_name="Otieno")


@pytest.fixture
def job(jobs_repo: FakeJobRepository, customer: User, provider: User) -> Job:
    return jobs_repo.add(customer.id, provider.id, JobStatus.ACCEPTED)


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def dispatcher(registry: ConnectionRegistry) -> Dispatcher:
    return Dispatcher(registry, send_timeout=0.05)


@pytest.fixture
def notifier(dispatcher: Dispatcher) -> JobLifecycleNotifier:
    return JobLifecycleNotifier(dispatcher)


@pytest.fixture
def channel_factory():
    """Builds RecordingChannel instances."""
    return RecordingChannel


@pytest.fixture
def clock():
    """Controllable clock for FakeMessageRepository."""
    class Clock:
        def __init__(self) -> None:
            self.now = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

        def __call__(self) -> datetime:
            return self.now

        def advance(self, seconds: float) -> None:
            self.now += timedelta(seconds=seconds)

    return Clock()


@pytest.fixture
def clocked_messages_repo(users_repo: FakeUserRepository, clock) -> FakeMessageRepository:
    return FakeMessageRepository(users_repo, clock=clock)


@asynccontextmanager
async def _no_lifespan(app):
    yield


@pytest.fixture
def api_client(registry, users_repo, jobs_repo, messages_repo, reviews_repo, favorites_repo):
    """
    TestClient over in-memory repositories.
    Runs inside one event loop so HTTP handlers can push into open WebSockets.
    """
    app = create_app(registry=registry)
    app.router.lifespan_context = _no_lifespan
    app.dependency_overrides[dependencies.get_user_repository] = lambda: users_repo
    app.dependency_overrides[dependencies.get_job_repository] = lambda: jobs_repo
    app.dependency_overrides[dependencies.get_message_repository] = lambda: messages_repo
    app.dependency_overrides[dependencies.get_review_repository] = lambda: reviews_repo
    app.dependency_overrides[dependencies.get_favorite_repository] = lambda: favorites_repo

    with TestClient(app) as client:
        yield client
