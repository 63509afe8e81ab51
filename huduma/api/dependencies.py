"""
FastAPI dependency providers.
Everything here can be replaced through app.dependency_overrides.
"""

from __future__ import annotations

from fastapi import Depends
from starlette.requests import HTTPConnection

from huduma.core.favorites.repository import FavoriteRepository
from huduma.core.favorites.service import FavoriteService
from huduma.core.jobs.repository import JobRepository
from huduma.core.jobs.service import JobService
from huduma.core.messages.repository import MessageRepository
from huduma.core.messages.service import ChatService
from huduma.core.messages.store import MessageStore
from huduma.core.notifications.service import JobLifecycleNotifier
from huduma.core.payments.service import MpesaPaymentService
from huduma.core.reviews.repository import ReviewRepository
from huduma.core.reviews.service import ReviewService
from huduma.core.users.repository import UserRepository
from huduma.core.users.service import UserService
from huduma.infra.database import DatabaseManager, get_db
from huduma.realtime.dispatcher import Dispatcher
from huduma.realtime.registry import ConnectionRegistry


# =============================================================================
# INFRASTRUCTURE
# =============================================================================

def get_db_manager() -> DatabaseManager:
    return get_db()


def get_registry(connection: HTTPConnection) -> ConnectionRegistry:
    return connection.app.state.registry


def get_dispatcher(connection: HTTPConnection) -> Dispatcher:
    return connection.app.state.dispatcher


# =============================================================================
# REPOSITORIES
# =============================================================================

def get_user_repository(db: DatabaseManager = Depends(get_db_manager)) -> UserRepository:
    return UserRepository(db)


def get_job_repository(db: DatabaseManager = Depends(get_db_manager)) -> JobRepository:
    return JobRepository(db)


def get_message_repository(db: DatabaseManager = Depends(get_db_manager)) -> MessageRepository:
    return MessageRepository(db)


def get_review_repository(db: DatabaseManager = Depends(get_db_manager)) -> ReviewRepository:
    return ReviewRepository(db)


def get_favorite_repository(db: DatabaseManager = Depends(get_db_manager)) -> FavoriteRepository:
    return FavoriteRepository(db)


# =============================================================================
# SERVICES
# =============================================================================

def get_notifier(dispatcher: Dispatcher = Depends(get_dispatcher)) -> JobLifecycleNotifier:
    return JobLifecycleNotifier(dispatcher)


def get_user_service(users: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserService(users)


def get_job_service(
    jobs: JobRepository = Depends(get_job_repository),
    users: UserRepository = Depends(get_user_repository),
    notifier: JobLifecycleNotifier = Depends(get_notifier),
) -> JobService:
    return JobService(jobs, users, notifier)


def get_chat_service(
    messages: MessageRepository = Depends(get_message_repository),
    jobs: JobRepository = Depends(get_job_repository),
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> ChatService:
    return ChatService(MessageStore(messages, jobs), dispatcher)


def get_payment_service(jobs: JobService = Depends(get_job_service)) -> MpesaPaymentService:
    return MpesaPaymentService(jobs)


def get_review_service(
    reviews: ReviewRepository = Depends(get_review_repository),
    jobs: JobRepository = Depends(get_job_repository),
) -> ReviewService:
    return ReviewService(reviews, jobs)


def get_favorite_service(
    favorites: FavoriteRepository = Depends(get_favorite_repository),
    users: UserRepository = Depends(get_user_repository),
) -> FavoriteService:
    return FavoriteService(favorites, users)
