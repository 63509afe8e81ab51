"""
Users domain.
"""

from huduma.core.users.models import User, UserSummary, UserCreateDTO
from huduma.core.users.repository import UserRepository
from huduma.core.users.service import UserService

__all__ = [
    "User",
    "UserSummary",
    "UserCreateDTO",
    "UserRepository",
    "UserService",
]
