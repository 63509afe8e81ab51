"""
User service: registration and phone login.
"""

from __future__ import annotations

from huduma.common.constants import TypeMsg
from huduma.common.errors import NotFoundError, ValidationError
from huduma.common.logger import log_info
from huduma.core.users.models import User, UserCreateDTO
from huduma.core.users.repository import UserRepository


class UserService:
    """Registration and lookup of marketplace users."""

    def __init__(self, repository: UserRepository) -> None:
        self._repo = repository

    async def register(self, dto: UserCreateDTO) -> User:
        """
        Registers a new user.

        Raises:
            ValidationError: phone number already registered
        """
        existing = await self._repo.get_by_phone(dto.phone_number)
        if existing is not None:
            raise ValidationError(
                "User already exists with this phone number",
                {"phone_number": dto.phone_number},
            )

        user = User(**dto.model_dump())
        created = await self._repo.create(user)

        await log_info(f"Registered {created.user_type.value} {created.id}", type_msg=TypeMsg.INFO)
        return created

    async def login(self, phone_number: str) -> User:
        """Phone login. Verification itself happens outside this service."""
        user = await self._repo.get_by_phone(phone_number)
        if user is None:
            raise NotFoundError("User not found", {"phone_number": phone_number})
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self._repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError.for_entity("User", user_id)
        return user
