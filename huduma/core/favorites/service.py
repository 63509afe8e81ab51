"""
Favorites service.
"""

from __future__ import annotations

from huduma.common.constants import UserType
from huduma.common.errors import NotFoundError, ValidationError
from huduma.core.favorites.models import Favorite, FavoriteDTO, FavoriteWithProvider
from huduma.core.favorites.repository import FavoriteRepository
from huduma.core.users.repository import UserRepository


class FavoriteService:
    """A customer's saved providers."""

    def __init__(self, repository: FavoriteRepository, users: UserRepository) -> None:
        self._repo = repository
        self._users = users

    async def list_for_customer(self, customer_id: str) -> list[FavoriteWithProvider]:
        return await self._repo.list_for_customer(customer_id)

    async def add(self, dto: FavoriteDTO) -> Favorite:
        """
        Saves a provider. Adding the same pair twice returns the first row.

        Raises:
            NotFoundError: customer or provider does not exist
            ValidationError: target is not a provider, or is the customer
        """
        if dto.customer_id == dto.provider_id:
            raise ValidationError("Cannot favorite yourself")

        if await self._users.get_by_id(dto.customer_id) is None:
            raise NotFoundError.for_entity("Customer", dto.customer_id)

        provider = await self._users.get_by_id(dto.provider_id)
        if provider is None:
            raise NotFoundError.for_entity("Provider", dto.provider_id)
        if provider.user_type != UserType.PROVIDER:
            raise ValidationError("Only providers can be favorited", {"user_id": provider.id})

        return await self._repo.add(Favorite(**dto.model_dump()))

    async def remove(self, dto: FavoriteDTO) -> bool:
        """Returns False when the pair was not saved."""
        return await self._repo.remove(dto.customer_id, dto.provider_id) > 0
