"""
Favorites domain.
"""

from huduma.core.favorites.models import Favorite, FavoriteDTO, FavoriteWithProvider
from huduma.core.favorites.repository import FavoriteRepository
from huduma.core.favorites.service import FavoriteService

__all__ = [
    "Favorite",
    "FavoriteDTO",
    "FavoriteWithProvider",
    "FavoriteRepository",
    "FavoriteService",
]
