from fastapi import APIRouter, Depends

from huduma.api.dependencies import get_favorite_service
from huduma.core.favorites.models import Favorite, FavoriteDTO, FavoriteWithProvider
from huduma.core.favorites.service import FavoriteService
from huduma.shared.models.common import ErrorResponse, SuccessResponse

router = APIRouter(prefix="/api/favorites", tags=["Favorites"])


@router.get("/{customer_id}", response_model=list[FavoriteWithProvider])
async def list_favorites(
    customer_id: str,
    service: FavoriteService = Depends(get_favorite_service),
):
    return await service.list_for_customer(customer_id)


@router.post(
    "",
    response_model=Favorite,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_favorite(
    request: FavoriteDTO,
    service: FavoriteService = Depends(get_favorite_service),
):
    return await service.add(request)


@router.delete("", response_model=SuccessResponse)
async def remove_favorite(
    request: FavoriteDTO,
    service: FavoriteService = Depends(get_favorite_service),
):
    removed = await service.remove(request)
    return SuccessResponse(success=True, message=None if removed else "Not in favorites")
