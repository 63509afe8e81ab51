from fastapi import APIRouter, Depends

from huduma.api.dependencies import get_review_service
from huduma.core.reviews.models import ProviderReviews, Review, ReviewCreateDTO
from huduma.core.reviews.service import ReviewService
from huduma.shared.models.common import ErrorResponse

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


@router.get("/{provider_id}", response_model=ProviderReviews)
async def list_reviews(
    provider_id: str,
    service: ReviewService = Depends(get_review_service),
):
    return await service.list_for_provider(provider_id)


@router.post(
    "",
    response_model=Review,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_review(
    request: ReviewCreateDTO,
    service: ReviewService = Depends(get_review_service),
):
    return await service.create_review(request)
