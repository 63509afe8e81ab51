"""
Reviews domain.
"""

from huduma.core.reviews.models import (
    ProviderReviews,
    RatingSummary,
    Review,
    ReviewCreateDTO,
    ReviewWithCustomer,
)
from huduma.core.reviews.repository import ReviewRepository
from huduma.core.reviews.service import ReviewService

__all__ = [
    "ProviderReviews",
    "RatingSummary",
    "Review",
    "ReviewCreateDTO",
    "ReviewWithCustomer",
    "ReviewRepository",
    "ReviewService",
]
