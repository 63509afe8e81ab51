"""
Provider review models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from huduma.core.users.models import UserSummary


class Review(BaseModel):
    """Customer's rating of a provider for one completed job."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    job_id: str = Field(..., alias="jobId")
    customer_id: str = Field(..., alias="customerId")
    provider_id: str = Field(..., alias="providerId")
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="createdAt",
    )


class ReviewWithCustomer(Review):
    customer: UserSummary


class ReviewCreateDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    customer_id: str = Field(..., alias="customerId")
    provider_id: str = Field(..., alias="providerId")
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class RatingSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider_id: str = Field(..., alias="providerId")
    average_rating: float = Field(0.0, alias="averageRating")
    review_count: int = Field(0, alias="reviewCount")


class ProviderReviews(BaseModel):
    """Reviews of a provider, newest first, with the aggregate rating."""

    model_config = ConfigDict(populate_by_name=True)

    summary: RatingSummary
    reviews: list[ReviewWithCustomer]
