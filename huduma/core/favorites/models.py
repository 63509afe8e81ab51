"""
Favorite provider models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from huduma.core.users.models import UserSummary


class Favorite(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    customer_id: str = Field(..., alias="customerId")
    provider_id: str = Field(..., alias="providerId")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="createdAt",
    )


class FavoriteWithProvider(Favorite):
    provider: UserSummary


class FavoriteDTO(BaseModel):
    """Body of add/remove favorite requests."""

    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(..., alias="customerId")
    provider_id: str = Field(..., alias="providerId")
