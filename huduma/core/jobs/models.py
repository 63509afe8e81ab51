"""
Job (service booking) data models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from huduma.common.constants import JobStatus, PaymentStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Job(BaseModel):
    """A booking between a customer and (eventually) a provider."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="Job UUID")
    customer_id: str = Field(..., alias="customerId")
    provider_id: Optional[str] = Field(None, alias="providerId")
    category_id: str = Field(..., alias="categoryId")

    title: str
    description: str
    location: str
    preferred_date: Optional[datetime] = Field(None, alias="preferredDate")
    preferred_time: Optional[str] = Field(None, alias="preferredTime")

    # Pricing
    budget_min: Optional[float] = Field(None, ge=0.0, alias="budgetMin")
    budget_max: Optional[float] = Field(None, ge=0.0, alias="budgetMax")
    final_price: Optional[float] = Field(None, ge=0.0, alias="finalPrice")

    status: JobStatus = JobStatus.PENDING
    payment_status: PaymentStatus = Field(PaymentStatus.PENDING, alias="paymentStatus")

    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    @property
    def participants(self) -> list[str]:
        """Customer first, then the provider if one is assigned."""
        if self.provider_id is None:
            return [self.customer_id]
        return [self.customer_id, self.provider_id]

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participants

    @property
    def is_terminal(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.CANCELLED)


class JobCreateDTO(BaseModel):
    """Payload for creating a job."""

    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(..., alias="customerId")
    provider_id: Optional[str] = Field(None, alias="providerId")
    category_id: str = Field(..., alias="categoryId")
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    preferred_date: Optional[datetime] = Field(None, alias="preferredDate")
    preferred_time: Optional[str] = Field(None, alias="preferredTime")
    budget_min: Optional[float] = Field(None, ge=0.0, alias="budgetMin")
    budget_max: Optional[float] = Field(None, ge=0.0, alias="budgetMax")

    @model_validator(mode="after")
    def check_budget(self) -> "JobCreateDTO":
        if (
            self.budget_min is not None
            and self.budget_max is not None
            and self.budget_min > self.budget_max
        ):
            raise ValueError("budgetMin must not exceed budgetMax")
        return self


class JobUpdateDTO(BaseModel):
    """
    Partial job update. Only fields that were explicitly set are applied.
    """

    model_config = ConfigDict(populate_by_name=True)

    provider_id: Optional[str] = Field(None, alias="providerId")
    status: Optional[JobStatus] = None
    payment_status: Optional[PaymentStatus] = Field(None, alias="paymentStatus")
    final_price: Optional[float] = Field(None, ge=0.0, alias="finalPrice")
    preferred_date: Optional[datetime] = Field(None, alias="preferredDate")
    preferred_time: Optional[str] = Field(None, alias="preferredTime")
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)

    def changes(self) -> dict:
        """Fields the caller set, with enums reduced to their values."""
        data = self.model_dump(exclude_unset=True)
        return {
            key: value.value if isinstance(value, (JobStatus, PaymentStatus)) else value
            for key, value in data.items()
        }
