"""
User data models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from huduma.common.constants import UserType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """Marketplace user: customer or service provider."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid4()), description="User UUID")
    phone_number: str = Field(..., alias="phoneNumber", description="Phone number, unique")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: Optional[str] = None
    profile_image_url: Optional[str] = Field(None, alias="profileImageUrl")
    user_type: UserType = Field(..., alias="userType")
    location: str
    is_verified: bool = Field(False, alias="isVerified")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def summary(self) -> "UserSummary":
        return UserSummary(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            profile_image_url=self.profile_image_url,
            user_type=self.user_type,
        )


class UserSummary(BaseModel):
    """Identity shown next to a chat message or review."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    profile_image_url: Optional[str] = Field(None, alias="profileImageUrl")
    user_type: UserType = Field(..., alias="userType")


class UserCreateDTO(BaseModel):
    """Registration payload."""

    model_config = ConfigDict(populate_by_name=True)

    phone_number: str = Field(..., alias="phoneNumber", min_length=7, max_length=20)
    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    email: Optional[str] = None
    profile_image_url: Optional[str] = Field(None, alias="profileImageUrl")
    user_type: UserType = Field(..., alias="userType")
    location: str = Field(..., min_length=1)

    @field_validator("phone_number")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        """Strips spaces and dashes: "+254 712-345678" -> "+254712345678"."""
        normalized = v.replace(" ", "").replace("-", "")
        digits = normalized[1:] if normalized.startswith("+") else normalized
        if not digits.isdigit():
            raise ValueError("phone number must contain digits only")
        return normalized
