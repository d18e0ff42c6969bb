# src/forge_api/schemas/user.py
"""User and ban Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from forge_api.models.enums import BanDuration, UserRole


class UserSummary(BaseModel):
    """Minimal public view of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class UserResponse(UserSummary):
    """User details shown to administrators."""

    email: str
    role: UserRole
    email_verified_at: datetime | None
    created_at: datetime
    is_banned: bool = False


class RoleUpdate(BaseModel):
    """Schema for changing a user's role."""

    role: UserRole


class BanCreate(BaseModel):
    """Schema for banning a user."""

    duration: BanDuration = Field(BanDuration.ONE_DAY, description="How long the ban lasts")
    reason: str | None = Field(None, max_length=1000, description="Moderator note")
    report_id: int | None = Field(None, description="Report to link the ban to and resolve")


class IpBanToggle(BaseModel):
    """Schema for banning or unbanning an IP address."""

    ip: str = Field(..., min_length=3, max_length=45)
    reason: str | None = Field(None, max_length=1000)


class BanResponse(BaseModel):
    """Schema for ban records returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None
    ip: str | None
    created_by_id: int | None
    comment: str | None
    expired_at: datetime | None
    created_at: datetime
    is_permanent: bool


class IpBanStatus(BaseModel):
    ip: str
    banned: bool
