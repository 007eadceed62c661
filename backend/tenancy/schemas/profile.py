"""Pydantic schemas for the caller's profile."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
    """Response schema for GET/PATCH /me.

    ``active_organization_id`` is only set while the stored pointer still
    matches one of the caller's memberships.
    """

    model_config = ConfigDict(from_attributes=True)

    principal_id: UUID = Field(..., description="Principal identifier")
    display_name: Optional[str] = Field(None, description="Display name")
    avatar_url: Optional[str] = Field(None, description="Avatar reference")
    active_organization_id: Optional[UUID] = Field(
        None, description="Currently selected organization"
    )
    created_at: datetime = Field(..., description="Profile creation timestamp")
    updated_at: datetime = Field(..., description="Last modification timestamp")


class ProfileUpdateRequest(BaseModel):
    """Request schema for PATCH /me. All fields are optional."""

    display_name: Optional[str] = Field(None, max_length=255, description="Display name")
    avatar_url: Optional[str] = Field(None, description="Avatar reference")
