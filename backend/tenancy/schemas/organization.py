"""Pydantic schemas for organization endpoints.

``name`` and ``slug`` use the shared field types from
``tenancy.core.validation``; slugs arrive trimmed and lowercased.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tenancy.core.validation import OrganizationName, Slug
from tenancy.models.enums import OrganizationRole


class OrganizationCreateRequest(BaseModel):
    """Request schema for creating an organization.

    Used for POST /organizations endpoint.
    The caller becomes the organization's owner.
    """

    name: OrganizationName = Field(
        ..., description="Organization display name (at least 2 characters)"
    )
    slug: Slug = Field(..., description="URL slug, lowercase alphanumeric with hyphens")
    logo_url: Optional[str] = Field(None, description="Logo reference")


class OrganizationUpdateRequest(BaseModel):
    """Request schema for updating an organization.

    Used for PATCH /organizations/{org_id} endpoint.
    All fields are optional (partial update); only ``logo_url`` may be
    cleared with null.
    """

    name: Optional[OrganizationName] = Field(None, description="Organization display name")
    slug: Optional[Slug] = Field(None, description="URL slug")
    logo_url: Optional[str] = Field(None, description="Logo reference")

    @field_validator("name", "slug")
    @classmethod
    def not_null(cls, v: str | None) -> str:
        """Reject an explicit null for fields that cannot be cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class OrganizationResponse(BaseModel):
    """Response schema for organization endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Organization unique identifier")
    name: str = Field(..., description="Organization display name")
    slug: str = Field(..., description="Unique URL slug")
    logo_url: Optional[str] = Field(None, description="Logo reference")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last modification timestamp")


class OrganizationWithRole(OrganizationResponse):
    """An organization the caller belongs to, with the caller's role."""

    role: OrganizationRole = Field(..., description="Caller's role in the organization")


class RoleResponse(BaseModel):
    """Response schema for GET /organizations/{org_id}/role."""

    role: Optional[OrganizationRole] = Field(
        None, description="Caller's role, or null when not a member"
    )


class SlugAvailabilityResponse(BaseModel):
    """Response schema for GET /organizations/slug-availability."""

    slug: str = Field(..., description="Normalized slug that was checked")
    available: bool = Field(..., description="Whether no organization uses the slug")
