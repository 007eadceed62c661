"""Pydantic schemas for membership endpoints."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from tenancy.models.enums import OrganizationRole


class AddMemberRequest(BaseModel):
    """Request schema for POST /organizations/{org_id}/members."""

    principal_id: UUID = Field(..., description="Principal to add; must have signed up")
    role: OrganizationRole = Field(
        OrganizationRole.MEMBER, description="Role to grant (owner requires an owner caller)"
    )


class UpdateRoleRequest(BaseModel):
    """Request schema for PATCH /members/{membership_id}."""

    role: OrganizationRole = Field(..., description="New role")


class MembershipResponse(BaseModel):
    """Response schema for a membership row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="Membership unique identifier")
    organization_id: UUID = Field(..., description="Organization ID")
    principal_id: UUID = Field(..., description="Member principal ID")
    role: OrganizationRole = Field(..., description="Role within the organization")
    created_at: datetime = Field(..., description="When the principal joined")
    updated_at: datetime = Field(..., description="Last role change")


class MemberProfile(BaseModel):
    """Public profile fields shown in member lists."""

    model_config = ConfigDict(from_attributes=True)

    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class MemberWithProfile(MembershipResponse):
    """A membership joined with the member's profile."""

    profile: Optional[MemberProfile] = Field(None, description="Member profile, if any")
