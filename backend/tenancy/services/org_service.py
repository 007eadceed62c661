"""Organization service: create-with-owner, settings, deletion and lookups."""
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.core.exceptions import NotAMember, NotAuthorized, NotFound, SlugConflict
from tenancy.core.validation import normalize_slug, validate_name, validate_slug
from tenancy.models.enums import AuditAction, OrganizationRole
from tenancy.models.membership import Membership
from tenancy.models.organization import Organization
from tenancy.models.profile import Profile
from tenancy.services.audit_service import AuditService
from tenancy.services.authorization import OrganizationAccess
from tenancy.services.membership_store import MembershipStore
from tenancy.services.outcomes import rejected, succeeded

UPDATABLE_FIELDS = ("name", "slug", "logo_url")


class OrganizationService:
    """Service for creating and managing organizations."""

    def __init__(self, db: AsyncSession):
        """Initialize organization service.

        Args:
            db: Database session
        """
        self.db = db
        self.store = MembershipStore(db)
        self.audit_service = AuditService(db)

    async def create(
        self,
        principal_id: UUID,
        name: str,
        slug: str,
        logo_url: str | None = None,
    ) -> Organization:
        """Create an organization with the caller as its owner.

        The organization row, the owner membership and the caller's active
        organization pointer are written in one transaction. Slug
        availability is decided by the unique index at insert time, never by
        a prior read.

        Args:
            principal_id: Creating principal, who becomes owner
            name: Display name (at least 2 characters)
            slug: URL slug, normalized to lowercase
            logo_url: Optional logo reference

        Returns:
            Created Organization instance

        Raises:
            ValidationError: if name or slug break their format rules
            SlugConflict: if the slug is already taken
        """
        name = validate_name(name)
        slug = validate_slug(slug)

        try:
            organization = await self.store.insert_organization(name, slug, logo_url)
        except SlugConflict as e:
            raise rejected("organization.create", e, slug=slug) from None
        org_id = organization.id

        membership = await self.store.insert_membership(org_id, principal_id, OrganizationRole.OWNER)
        await self.store.upsert_profile(principal_id, current_organization_id=org_id)

        await self.audit_service.log(
            org_id=org_id,
            principal_id=principal_id,
            action=AuditAction.ORG_CREATE,
            entity_type="organization",
            entity_id=org_id,
            diff_json={"name": name, "slug": slug, "owner_membership_id": str(membership.id)},
        )

        await self.db.commit()
        await self.db.refresh(organization)

        succeeded("organization.create", org_id=org_id, slug=slug, principal_id=principal_id)
        return organization

    async def get(self, principal_id: UUID, identifier: UUID | str) -> Organization:
        """Get an organization by ID or slug.

        Organizations are only visible to their members; anything else reads
        as not found.

        Raises:
            NotFound: if missing or the caller is not a member
        """
        org_id = _as_uuid(identifier)
        if org_id is not None:
            organization = await self.store.get_organization(org_id)
        else:
            organization = await self.store.get_organization_by_slug(
                normalize_slug(str(identifier))
            )

        if organization is None:
            raise NotFound("Organization not found")

        access = OrganizationAccess(self.db, principal_id)
        if not await access.is_member(organization.id):
            raise NotFound("Organization not found")

        return organization

    async def list_for_principal(
        self,
        principal_id: UUID,
    ) -> list[tuple[Organization, OrganizationRole]]:
        """List every organization the caller belongs to, with the caller's role."""
        return await self.store.list_organizations_for(principal_id)

    async def update(
        self,
        principal_id: UUID,
        org_id: UUID,
        changes: dict[str, Any],
    ) -> Organization:
        """Update organization details (admins and owners).

        Args:
            principal_id: Principal performing the update
            org_id: Organization ID
            changes: Subset of name, slug, logo_url to set

        Returns:
            Updated Organization instance

        Raises:
            NotAuthorized: if the caller is not an admin of the organization
            ValidationError: if a new name or slug is malformed
            SlugConflict: if the new slug is taken
        """
        access = OrganizationAccess(self.db, principal_id)
        if not await access.is_admin(org_id):
            raise rejected(
                "organization.update",
                NotAuthorized("Only admins and owners can update organization settings"),
                org_id=org_id,
                principal_id=principal_id,
            )

        organization = await self.store.get_organization(org_id)
        if organization is None:
            raise NotFound("Organization not found")

        values: dict[str, Any] = {}
        for field, value in changes.items():
            if field not in UPDATABLE_FIELDS:
                continue
            if field == "name":
                value = validate_name(value)
            elif field == "slug":
                value = validate_slug(value)
            values[field] = value

        old_values = {field: getattr(organization, field) for field in values}

        try:
            await self.store.update_organization(organization, values)
        except SlugConflict as e:
            raise rejected("organization.update", e, org_id=org_id) from None

        if values:
            await self.audit_service.log(
                org_id=org_id,
                principal_id=principal_id,
                action=AuditAction.ORG_UPDATE,
                entity_type="organization",
                entity_id=org_id,
                diff_json={"before": old_values, "after": values},
            )

        await self.db.commit()
        await self.db.refresh(organization)

        succeeded("organization.update", org_id=org_id, fields=sorted(values))
        return organization

    async def delete(self, principal_id: UUID, org_id: UUID) -> None:
        """Delete an organization (owner only).

        Memberships and tasks go with it; profiles pointing at it are
        cleared.

        Raises:
            NotAuthorized: if the caller is not the organization's owner
        """
        await self.store.lock_organization(org_id)

        access = OrganizationAccess(self.db, principal_id)
        if not await access.is_owner(org_id):
            raise rejected(
                "organization.delete",
                NotAuthorized("Only the organization owner can delete the organization"),
                org_id=org_id,
                principal_id=principal_id,
            )

        await self.store.delete_organization(org_id)
        await self.audit_service.log(
            org_id=None,
            principal_id=principal_id,
            action=AuditAction.ORG_DELETE,
            entity_type="organization",
            entity_id=org_id,
        )
        await self.db.commit()

        succeeded("organization.delete", org_id=org_id, principal_id=principal_id)

    async def set_active(self, principal_id: UUID, org_id: UUID) -> Profile:
        """Point the caller's profile at one of their organizations.

        Raises:
            NotAMember: if the caller does not belong to the organization
        """
        access = OrganizationAccess(self.db, principal_id)
        if not await access.is_member(org_id):
            raise NotAMember()

        profile = await self.store.upsert_profile(principal_id, current_organization_id=org_id)
        await self.db.commit()
        return profile

    async def role_of(self, principal_id: UUID, org_id: UUID) -> OrganizationRole | None:
        """Return the caller's role in an organization, or None."""
        return await OrganizationAccess(self.db, principal_id).role_of(org_id)

    async def list_members(
        self,
        principal_id: UUID,
        org_id: UUID,
    ) -> list[tuple[Membership, Profile | None]]:
        """List members with their profiles; non-members get an empty list."""
        access = OrganizationAccess(self.db, principal_id)
        if not await access.is_member(org_id):
            return []
        return await self.store.list_members(org_id)

    async def check_slug_available(self, slug: str) -> bool:
        """Report whether a slug is free right now.

        Advisory only: creation still relies on the unique index.

        Raises:
            ValidationError: if the slug is malformed
        """
        return not await self.store.slug_exists(validate_slug(slug))


def _as_uuid(identifier: UUID | str) -> UUID | None:
    if isinstance(identifier, UUID):
        return identifier
    try:
        return UUID(str(identifier))
    except ValueError:
        return None
