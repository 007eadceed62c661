"""Authorization predicates.

Every mutation and every tenant-scoped query is admitted through these
functions. They only read membership state, so calling them repeatedly
inside one operation never changes its outcome.
"""
from collections.abc import AsyncIterator
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.models.enums import OrganizationRole
from tenancy.models.membership import Membership
from tenancy.models.profile import Profile

ADMIN_ROLES = (OrganizationRole.OWNER, OrganizationRole.ADMIN)


class OrganizationAccess:
    """Membership predicates evaluated for one requesting principal."""

    def __init__(self, db: AsyncSession, principal_id: UUID):
        """Initialize predicates.

        Args:
            db: Database session
            principal_id: Verified principal making the request
        """
        self.db = db
        self.principal_id = principal_id

    async def role_of(self, org_id: UUID | None) -> OrganizationRole | None:
        """Return the principal's role in an organization, or None."""
        if org_id is None:
            return None

        result = await self.db.execute(
            select(Membership.role).where(
                Membership.organization_id == org_id,
                Membership.principal_id == self.principal_id,
            )
        )
        return result.scalar_one_or_none()

    async def is_member(self, org_id: UUID | None) -> bool:
        return await self.role_of(org_id) is not None

    async def is_admin(self, org_id: UUID | None) -> bool:
        return await self.role_of(org_id) in ADMIN_ROLES

    async def is_owner(self, org_id: UUID | None) -> bool:
        return await self.role_of(org_id) == OrganizationRole.OWNER

    async def has_role_or_higher(
        self,
        org_id: UUID | None,
        required: OrganizationRole,
    ) -> bool:
        """Check the role hierarchy: owner implies all, admin implies member."""
        role = await self.role_of(org_id)
        if role is None:
            return False
        return role.has_permission(required)

    async def member_organizations(self) -> AsyncIterator[UUID]:
        """Yield the ids of every organization the principal belongs to."""
        result = await self.db.execute(self.member_organization_ids())
        for org_id in result.scalars():
            yield org_id

    async def active_organization(self) -> UUID | None:
        """Return the profile's active organization if still a membership.

        The stored pointer is only a cache; a stale value reads as None and
        is left untouched here.
        """
        result = await self.db.execute(
            select(Profile.current_organization_id).where(
                Profile.principal_id == self.principal_id
            )
        )
        current = result.scalar_one_or_none()
        if current is None or not await self.is_member(current):
            return None
        return current

    # SQL forms of the same predicates, embedded by the row-scoping layer

    def member_organization_ids(self) -> Select:
        return select(Membership.organization_id).where(
            Membership.principal_id == self.principal_id
        )

    def admin_organization_ids(self) -> Select:
        return select(Membership.organization_id).where(
            Membership.principal_id == self.principal_id,
            Membership.role.in_(ADMIN_ROLES),
        )
