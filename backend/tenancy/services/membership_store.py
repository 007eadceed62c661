"""Membership store: storage primitives for organizations, memberships and profiles.

Only the mutation services call these, after the authorization predicates
have admitted the request. Uniqueness is arbitrated by the database
constraints themselves; violations surface as domain errors.
"""
from uuid import UUID

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.core.config import get_settings
from tenancy.core.exceptions import AlreadyMember, SlugConflict
from tenancy.models.enums import OrganizationRole
from tenancy.models.membership import Membership
from tenancy.models.organization import Organization
from tenancy.models.profile import Profile


def _is_unique_violation(exc: IntegrityError, marker: str) -> bool:
    message = str(exc.orig).lower()
    unique = "unique" in message or "duplicate key" in message
    return unique and marker in message


class MembershipStore:
    """Durable storage and point/range lookups for tenant membership state."""

    def __init__(self, db: AsyncSession):
        """Initialize membership store.

        Args:
            db: Database session
        """
        self.db = db

    @property
    def dialect(self) -> str:
        return self.db.get_bind().dialect.name

    # Organizations

    async def insert_organization(
        self,
        name: str,
        slug: str,
        logo_url: str | None = None,
    ) -> Organization:
        """Insert an organization row.

        The unique index on ``slug`` is the only arbiter of availability.

        Raises:
            SlugConflict: if the slug is already taken
        """
        organization = Organization(name=name, slug=slug, logo_url=logo_url)
        self.db.add(organization)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if _is_unique_violation(e, "slug"):
                raise SlugConflict() from None
            raise
        return organization

    async def update_organization(self, organization: Organization, values: dict) -> Organization:
        """Apply column values to an organization row.

        Raises:
            SlugConflict: if a new slug collides with another organization
        """
        for field, value in values.items():
            setattr(organization, field, value)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if _is_unique_violation(e, "slug"):
                raise SlugConflict() from None
            raise
        return organization

    async def delete_organization(self, org_id: UUID) -> None:
        """Delete an organization; the database cascades memberships and tasks.

        Profiles pointing at it are cleared explicitly as well so the
        session never serves a dangling pointer.
        """
        await self.db.execute(
            update(Profile)
            .where(Profile.current_organization_id == org_id)
            .values(current_organization_id=None)
        )
        await self.db.execute(delete(Membership).where(Membership.organization_id == org_id))
        await self.db.execute(delete(Organization).where(Organization.id == org_id))
        await self.db.flush()

    async def get_organization(self, org_id: UUID) -> Organization | None:
        result = await self.db.execute(select(Organization).where(Organization.id == org_id))
        return result.scalar_one_or_none()

    async def get_organization_by_slug(self, slug: str) -> Organization | None:
        result = await self.db.execute(select(Organization).where(Organization.slug == slug))
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        result = await self.db.execute(
            select(func.count(Organization.id)).where(Organization.slug == slug)
        )
        return result.scalar_one() > 0

    async def list_organizations_for(
        self,
        principal_id: UUID,
    ) -> list[tuple[Organization, OrganizationRole]]:
        result = await self.db.execute(
            select(Organization, Membership.role)
            .join(Membership, Membership.organization_id == Organization.id)
            .where(Membership.principal_id == principal_id)
            .order_by(Organization.name)
        )
        return [(org, role) for org, role in result.all()]

    # Locking

    async def lock_organization(self, org_id: UUID) -> bool:
        """Take the organization row lock that serializes membership mutations.

        Every membership mutation acquires this lock first, so the lock
        order (organization row, caller row, all member rows) is the same
        for all callers. On PostgreSQL a ``lock_timeout`` bounds the wait;
        exceeding it aborts the transaction and releases everything held.

        Returns:
            False if the organization does not exist
        """
        if self.dialect == "postgresql":
            timeout_ms = int(get_settings().membership_lock_timeout_ms)
            await self.db.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))

        result = await self.db.execute(
            select(Organization.id).where(Organization.id == org_id).with_for_update()
        )
        return result.scalar_one_or_none() is not None

    async def lock_membership(self, org_id: UUID, principal_id: UUID) -> Membership | None:
        """Lock and return one principal's membership row."""
        result = await self.db.execute(
            select(Membership)
            .where(
                Membership.organization_id == org_id,
                Membership.principal_id == principal_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def lock_memberships(self, org_id: UUID) -> list[Membership]:
        """Lock every membership row of an organization, in id order."""
        result = await self.db.execute(
            select(Membership)
            .where(Membership.organization_id == org_id)
            .order_by(Membership.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    # Memberships

    async def insert_membership(
        self,
        org_id: UUID,
        principal_id: UUID,
        role: OrganizationRole,
    ) -> Membership:
        """Insert a membership row.

        Raises:
            AlreadyMember: if the (organization, principal) pair exists
        """
        membership = Membership(organization_id=org_id, principal_id=principal_id, role=role)
        self.db.add(membership)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if _is_unique_violation(e, "principal"):
                raise AlreadyMember() from None
            raise
        return membership

    async def get_membership(self, membership_id: UUID) -> Membership | None:
        result = await self.db.execute(
            select(Membership)
            .where(Membership.id == membership_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_membership_for(self, org_id: UUID, principal_id: UUID) -> Membership | None:
        result = await self.db.execute(
            select(Membership).where(
                Membership.organization_id == org_id,
                Membership.principal_id == principal_id,
            )
        )
        return result.scalar_one_or_none()

    async def set_role(self, membership: Membership, role: OrganizationRole) -> Membership:
        membership.role = role
        await self.db.flush()
        return membership

    async def delete_membership(self, membership: Membership) -> None:
        """Delete a membership and invalidate the principal's active pointer."""
        principal_id = membership.principal_id
        org_id = membership.organization_id
        await self.db.execute(delete(Membership).where(Membership.id == membership.id))
        await self.clear_current_organization(principal_id, org_id)
        await self.db.flush()

    async def list_members(self, org_id: UUID) -> list[tuple[Membership, Profile | None]]:
        result = await self.db.execute(
            select(Membership, Profile)
            .outerjoin(Profile, Profile.principal_id == Membership.principal_id)
            .where(Membership.organization_id == org_id)
            .order_by(Membership.created_at, Membership.id)
        )
        return [(membership, profile) for membership, profile in result.all()]

    # Profiles

    async def get_profile(self, principal_id: UUID) -> Profile | None:
        result = await self.db.execute(
            select(Profile)
            .where(Profile.principal_id == principal_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def upsert_profile(self, principal_id: UUID, **values) -> Profile:
        """Insert or update a profile row in one statement.

        With no values the row is only created if missing.
        """
        insert = pg_insert if self.dialect == "postgresql" else sqlite_insert
        stmt = insert(Profile).values(principal_id=principal_id, **values)
        if values:
            stmt = stmt.on_conflict_do_update(
                index_elements=[Profile.principal_id],
                set_={**values, "updated_at": func.now()},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=[Profile.principal_id])
        await self.db.execute(stmt)
        return await self.get_profile(principal_id)

    async def clear_current_organization(self, principal_id: UUID, org_id: UUID) -> None:
        await self.db.execute(
            update(Profile)
            .where(
                Profile.principal_id == principal_id,
                Profile.current_organization_id == org_id,
            )
            .values(current_organization_id=None, updated_at=func.now())
        )
