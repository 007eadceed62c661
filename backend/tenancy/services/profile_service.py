"""Profile service for the calling principal."""
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.models.profile import Profile
from tenancy.services.authorization import OrganizationAccess
from tenancy.services.membership_store import MembershipStore

EDITABLE_FIELDS = ("display_name", "avatar_url")


class ProfileService:
    """Service for reading and editing the caller's own profile."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = MembershipStore(db)

    async def get_my_profile(self, principal_id: UUID) -> tuple[Profile, UUID | None]:
        """Return the caller's profile, creating it on first use.

        Returns:
            Tuple of the profile and the active organization (None when the
            stored pointer no longer matches a membership)
        """
        profile = await self.store.upsert_profile(principal_id)
        await self.db.commit()

        active = await OrganizationAccess(self.db, principal_id).active_organization()
        return profile, active

    async def update_my_profile(
        self,
        principal_id: UUID,
        changes: dict[str, Any],
    ) -> tuple[Profile, UUID | None]:
        """Update display name and avatar on the caller's profile."""
        values = {field: value for field, value in changes.items() if field in EDITABLE_FIELDS}
        profile = await self.store.upsert_profile(principal_id, **values)
        await self.db.commit()

        active = await OrganizationAccess(self.db, principal_id).active_organization()
        return profile, active
