"""Row-scoping rules for tenant-scoped tables.

Any model carrying ``organization_id`` and ``creator_id`` (see
``TenantScopedMixin``) is read, created, updated and deleted through a
``RowScopingPolicy``. Reads are filtered in SQL; writes are checked against
the same membership predicates before they reach the session.
"""
from typing import Any
from uuid import UUID

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.sql.elements import ColumnElement

from tenancy.core.exceptions import NotAuthorized
from tenancy.services.authorization import OrganizationAccess


class RowScopingPolicy:
    """Access rules for one tenant-scoped model and one principal."""

    def __init__(self, model: Any, access: OrganizationAccess):
        self.model = model
        self.access = access

    @property
    def principal_id(self) -> UUID:
        return self.access.principal_id

    # Read

    def read_filter(self) -> ColumnElement[bool]:
        """Rows in the principal's organizations, plus their own personal rows."""
        return or_(
            self.model.organization_id.in_(self.access.member_organization_ids()),
            and_(
                self.model.organization_id.is_(None),
                self.model.creator_id == self.principal_id,
            ),
        )

    def select(self) -> Select:
        return select(self.model).where(self.read_filter())

    async def can_read(self, row: Any) -> bool:
        if row.organization_id is None:
            return row.creator_id == self.principal_id
        return await self.access.is_member(row.organization_id)

    # Create

    async def can_create(self, organization_id: UUID | None, creator_id: UUID) -> bool:
        if creator_id != self.principal_id:
            return False
        if organization_id is None:
            return True
        return await self.access.is_member(organization_id)

    async def check_create(self, organization_id: UUID | None, creator_id: UUID) -> None:
        if not await self.can_create(organization_id, creator_id):
            raise NotAuthorized("You can only create items in organizations you belong to")

    # Update

    async def can_update(self, row: Any) -> bool:
        if row.creator_id != self.principal_id:
            return False
        if row.organization_id is None:
            return True
        return await self.access.is_member(row.organization_id)

    async def can_reparent(self, source: UUID | None, destination: UUID | None) -> bool:
        """Moving a row between organizations needs admin on both sides.

        A personal side (None) imposes no requirement of its own.
        """
        if source is not None and not await self.access.is_admin(source):
            return False
        if destination is not None and not await self.access.is_admin(destination):
            return False
        return True

    async def check_update(self, row: Any, changes: dict[str, Any]) -> None:
        """Admit an update of ``row`` with ``changes`` or raise NotAuthorized.

        The row must be updatable as it stands, a changed organization must
        pass the re-parent guard, and the resulting row must still be one the
        principal could update.
        """
        if not await self.can_update(row):
            raise NotAuthorized("You can only edit items you created")

        if "organization_id" in changes and changes["organization_id"] != row.organization_id:
            destination = changes["organization_id"]
            if not await self.can_reparent(row.organization_id, destination):
                raise NotAuthorized(
                    "Moving an item between organizations requires admin in both"
                )
            if destination is not None and not await self.access.is_member(destination):
                raise NotAuthorized("You can only move items into organizations you belong to")

    # Delete

    async def can_delete(self, row: Any) -> bool:
        if row.creator_id == self.principal_id and await self.can_read(row):
            return True
        return await self.access.is_admin(row.organization_id)

    async def check_delete(self, row: Any) -> None:
        if not await self.can_delete(row):
            raise NotAuthorized("Only the creator or an organization admin can delete this item")
