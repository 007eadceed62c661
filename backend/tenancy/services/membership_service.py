"""Membership mutations: add, change role, remove and leave.

Every operation here takes the organization row lock before reading any
membership state, so concurrent mutations of the same organization are
serialized and always acquire locks in the same order.
"""
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.core.exceptions import (
    AlreadyMember,
    CannotRemoveOwner,
    MemberNotFound,
    MustTransferOwnership,
    NoRemainingOwner,
    NotAMember,
    NotAuthorized,
    PrincipalNotFound,
    PrivilegeEscalation,
    Unauthenticated,
)
from tenancy.models.enums import AuditAction, OrganizationRole
from tenancy.models.membership import Membership
from tenancy.services.audit_service import AuditService
from tenancy.services.authorization import OrganizationAccess
from tenancy.services.membership_store import MembershipStore
from tenancy.services.outcomes import rejected, succeeded


class MembershipService:
    """Service for changing who belongs to an organization and in which role."""

    def __init__(self, db: AsyncSession):
        """Initialize membership service.

        Args:
            db: Database session
        """
        self.db = db
        self.store = MembershipStore(db)
        self.audit_service = AuditService(db)

    async def add_member(
        self,
        principal_id: UUID,
        org_id: UUID,
        target_principal_id: UUID,
        role: OrganizationRole,
    ) -> Membership:
        """Add an existing principal to an organization.

        Args:
            principal_id: Admin or owner performing the add
            org_id: Organization ID
            target_principal_id: Principal to add; must already have a profile
            role: Role to grant

        Returns:
            Created Membership instance

        Raises:
            NotAuthorized: if the caller is not an admin of the organization
            PrivilegeEscalation: if a non-owner tries to grant the owner role
            PrincipalNotFound: if the target principal is unknown
            AlreadyMember: if the target already belongs to the organization
        """
        operation = "membership.add"
        fields = {"org_id": org_id, "principal_id": principal_id, "target": target_principal_id}

        await self.store.lock_organization(org_id)

        caller_role = await OrganizationAccess(self.db, principal_id).role_of(org_id)
        if caller_role not in (OrganizationRole.OWNER, OrganizationRole.ADMIN):
            raise rejected(
                operation,
                NotAuthorized("Only admins and owners can add members"),
                **fields,
            )

        if role == OrganizationRole.OWNER and caller_role != OrganizationRole.OWNER:
            raise rejected(operation, PrivilegeEscalation(), **fields)

        if await self.store.get_profile(target_principal_id) is None:
            raise rejected(operation, PrincipalNotFound(), **fields)

        try:
            membership = await self.store.insert_membership(org_id, target_principal_id, role)
        except AlreadyMember as e:
            raise rejected(operation, e, **fields) from None

        await self.audit_service.log_membership_change(
            action=AuditAction.MEMBER_ADD,
            org_id=org_id,
            membership_id=membership.id,
            principal_id=principal_id,
            diff_json={"principal_id": str(target_principal_id), "role": role.value},
        )

        await self.db.commit()
        await self.db.refresh(membership)

        succeeded(operation, membership_id=membership.id, role=role.value, **fields)
        return membership

    async def update_member_role(
        self,
        principal_id: UUID,
        membership_id: UUID,
        new_role: OrganizationRole,
    ) -> Membership:
        """Change the role on a membership row.

        Admins may only move plain members between member and admin. Owners
        may set any role, including granting ownership; granting it does not
        demote anyone. An owner demotion that would leave the organization
        without an owner is rejected.

        Raises:
            MemberNotFound: if the membership ID does not resolve
            NotAuthorized: if the caller's role does not permit the change
            NoRemainingOwner: if the change would leave no owner
        """
        operation = "membership.update_role"

        membership = await self.store.get_membership(membership_id)
        if membership is None:
            raise rejected(operation, MemberNotFound(), membership_id=membership_id)
        org_id = membership.organization_id

        await self.store.lock_organization(org_id)
        membership = await self.store.get_membership(membership_id)
        if membership is None:
            raise rejected(operation, MemberNotFound(), membership_id=membership_id)

        fields = {"org_id": org_id, "membership_id": membership_id, "principal_id": principal_id}
        caller_role = await OrganizationAccess(self.db, principal_id).role_of(org_id)
        current_role = membership.role

        if caller_role == OrganizationRole.ADMIN:
            if current_role != OrganizationRole.MEMBER or new_role == OrganizationRole.OWNER:
                raise rejected(
                    operation,
                    NotAuthorized("Admins can only change the role of members, and not to owner"),
                    **fields,
                )
        elif caller_role != OrganizationRole.OWNER:
            raise rejected(
                operation,
                NotAuthorized("Only admins and owners can change member roles"),
                **fields,
            )

        if current_role == new_role:
            return membership

        if current_role == OrganizationRole.OWNER:
            rows = await self.store.lock_memberships(org_id)
            owners = [
                row for row in rows
                if row.role == OrganizationRole.OWNER and row.id != membership.id
            ]
            if not owners:
                raise rejected(operation, NoRemainingOwner(), **fields)

        await self.store.set_role(membership, new_role)
        await self.audit_service.log_membership_change(
            action=AuditAction.MEMBER_ROLE_CHANGE,
            org_id=org_id,
            membership_id=membership_id,
            principal_id=principal_id,
            diff_json={"before": current_role.value, "after": new_role.value},
        )

        await self.db.commit()
        await self.db.refresh(membership)

        succeeded(operation, role=new_role.value, **fields)
        return membership

    async def remove_member(self, principal_id: UUID, membership_id: UUID) -> None:
        """Remove a membership row.

        Non-owners may always remove themselves. Admins may remove plain
        members and owners may remove anyone but themselves; owners leave
        through :meth:`leave` instead.

        Raises:
            MemberNotFound: if the membership ID does not resolve
            CannotRemoveOwner: if an owner tries to remove their own row
            NotAuthorized: if no removal path admits the caller
        """
        operation = "membership.remove"

        membership = await self.store.get_membership(membership_id)
        if membership is None:
            raise rejected(operation, MemberNotFound(), membership_id=membership_id)
        org_id = membership.organization_id

        await self.store.lock_organization(org_id)
        membership = await self.store.get_membership(membership_id)
        if membership is None:
            raise rejected(operation, MemberNotFound(), membership_id=membership_id)

        fields = {"org_id": org_id, "membership_id": membership_id, "principal_id": principal_id}
        target_role = membership.role

        if membership.principal_id == principal_id:
            if target_role == OrganizationRole.OWNER:
                raise rejected(operation, CannotRemoveOwner(), **fields)
        else:
            caller_role = await OrganizationAccess(self.db, principal_id).role_of(org_id)
            admitted = caller_role == OrganizationRole.OWNER or (
                caller_role == OrganizationRole.ADMIN and target_role == OrganizationRole.MEMBER
            )
            if not admitted:
                raise rejected(
                    operation,
                    NotAuthorized("You don't have permission to remove this member"),
                    **fields,
                )

        target_principal_id = membership.principal_id
        await self.store.delete_membership(membership)
        await self.audit_service.log_membership_change(
            action=AuditAction.MEMBER_REMOVE,
            org_id=org_id,
            membership_id=membership_id,
            principal_id=principal_id,
            diff_json={"principal_id": str(target_principal_id), "role": target_role.value},
        )

        await self.db.commit()
        succeeded(operation, target=target_principal_id, **fields)

    async def leave(self, principal_id: UUID | None, org_id: UUID) -> None:
        """Remove the caller's own membership.

        Runs under the organization row lock, then the caller's own row
        lock, and for owners a lock on every membership row, all in the
        transaction that deletes the row. An owner may only leave as the
        last member; otherwise they must hand over ownership and step down
        first.

        Raises:
            Unauthenticated: if there is no principal
            NotAMember: if the caller has no membership in the organization
            MustTransferOwnership: if the caller is an owner and other
                members remain
        """
        operation = "membership.leave"

        if principal_id is None:
            raise rejected(operation, Unauthenticated(), org_id=org_id)

        fields = {"org_id": org_id, "principal_id": principal_id}

        if not await self.store.lock_organization(org_id):
            raise rejected(operation, NotAMember(), **fields)

        membership = await self.store.lock_membership(org_id, principal_id)
        if membership is None:
            raise rejected(operation, NotAMember(), **fields)

        role = membership.role
        if role == OrganizationRole.OWNER:
            rows = await self.store.lock_memberships(org_id)
            if len(rows) > 1:
                raise rejected(operation, MustTransferOwnership(), **fields)

        membership_id = membership.id
        await self.store.delete_membership(membership)
        await self.audit_service.log_membership_change(
            action=AuditAction.MEMBER_LEAVE,
            org_id=org_id,
            membership_id=membership_id,
            principal_id=principal_id,
            diff_json={"role": role.value},
        )

        await self.db.commit()
        succeeded(operation, membership_id=membership_id, role=role.value, **fields)
