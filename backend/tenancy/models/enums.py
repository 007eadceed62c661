"""Enumerations for organization roles and audit actions."""

from enum import Enum


class OrganizationRole(str, Enum):
    """Role of a principal inside one organization.

    Hierarchy (higher can do everything lower can do):
    1. OWNER (everything, including deleting the organization and minting owners)
    2. ADMIN (manage members below admin, edit organization details)
    3. MEMBER (read and work with organization resources)
    """

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"

    @classmethod
    def get_hierarchy_level(cls, role: "OrganizationRole | None") -> int:
        """Get numeric hierarchy level for role comparison.

        Args:
            role: OrganizationRole to get level for (None means no membership)

        Returns:
            Integer level (higher = more permissions, 0 = not a member)
        """
        levels = {
            cls.MEMBER: 1,
            cls.ADMIN: 2,
            cls.OWNER: 3,
        }
        return levels.get(role, 0)

    def has_permission(self, required_role: "OrganizationRole") -> bool:
        """Check if this role satisfies an action requiring another role.

        Owners satisfy every requirement and admins satisfy member-level
        requirements.

        Args:
            required_role: Minimum role required

        Returns:
            True if this role has sufficient permissions
        """
        return self.get_hierarchy_level(self) >= self.get_hierarchy_level(required_role)

    @property
    def is_admin(self) -> bool:
        return self in (OrganizationRole.OWNER, OrganizationRole.ADMIN)


class AuditAction(str, Enum):
    """Audit action enumeration for tracking tenant mutations."""

    # Organization
    ORG_CREATE = "organization.create"
    ORG_UPDATE = "organization.update"
    ORG_DELETE = "organization.delete"

    # Membership
    MEMBER_ADD = "membership.add"
    MEMBER_ROLE_CHANGE = "membership.role_change"
    MEMBER_REMOVE = "membership.remove"
    MEMBER_LEAVE = "membership.leave"

    # Tenant-scoped resources
    TASK_MOVE = "task.move"
