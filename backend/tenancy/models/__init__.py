"""SQLAlchemy models."""

from tenancy.models.audit_event import AuditEvent
from tenancy.models.base import Base, BaseModel
from tenancy.models.enums import AuditAction, OrganizationRole
from tenancy.models.membership import Membership
from tenancy.models.organization import Organization
from tenancy.models.profile import Profile
from tenancy.models.task import Task, TenantScopedMixin

__all__ = [
    "Base",
    "BaseModel",
    "OrganizationRole",
    "AuditAction",
    "Organization",
    "Membership",
    "Profile",
    "Task",
    "TenantScopedMixin",
    "AuditEvent",
]
