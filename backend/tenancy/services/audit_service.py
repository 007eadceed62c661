"""Audit service for recording tenant mutations."""
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.models.audit_event import AuditEvent
from tenancy.models.enums import AuditAction


class AuditService:
    """Service for creating audit trail entries.

    Entries are written in the caller's transaction, so they commit or roll
    back together with the mutation they describe.
    """

    def __init__(self, db: AsyncSession):
        """Initialize audit service.

        Args:
            db: Database session
        """
        self.db = db

    async def log(
        self,
        org_id: Optional[UUID],
        action: AuditAction,
        entity_type: str,
        entity_id: UUID,
        principal_id: Optional[UUID] = None,
        diff_json: Optional[dict[str, Any]] = None,
    ) -> AuditEvent:
        """Create an audit log entry.

        Args:
            org_id: Organization ID (None once the organization is gone)
            action: Action being performed
            entity_type: Type of entity being acted upon
            entity_id: ID of entity being acted upon
            principal_id: Principal performing the action
            diff_json: Before/after values for update actions

        Returns:
            Created AuditEvent instance
        """
        audit_event = AuditEvent(
            org_id=org_id,
            principal_id=principal_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            diff_json=diff_json,
        )
        self.db.add(audit_event)
        await self.db.flush()
        return audit_event

    async def log_membership_change(
        self,
        action: AuditAction,
        org_id: UUID,
        membership_id: UUID,
        principal_id: UUID,
        diff_json: Optional[dict[str, Any]] = None,
    ) -> AuditEvent:
        """Log an add / role change / remove / leave on a membership row."""
        return await self.log(
            org_id=org_id,
            principal_id=principal_id,
            action=action,
            entity_type="membership",
            entity_id=membership_id,
            diff_json=diff_json,
        )
