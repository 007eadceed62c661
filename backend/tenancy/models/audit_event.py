"""AuditEvent model."""

from sqlalchemy import JSON, Column, ForeignKey, String, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import JSONB

from tenancy.models.base import BaseModel
from tenancy.models.enums import AuditAction


class AuditEvent(BaseModel):
    """Append-only trail of tenant mutations.

    ``org_id`` is nulled rather than cascaded when the organization is
    deleted so the deletion itself stays on record.
    """

    __tablename__ = "audit_events"

    org_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    principal_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    action = Column(
        SQLEnum(
            AuditAction,
            name="audit_action",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Uuid(as_uuid=True), nullable=False)
    diff_json = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    def __repr__(self) -> str:
        return f"<AuditEvent(id={self.id}, action={self.action}, entity_type={self.entity_type})>"
