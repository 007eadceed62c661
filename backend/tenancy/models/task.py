"""Task model, the demo tenant-scoped resource."""
from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import declared_attr, relationship

from tenancy.models.base import BaseModel


class TenantScopedMixin:
    """Columns every tenant-scoped resource table carries.

    ``organization_id`` NULL marks a personal row visible to its creator only.
    """

    @declared_attr
    def organization_id(cls):
        return Column(
            Uuid(as_uuid=True),
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        )

    @declared_attr
    def creator_id(cls):
        return Column(Uuid(as_uuid=True), nullable=False, index=True)


class Task(TenantScopedMixin, BaseModel):
    """A to-do item owned by a principal, optionally shared with an organization."""

    __tablename__ = "tasks"

    title = Column(Text, nullable=False)
    is_complete = Column(Boolean, nullable=False, default=False)

    organization = relationship("Organization", back_populates="tasks")

    __table_args__ = (
        CheckConstraint("LENGTH(title) >= 4", name="tasks_title_length"),
        Index("idx_tasks_org_creator", "organization_id", "creator_id"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, organization_id={self.organization_id})>"
