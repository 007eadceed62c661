"""Organization model."""
from sqlalchemy import CheckConstraint, Column, String, Text
from sqlalchemy.orm import relationship

from tenancy.models.base import BaseModel


class Organization(BaseModel):
    """Organization entity representing a tenant.

    Organizations are only ever created together with their first owner
    membership. Deleting one cascades to its memberships and tasks.
    """

    __tablename__ = "organizations"

    name = Column(String(255), nullable=False)
    slug = Column(String(63), nullable=False, unique=True, index=True)
    logo_url = Column(Text, nullable=True)

    # Relationships
    memberships = relationship(
        "Membership",
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tasks = relationship(
        "Task",
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("LENGTH(name) >= 2", name="organizations_name_check"),
        CheckConstraint("LENGTH(slug) >= 3", name="organizations_slug_length"),
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, slug={self.slug})>"
