"""Membership model."""
from sqlalchemy import Column, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from tenancy.models.base import BaseModel
from tenancy.models.enums import OrganizationRole


class Membership(BaseModel):
    """Grant of a role to a principal inside one organization.

    At most one row exists per (organization, principal). Principal ids
    come from the identity provider and are not foreign keys.
    """

    __tablename__ = "memberships"

    organization_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    principal_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    role = Column(
        SQLEnum(
            OrganizationRole,
            name="organization_role",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=OrganizationRole.MEMBER,
    )

    organization = relationship("Organization", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint(
            "organization_id", "principal_id", name="memberships_organization_principal_key"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Membership(id={self.id}, organization_id={self.organization_id}, "
            f"principal_id={self.principal_id}, role={self.role})>"
        )
