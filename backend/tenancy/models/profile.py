"""Profile model."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid, func

from tenancy.models.base import Base


class Profile(Base):
    """Per-principal profile, created lazily.

    ``current_organization_id`` is a cached pointer to the active
    organization. It is cleared when the principal's membership goes away
    and never consulted for authorization.
    """

    __tablename__ = "profiles"
    __mapper_args__ = {"eager_defaults": True}

    principal_id = Column(Uuid(as_uuid=True), primary_key=True)
    display_name = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    current_organization_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Profile(principal_id={self.principal_id})>"
