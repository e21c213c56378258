"""
SQLAlchemy model for Organization Member.
"""

from uuid import uuid4

from sqlalchemy import UUID, Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

from routemaker.storage.base import Base, utc_now


class OrgMember(Base):  # type: ignore
    """Membership of a user in an organization with a role."""

    __tablename__ = 'organization_members'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    organization_id = Column(
        UUID(as_uuid=True),
        ForeignKey('organizations.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    email = Column(String(255), nullable=True, index=True)
    role = Column(String(20), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    org = relationship('Org', back_populates='members')

    __table_args__ = (
        UniqueConstraint(
            'organization_id', 'user_id', name='uq_organization_members_org_user'
        ),
    )
