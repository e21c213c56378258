"""
SQLAlchemy model for Organization Invitation.
"""

from uuid import uuid4

from sqlalchemy import UUID, Column, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import relationship

from routemaker.storage.base import Base, utc_now


class OrgInvitation(Base):  # type: ignore
    """Organization invitation model.

    Represents an invitation for an email address to join an organization
    with a preset role. Invitations are created by owners/admins and carry a
    secure token that is exchanged for a membership on acceptance.
    """

    __tablename__ = 'invitations'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    token = Column(String(64), nullable=False, unique=True, index=True)
    organization_id = Column(
        UUID(as_uuid=True),
        ForeignKey('organizations.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    email = Column(String(255), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    invited_by = Column(UUID(as_uuid=True), nullable=False)
    status = Column(
        String(20),
        nullable=False,
        default='pending',
        server_default=text("'pending'"),
    )
    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    accepted_by = Column(UUID(as_uuid=True), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    org = relationship('Org', back_populates='invitations')

    # Status constants
    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_REVOKED = 'revoked'
    STATUS_EXPIRED = 'expired'

    __table_args__ = (
        # At most one pending invitation per (organization, email)
        Index(
            'uq_invitations_pending_org_email',
            'organization_id',
            'email',
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )
