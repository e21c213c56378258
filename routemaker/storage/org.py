"""
SQLAlchemy model for Organization.
"""

from uuid import uuid4

from sqlalchemy import JSON, UUID, Column, DateTime, String
from sqlalchemy.orm import relationship

from routemaker.storage.base import Base, utc_now


class Org(Base):  # type: ignore
    """Organization (tenant) model.

    An organization exclusively owns its members, invitations, projects,
    locations and technicians.
    """

    __tablename__ = 'organizations'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    logo_url = Column(String, nullable=True)
    settings = Column(JSON, nullable=False, default=dict)
    created_by = Column(UUID(as_uuid=True), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    members = relationship('OrgMember', back_populates='org', passive_deletes=True)
    invitations = relationship(
        'OrgInvitation', back_populates='org', passive_deletes=True
    )
