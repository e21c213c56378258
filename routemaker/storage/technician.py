"""
SQLAlchemy model for Technician.
"""

from uuid import uuid4

from sqlalchemy import (
    UUID,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
)

from routemaker.storage.base import Base, utc_now

DEFAULT_TECHNICIAN_COLOR = '#22C55E'


class Technician(Base):  # type: ignore
    """A field technician (employee or contractor) of an organization."""

    __tablename__ = 'technicians'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    organization_id = Column(
        UUID(as_uuid=True),
        ForeignKey('organizations.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    created_by = Column(UUID(as_uuid=True), nullable=True)
    full_name = Column(String(255), nullable=False)
    employment_type = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(255), nullable=True)
    postal_code = Column(String(32), nullable=True)
    cost_basis = Column(String(20), nullable=False, default='hourly')
    cost_amount = Column(Float, nullable=False, default=0)
    color_hex = Column(String(7), nullable=False, default=DEFAULT_TECHNICIAN_COLOR)
    active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)
