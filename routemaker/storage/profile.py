"""
SQLAlchemy model for user profiles.
"""

from sqlalchemy import UUID, Column, DateTime, String, Text

from routemaker.storage.base import Base, utc_now


class Profile(Base):  # type: ignore
    """Public profile of an authenticated identity; the id is the user id."""

    __tablename__ = 'profiles'

    id = Column(UUID(as_uuid=True), primary_key=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    avatar_url = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)
