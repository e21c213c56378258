"""
Store class for user profiles.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from routemaker.core.logger import routemaker_logger as logger
from routemaker.storage.profile import Profile

UPDATABLE_PROFILE_FIELDS = frozenset({'first_name', 'last_name', 'avatar_url', 'bio'})


@dataclass
class ProfileStore:
    session_maker: async_sessionmaker[AsyncSession]

    async def get_profile(self, user_id: UUID) -> Optional[Profile]:
        async with self.session_maker() as session:
            result = await session.execute(select(Profile).filter(Profile.id == user_id))
            return result.scalars().first()

    async def get_or_create_profile(self, user_id: UUID) -> Profile:
        """Return the user's profile, creating an empty one on first access."""
        profile = await self.get_profile(user_id)
        if profile:
            return profile

        async with self.session_maker() as session:
            profile = Profile(id=user_id)
            session.add(profile)
            try:
                await session.commit()
            except IntegrityError:
                # Created by a concurrent request
                await session.rollback()
                return await self.get_profile(user_id)
            await session.refresh(profile)

        logger.info('Created profile', extra={'user_id': str(user_id)})
        return profile

    async def update_profile(self, user_id: UUID, kwargs: dict) -> Profile:
        await self.get_or_create_profile(user_id)
        async with self.session_maker() as session:
            result = await session.execute(select(Profile).filter(Profile.id == user_id))
            profile = result.scalars().one()
            for key, value in kwargs.items():
                if key in UPDATABLE_PROFILE_FIELDS:
                    setattr(profile, key, value)
            await session.commit()
            await session.refresh(profile)
            return profile
