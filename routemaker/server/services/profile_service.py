from dataclasses import dataclass
from typing import Any
from uuid import UUID

from routemaker.server.errors import NotFoundError
from routemaker.storage.profile import Profile
from routemaker.storage.profile_store import ProfileStore


@dataclass
class ProfileService:
    profile_store: ProfileStore

    async def get_me(self, user_id: UUID) -> Profile:
        return await self.profile_store.get_or_create_profile(user_id)

    async def update_me(self, user_id: UUID, updates: dict[str, Any]) -> Profile:
        return await self.profile_store.update_profile(user_id, updates)

    async def get_profile(self, user_id: UUID) -> Profile:
        profile = await self.profile_store.get_profile(user_id)
        if not profile:
            raise NotFoundError('Profile not found')
        return profile
