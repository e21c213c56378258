from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.server.dependencies import get_profile_service
from routemaker.server.errors import RouteMakerError, to_http_exception
from routemaker.server.routes.resource_models import (
    MyProfileResponse,
    ProfileResponse,
    ProfileUpdate,
)
from routemaker.server.services.profile_service import ProfileService

profile_router = APIRouter(prefix='/api/profiles', tags=['profiles'])


def _my_profile(profile, identity: UserIdentity) -> MyProfileResponse:
    return MyProfileResponse(
        **ProfileResponse.model_validate(profile).model_dump(), email=identity.email
    )


@profile_router.get('/me', response_model=MyProfileResponse)
async def get_my_profile(
    identity: UserIdentity = Depends(get_user_identity),
    service: ProfileService = Depends(get_profile_service),
) -> MyProfileResponse:
    """The caller's profile, created empty on first access."""
    try:
        profile = await service.get_me(identity.user_id)
        return _my_profile(profile, identity)
    except Exception as e:
        logger.exception(
            'Unexpected error retrieving profile',
            extra={'user_id': str(identity.user_id), 'error': str(e)},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to retrieve profile',
        )


@profile_router.patch('/me', response_model=MyProfileResponse)
async def update_my_profile(
    update_data: ProfileUpdate,
    identity: UserIdentity = Depends(get_user_identity),
    service: ProfileService = Depends(get_profile_service),
) -> MyProfileResponse:
    try:
        profile = await service.update_me(
            identity.user_id, update_data.model_dump(exclude_unset=True)
        )
        return _my_profile(profile, identity)
    except Exception as e:
        logger.exception(
            'Unexpected error updating profile',
            extra={'user_id': str(identity.user_id), 'error': str(e)},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to update profile',
        )


@profile_router.get('/{user_id}', response_model=ProfileResponse)
async def get_profile(
    user_id: UUID,
    identity: UserIdentity = Depends(get_user_identity),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    try:
        profile = await service.get_profile(user_id)
        return ProfileResponse.model_validate(profile)
    except RouteMakerError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception(
            'Unexpected error retrieving profile',
            extra={'user_id': str(user_id), 'error': str(e)},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to retrieve profile',
        )
