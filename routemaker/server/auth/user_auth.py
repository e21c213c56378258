"""
Identity resolution against the Supabase Auth API.

The bearer token sent by the web client is exchanged for the user's id and
email by calling ``{SUPABASE_URL}/auth/v1/user``. The API never decodes the
token itself.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

import httpx
from fastapi import Header, HTTPException, status

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.constants import (
    AUTH_REQUEST_TIMEOUT_SECONDS,
    SUPABASE_ANON_KEY,
    SUPABASE_URL,
)


@dataclass(frozen=True)
class UserIdentity:
    user_id: UUID
    email: str


async def verify_token(token: str) -> Optional[UserIdentity]:
    """Resolve a bearer token to an identity.

    Returns:
        UserIdentity, or None if the token is rejected or the auth provider
        cannot be reached
    """
    try:
        async with httpx.AsyncClient(timeout=AUTH_REQUEST_TIMEOUT_SECONDS) as client:
            response = await client.get(
                f'{SUPABASE_URL}/auth/v1/user',
                headers={
                    'apikey': SUPABASE_ANON_KEY,
                    'Authorization': f'Bearer {token}',
                },
            )
    except httpx.RequestError as e:
        logger.error('Auth provider request failed', extra={'error': str(e)})
        return None

    if response.status_code != 200:
        logger.info(
            'Token rejected by auth provider',
            extra={'status_code': response.status_code},
        )
        return None

    data = response.json()
    try:
        return UserIdentity(user_id=UUID(data['id']), email=data.get('email') or '')
    except (KeyError, ValueError, TypeError):
        logger.warning('Auth provider returned an unexpected user payload')
        return None


async def get_user_identity(
    authorization: Optional[str] = Header(default=None),
) -> UserIdentity:
    """FastAPI dependency returning the authenticated caller."""
    if not authorization or not authorization.startswith('Bearer '):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Missing or invalid authorization header',
        )

    identity = await verify_token(authorization[len('Bearer ') :].strip())
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Invalid or expired token',
        )
    return identity
